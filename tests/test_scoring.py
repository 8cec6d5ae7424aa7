"""Unit tests for the behavior catalog and the risk scoring engine."""
import json
import random

import pytest

from fleet_safety.errors import CatalogError, InvalidInputError
from fleet_safety.models.driving import BEHAVIOR_COUNT_FIELDS, DriverRecord
from fleet_safety.models.risk import RiskLevel
from fleet_safety.scoring.catalog import (
    DEFAULT_BEHAVIORS, BehaviorCatalog, BehaviorDefinition, load_catalog,
)
from fleet_safety.scoring.risk_engine import (
    RiskScoringEngine, RiskThresholds, classify, rank_percent, score,
)


@pytest.fixture
def engine():
    return RiskScoringEngine(BehaviorCatalog(DEFAULT_BEHAVIORS), RiskThresholds())


# Catalog

def test_default_catalog_covers_every_count_field():
    catalog = BehaviorCatalog(DEFAULT_BEHAVIORS)
    assert len(catalog) == 12
    assert [b.key for b in catalog] == list(BEHAVIOR_COUNT_FIELDS)


def test_default_coefficients():
    by_key = {b.key: b for b in DEFAULT_BEHAVIORS}
    assert by_key["speeding_count"].weight == 0.005
    assert by_key["long_speeding_min"].fuel_penalty == 0.15
    assert by_key["long_speeding_min"].cost_per_incident == 100
    assert by_key["dui_suspicion_count"].weight == 0.2
    assert by_key["dui_suspicion_count"].fuel_penalty == 0
    assert by_key["dui_suspicion_count"].cost_per_incident == 0


def test_catalog_rejects_unknown_key():
    with pytest.raises(CatalogError):
        BehaviorCatalog([BehaviorDefinition("honking_count", "Honking", 0.1)])


def test_catalog_rejects_negative_coefficient():
    with pytest.raises(CatalogError):
        BehaviorCatalog([BehaviorDefinition("speeding_count", "Speeding", -0.1)])


def test_catalog_rejects_duplicate_key():
    b = BehaviorDefinition("speeding_count", "Speeding", 0.1)
    with pytest.raises(CatalogError):
        BehaviorCatalog([b, b])


def test_load_catalog_json(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps([
        {"key": "speeding_count", "label": "Speeding", "weight": 0.5, "fuel_penalty": 0.1, "cost_per_incident": 10},
        {"key": "dui_suspicion_count", "label": "DUI", "weight": 1.0},
    ]))
    catalog = load_catalog(str(path))
    assert [b.key for b in catalog] == ["speeding_count", "dui_suspicion_count"]
    assert catalog.behaviors[1].fuel_penalty == 0.0


def test_load_catalog_csv(tmp_path):
    path = tmp_path / "catalog.csv"
    path.write_text("key,label,weight,fuel_penalty,cost_per_incident\nsudden_stop_count,Stop,0.3,0.2,5\n")
    catalog = load_catalog(str(path))
    assert catalog.behaviors[0] == BehaviorDefinition("sudden_stop_count", "Stop", 0.3, 0.2, 5.0)


def test_load_catalog_missing_file():
    with pytest.raises(CatalogError):
        load_catalog("/nonexistent/catalog.json")


def test_load_catalog_non_numeric(tmp_path):
    path = tmp_path / "catalog.csv"
    path.write_text("key,weight\nspeeding_count,heavy\n")
    with pytest.raises(CatalogError):
        load_catalog(str(path))


# Scoring

def test_scenario_a_single_record(engine, scenario_a_record):
    assert engine.raw_score(scenario_a_record) == pytest.approx(14.23)
    results = engine.score([scenario_a_record])
    assert len(results) == 1
    assert results[0].total_score == pytest.approx(14.23 / 12)
    assert results[0].rank_percent == 0
    assert results[0].risk_level == RiskLevel.red
    assert results[0].driver_name == "김철수"


def test_scenario_b_three_tiers(engine, scenario_b_records):
    results = engine.score(scenario_b_records)
    assert [r.car_number for r in results] == ["CAR-HIGH", "CAR-MID", "CAR-LOW"]
    assert [r.total_score for r in results] == pytest.approx([1.19, 0.01, 0.003])
    assert [r.rank_percent for r in results] == [0, 50, 100]
    assert [r.risk_level for r in results] == [RiskLevel.red, RiskLevel.yellow, RiskLevel.green]


def test_scenario_c_all_zero_batch(engine):
    records = [DriverRecord(car_number=f"Z-{i}", distance_km=100 * i) for i in range(4)]
    results = engine.score(records)
    assert all(r.total_score == 0 for r in results)
    # Equal scores keep input order
    assert [r.car_number for r in results] == ["Z-0", "Z-1", "Z-2", "Z-3"]
    assert results[0].risk_level == RiskLevel.red
    assert results[-1].risk_level == RiskLevel.green


def test_empty_batch(engine):
    assert engine.score([]) == []


def test_zero_distance_uses_raw_score(engine):
    record = DriverRecord(distance_km=0, speeding_count=10, fatigue_risk_count=1)
    assert engine.safety_index(record) == pytest.approx(engine.raw_score(record))
    assert engine.safety_index(record) == pytest.approx(10 * 0.005 + 0.08)


def test_distance_normalizes_per_100km(engine):
    record = DriverRecord(distance_km=250, sudden_stop_count=10)
    assert engine.safety_index(record) == pytest.approx(10 * 0.012 / 2.5)


def test_increasing_any_count_never_lowers_score(engine):
    base = DriverRecord(distance_km=420, speeding_count=3, sudden_accel_count=2, fatigue_risk_count=1)
    base_score = engine.safety_index(base)
    for field in BEHAVIOR_COUNT_FIELDS:
        bumped = base.model_copy(update={field: getattr(base, field) + 5})
        assert engine.safety_index(bumped) >= base_score, field


def test_classification_consistency_random_batch(engine):
    rng = random.Random(7)
    records = [
        DriverRecord(
            car_number=f"R-{i}",
            distance_km=rng.choice([0, rng.uniform(10, 3000)]),
            **{field: rng.randint(0, 30) for field in BEHAVIOR_COUNT_FIELDS},
        )
        for i in range(57)
    ]
    results = engine.score(records)
    assert len(results) == len(records)
    scores = [r.total_score for r in results]
    assert scores == sorted(scores, reverse=True)
    for r in results:
        is_red = r.rank_percent <= 20 or r.total_score > 0.25
        is_yellow = r.rank_percent <= 50 or r.total_score > 0.08
        if r.risk_level == RiskLevel.red:
            assert is_red
        elif r.risk_level == RiskLevel.yellow:
            assert is_yellow and not is_red
        else:
            assert not is_red and not is_yellow


def test_absolute_gate_promotes_whole_bad_fleet(engine):
    records = [DriverRecord(car_number=f"B-{i}", dui_suspicion_count=2 + i) for i in range(5)]
    assert all(r.risk_level == RiskLevel.red for r in engine.score(records))


def test_ties_keep_input_order(engine):
    records = [
        DriverRecord(car_number="FIRST", speeding_count=4),
        DriverRecord(car_number="TOP", dui_suspicion_count=3),
        DriverRecord(car_number="SECOND", speeding_count=4),
    ]
    assert [r.car_number for r in engine.score(records)] == ["TOP", "FIRST", "SECOND"]


def test_reduced_catalog_only_scores_its_behaviors():
    catalog = BehaviorCatalog([BehaviorDefinition("speeding_count", "Speeding", 0.005)])
    engine = RiskScoringEngine(catalog, RiskThresholds())
    record = DriverRecord(speeding_count=10, dui_suspicion_count=10)
    assert engine.raw_score(record) == pytest.approx(0.05)


def test_rank_percent_and_classify_boundaries():
    assert rank_percent(0, 1) == 0
    assert rank_percent(1, 3) == 50
    assert rank_percent(4, 5) == 100
    assert classify(0.0, 20.0) == RiskLevel.red
    assert classify(0.0, 20.01) == RiskLevel.yellow
    assert classify(0.26, 100) == RiskLevel.red
    assert classify(0.25, 100) == RiskLevel.yellow
    assert classify(0.08, 100) == RiskLevel.green
    assert classify(0.0, 50.0) == RiskLevel.yellow


def test_custom_thresholds():
    strict = RiskThresholds(red_rank_percent=0, red_score=10, yellow_rank_percent=0, yellow_score=10)
    engine = RiskScoringEngine(BehaviorCatalog(DEFAULT_BEHAVIORS), strict)
    results = engine.score([DriverRecord(speeding_count=1), DriverRecord(speeding_count=2)])
    assert [r.risk_level for r in results] == [RiskLevel.red, RiskLevel.green]


def test_none_batch_fails_fast(engine):
    with pytest.raises(InvalidInputError):
        engine.score(None)


def test_non_record_element_fails_fast(engine):
    with pytest.raises(InvalidInputError):
        engine.score([{"car_number": "X"}])


def test_module_level_score_uses_default_engine(scenario_a_record):
    results = score([scenario_a_record])
    assert results[0].total_score == pytest.approx(1.185833, rel=1e-5)
