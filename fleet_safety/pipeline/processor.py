"""Fleet analysis orchestrator: runs scoring and aggregation over one record snapshot."""
import logging
from typing import Optional

import pandas as pd

from fleet_safety.config import settings
from fleet_safety.models.risk import FleetAnalysis
from fleet_safety.pipeline.ingest import records_from_dataframe
from fleet_safety.pipeline.report import mask_results
from fleet_safety.scoring.catalog import BehaviorCatalog, get_default_catalog
from fleet_safety.scoring.economics import EconomicImpactAggregator
from fleet_safety.scoring.risk_engine import RiskScoringEngine, count_risk_levels, snapshot_records

logger = logging.getLogger(__name__)


def analyze_fleet(records, fuel_price: Optional[float] = None, mask_names: bool = False,
                  catalog: Optional[BehaviorCatalog] = None) -> FleetAnalysis:
    """
    Score, classify and aggregate a batch.
    Scoring and economics each read the same frozen snapshot and never see each other's output.
    """
    snapshot = snapshot_records(records)
    fuel_price = settings.fuel_price_default if fuel_price is None else fuel_price
    catalog = catalog if catalog is not None else get_default_catalog()

    engine = RiskScoringEngine(catalog)
    aggregator = EconomicImpactAggregator(catalog)

    risks = engine.score(snapshot)
    economic = aggregator.aggregate(snapshot, fuel_price)
    behaviors = aggregator.behavior_frequency(snapshot)

    if mask_names:
        risks = mask_results(risks)

    return FleetAnalysis(
        total_vehicles=len(snapshot),
        fuel_price=fuel_price,
        risks=risks,
        risk_distribution=count_risk_levels(risks),
        economic_impact=economic,
        behaviors=behaviors,
    )


def process_dataframe(df: pd.DataFrame, catalog: Optional[BehaviorCatalog] = None) -> pd.DataFrame:
    """Score a DataFrame of raw telemetry rows. Returns one row per driver, worst first."""
    records = records_from_dataframe(df)
    risks = RiskScoringEngine(catalog).score(records)
    return pd.DataFrame(
        [r.model_dump(mode="json") for r in risks],
        columns=["car_number", "driver_name", "total_score", "risk_level", "rank_percent"],
    )
