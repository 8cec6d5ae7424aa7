"""Risk scoring: distance-normalized safety index plus Red/Yellow/Green classification."""
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Optional

from fleet_safety.config import settings
from fleet_safety.errors import InvalidInputError
from fleet_safety.models.driving import DriverRecord
from fleet_safety.models.risk import RiskLevel, RiskResult
from fleet_safety.scoring.catalog import BehaviorCatalog, get_default_catalog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RiskThresholds:
    red_rank_percent: float = 20.0
    red_score: float = 0.25
    yellow_rank_percent: float = 50.0
    yellow_score: float = 0.08

    @classmethod
    def from_settings(cls) -> "RiskThresholds":
        return cls(
            red_rank_percent=settings.red_rank_percent,
            red_score=settings.red_score_threshold,
            yellow_rank_percent=settings.yellow_rank_percent,
            yellow_score=settings.yellow_score_threshold,
        )


def snapshot_records(records) -> tuple[DriverRecord, ...]:
    """Freeze a caller's batch into a tuple, failing fast on anything that is not a record list."""
    if records is None:
        raise InvalidInputError("records must be a sequence of DriverRecord, got None")
    if isinstance(records, (str, bytes, dict)) or not isinstance(records, Iterable):
        raise InvalidInputError(f"records must be a sequence of DriverRecord, got {type(records).__name__}")

    batch = tuple(records)
    for i, record in enumerate(batch):
        if not isinstance(record, DriverRecord):
            raise InvalidInputError(f"records[{i}] is {type(record).__name__}, expected DriverRecord")
    return batch


def rank_percent(index: int, total: int) -> float:
    """Position in the descending sort as a percentile; 0 is the worst driver."""
    if total > 1:
        return index / (total - 1) * 100
    return 0.0


def classify(total_score: float, rank_pct: float, thresholds: RiskThresholds = RiskThresholds()) -> RiskLevel:
    """
    Either gate alone promotes severity: relative rank in the cohort or the
    absolute score. The absolute gate keeps small or uniformly-bad fleets honest.
    """
    if rank_pct <= thresholds.red_rank_percent or total_score > thresholds.red_score:
        return RiskLevel.red
    if rank_pct <= thresholds.yellow_rank_percent or total_score > thresholds.yellow_score:
        return RiskLevel.yellow
    return RiskLevel.green


class RiskScoringEngine:
    """Scores a batch of driver records against a behavior catalog."""

    def __init__(self, catalog: Optional[BehaviorCatalog] = None,
                 thresholds: Optional[RiskThresholds] = None):
        self.catalog = catalog if catalog is not None else get_default_catalog()
        self.thresholds = thresholds if thresholds is not None else RiskThresholds.from_settings()

    def raw_score(self, record: DriverRecord) -> float:
        """Weighted sum of behavior counts."""
        raw = 0.0
        for behavior, count in self.catalog.counts(record):
            raw += count * behavior.weight
        return raw

    def safety_index(self, record: DriverRecord) -> float:
        """Weighted incidents per 100 km. Zero-distance records are scored on the raw sum."""
        distance_norm = record.distance_km / 100 if record.distance_km > 0 else 1
        return self.raw_score(record) / distance_norm

    def score(self, records) -> list[RiskResult]:
        """
        Score and classify a whole batch.
        Output is sorted by descending score; equal scores keep input order.
        """
        batch = snapshot_records(records)
        if not batch:
            return []

        scored = [(record, self.safety_index(record)) for record in batch]
        # sorted() is stable, so ties stay in input order
        scored = sorted(scored, key=lambda item: -item[1])
        total = len(scored)

        results = []
        for index, (record, total_score) in enumerate(scored):
            rank_pct = rank_percent(index, total)
            results.append(RiskResult(
                car_number=record.car_number,
                driver_name=record.driver_name,
                total_score=total_score,
                risk_level=classify(total_score, rank_pct, self.thresholds),
                rank_percent=rank_pct,
            ))

        logger.info(
            "Scored %d records: %s", total, count_risk_levels(results),
        )
        return results


def count_risk_levels(results: list[RiskResult]) -> dict[str, int]:
    counts = {level.value: 0 for level in RiskLevel}
    for r in results:
        counts[r.risk_level.value] += 1
    return counts


def score(records, engine: Optional[RiskScoringEngine] = None) -> list[RiskResult]:
    """Score a batch with the given engine, or one built from settings."""
    return (engine or RiskScoringEngine()).score(records)
