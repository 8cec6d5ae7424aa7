"""Fleet-wide economic and environmental impact of tracked behaviors."""
import logging
from typing import Optional

from fleet_safety.config import settings
from fleet_safety.errors import InvalidInputError
from fleet_safety.models.risk import BehaviorFrequency, EconomicImpact
from fleet_safety.scoring.catalog import BehaviorCatalog, get_default_catalog
from fleet_safety.scoring.risk_engine import snapshot_records

logger = logging.getLogger(__name__)


class EconomicImpactAggregator:
    def __init__(self, catalog: Optional[BehaviorCatalog] = None,
                 co2_per_liter: Optional[float] = None):
        self.catalog = catalog if catalog is not None else get_default_catalog()
        self.co2_per_liter = settings.co2_per_liter if co2_per_liter is None else co2_per_liter

    def aggregate(self, records, fuel_price: float) -> EconomicImpact:
        """
        Sum fuel and per-incident cost over every record and behavior.

        The fuel-equivalent cost and the flat incident cost are alternative
        estimates of the same incidents, so the larger one is reported rather
        than their sum.
        """
        batch = snapshot_records(records)
        if fuel_price is None or fuel_price < 0:
            raise InvalidInputError(f"fuel_price must be >= 0, got {fuel_price}")

        total_fuel = 0.0
        total_cost = 0.0
        for record in batch:
            for behavior, count in self.catalog.counts(record):
                if behavior.fuel_penalty > 0:
                    total_fuel += count * behavior.fuel_penalty
                if behavior.cost_per_incident > 0:
                    total_cost += count * behavior.cost_per_incident

        impact = EconomicImpact(
            fuel_saved_liters=total_fuel,
            cost_saved_krw=max(total_fuel * fuel_price, total_cost),
            co2_reduced_kg=total_fuel * self.co2_per_liter,
        )
        logger.debug("Economic impact over %d records: %s", len(batch), impact)
        return impact

    def behavior_frequency(self, records) -> list[BehaviorFrequency]:
        """Total count and count per 100 km for each behavior, in catalog order."""
        batch = snapshot_records(records)
        total_distance = sum(r.distance_km or 0 for r in batch)

        rollup = []
        for behavior in self.catalog:
            total_count = sum(self.catalog.count(r, behavior) for r in batch)
            rollup.append(BehaviorFrequency(
                key=behavior.key,
                label=behavior.label,
                total_count=total_count,
                avg_per_100km=total_count / total_distance * 100 if total_distance > 0 else 0.0,
            ))
        return rollup


def aggregate_economic_impact(records, fuel_price_per_liter: float,
                              aggregator: Optional[EconomicImpactAggregator] = None) -> EconomicImpact:
    return (aggregator or EconomicImpactAggregator()).aggregate(records, fuel_price_per_liter)


def aggregate_behavior_frequency(records,
                                 aggregator: Optional[EconomicImpactAggregator] = None) -> list[BehaviorFrequency]:
    return (aggregator or EconomicImpactAggregator()).behavior_frequency(records)
