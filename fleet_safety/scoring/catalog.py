"""Behavior catalog: tracked unsafe-driving behaviors and their coefficients."""
import json
import logging
import os
from dataclasses import dataclass
from operator import attrgetter
from typing import Callable, Iterable, Iterator, Optional

import pandas as pd

from fleet_safety.config import settings
from fleet_safety.errors import CatalogError
from fleet_safety.models.driving import BEHAVIOR_COUNT_FIELDS, DriverRecord

logger = logging.getLogger(__name__)

CATALOG_COLUMNS = ["key", "label", "weight", "fuel_penalty", "cost_per_incident"]


@dataclass(frozen=True)
class BehaviorDefinition:
    key: str
    label: str
    weight: float
    fuel_penalty: float = 0.0
    cost_per_incident: float = 0.0


# Fuel-linked behaviors first, then safety-critical ones.
DEFAULT_BEHAVIORS = (
    BehaviorDefinition("speeding_count", "Speeding", 0.005, 0.05, 50),
    BehaviorDefinition("sudden_accel_count", "Sudden acceleration", 0.015, 0.10, 75),
    BehaviorDefinition("sudden_decel_count", "Sudden deceleration", 0.008, 0.03, 40),
    BehaviorDefinition("sudden_stop_count", "Sudden stop", 0.012, 0.05, 60),
    BehaviorDefinition("sudden_start_count", "Sudden start", 0.015, 0.10, 75),
    BehaviorDefinition("long_speeding_min", "Long speeding (min)", 0.02, 0.15, 100),
    BehaviorDefinition("gear_shift_stopped_count", "Gear shift while stopped", 0.002, 0.02, 20),
    BehaviorDefinition("continuous_driving_violation_count", "Continuous driving violation", 0.05, 0, 0),
    BehaviorDefinition("fatigue_risk_count", "Fatigue risk", 0.08, 0, 0),
    BehaviorDefinition("dui_suspicion_count", "DUI suspicion", 0.2, 0, 0),
    BehaviorDefinition("rest_violation_count", "Rest time violation", 0.05, 0, 0),
    BehaviorDefinition("traffic_law_violation_count", "Traffic law violation", 0.03, 0, 0),
)


class BehaviorCatalog:
    """
    Ordered, immutable set of behavior definitions.

    Builds the key -> record accessor table once, so scoring and aggregation
    iterate the catalog without looking fields up by name on every record.
    """

    def __init__(self, behaviors: Iterable[BehaviorDefinition]):
        self._behaviors = tuple(behaviors)
        self._accessors: dict[str, Callable[[DriverRecord], int]] = {}

        for behavior in self._behaviors:
            if behavior.key not in BEHAVIOR_COUNT_FIELDS:
                raise CatalogError(f"Unknown behavior key: {behavior.key}")
            if behavior.key in self._accessors:
                raise CatalogError(f"Duplicate behavior key: {behavior.key}")
            for name in ("weight", "fuel_penalty", "cost_per_incident"):
                if getattr(behavior, name) < 0:
                    raise CatalogError(f"{behavior.key}: {name} must be >= 0")
            self._accessors[behavior.key] = attrgetter(behavior.key)

    def __iter__(self) -> Iterator[BehaviorDefinition]:
        return iter(self._behaviors)

    def __len__(self) -> int:
        return len(self._behaviors)

    @property
    def behaviors(self) -> tuple[BehaviorDefinition, ...]:
        return self._behaviors

    def count(self, record: DriverRecord, behavior: BehaviorDefinition) -> int:
        """Count of one behavior on a record; anything unset reads as 0."""
        return self._accessors[behavior.key](record) or 0

    def counts(self, record: DriverRecord) -> Iterator[tuple[BehaviorDefinition, int]]:
        for behavior in self._behaviors:
            yield behavior, self.count(record, behavior)

    def to_dicts(self) -> list[dict]:
        return [
            {
                "key": b.key,
                "label": b.label,
                "weight": b.weight,
                "fuel_penalty": b.fuel_penalty,
                "cost_per_incident": b.cost_per_incident,
            }
            for b in self._behaviors
        ]


def load_catalog(path: str) -> BehaviorCatalog:
    """Load a catalog table from a .json (list of objects) or .csv file."""
    if not os.path.exists(path):
        raise CatalogError(f"Behavior catalog not found: {path}")

    if path.lower().endswith(".json"):
        with open(path, encoding="utf-8") as f:
            try:
                df = pd.DataFrame(json.load(f))
            except (json.JSONDecodeError, ValueError) as e:
                raise CatalogError(f"Invalid catalog JSON {path}: {e}") from e
    else:
        df = pd.read_csv(path)

    missing = [c for c in ("key", "weight") if c not in df.columns]
    if missing:
        raise CatalogError(f"Catalog {path} missing columns: {missing}")

    for col in ("fuel_penalty", "cost_per_incident"):
        df[col] = df[col].fillna(0.0) if col in df.columns else 0.0
    df["label"] = df["label"].fillna(df["key"]) if "label" in df.columns else df["key"]

    numeric = df[["weight", "fuel_penalty", "cost_per_incident"]].apply(pd.to_numeric, errors="coerce")
    if numeric.isna().any().any():
        raise CatalogError(f"Catalog {path} has non-numeric coefficients")

    behaviors = [
        BehaviorDefinition(
            key=str(row["key"]).strip(),
            label=str(row["label"]),
            weight=float(numeric.at[idx, "weight"]),
            fuel_penalty=float(numeric.at[idx, "fuel_penalty"]),
            cost_per_incident=float(numeric.at[idx, "cost_per_incident"]),
        )
        for idx, row in df.iterrows()
    ]
    logger.info("Loaded %d behavior definitions from %s", len(behaviors), path)
    return BehaviorCatalog(behaviors)


def get_default_catalog(path: Optional[str] = None) -> BehaviorCatalog:
    """Catalog from the configured table if one is set, else the built-in defaults."""
    path = path or settings.behavior_catalog_path
    if path:
        return load_catalog(path)
    return BehaviorCatalog(DEFAULT_BEHAVIORS)
