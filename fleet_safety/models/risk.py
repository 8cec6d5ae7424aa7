from pydantic import BaseModel, ConfigDict
from enum import Enum


class RiskLevel(str, Enum):
    red = "Red"
    yellow = "Yellow"
    green = "Green"


class RiskResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    car_number: str
    driver_name: str
    total_score: float
    risk_level: RiskLevel
    rank_percent: float = 0.0


class EconomicImpact(BaseModel):
    fuel_saved_liters: float = 0.0
    cost_saved_krw: float = 0.0
    co2_reduced_kg: float = 0.0


class BehaviorFrequency(BaseModel):
    key: str
    label: str
    total_count: int = 0
    avg_per_100km: float = 0.0


class FleetAnalysis(BaseModel):
    total_vehicles: int = 0
    fuel_price: float
    risks: list[RiskResult] = []
    risk_distribution: dict[str, int] = {}
    economic_impact: EconomicImpact
    behaviors: list[BehaviorFrequency] = []
