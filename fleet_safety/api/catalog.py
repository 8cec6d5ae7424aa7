"""Behavior catalog API endpoints."""
from fastapi import APIRouter

from fleet_safety.config import settings
from fleet_safety.scoring.catalog import get_default_catalog
from fleet_safety.scoring.risk_engine import RiskThresholds

router = APIRouter()


@router.get("")
def get_catalog():
    """Active behavior coefficients and classification thresholds."""
    return {
        "behaviors": get_default_catalog().to_dicts(),
        "thresholds": RiskThresholds.from_settings(),
        "co2_per_liter": settings.co2_per_liter,
        "fuel_price_default": settings.fuel_price_default,
    }
