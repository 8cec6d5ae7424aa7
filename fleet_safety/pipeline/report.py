"""Presentation helpers: name masking, tabular report, XLSX export, insight summary."""
import io
from typing import Optional

import pandas as pd

from fleet_safety.models.driving import DriverRecord
from fleet_safety.models.risk import FleetAnalysis, RiskResult

UNKNOWN_NAMES = {"", "unknown", "undefined", "null", "none"}
MASKED_UNKNOWN = "Driver"
REPORT_SHEET = "Safety_Report"


def mask_name(name: Optional[str]) -> str:
    """Mask the middle of a driver name for display (김종환 -> 김o환, 이산 -> 이o)."""
    if name is None or name.strip().lower() in UNKNOWN_NAMES:
        return MASKED_UNKNOWN
    n = name.strip()
    if len(n) <= 1:
        return n
    if len(n) == 2:
        return n[0] + "o"
    return n[0] + "o" * (len(n) - 2) + n[-1]


def mask_results(results: list[RiskResult]) -> list[RiskResult]:
    return [r.model_copy(update={"driver_name": mask_name(r.driver_name)}) for r in results]


def build_report_frame(results: list[RiskResult], records: list[DriverRecord]) -> pd.DataFrame:
    """One row per result, in result order, with raw counters re-joined by vehicle id."""
    by_car = {}
    for record in records:
        by_car.setdefault(record.car_number, record)

    rows = []
    for risk in results:
        raw = by_car.get(risk.car_number)
        rows.append({
            "Vehicle": risk.car_number,
            "Driver": risk.driver_name,
            "Risk score": round(risk.total_score, 3),
            "Risk level": risk.risk_level.value,
            "Distance (km)": raw.distance_km if raw else 0,
            "Sudden acceleration": raw.sudden_accel_count if raw else 0,
            "Sudden start": raw.sudden_start_count if raw else 0,
            "Traffic law violations": raw.traffic_law_violation_count if raw else 0,
        })
    return pd.DataFrame(rows, columns=[
        "Vehicle", "Driver", "Risk score", "Risk level", "Distance (km)",
        "Sudden acceleration", "Sudden start", "Traffic law violations",
    ])


def export_report_xlsx(frame: pd.DataFrame) -> bytes:
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        frame.to_excel(writer, sheet_name=REPORT_SHEET, index=False)
    return buffer.getvalue()


def build_insight_summary(analysis: FleetAnalysis) -> dict:
    """Compact summary handed to the narrative generator."""
    top = sorted(analysis.behaviors, key=lambda b: b.total_count, reverse=True)[:3]
    return {
        "total_vehicles": analysis.total_vehicles,
        "risk_distribution": dict(analysis.risk_distribution),
        "economic_impact": {
            "fuel_saved_liters": round(analysis.economic_impact.fuel_saved_liters, 2),
            "cost_saved_krw": round(analysis.economic_impact.cost_saved_krw),
            "co2_reduced_kg": round(analysis.economic_impact.co2_reduced_kg, 2),
        },
        "top_behaviors": [f"{b.label}: {b.total_count}" for b in top if b.total_count > 0],
    }
