import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from fleet_safety.models.driving import DriverRecord


@pytest.fixture
def scenario_a_record():
    return DriverRecord(
        car_number="TS-2026-01", driver_name="김철수", distance_km=1200,
        speeding_count=350, sudden_accel_count=480, sudden_decel_count=210,
        sudden_start_count=150, traffic_law_violation_count=45,
    )


@pytest.fixture
def scenario_b_records():
    # Scores 1.19, 0.01 and 0.003 (zero distance -> raw score)
    return [
        DriverRecord(car_number="CAR-LOW", distance_km=200, gear_shift_stopped_count=3),
        DriverRecord(car_number="CAR-HIGH", dui_suspicion_count=5, fatigue_risk_count=2,
                     traffic_law_violation_count=1),
        DriverRecord(car_number="CAR-MID", speeding_count=2),
    ]
