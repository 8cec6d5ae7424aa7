import math
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


BEHAVIOR_COUNT_FIELDS = (
    "speeding_count",
    "sudden_accel_count",
    "sudden_decel_count",
    "sudden_stop_count",
    "sudden_start_count",
    "long_speeding_min",
    "gear_shift_stopped_count",
    "continuous_driving_violation_count",
    "fatigue_risk_count",
    "dui_suspicion_count",
    "rest_violation_count",
    "traffic_law_violation_count",
)


def _to_number(value) -> float:
    """Lenient numeric coercion: None, blanks, NaN and junk all become 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, str):
        value = value.replace(",", "").strip()
        if not value:
            return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


class DriverRecord(BaseModel):
    """One ingested telemetry row. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    car_number: str = "Unregistered"
    driver_name: str = "Unknown"
    date: str = ""
    distance_km: float = Field(default=0.0, ge=0)
    driving_time_min: float = Field(default=0.0, ge=0)
    max_speed: float = 0.0

    speeding_count: int = Field(default=0, ge=0)
    sudden_accel_count: int = Field(default=0, ge=0)
    sudden_decel_count: int = Field(default=0, ge=0)
    sudden_stop_count: int = Field(default=0, ge=0)
    sudden_start_count: int = Field(default=0, ge=0)
    long_speeding_min: int = Field(default=0, ge=0)
    gear_shift_stopped_count: int = Field(default=0, ge=0)
    continuous_driving_violation_count: int = Field(default=0, ge=0)
    fatigue_risk_count: int = Field(default=0, ge=0)
    dui_suspicion_count: int = Field(default=0, ge=0)
    rest_violation_count: int = Field(default=0, ge=0)
    traffic_law_violation_count: int = Field(default=0, ge=0)

    @field_validator("car_number", "driver_name", "date", mode="before")
    @classmethod
    def _coerce_text(cls, value, info: ValidationInfo):
        if value is None or (isinstance(value, float) and math.isnan(value)):
            return cls.model_fields[info.field_name].default
        return str(value).strip()

    @field_validator("distance_km", "driving_time_min", "max_speed", mode="before")
    @classmethod
    def _coerce_float(cls, value):
        return _to_number(value)

    @field_validator(*BEHAVIOR_COUNT_FIELDS, mode="before")
    @classmethod
    def _coerce_count(cls, value):
        return int(_to_number(value))


class DriverRecordBatch(BaseModel):
    records: list[DriverRecord]
