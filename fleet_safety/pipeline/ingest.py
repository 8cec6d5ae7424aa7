"""Telemetry spreadsheet ingestion: column-alias matching into DriverRecord values."""
import io
import logging
import os

import pandas as pd

from fleet_safety.errors import IngestionError
from fleet_safety.models.driving import BEHAVIOR_COUNT_FIELDS, DriverRecord

logger = logging.getLogger(__name__)

# First non-empty alias wins. Korean headers are what the telematics exports use.
COLUMN_ALIASES = {
    "car_number": ["차량번호", "차량", "번호", "CarNumber", "CarNo", "Plate"],
    "driver_name": ["운전자명", "성명", "이름", "DriverName", "Name", "운전자"],
    "date": ["운행일자", "날짜", "Date"],
    "distance_km": ["운행거리(km)", "거리", "Distance", "km"],
    "driving_time_min": ["운전시간(분)", "시간", "DrivingTime", "min"],
    "max_speed": ["최고속도(km/h)", "최고속도", "MaxSpeed"],
    "speeding_count": ["과속횟수", "과속", "Speeding"],
    "sudden_accel_count": ["급가속횟수", "급가속", "SuddenAccel"],
    "sudden_decel_count": ["급감속횟수", "급감속", "SuddenDecel"],
    "sudden_stop_count": ["급정지횟수", "급정지", "SuddenStop"],
    "sudden_start_count": ["급출발횟수", "급출발", "SuddenStart"],
    "long_speeding_min": ["장기과속시간(분)", "장기과속", "LongSpeeding"],
    "gear_shift_stopped_count": ["정차중기어변속횟수", "기어변속", "GearShift"],
    "continuous_driving_violation_count": ["연속운행위반횟수", "연속운행", "ContViolation"],
    "fatigue_risk_count": ["피로누적위험횟수", "피로누적", "Fatigue"],
    "dui_suspicion_count": ["음주운전의심횟수", "음주운전", "DUI"],
    "rest_violation_count": ["휴식시간미준수횟수", "휴식시간", "RestViolation"],
    "traffic_law_violation_count": ["법규위반횟수", "법규위반", "LawViolation"],
}

TEXT_FIELDS = {"car_number": "Unregistered", "driver_name": "Unknown", "date": ""}
NUMERIC_FIELDS = ("distance_km", "driving_time_min", "max_speed") + BEHAVIOR_COUNT_FIELDS

SUPPORTED_EXTENSIONS = (".csv", ".xlsx", ".xls")


def _is_blank(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _lookup(row: dict, aliases: list[str]):
    for key in aliases:
        value = row.get(key)
        if not _is_blank(value):
            return value
    return None


def _parse_number(value) -> float:
    number = pd.to_numeric(str(value).replace(",", "").strip() if isinstance(value, str) else value,
                           errors="coerce")
    if pd.isna(number):
        return 0.0
    # Negative counters are sensor noise; clamp instead of rejecting the row
    return max(float(number), 0.0)


def record_from_row(row: dict) -> DriverRecord:
    """Map one spreadsheet row onto a DriverRecord. Missing or unparsable fields become defaults."""
    data = {}
    for field, default in TEXT_FIELDS.items():
        value = _lookup(row, COLUMN_ALIASES[field])
        if isinstance(value, float) and value.is_integer():
            # Numeric vehicle ids come back from pandas as floats
            value = int(value)
        data[field] = default if value is None else str(value).strip()

    for field in NUMERIC_FIELDS:
        value = _lookup(row, COLUMN_ALIASES[field])
        data[field] = 0.0 if value is None else _parse_number(value)

    return DriverRecord(**data)


def records_from_rows(rows: list[dict]) -> list[DriverRecord]:
    return [record_from_row(row) for row in rows]


def records_from_dataframe(df: pd.DataFrame) -> list[DriverRecord]:
    """Convert a DataFrame of raw telemetry rows into DriverRecord values."""
    df = df.rename(columns=lambda c: str(c).strip())
    known = {alias for aliases in COLUMN_ALIASES.values() for alias in aliases}
    unmatched = [c for c in df.columns if c not in known]
    if unmatched:
        logger.debug("Ignoring unmatched columns: %s", unmatched)

    return records_from_rows(df.to_dict("records"))


def read_driving_frame(content: bytes, filename: str) -> pd.DataFrame:
    """Read the first sheet of an .xlsx/.xls upload, or a .csv, into a DataFrame."""
    ext = os.path.splitext(filename or "")[1].lower()
    if ext not in SUPPORTED_EXTENSIONS:
        raise IngestionError(f"Unsupported file type '{ext or filename}'. Expected one of {SUPPORTED_EXTENSIONS}")

    buffer = io.BytesIO(content)
    try:
        if ext == ".csv":
            try:
                return pd.read_csv(buffer, encoding="utf-8-sig")
            except UnicodeDecodeError:
                # Korean Excel exports are frequently CP949
                buffer.seek(0)
                return pd.read_csv(buffer, encoding="cp949")
        return pd.read_excel(buffer, sheet_name=0)
    except pd.errors.EmptyDataError:
        return pd.DataFrame()
    except (ValueError, pd.errors.ParserError, UnicodeDecodeError) as e:
        raise IngestionError(f"Could not read {filename}: {e}") from e


def load_driving_file(content: bytes, filename: str) -> list[DriverRecord]:
    df = read_driving_frame(content, filename)
    records = records_from_dataframe(df)
    logger.info("Ingested %d driver records from %s", len(records), filename)
    return records


def demo_records() -> list[DriverRecord]:
    """Three-vehicle sample fleet served by the demo endpoint."""
    return records_from_rows([
        {"차량번호": "TS-2026-01", "운전자명": "김철수", "운행거리(km)": 1200, "운전시간(분)": 1500,
         "과속횟수": 350, "급가속횟수": 480, "급감속횟수": 210, "급출발횟수": 150, "법규위반횟수": 45},
        {"차량번호": "TS-2026-02", "운전자명": "박영희", "운행거리(km)": 2500, "운전시간(분)": 3000,
         "과속횟수": 120, "급가속횟수": 80, "급감속횟수": 50, "급출발횟수": 40, "법규위반횟수": 12},
        {"차량번호": "TS-2026-03", "운전자명": "이지영", "운행거리(km)": 800, "운전시간(분)": 1000,
         "과속횟수": 15, "급가속횟수": 10, "급감속횟수": 5, "급출발횟수": 5, "법규위반횟수": 2},
    ])
