"""Fleet analysis API endpoints."""
from datetime import date
from typing import Optional

from fastapi import APIRouter, File, HTTPException, Query, UploadFile
from fastapi.responses import Response

from fleet_safety.config import settings
from fleet_safety.errors import IngestionError
from fleet_safety.insights.advisor import generate_insight
from fleet_safety.models.driving import DriverRecordBatch
from fleet_safety.pipeline.ingest import demo_records, load_driving_file
from fleet_safety.pipeline.processor import analyze_fleet
from fleet_safety.pipeline.report import build_insight_summary, build_report_frame, export_report_xlsx
from fleet_safety.scoring.economics import aggregate_behavior_frequency, aggregate_economic_impact
from fleet_safety.scoring.risk_engine import score

router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _read_upload(file: UploadFile):
    content = file.file.read()
    if len(content) > settings.max_upload_mb * 1024 * 1024:
        raise HTTPException(status_code=413, detail=f"File exceeds {settings.max_upload_mb} MB")
    try:
        return load_driving_file(content, file.filename or "")
    except IngestionError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/score")
def score_batch(batch: DriverRecordBatch):
    """Classify a batch of driver records. Results are worst first."""
    return {"data": score(batch.records)}


@router.post("/economics")
def economics(batch: DriverRecordBatch,
              fuel_price: float = Query(default=settings.fuel_price_default, ge=0)):
    """Fleet-wide fuel, cost and CO2 impact."""
    return aggregate_economic_impact(batch.records, fuel_price)


@router.post("/behaviors")
def behaviors(batch: DriverRecordBatch):
    """Behavior frequency rollup for descriptive charts."""
    return {"data": aggregate_behavior_frequency(batch.records)}


@router.post("/fleet")
def fleet_analysis(batch: DriverRecordBatch,
                   fuel_price: float = Query(default=settings.fuel_price_default, ge=0),
                   mask_names: bool = False):
    """Full analysis: risks, distribution, economics and behaviors."""
    return analyze_fleet(batch.records, fuel_price, mask_names=mask_names)


@router.get("/demo")
def demo_analysis(fuel_price: float = Query(default=settings.fuel_price_default, ge=0),
                  mask_names: bool = True):
    """Full analysis of the built-in three-vehicle sample fleet."""
    return analyze_fleet(demo_records(), fuel_price, mask_names=mask_names)


@router.post("/upload")
def upload_analysis(file: UploadFile = File(...),
                    fuel_price: float = Query(default=settings.fuel_price_default, ge=0),
                    mask_names: bool = True):
    """Analyze an uploaded .xlsx/.xls/.csv telemetry export."""
    records = _read_upload(file)
    return analyze_fleet(records, fuel_price, mask_names=mask_names)


@router.post("/export")
def export_report(file: UploadFile = File(...), mask_names: bool = True):
    """Download the per-driver risk report as XLSX."""
    records = _read_upload(file)
    analysis = analyze_fleet(records, mask_names=mask_names)
    content = export_report_xlsx(build_report_frame(analysis.risks, records))
    filename = f"Safety_Report_{date.today().isoformat()}.xlsx"
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/insights")
def insights(batch: DriverRecordBatch,
             fuel_price: Optional[float] = Query(default=None, ge=0)):
    """Narrative summary of the fleet's safety picture."""
    analysis = analyze_fleet(batch.records, fuel_price)
    summary = build_insight_summary(analysis)
    return {"summary": summary, **generate_insight(summary)}


@router.post("/insights/upload")
def upload_insights(file: UploadFile = File(...),
                    fuel_price: Optional[float] = Query(default=None, ge=0)):
    """Narrative summary for an uploaded telemetry export."""
    records = _read_upload(file)
    summary = build_insight_summary(analyze_fleet(records, fuel_price))
    return {"summary": summary, **generate_insight(summary)}
