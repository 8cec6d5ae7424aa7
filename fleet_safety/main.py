"""FastAPI application entry point."""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from fleet_safety.api import analysis, catalog
from fleet_safety.config import settings
from fleet_safety.errors import CatalogError, InvalidInputError

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Fleet Safety Risk API",
    description="Driver risk classification and economic impact from fleet telemetry",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(analysis.router, prefix="/api/analysis", tags=["Analysis"])
app.include_router(catalog.router, prefix="/api/catalog", tags=["Catalog"])


@app.exception_handler(InvalidInputError)
@app.exception_handler(CatalogError)
async def domain_error_handler(request: Request, exc: ValueError):
    logger.error("%s on %s: %s", type(exc).__name__, request.url.path, exc)
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.get("/api/health")
def health_check():
    return {"status": "healthy", "service": "fleet-safety-risk"}
