# backend/visit_sync/main.py
"""
FastAPI application for the visit sync service.

Run with:
    uvicorn visit_sync.main:app
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from . import __version__
from .core.config import settings
from .core.exceptions import DomainException
from .database import SessionLocal, init_db
from .monitoring.prometheus_metrics import prometheus_metrics
from .routes.v1 import visits as visits_v1
from .seed import seed_reference_data

logging.basicConfig(
    level=settings.log_level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    environment: str
    timestamp: str


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Ensure the schema and seed codes exist before serving requests."""
    logger.info(f"{settings.app_name} starting up...")
    logger.info(f"Environment: {settings.environment}")

    init_db()
    db = SessionLocal()
    try:
        seed_reference_data(db)
    finally:
        db.close()

    yield

    logger.info(f"{settings.app_name} shutting down...")


app = FastAPI(
    title=settings.app_name,
    description="Keeps prison visit bookings in the legacy system of record in step with "
    "the external booking service.",
    version=__version__,
    lifespan=app_lifespan,
)


@app.exception_handler(DomainException)
async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    http_exc = exc.to_http_exception()
    logger.warning(
        "Unhandled %s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc
    )
    return JSONResponse(status_code=http_exc.status_code, content={"detail": http_exc.detail})


# Create API v1 router
api_v1 = APIRouter(prefix=settings.api_prefix)
api_v1.include_router(visits_v1.router)
app.include_router(api_v1)


@app.get("/health", response_model=HealthResponse)
def health_check() -> HealthResponse:
    """Liveness check that doesn't hit the database."""
    return HealthResponse(
        status="healthy",
        service="visit-sync-api",
        version=__version__,
        environment=settings.environment,
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    )


if settings.metrics_enabled:

    @app.get("/metrics", include_in_schema=False)
    def metrics_endpoint() -> Response:
        """Prometheus scrape endpoint."""
        return Response(
            content=prometheus_metrics.get_metrics(),
            media_type=prometheus_metrics.get_content_type(),
        )
