from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, REGISTRY
from prometheus_client.exposition import CONTENT_TYPE_LATEST
import structlog

from .api.routes import accounts_routes, reference_routes
from .api.dependencies import get_account_store, get_audit_logger, get_metrics_collector
from .core.config.settings import get_settings
from .core.logging_config import setup_logging
from .core.monitoring.app_metrics import MetricsCollector
from .core.monitoring.audit_logger import AuditLogger
from .core.storage.account_store import AccountStore

setup_logging() # Initialize logging
logger = structlog.get_logger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application startup", app_name=settings.APP_NAME, version=settings.APP_VERSION)
    yield
    logger.info("Application shutdown", app_name=settings.APP_NAME)


app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION, lifespan=lifespan)


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.info("Request validation failed", path=request.url.path, error_count=len(exc.errors()))
    return JSONResponse(
        status_code=400,
        content={"detail": "Invalid data", "errors": jsonable_encoder(exc.errors())},
    )


app.include_router(accounts_routes.router, prefix="/api/accounts", tags=["Patient Accounts"])
app.include_router(reference_routes.router, prefix="/api", tags=["Denial Guidance"])


@app.get("/health")
async def health_check(
    request: Request,
    audit_logger: AuditLogger = Depends(get_audit_logger)
):
    logger.info("Health check accessed")
    response_data = {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.APP_VERSION
    }

    await audit_logger.log_access(
        user_id=str(request.client.host if request.client else "unknown_host"), # Client host as a stand-in
        action="HEALTH_CHECK",
        resource="System",
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
        success=True
    )
    return response_data


@app.get("/metrics", tags=["Monitoring"])
async def get_metrics():
    """
    Exposes Prometheus metrics.
    """
    logger.debug("Metrics endpoint called.")
    return Response(generate_latest(REGISTRY), media_type=CONTENT_TYPE_LATEST)


@app.get("/ready", tags=["Monitoring"])
async def readiness_check(
    store: AccountStore = Depends(get_account_store),
    metrics: MetricsCollector = Depends(get_metrics_collector),
) -> Dict[str, Any]:
    checks = {
        "account_store": {"status": "unhealthy", "details": "Check not performed"},
    }

    try:
        count = store.count()
        metrics.set_accounts_stored(count)
        checks["account_store"]["status"] = "healthy"
        checks["account_store"]["details"] = f"{count} account records held."
    except Exception as e:
        logger.error("Readiness check: account store unavailable", error=str(e), exc_info=True)
        checks["account_store"]["details"] = f"Store check failed: {str(e)}"

    if checks["account_store"]["status"] != "healthy":
        logger.warning("Readiness check failed", overall_status=checks)
        raise HTTPException(status_code=503, detail=checks)

    logger.info("Readiness check successful", overall_status=checks)
    return checks
