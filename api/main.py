"""
FastAPI application initialization
"""

from fastapi import FastAPI
from api.routes import health, jobs
from core.config import settings
from core.database import engine, async_session_maker
from core.logging import setup_logging
import logging
from api.middleware import RequestContextMiddleware
from ingestion.jobs import build_jobs
from ingestion.ledger import ExecutionLedger
from ingestion.orchestrator import RetryOrchestrator
from ingestion.scheduler import TriggerRegistrar

setup_logging()

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Cron Sync Backend API",
    description="Scheduled ERP/golf record sync with an inspectable execution ledger",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(RequestContextMiddleware)

app.include_router(health.router)
app.include_router(jobs.router)


@app.on_event("startup")
async def startup_event():
    """Application startup event"""
    logger.info("Starting Cron Sync Backend API")
    logger.info(f"Environment: {settings.ENVIRONMENT}")

    if not settings.SCHEDULER_ENABLED:
        logger.info("Scheduler disabled by configuration")
        return

    ledger = ExecutionLedger(async_session_maker)
    registrar = TriggerRegistrar(engine, ledger, RetryOrchestrator(ledger))
    await registrar.start(build_jobs(async_session_maker))
    registrar.show_entries()
    app.state.registrar = registrar


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown event"""
    logger.info("Shutting down Cron Sync Backend API")
    registrar = getattr(app.state, "registrar", None)
    if registrar is not None:
        registrar.stop()
    await engine.dispose()


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Cron Sync Backend API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
        "endpoints": {
            "jobs": "/jobs",
            "unfinished": "/jobs/unfinished"
        }
    }
