"""Background task scheduler — periodic low-stock threshold evaluation.

Uses FastAPI's lifespan context to start/stop an asyncio background loop.
No Celery, no APScheduler: a plain asyncio.sleep loop that evaluates
thresholds every THRESHOLD_CHECK_INTERVAL_SECONDS.

Configuration (via .env):
    THRESHOLD_CHECK_ENABLED=true
    THRESHOLD_CHECK_INTERVAL_SECONDS=900
"""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.config import settings
from app.database import async_session
from app.services.alerts import evaluate_thresholds

logger = logging.getLogger("packtrack.scheduler")


async def run_threshold_check() -> int:
    """One evaluation pass in its own session.  Returns new alert count."""
    async with async_session() as db:
        try:
            alerts = await evaluate_thresholds(db)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
    if alerts:
        logger.info(
            "Threshold check raised %d alerts (critical=%d)",
            len(alerts),
            sum(1 for a in alerts if a.severity == "critical"),
        )
    return len(alerts)


async def _scheduler_loop(interval_seconds: int) -> None:
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            await run_threshold_check()
        except Exception:
            logger.exception("Unhandled error in threshold check")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """FastAPI lifespan: start the scheduler on startup, cancel on shutdown."""
    if not settings.threshold_check_enabled:
        logger.info("Threshold scheduler disabled")
        yield
        return

    task = asyncio.create_task(
        _scheduler_loop(settings.threshold_check_interval_seconds)
    )
    logger.info(
        "Threshold scheduler started (every %ds)",
        settings.threshold_check_interval_seconds,
    )
    try:
        yield
    finally:
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Threshold scheduler stopped")
