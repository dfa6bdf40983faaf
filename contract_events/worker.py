import logging
from typing import Any

from arq import cron

from contract_events.core.config import settings
from contract_events.core.database import SessionLocal
from contract_events.services.contract_event_service import ContractEventService
from contract_events.services.status_config import StatusConfigService
from contract_events.tasks import redis_settings

logger = logging.getLogger(__name__)


async def refresh_overdue_flags_task(ctx: dict[str, Any]) -> int:
    """Background task: recompute the cached ``is_overdue`` column.

    Reads always derive overdue from the date and status; the column only
    backs the ``overdue`` list filter and goes stale at midnight, so it is
    refreshed every few minutes.
    """
    db = SessionLocal()
    try:
        service = ContractEventService(db)
        count = service.refresh_overdue_flags()
        if count > 0:
            logger.info("Refreshed overdue flag on %d events", count)
        return count
    finally:
        db.close()


async def seed_event_statuses_task(ctx: dict[str, Any]) -> int:
    """Background task: seed status vocabularies for unconfigured event types."""
    db = SessionLocal()
    try:
        seeded = StatusConfigService(db).ensure_seeded()
        return len(seeded)
    finally:
        db.close()


class WorkerSettings:
    functions = [
        refresh_overdue_flags_task,
        seed_event_statuses_task,
    ]
    cron_jobs = [
        cron(refresh_overdue_flags_task, minute=settings.overdue_refresh_minutes),
    ]
    on_startup = seed_event_statuses_task
    redis_settings = redis_settings
