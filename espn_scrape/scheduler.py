"""
Cron wiring for the ingestion jobs.

Each job kind is one APScheduler job with ``max_instances=1`` and
``coalesce=True``: a trigger that fires while the previous run is still going
is skipped, and missed runs collapse into one. The job's own guard covers
manual triggers from the API or CLI.
"""
import logging
from typing import Dict

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from espn_scrape.config import settings
from espn_scrape.dependencies import ServiceContainer

logger = logging.getLogger(__name__)


def job_schedules() -> Dict[str, str]:
    return {
        "stats": settings.stats_cron,
        "schedule": settings.schedule_cron,
        "players": settings.player_sync_cron,
        "headshots": settings.headshot_cron,
    }


async def run_scheduled_job(container: ServiceContainer, kind: str):
    """Run one job with its defaults. Failures propagate so APScheduler records them."""
    return await container.job(kind).run()


def create_scheduler(container: ServiceContainer) -> AsyncIOScheduler:
    scheduler = AsyncIOScheduler(
        timezone=settings.scheduler_timezone,
        job_defaults={
            'coalesce': True,
            'max_instances': 1,
            'misfire_grace_time': 300,
        },
    )
    for kind, crontab in job_schedules().items():
        scheduler.add_job(
            run_scheduled_job,
            CronTrigger.from_crontab(crontab, timezone=settings.scheduler_timezone),
            args=[container, kind],
            id=f"espn-{kind}",
            name=f"ESPN {kind} sync",
            replace_existing=True,
        )
        logger.info(f"Scheduled {kind} job: '{crontab}' ({settings.scheduler_timezone})")
    return scheduler
