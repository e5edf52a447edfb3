# ABOUTME: Wiring and cron scheduling for the weather update job.
# ABOUTME: Builds the job against the database and runs it on an APScheduler cron trigger.

import structlog
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from weather_notify.config import Settings, get_settings
from weather_notify.db.repository import SubscriptionRepository
from weather_notify.db.session import get_session
from weather_notify.email.sender import EmailSender
from weather_notify.services.notification_job import TickResult, WeatherUpdateJob
from weather_notify.services.subscription_service import SubscriptionService
from weather_notify.services.weather_service import WeatherService
from weather_notify.weather.client import WeatherAPIClient

log = structlog.get_logger()

JOB_ID = "weather_updates"


async def run_weather_updates(settings: Settings | None = None) -> TickResult:
    """Run one tick of the weather update job with its own database session."""
    settings = settings or get_settings()

    async with get_session() as session:
        subscriptions = SubscriptionService(SubscriptionRepository(session), EmailSender(settings))
        weather = WeatherService(WeatherAPIClient(settings))
        job = WeatherUpdateJob(
            subscriptions,
            weather,
            base_url=settings.app_base_url,
            step_timeout=settings.job_step_timeout,
        )
        return await job.run()


async def scheduled_tick() -> None:
    """Scheduler entry point. Never lets an exception escape into the scheduler."""
    log.info("weather_job_start")
    try:
        result = await run_weather_updates()
    except Exception:
        log.exception("weather_job_failed")
        return
    log.info("weather_job_complete", sent=result.sent, failed=result.failed)


def create_scheduler(settings: Settings | None = None) -> AsyncIOScheduler:
    """Create a scheduler with the weather job registered on its cron trigger."""
    settings = settings or get_settings()

    scheduler = AsyncIOScheduler(timezone="UTC")
    scheduler.add_job(
        scheduled_tick,
        CronTrigger.from_crontab(settings.weather_job_cron, timezone="UTC"),
        id=JOB_ID,
        max_instances=1,
        coalesce=True,
    )
    log.info("weather_job_scheduled", cron=settings.weather_job_cron)
    return scheduler
