# APScheduler orchestrator: hourly snapshot refresh, then velocity ranking
from __future__ import annotations
import logging
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger
from pydantic_settings import BaseSettings, SettingsConfigDict

from analysis.jobs.analyzer_velocity import main as analyze_velocity
from collection.jobs.refresh_snapshots import main as refresh_snapshots

log = logging.getLogger("runner")

class SchedulerSettings(BaseSettings):
    refresh_cron_minute: str = "0"
    velocity_cron_minute: str = "45"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

def safe(fn):
    def _wrap():
        try:
            fn()
        except Exception:
            log.exception("Job failed: %s", getattr(fn, "__name__", "unknown"))
    _wrap.__name__ = getattr(fn, "__name__", "job")
    return _wrap

def run_refresh() -> None:
    refresh_snapshots([])

def run_velocity() -> None:
    analyze_velocity([])

def build_scheduler(settings: SchedulerSettings | None = None) -> BlockingScheduler:
    settings = settings or SchedulerSettings()
    sched = BlockingScheduler(timezone="UTC")
    # every 60 minutes
    sched.add_job(
        safe(run_refresh),
        CronTrigger(minute=settings.refresh_cron_minute),
        id="refresh_snapshots",
        max_instances=1,
        coalesce=True,
    )
    # after the refresh has landed
    sched.add_job(
        safe(run_velocity),
        CronTrigger(minute=settings.velocity_cron_minute),
        id="analyze_velocity",
        max_instances=1,
        coalesce=True,
    )
    return sched

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    sched = build_scheduler()
    log.info("Scheduler starting (UTC)...")
    try:
        sched.start()
    except (KeyboardInterrupt, SystemExit):
        log.info("Scheduler stopped.")
