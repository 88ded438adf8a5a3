"""
Periodic email archive, run by APScheduler inside the web process.

Enabled with SCHEDULER_ENABLED; the cron expression comes from
SCHEDULER_ARCHIVE_CRON.
"""

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED, JobExecutionEvent
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from monday_sync.config import settings
from monday_sync.core.logging import get_logger

log = get_logger(__name__)

ARCHIVE_JOB_ID = "archive_emails"

_scheduler: BackgroundScheduler | None = None


def archive_emails_job() -> dict:
    from monday_sync.processors.email_archive import EmailArchiveProcessor

    log.info("scheduled_job_starting", job=ARCHIVE_JOB_ID)
    return EmailArchiveProcessor().run()


def _on_job_event(event: JobExecutionEvent) -> None:
    if event.exception is not None:
        log.error("scheduled_job_error", job=event.job_id, error=str(event.exception))
    else:
        log.info("scheduled_job_complete", job=event.job_id, stats=event.retval)


def start_scheduler(cron: str | None = None) -> BackgroundScheduler:
    """
    Start the scheduler with the archive job, or return the running one.

    A failed run is logged and the job waits for its next trigger. Runs
    never overlap and missed runs are coalesced into one.
    """
    global _scheduler

    if _scheduler is not None:
        log.warning("scheduler_already_running")
        return _scheduler

    cron = cron or settings.scheduler_archive_cron
    scheduler = BackgroundScheduler(job_defaults={"coalesce": True, "max_instances": 1})
    scheduler.add_listener(_on_job_event, EVENT_JOB_EXECUTED | EVENT_JOB_ERROR)
    scheduler.add_job(
        archive_emails_job,
        trigger=CronTrigger.from_crontab(cron),
        id=ARCHIVE_JOB_ID,
        name="Archive CRM email history to monday.com",
        replace_existing=True,
    )
    scheduler.start()
    _scheduler = scheduler

    job = scheduler.get_job(ARCHIVE_JOB_ID)
    log.info("scheduler_started", cron=cron, next_run=str(job.next_run_time))
    return scheduler


def stop_scheduler() -> None:
    global _scheduler

    if _scheduler is None:
        return
    _scheduler.shutdown(wait=False)
    _scheduler = None
    log.info("scheduler_stopped")


def get_scheduler() -> BackgroundScheduler | None:
    return _scheduler
