"""Unit tests for the background scheduler."""

import pytest
from unittest.mock import MagicMock, patch

from monday_sync import scheduler


@pytest.fixture(autouse=True)
def stopped_scheduler():
    yield
    scheduler.stop_scheduler()


def test_start_registers_archive_job():
    sched = scheduler.start_scheduler("30 3 * * *")

    job = sched.get_job(scheduler.ARCHIVE_JOB_ID)
    assert job is not None
    assert job.func is scheduler.archive_emails_job
    assert scheduler.get_scheduler() is sched


def test_start_twice_returns_same_instance():
    first = scheduler.start_scheduler()
    assert scheduler.start_scheduler() is first


def test_stop_clears_instance():
    scheduler.start_scheduler()
    scheduler.stop_scheduler()
    assert scheduler.get_scheduler() is None


def test_stop_without_start():
    scheduler.stop_scheduler()
    assert scheduler.get_scheduler() is None


def test_archive_job_runs_processor():
    with patch("monday_sync.processors.email_archive.EmailArchiveProcessor") as processor_cls:
        processor_cls.return_value.run.return_value = {"records": 2}
        assert scheduler.archive_emails_job() == {"records": 2}


def test_job_error_is_logged():
    event = MagicMock(job_id="archive_emails", exception=RuntimeError("zoho down"))
    with patch.object(scheduler, "log") as log:
        scheduler._on_job_event(event)
    assert log.error.call_args.args[0] == "scheduled_job_error"
