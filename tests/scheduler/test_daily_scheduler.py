"""Tests for the daily trigger."""

from unittest.mock import MagicMock

import pytest
from apscheduler.triggers.cron import CronTrigger

from signal_notifier.errors import SchedulerError, StoreError
from signal_notifier.models.notifications import RunSummary
from signal_notifier.scheduler.daily import DailyScheduler

from conftest import RUN_TIME


@pytest.fixture
def runner():
    runner = MagicMock()
    runner.run_once.return_value = RunSummary(run_id="run-1", started_at=RUN_TIME)
    return runner


@pytest.fixture
def background():
    scheduler = MagicMock()
    scheduler.running = False
    return scheduler


class TestDailyScheduler:

    def test_start_registers_single_cron_job(self, runner, background):
        daily = DailyScheduler(runner, hour=5, minute=0, timezone="Asia/Seoul", scheduler=background)

        daily.start()

        background.add_job.assert_called_once()
        args, kwargs = background.add_job.call_args
        trigger = args[1]
        assert isinstance(trigger, CronTrigger)
        assert str(trigger.timezone) == "Asia/Seoul"
        assert kwargs["id"] == DailyScheduler.JOB_ID
        assert kwargs["max_instances"] == 1
        assert kwargs["coalesce"] is True
        assert kwargs["misfire_grace_time"] == 3600
        background.start.assert_called_once()

    def test_start_when_running_is_noop(self, runner, background):
        background.running = True
        DailyScheduler(runner, scheduler=background).start()

        background.add_job.assert_not_called()

    def test_start_failure_raises_scheduler_error(self, runner, background):
        background.start.side_effect = RuntimeError("no thread")

        with pytest.raises(SchedulerError) as exc_info:
            DailyScheduler(runner, scheduler=background).start()

        assert exc_info.value.job_id == DailyScheduler.JOB_ID

    def test_trigger_now_returns_summary(self, runner, background):
        daily = DailyScheduler(runner, scheduler=background)

        summary = daily.trigger_now()

        assert summary.run_id == "run-1"
        assert daily.last_summary is summary

    def test_trigger_now_while_running_returns_none(self, runner, background):
        runner.run_once.return_value = None
        daily = DailyScheduler(runner, scheduler=background)

        assert daily.trigger_now() is None
        assert daily.last_summary is None

    def test_aborted_run_keeps_partial_summary(self, runner, background):
        partial = RunSummary(run_id="run-2", started_at=RUN_TIME, aborted=True)
        runner.run_once.side_effect = StoreError("db gone", context={"summary": partial})
        daily = DailyScheduler(runner, scheduler=background)

        assert daily.trigger_now() is partial
        assert daily.last_summary is partial

    def test_stop_cancels_in_flight(self, runner, background):
        background.running = True
        daily = DailyScheduler(runner, scheduler=background)

        daily.stop(wait=False, cancel_in_flight=True)

        runner.cancel.assert_called_once()
        background.shutdown.assert_called_once_with(wait=False)

    def test_stop_when_not_running(self, runner, background):
        DailyScheduler(runner, scheduler=background).stop()

        background.shutdown.assert_not_called()
