"""Tests for the job schedule"""
from apscheduler.triggers.cron import CronTrigger

from jobs import runner
from jobs.runner import SchedulerSettings, build_scheduler, safe


def cron_minute(job):
    return str(next(f for f in job.trigger.fields if f.name == "minute"))


class TestScheduler:

    def test_refresh_job_is_hourly(self):
        sched = build_scheduler(SchedulerSettings(refresh_cron_minute="15"))
        job = sched.get_job("refresh_snapshots")

        assert job is not None
        assert isinstance(job.trigger, CronTrigger)
        assert cron_minute(job) == "15"
        assert job.max_instances == 1
        assert job.coalesce is True

    def test_velocity_job_runs_after_refresh(self):
        sched = build_scheduler(SchedulerSettings())
        job = sched.get_job("analyze_velocity")

        assert job is not None
        assert cron_minute(job) == "45"
        assert cron_minute(sched.get_job("refresh_snapshots")) == "0"

    def test_velocity_job_calls_analyzer(self, monkeypatch):
        calls = []
        monkeypatch.setattr(runner, "analyze_velocity", calls.append)

        runner.run_velocity()

        assert calls == [[]]

    def test_refresh_job_calls_refresher(self, monkeypatch):
        calls = []
        monkeypatch.setattr(runner, "refresh_snapshots", calls.append)

        runner.run_refresh()

        assert calls == [[]]

    def test_safe_logs_and_swallows_job_failure(self):
        def boom():
            raise RuntimeError("upstream down")

        wrapped = safe(boom)
        wrapped()
        assert wrapped.__name__ == "boom"
