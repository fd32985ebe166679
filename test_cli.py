"""CLI tests for jobtracker."""

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.schedulers.blocking import BlockingScheduler
from click.testing import CliRunner

from jobtracker.cli import cli


def nightly_sync():
    pass


def build_scheduler() -> BackgroundScheduler:
    scheduler = BackgroundScheduler(timezone="UTC")
    scheduler.add_job(nightly_sync, "cron", hour=3, id="nightly_sync")
    return scheduler


def build_blocking_scheduler() -> BlockingScheduler:
    scheduler = BlockingScheduler(timezone="UTC")
    scheduler.add_job(nightly_sync, "cron", hour=3, id="nightly_sync")
    return scheduler


def build_duplicate_scheduler() -> BackgroundScheduler:
    scheduler = build_scheduler()
    scheduler.add_job(nightly_sync, "interval", minutes=10, id="nightly_sync_again")
    return scheduler


class TestCli:
    def test_config_show(self):
        """Test: Configuration is read from the environment."""
        result = CliRunner().invoke(
            cli, ["config", "show"], env={"JOBTRACKER_STALE_AFTER_SECONDS": "60"}
        )
        assert result.exit_code == 0
        assert "stale-after:      60 seconds" in result.output

    def test_run_reports_status(self):
        """Test: `run` tracks the scheduler's jobs and prints their status."""
        result = CliRunner().invoke(cli, ["run", f"{__name__}:build_scheduler", "--duration", "0"])
        assert result.exit_code == 0, result.output
        assert "Tracking 1 job(s)" in result.output
        assert "nightly_sync" in result.output
        assert "never" in result.output
        assert "Scheduler stopped" in result.output

    def test_run_bad_target(self):
        """Test: An unloadable target exits with an error."""
        result = CliRunner().invoke(cli, ["run", "no_such_module_xyz:scheduler"])
        assert result.exit_code == 1
        assert "Cannot load scheduler" in result.output

    def test_run_target_without_attr(self):
        """Test: A target without ':attr' is rejected."""
        result = CliRunner().invoke(cli, ["run", "jobtracker"])
        assert result.exit_code == 1
        assert "expected 'module:attr'" in result.output

    def test_run_duplicate_jobs(self):
        """Test: The same function scheduled twice cannot be tracked."""
        result = CliRunner().invoke(cli, ["run", f"{__name__}:build_duplicate_scheduler", "--duration", "0"])
        assert result.exit_code == 1
        assert "Cannot track scheduler jobs" in result.output

    def test_run_refuses_blocking_scheduler(self):
        """Test: A BlockingScheduler target is refused."""
        result = CliRunner().invoke(cli, ["run", f"{__name__}:build_blocking_scheduler", "--duration", "0"])
        assert result.exit_code == 1
        assert "is a BlockingScheduler" in result.output
