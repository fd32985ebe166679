"""CLI interface for jobtracker."""

import importlib
import sys
import time
from datetime import datetime, timedelta
from typing import Optional

import click
from apscheduler.schedulers.base import BaseScheduler
from apscheduler.schedulers.blocking import BlockingScheduler

from .config import TrackerConfig
from .errors import JobTrackerError
from .logging import setup_logging
from .registry import JobRegistry
from .scheduler import install_tracking


def _format_time(value: Optional[datetime]) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S") if value else "-"


def load_scheduler(target: str) -> BaseScheduler:
    """Resolve ``module:attr`` to a scheduler instance (or a factory for one)."""
    module_name, _, attr = target.partition(":")
    if not module_name or not attr:
        raise click.BadParameter(f"expected 'module:attr', got '{target}'")

    obj = importlib.import_module(module_name)
    for part in attr.split("."):
        obj = getattr(obj, part)
    if not isinstance(obj, BaseScheduler) and callable(obj):
        obj = obj()
    if not isinstance(obj, BaseScheduler):
        raise click.BadParameter(f"{target} is not an APScheduler scheduler")
    # BackgroundScheduler subclasses BlockingScheduler
    if type(obj) is BlockingScheduler:
        raise click.BadParameter(f"{target} is a BlockingScheduler, use a BackgroundScheduler")
    return obj


def print_status(registry: JobRegistry, stale_after: timedelta) -> None:
    """Print one line per tracked job."""
    jobs = registry.all_jobs()
    if not jobs:
        click.echo("No jobs tracked")
        return

    click.echo(f"\n{'Job':<40} {'Schedule':<22} {'Status':<10} {'Last start':<20} {'Last end':<20} {'Error':<30}")
    click.echo("-" * 147)
    for job in jobs:
        latest = job.latest_run
        status = latest.status.value if latest else "never"
        started = _format_time(latest.started_at) if latest else "-"
        ended = _format_time(latest.ended_at) if latest else "-"
        error = (latest.failure.message if latest and latest.failure else "")[:30]
        name = str(job.identity)[-40:]
        click.echo(f"{name:<40} {job.settings.describe()[:22]:<22} {status:<10} {started:<20} {ended:<20} {error:<30}")

    for identity, run in registry.find_stale_runs(stale_after):
        click.echo(f"⚠ {identity} run {run.id} open since {_format_time(run.started_at)}")
    click.echo()


@click.group()
def cli():
    """jobtracker - Scheduled job run tracking"""
    pass


@cli.command()
@click.argument("target")
@click.option("--duration", type=float, default=None, help="Stop after this many seconds")
@click.option("--interval", type=float, default=None, help="Seconds between status reports")
def run(target: str, duration: Optional[float], interval: Optional[float]):
    """Start a scheduler with run tracking and report job status.

    Example:
        jobtracker run myapp.jobs:scheduler --interval 10
    """
    cfg = TrackerConfig()
    setup_logging(cfg)
    interval = interval if interval is not None else cfg.report_interval
    stale_after = timedelta(seconds=cfg.stale_after_seconds)

    try:
        scheduler = load_scheduler(target)
    except (ImportError, AttributeError, click.BadParameter) as e:
        click.echo(f"✗ Cannot load scheduler: {e}", err=True)
        sys.exit(1)

    registry = JobRegistry()
    try:
        install_tracking(scheduler, registry)
    except JobTrackerError as e:
        click.echo(f"✗ Cannot track scheduler jobs: {e}", err=True)
        sys.exit(1)
    scheduler.start()
    click.echo(f"Tracking {len(registry.all_jobs())} job(s) from {target}")

    deadline = time.monotonic() + duration if duration is not None else None
    try:
        while True:
            print_status(registry, stale_after)
            if deadline is not None and time.monotonic() >= deadline:
                break
            wait = interval if deadline is None else min(interval, max(deadline - time.monotonic(), 0))
            time.sleep(wait)
    except KeyboardInterrupt:
        click.echo("\nShutting down scheduler...")
    finally:
        scheduler.shutdown(wait=False)
        click.echo("Scheduler stopped")


@cli.group()
def config():
    """Inspect configuration"""
    pass


@config.command()
def show():
    """Show current configuration.

    Example:
        jobtracker config show
    """
    cfg = TrackerConfig()

    click.echo("\nCurrent Configuration:")
    click.echo(f"  log-level:        {cfg.log_level}")
    click.echo(f"  log-json:         {cfg.log_json}")
    click.echo(f"  stale-after:      {cfg.stale_after_seconds} seconds")
    click.echo(f"  report-interval:  {cfg.report_interval} seconds")
    click.echo()


if __name__ == "__main__":
    cli()
