"""APScheduler integration: job discovery, tracking and manual dispatch."""

from typing import Dict, List, Tuple

from apscheduler.schedulers.base import BaseScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from .errors import JobNotFound
from .interceptor import identity_for, tracked
from .logging import get_logger
from .models import JobIdentity, JobSettings
from .registry import JobRegistry

logger = get_logger(__name__)

# second minute hour day-of-month month day-of-week
CRON_FIELDS = ("second", "minute", "hour", "day", "month", "day_of_week")


def settings_for_trigger(trigger) -> JobSettings:
    """Translate an APScheduler trigger into a schedule descriptor."""
    if isinstance(trigger, CronTrigger):
        fields = {field.name: str(field) for field in trigger.fields}
        return JobSettings(cron=" ".join(fields.get(name, "*") for name in CRON_FIELDS))
    if isinstance(trigger, IntervalTrigger):
        return JobSettings(fixed_rate=int(trigger.interval.total_seconds() * 1000))
    return JobSettings()


def job_identity(job) -> JobIdentity:
    """Identity of a scheduler job; nameless callables (lambdas) use the job id."""
    identity = identity_for(job.func)
    if identity.method_name.startswith("<"):
        return JobIdentity(type_name=identity.type_name, method_name=job.id)
    return identity


def discover_jobs(scheduler: BaseScheduler) -> List[Tuple[JobIdentity, JobSettings]]:
    """List (identity, settings) for every job known to the scheduler."""
    return [(job_identity(job), settings_for_trigger(job.trigger)) for job in scheduler.get_jobs()]


class SchedulerDispatcher:
    """Runs a scheduler job's (tracked) function in the calling thread."""

    def __init__(self, scheduler: BaseScheduler, job_ids: Dict[JobIdentity, str]):
        self.scheduler = scheduler
        self.job_ids = job_ids

    def __call__(self, identity: JobIdentity):
        job_id = self.job_ids.get(identity)
        job = self.scheduler.get_job(job_id) if job_id is not None else None
        if job is None:
            raise JobNotFound(f"No scheduled job registered for {identity}")
        return job.func(*job.args, **job.kwargs)


def install_tracking(scheduler: BaseScheduler, registry: JobRegistry) -> SchedulerDispatcher:
    """Ingest the scheduler's jobs into the registry and wrap their functions.

    Call before ``scheduler.start()``. The returned dispatcher is also set as
    the registry's dispatcher so ``registry.trigger_now`` works.
    """
    jobs = scheduler.get_jobs()
    registry.ingest(discover_jobs(scheduler))

    job_ids: Dict[JobIdentity, str] = {}
    for job in jobs:
        identity = job_identity(job)
        scheduler.modify_job(job.id, func=tracked(registry, identity)(job.func))
        job_ids[identity] = job.id
        logger.debug("Tracking scheduled job", job=str(identity), job_id=job.id)

    dispatcher = SchedulerDispatcher(scheduler, job_ids)
    registry.dispatcher = dispatcher
    return dispatcher
