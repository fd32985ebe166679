"""In-memory registry of tracked jobs and their runs."""

import uuid
from datetime import timedelta
from threading import RLock
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple, Union

from .errors import DuplicateJob, JobNotFound
from .logging import get_logger
from .models import JobIdentity, JobSettings, Run, RunFailure, TrackedJob, utc_now

logger = get_logger(__name__)

Dispatcher = Callable[[JobIdentity], object]


class JobRegistry:
    """Tracks scheduled jobs and the runs they go through.

    Every public method takes the same lock. Queries never raise and return
    copies; lifecycle methods raise ``JobNotFound``/``RunNotFound``/
    ``RunAlreadyEnded``.
    """

    def __init__(self, dispatcher: Optional[Dispatcher] = None):
        self.dispatcher = dispatcher
        self._jobs: Dict[JobIdentity, TrackedJob] = {}
        self._triggering: Set[JobIdentity] = set()
        self._lock = RLock()

    # Ingestion

    def ingest(self, pairs: Iterable[Tuple[JobIdentity, JobSettings]]) -> None:
        """Replace the tracked jobs with one fresh job per (identity, settings) pair."""
        jobs: Dict[JobIdentity, TrackedJob] = {}
        for identity, settings in pairs:
            if identity in jobs:
                raise DuplicateJob(f"Job {identity} discovered more than once")
            jobs[identity] = TrackedJob(identity=identity, settings=settings)

        with self._lock:
            replaced = len(self._jobs)
            self._jobs = jobs
            self._triggering.clear()

        if replaced:
            logger.warning("Tracked jobs replaced", previous=replaced, jobs=len(jobs))
        else:
            logger.info("Tracked jobs ingested", jobs=len(jobs))

    # Run lifecycle

    def run_started(self, identity: JobIdentity) -> uuid.UUID:
        """Open a new run for the job and return its id."""
        with self._lock:
            job = self._require(identity)
            run = Run()
            job.add_run(run)
        logger.debug("Run started", job=str(identity), run_id=str(run.id))
        return run.id

    def run_ended(
        self,
        run_id: Union[uuid.UUID, str],
        identity: JobIdentity,
        failure: Optional[Union[BaseException, RunFailure]] = None,
    ) -> None:
        """Close a run, recording the failure if there was one."""
        if isinstance(failure, BaseException):
            failure = RunFailure.from_exception(failure)

        with self._lock:
            job = self._require(identity)
            run = job.end_run(run_id, failure)
            duration = (run.ended_at - run.started_at).total_seconds()

        if failure is None:
            logger.info("Run completed", job=str(identity), run_id=str(run_id), duration_seconds=duration)
        else:
            logger.warning(
                "Run failed",
                job=str(identity),
                run_id=str(run_id),
                duration_seconds=duration,
                error_type=failure.type,
                error=failure.message,
            )

    # Trigger guard

    def trigger_now(self, identity: JobIdentity) -> bool:
        """Run the job right away unless a run of it is in flight.

        Returns False when skipped. The in-flight check and the trigger mark
        are taken together under the lock; dispatching happens outside it
        since the job body reports back through ``run_started``.
        """
        with self._lock:
            job = self._require(identity)
            if self.dispatcher is None:
                raise JobNotFound(f"No executor registered for job {identity}")
            if job.is_running or identity in self._triggering:
                logger.info("Trigger skipped, job already running", job=str(identity))
                return False
            self._triggering.add(identity)

        try:
            logger.info("Triggering job", job=str(identity))
            self.dispatcher(identity)
        finally:
            with self._lock:
                self._triggering.discard(identity)
        return True

    # Queries

    def all_jobs(self) -> List[TrackedJob]:
        with self._lock:
            return [job.model_copy(deep=True) for job in self._jobs.values()]

    def find_jobs_by_type(self, type_name: str) -> List[TrackedJob]:
        """All jobs declared by the given owning type, in discovery order."""
        with self._lock:
            return [
                job.model_copy(deep=True)
                for identity, job in self._jobs.items()
                if identity.type_name == type_name
            ]

    def find_job(self, type_name: str, method_name: str) -> Optional[TrackedJob]:
        with self._lock:
            job = self._lookup(type_name, method_name)
            return None if job is None else job.model_copy(deep=True)

    def find_run(self, type_name: str, method_name: str, run_id: Union[uuid.UUID, str]) -> Optional[Run]:
        with self._lock:
            job = self._lookup(type_name, method_name)
            if job is None:
                return None
            run = job.get_run(run_id)
            return None if run is None else run.model_copy(deep=True)

    def find_stale_runs(self, older_than: timedelta) -> List[Tuple[JobIdentity, Run]]:
        """Open runs that started longer ago than ``older_than``."""
        cutoff = utc_now() - older_than
        with self._lock:
            return [
                (identity, run.model_copy(deep=True))
                for identity, job in self._jobs.items()
                for run in job.runs
                if run.is_open and run.started_at < cutoff
            ]

    def _lookup(self, type_name: str, method_name: str) -> Optional[TrackedJob]:
        return self._jobs.get(JobIdentity(type_name=type_name, method_name=method_name))

    def _require(self, identity: JobIdentity) -> TrackedJob:
        job = self._jobs.get(identity)
        if job is None:
            raise JobNotFound(f"Job {identity} is not tracked")
        return job
