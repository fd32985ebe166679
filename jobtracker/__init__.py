"""Run tracking for periodically scheduled jobs."""

from .errors import DuplicateJob, JobNotFound, JobTrackerError, RunAlreadyEnded, RunNotFound
from .interceptor import identity_for, track_call, tracked
from .models import JobIdentity, JobSettings, Run, RunFailure, RunStatus, TrackedJob
from .registry import JobRegistry

__all__ = [
    "DuplicateJob",
    "JobIdentity",
    "JobNotFound",
    "JobRegistry",
    "JobSettings",
    "JobTrackerError",
    "Run",
    "RunAlreadyEnded",
    "RunFailure",
    "RunNotFound",
    "RunStatus",
    "TrackedJob",
    "identity_for",
    "track_call",
    "tracked",
]
