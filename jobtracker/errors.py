"""Errors raised by the job registry's lifecycle operations."""


class JobTrackerError(Exception):
    """Base error for jobtracker."""


class JobNotFound(JobTrackerError, LookupError):
    """No tracked job (or no executable) matches the identity."""


class RunNotFound(JobTrackerError, LookupError):
    """The run id does not exist under the given job."""


class RunAlreadyEnded(JobTrackerError, ValueError):
    """The run was already closed."""


class DuplicateJob(JobTrackerError, ValueError):
    """Two discovered jobs share one identity."""
