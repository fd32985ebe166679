"""Data models for tracked jobs and their runs."""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import RunAlreadyEnded, RunNotFound


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RunStatus(str, Enum):
    """Run lifecycle states."""
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class JobIdentity(BaseModel):
    """(owning type, method) pair identifying one scheduled job."""
    model_config = ConfigDict(frozen=True)

    type_name: str
    method_name: str

    def __str__(self) -> str:
        return f"{self.type_name}.{self.method_name}"


class JobSettings(BaseModel):
    """Normalized schedule descriptor.

    Empty strings and negative numbers mean "unset" and are stored as None.
    Numeric values are milliseconds.
    """
    model_config = ConfigDict(frozen=True)

    cron: Optional[str] = None
    fixed_rate: Optional[int] = None
    fixed_rate_string: Optional[str] = None
    initial_delay: Optional[int] = None
    initial_delay_string: Optional[str] = None
    fixed_delay: Optional[int] = None
    fixed_delay_string: Optional[str] = None

    @field_validator("cron", "fixed_rate_string", "initial_delay_string", "fixed_delay_string", mode="before")
    @classmethod
    def _none_if_empty(cls, value):
        if value == "":
            return None
        return value

    @field_validator("fixed_rate", "initial_delay", "fixed_delay", mode="before")
    @classmethod
    def _none_if_negative(cls, value):
        if isinstance(value, (int, float)) and not isinstance(value, bool) and value < 0:
            return None
        return value

    def describe(self) -> str:
        """Short human-readable schedule, e.g. for status tables."""
        if self.cron:
            return f"cron {self.cron}"
        for label, number, text in (
            ("every", self.fixed_rate, self.fixed_rate_string),
            ("delay", self.fixed_delay, self.fixed_delay_string),
        ):
            if number is not None:
                return f"{label} {number}ms"
            if text is not None:
                return f"{label} {text}"
        return "-"


class RunFailure(BaseModel):
    """Error a run ended with."""
    model_config = ConfigDict(frozen=True)

    type: str
    message: str

    @classmethod
    def from_exception(cls, exc: BaseException) -> "RunFailure":
        exc_type = type(exc)
        return cls(type=f"{exc_type.__module__}.{exc_type.__qualname__}", message=str(exc))


class Run(BaseModel):
    """One execution attempt of a tracked job."""
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    started_at: datetime = Field(default_factory=utc_now)
    ended_at: Optional[datetime] = None
    failure: Optional[RunFailure] = None

    @property
    def is_open(self) -> bool:
        return self.ended_at is None

    @property
    def status(self) -> RunStatus:
        if self.ended_at is None:
            return RunStatus.RUNNING
        if self.failure is not None:
            return RunStatus.FAILED
        return RunStatus.SUCCEEDED

    def close(self, failure: Optional[RunFailure] = None) -> None:
        """Set the end timestamp. A run can only be closed once."""
        if self.ended_at is not None:
            raise RunAlreadyEnded(f"Run {self.id} already ended at {self.ended_at.isoformat()}")
        # never earlier than the start, even if the wall clock went backwards
        self.ended_at = max(utc_now(), self.started_at)
        self.failure = failure


class TrackedJob(BaseModel):
    """A job's identity, schedule and run history (append-only)."""
    identity: JobIdentity
    settings: JobSettings = Field(default_factory=JobSettings)
    runs: List[Run] = Field(default_factory=list)

    @property
    def latest_run(self) -> Optional[Run]:
        return self.runs[-1] if self.runs else None

    @property
    def is_running(self) -> bool:
        latest = self.latest_run
        return latest is not None and latest.is_open

    def add_run(self, run: Run) -> None:
        self.runs.append(run)

    def get_run(self, run_id: Union[uuid.UUID, str]) -> Optional[Run]:
        wanted = str(run_id)
        for run in self.runs:
            if str(run.id) == wanted:
                return run
        return None

    def end_run(self, run_id: Union[uuid.UUID, str], failure: Optional[RunFailure] = None) -> Run:
        run = self.get_run(run_id)
        if run is None:
            raise RunNotFound(f"Run {run_id} not found for job {self.identity}")
        run.close(failure)
        return run
