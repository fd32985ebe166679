"""Runtime configuration read from the environment."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class TrackerConfig(BaseSettings):
    """System configuration."""

    model_config = SettingsConfigDict(env_prefix="JOBTRACKER_", case_sensitive=False)

    log_level: str = Field(default="INFO", description="Logging level")
    log_json: bool = Field(default=False, description="Render logs as JSON lines")
    stale_after_seconds: int = Field(
        default=3600, description="Open runs older than this are reported as stale"
    )
    report_interval: float = Field(
        default=5.0, description="Seconds between status reports of `jobtracker run`"
    )
