from __future__ import annotations

from datetime import timedelta

from pydantic import BaseModel, field_validator


class AgentConfig(BaseModel):
    """Agent configuration loaded from agent.yaml, overridable from the CLI."""

    namespace: str = "default"
    kubeconfig: str | None = None
    log_dir: str = "/log"
    log_level: str = "INFO"
    interval_seconds: float = 15.0
    archive_max_entries: int = 1000
    archive_retention_hours: float = 24.0
    rotation_hours: float = 24.0
    tick_timeout_seconds: float | None = None

    @field_validator("interval_seconds", "archive_retention_hours", "rotation_hours")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be a positive number")
        return v

    @field_validator("archive_max_entries")
    @classmethod
    def validate_max_entries(cls, v: int) -> int:
        if v < 1:
            raise ValueError("'archive_max_entries' must be at least 1")
        return v

    @field_validator("tick_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            raise ValueError("'tick_timeout_seconds' must be positive")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level '{v}'")
        return level

    @property
    def archive_retention(self) -> timedelta:
        return timedelta(hours=self.archive_retention_hours)

    @property
    def rotation_interval(self) -> timedelta:
        return timedelta(hours=self.rotation_hours)
