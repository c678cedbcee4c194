"""Pydantic models for entries of the ``metrics.k8s.io/v1beta1`` pod metrics list."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ResourceUsage(BaseModel):
    cpu: str = "0"
    memory: str = "0"


class ContainerUsage(BaseModel):
    name: str
    usage: ResourceUsage = ResourceUsage()


class MetricsMetadata(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str
    namespace: str = ""


class PodMetrics(BaseModel):
    """A single pod's usage sample."""

    model_config = ConfigDict(extra="ignore")

    metadata: MetricsMetadata
    timestamp: datetime
    window: str | None = None
    containers: list[ContainerUsage] = Field(default_factory=list)

    @field_validator("timestamp")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def namespace(self) -> str:
        return self.metadata.namespace

    def to_payload(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "namespace": self.namespace,
            "timestamp": self.timestamp.isoformat(),
            "window": self.window,
            "containers": [c.model_dump() for c in self.containers],
        }
