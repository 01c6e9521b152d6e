"""Data models for container usage sampling and recommendations."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ContainerType(str, Enum):
    """Position of a container in a pod template."""

    CONTAINER = "Container"
    INIT_CONTAINER = "InitContainer"


@dataclass(frozen=True)
class MetricSample:
    """Result of one metric query.

    ``reason`` is None for a real measurement. Otherwise the sample is
    degraded and ``value`` is a 0.0 placeholder, not a measured zero.
    """

    value: float
    reason: str | None = None

    @property
    def degraded(self) -> bool:
        """Return whether the backend could not provide this value."""
        return self.reason is not None

    @classmethod
    def ok(cls, value: float) -> MetricSample:
        return cls(value=value)

    @classmethod
    def failed(cls, reason: str) -> MetricSample:
        return cls(value=0.0, reason=reason)

    def or_none(self) -> float | None:
        """Return the value, or None when degraded."""
        return None if self.degraded else self.value


@dataclass(frozen=True)
class ResourceSample:
    """Median and tail-percentile usage; None marks an unknown value."""

    average: float | None
    percentile: float | None


@dataclass(frozen=True)
class ContainerSpec:
    """Container as declared in a workload pod template."""

    name: str
    requests: dict[str, str] = field(default_factory=dict)
    limits: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_manifest(cls, raw: dict[str, Any]) -> ContainerSpec:
        resources = raw.get("resources") or {}
        return cls(
            name=raw["name"],
            requests={k: str(v) for k, v in (resources.get("requests") or {}).items()},
            limits={k: str(v) for k, v in (resources.get("limits") or {}).items()},
        )


@dataclass(frozen=True)
class Workload:
    """Deployment or StatefulSet with its ordered pod template containers."""

    kind: str
    name: str
    init_containers: tuple[ContainerSpec, ...] = ()
    containers: tuple[ContainerSpec, ...] = ()


@dataclass(frozen=True)
class ResourcePair:
    """CPU and memory quantity strings."""

    cpu: str
    memory: str


@dataclass(frozen=True)
class ContainerUsage:
    """Sampled usage (CPU cores, memory MiB) and declared resources."""

    namespace: str
    container_name: str
    container_type: ContainerType
    cpu: ResourceSample
    memory: ResourceSample
    current_requests: ResourcePair = ResourcePair("<none>", "<none>")
    current_limits: ResourcePair = ResourcePair("<none>", "<none>")
    degraded_reasons: tuple[str, ...] = ()

    @property
    def degraded(self) -> bool:
        """Return whether any sample for this container is unknown."""
        return bool(self.degraded_reasons)


@dataclass(frozen=True)
class Recommendation:
    """Recommended requests and limits; None means unknown."""

    requested_cpu: str | None
    requested_memory: str | None
    limit_cpu: str | None
    limit_memory: str | None


@dataclass(frozen=True)
class QuotaRecommendation:
    """Namespace-wide ResourceQuota ``hard`` values."""

    namespace: str
    cpu: str
    memory: str
    pods: int
    configmaps: int
    secrets: int


@dataclass(frozen=True)
class LimitRangeRecommendation:
    """Container LimitRange bounds."""

    min: ResourcePair
    max: ResourcePair
    default: ResourcePair
    default_request: ResourcePair


@dataclass(frozen=True)
class ContainerReport:
    """Per-container report record."""

    workload_kind: str
    workload_name: str
    usage: ContainerUsage
    recommendation: Recommendation
