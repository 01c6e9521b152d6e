"""Recommendation rules for container resources, quotas and limit ranges."""

from dataclasses import dataclass, field

from kcap.domain.models import (
    ContainerUsage,
    LimitRangeRecommendation,
    QuotaRecommendation,
    Recommendation,
    ResourcePair,
)
from kcap.domain.promql import validate_percentile, validate_window
from kcap.domain.quantity import format_cpu, format_memory, parse_memory


@dataclass(frozen=True)
class QuotaDefaults:
    """Static ResourceQuota ceilings; a starting point, not derived from usage."""

    cpu: str = "4"
    memory: str = "8Gi"
    pods: int = 10
    configmaps: int = 10
    secrets: int = 10


@dataclass(frozen=True)
class LimitRangeDefaults:
    """Static LimitRange bounds for containers."""

    min: ResourcePair = ResourcePair(cpu="50m", memory="50Mi")
    max: ResourcePair = ResourcePair(cpu="2", memory="2Gi")
    default: ResourcePair = ResourcePair(cpu="500m", memory="500Mi")
    default_request: ResourcePair = ResourcePair(cpu="100m", memory="100Mi")


@dataclass(frozen=True)
class NamespacePolicyDefaults:
    """Sampling and policy settings for one recommendation run."""

    cpu_percentile: float = 0.99
    memory_percentile: float | None = None
    window: str = "1d"
    quota: QuotaDefaults = field(default_factory=QuotaDefaults)
    limit_range: LimitRangeDefaults = field(default_factory=LimitRangeDefaults)

    def __post_init__(self) -> None:
        validate_percentile(self.cpu_percentile)
        if self.memory_percentile is not None:
            validate_percentile(self.memory_percentile)
        validate_window(self.window)

    @property
    def effective_memory_percentile(self) -> float:
        """Return memory percentile, falling back to the CPU percentile."""
        if self.memory_percentile is None:
            return self.cpu_percentile
        return self.memory_percentile


def _cpu_or_none(cores: float | None) -> str | None:
    return None if cores is None else format_cpu(cores)


def _memory_or_none(mebibytes: float | None) -> str | None:
    return None if mebibytes is None else format_memory(mebibytes)


def recommend(usage: ContainerUsage) -> Recommendation:
    """Recommend requests from the median and limits from the tail percentile."""
    return Recommendation(
        requested_cpu=_cpu_or_none(usage.cpu.average),
        requested_memory=_memory_or_none(usage.memory.average),
        limit_cpu=_cpu_or_none(usage.cpu.percentile),
        limit_memory=_memory_or_none(usage.memory.percentile),
    )


def recommend_namespace_quota(
    namespace: str, defaults: NamespacePolicyDefaults | None = None
) -> QuotaRecommendation:
    """Return static namespace ResourceQuota ceilings."""
    quota = (defaults or NamespacePolicyDefaults()).quota
    return QuotaRecommendation(
        namespace=namespace,
        cpu=quota.cpu,
        memory=quota.memory,
        pods=quota.pods,
        configmaps=quota.configmaps,
        secrets=quota.secrets,
    )


def recommend_limit_range(
    defaults: NamespacePolicyDefaults | None = None,
) -> LimitRangeRecommendation:
    """Return LimitRange bounds.

    ``max.memory`` is the largest of all four configured memory bounds, so a
    default or defaultRequest above the nominal max still fits.
    """
    bounds = (defaults or NamespacePolicyDefaults()).limit_range
    max_memory_mib = max(
        parse_memory(bounds.min.memory),
        parse_memory(bounds.max.memory),
        parse_memory(bounds.default.memory),
        parse_memory(bounds.default_request.memory),
    )
    return LimitRangeRecommendation(
        min=bounds.min,
        max=ResourcePair(
            cpu=bounds.max.cpu,
            memory=format_memory(max_memory_mib, round_up=True),
        ),
        default=bounds.default,
        default_request=bounds.default_request,
    )
