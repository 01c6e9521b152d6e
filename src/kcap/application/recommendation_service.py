"""Per-container usage sampling and recommendation pipeline."""

import logging
from collections.abc import Iterable, Iterator
from concurrent.futures import ThreadPoolExecutor
from typing import Protocol

from kcap.domain.models import (
    ContainerReport,
    ContainerSpec,
    ContainerType,
    ContainerUsage,
    MetricSample,
    ResourcePair,
    ResourceSample,
    Workload,
)
from kcap.domain.policy import NamespacePolicyDefaults, recommend
from kcap.domain.promql import AVERAGE_PERCENTILE, MetricKind, build_percentile_query
from kcap.domain.quantity import MIB_PER_GIB

logger = logging.getLogger(__name__)

_NONE = "<none>"


class MetricsSampler(Protocol):
    """Anything that turns a query into a possibly-degraded sample."""

    def sample(self, query: str) -> MetricSample: ...


def _declared(resources: dict[str, str]) -> ResourcePair:
    return ResourcePair(
        cpu=resources.get("cpu", _NONE),
        memory=resources.get("memory", _NONE),
    )


def _iter_containers(
    workloads: Iterable[Workload],
) -> Iterator[tuple[Workload, ContainerSpec, ContainerType]]:
    for workload in workloads:
        for spec in workload.init_containers:
            yield workload, spec, ContainerType.INIT_CONTAINER
        for spec in workload.containers:
            yield workload, spec, ContainerType.CONTAINER


class ContainerReportBuilder:
    """Build recommendation reports for workload containers."""

    def __init__(
        self,
        client: MetricsSampler,
        defaults: NamespacePolicyDefaults,
        *,
        max_workers: int = 1,
    ) -> None:
        if max_workers < 1:
            raise ValueError(f"max_workers must be positive, got {max_workers}")
        self.client = client
        self.defaults = defaults
        self.max_workers = max_workers

    def _sample_pair(
        self,
        namespace: str,
        container: str,
        kind: MetricKind,
        percentile: float,
        reasons: list[str],
        scale: float = 1.0,
    ) -> ResourceSample:
        values: list[float | None] = []
        for label, p in (("average", AVERAGE_PERCENTILE), ("percentile", percentile)):
            try:
                query = build_percentile_query(
                    namespace, container, kind, p, self.defaults.window
                )
            except ValueError as exc:
                sample = MetricSample.failed(str(exc))
            else:
                sample = self.client.sample(query)
            if sample.degraded:
                reasons.append(f"{kind.value} {label}: {sample.reason}")
                values.append(None)
            else:
                values.append(sample.value * scale)
        return ResourceSample(average=values[0], percentile=values[1])

    def collect_usage(
        self,
        namespace: str,
        spec: ContainerSpec,
        container_type: ContainerType = ContainerType.CONTAINER,
    ) -> ContainerUsage:
        """Sample median and tail usage for one container."""
        reasons: list[str] = []
        cpu = self._sample_pair(
            namespace,
            spec.name,
            MetricKind.CPU_RATE,
            self.defaults.cpu_percentile,
            reasons,
        )
        # memory queries return GiB
        memory = self._sample_pair(
            namespace,
            spec.name,
            MetricKind.MEMORY_BYTES,
            self.defaults.effective_memory_percentile,
            reasons,
            scale=MIB_PER_GIB,
        )
        return ContainerUsage(
            namespace=namespace,
            container_name=spec.name,
            container_type=container_type,
            cpu=cpu,
            memory=memory,
            current_requests=_declared(spec.requests),
            current_limits=_declared(spec.limits),
            degraded_reasons=tuple(reasons),
        )

    def build_container_report(
        self,
        namespace: str,
        workload: Workload,
        spec: ContainerSpec,
        container_type: ContainerType,
    ) -> ContainerReport:
        """Sample one container and attach its recommendation."""
        usage = self.collect_usage(namespace, spec, container_type)
        if usage.degraded:
            logger.warning(
                "Recommendation for %s/%s container %s is incomplete",
                workload.kind,
                workload.name,
                spec.name,
            )
        return ContainerReport(
            workload_kind=workload.kind,
            workload_name=workload.name,
            usage=usage,
            recommendation=recommend(usage),
        )

    def build_reports(
        self, namespace: str, workloads: Iterable[Workload]
    ) -> list[ContainerReport]:
        """Build reports for every init container and container, in order."""
        targets = list(_iter_containers(workloads))
        logger.info("Sampling %d containers in %s", len(targets), namespace)
        if self.max_workers == 1 or len(targets) <= 1:
            return [
                self.build_container_report(namespace, workload, spec, ctype)
                for workload, spec, ctype in targets
            ]
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            return list(
                pool.map(
                    lambda target: self.build_container_report(namespace, *target),
                    targets,
                )
            )
