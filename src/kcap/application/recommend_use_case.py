"""Namespace recommendation use-case."""

import json
import logging
from collections.abc import Callable
from typing import Literal

from rich.console import Console

from kcap.application.recommendation_service import (
    ContainerReportBuilder,
    MetricsSampler,
)
from kcap.application.report_renderer import build_payload, render_text_report
from kcap.application.report_writer import RunResult, write_recommendation_run
from kcap.config import PrometheusConfig
from kcap.domain.policy import (
    NamespacePolicyDefaults,
    recommend_limit_range,
    recommend_namespace_quota,
)
from kcap.domain.promql import validate_object_name
from kcap.infrastructure.prometheus_client import PrometheusClient
from kcap.infrastructure.workload_source import KubectlWorkloadSource, WorkloadSource

logger = logging.getLogger(__name__)

OutputFormat = Literal["text", "json"]


def _default_client(prometheus: PrometheusConfig) -> PrometheusClient:
    return PrometheusClient(prometheus.url, prometheus.client_config)


def execute_recommendation(
    namespace: str,
    *,
    policy: NamespacePolicyDefaults,
    prometheus: PrometheusConfig,
    include_quota: bool = False,
    include_limit_range: bool = False,
    output: OutputFormat = "text",
    workers: int = 1,
    reports_root: str | None = None,
    source: WorkloadSource | None = None,
    client_factory: Callable[[PrometheusConfig], MetricsSampler] | None = None,
    console: Console | None = None,
) -> RunResult | None:
    """Recommend container resources for every workload in namespace.

    Listing failures propagate as ``ObjectSourceError``; metrics failures only
    mark the affected containers as unknown.
    """
    validate_object_name("namespace", namespace)
    console = console or Console()
    workloads = (source or KubectlWorkloadSource()).list_workloads(namespace)

    client = (client_factory or _default_client)(prometheus)
    try:
        builder = ContainerReportBuilder(client, policy, max_workers=workers)
        reports = builder.build_reports(namespace, workloads)
    finally:
        close = getattr(client, "close", None)
        if close is not None:
            close()

    quota = recommend_namespace_quota(namespace, policy) if include_quota else None
    limit_range = recommend_limit_range(policy) if include_limit_range else None
    payload = build_payload(
        namespace,
        reports,
        settings={
            "prometheus_url": prometheus.url,
            "window": policy.window,
            "cpu_percentile": policy.cpu_percentile,
            "memory_percentile": policy.effective_memory_percentile,
        },
        quota=quota,
        limit_range=limit_range,
    )

    if output == "json":
        console.print_json(json.dumps(payload))
    else:
        render_text_report(console, reports, quota=quota, limit_range=limit_range)

    if reports_root is None:
        return None
    run = write_recommendation_run(payload, reports, reports_root=reports_root)
    logger.info("Wrote %d artifacts to %s", len(run.output_files), run.output_dir)
    return run


__all__ = ["execute_recommendation"]
