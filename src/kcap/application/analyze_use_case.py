"""Namespace CPU usage analysis use-case."""

import math

from rich.console import Console

from kcap.config import PrometheusConfig
from kcap.domain.promql import build_namespace_cpu_query
from kcap.domain.quantity import format_cpu
from kcap.infrastructure.prometheus_client import PrometheusClient, PrometheusError


def execute_namespace_analysis(
    namespace: str,
    *,
    prometheus: PrometheusConfig,
    client: PrometheusClient | None = None,
    console: Console | None = None,
) -> float:
    """Print and return the namespace's current CPU usage in cores.

    Unlike recommendations, a backend failure here is raised: there is
    nothing else to report.
    """
    console = console or Console()
    query = build_namespace_cpu_query(namespace)
    owned = client is None
    client = client or PrometheusClient(prometheus.url, prometheus.client_config)
    try:
        result = client.query_vector(query)
    finally:
        if owned:
            client.close()

    if not result:
        console.print(f"Analysis for namespace '{namespace}': no CPU usage data")
        return 0.0
    try:
        cores = float(result[0]["value"][1])
    except (KeyError, IndexError, TypeError, ValueError) as exc:
        raise PrometheusError(f"unexpected CPU usage sample: {result[0]!r}") from exc
    if not math.isfinite(cores):
        raise PrometheusError(f"unusable CPU usage sample: {cores}")

    console.print(
        f"Analysis for namespace '{namespace}': CPU usage {cores:.4f} cores "
        f"({format_cpu(max(cores, 0.0))})",
        markup=False,
    )
    return cores
