"""Render recommendation reports as text, rich tables or JSON payloads."""

from dataclasses import asdict
from typing import Any

from rich import box
from rich.console import Console
from rich.table import Table

from kcap.domain.models import (
    ContainerReport,
    LimitRangeRecommendation,
    QuotaRecommendation,
)

UNKNOWN = "unknown"


def _show(value: str | None) -> str:
    return UNKNOWN if value is None else value


def report_to_row(report: ContainerReport) -> dict[str, Any]:
    """Flatten a container report into one table row."""
    usage = report.usage
    rec = report.recommendation
    return {
        "namespace": usage.namespace,
        "workload_kind": report.workload_kind,
        "workload": report.workload_name,
        "container_type": usage.container_type.value,
        "container": usage.container_name,
        "cpu_request_current": usage.current_requests.cpu,
        "cpu_limit_current": usage.current_limits.cpu,
        "memory_request_current": usage.current_requests.memory,
        "memory_limit_current": usage.current_limits.memory,
        "cpu_avg_cores": usage.cpu.average,
        "cpu_pct_cores": usage.cpu.percentile,
        "memory_avg_mib": usage.memory.average,
        "memory_pct_mib": usage.memory.percentile,
        "cpu_request_recommended": _show(rec.requested_cpu),
        "cpu_limit_recommended": _show(rec.limit_cpu),
        "memory_request_recommended": _show(rec.requested_memory),
        "memory_limit_recommended": _show(rec.limit_memory),
        "degraded": usage.degraded,
        "degraded_reasons": "; ".join(usage.degraded_reasons),
    }


def build_payload(
    namespace: str,
    reports: list[ContainerReport],
    *,
    settings: dict[str, Any],
    quota: QuotaRecommendation | None = None,
    limit_range: LimitRangeRecommendation | None = None,
) -> dict[str, Any]:
    """Build the machine-readable recommendation document."""
    containers = []
    for report in reports:
        usage = report.usage
        containers.append(
            {
                "workload": {"kind": report.workload_kind, "name": report.workload_name},
                "container": {
                    "name": usage.container_name,
                    "type": usage.container_type.value,
                },
                "current": {
                    "requests": asdict(usage.current_requests),
                    "limits": asdict(usage.current_limits),
                },
                "usage": {"cpu": asdict(usage.cpu), "memory_mib": asdict(usage.memory)},
                "recommended": {
                    "requests": {
                        "cpu": report.recommendation.requested_cpu,
                        "memory": report.recommendation.requested_memory,
                    },
                    "limits": {
                        "cpu": report.recommendation.limit_cpu,
                        "memory": report.recommendation.limit_memory,
                    },
                },
                "degraded": list(usage.degraded_reasons),
            }
        )
    payload: dict[str, Any] = {
        "namespace": namespace,
        "settings": settings,
        "containers": containers,
    }
    if quota is not None:
        payload["resource_quota"] = {
            "hard": {k: v for k, v in asdict(quota).items() if k != "namespace"}
        }
    if limit_range is not None:
        payload["limit_range"] = {
            "min": asdict(limit_range.min),
            "max": asdict(limit_range.max),
            "default": asdict(limit_range.default),
            "defaultRequest": asdict(limit_range.default_request),
        }
    return payload


def _container_lines(report: ContainerReport) -> list[str]:
    usage = report.usage
    rec = report.recommendation
    lines = [
        f"  {usage.container_type.value}: {usage.container_name}",
        f"    Requests: CPU={usage.current_requests.cpu}, "
        f"Memory={usage.current_requests.memory}",
        f"    Limits:   CPU={usage.current_limits.cpu}, "
        f"Memory={usage.current_limits.memory}",
        "    Recommended resources:",
        "        limits:",
        f"          cpu: {_show(rec.limit_cpu)}",
        f"          memory: {_show(rec.limit_memory)}",
        "        requests:",
        f"          cpu: {_show(rec.requested_cpu)}",
        f"          memory: {_show(rec.requested_memory)}",
    ]
    lines.extend(f"    ! {reason}" for reason in usage.degraded_reasons)
    return lines


def format_text_report(
    reports: list[ContainerReport],
    *,
    quota: QuotaRecommendation | None = None,
    limit_range: LimitRangeRecommendation | None = None,
) -> str:
    """Return the manifest-style text report."""
    lines: list[str] = []
    current: tuple[str, str] | None = None
    for report in reports:
        key = (report.workload_kind, report.workload_name)
        if key != current:
            lines.append(f"{report.workload_kind}: {report.workload_name}")
            current = key
        lines.extend(_container_lines(report))

    if quota is not None:
        lines.extend(
            [
                "Recommended Resource Quotas:",
                "  hard:",
                f"    cpu: {quota.cpu}",
                f"    memory: {quota.memory}",
                f"    pods: {quota.pods}",
                f"    configmaps: {quota.configmaps}",
                f"    secrets: {quota.secrets}",
            ]
        )
    if limit_range is not None:
        lines.extend(["Recommended Limit Ranges:", "  limits:"])
        for label, pair in (
            ("min", limit_range.min),
            ("max", limit_range.max),
            ("default", limit_range.default),
            ("defaultRequest", limit_range.default_request),
        ):
            lines.extend(
                [f"    {label}:", f"      cpu: {pair.cpu}", f"      memory: {pair.memory}"]
            )
    return "\n".join(lines)


def build_summary_table(reports: list[ContainerReport]) -> Table:
    """Return a compact rich table of current vs recommended values."""
    table = Table(title="Recommendations", expand=True, box=box.SIMPLE_HEAVY)
    for header in ("workload", "container", "cpu req", "cpu lim", "mem req", "mem lim"):
        table.add_column(header, overflow="fold")
    for report in reports:
        usage = report.usage
        rec = report.recommendation
        style = "yellow" if usage.degraded else None
        table.add_row(
            f"{report.workload_kind}/{report.workload_name}",
            usage.container_name,
            f"{usage.current_requests.cpu} -> {_show(rec.requested_cpu)}",
            f"{usage.current_limits.cpu} -> {_show(rec.limit_cpu)}",
            f"{usage.current_requests.memory} -> {_show(rec.requested_memory)}",
            f"{usage.current_limits.memory} -> {_show(rec.limit_memory)}",
            style=style,
        )
    return table


def render_text_report(
    console: Console,
    reports: list[ContainerReport],
    *,
    quota: QuotaRecommendation | None = None,
    limit_range: LimitRangeRecommendation | None = None,
) -> None:
    """Print the text report followed by a summary table."""
    text = format_text_report(reports, quota=quota, limit_range=limit_range)
    if text:
        console.print(text, markup=False, highlight=False)
    if reports:
        console.print(build_summary_table(reports))
    else:
        console.print("[dim]No Deployments or StatefulSets found.[/dim]")
    degraded = sum(1 for report in reports if report.usage.degraded)
    if degraded:
        console.print(
            f"[yellow]{degraded} container(s) have unknown values: "
            "metrics backend did not return usable samples.[/yellow]"
        )
