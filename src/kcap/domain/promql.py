"""PromQL expressions used to sample container usage."""

import re
from enum import Enum

AVERAGE_PERCENTILE = 0.5

CPU_USAGE_SERIES = (
    "node_namespace_pod_container:container_cpu_usage_seconds_total:sum_irate"
)
MEMORY_USAGE_SERIES = "container_memory_usage_bytes"
_BYTES_IN_GIB_EXPR = "(1024 * 1024 * 1024)"

# Kubernetes object names (RFC 1123 subdomain); safe inside a quoted label value.
_OBJECT_NAME_RE = re.compile(r"^[a-z0-9]([-a-z0-9.]*[a-z0-9])?$")
_DURATION_RE = re.compile(r"^(\d+(ms|s|m|h|d|w|y))+$")


class MetricKind(Enum):
    """Usage metric sampled per container."""

    CPU_RATE = "cpu"
    MEMORY_BYTES = "memory"


def validate_object_name(label: str, value: str) -> str:
    """Return value unchanged if it is a valid Kubernetes object name."""
    if len(value) > 253 or not _OBJECT_NAME_RE.match(value):
        raise ValueError(f"invalid {label} name: {value!r}")
    return value


def validate_window(window: str) -> str:
    """Return window unchanged if it is a Prometheus duration like ``1h30m``."""
    if not _DURATION_RE.match(window):
        raise ValueError(f"invalid time window: {window!r} (expected e.g. 30m, 1d)")
    return window


def validate_percentile(percentile: float) -> float:
    """Return percentile unchanged if it lies within [0, 1]."""
    if not 0.0 <= percentile <= 1.0:
        raise ValueError(f"percentile must be within [0, 1], got {percentile}")
    return percentile


def build_percentile_query(
    namespace: str,
    container: str,
    kind: MetricKind,
    percentile: float,
    window: str,
) -> str:
    """Build a ``quantile_over_time`` query for one container.

    CPU queries return cores; memory queries return GiB.
    """
    validate_object_name("namespace", namespace)
    validate_object_name("container", container)
    validate_percentile(percentile)
    validate_window(window)

    selector = f'namespace="{namespace}", container="{container}"'
    if kind is MetricKind.CPU_RATE:
        return (
            f"quantile_over_time({percentile:g}, "
            f"{CPU_USAGE_SERIES}{{{selector}}}[{window}])"
        )
    return (
        f"quantile_over_time({percentile:g}, "
        f"{MEMORY_USAGE_SERIES}{{{selector}}}[{window}]) / {_BYTES_IN_GIB_EXPR}"
    )


def build_namespace_cpu_query(namespace: str) -> str:
    """Build the total CPU usage rate query for a namespace."""
    validate_object_name("namespace", namespace)
    return f'sum(rate(container_cpu_usage_seconds_total{{namespace="{namespace}"}}[5m]))'
