"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from kcap.domain.models import ContainerSpec, MetricSample, Workload

CONFIG_ENV_VARS = (
    "PROMETHEUS_URL",
    "PROMETHEUS_TIMEOUT_SECONDS",
    "KCAP_TIME_WINDOW",
    "KCAP_CPU_PERCENTILE",
    "KCAP_MEMORY_PERCENTILE",
    "KCAP_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_config_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove config variables, including any a .env file sets during a test."""
    for name in CONFIG_ENV_VARS:
        monkeypatch.setenv(name, "placeholder")
        monkeypatch.delenv(name)


class FakeSampler:
    """Metrics sampler answering from a callable and recording queries."""

    def __init__(self, answer: Callable[[str], MetricSample]) -> None:
        self.answer = answer
        self.queries: list[str] = []
        self.closed = False

    def sample(self, query: str) -> MetricSample:
        self.queries.append(query)
        return self.answer(query)

    def close(self) -> None:
        self.closed = True


def scenario_answer(query: str) -> MetricSample:
    """CPU 0.05/0.12 cores and memory 200/600 MiB (returned as GiB)."""
    is_average = query.startswith("quantile_over_time(0.5,")
    if "container_memory_usage_bytes" in query:
        return MetricSample.ok((200 if is_average else 600) / 1024)
    return MetricSample.ok(0.05 if is_average else 0.12)


@pytest.fixture
def fake_sampler() -> FakeSampler:
    return FakeSampler(scenario_answer)


@pytest.fixture
def workloads() -> list[Workload]:
    return [
        Workload(
            kind="Deployment",
            name="web",
            init_containers=(ContainerSpec(name="migrate"),),
            containers=(
                ContainerSpec(
                    name="api",
                    requests={"cpu": "100m", "memory": "256Mi"},
                    limits={"cpu": "500m", "memory": "512Mi"},
                ),
                ContainerSpec(name="sidecar"),
            ),
        ),
        Workload(
            kind="StatefulSet",
            name="db",
            containers=(ContainerSpec(name="postgres", requests={"cpu": "1"}),),
        ),
    ]
