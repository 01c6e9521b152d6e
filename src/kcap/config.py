"""Application configuration and environment loading."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import urlparse

from dotenv import load_dotenv

from kcap.domain.policy import NamespacePolicyDefaults
from kcap.infrastructure.prometheus_client import (
    DEFAULT_PROMETHEUS_URL,
    PrometheusClientConfig,
)


@dataclass(frozen=True)
class PrometheusConfig:
    """Metrics backend connection settings."""

    url: str = DEFAULT_PROMETHEUS_URL
    timeout_seconds: float = 10.0

    @property
    def client_config(self) -> PrometheusClientConfig:
        """Return runtime options for the Prometheus client."""
        return PrometheusClientConfig(timeout_seconds=self.timeout_seconds)


@dataclass(frozen=True)
class AppConfig:
    """Top-level config resolved once per invocation."""

    prometheus: PrometheusConfig = field(default_factory=PrometheusConfig)
    policy: NamespacePolicyDefaults = field(default_factory=NamespacePolicyDefaults)
    log_level: str = "WARNING"

    @property
    def prometheus_url(self) -> str:
        """Return Prometheus base URL."""
        return self.prometheus.url


def _validate_url(name: str, value: str) -> str:
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f"{name} is not a valid http(s) URL: {value!r}")
    return value


def _env_float(name: str, default: float | None) -> float | None:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc


def load_config(env_path: Path = Path(".env")) -> AppConfig:
    """Load config from environment and optional .env file."""
    load_dotenv(env_path, override=False)

    timeout = _env_float("PROMETHEUS_TIMEOUT_SECONDS", 10.0)
    if timeout is None or timeout <= 0:
        raise ValueError(f"PROMETHEUS_TIMEOUT_SECONDS must be positive, got {timeout}")
    cpu_percentile = _env_float("KCAP_CPU_PERCENTILE", 0.99)

    return AppConfig(
        prometheus=PrometheusConfig(
            url=_validate_url(
                "PROMETHEUS_URL",
                os.getenv("PROMETHEUS_URL") or DEFAULT_PROMETHEUS_URL,
            ),
            timeout_seconds=timeout,
        ),
        policy=NamespacePolicyDefaults(
            cpu_percentile=0.99 if cpu_percentile is None else cpu_percentile,
            memory_percentile=_env_float("KCAP_MEMORY_PERCENTILE", None),
            window=os.getenv("KCAP_TIME_WINDOW") or "1d",
        ),
        log_level=(os.getenv("KCAP_LOG_LEVEL") or "WARNING").upper(),
    )
