"""Prometheus HTTP API client."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any

import httpx

from kcap.domain.models import MetricSample

logger = logging.getLogger(__name__)

DEFAULT_PROMETHEUS_URL = "http://localhost:9090"
_QUERY_PATH = "/api/v1/query"


class PrometheusError(RuntimeError):
    """Prometheus query failed."""


class BackendUnavailableError(PrometheusError):
    """Prometheus could not be reached."""


class BackendResponseError(PrometheusError):
    """Prometheus answered with an error status."""


class MalformedResponseError(PrometheusError):
    """Prometheus payload could not be decoded."""


class EmptyResultError(PrometheusError):
    """Query matched no series."""


@dataclass(frozen=True)
class PrometheusClientConfig:
    """Runtime tuning options for Prometheus calls."""

    timeout_seconds: float = 10.0


def _scalar_from_pair(pair: Any) -> float:
    """Decode a ``[timestamp, "value"]`` pair into a usage value."""
    if not isinstance(pair, list | tuple) or len(pair) != 2:
        raise MalformedResponseError(f"unexpected sample shape: {pair!r}")
    raw = pair[1]
    if isinstance(raw, bool) or not isinstance(raw, str | int | float):
        raise MalformedResponseError(f"unexpected value type: {type(raw).__name__}")
    try:
        value = float(raw)
    except ValueError as exc:
        raise MalformedResponseError(f"non-numeric sample value: {raw!r}") from exc
    if not math.isfinite(value) or value < 0:
        raise MalformedResponseError(f"unusable sample value: {raw!r}")
    return value


class PrometheusClient:
    """Synchronous Prometheus instant-query client."""

    def __init__(
        self,
        base_url: str = DEFAULT_PROMETHEUS_URL,
        config: PrometheusClientConfig | None = None,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Create Prometheus client.

        Parameters
        ----------
        base_url : str
            Prometheus base URL.
        config : PrometheusClientConfig | None
            Runtime tuning options.
        transport : httpx.BaseTransport | None
            Alternative HTTP transport, mainly for tests.
        """
        self.base_url = base_url.rstrip("/")
        self.config = config or PrometheusClientConfig()
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=self.config.timeout_seconds,
            headers={"Accept": "application/json"},
            transport=transport,
        )

    def __enter__(self) -> PrometheusClient:
        return self

    def __exit__(self, exc_type: object, exc: object, tb: object) -> None:
        self.close()

    def close(self) -> None:
        """Close underlying HTTP client."""
        self._client.close()

    def _get_data(self, query: str) -> dict[str, Any]:
        logger.debug("Prometheus query: %s", query)
        try:
            response = self._client.get(_QUERY_PATH, params={"query": query})
        except httpx.HTTPError as exc:
            raise BackendUnavailableError(
                f"Prometheus request to {self.base_url} failed: {exc}"
            ) from exc
        logger.debug("Prometheus response status: %s", response.status_code)

        try:
            payload = response.json()
        except ValueError as exc:
            if response.is_error:
                raise BackendResponseError(
                    f"Prometheus error {response.status_code}: {response.text[:200]}"
                ) from exc
            raise MalformedResponseError("invalid JSON in Prometheus response") from exc
        if not isinstance(payload, dict):
            raise MalformedResponseError("unexpected Prometheus response shape")

        if response.is_error or payload.get("status") != "success":
            detail = payload.get("error") or payload.get("status")
            raise BackendResponseError(
                f"Prometheus error {response.status_code}: {detail}"
            )
        for warning in payload.get("warnings") or []:
            logger.warning("Prometheus warning for %s: %s", query, warning)

        data = payload.get("data")
        if not isinstance(data, dict):
            raise MalformedResponseError("missing data in Prometheus response")
        return data

    def query_vector(self, query: str) -> list[dict[str, Any]]:
        """Run an instant query and return the raw vector result."""
        data = self._get_data(query)
        result = data.get("result")
        if data.get("resultType") != "vector" or not isinstance(result, list):
            raise MalformedResponseError(
                f"expected vector result, got {data.get('resultType')!r}"
            )
        return result

    def execute(self, query: str) -> float:
        """Run an instant query and return the first series' value."""
        data = self._get_data(query)
        result = data.get("result")
        result_type = data.get("resultType")
        if result_type == "scalar":
            return _scalar_from_pair(result)
        if result_type != "vector" or not isinstance(result, list):
            raise MalformedResponseError(f"unsupported result type {result_type!r}")
        if not result:
            raise EmptyResultError("query returned no series")
        first = result[0]
        if not isinstance(first, dict):
            raise MalformedResponseError(f"unexpected series shape: {first!r}")
        return _scalar_from_pair(first.get("value"))

    def sample(self, query: str) -> MetricSample:
        """Run query and return a degraded sample instead of raising."""
        try:
            return MetricSample.ok(self.execute(query))
        except PrometheusError as exc:
            logger.warning("Degraded sample for %s: %s", query, exc)
            return MetricSample.failed(str(exc))
