"""Read Deployments and StatefulSets from the cluster."""

import logging
from collections.abc import Callable
from typing import Any, Protocol

from kcap.domain.models import ContainerSpec, Workload
from kcap.domain.promql import validate_object_name
from kcap.infrastructure.kubectl_client import KubectlError, kubectl_json

logger = logging.getLogger(__name__)

WORKLOAD_KINDS: tuple[tuple[str, str], ...] = (
    ("Deployment", "deployments"),
    ("StatefulSet", "statefulsets"),
)


class ObjectSourceError(RuntimeError):
    """Raised when workloads cannot be listed."""


class WorkloadSource(Protocol):
    """Anything that lists namespace workloads in a stable order."""

    def list_workloads(self, namespace: str) -> list[Workload]: ...


def _workload_from_item(kind: str, item: dict[str, Any]) -> Workload:
    pod_spec = item["spec"]["template"]["spec"]
    return Workload(
        kind=kind,
        name=item["metadata"]["name"],
        init_containers=tuple(
            ContainerSpec.from_manifest(c) for c in pod_spec.get("initContainers") or []
        ),
        containers=tuple(
            ContainerSpec.from_manifest(c) for c in pod_spec.get("containers") or []
        ),
    )


class KubectlWorkloadSource:
    """List namespace workloads through kubectl, in API order."""

    def __init__(
        self, runner: Callable[[str], dict[str, Any]] = kubectl_json
    ) -> None:
        self._runner = runner

    def list_workloads(self, namespace: str) -> list[Workload]:
        """Return Deployments followed by StatefulSets in namespace."""
        validate_object_name("namespace", namespace)
        workloads: list[Workload] = []
        for kind, resource in WORKLOAD_KINDS:
            try:
                payload = self._runner(f"get {resource} -n {namespace}")
            except KubectlError as exc:
                raise ObjectSourceError(
                    f"failed to list {resource} in {namespace}: {exc}"
                ) from exc
            try:
                items = [
                    _workload_from_item(kind, item) for item in payload.get("items", [])
                ]
            except (KeyError, TypeError) as exc:
                raise ObjectSourceError(
                    f"unexpected {resource} payload in {namespace}: {exc!r}"
                ) from exc
            logger.debug("Found %d %s in %s", len(items), resource, namespace)
            workloads.extend(items)
        return workloads
