"""Persist recommendation runs as CSV/JSON artifacts."""

import json
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import pandas as pd

from kcap.application.report_renderer import report_to_row
from kcap.domain.models import ContainerReport


@dataclass(frozen=True)
class RunResult:
    """Location of a persisted run."""

    run_id: str
    output_dir: Path
    manifest_path: Path
    output_files: tuple[Path, ...]


def _utc_now_iso() -> str:
    return datetime.now(UTC).isoformat()


def write_recommendation_run(
    payload: dict[str, Any],
    reports: list[ContainerReport],
    *,
    reports_root: str,
    capability: str = "recommend",
) -> RunResult:
    """Write recommendations.csv, recommendations.json and manifest.json."""
    started_at = _utc_now_iso()
    run_id = datetime.now().strftime("%Y%m%d_%H%M%S")
    output_dir = Path(reports_root) / capability / run_id
    output_dir.mkdir(parents=True, exist_ok=True)

    csv_path = output_dir / "recommendations.csv"
    pd.DataFrame([report_to_row(r) for r in reports]).to_csv(csv_path, index=False)

    json_path = output_dir / "recommendations.json"
    json_path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2) + "\n", encoding="utf-8"
    )

    manifest_path = output_dir / "manifest.json"
    manifest = {
        "run_id": run_id,
        "capability": capability,
        "started_at": started_at,
        "finished_at": _utc_now_iso(),
        "namespace": payload.get("namespace"),
        "settings": payload.get("settings", {}),
        "containers": len(reports),
        "degraded_containers": sum(1 for r in reports if r.usage.degraded),
        "outputs": [csv_path.name, json_path.name, manifest_path.name],
    }
    manifest_path.write_text(
        json.dumps(manifest, ensure_ascii=False, indent=2) + "\n", encoding="utf-8"
    )
    return RunResult(
        run_id=run_id,
        output_dir=output_dir,
        manifest_path=manifest_path,
        output_files=(csv_path, json_path, manifest_path),
    )
