"""Tests for the typer CLI."""

from __future__ import annotations

import io
import json
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

import pytest
from rich.console import Console
from typer.testing import CliRunner

from kcap.cli.main import app
from kcap.infrastructure.prometheus_client import BackendUnavailableError
from kcap.infrastructure.workload_source import ObjectSourceError

runner = CliRunner()


@pytest.fixture(autouse=True)
def no_logging_setup():
    with patch("kcap.cli.main.setup_logging"):
        yield


@pytest.fixture
def env_file(tmp_path: Path) -> str:
    return str(tmp_path / "missing.env")


def test_version() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert "k8s-capacity" in result.output


def test_recommend_defaults(env_file: str) -> None:
    with patch("kcap.cli.main.execute_recommendation", return_value=None) as execute:
        result = runner.invoke(app, ["recommend", "--env-file", env_file])

    assert result.exit_code == 0, result.output
    assert "Using the 'default' namespace" in result.output
    args: tuple[Any, ...] = execute.call_args.args
    kwargs: dict[str, Any] = execute.call_args.kwargs
    assert args == ("default",)
    assert kwargs["policy"].cpu_percentile == 0.99
    assert kwargs["policy"].effective_memory_percentile == 0.99
    assert kwargs["policy"].window == "1d"
    assert kwargs["prometheus"].url == "http://localhost:9090"
    assert kwargs["output"] == "text"
    assert kwargs["include_quota"] is False
    assert kwargs["reports_root"] is None


def test_recommend_flags_override_config(env_file: str) -> None:
    with patch("kcap.cli.main.execute_recommendation", return_value=None) as execute:
        result = runner.invoke(
            app,
            [
                "recommend",
                "-n",
                "shop",
                "-t",
                "6h",
                "--cpu-percentile",
                "0.9",
                "--memory-percentile",
                "0.95",
                "--recommend-quotas",
                "--recommend-limit-ranges",
                "--output",
                "json",
                "--workers",
                "4",
                "--env-file",
                env_file,
            ],
        )

    assert result.exit_code == 0, result.output
    kwargs = execute.call_args.kwargs
    assert execute.call_args.args == ("shop",)
    assert kwargs["policy"].window == "6h"
    assert kwargs["policy"].cpu_percentile == 0.9
    assert kwargs["policy"].memory_percentile == 0.95
    assert kwargs["include_quota"] is True
    assert kwargs["include_limit_range"] is True
    assert kwargs["output"] == "json"
    assert kwargs["workers"] == 4


def test_recommend_rejects_bad_percentile(env_file: str) -> None:
    with patch("kcap.cli.main.execute_recommendation") as execute:
        result = runner.invoke(
            app, ["recommend", "--cpu-percentile", "99", "--env-file", env_file]
        )
    assert result.exit_code == 1
    execute.assert_not_called()


def test_recommend_rejects_unknown_output(env_file: str) -> None:
    result = runner.invoke(app, ["recommend", "-o", "yaml", "--env-file", env_file])
    assert result.exit_code == 1
    assert "unsupported output format" in result.output


def test_recommend_listing_failure_exits_2(env_file: str) -> None:
    with patch(
        "kcap.cli.main.execute_recommendation",
        side_effect=ObjectSourceError("failed to list deployments"),
    ):
        result = runner.invoke(app, ["recommend", "-n", "shop", "--env-file", env_file])
    assert result.exit_code == 2
    assert "failed to list deployments" in result.output


def test_analyze(env_file: str) -> None:
    with patch("kcap.cli.main.execute_namespace_analysis", return_value=1.5) as execute:
        result = runner.invoke(app, ["analyze", "-n", "shop", "--env-file", env_file])
    assert result.exit_code == 0, result.output
    assert execute.call_args.args == ("shop",)


def test_analyze_backend_failure_exits_2(env_file: str) -> None:
    with patch(
        "kcap.cli.main.execute_namespace_analysis",
        side_effect=BackendUnavailableError("connection refused"),
    ):
        result = runner.invoke(app, ["analyze", "-n", "shop", "--env-file", env_file])
    assert result.exit_code == 2


def test_recommend_json_stdout_is_parseable(
    env_file: str, tmp_path: Path, fake_sampler, workloads
) -> None:
    source = MagicMock()
    source.list_workloads.return_value = workloads
    notices = io.StringIO()
    with (
        patch("kcap.cli.main.err_console", Console(file=notices, width=300)),
        patch(
            "kcap.application.recommend_use_case.KubectlWorkloadSource",
            return_value=source,
        ),
        patch(
            "kcap.application.recommend_use_case._default_client",
            return_value=fake_sampler,
        ),
    ):
        result = runner.invoke(
            app,
            [
                "recommend",
                "-o",
                "json",
                "-r",
                str(tmp_path / "reports"),
                "--env-file",
                env_file,
            ],
        )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["namespace"] == "default"
    assert [c["container"]["name"] for c in payload["containers"]] == [
        "migrate",
        "api",
        "sidecar",
        "postgres",
    ]
    assert payload["containers"][1]["recommended"] == {
        "requests": {"cpu": "50m", "memory": "200Mi"},
        "limits": {"cpu": "120m", "memory": "600Mi"},
    }
    assert "Using the 'default' namespace" in notices.getvalue()
    assert "Run:" in notices.getvalue()
    source.list_workloads.assert_called_once_with("default")
    assert fake_sampler.closed


def test_recommend_rejects_invalid_namespace(env_file: str) -> None:
    source = MagicMock()
    with patch(
        "kcap.application.recommend_use_case.KubectlWorkloadSource",
        return_value=source,
    ):
        result = runner.invoke(
            app, ["recommend", "-n", "shop -A", "--env-file", env_file]
        )
    assert result.exit_code == 1
    assert "invalid namespace name" in result.output
    source.list_workloads.assert_not_called()
