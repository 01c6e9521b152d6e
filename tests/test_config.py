"""Tests for application config."""

from __future__ import annotations

from pathlib import Path

import pytest

from kcap.config import AppConfig, load_config


def test_defaults(tmp_path: Path) -> None:
    cfg = load_config(tmp_path / "missing.env")
    assert cfg.prometheus_url == "http://localhost:9090"
    assert cfg.prometheus.timeout_seconds == 10.0
    assert cfg.policy.cpu_percentile == 0.99
    assert cfg.policy.memory_percentile is None
    assert cfg.policy.window == "1d"
    assert cfg.log_level == "WARNING"


def test_environment_overrides(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PROMETHEUS_URL", "https://prom.example.com")
    monkeypatch.setenv("PROMETHEUS_TIMEOUT_SECONDS", "3.5")
    monkeypatch.setenv("KCAP_CPU_PERCENTILE", "0.9")
    monkeypatch.setenv("KCAP_MEMORY_PERCENTILE", "0.95")
    monkeypatch.setenv("KCAP_TIME_WINDOW", "7d")
    monkeypatch.setenv("KCAP_LOG_LEVEL", "debug")

    cfg = load_config(tmp_path / "missing.env")
    assert cfg.prometheus_url == "https://prom.example.com"
    assert cfg.prometheus.client_config.timeout_seconds == 3.5
    assert cfg.policy.cpu_percentile == 0.9
    assert cfg.policy.effective_memory_percentile == 0.95
    assert cfg.policy.window == "7d"
    assert cfg.log_level == "DEBUG"


def test_env_file_does_not_override_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text(
        "PROMETHEUS_URL=http://from-file:9090\nKCAP_TIME_WINDOW=12h\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("KCAP_TIME_WINDOW", "30m")

    cfg = load_config(env_file)
    assert cfg.prometheus_url == "http://from-file:9090"
    assert cfg.policy.window == "30m"


@pytest.mark.parametrize(
    ("name", "value"),
    [
        ("PROMETHEUS_URL", "localhost:9090"),
        ("PROMETHEUS_URL", "ftp://prom.example.com"),
        ("PROMETHEUS_TIMEOUT_SECONDS", "0"),
        ("PROMETHEUS_TIMEOUT_SECONDS", "soon"),
        ("KCAP_CPU_PERCENTILE", "99"),
        ("KCAP_TIME_WINDOW", "one day"),
    ],
)
def test_invalid_values(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, name: str, value: str
) -> None:
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError):
        load_config(tmp_path / "missing.env")


def test_app_config_defaults() -> None:
    cfg = AppConfig()
    assert cfg.prometheus_url == "http://localhost:9090"
    assert cfg.policy.cpu_percentile == 0.99
