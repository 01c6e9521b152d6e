"""CLI entrypoint for k8s-capacity."""

from dataclasses import replace
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as package_version
from pathlib import Path

import typer
from rich.console import Console

from kcap.application import execute_namespace_analysis, execute_recommendation
from kcap.config import AppConfig, load_config
from kcap.logging_setup import setup_logging

app = typer.Typer(
    name="kcap",
    help="Kubernetes resource recommendations from Prometheus usage history",
    no_args_is_help=True,
    add_completion=False,
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
console = Console()
err_console = Console(stderr=True)


def _resolve_version() -> str:
    """Return installed package version or local fallback."""
    try:
        return package_version("k8s-capacity")
    except PackageNotFoundError:
        return "0.1.0"


@app.callback()
def callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit.",
    ),
) -> None:
    """Handle global CLI options."""
    if version:
        console.print(f"k8s-capacity {_resolve_version()}")
        raise typer.Exit(code=0)
    if ctx.invoked_subcommand is None:
        raise typer.Exit(code=0)


def _handle_error(exc: Exception) -> None:
    """Convert domain exceptions to CLI exit codes."""
    if isinstance(exc, ValueError):
        console.print(f"[red]ERROR:[/red] {exc}")
        raise typer.Exit(code=1) from exc
    if isinstance(exc, RuntimeError):
        console.print(f"[red]ERROR:[/red] {exc}")
        raise typer.Exit(code=2) from exc
    raise exc


def _load(env_file: Path, debug: bool) -> AppConfig:
    config = load_config(env_file)
    setup_logging(debug=debug, level=config.log_level)
    return config


def _resolve_namespace(namespace: str | None, notices: Console) -> str:
    if not namespace:
        notices.print("No namespace provided. Using the 'default' namespace.")
        return "default"
    return namespace


_ENV_FILE_OPTION = typer.Option(
    Path(".env"),
    "--env-file",
    help="Optional .env file with PROMETHEUS_URL and KCAP_* settings.",
)


@app.command("recommend")
def recommend_command(
    namespace: str | None = typer.Option(
        None,
        "--namespace",
        "-n",
        help="Namespace to read Deployments and StatefulSets from (default: 'default').",
    ),
    time_window: str | None = typer.Option(
        None,
        "--timewindow",
        "-t",
        help="Prometheus range for percentile queries, e.g. 30m, 1d (default: 1d).",
    ),
    cpu_percentile: float | None = typer.Option(
        None,
        "--cpu-percentile",
        help="Percentile used for CPU limits (default: 0.99).",
    ),
    memory_percentile: float | None = typer.Option(
        None,
        "--memory-percentile",
        help="Percentile used for memory limits (default: CPU percentile).",
    ),
    recommend_quotas: bool = typer.Option(
        False,
        "--recommend-quotas",
        help="Also print a namespace ResourceQuota recommendation.",
    ),
    recommend_limit_ranges: bool = typer.Option(
        False,
        "--recommend-limit-ranges",
        help="Also print a namespace LimitRange recommendation.",
    ),
    output: str = typer.Option(
        "text",
        "--output",
        "-o",
        help="Output format: text or json.",
    ),
    workers: int = typer.Option(
        1,
        "--workers",
        help="Containers sampled concurrently (1 = sequential).",
    ),
    report: str | None = typer.Option(
        None,
        "--report",
        "-r",
        help=(
            "Persist report files under this directory. "
            "If omitted, prints stdout only."
        ),
    ),
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug output."),
    env_file: Path = _ENV_FILE_OPTION,
) -> None:
    """Recommend requests and limits for every container and initContainer."""
    try:
        if output not in ("text", "json"):
            raise ValueError(f"unsupported output format: {output!r}")
        config = _load(env_file, debug)
        policy = config.policy
        overrides: dict[str, object] = {}
        if time_window is not None:
            overrides["window"] = time_window
        if cpu_percentile is not None:
            overrides["cpu_percentile"] = cpu_percentile
        if memory_percentile is not None:
            overrides["memory_percentile"] = memory_percentile
        if overrides:
            policy = replace(policy, **overrides)
        # json output keeps stdout parseable
        notices = err_console if output == "json" else console

        run = execute_recommendation(
            _resolve_namespace(namespace, notices),
            policy=policy,
            prometheus=config.prometheus,
            include_quota=recommend_quotas,
            include_limit_range=recommend_limit_ranges,
            output="json" if output == "json" else "text",
            workers=workers,
            reports_root=report,
            console=console,
        )
        if run is not None:
            notices.print(f"[green]Run:[/green] {run.output_dir}")
    except (ValueError, RuntimeError) as exc:
        _handle_error(exc)


@app.command("analyze")
def analyze_command(
    namespace: str = typer.Option(
        ...,
        "--namespace",
        "-n",
        help="Namespace to analyze.",
    ),
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug output."),
    env_file: Path = _ENV_FILE_OPTION,
) -> None:
    """Print current CPU usage for a namespace."""
    try:
        config = _load(env_file, debug)
        execute_namespace_analysis(
            namespace, prometheus=config.prometheus, console=console
        )
    except (ValueError, RuntimeError) as exc:
        _handle_error(exc)


def main() -> None:
    """Project entrypoint for `kcap` script."""
    app()


if __name__ == "__main__":
    main()
