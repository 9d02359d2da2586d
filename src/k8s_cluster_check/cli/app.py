"""check_k8s_cluster command line entry point."""

from __future__ import annotations

import logging
import sys

import typer
from rich.console import Console
from rich.logging import RichHandler

from k8s_cluster_check.config.settings import ConfigError, load_settings
from k8s_cluster_check.core.engine import run_health_check
from k8s_cluster_check.core.k8s_client import ClusterUnavailableError, K8sClient
from k8s_cluster_check.models.health import Severity
from k8s_cluster_check.output.report import console, print_report

PROG_NAME = "check_k8s_cluster"

HELP_TEXT = f"""===
Kubernetes Cluster Health Check Plugin

This plugin performs a comprehensive health check of a Kubernetes cluster.
It checks node health, pod statuses, and resource utilization.

Usage:
    {PROG_NAME}

This script takes no arguments. It automatically discovers and checks the cluster
it is run against, using the active kubeconfig context or the in-cluster
service account.

Options:
    -h, --help      Show this help message.

Environment:
    CHECK_K8S_CLUSTER_CONFIG   YAML file overriding the settings below
    CHECK_K8S_CONTEXT          kubeconfig context to use
    CHECK_K8S_LOG_LEVEL        log level for stderr diagnostics (default WARNING)
==="""

app = typer.Typer(
    name=PROG_NAME,
    add_completion=False,
    context_settings={"help_option_names": []},
)
err_console = Console(stderr=True, markup=False, highlight=False)


def _show_help(value: bool) -> None:
    if value:
        console.print(HELP_TEXT)
        raise typer.Exit(code=int(Severity.UNKNOWN))


def _usage_error(message: str) -> typer.Exit:
    err_console.print(f"ERROR: {message}")
    console.print(HELP_TEXT)
    return typer.Exit(code=int(Severity.UNKNOWN))


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


# Unknown options and stray arguments land in ctx.args instead of failing
# inside the parser, so they can be reported with the plugin's own usage.
@app.command(context_settings={"allow_extra_args": True, "ignore_unknown_options": True})
def check(
    ctx: typer.Context,
    show_help: bool = typer.Option(
        False, "--help", "-h", is_eager=True, callback=_show_help, help="Show this help message.",
    ),
) -> None:
    """Run the cluster health check and exit with the monitoring plugin status."""
    if ctx.args:
        raise _usage_error(f"Unknown argument: {ctx.args[0]}")

    try:
        settings = load_settings()
    except ConfigError as e:
        console.print(f"UNKNOWN: Invalid configuration: {e}")
        raise typer.Exit(code=int(Severity.UNKNOWN))

    _setup_logging(settings.log_level)
    k8s = K8sClient(context=settings.context, request_timeout=settings.request_timeout)
    try:
        outcome = run_health_check(k8s, settings)
    except ClusterUnavailableError as e:
        console.print(f"UNKNOWN: Unable to query the Kubernetes cluster: {e}")
        raise typer.Exit(code=int(Severity.UNKNOWN))

    print_report(outcome.severity, outcome.transcript)
    raise typer.Exit(code=int(outcome.severity))


def main(argv: list[str] | None = None) -> None:
    command = typer.main.get_command(app)
    try:
        code = command.main(
            args=sys.argv[1:] if argv is None else argv,
            prog_name=PROG_NAME,
            standalone_mode=False,
        )
    except Exception as e:
        # Parser errors (e.g. a value passed to --help) expose format_message();
        # matched by protocol since Typer may ship its own click.
        if not hasattr(e, "format_message"):
            raise
        _usage_error(e.format_message())
        code = Severity.UNKNOWN
    sys.exit(int(code or 0))
