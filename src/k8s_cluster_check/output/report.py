"""Final report assembly and printing."""

from __future__ import annotations

from rich.console import Console

from k8s_cluster_check.models.health import Severity

BANNER_RULE = "================================================="

console = Console(color_system=None, markup=False, highlight=False, emoji=False, soft_wrap=True)


def render_report(severity: Severity, transcript: list[str]) -> str:
    """Verdict banner first, then the buffered transcript in collection order."""
    lines = [f"Final Status: {severity.label}", BANNER_RULE, ""]
    lines.extend(transcript)
    return "\n".join(lines)


def print_report(severity: Severity, transcript: list[str]) -> None:
    console.print(render_report(severity, transcript))
