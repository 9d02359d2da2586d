"""Severity aggregation."""

from __future__ import annotations

from k8s_cluster_check.models.health import Severity


def aggregate(*severities: Severity) -> Severity:
    """Combine per-domain verdicts into one.

    Plain numeric max: OK < WARNING < CRITICAL < UNKNOWN, so a domain that
    could not be evaluated is never hidden behind a CRITICAL verdict.
    """
    return max(severities, default=Severity.OK)
