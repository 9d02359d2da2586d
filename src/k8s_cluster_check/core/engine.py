"""One full snapshot-and-evaluate pass over the cluster."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from k8s_cluster_check.config.settings import Settings
from k8s_cluster_check.core.aggregator import aggregate
from k8s_cluster_check.core.collector import ClusterCollector
from k8s_cluster_check.core.housekeeping import delete_completed_pods
from k8s_cluster_check.core.k8s_client import K8sClient
from k8s_cluster_check.core.node_evaluator import evaluate_nodes
from k8s_cluster_check.core.pod_evaluator import evaluate_pods
from k8s_cluster_check.models.health import Severity
from k8s_cluster_check.output.report import BANNER_RULE

logger = logging.getLogger(__name__)


@dataclass
class HealthCheckOutcome:
    severity: Severity
    pod_severity: Severity
    node_severity: Severity
    transcript: list[str] = field(default_factory=list)


def run_health_check(
    k8s: K8sClient,
    settings: Settings,
    collector: ClusterCollector | None = None,
    now: datetime | None = None,
) -> HealthCheckOutcome:
    """Run housekeeping, evaluate pods and nodes, and aggregate the verdict.

    Raises ClusterUnavailableError if the API server cannot be reached at
    all; every other failure degrades inside the evaluators.
    """
    version = k8s.ping()
    logger.debug("Connected to Kubernetes API %s", version)

    now = now or datetime.now(timezone.utc)
    collector = collector or ClusterCollector(
        k8s,
        restart_threshold=settings.restart_threshold,
        event_limit=settings.recent_events,
    )

    transcript = [
        BANNER_RULE,
        "Starting Kubernetes Cluster Health Check",
        f"Timestamp: {now.strftime('%a %b %d %H:%M:%S %Z %Y')}",
        BANNER_RULE,
    ]

    if settings.cleanup_completed:
        transcript.extend(delete_completed_pods(k8s))

    pods = evaluate_pods(
        collector,
        now,
        top_pods=settings.top_pods,
        restart_window_seconds=settings.restart_window_seconds,
        width=settings.report_width,
    )
    transcript.extend(pods.lines)

    nodes = evaluate_nodes(collector, now, width=settings.report_width)
    transcript.extend(nodes.lines)

    severity = aggregate(pods.severity, nodes.severity)
    logger.info("Pod severity %s, node severity %s, final %s", pods.severity.name, nodes.severity.name, severity.name)
    return HealthCheckOutcome(
        severity=severity,
        pod_severity=pods.severity,
        node_severity=nodes.severity,
        transcript=transcript,
    )
