"""Pod health evaluation: problem pods and restart flapping."""

from __future__ import annotations

import logging
from datetime import datetime

from k8s_cluster_check.core.collector import ClusterCollector, RestartCandidate
from k8s_cluster_check.models.cluster import PodPhase, PodRecord, format_timestamp
from k8s_cluster_check.models.health import EvaluationResult, Severity
from k8s_cluster_check.output.tables import events_table, render_lines, top_pods_table

logger = logging.getLogger(__name__)

_HEALTHY_PHASES = {PodPhase.RUNNING, PodPhase.SUCCEEDED}


def is_problem_pod(pod: PodRecord) -> bool:
    """A pod is a problem if it is not Running/Succeeded, or if it is not Ready.

    Succeeded pods have no meaningful readiness and are exempt from the
    Ready check.
    """
    if pod.phase not in _HEALTHY_PHASES:
        return True
    if pod.phase == PodPhase.SUCCEEDED:
        return False
    return not pod.ready


def describe_window(seconds: int) -> str:
    if seconds % 86400 == 0:
        days = seconds // 86400
        return f"{days} day" if days == 1 else f"{days} days"
    hours = seconds // 3600
    return f"{hours} hour" if hours == 1 else f"{hours} hours"


def _field(label: str, value: str) -> str:
    return f"{label:<15} {value or 'N/A'}"


def _render_problem_pod(
    collector: ClusterCollector, pod: PodRecord, now: datetime, width: int,
) -> list[str]:
    detail = collector.get_pod(pod.namespace, pod.name) or pod
    lines = [
        "",
        f"=== PROBLEM POD: {pod.key} ===",
        _field("STATUS:", detail.phase.value),
        _field("REASON:", detail.reason),
        _field("MESSAGE:", detail.message),
        _field("NODE:", detail.node_name),
        _field("STARTED:", format_timestamp(detail.start_time)),
        "",
        "--- Container Statuses ---",
    ]
    if detail.containers:
        for c in detail.containers:
            lines.append(
                f"Container: {c.name}, Ready: {str(c.ready).lower()}, "
                f"Restarts: {c.restart_count}, State: {c.state_reason or 'N/A'}"
            )
    else:
        lines.append("No container statuses available.")

    lines.extend(["", "--- Recent Events ---"])
    events = collector.list_pod_events(pod.namespace, pod.name)
    if events:
        lines.extend(render_lines(events_table(events, now), width))
    else:
        lines.append("No recent events found for this pod.")
    lines.append("================================================")
    return lines


def _check_pod_states(
    collector: ClusterCollector, now: datetime, top_pods: int, width: int,
) -> EvaluationResult:
    result = EvaluationResult()
    result.add("", "INFO: Checking status of all pods...")

    problem_pods = [p for p in collector.list_pods() if is_problem_pod(p)]

    if not problem_pods:
        result.add("OK: All pods are running and ready.")
        result.add("", f"--- Top {top_pods} Pods by Memory Usage ---")
        metrics = collector.list_pod_metrics()
        if metrics is None:
            result.add("INFO: Pod metrics not available (metrics-server may not be installed).")
        else:
            ranked = sorted(metrics, key=lambda m: m.memory_bytes, reverse=True)[:top_pods]
            result.add(*render_lines(top_pods_table(ranked), width))
        result.add("------------------------------------")
        return result

    result.escalate(Severity.CRITICAL)
    result.add("", "CRITICAL: Found one or more pods with issues.")
    for pod in problem_pods:
        result.add(*_render_problem_pod(collector, pod, now, width))
    return result


def check_restart_flapping(
    candidates: list[RestartCandidate], now: datetime, window_seconds: int,
) -> EvaluationResult:
    """Warn about high restart counts whose last restart is recent or unknown."""
    result = EvaluationResult()
    window = describe_window(window_seconds)

    for cand in candidates:
        c = cand.container
        prefix = (
            f"WARNING: Pod '{cand.namespace}/{cand.pod_name}' (container: {c.name}) "
            f"has a high restart count ({c.restart_count})"
        )
        if c.last_terminated_at is None:
            result.add(f"{prefix}, but last restart time is unavailable.")
            result.escalate(Severity.WARNING)
            continue

        age = (now - c.last_terminated_at).total_seconds()
        if age < window_seconds:
            result.add(f"{prefix} and the last restart was less than {window} ago.")
            result.escalate(Severity.WARNING)
        else:
            logger.debug(
                "Ignoring stale restarts of %s/%s container %s (age %ds)",
                cand.namespace, cand.pod_name, c.name, age,
            )

    if result.severity == Severity.OK:
        result.add("INFO: No running pods with recent high restart counts found.")
    return result


def evaluate_pods(
    collector: ClusterCollector,
    now: datetime,
    top_pods: int = 6,
    restart_window_seconds: int = 2 * 86400,
    width: int = 250,
) -> EvaluationResult:
    """Classify all pods and scan running pods for restart flapping."""
    result = _check_pod_states(collector, now, top_pods, width)

    result.add("", "INFO: Checking for high restart counts on running pods...")
    flapping = check_restart_flapping(collector.list_restart_candidates(), now, restart_window_seconds)
    result.add(*flapping.lines)
    result.escalate(flapping.severity)
    return result
