"""Node health evaluation."""

from __future__ import annotations

import json
from datetime import datetime

from k8s_cluster_check.core.collector import ClusterCollector
from k8s_cluster_check.models.cluster import NodeRecord
from k8s_cluster_check.models.health import EvaluationResult, Severity
from k8s_cluster_check.output.tables import events_table, node_usage_table, node_wide_table, render_lines


def is_problem_node(node: NodeRecord) -> bool:
    return node.unschedulable or not node.ready or bool(node.pressure_conditions)


def _render_problem_node(
    collector: ClusterCollector, node: NodeRecord, now: datetime, width: int,
) -> list[str]:
    detail = collector.get_node(node.name) or node
    lines = [
        "",
        f"=== Investigating Problem Node: {node.name} ===",
        "",
        "--- Node Status & Conditions ---",
    ]
    lines.extend(render_lines(node_wide_table(detail), width))
    lines.append("")
    for c in detail.conditions:
        lines.append(f"{c.type}: {c.status} ({c.reason}) - {c.message}")
    lines.append(f"Unschedulable: {str(detail.unschedulable).lower()}")
    taints = json.dumps(detail.taints, sort_keys=True) if detail.taints else ""
    lines.append(f"Taints: {taints}")

    lines.extend(["", "--- Recent Node Events ---"])
    events = collector.list_node_events(node.name)
    if events:
        lines.extend(render_lines(events_table(events, now), width))
    else:
        lines.append(f"Could not retrieve recent events for node {node.name}")
    lines.append("==============================================")
    return lines


def evaluate_nodes(collector: ClusterCollector, now: datetime, width: int = 250) -> EvaluationResult:
    """Classify nodes; report details for problem nodes or a usage table otherwise."""
    result = EvaluationResult()
    result.add("", "INFO: Checking status of all cluster nodes...")

    nodes = collector.list_nodes()
    problem_nodes = [n for n in nodes if is_problem_node(n)]

    if not problem_nodes:
        result.add("OK: All nodes are ready and healthy.")
        result.add("", "--- Node Information & Resource Usage ---")
        metrics = collector.list_node_metrics()
        result.add(*render_lines(node_usage_table(nodes, metrics), width))
        if metrics is None:
            result.add("", "INFO: Node metrics not available (metrics-server may not be installed).")
        result.add("-----------------------------------------")
        return result

    result.escalate(Severity.CRITICAL)
    result.add("", "CRITICAL: Found one or more nodes with issues.")
    for node in problem_nodes:
        result.add(*_render_problem_node(collector, node, now, width))
    return result
