"""Rich table builders for the health report, rendered to plain text."""

from __future__ import annotations

import io
from datetime import datetime

from rich.console import Console
from rich.table import Table

from k8s_cluster_check.models.cluster import EventRecord, NodeMetricsRecord, NodeRecord, PodMetricsRecord
from k8s_cluster_check.utils.quantity import format_cpu, format_memory_mi, to_gib


def _plain_table() -> Table:
    # kubectl-style: no borders, header row only
    return Table(box=None, pad_edge=False, show_edge=False, header_style=None, padding=(0, 3, 0, 0))


def render_lines(table: Table, width: int) -> list[str]:
    """Render a table through an uncoloured console and return its lines."""
    buffer = io.StringIO()
    console = Console(
        file=buffer,
        width=width,
        color_system=None,
        markup=False,
        highlight=False,
        emoji=False,
    )
    console.print(table)
    return [line.rstrip() for line in buffer.getvalue().rstrip("\n").splitlines()]


def format_age(then: datetime | None, now: datetime) -> str:
    """Short age string in the style of ``kubectl get events``."""
    if then is None:
        return "<unknown>"
    seconds = max(int((now - then).total_seconds()), 0)
    if seconds < 120:
        return f"{seconds}s"
    minutes = seconds // 60
    if minutes < 120:
        return f"{minutes}m"
    hours = minutes // 60
    if hours < 48:
        return f"{hours}h"
    return f"{hours // 24}d"


def events_table(events: list[EventRecord], now: datetime) -> Table:
    table = _plain_table()
    table.add_column("LAST SEEN", no_wrap=True)
    table.add_column("TYPE", no_wrap=True)
    table.add_column("REASON", no_wrap=True)
    table.add_column("OBJECT", no_wrap=True)
    table.add_column("MESSAGE")

    for e in events:
        table.add_row(
            format_age(e.last_timestamp, now),
            e.type,
            e.reason,
            f"{e.object_kind.lower()}/{e.object_name}",
            e.message,
        )
    return table


def top_pods_table(pods: list[PodMetricsRecord]) -> Table:
    table = _plain_table()
    table.add_column("NAMESPACE", no_wrap=True)
    table.add_column("NAME", no_wrap=True)
    table.add_column("CPU(cores)", no_wrap=True)
    table.add_column("MEMORY(bytes)", no_wrap=True)

    for p in pods:
        table.add_row(p.namespace, p.name, f"{p.cpu_millicores}m", format_memory_mi(p.memory_bytes))
    return table


def node_usage_table(
    nodes: list[NodeRecord],
    metrics: dict[str, NodeMetricsRecord] | None,
) -> Table:
    table = _plain_table()
    table.add_column("NODE", no_wrap=True)
    table.add_column("STATUS", no_wrap=True)
    table.add_column("TAINTS", no_wrap=True)
    table.add_column("CPU ALLOC (Cores)", no_wrap=True)
    table.add_column("MEM ALLOC (GiB)", no_wrap=True)
    table.add_column("PODS", no_wrap=True)
    table.add_column("CPU USE", no_wrap=True)
    table.add_column("MEM USE (GiB)", no_wrap=True)

    for n in nodes:
        usage = (metrics or {}).get(n.name)
        table.add_row(
            n.name,
            n.status_label,
            str(n.taint_count),
            n.allocatable_cpu or "N/A",
            to_gib(n.allocatable_memory),
            n.capacity_pods or "N/A",
            format_cpu(usage.cpu) if usage else "N/A",
            to_gib(usage.memory) if usage else "N/A",
        )
    return table


def node_wide_table(node: NodeRecord) -> Table:
    """Single-row summary in the shape of ``kubectl get node -o wide``."""
    table = _plain_table()
    for header in ("NAME", "STATUS", "ROLES", "VERSION", "INTERNAL-IP", "OS-IMAGE",
                   "KERNEL-VERSION", "CONTAINER-RUNTIME"):
        table.add_column(header, no_wrap=True)

    status = node.status_label
    if node.unschedulable:
        status += ",SchedulingDisabled"
    table.add_row(
        node.name,
        status,
        ",".join(node.roles) or "<none>",
        node.kubelet_version or "<none>",
        node.internal_ip or "<none>",
        node.os_image or "<unknown>",
        node.kernel_version or "<unknown>",
        node.container_runtime or "<unknown>",
    )
    return table
