"""Read-only cluster snapshots turned into typed records.

Every query here is best-effort: a failing API call is logged and read as
an empty slice so one broken endpoint cannot abort the whole check.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from k8s_cluster_check.core.k8s_client import K8sClient
from k8s_cluster_check.models.cluster import (
    ContainerStatus,
    EventRecord,
    NodeMetricsRecord,
    NodeRecord,
    PodMetricsRecord,
    PodRecord,
)
from k8s_cluster_check.utils.quantity import cpu_to_millicores, memory_to_bytes

logger = logging.getLogger(__name__)

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


@dataclass
class RestartCandidate:
    """A container of a Running pod whose restart count is above the threshold."""

    namespace: str
    pod_name: str
    container: ContainerStatus


def recent_events(events: list[EventRecord], limit: int) -> list[EventRecord]:
    """Sort ascending by last timestamp and keep the tail.

    Events without a timestamp sort first; ties keep the API order.
    """
    if limit <= 0:
        return []
    ordered = sorted(events, key=lambda e: e.last_timestamp or _EPOCH)
    return ordered[-limit:]


class ClusterCollector:
    """Builds PodRecord / NodeRecord snapshots from the cluster API."""

    def __init__(self, k8s: K8sClient, restart_threshold: int = 10, event_limit: int = 5):
        self.k8s = k8s
        self.restart_threshold = restart_threshold
        self.event_limit = event_limit

    def list_pods(self) -> list[PodRecord]:
        """All pods across all namespaces, in API order."""
        try:
            return [PodRecord.from_dict(p) for p in self.k8s.list_pods()]
        except Exception:
            logger.warning("Failed to list pods", exc_info=True)
            return []

    def get_pod(self, namespace: str, name: str) -> PodRecord | None:
        try:
            raw = self.k8s.read_pod(name=name, namespace=namespace)
        except Exception:
            logger.warning("Failed to read pod %s/%s", namespace, name, exc_info=True)
            return None
        return PodRecord.from_dict(raw) if raw else None

    def list_restart_candidates(self) -> list[RestartCandidate]:
        """Containers of Running pods with more than ``restart_threshold`` restarts."""
        try:
            raw_pods = self.k8s.list_pods(field_selector="status.phase=Running")
        except Exception:
            logger.warning("Failed to list running pods", exc_info=True)
            return []

        candidates: list[RestartCandidate] = []
        for raw in raw_pods:
            pod = PodRecord.from_dict(raw)
            for container in pod.containers:
                if container.restart_count > self.restart_threshold:
                    candidates.append(RestartCandidate(pod.namespace, pod.name, container))
        return candidates

    def list_pod_events(self, namespace: str, name: str) -> list[EventRecord]:
        try:
            raw = self.k8s.list_events(
                field_selector=f"involvedObject.name={name}", namespace=namespace,
            )
        except Exception:
            logger.debug("Failed to list events for pod %s/%s", namespace, name, exc_info=True)
            return []
        return recent_events([EventRecord.from_dict(e) for e in raw], self.event_limit)

    def list_pod_metrics(self) -> list[PodMetricsRecord] | None:
        """Per-pod usage summed over containers; None when metrics are unavailable."""
        try:
            items = self.k8s.list_pod_metrics()
        except Exception:
            logger.debug("Failed to list pod metrics", exc_info=True)
            return None
        if items is None:
            return None

        records: list[PodMetricsRecord] = []
        for item in items:
            meta = item.get("metadata") or {}
            containers = item.get("containers") or []
            records.append(PodMetricsRecord(
                namespace=meta.get("namespace", ""),
                name=meta.get("name", ""),
                cpu_millicores=sum(cpu_to_millicores((c.get("usage") or {}).get("cpu")) for c in containers),
                memory_bytes=sum(memory_to_bytes((c.get("usage") or {}).get("memory")) for c in containers),
            ))
        return records

    def list_nodes(self) -> list[NodeRecord]:
        try:
            return [NodeRecord.from_dict(n) for n in self.k8s.list_nodes()]
        except Exception:
            logger.warning("Failed to list nodes", exc_info=True)
            return []

    def get_node(self, name: str) -> NodeRecord | None:
        try:
            raw = self.k8s.read_node(name=name)
        except Exception:
            logger.warning("Failed to read node %s", name, exc_info=True)
            return None
        return NodeRecord.from_dict(raw) if raw else None

    def list_node_events(self, name: str) -> list[EventRecord]:
        try:
            raw = self.k8s.list_events(
                field_selector=f"involvedObject.kind=Node,involvedObject.name={name}",
            )
        except Exception:
            logger.debug("Failed to list events for node %s", name, exc_info=True)
            return []
        return recent_events([EventRecord.from_dict(e) for e in raw], self.event_limit)

    def list_node_metrics(self) -> dict[str, NodeMetricsRecord] | None:
        """Node usage keyed by node name; None when metrics-server is not installed."""
        try:
            items = self.k8s.list_node_metrics()
        except Exception:
            logger.debug("Failed to list node metrics", exc_info=True)
            return None
        if items is None:
            return None
        records = (NodeMetricsRecord.from_dict(i) for i in items)
        return {r.name: r for r in records}
