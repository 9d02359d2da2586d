"""Shared fixtures for the cluster health check tests.

Provides a fake cluster client that serves plain API dicts, plus factory
helpers for pods, nodes, events and metrics, so the collector, evaluators
and engine run end to end without a real Kubernetes cluster.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from k8s_cluster_check.config.settings import Settings

NOW = datetime(2026, 10, 18, 12, 0, 0, tzinfo=timezone.utc)


def iso(dt: datetime) -> str:
    return dt.strftime("%Y-%m-%dT%H:%M:%SZ")


# ---------------------------------------------------------------------------
# API object factories
# ---------------------------------------------------------------------------


def make_container(
    name: str = "app",
    ready: bool = True,
    restarts: int = 0,
    finished_at: datetime | None = None,
    waiting_reason: str | None = None,
) -> dict[str, Any]:
    state: dict[str, Any] = {"running": {"startedAt": iso(NOW - timedelta(hours=5))}}
    if waiting_reason:
        state = {"waiting": {"reason": waiting_reason, "message": "back-off"}}
    last_state: dict[str, Any] = {}
    if finished_at is not None:
        last_state = {"terminated": {"exitCode": 1, "reason": "Error", "finishedAt": iso(finished_at)}}
    elif restarts:
        last_state = {"terminated": {"exitCode": 1, "reason": "Error"}}
    return {
        "name": name,
        "ready": ready,
        "restartCount": restarts,
        "state": state,
        "lastState": last_state,
    }


def make_pod(
    name: str,
    namespace: str = "default",
    phase: str = "Running",
    ready: bool | None = True,
    containers: list[dict] | None = None,
    node: str = "node-1",
    reason: str | None = None,
    message: str | None = None,
) -> dict[str, Any]:
    conditions = []
    if ready is not None:
        conditions.append({"type": "Ready", "status": "True" if ready else "False"})
    status: dict[str, Any] = {
        "phase": phase,
        "conditions": conditions,
        "startTime": iso(NOW - timedelta(days=1)),
        "containerStatuses": containers if containers is not None else [make_container(ready=bool(ready))],
    }
    if reason:
        status["reason"] = reason
    if message:
        status["message"] = message
    return {
        "metadata": {"name": name, "namespace": namespace},
        "spec": {"nodeName": node},
        "status": status,
    }


def make_node(
    name: str,
    ready: bool = True,
    unschedulable: bool = False,
    pressure: tuple[str, ...] = (),
    taints: list[dict] | None = None,
    cpu: str = "4",
    memory: str = "16393216Ki",
    pods: str = "110",
) -> dict[str, Any]:
    conditions = [
        {
            "type": cond,
            "status": "True" if cond in pressure else "False",
            "reason": f"Kubelet{'Has' if cond in pressure else 'HasNo'}{cond}",
            "message": f"kubelet reports {cond}",
        }
        for cond in ("MemoryPressure", "DiskPressure", "PIDPressure")
    ]
    conditions.append({
        "type": "Ready",
        "status": "True" if ready else "False",
        "reason": "KubeletReady" if ready else "KubeletNotReady",
        "message": "kubelet is posting ready status" if ready else "PLEG is not healthy",
    })
    spec: dict[str, Any] = {}
    if unschedulable:
        spec["unschedulable"] = True
    if taints:
        spec["taints"] = taints
    return {
        "metadata": {"name": name, "labels": {"node-role.kubernetes.io/worker": ""}},
        "spec": spec,
        "status": {
            "conditions": conditions,
            "capacity": {"cpu": cpu, "memory": memory, "pods": pods},
            "allocatable": {"cpu": cpu, "memory": memory, "pods": pods},
            "addresses": [{"type": "InternalIP", "address": "10.0.0.10"}],
            "nodeInfo": {
                "kubeletVersion": "v1.29.4",
                "osImage": "Ubuntu 22.04.4 LTS",
                "kernelVersion": "5.15.0-105-generic",
                "containerRuntimeVersion": "containerd://1.7.13",
            },
        },
    }


def make_event(
    object_name: str,
    reason: str,
    last_seen: datetime | None,
    kind: str = "Pod",
    namespace: str = "default",
    event_type: str = "Warning",
    message: str = "something happened",
) -> dict[str, Any]:
    event: dict[str, Any] = {
        "metadata": {"name": f"{object_name}.{reason.lower()}", "namespace": namespace},
        "involvedObject": {"kind": kind, "name": object_name, "namespace": namespace},
        "type": event_type,
        "reason": reason,
        "message": message,
        "count": 1,
    }
    if last_seen is not None:
        event["lastTimestamp"] = iso(last_seen)
    return event


def make_node_metrics(name: str, cpu: str = "250000000n", memory: str = "4194304Ki") -> dict[str, Any]:
    return {"metadata": {"name": name}, "usage": {"cpu": cpu, "memory": memory}}


def make_pod_metrics(name: str, namespace: str = "default", memory: str = "100Mi", cpu: str = "5m") -> dict[str, Any]:
    return {
        "metadata": {"name": name, "namespace": namespace},
        "containers": [{"name": "app", "usage": {"cpu": cpu, "memory": memory}}],
    }


# ---------------------------------------------------------------------------
# Fake cluster client
# ---------------------------------------------------------------------------


def _parse_selector(selector: str | None) -> dict[str, str]:
    if not selector:
        return {}
    return dict(part.split("=", 1) for part in selector.split(","))


class FakeK8sClient:
    """In-memory stand-in for K8sClient serving API dicts."""

    def __init__(
        self,
        pods: list[dict] | None = None,
        nodes: list[dict] | None = None,
        events: list[dict] | None = None,
        node_metrics: list[dict] | None = None,
        pod_metrics: list[dict] | None = None,
    ):
        self.pods = list(pods or [])
        self.nodes = list(nodes or [])
        self.events = list(events or [])
        self.node_metrics = node_metrics
        self.pod_metrics = pod_metrics
        self.deleted: list[tuple[str, str]] = []

    def ping(self) -> str:
        return "v1.29.4"

    def list_pods(self, field_selector: str | None = None) -> list[dict]:
        wanted = _parse_selector(field_selector).get("status.phase")
        return [p for p in self.pods if wanted is None or p["status"]["phase"] == wanted]

    def read_pod(self, name: str, namespace: str) -> dict | None:
        for p in self.pods:
            if p["metadata"]["name"] == name and p["metadata"]["namespace"] == namespace:
                return p
        return None

    def delete_pod(self, name: str, namespace: str) -> bool:
        pod = self.read_pod(name, namespace)
        if pod is None:
            return False
        self.pods.remove(pod)
        self.deleted.append((namespace, name))
        return True

    def list_nodes(self) -> list[dict]:
        return list(self.nodes)

    def read_node(self, name: str) -> dict | None:
        for n in self.nodes:
            if n["metadata"]["name"] == name:
                return n
        return None

    def list_events(self, field_selector: str, namespace: str | None = None) -> list[dict]:
        selector = _parse_selector(field_selector)
        matched = []
        for e in self.events:
            involved = e["involvedObject"]
            if namespace and e["metadata"]["namespace"] != namespace:
                continue
            if "involvedObject.name" in selector and involved["name"] != selector["involvedObject.name"]:
                continue
            if "involvedObject.kind" in selector and involved["kind"] != selector["involvedObject.kind"]:
                continue
            matched.append(e)
        return matched

    def list_node_metrics(self) -> list[dict] | None:
        return self.node_metrics

    def list_pod_metrics(self) -> list[dict] | None:
        return self.pod_metrics


@pytest.fixture
def settings() -> Settings:
    return Settings(
        context=None,
        request_timeout=30,
        restart_threshold=10,
        restart_window_hours=48,
        top_pods=6,
        recent_events=5,
        cleanup_completed=True,
        report_width=250,
        log_level="WARNING",
    )
