"""Cluster snapshot records built from Kubernetes API objects."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone

PRESSURE_CONDITIONS: frozenset[str] = frozenset({
    "MemoryPressure",
    "DiskPressure",
    "PIDPressure",
})

_ROLE_LABEL_PREFIX = "node-role.kubernetes.io/"


def parse_timestamp(raw: str | None) -> datetime | None:
    """Parse an RFC 3339 API timestamp into an aware UTC datetime."""
    if not raw:
        return None
    try:
        dt = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except (ValueError, AttributeError):
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_timestamp(dt: datetime | None) -> str:
    if dt is None:
        return ""
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def _condition_status(conditions: list[dict], condition_type: str) -> str | None:
    for cond in conditions:
        if cond.get("type") == condition_type:
            return cond.get("status")
    return None


class PodPhase(enum.Enum):
    PENDING = "Pending"
    RUNNING = "Running"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    UNKNOWN = "Unknown"

    @classmethod
    def from_str(cls, s: str | None) -> PodPhase:
        for member in cls:
            if member.value == s:
                return member
        return cls.UNKNOWN


@dataclass
class ContainerStatus:
    name: str = ""
    ready: bool = False
    restart_count: int = 0
    state_reason: str = ""
    last_terminated_at: datetime | None = None

    @classmethod
    def from_dict(cls, d: dict) -> ContainerStatus:
        state = d.get("state") or {}
        # Only waiting/terminated states carry a reason; running has startedAt only.
        reason = ""
        for detail in state.values():
            if isinstance(detail, dict) and detail.get("reason"):
                reason = detail["reason"]
                break
        terminated = (d.get("lastState") or {}).get("terminated") or {}
        return cls(
            name=d.get("name", ""),
            ready=bool(d.get("ready", False)),
            restart_count=max(int(d.get("restartCount") or 0), 0),
            state_reason=reason,
            last_terminated_at=parse_timestamp(terminated.get("finishedAt")),
        )


@dataclass
class PodRecord:
    namespace: str = ""
    name: str = ""
    phase: PodPhase = PodPhase.UNKNOWN
    ready: bool = False
    node_name: str = ""
    start_time: datetime | None = None
    reason: str = ""
    message: str = ""
    containers: list[ContainerStatus] = field(default_factory=list)

    @property
    def key(self) -> str:
        return f"{self.namespace}/{self.name}"

    @classmethod
    def from_dict(cls, d: dict) -> PodRecord:
        meta = d.get("metadata") or {}
        spec = d.get("spec") or {}
        status = d.get("status") or {}
        conditions = status.get("conditions") or []
        return cls(
            namespace=meta.get("namespace", ""),
            name=meta.get("name", ""),
            phase=PodPhase.from_str(status.get("phase")),
            # A pod without a Ready condition counts as not ready.
            ready=_condition_status(conditions, "Ready") == "True",
            node_name=spec.get("nodeName") or "",
            start_time=parse_timestamp(status.get("startTime")),
            reason=status.get("reason") or "",
            message=status.get("message") or "",
            containers=[
                ContainerStatus.from_dict(cs) for cs in status.get("containerStatuses") or []
            ],
        )


@dataclass
class NodeCondition:
    type: str = ""
    status: str = ""
    reason: str = ""
    message: str = ""

    @classmethod
    def from_dict(cls, d: dict) -> NodeCondition:
        return cls(
            type=d.get("type", ""),
            status=d.get("status", ""),
            reason=d.get("reason") or "",
            message=d.get("message") or "",
        )


@dataclass
class NodeRecord:
    name: str = ""
    unschedulable: bool = False
    ready: bool = False
    conditions: list[NodeCondition] = field(default_factory=list)
    taints: list[dict] = field(default_factory=list)
    capacity_pods: str = ""
    allocatable_cpu: str = ""
    allocatable_memory: str = ""
    roles: list[str] = field(default_factory=list)
    kubelet_version: str = ""
    internal_ip: str = ""
    os_image: str = ""
    kernel_version: str = ""
    container_runtime: str = ""

    @property
    def status_label(self) -> str:
        return "Ready" if self.ready else "NotReady"

    @property
    def active_conditions(self) -> set[str]:
        return {c.type for c in self.conditions if c.status == "True"}

    @property
    def pressure_conditions(self) -> set[str]:
        return self.active_conditions & PRESSURE_CONDITIONS

    @property
    def taint_count(self) -> int:
        return sum(1 for t in self.taints if t.get("key"))

    @classmethod
    def from_dict(cls, d: dict) -> NodeRecord:
        meta = d.get("metadata") or {}
        spec = d.get("spec") or {}
        status = d.get("status") or {}
        conditions = [NodeCondition.from_dict(c) for c in status.get("conditions") or []]
        info = status.get("nodeInfo") or {}
        labels = meta.get("labels") or {}
        internal_ip = ""
        for addr in status.get("addresses") or []:
            if addr.get("type") == "InternalIP":
                internal_ip = addr.get("address", "")
                break
        return cls(
            name=meta.get("name", ""),
            unschedulable=bool(spec.get("unschedulable", False)),
            ready=any(c.type == "Ready" and c.status == "True" for c in conditions),
            conditions=conditions,
            taints=list(spec.get("taints") or []),
            capacity_pods=str((status.get("capacity") or {}).get("pods", "")),
            allocatable_cpu=str((status.get("allocatable") or {}).get("cpu", "")),
            allocatable_memory=str((status.get("allocatable") or {}).get("memory", "")),
            roles=sorted(
                key[len(_ROLE_LABEL_PREFIX):] for key in labels
                if key.startswith(_ROLE_LABEL_PREFIX)
            ),
            kubelet_version=info.get("kubeletVersion", ""),
            internal_ip=internal_ip,
            os_image=info.get("osImage", ""),
            kernel_version=info.get("kernelVersion", ""),
            container_runtime=info.get("containerRuntimeVersion", ""),
        )


@dataclass
class NodeMetricsRecord:
    name: str = ""
    cpu: str = ""
    memory: str = ""

    @classmethod
    def from_dict(cls, d: dict) -> NodeMetricsRecord:
        usage = d.get("usage") or {}
        return cls(
            name=(d.get("metadata") or {}).get("name", ""),
            cpu=str(usage.get("cpu", "")),
            memory=str(usage.get("memory", "")),
        )


@dataclass
class PodMetricsRecord:
    namespace: str = ""
    name: str = ""
    cpu_millicores: int = 0
    memory_bytes: int = 0


@dataclass
class EventRecord:
    type: str = ""
    reason: str = ""
    message: str = ""
    object_kind: str = ""
    object_name: str = ""
    last_timestamp: datetime | None = None
    count: int = 1

    @classmethod
    def from_dict(cls, d: dict) -> EventRecord:
        involved = d.get("involvedObject") or {}
        # Events emitted through events.k8s.io may only set eventTime.
        raw_ts = d.get("lastTimestamp") or d.get("eventTime") or d.get("firstTimestamp")
        return cls(
            type=d.get("type") or "",
            reason=d.get("reason") or "",
            message=(d.get("message") or "").strip(),
            object_kind=involved.get("kind", ""),
            object_name=involved.get("name", ""),
            last_timestamp=parse_timestamp(raw_ts),
            count=int(d.get("count") or 1),
        )
