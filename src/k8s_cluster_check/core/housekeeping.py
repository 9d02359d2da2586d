"""Cleanup of completed pods before each evaluation pass."""

from __future__ import annotations

import logging

from k8s_cluster_check.core.k8s_client import K8sClient
from k8s_cluster_check.models.cluster import PodRecord

logger = logging.getLogger(__name__)

SEPARATOR = "-------------------------------------------------"


def delete_completed_pods(k8s: K8sClient) -> list[str]:
    """Delete every Succeeded pod and return the housekeeping log lines.

    Failures are reported in the log but never affect the check verdict.
    """
    lines = ["", "INFO: Cleaning up 'Completed' status pods..."]
    try:
        completed = [
            PodRecord.from_dict(p) for p in k8s.list_pods(field_selector="status.phase=Succeeded")
        ]
    except Exception:
        logger.warning("Failed to list completed pods", exc_info=True)
        completed = []

    if not completed:
        lines.extend(["", "INFO: No 'Completed' status pods found to delete."])
        lines.append(SEPARATOR)
        return lines

    for pod in completed:
        try:
            deleted = k8s.delete_pod(name=pod.name, namespace=pod.namespace)
        except Exception:
            logger.debug("Failed to delete pod %s", pod.key, exc_info=True)
            lines.append(
                f"WARNING: Failed to delete completed pod '{pod.name}' in namespace '{pod.namespace}'."
            )
            continue
        if deleted:
            lines.append(f"INFO: Deleted completed pod '{pod.name}' in namespace '{pod.namespace}'.")
        else:
            lines.append(f"INFO: Completed pod '{pod.name}' in namespace '{pod.namespace}' was already gone.")
    lines.append(SEPARATOR)
    return lines
