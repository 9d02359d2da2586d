"""Kubernetes API wrapper."""

from __future__ import annotations

from typing import Any

from kubernetes import client, config
from kubernetes.client import ApiException

METRICS_GROUP = "metrics.k8s.io"
METRICS_VERSION = "v1beta1"


class ClusterUnavailableError(Exception):
    """Raised when no cluster configuration can be loaded or the API is unreachable."""


class K8sClient:
    """Thin wrapper around the Kubernetes Python client.

    All list/read helpers return plain API dicts (camelCase keys, as the
    API server serialises them) so callers never depend on the generated
    model classes.
    """

    def __init__(self, context: str | None = None, request_timeout: int = 30):
        self.context = context
        self.request_timeout = request_timeout
        self._core_v1: client.CoreV1Api | None = None
        self._custom: client.CustomObjectsApi | None = None
        self._version: client.VersionApi | None = None
        self._api_client: client.ApiClient | None = None

    def _load_config(self) -> client.ApiClient:
        if self._api_client is not None:
            return self._api_client
        try:
            cfg = client.Configuration()
            config.load_kube_config(
                context=self.context,
                client_configuration=cfg,
            )
            # Prevent indefinite hangs on unreachable clusters
            cfg.retries = 1
            if not cfg.connection_pool_maxsize:
                cfg.connection_pool_maxsize = 4
            self._api_client = client.ApiClient(configuration=cfg)
        except config.ConfigException:
            try:
                config.load_incluster_config()
            except config.ConfigException as e:
                raise ClusterUnavailableError(f"No usable kubeconfig or in-cluster configuration: {e}") from e
            self._api_client = client.ApiClient()
        return self._api_client

    @property
    def core_v1(self) -> client.CoreV1Api:
        if self._core_v1 is None:
            self._core_v1 = client.CoreV1Api(api_client=self._load_config())
        return self._core_v1

    @property
    def custom(self) -> client.CustomObjectsApi:
        if self._custom is None:
            self._custom = client.CustomObjectsApi(api_client=self._load_config())
        return self._custom

    @property
    def version(self) -> client.VersionApi:
        if self._version is None:
            self._version = client.VersionApi(api_client=self._load_config())
        return self._version

    def _to_dict(self, obj: Any) -> Any:
        return self._load_config().sanitize_for_serialization(obj)

    def ping(self) -> str:
        """Return the API server git version, or raise ClusterUnavailableError."""
        try:
            info = self.version.get_code(_request_timeout=self.request_timeout)
        except ClusterUnavailableError:
            raise
        except Exception as e:
            raise ClusterUnavailableError(f"Kubernetes API is not reachable: {e}") from e
        return info.git_version or "unknown"

    def list_pods(self, field_selector: str | None = None) -> list[dict]:
        """List pods across all namespaces."""
        kwargs: dict[str, Any] = {"_request_timeout": self.request_timeout}
        if field_selector:
            kwargs["field_selector"] = field_selector
        result = self.core_v1.list_pod_for_all_namespaces(**kwargs)
        return [self._to_dict(p) for p in result.items]

    def read_pod(self, name: str, namespace: str) -> dict | None:
        try:
            result = self.core_v1.read_namespaced_pod(
                name=name, namespace=namespace, _request_timeout=self.request_timeout,
            )
        except ApiException as e:
            if e.status == 404:
                return None
            raise
        return self._to_dict(result)

    def delete_pod(self, name: str, namespace: str) -> bool:
        """Delete a pod. Returns False if it was already gone."""
        try:
            self.core_v1.delete_namespaced_pod(
                name=name, namespace=namespace, _request_timeout=self.request_timeout,
            )
        except ApiException as e:
            if e.status == 404:
                return False
            raise
        return True

    def list_nodes(self) -> list[dict]:
        result = self.core_v1.list_node(_request_timeout=self.request_timeout)
        return [self._to_dict(n) for n in result.items]

    def read_node(self, name: str) -> dict | None:
        try:
            result = self.core_v1.read_node(name=name, _request_timeout=self.request_timeout)
        except ApiException as e:
            if e.status == 404:
                return None
            raise
        return self._to_dict(result)

    def list_events(self, field_selector: str, namespace: str | None = None) -> list[dict]:
        """List core/v1 events matching a field selector, namespaced or cluster-wide."""
        if namespace:
            result = self.core_v1.list_namespaced_event(
                namespace=namespace,
                field_selector=field_selector,
                _request_timeout=self.request_timeout,
            )
        else:
            result = self.core_v1.list_event_for_all_namespaces(
                field_selector=field_selector,
                _request_timeout=self.request_timeout,
            )
        return [self._to_dict(e) for e in result.items]

    def list_node_metrics(self) -> list[dict] | None:
        """List node usage from metrics-server; None when the API is not served."""
        return self._list_metrics("nodes")

    def list_pod_metrics(self) -> list[dict] | None:
        return self._list_metrics("pods")

    def _list_metrics(self, plural: str) -> list[dict] | None:
        try:
            result = self.custom.list_cluster_custom_object(
                group=METRICS_GROUP,
                version=METRICS_VERSION,
                plural=plural,
                _request_timeout=self.request_timeout,
            )
        except ApiException as e:
            if e.status in (404, 503):
                return None
            raise
        return result.get("items", [])
