"""kubernetes-asyncio adapter exposing exactly what the ingestors need.

Bodies are returned as plain dicts keyed by API field names (camelCase),
produced by ``ApiClient.sanitize_for_serialization``; the ingestors never
see generated model classes.

Error mapping:
    404 ApiException or log response       -> ResourceNotFoundError
    other non-2xx, aiohttp, timeout         -> ClusterTransportError
"""

from __future__ import annotations

import asyncio
from types import TracebackType
from typing import Any, NoReturn

import aiohttp
from kubernetes_asyncio import client as k8s_client
from kubernetes_asyncio import config as k8s_config
from kubernetes_asyncio.client.exceptions import ApiException

from kubequery.errors import ClusterConfigError, ClusterTransportError, ResourceNotFoundError
from kubequery.observability.logging import get_logger

_log = get_logger("cluster")

_LOG_CHUNK_SIZE = 64 * 1024


def _translate(exc: Exception, kind: str, namespace: str, name: str) -> Exception:
    if isinstance(exc, ApiException):
        if exc.status == 404:
            return ResourceNotFoundError(kind, namespace, name)
        return ClusterTransportError(f"{kind} {namespace}/{name}: HTTP {exc.status} {exc.reason}")
    if isinstance(exc, (asyncio.TimeoutError, TimeoutError)):
        return ClusterTransportError(f"{kind} {namespace}/{name}: request timed out")
    return ClusterTransportError(f"{kind} {namespace}/{name}: {exc}")


_CLUSTER_ERRORS = (ApiException, aiohttp.ClientError, asyncio.TimeoutError, TimeoutError)


class PodLogStream:
    """A single pod's log response, drained with :meth:`read`.

    Always use as ``async with`` so the HTTP response is released whether
    the read completes or fails.
    """

    def __init__(self, response: Any, namespace: str, pod_name: str) -> None:
        self._response = response
        self.namespace = namespace
        self.pod_name = pod_name
        self._closed = False

    async def read(self) -> bytes:
        """Read the stream to completion."""
        buf = bytearray()
        try:
            async for chunk in self._response.content.iter_chunked(_LOG_CHUNK_SIZE):
                buf.extend(chunk)
        except _CLUSTER_ERRORS as exc:
            raise _translate(exc, "Pod log", self.namespace, self.pod_name) from exc
        return bytes(buf)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._response.release()

    @property
    def closed(self) -> bool:
        return self._closed

    async def __aenter__(self) -> PodLogStream:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class ClusterClient:
    """Fetches Deployments, ConfigMaps, Secrets, pod lists and pod logs."""

    def __init__(self, api_client: k8s_client.ApiClient) -> None:
        self._api_client = api_client
        self._core = k8s_client.CoreV1Api(api_client)
        self._apps = k8s_client.AppsV1Api(api_client)

    def _to_dict(self, obj: Any) -> dict[str, Any]:
        return self._api_client.sanitize_for_serialization(obj)  # type: ignore[no-any-return]

    async def get_deployment(self, namespace: str, name: str) -> dict[str, Any]:
        try:
            obj = await self._apps.read_namespaced_deployment(name, namespace)
        except _CLUSTER_ERRORS as exc:
            raise _translate(exc, "Deployment", namespace, name) from exc
        return self._to_dict(obj)

    async def get_configmap(self, namespace: str, name: str) -> dict[str, Any]:
        try:
            obj = await self._core.read_namespaced_config_map(name, namespace)
        except _CLUSTER_ERRORS as exc:
            raise _translate(exc, "ConfigMap", namespace, name) from exc
        return self._to_dict(obj)

    async def get_secret(self, namespace: str, name: str) -> dict[str, Any]:
        try:
            obj = await self._core.read_namespaced_secret(name, namespace)
        except _CLUSTER_ERRORS as exc:
            raise _translate(exc, "Secret", namespace, name) from exc
        return self._to_dict(obj)

    async def list_pods(self, namespace: str, label_selector: str) -> list[str]:
        """Return the names of pods matching *label_selector*, in listing order."""
        try:
            pods = await self._core.list_namespaced_pod(namespace, label_selector=label_selector)
        except _CLUSTER_ERRORS as exc:
            raise _translate(exc, "PodList", namespace, label_selector) from exc
        return [p.metadata.name for p in (pods.items or [])]

    async def open_pod_log_stream(self, namespace: str, pod_name: str) -> PodLogStream:
        """Open *pod_name*'s log as a stream.

        Raw responses bypass the client's status check, so a non-2xx reply
        (container still waiting, pod gone) is released and raised here
        instead of being read as log output.
        """
        try:
            response = await self._core.read_namespaced_pod_log(pod_name, namespace, _preload_content=False)
        except _CLUSTER_ERRORS as exc:
            raise _translate(exc, "Pod log", namespace, pod_name) from exc
        if not 200 <= response.status <= 299:
            await self._reject(response, namespace, pod_name)
        return PodLogStream(response, namespace, pod_name)

    async def _reject(self, response: Any, namespace: str, pod_name: str) -> NoReturn:
        try:
            body = await response.read()
        except _CLUSTER_ERRORS:
            body = b""
        finally:
            response.release()
        exc = ApiException(status=response.status, reason=response.reason)
        exc.body = body.decode("utf-8", errors="replace")
        _log.debug("pod_log_request_rejected", namespace=namespace, pod=pod_name, status=response.status, body=exc.body)
        raise _translate(exc, "Pod log", namespace, pod_name) from exc

    async def close(self) -> None:
        await self._api_client.close()
        _log.debug("cluster_client_closed")


async def load_cluster_client(kubeconfig: str = "", context: str = "") -> ClusterClient:
    """Build a ClusterClient from the ambient cluster configuration.

    Without overrides: in-cluster service account first, then the default
    kubeconfig loading rules (``$KUBECONFIG`` / ``~/.kube/config``).  An
    explicit kubeconfig path or context skips the in-cluster attempt.

    Raises:
        ClusterConfigError: no usable configuration, or the client could not
            be constructed.
    """
    configuration = k8s_client.Configuration()
    try:
        if not kubeconfig and not context:
            try:
                k8s_config.load_incluster_config(client_configuration=configuration)
                _log.info("k8s client configured from in-cluster service account")
                return ClusterClient(k8s_client.ApiClient(configuration=configuration))
            except k8s_config.ConfigException:
                pass
        await k8s_config.load_kube_config(
            config_file=kubeconfig or None,
            context=context or None,
            client_configuration=configuration,
        )
        _log.info("k8s client configured from kubeconfig", kubeconfig=kubeconfig or "default", context=context or "current")
        return ClusterClient(k8s_client.ApiClient(configuration=configuration))
    except Exception as exc:
        raise ClusterConfigError(f"Error loading kube client config: {exc}") from exc
