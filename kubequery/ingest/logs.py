"""Pod log collection for a stored deployment.

All pods labelled ``<label_key>=<deploymentName>`` are streamed in listing
order into one buffer and written as a single ``deployment_logs`` row.
Failures are pod-granular: a pod whose stream cannot be opened or read is
skipped and the others are still collected.
"""

from __future__ import annotations

from kubequery.cluster.client import ClusterClient
from kubequery.errors import ClusterError, StoreError
from kubequery.models.config import DEFAULT_POD_LABEL_KEY
from kubequery.models.outcomes import LogCollectionOutcome
from kubequery.observability.logging import get_logger
from kubequery.store.sqlite_store import ResourceStore

_log = get_logger("ingest.logs")


class DeploymentLogCollector:
    """Collects and stores the concatenated logs of a deployment's pods."""

    def __init__(
        self,
        cluster: ClusterClient,
        store: ResourceStore,
        label_key: str = DEFAULT_POD_LABEL_KEY,
    ) -> None:
        self._cluster = cluster
        self._store = store
        self._label_key = label_key

    async def collect(self, namespace: str, deployment_name: str, deployment_id: int) -> LogCollectionOutcome:
        selector = f"{self._label_key}={deployment_name}"
        outcome = LogCollectionOutcome(deployment_id=deployment_id, label_selector=selector)

        try:
            outcome.pods = await self._cluster.list_pods(namespace, selector)
        except ClusterError as exc:
            _log.error(
                "pod_list_failed",
                namespace=namespace,
                deployment=deployment_name,
                label_selector=selector,
                error=str(exc),
            )
            outcome.error = str(exc)
            return outcome

        buffer = bytearray()
        for pod_name in outcome.pods:
            data = await self._read_pod(namespace, pod_name)
            if data is None:
                outcome.failed_pods.append(pod_name)
                continue
            buffer.extend(data)

        outcome.bytes_collected = len(buffer)
        try:
            outcome.record_id = self._store.insert_deployment_logs(deployment_id, bytes(buffer))
        except StoreError as exc:
            _log.error("deployment_logs_insert_failed", deployment_id=deployment_id, error=str(exc))
            outcome.error = str(exc)
            return outcome

        _log.info(
            "deployment_logs_stored",
            namespace=namespace,
            deployment=deployment_name,
            deployment_id=deployment_id,
            pods=len(outcome.pods),
            failed_pods=len(outcome.failed_pods),
            bytes=outcome.bytes_collected,
        )
        return outcome

    async def _read_pod(self, namespace: str, pod_name: str) -> bytes | None:
        """Drain one pod's log stream; None when it could not be opened or read."""
        try:
            stream = await self._cluster.open_pod_log_stream(namespace, pod_name)
        except ClusterError as exc:
            _log.warning("pod_log_stream_failed", namespace=namespace, pod=pod_name, error=str(exc))
            return None

        async with stream:
            try:
                return await stream.read()
            except ClusterError as exc:
                _log.warning("pod_log_read_failed", namespace=namespace, pod=pod_name, error=str(exc))
                return None
