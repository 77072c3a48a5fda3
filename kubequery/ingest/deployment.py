"""Deployment ingestion: spec/status row plus concatenated pod logs."""

from __future__ import annotations

from kubequery.cluster.client import ClusterClient
from kubequery.encoding import encode_structured
from kubequery.errors import ClusterError, SerializationError, StoreError
from kubequery.ingest.base import Ingestor
from kubequery.ingest.linking import extract_references
from kubequery.ingest.logs import DeploymentLogCollector
from kubequery.models.config import DEFAULT_POD_LABEL_KEY
from kubequery.models.outcomes import IngestOutcome, IngestStage
from kubequery.models.resources import ResourceSpec, ResourceType
from kubequery.observability.logging import get_logger
from kubequery.store.sqlite_store import ResourceStore

_log = get_logger("ingest.deployment")


class DeploymentIngestor(Ingestor):
    """Stores a Deployment's spec and status, then its pods' logs.

    The deployment row is committed before logs are collected, so it
    survives a failed log collection.
    """

    resource_type = ResourceType.DEPLOYMENT

    def __init__(
        self,
        cluster: ClusterClient,
        store: ResourceStore,
        log_collector: DeploymentLogCollector | None = None,
        pod_label_key: str = DEFAULT_POD_LABEL_KEY,
    ) -> None:
        super().__init__(cluster, store)
        self._logs = log_collector or DeploymentLogCollector(cluster, store, label_key=pod_label_key)

    async def ingest(self, spec: ResourceSpec) -> IngestOutcome:
        namespace, name = spec.namespace, spec.resource_name
        _log.info("processing_deployment", namespace=namespace, name=name)

        try:
            deployment = await self._cluster.get_deployment(namespace, name)
        except ClusterError as exc:
            return self._fail(_log, spec, IngestStage.FETCH, exc)

        try:
            spec_text = encode_structured(deployment.get("spec", {}), "deployment spec")
            status_text = encode_structured(deployment.get("status", {}), "deployment status")
        except SerializationError as exc:
            return self._fail(_log, spec, IngestStage.SERIALIZE, exc)

        try:
            deployment_id = self._store.insert_deployment(namespace, name, spec_text, status_text)
        except StoreError as exc:
            return self._fail(_log, spec, IngestStage.INSERT, exc)

        _log.info("deployment_stored", namespace=namespace, name=name, id=deployment_id)

        outcome = IngestOutcome.stored(spec, deployment_id)
        outcome.logs = await self._logs.collect(namespace, name, deployment_id)
        outcome.references = extract_references(deployment)
        return outcome
