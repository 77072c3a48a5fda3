"""ConfigMap and Secret ingestion.

Both kinds store only their ``data`` mapping.  Secret values are kept exactly
as the API returns them (base64 strings); nothing is decoded or redacted.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Any

import structlog

from kubequery.encoding import encode_structured
from kubequery.errors import ClusterError, SerializationError, StoreError
from kubequery.ingest.base import Ingestor
from kubequery.models.outcomes import IngestOutcome, IngestStage
from kubequery.models.resources import ResourceSpec, ResourceType
from kubequery.observability.logging import get_logger


class _DataObjectIngestor(Ingestor):
    """fetch -> encode ``data`` -> insert; no child rows."""

    _logger: structlog.stdlib.BoundLogger

    @abstractmethod
    async def _fetch(self, namespace: str, name: str) -> dict[str, Any]: ...

    @abstractmethod
    def _insert(self, namespace: str, name: str, data: str) -> int: ...

    async def ingest(self, spec: ResourceSpec) -> IngestOutcome:
        kind = self.resource_type.value
        namespace, name = spec.namespace, spec.resource_name
        self._logger.info(f"processing_{kind}", namespace=namespace, name=name)

        try:
            body = await self._fetch(namespace, name)
        except ClusterError as exc:
            return self._fail(self._logger, spec, IngestStage.FETCH, exc)

        try:
            data = encode_structured(body.get("data"), f"{kind} data")
        except SerializationError as exc:
            return self._fail(self._logger, spec, IngestStage.SERIALIZE, exc)

        try:
            record_id = self._insert(namespace, name, data)
        except StoreError as exc:
            return self._fail(self._logger, spec, IngestStage.INSERT, exc)

        self._logger.info(f"{kind}_stored", namespace=namespace, name=name, id=record_id)
        return IngestOutcome.stored(spec, record_id)


class ConfigMapIngestor(_DataObjectIngestor):
    resource_type = ResourceType.CONFIGMAP
    _logger = get_logger("ingest.configmap")

    async def _fetch(self, namespace: str, name: str) -> dict[str, Any]:
        return await self._cluster.get_configmap(namespace, name)

    def _insert(self, namespace: str, name: str, data: str) -> int:
        return self._store.insert_configmap(namespace, name, data)


class SecretIngestor(_DataObjectIngestor):
    resource_type = ResourceType.SECRET
    _logger = get_logger("ingest.secret")

    async def _fetch(self, namespace: str, name: str) -> dict[str, Any]:
        return await self._cluster.get_secret(namespace, name)

    def _insert(self, namespace: str, name: str, data: str) -> int:
        return self._store.insert_secret(namespace, name, data)
