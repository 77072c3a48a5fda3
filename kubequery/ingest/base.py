"""Base class shared by every ingestor."""

from __future__ import annotations

from abc import ABC, abstractmethod

import structlog

from kubequery.cluster.client import ClusterClient
from kubequery.models.outcomes import IngestOutcome, IngestStage
from kubequery.models.resources import ResourceSpec, ResourceType
from kubequery.store.sqlite_store import ResourceStore


class Ingestor(ABC):
    """Fetch one resource, encode its relevant fields, insert one row.

    ``ingest`` never raises for per-resource failures: fetch, serialization
    and insert errors come back as a FAILED outcome naming the stage.
    """

    resource_type: ResourceType

    def __init__(self, cluster: ClusterClient, store: ResourceStore) -> None:
        self._cluster = cluster
        self._store = store

    @abstractmethod
    async def ingest(self, spec: ResourceSpec) -> IngestOutcome:
        """Process *spec* and report what happened."""

    @staticmethod
    def _fail(
        log: structlog.stdlib.BoundLogger,
        spec: ResourceSpec,
        stage: IngestStage,
        exc: Exception,
    ) -> IngestOutcome:
        log.error(
            "resource_ingest_failed",
            kind=spec.resource_type.value,
            namespace=spec.namespace,
            name=spec.resource_name,
            stage=stage.value,
            error=str(exc),
        )
        return IngestOutcome.failed(spec, stage, exc)
