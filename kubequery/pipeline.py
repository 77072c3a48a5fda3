"""Sequential dispatch of parsed resource entries to their ingestors."""

from __future__ import annotations

from kubequery.cluster.client import ClusterClient
from kubequery.ingest.base import Ingestor
from kubequery.ingest.data_objects import ConfigMapIngestor, SecretIngestor
from kubequery.ingest.deployment import DeploymentIngestor
from kubequery.ingest.linking import DependencyIndex, DependencyLinker, NullDependencyLinker
from kubequery.models.config import DEFAULT_POD_LABEL_KEY
from kubequery.models.outcomes import IngestOutcome, IngestStatus, RunSummary
from kubequery.models.resources import ResourceType
from kubequery.observability.logging import get_logger
from kubequery.parser import parse_resource_specs
from kubequery.store.sqlite_store import ResourceStore

_log = get_logger("pipeline")


class IngestPipeline:
    """Runs every entry of a ``--resources`` string through its ingestor.

    Entries are processed one at a time in input order.  A failure only
    affects its own entry; the summary holds one outcome per non-blank line.
    """

    def __init__(
        self,
        cluster: ClusterClient,
        store: ResourceStore,
        linker: DependencyLinker | None = None,
        pod_label_key: str = DEFAULT_POD_LABEL_KEY,
    ) -> None:
        self._ingestors: dict[ResourceType, Ingestor] = {
            ResourceType.DEPLOYMENT: DeploymentIngestor(cluster, store, pod_label_key=pod_label_key),
            ResourceType.CONFIGMAP: ConfigMapIngestor(cluster, store),
            ResourceType.SECRET: SecretIngestor(cluster, store),
        }
        self._dependencies = DependencyIndex(linker or NullDependencyLinker())

    async def run(self, resources: str) -> RunSummary:
        summary = RunSummary()

        def _skip(entry: str, reason: str) -> None:
            summary.add(IngestOutcome.skipped(entry, reason))

        for spec in parse_resource_specs(resources, on_invalid=_skip):
            outcome = await self._ingestors[spec.resource_type].ingest(spec)
            summary.add(outcome)
            if outcome.status == IngestStatus.STORED:
                self._record_for_linking(outcome)

        _log.info("run_complete", **summary.as_dict())
        return summary

    def _record_for_linking(self, outcome: IngestOutcome) -> None:
        spec = outcome.spec
        assert spec is not None
        assert outcome.record_id is not None
        if spec.resource_type == ResourceType.DEPLOYMENT:
            self._dependencies.deployment_stored(spec.namespace, outcome.record_id, outcome.references)
        else:
            self._dependencies.object_stored(spec.namespace, spec.resource_type, spec.resource_name, outcome.record_id)
