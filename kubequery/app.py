"""Application bootstrap for kube-query.

Wires the components of one run in dependency order:
    input check -> K8s client -> store (open + schema) -> pipeline

Any failure before the pipeline starts is fatal and surfaces as
_ComponentError; the entrypoint turns it into exit status 1.  The store and
the cluster client are released on every exit path, including fatal ones.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from kubequery.cluster.client import ClusterClient, load_cluster_client
from kubequery.errors import ConfigError, KubeQueryError
from kubequery.ingest.linking import DependencyLinker, NullDependencyLinker, StoreDependencyLinker
from kubequery.models.config import KubeQueryConfig
from kubequery.models.outcomes import RunSummary
from kubequery.observability.logging import get_logger
from kubequery.pipeline import IngestPipeline
from kubequery.store.sqlite_store import ResourceStore

ClusterFactory = Callable[[str, str], Awaitable[ClusterClient]]


class _ComponentError(Exception):
    """Raised when a mandatory component fails to start."""

    def __init__(self, component: str, cause: Exception) -> None:
        super().__init__(f"Component '{component}' failed to start: {cause}")
        self.component = component
        self.cause = cause


class KubeQueryApp:
    """Owns the cluster client and the store for the duration of one run."""

    def __init__(
        self,
        config: KubeQueryConfig,
        cluster_factory: ClusterFactory | None = None,
    ) -> None:
        self.config = config
        self._cluster_factory = cluster_factory or load_cluster_client
        self._log = get_logger("app")

    async def run(self) -> RunSummary:
        """Ingest every configured resource and return the run summary.

        Raises _ComponentError if a mandatory component cannot start.
        """
        resources = self.config.resources
        if not resources.strip():
            raise _ComponentError(
                "input",
                ConfigError("No resources provided. Use the --resources flag to specify resources."),
            )

        cluster = await self._start_cluster_client()
        try:
            store = self._open_store()
            with store:
                self._initialize_store(store)
                pipeline = IngestPipeline(
                    cluster,
                    store,
                    linker=self._build_linker(store),
                    pod_label_key=self.config.ingest.pod_label_key,
                )
                return await pipeline.run(resources)
        finally:
            await self._stop_cluster_client(cluster)

    # ------------------------------------------------------------------
    # Component helpers
    # ------------------------------------------------------------------

    async def _start_cluster_client(self) -> ClusterClient:
        self._log.debug("starting k8s client")
        cluster_cfg = self.config.cluster
        try:
            return await self._cluster_factory(cluster_cfg.kubeconfig, cluster_cfg.context)
        except Exception as exc:
            raise _ComponentError("k8s_client", exc) from exc

    def _open_store(self) -> ResourceStore:
        try:
            return ResourceStore.open(self.config.store.path)
        except KubeQueryError as exc:
            raise _ComponentError("store", exc) from exc

    def _initialize_store(self, store: ResourceStore) -> None:
        try:
            store.initialize()
        except KubeQueryError as exc:
            raise _ComponentError("store_schema", exc) from exc
        self._log.info("store ready", path=store.path)

    def _build_linker(self, store: ResourceStore) -> DependencyLinker:
        if self.config.ingest.link_dependencies:
            self._log.info("dependency linking enabled")
            return StoreDependencyLinker(store)
        return NullDependencyLinker()

    async def _stop_cluster_client(self, cluster: ClusterClient) -> None:
        try:
            await cluster.close()
        except Exception as exc:
            self._log.debug("k8s client close raised (non-fatal)", error=str(exc))


# ---------------------------------------------------------------------------
# Async entrypoint
# ---------------------------------------------------------------------------


async def main(
    config: KubeQueryConfig,
    cluster_factory: ClusterFactory | None = None,
) -> RunSummary:
    """Run once; fatal startup errors exit with status 1."""
    app = KubeQueryApp(config, cluster_factory=cluster_factory)
    try:
        return await app.run()
    except _ComponentError as exc:
        log = get_logger("app")
        log.critical(
            "fatal startup error",
            component=exc.component,
            error=str(exc.cause),
        )
        raise SystemExit(1) from exc
