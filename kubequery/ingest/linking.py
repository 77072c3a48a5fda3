"""Deployment dependency linking.

Linking is disabled by default: the pipeline is wired with a
NullDependencyLinker and ``deployment_dependencies`` stays empty.  Enabling
it swaps in StoreDependencyLinker; the pipeline then links every stored
Deployment to the ConfigMaps and Secrets its pod template references, when
both were stored in the same run.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Protocol

from kubequery.errors import StoreError
from kubequery.models.resources import ResourceType
from kubequery.observability.logging import get_logger
from kubequery.store.sqlite_store import ResourceStore

_log = get_logger("ingest.linking")

Reference = tuple[ResourceType, str]


class DependencyLinker(Protocol):
    def link_dependency(self, deployment_id: int, resource_type: str, resource_id: int) -> None: ...


class NullDependencyLinker:
    """Accepts every link and records nothing."""

    def link_dependency(self, deployment_id: int, resource_type: str, resource_id: int) -> None:
        return None


class StoreDependencyLinker:
    """Writes one ``deployment_dependencies`` row per link.

    Insert failures are logged and swallowed; a failed link never fails the
    resource that triggered it.
    """

    def __init__(self, store: ResourceStore) -> None:
        self._store = store

    def link_dependency(self, deployment_id: int, resource_type: str, resource_id: int) -> None:
        try:
            self._store.insert_dependency(deployment_id, resource_type, resource_id)
        except StoreError as exc:
            _log.error(
                "dependency_link_failed",
                deployment_id=deployment_id,
                resource_type=resource_type,
                resource_id=resource_id,
                error=str(exc),
            )
            return
        _log.info(
            "dependency_linked",
            deployment_id=deployment_id,
            resource_type=resource_type,
            resource_id=resource_id,
        )


def extract_references(deployment: dict[str, Any]) -> set[Reference]:
    """ConfigMaps and Secrets referenced by a Deployment's pod template.

    Looks at volumes (including projected sources), ``envFrom`` and
    ``env[].valueFrom`` of every container and init container.
    """
    pod_spec = (((deployment.get("spec") or {}).get("template") or {}).get("spec")) or {}
    refs: set[Reference] = set()

    def _add(kind: ResourceType, name: Any) -> None:
        if isinstance(name, str) and name:
            refs.add((kind, name))

    for volume in pod_spec.get("volumes") or []:
        _add(ResourceType.CONFIGMAP, (volume.get("configMap") or {}).get("name"))
        _add(ResourceType.SECRET, (volume.get("secret") or {}).get("secretName"))
        for source in (volume.get("projected") or {}).get("sources") or []:
            _add(ResourceType.CONFIGMAP, (source.get("configMap") or {}).get("name"))
            _add(ResourceType.SECRET, (source.get("secret") or {}).get("name"))

    containers = (pod_spec.get("containers") or []) + (pod_spec.get("initContainers") or [])
    for container in containers:
        for env_from in container.get("envFrom") or []:
            _add(ResourceType.CONFIGMAP, (env_from.get("configMapRef") or {}).get("name"))
            _add(ResourceType.SECRET, (env_from.get("secretRef") or {}).get("name"))
        for env in container.get("env") or []:
            value_from = env.get("valueFrom") or {}
            _add(ResourceType.CONFIGMAP, (value_from.get("configMapKeyRef") or {}).get("name"))
            _add(ResourceType.SECRET, (value_from.get("secretKeyRef") or {}).get("name"))

    return refs


class DependencyIndex:
    """In-run bookkeeping that pairs stored deployments with stored objects.

    Links are emitted at most once per (deployment, object) pair, in
    whichever order the two sides are ingested.
    """

    def __init__(self, linker: DependencyLinker) -> None:
        self._linker = linker
        # (namespace, kind, name) -> deployment ids referencing it
        self._wanted: dict[tuple[str, ResourceType, str], list[int]] = defaultdict(list)
        # (namespace, kind, name) -> stored row ids
        self._stored: dict[tuple[str, ResourceType, str], list[int]] = defaultdict(list)
        self._linked: set[tuple[int, ResourceType, int]] = set()

    def deployment_stored(self, namespace: str, deployment_id: int, references: set[Reference]) -> None:
        for kind, name in sorted(references):
            key = (namespace, kind, name)
            self._wanted[key].append(deployment_id)
            for resource_id in self._stored.get(key, []):
                self._link(deployment_id, kind, resource_id)

    def object_stored(self, namespace: str, kind: ResourceType, name: str, resource_id: int) -> None:
        key = (namespace, kind, name)
        self._stored[key].append(resource_id)
        for deployment_id in self._wanted.get(key, []):
            self._link(deployment_id, kind, resource_id)

    def _link(self, deployment_id: int, kind: ResourceType, resource_id: int) -> None:
        pair = (deployment_id, kind, resource_id)
        if pair in self._linked:
            return
        self._linked.add(pair)
        self._linker.link_dependency(deployment_id, kind.value, resource_id)
