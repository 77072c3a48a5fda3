"""Resource identifiers and stored-record data structures."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class ResourceType(StrEnum):
    """Kinds of cluster object kube-query knows how to ingest."""

    DEPLOYMENT = "deployment"
    CONFIGMAP = "configmap"
    SECRET = "secret"


@dataclass(frozen=True)
class ResourceSpec:
    """A parsed ``namespace:resourceType:resourceName`` entry."""

    namespace: str
    resource_type: ResourceType
    resource_name: str

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.resource_type.value, self.namespace, self.resource_name)

    def __str__(self) -> str:
        return f"{self.namespace}:{self.resource_type.value}:{self.resource_name}"


@dataclass(frozen=True)
class DeploymentRecord:
    """Row of the ``deployments`` table."""

    id: int
    namespace: str
    name: str
    spec: str  # JSON
    status: str  # JSON


@dataclass(frozen=True)
class DeploymentLogRecord:
    """Row of the ``deployment_logs`` table."""

    id: int
    deployment_id: int
    logs: bytes


@dataclass(frozen=True)
class DataRecord:
    """Row of the ``configmaps`` or ``secrets`` table."""

    id: int
    namespace: str
    name: str
    data: str  # JSON


@dataclass(frozen=True)
class DependencyRecord:
    """Row of the ``deployment_dependencies`` table."""

    id: int
    deployment_id: int
    resource_type: str
    resource_id: int
