"""Core data structures for kube-query."""

from kubequery.models.config import KubeQueryConfig
from kubequery.models.outcomes import (
    IngestOutcome,
    IngestStage,
    IngestStatus,
    LogCollectionOutcome,
    RunSummary,
)
from kubequery.models.resources import (
    DataRecord,
    DependencyRecord,
    DeploymentLogRecord,
    DeploymentRecord,
    ResourceSpec,
    ResourceType,
)

__all__ = [
    "DataRecord",
    "DependencyRecord",
    "DeploymentLogRecord",
    "DeploymentRecord",
    "IngestOutcome",
    "IngestStage",
    "IngestStatus",
    "KubeQueryConfig",
    "LogCollectionOutcome",
    "ResourceSpec",
    "ResourceType",
    "RunSummary",
]
