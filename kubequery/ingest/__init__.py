"""Resource ingestors.

Submodules
----------
base          -- Ingestor ABC: fetch, encode, insert, report an outcome.
deployment    -- DeploymentIngestor: spec/status row, then pod logs.
logs          -- DeploymentLogCollector: per-pod log streams into one row.
data_objects  -- ConfigMapIngestor / SecretIngestor: ``data`` mapping row.
linking       -- DependencyLinker extension point (disabled by default).
"""

from kubequery.ingest.base import Ingestor
from kubequery.ingest.data_objects import ConfigMapIngestor, SecretIngestor
from kubequery.ingest.deployment import DeploymentIngestor
from kubequery.ingest.linking import (
    DependencyIndex,
    DependencyLinker,
    NullDependencyLinker,
    StoreDependencyLinker,
    extract_references,
)
from kubequery.ingest.logs import DeploymentLogCollector

__all__ = [
    "ConfigMapIngestor",
    "DependencyIndex",
    "DependencyLinker",
    "DeploymentIngestor",
    "DeploymentLogCollector",
    "Ingestor",
    "NullDependencyLinker",
    "SecretIngestor",
    "StoreDependencyLinker",
    "extract_references",
]
