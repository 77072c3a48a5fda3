"""Exception hierarchy for kube-query.

Fatal errors abort the whole run (the app exits non-zero).  Recoverable
errors are caught by the ingestors and turned into a FAILED outcome for the
single resource being processed.
"""

from __future__ import annotations


class KubeQueryError(Exception):
    """Base class for every error raised by kube-query."""


# ---------------------------------------------------------------------------
# Fatal
# ---------------------------------------------------------------------------


class ConfigError(KubeQueryError):
    """Invalid configuration value (env var or CLI option)."""


class ClusterConfigError(KubeQueryError):
    """Neither in-cluster nor kubeconfig credentials could be loaded."""


class StoreOpenError(KubeQueryError):
    """The SQLite file could not be opened."""


class StoreInitError(KubeQueryError):
    """A schema statement failed during store initialization."""

    def __init__(self, table: str, cause: Exception) -> None:
        super().__init__(f"Error creating {table} table: {cause}")
        self.table = table
        self.cause = cause


# ---------------------------------------------------------------------------
# Recoverable (per resource)
# ---------------------------------------------------------------------------


class ClusterError(KubeQueryError):
    """A cluster API call failed."""


class ResourceNotFoundError(ClusterError):
    """The API server answered 404 for the requested object."""

    def __init__(self, kind: str, namespace: str, name: str) -> None:
        super().__init__(f"{kind} {namespace}/{name} not found")
        self.kind = kind
        self.namespace = namespace
        self.name = name


class ClusterTransportError(ClusterError):
    """Any non-404 API error, connection failure or timeout."""


class SerializationError(KubeQueryError):
    """A resource field could not be encoded to structured text."""


class StoreError(KubeQueryError):
    """An insert (or row-id retrieval) against the store failed."""
