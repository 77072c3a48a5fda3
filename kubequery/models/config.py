"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_DB_PATH = "kube_data.db"
DEFAULT_POD_LABEL_KEY = "app"


@dataclass
class StoreConfig:
    """SQLite store configuration."""

    path: str = DEFAULT_DB_PATH


@dataclass
class ClusterConfig:
    """Cluster credential discovery overrides.

    Both empty means: in-cluster service account, then the default
    kubeconfig loading rules.
    """

    kubeconfig: str = ""
    context: str = ""


@dataclass
class IngestConfig:
    """Ingestion behaviour."""

    pod_label_key: str = DEFAULT_POD_LABEL_KEY
    link_dependencies: bool = False


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"
    format: str = "json"


@dataclass
class KubeQueryConfig:
    """Top-level kube-query configuration."""

    resources: str = ""
    store: StoreConfig = field(default_factory=StoreConfig)
    cluster: ClusterConfig = field(default_factory=ClusterConfig)
    ingest: IngestConfig = field(default_factory=IngestConfig)
    log: LogConfig = field(default_factory=LogConfig)
