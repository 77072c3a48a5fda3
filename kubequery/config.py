"""Configuration loading from environment variables."""

from __future__ import annotations

import os
import re

from kubequery.errors import ConfigError
from kubequery.models.config import (
    DEFAULT_DB_PATH,
    DEFAULT_POD_LABEL_KEY,
    ClusterConfig,
    IngestConfig,
    KubeQueryConfig,
    LogConfig,
    StoreConfig,
)
from kubequery.observability.logging import LOG_FORMATS

_LABEL_KEY_RE = re.compile(r"^([a-z0-9]([-a-z0-9.]*[a-z0-9])?/)?[A-Za-z0-9]([-A-Za-z0-9_.]{0,61}[A-Za-z0-9])?$")


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"KUBEQUERY_{key}", default)


def _env_bool(key: str, default: bool = False) -> bool:
    val = _env(key, str(default).lower())
    return val.lower() in ("true", "1", "yes")


def validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ConfigError(f"Invalid log level: {value}. Must be one of {sorted(valid)}")
    return value.lower()


def validate_log_format(value: str) -> str:
    if value.lower() not in LOG_FORMATS:
        raise ConfigError(f"Invalid log format: {value}. Must be one of {list(LOG_FORMATS)}")
    return value.lower()


def validate_label_key(value: str) -> str:
    if not _LABEL_KEY_RE.match(value):
        raise ConfigError(f"Invalid pod label key: {value!r}")
    return value


def load_config() -> KubeQueryConfig:
    """Load configuration from KUBEQUERY_* environment variables."""
    return KubeQueryConfig(
        resources=_env("RESOURCES", ""),
        store=StoreConfig(
            path=_env("DB", DEFAULT_DB_PATH) or DEFAULT_DB_PATH,
        ),
        cluster=ClusterConfig(
            kubeconfig=_env("KUBECONFIG", ""),
            context=_env("CONTEXT", ""),
        ),
        ingest=IngestConfig(
            pod_label_key=validate_label_key(_env("POD_LABEL_KEY", DEFAULT_POD_LABEL_KEY)),
            link_dependencies=_env_bool("LINK_DEPENDENCIES", False),
        ),
        log=LogConfig(
            level=validate_log_level(_env("LOG_LEVEL", "info")),
            format=validate_log_format(_env("LOG_FORMAT", "json")),
        ),
    )
