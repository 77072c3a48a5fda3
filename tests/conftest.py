"""Shared fixtures for the kube-query test suite."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
import structlog

from kubequery.store.sqlite_store import ResourceStore


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    """Undo any structlog.configure() done by the code under test."""
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in (
        "KUBEQUERY_RESOURCES",
        "KUBEQUERY_DB",
        "KUBEQUERY_KUBECONFIG",
        "KUBEQUERY_CONTEXT",
        "KUBEQUERY_LOG_LEVEL",
        "KUBEQUERY_LOG_FORMAT",
        "KUBEQUERY_POD_LABEL_KEY",
        "KUBEQUERY_LINK_DEPENDENCIES",
    ):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture()
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "kube_data.db"


@pytest.fixture()
def store(db_path: Path) -> Iterator[ResourceStore]:
    """An initialized store on a throwaway SQLite file."""
    with ResourceStore.open(db_path) as s:
        s.initialize()
        yield s
