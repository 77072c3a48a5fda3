"""File-backed SQLite store receiving every ingested record.

One ResourceStore owns one ``sqlite3`` connection for the whole run.  Every
insert commits immediately: a deployment row persists even if its log
collection fails afterwards.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from types import TracebackType

from kubequery.errors import StoreError, StoreOpenError
from kubequery.models.resources import (
    DataRecord,
    DependencyRecord,
    DeploymentLogRecord,
    DeploymentRecord,
)
from kubequery.observability.logging import get_logger
from kubequery.store.schema import initialize_store

_log = get_logger("store")

_DATA_TABLES = frozenset({"configmaps", "secrets"})


class ResourceStore:
    """Thin write/read layer over a single SQLite connection.

    Use as a context manager so the connection is closed on every exit path::

        with ResourceStore.open("kube_data.db") as store:
            store.initialize()
            ...
    """

    def __init__(self, conn: sqlite3.Connection, path: str = ":memory:") -> None:
        self._conn = conn
        self.path = path

    @classmethod
    def open(cls, path: str | Path) -> ResourceStore:
        """Open (creating if needed) the SQLite file at *path*."""
        try:
            conn = sqlite3.connect(str(path))
            # Force the file to be touched now so open errors surface here
            conn.execute("SELECT 1")
        except sqlite3.Error as exc:
            raise StoreOpenError(f"Error opening database {path}: {exc}") from exc
        _log.debug("store_opened", path=str(path))
        return cls(conn, str(path))

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        initialize_store(self._conn)

    def close(self) -> None:
        self._conn.close()
        _log.debug("store_closed", path=self.path)

    def __enter__(self) -> ResourceStore:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def _insert(self, sql: str, params: tuple[object, ...], what: str) -> int:
        try:
            cursor = self._conn.execute(sql, params)
            self._conn.commit()
        except sqlite3.Error as exc:
            raise StoreError(f"Error inserting {what} into database: {exc}") from exc
        row_id = cursor.lastrowid
        if row_id is None:
            raise StoreError(f"Error getting last insert ID for {what}")
        return row_id

    def insert_deployment(self, namespace: str, name: str, spec: str, status: str) -> int:
        return self._insert(
            "INSERT INTO deployments (namespace, name, spec, status) VALUES (?, ?, ?, ?)",
            (namespace, name, spec, status),
            "deployment",
        )

    def insert_deployment_logs(self, deployment_id: int, logs: bytes) -> int:
        return self._insert(
            "INSERT INTO deployment_logs (deployment_id, logs) VALUES (?, ?)",
            (deployment_id, sqlite3.Binary(logs)),
            "logs",
        )

    def insert_configmap(self, namespace: str, name: str, data: str) -> int:
        return self._insert(
            "INSERT INTO configmaps (namespace, name, data) VALUES (?, ?, ?)",
            (namespace, name, data),
            "configmap",
        )

    def insert_secret(self, namespace: str, name: str, data: str) -> int:
        return self._insert(
            "INSERT INTO secrets (namespace, name, data) VALUES (?, ?, ?)",
            (namespace, name, data),
            "secret",
        )

    def insert_dependency(self, deployment_id: int, resource_type: str, resource_id: int) -> int:
        return self._insert(
            "INSERT INTO deployment_dependencies (deployment_id, resource_type, resource_id) VALUES (?, ?, ?)",
            (deployment_id, resource_type, resource_id),
            "dependency",
        )

    # ------------------------------------------------------------------
    # Reads (offline inspection)
    # ------------------------------------------------------------------

    def table_names(self) -> list[str]:
        rows = self._conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name NOT LIKE 'sqlite_%' ORDER BY name"
        ).fetchall()
        return [r[0] for r in rows]

    def deployments(self, namespace: str | None = None, name: str | None = None) -> list[DeploymentRecord]:
        sql = "SELECT id, namespace, name, spec, status FROM deployments"
        clauses, params = _filters(namespace, name)
        rows = self._conn.execute(sql + clauses + " ORDER BY id", params).fetchall()
        return [DeploymentRecord(*row) for row in rows]

    def deployment_logs(self, deployment_id: int | None = None) -> list[DeploymentLogRecord]:
        sql = "SELECT id, deployment_id, logs FROM deployment_logs"
        params: tuple[object, ...] = ()
        if deployment_id is not None:
            sql += " WHERE deployment_id = ?"
            params = (deployment_id,)
        rows = self._conn.execute(sql + " ORDER BY id", params).fetchall()
        return [DeploymentLogRecord(row[0], row[1], bytes(row[2] or b"")) for row in rows]

    def data_records(self, table: str, namespace: str | None = None, name: str | None = None) -> list[DataRecord]:
        if table not in _DATA_TABLES:
            raise ValueError(f"Not a data table: {table}")
        clauses, params = _filters(namespace, name)
        rows = self._conn.execute(
            f"SELECT id, namespace, name, data FROM {table}" + clauses + " ORDER BY id",  # noqa: S608
            params,
        ).fetchall()
        return [DataRecord(*row) for row in rows]

    def dependencies(self, deployment_id: int | None = None) -> list[DependencyRecord]:
        sql = "SELECT id, deployment_id, resource_type, resource_id FROM deployment_dependencies"
        params: tuple[object, ...] = ()
        if deployment_id is not None:
            sql += " WHERE deployment_id = ?"
            params = (deployment_id,)
        rows = self._conn.execute(sql + " ORDER BY id", params).fetchall()
        return [DependencyRecord(*row) for row in rows]

    def count(self, table: str) -> int:
        if table not in self.table_names():
            raise ValueError(f"Unknown table: {table}")
        return int(self._conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0])  # noqa: S608


def _filters(namespace: str | None, name: str | None) -> tuple[str, tuple[object, ...]]:
    parts: list[str] = []
    params: list[object] = []
    if namespace is not None:
        parts.append("namespace = ?")
        params.append(namespace)
    if name is not None:
        parts.append("name = ?")
        params.append(name)
    if not parts:
        return "", ()
    return " WHERE " + " AND ".join(parts), tuple(params)
