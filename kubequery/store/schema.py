"""SQLite schema for the kube-query store.

Tables are created in a fixed order and only ever with
``CREATE TABLE IF NOT EXISTS``: the schema is additive, nothing is dropped or
migrated.  Foreign keys are declared for documentation; SQLite does not
enforce them unless ``PRAGMA foreign_keys=ON`` is set, which we never do.
"""

from __future__ import annotations

import sqlite3

from kubequery.errors import StoreInitError
from kubequery.observability.logging import get_logger

_log = get_logger("store.schema")

SCHEMA: tuple[tuple[str, str], ...] = (
    (
        "deployments",
        """
        CREATE TABLE IF NOT EXISTS deployments (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            namespace TEXT,
            name TEXT,
            spec TEXT,
            status TEXT
        )
        """,
    ),
    (
        "deployment_logs",
        """
        CREATE TABLE IF NOT EXISTS deployment_logs (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            deployment_id INTEGER,
            logs BLOB,
            FOREIGN KEY(deployment_id) REFERENCES deployments(id)
        )
        """,
    ),
    (
        "configmaps",
        """
        CREATE TABLE IF NOT EXISTS configmaps (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            namespace TEXT,
            name TEXT,
            data TEXT
        )
        """,
    ),
    (
        "secrets",
        """
        CREATE TABLE IF NOT EXISTS secrets (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            namespace TEXT,
            name TEXT,
            data TEXT
        )
        """,
    ),
    (
        "deployment_dependencies",
        """
        CREATE TABLE IF NOT EXISTS deployment_dependencies (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            deployment_id INTEGER,
            resource_type TEXT,
            resource_id INTEGER,
            FOREIGN KEY(deployment_id) REFERENCES deployments(id)
        )
        """,
    ),
)

TABLE_NAMES: tuple[str, ...] = tuple(name for name, _ in SCHEMA)


def initialize_store(conn: sqlite3.Connection) -> None:
    """Create every table that does not exist yet.

    Raises:
        StoreInitError: the first statement that fails; later statements are
            not attempted.
    """
    for table, ddl in SCHEMA:
        try:
            conn.execute(ddl)
        except sqlite3.Error as exc:
            raise StoreInitError(table, exc) from exc
    try:
        conn.commit()
    except sqlite3.Error as exc:
        raise StoreInitError(TABLE_NAMES[-1], exc) from exc
    _log.debug("store_schema_ready", tables=list(TABLE_NAMES))
