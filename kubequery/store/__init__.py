"""Local SQLite store for ingested resources.

Submodules:
    schema        -- Table DDL and idempotent initialization.
    sqlite_store  -- ResourceStore: single-connection writes and read helpers.
"""

from kubequery.store.schema import TABLE_NAMES, initialize_store
from kubequery.store.sqlite_store import ResourceStore

__all__ = ["TABLE_NAMES", "ResourceStore", "initialize_store"]
