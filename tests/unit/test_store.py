"""Tests for the SQLite store and schema initialization."""

from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from kubequery.errors import StoreError, StoreInitError, StoreOpenError
from kubequery.store import TABLE_NAMES, ResourceStore, initialize_store

_EXPECTED_TABLES = ["configmaps", "deployment_dependencies", "deployment_logs", "deployments", "secrets"]


class TestSchema:
    def test_tables_created_in_fixed_order(self) -> None:
        assert TABLE_NAMES == ("deployments", "deployment_logs", "configmaps", "secrets", "deployment_dependencies")

    def test_initialize_creates_five_tables(self, store: ResourceStore) -> None:
        assert store.table_names() == _EXPECTED_TABLES

    def test_initialize_twice_is_idempotent(self, store: ResourceStore) -> None:
        store.insert_configmap("ns", "cm", "{}")
        store.initialize()
        store.initialize()
        assert store.table_names() == _EXPECTED_TABLES
        assert store.count("configmaps") == 1

    def test_initialize_on_reopened_file(self, db_path: Path) -> None:
        with ResourceStore.open(db_path) as first:
            first.initialize()
        with ResourceStore.open(db_path) as second:
            second.initialize()
            assert second.table_names() == _EXPECTED_TABLES

    def test_failure_names_the_table(self) -> None:
        conn = sqlite3.connect(":memory:")
        conn.close()
        with pytest.raises(StoreInitError) as exc_info:
            initialize_store(conn)
        assert exc_info.value.table == "deployments"

    def test_foreign_keys_not_enforced(self, store: ResourceStore) -> None:
        store.insert_deployment_logs(999, b"orphan")
        assert store.deployment_logs(999)[0].logs == b"orphan"


class TestOpen:
    def test_missing_directory_fails(self, tmp_path: Path) -> None:
        with pytest.raises(StoreOpenError):
            ResourceStore.open(tmp_path / "missing" / "dir" / "kube.db")

    def test_creates_file(self, db_path: Path) -> None:
        with ResourceStore.open(db_path):
            pass
        assert db_path.exists()


class TestWrites:
    def test_deployment_ids_autoincrement(self, store: ResourceStore) -> None:
        first = store.insert_deployment("ns", "web", '{"replicas":1}', "{}")
        second = store.insert_deployment("ns", "web", '{"replicas":1}', "{}")
        assert second == first + 1
        rows = store.deployments(namespace="ns", name="web")
        assert [r.id for r in rows] == [first, second]
        assert rows[0].spec == '{"replicas":1}'

    def test_logs_round_trip_as_bytes(self, store: ResourceStore) -> None:
        dep_id = store.insert_deployment("ns", "web", "{}", "{}")
        store.insert_deployment_logs(dep_id, b"line 1\n\x00\xff")
        [record] = store.deployment_logs(dep_id)
        assert record.deployment_id == dep_id
        assert record.logs == b"line 1\n\x00\xff"

    def test_empty_log_blob(self, store: ResourceStore) -> None:
        dep_id = store.insert_deployment("ns", "web", "{}", "{}")
        store.insert_deployment_logs(dep_id, b"")
        assert store.deployment_logs(dep_id)[0].logs == b""

    def test_configmaps_and_secrets_are_separate(self, store: ResourceStore) -> None:
        store.insert_configmap("ns", "shared", '{"k":"v"}')
        store.insert_secret("ns", "shared", '{"k":"dg=="}')
        assert [r.data for r in store.data_records("configmaps")] == ['{"k":"v"}']
        assert [r.data for r in store.data_records("secrets")] == ['{"k":"dg=="}']

    def test_data_records_rejects_other_tables(self, store: ResourceStore) -> None:
        with pytest.raises(ValueError):
            store.data_records("deployments")

    def test_dependency_insert(self, store: ResourceStore) -> None:
        store.insert_dependency(1, "configmap", 7)
        [dep] = store.dependencies(1)
        assert (dep.deployment_id, dep.resource_type, dep.resource_id) == (1, "configmap", 7)

    def test_insert_failure_raises_store_error(self, db_path: Path) -> None:
        s = ResourceStore.open(db_path)
        s.initialize()
        s.close()
        with pytest.raises(StoreError, match="deployment"):
            s.insert_deployment("ns", "web", "{}", "{}")

    def test_insert_without_schema_raises_store_error(self, db_path: Path) -> None:
        with ResourceStore.open(db_path) as s, pytest.raises(StoreError):
            s.insert_secret("ns", "s", "{}")
