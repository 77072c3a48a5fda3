"""Tests for the Deployment, ConfigMap and Secret ingestors."""

from __future__ import annotations

import json

from kubequery.encoding import encode_structured
from kubequery.ingest.data_objects import ConfigMapIngestor, SecretIngestor
from kubequery.ingest.deployment import DeploymentIngestor
from kubequery.models.outcomes import IngestStage, IngestStatus
from kubequery.models.resources import ResourceSpec, ResourceType
from kubequery.store.sqlite_store import ResourceStore
from tests.fakes import FakeCluster, make_configmap, make_deployment, make_secret, transport_error


def _deployment_spec(name: str = "foo", namespace: str = "ns") -> ResourceSpec:
    return ResourceSpec(namespace, ResourceType.DEPLOYMENT, name)


# =====================================================================
# DeploymentIngestor
# =====================================================================


class TestDeploymentIngestor:
    async def test_inserts_one_record_and_links_logs(self, store: ResourceStore) -> None:
        cluster = FakeCluster(
            deployments={("ns", "foo"): make_deployment("foo", "ns", replicas=3)},
            pods={("ns", "app=foo"): ["foo-1"]},
            logs={"foo-1": b"started\n"},
        )

        outcome = await DeploymentIngestor(cluster, store).ingest(_deployment_spec())  # type: ignore[arg-type]

        [row] = store.deployments()
        assert (row.namespace, row.name) == ("ns", "foo")
        assert outcome.status == IngestStatus.STORED
        assert outcome.record_id == row.id
        [logs] = store.deployment_logs()
        assert logs.deployment_id == row.id
        assert outcome.logs is not None and outcome.logs.deployment_id == row.id

    async def test_spec_and_status_encoded_independently(self, store: ResourceStore) -> None:
        body = make_deployment("foo", "ns", replicas=3)
        cluster = FakeCluster(deployments={("ns", "foo"): body})

        await DeploymentIngestor(cluster, store).ingest(_deployment_spec())  # type: ignore[arg-type]

        [row] = store.deployments()
        assert json.loads(row.spec) == body["spec"]
        assert json.loads(row.status) == body["status"]
        assert row.spec == encode_structured(body["spec"])

    async def test_not_found_aborts_resource(self, store: ResourceStore) -> None:
        outcome = await DeploymentIngestor(FakeCluster(), store).ingest(_deployment_spec())  # type: ignore[arg-type]

        assert outcome.status == IngestStatus.FAILED
        assert outcome.stage == IngestStage.FETCH
        assert "not found" in (outcome.error or "")
        assert store.deployments() == []
        assert store.deployment_logs() == []

    async def test_transport_error_aborts_resource(self, store: ResourceStore) -> None:
        cluster = FakeCluster(deployments={("ns", "foo"): transport_error()})

        outcome = await DeploymentIngestor(cluster, store).ingest(_deployment_spec())  # type: ignore[arg-type]

        assert outcome.stage == IngestStage.FETCH
        assert store.deployments() == []

    async def test_serialization_failure_aborts_resource(self, store: ResourceStore) -> None:
        body = make_deployment("foo", "ns")
        body["status"] = {"observedAt": object()}
        cluster = FakeCluster(deployments={("ns", "foo"): body})

        outcome = await DeploymentIngestor(cluster, store).ingest(_deployment_spec())  # type: ignore[arg-type]

        assert outcome.status == IngestStatus.FAILED
        assert outcome.stage == IngestStage.SERIALIZE
        assert store.deployments() == []

    async def test_insert_failure_skips_log_collection(self, store: ResourceStore) -> None:
        cluster = FakeCluster(deployments={("ns", "foo"): make_deployment("foo", "ns")})
        store.close()

        outcome = await DeploymentIngestor(cluster, store).ingest(_deployment_spec())  # type: ignore[arg-type]

        assert outcome.stage == IngestStage.INSERT
        assert ("pods", "ns", "app=foo") not in cluster.calls

    async def test_log_failure_keeps_deployment_row(self, store: ResourceStore) -> None:
        cluster = FakeCluster(
            deployments={("ns", "foo"): make_deployment("foo", "ns")},
            list_error=transport_error(),
        )

        outcome = await DeploymentIngestor(cluster, store).ingest(_deployment_spec())  # type: ignore[arg-type]

        assert outcome.status == IngestStatus.STORED
        assert outcome.logs is not None and outcome.logs.error is not None
        assert len(store.deployments()) == 1
        assert store.deployment_logs() == []

    async def test_references_attached_to_outcome(self, store: ResourceStore) -> None:
        body = make_deployment("foo", "ns", env_from=[{"configMapRef": {"name": "foo-env"}}])
        cluster = FakeCluster(deployments={("ns", "foo"): body})

        outcome = await DeploymentIngestor(cluster, store).ingest(_deployment_spec())  # type: ignore[arg-type]

        assert outcome.references == {(ResourceType.CONFIGMAP, "foo-env")}


# =====================================================================
# ConfigMapIngestor / SecretIngestor
# =====================================================================


class TestConfigMapIngestor:
    async def test_stores_encoded_data(self, store: ResourceStore) -> None:
        data = {"LOG_LEVEL": "debug", "config.yaml": "a: 1\n"}
        cluster = FakeCluster(configmaps={("ns", "cm1"): make_configmap("cm1", "ns", data)})

        outcome = await ConfigMapIngestor(cluster, store).ingest(  # type: ignore[arg-type]
            ResourceSpec("ns", ResourceType.CONFIGMAP, "cm1")
        )

        [row] = store.data_records("configmaps")
        assert (row.namespace, row.name) == ("ns", "cm1")
        assert row.data == encode_structured(data)
        assert outcome.record_id == row.id
        assert store.data_records("secrets") == []

    async def test_missing_data_encodes_null(self, store: ResourceStore) -> None:
        cluster = FakeCluster(configmaps={("ns", "empty"): make_configmap("empty", "ns")})

        await ConfigMapIngestor(cluster, store).ingest(  # type: ignore[arg-type]
            ResourceSpec("ns", ResourceType.CONFIGMAP, "empty")
        )

        assert store.data_records("configmaps")[0].data == "null"

    async def test_not_found(self, store: ResourceStore) -> None:
        outcome = await ConfigMapIngestor(FakeCluster(), store).ingest(  # type: ignore[arg-type]
            ResourceSpec("ns", ResourceType.CONFIGMAP, "nope")
        )

        assert outcome.status == IngestStatus.FAILED
        assert outcome.stage == IngestStage.FETCH
        assert store.count("configmaps") == 0

    async def test_insert_failure(self, store: ResourceStore) -> None:
        cluster = FakeCluster(configmaps={("ns", "cm1"): make_configmap("cm1", "ns", {"a": "b"})})
        store.close()

        outcome = await ConfigMapIngestor(cluster, store).ingest(  # type: ignore[arg-type]
            ResourceSpec("ns", ResourceType.CONFIGMAP, "cm1")
        )

        assert outcome.stage == IngestStage.INSERT


class TestSecretIngestor:
    async def test_values_stored_as_returned(self, store: ResourceStore) -> None:
        data = {"password": "aHVudGVyMg=="}
        cluster = FakeCluster(secrets={("ns", "db"): make_secret("db", "ns", data)})

        outcome = await SecretIngestor(cluster, store).ingest(  # type: ignore[arg-type]
            ResourceSpec("ns", ResourceType.SECRET, "db")
        )

        [row] = store.data_records("secrets")
        assert json.loads(row.data) == {"password": "aHVudGVyMg=="}
        assert outcome.status == IngestStatus.STORED

    async def test_serialization_failure(self, store: ResourceStore) -> None:
        body = make_secret("db", "ns")
        body["data"] = {"blob": b"raw-bytes"}
        cluster = FakeCluster(secrets={("ns", "db"): body})

        outcome = await SecretIngestor(cluster, store).ingest(  # type: ignore[arg-type]
            ResourceSpec("ns", ResourceType.SECRET, "db")
        )

        assert outcome.stage == IngestStage.SERIALIZE
        assert store.count("secrets") == 0
