"""Shared fixtures for kube-query integration tests.

Provides a fake cluster populated with a small, realistic namespace so the
integration tests can run full pipelines against a real SQLite file without
touching a Kubernetes cluster.
"""

from __future__ import annotations

import pytest

from tests.fakes import FakeCluster, make_configmap, make_deployment, make_secret, transport_error


def populate_cluster(cluster: FakeCluster) -> FakeCluster:
    """Namespace ``shop``: one deployment, its config and secret, one broken pod."""
    cluster.deployments[("shop", "web")] = make_deployment(
        "web",
        "shop",
        replicas=3,
        volumes=[{"name": "cfg", "configMap": {"name": "web-config"}}],
        env_from=[{"secretRef": {"name": "web-secret"}}],
    )
    cluster.deployments[("shop", "worker")] = make_deployment("worker", "shop", replicas=1)
    cluster.configmaps[("shop", "web-config")] = make_configmap("web-config", "shop", {"PORT": "8080"})
    cluster.secrets[("shop", "web-secret")] = make_secret("web-secret", "shop", {"TOKEN": "czNjcjN0"})

    cluster.pods[("shop", "app=web")] = ["web-7d4b9-a", "web-7d4b9-b", "web-7d4b9-c"]
    cluster.logs.update(
        {
            "web-7d4b9-a": b"GET / 200\n",
            "web-7d4b9-c": b"GET /health 200\n",
        }
    )
    cluster.open_errors["web-7d4b9-b"] = transport_error("container is waiting to start")
    return cluster


@pytest.fixture()
def shop_cluster() -> FakeCluster:
    return populate_cluster(FakeCluster())
