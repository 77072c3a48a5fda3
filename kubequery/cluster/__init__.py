"""Cluster access for kube-query.

Wraps kubernetes-asyncio behind ClusterClient so the ingestors depend only on
fetch/list/stream operations returning plain dicts and bytes.
"""

from kubequery.cluster.client import ClusterClient, PodLogStream, load_cluster_client

__all__ = ["ClusterClient", "PodLogStream", "load_cluster_client"]
