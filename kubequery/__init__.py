"""kube-query: snapshot Kubernetes Deployments, ConfigMaps and Secrets into SQLite."""

__version__ = "0.1.0"
