"""kube-query command-line interface.

Exposes:
    cli -- Click command entry point (registered as ``kubequery`` script).
"""

from kubequery.cli.main import cli

__all__ = ["cli"]
