"""Entry point for `python -m kubequery`.

Usage:
    python -m kubequery --resources $'default:deployment:web\ndefault:configmap:web-config'
"""

from __future__ import annotations

from kubequery.cli import cli

cli()
