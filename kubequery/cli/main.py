"""``kubequery`` command.

Options override the matching ``KUBEQUERY_*`` environment variables.
Structured logs go to stderr; a one-line run summary goes to stdout.
"""

from __future__ import annotations

import asyncio
from typing import Any

import click

from kubequery import __version__
from kubequery.app import main as app_main
from kubequery.config import load_config, validate_label_key
from kubequery.errors import ConfigError
from kubequery.models.config import KubeQueryConfig
from kubequery.observability.logging import LOG_FORMATS, bind_run_context, get_logger, setup_logging


def _apply_overrides(config: KubeQueryConfig, options: dict[str, Any]) -> KubeQueryConfig:
    """Copy every option the user actually passed onto *config*."""
    if options["resources"] is not None:
        config.resources = options["resources"]
    if options["db"] is not None:
        config.store.path = options["db"]
    if options["kubeconfig"] is not None:
        config.cluster.kubeconfig = options["kubeconfig"]
    if options["context"] is not None:
        config.cluster.context = options["context"]
    if options["log_level"] is not None:
        config.log.level = options["log_level"].lower()
    if options["log_format"] is not None:
        config.log.format = options["log_format"].lower()
    if options["pod_label_key"] is not None:
        config.ingest.pod_label_key = validate_label_key(options["pod_label_key"])
    if options["link_dependencies"] is not None:
        config.ingest.link_dependencies = options["link_dependencies"]
    return config


@click.command(name="kubequery")
@click.option(
    "--resources",
    default=None,
    help="List (one per line) of namespace:resourceType:resourceName.",
)
@click.option("--db", default=None, help="Path to the SQLite database file [default: kube_data.db].")
@click.option("--kubeconfig", default=None, help="Explicit kubeconfig file (skips in-cluster config).")
@click.option("--context", default=None, help="kubeconfig context to use.")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Log level [default: info].",
)
@click.option(
    "--log-format",
    type=click.Choice(list(LOG_FORMATS), case_sensitive=False),
    default=None,
    help="Log renderer [default: json].",
)
@click.option("--pod-label-key", default=None, help="Label key matching pods to their deployment [default: app].")
@click.option(
    "--link-dependencies/--no-link-dependencies",
    default=None,
    help="Record deployment -> configmap/secret links found in the same run.",
)
@click.version_option(__version__, prog_name="kubequery")
def cli(**options: Any) -> None:
    """Fetch Deployments, ConfigMaps and Secrets into a local SQLite file."""
    try:
        config = _apply_overrides(load_config(), options)
    except ConfigError as exc:
        setup_logging("info")
        get_logger("cli").critical("invalid configuration", error=str(exc))
        raise SystemExit(1) from exc

    setup_logging(config.log.level, config.log.format)
    bind_run_context(db=config.store.path)
    summary = asyncio.run(app_main(config))
    click.echo(
        f"processed {len(summary.outcomes)} resource(s): "
        f"{summary.stored} stored, {summary.failed} failed, {summary.skipped} skipped"
    )
