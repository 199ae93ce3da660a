# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/ocsconfig/cli/app.py
from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
import yaml
from kubernetes.client import ApiException
from kubernetes.config import ConfigException

from ocsconfig.config.loader import load_settings, load_storage_cluster
from ocsconfig.errors import OcsConfigError
from ocsconfig.k8s.client import load_kube
from ocsconfig.k8s.configmaps import ConfigMapStore
from ocsconfig.k8s.pods import PodRegistry
from ocsconfig.logging.log import init_logging
from ocsconfig.observers.console import ConsoleObserver
from ocsconfig.observers.dispatcher import EventBus
from ocsconfig.observers.jsonfile import JsonFileObserver
from ocsconfig.observers.logger import LoggerObserver
from ocsconfig.storagecluster.derive import derive
from ocsconfig.storagecluster.identity import ClusterIdentityResolver
from ocsconfig.storagecluster.reconciler import OperatorConfigReconciler
from ocsconfig.utils.retry import RetryError, retry


app = typer.Typer(help="StorageCluster CSI operator-config reconciler")


@app.command("derive")
def derive_cmd(
    manifest: Path = typer.Argument(..., help="StorageCluster manifest (YAML)"),
    identity: str = typer.Option("", "--identity", help="Cluster ID to use for CSI_CLUSTER_NAME"),
):
    """
    Print the ConfigMap data derived from a StorageCluster, without
    touching any cluster.
    """
    try:
        sc = load_storage_cluster(manifest, require_uid=False)
    except OcsConfigError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=2)

    typer.echo(yaml.safe_dump(derive(sc, identity).as_data(), sort_keys=False), nl=False)


@app.command()
def reconcile(
    manifest: Path = typer.Argument(..., help="StorageCluster manifest (YAML)"),
    settings_file: Optional[Path] = typer.Option(
        None, "--settings", "-s", help="Settings YAML (default: $OCSCONFIG_SETTINGS_FILE or settings.yaml next to the manifest)"
    ),
    context: Optional[str] = typer.Option(
        None, "--context", "-c", help="Kube-context (overrides settings)"
    ),
    in_cluster: bool = typer.Option(
        False, "--in-cluster", help="Use the pod service account instead of a kubeconfig"
    ),
    retries: int = typer.Option(
        1, "--retries", min=1, help="Attempts for the whole pass on transient API errors"
    ),
    delay: float = typer.Option(
        5.0, "--delay", help="Seconds before the second attempt, doubled after each failure"
    ),
    events_file: Optional[Path] = typer.Option(
        None, "--events-file", help="Append events as JSON lines to this file"
    ),
    debug: bool = typer.Option(
        False, "--debug", "-d", help="Log DEBUG output to the console"
    ),
):
    """
    Run one reconciliation pass:
      1) resolve the cluster ID
      2) derive the CSI settings from the StorageCluster
      3) converge the operator ConfigMap
      4) restart dependent pods if the ConfigMap changed
    """
    logger, run_id, log_path = init_logging(verbose=debug)

    try:
        sc = load_storage_cluster(manifest)
        settings = load_settings(settings_file, manifest_path=manifest)
    except OcsConfigError as exc:
        logger.error(f"{exc}")
        raise typer.Exit(code=2)

    kube_context = context or settings.kube_context
    try:
        kube = load_kube(kube_context, in_cluster=in_cluster or settings.in_cluster)
    except ConfigException as exc:
        logger.error(f"cannot load Kubernetes credentials: {exc}")
        raise typer.Exit(code=2)

    observers = [ConsoleObserver(), LoggerObserver(logger)]
    events_path = events_file or settings.events_file
    json_observer = JsonFileObserver(events_path) if events_path else None
    if json_observer:
        observers.append(json_observer)

    reconciler = OperatorConfigReconciler(
        store=ConfigMapStore(kube.core),
        registry=PodRegistry(kube.core),
        identity=ClusterIdentityResolver(kube.custom),
        bus=EventBus(observers),
        config_map_name=settings.config_map_name,
        dependent_selector=settings.dependent_selector,
        namespace=settings.namespace,
        kube_context=kube_context,
        run_id=run_id,
    )

    def _on_retry(attempt: int, exc: BaseException, wait: float) -> None:
        logger.warning(f"[reconcile] attempt {attempt}/{retries} failed, retrying in {wait:.1f}s: {exc}")

    run_pass = retry(attempts=retries, delay=delay, on_retry=_on_retry)(
        reconciler.ensure_operator_config
    )

    try:
        outcome = run_pass(sc)
    except RetryError as exc:
        logger.error(f"[reconcile] failed: {exc}")
        raise typer.Exit(code=1)
    except ApiException as exc:
        logger.error(f"[reconcile] failed: API returned {exc.status} {exc.reason}")
        raise typer.Exit(code=1)
    except OcsConfigError as exc:
        logger.error(f"[reconcile] failed: {exc}")
        raise typer.Exit(code=1)
    finally:
        if json_observer:
            json_observer.close()

    typer.echo(f"changed={str(outcome.changed).lower()} restarted={outcome.restarted}")
    typer.echo(f"log file: {log_path}")


if __name__ == "__main__":
    app()
