# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/ocsconfig/config/loader.py

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from ocsconfig.errors import ConfigLoadError
from ocsconfig.storagecluster.models import STORAGE_CLUSTER_KIND, StorageCluster
from .models import OperatorSettings

log = logging.getLogger("ocsconfig")

SETTINGS_ENV = "OCSCONFIG_SETTINGS_FILE"


def _load_yaml(path: Path) -> dict:
    """Load a YAML file, expanding ${ENV_VAR} references."""
    try:
        raw = path.read_text()
    except OSError as exc:
        raise ConfigLoadError(f"cannot read {path}: {exc}") from exc
    expanded = os.path.expandvars(raw)
    try:
        data = yaml.safe_load(expanded) or {}
    except yaml.YAMLError as exc:
        raise ConfigLoadError(f"invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigLoadError(f"{path}: expected a mapping at the top level")
    return data


def _find_settings_file(explicit: Path | None, manifest_path: Path | None) -> Path | None:
    """
    Locate settings.yaml using this priority:

    1. explicit path (--settings)
    2. OCSCONFIG_SETTINGS_FILE environment variable
    3. settings.yaml in the same directory as the StorageCluster manifest
    """
    if explicit is not None:
        if not explicit.is_file():
            raise ConfigLoadError(f"settings file not found: {explicit}")
        return explicit

    env = os.environ.get(SETTINGS_ENV)
    if env:
        p = Path(env)
        if p.is_file():
            return p
        log.warning("%s=%s does not exist, skipping", SETTINGS_ENV, env)
        return None

    if manifest_path is not None:
        p = manifest_path.parent / "settings.yaml"
        if p.is_file():
            return p

    return None


def load_settings(path: str | Path | None = None, *, manifest_path: str | Path | None = None) -> OperatorSettings:
    """
    Load OperatorSettings, falling back to defaults when no file is found.
    """
    found = _find_settings_file(
        Path(path) if path is not None else None,
        Path(manifest_path) if manifest_path is not None else None,
    )
    if found is None:
        log.debug("No settings.yaml found, using defaults")
        return OperatorSettings()

    log.debug("Loading settings from %s", found)
    try:
        return OperatorSettings.model_validate(_load_yaml(found))
    except ValidationError as exc:
        raise ConfigLoadError(f"invalid settings in {found}: {exc}") from exc


def load_storage_cluster(path: str | Path, *, require_uid: bool = True) -> StorageCluster:
    """
    Load a StorageCluster manifest as stored in the API
    (`oc get storagecluster -o yaml`).

    The uid is needed to own the operator ConfigMap, so a manifest
    written for `oc apply` (no metadata.uid) is rejected unless
    require_uid is False, which is enough for offline derivation.
    """
    path = Path(path)
    data = _load_yaml(path)

    kind = data.get("kind", STORAGE_CLUSTER_KIND)
    if kind != STORAGE_CLUSTER_KIND:
        raise ConfigLoadError(f"{path}: expected kind {STORAGE_CLUSTER_KIND}, got {kind}")

    try:
        sc = StorageCluster.model_validate(data)
    except ValidationError as exc:
        raise ConfigLoadError(f"invalid StorageCluster in {path}: {exc}") from exc

    if require_uid and not sc.metadata.uid:
        raise ConfigLoadError(
            f"{path}: metadata.uid is missing; export the live object with "
            f"`oc get storagecluster {sc.metadata.name} -n {sc.metadata.namespace} -o yaml`"
        )
    return sc
