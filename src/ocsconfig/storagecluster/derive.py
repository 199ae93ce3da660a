# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/ocsconfig/storagecluster/derive.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict

from .models import StorageCluster
from .topology import failure_domain_key

log = logging.getLogger("ocsconfig")


CLUSTER_NAME_KEY = "CSI_CLUSTER_NAME"
ENABLE_READ_AFFINITY_KEY = "CSI_ENABLE_READ_AFFINITY"
CEPHFS_KERNEL_MOUNT_OPTIONS_KEY = "CSI_CEPHFS_KERNEL_MOUNT_OPTIONS"
ENABLE_TOPOLOGY_KEY = "CSI_ENABLE_TOPOLOGY"
TOPOLOGY_DOMAIN_LABELS_KEY = "CSI_TOPOLOGY_DOMAIN_LABELS"

MANAGED_KEYS = (
    CLUSTER_NAME_KEY,
    ENABLE_READ_AFFINITY_KEY,
    CEPHFS_KERNEL_MOUNT_OPTIONS_KEY,
    ENABLE_TOPOLOGY_KEY,
    TOPOLOGY_DOMAIN_LABELS_KEY,
)

MS_MODE_SECURE = "ms_mode=secure"
MS_MODE_PREFER_CRC = "ms_mode=prefer-crc"
MS_MODE_LEGACY = "ms_mode=legacy"


@dataclass(frozen=True)
class DerivedConfig:
    cluster_name: str
    enable_read_affinity: bool
    cephfs_kernel_mount_options: str
    enable_topology: bool
    topology_domain_labels: str

    def as_data(self) -> Dict[str, str]:
        """Render as the ConfigMap data payload."""
        return {
            CLUSTER_NAME_KEY: self.cluster_name,
            ENABLE_READ_AFFINITY_KEY: _format_bool(self.enable_read_affinity),
            CEPHFS_KERNEL_MOUNT_OPTIONS_KEY: self.cephfs_kernel_mount_options,
            ENABLE_TOPOLOGY_KEY: _format_bool(self.enable_topology),
            TOPOLOGY_DOMAIN_LABELS_KEY: self.topology_domain_labels,
        }


def _format_bool(value: bool) -> str:
    return "true" if value else "false"


def cephfs_kernel_mount_options(sc: StorageCluster) -> str:
    """
    Kernel mount options for CephFS volumes.

    First match wins:
      1. network encryption enabled            -> secure
      2. network compression or requireMsgr2   -> prefer-crc
      3. external or provider (remote) cluster -> legacy
      4. otherwise                             -> prefer-crc

    The network section is checked before the deployment mode, even for
    external and provider clusters.
    """
    spec = sc.spec
    conns = spec.network.connections if spec.network is not None else None

    if conns is not None:
        if conns.encryption is not None and conns.encryption.enabled:
            return MS_MODE_SECURE
        if (conns.compression is not None and conns.compression.enabled) or conns.require_msgr2:
            return MS_MODE_PREFER_CRC

    # msgr2 is not required by default on external or provider clusters
    if spec.external_storage.enable or spec.allow_remote_storage_consumers:
        return MS_MODE_LEGACY

    # internal clusters get requireMsgr2 by default on the CephCluster
    return MS_MODE_PREFER_CRC


def _lookup_domain_labels(sc: StorageCluster, lookup: Callable[[StorageCluster], str]) -> str:
    try:
        return lookup(sc) or ""
    except Exception as exc:
        log.warning(f"[derive] failure domain lookup failed for {sc.metadata.name}: {exc}")
        return ""


def derive(
    sc: StorageCluster,
    identity: str,
    domain_lookup: Callable[[StorageCluster], str] = failure_domain_key,
) -> DerivedConfig:
    """
    Compute the CSI operator settings for one StorageCluster.

    identity is the resolved cluster ID and may be empty.
    """
    return DerivedConfig(
        cluster_name=identity,
        enable_read_affinity=not sc.spec.external_storage.enable,
        cephfs_kernel_mount_options=cephfs_kernel_mount_options(sc),
        enable_topology=sc.spec.managed_resources.ceph_non_resilient_pools.enable,
        topology_domain_labels=_lookup_domain_labels(sc, domain_lookup),
    )
