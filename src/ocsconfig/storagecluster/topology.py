# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/ocsconfig/storagecluster/topology.py

from __future__ import annotations

from .models import StorageCluster

# failure domain name -> node label carrying it
FAILURE_DOMAIN_LABELS = {
    "host": "kubernetes.io/hostname",
    "rack": "topology.rook.io/rack",
    "zone": "topology.kubernetes.io/zone",
    "region": "topology.kubernetes.io/region",
}


def failure_domain_key(sc: StorageCluster) -> str:
    """
    Node label used as the CSI topology domain for this StorageCluster.

    The key recorded in status wins; otherwise it is inferred from the
    failure domain name. Unknown domains yield "".
    """
    if sc.status.failure_domain_key:
        return sc.status.failure_domain_key
    return FAILURE_DOMAIN_LABELS.get(sc.status.failure_domain.strip().lower(), "")
