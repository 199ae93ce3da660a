# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/ocsconfig/config/models.py

from typing import Dict, Optional
from pydantic import BaseModel, Field

from ocsconfig.storagecluster.configmap import OCS_OPERATOR_CONFIG_NAME
from ocsconfig.storagecluster.restart import ROOK_CEPH_OPERATOR_SELECTOR


class OperatorSettings(BaseModel):
    """Runtime settings for a reconciliation pass."""

    config_map_name: str = OCS_OPERATOR_CONFIG_NAME
    dependent_selector: Dict[str, str] = Field(default_factory=lambda: dict(ROOK_CEPH_OPERATOR_SELECTOR))
    namespace: Optional[str] = None     # None -> the StorageCluster's namespace
    kube_context: Optional[str] = None  # Kubernetes context to use
    in_cluster: bool = False
    events_file: Optional[str] = None   # JSON-lines event log
