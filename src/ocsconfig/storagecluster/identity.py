# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/ocsconfig/storagecluster/identity.py

from __future__ import annotations

import logging

from kubernetes.client import ApiException
from urllib3.exceptions import HTTPError

log = logging.getLogger("ocsconfig")

CLUSTER_VERSION_GROUP = "config.openshift.io"
CLUSTER_VERSION_VERSION = "v1"
CLUSTER_VERSION_PLURAL = "clusterversions"
CLUSTER_VERSION_NAME = "version"


class ClusterIdentityResolver:
    """
    Reads the cluster ID from the ClusterVersion singleton.

    Best effort: any failure is logged and resolves to "".
    """

    def __init__(self, custom_api, *, name: str = CLUSTER_VERSION_NAME):
        self.custom_api = custom_api
        self.name = name

    def resolve(self) -> str:
        try:
            obj = self.custom_api.get_cluster_custom_object(
                CLUSTER_VERSION_GROUP,
                CLUSTER_VERSION_VERSION,
                CLUSTER_VERSION_PLURAL,
                self.name,
            )
        except ApiException as exc:
            log.error(f"[identity] failed to get ClusterVersion {self.name!r}: {exc.status} {exc.reason}")
            return ""
        except HTTPError as exc:
            log.error(f"[identity] ClusterVersion {self.name!r} unreachable: {exc}")
            return ""

        cluster_id = (obj.get("spec") or {}).get("clusterID")
        if cluster_id is None:
            log.error(f"[identity] ClusterVersion {self.name!r} has no spec.clusterID")
            return ""
        return str(cluster_id)
