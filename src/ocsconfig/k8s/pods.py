# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/ocsconfig/k8s/pods.py
from __future__ import annotations

from typing import List

from ocsconfig.k8s.client import format_selector
from ocsconfig.storagecluster.models import PodRef


class PodRegistry:
    """
    Pods in the cluster, seen as restartable workload processes.
    """

    def __init__(self, core_api):
        self.core_api = core_api

    def list(self, namespace: str, selector: dict[str, str]) -> List[PodRef]:
        resp = self.core_api.list_namespaced_pod(
            namespace=namespace,
            label_selector=format_selector(selector),
        )
        return [
            PodRef(name=p.metadata.name, namespace=p.metadata.namespace or namespace, uid=p.metadata.uid or "")
            for p in (resp.items or [])
        ]

    def terminate(self, ref: PodRef) -> None:
        self.core_api.delete_namespaced_pod(name=ref.name, namespace=ref.namespace)
