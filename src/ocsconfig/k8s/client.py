# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/ocsconfig/k8s/client.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from kubernetes import client, config

log = logging.getLogger("ocsconfig")


@dataclass
class KubeClients:
    core: client.CoreV1Api
    custom: client.CustomObjectsApi


def load_kube(kube_context: Optional[str] = None, *, in_cluster: bool = False) -> KubeClients:
    """
    Load cluster credentials and build the API handles used by a pass.

    Args:
        kube_context: optional kube context to load (ignored in-cluster)
        in_cluster: use the pod's service account instead of a kubeconfig
    """
    if in_cluster:
        config.load_incluster_config()
        log.debug("[k8s] loaded in-cluster config")
    elif kube_context:
        config.load_kube_config(context=kube_context)
        log.debug(f"[k8s] loaded kubeconfig context={kube_context}")
    else:
        config.load_kube_config()
        log.debug("[k8s] loaded default kubeconfig")

    api = client.ApiClient()
    return KubeClients(
        core=client.CoreV1Api(api),
        custom=client.CustomObjectsApi(api),
    )


def format_selector(selector: dict[str, str]) -> str:
    """{"app": "x", "tier": "y"} -> "app=x,tier=y" """
    return ",".join(f"{k}={v}" for k, v in selector.items())
