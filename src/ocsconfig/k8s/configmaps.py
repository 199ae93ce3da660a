# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/ocsconfig/k8s/configmaps.py
from __future__ import annotations

import copy
import logging
from typing import Callable, Optional

from kubernetes import client
from kubernetes.client import ApiException

from ocsconfig.errors import OcsConfigError
from ocsconfig.storagecluster.models import (
    ConfigResource,
    OperationResult,
    OwnerReference,
    ResourceKey,
)

log = logging.getLogger("ocsconfig")


def _owner_from_v1(ref: client.V1OwnerReference) -> OwnerReference:
    return OwnerReference(
        api_version=ref.api_version,
        kind=ref.kind,
        name=ref.name,
        uid=ref.uid,
        controller=ref.controller,
        block_owner_deletion=ref.block_owner_deletion,
    )


def _owner_to_v1(ref: OwnerReference) -> client.V1OwnerReference:
    return client.V1OwnerReference(
        api_version=ref.api_version,
        kind=ref.kind,
        name=ref.name,
        uid=ref.uid,
        controller=ref.controller,
        block_owner_deletion=ref.block_owner_deletion,
    )


def from_v1(cm: client.V1ConfigMap) -> ConfigResource:
    meta = cm.metadata
    return ConfigResource(
        name=meta.name,
        namespace=meta.namespace,
        data=dict(cm.data or {}),
        owner_references=[_owner_from_v1(r) for r in (meta.owner_references or [])],
        labels=dict(meta.labels or {}),
        annotations=dict(meta.annotations or {}),
        resource_version=meta.resource_version,
    )


def to_v1(res: ConfigResource, base: Optional[client.V1ConfigMap] = None) -> client.V1ConfigMap:
    """
    Build the request body. Fields we do not model (binaryData, immutable,
    the rest of metadata) are carried over from base.
    """
    body = copy.deepcopy(base) if base is not None else client.V1ConfigMap(
        api_version="v1",
        kind="ConfigMap",
        metadata=client.V1ObjectMeta(name=res.name, namespace=res.namespace),
    )
    body.data = dict(res.data) or None
    body.metadata.owner_references = [_owner_to_v1(r) for r in res.owner_references] or None
    body.metadata.labels = dict(res.labels) or None
    body.metadata.annotations = dict(res.annotations) or None
    body.metadata.resource_version = res.resource_version
    return body


class ConfigMapStore:
    """
    ConfigMaps behind the Kubernetes API.

    create_or_update follows the controller-runtime contract: read, mutate
    a copy, then create / replace / skip. Conflicts surface as ApiException
    (409) from the API server's resourceVersion check.
    """

    def __init__(self, core_api):
        self.core_api = core_api

    def _read(self, name: str, namespace: str) -> Optional[client.V1ConfigMap]:
        try:
            return self.core_api.read_namespaced_config_map(name=name, namespace=namespace)
        except ApiException as exc:
            if exc.status == 404:
                return None
            raise

    def get(self, name: str, namespace: str) -> Optional[ConfigResource]:
        raw = self._read(name, namespace)
        return from_v1(raw) if raw is not None else None

    def create_or_update(
        self,
        key: ResourceKey,
        mutate: Callable[[ConfigResource], None],
    ) -> OperationResult:
        raw = self._read(key.name, key.namespace)

        if raw is None:
            res = ConfigResource(name=key.name, namespace=key.namespace)
            mutate(res)
            _check_key(res, key)
            self.core_api.create_namespaced_config_map(namespace=key.namespace, body=to_v1(res))
            log.debug(f"[k8s] created configmap {key}")
            return OperationResult.CREATED

        existing = from_v1(raw)
        res = copy.deepcopy(existing)
        mutate(res)
        _check_key(res, key)

        if res == existing:
            return OperationResult.UNCHANGED

        self.core_api.replace_namespaced_config_map(
            name=key.name,
            namespace=key.namespace,
            body=to_v1(res, base=raw),
        )
        log.debug(f"[k8s] replaced configmap {key} (resourceVersion={existing.resource_version})")
        return OperationResult.UPDATED


def _check_key(res: ConfigResource, key: ResourceKey) -> None:
    if res.key != key:
        raise OcsConfigError(f"mutate must not change the object key: {key} -> {res.key}")
