# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/ocsconfig/storagecluster/models.py

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


STORAGE_CLUSTER_API_VERSION = "ocs.openshift.io/v1"
STORAGE_CLUSTER_KIND = "StorageCluster"


class _CRDModel(BaseModel):
    """
    Base for the StorageCluster CRD shapes.
    Fields are snake_case in Python, camelCase on the wire.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


# ---------------------------------------------------------------------
# spec.network
# ---------------------------------------------------------------------
class EncryptionSpec(_CRDModel):
    enabled: bool = False


class CompressionSpec(_CRDModel):
    enabled: bool = False


class ConnectionsSpec(_CRDModel):
    encryption: Optional[EncryptionSpec] = None
    compression: Optional[CompressionSpec] = None
    require_msgr2: bool = False


class NetworkSpec(_CRDModel):
    connections: Optional[ConnectionsSpec] = None


# ---------------------------------------------------------------------
# spec
# ---------------------------------------------------------------------
class ExternalStorageSpec(_CRDModel):
    enable: bool = False


class NonResilientPoolsSpec(_CRDModel):
    enable: bool = False


class ManagedResourcesSpec(_CRDModel):
    ceph_non_resilient_pools: NonResilientPoolsSpec = NonResilientPoolsSpec()


class StorageClusterSpec(_CRDModel):
    external_storage: ExternalStorageSpec = ExternalStorageSpec()
    allow_remote_storage_consumers: bool = False
    managed_resources: ManagedResourcesSpec = ManagedResourcesSpec()
    network: Optional[NetworkSpec] = None


class StorageClusterStatus(_CRDModel):
    failure_domain: str = ""        # "host" | "rack" | "zone" | "region"
    failure_domain_key: str = ""    # node label, e.g. "topology.kubernetes.io/zone"


class ObjectMeta(_CRDModel):
    name: str
    namespace: str = "openshift-storage"
    uid: str = ""


class StorageCluster(_CRDModel):
    """
    Read-only snapshot of a StorageCluster custom resource.
    """
    api_version: str = STORAGE_CLUSTER_API_VERSION
    kind: str = STORAGE_CLUSTER_KIND
    metadata: ObjectMeta
    spec: StorageClusterSpec = StorageClusterSpec()
    status: StorageClusterStatus = StorageClusterStatus()


# ---------------------------------------------------------------------
# Persisted resource shapes
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class OwnerReference:
    """
    Back-link from an object to the entity responsible for its lifecycle.
    """
    api_version: str
    kind: str
    name: str
    uid: str
    controller: Optional[bool] = None
    block_owner_deletion: Optional[bool] = None

    @property
    def group(self) -> str:
        # "ocs.openshift.io/v1" -> "ocs.openshift.io", "v1" -> ""
        return self.api_version.rpartition("/")[0]

    def is_controller(self) -> bool:
        return bool(self.controller)

    def same_kind(self, other: "OwnerReference") -> bool:
        return self.group == other.group and self.kind == other.kind

    def same_owner(self, other: "OwnerReference") -> bool:
        return self.same_kind(other) and self.name == other.name


def release_control(ref: OwnerReference) -> OwnerReference:
    """Drop the controller and deletion-blocking flags, keeping the back-link."""
    return replace(ref, controller=None, block_owner_deletion=None)


def as_controller(ref: OwnerReference) -> OwnerReference:
    return replace(ref, controller=True, block_owner_deletion=True)


@dataclass(frozen=True)
class ResourceKey:
    name: str
    namespace: str

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


@dataclass
class ConfigResource:
    """
    A namespaced key/value resource (a ConfigMap) as seen by the reconciler.
    """
    name: str
    namespace: str
    data: Dict[str, str] = field(default_factory=dict)
    owner_references: List[OwnerReference] = field(default_factory=list)
    labels: Dict[str, str] = field(default_factory=dict)
    annotations: Dict[str, str] = field(default_factory=dict)
    resource_version: Optional[str] = None   # None until persisted

    @property
    def key(self) -> ResourceKey:
        return ResourceKey(name=self.name, namespace=self.namespace)

    def controller_ref(self) -> Optional[OwnerReference]:
        for ref in self.owner_references:
            if ref.is_controller():
                return ref
        return None


@dataclass(frozen=True)
class PodRef:
    name: str
    namespace: str
    uid: str = ""


class OperationResult(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
