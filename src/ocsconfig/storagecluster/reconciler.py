# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/ocsconfig/storagecluster/reconciler.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from ocsconfig.errors import OcsConfigError
from ocsconfig.k8s.client import format_selector
from ocsconfig.observers.dispatcher import EventBus
from ocsconfig.observers.events import (
    ConfigDerived,
    ConfigMapFailed,
    ConfigMapReconciled,
    DependentRestartFailed,
    DependentsRestarted,
    new_ctx,
)

from .configmap import OCS_OPERATOR_CONFIG_NAME, ConfigReconciler
from .derive import DerivedConfig, derive
from .identity import ClusterIdentityResolver
from .interface import ProcessRegistry, ResourceStore
from .models import OwnerReference, ResourceKey, StorageCluster
from .restart import ROOK_CEPH_OPERATOR_SELECTOR, DependentRestarter
from .topology import failure_domain_key

log = logging.getLogger("ocsconfig")


@dataclass(frozen=True)
class ReconcileOutcome:
    derived: DerivedConfig
    changed: bool
    restarted: int


def owner_reference_for(sc: StorageCluster) -> OwnerReference:
    if not sc.metadata.uid:
        # the API server rejects ownerReferences without a uid (422)
        raise OcsConfigError(f"StorageCluster {sc.metadata.namespace}/{sc.metadata.name} has no metadata.uid")
    return OwnerReference(
        api_version=sc.api_version,
        kind=sc.kind,
        name=sc.metadata.name,
        uid=sc.metadata.uid,
    )


class OperatorConfigReconciler:
    """
    One reconciliation pass for the CSI operator ConfigMap of a StorageCluster:

        identity -> derive -> reconcile ConfigMap -> (if changed) restart dependents

    Steps run strictly in that order. ConfigMap persistence errors abort
    the pass; identity, lookup and restart failures only degrade it.
    """

    def __init__(
        self,
        *,
        store: ResourceStore,
        registry: ProcessRegistry,
        identity: ClusterIdentityResolver,
        bus: Optional[EventBus] = None,
        config_map_name: str = OCS_OPERATOR_CONFIG_NAME,
        dependent_selector: Optional[Dict[str, str]] = None,
        namespace: Optional[str] = None,
        domain_lookup: Callable[[StorageCluster], str] = failure_domain_key,
        kube_context: Optional[str] = None,
        run_id: Optional[str] = None,
    ):
        self.store = store
        self.registry = registry
        self.identity = identity
        self.bus = bus or EventBus()
        self.config_map_name = config_map_name
        self.dependent_selector = dependent_selector or dict(ROOK_CEPH_OPERATOR_SELECTOR)
        self.namespace = namespace
        self.domain_lookup = domain_lookup
        self.kube_context = kube_context
        self.run_id = run_id

    def ensure_operator_config(self, sc: StorageCluster) -> ReconcileOutcome:
        namespace = self.namespace or sc.metadata.namespace
        ctx = new_ctx(env=namespace, context=self.kube_context, run_id=self.run_id)
        target = ResourceKey(name=self.config_map_name, namespace=namespace)

        cluster_id = self.identity.resolve()
        derived = derive(sc, cluster_id, self.domain_lookup)
        self.bus.emit(ConfigDerived(storage_cluster=sc.metadata.name, data=derived.as_data(), **ctx))

        try:
            owner = owner_reference_for(sc)
            changed = ConfigReconciler(self.store, owner).reconcile(derived, target)
        except Exception as exc:
            self.bus.emit(ConfigMapFailed(name=target.name, namespace=namespace, error=str(exc), **ctx))
            raise
        self.bus.emit(ConfigMapReconciled(name=target.name, namespace=namespace, changed=changed, **ctx))

        restarted = 0
        if changed:
            restarted = self._restart_dependents(namespace, ctx)
            log.info(
                f"{self.config_map_name!r} configmap updated & {restarted} dependent pod(s) restarted "
                f"to pick up new values (storageCluster={sc.metadata.namespace}/{sc.metadata.name})"
            )

        return ReconcileOutcome(derived=derived, changed=changed, restarted=restarted)

    def _restart_dependents(self, namespace: str, ctx: dict) -> int:
        restarter = DependentRestarter(self.registry)
        selector = format_selector(self.dependent_selector)

        count = restarter.restart_dependents(namespace, self.dependent_selector)
        if restarter.last_error:
            self.bus.emit(DependentRestartFailed(namespace=namespace, selector=selector, error=restarter.last_error, **ctx))
        else:
            self.bus.emit(DependentsRestarted(namespace=namespace, selector=selector, count=count, **ctx))
        return count
