# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/ocsconfig/storagecluster/configmap.py

from __future__ import annotations

import logging
from typing import List

from ocsconfig.errors import AlreadyOwnedError

from .derive import DerivedConfig
from .interface import ResourceStore
from .models import (
    ConfigResource,
    OperationResult,
    OwnerReference,
    ResourceKey,
    as_controller,
    release_control,
)

log = logging.getLogger("ocsconfig")

OCS_OPERATOR_CONFIG_NAME = "ocs-operator-config"


# ------------------------------------------------------------------
# Owner reference transforms
# ------------------------------------------------------------------

def hand_off(refs: List[OwnerReference], owner: OwnerReference) -> List[OwnerReference]:
    """
    Strip controller status from any controller of a different kind.

    The ConfigMap may have been created by an earlier-lifecycle owner
    (OCSInitialization) before the StorageCluster existed.
    """
    return [
        release_control(ref) if ref.is_controller() and not ref.same_kind(owner) else ref
        for ref in refs
    ]


def set_controller_reference(refs: List[OwnerReference], owner: OwnerReference) -> List[OwnerReference]:
    """
    Make owner the controller, replacing an existing reference to the same
    object or appending a new one.
    """
    for ref in refs:
        if ref.is_controller() and not ref.same_owner(owner):
            raise AlreadyOwnedError(
                f"object is already controlled by {ref.kind} {ref.name!r}, cannot hand it to {owner.kind} {owner.name!r}"
            )

    controller = as_controller(owner)
    out: List[OwnerReference] = []
    replaced = False
    for ref in refs:
        if ref.same_owner(owner):
            out.append(controller)
            replaced = True
        else:
            out.append(ref)
    if not replaced:
        out.append(controller)
    return out


# ------------------------------------------------------------------
# Reconciler
# ------------------------------------------------------------------

class ConfigReconciler:
    """
    Converges the managed keys of a ConfigMap onto a DerivedConfig.

    Keys outside the derived set are left untouched. Persistence errors
    propagate to the caller without retry.
    """

    def __init__(self, store: ResourceStore, owner: OwnerReference):
        self.store = store
        self.owner = owner

    def reconcile(self, desired: DerivedConfig, target: ResourceKey) -> bool:
        """
        Returns True when the ConfigMap was created or at least one managed
        value changed, False when it already matched. An update that only
        moves ownership persists but reports False.
        """
        values = desired.as_data()
        changed_keys: list[str] = []

        def mutate(cm: ConfigResource) -> None:
            changed_keys.clear()
            cm.owner_references = hand_off(cm.owner_references, self.owner)

            for key, value in values.items():
                if cm.data.get(key) != value:
                    log.debug(f"[configmap] {cm.namespace}/{cm.name}: {key} {cm.data.get(key)!r} -> {value!r}")
                    cm.data[key] = value
                    changed_keys.append(key)

            cm.owner_references = set_controller_reference(cm.owner_references, self.owner)

        try:
            result = self.store.create_or_update(target, mutate)
        except Exception as exc:
            log.error(f"[configmap] failed to update {target.name!r} configmap in {target.namespace}: {exc}")
            raise

        if result is OperationResult.CREATED:
            log.info(f"[configmap] {target} created")
            return True
        if result is OperationResult.UPDATED and changed_keys:
            log.info(f"[configmap] {target} updated: {', '.join(changed_keys)}")
            return True
        log.info(f"[configmap] {target} {result.value}, no managed values changed")
        return False
