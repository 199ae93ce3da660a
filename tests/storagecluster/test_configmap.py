# tests/storagecluster/test_configmap.py
from __future__ import annotations

from dataclasses import replace

import pytest
from kubernetes import client
from kubernetes.client import ApiException

from ocsconfig.errors import AlreadyOwnedError
from ocsconfig.k8s.configmaps import ConfigMapStore
from ocsconfig.storagecluster.configmap import (
    ConfigReconciler,
    hand_off,
    set_controller_reference,
)
from ocsconfig.storagecluster.derive import DerivedConfig
from ocsconfig.storagecluster.models import OwnerReference, ResourceKey

NS = "openshift-storage"
TARGET = ResourceKey(name="ocs-operator-config", namespace=NS)

SC_OWNER = OwnerReference(
    api_version="ocs.openshift.io/v1",
    kind="StorageCluster",
    name="ocs-storagecluster",
    uid="sc-uid",
)
INIT_OWNER = OwnerReference(
    api_version="ocs.openshift.io/v1",
    kind="OCSInitialization",
    name="ocsinit",
    uid="init-uid",
    controller=True,
    block_owner_deletion=True,
)

DESIRED = DerivedConfig(
    cluster_name="cluster-1",
    enable_read_affinity=True,
    cephfs_kernel_mount_options="ms_mode=prefer-crc",
    enable_topology=False,
    topology_domain_labels="topology.kubernetes.io/zone",
)


def _v1_owner(ref: OwnerReference) -> client.V1OwnerReference:
    return client.V1OwnerReference(
        api_version=ref.api_version,
        kind=ref.kind,
        name=ref.name,
        uid=ref.uid,
        controller=ref.controller,
        block_owner_deletion=ref.block_owner_deletion,
    )


@pytest.fixture
def reconciler(core_api):
    return ConfigReconciler(ConfigMapStore(core_api), SC_OWNER)


# ------------------------------------------------------------------
# Pure owner reference transforms
# ------------------------------------------------------------------

def test_hand_off_clears_flags_of_other_kind_only():
    other_sc = OwnerReference("ocs.openshift.io/v1", "StorageCluster", "other", "u2", controller=True)
    plain = OwnerReference("v1", "Namespace", "ns", "u3")

    out = hand_off([INIT_OWNER, other_sc, plain], SC_OWNER)

    assert out[0] == OwnerReference("ocs.openshift.io/v1", "OCSInitialization", "ocsinit", "init-uid")
    assert out[1] is other_sc
    assert out[2] is plain


def test_set_controller_reference_appends_and_replaces():
    stale = OwnerReference("ocs.openshift.io/v1", "StorageCluster", "ocs-storagecluster", "old-uid")

    out = set_controller_reference([stale], SC_OWNER)

    assert len(out) == 1
    assert out[0].uid == "sc-uid"
    assert out[0].controller is True
    assert out[0].block_owner_deletion is True

    out = set_controller_reference([], SC_OWNER)
    assert out == [OwnerReference("ocs.openshift.io/v1", "StorageCluster", "ocs-storagecluster", "sc-uid", True, True)]


def test_set_controller_reference_refuses_foreign_controller():
    other = OwnerReference("ocs.openshift.io/v1", "StorageCluster", "other", "u2", controller=True)
    with pytest.raises(AlreadyOwnedError):
        set_controller_reference([other], SC_OWNER)


# ------------------------------------------------------------------
# Reconcile against the store
# ------------------------------------------------------------------

def test_creates_missing_configmap(core_api, reconciler):
    assert reconciler.reconcile(DESIRED, TARGET) is True

    cm = core_api.configmaps[(NS, "ocs-operator-config")]
    assert cm.data == DESIRED.as_data()
    [ref] = cm.metadata.owner_references
    assert (ref.kind, ref.name, ref.controller, ref.block_owner_deletion) == (
        "StorageCluster", "ocs-storagecluster", True, True,
    )


def test_second_reconcile_is_a_no_op(core_api, reconciler):
    assert reconciler.reconcile(DESIRED, TARGET) is True
    writes = len(core_api.writes())

    assert reconciler.reconcile(DESIRED, TARGET) is False
    assert len(core_api.writes()) == writes


def test_changed_value_is_written(core_api, reconciler):
    reconciler.reconcile(DESIRED, TARGET)
    desired = replace(DESIRED, cephfs_kernel_mount_options="ms_mode=secure")

    assert reconciler.reconcile(desired, TARGET) is True
    assert core_api.configmaps[(NS, "ocs-operator-config")].data["CSI_CEPHFS_KERNEL_MOUNT_OPTIONS"] == "ms_mode=secure"
    assert core_api.writes()[-1][0] == "replace_cm"


def test_foreign_keys_are_preserved(core_api, reconciler):
    core_api.add_configmap(
        "ocs-operator-config",
        NS,
        data={"CSI_CLUSTER_NAME": "stale", "ROOK_CSI_ENABLE_NFS": "true", "custom": "x"},
        labels={"team": "storage"},
        owner_references=[_v1_owner(replace(SC_OWNER, controller=True, block_owner_deletion=True))],
    )

    assert reconciler.reconcile(DESIRED, TARGET) is True

    cm = core_api.configmaps[(NS, "ocs-operator-config")]
    assert cm.data["ROOK_CSI_ENABLE_NFS"] == "true"
    assert cm.data["custom"] == "x"
    assert cm.data["CSI_CLUSTER_NAME"] == "cluster-1"
    assert cm.metadata.labels == {"team": "storage"}


def test_ownership_hand_off_from_initializer(core_api, reconciler):
    core_api.add_configmap(
        "ocs-operator-config",
        NS,
        data=dict(DESIRED.as_data()),
        owner_references=[_v1_owner(INIT_OWNER)],
    )

    # values already match, so only ownership moves
    assert reconciler.reconcile(DESIRED, TARGET) is False
    assert core_api.writes()[-1][0] == "replace_cm"

    refs = {r.kind: r for r in core_api.configmaps[(NS, "ocs-operator-config")].metadata.owner_references}
    assert refs["OCSInitialization"].controller is None
    assert refs["OCSInitialization"].block_owner_deletion is None
    assert refs["StorageCluster"].controller is True
    assert refs["StorageCluster"].block_owner_deletion is True

    # settled
    assert reconciler.reconcile(DESIRED, TARGET) is False
    assert core_api.writes()[-1][0] == "replace_cm"
    assert len(core_api.writes()) == 1


def test_hand_off_with_changed_values_reports_change(core_api, reconciler):
    core_api.add_configmap(
        "ocs-operator-config",
        NS,
        data={"CSI_ENABLE_READ_AFFINITY": "false"},
        owner_references=[_v1_owner(INIT_OWNER)],
    )

    assert reconciler.reconcile(DESIRED, TARGET) is True


def test_owned_by_another_storagecluster_fails(core_api, reconciler):
    other = OwnerReference("ocs.openshift.io/v1", "StorageCluster", "other", "u2", True, True)
    core_api.add_configmap("ocs-operator-config", NS, data={}, owner_references=[_v1_owner(other)])

    with pytest.raises(AlreadyOwnedError):
        reconciler.reconcile(DESIRED, TARGET)
    assert core_api.writes() == []


def test_store_errors_propagate_unchanged(core_api, reconciler):
    boom = ApiException(status=500, reason="Internal Server Error")
    core_api.errors["read_cm"] = boom

    with pytest.raises(ApiException) as ei:
        reconciler.reconcile(DESIRED, TARGET)
    assert ei.value is boom


def test_update_conflict_is_surfaced(core_api, reconciler, monkeypatch):
    core_api.add_configmap("ocs-operator-config", NS, data={"CSI_CLUSTER_NAME": "old"})

    real_read = core_api.read_namespaced_config_map

    def read_then_race(name, namespace):
        cm = real_read(name, namespace)
        # someone else writes between our read and our replace
        core_api.configmaps[(namespace, name)].metadata.resource_version = "999"
        return cm

    monkeypatch.setattr(core_api, "read_namespaced_config_map", read_then_race)

    with pytest.raises(ApiException) as ei:
        reconciler.reconcile(DESIRED, TARGET)
    assert ei.value.status == 409
