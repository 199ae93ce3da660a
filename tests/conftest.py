# tests/conftest.py
from __future__ import annotations

import copy
import logging

import pytest
from kubernetes import client
from kubernetes.client import ApiException


def _parse_selector(selector: str | None) -> dict[str, str]:
    out = {}
    for part in (selector or "").split(","):
        if "=" in part:
            k, v = part.split("=", 1)
            out[k.strip()] = v.strip()
    return out


class FakeCoreApi:
    """
    In-memory stand-in for kubernetes.client.CoreV1Api covering the
    ConfigMap and Pod calls we make. Tracks resourceVersion like the API
    server so stale replaces fail with 409.
    """

    def __init__(self):
        self.configmaps: dict[tuple[str, str], client.V1ConfigMap] = {}
        self.pods: dict[tuple[str, str], client.V1Pod] = {}
        self.calls: list[tuple] = []
        self.errors: dict[str, ApiException] = {}          # op -> error raised on every call
        self.delete_errors: dict[str, ApiException] = {}   # pod name -> error
        self._rv = 0

    def _maybe_fail(self, op: str) -> None:
        if op in self.errors:
            raise self.errors[op]

    def _next_rv(self) -> str:
        self._rv += 1
        return str(self._rv)

    # ---- seeding helpers ----
    def add_configmap(self, name, namespace, data=None, owner_references=None, labels=None):
        cm = client.V1ConfigMap(
            api_version="v1",
            kind="ConfigMap",
            metadata=client.V1ObjectMeta(
                name=name,
                namespace=namespace,
                labels=labels,
                owner_references=owner_references,
                resource_version=self._next_rv(),
            ),
            data=data,
        )
        self.configmaps[(namespace, name)] = cm
        return cm

    def add_pod(self, name, namespace, labels):
        self.pods[(namespace, name)] = client.V1Pod(
            metadata=client.V1ObjectMeta(name=name, namespace=namespace, labels=labels, uid=f"uid-{name}"),
        )

    def writes(self) -> list[tuple]:
        return [c for c in self.calls if c[0] in ("create_cm", "replace_cm")]

    # ---- ConfigMaps ----
    def read_namespaced_config_map(self, name, namespace):
        self.calls.append(("read_cm", namespace, name))
        self._maybe_fail("read_cm")
        cm = self.configmaps.get((namespace, name))
        if cm is None:
            raise ApiException(status=404, reason="Not Found")
        return copy.deepcopy(cm)

    def create_namespaced_config_map(self, namespace, body):
        self.calls.append(("create_cm", namespace, body.metadata.name))
        self._maybe_fail("create_cm")
        if (namespace, body.metadata.name) in self.configmaps:
            raise ApiException(status=409, reason="AlreadyExists")
        body = copy.deepcopy(body)
        body.metadata.resource_version = self._next_rv()
        self.configmaps[(namespace, body.metadata.name)] = body
        return copy.deepcopy(body)

    def replace_namespaced_config_map(self, name, namespace, body):
        self.calls.append(("replace_cm", namespace, name))
        self._maybe_fail("replace_cm")
        current = self.configmaps.get((namespace, name))
        if current is None:
            raise ApiException(status=404, reason="Not Found")
        if body.metadata.resource_version != current.metadata.resource_version:
            raise ApiException(status=409, reason="Conflict")
        body = copy.deepcopy(body)
        body.metadata.resource_version = self._next_rv()
        self.configmaps[(namespace, name)] = body
        return copy.deepcopy(body)

    # ---- Pods ----
    def list_namespaced_pod(self, namespace, label_selector=None):
        self.calls.append(("list_pods", namespace, label_selector))
        self._maybe_fail("list_pods")
        want = _parse_selector(label_selector)
        items = [
            copy.deepcopy(p)
            for (ns, _), p in sorted(self.pods.items())
            if ns == namespace and all((p.metadata.labels or {}).get(k) == v for k, v in want.items())
        ]
        return client.V1PodList(items=items)

    def delete_namespaced_pod(self, name, namespace):
        self.calls.append(("delete_pod", namespace, name))
        if name in self.delete_errors:
            raise self.delete_errors[name]
        self.pods.pop((namespace, name), None)


class FakeCustomApi:
    def __init__(self, objects=None, error: Exception | None = None):
        self.objects = objects or {}
        self.error = error
        self.calls = []

    def get_cluster_custom_object(self, group, version, plural, name):
        self.calls.append((group, version, plural, name))
        if self.error is not None:
            raise self.error
        obj = self.objects.get((group, plural, name))
        if obj is None:
            raise ApiException(status=404, reason="Not Found")
        return copy.deepcopy(obj)


@pytest.fixture
def core_api():
    return FakeCoreApi()


@pytest.fixture
def custom_api():
    return FakeCustomApi(objects={
        ("config.openshift.io", "clusterversions", "version"): {
            "apiVersion": "config.openshift.io/v1",
            "kind": "ClusterVersion",
            "metadata": {"name": "version"},
            "spec": {"clusterID": "5c1e0b9a-6c3d-4f64-9a3c-2f1d0f2b7e11"},
        },
    })


@pytest.fixture
def storage_cluster_doc():
    """A minimal internal-mode StorageCluster as returned by the API."""
    return {
        "apiVersion": "ocs.openshift.io/v1",
        "kind": "StorageCluster",
        "metadata": {
            "name": "ocs-storagecluster",
            "namespace": "openshift-storage",
            "uid": "a7b1c2d3-0000-4000-8000-000000000001",
        },
        "spec": {},
        "status": {"failureDomain": "zone"},
    }


@pytest.fixture(autouse=True)
def _reset_ocsconfig_logger():
    """init_logging detaches the logger from root; undo that between tests."""
    yield
    logger = logging.getLogger("ocsconfig")
    for h in list(logger.handlers):
        h.close()
    logger.handlers.clear()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
