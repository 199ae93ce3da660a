# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/ocsconfig/storagecluster/restart.py

from __future__ import annotations

import logging
from typing import Dict

from .interface import ProcessRegistry

log = logging.getLogger("ocsconfig")

ROOK_CEPH_OPERATOR_SELECTOR = {"app": "rook-ceph-operator"}


class DependentRestarter:
    """
    Deletes the pods that consume the operator ConfigMap so their
    controller recreates them with the new values.

    Failures are logged and end the restart early; they never fail the
    reconciliation pass.
    """

    def __init__(self, registry: ProcessRegistry):
        self.registry = registry
        self.last_error: str | None = None

    def restart_dependents(self, namespace: str, selector: Dict[str, str] = ROOK_CEPH_OPERATOR_SELECTOR) -> int:
        """
        Returns the number of pods whose termination was requested.
        """
        self.last_error = None
        # any registry error is contained here; restarts never fail the pass
        try:
            pods = self.registry.list(namespace, selector)
        except Exception as exc:
            self.last_error = f"failed to list pods {selector} in {namespace}: {exc}"
            log.error(f"[restart] {self.last_error}")
            return 0

        restarted = 0
        for pod in pods:
            try:
                self.registry.terminate(pod)
            except Exception as exc:
                # remaining pods are left for the next pass that changes the config
                self.last_error = f"failed to delete pod {pod.namespace}/{pod.name}: {exc}"
                log.error(f"[restart] {self.last_error}")
                return restarted
            log.debug(f"[restart] deleted pod {pod.namespace}/{pod.name}")
            restarted += 1

        return restarted
