# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/ocsconfig/storagecluster/interface.py

from __future__ import annotations
from typing import Callable, List, Optional, Protocol

from .models import ConfigResource, OperationResult, PodRef, ResourceKey


class ResourceStore(Protocol):
    """
    Persistence for namespaced key/value resources.
    """

    def get(self, name: str, namespace: str) -> Optional[ConfigResource]: ...

    def create_or_update(
        self,
        key: ResourceKey,
        mutate: Callable[[ConfigResource], None],
    ) -> OperationResult:
        """
        Fetch the resource (or start from an empty one), apply mutate in
        place, then create it, update it, or leave it alone if mutate
        changed nothing. Raises on persistence errors.
        """
        ...


class ProcessRegistry(Protocol):
    """
    Enumerates and terminates workload processes (pods).
    """

    def list(self, namespace: str, selector: dict[str, str]) -> List[PodRef]: ...

    def terminate(self, ref: PodRef) -> None:
        """Request termination. Raises on failure."""
        ...
