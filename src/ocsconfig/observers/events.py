# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/ocsconfig/observers/events.py

from __future__ import annotations
from dataclasses import dataclass, asdict, fields
from typing import Dict, Any, Optional
from datetime import datetime, timezone
import uuid


# ---------------------------------------------------------------------
# Base context and helper
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class BaseEvent:
    ts: str           # ISO timestamp
    run_id: str       # correlates all events in a single reconciliation pass
    env: str          # cluster namespace the pass runs for
    context: Optional[str]  # kube-context

    def dict(self) -> Dict[str, Any]:
        return asdict(self)

    def payload(self) -> Dict[str, Any]:
        """Event-specific fields, without the shared run context."""
        base = {f.name for f in fields(BaseEvent)}
        return {k: v for k, v in asdict(self).items() if k not in base}


def new_ctx(env: str, context: Optional[str], run_id: Optional[str] = None) -> Dict[str, Any]:
    """Event context for one pass. run_id defaults to a fresh id; the CLI passes the log file's."""
    return {
        "ts": datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z"),
        "run_id": run_id or str(uuid.uuid4()),
        "env": env,
        "context": context,
    }


# ---------------------------------------------------------------------
# Reconciliation pass
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class ConfigDerived(BaseEvent):
    storage_cluster: str
    data: Dict[str, str]

@dataclass(frozen=True)
class ConfigMapReconciled(BaseEvent):
    name: str
    namespace: str
    changed: bool

@dataclass(frozen=True)
class ConfigMapFailed(BaseEvent):
    name: str
    namespace: str
    error: str


# ---------------------------------------------------------------------
# Dependent restarts
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class DependentsRestarted(BaseEvent):
    namespace: str
    selector: str
    count: int

@dataclass(frozen=True)
class DependentRestartFailed(BaseEvent):
    namespace: str
    selector: str
    error: str
