# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/ocsconfig/observers/logger.py
from __future__ import annotations
import logging
from .events import BaseEvent, ConfigDerived, ConfigMapFailed, DependentRestartFailed

# failures stand out on the console; the derived payload only goes to the file
_LEVELS = {
    ConfigDerived: logging.DEBUG,
    ConfigMapFailed: logging.ERROR,
    DependentRestartFailed: logging.WARNING,
}


class LoggerObserver:
    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def notify(self, event: BaseEvent) -> None:
        payload = event.payload()
        if isinstance(event, ConfigDerived):
            payload.update(payload.pop("data"))
        msg = " ".join(f"{k}={v}" for k, v in payload.items())
        level = _LEVELS.get(type(event), logging.INFO)
        self.logger.log(level, f"[event] {event.__class__.__name__} ns={event.env} {msg}")
