# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/ocsconfig/observers/console.py
import typer

from .events import BaseEvent


class ConsoleObserver:
    def notify(self, event: BaseEvent) -> None:
        fields = ", ".join(f"{k}={v}" for k, v in event.payload().items())
        typer.echo(f"[{event.ts}] {event.__class__.__name__} ns={event.env} ctx={event.context} {{{fields}}}")
