# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/ocsconfig/logging/log.py

from __future__ import annotations

import logging
import os
import uuid
from datetime import datetime, timezone
from pathlib import Path

LOG_DIR_ENV = "OCSCONFIG_LOG_DIR"


class RunIdFilter(logging.Filter):
    """Stamps every record with the pass's run id (short form)."""

    def __init__(self, run_id: str):
        super().__init__()
        self.run_id = run_id

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = self.run_id[:8]
        return True


def _prune(base_dir: Path, name: str, keep: int) -> None:
    # file names start with a UTC timestamp, so name order is age order
    old = sorted(base_dir.glob(f"{name}-*.log"))
    for path in old[: max(len(old) - keep, 0)]:
        path.unlink(missing_ok=True)


def init_logging(
    *,
    base_dir: Path | None = None,
    name: str = "ocsconfig",
    verbose: bool = False,
    run_id: str | None = None,
    keep: int = 20,
) -> tuple[logging.Logger, str, Path]:
    """
    Set up logging for one `ocsconfig reconcile` run.

    The file under base_dir ($OCSCONFIG_LOG_DIR, else ~/.ocsconfig/logs)
    gets the DEBUG trace, the console gets INFO (DEBUG when verbose).
    Every line carries the run id, which is also the run_id of the
    events the pass emits. Only the newest `keep` run logs are kept.
    """
    run_id = run_id or str(uuid.uuid4())

    if base_dir is None:
        base_dir = Path(os.environ.get(LOG_DIR_ENV) or Path.home() / ".ocsconfig" / "logs")
    base_dir.mkdir(parents=True, exist_ok=True)
    _prune(base_dir, name, keep - 1)

    ts = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    log_path = base_dir / f"{name}-{ts}-{run_id[:8]}.log"

    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    for h in list(logger.handlers):
        h.close()
    logger.handlers.clear()
    logger.propagate = False

    run_filter = RunIdFilter(run_id)

    fh = logging.FileHandler(log_path, encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.addFilter(run_filter)
    fh.setFormatter(logging.Formatter(
        "%(asctime)s | %(run_id)s | %(levelname)-7s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))

    ch = logging.StreamHandler()
    ch.setLevel(logging.DEBUG if verbose else logging.INFO)
    ch.addFilter(run_filter)
    ch.setFormatter(logging.Formatter("%(levelname)-7s %(message)s"))

    logger.addHandler(fh)
    logger.addHandler(ch)

    logger.debug(f"[log] run_id={run_id} log_file={log_path}")
    return logger, run_id, log_path
