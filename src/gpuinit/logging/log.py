# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

#src/gpuinit/logging/log.py

from __future__ import annotations

import logging
import os
import socket
import sys
import uuid
from datetime import datetime, timezone
from pathlib import Path

DEFAULT_LOG_DIR = Path("/var/log/gpuinit")
LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _writable_dir(base_dir: Path | None) -> Path:
    candidates = [base_dir] if base_dir is not None else [DEFAULT_LOG_DIR, Path.home() / ".gpuinit" / "logs"]
    for d in candidates:
        try:
            d.mkdir(parents=True, exist_ok=True)
        except OSError:
            continue
        if os.access(d, os.W_OK):
            return d
    raise PermissionError(f"no writable log directory among {[str(c) for c in candidates]}")


def _attach(logger: logging.Logger, handler: logging.Handler, level: int) -> None:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)


def init_logging(
    *,
    base_dir: Path | None = None,
    name: str = "gpuinit",
    verbose: bool = False,
) -> tuple[logging.Logger, str, Path]:
    """
    Initializes:
      - per-run log file with the full command trace
      - console output on stderr at INFO (DEBUG with --verbose), so stdout
        carries only the outcome line
      - returns run_id so observers can reuse it
    """
    run_id = str(uuid.uuid4())
    log_dir = _writable_dir(base_dir)
    ts = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    log_path = log_dir / f"{name}-{ts}-{run_id}.log"

    logger = logging.getLogger(name)
    logger.setLevel(logging.DEBUG)
    logger.handlers.clear()
    logger.propagate = False

    _attach(logger, logging.FileHandler(log_path), logging.DEBUG)
    _attach(logger, logging.StreamHandler(sys.stderr), logging.DEBUG if verbose else logging.INFO)

    logger.info(f"=== gpuinit run started on {socket.gethostname()} ===")
    logger.info(f"run_id={run_id}")
    logger.info(f"log_file={log_path}")

    return logger, run_id, log_path
