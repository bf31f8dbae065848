# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/gpuinit/observers/logger.py
from __future__ import annotations

import logging

from .events import AgentFailed, BaseEvent, StepFailed

# everything else stays at debug
_WARN_EVENTS = (StepFailed, AgentFailed)


class LoggerObserver:
    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def notify(self, event: BaseEvent) -> None:
        fields = " ".join(f"{k}={v}" for k, v in event.dict().items() if k not in ("ts", "run_id", "node"))
        level = logging.WARNING if isinstance(event, _WARN_EVENTS) else logging.DEBUG
        self.logger.log(level, f"[event] {type(event).__name__} {fields}".rstrip())
