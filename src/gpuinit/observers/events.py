# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/gpuinit/observers/events.py

from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Dict, Any, Optional
from datetime import datetime, timezone
import socket
import uuid


# ---------------------------------------------------------------------
# Base context and helper
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class BaseEvent:
    ts: str           # ISO timestamp
    run_id: str       # correlates all events in a single provisioning run
    node: str         # hostname of the provisioned node

    def dict(self) -> Dict[str, Any]:
        return asdict(self)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


def new_ctx(run_id: Optional[str] = None, node: Optional[str] = None) -> Dict[str, Any]:
    return {
        "ts": _now(),
        "run_id": run_id or str(uuid.uuid4()),
        "node": node or socket.gethostname(),
    }


def stamp(ctx: Dict[str, Any]) -> Dict[str, Any]:
    """Same run, fresh timestamp."""
    return {**ctx, "ts": _now()}


# ---------------------------------------------------------------------
# Run lifecycle
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class ProvisionStarted(BaseEvent):
    dry_run: bool

@dataclass(frozen=True)
class StateEntered(BaseEvent):
    state: str

@dataclass(frozen=True)
class ProvisionFinished(BaseEvent):
    status: str                     # "SKIPPED" | "SUCCEEDED" | "FAILED"
    exit_code: int
    provider: Optional[str] = None
    reason: Optional[str] = None
    agent_status: Optional[str] = None


# ---------------------------------------------------------------------
# Steps
# ---------------------------------------------------------------------
@dataclass(frozen=True)
class StepRetried(BaseEvent):
    step: str
    attempt: int
    reason: str

@dataclass(frozen=True)
class StepFailed(BaseEvent):
    state: str
    step: str
    error: str

@dataclass(frozen=True)
class AgentFailed(BaseEvent):
    step: str
    error: str
