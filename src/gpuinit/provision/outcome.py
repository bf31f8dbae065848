# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/gpuinit/provision/outcome.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class OutcomeStatus(str, Enum):
    SKIPPED = "SKIPPED"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"


class AgentStatus(str, Enum):
    NOT_REQUESTED = "NOT_REQUESTED"
    INSTALLED = "INSTALLED"
    FAILED = "FAILED"


@dataclass(frozen=True)
class InstallationOutcome:
    """
    Terminal result of a run. Every run resolves to exactly one of these.
    """
    status: OutcomeStatus
    provider: Optional[str] = None
    reason: Optional[str] = None
    agent_status: AgentStatus = AgentStatus.NOT_REQUESTED
    agent_error: Optional[str] = None

    @classmethod
    def skipped(cls, reason: str) -> "InstallationOutcome":
        return cls(OutcomeStatus.SKIPPED, reason=reason)

    @classmethod
    def failed(cls, reason: str) -> "InstallationOutcome":
        return cls(OutcomeStatus.FAILED, reason=reason)

    @classmethod
    def succeeded(
        cls,
        provider: str,
        agent_status: AgentStatus = AgentStatus.NOT_REQUESTED,
        agent_error: Optional[str] = None,
    ) -> "InstallationOutcome":
        return cls(OutcomeStatus.SUCCEEDED, provider=provider,
                   agent_status=agent_status, agent_error=agent_error)

    @property
    def exit_code(self) -> int:
        return 1 if self.status is OutcomeStatus.FAILED else 0

    def summary(self) -> str:
        if self.status is OutcomeStatus.SUCCEEDED:
            s = f"SUCCEEDED provider={self.provider} agent={self.agent_status.value}"
            if self.agent_error:
                s += f" ({self.agent_error})"
            return s
        return f"{self.status.value}: {self.reason}"
