# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/gpuinit/provision/orchestrator.py
from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Dict, Optional

from ..agent.deployer import AgentDeployer
from ..config.models import ProvisionConfig
from ..drivers.base import DriverStrategy
from ..drivers.registry import strategy_for
from ..errors import AgentDeployError, GpuInitError, UnsupportedOSError
from ..host.models import HostProfile
from ..host.probe import HostProbe
from ..observers.dispatcher import EventBus
from ..observers.events import (
    AgentFailed,
    ProvisionFinished,
    ProvisionStarted,
    StateEntered,
    StepFailed,
    new_ctx,
    stamp,
)
from .outcome import AgentStatus, InstallationOutcome

log = logging.getLogger("gpuinit")

APT_ENV = {"DEBIAN_FRONTEND": "noninteractive"}


class State(str, Enum):
    START = "Start"
    OS_CHECK = "OsCheck"
    PREREQUISITES = "Prerequisites"
    GPU_CHECK = "GpuCheck"
    STRATEGY_SELECT = "StrategySelect"
    DRIVER_INSTALL = "DriverInstall"
    AGENT_GATE = "AgentGate"
    AGENT_INSTALL = "AgentInstall"
    DONE = "Done"


class Orchestrator:
    """
    Start -> OsCheck -> Prerequisites -> GpuCheck -> StrategySelect
          -> DriverInstall -> AgentGate -> AgentInstall? -> Done

    Every path ends in exactly one InstallationOutcome. Nothing completed is
    ever rolled back: failure stops forward progress.
    """

    def __init__(
        self,
        *,
        system,
        config: ProvisionConfig,
        probe: Optional[HostProbe] = None,
        bus: Optional[EventBus] = None,
        run_ctx: Optional[Dict] = None,
        strategy_factory: Callable[[str, object], DriverStrategy] = strategy_for,
        agent_factory: Callable[[object], AgentDeployer] = AgentDeployer,
    ):
        self.system = system
        self.config = config
        self.probe = probe or HostProbe(system.runner, system.files)
        self.bus = bus or EventBus()
        self.run_ctx = run_ctx or new_ctx()
        self.strategy_factory = strategy_factory
        self.agent_factory = agent_factory
        self.state = State.START
        self.host: Optional[HostProfile] = None

    # ------------------ plumbing ------------------

    def _enter(self, state: State) -> None:
        self.state = state
        log.debug(f"[orchestrator] -> {state.value}")
        self.bus.emit(StateEntered(state=state.value, **stamp(self.run_ctx)))

    def _finish(self, outcome: InstallationOutcome) -> InstallationOutcome:
        self._enter(State.DONE)
        if outcome.exit_code == 0:
            log.info(f"[orchestrator] {outcome.summary()}")
        else:
            log.error(f"[orchestrator] {outcome.summary()}")
        self.bus.emit(
            ProvisionFinished(
                status=outcome.status.value,
                exit_code=outcome.exit_code,
                provider=outcome.provider,
                reason=outcome.reason,
                agent_status=outcome.agent_status.value,
                **stamp(self.run_ctx),
            )
        )
        return outcome

    def _fail(self, err: GpuInitError) -> InstallationOutcome:
        step = getattr(err, "step", self.state.value)
        self.bus.emit(StepFailed(state=self.state.value, step=step, error=str(err), **stamp(self.run_ctx)))
        return self._finish(InstallationOutcome.failed(f"{self.state.value}: {err}"))

    # ------------------ phases ------------------

    def ensure_prerequisites(self) -> None:
        """
        lspci is needed for GPU detection. Installed only when missing.
        """
        if self.system.has_command("lspci"):
            return
        self.system.apt.update()
        self.system.apt.install(["pciutils"])

    def install_kernel_headers(self, host: HostProfile) -> None:
        if not host.kernel_release:
            log.warning("[orchestrator] unknown kernel release; skipping linux-headers")
            return
        self.system.apt.install([f"linux-headers-{host.kernel_release}"])

    def run(self) -> InstallationOutcome:
        self.bus.emit(ProvisionStarted(dry_run=self.system.ctx.dry_run, **stamp(self.run_ctx)))

        self._enter(State.OS_CHECK)
        os_info = self.probe.detect_os()
        if not os_info.family.supported:
            return self._fail(UnsupportedOSError(os_info.os_id or "<unknown>"))

        self._enter(State.PREREQUISITES)
        try:
            self.ensure_prerequisites()
        except GpuInitError as e:
            return self._fail(e)

        self._enter(State.GPU_CHECK)
        host = self.host = self.probe.detect_host(os_info)
        if not host.has_gpu:
            log.warning("No NVIDIA card detected. Skipping installation.")
            return self._finish(InstallationOutcome.skipped("no NVIDIA GPU detected"))

        self._enter(State.STRATEGY_SELECT)
        try:
            strategy = self.strategy_factory(self.config.driver_provider, self.system)
        except GpuInitError as e:
            return self._fail(e)

        self._enter(State.DRIVER_INSTALL)
        try:
            self.install_kernel_headers(host)
            strategy.install_driver(host, self.config)
        except GpuInitError as e:
            return self._fail(e)
        provider = strategy.provider.value

        self._enter(State.AGENT_GATE)
        if not self.config.install_agent:
            log.info("GPU metrics will not be installed.")
            return self._finish(InstallationOutcome.succeeded(provider))

        self._enter(State.AGENT_INSTALL)
        try:
            self.agent_factory(self.system).deploy(self.config)
        except AgentDeployError as e:
            # driver stays installed; the agent failure is reported, not hidden
            log.error(str(e))
            self.bus.emit(AgentFailed(step=e.step, error=str(e), **stamp(self.run_ctx)))
            return self._finish(
                InstallationOutcome.succeeded(provider, AgentStatus.FAILED, agent_error=str(e))
            )

        return self._finish(InstallationOutcome.succeeded(provider, AgentStatus.INSTALLED))
