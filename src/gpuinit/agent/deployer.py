# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/gpuinit/agent/deployer.py
from __future__ import annotations

import logging
from dataclasses import dataclass

from jinja2 import Environment, StrictUndefined

from ..config.models import ProvisionConfig
from ..errors import AgentDeployError, GpuInitError

log = logging.getLogger("gpuinit")

UNIT_TEMPLATE = """\
[Unit]
Description={{ description }}

[Service]
Type=simple
PIDFile={{ pid_file }}
ExecStart=/bin/bash --login -c '{{ python }} "{{ install_dir }}/{{ script }}"'
User=root
Group=root
WorkingDirectory=/
Restart=always

[Install]
WantedBy=multi-user.target
"""


@dataclass(frozen=True)
class AgentLayout:
    """
    Where the agent lives on the host.
    """
    install_dir: str = "/opt/gpu-utilization-agent"
    unit_name: str = "gpu-utilization-agent.service"
    unit_dir: str = "/lib/systemd/system"
    requirements: str = "requirements.txt"
    script: str = "report_gpu_metrics.py"
    description: str = "GPU Utilization Metric Agent"
    pid_file: str = "/run/gpu_agent.pid"
    python: str = "python3"
    pip: str = "pip3"
    pip_package: str = "python3-pip"

    @property
    def unit_path(self) -> str:
        return f"{self.unit_dir}/{self.unit_name}"


def render_unit(layout: AgentLayout) -> str:
    env = Environment(autoescape=False, undefined=StrictUndefined, keep_trailing_newline=True)
    return env.from_string(UNIT_TEMPLATE).render(
        description=layout.description,
        pid_file=layout.pid_file,
        python=layout.python,
        install_dir=layout.install_dir,
        script=layout.script,
    )


class AgentDeployer:
    """
    Installs the GPU utilization metrics agent as a systemd service.
    Failures surface as AgentDeployError and never touch the driver.
    """

    def __init__(self, system, layout: AgentLayout | None = None):
        self.system = system
        self.layout = layout or AgentLayout()

    def _step(self, name: str, fn) -> None:
        log.info(f"[agent] {name}")
        try:
            fn()
        except (GpuInitError, OSError) as e:
            raise AgentDeployError(name, str(e)) from e

    def ensure_pip(self) -> None:
        if self.system.has_command(self.layout.pip):
            return
        self.system.apt.install([self.layout.pip_package])

    def fetch_artifacts(self, config: ProvisionConfig) -> None:
        base = config.agent_source_url.rstrip("/")
        install_dir = self.system.files.ensure_dir(self.layout.install_dir)
        for name in (self.layout.requirements, self.layout.script):
            self.system.fetcher.download(f"{base}/{name}", install_dir / name)

    def install_requirements(self) -> None:
        req = f"{self.layout.install_dir}/{self.layout.requirements}"
        self.system.run_retried(
            [self.layout.pip, "install", "-r", str(self.system.files.path(req))],
            step=f"{self.layout.pip} install -r {req}",
        )

    def write_unit(self) -> None:
        self.system.files.write_text(self.layout.unit_path, render_unit(self.layout))

    def start_service(self) -> None:
        self.system.services.daemon_reload()
        self.system.services.enable_now(self.layout.unit_name)

    def deploy(self, config: ProvisionConfig) -> None:
        self._step("ensure pip", self.ensure_pip)
        self._step("download agent", lambda: self.fetch_artifacts(config))
        self._step("install agent requirements", self.install_requirements)
        self._step("write service unit", self.write_unit)
        self._step("enable service", self.start_service)
        log.info("GPU agent successfully deployed.")
