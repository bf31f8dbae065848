# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/gpuinit/system/systemd.py
from __future__ import annotations

from ..errors import CommandError


class ServiceManager:
    def __init__(self, runner):
        self.runner = runner

    def _check(self, cmd, step: str) -> None:
        cp = self.runner.run(cmd)
        if cp.returncode != 0:
            raise CommandError(step, cp.returncode, cp.stderr)

    def daemon_reload(self) -> None:
        self._check(["systemctl", "daemon-reload"], "systemctl daemon-reload")

    def enable_now(self, unit: str) -> None:
        self._check(["systemctl", "--now", "enable", unit], f"systemctl enable {unit}")

    def is_active(self, unit: str) -> bool:
        """
        True only when systemd reports the unit active (exit 0).
        Unknown or inactive units are not active.
        """
        cp = self.runner.run(["systemctl", "is-active", "--quiet", unit], mutating=False)
        return cp.returncode == 0

    def kill(self, unit: str, signal: str = "KILL") -> None:
        self._check(["systemctl", "kill", "-s", signal, unit], f"systemctl kill {unit}")
