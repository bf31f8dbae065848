# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging

from ..errors import ModuleLoadError

log = logging.getLogger("gpuinit")


class KernelModules:
    """modprobe wrapper."""

    def __init__(self, runner):
        self.runner = runner

    def unload(self, name: str) -> bool:
        cp = self.runner.run(["modprobe", "-r", name])
        if cp.returncode != 0:
            log.warning(f"[kmod] could not unload {name} (rc={cp.returncode})")
            return False
        return True

    def load(self, name: str) -> None:
        cp = self.runner.run(["modprobe", name])
        if cp.returncode != 0:
            raise ModuleLoadError(name, cp.returncode)
