# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/gpuinit/platforms/debian.py
from __future__ import annotations

import logging
from typing import List

from ..config.models import ProvisionConfig
from ..errors import CommandError
from ..host.models import OsFamily
from .base import COMMON_MODULES, COMMON_PACKAGES, OsPlatform

log = logging.getLogger("gpuinit")

NON_FREE_LIST = "/etc/apt/sources.list.d/non-free.list"
DEBIAN_MIRROR = "http://deb.debian.org/debian"


class DebianPlatform(OsPlatform):
    family = OsFamily.DEBIAN

    def non_free_sources(self) -> List[str]:
        # See https://www.debian.org/distrib/packages#note
        lines = []
        for kind in ("deb", "deb-src"):
            for dist in (self.codename, self.backports_release):
                lines.append(f"{kind} {DEBIAN_MIRROR} {dist} contrib non-free")
        return lines

    def prepare_os_repositories(self, system) -> None:
        for line in self.non_free_sources():
            system.files.append_line(NON_FREE_LIST, line)
        system.apt.update()

    def package_set(self, config: ProvisionConfig) -> List[str]:
        return COMMON_PACKAGES + ["nvidia-driver", "nvidia-kernel-common", "nvidia-smi"]

    def module_set(self) -> List[str]:
        return COMMON_MODULES + ["nvidia-current"]

    @property
    def blas_library_path(self) -> str:
        return "/usr/lib/libblas.so"

    def _run_installer(self, system, url: str, filename: str, args: List[str]) -> None:
        dest = system.workdir / filename
        system.fetcher.download(url, dest)
        cp = system.runner.run(["bash", str(dest), *args], cwd=str(system.workdir))
        if cp.returncode != 0:
            raise CommandError(f"run {filename}", cp.returncode, cp.stderr)

    def install_vendor_driver(self, system, config: ProvisionConfig) -> None:
        log.info("[debian] installing NVIDIA driver run-file")
        self._run_installer(system, config.driver_url, "driver.run", ["--silent"])
        log.info("[debian] installing CUDA toolkit run-file")
        self._run_installer(
            system, config.cuda_url, "cuda.run", ["--silent", "--toolkit", "--no-opengl-libs"]
        )
