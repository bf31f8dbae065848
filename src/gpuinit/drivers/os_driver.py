# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/gpuinit/drivers/os_driver.py
from __future__ import annotations

import logging
import textwrap

from ..config.models import DriverProvider, ProvisionConfig
from ..platforms.base import OsPlatform
from .base import DriverStrategy

log = logging.getLogger("gpuinit")

NVBLAS_CONFIG_FILE = "/etc/nvidia/nvblas.conf"
ENVIRONMENT_FILE = "/etc/environment"
OPEN_SOURCE_MODULE = "nouveau"
NODE_MANAGER_UNIT = "hadoop-yarn-nodemanager"


def render_nvblas_config(blas_lib: str) -> str:
    # See http://docs.nvidia.com/cuda/nvblas/
    return textwrap.dedent(f"""\
        # Insert here the CPU BLAS fallback library of your choice.
        # The standard libblas.so.3 defaults to OpenBLAS, which does not have the
        # requisite CBLAS API.
        NVBLAS_CPU_BLAS_LIB {blas_lib}
        # Use all GPUs
        NVBLAS_GPU_LIST ALL
        # Add more configuration here.
    """)


class OsDriverStrategy(DriverStrategy):
    """
    Distribution-packaged driver:
      - repositories + package install from backports
      - system-wide NVBLAS config
      - swap nouveau for the proprietary modules without a reboot
      - stop an active YARN NodeManager so it picks up the new config
    """

    provider = DriverProvider.OS

    def _install(self, platform: OsPlatform, config: ProvisionConfig) -> None:
        system = self.system

        platform.prepare_os_repositories(system)

        # See https://wiki.debian.org/NvidiaGraphicsDrivers
        system.apt.install(
            platform.package_set(config),
            no_recommends=True,
            target_release=platform.backports_release,
        )

        self.configure_nvblas(platform.blas_library_path)
        self.reload_modules(platform)
        self.stop_node_manager()

        log.info(f"NVIDIA GPU driver provided by {platform.family.value} was installed successfully")

    def configure_nvblas(self, blas_lib: str) -> None:
        files = self.system.files
        files.write_text(NVBLAS_CONFIG_FILE, render_nvblas_config(blas_lib))
        files.append_line(ENVIRONMENT_FILE, f"NVBLAS_CONFIG_FILE={NVBLAS_CONFIG_FILE}")

    def reload_modules(self, platform: OsPlatform) -> None:
        # nouveau must be gone before the proprietary set is loaded
        modules = self.system.modules
        modules.unload(OPEN_SOURCE_MODULE)
        for name in platform.module_set():
            modules.load(name)

    def stop_node_manager(self) -> None:
        services = self.system.services
        if not services.is_active(NODE_MANAGER_UNIT):
            return
        # KILL rather than stop to prevent an unregister/register cycle;
        # restarting it is left to the operator
        log.info(f"[os-driver] killing {NODE_MANAGER_UNIT} so it reloads NVBLAS config")
        services.kill(NODE_MANAGER_UNIT, signal="KILL")
