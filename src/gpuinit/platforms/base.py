# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/gpuinit/platforms/base.py
from __future__ import annotations

import abc
from typing import List

from ..config.models import ProvisionConfig
from ..host.models import HostProfile, OsFamily

COMMON_PACKAGES = ["nvidia-cuda-toolkit"]
COMMON_MODULES = ["nvidia-drm", "nvidia-uvm", "drm"]


class OsPlatform(metaclass=abc.ABCMeta):
    """
    Everything that differs between supported distributions. One concrete
    class per family; strategies only talk to this interface.
    """

    family: OsFamily

    def __init__(self, host: HostProfile):
        self.host = host

    @property
    def codename(self) -> str:
        return self.host.os_codename

    @property
    def backports_release(self) -> str:
        return f"{self.codename}-backports"

    @abc.abstractmethod
    def install_vendor_driver(self, system, config: ProvisionConfig) -> None:
        """
        Install the NVIDIA-supplied driver and CUDA toolkit.
        """

    @abc.abstractmethod
    def package_set(self, config: ProvisionConfig) -> List[str]:
        """
        Distribution packages for the OS-provided driver.
        """

    @abc.abstractmethod
    def module_set(self) -> List[str]:
        """
        Proprietary kernel modules to load, in order.
        """

    @property
    @abc.abstractmethod
    def blas_library_path(self) -> str:
        """
        CPU BLAS library NVBLAS falls back to.
        """

    def prepare_os_repositories(self, system) -> None:
        """
        Make the OS driver packages installable. Nothing to do by default.
        """
