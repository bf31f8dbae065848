# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/gpuinit/drivers/nvidia.py
from __future__ import annotations

import logging

from ..config.models import DriverProvider, ProvisionConfig
from ..platforms.base import OsPlatform
from .base import DriverStrategy

log = logging.getLogger("gpuinit")


class VendorDriverStrategy(DriverStrategy):
    """NVIDIA-supplied driver and CUDA toolkit."""

    provider = DriverProvider.NVIDIA

    def _install(self, platform: OsPlatform, config: ProvisionConfig) -> None:
        platform.install_vendor_driver(self.system, config)
        log.info("NVIDIA GPU driver provided by NVIDIA was installed successfully")
