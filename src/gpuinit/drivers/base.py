# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import abc

from ..config.models import DriverProvider, ProvisionConfig
from ..host.models import HostProfile
from ..platforms.base import OsPlatform
from ..platforms.registry import platform_for


class DriverStrategy(metaclass=abc.ABCMeta):
    """
    One self-contained procedure for installing a driver under a provider.
    """

    provider: DriverProvider

    def __init__(self, system):
        self.system = system

    def install_driver(self, host: HostProfile, config: ProvisionConfig) -> None:
        # raises UnsupportedOSError before touching the host
        platform = platform_for(host)
        self._install(platform, config)

    @abc.abstractmethod
    def _install(self, platform: OsPlatform, config: ProvisionConfig) -> None:
        ...
