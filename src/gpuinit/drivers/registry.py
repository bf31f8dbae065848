# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from typing import Dict, Type

from ..config.models import DriverProvider
from ..errors import UnsupportedProviderError
from .base import DriverStrategy
from .nvidia import VendorDriverStrategy
from .os_driver import OsDriverStrategy

STRATEGIES: Dict[DriverProvider, Type[DriverStrategy]] = {
    DriverProvider.NVIDIA: VendorDriverStrategy,
    DriverProvider.OS: OsDriverStrategy,
}


def parse_provider(value: str) -> DriverProvider:
    try:
        return DriverProvider(value)
    except ValueError:
        raise UnsupportedProviderError(value) from None


def strategy_for(provider: str, system) -> DriverStrategy:
    return STRATEGIES[parse_provider(provider)](system)
