# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

from typing import Dict, Type

from ..errors import UnsupportedOSError
from ..host.models import HostProfile, OsFamily
from .base import OsPlatform
from .debian import DebianPlatform
from .ubuntu import UbuntuPlatform

PLATFORMS: Dict[OsFamily, Type[OsPlatform]] = {
    OsFamily.DEBIAN: DebianPlatform,
    OsFamily.UBUNTU: UbuntuPlatform,
}


def platform_for(host: HostProfile) -> OsPlatform:
    cls = PLATFORMS.get(host.os_family)
    if cls is None:
        raise UnsupportedOSError(host.os_id or host.os_family.value)
    return cls(host)
