# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/gpuinit/host/models.py

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class OsFamily(str, Enum):
    DEBIAN = "debian"
    UBUNTU = "ubuntu"
    UNSUPPORTED = "unsupported"

    @classmethod
    def from_id(cls, os_id: str) -> "OsFamily":
        try:
            family = cls(os_id.strip().lower())
        except ValueError:
            return cls.UNSUPPORTED
        return family

    @property
    def supported(self) -> bool:
        return self is not OsFamily.UNSUPPORTED


@dataclass(frozen=True)
class OsInfo:
    os_id: str          # lowercased distribution id, e.g. 'debian'
    codename: str       # e.g. 'bullseye', 'jammy'

    @property
    def family(self) -> OsFamily:
        return OsFamily.from_id(self.os_id)


@dataclass(frozen=True)
class HostProfile:
    """
    What the node looks like. Computed once per run.
    """
    os_family: OsFamily
    os_codename: str
    has_gpu: bool
    os_id: str = ""
    kernel_release: str = ""
