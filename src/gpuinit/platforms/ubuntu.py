# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/gpuinit/platforms/ubuntu.py
from __future__ import annotations

import logging
from typing import List, NamedTuple

from ..config.models import ProvisionConfig
from ..host.models import OsFamily
from .base import COMMON_MODULES, COMMON_PACKAGES, OsPlatform

log = logging.getLogger("gpuinit")

NVIDIA_REPO_BASE = "https://developer.download.nvidia.com/compute/cuda/repos"
CUDA_PIN_PATH = "/etc/apt/preferences.d/cuda-repository-pin-600"


class RepoDist(NamedTuple):
    name: str
    key: str


# codename -> NVIDIA repository distribution and the key it is signed with.
# 7fa2af80.pub was retired in April 2022; every repo below moved to 3bf863cc.pub.
REPO_DISTS = {
    "bionic": RepoDist("ubuntu1804", "3bf863cc.pub"),
    "focal": RepoDist("ubuntu2004", "3bf863cc.pub"),
    "jammy": RepoDist("ubuntu2204", "3bf863cc.pub"),
    "noble": RepoDist("ubuntu2404", "3bf863cc.pub"),
}
FALLBACK_REPO_DIST = REPO_DISTS["bionic"]


class UbuntuPlatform(OsPlatform):
    family = OsFamily.UBUNTU

    @property
    def _dist(self) -> RepoDist:
        return REPO_DISTS.get(self.codename, FALLBACK_REPO_DIST)

    @property
    def repo_dist(self) -> str:
        return self._dist.name

    @property
    def repository_key(self) -> str:
        return self._dist.key

    @property
    def repository_url(self) -> str:
        return f"{NVIDIA_REPO_BASE}/{self.repo_dist}/x86_64"

    @property
    def repository_key_url(self) -> str:
        return f"{self.repository_url}/{self.repository_key}"

    @property
    def repository_pin_url(self) -> str:
        return f"{self.repository_url}/cuda-{self.repo_dist}.pin"

    def package_set(self, config: ProvisionConfig) -> List[str]:
        v = config.ubuntu_driver_version
        return COMMON_PACKAGES + [f"nvidia-driver-{v}", f"nvidia-kernel-common-{v}"]

    def module_set(self) -> List[str]:
        return COMMON_MODULES + ["nvidia"]

    @property
    def blas_library_path(self) -> str:
        return "/usr/lib/x86_64-linux-gnu/libblas.so"

    def install_vendor_driver(self, system, config: ProvisionConfig) -> None:
        # repository registration -> index refresh -> install, strictly in order
        log.info(f"[ubuntu] registering NVIDIA repository {self.repository_url}")
        system.fetcher.download(self.repository_pin_url, system.files.path(CUDA_PIN_PATH))

        key_file = system.workdir / self.repository_key
        system.fetcher.download(self.repository_key_url, key_file)
        system.apt.add_key(str(key_file))
        system.apt.add_repository(f"deb {self.repository_url} /")
        system.apt.update()

        package = config.cuda_package()
        log.info(f"[ubuntu] installing {package}")
        system.apt.install([package], no_recommends=True)
