# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/gpuinit/host/probe.py
from __future__ import annotations

import logging
import shlex
from typing import Dict, Optional

from .models import HostProfile, OsInfo

log = logging.getLogger("gpuinit")

GPU_VENDOR = "NVIDIA"
OS_RELEASE = "/etc/os-release"


def parse_os_release(text: str) -> Dict[str, str]:
    data: Dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        try:
            parts = shlex.split(value)
        except ValueError:
            parts = [value.strip("\"'")]
        data[key] = parts[0] if parts else ""
    return data


class HostProbe:
    """
    Read-only inspection of the node: distribution, codename, kernel and
    whether an NVIDIA device sits on the PCI bus.
    """

    def __init__(self, runner, files, vendor: str = GPU_VENDOR):
        self.runner = runner
        self.files = files
        self.vendor = vendor

    def _read(self, cmd) -> Optional[str]:
        cp = self.runner.run(cmd, mutating=False)
        if cp.returncode != 0:
            return None
        return cp.stdout.strip()

    def detect_os(self) -> OsInfo:
        os_id = self._read(["lsb_release", "-is"])
        codename = self._read(["lsb_release", "-cs"])

        if not os_id or codename is None:
            rel = parse_os_release(self.files.read_text(OS_RELEASE))
            os_id = os_id or rel.get("ID", "")
            if codename is None:
                codename = rel.get("VERSION_CODENAME") or rel.get("UBUNTU_CODENAME", "")

        info = OsInfo(os_id=os_id.lower(), codename=(codename or "").strip())
        log.info(f"[probe] os={info.os_id or '<unknown>'} codename={info.codename or '<unknown>'}")
        return info

    def has_gpu(self) -> bool:
        listing = self._read(["lspci"])
        if listing is None:
            log.warning("[probe] lspci failed; treating host as having no GPU")
            return False
        return self.vendor in listing

    def kernel_release(self) -> str:
        return self._read(["uname", "-r"]) or ""

    def detect_host(self, os_info: Optional[OsInfo] = None) -> HostProfile:
        info = os_info or self.detect_os()
        gpu = self.has_gpu()
        profile = HostProfile(
            os_family=info.family,
            os_codename=info.codename,
            has_gpu=gpu,
            os_id=info.os_id,
            kernel_release=self.kernel_release(),
        )
        log.info(f"[probe] family={profile.os_family.value} gpu={'yes' if gpu else 'no'}")
        return profile
