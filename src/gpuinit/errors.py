# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/gpuinit/errors.py
from __future__ import annotations

from typing import Optional


class GpuInitError(RuntimeError):
    """Base class for provisioning failures."""

    step: str = "provision"


class UnsupportedOSError(GpuInitError):
    """Raised when the host distribution is neither Debian nor Ubuntu."""

    step = "os-check"

    def __init__(self, os_id: str):
        super().__init__(f"Unsupported OS: '{os_id}'")
        self.os_id = os_id


class UnsupportedProviderError(GpuInitError):
    """Raised when gpu-driver-provider is neither NVIDIA nor OS."""

    step = "strategy-select"

    def __init__(self, provider: str):
        super().__init__(f"Unsupported GPU driver provider: '{provider}'")
        self.provider = provider


class TransientExternalFailure(GpuInitError):
    """
    A failure worth retrying inside execute_with_retries, e.g. the dpkg
    lock being held by another apt process.
    """


class ExhaustedRetryError(GpuInitError):
    def __init__(self, step: str, attempts: int):
        super().__init__(f"[{step}] failed after {attempts} attempts")
        self.step = step
        self.attempts = attempts


class CommandError(GpuInitError):
    """A non-retried command exited non-zero."""

    def __init__(self, step: str, returncode: int, stderr: Optional[str] = None):
        msg = f"[{step}] failed (rc={returncode})"
        if stderr:
            msg += f": {stderr.strip()}"
        super().__init__(msg)
        self.step = step
        self.returncode = returncode
        self.stderr = stderr


class FileWriteError(GpuInitError):
    """A host file or directory could not be written."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Cannot write {path}: {reason}")
        self.step = f"write {path}"
        self.path = path


class FetchError(GpuInitError):
    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to download {url}: {reason}")
        self.step = f"fetch {url}"
        self.url = url


class ModuleLoadError(GpuInitError):
    def __init__(self, module: str, returncode: int):
        super().__init__(f"modprobe {module} failed (rc={returncode})")
        self.step = f"modprobe {module}"
        self.module = module


class AgentDeployError(GpuInitError):
    """Fatal to the agent deployment only; the driver install stands."""

    def __init__(self, step: str, message: str):
        super().__init__(f"GPU agent deployment failed at '{step}': {message}")
        self.step = step
