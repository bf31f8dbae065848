# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/gpuinit/config/resolver.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict

from .metadata import MetadataAccessor
from .models import (
    DEFAULT_AGENT_REPO_URL,
    DEFAULT_CUDA_URL,
    DEFAULT_CUDA_VERSION,
    DEFAULT_DRIVER_PROVIDER,
    DEFAULT_DRIVER_URL,
    DEFAULT_INSTALL_AGENT,
    DEFAULT_UBUNTU_DRIVER_VERSION,
    ProvisionConfig,
)

log = logging.getLogger("gpuinit")


def _as_bool(value: str) -> bool:
    return value.strip().lower() == "true"


def _strip(value: str) -> str:
    return value.strip()


@dataclass(frozen=True)
class Option:
    name: str           # metadata attribute name
    field: str          # ProvisionConfig field
    default: str
    convert: Callable[[str], object] = _strip


OPTIONS = (
    Option("gpu-driver-url", "driver_url", DEFAULT_DRIVER_URL),
    Option("cuda-url", "cuda_url", DEFAULT_CUDA_URL),
    Option("cuda-version", "cuda_version", DEFAULT_CUDA_VERSION),
    Option("gpu-driver-provider", "driver_provider", DEFAULT_DRIVER_PROVIDER),
    Option("install-gpu-agent", "install_agent", DEFAULT_INSTALL_AGENT, _as_bool),
    Option("ubuntu-driver-version", "ubuntu_driver_version", DEFAULT_UBUNTU_DRIVER_VERSION),
    Option("gpu-agent-repo-url", "agent_source_url", DEFAULT_AGENT_REPO_URL),
)


def recognized_options() -> Dict[str, str]:
    return {o.name: o.default for o in OPTIONS}


def resolve(accessor: MetadataAccessor) -> ProvisionConfig:
    """
    Read every recognized option once and freeze the result.
    """
    values = {}
    for opt in OPTIONS:
        raw = accessor.get(opt.name, opt.default)
        values[opt.field] = opt.convert(raw)
        log.debug(f"[config] {opt.name}={raw!r}")
    cfg = ProvisionConfig(**values)
    log.info(
        f"[config] provider={cfg.driver_provider} cuda_version={cfg.cuda_version!r} "
        f"install_agent={cfg.install_agent}"
    )
    return cfg
