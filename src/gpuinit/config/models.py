# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/gpuinit/config/models.py

from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class DriverProvider(str, Enum):
    NVIDIA = "NVIDIA"
    OS = "OS"


DEFAULT_DRIVER_URL = "http://us.download.nvidia.com/tesla/418.87/NVIDIA-Linux-x86_64-418.87.00.run"
DEFAULT_CUDA_URL = "https://developer.nvidia.com/compute/cuda/10.0/Prod/local_installers/cuda_10.0.130_410.48_linux"
DEFAULT_CUDA_VERSION = "10.0"
DEFAULT_DRIVER_PROVIDER = DriverProvider.OS.value
DEFAULT_INSTALL_AGENT = "false"
DEFAULT_UBUNTU_DRIVER_VERSION = "435"
DEFAULT_AGENT_REPO_URL = (
    "https://raw.githubusercontent.com/GoogleCloudPlatform/ml-on-gcp/master/dlvm/gcp-gpu-utilization-metrics"
)


class ProvisionConfig(BaseModel):
    """
    Resolved settings for one run. Frozen: built before the first mutation
    and never re-read.
    """

    model_config = ConfigDict(frozen=True)

    driver_provider: str = DEFAULT_DRIVER_PROVIDER
    driver_url: str = DEFAULT_DRIVER_URL
    cuda_url: str = DEFAULT_CUDA_URL
    cuda_version: Optional[str] = DEFAULT_CUDA_VERSION
    ubuntu_driver_version: str = DEFAULT_UBUNTU_DRIVER_VERSION
    install_agent: bool = False
    agent_source_url: str = DEFAULT_AGENT_REPO_URL

    def cuda_package(self) -> str:
        """
        cuda-<major>-<minor> for a configured version, else the
        unversioned meta-package.
        """
        if self.cuda_version:
            return "cuda-" + self.cuda_version.replace(".", "-")
        return "cuda"


class MetadataFile(BaseModel):
    """Shape of a --metadata-file YAML document: a flat option mapping."""

    attributes: Dict[str, str] = Field(default_factory=dict)
