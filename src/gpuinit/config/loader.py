# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/gpuinit/config/loader.py

import os
from pathlib import Path
from typing import Dict

import yaml

from .models import MetadataFile


def load_metadata_file(path: str | Path) -> Dict[str, str]:
    """
    Read option overrides from YAML. Accepts either a flat mapping or one
    nested under 'attributes'. Scalars are stringified.
    """
    raw = Path(path).read_text()

    # expand environment variables like ${CUDA_VERSION}
    expanded = os.path.expandvars(raw)

    data = yaml.safe_load(expanded) or {}
    if isinstance(data, dict) and "attributes" not in data:
        data = {"attributes": data}
    if isinstance(data, dict) and isinstance(data.get("attributes"), dict):
        data["attributes"] = {
            str(k): ("" if v is None else (str(v).lower() if isinstance(v, bool) else str(v)))
            for k, v in data["attributes"].items()
        }
    return MetadataFile.model_validate(data).attributes
