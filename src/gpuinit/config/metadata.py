# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/gpuinit/config/metadata.py
from __future__ import annotations

import logging
from typing import Dict, List, Optional, Protocol

import requests

log = logging.getLogger("gpuinit")

METADATA_URL = "http://metadata.google.internal/computeMetadata/v1/instance/attributes"
METADATA_HEADERS = {"Metadata-Flavor": "Google"}


class MetadataAccessor(Protocol):
    def get(self, name: str, default: str) -> str:
        """Return the attribute value, or `default` when absent. Never raises."""
        ...


class GceMetadataAccessor:
    """
    Instance attributes from the compute metadata server. Any transport
    error or non-200 answer means "absent".
    """

    def __init__(self, base_url: str = METADATA_URL, timeout: float = 5.0,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def lookup(self, name: str) -> Optional[str]:
        try:
            r = self.session.get(f"{self.base_url}/{name}", headers=METADATA_HEADERS, timeout=self.timeout)
        except requests.RequestException as e:
            log.debug(f"[metadata] {name}: {e}")
            return None
        if r.status_code != 200:
            return None
        return r.text

    def get(self, name: str, default: str) -> str:
        value = self.lookup(name)
        return default if value is None else value


class StaticMetadataAccessor:
    def __init__(self, values: Optional[Dict[str, str]] = None):
        self.values = dict(values or {})

    def lookup(self, name: str) -> Optional[str]:
        return self.values.get(name)

    def get(self, name: str, default: str) -> str:
        return self.values.get(name, default)


class ChainedMetadataAccessor:
    """First accessor that knows the key wins."""

    def __init__(self, accessors: List):
        self.accessors = accessors

    def lookup(self, name: str) -> Optional[str]:
        for acc in self.accessors:
            value = acc.lookup(name)
            if value is not None:
                return value
        return None

    def get(self, name: str, default: str) -> str:
        value = self.lookup(name)
        return default if value is None else value
