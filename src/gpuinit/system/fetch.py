# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/gpuinit/system/fetch.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..errors import FetchError
from ..utils.execution import ExecutionContext

log = logging.getLogger("gpuinit")

FETCH_TIMEOUT = 30
FETCH_TRIES = 5


def _session() -> requests.Session:
    # FETCH_TRIES attempts in total: the first try plus FETCH_TRIES - 1 retries
    retries = Retry(
        total=FETCH_TRIES - 1,
        connect=FETCH_TRIES - 1,
        read=FETCH_TRIES - 1,
        backoff_factor=1,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=frozenset({"GET"}),
    )
    s = requests.Session()
    adapter = HTTPAdapter(max_retries=retries)
    s.mount("http://", adapter)
    s.mount("https://", adapter)
    return s


class Fetcher:
    """
    Retrieves a URL to a local path. Independent of the run's RetryPolicy.
    A failed download never leaves a partial file behind.
    """

    def __init__(self, ctx: ExecutionContext, session: Optional[requests.Session] = None):
        self.ctx = ctx
        self.session = session or _session()

    def download(self, url: str, dest: Path) -> Path:
        if self.ctx.dry_run:
            log.info(f"[fetch] dry-run: {url} -> {dest}")
            return dest

        log.info(f"[fetch] {url} -> {dest}")
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            with self.session.get(url, stream=True, timeout=FETCH_TIMEOUT) as r:
                r.raise_for_status()
                with open(dest, "wb") as f:
                    for chunk in r.iter_content(chunk_size=1 << 20):
                        if chunk:
                            f.write(chunk)
        except requests.RequestException as e:
            self._discard(dest)
            raise FetchError(url, str(e)) from e
        except OSError as e:
            self._discard(dest)
            raise FetchError(url, f"cannot write {dest}: {e.strerror or e}") from e
        return dest

    @staticmethod
    def _discard(dest: Path) -> None:
        try:
            if dest.is_file():
                dest.unlink()
        except OSError as e:
            log.warning(f"[fetch] could not remove partial download {dest}: {e}")
