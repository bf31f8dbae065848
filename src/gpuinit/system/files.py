# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/gpuinit/system/files.py
from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from pathlib import Path, PurePosixPath
from typing import Iterator, Union

from ..errors import FileWriteError
from ..utils.execution import ExecutionContext

log = logging.getLogger("gpuinit")

PathLike = Union[str, PurePosixPath, Path]


@contextmanager
def _write_errors(host_path: PathLike) -> Iterator[None]:
    try:
        yield
    except OSError as e:
        raise FileWriteError(str(host_path), e.strerror or str(e)) from e


class HostFiles:
    """
    File writes on the provisioned host. Absolute host paths are resolved
    under ExecutionContext.root so a run can target a scratch tree.
    """

    def __init__(self, ctx: ExecutionContext):
        self.ctx = ctx

    def path(self, host_path: PathLike) -> Path:
        return Path(self.ctx.root) / str(host_path).lstrip("/")

    def exists(self, host_path: PathLike) -> bool:
        return self.path(host_path).exists()

    def read_text(self, host_path: PathLike) -> str:
        p = self.path(host_path)
        return p.read_text(encoding="utf-8") if p.exists() else ""

    def ensure_dir(self, host_path: PathLike, mode: int = 0o755) -> Path:
        p = self.path(host_path)
        if self.ctx.dry_run:
            log.info(f"[files] dry-run: mkdir -p {host_path}")
            return p
        with _write_errors(host_path):
            p.mkdir(parents=True, exist_ok=True)
            os.chmod(p, mode)
        return p

    def write_text(self, host_path: PathLike, content: str, mode: int = 0o644) -> Path:
        """
        Replace the file content. Parent directories are created.
        """
        p = self.path(host_path)
        if self.ctx.dry_run:
            log.info(f"[files] dry-run: write {host_path} ({len(content)} bytes)")
            return p
        with _write_errors(host_path):
            p.parent.mkdir(parents=True, exist_ok=True)
            p.write_text(content, encoding="utf-8")
            os.chmod(p, mode)
        log.debug(f"[files] wrote {host_path}")
        return p

    def append_line(self, host_path: PathLike, line: str) -> bool:
        """
        Append a line (if not already present) to a file.
        Returns True when the file changed.
        """
        with _write_errors(host_path):
            existing = self.read_text(host_path).splitlines()
        if line in existing:
            log.debug(f"[files] {host_path} already contains {line!r}")
            return False
        if self.ctx.dry_run:
            log.info(f"[files] dry-run: append {line!r} to {host_path}")
            return True

        p = self.path(host_path)
        with _write_errors(host_path):
            p.parent.mkdir(parents=True, exist_ok=True)
            current = p.read_text(encoding="utf-8") if p.exists() else ""
            prefix = "" if not current or current.endswith("\n") else "\n"
            with open(p, "a", encoding="utf-8") as f:
                f.write(f"{prefix}{line}\n")
        log.debug(f"[files] appended {line!r} to {host_path}")
        return True
