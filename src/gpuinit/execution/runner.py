# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
import os
import subprocess
import time
from dataclasses import dataclass, field
from typing import Dict, Optional, Sequence, Union

from ..utils.execution import ExecutionContext

Cmd = Sequence[Union[str, "os.PathLike[str]"]]

log = logging.getLogger("gpuinit")


@dataclass
class CommandRunner:
    """
    Runs local commands with logging. Mutating commands are skipped in
    dry-run mode; read-only probes always execute.
    """

    ctx: ExecutionContext = field(default_factory=ExecutionContext)
    label: Optional[str] = None

    def _env(self, env: Optional[Dict[str, str]]) -> Optional[Dict[str, str]]:
        if not self.ctx.env and not env:
            return None
        merged = dict(os.environ)
        merged.update(self.ctx.env)
        merged.update(env or {})
        return merged

    def run(
        self,
        cmd: Cmd,
        *,
        mutating: bool = True,
        cwd: str | None = None,
        env: dict[str, str] | None = None,
    ) -> subprocess.CompletedProcess:
        label = self.label or "cmd"
        argv = [str(c) for c in cmd]
        cmd_str = " ".join(argv)

        log.debug(f"[{label}] $ {cmd_str}")

        if mutating and self.ctx.dry_run:
            log.info(f"[{label}] dry-run: skipped {cmd_str}")
            return subprocess.CompletedProcess(args=argv, returncode=0, stdout="", stderr="")

        start = time.time()
        try:
            result = subprocess.run(
                argv,
                capture_output=True,
                check=False,
                text=True,
                cwd=cwd,
                env=self._env(env),
            )
        except FileNotFoundError as e:
            # missing binary reads like a shell's "command not found"
            log.debug(f"[{label}] {e}")
            return subprocess.CompletedProcess(args=argv, returncode=127, stdout="", stderr=str(e))

        duration = time.time() - start

        if result.stdout:
            log.debug(f"[{label}][stdout]\n{result.stdout.rstrip()}")
        if result.stderr:
            log.debug(f"[{label}][stderr]\n{result.stderr.rstrip()}")
        log.debug(f"[{label}][exit {result.returncode}] ({duration:.2f}s)")

        return result
