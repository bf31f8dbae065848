# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/gpuinit/system/apt.py
from __future__ import annotations

import time
from typing import Callable, List, Optional, Sequence

from ..errors import CommandError, ExhaustedRetryError, TransientExternalFailure
from ..utils.retry import RetryPolicy, execute_with_retries

# stderr of apt-get/dpkg when another package manager process holds the lock
LOCK_MARKERS = ("Could not get lock", "Unable to acquire the dpkg frontend lock")


class AptPackageManager:
    """
    apt-get as a black box. Index refreshes and installs absorb transient
    failures through the run's RetryPolicy; repository registration does not.
    """

    def __init__(
        self,
        runner,
        policy: RetryPolicy,
        *,
        sleep: Callable[[float], None] = time.sleep,
        on_retry: Optional[Callable[[str, int, str], None]] = None,
    ):
        self.runner = runner
        self.policy = policy
        self.sleep = sleep
        self.on_retry = on_retry

    def _retried(self, cmd: List[str], step: str) -> None:
        def _attempt() -> bool:
            cp = self.runner.run(cmd)
            if cp.returncode == 0:
                return True
            stderr = cp.stderr or ""
            if any(m in stderr for m in LOCK_MARKERS):
                raise TransientExternalFailure(f"dpkg lock held (rc={cp.returncode})")
            return False

        if not execute_with_retries(
            _attempt, self.policy, label=step, sleep=self.sleep, on_retry=self.on_retry
        ):
            raise ExhaustedRetryError(step, self.policy.max_attempts)

    def update(self) -> None:
        self._retried(["apt-get", "update"], step="apt-get update")

    def install(
        self,
        packages: Sequence[str],
        *,
        no_recommends: bool = False,
        target_release: Optional[str] = None,
    ) -> None:
        if not packages:
            return
        cmd = ["apt-get", "install", "-y", "-q"]
        if target_release:
            cmd += ["-t", target_release]
        # Without --no-install-recommends this takes a very long time.
        if no_recommends:
            cmd.append("--no-install-recommends")
        cmd += list(packages)
        self._retried(cmd, step=f"apt-get install {' '.join(packages)}")

    def add_key(self, key_file: str) -> None:
        cp = self.runner.run(["apt-key", "add", key_file])
        if cp.returncode != 0:
            raise CommandError("apt-key add", cp.returncode, cp.stderr)

    def add_repository(self, line: str) -> None:
        cp = self.runner.run(["add-apt-repository", "-y", line])
        if cp.returncode != 0:
            raise CommandError("add-apt-repository", cp.returncode, cp.stderr)
