# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import shutil
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Sequence

from ..execution.runner import CommandRunner
from ..utils.execution import ExecutionContext
from ..utils.retry import RetryPolicy, run_with_retries
from .apt import AptPackageManager
from .fetch import Fetcher
from .files import HostFiles
from .kmod import KernelModules
from .systemd import ServiceManager


@dataclass
class SystemServices:
    """
    The external collaborators one run talks to, built once and handed to
    every component.
    """

    ctx: ExecutionContext
    policy: RetryPolicy
    runner: CommandRunner
    files: HostFiles
    apt: AptPackageManager
    fetcher: Fetcher
    services: ServiceManager
    modules: KernelModules
    workdir: Path
    which: Callable[[str], Optional[str]] = shutil.which
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False)
    on_retry: Optional[Callable[[str, int, str], None]] = field(default=None, repr=False)

    def has_command(self, name: str) -> bool:
        return self.which(name) is not None

    def run_retried(self, cmd: Sequence[str], *, step: str) -> None:
        run_with_retries(
            self.runner, cmd, self.policy, step=step, sleep=self.sleep, on_retry=self.on_retry
        )


def build_system(
    ctx: ExecutionContext,
    policy: Optional[RetryPolicy] = None,
    *,
    workdir: Optional[Path] = None,
    sleep: Callable[[float], None] = time.sleep,
    on_retry: Optional[Callable[[str, int, str], None]] = None,
) -> SystemServices:
    policy = policy or RetryPolicy()
    runner = CommandRunner(ctx=ctx, label="gpuinit")
    return SystemServices(
        ctx=ctx,
        policy=policy,
        runner=runner,
        files=HostFiles(ctx),
        apt=AptPackageManager(runner, policy, sleep=sleep, on_retry=on_retry),
        fetcher=Fetcher(ctx),
        services=ServiceManager(runner),
        modules=KernelModules(runner),
        workdir=workdir or Path.cwd(),
        sleep=sleep,
        on_retry=on_retry,
    )
