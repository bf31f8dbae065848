# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from ..errors import ExhaustedRetryError, TransientExternalFailure

log = logging.getLogger("gpuinit")

Operation = Callable[[], bool]


@dataclass(frozen=True)
class RetryPolicy:
    """
    Bounded retry with a fixed delay. One policy is shared by every
    mutating external call of a run.
    """

    max_attempts: int = 10
    delay: float = 5.0

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.delay < 0:
            raise ValueError("delay must be >= 0")


def execute_with_retries(
    operation: Operation,
    policy: RetryPolicy,
    *,
    label: str = "operation",
    sleep: Callable[[float], None] = time.sleep,
    on_retry: Optional[Callable[[str, int, str], None]] = None,
) -> bool:
    """
    Run `operation` until it returns True or the policy is exhausted.

    An attempt fails when the operation returns False or raises
    TransientExternalFailure. Anything else propagates untouched.
    """
    for attempt in range(1, policy.max_attempts + 1):
        try:
            if operation():
                return True
            reason = "returned failure"
        except TransientExternalFailure as exc:
            reason = str(exc)

        log.warning(f"[{label}] attempt {attempt}/{policy.max_attempts} failed: {reason}")
        if on_retry:
            on_retry(label, attempt, reason)
        if attempt == policy.max_attempts:
            break
        sleep(policy.delay)
    return False


def run_with_retries(
    runner,
    cmd: Sequence[str],
    policy: RetryPolicy,
    *,
    step: Optional[str] = None,
    sleep: Callable[[float], None] = time.sleep,
    on_retry: Optional[Callable[[str, int, str], None]] = None,
) -> None:
    """
    Retry a command through `runner` and raise ExhaustedRetryError once the
    policy is used up.
    """
    label = step or " ".join(map(str, cmd))

    def _attempt() -> bool:
        return runner.run(cmd).returncode == 0

    if not execute_with_retries(_attempt, policy, label=label, sleep=sleep, on_retry=on_retry):
        raise ExhaustedRetryError(label, policy.max_attempts)

