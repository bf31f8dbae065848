# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict


@dataclass(frozen=True)
class ExecutionContext:
    """
    controls how commands are executed and where files land
    """

    dry_run: bool = False
    root: Path = Path("/")
    env: Dict[str, str] = field(default_factory=dict)
