# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/gpuinit/observers/jsonfile.py
from __future__ import annotations

import json
from pathlib import Path

from .events import BaseEvent


class JsonFileObserver:
    """
    Event journal for a run: one JSON object per line, written next to the
    run log so other tooling can tail it.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def notify(self, event: BaseEvent) -> None:
        record = {"event": type(event).__name__, **event.dict()}
        line = json.dumps(record, default=str)
        with self.path.open("a", encoding="utf-8") as f:
            f.write(line + "\n")
