# rmi_driver/core/trace.py
from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from rmi_driver.interfaces.command_sink import CommandEvent, CommandSink


@dataclass
class CommandTraceLogger(CommandSink):
    """
    CommandSink writing one JSON line per dispatch event.

    Events always go to `logger` at DEBUG; `file_path` adds a JSONL trace.
    """
    logger: logging.Logger
    file_path: Optional[Path] = None
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def __post_init__(self) -> None:
        self._closed = False
        if self.file_path is not None:
            self.file_path = Path(self.file_path)
            self.file_path.parent.mkdir(parents=True, exist_ok=True)

    def close(self) -> None:
        self._closed = True

    def on_command(self, event: CommandEvent) -> None:
        if self._closed:
            return

        ts_utc = event.ts_utc or datetime.now(timezone.utc).isoformat()

        out = event.as_dict()
        out["ts_utc"] = ts_utc
        line = json.dumps(out, ensure_ascii=False)

        self.logger.debug("CMD_TRACE %s", line)

        if self.file_path is None:
            return
        with self._lock:
            with open(self.file_path, "a", encoding="utf-8") as f:
                f.write(line + "\n")
