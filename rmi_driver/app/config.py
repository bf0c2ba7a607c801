# rmi_driver/app/config.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml


@dataclass(frozen=True)
class DriverConfig:
    handlers_file: str
    float_precision: int = 5
    append_newline: bool = True
    trace_file: Optional[str] = None

    @classmethod
    def load(cls, path: str | Path) -> "DriverConfig":
        """
        Load driver.yml. Relative file paths resolve against the config's directory.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Driver config not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"{path.name} must be a mapping")

        handlers_file = data.get("handlers_file")
        if not handlers_file:
            raise ValueError(f"{path.name} is missing 'handlers_file'")
        if not isinstance(handlers_file, str):
            raise ValueError(f"'handlers_file' must be a path string (got {handlers_file!r})")

        precision = data.get("float_precision", 5)
        if not isinstance(precision, int) or isinstance(precision, bool) or precision < 0:
            raise ValueError(f"'float_precision' must be a non-negative int (got {precision!r})")

        append_newline = data.get("append_newline", True)
        if not isinstance(append_newline, bool):
            raise ValueError(f"'append_newline' must be true/false (got {append_newline!r})")

        trace_file = data.get("trace_file")
        if trace_file is not None and (not isinstance(trace_file, str) or not trace_file):
            raise ValueError(f"'trace_file' must be a path string (got {trace_file!r})")

        base = path.parent
        return cls(
            handlers_file=str(base / handlers_file),
            float_precision=precision,
            append_newline=append_newline,
            trace_file=str(base / trace_file) if trace_file else None,
        )
