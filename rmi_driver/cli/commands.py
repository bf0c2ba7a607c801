# rmi_driver/cli/commands.py
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import yaml

from rmi_driver.core.context import Context
from rmi_driver.core.errors import RmiDriverError
from rmi_driver.core.trace import CommandTraceLogger
from rmi_driver.model.message import InboundCommandMessage
from rmi_driver.runtime.dispatcher import Dispatcher

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# ---------------- Logging ----------------

def configure_logging(level: str = "WARNING", log_file: Optional[Path] = None) -> None:
    """
    Attach stderr (and optional file) handlers to the root logger (idempotent).
    Kept in CLI (presentation-layer concern).
    """
    root = logging.getLogger()
    root.setLevel(getattr(logging, str(level).upper(), logging.WARNING))

    if not any(getattr(h, "_rmi_cli", False) for h in root.handlers):
        sh = logging.StreamHandler(sys.stderr)
        sh.setFormatter(logging.Formatter(LOG_FORMAT))
        sh._rmi_cli = True  # type: ignore[attr-defined]
        root.addHandler(sh)

    if log_file is None:
        return

    log_file.parent.mkdir(parents=True, exist_ok=True)
    target = str(log_file.resolve())
    for h in root.handlers:
        if isinstance(h, logging.FileHandler) and getattr(h, "baseFilename", None) == target:
            return

    fh = logging.FileHandler(log_file, encoding="utf-8", delay=True)
    fh.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(fh)

# ---------------- Message parsing ----------------

def parse_message(text: str) -> InboundCommandMessage:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise RmiDriverError("Could not parse --message.", hint=str(e)) from None

    try:
        return InboundCommandMessage.from_dict(data or {})
    except (TypeError, ValueError) as e:
        raise RmiDriverError("Invalid command message.", hint=str(e)) from None

# ---------------- Commands ----------------

def cmd_handlers(*, config: str) -> int:
    ctx = Context.load(config)
    if len(ctx.registry) == 0:
        print("(no handlers)")
        return 0
    for i, handler in enumerate(ctx.registry):
        print(f"[{i}] {handler.dump()}")
    return 0


def cmd_translate(*, config: str, message: str, trace: Optional[str] = None) -> int:
    msg = parse_message(message)

    sink = None
    if trace:
        sink = CommandTraceLogger(logger=logging.getLogger("commands"), file_path=Path(trace))

    ctx = Context.load(config, cmd_sink=sink)
    try:
        sys.stdout.write(ctx.translate(msg))
        if not ctx.config.append_newline:
            sys.stdout.write("\n")
    finally:
        ctx.close()
    return 0


def cmd_check_response(*, response: str) -> int:
    ok = Dispatcher.check_response(response)
    print("ok" if ok else "error")
    return 0 if ok else 1
