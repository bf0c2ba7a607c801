from __future__ import annotations

import json
from pathlib import Path
import textwrap

import pytest

from rmi_driver.app.config import DriverConfig
from rmi_driver.core.context import Context
from rmi_driver.core.errors import HandlerConfigError, HandlerRegistrationError, NoMatchingHandlerError
from rmi_driver.handlers.converters import ConverterRegistry
from rmi_driver.handlers.criteria import HandlerCriteria
from rmi_driver.model.message import InboundCommandMessage
from rmi_driver.protocol.command import CommandType, WireCommand


def _write(p: Path, name: str, text: str) -> Path:
    path = p / name
    path.write_text(textwrap.dedent(text).lstrip(), encoding="utf-8")
    return path


HANDLERS = """
handlers:
  - name: ptp
    criteria: {command_type: PTP}
    command:
      kind: MOVE
      keyword: ptp move
      primary_field: pose
  - name: io
    criteria: {command_type: IO}
    converter: io
"""


def _io(msg):
    return WireCommand(CommandType.IO, "set do", "1 true")


# ---------------- DriverConfig ----------------

def test_config_defaults_and_relative_paths(tmp_path: Path) -> None:
    path = _write(tmp_path, "driver.yml", "handlers_file: handlers.yml\n")

    cfg = DriverConfig.load(path)

    assert cfg.handlers_file == str(tmp_path / "handlers.yml")
    assert cfg.float_precision == 5
    assert cfg.append_newline is True
    assert cfg.trace_file is None


def test_config_explicit_values(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        "driver.yml",
        """
        handlers_file: h.yml
        float_precision: 2
        append_newline: false
        trace_file: out/trace.jsonl
        """,
    )

    cfg = DriverConfig.load(path)

    assert cfg.float_precision == 2
    assert cfg.append_newline is False
    assert cfg.trace_file == str(tmp_path / "out" / "trace.jsonl")


@pytest.mark.parametrize(
    "text",
    [
        "float_precision: 2\n",
        "handlers_file: h.yml\nfloat_precision: -1\n",
        "handlers_file: h.yml\nfloat_precision: two\n",
        "handlers_file: h.yml\nappend_newline: maybe\n",
        "handlers_file: 5\n",
        "handlers_file: [a, b]\n",
        "handlers_file: h.yml\ntrace_file: 7\n",
        "handlers_file: h.yml\ntrace_file: \"\"\n",
        "- a list\n",
    ],
)
def test_config_invalid(tmp_path: Path, text: str) -> None:
    path = _write(tmp_path, "driver.yml", text)
    with pytest.raises(ValueError):
        DriverConfig.load(path)


def test_config_missing_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        DriverConfig.load(tmp_path / "driver.yml")


# ---------------- Context ----------------

def test_context_load_builds_sealed_registry(tmp_path: Path) -> None:
    _write(tmp_path, "handlers.yml", HANDLERS)
    cfg = _write(tmp_path, "driver.yml", "handlers_file: handlers.yml\nfloat_precision: 1\n")

    ctx = Context.load(cfg, converters=ConverterRegistry({"io": _io}))

    assert len(ctx.registry) == 2
    assert ctx.registry.sealed is True
    with pytest.raises(HandlerRegistrationError):
        ctx.registry.register(HandlerCriteria())

    out = ctx.translate(InboundCommandMessage(command_type="PTP", pose=(1.25, 2.0)))
    assert out == "ptp move : 1.2 2;\n"
    assert ctx.translate(InboundCommandMessage(command_type="IO")) == "set do : 1 true;\n"

    with pytest.raises(NoMatchingHandlerError):
        ctx.translate(InboundCommandMessage(command_type="LIN"))


def test_context_trace_file_records_events(tmp_path: Path) -> None:
    _write(tmp_path, "handlers.yml", HANDLERS)
    cfg = _write(
        tmp_path,
        "driver.yml",
        "handlers_file: handlers.yml\nappend_newline: false\ntrace_file: trace.jsonl\n",
    )

    ctx = Context.load(cfg, converters=ConverterRegistry({"io": _io}))
    assert ctx.translate(InboundCommandMessage(command_id=4, command_type="IO")) == "set do : 1 true;"
    ctx.close()

    events = [json.loads(line) for line in (tmp_path / "trace.jsonl").read_text(encoding="utf-8").splitlines()]
    assert [(e["handler"], e["kind"], e["command_id"]) for e in events] == [("io", "ok", 4)]


def test_context_bad_config_wrapped(tmp_path: Path) -> None:
    with pytest.raises(HandlerConfigError) as ei:
        Context.load(tmp_path / "driver.yml")
    assert ei.value.hint
    assert "config" in ei.value.details


def test_context_bad_handlers_wrapped(tmp_path: Path) -> None:
    _write(tmp_path, "handlers.yml", "handlers: {}\n")
    cfg = _write(tmp_path, "driver.yml", "handlers_file: handlers.yml\n")

    with pytest.raises(HandlerConfigError) as ei:
        Context.load(cfg)
    assert ei.value.details == {"handlers_file": str(tmp_path / "handlers.yml")}


def test_context_unknown_converter_surfaces_config_error(tmp_path: Path) -> None:
    _write(tmp_path, "handlers.yml", HANDLERS)
    cfg = _write(tmp_path, "driver.yml", "handlers_file: handlers.yml\n")

    with pytest.raises(HandlerConfigError) as ei:
        Context.load(cfg)
    assert ei.value.details == {"converter": "io"}


def test_context_non_string_handlers_file_wrapped(tmp_path: Path) -> None:
    cfg = _write(tmp_path, "driver.yml", "handlers_file: 5\n")

    with pytest.raises(HandlerConfigError) as ei:
        Context.load(cfg)
    assert "handlers_file" in ei.value.hint


@pytest.mark.parametrize(
    "command",
    [
        "{kind: MOVE, keyword: 'ptp;move'}",
        "{kind: MOVE, keyword: 'ptp : x'}",
        "{kind: MOVE, keyword: ptp, precision: -1}",
        "{kind: MOVE, keyword: ptp, params: [{keyword: 'v;1', field: velocity}]}",
        "{kind: MOVE, keyword: ptp, params: [{keyword: mode, value: 'a;b'}]}",
    ],
)
def test_context_rejects_unframeable_command_mapping(tmp_path: Path, command: str) -> None:
    _write(tmp_path, "handlers.yml", f"handlers:\n  - name: bad\n    command: {command}\n")
    cfg = _write(tmp_path, "driver.yml", "handlers_file: handlers.yml\n")

    with pytest.raises(HandlerConfigError) as ei:
        Context.load(cfg)
    assert "bad" in ei.value.hint
