from __future__ import annotations

from pathlib import Path
import textwrap

import pytest

from rmi_driver.core.errors import HandlerConfigError, HandlerRegistrationError
from rmi_driver.handlers.converters import ConverterRegistry
from rmi_driver.handlers.loader import HandlerLoader
from rmi_driver.handlers.registry import CommandRegistry
from rmi_driver.model.message import InboundCommandMessage
from rmi_driver.protocol.command import CommandType, WireCommand


def _write(p: Path, name: str, text: str) -> Path:
    path = p / name
    path.write_text(textwrap.dedent(text).lstrip(), encoding="utf-8")
    return path


def test_load_all_happy_path(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        "handlers.yml",
        """
        handlers:
          - name: ptp_joints
            criteria: {command_type: PTP, pose_type: JOINTS}
            command:
              kind: MOVE
              keyword: joint move
              primary_field: pose
              params:
                - {keyword: velocity, field: velocity}
          - name: io
            criteria: {command_type: IO_OUT}
            converter: io_out
          - name: todo
            criteria: {command_type: WAIT}
        """,
    )

    def io_out(msg):
        return WireCommand(CommandType.IO, "set do", "1")

    loader = HandlerLoader(path, converters=ConverterRegistry({"io_out": io_out}), precision=2)
    handlers = loader.load_all()

    assert [h.name for h in handlers] == ["ptp_joints", "io", "todo"]
    assert handlers[0].criteria.used_fields() == ["command_type", "pose_type"]
    assert handlers[1].func is io_out
    assert handlers[2].configured is False

    cmd = handlers[0].process_msg(
        InboundCommandMessage(command_type="PTP", pose_type="JOINTS", pose=(1.0, 2.556), velocity=(10.0,))
    )
    assert cmd is not None
    assert cmd.to_string() == "joint move : 1 2.56;velocity : 10;"


def test_load_into_preserves_file_order(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        "handlers.yml",
        """
        handlers:
          - name: specific
            criteria: {command_type: MOVE}
            command: {kind: MOVE, keyword: move}
          - name: fallback
            command: {kind: UNKNOWN, keyword: noop}
        """,
    )

    reg = HandlerLoader(path).load_into(CommandRegistry())

    assert reg.find(InboundCommandMessage(command_type="MOVE")).name == "specific"
    assert reg.find(InboundCommandMessage(command_type="IO")).name == "fallback"


def test_unnamed_entries_get_index_name(tmp_path: Path) -> None:
    path = _write(tmp_path, "handlers.yml", "handlers:\n  - command: {kind: GET, keyword: x}\n")
    assert HandlerLoader(path).load_all()[0].name == "handler_0"


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        HandlerLoader(tmp_path / "nope.yml").load_all()


def test_missing_root_raises(tmp_path: Path) -> None:
    path = _write(tmp_path, "handlers.yml", "nope: 1\n")
    with pytest.raises(ValueError):
        HandlerLoader(path).load_all()


@pytest.mark.parametrize(
    "entry",
    [
        "- just a string",
        "- {criteria: [PTP]}",
        "- {criteria: {cmd: PTP}}",
        "- {criteria: {command_type: PTP}, command: {kind: MOVE}}",
        "- {command: {kind: MOVE, keyword: a}, converter: x}",
    ],
)
def test_invalid_entries_raise_value_error(tmp_path: Path, entry: str) -> None:
    path = _write(tmp_path, "handlers.yml", f"handlers:\n  {entry}\n")
    with pytest.raises(ValueError):
        HandlerLoader(path).load_all()


def test_unknown_converter_raises_config_error(tmp_path: Path) -> None:
    path = _write(tmp_path, "handlers.yml", "handlers:\n  - {converter: missing}\n")
    with pytest.raises(HandlerConfigError):
        HandlerLoader(path).load_all()


def test_load_into_sealed_registry_raises(tmp_path: Path) -> None:
    path = _write(tmp_path, "handlers.yml", "handlers:\n  - {command: {kind: GET, keyword: x}}\n")
    reg = CommandRegistry()
    reg.seal()
    with pytest.raises(HandlerRegistrationError):
        HandlerLoader(path).load_into(reg)


def test_shipped_example_config_loads() -> None:
    path = Path(__file__).resolve().parents[3] / "config" / "handlers.yml"
    handlers = HandlerLoader(path).load_all()

    assert handlers
    assert all(h.configured for h in handlers)
