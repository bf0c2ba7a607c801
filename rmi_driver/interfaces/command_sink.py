# rmi_driver/interfaces/command_sink.py
from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional, Protocol

from rmi_driver.core.errors import ErrorKind, RmiDriverError

EVENT_OK = "ok"
EVENT_KINDS = frozenset({EVENT_OK, *(k.value for k in ErrorKind)})


@dataclass(frozen=True, slots=True)
class CommandEvent:
    """
    Outcome of one dispatched message.

    `kind` is EVENT_OK or the ErrorKind value of the error that was raised.
    """
    handler: str                # "" when no handler matched
    kind: str
    command_id: int
    command_type: str = ""
    wire: Optional[str] = None  # serialized command, ok events only
    error: Optional[str] = None
    ts_utc: Optional[str] = None

    def __post_init__(self) -> None:
        if self.kind not in EVENT_KINDS:
            raise ValueError(f"Unknown event kind '{self.kind}'")

    @property
    def ok(self) -> bool:
        return self.kind == EVENT_OK

    @classmethod
    def failed(
        cls, handler: str, err: RmiDriverError, *, command_id: int, command_type: str = ""
    ) -> "CommandEvent":
        return cls(
            handler=handler,
            kind=err.code.value,
            command_id=command_id,
            command_type=command_type,
            error=err.message,
        )

    def as_dict(self) -> Dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


class CommandSink(Protocol):
    def on_command(self, event: CommandEvent) -> None: ...
    def close(self) -> None: ...
