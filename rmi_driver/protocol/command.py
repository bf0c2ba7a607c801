# rmi_driver/protocol/command.py
from __future__ import annotations

from enum import Enum
from typing import List, Optional, Tuple

from rmi_driver.core.errors import MalformedCommandError

UNSET_ID = -1

SEGMENT_END = ";"
VALUE_SEP = " : "

ERROR_RESPONSE = "error"

Segment = Tuple[str, str]


class CommandType(str, Enum):
    """Semantic category of a wire command."""
    MOVE = "MOVE"
    MOVE_C = "MOVE_C"
    SETTINGS = "SETTINGS"
    IO = "IO"
    GET = "GET"
    UNKNOWN = "UNKNOWN"


def check_response(response: str) -> bool:
    """Only the exact (case-sensitive) reply "error" is a failure."""
    return response != ERROR_RESPONSE


def _validate_token(what: str, text: str) -> str:
    text = str(text)
    if SEGMENT_END in text or "\n" in text or "\r" in text:
        raise MalformedCommandError(
            f"Invalid {what} {text!r}",
            hint=f"Wire tokens must not contain '{SEGMENT_END}' or line breaks.",
            details={what: text},
        )
    return text


def _validate_keyword(text: str) -> str:
    text = _validate_token("keyword", text)
    # a trailing " :" would also merge with the separator
    if VALUE_SEP in text + " ":
        raise MalformedCommandError(
            f"Invalid keyword {text!r}",
            hint=f"Keywords must not contain '{VALUE_SEP}' or end with '{VALUE_SEP.rstrip()}'.",
            details={"keyword": text},
        )
    return text


class WireCommand:
    """
    Controller-bound text command.

    The primary segment (command verb + its params) is kept in its own slot;
    additional params are appended after it in insertion order:

        keyword : value;keyword2 : value2;flag;
    """

    def __init__(
        self,
        kind: CommandType = CommandType.UNKNOWN,
        keyword: Optional[str] = None,
        params: str = "",
    ):
        self.kind: CommandType = kind
        self.id: int = UNSET_ID
        self._primary: Optional[Segment] = None
        self._params: List[Segment] = []

        if keyword is not None:
            self.set_primary(kind, keyword, params)

    # --- building ---
    def set_primary(
        self,
        kind: CommandType,
        keyword: str,
        params: str = "",
        reset_all: bool = False,
    ) -> "WireCommand":
        """Set or replace the primary segment. reset_all also drops added params."""
        keyword = _validate_keyword(keyword)
        params = _validate_token("value", params)

        self.kind = kind
        if reset_all:
            self._params.clear()
        self._primary = (keyword, params)
        return self

    def add_param(self, keyword: str, params: str = "") -> "WireCommand":
        if self._primary is None:
            raise MalformedCommandError(
                f"Cannot add param '{keyword}' before the primary keyword is set",
                hint="Call set_primary() first.",
            )

        keyword = _validate_keyword(keyword)
        if not keyword:
            raise MalformedCommandError("Param keyword must not be empty")

        self._params.append((keyword, _validate_token("value", params)))
        return self

    # --- access ---
    @property
    def segments(self) -> List[Segment]:
        if self._primary is None:
            return []
        return [self._primary, *self._params]

    @property
    def primary_keyword(self) -> str:
        return self._primary[0] if self._primary is not None else ""

    def get_command(self) -> str:
        return self.primary_keyword

    # --- wire ---
    def to_string(self, append_newline: bool = False) -> str:
        parts: List[str] = []
        for keyword, value in self.segments:
            if value:
                parts.append(f"{keyword}{VALUE_SEP}{value}{SEGMENT_END}")
            else:
                parts.append(f"{keyword}{SEGMENT_END}")
        out = "".join(parts)
        if append_newline:
            out += "\n"
        return out

    def check_response(self, response: str) -> bool:
        return check_response(response)

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"WireCommand(kind={self.kind.value}, id={self.id}, text='{self.to_string()}')"


def parse_wire_command(text: str) -> List[Segment]:
    """
    Split serialized text back into (keyword, value) pairs.
    A segment without ' : ' yields value "".
    """
    pieces = text.rstrip("\r\n").split(SEGMENT_END)
    if pieces[-1] == "":
        pieces.pop()  # text after the last terminator

    out: List[Segment] = []
    for chunk in pieces:
        keyword, sep, value = chunk.partition(VALUE_SEP)
        out.append((keyword, value if sep else ""))
    return out
