# rmi_driver/handlers/converters.py
from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Dict, List, Mapping, Optional, Sequence

from rmi_driver.core.errors import HandlerConfigError, MalformedCommandError
from rmi_driver.model.message import InboundCommandMessage, VECTOR_FIELDS, is_used
from rmi_driver.protocol.command import CommandType, WireCommand
from rmi_driver.protocol.formatting import params_to_string
from .handler import ConversionFunc

MESSAGE_FIELDS = frozenset(f.name for f in fields(InboundCommandMessage))


def _check_wire_text(keyword: str, value: str = "") -> None:
    """Reject config text that WireCommand would refuse at dispatch time."""
    try:
        WireCommand(CommandType.UNKNOWN, keyword, value)
    except MalformedCommandError as e:
        raise ValueError(f"{e}. {e.hint}") from None


class ConverterRegistry:
    """
    Maps converter names -> conversion functions.

    Used by the handler loader to bind YAML entries to code. Names are
    case-insensitive.
    """

    def __init__(self, converters: Optional[Dict[str, ConversionFunc]] = None):
        self._converters: Dict[str, ConversionFunc] = {
            k.lower(): v for k, v in (converters or {}).items()
        }

    def add(self, name: str, func: ConversionFunc) -> None:
        self._converters[name.lower()] = func

    def has(self, name: str) -> bool:
        return name.lower() in self._converters

    def get(self, name: str) -> ConversionFunc:
        key = name.lower()
        if key not in self._converters:
            known = ", ".join(sorted(self._converters)) or "none"
            raise HandlerConfigError(
                f"Converter '{name}' not registered",
                hint=f"Known converters: {known}",
                details={"converter": name},
            )
        return self._converters[key]

    def names(self) -> List[str]:
        return sorted(self._converters)


@dataclass(frozen=True)
class ParamMapping:
    """
    One additional wire param.

    Either copies a message field (`field`) or emits a constant (`value`).
    An unused optional field is skipped; a missing required one is an error.
    """
    keyword: str
    field: Optional[str] = None
    value: Optional[str] = None
    required: bool = False

    def __post_init__(self) -> None:
        if not self.keyword:
            raise ValueError("Param mapping requires a keyword")
        if self.field is not None and self.value is not None:
            raise ValueError(f"Param '{self.keyword}' sets both 'field' and 'value'")
        if self.field is not None and self.field not in MESSAGE_FIELDS:
            raise ValueError(f"Param '{self.keyword}' references unknown field '{self.field}'")
        _check_wire_text(self.keyword, self.value or "")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ParamMapping":
        if not isinstance(data, Mapping):
            raise ValueError("Param mapping entry must be a mapping")
        value = data.get("value")
        return cls(
            keyword=str(data.get("keyword", "")),
            field=data.get("field"),
            value=None if value is None else str(value),
            required=bool(data.get("required", False)),
        )


def render_field(msg: InboundCommandMessage, name: str, precision: int) -> str:
    v = getattr(msg, name)
    if name in VECTOR_FIELDS:
        return params_to_string(v, precision)
    return str(v)


class FieldMappingConverter:
    """
    Generic conversion function configured from data:

        keyword [: <primary_field>];param1 : <field>;param2 : <const>;...

    Vector fields are rendered with params_to_string(precision).
    """

    def __init__(
        self,
        kind: CommandType,
        keyword: str,
        *,
        primary_field: Optional[str] = None,
        params: Sequence[ParamMapping] = (),
        precision: int = 5,
    ):
        if not keyword:
            raise ValueError("Field mapping converter requires a keyword")
        if primary_field is not None and primary_field not in MESSAGE_FIELDS:
            raise ValueError(f"Unknown primary field '{primary_field}'")
        if int(precision) < 0:
            raise ValueError(f"precision must be >= 0 (got {precision})")
        _check_wire_text(keyword)

        self.kind = kind
        self.keyword = keyword
        self.primary_field = primary_field
        self.params = tuple(params)
        self.precision = int(precision)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], *, precision: int = 5) -> "FieldMappingConverter":
        if not isinstance(data, Mapping):
            raise ValueError("'command' must be a mapping")

        kind_raw = str(data.get("kind", CommandType.UNKNOWN.value)).upper()
        try:
            kind = CommandType(kind_raw)
        except ValueError:
            known = ", ".join(t.value for t in CommandType)
            raise ValueError(f"Unknown command kind '{kind_raw}' (known: {known})") from None

        params = data.get("params") or []
        if not isinstance(params, list):
            raise ValueError("'command.params' must be a list")

        return cls(
            kind,
            str(data.get("keyword", "")),
            primary_field=data.get("primary_field"),
            params=[ParamMapping.from_dict(p) for p in params],
            precision=int(data.get("precision", precision)),
        )

    def __call__(self, msg: InboundCommandMessage) -> WireCommand:
        primary = ""
        if self.primary_field is not None:
            primary = render_field(msg, self.primary_field, self.precision)

        cmd = WireCommand(self.kind, self.keyword, primary)

        for p in self.params:
            if p.field is None:
                cmd.add_param(p.keyword, p.value or "")
                continue

            if not is_used(getattr(msg, p.field)):
                if p.required:
                    raise ValueError(f"Message field '{p.field}' required by param '{p.keyword}' is empty")
                continue

            cmd.add_param(p.keyword, render_field(msg, p.field, self.precision))

        return cmd

    def __repr__(self) -> str:
        return f"FieldMappingConverter(kind={self.kind.value}, keyword='{self.keyword}')"
