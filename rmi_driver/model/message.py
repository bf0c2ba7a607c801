# rmi_driver/model/message.py
from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping, Tuple

FloatVec = Tuple[float, ...]

STRING_FIELDS = (
    "command_type",
    "pose_reference",
    "pose_reference_frame",
    "pose_type",
    "velocity_type",
    "acceleration_type",
    "effort_type",
    "blending_type",
)

VECTOR_FIELDS = (
    "pose",
    "velocity",
    "acceleration",
    "effort",
    "blending",
    "additional_parameters",
)


@dataclass(frozen=True)
class InboundCommandMessage:
    """
    Generic motion command as received from the control channel.

    Every field is optional; "" / () means the field is not used.
    Vector fields are normalized to tuples of float so the message
    (and any criteria built from it) is immutable.
    """
    command_id: int = 0

    command_type: str = ""
    pose_reference: str = ""
    pose_reference_frame: str = ""
    pose_type: str = ""
    pose: FloatVec = ()

    velocity_type: str = ""
    velocity: FloatVec = ()
    acceleration_type: str = ""
    acceleration: FloatVec = ()
    effort_type: str = ""
    effort: FloatVec = ()
    blending_type: str = ""
    blending: FloatVec = ()

    additional_parameters: FloatVec = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "command_id", int(self.command_id))
        for name in STRING_FIELDS:
            object.__setattr__(self, name, str(getattr(self, name) or ""))
        for name in VECTOR_FIELDS:
            raw = getattr(self, name) or ()
            if isinstance(raw, (str, bytes)):
                raise ValueError(f"Field '{name}' must be a numeric sequence, got {raw!r}")
            object.__setattr__(self, name, tuple(float(v) for v in raw))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "InboundCommandMessage":
        if not isinstance(data, Mapping):
            raise ValueError("Command message must be a mapping")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown command message field(s): {', '.join(map(str, unknown))}")

        kwargs = {k: v for k, v in data.items() if v is not None}
        return cls(**kwargs)

    def as_dict(self, *, used_only: bool = False) -> dict:
        d = {f.name: getattr(self, f.name) for f in fields(self)}
        d = {k: (list(v) if isinstance(v, tuple) else v) for k, v in d.items()}
        if used_only:
            d = {k: v for k, v in d.items() if is_used(v)}
        return d


def is_used(value: Any) -> bool:
    """A message field is in use iff it is non-empty. Scalars always count as used."""
    if isinstance(value, (str, tuple, list)):
        return len(value) > 0
    return value is not None
