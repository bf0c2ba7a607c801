# rmi_driver/handlers/criteria.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

from rmi_driver.model.message import InboundCommandMessage, is_used

# Fields consulted by the matcher, in evaluation order.
MATCH_FIELDS = ("command_type", "pose_reference", "pose_type", "pose", "velocity_type")


def used_and_not_equal(sample: Any, actual: Any) -> bool:
    """
    True if the sample value constrains the field and the actual value violates it.

    Strings are compared by equality. Sequences are compared by length only:
    a used vector acts as an arity gate, not a value filter.
    """
    if not is_used(sample):
        return False
    if isinstance(sample, str):
        return sample != actual
    return len(sample) != len(actual)


@dataclass(frozen=True)
class HandlerCriteria:
    """
    Sample message interpreted as a partial pattern.

    Only the fields set on the sample constrain a match; everything
    left empty means "don't care". An empty sample matches every message.
    """
    sample: InboundCommandMessage = field(default_factory=InboundCommandMessage)

    @classmethod
    def from_fields(cls, **kwargs: Any) -> "HandlerCriteria":
        return cls(sample=InboundCommandMessage(**kwargs))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "HandlerCriteria":
        return cls(sample=InboundCommandMessage.from_dict(data))

    def used_fields(self) -> Sequence[str]:
        return [name for name in MATCH_FIELDS if is_used(getattr(self.sample, name))]

    def matches(self, msg: InboundCommandMessage) -> bool:
        for name in MATCH_FIELDS:
            if used_and_not_equal(getattr(self.sample, name), getattr(msg, name)):
                return False
        return True  # nothing rejected it

    def describe(self) -> str:
        s = self.sample
        lines = []
        if s.command_type:
            lines.append(f"command_type:{s.command_type}")
        if s.pose_reference:
            lines.append(f"pose_reference:{s.pose_reference}")
        if s.pose_type:
            lines.append(f"pose_type:{s.pose_type}")
        if s.velocity_type:
            lines.append(f"velocity_type:{s.velocity_type}")
        if s.velocity:
            lines.append(f"velocity (size):{len(s.velocity)}")
        if s.pose:
            lines.append(f"pose (size):{len(s.pose)}")
        return "\n".join(lines)


def matches(criteria: HandlerCriteria, msg: InboundCommandMessage) -> bool:
    return criteria.matches(msg)
