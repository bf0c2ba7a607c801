# rmi_driver/handlers/handler.py
from __future__ import annotations

from typing import Callable, Optional

from rmi_driver.model.message import InboundCommandMessage
from rmi_driver.protocol.command import WireCommand
from .criteria import HandlerCriteria

ConversionFunc = Callable[[InboundCommandMessage], Optional[WireCommand]]


class CommandHandler:
    """
    Pairs a criteria pattern with the function that converts a matching
    message into a wire command.

    A handler may be registered without a function; dispatching to it is
    a registration bug reported by the dispatcher.
    """

    def __init__(
        self,
        criteria: HandlerCriteria,
        func: Optional[ConversionFunc] = None,
        name: str = "",
    ):
        self.criteria = criteria
        self.func = func
        self.name = str(name or "")

    @property
    def configured(self) -> bool:
        return self.func is not None

    def matches(self, msg: InboundCommandMessage) -> bool:
        return self.criteria.matches(msg)

    def process_msg(self, msg: InboundCommandMessage) -> Optional[WireCommand]:
        if self.func is None:
            return None
        return self.func(msg)

    def dump(self) -> str:
        body = self.criteria.describe()
        head = f"CommandHandler {self.name} criteria:"
        return f"{head}\n{body}" if body else head

    def __repr__(self) -> str:
        return f"CommandHandler(name='{self.name}', fields={list(self.criteria.used_fields())})"
