# rmi_driver/handlers/registry.py
from __future__ import annotations

import logging
import threading
from typing import Iterator, Optional, Tuple

from rmi_driver.core.errors import HandlerRegistrationError
from rmi_driver.model.message import InboundCommandMessage
from .criteria import HandlerCriteria
from .handler import CommandHandler, ConversionFunc


class CommandRegistry:
    """
    Ordered collection of command handlers, resolved by first match.

    Preconditions:
      - Handlers are tried in registration order; register specific
        handlers before general catch-alls.
      - Registration happens during startup. Once seal() is called the
        registry is read-only and find() may be called from any thread.

    register() is serialized by a lock and publishes a new tuple, so a
    concurrent find() always iterates a consistent snapshot.
    """

    def __init__(self, *, logger: Optional[logging.Logger] = None):
        self._log = logger or logging.getLogger(__name__)
        self._lock = threading.Lock()
        self._handlers: Tuple[CommandHandler, ...] = ()
        self._sealed = False

    # --- registration ---
    def add_handler(self, handler: CommandHandler) -> CommandHandler:
        if not isinstance(handler, CommandHandler):
            raise HandlerRegistrationError(
                f"Expected CommandHandler, got {type(handler).__name__}",
            )

        with self._lock:
            if self._sealed:
                raise HandlerRegistrationError(
                    f"Cannot register handler '{handler.name}': registry is sealed",
                    hint="Register all handlers before dispatching starts.",
                    details={"handler": handler.name},
                )
            self._handlers = self._handlers + (handler,)
            index = len(self._handlers) - 1

        self._log.debug("HANDLER_REGISTERED index=%d name=%s fields=%s",
                        index, handler.name, ",".join(handler.criteria.used_fields()))
        return handler

    def register(
        self,
        criteria: HandlerCriteria,
        func: Optional[ConversionFunc] = None,
        name: str = "",
    ) -> CommandHandler:
        return self.add_handler(CommandHandler(criteria, func, name))

    def seal(self) -> None:
        with self._lock:
            self._sealed = True

    @property
    def sealed(self) -> bool:
        return self._sealed

    # --- lookup ---
    def find(self, msg: InboundCommandMessage) -> Optional[CommandHandler]:
        for handler in self._handlers:
            if handler.matches(msg):
                return handler
        return None

    @property
    def handlers(self) -> Tuple[CommandHandler, ...]:
        return self._handlers

    def __len__(self) -> int:
        return len(self._handlers)

    def __iter__(self) -> Iterator[CommandHandler]:
        return iter(self._handlers)

    # --- diagnostics ---
    def dump(self) -> str:
        return "\n".join(h.dump() for h in self._handlers)
