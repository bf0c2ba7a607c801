# rmi_driver/runtime/dispatcher.py
from __future__ import annotations

import logging
from typing import Optional

from rmi_driver.core.errors import (
    HandlerNotConfiguredError,
    MalformedCommandError,
    NoMatchingHandlerError,
    RmiDriverError,
)
from rmi_driver.handlers.handler import CommandHandler
from rmi_driver.handlers.registry import CommandRegistry
from rmi_driver.interfaces.command_sink import EVENT_OK, CommandEvent, CommandSink
from rmi_driver.model.message import InboundCommandMessage
from rmi_driver.protocol.command import UNSET_ID, WireCommand, check_response


class Dispatcher:
    """
    Resolves an inbound message to a handler and runs its conversion.

    Pure and non-blocking: no I/O besides logging and the optional sink.
    Errors are raised to the caller; nothing is retried here.
    """

    def __init__(
        self,
        registry: CommandRegistry,
        *,
        cmd_sink: Optional[CommandSink] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.registry = registry
        self._cmd_sink = cmd_sink
        self._log = logger or logging.getLogger(__name__)

    # ---------------- Dispatch ----------------
    def process(self, msg: InboundCommandMessage) -> WireCommand:
        handler = self.registry.find(msg)
        if handler is None:
            self._log.warning("DISPATCH_NO_MATCH id=%d command_type=%s pose_type=%s",
                              msg.command_id, msg.command_type, msg.pose_type)
            err = NoMatchingHandlerError(
                f"No handler matches command_type='{msg.command_type}'",
                hint="Check handler criteria and registration order.",
                details={"message": msg.as_dict(used_only=True)},
            )
            self._emit_error("", msg, err)
            raise err

        if not handler.configured:
            self._log.error("DISPATCH_HANDLER_NOT_CONFIGURED handler=%s id=%d",
                            handler.name, msg.command_id)
            err = HandlerNotConfiguredError(
                f"Handler '{handler.name}' has no conversion function",
                hint="Registration bug: register the handler with a function.",
                details={"handler": handler.name},
            )
            self._emit_error(handler.name, msg, err)
            raise err

        cmd = self._convert(handler, msg)

        if cmd.id == UNSET_ID:
            cmd.id = msg.command_id

        self._log.debug("DISPATCH_OK handler=%s id=%d cmd=%s", handler.name, cmd.id, cmd.to_string())
        self._emit(CommandEvent(
            handler=handler.name,
            kind=EVENT_OK,
            command_id=cmd.id,
            command_type=msg.command_type,
            wire=cmd.to_string(),
        ))
        return cmd

    def _convert(self, handler: CommandHandler, msg: InboundCommandMessage) -> WireCommand:
        try:
            cmd = handler.process_msg(msg)
        except MalformedCommandError as e:
            self._log.warning("DISPATCH_MALFORMED handler=%s id=%d reason=%s", handler.name, msg.command_id, e)
            self._emit_error(handler.name, msg, e)
            raise
        except (ValueError, KeyError, TypeError, IndexError) as e:
            self._log.warning("DISPATCH_MALFORMED handler=%s id=%d reason=%s", handler.name, msg.command_id, e)
            err = MalformedCommandError(
                f"Handler '{handler.name}' could not build a command",
                hint=str(e),
                details={"handler": handler.name},
            )
            self._emit_error(handler.name, msg, err)
            raise err from None

        if not isinstance(cmd, WireCommand):
            self._log.warning("DISPATCH_MALFORMED handler=%s id=%d returned=%s",
                              handler.name, msg.command_id, type(cmd).__name__)
            err = MalformedCommandError(
                f"Handler '{handler.name}' returned no command",
                details={"handler": handler.name, "returned": type(cmd).__name__},
            )
            self._emit_error(handler.name, msg, err)
            raise err

        return cmd

    # ---------------- Responses ----------------
    @staticmethod
    def check_response(response: str, command: Optional[WireCommand] = None) -> bool:
        if command is not None:
            return command.check_response(response)
        return check_response(response)

    # ---------------- Telemetry ----------------
    def _emit_error(self, name: str, msg: InboundCommandMessage, err: RmiDriverError) -> None:
        self._emit(CommandEvent.failed(name, err, command_id=msg.command_id, command_type=msg.command_type))

    def _emit(self, event: CommandEvent) -> None:
        if self._cmd_sink is None:
            return
        try:
            self._cmd_sink.on_command(event)
        except Exception:
            self._log.exception("CMD_SINK_ERROR handler=%s", event.handler)
