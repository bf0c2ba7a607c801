# rmi_driver/__init__.py

from .protocol import CommandType, WireCommand, params_to_string
from .model import InboundCommandMessage
from .handlers import HandlerCriteria, CommandHandler, CommandRegistry
from .runtime import Dispatcher

__all__ = [
    "CommandType", "WireCommand", "params_to_string",
    "InboundCommandMessage",
    "HandlerCriteria", "CommandHandler", "CommandRegistry",
    "Dispatcher"]
