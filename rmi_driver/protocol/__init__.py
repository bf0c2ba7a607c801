# rmi_driver/protocol/__init__.py

from .command import CommandType, WireCommand, UNSET_ID, check_response, parse_wire_command
from .formatting import float_to_string, params_to_string

__all__ = [
    "CommandType", "WireCommand", "UNSET_ID",
    "check_response", "parse_wire_command",
    "float_to_string", "params_to_string"]
