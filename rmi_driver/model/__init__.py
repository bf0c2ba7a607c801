from .message import InboundCommandMessage, is_used

__all__ = ["InboundCommandMessage",
           "is_used"]
