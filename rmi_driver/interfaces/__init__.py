from .command_sink import EVENT_KINDS, EVENT_OK, CommandEvent, CommandSink

__all__ = ["EVENT_KINDS", "EVENT_OK", "CommandEvent", "CommandSink"]
