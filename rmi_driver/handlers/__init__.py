# rmi_driver/handlers/__init__.py

from .criteria import HandlerCriteria, matches
from .handler import CommandHandler
from .registry import CommandRegistry
from .converters import ConverterRegistry, FieldMappingConverter, ParamMapping
from .loader import HandlerLoader

__all__ = [
    "HandlerCriteria", "matches",
    "CommandHandler", "CommandRegistry",
    "ConverterRegistry", "FieldMappingConverter", "ParamMapping",
    "HandlerLoader"]
