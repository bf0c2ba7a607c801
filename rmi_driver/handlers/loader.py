# rmi_driver/handlers/loader.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List, Optional

import yaml

from .converters import ConverterRegistry, FieldMappingConverter
from .criteria import HandlerCriteria
from .handler import CommandHandler, ConversionFunc
from .registry import CommandRegistry


class HandlerLoader:
    """
    Loads handler definitions from a YAML file.

    Layout:

        handlers:
          - name: ptp_joints
            criteria: {command_type: PTP, pose_type: JOINTS}
            command:                      # generic field mapping
              kind: MOVE
              keyword: joint_move
              primary_field: pose
              params:
                - {keyword: velocity, field: velocity}
          - name: io_out
            criteria: {command_type: IO_OUT}
            converter: io_out             # looked up in ConverterRegistry

    List order is registration order. An entry with neither `command` nor
    `converter` is registered unconfigured.
    """

    def __init__(
        self,
        path: str | Path,
        *,
        converters: Optional[ConverterRegistry] = None,
        precision: int = 5,
        logger: Optional[logging.Logger] = None,
    ):
        self.path = Path(path)
        self.converters = converters or ConverterRegistry()
        self.precision = int(precision)
        self._log = logger or logging.getLogger(__name__)
        self.handlers: List[CommandHandler] = []

    # ---------------------------------------------------------------------
    # YAML utility
    # ---------------------------------------------------------------------
    def _load_yaml(self) -> dict:
        if not self.path.exists():
            raise FileNotFoundError(f"Missing handler file: {self.path}")

        with open(self.path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}

    # ---------------------------------------------------------------------
    # Public entry points
    # ---------------------------------------------------------------------
    def load_all(self) -> List[CommandHandler]:
        self.handlers.clear()
        data = self._load_yaml()

        entries = data.get("handlers") if isinstance(data, dict) else None
        if not isinstance(entries, list):
            raise ValueError(f"{self.path.name} is missing 'handlers' list")

        for idx, entry in enumerate(entries):
            self.handlers.append(self._build_handler(idx, entry))

        self._log.info("HANDLERS_LOADED file=%s count=%d", self.path, len(self.handlers))
        return list(self.handlers)

    def load_into(self, registry: CommandRegistry) -> CommandRegistry:
        for handler in self.load_all():
            registry.add_handler(handler)
        return registry

    # ---------------------------------------------------------------------
    # Entries
    # ---------------------------------------------------------------------
    def _build_handler(self, idx: int, entry: Any) -> CommandHandler:
        if not isinstance(entry, dict):
            raise ValueError(f"Handler #{idx} entry must be a mapping")

        name = str(entry.get("name") or f"handler_{idx}")

        criteria_raw = entry.get("criteria") or {}
        if not isinstance(criteria_raw, dict):
            raise ValueError(f"Handler '{name}' 'criteria' must be a mapping")
        try:
            criteria = HandlerCriteria.from_dict(criteria_raw)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Handler '{name}' has invalid criteria: {e}") from None

        if "command" in entry and "converter" in entry:
            raise ValueError(f"Handler '{name}' must define only one of 'command' / 'converter'")

        func: Optional[ConversionFunc] = None
        if "converter" in entry:
            func = self.converters.get(str(entry["converter"]))
        elif "command" in entry:
            try:
                func = FieldMappingConverter.from_dict(entry["command"], precision=self.precision)
            except (TypeError, ValueError) as e:
                raise ValueError(f"Handler '{name}' has invalid command mapping: {e}") from None
        else:
            self._log.warning("HANDLER_UNCONFIGURED name=%s", name)

        return CommandHandler(criteria, func, name)
