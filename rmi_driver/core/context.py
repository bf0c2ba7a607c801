# rmi_driver/core/context.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

from rmi_driver.app.config import DriverConfig
from rmi_driver.core.errors import HandlerConfigError
from rmi_driver.core.trace import CommandTraceLogger
from rmi_driver.handlers.converters import ConverterRegistry
from rmi_driver.handlers.loader import HandlerLoader
from rmi_driver.handlers.registry import CommandRegistry
from rmi_driver.interfaces.command_sink import CommandSink
from rmi_driver.model.message import InboundCommandMessage
from rmi_driver.runtime.dispatcher import Dispatcher


@dataclass(frozen=True)
class Context:
    config: DriverConfig
    registry: CommandRegistry
    dispatcher: Dispatcher
    cmd_sink: Optional[CommandSink] = None

    @classmethod
    def load(
        cls,
        config_path: str | Path,
        *,
        converters: Optional[ConverterRegistry] = None,
        cmd_sink: Optional[CommandSink] = None,
        logger: Optional[logging.Logger] = None,
    ) -> "Context":
        """
        Load driver config + handler definitions and build a sealed registry.

        `converters` binds `converter:` names used in the handler file.
        """
        log = logger or logging.getLogger(__name__)
        config_path = Path(config_path)

        try:
            cfg = DriverConfig.load(config_path)
        except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
            raise HandlerConfigError(
                "Failed to load driver config.",
                hint=str(e),
                details={"config": str(config_path)},
            ) from None

        loader = HandlerLoader(
            cfg.handlers_file,
            converters=converters,
            precision=cfg.float_precision,
        )
        registry = CommandRegistry()
        try:
            loader.load_into(registry)
        except HandlerConfigError:
            raise
        except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
            raise HandlerConfigError(
                "Failed to load handler definitions.",
                hint=str(e),
                details={"handlers_file": cfg.handlers_file},
            ) from None
        registry.seal()

        if cmd_sink is None and cfg.trace_file:
            cmd_sink = CommandTraceLogger(
                logger=logging.getLogger("commands"),
                file_path=Path(cfg.trace_file),
            )

        log.info("CONTEXT_LOADED handlers=%d precision=%d", len(registry), cfg.float_precision)

        return cls(
            config=cfg,
            registry=registry,
            dispatcher=Dispatcher(registry, cmd_sink=cmd_sink),
            cmd_sink=cmd_sink,
        )

    def translate(self, msg: InboundCommandMessage) -> str:
        """Dispatch a message and serialize the result for the wire."""
        cmd = self.dispatcher.process(msg)
        return cmd.to_string(append_newline=self.config.append_newline)

    def close(self) -> None:
        if self.cmd_sink is not None:
            self.cmd_sink.close()
