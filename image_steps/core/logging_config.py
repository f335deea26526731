"""Logging setup for hosts embedding the step library."""
from __future__ import annotations

import logging
import logging.handlers
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


DEFAULT_LOG_FILENAME = "image_steps.log"
LIBRARY_LOGGER = "image_steps"


class _StepContextFormatter(logging.Formatter):
    """Fills in ``component`` and ``step`` for records that lack them."""

    def format(self, record: logging.LogRecord) -> str:  # pragma: no cover - formatting is hard to unit test reliably
        if not hasattr(record, "component"):
            record.component = record.name
        if not hasattr(record, "step"):
            record.step = "-"
        return super().format(record)


@dataclass
class LoggingOptions:
    """Runtime options for the library loggers.

    A rotating file handler is only installed when ``log_directory`` is set.
    """

    log_directory: Optional[os.PathLike] = None
    level: int = logging.INFO
    enable_console: bool = True
    developer_diagnostics: bool = False
    max_bytes: int = 5 * 1024 * 1024
    backup_count: int = 5


class LoggingConfigurator:
    """Configures the ``image_steps`` logger hierarchy."""

    def __init__(self, options: Optional[LoggingOptions] = None) -> None:
        self.options = options or LoggingOptions()
        self.logger = logging.getLogger(LIBRARY_LOGGER)

    def configure(self) -> None:
        level = logging.DEBUG if self.options.developer_diagnostics else self.options.level
        self.logger.setLevel(level)
        self._clear_existing_handlers()

        if self.options.log_directory is not None:
            log_path = Path(self.options.log_directory) / DEFAULT_LOG_FILENAME
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                log_path,
                maxBytes=self.options.max_bytes,
                backupCount=self.options.backup_count,
                encoding="utf-8",
            )
            file_handler.setFormatter(self._build_formatter(verbose=False))
            file_handler.setLevel(level)
            self.logger.addHandler(file_handler)

        if self.options.enable_console:
            console_handler = logging.StreamHandler()
            console_handler.setFormatter(self._build_formatter(verbose=self.options.developer_diagnostics))
            console_handler.setLevel(level)
            self.logger.addHandler(console_handler)

        self.logger.debug("Logging configured", extra={"component": "LoggingConfigurator"})

    def _clear_existing_handlers(self) -> None:
        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()

    @staticmethod
    def _build_formatter(verbose: bool) -> logging.Formatter:
        if verbose:
            format_string = (
                "%(asctime)s | %(levelname)s | %(name)s | %(filename)s:%(lineno)d | "
                "step=%(step)s | %(message)s"
            )
        else:
            format_string = "%(asctime)s | %(levelname)s | %(component)s | step=%(step)s | %(message)s"

        return _StepContextFormatter(format_string)
