"""
Per-extension logging.
"""

import logging
from typing import Any

from .base import Facade


class LoggerAPI(Facade):
    """Writes to ``extension.<name>``; children log under ``extension.<name>.<child>``."""

    def __init__(self, host: Any, extension_name: str, logger: logging.Logger = None):
        super().__init__(host, extension_name)
        self._logger = logger or logging.getLogger(f"extension.{extension_name}")

    @property
    def name(self) -> str:
        return self._logger.name

    def debug(self, message: str, *args: Any) -> None:
        self._require()
        self._logger.debug(message, *args)

    def info(self, message: str, *args: Any) -> None:
        self._require()
        self._logger.info(message, *args)

    def warning(self, message: str, *args: Any) -> None:
        self._require()
        self._logger.warning(message, *args)

    def error(self, message: str, *args: Any) -> None:
        self._require()
        self._logger.error(message, *args)

    def child(self, name: str) -> "LoggerAPI":
        self._require()
        return LoggerAPI(self._host, self.extension_name, self._logger.getChild(name))
