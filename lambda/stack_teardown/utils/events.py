"""Structured event emission for the deletion core."""

from __future__ import annotations
from typing import Any, Protocol

from .logging_config import get_logger


class EventSink(Protocol):
    """Receives structured events from the orchestrator and its components."""

    def emit(self, level: str, message: str, **fields: Any) -> None: ...


class LoggerEventSink:
    """EventSink that forwards events to the Powertools logger.

    ``level`` is a logger method name (debug, info, warning, error); the
    fields are attached as structured keys via ``extra``.
    """

    def __init__(self, logger=None):
        self._logger = logger or get_logger()

    def emit(self, level: str, message: str, **fields: Any) -> None:
        log = getattr(self._logger, level, self._logger.info)
        log(message, extra=fields)
