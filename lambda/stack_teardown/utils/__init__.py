"""Utility functions for the stack teardown Lambda."""

from .aws_helpers import (
    convert_tags_to_dict,
    error_code,
    error_message,
    is_stack_not_found,
    format_timestamp,
)
from .events import EventSink, LoggerEventSink
from .logging_config import get_logger

__all__ = [
    "convert_tags_to_dict",
    "error_code",
    "error_message",
    "is_stack_not_found",
    "format_timestamp",
    "EventSink",
    "LoggerEventSink",
    "get_logger",
]
