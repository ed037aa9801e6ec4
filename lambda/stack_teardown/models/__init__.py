"""Data models for the stack teardown Lambda."""

from .config import TeardownSettings
from .deletion_attempt import DeletionAttempt
from .removal_result import RemovalResult
from .stack_handle import StackHandle

__all__ = [
    "TeardownSettings",
    "DeletionAttempt",
    "RemovalResult",
    "StackHandle",
]
