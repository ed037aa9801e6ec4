"""DeletionAttempt data class."""

from __future__ import annotations
from dataclasses import dataclass

DEFAULT_MAX_ATTEMPTS = 3


@dataclass(frozen=True)
class DeletionAttempt:
    """Position of one Remove call within its bounded attempt budget."""

    index: int = 0
    max_attempts: int = DEFAULT_MAX_ATTEMPTS

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if not 0 <= self.index < self.max_attempts:
            raise ValueError(
                f"attempt index {self.index} outside budget of {self.max_attempts}"
            )

    @property
    def number(self) -> int:
        """1-based attempt number, for logs."""
        return self.index + 1

    @property
    def is_last(self) -> bool:
        return self.index + 1 >= self.max_attempts

    def next(self) -> DeletionAttempt:
        """Return the following attempt; callers check ``is_last`` first."""
        return DeletionAttempt(index=self.index + 1, max_attempts=self.max_attempts)
