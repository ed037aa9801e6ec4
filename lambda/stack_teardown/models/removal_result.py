"""RemovalResult data class."""

from __future__ import annotations
from dataclasses import dataclass, asdict, field
from typing import Any

# Outcomes reported by the handler
DELETED = "DELETED"
ALREADY_GONE = "ALREADY_GONE"
SKIPPED_NESTED = "SKIPPED_NESTED"
DRY_RUN = "DRY_RUN"
FAILED = "FAILED"


@dataclass
class RemovalResult:
    """Outcome of removing one stack."""

    stack_name: str
    region: str
    outcome: str
    attempts: int = 0
    error: str | None = None
    error_type: str | None = None
    properties: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)
