"""Configuration from environment variables."""

from __future__ import annotations
import os
from dataclasses import dataclass, replace
from typing import Any, Mapping

# Configuration from environment variables
DRY_RUN = os.environ.get("DRY_RUN", "true").lower() == "true"
TARGET_REGION = os.environ.get("TARGET_REGION", "")

# Deletion protection / service role management (both opt-in)
DISABLE_DELETION_PROTECTION = (
    os.environ.get("DISABLE_DELETION_PROTECTION", "false").lower() == "true"
)
ENABLE_AUTOMATIC_ROLE_MANAGEMENT = (
    os.environ.get("ENABLE_AUTOMATIC_ROLE_MANAGEMENT", "false").lower() == "true"
)

# Retry and waiter tuning
MAX_DELETE_ATTEMPTS = int(os.environ.get("MAX_DELETE_ATTEMPTS", "3"))
WAIT_TIMEOUT_SECONDS = float(os.environ.get("WAIT_TIMEOUT_SECONDS", "300"))
POLL_INTERVAL_SECONDS = float(os.environ.get("POLL_INTERVAL_SECONDS", "30"))
ROLE_PROPAGATION_DELAY_SECONDS = float(
    os.environ.get("ROLE_PROPAGATION_DELAY_SECONDS", "1")
)

# Stacks removed in parallel per invocation
MAX_WORKERS = int(os.environ.get("MAX_WORKERS", "4"))

# LOG_LEVEL is read by utils/logging_config.py

# Keys understood in the invocation's "settings" mapping
SETTING_KEYS = {
    "DisableDeletionProtection": "disable_deletion_protection",
    "EnableAutomaticRoleManagment": "enable_automatic_role_management",
    "MaxDeleteAttempts": "max_delete_attempts",
    "WaitTimeoutSeconds": "wait_timeout_seconds",
    "PollIntervalSeconds": "poll_interval_seconds",
}


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return bool(value)


@dataclass(frozen=True)
class TeardownSettings:
    """Settings for one stack deletion workflow, validated at construction."""

    disable_deletion_protection: bool = False
    enable_automatic_role_management: bool = False
    max_delete_attempts: int = 3
    wait_timeout_seconds: float = 300.0
    poll_interval_seconds: float = 30.0
    role_propagation_delay_seconds: float = 1.0

    def __post_init__(self):
        if self.max_delete_attempts < 1:
            raise ValueError(
                f"max_delete_attempts must be at least 1, got {self.max_delete_attempts}"
            )
        for field_name in (
            "wait_timeout_seconds",
            "poll_interval_seconds",
            "role_propagation_delay_seconds",
        ):
            if getattr(self, field_name) < 0:
                raise ValueError(f"{field_name} must not be negative")

    @classmethod
    def from_env(cls) -> TeardownSettings:
        """Build settings from the module-level environment configuration."""
        return cls(
            disable_deletion_protection=DISABLE_DELETION_PROTECTION,
            enable_automatic_role_management=ENABLE_AUTOMATIC_ROLE_MANAGEMENT,
            max_delete_attempts=MAX_DELETE_ATTEMPTS,
            wait_timeout_seconds=WAIT_TIMEOUT_SECONDS,
            poll_interval_seconds=POLL_INTERVAL_SECONDS,
            role_propagation_delay_seconds=ROLE_PROPAGATION_DELAY_SECONDS,
        )

    @classmethod
    def from_mapping(
        cls,
        settings: Mapping[str, Any] | None,
        base: TeardownSettings | None = None,
    ) -> TeardownSettings:
        """
        Overlay a settings-store mapping on top of ``base``.

        Keys use the settings store names (e.g. "DisableDeletionProtection");
        unknown keys are rejected so typos do not silently fall back to
        defaults.
        """
        base = base or cls()
        if not settings:
            return base

        unknown = set(settings) - set(SETTING_KEYS)
        if unknown:
            raise ValueError(f"Unknown teardown settings: {sorted(unknown)}")

        overrides: dict[str, Any] = {}
        for key, value in settings.items():
            field_name = SETTING_KEYS[key]
            if field_name == "max_delete_attempts":
                overrides[field_name] = int(value)
            elif field_name.endswith("_seconds"):
                overrides[field_name] = float(value)
            else:
                overrides[field_name] = _as_bool(value)
        return replace(base, **overrides)
