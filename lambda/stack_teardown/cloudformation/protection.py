"""Termination protection handling for failed stack deletions."""

from __future__ import annotations

from botocore.exceptions import ClientError

from ..utils import EventSink, LoggerEventSink, error_message
from .errors import ProtectionBlockedError


def is_termination_protected_error(err: BaseException, stack_name: str) -> bool:
    """Check whether a delete failure was caused by termination protection."""
    if not isinstance(err, ClientError):
        return False
    expected = (
        f"Stack [{stack_name}] cannot be deleted while TerminationProtection is enabled"
    )
    return expected in error_message(err)


class ProtectionNegotiator:
    """Disables termination protection when permitted, or stops the removal."""

    def __init__(self, cfn, allow_disable: bool, events: EventSink | None = None):
        self._cfn = cfn
        self._allow_disable = allow_disable
        self._events = events or LoggerEventSink()

    def negotiate(
        self, stack_name: str, err: BaseException, attempt: int, max_attempts: int
    ) -> bool:
        """
        Handle a failed delete.

        Returns True if termination protection caused the failure and was
        disabled, False if the failure is unrelated to protection.

        Raises:
            ProtectionBlockedError: protection caused the failure and may not be disabled
            ClientError: disabling protection failed
        """
        if not is_termination_protected_error(err, stack_name):
            return False

        if not self._allow_disable:
            self._events.emit(
                "warning",
                f"CloudFormationStack stackName={stack_name} attempt={attempt} "
                f"maxAttempts={max_attempts} set feature flag to disable deletion protection",
                stack_name=stack_name,
                attempt=attempt,
            )
            raise ProtectionBlockedError(stack_name) from err

        self._events.emit(
            "info",
            f"CloudFormationStack stackName={stack_name} attempt={attempt} "
            f"maxAttempts={max_attempts} updating termination protection",
            stack_name=stack_name,
            attempt=attempt,
        )
        self._cfn.update_termination_protection(
            EnableTerminationProtection=False, StackName=stack_name
        )
        return True
