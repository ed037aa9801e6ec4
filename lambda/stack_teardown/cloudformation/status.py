"""CloudFormation stack status probing."""

from __future__ import annotations
from enum import Enum

from botocore.exceptions import ClientError

from ..utils import EventSink, LoggerEventSink, is_stack_not_found


class StackStatus(Enum):
    """Status categories the deletion state machine distinguishes."""

    NOT_FOUND = "not_found"
    DELETED = "deleted"
    DELETE_IN_PROGRESS = "delete_in_progress"
    DELETE_FAILED = "delete_failed"
    TRANSITIONAL_CREATE = "transitional_create"
    TRANSITIONAL_UPDATE = "transitional_update"
    TRANSITIONAL_ROLLBACK = "transitional_rollback"
    STABLE = "stable"

    @property
    def is_gone(self) -> bool:
        return self in (StackStatus.NOT_FOUND, StackStatus.DELETED)

    @property
    def is_transitional(self) -> bool:
        return self in (
            StackStatus.TRANSITIONAL_CREATE,
            StackStatus.TRANSITIONAL_UPDATE,
            StackStatus.TRANSITIONAL_ROLLBACK,
        )


_CATEGORIES = {
    "DELETE_COMPLETE": StackStatus.DELETED,
    "DELETE_IN_PROGRESS": StackStatus.DELETE_IN_PROGRESS,
    "DELETE_FAILED": StackStatus.DELETE_FAILED,
    "CREATE_IN_PROGRESS": StackStatus.TRANSITIONAL_CREATE,
    "ROLLBACK_IN_PROGRESS": StackStatus.TRANSITIONAL_ROLLBACK,
    "UPDATE_IN_PROGRESS": StackStatus.TRANSITIONAL_UPDATE,
    "UPDATE_ROLLBACK_IN_PROGRESS": StackStatus.TRANSITIONAL_UPDATE,
    "UPDATE_ROLLBACK_COMPLETE_CLEANUP_IN_PROGRESS": StackStatus.TRANSITIONAL_UPDATE,
}


def classify_status(raw_status: str | None) -> StackStatus:
    """Map a raw StackStatus string (None meaning not found) to a category."""
    if raw_status is None:
        return StackStatus.NOT_FOUND
    return _CATEGORIES.get(raw_status, StackStatus.STABLE)


class StatusProbe:
    """Reads the current status of one stack."""

    def __init__(self, cfn, events: EventSink | None = None):
        self._cfn = cfn
        self._events = events or LoggerEventSink()

    def describe_status(self, stack_name: str) -> str | None:
        """
        Return the raw StackStatus, or None if the stack does not exist.

        Errors other than "does not exist" propagate unmodified.
        """
        try:
            response = self._cfn.describe_stacks(StackName=stack_name)
        except ClientError as e:
            if is_stack_not_found(e):
                return None
            raise

        stacks = response.get("Stacks", [])
        if not stacks:
            return None
        return stacks[0]["StackStatus"]

    def probe(self, stack_name: str) -> StackStatus:
        """Return the status category of the stack."""
        raw_status = self.describe_status(stack_name)
        status = classify_status(raw_status)
        if status is StackStatus.NOT_FOUND:
            self._events.emit(
                "info",
                f"CloudFormationStack stackName={stack_name} no longer exists",
                stack_name=stack_name,
            )
        else:
            self._events.emit(
                "info",
                f"CloudFormationStack stackName={stack_name} status={raw_status}",
                stack_name=stack_name,
                stack_status=raw_status,
                status_category=status.value,
            )
        return status
