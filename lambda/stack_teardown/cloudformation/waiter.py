"""
Polling waiters for CloudFormation stack status.

Waits are built on poll_until(), which checks a predicate, then sleeps on a
threading.Event so that a cancellation request ends the wait immediately
instead of running out the timeout.
"""

from __future__ import annotations
import threading
import time
from dataclasses import dataclass
from typing import Callable

from ..utils import EventSink, LoggerEventSink
from .errors import StackWaitError, WaitCancelledError, WaiterTimeoutError
from .status import StackStatus, StatusProbe


class PollTimeout(Exception):
    """poll_until() ran out of time."""


class PollCancelled(Exception):
    """poll_until() was cancelled through its event."""


def poll_until(
    check: Callable[[], bool],
    interval: float,
    timeout: float,
    cancel_event: threading.Event | None = None,
) -> None:
    """
    Call ``check`` until it returns True.

    Sleeps ``interval`` seconds between checks (never longer than the time
    left). Raises PollTimeout once ``timeout`` seconds have passed and
    PollCancelled as soon as ``cancel_event`` is set. Exceptions raised by
    ``check`` propagate.
    """
    cancel_event = cancel_event or threading.Event()
    deadline = time.monotonic() + timeout

    while True:
        if cancel_event.is_set():
            raise PollCancelled()
        if check():
            return

        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise PollTimeout()
        if cancel_event.wait(min(interval, remaining)):
            raise PollCancelled()


@dataclass(frozen=True)
class WaitTarget:
    """Raw statuses that end a wait, successfully or not."""

    name: str
    success: frozenset[str]
    failure: frozenset[str]


CREATE_COMPLETE = WaitTarget(
    name="CREATE_COMPLETE",
    success=frozenset({"CREATE_COMPLETE", "ROLLBACK_COMPLETE"}),
    failure=frozenset({"CREATE_FAILED", "ROLLBACK_FAILED", "DELETE_FAILED"}),
)

UPDATE_COMPLETE = WaitTarget(
    name="UPDATE_COMPLETE",
    success=frozenset({"UPDATE_COMPLETE", "UPDATE_ROLLBACK_COMPLETE"}),
    failure=frozenset({"UPDATE_FAILED", "UPDATE_ROLLBACK_FAILED", "DELETE_FAILED"}),
)

DELETE_COMPLETE = WaitTarget(
    name="DELETE_COMPLETE",
    success=frozenset({"DELETE_COMPLETE"}),
    failure=frozenset({"DELETE_FAILED"}),
)

# Which completion a transitional status resolves into
STABILIZATION_TARGETS = {
    StackStatus.TRANSITIONAL_CREATE: CREATE_COMPLETE,
    StackStatus.TRANSITIONAL_ROLLBACK: CREATE_COMPLETE,
    StackStatus.TRANSITIONAL_UPDATE: UPDATE_COMPLETE,
}


class StabilityWaiter:
    """Blocks until a stack reaches a completion status."""

    def __init__(
        self,
        probe: StatusProbe,
        timeout: float = 300.0,
        interval: float = 30.0,
        cancel_event: threading.Event | None = None,
        events: EventSink | None = None,
    ):
        self._probe = probe
        self._timeout = timeout
        self._interval = interval
        self._cancel_event = cancel_event or threading.Event()
        self._events = events or LoggerEventSink()

    def wait_for(self, stack_name: str, target: WaitTarget) -> None:
        """
        Poll until the stack reaches ``target``.

        A stack that no longer exists satisfies every target.

        Raises:
            StackWaitError: the stack entered one of the target's failure statuses
            WaiterTimeoutError: the target was not reached within the timeout
            WaitCancelledError: the cancel event was set
        """

        def reached() -> bool:
            raw_status = self._probe.describe_status(stack_name)
            if raw_status is None or raw_status in target.success:
                return True
            if raw_status in target.failure:
                raise StackWaitError(stack_name, target.name, raw_status)
            return False

        try:
            poll_until(reached, self._interval, self._timeout, self._cancel_event)
        except PollTimeout:
            raise WaiterTimeoutError(stack_name, target.name, self._timeout) from None
        except PollCancelled:
            raise WaitCancelledError(stack_name, target.name) from None

    def wait_for_stability(self, stack_name: str, status: StackStatus) -> None:
        """Wait out a create/update/rollback in progress; other statuses return at once."""
        target = STABILIZATION_TARGETS.get(status)
        if target is None:
            return

        kind = "update" if target is UPDATE_COMPLETE else "create"
        self._events.emit(
            "info",
            f"CloudFormationStack stackName={stack_name} {kind} in progress. "
            f"Waiting to stabilize",
            stack_name=stack_name,
            target=target.name,
        )
        self.wait_for(stack_name, target)

    def wait_for_delete(self, stack_name: str) -> None:
        """Wait until the stack is deleted."""
        self.wait_for(stack_name, DELETE_COMPLETE)
