"""
CloudFormation stack removal with bounded retries.

One Remove call runs strictly sequentially:

1. Provision a temporary service role (only with automatic role management).
2. Attempt loop: probe status, wait out a transition, delete (retaining
   undeletable children after a DELETE_FAILED), wait for DELETE_COMPLETE.
3. Tear the service role down, whatever the loop's outcome.

A failed delete consumes one attempt. Termination protection is disabled and
retried when DisableDeletionProtection is set, otherwise the loop stops at
once. Waits on work this loop did not start (a delete already in progress, a
create/update/rollback in progress) raise straight to the caller without
consuming an attempt.
"""

from __future__ import annotations
import threading

from botocore.exceptions import BotoCoreError, ClientError

from ..models import DeletionAttempt, StackHandle, TeardownSettings
from ..utils import EventSink, LoggerEventSink
from .errors import (
    AttemptsExhaustedError,
    StackWaitError,
    WaitCancelledError,
    WaiterTimeoutError,
)
from .protection import ProtectionNegotiator
from .retain import RetainSetResolver
from .service_role import ServiceRole, ServiceRoleProvisioner
from .status import StackStatus, StatusProbe
from .waiter import DELETE_COMPLETE, StabilityWaiter

# Provider failures: API errors plus transport errors (connection, read timeout)
PROVIDER_ERRORS = (ClientError, BotoCoreError)

# Failures that consume one attempt of the budget
RETRYABLE_ERRORS = PROVIDER_ERRORS + (StackWaitError, WaiterTimeoutError)


class DeletionOrchestrator:
    """Removes CloudFormation stacks; safe to share between threads."""

    def __init__(
        self,
        cfn,
        iam,
        settings: TeardownSettings | None = None,
        events: EventSink | None = None,
        cancel_event: threading.Event | None = None,
    ):
        self._cfn = cfn
        self._settings = settings or TeardownSettings()
        self._events = events or LoggerEventSink()
        self._cancel_event = cancel_event or threading.Event()

        self._probe = StatusProbe(cfn, events=self._events)
        self._waiter = StabilityWaiter(
            self._probe,
            timeout=self._settings.wait_timeout_seconds,
            interval=self._settings.poll_interval_seconds,
            cancel_event=self._cancel_event,
            events=self._events,
        )
        self._protection = ProtectionNegotiator(
            cfn,
            allow_disable=self._settings.disable_deletion_protection,
            events=self._events,
        )
        self._retain = RetainSetResolver(cfn, events=self._events)
        self._roles = ServiceRoleProvisioner(
            iam,
            propagation_delay=self._settings.role_propagation_delay_seconds,
            cancel_event=self._cancel_event,
            events=self._events,
        )

    def remove(self, handle: StackHandle) -> DeletionAttempt:
        """
        Delete the stack behind ``handle``.

        Returns the attempt that finished the removal. A stack that is
        already gone counts as removed.

        Raises:
            RoleProvisioningError: the service role could not be set up; no
                delete was attempted
            ProtectionBlockedError: termination protection is on and may not
                be disabled
            AttemptsExhaustedError: every permitted attempt failed
            RoleTeardownError: the service role could not be removed, even if
                the stack was
            StackWaitError, WaiterTimeoutError, WaitCancelledError: a wait
                outside the attempt budget failed
        """
        role: ServiceRole | None = None
        if self._settings.enable_automatic_role_management:
            self._events.emit(
                "info", "Enabling automatic role management", stack_name=handle.name
            )
            role = self._roles.provision(handle)

        primary_error: BaseException | None = None
        try:
            return self._remove_with_attempts(handle)
        except Exception as e:
            primary_error = e
            raise
        finally:
            if role is not None:
                self._roles.teardown(role, primary_error=primary_error)

    def _remove_with_attempts(self, handle: StackHandle) -> DeletionAttempt:
        attempt = DeletionAttempt(max_attempts=self._settings.max_delete_attempts)

        while True:
            if self._cancel_event.is_set():
                raise WaitCancelledError(handle.name, DELETE_COMPLETE.name)

            try:
                status = self._probe.probe(handle.name)
            except PROVIDER_ERRORS as e:
                attempt = self._after_failure(handle, attempt, e)
                continue

            if status.is_gone:
                return attempt

            if status is StackStatus.DELETE_IN_PROGRESS:
                self._events.emit(
                    "info",
                    f"CloudFormationStack stackName={handle.name} delete in progress. Waiting",
                    stack_name=handle.name,
                )
                self._waiter.wait_for_delete(handle.name)
                return attempt

            if status is not StackStatus.DELETE_FAILED:
                self._waiter.wait_for_stability(handle.name, status)

            try:
                self._delete(handle, status)
            except RETRYABLE_ERRORS as e:
                attempt = self._after_failure(handle, attempt, e)
                continue

            self._events.emit(
                "info",
                f"CloudFormationStack stackName={handle.name} deleted",
                stack_name=handle.name,
                attempt=attempt.index,
            )
            return attempt

    def _delete(self, handle: StackHandle, status: StackStatus) -> None:
        params = {"StackName": handle.name}
        if status is StackStatus.DELETE_FAILED:
            params["RetainResources"] = self._retain.resolve(handle.name)
        if handle.delete_role_arn:
            params["RoleARN"] = handle.delete_role_arn

        self._cfn.delete_stack(**params)
        self._waiter.wait_for_delete(handle.name)

    def _after_failure(
        self, handle: StackHandle, attempt: DeletionAttempt, err: Exception
    ) -> DeletionAttempt:
        """Classify a failed attempt; return the next attempt or raise."""
        self._events.emit(
            "error",
            f"CloudFormationStack stackName={handle.name} attempt={attempt.index} "
            f"maxAttempts={attempt.max_attempts} delete failed: {err}",
            stack_name=handle.name,
            attempt=attempt.index,
            max_attempts=attempt.max_attempts,
            error=str(err),
        )

        # Raises ProtectionBlockedError when protection may not be disabled;
        # a successful mitigation still counts as a used attempt.
        self._protection.negotiate(
            handle.name, err, attempt.index, attempt.max_attempts
        )

        if attempt.is_last:
            raise AttemptsExhaustedError(handle.name, attempt.max_attempts) from err
        return attempt.next()
