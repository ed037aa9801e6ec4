"""Errors raised by the stack deletion core."""

from __future__ import annotations


class StackTeardownError(Exception):
    """Base class for terminal stack removal failures."""

    def __init__(self, stack_name: str, message: str):
        super().__init__(message)
        self.stack_name = stack_name


class ProtectionBlockedError(StackTeardownError):
    """Termination protection is enabled and removing it is not permitted."""

    def __init__(self, stack_name: str):
        super().__init__(
            stack_name,
            f"Stack [{stack_name}] cannot be deleted while TerminationProtection "
            f"is enabled; set DisableDeletionProtection to remove it automatically",
        )


class AttemptsExhaustedError(StackTeardownError):
    """Every permitted delete attempt failed."""

    def __init__(self, stack_name: str, attempts: int):
        super().__init__(
            stack_name,
            f"Stack {stack_name} might not be deleted after this run "
            f"({attempts} delete attempts failed)",
        )
        self.attempts = attempts


class RoleProvisioningError(StackTeardownError):
    """The temporary service role could not be created or given its policy."""

    def __init__(self, stack_name: str, role_name: str, reason: str):
        super().__init__(
            stack_name,
            f"Failed to provision service role {role_name} for stack {stack_name}: {reason}",
        )
        self.role_name = role_name


class RoleTeardownError(StackTeardownError):
    """The temporary service role could not be removed after the attempt loop.

    ``primary_error`` holds the attempt loop's own failure, if it had one.
    """

    def __init__(
        self,
        stack_name: str,
        role_name: str,
        reason: str,
        primary_error: BaseException | None = None,
    ):
        message = f"Failed to delete service role {role_name} for stack {stack_name}: {reason}"
        if primary_error is not None:
            message += f" (stack removal had also failed: {primary_error})"
        super().__init__(stack_name, message)
        self.role_name = role_name
        self.primary_error = primary_error


class WaitError(StackTeardownError):
    """Base class for waiter failures."""


class StackWaitError(WaitError):
    """The stack reached a status from which the awaited status is unreachable."""

    def __init__(self, stack_name: str, target: str, status: str):
        super().__init__(
            stack_name,
            f"Stack {stack_name} entered {status} while waiting for {target}",
        )
        self.target = target
        self.status = status


class WaiterTimeoutError(WaitError):
    """The awaited status was not reached within the ceiling."""

    def __init__(self, stack_name: str, target: str, timeout: float):
        super().__init__(
            stack_name,
            f"Timed out after {timeout:.0f}s waiting for stack {stack_name} to reach {target}",
        )
        self.target = target
        self.timeout = timeout


class WaitCancelledError(WaitError):
    """The surrounding invocation asked for the wait to stop."""

    def __init__(self, stack_name: str, target: str):
        super().__init__(
            stack_name, f"Wait for stack {stack_name} to reach {target} was cancelled"
        )
        self.target = target
