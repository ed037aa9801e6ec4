"""CloudFormation stack deletion core."""

from .errors import (
    StackTeardownError,
    ProtectionBlockedError,
    AttemptsExhaustedError,
    RoleProvisioningError,
    RoleTeardownError,
    WaitError,
    StackWaitError,
    WaiterTimeoutError,
    WaitCancelledError,
)
from .orchestrator import DeletionOrchestrator
from .protection import ProtectionNegotiator, is_termination_protected_error
from .retain import RetainSetResolver
from .service_role import ServiceRole, ServiceRoleProvisioner, service_role_name
from .status import StackStatus, StatusProbe, classify_status
from .waiter import StabilityWaiter, poll_until

__all__ = [
    "StackTeardownError",
    "ProtectionBlockedError",
    "AttemptsExhaustedError",
    "RoleProvisioningError",
    "RoleTeardownError",
    "WaitError",
    "StackWaitError",
    "WaiterTimeoutError",
    "WaitCancelledError",
    "DeletionOrchestrator",
    "ProtectionNegotiator",
    "is_termination_protected_error",
    "RetainSetResolver",
    "ServiceRole",
    "ServiceRoleProvisioner",
    "service_role_name",
    "StackStatus",
    "StatusProbe",
    "classify_status",
    "StabilityWaiter",
    "poll_until",
]
