"""
Temporary IAM service role for stack deletion.

A stack created with a service role that has since been deleted cannot be
removed by CloudFormation until some role is supplied. The provisioner
creates one that CloudFormation can assume, with AdministratorAccess attached.

SECURITY: the role can delete any resource in the account. It lives only for
one Remove call and is torn down on every exit path.

A role that already carries the derived name is not recreated, but its arn is
still recorded on the handle. Such a role is normally left behind by an earlier
run that was cut off before teardown, and it is exactly the role that run meant
to delete the stack with. Leaving ``delete_role_arn`` unset would send the
delete without a role and fail again for the same stack.
"""

from __future__ import annotations
import json
import threading
from dataclasses import dataclass

from botocore.exceptions import ClientError

from ..models import StackHandle
from ..utils import EventSink, LoggerEventSink, error_code
from .errors import RoleProvisioningError, RoleTeardownError

SERVICE_ROLE_PREFIX = "teardown-service-role-CFS"
MAX_ROLE_NAME_LENGTH = 64
ADMINISTRATOR_POLICY_ARN = "arn:aws:iam::aws:policy/AdministratorAccess"

ASSUME_ROLE_POLICY = json.dumps(
    {
        "Version": "2012-10-17",
        "Statement": [
            {
                "Effect": "Allow",
                "Principal": {"Service": "cloudformation.amazonaws.com"},
                "Action": "sts:AssumeRole",
            }
        ],
    }
)


def service_role_name(stack_name: str) -> str:
    """Deterministic role name for a stack, cut to the IAM length limit."""
    return f"{SERVICE_ROLE_PREFIX}-{stack_name}"[:MAX_ROLE_NAME_LENGTH]


@dataclass
class ServiceRole:
    """A service role scoped to one Remove call."""

    name: str
    arn: str
    stack_name: str
    created: bool = True


class ServiceRoleProvisioner:
    """Creates and removes the temporary deletion role for a stack."""

    def __init__(
        self,
        iam,
        propagation_delay: float = 1.0,
        cancel_event: threading.Event | None = None,
        events: EventSink | None = None,
    ):
        self._iam = iam
        self._propagation_delay = propagation_delay
        self._cancel_event = cancel_event or threading.Event()
        self._events = events or LoggerEventSink()

    def provision(self, handle: StackHandle) -> ServiceRole:
        """
        Make a deletion role available and record its arn on the handle.

        An existing role of the same name is reused as is: nothing is
        created or attached, but its arn is still recorded on the handle.

        Raises:
            RoleProvisioningError: the role could not be looked up, created or
                given its policy. A role created here is removed again first.
        """
        role_name = service_role_name(handle.name)

        existing = self._get_role(handle.name, role_name)
        if existing is not None:
            self._events.emit(
                "info",
                f"Service role {role_name} already exists, stack {handle.name} "
                f"is ready for deletion",
                stack_name=handle.name,
                role_name=role_name,
            )
            handle.delete_role_arn = existing["Arn"]
            return ServiceRole(
                name=role_name,
                arn=existing["Arn"],
                stack_name=handle.name,
                created=False,
            )

        self._events.emit(
            "info",
            f"Creating service role {role_name} for stack {handle.name}",
            stack_name=handle.name,
            role_name=role_name,
        )
        try:
            response = self._iam.create_role(
                RoleName=role_name,
                AssumeRolePolicyDocument=ASSUME_ROLE_POLICY,
                Description=(
                    "A service role is required to delete a cloudformation stack "
                    "for which a specific role was used which no longer exists"
                ),
            )
        except ClientError as e:
            raise RoleProvisioningError(handle.name, role_name, str(e)) from e

        role = ServiceRole(
            name=role_name, arn=response["Role"]["Arn"], stack_name=handle.name
        )

        try:
            self._iam.attach_role_policy(
                RoleName=role_name, PolicyArn=ADMINISTRATOR_POLICY_ARN
            )
        except ClientError as e:
            self._events.emit(
                "error",
                f"Policy attachment failed for service role {role_name}: {e}",
                stack_name=handle.name,
                role_name=role_name,
            )
            reason = str(e)
            try:
                self._delete_role(role_name)
            except ClientError as cleanup_error:
                reason += f"; removing the half-created role also failed: {cleanup_error}"
            raise RoleProvisioningError(handle.name, role_name, reason) from e

        handle.delete_role_arn = role.arn
        self._events.emit(
            "info",
            f"Deletion role arn: {role.arn}",
            stack_name=handle.name,
            role_arn=role.arn,
        )

        # IAM is eventually consistent; CloudFormation may not see the role yet
        self._cancel_event.wait(self._propagation_delay)
        return role

    def teardown(
        self, role: ServiceRole, primary_error: BaseException | None = None
    ) -> None:
        """
        Detach the policy and delete the role.

        A role that is already gone counts as removed.

        Raises:
            RoleTeardownError: the role could not be deleted
        """
        self._events.emit(
            "info",
            f"Deleting service role {role.name} for stack {role.stack_name}",
            stack_name=role.stack_name,
            role_name=role.name,
        )
        try:
            self._detach_policy(role.name)
            self._delete_role(role.name)
        except ClientError as e:
            raise RoleTeardownError(
                role.stack_name, role.name, str(e), primary_error=primary_error
            ) from e

    def _get_role(self, stack_name: str, role_name: str) -> dict | None:
        try:
            return self._iam.get_role(RoleName=role_name)["Role"]
        except ClientError as e:
            if error_code(e) == "NoSuchEntity":
                return None
            raise RoleProvisioningError(stack_name, role_name, str(e)) from e

    def _detach_policy(self, role_name: str) -> None:
        try:
            self._iam.detach_role_policy(
                RoleName=role_name, PolicyArn=ADMINISTRATOR_POLICY_ARN
            )
        except ClientError as e:
            if error_code(e) != "NoSuchEntity":
                raise

    def _delete_role(self, role_name: str) -> None:
        try:
            self._iam.delete_role(RoleName=role_name)
        except ClientError as e:
            if error_code(e) != "NoSuchEntity":
                raise
