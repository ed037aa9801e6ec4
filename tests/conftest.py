"""Pytest configuration and shared fixtures for stack teardown tests."""

from __future__ import annotations
import datetime
import pytest
from typing import Any
from unittest.mock import Mock
from botocore.exceptions import ClientError

from stack_teardown.models import StackHandle, TeardownSettings


class StackBuilder:
    """Builder pattern for creating test CloudFormation stack records.

    Produces the dict shape of a DescribeStacks ``Stacks[]`` entry.
    """

    def __init__(self):
        self._stack = {
            "StackName": "test-stack",
            "StackId": (
                "arn:aws:cloudformation:us-east-1:123456789012:"
                "stack/test-stack/abc-123"
            ),
            "StackStatus": "CREATE_COMPLETE",
            "CreationTime": datetime.datetime(
                2024, 1, 15, 10, 30, 0, tzinfo=datetime.timezone.utc
            ),
            "Tags": [],
        }

    def with_name(self, name: str) -> StackBuilder:
        """Set stack name (and matching arn)."""
        self._stack["StackName"] = name
        self._stack["StackId"] = (
            f"arn:aws:cloudformation:us-east-1:123456789012:stack/{name}/abc-123"
        )
        return self

    def with_status(self, status: str) -> StackBuilder:
        """Set raw StackStatus."""
        self._stack["StackStatus"] = status
        return self

    def with_last_updated(self, last_updated: datetime.datetime) -> StackBuilder:
        """Set LastUpdatedTime."""
        self._stack["LastUpdatedTime"] = last_updated
        return self

    def with_parent(self, parent_id: str) -> StackBuilder:
        """Mark as a nested stack."""
        self._stack["ParentId"] = parent_id
        return self

    def with_tag(self, key: str, value: str) -> StackBuilder:
        """Add a tag."""
        self._stack["Tags"].append({"Key": key, "Value": value})
        return self

    def build(self) -> dict[str, Any]:
        """Build and return the stack dictionary."""
        return self._stack

    def build_handle(self) -> StackHandle:
        """Build a StackHandle from the stack dictionary."""
        return StackHandle.from_api(self._stack)


class RecordingEventSink:
    """EventSink that keeps every emitted event for assertions."""

    def __init__(self):
        self.events: list[tuple[str, str, dict[str, Any]]] = []

    def emit(self, level: str, message: str, **fields: Any) -> None:
        self.events.append((level, message, fields))

    def messages(self, level: str | None = None) -> list[str]:
        return [m for lvl, m, _ in self.events if level is None or lvl == level]


def client_error(code: str, message: str, operation: str = "DeleteStack") -> ClientError:
    """Create a botocore ClientError."""
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


def stack_not_found(stack_name: str = "test-stack") -> ClientError:
    """The error CloudFormation raises for a missing stack."""
    return client_error(
        "ValidationError",
        f"Stack with id {stack_name} does not exist",
        "DescribeStacks",
    )


def termination_protected(stack_name: str = "test-stack") -> ClientError:
    """The error CloudFormation raises when termination protection blocks a delete."""
    return client_error(
        "ValidationError",
        f"Stack [{stack_name}] cannot be deleted while TerminationProtection is enabled",
    )


def describe_response(status: str, stack_name: str = "test-stack") -> dict[str, Any]:
    """Minimal DescribeStacks response with one stack in ``status``."""
    return {"Stacks": [{"StackName": stack_name, "StackStatus": status}]}


# Shared fixtures


@pytest.fixture
def stack_builder():
    """Fixture that returns a new StackBuilder."""
    return StackBuilder()


@pytest.fixture
def events():
    """Fixture that returns a recording event sink."""
    return RecordingEventSink()


@pytest.fixture
def fast_settings():
    """Settings with no real waiting between polls."""
    return TeardownSettings(
        wait_timeout_seconds=5,
        poll_interval_seconds=0,
        role_propagation_delay_seconds=0,
    )


@pytest.fixture
def mock_cfn():
    """Mock CloudFormation client with no children listed by default."""
    cfn = Mock()
    paginator = Mock()
    paginator.paginate.return_value = [{"StackResourceSummaries": []}]
    cfn.get_paginator.return_value = paginator
    return cfn


@pytest.fixture
def mock_iam():
    """Mock IAM client where no service role exists yet."""
    iam = Mock()
    iam.get_role.side_effect = client_error(
        "NoSuchEntity", "The role cannot be found", "GetRole"
    )
    iam.create_role.return_value = {
        "Role": {
            "RoleName": "teardown-service-role-CFS-test-stack",
            "Arn": "arn:aws:iam::123456789012:role/teardown-service-role-CFS-test-stack",
        }
    }
    return iam


@pytest.fixture
def make_client_error():
    """Fixture that returns the ClientError factory."""
    return client_error


@pytest.fixture
def not_found_error():
    """ClientError for a stack that does not exist."""
    return stack_not_found()


@pytest.fixture
def protection_error():
    """ClientError for a delete blocked by termination protection."""
    return termination_protected()


@pytest.fixture
def make_describe_response():
    """Fixture that returns the DescribeStacks response factory."""
    return describe_response
