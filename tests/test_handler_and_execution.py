"""Unit tests for handler-level stack removal.

Tests focus on the per-stack execution path:
- Stack lookup (load_stack_handle)
- Outcome selection (remove_stack)
- Error handling
"""

from __future__ import annotations
import pytest
from unittest.mock import Mock, patch
from botocore.exceptions import EndpointConnectionError, ReadTimeoutError

from stack_teardown.cloudformation import (
    AttemptsExhaustedError,
    ProtectionBlockedError,
    RoleTeardownError,
)
from stack_teardown.handler import load_stack_handle, remove_stack
from stack_teardown.models import DeletionAttempt
from stack_teardown.models import removal_result


class TestLoadStackHandle:
    """Test stack lookup before removal."""

    def test_builds_handle_from_describe(self, mock_cfn, stack_builder):
        mock_cfn.describe_stacks.return_value = {
            "Stacks": [stack_builder.with_name("app").with_tag("team", "qa").build()]
        }

        handle = load_stack_handle(mock_cfn, "app")

        assert handle.name == "app"
        assert handle.tags == {"team": "qa"}
        mock_cfn.describe_stacks.assert_called_once_with(StackName="app")

    def test_missing_stack_returns_none(self, mock_cfn, not_found_error):
        mock_cfn.describe_stacks.side_effect = not_found_error

        assert load_stack_handle(mock_cfn, "test-stack") is None

    def test_empty_response_returns_none(self, mock_cfn):
        mock_cfn.describe_stacks.return_value = {"Stacks": []}

        assert load_stack_handle(mock_cfn, "test-stack") is None

    def test_other_errors_propagate(self, mock_cfn, make_client_error):
        mock_cfn.describe_stacks.side_effect = make_client_error(
            "Throttling", "Rate exceeded", "DescribeStacks"
        )

        with pytest.raises(Exception) as exc_info:
            load_stack_handle(mock_cfn, "test-stack")

        assert "Rate exceeded" in str(exc_info.value)


class TestRemoveStack:
    """Test outcome selection for a single stack."""

    @patch("stack_teardown.handler.DRY_RUN", False)
    def test_deleted_reports_attempts_and_properties(self, mock_cfn, stack_builder):
        """
        GIVEN a root stack that the orchestrator removes on the second attempt
        WHEN remove_stack is called in live mode
        THEN the result should be DELETED with attempts=2
        """
        mock_cfn.describe_stacks.return_value = {
            "Stacks": [stack_builder.with_tag("env", "ci").build()]
        }
        orchestrator = Mock()
        orchestrator.remove.return_value = DeletionAttempt(index=1, max_attempts=3)

        result = remove_stack(orchestrator, mock_cfn, "test-stack", "us-east-1")

        assert result.outcome == removal_result.DELETED
        assert result.attempts == 2
        assert result.region == "us-east-1"
        assert result.properties["tag:env"] == "ci"
        assert result.error is None
        orchestrator.remove.assert_called_once()

    @patch("stack_teardown.handler.DRY_RUN", True)
    def test_dry_run_does_not_call_orchestrator(self, mock_cfn, stack_builder):
        """
        GIVEN DRY_RUN mode
        WHEN remove_stack is called
        THEN the orchestrator should not be invoked
        """
        mock_cfn.describe_stacks.return_value = {"Stacks": [stack_builder.build()]}
        orchestrator = Mock()

        result = remove_stack(orchestrator, mock_cfn, "test-stack", "us-east-1")

        assert result.outcome == removal_result.DRY_RUN
        orchestrator.remove.assert_not_called()

    @patch("stack_teardown.handler.DRY_RUN", False)
    def test_nested_stack_is_skipped(self, mock_cfn, stack_builder):
        mock_cfn.describe_stacks.return_value = {
            "Stacks": [
                stack_builder.with_parent(
                    "arn:aws:cloudformation:us-east-1:123456789012:stack/root/xyz"
                ).build()
            ]
        }
        orchestrator = Mock()

        result = remove_stack(orchestrator, mock_cfn, "test-stack", "us-east-1")

        assert result.outcome == removal_result.SKIPPED_NESTED
        orchestrator.remove.assert_not_called()

    @patch("stack_teardown.handler.DRY_RUN", False)
    def test_missing_stack_is_already_gone(self, mock_cfn, not_found_error):
        mock_cfn.describe_stacks.side_effect = not_found_error
        orchestrator = Mock()

        result = remove_stack(orchestrator, mock_cfn, "test-stack", "us-east-1")

        assert result.outcome == removal_result.ALREADY_GONE
        assert result.properties == {}
        orchestrator.remove.assert_not_called()

    @pytest.mark.parametrize(
        "error",
        [
            ProtectionBlockedError("test-stack"),
            AttemptsExhaustedError("test-stack", 3),
            RoleTeardownError("test-stack", "teardown-service-role-CFS-test-stack", "denied"),
        ],
    )
    @patch("stack_teardown.handler.DRY_RUN", False)
    def test_teardown_errors_become_failed(self, mock_cfn, stack_builder, error):
        """
        GIVEN the orchestrator raises a teardown error
        WHEN remove_stack is called
        THEN the result should be FAILED with the error recorded
        """
        mock_cfn.describe_stacks.return_value = {"Stacks": [stack_builder.build()]}
        orchestrator = Mock()
        orchestrator.remove.side_effect = error

        result = remove_stack(orchestrator, mock_cfn, "test-stack", "us-east-1")

        assert result.outcome == removal_result.FAILED
        assert result.error == str(error)
        assert result.error_type == type(error).__name__

    @patch("stack_teardown.handler.DRY_RUN", False)
    def test_describe_transport_error_becomes_failed(self, mock_cfn):
        """
        GIVEN describe_stacks fails with a read timeout
        WHEN remove_stack is called
        THEN the result should be FAILED instead of the error escaping
        """
        mock_cfn.describe_stacks.side_effect = ReadTimeoutError(
            endpoint_url="https://cloudformation.us-east-1.amazonaws.com"
        )
        orchestrator = Mock()

        result = remove_stack(orchestrator, mock_cfn, "s1", "us-east-1")

        assert result.outcome == removal_result.FAILED
        assert result.error_type == "ReadTimeoutError"
        orchestrator.remove.assert_not_called()

    @patch("stack_teardown.handler.DRY_RUN", False)
    def test_remove_transport_error_becomes_failed(self, mock_cfn, stack_builder):
        mock_cfn.describe_stacks.return_value = {"Stacks": [stack_builder.build()]}
        orchestrator = Mock()
        orchestrator.remove.side_effect = EndpointConnectionError(
            endpoint_url="https://iam.amazonaws.com"
        )

        result = remove_stack(orchestrator, mock_cfn, "test-stack", "us-east-1")

        assert result.outcome == removal_result.FAILED
        assert result.error_type == "EndpointConnectionError"

    @patch("stack_teardown.handler.DRY_RUN", False)
    def test_unexpected_errors_propagate(self, mock_cfn, stack_builder):
        mock_cfn.describe_stacks.return_value = {"Stacks": [stack_builder.build()]}
        orchestrator = Mock()
        orchestrator.remove.side_effect = RuntimeError("boom")

        with pytest.raises(RuntimeError):
            remove_stack(orchestrator, mock_cfn, "test-stack", "us-east-1")
