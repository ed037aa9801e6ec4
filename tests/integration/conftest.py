"""Fixtures specific to integration tests."""

import pytest
from dataclasses import replace

from stack_teardown.cloudformation import DeletionOrchestrator


@pytest.fixture(autouse=True)
def _mark_as_integration(request):
    """Automatically mark all tests in integration/ as integration tests."""
    request.node.add_marker(pytest.mark.integration)


@pytest.fixture
def make_orchestrator(mock_cfn, mock_iam, fast_settings, events):
    """Factory for orchestrators wired to the shared mock clients.

    Example:
        orchestrator = make_orchestrator(disable_deletion_protection=True)
    """

    def _create(cancel_event=None, **overrides):
        settings = replace(fast_settings, **overrides)
        return DeletionOrchestrator(
            mock_cfn,
            mock_iam,
            settings=settings,
            events=events,
            cancel_event=cancel_event,
        )

    return _create


@pytest.fixture
def set_child_resources(mock_cfn):
    """Set the ListStackResources page returned for the stack.

    Example:
        set_child_resources(A="DELETE_COMPLETE", B="CREATE_COMPLETE")
    """

    def _set(**statuses):
        mock_cfn.get_paginator.return_value.paginate.return_value = [
            {
                "StackResourceSummaries": [
                    {"LogicalResourceId": logical_id, "ResourceStatus": status}
                    for logical_id, status in statuses.items()
                ]
            }
        ]

    return _set
