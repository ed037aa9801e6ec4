"""Retain set computation for stacks in DELETE_FAILED."""

from __future__ import annotations

from ..utils import EventSink, LoggerEventSink

DELETED_RESOURCE_STATUS = "DELETE_COMPLETE"


class RetainSetResolver:
    """Finds the child resources a retried delete has to leave behind."""

    def __init__(self, cfn, events: EventSink | None = None):
        self._cfn = cfn
        self._events = events or LoggerEventSink()

    def resolve(self, stack_name: str) -> list[str]:
        """
        Return logical ids of every child resource not yet deleted.

        These are the resources that blocked the previous delete. Retaining
        them lets CloudFormation finish removing the rest of the stack.
        """
        retain = []
        paginator = self._cfn.get_paginator("list_stack_resources")
        for page in paginator.paginate(StackName=stack_name):
            for resource in page.get("StackResourceSummaries", []):
                if resource.get("ResourceStatus") != DELETED_RESOURCE_STATUS:
                    retain.append(resource["LogicalResourceId"])

        self._events.emit(
            "info",
            f"CloudFormationStack stackName={stack_name} delete failed. "
            f"Retaining {len(retain)} resources and deleting stack",
            stack_name=stack_name,
            retain_resources=retain,
        )
        return retain
