"""StackHandle data class."""

from __future__ import annotations
import datetime
from dataclasses import dataclass, field
from typing import Any

from ..utils import convert_tags_to_dict, format_timestamp


@dataclass
class StackHandle:
    """A CloudFormation stack as handed to the deletion core.

    Built by the inventory side from a DescribeStacks record. The core only
    writes ``delete_role_arn``.
    """

    name: str
    arn: str
    status: str
    creation_time: datetime.datetime
    last_updated_time: datetime.datetime | None = None
    tags: dict[str, str] = field(default_factory=dict)
    parent_id: str | None = None
    delete_role_arn: str | None = None

    @classmethod
    def from_api(cls, stack: dict[str, Any]) -> StackHandle:
        """Create a handle from a DescribeStacks ``Stacks[]`` entry."""
        return cls(
            name=stack["StackName"],
            arn=stack.get("StackId", ""),
            status=stack.get("StackStatus", ""),
            creation_time=stack["CreationTime"],
            last_updated_time=stack.get("LastUpdatedTime"),
            tags=convert_tags_to_dict(stack.get("Tags")),
            parent_id=stack.get("ParentId") or None,
        )

    @property
    def is_nested(self) -> bool:
        """Nested stacks are removed through their root stack only."""
        return bool(self.parent_id)

    def properties(self) -> dict[str, str]:
        """Display properties: name, timestamps and tag:<Key> entries."""
        last_updated = self.last_updated_time or self.creation_time
        props = {
            "Name": self.name,
            "CreationTime": format_timestamp(self.creation_time),
            "LastUpdatedTime": format_timestamp(last_updated),
        }
        for key, value in self.tags.items():
            props[f"tag:{key}"] = value
        return props

    def __str__(self) -> str:
        return self.name
