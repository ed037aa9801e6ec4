"""AWS helper functions."""

from __future__ import annotations
import datetime
from botocore.exceptions import ClientError


def convert_tags_to_dict(tags: list[dict[str, str]] | None) -> dict[str, str]:
    """Convert AWS tag list to dictionary."""
    return {tag["Key"]: tag["Value"] for tag in tags} if tags else {}


def error_code(err: ClientError) -> str:
    """Return the AWS error code of a ClientError ('' when absent)."""
    return err.response.get("Error", {}).get("Code", "")


def error_message(err: ClientError) -> str:
    """Return the AWS error message of a ClientError ('' when absent)."""
    return err.response.get("Error", {}).get("Message", "")


def is_stack_not_found(err: ClientError) -> bool:
    """
    Check whether a CloudFormation error means the stack does not exist.

    CloudFormation reports a missing stack as a ValidationError with the
    message "Stack with id <name> does not exist".
    """
    return error_code(err) == "ValidationError" and "does not exist" in error_message(
        err
    )


def format_timestamp(value: datetime.datetime) -> str:
    """Render a timestamp as RFC 3339 (UTC naive values are assumed UTC)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=datetime.timezone.utc)
    return value.isoformat(timespec="seconds").replace("+00:00", "Z")
