"""Main Lambda handler for CloudFormation stack teardown."""

from __future__ import annotations
import json
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .cloudformation import DeletionOrchestrator, StackTeardownError
from .models import RemovalResult, StackHandle, TeardownSettings
from .models import removal_result
from .models.config import DRY_RUN, MAX_WORKERS, TARGET_REGION
from .utils import get_logger, is_stack_not_found

logger = get_logger()

# Stop waiting this long before the Lambda deadline so role teardown can run
CANCEL_MARGIN_SECONDS = 30


def load_stack_handle(cfn, stack_name: str) -> StackHandle | None:
    """Describe a stack and build its handle; None if it does not exist."""
    try:
        response = cfn.describe_stacks(StackName=stack_name)
    except ClientError as e:
        if is_stack_not_found(e):
            return None
        raise

    stacks = response.get("Stacks", [])
    if not stacks:
        return None
    return StackHandle.from_api(stacks[0])


def remove_stack(
    orchestrator: DeletionOrchestrator, cfn, stack_name: str, region: str
) -> RemovalResult:
    """Remove one stack and report what happened."""
    try:
        handle = load_stack_handle(cfn, stack_name)
    except (ClientError, BotoCoreError) as e:
        logger.error(f"Failed to describe stack {stack_name} in {region}: {e}")
        return RemovalResult(
            stack_name=stack_name,
            region=region,
            outcome=removal_result.FAILED,
            error=str(e),
            error_type=type(e).__name__,
        )

    if handle is None:
        logger.info(f"Stack {stack_name} not found in {region}, nothing to delete")
        return RemovalResult(
            stack_name=stack_name, region=region, outcome=removal_result.ALREADY_GONE
        )

    result = RemovalResult(
        stack_name=handle.name,
        region=region,
        outcome=removal_result.DELETED,
        properties=handle.properties(),
    )

    if handle.is_nested:
        logger.info(
            f"Stack {handle.name} is nested under {handle.parent_id}, "
            f"skipping (removed with its root stack)"
        )
        result.outcome = removal_result.SKIPPED_NESTED
        return result

    if DRY_RUN:
        logger.info(
            f"[DRY-RUN] Would delete CloudFormation stack {handle.name} "
            f"(status: {handle.status}) in {region}"
        )
        result.outcome = removal_result.DRY_RUN
        return result

    try:
        attempt = orchestrator.remove(handle)
        result.attempts = attempt.number
        logger.info(f"Removed CloudFormation stack {handle.name} in {region}")
    except (StackTeardownError, ClientError, BotoCoreError) as e:
        logger.error(f"Failed to remove CloudFormation stack {handle.name}: {e}")
        result.outcome = removal_result.FAILED
        result.error = str(e)
        result.error_type = type(e).__name__

    return result


def _start_deadline_timer(
    context: Any, cancel_event: threading.Event
) -> threading.Timer | None:
    """Set ``cancel_event`` shortly before the invocation times out."""
    if context is None or not hasattr(context, "get_remaining_time_in_millis"):
        return None
    remaining = context.get_remaining_time_in_millis() / 1000 - CANCEL_MARGIN_SECONDS
    timer = threading.Timer(max(remaining, 0), cancel_event.set)
    timer.daemon = True
    timer.start()
    return timer


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """
    Main Lambda handler.

    Event:
        stacks: stack names or ARNs to remove (root stacks)
        region: AWS region (defaults to TARGET_REGION / the Lambda's region)
        settings: optional settings-store overrides, e.g.
            {"DisableDeletionProtection": true, "EnableAutomaticRoleManagment": true}
    """
    start_time = time.time()
    stack_names = event.get("stacks") or []
    region = event.get("region") or TARGET_REGION or None
    logger.info(
        f"Starting stack teardown for {len(stack_names)} stacks (DRY_RUN={DRY_RUN})"
    )

    try:
        settings = TeardownSettings.from_mapping(
            event.get("settings"), base=TeardownSettings.from_env()
        )

        # boto3 clients are thread-safe and shared by all workers
        cfn = boto3.client("cloudformation", region_name=region)
        iam = boto3.client("iam")
        region = cfn.meta.region_name

        cancel_event = threading.Event()
        timer = _start_deadline_timer(context, cancel_event)
        orchestrator = DeletionOrchestrator(
            cfn, iam, settings=settings, cancel_event=cancel_event
        )

        try:
            with ThreadPoolExecutor(max_workers=max(MAX_WORKERS, 1)) as pool:
                results = list(
                    pool.map(
                        lambda name: remove_stack(orchestrator, cfn, name, region),
                        stack_names,
                    )
                )
        finally:
            if timer is not None:
                timer.cancel()

        outcome_counts: dict[str, int] = {}
        for result in results:
            outcome_counts[result.outcome] = outcome_counts.get(result.outcome, 0) + 1

        total_duration = time.time() - start_time
        logger.info(
            f"Stack teardown complete: {len(results)} stacks in {region} "
            f"({total_duration:.1f}s total)"
        )
        for outcome, count in outcome_counts.items():
            logger.info(f"  {outcome}: {count}")

        return {
            "statusCode": 200,
            "body": json.dumps(
                {
                    "dry_run": DRY_RUN,
                    "region": region,
                    "total": len(results),
                    "by_outcome": outcome_counts,
                    "results": [result.to_dict() for result in results],
                }
            ),
        }

    except Exception as e:
        logger.error(f"Lambda execution failed: {e}")
        raise
