"""Powertools logger shared by the stack teardown Lambda."""

import os

from aws_lambda_powertools import Logger

# Only place LOG_LEVEL is read; the CDK stack sets it from the LogLevel parameter
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

logger = Logger(service="stack-teardown", level=LOG_LEVEL)


def get_logger() -> Logger:
    """Return the package logger.

    Handler code logs through it directly; the deletion core reaches it only
    via LoggerEventSink.
    """
    return logger
