"""CloudFormation Stack Teardown Lambda for AWS."""

from .handler import lambda_handler

__version__ = "1.0.0"
__description__ = "Safe CloudFormation stack deletion with bounded retries"

__all__ = ["lambda_handler"]
