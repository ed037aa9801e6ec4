#!/usr/bin/env python3
"""CDK app for the CloudFormation Stack Teardown Lambda."""

import os
import aws_cdk as cdk
from stacks.stack_teardown_stack import StackTeardownStack

app = cdk.App()

StackTeardownStack(
    app,
    "StackTeardownStack",
    description="Removes CloudFormation stacks with bounded retries and recovery",
    env=cdk.Environment(
        account=os.getenv('CDK_DEFAULT_ACCOUNT'),
        region=os.getenv('CDK_DEFAULT_REGION', 'us-east-2')
    ),
    tags={
        "Project": "PlatformEngineering",
        "ManagedBy": "CDK",
    }
)

app.synth()
