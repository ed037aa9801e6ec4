"""CDK Stack for the CloudFormation Stack Teardown Lambda."""

from aws_cdk import (
    Stack,
    Duration,
    aws_lambda as lambda_,
    aws_iam as iam,
    aws_sns as sns,
    aws_logs as logs,
    aws_cloudwatch as cloudwatch,
    aws_cloudwatch_actions as cw_actions,
    CfnParameter,
    CfnOutput,
    Tags
)
from constructs import Construct


class StackTeardownStack(Stack):
    """
    CDK Stack for CloudFormation stack teardown.

    Deploys a Lambda that removes the stacks named in its invocation event with:
    - Bounded delete retries and DELETE_FAILED recovery (retained resources)
    - Optional termination protection removal
    - Optional temporary CloudFormation service role per stack
    - Configurable dry-run mode

    The Lambda has no schedule of its own; the calling scheduler invokes it.
    """

    def __init__(self, scope: Construct, construct_id: str, **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)

        # Parameters
        dry_run_param = CfnParameter(
            self, "DryRunMode",
            type="String",
            default="true",
            allowed_values=["true", "false"],
            description="[SAFETY] Safe mode - logs which stacks would be deleted without deleting them. Set to 'false' only when ready for actual stack deletion."
        )

        disable_protection_param = CfnParameter(
            self, "DisableDeletionProtection",
            type="String",
            default="false",
            allowed_values=["true", "false"],
            description="[PROTECTION] Turn off termination protection on a stack when it blocks deletion, then retry. When 'false', protected stacks are reported as failed."
        )

        role_management_param = CfnParameter(
            self, "EnableAutomaticRoleManagement",
            type="String",
            default="false",
            allowed_values=["true", "false"],
            description="[ROLES] Create a temporary AdministratorAccess service role per stack for CloudFormation to delete with, removed after each stack. Grants the Lambda iam:CreateRole/PassRole."
        )

        max_attempts_param = CfnParameter(
            self, "MaxDeleteAttempts",
            type="Number",
            default=3,
            min_value=1,
            max_value=10,
            description="[RETRIES] Delete attempts per stack before giving up. Default 3. Range: 1-10."
        )

        wait_timeout_param = CfnParameter(
            self, "WaitTimeoutSeconds",
            type="Number",
            default=300,
            min_value=30,
            max_value=840,
            description="[RETRIES] Ceiling in seconds for each wait on a stack status. Default 300. Must stay below the Lambda timeout."
        )

        poll_interval_param = CfnParameter(
            self, "PollIntervalSeconds",
            type="Number",
            default=30,
            min_value=5,
            max_value=120,
            description="[RETRIES] Seconds between DescribeStacks polls while waiting. Default 30."
        )

        max_workers_param = CfnParameter(
            self, "MaxWorkers",
            type="Number",
            default=4,
            min_value=1,
            max_value=16,
            description="[CONCURRENCY] Stacks removed in parallel per invocation. Default 4."
        )

        # Logging
        log_retention_param = CfnParameter(
            self, "LogRetentionDays",
            type="Number",
            default=30,
            description="[LOGGING] CloudWatch log retention period in days. Valid options: 1, 3, 7, 14, 30, 60, 90, 120, 180."
        )

        log_level_param = CfnParameter(
            self, "LogLevel",
            type="String",
            default="INFO",
            allowed_values=["DEBUG", "INFO", "WARNING", "ERROR"],
            description="[LOGGING] Log verbosity. INFO = status transitions and attempts, WARNING = blocked stacks, ERROR = failed attempts only."
        )

        # SNS Topic for alarms
        # Note: Subscription must be added manually via AWS Console or CLI
        alarm_topic = sns.Topic(
            self, "StackTeardownAlarmTopic",
            topic_name="StackTeardownAlarms",
            display_name="CloudFormation Stack Teardown Alarms"
        )

        # IAM Role for Lambda
        lambda_role = iam.Role(
            self, "StackTeardownRole",
            role_name="RoleStackTeardown",
            assumed_by=iam.ServicePrincipal("lambda.amazonaws.com"),
            managed_policies=[
                iam.ManagedPolicy.from_aws_managed_policy_name(
                    "service-role/AWSLambdaBasicExecutionRole"
                )
            ]
        )

        lambda_role.add_to_policy(iam.PolicyStatement(
            effect=iam.Effect.ALLOW,
            actions=[
                "cloudformation:DescribeStacks",
                "cloudformation:ListStackResources",
                "cloudformation:DeleteStack",
                "cloudformation:UpdateTerminationProtection",
            ],
            resources=["*"]
        ))

        # Service role lifecycle, scoped to the roles this Lambda names
        service_role_arn = self.format_arn(
            service="iam",
            region="",
            resource="role",
            resource_name="teardown-service-role-CFS-*"
        )
        lambda_role.add_to_policy(iam.PolicyStatement(
            effect=iam.Effect.ALLOW,
            actions=[
                "iam:GetRole",
                "iam:CreateRole",
                "iam:AttachRolePolicy",
                "iam:DetachRolePolicy",
                "iam:DeleteRole",
                "iam:PassRole",
            ],
            resources=[service_role_arn]
        ))

        # Map log retention parameter to CDK enum
        log_retention_mapping = {
            1: logs.RetentionDays.ONE_DAY,
            3: logs.RetentionDays.THREE_DAYS,
            7: logs.RetentionDays.ONE_WEEK,
            14: logs.RetentionDays.TWO_WEEKS,
            30: logs.RetentionDays.ONE_MONTH,
            60: logs.RetentionDays.TWO_MONTHS,
            90: logs.RetentionDays.THREE_MONTHS,
            120: logs.RetentionDays.FOUR_MONTHS,
            180: logs.RetentionDays.SIX_MONTHS,
        }

        # Lambda Function
        teardown_lambda = lambda_.Function(
            self, "StackTeardownLambda",
            function_name="LambdaStackTeardown",
            description="CloudFormation stack teardown with bounded retries, protection and service role handling",
            runtime=lambda_.Runtime.PYTHON_3_13,
            architecture=lambda_.Architecture.ARM_64,
            handler="stack_teardown.handler.lambda_handler",
            code=lambda_.Code.from_asset("lambda"),
            role=lambda_role,
            timeout=Duration.seconds(900),
            memory_size=512,
            log_retention=log_retention_mapping.get(
                log_retention_param.value_as_number,
                logs.RetentionDays.ONE_MONTH
            ),
            environment={
                "DRY_RUN": dry_run_param.value_as_string,
                "DISABLE_DELETION_PROTECTION": disable_protection_param.value_as_string,
                "ENABLE_AUTOMATIC_ROLE_MANAGEMENT": role_management_param.value_as_string,
                "MAX_DELETE_ATTEMPTS": max_attempts_param.value_as_string,
                "WAIT_TIMEOUT_SECONDS": wait_timeout_param.value_as_string,
                "POLL_INTERVAL_SECONDS": poll_interval_param.value_as_string,
                "MAX_WORKERS": max_workers_param.value_as_string,
                "LOG_LEVEL": log_level_param.value_as_string
            }
        )

        Tags.of(teardown_lambda).add("ManagedBy", "CDK")

        # CloudWatch Alarms
        lambda_errors_alarm = cloudwatch.Alarm(
            self, "LambdaErrorsAlarm",
            alarm_name="StackTeardown-LambdaErrors",
            alarm_description="Alert when the stack teardown Lambda fails an invocation",
            metric=teardown_lambda.metric_errors(
                period=Duration.minutes(15),
                statistic="Sum"
            ),
            threshold=1,
            evaluation_periods=1,
            treat_missing_data=cloudwatch.TreatMissingData.NOT_BREACHING
        )
        lambda_errors_alarm.add_alarm_action(cw_actions.SnsAction(alarm_topic))

        # Outputs
        CfnOutput(
            self, "LambdaFunctionName",
            description="Name of the Lambda function",
            value=teardown_lambda.function_name,
            export_name="StackTeardownLambdaName"
        )

        CfnOutput(
            self, "LambdaFunctionArn",
            description="ARN of the Lambda function",
            value=teardown_lambda.function_arn,
            export_name="StackTeardownLambdaArn"
        )

        CfnOutput(
            self, "AlarmTopicArn",
            description="ARN of the SNS topic for alarms",
            value=alarm_topic.topic_arn
        )

        CfnOutput(
            self, "DryRunModeOutput",
            description="Current dry-run mode setting",
            value=dry_run_param.value_as_string
        )
