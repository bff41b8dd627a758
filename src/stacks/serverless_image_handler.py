"""Serverless Image Handler construct.

Creates the image handler Lambda, its REST API and CloudFront
distribution, the optional demo UI and the custom resources used during
provisioning. The parent stack receives every condition and attribute it
needs through ``ServerlessImageHandlerOutputs``.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, cast

from aws_cdk import (
    Aws,
    CfnCondition,
    CfnParameter,
    CfnResource,
    CustomResource,
    Duration,
    Fn,
    RemovalPolicy,
    aws_apigateway as apigateway,
    aws_cloudfront as cloudfront,
    aws_cloudfront_origins as origins,
    aws_iam as iam,
    aws_lambda as lambda_,
    aws_logs as logs,
    aws_s3 as s3,
    custom_resources as cr,
)
from aws_lambda_powertools import Logger
from constructs import Construct

from core.models.context import BuildContext
from core.models.errors import MissingChildOutputError
from core.utils.constants import (
    ACTION_CHECK_SOURCE_BUCKETS,
    ACTION_COPY_S3_ASSETS,
    ACTION_CREATE_UUID,
    ACTION_PUT_CONFIG_FILE,
    CONDITION_DEPLOY_DEMO_UI,
    CONDITION_ENABLE_CORS,
    CUSTOM_RESOURCE_MEMORY_MB,
    CUSTOM_RESOURCE_TIMEOUT_SECONDS,
    DEMO_DISTRIBUTION_ID,
    DEMO_UI_CONFIG_KEY,
    DEMO_UI_MANIFEST_FILE,
    DEMO_UI_PREFIX,
    IMAGE_HANDLER_DISTRIBUTION_ID,
    IMAGE_HANDLER_MEMORY_MB,
    IMAGE_HANDLER_TIMEOUT_SECONDS,
    METRICS_NAMESPACE,
    POWERTOOLS_LAYER_ARN,
    YES,
)

logger = Logger(UTC=True)

SRC_DIR = Path(__file__).resolve().parent.parent

# The custom resource bundle only needs the Lambda side of the source tree
CUSTOM_RESOURCE_ASSET_EXCLUDES = [
    "app.py",
    "stacks",
    "**/__pycache__",
    "**/*.pyc",
]

DEMO_ORIGIN_ID = "DemoBucketOrigin"


@dataclass(frozen=True)
class ServerlessImageHandlerProps:
    """Parameter references forwarded from the stack, passed by identity."""

    cors_enabled_parameter: CfnParameter
    cors_origin_parameter: CfnParameter
    source_buckets_parameter: CfnParameter
    deploy_demo_ui_parameter: CfnParameter
    log_retention_period_parameter: CfnParameter
    auto_webp_parameter: CfnParameter


@dataclass(frozen=True)
class ServerlessImageHandlerOutputs:
    """Handles the parent stack reads after the construct is built."""

    deploy_demo_ui_condition: CfnCondition
    enable_cors_condition: CfnCondition
    api_domain_name: str
    demo_domain_name: str

    def __post_init__(self) -> None:
        for name in ("deploy_demo_ui_condition", "enable_cors_condition"):
            value = getattr(self, name)
            if not isinstance(value, CfnCondition):
                raise MissingChildOutputError(
                    message=f"Image handler construct did not provide condition '{name}'",
                    details={"output": name, "received": type(value).__name__},
                )

        for name in ("api_domain_name", "demo_domain_name"):
            if not getattr(self, name):
                raise MissingChildOutputError(
                    message=f"Image handler construct did not provide attribute '{name}'",
                    details={"output": name},
                )


class ServerlessImageHandler(Construct):
    """Image handler API, CloudFront delivery and optional demo UI."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        props: ServerlessImageHandlerProps,
        *,
        build_context: BuildContext,
        send_anonymous_usage: bool,
    ) -> None:
        super().__init__(scope, construct_id)

        self._props = props
        self._context = build_context

        self.enable_cors_condition = self._create_condition(
            CONDITION_ENABLE_CORS, props.cors_enabled_parameter
        )
        self.deploy_demo_ui_condition = self._create_condition(
            CONDITION_DEPLOY_DEMO_UI, props.deploy_demo_ui_parameter
        )

        self.source_code_bucket = s3.Bucket.from_bucket_name(
            self,
            "SourceCodeBucket",
            f"{build_context.source_code_bucket}-{Aws.REGION}",
        )

        self.image_handler_function = self._create_image_handler_function()
        self.log_group = self._create_log_group()
        self.api = self._create_api()
        self.distribution = self._create_image_handler_distribution()
        self.demo_bucket, self.demo_distribution = self._create_demo_ui()
        self.custom_resources = self._create_custom_resources(send_anonymous_usage)

        self.outputs = ServerlessImageHandlerOutputs(
            deploy_demo_ui_condition=self.deploy_demo_ui_condition,
            enable_cors_condition=self.enable_cors_condition,
            api_domain_name=self.distribution.distribution_domain_name,
            demo_domain_name=self.demo_distribution.attr_domain_name,
        )

        logger.debug(
            "Image handler construct created",
            extra={
                "custom_resources": sorted(self.custom_resources),
                "send_anonymous_usage": send_anonymous_usage,
            },
        )

    def _create_condition(self, condition_id: str, parameter: CfnParameter) -> CfnCondition:
        """Create a Yes/No gate with a stable logical ID."""
        condition = CfnCondition(
            self,
            condition_id,
            expression=Fn.condition_equals(parameter.value_as_string, YES),
        )
        condition.override_logical_id(condition_id)
        return condition

    def _create_image_handler_function(self) -> lambda_.Function:
        """Create the image handler Lambda from the published bundle."""
        props = self._props

        function = lambda_.Function(
            self,
            "ImageHandlerFunction",
            description=(
                f"Serverless Image Handler ({self._context.version}): "
                "Performs image edits and manipulations"
            ),
            runtime=lambda_.Runtime.NODEJS_20_X,
            handler="image-handler/index.handler",
            code=lambda_.Code.from_bucket(
                self.source_code_bucket, self._context.image_handler_key
            ),
            memory_size=IMAGE_HANDLER_MEMORY_MB,
            timeout=Duration.seconds(IMAGE_HANDLER_TIMEOUT_SECONDS),
            environment={
                "AUTO_WEBP": props.auto_webp_parameter.value_as_string,
                "CORS_ENABLED": props.cors_enabled_parameter.value_as_string,
                "CORS_ORIGIN": props.cors_origin_parameter.value_as_string,
                "SOURCE_BUCKETS": props.source_buckets_parameter.value_as_string,
            },
        )

        function.add_to_role_policy(
            iam.PolicyStatement(
                actions=["s3:GetObject"],
                resources=[f"arn:{Aws.PARTITION}:s3:::*"],
            )
        )
        return function

    def _create_log_group(self) -> logs.CfnLogGroup:
        """Create the function log group with the configured retention."""
        return logs.CfnLogGroup(
            self,
            "ImageHandlerLogGroup",
            log_group_name=f"/aws/lambda/{self.image_handler_function.function_name}",
            retention_in_days=self._props.log_retention_period_parameter.value_as_number,
        )

    def _create_api(self) -> apigateway.LambdaRestApi:
        """Create the regional proxy API in front of the image handler."""
        api = apigateway.LambdaRestApi(
            self,
            "ImageHandlerApi",
            handler=self.image_handler_function,
            proxy=True,
            binary_media_types=["*/*"],
            cloud_watch_role=False,
            endpoint_configuration=apigateway.EndpointConfiguration(
                types=[apigateway.EndpointType.REGIONAL]
            ),
            deploy_options=apigateway.StageOptions(stage_name="image"),
        )

        # Only the stack-level outputs are exposed
        api.node.try_remove_child("Endpoint")
        return api

    def _create_image_handler_distribution(self) -> cloudfront.Distribution:
        """Create the CloudFront distribution serving image requests."""
        cache_policy = cloudfront.CachePolicy(
            self,
            "ImageHandlerCachePolicy",
            comment="Cache policy for Serverless Image Handler",
            default_ttl=Duration.days(1),
            min_ttl=Duration.seconds(1),
            max_ttl=Duration.days(365),
            header_behavior=cloudfront.CacheHeaderBehavior.allow_list("origin", "accept"),
            query_string_behavior=cloudfront.CacheQueryStringBehavior.all(),
            cookie_behavior=cloudfront.CacheCookieBehavior.none(),
        )

        api_origin = origins.HttpOrigin(
            f"{self.api.rest_api_id}.execute-api.{Aws.REGION}.{Aws.URL_SUFFIX}",
            origin_path=f"/{self.api.deployment_stage.stage_name}",
            protocol_policy=cloudfront.OriginProtocolPolicy.HTTPS_ONLY,
        )

        distribution = cloudfront.Distribution(
            self,
            IMAGE_HANDLER_DISTRIBUTION_ID,
            comment="Image Handler Distribution for Serverless Image Handler",
            default_behavior=cloudfront.BehaviorOptions(
                origin=api_origin,
                viewer_protocol_policy=cloudfront.ViewerProtocolPolicy.HTTPS_ONLY,
                allowed_methods=cloudfront.AllowedMethods.ALLOW_GET_HEAD,
                cache_policy=cache_policy,
            ),
            price_class=cloudfront.PriceClass.PRICE_CLASS_ALL,
        )

        cfn_distribution = cast(cloudfront.CfnDistribution, distribution.node.default_child)
        cfn_distribution.override_logical_id(IMAGE_HANDLER_DISTRIBUTION_ID)
        return distribution

    def _create_demo_ui(self) -> tuple[s3.CfnBucket, cloudfront.CfnDistribution]:
        """Create the demo bucket and its distribution, gated on DeployDemoUI."""
        condition = self.deploy_demo_ui_condition

        bucket = s3.CfnBucket(
            self,
            "DemoBucket",
            bucket_encryption=s3.CfnBucket.BucketEncryptionProperty(
                server_side_encryption_configuration=[
                    s3.CfnBucket.ServerSideEncryptionRuleProperty(
                        server_side_encryption_by_default=s3.CfnBucket.ServerSideEncryptionByDefaultProperty(
                            sse_algorithm="AES256"
                        )
                    )
                ]
            ),
            public_access_block_configuration=s3.CfnBucket.PublicAccessBlockConfigurationProperty(
                block_public_acls=True,
                block_public_policy=True,
                ignore_public_acls=True,
                restrict_public_buckets=True,
            ),
        )
        bucket.cfn_options.condition = condition
        # Copied demo assets stay behind on stack deletion
        bucket.apply_removal_policy(RemovalPolicy.RETAIN)

        access_identity = cloudfront.CfnCloudFrontOriginAccessIdentity(
            self,
            "DemoOriginAccessIdentity",
            cloud_front_origin_access_identity_config=cloudfront.CfnCloudFrontOriginAccessIdentity.CloudFrontOriginAccessIdentityConfigProperty(
                comment="Access identity for the Serverless Image Handler demo UI"
            ),
        )
        access_identity.cfn_options.condition = condition

        bucket_policy = s3.CfnBucketPolicy(
            self,
            "DemoBucketPolicy",
            bucket=bucket.ref,
            policy_document={
                "Version": "2012-10-17",
                "Statement": [
                    {
                        "Effect": "Allow",
                        "Action": "s3:GetObject",
                        "Principal": {"CanonicalUser": access_identity.attr_s3_canonical_user_id},
                        "Resource": f"{bucket.attr_arn}/*",
                    }
                ],
            },
        )
        bucket_policy.cfn_options.condition = condition

        distribution = cloudfront.CfnDistribution(
            self,
            DEMO_DISTRIBUTION_ID,
            distribution_config=cloudfront.CfnDistribution.DistributionConfigProperty(
                comment="Website distribution for the Serverless Image Handler demo UI",
                enabled=True,
                default_root_object="index.html",
                http_version="http2",
                price_class="PriceClass_All",
                origins=[
                    cloudfront.CfnDistribution.OriginProperty(
                        id=DEMO_ORIGIN_ID,
                        domain_name=bucket.attr_regional_domain_name,
                        s3_origin_config=cloudfront.CfnDistribution.S3OriginConfigProperty(
                            origin_access_identity=f"origin-access-identity/cloudfront/{access_identity.ref}"
                        ),
                    )
                ],
                default_cache_behavior=cloudfront.CfnDistribution.DefaultCacheBehaviorProperty(
                    target_origin_id=DEMO_ORIGIN_ID,
                    viewer_protocol_policy="redirect-to-https",
                    allowed_methods=["GET", "HEAD"],
                    cached_methods=["GET", "HEAD"],
                    compress=True,
                    forwarded_values=cloudfront.CfnDistribution.ForwardedValuesProperty(
                        query_string=False
                    ),
                ),
            ),
        )
        distribution.override_logical_id(DEMO_DISTRIBUTION_ID)
        distribution.cfn_options.condition = condition

        return bucket, distribution

    def _create_custom_resources(self, send_anonymous_usage: bool) -> dict[str, CustomResource]:
        """Create the provisioning custom resources and their provider."""
        function = lambda_.Function(
            self,
            "CustomResourceFunction",
            description=f"Serverless Image Handler ({self._context.version}): Custom resource",
            runtime=lambda_.Runtime.PYTHON_3_12,
            handler="handlers.custom_resource.handler.handler",
            code=lambda_.Code.from_asset(str(SRC_DIR), exclude=CUSTOM_RESOURCE_ASSET_EXCLUDES),
            layers=[
                lambda_.LayerVersion.from_layer_version_arn(
                    self, "PowertoolsLayer", Fn.sub(POWERTOOLS_LAYER_ARN)
                )
            ],
            memory_size=CUSTOM_RESOURCE_MEMORY_MB,
            timeout=Duration.seconds(CUSTOM_RESOURCE_TIMEOUT_SECONDS),
            tracing=lambda_.Tracing.ACTIVE,
            environment={
                "POWERTOOLS_SERVICE_NAME": "custom-resource",
                "POWERTOOLS_METRICS_NAMESPACE": METRICS_NAMESPACE,
            },
        )
        function.add_to_role_policy(
            iam.PolicyStatement(
                actions=["s3:ListBucket", "s3:GetObject", "s3:PutObject"],
                resources=[
                    f"arn:{Aws.PARTITION}:s3:::*",
                ],
            )
        )

        provider = cr.Provider(self, "CustomResourceProvider", on_event_handler=function)
        source_code_bucket = f"{self._context.source_code_bucket}-{Aws.REGION}"
        prefix = self._context.source_code_prefix

        resources: dict[str, CustomResource] = {}

        resources["CheckSourceBuckets"] = self._create_custom_resource(
            "CustomResourceCheckSourceBuckets",
            provider,
            {
                "CustomAction": ACTION_CHECK_SOURCE_BUCKETS,
                "SourceBuckets": self._props.source_buckets_parameter.value_as_string,
            },
        )
        self.image_handler_function.node.add_dependency(resources["CheckSourceBuckets"])

        if send_anonymous_usage:
            resources["Uuid"] = self._create_custom_resource(
                "CustomResourceUuid",
                provider,
                {"CustomAction": ACTION_CREATE_UUID},
            )

        resources["CopyS3Assets"] = self._create_custom_resource(
            "CustomResourceCopyS3Assets",
            provider,
            {
                "CustomAction": ACTION_COPY_S3_ASSETS,
                "ManifestKey": f"{prefix}/{DEMO_UI_MANIFEST_FILE}",
                "SourceS3Bucket": source_code_bucket,
                "SourceS3key": f"{prefix}/{DEMO_UI_PREFIX}",
                "DestS3Bucket": self.demo_bucket.ref,
            },
            condition=self.deploy_demo_ui_condition,
        )

        resources["PutConfigFile"] = self._create_custom_resource(
            "CustomResourcePutConfigFile",
            provider,
            {
                "CustomAction": ACTION_PUT_CONFIG_FILE,
                "ConfigItem": {
                    "apiEndpoint": f"https://{self.distribution.distribution_domain_name}",
                },
                "DestS3Bucket": self.demo_bucket.ref,
                "DestS3key": DEMO_UI_CONFIG_KEY,
            },
            condition=self.deploy_demo_ui_condition,
        )

        return resources

    def _create_custom_resource(
        self,
        resource_id: str,
        provider: cr.Provider,
        properties: dict[str, Any],
        *,
        condition: CfnCondition | None = None,
    ) -> CustomResource:
        resource = CustomResource(
            self,
            resource_id,
            service_token=provider.service_token,
            properties=properties,
        )
        if condition is not None:
            cast(CfnResource, resource.node.default_child).cfn_options.condition = condition
        return resource
