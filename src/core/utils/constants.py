"""Global constants used throughout the application.

This module centralizes the literal values of the deployment template:
parameter names and constraints, interface labels, mapping tables,
error codes and environment variable names. Stack code, the custom
resource Lambda and the template preview all read them from here.
"""

from types import MappingProxyType
from typing import Final

# ============================================================================
# Error Codes
# ============================================================================

# Generic
ERROR_CODE_TEMPLATE_BUILD_FAILED = "TEMPLATE_BUILD_FAILED"

# Build configuration
ERROR_CODE_INVALID_CONFIGURATION = "INVALID_CONFIGURATION"

# Parameter declarations
ERROR_CODE_INVALID_PARAMETER_DECLARATION = "INVALID_PARAMETER_DECLARATION"
ERROR_CODE_DUPLICATE_PARAMETER = "DUPLICATE_PARAMETER"
ERROR_CODE_INVALID_PARAMETER_DEFAULT = "INVALID_PARAMETER_DEFAULT"
ERROR_CODE_INVALID_PARAMETER_GROUPS = "INVALID_PARAMETER_GROUPS"

# Sub-component contract
ERROR_CODE_MISSING_CHILD_OUTPUT = "MISSING_CHILD_OUTPUT"

# Template preview
ERROR_CODE_INVALID_PARAMETER_VALUE = "INVALID_PARAMETER_VALUE"
ERROR_CODE_UNSUPPORTED_INTRINSIC = "UNSUPPORTED_INTRINSIC"

# Custom resources
ERROR_CODE_CUSTOM_RESOURCE_FAILED = "CUSTOM_RESOURCE_FAILED"
ERROR_CODE_SOURCE_BUCKET_CHECK_FAILED = "SOURCE_BUCKET_CHECK_FAILED"
ERROR_CODE_UNSUPPORTED_CUSTOM_ACTION = "UNSUPPORTED_CUSTOM_ACTION"

# ============================================================================
# Template Metadata
# ============================================================================

TEMPLATE_FORMAT_VERSION = "2010-09-09"
TEMPLATE_DESCRIPTION = (
    "(SO0023) - Serverless Image Handler with aws-solutions-constructs: "
    "This template deploys and configures a serverless architecture that is "
    "optimized for dynamic image manipulation and delivery at low latency and "
    "cost. Leverages SharpJS for image processing. Template version {version}"
)
INTERFACE_METADATA_KEY = "AWS::CloudFormation::Interface"

# ============================================================================
# Parameters
# ============================================================================

PARAM_CORS_ENABLED = "CorsEnabled"
PARAM_CORS_ORIGIN = "CorsOrigin"
PARAM_SOURCE_BUCKETS = "SourceBuckets"
PARAM_DEPLOY_DEMO_UI = "DeployDemoUI"
PARAM_LOG_RETENTION_PERIOD = "LogRetentionPeriod"
PARAM_AUTO_WEBP = "AutoWebP"

PARAMETER_TYPE_STRING = "String"
PARAMETER_TYPE_NUMBER = "Number"

YES = "Yes"
NO = "No"
YES_NO: Final[tuple[str, ...]] = (YES, NO)

LOG_RETENTION_DAYS: Final[tuple[str, ...]] = (
    "1", "3", "5", "7", "14", "30", "60", "90", "120", "150",
    "180", "365", "400", "545", "731", "1827", "3653",
)

NON_EMPTY_PATTERN = ".+"
SOURCE_BUCKETS_PLACEHOLDER = "defaultBucket, bucketNo2, bucketNo3, ..."

# Interface group labels, in display order
GROUP_CORS_OPTIONS = "CORS Options"
GROUP_IMAGE_SOURCES = "Image Sources"
GROUP_DEMO_UI = "Demo UI"
GROUP_EVENT_LOGGING = "Event Logging"

# ============================================================================
# Mappings
# ============================================================================

SEND_MAPPING_NAME = "Send"
SEND_MAPPING: Final = MappingProxyType(
    {"AnonymousUsage": MappingProxyType({"Data": YES})}
)

# ============================================================================
# Construct / Logical IDs
# ============================================================================

IMAGE_HANDLER_CONSTRUCT_ID = "ServerlessImageHandler"

CONDITION_DEPLOY_DEMO_UI = "DeployDemoUICondition"
CONDITION_ENABLE_CORS = "EnableCorsCondition"

IMAGE_HANDLER_DISTRIBUTION_ID = "ImageHandlerDistribution"
DEMO_DISTRIBUTION_ID = "DemoDistribution"

OUTPUT_API_ENDPOINT = "ApiEndpoint"
OUTPUT_DEMO_URL = "DemoUrl"
OUTPUT_SOURCE_BUCKETS = "SourceBucketsOutput"
OUTPUT_CORS_ENABLED = "CorsEnabledOutput"
OUTPUT_CORS_ORIGIN = "CorsOriginOutput"
OUTPUT_LOG_RETENTION_PERIOD = "LogRetentionPeriodOutput"

# ============================================================================
# Custom Resource Actions
# ============================================================================

ACTION_CHECK_SOURCE_BUCKETS = "checkSourceBuckets"
ACTION_CREATE_UUID = "createUuid"
ACTION_PUT_CONFIG_FILE = "putConfigFile"
ACTION_COPY_S3_ASSETS = "copyS3assets"

REQUEST_TYPE_CREATE = "Create"
REQUEST_TYPE_DELETE = "Delete"

DEMO_UI_CONFIG_KEY = "demo-ui-config.js"
DEMO_UI_MANIFEST_FILE = "demo-ui-manifest.json"
DEMO_UI_PREFIX = "demo-ui"
IMAGE_HANDLER_BUNDLE = "image-handler.zip"

DEFAULT_ASSET_CONTENT_TYPE = "application/octet-stream"
CONFIG_FILE_CONTENT_TYPE = "application/javascript"

# ============================================================================
# Lambda Runtime Settings
# ============================================================================

IMAGE_HANDLER_MEMORY_MB = 1024
IMAGE_HANDLER_TIMEOUT_SECONDS = 30
CUSTOM_RESOURCE_MEMORY_MB = 128
CUSTOM_RESOURCE_TIMEOUT_SECONDS = 60

METRICS_NAMESPACE = "ServerlessImageHandler"

POWERTOOLS_LAYER_ARN = (
    "arn:${AWS::Partition}:lambda:${AWS::Region}:017000801446:"
    "layer:AWSLambdaPowertoolsPythonV3-python312-x86_64:7"
)

# ============================================================================
# Environment Variable Names
# ============================================================================

ENV_VERSION = "VERSION"
ENV_SOURCE_CODE_BUCKET = "BUCKET_NAME"
ENV_SOLUTION_NAME = "SOLUTION_NAME"
ENV_AWS_ENDPOINT_URL = "AWS_ENDPOINT_URL"
ENV_AWS_REGION = "AWS_REGION"

DEFAULT_SOURCE_CODE_BUCKET = "solutions"
DEFAULT_SOLUTION_NAME = "serverless-image-handler"
