"""Parameter catalogue of the Serverless Image Handler template.

Declarations are validated as a whole before any ``CfnParameter`` is
created, so a malformed catalogue fails the synthesis up front.
"""

from typing import Any

from aws_cdk import CfnParameter, Stack
from aws_lambda_powertools import Logger

from core.models.parameters import ParameterGroupSpec, ParameterSpec
from core.utils.constants import (
    GROUP_CORS_OPTIONS,
    GROUP_DEMO_UI,
    GROUP_EVENT_LOGGING,
    GROUP_IMAGE_SOURCES,
    LOG_RETENTION_DAYS,
    NO,
    NON_EMPTY_PATTERN,
    PARAM_AUTO_WEBP,
    PARAM_CORS_ENABLED,
    PARAM_CORS_ORIGIN,
    PARAM_DEPLOY_DEMO_UI,
    PARAM_LOG_RETENTION_PERIOD,
    PARAM_SOURCE_BUCKETS,
    PARAMETER_TYPE_NUMBER,
    PARAMETER_TYPE_STRING,
    SOURCE_BUCKETS_PLACEHOLDER,
    YES,
    YES_NO,
)
from core.utils.validators import build_parameter_specs, validate_parameter_groups
from stacks.serverless_image_handler import ServerlessImageHandlerProps

logger = Logger(UTC=True)

PARAMETER_DECLARATIONS: tuple[dict[str, Any], ...] = (
    {
        "name": PARAM_CORS_ENABLED,
        "type": PARAMETER_TYPE_STRING,
        "description": (
            "Would you like to enable Cross-Origin Resource Sharing (CORS) for the "
            "image handler API? Select 'Yes' if so."
        ),
        "default": NO,
        "allowed_values": YES_NO,
    },
    {
        "name": PARAM_CORS_ORIGIN,
        "type": PARAMETER_TYPE_STRING,
        "description": (
            "If you selected 'Yes' above, please specify an origin value here. "
            "Supports multiple origins given either as comma-separated string or RegExp."
        ),
        "default": "*",
    },
    {
        "name": PARAM_SOURCE_BUCKETS,
        "type": PARAMETER_TYPE_STRING,
        "description": (
            "(Required) List the buckets (comma-separated) within your account that "
            "contain original image files. If you plan to use Thumbor or Custom image "
            "requests with this solution, the source bucket for those requests will be "
            "the first bucket listed in this field."
        ),
        "default": SOURCE_BUCKETS_PLACEHOLDER,
        "allowed_pattern": NON_EMPTY_PATTERN,
    },
    {
        "name": PARAM_DEPLOY_DEMO_UI,
        "type": PARAMETER_TYPE_STRING,
        "description": (
            "Would you like to deploy a demo UI to explore the features and "
            "capabilities of this solution? This will create an additional Amazon S3 "
            "bucket and Amazon CloudFront distribution in your account."
        ),
        "default": YES,
        "allowed_values": YES_NO,
    },
    {
        "name": PARAM_LOG_RETENTION_PERIOD,
        "type": PARAMETER_TYPE_NUMBER,
        "description": (
            "This solution automatically logs events to Amazon CloudWatch. Select the "
            "amount of time for CloudWatch logs from this solution to be retained "
            "(in days)."
        ),
        "default": "1",
        "allowed_values": LOG_RETENTION_DAYS,
    },
    {
        "name": PARAM_AUTO_WEBP,
        "type": PARAMETER_TYPE_STRING,
        "description": (
            "Would you like to enable automatic WebP based on accept headers? "
            "Select 'Yes' if so."
        ),
        "default": NO,
        "allowed_values": YES_NO,
    },
)

PARAMETER_GROUPS: tuple[ParameterGroupSpec, ...] = (
    ParameterGroupSpec(
        label=GROUP_CORS_OPTIONS,
        parameters=(PARAM_CORS_ENABLED, PARAM_CORS_ORIGIN),
    ),
    ParameterGroupSpec(
        label=GROUP_IMAGE_SOURCES,
        parameters=(PARAM_SOURCE_BUCKETS, PARAM_AUTO_WEBP),
    ),
    ParameterGroupSpec(
        label=GROUP_DEMO_UI,
        parameters=(PARAM_DEPLOY_DEMO_UI,),
    ),
    ParameterGroupSpec(
        label=GROUP_EVENT_LOGGING,
        parameters=(PARAM_LOG_RETENTION_PERIOD,),
    ),
)


def load_parameter_specs() -> tuple[ParameterSpec, ...]:
    """Validate the catalogue and its interface groups."""
    specs = build_parameter_specs(PARAMETER_DECLARATIONS)
    validate_parameter_groups(PARAMETER_GROUPS, specs)
    return specs


def declare_parameter(stack: Stack, spec: ParameterSpec) -> CfnParameter:
    """Create the ``CfnParameter`` described by ``spec``."""
    optional: dict[str, Any] = {}
    if spec.allowed_values is not None:
        optional["allowed_values"] = list(spec.allowed_values)
    if spec.allowed_pattern is not None:
        optional["allowed_pattern"] = spec.allowed_pattern

    return CfnParameter(
        stack,
        spec.name,
        type=spec.type,
        description=spec.description,
        default=spec.default,
        **optional,
    )


def declare_parameters(
    stack: Stack,
    specs: tuple[ParameterSpec, ...],
) -> ServerlessImageHandlerProps:
    """Declare every parameter on ``stack`` and bundle the references.

    Args:
        stack: Stack receiving the parameters
        specs: Validated parameter specs

    Returns:
        Immutable bundle forwarded to the image handler construct
    """
    parameters = {spec.name: declare_parameter(stack, spec) for spec in specs}

    logger.debug(
        "Declared template parameters",
        extra={"parameters": list(parameters)},
    )

    return ServerlessImageHandlerProps(
        cors_enabled_parameter=parameters[PARAM_CORS_ENABLED],
        cors_origin_parameter=parameters[PARAM_CORS_ORIGIN],
        source_buckets_parameter=parameters[PARAM_SOURCE_BUCKETS],
        deploy_demo_ui_parameter=parameters[PARAM_DEPLOY_DEMO_UI],
        log_retention_period_parameter=parameters[PARAM_LOG_RETENTION_PERIOD],
        auto_webp_parameter=parameters[PARAM_AUTO_WEBP],
    )
