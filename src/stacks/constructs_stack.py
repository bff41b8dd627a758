"""Deployment template builder for the Serverless Image Handler.

The stack is assembled in a single pass:

1. Declare the six deployment parameters
2. Set the template description, format version and interface metadata
3. Declare the static ``Send`` mapping
4. Instantiate the image handler construct
5. Declare the stack outputs from the construct's typed result
"""

from typing import Any

from aws_cdk import (
    CfnMapping,
    CfnOutput,
    DefaultStackSynthesizer,
    Fn,
    Stack,
)
from aws_lambda_powertools import Logger
from constructs import Construct

from core.models.context import BuildContext
from core.utils.constants import (
    IMAGE_HANDLER_CONSTRUCT_ID,
    INTERFACE_METADATA_KEY,
    OUTPUT_API_ENDPOINT,
    OUTPUT_CORS_ENABLED,
    OUTPUT_CORS_ORIGIN,
    OUTPUT_DEMO_URL,
    OUTPUT_LOG_RETENTION_PERIOD,
    OUTPUT_SOURCE_BUCKETS,
    PARAM_CORS_ENABLED,
    PARAM_CORS_ORIGIN,
    PARAM_LOG_RETENTION_PERIOD,
    PARAM_SOURCE_BUCKETS,
    SEND_MAPPING,
    SEND_MAPPING_NAME,
    TEMPLATE_DESCRIPTION,
    TEMPLATE_FORMAT_VERSION,
    YES,
)
from stacks.serverless_image_handler import (
    ServerlessImageHandler,
    ServerlessImageHandlerOutputs,
    ServerlessImageHandlerProps,
)
from stacks.template_parameters import (
    PARAMETER_GROUPS,
    declare_parameters,
    load_parameter_specs,
)

logger = Logger(UTC=True)

DEFAULT_STACK_ID = "ServerlessImageHandlerStack"


class ServerlessImageHandlerStack(Stack):
    """CloudFormation stack wiring parameters, the image handler and outputs."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        build_context: BuildContext,
        **kwargs: Any,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        # Validate the whole catalogue before anything is declared
        specs = load_parameter_specs()
        props = declare_parameters(self, specs)

        self._set_template_metadata(build_context)
        send_anonymous_usage = self._declare_mappings()

        self.image_handler = ServerlessImageHandler(
            self,
            IMAGE_HANDLER_CONSTRUCT_ID,
            props,
            build_context=build_context,
            send_anonymous_usage=send_anonymous_usage,
        )

        self.outputs = self._declare_outputs(props, self.image_handler.outputs)

        logger.info(
            "Template assembled",
            extra={
                "stack": construct_id,
                "version": build_context.version,
                "parameters": [spec.name for spec in specs],
                "outputs": sorted(self.outputs),
            },
        )

    def _set_template_metadata(self, build_context: BuildContext) -> None:
        self.template_options.description = TEMPLATE_DESCRIPTION.format(
            version=build_context.version
        )
        self.template_options.template_format_version = TEMPLATE_FORMAT_VERSION
        self.template_options.metadata = {
            INTERFACE_METADATA_KEY: {
                "ParameterGroups": [group.to_interface() for group in PARAMETER_GROUPS],
            }
        }

    def _declare_mappings(self) -> bool:
        """Declare the ``Send`` mapping and return its resolved usage flag."""
        CfnMapping(
            self,
            SEND_MAPPING_NAME,
            mapping={key: dict(values) for key, values in SEND_MAPPING.items()},
        )
        return SEND_MAPPING["AnonymousUsage"]["Data"] == YES

    def _declare_outputs(
        self,
        props: ServerlessImageHandlerProps,
        handles: ServerlessImageHandlerOutputs,
    ) -> dict[str, CfnOutput]:
        outputs: dict[str, CfnOutput] = {}

        outputs[OUTPUT_API_ENDPOINT] = CfnOutput(
            self,
            OUTPUT_API_ENDPOINT,
            value=f"https://{handles.api_domain_name}",
            description="Link to API endpoint for sending image requests to.",
        )
        outputs[OUTPUT_DEMO_URL] = CfnOutput(
            self,
            OUTPUT_DEMO_URL,
            value=f"https://{handles.demo_domain_name}/index.html",
            description="Link to the demo user interface for the solution.",
            condition=handles.deploy_demo_ui_condition,
        )
        outputs[OUTPUT_SOURCE_BUCKETS] = CfnOutput(
            self,
            OUTPUT_SOURCE_BUCKETS,
            value=props.source_buckets_parameter.value_as_string,
            description="Amazon S3 bucket location containing original image files.",
        )
        outputs[OUTPUT_CORS_ENABLED] = CfnOutput(
            self,
            OUTPUT_CORS_ENABLED,
            value=props.cors_enabled_parameter.value_as_string,
            description=(
                "Indicates whether Cross-Origin Resource Sharing (CORS) has been "
                "enabled for the image handler API."
            ),
        )
        outputs[OUTPUT_CORS_ORIGIN] = CfnOutput(
            self,
            OUTPUT_CORS_ORIGIN,
            value=props.cors_origin_parameter.value_as_string,
            description=(
                "Origin value returned in the Access-Control-Allow-Origin header of "
                "image handler API responses."
            ),
            condition=handles.enable_cors_condition,
        )
        outputs[OUTPUT_LOG_RETENTION_PERIOD] = CfnOutput(
            self,
            OUTPUT_LOG_RETENTION_PERIOD,
            value=Fn.ref(PARAM_LOG_RETENTION_PERIOD),
            description="Number of days for event logs from Lambda to be retained in CloudWatch.",
        )

        # Externally visible names match the parameters they echo
        outputs[OUTPUT_SOURCE_BUCKETS].override_logical_id(PARAM_SOURCE_BUCKETS)
        outputs[OUTPUT_CORS_ENABLED].override_logical_id(PARAM_CORS_ENABLED)
        outputs[OUTPUT_CORS_ORIGIN].override_logical_id(PARAM_CORS_ORIGIN)
        outputs[OUTPUT_LOG_RETENTION_PERIOD].override_logical_id(PARAM_LOG_RETENTION_PERIOD)

        return outputs


def create_stack(
    scope: Construct,
    build_context: BuildContext,
    *,
    construct_id: str = DEFAULT_STACK_ID,
) -> ServerlessImageHandlerStack:
    """Create the stack with the synthesizer settings used for releases."""
    return ServerlessImageHandlerStack(
        scope,
        construct_id,
        build_context=build_context,
        synthesizer=DefaultStackSynthesizer(generate_bootstrap_version_rule=False),
        analytics_reporting=False,
    )
