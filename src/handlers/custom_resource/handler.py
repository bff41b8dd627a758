"""
Lambda handler backing the template's provisioning custom resources.
"""

from typing import Any, TypeVar

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.metrics import MetricUnit
from aws_lambda_powertools.utilities.typing import LambdaContext
from pydantic import BaseModel, ValidationError as PydanticValidationError

from core.models.errors import CustomResourceError, UnsupportedActionError
from core.utils.constants import (
    ACTION_CHECK_SOURCE_BUCKETS,
    ACTION_COPY_S3_ASSETS,
    ACTION_CREATE_UUID,
    ACTION_PUT_CONFIG_FILE,
    METRICS_NAMESPACE,
    REQUEST_TYPE_CREATE,
)
from core.utils.decorators import custom_resource_handler
from core.utils.validators import sanitize_validation_errors

from .models import (
    CheckSourceBucketsProperties,
    CopyS3AssetsProperties,
    CreateUuidProperties,
    CustomResourceRequest,
    CustomResourceResponse,
    PutConfigFileProperties,
)
from .service import CustomResourceService

logger = Logger(UTC=True)
tracer = Tracer()
metrics = Metrics(namespace=METRICS_NAMESPACE)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _parse(model: type[ModelT], data: dict[str, Any]) -> ModelT:
    try:
        return model(**data)
    except PydanticValidationError as exc:
        raise CustomResourceError(
            message="Invalid custom resource properties",
            details={"errors": sanitize_validation_errors(exc.errors())},
        ) from exc


def _physical_id(request: CustomResourceRequest) -> str:
    return request.physical_resource_id or request.logical_resource_id


def check_source_buckets(
    request: CustomResourceRequest, service: CustomResourceService
) -> CustomResourceResponse:
    props = _parse(CheckSourceBucketsProperties, request.resource_properties)
    service.check_source_buckets(bucket_names=props.source_buckets)
    return CustomResourceResponse(
        physical_resource_id=_physical_id(request),
        data={"Message": "Buckets validated."},
    )


def create_uuid(
    request: CustomResourceRequest, service: CustomResourceService
) -> CustomResourceResponse:
    _parse(CreateUuidProperties, request.resource_properties)

    # The UUID doubles as the physical ID so updates keep the same value
    if request.request_type == REQUEST_TYPE_CREATE or not request.physical_resource_id:
        value = service.create_uuid()
    else:
        value = request.physical_resource_id

    return CustomResourceResponse(physical_resource_id=value, data={"UUID": value})


def put_config_file(
    request: CustomResourceRequest, service: CustomResourceService
) -> CustomResourceResponse:
    props = _parse(PutConfigFileProperties, request.resource_properties)
    service.put_config_file(
        config_item=props.config_item,
        dest_bucket=props.dest_bucket,
        dest_key=props.dest_key,
    )
    return CustomResourceResponse(
        physical_resource_id=_physical_id(request),
        data={"Message": f"Config file {props.dest_key} written."},
    )


def copy_s3_assets(
    request: CustomResourceRequest, service: CustomResourceService
) -> CustomResourceResponse:
    props = _parse(CopyS3AssetsProperties, request.resource_properties)
    copied = service.copy_s3_assets(
        manifest_key=props.manifest_key,
        source_bucket=props.source_bucket,
        source_prefix=props.source_prefix,
        dest_bucket=props.dest_bucket,
    )
    return CustomResourceResponse(
        physical_resource_id=_physical_id(request),
        data={"Message": "Assets copied.", "Count": copied},
    )


ACTIONS = {
    ACTION_CHECK_SOURCE_BUCKETS: check_source_buckets,
    ACTION_CREATE_UUID: create_uuid,
    ACTION_PUT_CONFIG_FILE: put_config_file,
    ACTION_COPY_S3_ASSETS: copy_s3_assets,
}


@custom_resource_handler
@tracer.capture_lambda_handler
@metrics.log_metrics()
def handler(event: dict[str, Any], context: LambdaContext) -> dict[str, Any]:
    """
    Handle Create and Update requests from the CDK provider framework.

    Expected event structure:
    {
        "RequestType": "Create",
        "LogicalResourceId": "CustomResourceCheckSourceBuckets",
        "ResourceProperties": {"CustomAction": "checkSourceBuckets", ...}
    }

    Args:
        event: CloudFormation custom resource event
        context: AWS Lambda execution context

    Returns:
        Provider framework response with PhysicalResourceId and Data
    """
    request = _parse(CustomResourceRequest, event)

    action = ACTIONS.get(request.custom_action or "")
    if action is None:
        raise UnsupportedActionError(
            message=f"Unsupported custom action: {request.custom_action}",
            details={"supported": sorted(ACTIONS)},
        )

    response = action(request, CustomResourceService())
    metrics.add_dimension(name="CustomAction", value=request.custom_action or "")
    metrics.add_metric(name="CustomResourceActionCompleted", unit=MetricUnit.Count, value=1)

    logger.info(
        "Custom resource action completed",
        extra={
            "custom_action": request.custom_action,
            "physical_resource_id": response.physical_resource_id,
        },
    )
    return response.model_dump(by_alias=True)
