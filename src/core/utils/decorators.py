"""
Common decorators for CloudFormation custom resource Lambda handlers.
"""

from __future__ import annotations

from collections.abc import Callable
from functools import wraps
from typing import Any

from aws_lambda_powertools import Logger

from core.models.errors import CustomResourceError, TemplateBuildError
from core.utils.constants import REQUEST_TYPE_DELETE

logger = Logger(service="custom-resource-handler", UTC=True)

JsonDict = dict[str, Any]


def _request_summary(event: JsonDict, context: Any) -> JsonDict:
    """Fields identifying a custom resource request in every log line."""
    properties = event.get("ResourceProperties") or {}
    return {
        "request_id": event.get("RequestId"),
        "request_type": event.get("RequestType"),
        "logical_resource_id": event.get("LogicalResourceId"),
        "custom_action": properties.get("CustomAction"),
        "function_name": getattr(context, "function_name", None),
    }


def _log_failure(message: str, summary: JsonDict, exc: Exception, *, unexpected: bool) -> None:
    """
    Log a failed request.

    Known build errors are logged as warnings with their code and details.
    Anything else is logged with ``logger.exception`` so the traceback is kept.
    """
    extra = {**summary, "error": str(exc), "error_type": type(exc).__name__}

    if isinstance(exc, TemplateBuildError):
        extra["error_code"] = exc.error_code
        extra["details"] = exc.details

    if unexpected:
        logger.exception(message, extra=extra)
    else:
        logger.warning(message, extra=extra)


def custom_resource_handler(
    func: Callable[[JsonDict, Any], JsonDict],
) -> Callable[[JsonDict, Any], JsonDict]:
    """
    Decorator for custom resource handlers invoked by the CDK provider framework.

    Provides:
    - Delete requests acknowledged without calling the handler
    - Structured logging of every request
    - Known errors re-raised as-is, unexpected ones wrapped in CustomResourceError

    The provider framework reports a raised exception as a FAILED response,
    using its message as the reason shown in the stack events.

    Example:
        @custom_resource_handler
        def handler(event, context):
            return {"PhysicalResourceId": "id", "Data": {}}
    """

    @wraps(func)
    def wrapper(event: JsonDict, context: Any) -> JsonDict:
        summary = _request_summary(event, context)
        logger.info("Received custom resource request", extra=summary)

        # Resources created by this handler own nothing that must be removed
        if event.get("RequestType") == REQUEST_TYPE_DELETE:
            return {"PhysicalResourceId": event.get("PhysicalResourceId")}

        try:
            return func(event, context)

        except TemplateBuildError as exc:
            _log_failure("Custom resource action failed", summary, exc, unexpected=False)
            raise

        except Exception as exc:
            _log_failure(
                f"Unexpected error in {func.__name__}", summary, exc, unexpected=True
            )
            raise CustomResourceError(
                message="Custom resource action failed unexpectedly",
                details={"error_type": type(exc).__name__},
            ) from exc

    return wrapper
