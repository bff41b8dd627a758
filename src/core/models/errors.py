"""Custom exception classes for template synthesis and provisioning."""

from typing import Any, ClassVar

from core.utils.constants import (
    ERROR_CODE_CUSTOM_RESOURCE_FAILED,
    ERROR_CODE_DUPLICATE_PARAMETER,
    ERROR_CODE_INVALID_CONFIGURATION,
    ERROR_CODE_INVALID_PARAMETER_DECLARATION,
    ERROR_CODE_INVALID_PARAMETER_DEFAULT,
    ERROR_CODE_INVALID_PARAMETER_GROUPS,
    ERROR_CODE_INVALID_PARAMETER_VALUE,
    ERROR_CODE_MISSING_CHILD_OUTPUT,
    ERROR_CODE_SOURCE_BUCKET_CHECK_FAILED,
    ERROR_CODE_TEMPLATE_BUILD_FAILED,
    ERROR_CODE_UNSUPPORTED_CUSTOM_ACTION,
    ERROR_CODE_UNSUPPORTED_INTRINSIC,
)


class TemplateBuildError(Exception):
    """
    Base exception for all template errors.

    All custom errors must inherit from this class.
    Each subclass names its own ``default_error_code``; callers may still
    pass an explicit ``error_code``. Optional contextual information can be
    supplied via `details`.
    """

    default_error_code: ClassVar[str] = ERROR_CODE_TEMPLATE_BUILD_FAILED

    message: str
    error_code: str
    details: dict[str, Any]

    def __init__(
        self,
        *,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}

        super().__init__(self.message)


class ConfigurationError(TemplateBuildError):
    """Raised when the build context is missing or invalid."""

    default_error_code = ERROR_CODE_INVALID_CONFIGURATION


class ParameterDeclarationError(TemplateBuildError):
    """Raised when a parameter declaration is malformed."""

    default_error_code = ERROR_CODE_INVALID_PARAMETER_DECLARATION


class DuplicateParameterError(ParameterDeclarationError):
    """Raised when two parameters share a name."""

    default_error_code = ERROR_CODE_DUPLICATE_PARAMETER


class InvalidParameterDefaultError(ParameterDeclarationError):
    """Raised when a default value violates its own parameter constraint."""

    default_error_code = ERROR_CODE_INVALID_PARAMETER_DEFAULT


class ParameterGroupError(ParameterDeclarationError):
    """Raised when interface groups do not partition the parameter set."""

    default_error_code = ERROR_CODE_INVALID_PARAMETER_GROUPS


class MissingChildOutputError(TemplateBuildError):
    """Raised when the image handler construct does not expose a required handle."""

    default_error_code = ERROR_CODE_MISSING_CHILD_OUTPUT


class ParameterValueError(TemplateBuildError):
    """Raised when a supplied parameter value fails its constraint."""

    default_error_code = ERROR_CODE_INVALID_PARAMETER_VALUE


class UnsupportedIntrinsicError(TemplateBuildError):
    """Raised when the template preview meets a construct it cannot evaluate."""

    default_error_code = ERROR_CODE_UNSUPPORTED_INTRINSIC


class CustomResourceError(TemplateBuildError):
    """Raised when a custom resource action fails during provisioning."""

    default_error_code = ERROR_CODE_CUSTOM_RESOURCE_FAILED


class SourceBucketCheckError(CustomResourceError):
    """Raised when a configured source bucket cannot be reached."""

    default_error_code = ERROR_CODE_SOURCE_BUCKET_CHECK_FAILED


class UnsupportedActionError(CustomResourceError):
    """Raised when a custom resource requests an unknown action."""

    default_error_code = ERROR_CODE_UNSUPPORTED_CUSTOM_ACTION
