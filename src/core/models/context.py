"""Build context model."""

import os
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from core.models.errors import ConfigurationError
from core.utils.constants import (
    DEFAULT_SOLUTION_NAME,
    DEFAULT_SOURCE_CODE_BUCKET,
    ENV_SOLUTION_NAME,
    ENV_SOURCE_CODE_BUCKET,
    ENV_VERSION,
    IMAGE_HANDLER_BUNDLE,
)
from core.utils.validators import sanitize_validation_errors


class BuildContext(BaseModel):
    """Explicit inputs to a single template synthesis."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    version: str = Field(..., min_length=1, description="Solution version, e.g. v5.0.0")
    source_code_bucket: str = Field(
        DEFAULT_SOURCE_CODE_BUCKET,
        min_length=3,
        description="Bucket name prefix holding the Lambda bundles (region is appended)",
    )
    solution_name: str = Field(
        DEFAULT_SOLUTION_NAME,
        min_length=1,
        description="Key prefix of the solution inside the source code bucket",
    )

    @property
    def source_code_prefix(self) -> str:
        return f"{self.solution_name}/{self.version}"

    @property
    def image_handler_key(self) -> str:
        return f"{self.source_code_prefix}/{IMAGE_HANDLER_BUNDLE}"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "BuildContext":
        """Load the build context from environment variables.

        Args:
            environ: Mapping to read from, defaults to ``os.environ``

        Returns:
            Validated build context

        Raises:
            ConfigurationError: If a variable is missing or invalid
        """
        env = os.environ if environ is None else environ

        data: dict[str, str] = {}
        if ENV_VERSION in env:
            data["version"] = env[ENV_VERSION]
        if env.get(ENV_SOURCE_CODE_BUCKET):
            data["source_code_bucket"] = env[ENV_SOURCE_CODE_BUCKET]
        if env.get(ENV_SOLUTION_NAME):
            data["solution_name"] = env[ENV_SOLUTION_NAME]

        try:
            return cls(**data)
        except ValidationError as exc:
            raise ConfigurationError(
                message="Invalid build configuration",
                details={"errors": sanitize_validation_errors(exc.errors())},
            ) from exc
