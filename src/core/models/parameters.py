"""Parameter declaration models.

A ``ParameterSpec`` is the build-time description of one CloudFormation
parameter. Its default value is checked against its own constraint when
the model is created, so a malformed declaration never reaches the stack.
"""

import re
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_core import PydanticCustomError

from core.utils.constants import PARAMETER_TYPE_NUMBER, PARAMETER_TYPE_STRING

INVALID_DEFAULT_ERROR_TYPE = "invalid_default"


class ParameterSpec(BaseModel):
    """Typed declaration of a single template parameter."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    name: str = Field(..., min_length=1, pattern=r"^[A-Za-z0-9]+$", description="Logical ID")
    type: Literal["String", "Number"] = Field(..., description="CloudFormation parameter type")
    description: str = Field(..., min_length=1, description="Text shown to the deployer")
    default: str = Field(..., description="Value used when the deployer supplies none")
    allowed_values: tuple[str, ...] | None = Field(None, min_length=1)
    allowed_pattern: str | None = Field(None, min_length=1)

    @model_validator(mode="after")
    def check_default(self) -> "ParameterSpec":
        """Ensure the default satisfies the declared constraint."""
        if self.type == PARAMETER_TYPE_NUMBER:
            try:
                float(self.default)
            except ValueError:
                raise PydanticCustomError(
                    INVALID_DEFAULT_ERROR_TYPE,
                    "Default '{default}' is not a number",
                    {"default": self.default},
                ) from None

        if self.allowed_values is not None and self.default not in self.allowed_values:
            raise PydanticCustomError(
                INVALID_DEFAULT_ERROR_TYPE,
                "Default '{default}' is not one of the allowed values",
                {"default": self.default},
            )

        if self.allowed_pattern is not None and not re.fullmatch(
            self.allowed_pattern, self.default
        ):
            raise PydanticCustomError(
                INVALID_DEFAULT_ERROR_TYPE,
                "Default '{default}' does not match pattern '{pattern}'",
                {"default": self.default, "pattern": self.allowed_pattern},
            )

        return self

    @property
    def is_string(self) -> bool:
        return self.type == PARAMETER_TYPE_STRING

    def accepts(self, value: str) -> bool:
        """Return True when ``value`` satisfies this parameter's constraint."""
        if self.allowed_values is not None and value not in self.allowed_values:
            return False
        if self.allowed_pattern is not None and not re.fullmatch(self.allowed_pattern, value):
            return False
        return True


class ParameterGroupSpec(BaseModel):
    """Labelled, ordered group of parameters shown together in the console."""

    model_config = ConfigDict(frozen=True)

    label: str = Field(..., min_length=1)
    parameters: tuple[str, ...] = Field(..., min_length=1)

    def to_interface(self) -> dict[str, object]:
        """Render the group as an ``AWS::CloudFormation::Interface`` entry."""
        return {
            "Label": {"default": self.label},
            "Parameters": list(self.parameters),
        }
