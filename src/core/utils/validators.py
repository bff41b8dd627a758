"""Declaration validation utilities."""

from collections import Counter
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from core.models.errors import (
    DuplicateParameterError,
    InvalidParameterDefaultError,
    ParameterDeclarationError,
    ParameterGroupError,
)
from core.models.parameters import (
    INVALID_DEFAULT_ERROR_TYPE,
    ParameterGroupSpec,
    ParameterSpec,
)


def sanitize_validation_errors(errors: list[dict[str, Any]]) -> list[dict[str, str]]:
    """Sanitize Pydantic validation errors for build error details.

    Removes internal fields like:
    - url
    - ctx
    - input
    """
    sanitized: list[dict[str, str]] = []

    for err in errors:
        field = ".".join(str(x) for x in err.get("loc", [])) or "declaration"
        raw_msg = err.get("msg", "Invalid value")

        # Remove noisy prefixes
        msg = raw_msg.replace("Value error,", "").strip()

        if "field required" in msg.lower():
            msg = "This field is required"

        sanitized.append(
            {
                "field": field,
                "message": msg,
            }
        )

    return sanitized


def build_parameter_specs(
    declarations: Iterable[Mapping[str, Any]],
) -> tuple[ParameterSpec, ...]:
    """Validate raw parameter declarations and return them as models.

    Args:
        declarations: Ordered parameter declarations

    Returns:
        Parameter specs in declaration order

    Raises:
        DuplicateParameterError: If two declarations share a name
        InvalidParameterDefaultError: If a default violates its constraint
        ParameterDeclarationError: If a declaration is otherwise malformed
    """
    declarations = list(declarations)

    names = [str(decl.get("name")) for decl in declarations]
    duplicates = sorted(name for name, count in Counter(names).items() if count > 1)
    if duplicates:
        raise DuplicateParameterError(
            message="Parameter names must be unique",
            details={"duplicates": duplicates},
        )

    specs: list[ParameterSpec] = []
    for decl in declarations:
        try:
            specs.append(ParameterSpec(**decl))
        except ValidationError as exc:
            errors = exc.errors()
            details = {
                "parameter": decl.get("name"),
                "errors": sanitize_validation_errors(errors),
            }
            if any(err.get("type") == INVALID_DEFAULT_ERROR_TYPE for err in errors):
                raise InvalidParameterDefaultError(
                    message=f"Invalid default for parameter '{decl.get('name')}'",
                    details=details,
                ) from exc
            raise ParameterDeclarationError(
                message=f"Malformed declaration for parameter '{decl.get('name')}'",
                details=details,
            ) from exc

    return tuple(specs)


def validate_parameter_groups(
    groups: Iterable[ParameterGroupSpec],
    specs: Iterable[ParameterSpec],
) -> None:
    """Check that the groups partition the declared parameters exactly.

    Raises:
        ParameterGroupError: On unknown, missing or repeated parameters
    """
    declared = [spec.name for spec in specs]
    grouped = [name for group in groups for name in group.parameters]

    repeated = sorted(name for name, count in Counter(grouped).items() if count > 1)
    unknown = sorted(set(grouped) - set(declared))
    missing = [name for name in declared if name not in grouped]

    if repeated or unknown or missing:
        raise ParameterGroupError(
            message="Parameter groups must list every parameter exactly once",
            details={
                "repeated": repeated,
                "unknown": unknown,
                "missing": missing,
            },
        )
