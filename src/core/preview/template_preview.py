"""
Offline preview of a synthesized CloudFormation template.

Given parameter overrides, the preview resolves every parameter, evaluates
the template conditions and reports which outputs a deployment would
expose and with what value. Attributes of resources that only exist after
deployment are rendered as ``<LogicalId.Attribute>`` placeholders.
"""

import re
from collections.abc import Mapping
from typing import Any

from aws_lambda_powertools import Logger
from pydantic import BaseModel, ConfigDict, Field

from core.models.errors import ParameterValueError, UnsupportedIntrinsicError
from core.utils.constants import PARAMETER_TYPE_NUMBER

logger = Logger(UTC=True)

Template = Mapping[str, Any]

DEFAULT_PSEUDO_PARAMETERS: Mapping[str, str] = {
    "AWS::AccountId": "123456789012",
    "AWS::Partition": "aws",
    "AWS::Region": "us-east-1",
    "AWS::StackName": "ServerlessImageHandlerStack",
    "AWS::URLSuffix": "amazonaws.com",
}

_SUB_VARIABLE = re.compile(r"\$\{([^}]+)\}")


class PreviewOutput(BaseModel):
    """A single stack output as it would appear after deployment."""

    model_config = ConfigDict(frozen=True)

    logical_id: str
    value: Any = None
    description: str | None = None
    condition: str | None = None
    active: bool = True


class TemplatePreview(BaseModel):
    """Resolved parameters, condition results and outputs of a template."""

    model_config = ConfigDict(frozen=True)

    parameters: dict[str, str] = Field(default_factory=dict)
    conditions: dict[str, bool] = Field(default_factory=dict)
    outputs: dict[str, PreviewOutput] = Field(default_factory=dict)

    def active_outputs(self) -> dict[str, Any]:
        """Return the values of outputs whose condition holds."""
        return {key: out.value for key, out in self.outputs.items() if out.active}


class TemplateEvaluator:
    """Evaluates parameters, conditions and output values of one template."""

    def __init__(
        self,
        template: Template,
        *,
        pseudo_parameters: Mapping[str, str] | None = None,
    ) -> None:
        self._template = template
        self._pseudo = dict(DEFAULT_PSEUDO_PARAMETERS)
        if pseudo_parameters:
            self._pseudo.update(pseudo_parameters)

    @property
    def parameter_declarations(self) -> Mapping[str, Mapping[str, Any]]:
        return self._template.get("Parameters", {})

    def resolve_parameters(self, overrides: Mapping[str, Any] | None = None) -> dict[str, str]:
        """Merge overrides with defaults and check every constraint.

        Raises:
            ParameterValueError: On unknown names, missing values or
                values violating AllowedValues, AllowedPattern or Number type
        """
        overrides = dict(overrides or {})
        declarations = self.parameter_declarations

        unknown = sorted(set(overrides) - set(declarations))
        if unknown:
            raise ParameterValueError(
                message="Unknown parameters supplied",
                details={"unknown": unknown},
            )

        resolved: dict[str, str] = {}
        for name, declaration in declarations.items():
            if name in overrides:
                value = str(overrides[name])
            elif "Default" in declaration:
                value = str(declaration["Default"])
            else:
                raise ParameterValueError(
                    message=f"Parameter '{name}' has no value and no default",
                    details={"parameter": name},
                )

            self._check_value(name, declaration, value)
            resolved[name] = value

        return resolved

    @staticmethod
    def _check_value(name: str, declaration: Mapping[str, Any], value: str) -> None:
        if declaration.get("Type") == PARAMETER_TYPE_NUMBER:
            try:
                float(value)
            except ValueError:
                raise ParameterValueError(
                    message=f"Parameter '{name}' must be a number",
                    details={"parameter": name, "value": value},
                ) from None

        allowed = declaration.get("AllowedValues")
        if allowed is not None and value not in [str(item) for item in allowed]:
            raise ParameterValueError(
                message=f"Parameter '{name}' must be one of the allowed values",
                details={"parameter": name, "value": value, "allowed_values": list(allowed)},
            )

        pattern = declaration.get("AllowedPattern")
        if pattern is not None and not re.fullmatch(pattern, value):
            raise ParameterValueError(
                message=f"Parameter '{name}' must match pattern {pattern}",
                details={"parameter": name, "value": value},
            )

    def evaluate_conditions(self, parameters: Mapping[str, str]) -> dict[str, bool]:
        """Evaluate every condition of the template."""
        declared: Mapping[str, Any] = self._template.get("Conditions", {})
        results: dict[str, bool] = {}

        def evaluate(name: str, visiting: tuple[str, ...]) -> bool:
            if name in results:
                return results[name]
            if name not in declared:
                raise UnsupportedIntrinsicError(
                    message=f"Condition '{name}' is not declared",
                    details={"condition": name},
                )
            if name in visiting:
                raise UnsupportedIntrinsicError(
                    message=f"Condition '{name}' refers to itself",
                    details={"cycle": [*visiting, name]},
                )
            results[name] = expression(declared[name], (*visiting, name))
            return results[name]

        def expression(expr: Any, visiting: tuple[str, ...]) -> bool:
            if isinstance(expr, Mapping) and len(expr) == 1:
                fn, args = next(iter(expr.items()))
                if fn == "Condition":
                    return evaluate(args, visiting)
                if fn == "Fn::Equals":
                    left, right = (self.resolve_value(arg, parameters, results) for arg in args)
                    return str(left) == str(right)
                if fn == "Fn::Not":
                    return not expression(args[0], visiting)
                if fn == "Fn::And":
                    return all(expression(arg, visiting) for arg in args)
                if fn == "Fn::Or":
                    return any(expression(arg, visiting) for arg in args)
            raise UnsupportedIntrinsicError(
                message="Unsupported condition expression",
                details={"expression": repr(expr)},
            )

        for name in declared:
            evaluate(name, ())

        return results

    def resolve_value(
        self,
        value: Any,
        parameters: Mapping[str, str],
        conditions: Mapping[str, bool],
    ) -> Any:
        """Resolve intrinsic functions in ``value``."""
        if isinstance(value, list):
            return [self.resolve_value(item, parameters, conditions) for item in value]

        if not isinstance(value, Mapping):
            return value

        if len(value) != 1:
            return {key: self.resolve_value(item, parameters, conditions) for key, item in value.items()}

        fn, args = next(iter(value.items()))

        if fn == "Ref":
            return self._ref(args, parameters)

        if fn == "Fn::GetAtt":
            resource, attribute = args.split(".", 1) if isinstance(args, str) else args
            return f"<{resource}.{attribute}>"

        if fn == "Fn::Join":
            delimiter, items = args
            parts = self.resolve_value(items, parameters, conditions)
            return delimiter.join(str(part) for part in parts)

        if fn == "Fn::Sub":
            return self._sub(args, parameters, conditions)

        if fn == "Fn::FindInMap":
            return self._find_in_map(self.resolve_value(args, parameters, conditions))

        if fn == "Fn::If":
            condition, when_true, when_false = args
            if condition not in conditions:
                raise UnsupportedIntrinsicError(
                    message=f"Fn::If refers to undeclared condition '{condition}'",
                    details={"function": fn, "condition": condition},
                )
            chosen = when_true if conditions[condition] else when_false
            return self.resolve_value(chosen, parameters, conditions)

        if fn == "Fn::Split":
            delimiter, source = args
            return str(self.resolve_value(source, parameters, conditions)).split(delimiter)

        if fn == "Fn::Select":
            index, items = args
            return self.resolve_value(items, parameters, conditions)[int(index)]

        if fn.startswith("Fn::") or fn == "Condition":
            raise UnsupportedIntrinsicError(
                message=f"Unsupported intrinsic function {fn}",
                details={"function": fn},
            )

        return {fn: self.resolve_value(args, parameters, conditions)}

    def _find_in_map(self, keys: list[Any]) -> Any:
        map_name, first, second = keys
        value = self._template.get("Mappings", {}).get(map_name, {}).get(first, {}).get(second)
        if value is None:
            raise UnsupportedIntrinsicError(
                message=f"Fn::FindInMap could not resolve {map_name}.{first}.{second}",
                details={"function": "Fn::FindInMap", "keys": [map_name, first, second]},
            )
        return value

    def _ref(self, name: str, parameters: Mapping[str, str]) -> str:
        if name in parameters:
            return parameters[name]
        if name in self._pseudo:
            return self._pseudo[name]
        return f"<{name}>"

    def _sub(
        self,
        args: Any,
        parameters: Mapping[str, str],
        conditions: Mapping[str, bool],
    ) -> str:
        if isinstance(args, str):
            text, variables = args, {}
        else:
            text, raw_variables = args
            variables = {
                key: self.resolve_value(item, parameters, conditions)
                for key, item in raw_variables.items()
            }

        def replace(match: re.Match[str]) -> str:
            token = match.group(1)
            if token.startswith("!"):
                return "${" + token[1:] + "}"
            if token in variables:
                return str(variables[token])
            if "." in token:
                resource, attribute = token.split(".", 1)
                return f"<{resource}.{attribute}>"
            return self._ref(token, parameters)

        return _SUB_VARIABLE.sub(replace, text)

    def preview(self, overrides: Mapping[str, Any] | None = None) -> TemplatePreview:
        """Resolve parameters, conditions and outputs in one pass."""
        parameters = self.resolve_parameters(overrides)
        conditions = self.evaluate_conditions(parameters)

        outputs: dict[str, PreviewOutput] = {}
        for logical_id, declaration in self._template.get("Outputs", {}).items():
            condition = declaration.get("Condition")
            active = conditions[condition] if condition else True
            outputs[logical_id] = PreviewOutput(
                logical_id=logical_id,
                value=(
                    self.resolve_value(declaration.get("Value"), parameters, conditions)
                    if active
                    else None
                ),
                description=declaration.get("Description"),
                condition=condition,
                active=active,
            )

        logger.debug(
            "Template preview computed",
            extra={
                "conditions": conditions,
                "active_outputs": sorted(k for k, o in outputs.items() if o.active),
            },
        )

        return TemplatePreview(parameters=parameters, conditions=conditions, outputs=outputs)


def preview_template(
    template: Template,
    overrides: Mapping[str, Any] | None = None,
    *,
    pseudo_parameters: Mapping[str, str] | None = None,
) -> TemplatePreview:
    """Preview the outputs ``template`` would expose for ``overrides``."""
    return TemplateEvaluator(template, pseudo_parameters=pseudo_parameters).preview(overrides)
