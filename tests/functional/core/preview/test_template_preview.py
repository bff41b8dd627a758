"""
Unit tests for the offline template preview.
"""

from typing import Any

import pytest

from core.models.errors import (
    ParameterValueError,
    TemplateBuildError,
    UnsupportedIntrinsicError,
)
from core.preview.template_preview import TemplateEvaluator, preview_template


def small_template() -> dict[str, Any]:
    return {
        "Parameters": {
            "Enabled": {"Type": "String", "Default": "No", "AllowedValues": ["Yes", "No"]},
            "Origin": {"Type": "String", "Default": "*"},
            "Days": {"Type": "Number", "Default": "1", "AllowedValues": ["1", "7"]},
            "Buckets": {"Type": "String", "Default": "a,b", "AllowedPattern": ".+"},
        },
        "Mappings": {"Send": {"AnonymousUsage": {"Data": "Yes"}}},
        "Conditions": {
            "EnabledCondition": {"Fn::Equals": [{"Ref": "Enabled"}, "Yes"]},
            "DisabledCondition": {"Fn::Not": [{"Condition": "EnabledCondition"}]},
            "SendCondition": {
                "Fn::And": [
                    {"Fn::Equals": [{"Fn::FindInMap": ["Send", "AnonymousUsage", "Data"]}, "Yes"]},
                    {"Fn::Or": [{"Condition": "EnabledCondition"}, {"Fn::Equals": ["x", "x"]}]},
                ]
            },
        },
        "Outputs": {
            "Origin": {
                "Description": "Origin value",
                "Value": {"Ref": "Origin"},
                "Condition": "EnabledCondition",
            },
            "Endpoint": {
                "Value": {"Fn::Join": ["", ["https://", {"Fn::GetAtt": ["Dist", "DomainName"]}]]},
            },
            "Region": {"Value": {"Fn::Sub": "${AWS::Region}-${Origin}-${Dist.Arn}-${!Literal}"}},
            "FirstBucket": {
                "Value": {"Fn::Select": [0, {"Fn::Split": [",", {"Ref": "Buckets"}]}]},
            },
            "Mode": {"Value": {"Fn::If": ["EnabledCondition", "on", "off"]}},
            "Table": {"Value": {"Ref": "SomeResource"}},
        },
    }


class TestResolveParameters:
    def test_defaults(self) -> None:
        params = TemplateEvaluator(small_template()).resolve_parameters()

        assert params == {"Enabled": "No", "Origin": "*", "Days": "1", "Buckets": "a,b"}

    def test_overrides_are_stringified(self) -> None:
        params = TemplateEvaluator(small_template()).resolve_parameters({"Days": 7})

        assert params["Days"] == "7"

    def test_unknown_parameter(self) -> None:
        with pytest.raises(ParameterValueError) as exc:
            TemplateEvaluator(small_template()).resolve_parameters({"Nope": "x"})

        assert exc.value.details == {"unknown": ["Nope"]}

    def test_value_not_allowed(self) -> None:
        with pytest.raises(ParameterValueError) as exc:
            TemplateEvaluator(small_template()).resolve_parameters({"Enabled": "yes"})

        assert exc.value.details["parameter"] == "Enabled"

    def test_pattern_violation(self) -> None:
        with pytest.raises(ParameterValueError):
            TemplateEvaluator(small_template()).resolve_parameters({"Buckets": ""})

    def test_number_type(self) -> None:
        template = small_template()
        del template["Parameters"]["Days"]["AllowedValues"]

        with pytest.raises(ParameterValueError):
            TemplateEvaluator(template).resolve_parameters({"Days": "seven"})

    def test_missing_value(self) -> None:
        template = small_template()
        del template["Parameters"]["Origin"]["Default"]

        with pytest.raises(ParameterValueError) as exc:
            TemplateEvaluator(template).resolve_parameters()

        assert exc.value.error_code == "INVALID_PARAMETER_VALUE"


class TestEvaluateConditions:
    def test_conditions(self) -> None:
        evaluator = TemplateEvaluator(small_template())
        params = evaluator.resolve_parameters({"Enabled": "Yes"})

        assert evaluator.evaluate_conditions(params) == {
            "EnabledCondition": True,
            "DisabledCondition": False,
            "SendCondition": True,
        }

    def test_cycle_detected(self) -> None:
        template = small_template()
        template["Conditions"] = {
            "A": {"Fn::Not": [{"Condition": "B"}]},
            "B": {"Fn::Not": [{"Condition": "A"}]},
        }

        with pytest.raises(TemplateBuildError) as exc:
            preview_template(template)

        assert exc.value.error_code == "UNSUPPORTED_INTRINSIC"

    def test_undeclared_condition(self) -> None:
        template = small_template()
        template["Conditions"] = {"A": {"Condition": "Missing"}}

        with pytest.raises(TemplateBuildError) as exc:
            preview_template(template)

        assert exc.value.details == {"condition": "Missing"}

    def test_unsupported_expression(self) -> None:
        template = small_template()
        template["Conditions"] = {"A": {"Fn::Contains": [["a"], "a"]}}

        with pytest.raises(TemplateBuildError) as exc:
            preview_template(template)

        assert exc.value.error_code == "UNSUPPORTED_INTRINSIC"


class TestPreview:
    def test_inactive_output_has_no_value(self) -> None:
        preview = preview_template(small_template())

        origin = preview.outputs["Origin"]
        assert origin.active is False
        assert origin.value is None
        assert origin.condition == "EnabledCondition"
        assert origin.description == "Origin value"
        assert "Origin" not in preview.active_outputs()

    def test_active_output(self) -> None:
        preview = preview_template(small_template(), {"Enabled": "Yes", "Origin": "https://a.com"})

        assert preview.active_outputs()["Origin"] == "https://a.com"
        assert preview.active_outputs()["Mode"] == "on"

    def test_intrinsics(self) -> None:
        outputs = preview_template(small_template(), {"Origin": "o"}).active_outputs()

        assert outputs["Endpoint"] == "https://<Dist.DomainName>"
        assert outputs["Region"] == "us-east-1-o-<Dist.Arn>-${Literal}"
        assert outputs["FirstBucket"] == "a"
        assert outputs["Mode"] == "off"
        assert outputs["Table"] == "<SomeResource>"

    def test_pseudo_parameter_override(self) -> None:
        preview = preview_template(
            small_template(),
            {"Origin": "o"},
            pseudo_parameters={"AWS::Region": "eu-west-1"},
        )

        assert preview.outputs["Region"].value.startswith("eu-west-1-")

    def test_if_on_undeclared_condition(self) -> None:
        template = {"Parameters": {}, "Outputs": {"X": {"Value": {"Fn::If": ["Nope", "a", "b"]}}}}

        with pytest.raises(UnsupportedIntrinsicError) as exc:
            preview_template(template)

        assert exc.value.details == {"function": "Fn::If", "condition": "Nope"}

    def test_find_in_map_without_mappings(self) -> None:
        template = {
            "Parameters": {},
            "Outputs": {"X": {"Value": {"Fn::FindInMap": ["Send", "AnonymousUsage", "Data"]}}},
        }

        with pytest.raises(UnsupportedIntrinsicError) as exc:
            preview_template(template)

        assert exc.value.details["keys"] == ["Send", "AnonymousUsage", "Data"]

    def test_find_in_map_unknown_key(self) -> None:
        template = small_template()
        template["Outputs"]["Bad"] = {"Value": {"Fn::FindInMap": ["Send", "AnonymousUsage", "Nope"]}}

        with pytest.raises(UnsupportedIntrinsicError):
            preview_template(template)

    def test_unsupported_intrinsic_in_output(self) -> None:
        template = small_template()
        template["Outputs"]["Bad"] = {"Value": {"Fn::Base64": "x"}}

        with pytest.raises(TemplateBuildError) as exc:
            preview_template(template)

        assert exc.value.details == {"function": "Fn::Base64"}
