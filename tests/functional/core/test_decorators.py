from types import SimpleNamespace
from typing import Any

import pytest

from core.models.errors import CustomResourceError, SourceBucketCheckError
from core.utils.decorators import JsonDict, custom_resource_handler

CONTEXT = SimpleNamespace(function_name="test-fn")


def event(request_type: str, **extra: Any) -> JsonDict:
    return {
        "RequestType": request_type,
        "RequestId": "req-1",
        "LogicalResourceId": "Res",
        "ResourceProperties": {"CustomAction": "createUuid"},
        **extra,
    }


def test_success_returns_handler_result() -> None:
    @custom_resource_handler
    def handler(event: JsonDict, context: Any) -> JsonDict:
        return {"PhysicalResourceId": "id-1", "Data": {"ok": True}}

    assert handler(event("Create"), CONTEXT) == {
        "PhysicalResourceId": "id-1",
        "Data": {"ok": True},
    }


def test_delete_is_acknowledged_without_calling_handler() -> None:
    calls: list[JsonDict] = []

    @custom_resource_handler
    def handler(event: JsonDict, context: Any) -> JsonDict:
        calls.append(event)
        return {}

    resp = handler(event("Delete", PhysicalResourceId="phys-1"), CONTEXT)

    assert resp == {"PhysicalResourceId": "phys-1"}
    assert calls == []


def test_known_error_is_reraised() -> None:
    @custom_resource_handler
    def handler(event: JsonDict, context: Any) -> JsonDict:
        raise SourceBucketCheckError(message="Could not find bucket: x")

    with pytest.raises(SourceBucketCheckError) as exc:
        handler(event("Create"), CONTEXT)

    assert str(exc.value) == "Could not find bucket: x"


def test_unexpected_error_is_wrapped() -> None:
    @custom_resource_handler
    def handler(event: JsonDict, context: Any) -> JsonDict:
        raise KeyError("boom")

    with pytest.raises(CustomResourceError) as exc:
        handler(event("Update"), CONTEXT)

    assert exc.value.error_code == "CUSTOM_RESOURCE_FAILED"
    assert exc.value.details == {"error_type": "KeyError"}
    assert isinstance(exc.value.__cause__, KeyError)


def test_preserves_function_name() -> None:
    @custom_resource_handler
    def my_handler(event: JsonDict, context: Any) -> JsonDict:
        return {}

    assert my_handler.__name__ == "my_handler"
