"""
Pytest configuration and fixtures for the template tests.
Provides AWS mocking, S3 fixtures and a synthesized template.
"""

import json
import os
from collections.abc import Callable
from typing import Any

import boto3
import pytest
from aws_cdk import App
from aws_cdk.assertions import Template
from moto import mock_aws

from core.models.context import BuildContext
from stacks.constructs_stack import create_stack

os.environ.setdefault("AWS_REGION", "us-east-1")
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("AWS_SECURITY_TOKEN", "testing")
os.environ.setdefault("AWS_SESSION_TOKEN", "testing")

SOURCE_BUCKET = "image-source-bucket"
DEMO_BUCKET = "demo-ui-bucket"
CODE_BUCKET = "solutions-us-east-1"


@pytest.fixture(scope="session")
def build_context() -> BuildContext:
    return BuildContext(version="v5.0.0")


def _synthesize(build_context: BuildContext) -> Template:
    """Synthesize a fresh stack in its own app."""
    app = App()
    stack = create_stack(app, build_context)
    return Template.from_stack(stack)


@pytest.fixture(scope="session")
def synthesize() -> Callable[[BuildContext], Template]:
    return _synthesize


@pytest.fixture(scope="session")
def template(build_context) -> Template:
    return _synthesize(build_context)


@pytest.fixture(scope="session")
def template_json(template) -> dict[str, Any]:
    result: dict[str, Any] = template.to_json()
    return result


@pytest.fixture(scope="function")
def aws_mock(monkeypatch):
    monkeypatch.delenv("AWS_ENDPOINT_URL", raising=False)
    with mock_aws():
        yield


@pytest.fixture(scope="function")
def s3_client(aws_mock):
    """S3 client for bucket operations."""
    return boto3.client("s3", region_name=os.getenv("AWS_REGION"))


@pytest.fixture(scope="function")
def s3_buckets(s3_client):
    """Create the source, demo and source-code buckets."""
    for bucket in (SOURCE_BUCKET, DEMO_BUCKET, CODE_BUCKET):
        s3_client.create_bucket(Bucket=bucket)

    yield s3_client


@pytest.fixture
def s3_put_object(s3_client) -> Callable[[str, str, bytes], dict[str, Any]]:
    """
    Helper to upload an object to S3.

    Usage:
        s3_put_object("bucket", "key", b"data")
    """

    def _put(bucket: str, key: str, body: bytes) -> dict[str, Any]:
        response: dict[str, Any] = s3_client.put_object(Bucket=bucket, Key=key, Body=body)
        return response

    return _put


@pytest.fixture
def s3_get_object(s3_client) -> Callable[[str, str], dict[str, Any]]:
    """
    Helper to get an object from S3, body already read.

    Usage:
        obj = s3_get_object("bucket", "key")
        obj["Body"], obj["ContentType"]
    """

    def _get(bucket: str, key: str) -> dict[str, Any]:
        response: dict[str, Any] = s3_client.get_object(Bucket=bucket, Key=key)
        response["Body"] = response["Body"].read()
        return response

    return _get


@pytest.fixture
def demo_ui_source(s3_buckets, s3_put_object) -> list[str]:
    """Demo UI manifest and files in the source code bucket."""
    files = ["index.html", "scripts.js", "style.css"]
    prefix = "serverless-image-handler/v5.0.0"

    s3_put_object(
        CODE_BUCKET,
        f"{prefix}/demo-ui-manifest.json",
        json.dumps({"files": files}).encode(),
    )
    for name in files:
        s3_put_object(CODE_BUCKET, f"{prefix}/demo-ui/{name}", f"content of {name}".encode())

    return files


@pytest.fixture
def lambda_context():
    from types import SimpleNamespace

    return SimpleNamespace(
        aws_request_id="test-request-id",
        function_name="test-custom-resource",
        memory_limit_in_mb=128,
        invoked_function_arn="arn:aws:lambda:us-east-1:000000000000:function:test",
    )


@pytest.fixture
def custom_resource_event() -> Callable[..., dict[str, Any]]:
    """
    Build a custom resource event as sent by the provider framework.

    Usage:
        event = custom_resource_event("Create", {"CustomAction": "createUuid"})
    """

    def _event(
        request_type: str,
        properties: dict[str, Any],
        *,
        physical_resource_id: str | None = None,
        logical_resource_id: str = "CustomResourceTest",
    ) -> dict[str, Any]:
        event: dict[str, Any] = {
            "RequestType": request_type,
            "RequestId": "req-1",
            "StackId": "arn:aws:cloudformation:us-east-1:123456789012:stack/test/guid",
            "LogicalResourceId": logical_resource_id,
            "ResourceType": "AWS::CloudFormation::CustomResource",
            "ResourceProperties": {"ServiceToken": "arn:aws:lambda:token", **properties},
        }
        if physical_resource_id is not None:
            event["PhysicalResourceId"] = physical_resource_id
        return event

    return _event
