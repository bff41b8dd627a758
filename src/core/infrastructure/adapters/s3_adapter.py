"""S3 access for the provisioning custom resources."""

from collections.abc import Mapping
import os
from typing import Any, Protocol

import boto3

from core.utils.constants import ENV_AWS_ENDPOINT_URL, ENV_AWS_REGION


class _Boto3S3Client(Protocol):
    """The boto3 S3 calls the adapter relies on."""

    def head_bucket(self, *, Bucket: str) -> Any: ...

    def get_object(self, *, Bucket: str, Key: str) -> Mapping[str, Any]: ...

    def put_object(self, *, Bucket: str, Key: str, Body: bytes, ContentType: str) -> Any: ...

    def copy_object(
        self,
        *,
        CopySource: Mapping[str, str],
        Bucket: str,
        Key: str,
        ContentType: str,
        MetadataDirective: str,
    ) -> Any: ...


class S3Adapter:
    """Bucket and object calls used while provisioning.

    botocore ``ClientError`` propagates unchanged; the custom resource
    service decides which failure it reports.
    """

    def __init__(self, client: _Boto3S3Client | None = None) -> None:
        if client is None:
            client = boto3.client(
                "s3",
                endpoint_url=os.getenv(ENV_AWS_ENDPOINT_URL),
                region_name=os.getenv(ENV_AWS_REGION),
            )
        self._client = client

    def head_bucket(self, *, bucket: str) -> None:
        """Raise ``ClientError`` unless ``bucket`` exists and is reachable."""
        self._client.head_bucket(Bucket=bucket)

    def get_object_body(self, *, bucket: str, key: str) -> bytes:
        response = self._client.get_object(Bucket=bucket, Key=key)
        body: bytes = response["Body"].read()
        return body

    def put_object(self, *, bucket: str, key: str, body: bytes, content_type: str) -> None:
        self._client.put_object(Bucket=bucket, Key=key, Body=body, ContentType=content_type)

    def copy_object(
        self,
        *,
        source_bucket: str,
        source_key: str,
        dest_bucket: str,
        dest_key: str,
        content_type: str,
    ) -> None:
        """Copy an object between buckets with a new ``Content-Type``.

        Metadata is replaced rather than copied so the destination object
        carries ``content_type`` instead of the source's type.
        """
        self._client.copy_object(
            CopySource={"Bucket": source_bucket, "Key": source_key},
            Bucket=dest_bucket,
            Key=dest_key,
            ContentType=content_type,
            MetadataDirective="REPLACE",
        )
