"""Pydantic models for custom resource requests and responses."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from core.utils.constants import (
    ACTION_CHECK_SOURCE_BUCKETS,
    ACTION_COPY_S3_ASSETS,
    ACTION_CREATE_UUID,
    ACTION_PUT_CONFIG_FILE,
)


class CustomResourceRequest(BaseModel):
    """Subset of the CloudFormation custom resource event used by the handler."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    request_type: Literal["Create", "Update", "Delete"] = Field(..., alias="RequestType")
    logical_resource_id: str = Field(..., alias="LogicalResourceId")
    physical_resource_id: str | None = Field(None, alias="PhysicalResourceId")
    resource_properties: dict[str, Any] = Field(default_factory=dict, alias="ResourceProperties")

    @property
    def custom_action(self) -> str | None:
        action = self.resource_properties.get("CustomAction")
        return str(action) if action is not None else None


class CheckSourceBucketsProperties(BaseModel):
    """Properties of the checkSourceBuckets action."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    custom_action: Literal["checkSourceBuckets"] = Field(
        ACTION_CHECK_SOURCE_BUCKETS, alias="CustomAction"
    )
    source_buckets: list[str] = Field(..., min_length=1, alias="SourceBuckets")

    @field_validator("source_buckets", mode="before")
    @classmethod
    def split_buckets(cls, value: Any) -> list[str]:
        """
        Normalize the comma-separated bucket list.

        Whitespace is stripped and empty entries dropped, so
        "a, b,,c" yields ["a", "b", "c"].
        """
        if isinstance(value, str):
            return [bucket.strip() for bucket in value.split(",") if bucket.strip()]
        if isinstance(value, list):
            return [str(bucket).strip() for bucket in value if str(bucket).strip()]
        raise ValueError("SourceBuckets must be a comma-separated string")


class CreateUuidProperties(BaseModel):
    """Properties of the createUuid action."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    custom_action: Literal["createUuid"] = Field(ACTION_CREATE_UUID, alias="CustomAction")


class PutConfigFileProperties(BaseModel):
    """Properties of the putConfigFile action."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    custom_action: Literal["putConfigFile"] = Field(ACTION_PUT_CONFIG_FILE, alias="CustomAction")
    config_item: dict[str, str] = Field(..., min_length=1, alias="ConfigItem")
    dest_bucket: str = Field(..., min_length=3, alias="DestS3Bucket")
    dest_key: str = Field(..., min_length=1, alias="DestS3key")


class CopyS3AssetsProperties(BaseModel):
    """Properties of the copyS3assets action."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    custom_action: Literal["copyS3assets"] = Field(ACTION_COPY_S3_ASSETS, alias="CustomAction")
    manifest_key: str = Field(..., min_length=1, alias="ManifestKey")
    source_bucket: str = Field(..., min_length=3, alias="SourceS3Bucket")
    source_prefix: str = Field(..., min_length=1, alias="SourceS3key")
    dest_bucket: str = Field(..., min_length=3, alias="DestS3Bucket")


class AssetManifest(BaseModel):
    """Demo UI manifest listing the files to copy."""

    files: list[str] = Field(..., min_length=1)


class CustomResourceResponse(BaseModel):
    """Response returned to the CDK provider framework."""

    model_config = ConfigDict(populate_by_name=True)

    physical_resource_id: str = Field(..., alias="PhysicalResourceId")
    data: dict[str, Any] = Field(default_factory=dict, alias="Data")
