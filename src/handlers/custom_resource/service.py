"""Business logic for the provisioning custom resources.

Each action translates S3 failures into custom resource errors so that
the stack event shows which bucket or object caused the failure.
"""

import json
import uuid

from aws_lambda_powertools import Logger
from botocore.exceptions import ClientError
from pydantic import ValidationError as PydanticValidationError

from core.infrastructure.adapters.s3_adapter import S3Adapter
from core.models.errors import CustomResourceError, SourceBucketCheckError
from core.utils.constants import CONFIG_FILE_CONTENT_TYPE
from core.utils.mime import detect_content_type
from core.utils.validators import sanitize_validation_errors

from .models import AssetManifest

logger = Logger(UTC=True)


class CustomResourceService:
    """Application service behind the custom resource handler.

    This service covers:
    - Verifying the configured source buckets exist
    - Generating the anonymous deployment UUID
    - Writing the demo UI configuration file
    - Copying demo UI assets from the source code bucket
    """

    def __init__(self, adapter: S3Adapter | None = None) -> None:
        """Initialize the service with an S3 adapter."""
        self._s3 = adapter or S3Adapter()

    def check_source_buckets(self, *, bucket_names: list[str]) -> None:
        """Verify every source bucket is reachable.

        Raises:
            SourceBucketCheckError: On the first bucket that cannot be reached
        """
        for bucket in bucket_names:
            try:
                self._s3.head_bucket(bucket=bucket)
            except ClientError as exc:
                code = exc.response.get("Error", {}).get("Code")
                logger.error(
                    "Source bucket check failed",
                    extra={"bucket": bucket, "code": code},
                )
                raise SourceBucketCheckError(
                    message=(
                        f"Could not find bucket: {bucket}. Please check your "
                        "image source bucket configuration."
                    ),
                    details={"bucket": bucket, "code": code},
                ) from exc

        logger.info("Source buckets validated", extra={"buckets": bucket_names})

    @staticmethod
    def create_uuid() -> str:
        """Generate the anonymous deployment identifier."""
        return str(uuid.uuid4())

    @staticmethod
    def render_config_file(config_item: dict[str, str]) -> str:
        """Render the demo UI configuration script.

        Values are serialised as JSON string literals.
        """
        return f"const appVariables = {json.dumps(config_item, indent=2)};"

    def put_config_file(
        self,
        *,
        config_item: dict[str, str],
        dest_bucket: str,
        dest_key: str,
    ) -> None:
        """Write the demo UI configuration file.

        Raises:
            CustomResourceError: If the object cannot be written
        """
        content = self.render_config_file(config_item)

        try:
            self._s3.put_object(
                bucket=dest_bucket,
                key=dest_key,
                body=content.encode("utf-8"),
                content_type=CONFIG_FILE_CONTENT_TYPE,
            )
        except ClientError as exc:
            logger.error(
                "Failed to write config file",
                extra={"bucket": dest_bucket, "key": dest_key},
            )
            raise CustomResourceError(
                message=f"Unable to write {dest_key} to bucket {dest_bucket}",
                details={"bucket": dest_bucket, "key": dest_key},
            ) from exc

        logger.info("Config file written", extra={"bucket": dest_bucket, "key": dest_key})

    def load_manifest(self, *, bucket: str, key: str) -> AssetManifest:
        """Read and validate the asset manifest.

        Raises:
            CustomResourceError: If the manifest is missing or malformed
        """
        try:
            raw = self._s3.get_object_body(bucket=bucket, key=key)
        except ClientError as exc:
            raise CustomResourceError(
                message=f"Unable to read manifest {key} from bucket {bucket}",
                details={"bucket": bucket, "key": key},
            ) from exc

        try:
            return AssetManifest(**json.loads(raw))
        except (json.JSONDecodeError, TypeError) as exc:
            raise CustomResourceError(
                message=f"Manifest {key} is not valid JSON",
                details={"bucket": bucket, "key": key},
            ) from exc
        except PydanticValidationError as exc:
            raise CustomResourceError(
                message=f"Manifest {key} has an invalid format",
                details={"errors": sanitize_validation_errors(exc.errors())},
            ) from exc

    def copy_s3_assets(
        self,
        *,
        manifest_key: str,
        source_bucket: str,
        source_prefix: str,
        dest_bucket: str,
    ) -> int:
        """Copy every file listed in the manifest to the destination bucket.

        Returns:
            Number of files copied

        Raises:
            CustomResourceError: If the manifest or any copy fails
        """
        manifest = self.load_manifest(bucket=source_bucket, key=manifest_key)

        for file_name in manifest.files:
            source_key = f"{source_prefix.rstrip('/')}/{file_name}"
            try:
                self._s3.copy_object(
                    source_bucket=source_bucket,
                    source_key=source_key,
                    dest_bucket=dest_bucket,
                    dest_key=file_name,
                    content_type=detect_content_type(file_name),
                )
            except ClientError as exc:
                logger.error(
                    "Asset copy failed",
                    extra={"source_key": source_key, "dest_bucket": dest_bucket},
                )
                raise CustomResourceError(
                    message=f"Unable to copy {source_key} to bucket {dest_bucket}",
                    details={"source_key": source_key, "dest_bucket": dest_bucket},
                ) from exc

        logger.info(
            "Demo UI assets copied",
            extra={"count": len(manifest.files), "dest_bucket": dest_bucket},
        )
        return len(manifest.files)
