import json
from unittest.mock import MagicMock
import uuid

from botocore.exceptions import ClientError
import pytest

from core.models.errors import CustomResourceError, SourceBucketCheckError
from handlers.custom_resource.service import CustomResourceService

SOURCE_BUCKET = "image-source-bucket"
DEMO_BUCKET = "demo-ui-bucket"
CODE_BUCKET = "solutions-us-east-1"
PREFIX = "serverless-image-handler/v5.0.0"


class TestCheckSourceBuckets:
    def test_existing_buckets(self, s3_buckets) -> None:
        CustomResourceService().check_source_buckets(bucket_names=[SOURCE_BUCKET, DEMO_BUCKET])

    def test_missing_bucket(self, s3_buckets) -> None:
        with pytest.raises(SourceBucketCheckError) as exc:
            CustomResourceService().check_source_buckets(
                bucket_names=[SOURCE_BUCKET, "missing-bucket"]
            )

        assert exc.value.message == (
            "Could not find bucket: missing-bucket. "
            "Please check your image source bucket configuration."
        )
        assert exc.value.details["bucket"] == "missing-bucket"

    def test_stops_at_first_failure(self) -> None:
        adapter = MagicMock()
        adapter.head_bucket.side_effect = ClientError(
            {"Error": {"Code": "403", "Message": "Forbidden"}}, "HeadBucket"
        )

        with pytest.raises(SourceBucketCheckError) as exc:
            CustomResourceService(adapter).check_source_buckets(bucket_names=["a", "b"])

        assert exc.value.details == {"bucket": "a", "code": "403"}
        adapter.head_bucket.assert_called_once_with(bucket="a")


class TestCreateUuid:
    def test_unique_v4(self) -> None:
        first = CustomResourceService.create_uuid()
        second = CustomResourceService.create_uuid()

        assert uuid.UUID(first).version == 4
        assert first != second


class TestPutConfigFile:
    def test_render_config_file(self) -> None:
        content = CustomResourceService.render_config_file(
            {"apiEndpoint": "https://d123.cloudfront.net"}
        )

        assert content == (
            'const appVariables = {\n  "apiEndpoint": "https://d123.cloudfront.net"\n};'
        )

    def test_render_config_file_escapes_quotes(self) -> None:
        content = CustomResourceService.render_config_file({"apiEndpoint": "https://x/it's \"q\""})

        assert content.startswith("const appVariables = ")
        assert content.endswith(";")
        rendered = json.loads(content[len("const appVariables = ") : -1])
        assert rendered == {"apiEndpoint": "https://x/it's \"q\""}

    def test_writes_file(self, s3_buckets, s3_get_object) -> None:
        CustomResourceService().put_config_file(
            config_item={"apiEndpoint": "https://d123.cloudfront.net"},
            dest_bucket=DEMO_BUCKET,
            dest_key="demo-ui-config.js",
        )

        obj = s3_get_object(DEMO_BUCKET, "demo-ui-config.js")
        assert obj["Body"].decode() == (
            'const appVariables = {\n  "apiEndpoint": "https://d123.cloudfront.net"\n};'
        )
        assert obj["ContentType"] == "application/javascript"

    def test_missing_bucket(self, aws_mock) -> None:
        with pytest.raises(CustomResourceError) as exc:
            CustomResourceService().put_config_file(
                config_item={"apiEndpoint": "x"},
                dest_bucket="missing-bucket",
                dest_key="demo-ui-config.js",
            )

        assert exc.value.details == {"bucket": "missing-bucket", "key": "demo-ui-config.js"}


class TestCopyS3Assets:
    def test_copies_manifest_files(self, demo_ui_source, s3_get_object) -> None:
        copied = CustomResourceService().copy_s3_assets(
            manifest_key=f"{PREFIX}/demo-ui-manifest.json",
            source_bucket=CODE_BUCKET,
            source_prefix=f"{PREFIX}/demo-ui/",
            dest_bucket=DEMO_BUCKET,
        )

        assert copied == len(demo_ui_source)

        index = s3_get_object(DEMO_BUCKET, "index.html")
        assert index["Body"] == b"content of index.html"
        assert index["ContentType"] == "text/html"
        assert s3_get_object(DEMO_BUCKET, "style.css")["ContentType"] == "text/css"

    def test_missing_manifest(self, s3_buckets) -> None:
        with pytest.raises(CustomResourceError) as exc:
            CustomResourceService().copy_s3_assets(
                manifest_key="missing.json",
                source_bucket=CODE_BUCKET,
                source_prefix="demo-ui",
                dest_bucket=DEMO_BUCKET,
            )

        assert exc.value.details == {"bucket": CODE_BUCKET, "key": "missing.json"}

    def test_manifest_not_json(self, s3_buckets, s3_put_object) -> None:
        s3_put_object(CODE_BUCKET, "manifest.json", b"not json")

        with pytest.raises(CustomResourceError) as exc:
            CustomResourceService().load_manifest(bucket=CODE_BUCKET, key="manifest.json")

        assert exc.value.message == "Manifest manifest.json is not valid JSON"

    def test_manifest_wrong_shape(self, s3_buckets, s3_put_object) -> None:
        s3_put_object(CODE_BUCKET, "manifest.json", json.dumps({"files": []}).encode())

        with pytest.raises(CustomResourceError) as exc:
            CustomResourceService().load_manifest(bucket=CODE_BUCKET, key="manifest.json")

        assert exc.value.details["errors"][0]["field"] == "files"

    def test_missing_asset(self, s3_buckets, s3_put_object) -> None:
        s3_put_object(
            CODE_BUCKET, "manifest.json", json.dumps({"files": ["index.html"]}).encode()
        )

        with pytest.raises(CustomResourceError) as exc:
            CustomResourceService().copy_s3_assets(
                manifest_key="manifest.json",
                source_bucket=CODE_BUCKET,
                source_prefix="demo-ui",
                dest_bucket=DEMO_BUCKET,
            )

        assert exc.value.details == {"source_key": "demo-ui/index.html", "dest_bucket": DEMO_BUCKET}
