"""Tests for the S3 listing store."""

import boto3
import pytest
from moto import mock_aws
from pydantic import ValidationError as PydanticValidationError

from prefix_walk.core.exceptions import StoreError, ValidationError
from prefix_walk.listing import list_with_depth
from prefix_walk.store import S3ClientConfig, S3ClientManager, S3Store

CONFIG = S3ClientConfig(
    access_key_id="test_key",
    secret_access_key="test_secret",
    region_name="us-east-1",
)


class TestParseS3Path:
    """Test S3 URL parsing."""

    def test_bucket_and_prefix(self):
        """Test parsing a bucket with a prefix."""
        assert S3ClientManager.parse_s3_path("s3://bucket/data/2024/") == (
            "bucket",
            "data/2024",
        )

    def test_bucket_only(self):
        """Test parsing a bare bucket."""
        assert S3ClientManager.parse_s3_path("s3://bucket") == ("bucket", "")

    def test_wrong_scheme(self):
        """Test non-S3 URLs are rejected."""
        with pytest.raises(ValidationError, match="must start with"):
            S3ClientManager.parse_s3_path("bucket/data")

    def test_missing_bucket(self):
        """Test URLs without a bucket are rejected."""
        with pytest.raises(ValidationError, match="missing bucket"):
            S3ClientManager.parse_s3_path("s3:///data")

    def test_config_rejects_unknown_fields(self):
        """Test client configuration forbids extra fields."""
        with pytest.raises(PydanticValidationError):
            S3ClientConfig(bucket="nope")

    def test_config_rejects_empty_connection_pool(self):
        """Test the connection pool size must be positive."""
        with pytest.raises(PydanticValidationError):
            S3ClientConfig(max_pool_connections=0)

    def test_client_uses_connection_pool_size(self):
        """Test the client is built with the configured pool size."""
        config = CONFIG.model_copy(update={"max_pool_connections": 64})
        client = S3ClientManager(config).client

        assert client.meta.config.max_pool_connections == 64


@mock_aws
class TestS3Store:
    """Test S3 listing with mocked S3."""

    def setup_method(self, method):
        """Set up test environment."""

        self.s3_client = boto3.client(
            "s3",
            aws_access_key_id="test_key",
            aws_secret_access_key="test_secret",
            region_name="us-east-1",
        )
        self.s3_client.create_bucket(Bucket="test-bucket")

        for key, body in [
            ("a.txt", b"a"),
            ("foo/b.txt", b"bb"),
            ("foo/bar/c.txt", b"ccc"),
            ("foo/bar/d.txt", b"dddd"),
            ("foo/bar_baz/e.txt", b"e"),
            ("foo/marker/", b""),
        ]:
            self.s3_client.put_object(Bucket="test-bucket", Key=key, Body=body)

    def test_list_root_level(self):
        """Test listing the bucket root."""
        store = S3Store("test-bucket", config=CONFIG)
        level = store.list_with_delimiter(None)

        assert [obj.location for obj in level.objects] == ["a.txt"]
        assert level.common_prefixes == ("foo",)

    def test_object_metadata(self):
        """Test sizes and e-tags are carried through."""
        store = S3Store("test-bucket", config=CONFIG)
        level = store.list_with_delimiter("foo/bar")

        assert [(obj.location, obj.size) for obj in level.objects] == [
            ("foo/bar/c.txt", 3),
            ("foo/bar/d.txt", 4),
        ]
        assert all(obj.e_tag for obj in level.objects)
        assert all(obj.last_modified is not None for obj in level.objects)

    def test_segment_exact_and_markers(self):
        """Test sibling names and directory markers are handled."""
        store = S3Store("test-bucket", config=CONFIG)
        level = store.list_with_delimiter("foo")

        assert [obj.location for obj in level.objects] == ["foo/b.txt"]
        assert set(level.common_prefixes) == {"foo/bar", "foo/bar_baz", "foo/marker"}

        marker = store.list_with_delimiter("foo/marker")
        assert marker.objects == ()

    def test_depth_listing(self):
        """Test depth listing over S3."""
        store = S3Store("test-bucket", config=CONFIG)

        shallow = list_with_depth(store, None, 0)
        assert shallow.locations == ["a.txt"]
        assert shallow.common_prefixes == ("foo",)

        one = list_with_depth(store, None, 1)
        assert one.locations == ["a.txt", "foo/b.txt"]
        assert set(one.common_prefixes) == {"foo/bar", "foo/bar_baz", "foo/marker"}

        full = list_with_depth(store, None, 2)
        assert full.locations == [
            "a.txt",
            "foo/b.txt",
            "foo/bar/c.txt",
            "foo/bar/d.txt",
            "foo/bar_baz/e.txt",
        ]
        assert full.common_prefixes == ()

    def test_rooted_store(self):
        """Test locations are reported relative to the store root."""
        store = S3Store("test-bucket", config=CONFIG, root="foo")
        result = list_with_depth(store, None, 1)

        assert result.locations[0] == "b.txt"
        assert "bar/c.txt" in result.locations

    def test_from_url(self):
        """Test building a store from an S3 URL."""
        store, prefix = S3Store.from_url("s3://test-bucket/foo/", config=CONFIG)
        result = list_with_depth(store, prefix, 0)

        assert store.bucket == "test-bucket"
        assert prefix == "foo"
        assert result.locations == ["foo/b.txt"]

    def test_missing_bucket_raises_store_error(self):
        """Test S3 failures surface as StoreError."""
        store = S3Store("missing-bucket", config=CONFIG)

        with pytest.raises(StoreError, match="missing-bucket"):
            list_with_depth(store, None, 1)

    def test_empty_bucket_name_rejected(self):
        """Test an empty bucket name is rejected."""
        with pytest.raises(ValidationError):
            S3Store("", config=CONFIG)


@mock_aws
class TestS3EmptySegments:
    """Test keys with empty path segments, which S3 allows."""

    def setup_method(self, method):
        """Set up test environment."""

        self.s3_client = boto3.client(
            "s3",
            aws_access_key_id="test_key",
            aws_secret_access_key="test_secret",
            region_name="us-east-1",
        )
        self.s3_client.create_bucket(Bucket="test-bucket")

        for key in ["a.txt", "/abs.txt", "foo/b.txt", "foo//x.txt"]:
            self.s3_client.put_object(Bucket="test-bucket", Key=key, Body=b"x")

    def test_root_is_never_its_own_child(self):
        """Test a leading delimiter does not list the root again."""
        store = S3Store("test-bucket", config=CONFIG)
        level = store.list_with_delimiter(None)

        assert [obj.location for obj in level.objects] == ["a.txt"]
        assert level.common_prefixes == ("foo",)

    def test_empty_segment_below_prefix(self):
        """Test foo//x.txt is reached through the child prefix foo/."""
        store = S3Store("test-bucket", config=CONFIG)

        one = list_with_depth(store, None, 1)
        assert one.locations == ["a.txt", "foo/b.txt"]
        assert one.common_prefixes == ("foo/",)

        full = list_with_depth(store, None, 2)
        assert full.locations == ["a.txt", "foo/b.txt", "foo//x.txt"]
        assert full.common_prefixes == ()

    def test_no_duplicates_at_any_depth(self):
        """Test deeper listings never repeat objects or return the root."""
        store = S3Store("test-bucket", config=CONFIG)

        for depth in range(4):
            result = list_with_depth(store, None, depth)
            assert len(result.locations) == len(set(result.locations))
            assert "" not in result.common_prefixes
