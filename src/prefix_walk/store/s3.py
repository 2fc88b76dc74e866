"""S3 listing store.

Adapts S3-compatible object storage to the one-level listing primitive using
``list_objects_v2`` with a ``/`` delimiter. Credentials come from, in order,
an AWS CLI profile, explicit keys, or the default credential chain; MinIO and
other compatible services are reached through ``endpoint_url``.
"""

import threading
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from pydantic import BaseModel, ConfigDict, Field

from prefix_walk import paths
from prefix_walk.core import get_logger, settings
from prefix_walk.core.exceptions import StoreError, ValidationError
from prefix_walk.models import ListLevel, ObjectMeta

logger = get_logger(__name__)

EPOCH = datetime.fromtimestamp(0, timezone.utc)


class S3ClientConfig(BaseModel):
    """Connection settings for the S3 client backing a store."""

    model_config = ConfigDict(extra="forbid")

    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None
    session_token: Optional[str] = None
    region_name: str = Field(default_factory=lambda: settings.default_region)
    endpoint_url: Optional[str] = None
    aws_profile: Optional[str] = None
    max_pool_connections: int = Field(
        10,
        ge=1,
        description="HTTP connections kept per client; raise it for wide fan-out",
    )


class S3ClientManager:
    """Creates one shared boto3 client lazily and parses S3 URLs."""

    def __init__(self, config: S3ClientConfig):
        self.config = config
        self._client = None
        self._lock = threading.Lock()

    @property
    def client(self):
        """Get or create the S3 client; safe to call from listing threads."""
        with self._lock:
            if self._client is None:
                self._client = self._create_client()
            return self._client

    def _session(self) -> boto3.Session:
        if self.config.aws_profile:
            logger.info("Using AWS profile", profile=self.config.aws_profile)
            return boto3.Session(profile_name=self.config.aws_profile)

        if self.config.access_key_id and self.config.secret_access_key:
            logger.info("Using explicit AWS credentials")
            return boto3.Session(
                aws_access_key_id=self.config.access_key_id,
                aws_secret_access_key=self.config.secret_access_key,
                aws_session_token=self.config.session_token,
            )

        logger.info("Using default AWS credential chain")
        return boto3.Session()

    def _create_client(self):
        kwargs: Dict[str, Any] = {
            "region_name": self.config.region_name,
            "config": Config(max_pool_connections=self.config.max_pool_connections),
        }
        if self.config.endpoint_url:
            kwargs["endpoint_url"] = self.config.endpoint_url

        client = self._session().client("s3", **kwargs)
        logger.info(
            "S3 client created",
            region=self.config.region_name,
            endpoint_url=self.config.endpoint_url,
            max_pool_connections=self.config.max_pool_connections,
        )
        return client

    @staticmethod
    def parse_s3_path(s3_path: str) -> tuple[str, str]:
        """Parse S3 path into bucket and prefix components.

        Args:
            s3_path: S3 path in format s3://bucket/prefix or s3://bucket

        Returns:
            Tuple of (bucket_name, prefix) with the prefix normalised

        Raises:
            ValidationError: If path format is invalid
        """
        if not s3_path.startswith("s3://"):
            raise ValidationError(f"S3 path must start with 's3://': {s3_path}")

        parsed = urlparse(s3_path)
        bucket = parsed.netloc
        if not bucket:
            raise ValidationError(f"Invalid S3 path, missing bucket: {s3_path}")

        prefix = paths.normalize(parsed.path)
        logger.debug("S3 path parsed", bucket=bucket, prefix=prefix)
        return bucket, prefix


class S3Store:
    """One-level listing over an S3 bucket.

    Object locations and common prefixes are returned relative to ``root``,
    so a store rooted at ``data`` reports ``data/2024/a.csv`` as
    ``2024/a.csv``. boto3 clients are thread safe, so a single store can
    serve concurrent listings.

    Keys are passed through verbatim rather than normalised, since S3 allows
    empty segments: ``foo//x.txt`` is listed under the common prefix ``foo/``.
    The one key shape this cannot express is an empty segment directly below
    the store root (``/abs.txt``), whose common prefix would be the root
    itself; it is skipped with a warning instead of being listed twice.
    """

    def __init__(
        self,
        bucket: str,
        config: Optional[S3ClientConfig] = None,
        root: str = paths.ROOT,
        client_manager: Optional[S3ClientManager] = None,
    ):
        """Initialize S3 store.

        Args:
            bucket: Bucket name
            config: S3 client configuration, used when no manager is given
            root: Key prefix that acts as the store root
            client_manager: Pre-built client manager to share a client
        """
        if not bucket:
            raise ValidationError("Bucket name must not be empty")

        self.bucket = bucket
        self.root = paths.normalize(root)
        self._root_key = paths.to_key_prefix(self.root)
        self.client_manager = client_manager or S3ClientManager(
            config or S3ClientConfig()
        )
        logger.info("S3 store initialized", bucket=bucket, root=self.root)

    @classmethod
    def from_url(
        cls, s3_path: str, config: Optional[S3ClientConfig] = None
    ) -> tuple["S3Store", str]:
        """Build a bucket-rooted store from an s3:// URL.

        Returns:
            Tuple of (store, prefix) where prefix is the URL's key prefix
        """
        bucket, prefix = S3ClientManager.parse_s3_path(s3_path)
        return cls(bucket, config=config), prefix

    def _key_prefix(self, prefix: str) -> str:
        if not prefix:
            return self._root_key
        return f"{self._root_key}{prefix}{paths.DELIMITER}"

    def _relative(self, key: str) -> str:
        return key[len(self._root_key) :]

    def list_with_delimiter(self, prefix: Optional[str] = None) -> ListLevel:
        """List objects and common prefixes directly under prefix.

        Raises:
            StoreError: If the S3 listing call fails
        """
        prefix = prefix or paths.ROOT
        key_prefix = self._key_prefix(prefix)
        logger.debug("Listing S3 level", bucket=self.bucket, prefix=key_prefix)

        objects: list[ObjectMeta] = []
        common_prefixes: dict[str, None] = {}

        try:
            paginator = self.client_manager.client.get_paginator("list_objects_v2")
            page_iterator = paginator.paginate(
                Bucket=self.bucket, Prefix=key_prefix, Delimiter=paths.DELIMITER
            )

            for page in page_iterator:
                for obj in page.get("Contents", []):
                    key = obj["Key"]
                    # Directory markers, including the listed prefix's own
                    if key.endswith(paths.DELIMITER):
                        continue
                    objects.append(
                        ObjectMeta(
                            location=self._relative(key),
                            size=obj.get("Size", 0),
                            last_modified=obj.get("LastModified", EPOCH),
                            e_tag=obj.get("ETag"),
                            version=obj.get("VersionId"),
                        )
                    )
                for prefix_info in page.get("CommonPrefixes", []):
                    raw = self._relative(prefix_info["Prefix"])
                    child = raw[: -len(paths.DELIMITER)]
                    if child == prefix:
                        logger.warning(
                            "Skipping empty-segment prefix below store root",
                            bucket=self.bucket,
                            common_prefix=prefix_info["Prefix"],
                        )
                        continue
                    common_prefixes[child] = None

        except (BotoCoreError, ClientError) as e:
            error_msg = (
                f"Failed to list S3 level 's3://{self.bucket}/{key_prefix}': {e}"
            )
            logger.error(error_msg, error=str(e))
            raise StoreError(error_msg) from e

        logger.debug(
            "S3 level listed",
            bucket=self.bucket,
            prefix=key_prefix,
            object_count=len(objects),
            prefix_count=len(common_prefixes),
        )
        return ListLevel(objects=tuple(objects), common_prefixes=tuple(common_prefixes))
