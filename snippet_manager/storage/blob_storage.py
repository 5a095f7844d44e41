"""Object storage for user-uploaded profile images."""

import logging
from abc import ABC, abstractmethod
from typing import BinaryIO, Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from snippet_manager.config import settings

logger = logging.getLogger(__name__)


class BlobStorage(ABC):
    """
    Where profile images live.

    Objects are written once under a fresh key and served straight from a
    public URL, so the interface only needs put, address and delete.
    """

    @abstractmethod
    def upload_file(self, key: str, file_obj: BinaryIO, content_type: str) -> str:
        """
        Store an object under ``key``.

        Args:
            key: Object key, e.g. ``profiles/<user_id>/<id>.png``
            file_obj: Readable binary stream
            content_type: MIME type served back to browsers

        Returns:
            The key the object was stored under

        Raises:
            ClientError, BotoCoreError: If the provider rejects the write
        """
        pass

    @abstractmethod
    def public_url(self, key: str) -> str:
        """URL anyone can fetch the object from."""
        pass

    @abstractmethod
    def key_from_url(self, url: str) -> Optional[str]:
        """Inverse of ``public_url``; None for URLs pointing elsewhere."""
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove an object, returning False instead of raising on failure."""
        pass

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Whether an object is stored under ``key``."""
        pass


class S3Storage(BlobStorage):
    """S3 bucket (or MinIO/LocalStack) holding publicly readable images."""

    def __init__(
        self,
        bucket_name: Optional[str] = None,
        region: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        public_endpoint_url: Optional[str] = None,
        aws_access_key_id: Optional[str] = None,
        aws_secret_access_key: Optional[str] = None,
    ):
        """
        Build the boto3 client. Every argument falls back to settings.

        Args:
            bucket_name: Target bucket
            region: Bucket region
            endpoint_url: API endpoint for S3-compatible servers
            public_endpoint_url: Browser-facing endpoint, when it differs
                from ``endpoint_url`` (e.g. inside Docker)
            aws_access_key_id: Explicit credentials; omit to use the IAM role
            aws_secret_access_key: Secret for ``aws_access_key_id``
        """
        self.bucket_name = bucket_name or settings.S3_BUCKET_NAME
        self.region = region or settings.S3_REGION

        options = {
            "region_name": self.region,
            "config": Config(
                connect_timeout=settings.HTTP_TIMEOUT_SECONDS,
                read_timeout=settings.HTTP_TIMEOUT_SECONDS,
                retries={"max_attempts": 2},
            ),
        }

        endpoint = endpoint_url or settings.S3_ENDPOINT_URL
        if endpoint:
            options["endpoint_url"] = endpoint

        access_key = aws_access_key_id or settings.AWS_ACCESS_KEY_ID
        if access_key:
            options["aws_access_key_id"] = access_key
            options["aws_secret_access_key"] = aws_secret_access_key or settings.AWS_SECRET_ACCESS_KEY

        self.s3_client = boto3.client("s3", **options)

        public_endpoint = public_endpoint_url or settings.S3_PUBLIC_ENDPOINT_URL
        if public_endpoint:
            # Path-style addressing for self-hosted servers
            self.public_base_url = f"{public_endpoint.rstrip('/')}/{self.bucket_name}"
        else:
            self.public_base_url = f"https://{self.bucket_name}.s3.{self.region}.amazonaws.com"

    @staticmethod
    def build_profile_image_key(user_id: str, image_id: str, extension: str) -> str:
        """Key layout for profile images."""
        return f"profiles/{user_id}/{image_id}.{extension}"

    def upload_file(self, key: str, file_obj: BinaryIO, content_type: str) -> str:
        try:
            self.s3_client.upload_fileobj(
                file_obj,
                self.bucket_name,
                key,
                ExtraArgs={"ContentType": content_type, "ACL": "public-read"},
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Profile image upload to {self.bucket_name}/{key} failed: {e}")
            raise

        logger.info(f"Stored profile image s3://{self.bucket_name}/{key}")
        return key

    def public_url(self, key: str) -> str:
        return f"{self.public_base_url}/{key}"

    def key_from_url(self, url: str) -> Optional[str]:
        prefix = f"{self.public_base_url}/"
        if url and url.startswith(prefix):
            return url[len(prefix):]
        return None

    def delete(self, key: str) -> bool:
        try:
            self.s3_client.delete_object(Bucket=self.bucket_name, Key=key)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Could not remove s3://{self.bucket_name}/{key}: {e}")
            return False

        logger.info(f"Removed s3://{self.bucket_name}/{key}")
        return True

    def exists(self, key: str) -> bool:
        try:
            self.s3_client.head_object(Bucket=self.bucket_name, Key=key)
        except ClientError:
            return False
        return True
