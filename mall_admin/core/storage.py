"""
File storage gateway: upload a blob and get its public URL back, or delete a
previously uploaded file by that URL. Backed by Supabase Storage by default,
or by an S3 bucket when `storage_backend` is "s3".
"""

import logging
import re
import secrets
import time
from typing import Optional, Tuple
from urllib.parse import unquote, urlparse

import boto3
from botocore.exceptions import ClientError
from supabase import Client

from mall_admin.config.settings import settings
from mall_admin.core.errors import ActionError, ErrorCode

logger = logging.getLogger(__name__)

BUCKETS = ["events", "posts", "promotions", "tenants", "avatars", "general"]

IMAGE_TYPES = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
}

_SUPABASE_PUBLIC_PATH = re.compile(r"/storage/v1/object/public/([^/]+)/(.+)$")


def unique_filename(original: Optional[str], content_type: str) -> str:
    ext = None
    if original and "." in original:
        ext = original.rsplit(".", 1)[1].lower()
    ext = ext or IMAGE_TYPES.get(content_type, "bin")
    return f"{int(time.time() * 1000)}-{secrets.token_hex(4)}.{ext}"


def validate_image(content_type: str, size: int) -> None:
    if content_type not in IMAGE_TYPES:
        raise ActionError("Invalid file type. Please upload a JPEG, PNG, WebP or GIF image.", ErrorCode.VALIDATION_FAILED)
    if size > settings.max_upload_size_bytes:
        raise ActionError(f"File is too large. Maximum size is {settings.max_upload_size_mb}MB.", ErrorCode.VALIDATION_FAILED)


class SupabaseStorage:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def upload_file(self, bucket: str, path: str, content: bytes, content_type: str) -> str:
        self.supabase.storage.from_(bucket).upload(
            path, content, file_options={"content-type": content_type, "upsert": "false"}
        )
        return self.supabase.storage.from_(bucket).get_public_url(path)

    def delete_file(self, url: str) -> bool:
        location = self.parse_url(url)
        if location is None:
            return False
        bucket, path = location
        self.supabase.storage.from_(bucket).remove([path])
        return True

    @staticmethod
    def parse_url(url: str) -> Optional[Tuple[str, str]]:
        match = _SUPABASE_PUBLIC_PATH.search(urlparse(url).path)
        if not match:
            return None
        return match.group(1), unquote(match.group(2))


class S3Storage:
    def __init__(self):
        if not all([settings.aws_access_key_id, settings.aws_secret_access_key, settings.s3_bucket_name]):
            raise ValueError("AWS S3 credentials and bucket name must be configured")

        self.s3_client = boto3.client(
            's3',
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
            region_name=settings.aws_region
        )
        self.bucket_name = settings.s3_bucket_name
        self.base_url = (
            settings.s3_public_base_url
            or f"https://{self.bucket_name}.s3.{settings.aws_region}.amazonaws.com"
        ).rstrip("/")

    def upload_file(self, bucket: str, path: str, content: bytes, content_type: str) -> str:
        key = f"{bucket}/{path}"
        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=content,
                ContentType=content_type
            )
        except ClientError as e:
            logger.error(f"Failed to upload file to S3: {str(e)}")
            raise
        return f"{self.base_url}/{key}"

    def delete_file(self, url: str) -> bool:
        if not url.startswith(self.base_url + "/"):
            return False
        key = unquote(url[len(self.base_url) + 1:])
        try:
            self.s3_client.delete_object(Bucket=self.bucket_name, Key=key)
            return True
        except ClientError as e:
            logger.error(f"Failed to delete file from S3: {str(e)}")
            return False


class StorageGateway:
    def __init__(self, backend):
        self.backend = backend

    def upload(self, bucket: str, filename: Optional[str], content: bytes, content_type: str) -> str:
        if bucket not in BUCKETS:
            raise ActionError(f"Unknown bucket: {bucket}", ErrorCode.VALIDATION_FAILED)
        validate_image(content_type, len(content))
        path = unique_filename(filename, content_type)
        try:
            return self.backend.upload_file(bucket, path, content, content_type)
        except Exception as e:
            logger.error(f"Upload to {bucket} failed: {e}")
            raise ActionError("Failed to upload file", ErrorCode.STORAGE_UNAVAILABLE)

    def delete(self, url: str) -> None:
        try:
            deleted = self.backend.delete_file(url)
        except Exception as e:
            logger.error(f"Delete of {url} failed: {e}")
            raise ActionError("Failed to delete file", ErrorCode.STORAGE_UNAVAILABLE)
        if not deleted:
            raise ActionError("File not found", ErrorCode.NOT_FOUND)


def build_storage_gateway(supabase: Client) -> StorageGateway:
    if settings.storage_backend == "s3":
        return StorageGateway(S3Storage())
    return StorageGateway(SupabaseStorage(supabase))
