import logging
from typing import Optional

from mall_admin.core.context import RequestContext
from mall_admin.core.crud import guarded
from mall_admin.core.errors import ActionError, ErrorCode
from mall_admin.core.permissions import has_any_permission
from mall_admin.core.results import ActionResult
from mall_admin.core.storage import BUCKETS, StorageGateway
from mall_admin.modules.media.schemas import UploadResponse

logger = logging.getLogger(__name__)

# Who may write to each bucket; avatars are open to any signed-in admin (own profile picture).
BUCKET_PERMISSIONS = {
    "events": [("events", "create"), ("events", "edit")],
    "posts": [("posts", "create"), ("posts", "edit")],
    "promotions": [("promotions", "create"), ("promotions", "edit")],
    "tenants": [("tenants", "create"), ("tenants", "edit"), ("tenant_categories", "edit")],
    "general": [
        ("seo_settings", "edit"),
        ("whats_on", "create"),
        ("whats_on", "edit"),
        ("vip", "create"),
        ("vip", "edit"),
    ],
}


def bucket_from_url(url: str) -> Optional[str]:
    for bucket in BUCKETS:
        if f"/{bucket}/" in url:
            return bucket
    return None


class MediaService:
    def __init__(self, storage: StorageGateway):
        self.storage = storage

    def authorize(self, ctx: RequestContext, bucket: Optional[str]) -> None:
        if ctx is None or ctx.user is None:
            raise ActionError.of(ErrorCode.UNAUTHORIZED)
        checks = BUCKET_PERMISSIONS.get(bucket)
        if checks is not None and not has_any_permission(ctx.user, checks):
            raise ActionError(f"You don't have permission to upload to {bucket}", ErrorCode.FORBIDDEN)

    @guarded
    def upload(self, ctx: RequestContext, bucket: str, filename: Optional[str], content: bytes, content_type: str) -> ActionResult:
        self.authorize(ctx, bucket)
        url = self.storage.upload(bucket, filename, content, content_type)
        logger.info(f"Uploaded {filename or 'file'} to {bucket} for {ctx.user_id}")
        return ActionResult.ok(UploadResponse(url=url, bucket=bucket), "File uploaded successfully")

    @guarded
    def delete(self, ctx: RequestContext, url: str) -> ActionResult:
        bucket = bucket_from_url(url)
        if bucket is None:
            raise ActionError("File not found", ErrorCode.NOT_FOUND)
        self.authorize(ctx, bucket)
        self.storage.delete(url)
        return ActionResult.ok(None, "File deleted successfully")
