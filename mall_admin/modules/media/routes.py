from fastapi import APIRouter, Body, Depends, File, Form, UploadFile
from supabase import Client
from typing import Any, Dict

from mall_admin.core.context import RequestContext
from mall_admin.core.crud import validate_payload
from mall_admin.core.dependencies import get_request_context
from mall_admin.core.errors import ActionError
from mall_admin.core.results import ActionResult, respond
from mall_admin.core.storage import build_storage_gateway
from mall_admin.database.supabase_client import get_service_supabase
from mall_admin.modules.media.schemas import DeleteFileRequest
from mall_admin.modules.media.service import MediaService

router = APIRouter(prefix="/media", tags=["media"])


def get_media_service(supabase: Client = Depends(get_service_supabase)) -> MediaService:
    return MediaService(build_storage_gateway(supabase))


@router.post("/upload", status_code=201)
async def upload_file(
    file: UploadFile = File(...),
    bucket: str = Form("general"),
    ctx: RequestContext = Depends(get_request_context),
    service: MediaService = Depends(get_media_service)
):
    """
    Upload an image to a storage bucket and return its public URL.
    Only JPEG, PNG, WebP and GIF images up to the configured size are accepted.
    """
    content = await file.read()
    result = service.upload(ctx, bucket, file.filename, content, file.content_type or "application/octet-stream")
    return respond(result, 201)


@router.post("/delete")
async def delete_file(
    payload: Dict[str, Any] = Body(...),
    ctx: RequestContext = Depends(get_request_context),
    service: MediaService = Depends(get_media_service)
):
    """Delete a previously uploaded file by its public URL: {"url": "..."}"""
    try:
        url = validate_payload(DeleteFileRequest, payload)["url"]
    except ActionError as e:
        return respond(ActionResult.from_error(e))
    return respond(service.delete(ctx, url))
