"""
Watermark API routes.

Thin boundary over the watermark engine: parses query options, maps engine
error kinds to HTTP status codes, streams the encoded image.
"""
import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request, Response
from pydantic import BaseModel

from db import SessionLocal
from domain.errors import WatermarkError
from domain.models import DEFAULT_CAPTION, RenderRequest, WatermarkStyle
from services.watermark_engine import WatermarkService
from settings import settings

logger = logging.getLogger(__name__)

router = APIRouter()
service = WatermarkService()

ERROR_STATUS = {
    "not_found": 404,
    "source_fetch_failed": 502,
    "render_failed": 500,
}


class ErrorResponse(BaseModel):
    detail: str


ERROR_RESPONSES = {status: {"model": ErrorResponse} for status in (400, 404, 500, 502)}


def _flag_on_unless_zero(value: Optional[str]) -> bool:
    return value != "0"


def _flag_on_if_one(value: Optional[str]) -> bool:
    return value == "1"


def request_base_url(request: Request) -> str:
    if settings.WATERMARK_PUBLIC_BASE_URL:
        return settings.WATERMARK_PUBLIC_BASE_URL
    return f"{request.url.scheme}://{request.url.netloc}"


@router.get(
    "",
    response_class=Response,
    responses={200: {"content": {"image/jpeg": {}}}, **ERROR_RESPONSES},
)
def get_watermark(
    request: Request,
    photo_id: Optional[str] = Query(None, alias="id"),
    style: Optional[str] = Query(None),
    preview: Optional[str] = Query(None),
    show_camera: Optional[str] = Query(None, alias="showCamera"),
    show_film: Optional[str] = Query(None, alias="showFilm"),
    show_username: Optional[str] = Query(None, alias="showUsername"),
    show_date: Optional[str] = Query(None, alias="showDate"),
    show_qr: Optional[str] = Query(None, alias="showQR"),
    show_caption: Optional[str] = Query(None, alias="showCaption"),
    caption: Optional[str] = Query(None),
    custom_date: Optional[str] = Query(None, alias="customDate"),
):
    """Render a watermarked copy of a photo (inline preview or attachment download)."""
    if not photo_id:
        raise HTTPException(status_code=400, detail="Photo ID required")

    render_request = RenderRequest(
        photo_id=photo_id,
        style=WatermarkStyle.resolve(style),
        show_camera=_flag_on_unless_zero(show_camera),
        show_film=_flag_on_unless_zero(show_film),
        show_username=_flag_on_unless_zero(show_username),
        show_date=_flag_on_if_one(show_date),
        show_qr=_flag_on_if_one(show_qr),
        show_caption=_flag_on_unless_zero(show_caption),
        caption=caption or DEFAULT_CAPTION,
        custom_date=custom_date or None,
        preview=_flag_on_if_one(preview),
        base_url=request_base_url(request),
    )

    with SessionLocal() as session:
        try:
            result = service.render(session, render_request)
        except WatermarkError as exc:
            status = ERROR_STATUS.get(exc.kind, 500)
            logger.warning("[watermark] photo=%s failed kind=%s: %s", photo_id, exc.kind, exc.message)
            detail = exc.message if status != 500 else "Failed to generate watermark"
            raise HTTPException(status_code=status, detail=detail)

    return Response(
        content=result.data,
        media_type=result.content_type,
        headers={
            "Content-Disposition": result.content_disposition,
            "Cache-Control": result.cache_control,
        },
    )
