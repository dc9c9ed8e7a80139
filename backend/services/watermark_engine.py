"""
Watermark engine.

One render is: decode -> (preview downsample) -> resolve fields -> layout ->
composite -> encode. Each render is self-contained; nothing is shared
between concurrent calls except read-only constants.
"""
import hashlib
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Callable, Optional

import numpy as np
from PIL import Image
from sqlalchemy.orm import Session

from domain.errors import PhotoNotFound, RenderFailed, WatermarkError
from domain.models import EncodedImage, LayoutPlan, PhotoRecord, RenderRequest, WatermarkFields
from repositories import PhotosRepository
from services.compositor import composite
from services.output_encoder import downsample_for_preview, encode_jpeg
from services.source_image import decode_source, fetch_source_bytes
from services.watermark_layouts import compute_layout
from settings import settings
from storage.file_storage import FileStorage

logger = logging.getLogger(__name__)

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def format_date(value: date) -> str:
    """US short form, e.g. ``Jan 5, 2024``."""
    return f"{_MONTHS[value.month - 1]} {value.day}, {value.year}"


def format_display_date(record: PhotoRecord, custom_date: Optional[str] = None) -> str:
    """
    Date shown on the watermark.

    A ``YYYY-MM-DD`` custom date wins; otherwise the capture date, then the
    upload date. An unparsable custom date is ignored.
    """
    if custom_date:
        try:
            return format_date(datetime.strptime(custom_date.strip(), "%Y-%m-%d").date())
        except ValueError:
            logger.info("[watermark] ignoring unparsable custom date %r", custom_date)
    when = record.captured_at or record.created_at
    return format_date(when) if when else ""


def photo_url(base_url: str, photo_id: str) -> str:
    return f"{base_url.rstrip('/')}/photos/{photo_id}"


def build_fields(record: PhotoRecord, request: RenderRequest) -> WatermarkFields:
    """Apply the request's toggles to the record's display strings."""
    base_url = request.base_url or settings.WATERMARK_PUBLIC_BASE_URL or ""
    return WatermarkFields(
        camera=(record.camera_name or "") if request.show_camera else "",
        film=(record.film_name or "") if request.show_film else "",
        username=(record.owner_username or "") if request.show_username else "",
        caption=(request.caption or "") if request.show_caption else "",
        date=format_display_date(record, request.custom_date) if request.show_date else "",
        show_qr=request.show_qr,
        photo_url=photo_url(base_url, record.id) if request.show_qr else "",
    )


def default_seed(record: PhotoRecord, request: RenderRequest) -> int:
    """Stable seed so identical requests render identical grain."""
    digest = hashlib.sha256(f"{record.id}:{request.style.value}".encode()).digest()
    return int.from_bytes(digest[:8], "big")


def _write_debug_artifacts(record: PhotoRecord, plan: LayoutPlan, composed: Image.Image) -> None:
    debug_dir = Path(settings.WATERMARK_DEBUG_DIR) / record.id
    try:
        debug_dir.mkdir(parents=True, exist_ok=True)
        for idx, overlay in enumerate(plan.overlays):
            if overlay.fragment is not None and overlay.fragment.markup:
                (debug_dir / f"{idx:02d}_{overlay.name or 'text'}.svg").write_text(
                    overlay.fragment.markup, encoding="utf-8"
                )
        composed.save(debug_dir / f"{plan.style.value}.png")
    except OSError:
        logger.warning("[debug-artifacts] failed to write %s", debug_dir, exc_info=True)


def render_watermark(
    record: PhotoRecord,
    request: RenderRequest,
    source_bytes: bytes,
    rng: Optional[np.random.Generator] = None,
) -> EncodedImage:
    """
    Render one watermark from already-fetched original bytes.

    Raises:
        SourceFetchFailed: If the bytes cannot be decoded
        RenderFailed: If layout, compositing or encoding fails
    """
    photo = decode_source(source_bytes)
    try:
        if request.preview:
            photo = downsample_for_preview(photo)
        if rng is None:
            rng = np.random.default_rng(default_seed(record, request))

        fields = build_fields(record, request)
        plan = compute_layout(request.style, photo.width, photo.height, fields, rng)
        logger.debug(
            "[watermark] photo=%s style=%s source=%sx%s canvas=%sx%s overlays=%s",
            record.id,
            plan.style.value,
            photo.width,
            photo.height,
            plan.width,
            plan.height,
            len(plan.overlays),
        )
        composed = composite(plan, photo)
        if settings.WATERMARK_DEBUG_ARTIFACTS:
            _write_debug_artifacts(record, plan, composed)
        return encode_jpeg(composed, request.preview, record.id)
    except WatermarkError:
        raise
    except Exception as exc:
        logger.exception("[watermark] render failed photo=%s style=%s", record.id, request.style.value)
        raise RenderFailed("Failed to generate watermark", photo_id=record.id) from exc


class WatermarkService:
    """
    Request-handler contract: resolve the record, fetch its original, render.

    Errors propagate as WatermarkError kinds without retry.
    """

    def __init__(
        self,
        photos_repo: Optional[PhotosRepository] = None,
        storage: Optional[FileStorage] = None,
        fetch: Callable[..., bytes] = fetch_source_bytes,
    ):
        self.photos_repo = photos_repo or PhotosRepository()
        self.storage = storage
        self.fetch = fetch

    def render(
        self,
        session: Session,
        request: RenderRequest,
        rng: Optional[np.random.Generator] = None,
    ) -> EncodedImage:
        record = self.photos_repo.get_photo(session, request.photo_id)
        if not record:
            raise PhotoNotFound("Photo not found", photo_id=request.photo_id)
        source_bytes = self.fetch(record.original_path, self.storage)
        result = render_watermark(record, request, source_bytes, rng=rng)
        logger.info(
            "[watermark] rendered photo=%s style=%s preview=%s bytes=%s",
            record.id,
            request.style.value,
            request.preview,
            len(result.data),
        )
        return result
