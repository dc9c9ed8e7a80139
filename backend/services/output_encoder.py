"""
Output encoder.

JPEG encoding plus the transport hints that go with preview vs. download
renders. Encoding is the last pipeline step; callers get all bytes or an
exception, never a partial buffer.
"""
import logging
from io import BytesIO
from typing import Optional

from PIL import Image

from domain.models import EncodedImage
from settings import settings

logger = logging.getLogger(__name__)

JPEG_CONTENT_TYPE = "image/jpeg"
PREVIEW_CACHE_CONTROL = "private, max-age=60"
FINAL_CACHE_CONTROL = "no-store"


def download_filename(photo_id: str) -> str:
    return f"avoidxray-{photo_id}.jpg"


def downsample_for_preview(image: Image.Image, max_edge: Optional[int] = None) -> Image.Image:
    """Scale so the long edge is at most ``max_edge``; never enlarges."""
    max_edge = max_edge or settings.WATERMARK_PREVIEW_MAX_EDGE
    w, h = image.size
    if w <= max_edge and h <= max_edge:
        return image
    scale = min(max_edge / w, max_edge / h)
    size = (max(1, round(w * scale)), max(1, round(h * scale)))
    return image.resize(size, Image.Resampling.LANCZOS)


def encode_jpeg(image: Image.Image, preview: bool, photo_id: str) -> EncodedImage:
    """Encode the composed image for preview or final download."""
    quality = settings.WATERMARK_PREVIEW_QUALITY if preview else settings.WATERMARK_FINAL_QUALITY
    if image.mode != "RGB":
        image = image.convert("RGB")

    buf = BytesIO()
    image.save(buf, format="JPEG", quality=quality, optimize=True)
    data = buf.getvalue()
    logger.debug("[encode] photo=%s preview=%s quality=%s bytes=%s", photo_id, preview, quality, len(data))

    if preview:
        return EncodedImage(
            data=data,
            content_type=JPEG_CONTENT_TYPE,
            width=image.width,
            height=image.height,
            cache_control=PREVIEW_CACHE_CONTROL,
            content_disposition="inline",
        )
    filename = download_filename(photo_id)
    return EncodedImage(
        data=data,
        content_type=JPEG_CONTENT_TYPE,
        width=image.width,
        height=image.height,
        cache_control=FINAL_CACHE_CONTROL,
        content_disposition=f'attachment; filename="{filename}"',
        filename=filename,
    )
