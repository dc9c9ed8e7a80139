"""
Source photo retrieval and decoding.

Originals live either behind an http(s) URL or in local media storage.
Fetches are not retried: a broken original stays broken, and the caller's
timeout bounds the wait.
"""
import logging
from io import BytesIO
from typing import Optional

import requests
from PIL import Image, ImageOps, UnidentifiedImageError

from domain.errors import SourceFetchFailed
from settings import settings
from storage.file_storage import FileStorage

logger = logging.getLogger(__name__)

_SESSION = requests.Session()


def is_remote(locator: str) -> bool:
    return locator.lower().startswith(("http://", "https://"))


def fetch_source_bytes(
    locator: str,
    storage: Optional[FileStorage] = None,
    timeout: Optional[float] = None,
    session: Optional[requests.Session] = None,
) -> bytes:
    """
    Retrieve the original image bytes.

    Raises:
        SourceFetchFailed: If the locator cannot be read
    """
    if not locator:
        raise SourceFetchFailed("Photo has no original image")
    if is_remote(locator):
        http = session or _SESSION
        try:
            resp = http.get(locator, timeout=timeout or settings.WATERMARK_FETCH_TIMEOUT)
        except requests.RequestException as exc:
            logger.warning("[source] fetch failed url=%s err=%s", locator, exc)
            raise SourceFetchFailed(f"Failed to fetch image: {exc}") from exc
        if resp.status_code != 200:
            logger.warning("[source] fetch failed url=%s status=%s", locator, resp.status_code)
            raise SourceFetchFailed(f"Failed to fetch image ({resp.status_code})")
        return resp.content

    storage = storage or FileStorage(settings.MEDIA_ROOT)
    try:
        return storage.read_bytes(locator)
    except (OSError, ValueError) as exc:
        logger.warning("[source] read failed path=%s err=%s", locator, exc)
        raise SourceFetchFailed(f"Failed to read image: {locator}") from exc


def decode_source(data: bytes) -> Image.Image:
    """
    Decode bytes to an orientation-corrected RGB image.

    Raises:
        SourceFetchFailed: If the bytes are not a readable image
    """
    try:
        img = Image.open(BytesIO(data))
        img.load()
        img = ImageOps.exif_transpose(img)
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as exc:
        raise SourceFetchFailed(f"Failed to decode image: {exc}") from exc
    if img.mode != "RGB":
        img = img.convert("RGB")
    return img
