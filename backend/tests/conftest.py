import sys
from datetime import datetime
from io import BytesIO
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

# Ensure the backend package root is on sys.path for direct pytest runs
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from domain.models import PhotoRecord  # noqa: E402


def jpeg_bytes(width: int, height: int, color=(120, 90, 60), noisy: bool = False) -> bytes:
    if noisy:
        pixels = np.random.default_rng(7).integers(0, 256, size=(height, width, 3), dtype=np.uint8)
        img = Image.fromarray(pixels)
    else:
        img = Image.new("RGB", (width, height), color)
    buf = BytesIO()
    img.save(buf, format="JPEG", quality=95)
    return buf.getvalue()


@pytest.fixture
def make_jpeg():
    return jpeg_bytes


@pytest.fixture
def photo_record() -> PhotoRecord:
    return PhotoRecord(
        id="photo-1",
        original_path="photos/originals/photo-1.jpg",
        camera_name="Leica M6",
        film_name="Portra 400",
        owner_username="alice",
        created_at=datetime(2024, 3, 9, 15, 30),
    )
