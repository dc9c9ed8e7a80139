"""Render a watermark for a local image file, without the database.

Usage (from backend/):
    python -m scripts.render_watermark --image photo.jpg --style polaroid \
        --camera "Leica M6" --film "Portra 400" --username alice --qr --out out.jpg

Useful for checking layouts against real photos. Pass --seed to pin the paper
grain; the default seed is derived from the photo id, so reruns match.
"""

from __future__ import annotations

import argparse
import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import numpy as np

from domain.errors import WatermarkError
from domain.models import DEFAULT_CAPTION, PhotoRecord, RenderRequest, WatermarkStyle
from services.watermark_engine import render_watermark

logger = logging.getLogger("render_watermark")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Render a watermarked copy of a local photo.")
    parser.add_argument("--image", required=True, help="Path to the source photo.")
    parser.add_argument("--style", default=WatermarkStyle.MINIMAL.value, help="minimal, film-strip or polaroid (unknown -> minimal).")
    parser.add_argument("--photo-id", default=None, help="Photo id for the filename and code URL (defaults to the file stem).")
    parser.add_argument("--camera", default=None)
    parser.add_argument("--film", default=None)
    parser.add_argument("--username", default=None)
    parser.add_argument("--caption", default=DEFAULT_CAPTION)
    parser.add_argument("--no-caption", action="store_true", help="Hide the caption line.")
    parser.add_argument("--date", default=None, help="Custom date (YYYY-MM-DD); implies showing the date.")
    parser.add_argument("--show-date", action="store_true", help="Show the file's modification date.")
    parser.add_argument("--qr", action="store_true", help="Add a scannable code linking to the photo page.")
    parser.add_argument("--base-url", default="https://avoidxray.com")
    parser.add_argument("--preview", action="store_true", help="Low-resolution preview encoding.")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--out", default=None, help="Output path (defaults to the download filename).")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    if not logger.handlers:
        logging.basicConfig(level=logging.INFO, format="%(message)s")
    args = build_parser().parse_args(argv)

    image_path = Path(args.image)
    photo_id = args.photo_id or image_path.stem
    record = PhotoRecord(
        id=photo_id,
        original_path=str(image_path),
        camera_name=args.camera,
        film_name=args.film,
        owner_username=args.username,
        created_at=datetime.fromtimestamp(image_path.stat().st_mtime) if image_path.exists() else datetime.now(),
    )
    request = RenderRequest(
        photo_id=photo_id,
        style=WatermarkStyle.resolve(args.style),
        show_date=bool(args.date or args.show_date),
        show_qr=args.qr,
        show_caption=not args.no_caption,
        caption=args.caption,
        custom_date=args.date,
        preview=args.preview,
        base_url=args.base_url,
    )
    rng = np.random.default_rng(args.seed) if args.seed is not None else None

    try:
        source_bytes = image_path.read_bytes()
    except OSError as exc:
        logger.error("Cannot read %s: %s", image_path, exc)
        return 1
    try:
        result = render_watermark(record, request, source_bytes, rng=rng)
    except WatermarkError as exc:
        logger.error("Render failed (%s): %s", exc.kind, exc.message)
        return 1

    out_path = Path(args.out or result.filename or f"{photo_id}-preview.jpg")
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_bytes(result.data)
    logger.info("Wrote %s (%sx%s, %s bytes)", out_path, result.width, result.height, len(result.data))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
