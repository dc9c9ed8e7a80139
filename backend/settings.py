import os

# Basic settings helper to read environment configuration.


def _as_bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    return val.lower() in ("1", "true", "yes", "on")


def _as_int(val: str | None, default: int) -> int:
    if val is None or not val.strip():
        return default
    try:
        return int(val)
    except ValueError:
        return default


def _as_float(val: str | None, default: float) -> float:
    if val is None or not val.strip():
        return default
    try:
        return float(val)
    except ValueError:
        return default


class Settings:
    def __init__(self) -> None:
        self.DATABASE_URL: str | None = os.getenv("DATABASE_URL")
        self.MEDIA_ROOT: str = os.getenv("MEDIA_ROOT", "media")
        self.WATERMARK_PUBLIC_BASE_URL: str | None = os.getenv("WATERMARK_PUBLIC_BASE_URL")
        self.WATERMARK_FETCH_TIMEOUT: float = _as_float(os.getenv("WATERMARK_FETCH_TIMEOUT"), 10.0)
        self.WATERMARK_PREVIEW_MAX_EDGE: int = _as_int(os.getenv("WATERMARK_PREVIEW_MAX_EDGE"), 800)
        self.WATERMARK_PREVIEW_QUALITY: int = _as_int(os.getenv("WATERMARK_PREVIEW_QUALITY"), 85)
        self.WATERMARK_FINAL_QUALITY: int = _as_int(os.getenv("WATERMARK_FINAL_QUALITY"), 98)
        self.WATERMARK_FONTS_DIR: str | None = os.getenv("WATERMARK_FONTS_DIR")
        self.WATERMARK_DEBUG_ARTIFACTS: bool = _as_bool(os.getenv("WATERMARK_DEBUG_ARTIFACTS"), False)
        self.WATERMARK_DEBUG_DIR: str = os.getenv("WATERMARK_DEBUG_DIR", "data/watermark_debug")


settings = Settings()
