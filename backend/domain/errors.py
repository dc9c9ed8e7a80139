"""
Error kinds surfaced by the watermark engine.

They carry no transport semantics; the API layer maps ``kind`` to a status.
"""


class WatermarkError(Exception):
    kind = "watermark_error"

    def __init__(self, message: str, photo_id: str | None = None):
        super().__init__(message)
        self.message = message
        self.photo_id = photo_id


class PhotoNotFound(WatermarkError):
    kind = "not_found"


class SourceFetchFailed(WatermarkError):
    kind = "source_fetch_failed"


class RenderFailed(WatermarkError):
    kind = "render_failed"
