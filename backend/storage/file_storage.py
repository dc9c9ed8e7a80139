"""
File storage abstraction.

Provides a simple interface for storing and retrieving photo originals.
Currently uses local filesystem, can be extended to object storage.
"""
import shutil
from pathlib import Path
from typing import BinaryIO, Optional
import uuid


class FileStorage:
    """
    Local file storage implementation.

    Files are organized as:
    - media/photos/originals/  - Uploaded originals
    """

    def __init__(self, media_root: str = "media"):
        self.media_root = Path(media_root)
        self.media_root.mkdir(parents=True, exist_ok=True)

    def get_originals_dir(self) -> Path:
        """Get the originals directory."""
        path = self.media_root / "photos" / "originals"
        path.mkdir(parents=True, exist_ok=True)
        return path

    def save_original(
        self,
        file: BinaryIO,
        filename: str,
        photo_id: Optional[str] = None,
    ) -> str:
        """
        Save an original photo to storage.

        Args:
            file: File-like object with the photo data
            filename: Original filename
            photo_id: Optional photo ID (used for naming)

        Returns:
            Relative path to the saved file
        """
        ext = Path(filename).suffix.lower() or ".jpg"
        file_path = self.get_originals_dir() / f"{photo_id or uuid.uuid4()}{ext}"

        with open(file_path, "wb") as f:
            shutil.copyfileobj(file, f)

        return file_path.relative_to(self.media_root).as_posix()

    def get_absolute_path(self, relative_path: str) -> Path:
        """
        Convert a relative path to absolute.

        Raises:
            ValueError: If the path resolves outside the media root
        """
        root = self.media_root.resolve()
        path = (root / relative_path.lstrip("/")).resolve()
        if path != root and root not in path.parents:
            raise ValueError(f"Path escapes media root: {relative_path}")
        return path

    def file_exists(self, relative_path: str) -> bool:
        """Check if a file exists."""
        try:
            return self.get_absolute_path(relative_path).is_file()
        except ValueError:
            return False

    def read_bytes(self, relative_path: str) -> bytes:
        """Read a stored file."""
        return self.get_absolute_path(relative_path).read_bytes()

    def delete_file(self, relative_path: str) -> bool:
        """Delete a file. Returns True if deleted."""
        path = self.get_absolute_path(relative_path)
        if path.exists():
            path.unlink()
            return True
        return False
