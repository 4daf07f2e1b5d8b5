"""Image source handling and preview decoding."""

import io
import mimetypes
import os
import tempfile
from pathlib import Path
from typing import Optional

import numpy as np
from PIL import Image, UnidentifiedImageError


DEFAULT_CONTENT_TYPE = "application/octet-stream"


class ImageSource:
    """The currently chosen image: raw bytes plus a local preview URL.

    The preview file is created with the source and removed by ``release``,
    so superseded images do not accumulate on disk over a session.
    """

    def __init__(
        self,
        data: bytes,
        filename: str,
        content_type: Optional[str] = None,
    ):
        """Initialize the source and write its preview file.

        Args:
            data: Raw file bytes.
            filename: Name sent with the upload.
            content_type: MIME type; guessed from filename when omitted.
        """
        self.data = data
        self.filename = filename
        self.content_type = content_type or guess_content_type(filename)
        self._preview_path: Optional[Path] = None

        fd, path = tempfile.mkstemp(prefix="aidentifier-", suffix=Path(filename).suffix)
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        self._preview_path = Path(path)

    @property
    def is_empty(self) -> bool:
        """True if there are no bytes to upload."""
        return not self.data

    @property
    def released(self) -> bool:
        """True once the preview file has been removed."""
        return self._preview_path is None

    @property
    def preview_path(self) -> Optional[Path]:
        """Path of the preview file, or None after release."""
        return self._preview_path

    @property
    def url(self) -> Optional[str]:
        """file:// URL of the preview, or None after release."""
        if self._preview_path is None:
            return None
        return self._preview_path.as_uri()

    def to_array(self) -> Optional[np.ndarray]:
        """Decode the image for display.

        Returns:
            RGB numpy array, or None if the bytes are not a readable image.
        """
        try:
            with Image.open(io.BytesIO(self.data)) as img:
                return np.array(img.convert("RGB"))
        except (UnidentifiedImageError, OSError):
            return None

    def release(self):
        """Remove the preview file. Safe to call more than once."""
        if self._preview_path is not None:
            self._preview_path.unlink(missing_ok=True)
            self._preview_path = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()

    def __repr__(self) -> str:
        return (
            f"ImageSource(filename={self.filename!r}, "
            f"content_type={self.content_type!r}, size={len(self.data)})"
        )


def guess_content_type(filename: str) -> str:
    """Guess a MIME type from a filename.

    Args:
        filename: File name or path.

    Returns:
        MIME type string, application/octet-stream if unknown.
    """
    content_type, _ = mimetypes.guess_type(filename)
    return content_type or DEFAULT_CONTENT_TYPE


def select_file(path: str) -> ImageSource:
    """Load any file as the current image. No type or size checks are made.

    Args:
        path: Path to the file.

    Returns:
        New ImageSource holding the file's bytes.
    """
    file_path = Path(path)
    return ImageSource(file_path.read_bytes(), file_path.name)
