"""
Blob storage for hazard photos.

This module stores uploaded photos under a path keyed by filename and
resolves their public URLs. Photos are size-checked and verified as images
before anything is written.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2026-01-14
"""

import io
import logging
import os
from pathlib import Path

from PIL import Image
from slugify import slugify

from logic.config import MAX_PHOTO_BYTES, UPLOAD_DIR, UPLOAD_URL_PREFIX

log = logging.getLogger(__name__)

PHOTO_PREFIX = "hazards"


class PhotoTooLargeError(ValueError):
    """Raised when a photo exceeds the upload size limit."""


class InvalidPhotoError(ValueError):
    """Raised when uploaded bytes are not a readable image."""


def check_photo_size(size: int, limit: int = MAX_PHOTO_BYTES) -> None:
    """Reject photos over the size limit.

    Args:
        size: Photo size in bytes.
        limit: Maximum allowed size in bytes.

    Raises:
        PhotoTooLargeError: If size exceeds the limit.
    """
    if size > limit:
        raise PhotoTooLargeError(
            f"Photo is too large ({size / (1024 * 1024):.1f} MB). "
            f"Maximum size is {limit // (1024 * 1024)} MB."
        )


def safe_filename(name: str) -> str:
    """Reduce an uploaded filename to a safe storage name.

    Directory components are dropped and the stem is slugified; the
    extension is kept, lowercased.
    """
    p = Path(os.path.basename((name or "").replace("\\", "/")))
    stem = slugify(p.stem) or "photo"
    ext = p.suffix.lower() if p.suffix and slugify(p.suffix) else ""
    return f"{stem}{ext}"


def verify_image(data: bytes) -> str:
    """Check that bytes decode as an image.

    Args:
        data: Raw uploaded bytes.

    Returns:
        Image format reported by Pillow (e.g. "JPEG", "PNG").

    Raises:
        InvalidPhotoError: If Pillow cannot identify or verify the image.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            fmt = img.format
            img.verify()
    except Exception as e:
        raise InvalidPhotoError("Uploaded file is not a valid image") from e
    return fmt or ""


class LocalBlobStorage:
    """Filesystem-backed blob store served under a public URL prefix.

    Attributes:
        root: Directory that blobs are written under.
        url_prefix: URL path the root directory is mounted at.
    """

    def __init__(self, root: str = UPLOAD_DIR, url_prefix: str = UPLOAD_URL_PREFIX):
        self.root = Path(root)
        self.url_prefix = url_prefix.rstrip("/")

    def _resolve(self, path: str) -> Path:
        target = (self.root / path).resolve()
        if self.root.resolve() not in target.parents:
            raise ValueError(f"Blob path escapes storage root: {path}")
        return target

    def upload(self, path: str, data: bytes) -> str:
        """Write a blob, replacing any existing blob at the same path.

        Returns:
            The storage path that was written.
        """
        target = self._resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "wb") as f:
            f.write(data)
        return path

    def exists(self, path: str) -> bool:
        return self._resolve(path).is_file()

    def get_url(self, path: str) -> str:
        """Resolve the public URL of a stored blob."""
        return f"{self.url_prefix}/{path}"


def upload_photo(storage: LocalBlobStorage, filename: str, data: bytes) -> str:
    """Store a hazard photo and return its public URL.

    Args:
        storage: Blob store to write to.
        filename: Original filename from the client.
        data: Photo bytes.

    Returns:
        Public URL of the stored photo.

    Raises:
        PhotoTooLargeError: If the photo exceeds the size limit.
        InvalidPhotoError: If the bytes are not an image.
        OSError: If the blob could not be written.
    """
    check_photo_size(len(data))
    verify_image(data)

    path = f"{PHOTO_PREFIX}/{safe_filename(filename)}"
    storage.upload(path, data)
    url = storage.get_url(path)
    log.info("Stored photo %s (%d bytes)", path, len(data))
    return url
