"""
Tests for hazard photo storage.

Run with: python -m pytest tests/test_storage.py
"""

import io

import pytest
from PIL import Image

from logic.config import MAX_PHOTO_BYTES
from logic.storage import (
    InvalidPhotoError,
    LocalBlobStorage,
    PhotoTooLargeError,
    check_photo_size,
    safe_filename,
    upload_photo,
    verify_image,
)


def _png_bytes(size=(4, 4)):
    buf = io.BytesIO()
    Image.new("RGB", size, color=(200, 30, 30)).save(buf, format="PNG")
    return buf.getvalue()


def test_check_photo_size_limit_is_5mb():
    assert MAX_PHOTO_BYTES == 5 * 1024 * 1024
    check_photo_size(MAX_PHOTO_BYTES)
    with pytest.raises(PhotoTooLargeError):
        check_photo_size(MAX_PHOTO_BYTES + 1)


def test_safe_filename():
    assert safe_filename("Road Hole.JPG") == "road-hole.jpg"
    assert safe_filename("../../etc/passwd") == "passwd"
    assert safe_filename("C:\\Users\\me\\pic.png") == "pic.png"
    assert safe_filename("") == "photo"
    assert safe_filename("!!!.png") == "photo.png"


def test_verify_image():
    assert verify_image(_png_bytes()) == "PNG"
    with pytest.raises(InvalidPhotoError):
        verify_image(b"definitely not an image")


def test_local_blob_storage_upload_and_url(tmp_path):
    storage = LocalBlobStorage(root=str(tmp_path), url_prefix="/uploads/")

    path = storage.upload("hazards/a.png", b"data")

    assert path == "hazards/a.png"
    assert (tmp_path / "hazards" / "a.png").read_bytes() == b"data"
    assert storage.exists("hazards/a.png")
    assert storage.get_url("hazards/a.png") == "/uploads/hazards/a.png"


def test_local_blob_storage_rejects_escaping_paths(tmp_path):
    storage = LocalBlobStorage(root=str(tmp_path / "root"))
    with pytest.raises(ValueError):
        storage.upload("../outside.png", b"data")


def test_upload_photo_keys_by_filename(tmp_path):
    storage = LocalBlobStorage(root=str(tmp_path), url_prefix="/uploads")
    data = _png_bytes()

    url = upload_photo(storage, "My Pothole.png", data)

    assert url == "/uploads/hazards/my-pothole.png"
    assert (tmp_path / "hazards" / "my-pothole.png").read_bytes() == data


def test_upload_photo_rejects_oversized_before_writing(tmp_path):
    storage = LocalBlobStorage(root=str(tmp_path))

    with pytest.raises(PhotoTooLargeError):
        upload_photo(storage, "big.png", b"\0" * (MAX_PHOTO_BYTES + 1))

    assert not (tmp_path / "hazards").exists()


def test_upload_photo_rejects_non_images(tmp_path):
    storage = LocalBlobStorage(root=str(tmp_path))

    with pytest.raises(InvalidPhotoError):
        upload_photo(storage, "notes.png", b"plain text")

    assert not (tmp_path / "hazards").exists()
