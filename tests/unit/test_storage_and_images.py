import io
import os
import re

import pytest
from PIL import Image

from i18n.translations import get_message
from models.models import UploadedImage
from services.image_service import AVATAR_IMAGE_TYPES, MAX_FILE_SIZE, ImageService
from services.storage_service import StorageService
from utils.errors import StorageError


def _png(width, height, color=(200, 30, 30)):
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.mark.unit
def test_upload_returns_public_url_and_path_round_trips(tmp_path):
    storage = StorageService(str(tmp_path), "http://cdn.test/")

    url = storage.upload("posts/p1/1-a.png", b"data")

    assert url == "http://cdn.test/media/images/posts/p1/1-a.png"
    assert os.path.exists(tmp_path / "media" / "images" / "posts" / "p1" / "1-a.png")
    assert storage.path_from_public_url(url) == "posts/p1/1-a.png"
    assert storage.path_from_public_url("https://elsewhere.test/x.png") == ""
    assert storage.path_from_public_url("") == ""


@pytest.mark.unit
def test_upload_never_overwrites_and_rejects_traversal(tmp_path):
    storage = StorageService(str(tmp_path), "http://cdn.test")
    storage.upload("avatars/u1/a.png", b"one")

    with pytest.raises(StorageError):
        storage.upload("avatars/u1/a.png", b"two")
    with pytest.raises(StorageError):
        storage.upload("../escape.png", b"x")


@pytest.mark.unit
def test_remove_urls_skips_missing_and_foreign(tmp_path):
    storage = StorageService(str(tmp_path), "http://cdn.test")
    url = storage.upload("posts/p1/a.png", b"x")

    removed = storage.remove_urls([url, "http://cdn.test/media/images/posts/p1/gone.png", "https://other/x.png"])

    assert removed == ["posts/p1/a.png"]
    assert not os.path.exists(tmp_path / "media" / "images" / "posts" / "p1" / "a.png")


@pytest.mark.unit
def test_build_object_path_layout():
    path = StorageService.build_object_path("posts", "p1", "image/png")
    assert re.match(r"^posts/p1/\d+-[0-9a-f-]{36}\.png$", path)
    assert StorageService.build_object_path("avatars", "u1", "image/webp").endswith(".webp")


@pytest.mark.unit
def test_build_object_path_rejects_unknown_types():
    with pytest.raises(StorageError):
        StorageService.build_object_path("posts", "p1", "text/html")


@pytest.mark.unit
def test_image_validation_messages():
    service = ImageService()

    assert service.validate(UploadedImage("a.png", "image/png", _png(10, 10))) is None
    assert service.validate(UploadedImage("a.bmp", "image/bmp", b"x")) == get_message("image_invalid_type")
    assert service.validate(
        UploadedImage("a.gif", "image/gif", b"x"), AVATAR_IMAGE_TYPES
    ) == get_message("image_invalid_type_avatar")
    assert service.validate(
        UploadedImage("big.jpg", "image/jpeg", b"0" * (MAX_FILE_SIZE + 1))
    ) == get_message("image_too_large", max_mb=5)
    assert service.validate(UploadedImage("bad.jpg", "image/jpeg", b"not an image")) == get_message("image_unreadable")


@pytest.mark.unit
def test_image_validation_rejects_declared_type_mismatch():
    service = ImageService()

    assert service.validate(UploadedImage("a.jpg", "image/jpeg", _png(10, 10))) == get_message("image_type_mismatch")
    assert service.validate(UploadedImage("a.webp", "image/webp", _png(10, 10))) == get_message("image_type_mismatch")


@pytest.mark.unit
def test_resize_only_shrinks_wide_images():
    service = ImageService()

    wide = UploadedImage("wide.png", "image/png", _png(2400, 1000))
    resized = service.resize(wide)
    with Image.open(io.BytesIO(resized.data)) as image:
        assert image.size == (1200, 500)
        assert image.format == "PNG"
    assert resized.content_type == "image/png"

    narrow = UploadedImage("narrow.png", "image/png", _png(800, 600))
    assert service.resize(narrow) is narrow

    gif = UploadedImage("anim.gif", "image/gif", b"GIF89a...")
    assert service.resize(gif) is gif
