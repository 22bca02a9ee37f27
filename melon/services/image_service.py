"""
Image validation and downscaling for uploads (post images and avatars).
"""
import io
from typing import Optional, Sequence

from PIL import Image, ImageOps, UnidentifiedImageError

from i18n.translations import get_message
from models.models import UploadedImage
from utils.logger import get_logger

logger = get_logger(__name__)

POST_IMAGE_TYPES = ("image/jpeg", "image/png", "image/gif", "image/webp")
AVATAR_IMAGE_TYPES = ("image/jpeg", "image/png", "image/webp")
MAX_FILE_SIZE = 5 * 1024 * 1024  # 5MB
MAX_IMAGES_PER_POST = 4
MAX_WIDTH = 1200
JPEG_QUALITY = 85

_PIL_FORMATS = {
    "image/jpeg": "JPEG",
    "image/png": "PNG",
    "image/gif": "GIF",
    "image/webp": "WEBP",
}

EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
}


class ImageService:
    """Validates uploads and shrinks wide images before they are stored."""

    def __init__(self, max_width: int = MAX_WIDTH, quality: int = JPEG_QUALITY):
        self.max_width = max_width
        self.quality = quality

    def validate(self, upload: UploadedImage, allowed_types: Sequence[str] = POST_IMAGE_TYPES) -> Optional[str]:
        """Return a user-facing error, or None when the upload is acceptable."""
        if upload.content_type not in allowed_types:
            if tuple(allowed_types) == AVATAR_IMAGE_TYPES:
                return get_message("image_invalid_type_avatar")
            return get_message("image_invalid_type")
        if upload.size > MAX_FILE_SIZE:
            return get_message("image_too_large", max_mb=MAX_FILE_SIZE // (1024 * 1024))
        try:
            with Image.open(io.BytesIO(upload.data)) as image:
                detected = image.format
                image.verify()
        except (UnidentifiedImageError, OSError, SyntaxError) as e:
            logger.warning(f"Unreadable image upload {upload.filename!r}: {e}")
            return get_message("image_unreadable")
        if detected != _PIL_FORMATS[upload.content_type]:
            logger.warning(
                f"Image upload {upload.filename!r} declared {upload.content_type} but decodes as {detected}"
            )
            return get_message("image_type_mismatch")
        return None

    def resize(self, upload: UploadedImage) -> UploadedImage:
        """
        Downscale to ``max_width`` keeping the aspect ratio.

        Images already narrow enough and GIFs (which may be animated) are
        returned unchanged. The content type is preserved.
        """
        if upload.content_type == "image/gif":
            return upload

        with Image.open(io.BytesIO(upload.data)) as opened:
            image = ImageOps.exif_transpose(opened)
            if image.width <= self.max_width:
                return upload

            height = round(image.height * self.max_width / image.width)
            resized = image.resize((self.max_width, height), Image.Resampling.LANCZOS)

            fmt = _PIL_FORMATS[upload.content_type]
            if fmt == "JPEG" and resized.mode not in ("RGB", "L"):
                resized = resized.convert("RGB")

            buffer = io.BytesIO()
            save_kwargs = {"optimize": True}
            if fmt in ("JPEG", "WEBP"):
                save_kwargs["quality"] = self.quality
            resized.save(buffer, format=fmt, **save_kwargs)

        logger.debug(f"Resized {upload.filename!r} to {self.max_width}x{height}")
        return UploadedImage(
            filename=upload.filename,
            content_type=upload.content_type,
            data=buffer.getvalue(),
        )
