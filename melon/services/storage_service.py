"""
Object storage for uploaded images.

Objects live under ``{root_dir}/media/{bucket}/`` and are served publicly at
``{public_base_url}/media/{bucket}/{path}``.
"""
import os
import time
import uuid
from typing import Iterable, List

from i18n.translations import get_message
from services.image_service import EXTENSIONS
from utils.errors import StorageError
from utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_BUCKET = "images"


class StorageService:
    """Local-disk object store with public URLs."""

    def __init__(self, root_dir: str, public_base_url: str = "", bucket: str = DEFAULT_BUCKET):
        self.root_dir = root_dir
        self.bucket = bucket
        self.public_base_url = (public_base_url or "").rstrip("/")
        self.bucket_dir = os.path.abspath(os.path.join(root_dir, "media", bucket))
        self.url_prefix = f"{self.public_base_url}/media/{bucket}/"

    @staticmethod
    def build_object_path(folder: str, owner_id: str, content_type: str) -> str:
        """
        ``{folder}/{owner_id}/{timestamp_ms}-{uuid}.{ext}``

        The extension comes from the validated content type only; static
        serving derives the response Content-Type from it.
        """
        ext = EXTENSIONS.get(content_type)
        if ext is None:
            raise StorageError(get_message("image_upload_failed", reason=f"unsupported type {content_type!r}"))
        timestamp = int(time.time() * 1000)
        return f"{folder}/{owner_id}/{timestamp}-{uuid.uuid4()}.{ext}"

    def public_url(self, path: str) -> str:
        return self.url_prefix + path

    def path_from_public_url(self, url: str) -> str:
        """Bucket-relative path of a public URL, or "" when the URL is not ours."""
        if not url or not url.startswith(self.url_prefix):
            return ""
        path = url[len(self.url_prefix):].split("?", 1)[0].split("#", 1)[0]
        return path

    def _local_path(self, path: str) -> str:
        full = os.path.abspath(os.path.join(self.bucket_dir, path))
        if not full.startswith(self.bucket_dir + os.sep):
            raise StorageError(get_message("image_upload_failed", reason=f"invalid path {path!r}"))
        return full

    def upload(self, path: str, data: bytes) -> str:
        """Write an object and return its public URL. Existing objects are never overwritten."""
        full = self._local_path(path)
        try:
            os.makedirs(os.path.dirname(full), exist_ok=True)
            with open(full, "xb") as f:
                f.write(data)
        except OSError as e:
            logger.error(f"Image upload error for {path}: {e}")
            raise StorageError(get_message("image_upload_failed", reason=str(e))) from e
        logger.debug(f"Stored {len(data)} bytes at {path}")
        return self.public_url(path)

    def remove(self, paths: Iterable[str]) -> List[str]:
        """Delete objects. Missing objects are skipped. Returns the paths actually removed."""
        removed = []
        for path in paths:
            if not path:
                continue
            full = self._local_path(path)
            try:
                os.remove(full)
                removed.append(path)
            except FileNotFoundError:
                logger.debug(f"Object {path} already gone")
            except OSError as e:
                logger.error(f"Image deletion error for {path}: {e}")
                raise StorageError(get_message("image_delete_failed", reason=str(e))) from e
        return removed

    def remove_urls(self, urls: Iterable[str]) -> List[str]:
        """Delete the objects behind public URLs, ignoring URLs that are not ours."""
        paths = [self.path_from_public_url(u) for u in urls or []]
        return self.remove([p for p in paths if p])
