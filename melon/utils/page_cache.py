"""
In-process cache of page data.

Entries are keyed by path plus a per-viewer key. Mutations call
``revalidate_path`` so the next read of that page is rebuilt from the database.
"""
import threading
from typing import Any, Callable, Dict, Hashable, Optional, Tuple

from utils.logger import get_logger

logger = get_logger(__name__)


class PageCache:
    def __init__(self):
        self._entries: Dict[Tuple[str, Hashable], Any] = {}
        self._lock = threading.Lock()

    def get(self, path: str, key: Hashable = None) -> Optional[Any]:
        with self._lock:
            return self._entries.get((path, key))

    def set(self, path: str, key: Hashable, payload: Any) -> None:
        with self._lock:
            self._entries[(path, key)] = payload

    def get_or_build(self, path: str, key: Hashable, builder: Callable[[], Any]) -> Any:
        cached = self.get(path, key)
        if cached is not None:
            return cached
        payload = builder()
        self.set(path, key, payload)
        return payload

    def revalidate_path(self, path: str) -> int:
        """Drop every entry for ``path``. Returns how many were dropped."""
        with self._lock:
            stale = [key for key in self._entries if key[0] == path]
            for key in stale:
                del self._entries[key]
        if stale:
            logger.debug(f"Revalidated {path} ({len(stale)} entries)")
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


_page_cache = PageCache()


def get_page_cache() -> PageCache:
    return _page_cache


def revalidate_path(path: str) -> int:
    return _page_cache.revalidate_path(path)
