"""
Rendered-page cache for the gallery.

Pages are stored by path and dropped with :func:`revalidate_path` whenever the
data behind them changes, so the next request renders current state.

Every invalidation bumps the path's generation. A renderer reads the
generation before it queries and passes it back to :meth:`PageCache.set`, so
a page rendered from data that changed mid-render is never stored.
"""

import logging
import threading

logger = logging.getLogger(__name__)


class PageCache:
    """Thread-safe mapping of request path to rendered HTML."""

    def __init__(self) -> None:
        self._pages: dict[str, str] = {}
        self._generations: dict[str, int] = {}
        self._lock = threading.Lock()

    def get(self, path: str) -> str | None:
        with self._lock:
            return self._pages.get(path)

    def generation(self, path: str) -> int:
        with self._lock:
            return self._generations.get(path, 0)

    def set(self, path: str, content: str, generation: int | None = None) -> bool:
        """
        Store ``content`` for ``path``.

        With ``generation`` given, nothing is stored when ``path`` was
        invalidated since that generation was read. Returns whether the page
        was stored.
        """
        with self._lock:
            if generation is not None and generation != self._generations.get(path, 0):
                return False
            self._pages[path] = content
            return True

    def invalidate(self, path: str) -> bool:
        with self._lock:
            self._generations[path] = self._generations.get(path, 0) + 1
            return self._pages.pop(path, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._pages.clear()


page_cache = PageCache()


def revalidate_path(path: str) -> None:
    """Drop the cached rendering of ``path``."""
    if page_cache.invalidate(path):
        logger.debug("Revalidated cached page %s", path)
