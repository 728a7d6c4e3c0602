import logging
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class PageCache:
    """Rendered page bodies keyed by request path."""

    def __init__(self):
        self._pages: Dict[str, bytes] = {}

    def get(self, path: str) -> Optional[bytes]:
        return self._pages.get(path)

    def set(self, path: str, body: bytes) -> None:
        self._pages[path] = body

    def revalidate_path(self, path: str) -> None:
        if self._pages.pop(path, None) is not None:
            logger.debug("Revalidated %s", path)

    def __contains__(self, path: str) -> bool:
        return path in self._pages
