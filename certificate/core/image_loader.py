import io
import logging
import os
import threading

import requests
from PIL import Image, UnidentifiedImageError

from .paths import is_remote

logger = logging.getLogger(__name__)


class ImageLoader:
    """Loads bound images from disk or from the asset server, caching bytes by source.

    Remote sources are downloaded only when ``fetch`` is true, which the
    background loader does; paint and export read the cache. A download that
    failed is not retried until the source is forgotten.
    """

    def __init__(self, timeout: float = 10.0, session=None):
        self.timeout = timeout
        self.session = session or requests.Session()
        self._cache: dict[str, bytes] = {}
        self._failed: set[str] = set()
        self._lock = threading.Lock()

    def read_bytes(self, source, fetch: bool = True):
        """Raw bytes of ``source`` or None when it cannot be read."""
        if not source:
            return None
        with self._lock:
            cached = self._cache.get(source)
            failed = source in self._failed
        if cached is not None:
            return cached

        data = None
        if is_remote(source):
            if failed or not fetch:
                return None
            try:
                response = self.session.get(source, timeout=self.timeout)
                response.raise_for_status()
                data = response.content
            except requests.RequestException as e:
                logger.warning("Could not download %s: %s", source, e)
                with self._lock:
                    self._failed.add(source)
        elif os.path.exists(source):
            with open(source, "rb") as f:
                data = f.read()
        else:
            logger.warning("Image not found: %s", source)

        if data is not None:
            with self._lock:
                self._cache[source] = data
        return data

    def prefetch(self, sources):
        """Download ``sources`` now, retrying ones that failed before."""
        for source in sources:
            if source:
                with self._lock:
                    self._failed.discard(source)
                self.read_bytes(source)

    def forget(self, source):
        with self._lock:
            self._cache.pop(source, None)
            self._failed.discard(source)

    def retain(self, sources):
        """Drop every cached source not in ``sources``."""
        keep = {s for s in sources if s}
        with self._lock:
            stale = (set(self._cache) | self._failed) - keep
        for source in stale:
            self.forget(source)

    def cached_sources(self) -> set:
        with self._lock:
            return set(self._cache)

    def load(self, source, fetch: bool = True):
        """Decoded RGBA image, or None if missing or unreadable."""
        data = self.read_bytes(source, fetch=fetch)
        if data is None:
            return None
        try:
            return Image.open(io.BytesIO(data)).convert("RGBA")
        except (UnidentifiedImageError, OSError) as e:
            logger.warning("Could not decode %s: %s", source, e)
            return None

    def load_scaled(self, source, width, height, fetch: bool = True):
        img = self.load(source, fetch=fetch)
        if img is None:
            return None
        return img.resize((width, height), Image.LANCZOS)
