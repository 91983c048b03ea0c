"""
Caching logic for road-following route segments.
"""
from typing import Callable, Dict, List, Optional
import json
import time

from tracker.config import ROUTE_CACHE_KEY, ROUTE_CACHE_TTL_SECONDS, ROUTE_CACHE_VERSION
from tracker.geometry import LatLng
from tracker.storage import CorruptRecordError, StorageError


class RouteCache:
    """
    Segment key -> decoded road path, persisted as one versioned envelope.

    The envelope ``{"version", "routes", "lastUpdated"}`` is loaded once on
    construction and rewritten in full on every set(). An envelope with a
    different version, or older than the TTL, is dropped as a whole.
    """

    def __init__(self, store, storage_key: str = ROUTE_CACHE_KEY,
                 version: str = ROUTE_CACHE_VERSION,
                 ttl_seconds: float = ROUTE_CACHE_TTL_SECONDS,
                 clock: Callable[[], float] = time.time):
        self._cache: Dict[str, List[LatLng]] = {}
        self._store = store
        self._storage_key = storage_key
        self._version = version
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._persistent = True
        self._load_from_storage()

    @property
    def persistent(self) -> bool:
        """False once the backing store turned out to be unavailable."""
        return self._persistent

    def _now_millis(self) -> int:
        return int(self._clock() * 1000)

    def _discard_stored(self) -> None:
        try:
            self._store.delete(self._storage_key)
        except StorageError as e:
            print(f"[Route Cache] Warning: failed to erase stored cache: {e}")

    def _load_from_storage(self) -> None:
        try:
            stored = self._store.read(self._storage_key)
        except CorruptRecordError as e:
            print(f"[Route Cache] Warning: stored cache is corrupt, clearing: {e}")
            self._discard_stored()
            return
        except StorageError as e:
            print(f"[Route Cache] Warning: storage unavailable, using in-memory cache only: {e}")
            self._persistent = False
            return

        if not stored:
            return

        try:
            data = json.loads(stored)
            version = data["version"]
            last_updated = float(data["lastUpdated"])
            routes = {
                str(key): [(float(lat), float(lng)) for lat, lng in path]
                for key, path in data["routes"].items()
            }
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            print(f"[Route Cache] Warning: failed to parse stored cache, clearing: {e}")
            self._discard_stored()
            return

        age_millis = self._now_millis() - last_updated
        if version != self._version:
            print(f"[Route Cache] Version mismatch ({version} != {self._version}), clearing")
            self._discard_stored()
            return
        if age_millis > self._ttl_seconds * 1000:
            print("[Route Cache] Cache expired, clearing")
            self._discard_stored()
            return

        self._cache.update(routes)
        print(f"[Route Cache] Loaded {len(self._cache)} cached routes from storage")

    def _save_to_storage(self) -> None:
        if not self._persistent:
            return
        data = {
            "version": self._version,
            "routes": {key: [list(point) for point in path] for key, path in self._cache.items()},
            "lastUpdated": self._now_millis(),
        }
        try:
            self._store.write(self._storage_key, json.dumps(data))
            print(f"[Route Cache] Saved {len(self._cache)} routes to storage")
        except StorageError as e:
            print(f"[Route Cache] Warning: failed to save route cache: {e}")

    def has(self, key: str) -> bool:
        """Check if a segment is cached."""
        return key in self._cache

    def get(self, key: str) -> Optional[List[LatLng]]:
        """Get a cached segment path."""
        path = self._cache.get(key)
        if path is None:
            return None
        return list(path)

    def set(self, key: str, path: List[LatLng]) -> None:
        """Cache a segment path and write the whole cache through to storage."""
        self._cache[key] = [(float(lat), float(lng)) for lat, lng in path]
        self._save_to_storage()

    def clear(self) -> None:
        """Drop every cached segment, in memory and in storage."""
        self._cache.clear()
        if self._persistent:
            self._discard_stored()

    def __len__(self) -> int:
        return len(self._cache)
