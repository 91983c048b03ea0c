"""
Service for resolving a single directed segment into a road-following path.
"""
from typing import List

from tracker.cache import RouteCache
from tracker.geometry import LatLng, decode_polyline, segment_key
from tracker.services.directions_service import DirectionsClient


class SegmentResolver:
    """Cache first, then the routing provider, then a straight line."""

    def __init__(self, cache: RouteCache, client: DirectionsClient):
        self.cache = cache
        self.client = client

    def resolve(self, start: LatLng, end: LatLng) -> List[LatLng]:
        """
        Get the road path for the directed segment start -> end.

        Never raises. When the provider fails the straight line
        [start, end] is returned and nothing is cached, so the next call
        retries the provider.
        """
        start = (float(start[0]), float(start[1]))
        end = (float(end[0]), float(end[1]))
        key = segment_key(start, end)

        if self.cache.has(key):
            print(f"[Segment Service] Using cached route for {key}")
            return self.cache.get(key)

        print(f"[Segment Service] Fetching route for {key}")
        try:
            geometry = self.client.fetch_geometry(start, end)
            path = decode_polyline(geometry)
            if not path:
                raise ValueError("Decoded route is empty")
        except Exception as e:
            print(f"[Segment Service] Warning: routing failed for {key}, using straight line: {e}")
            return [start, end]

        print(f"[Segment Service] Decoded {len(path)} points for {key}")
        self.cache.set(key, path)
        return path
