"""
Service for assembling a road-following route through a list of waypoints.
"""
from typing import List, Optional, Sequence

from tracker.cache import RouteCache
from tracker.config import ROUTE_CACHE_DIR
from tracker.geometry import LatLng, segment_key, waypoints_equal
from tracker.services.directions_service import DirectionsClient
from tracker.services.segment_service import SegmentResolver
from tracker.storage import JsonFileStore


def get_segment_keys(waypoints: Sequence[LatLng]) -> List[str]:
    """Keys of the consecutive directed segments, in order."""
    return [segment_key(waypoints[i], waypoints[i + 1]) for i in range(len(waypoints) - 1)]


def find_existing_segments(old_waypoints: Sequence[LatLng],
                           new_waypoints: Sequence[LatLng]) -> List[str]:
    """Segments of the previous route that are still part of the new one."""
    new_keys = set(get_segment_keys(new_waypoints))
    return [key for key in get_segment_keys(old_waypoints) if key in new_keys]


def find_new_segments(old_waypoints: Sequence[LatLng],
                      new_waypoints: Sequence[LatLng]) -> List[str]:
    """Segments of the new route that were not in the previous one."""
    old_keys = set(get_segment_keys(old_waypoints))
    return [key for key in get_segment_keys(new_waypoints) if key not in old_keys]


class RouteAssembler:
    """
    Joins per-segment road paths into one path through all waypoints.

    Remembers the last waypoint list and its assembled path; an identical
    waypoint list on the next call returns the remembered path without
    resolving anything.
    """

    def __init__(self, resolver: SegmentResolver):
        self.resolver = resolver
        self.last_waypoints: List[LatLng] = []
        self.last_route: List[LatLng] = []

    def assemble(self, waypoints: Sequence[LatLng]) -> List[LatLng]:
        """
        Build the full route for the waypoints in the given order.

        Args:
            waypoints: Chronologically ordered (lat, lng) pairs

        Returns:
            Concatenated segment paths, with the joint point shared by two
            consecutive segments appearing once
        """
        if len(waypoints) < 2:
            return list(waypoints)

        if self.last_route and waypoints_equal(waypoints, self.last_waypoints):
            print("[Route Service] Using cached complete route - no new locations detected")
            return list(self.last_route)

        existing = find_existing_segments(self.last_waypoints, waypoints)
        new = find_new_segments(self.last_waypoints, waypoints)
        print(f"[Route Service] Route update: {len(existing)} cached segments, "
              f"{len(new)} new segments to fetch")

        route_points: List[LatLng] = []
        for i in range(len(waypoints) - 1):
            start = (float(waypoints[i][0]), float(waypoints[i][1]))
            end = (float(waypoints[i + 1][0]), float(waypoints[i + 1][1]))

            try:
                segment = self.resolver.resolve(start, end)
            except Exception as e:
                print(f"[Route Service] Warning: failed to get route segment {i}: {e}")
                segment = [start, end]

            if i == 0:
                route_points.extend(segment)
            else:
                route_points.extend(segment[1:])

        self.last_waypoints = [(float(lat), float(lng)) for lat, lng in waypoints]
        self.last_route = list(route_points)
        print(f"[Route Service] Assembled {len(route_points)} points from {len(waypoints)} waypoints")

        return route_points


def create_route_assembler(store=None, client: Optional[DirectionsClient] = None) -> RouteAssembler:
    """Wire cache, directions client and resolver into an assembler."""
    if store is None:
        store = JsonFileStore(ROUTE_CACHE_DIR)
    cache = RouteCache(store)
    resolver = SegmentResolver(cache, client or DirectionsClient())
    return RouteAssembler(resolver)
