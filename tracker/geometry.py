"""
Coordinate helpers: encoded polyline decoding and segment cache keys.
"""
import polyline
from typing import List, Sequence, Tuple

from tracker.config import COORDINATE_TOLERANCE, POLYLINE_PRECISION

# Internal coordinate type: (lat, lng)
LatLng = Tuple[float, float]


class PolylineDecodeError(ValueError):
    """Raised when an encoded polyline string is malformed."""


def decode_polyline(encoded: str, precision: int = POLYLINE_PRECISION) -> List[LatLng]:
    """
    Decode an encoded polyline string into a list of (lat, lng) pairs.

    A string that ends in the middle of a value, holds a latitude without
    its longitude, or contains characters outside '?'..'~' raises
    PolylineDecodeError.
    """
    if not isinstance(encoded, str):
        raise PolylineDecodeError(f"Expected an encoded string, got {type(encoded).__name__}")

    for offset, char in enumerate(encoded):
        if not 63 <= ord(char) <= 126:
            raise PolylineDecodeError(
                f"Invalid polyline character {char!r} at offset {offset}"
            )

    try:
        decoded = polyline.decode(encoded, precision)
    except (IndexError, TypeError, ValueError) as e:
        raise PolylineDecodeError(f"Truncated or malformed polyline: {e}") from e

    return [(float(lat), float(lng)) for lat, lng in decoded]


def segment_key(start: Sequence[float], end: Sequence[float]) -> str:
    """Cache key for the directed edge start -> end at microdegree precision."""
    return f"{start[0]:.6f},{start[1]:.6f}-{end[0]:.6f},{end[1]:.6f}"


def coordinates_equal(a: Sequence[float], b: Sequence[float],
                      tolerance: float = COORDINATE_TOLERANCE) -> bool:
    """Check if two coordinates match within tolerance on each axis."""
    return abs(a[0] - b[0]) < tolerance and abs(a[1] - b[1]) < tolerance


def waypoints_equal(a: Sequence[Sequence[float]], b: Sequence[Sequence[float]]) -> bool:
    """Element-wise comparison of two waypoint sequences (same length and order)."""
    if len(a) != len(b):
        return False
    return all(coordinates_equal(p, q) for p, q in zip(a, b))
