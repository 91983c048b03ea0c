"""
Client for the routing provider's directions endpoint.
"""
import requests
from typing import Optional

from tracker.config import ORS_BASE_URL, ORS_API_KEY, ROUTING_TIMEOUT_SECONDS
from tracker.geometry import LatLng


class DirectionsError(Exception):
    """Raised when the routing provider does not return a usable route."""


class DirectionsClient:
    """
    Talks to the directions endpoint over HTTP.

    Converts internal (lat, lng) pairs to the provider's [lng, lat] order and
    returns the encoded geometry of the first route.
    """

    def __init__(self, base_url: str = ORS_BASE_URL, api_key: Optional[str] = ORS_API_KEY,
                 timeout: float = ROUTING_TIMEOUT_SECONDS):
        self.base_url = base_url
        self.api_key = api_key
        self.timeout = timeout

    def fetch_geometry(self, start: LatLng, end: LatLng) -> str:
        """
        Request a driving route for start -> end.

        Returns:
            Encoded polyline geometry of the first route

        Raises:
            DirectionsError: on transport failure, non-2xx status, or a
                response without routes
        """
        body = {
            "coordinates": [
                [start[1], start[0]],
                [end[1], end[0]]
            ]
        }

        try:
            response = requests.post(
                self.base_url,
                params={"api_key": self.api_key},
                json=body,
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            raise DirectionsError(f"Routing request failed: {e}") from e

        if not response.ok:
            raise DirectionsError(
                f"Routing API error: {response.status_code} {response.text[:200]}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise DirectionsError(f"Routing API returned invalid JSON: {e}") from e

        routes = data.get("routes") if isinstance(data, dict) else None
        if not routes:
            raise DirectionsError("No route found")

        geometry = routes[0].get("geometry") if isinstance(routes[0], dict) else None
        if not isinstance(geometry, str):
            raise DirectionsError("Route has no encoded geometry")

        return geometry
