"""
Unit tests for the directions client and segment resolver.
"""
import pytest
import polyline
import requests
from tracker.cache import RouteCache
from tracker.geometry import segment_key
from tracker.storage import MemoryStore
from tracker.services.directions_service import DirectionsClient, DirectionsError
from tracker.services.segment_service import SegmentResolver

START = (52.52, 13.405)
END = (52.53, 13.41)
ROAD = [(52.52, 13.405), (52.525, 13.4), (52.53, 13.41)]


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self.text = text

    @property
    def ok(self):
        return 200 <= self.status_code < 300

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeClient:
    """Directions client returning a fixed geometry, or raising."""

    def __init__(self, geometry=None, error=None):
        self.geometry = geometry
        self.error = error
        self.calls = []

    def fetch_geometry(self, start, end):
        self.calls.append((start, end))
        if self.error is not None:
            raise self.error
        return self.geometry


def make_resolver(client):
    return SegmentResolver(RouteCache(MemoryStore()), client)


def test_client_posts_lng_lat_body(monkeypatch):
    """Test: Request body uses [lng, lat] order and the api_key parameter"""
    captured = {}

    def fake_post(url, params=None, json=None, timeout=None):
        captured.update(url=url, params=params, json=json, timeout=timeout)
        return FakeResponse(payload={'routes': [{'geometry': 'abc'}, {'geometry': 'xyz'}]})

    monkeypatch.setattr(requests, 'post', fake_post)
    client = DirectionsClient(base_url="http://routing.test/driving-car", api_key="secret", timeout=3)

    geometry = client.fetch_geometry(START, END)

    assert geometry == 'abc'
    assert captured['url'] == "http://routing.test/driving-car"
    assert captured['params'] == {'api_key': 'secret'}
    assert captured['json'] == {'coordinates': [[13.405, 52.52], [13.41, 52.53]]}
    assert captured['timeout'] == 3


@pytest.mark.parametrize("response", [
    FakeResponse(status_code=500, payload={'error': 'boom'}, text='boom'),
    FakeResponse(status_code=403, payload={}, text='forbidden'),
    FakeResponse(payload={'routes': []}),
    FakeResponse(payload={}),
    FakeResponse(payload={'routes': [{'summary': {}}]}),
    FakeResponse(payload=None),
])
def test_client_bad_responses_raise(monkeypatch, response):
    """Test: Non-2xx, empty routes, or missing geometry → DirectionsError"""
    monkeypatch.setattr(requests, 'post', lambda *args, **kwargs: response)

    with pytest.raises(DirectionsError):
        DirectionsClient(base_url="http://routing.test", api_key="k").fetch_geometry(START, END)


def test_client_transport_error_raises(monkeypatch):
    """Test: Connection failures are wrapped in DirectionsError"""
    def fake_post(*args, **kwargs):
        raise requests.exceptions.ConnectionError("unreachable")

    monkeypatch.setattr(requests, 'post', fake_post)

    with pytest.raises(DirectionsError):
        DirectionsClient(base_url="http://routing.test", api_key="k").fetch_geometry(START, END)


def test_resolve_fetches_decodes_and_caches():
    """Test: Cache miss → provider call, decoded path cached under the key"""
    client = FakeClient(geometry=polyline.encode(ROAD, 5))
    resolver = make_resolver(client)

    path = resolver.resolve(START, END)

    assert path == ROAD
    assert len(client.calls) == 1
    assert resolver.cache.get(segment_key(START, END)) == ROAD


def test_resolve_cache_hit_skips_provider():
    """Test: Second call for the same segment is served from cache"""
    client = FakeClient(geometry=polyline.encode(ROAD, 5))
    resolver = make_resolver(client)

    resolver.resolve(START, END)
    path = resolver.resolve(START, END)

    assert path == ROAD
    assert len(client.calls) == 1


def test_resolve_is_direction_sensitive():
    """Test: The reverse segment is a separate cache entry"""
    client = FakeClient(geometry=polyline.encode(ROAD, 5))
    resolver = make_resolver(client)

    resolver.resolve(START, END)
    resolver.resolve(END, START)

    assert len(client.calls) == 2


def test_resolve_fallback_is_not_cached():
    """Test: Failing provider → straight line, nothing cached, retried next time"""
    client = FakeClient(error=DirectionsError("Routing API error: 500"))
    resolver = make_resolver(client)

    first = resolver.resolve(START, END)
    second = resolver.resolve(START, END)

    assert first == [START, END]
    assert second == [START, END]
    assert not resolver.cache.has(segment_key(START, END))
    assert len(client.calls) == 2


def test_resolve_malformed_geometry_falls_back():
    """Test: Undecodable geometry → straight line"""
    client = FakeClient(geometry="_p~iF~ps|")
    resolver = make_resolver(client)

    assert resolver.resolve(START, END) == [START, END]
    assert len(resolver.cache) == 0


def test_resolve_unexpected_error_falls_back():
    """Test: Any exception from the client is absorbed"""
    client = FakeClient(error=RuntimeError("unexpected"))
    resolver = make_resolver(client)

    assert resolver.resolve(START, END) == [START, END]


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
