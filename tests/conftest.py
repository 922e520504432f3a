"""
Shared fixtures for Railway Data Extractor tests

No test touches the network: HTTP is scripted through FakeSession and
collectors talk to StubClient. Sleeps are recorded by FakeClock instead of
being performed.
"""

import json
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest

from rail_extractor.collectors import railways, stations
from rail_extractor.collectors.overpass import api_client
from rail_extractor import pipeline
from rail_extractor.config import ExtractorConfig
from rail_extractor.models import BoundingBox, CountrySpec


class FakeClock:
    """Replaces the time module inside the modules under test"""

    def __init__(self):
        self.now = 0.0
        self.sleeps: List[float] = []

    def sleep(self, seconds: float):
        self.sleeps.append(seconds)
        self.now += seconds

    def monotonic(self) -> float:
        return self.now


class FakeSocket:
    def __init__(self):
        self.timeouts: List[float] = []

    def settimeout(self, seconds: float):
        self.timeouts.append(seconds)


class FakeRaw:
    """Mimics urllib3's response.raw.connection.sock"""

    def __init__(self):
        self.connection = SimpleNamespace(sock=FakeSocket())


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, body: Optional[bytes] = None,
                 on_chunk=None):
        self.status_code = status_code
        if body is None:
            body = json.dumps(payload if payload is not None else {"elements": []}).encode("utf-8")
        self.body = body
        self.on_chunk = on_chunk
        self.raw = FakeRaw()
        self.closed = False

    def iter_content(self, chunk_size: int = 1):
        for start in range(0, len(self.body), chunk_size):
            if self.on_chunk:
                self.on_chunk()
            yield self.body[start:start + chunk_size]

    def close(self):
        self.closed = True


class FakeSession:
    """Returns scripted responses (or raises scripted exceptions) in order"""

    def __init__(self, script: List[Any], on_post=None):
        self.script = list(script)
        self.on_post = on_post
        self.calls: List[Dict[str, Any]] = []
        self.headers: Dict[str, str] = {}

    def post(self, url, data=None, timeout=None, stream=False):
        self.calls.append({"url": url, "data": data, "timeout": timeout, "stream": stream})
        if self.on_post:
            self.on_post()
        item = self.script.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class StubClient:
    """Stands in for OverpassAPIClient: returns scripted parsed responses"""

    def __init__(self, responses: List[Optional[Dict[str, Any]]]):
        self.responses = list(responses)
        self.queries: List[str] = []

    def query(self, query: str) -> Optional[Dict[str, Any]]:
        self.queries.append(query)
        if not self.responses:
            return {"elements": []}
        return self.responses.pop(0)


def way(id: int, points, railway: Optional[str] = "rail") -> Dict[str, Any]:
    tags = {"railway": railway} if railway else {}
    return {
        "type": "way",
        "id": id,
        "tags": tags,
        "geometry": [{"lat": lat, "lon": lon} for lat, lon in points],
    }


def node(id: int, lat: float, lon: float, **tags) -> Dict[str, Any]:
    return {"type": "node", "id": id, "lat": lat, "lon": lon, "tags": tags}


def way_center(id: int, lat: float, lon: float, **tags) -> Dict[str, Any]:
    return {"type": "way", "id": id, "center": {"lat": lat, "lon": lon}, "tags": tags}


@pytest.fixture
def clock(monkeypatch):
    fake = FakeClock()
    for module in (api_client, railways, stations, pipeline):
        monkeypatch.setattr(module, "time", fake)
    return fake


@pytest.fixture
def config(tmp_path):
    cfg = ExtractorConfig()
    cfg.output_dir = str(tmp_path / "data")
    return cfg


@pytest.fixture
def small_country():
    return CountrySpec(
        key="alpha", name="Alpha", code="AL",
        bbox=BoundingBox.from_list([0, 0, 10, 10]), size="small"
    )


@pytest.fixture
def two_tile_country():
    # 6 x 12 degrees with the 6 degree "large" tile size: two tiles side by side
    return CountrySpec(
        key="beta", name="Beta", code="BE",
        bbox=BoundingBox.from_list([0, 0, 6, 12]), size="large"
    )
