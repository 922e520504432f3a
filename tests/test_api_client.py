"""
Tests for the Overpass API client: failover, retries, backoff and deadline
"""

import requests

from rail_extractor.collectors.overpass import OverpassAPIClient, OverpassCache

from conftest import FakeResponse, FakeSession

PRIMARY = "https://overpass-api.de/api/interpreter"
MIRROR = "https://overpass.kumi.systems/api/interpreter"
DATA = {"elements": [{"type": "node", "id": 1, "lat": 1.0, "lon": 2.0}]}


def make_client(config, script):
    session = FakeSession(script)
    return OverpassAPIClient(config, session=session), session


def urls(session):
    return [c["url"] for c in session.calls]


def test_success_returns_parsed_json(config, clock):
    client, session = make_client(config, [FakeResponse(200, DATA)])
    assert client.query("q") == DATA
    assert urls(session) == [PRIMARY]
    assert session.calls[0]["data"] == b"q"
    assert session.calls[0]["stream"] is True
    assert clock.sleeps == []


def test_rate_limit_backs_off_and_retries_same_endpoint(config, clock):
    client, session = make_client(config, [FakeResponse(429), FakeResponse(200, DATA)])
    assert client.query("q") == DATA
    assert urls(session) == [PRIMARY, PRIMARY]
    assert clock.sleeps == [config.api.rate_limit_backoff_s * 1]


def test_rate_limit_backoff_grows_with_attempt(config, clock):
    client, _ = make_client(config, [FakeResponse(429), FakeResponse(429), FakeResponse(200, DATA)])
    assert client.query("q") == DATA
    assert clock.sleeps == [15.0, 30.0]


def test_server_error_switches_endpoint_immediately(config, clock):
    client, session = make_client(config, [FakeResponse(503), FakeResponse(200, DATA)])
    assert client.query("q") == DATA
    assert urls(session) == [PRIMARY, MIRROR]
    assert clock.sleeps == []


def test_all_endpoints_failing_returns_none(config, clock):
    client, session = make_client(config, [FakeResponse(500), FakeResponse(500)])
    assert client.query("q") is None
    assert urls(session) == [PRIMARY, MIRROR]


def test_other_http_status_retries_after_fixed_delay(config, clock):
    client, session = make_client(config, [FakeResponse(400), FakeResponse(200, DATA)])
    assert client.query("q") == DATA
    assert urls(session) == [PRIMARY, PRIMARY]
    assert clock.sleeps == [config.api.retry_delay_s]


def test_transport_errors_exhaust_retries_then_fall_through(config, clock):
    script = [requests.exceptions.ConnectionError("refused")] * 3 + [FakeResponse(200, DATA)]
    client, session = make_client(config, script)
    assert client.query("q") == DATA
    assert urls(session) == [PRIMARY] * 3 + [MIRROR]
    # No delay after the final attempt on an endpoint
    assert clock.sleeps == [5.0, 5.0]


def test_timeouts_everywhere_return_none(config, clock):
    script = [requests.exceptions.Timeout("slow")] * 6
    client, session = make_client(config, script)
    assert client.query("q") is None
    assert len(session.calls) == 6
    assert clock.sleeps == [5.0] * 4


def test_wall_clock_deadline_abandons_slow_body(config, clock):
    config.api.request_timeout_s = 10

    def crawl():
        clock.now += 6

    slow = FakeResponse(200, DATA, on_chunk=crawl)
    slow.body = b"x" * (3 * 64 * 1024)
    client, session = make_client(config, [slow, FakeResponse(200, DATA)])

    assert client.query("q") == DATA
    assert urls(session) == [PRIMARY, PRIMARY]
    assert slow.closed


def delayed_post(clock, delays):
    """on_post hook advancing the clock by the next delay on each call"""
    pending = list(delays)

    def advance():
        clock.now += pending.pop(0) if pending else 0

    return advance


def test_slow_headers_and_slow_body_share_one_deadline(config, clock):
    def crawl():
        clock.now += 100

    slow = FakeResponse(200, DATA, on_chunk=crawl)
    session = FakeSession([slow, FakeResponse(200, DATA)], on_post=delayed_post(clock, [150]))
    client = OverpassAPIClient(config, session=session)

    assert client.query("q") == DATA
    assert urls(session) == [PRIMARY, PRIMARY]
    connect, read = session.calls[0]["timeout"]
    assert connect == config.api.connect_timeout_s
    assert read <= config.api.request_timeout_s
    # The first body read only gets what is left of the 200 s budget
    assert slow.raw.connection.sock.timeouts[0] == 50
    assert slow.closed


def test_headers_past_deadline_abandon_attempt(config, clock):
    late = FakeResponse(200, DATA)
    session = FakeSession([late, FakeResponse(200, DATA)], on_post=delayed_post(clock, [250]))
    client = OverpassAPIClient(config, session=session)

    assert client.query("q") == DATA
    assert len(session.calls) == 2
    assert late.raw.connection.sock.timeouts == []
    assert late.closed
    assert clock.sleeps == [config.api.retry_delay_s]


def test_invalid_json_is_retried(config, clock):
    client, session = make_client(config, [FakeResponse(200, body=b"<html>busy</html>"),
                                           FakeResponse(200, DATA)])
    assert client.query("q") == DATA
    assert len(session.calls) == 2


def test_single_mirror_label(config):
    client, _ = make_client(config, [])
    assert client.endpoint_label(0) == "primary"
    assert client.endpoint_label(1) == "mirror"


def test_numbered_mirror_labels(config):
    config.api.overpass_endpoints.append("https://example.org/api/interpreter")
    client, _ = make_client(config, [])
    assert client.endpoint_label(2) == "mirror 2"


def test_cache_serves_repeated_query(config, clock, tmp_path):
    session = FakeSession([FakeResponse(200, DATA)])
    client = OverpassAPIClient(config, cache=OverpassCache(str(tmp_path / "cache")), session=session)

    assert client.query("q") == DATA
    assert client.query("q") == DATA
    assert len(session.calls) == 1
