"""
Overpass API client

Handles communication with Overpass API including:
- Endpoint failover (primary, then mirrors)
- Rate limiting backoff
- Retry logic with a hard per-attempt deadline
"""

import json
import time
import requests
from typing import Dict, Any, Optional, Tuple
from loguru import logger

from ...config import ExtractorConfig, get_config
from .cache import OverpassCache


class OverpassAPIClient:
    """
    Client for interacting with Overpass API

    query() never raises for network or service failures: when every
    endpoint has been exhausted it returns None and the caller treats the
    query as having produced no data.
    """

    def __init__(
        self,
        config: Optional[ExtractorConfig] = None,
        cache: Optional[OverpassCache] = None,
        session: Optional[requests.Session] = None
    ):
        self.config = config or get_config()
        self.endpoints = list(self.config.api.overpass_endpoints)
        self.max_retries = self.config.api.max_retries
        self.timeout = self.config.api.request_timeout_s
        self.cache = cache or OverpassCache(self.config.cache_dir)
        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": self.config.api.user_agent,
            "Content-Type": "text/plain; charset=utf-8",
        })

    def endpoint_label(self, index: int) -> str:
        """Human-readable endpoint name for progress lines"""
        if index == 0:
            return "primary"
        if len(self.endpoints) > 2:
            return f"mirror {index}"
        return "mirror"

    def query(self, query: str) -> Optional[Dict[str, Any]]:
        """
        Execute Overpass query with failover and retry logic

        Args:
            query: Overpass QL query string

        Returns:
            Parsed JSON response, or None if all endpoints failed
        """
        cached = self.cache.load(query)
        if cached is not None:
            return cached

        for index, endpoint in enumerate(self.endpoints):
            label = self.endpoint_label(index)

            for attempt in range(self.max_retries):
                logger.info(f"  → {label}" + (f" (retry {attempt})" if attempt > 0 else ""))

                try:
                    status, body = self._post(endpoint, query)
                except requests.exceptions.Timeout:
                    logger.warning(f"  ⚠ Timeout after {self.timeout:.0f}s")
                    if self._is_last_attempt(attempt):
                        break
                    time.sleep(self.config.api.retry_delay_s)
                    continue
                except requests.exceptions.RequestException as e:
                    logger.warning(f"  ⚠ Request failed: {e}")
                    if self._is_last_attempt(attempt):
                        break
                    time.sleep(self.config.api.retry_delay_s)
                    continue

                if status == 429:
                    wait_time = self.config.api.rate_limit_backoff_s * (attempt + 1)
                    logger.warning(f"  ⚠ Rate limited. Waiting {wait_time:.0f}s...")
                    time.sleep(wait_time)
                    continue
                if status >= 500:
                    logger.warning(f"  ⚠ Server {status}. Trying next endpoint...")
                    break
                if not 200 <= status < 300:
                    logger.warning(f"  ⚠ HTTP {status}")
                    time.sleep(self.config.api.retry_delay_s)
                    continue

                data = self._decode(body)
                if data is None:
                    if self._is_last_attempt(attempt):
                        break
                    time.sleep(self.config.api.retry_delay_s)
                    continue

                self.cache.save(query, data)
                return data

        logger.error(f"Overpass query failed on all {len(self.endpoints)} endpoint(s)")
        return None

    def _is_last_attempt(self, attempt: int) -> bool:
        return attempt >= self.max_retries - 1

    def _post(self, endpoint: str, query: str) -> Tuple[int, bytes]:
        """
        POST the query and read the body before the wall-clock deadline

        requests' own timeout only bounds individual socket reads, so the
        body is streamed and every blocking read gets the time left until
        the deadline as its socket timeout.

        Raises:
            requests.exceptions.Timeout: deadline passed
            requests.exceptions.RequestException: transport failure
        """
        deadline = time.monotonic() + self.timeout
        connect_timeout = min(self.config.api.connect_timeout_s, self.timeout)
        response = self.session.post(
            endpoint,
            data=query.encode("utf-8"),
            timeout=(connect_timeout, self.timeout),
            stream=True
        )
        try:
            self._check_deadline(deadline, endpoint)
            if not 200 <= response.status_code < 300:
                return response.status_code, b""

            chunks = []
            body = response.iter_content(chunk_size=64 * 1024)
            while True:
                remaining = self._check_deadline(deadline, endpoint)
                self._set_read_timeout(response, remaining)
                try:
                    chunk = next(body)
                except StopIteration:
                    break
                chunks.append(chunk)

            self._check_deadline(deadline, endpoint)
            return response.status_code, b"".join(chunks)
        finally:
            response.close()

    def _check_deadline(self, deadline: float, endpoint: str) -> float:
        """Seconds left before the deadline; raises Timeout once it has passed"""
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise requests.exceptions.Timeout(
                f"Response from {endpoint} not complete within {self.timeout:.0f}s"
            )
        return remaining

    @staticmethod
    def _set_read_timeout(response: requests.Response, seconds: float):
        """Bound the next socket read of a streamed response"""
        raw = response.raw
        connection = getattr(raw, "connection", None) or getattr(raw, "_connection", None)
        sock = getattr(connection, "sock", None)
        if sock is not None:
            sock.settimeout(seconds)

    @staticmethod
    def _decode(body: bytes) -> Optional[Dict[str, Any]]:
        """Parse a JSON object body; None when it is not valid JSON"""
        try:
            data = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            logger.warning(f"  ⚠ Invalid JSON response: {e}")
            return None
        if not isinstance(data, dict):
            logger.warning(f"  ⚠ Unexpected response type: {type(data).__name__}")
            return None
        return data
