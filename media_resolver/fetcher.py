# media_resolver/fetcher.py

import logging
import threading
import time
import xml.etree.ElementTree as ET
from typing import Optional, Protocol, runtime_checkable

import requests
from tenacity import Retrying, stop_after_attempt, wait_fixed, retry_if_exception

from . import __version__
from .exceptions import FormatError, TransportError

log = logging.getLogger(__name__)

USER_AGENT = f"media-resolver/{__version__}"

@runtime_checkable
class DocumentFetcher(Protocol):
    def fetch(self, url: str) -> ET.Element:
        """Returns the root element of the XML document at `url`. Raises TransportError or FormatError."""
        ...


class RateLimiter:
    def __init__(self, delay: float):
        self.delay = delay
        self.last_call = 0.0
        self._lock = threading.Lock()

    def wait(self):
        if self.delay <= 0: return
        with self._lock:
            since_last = time.monotonic() - self.last_call
            if since_last < self.delay:
                wait_time = self.delay - since_last
                log.debug(f"Rate limiting: sleeping for {wait_time:.2f}s")
                time.sleep(wait_time)
            self.last_call = time.monotonic()


def should_retry_request(exception: BaseException) -> bool:
    if isinstance(exception, (requests.exceptions.ConnectionError, requests.exceptions.Timeout)):
        log.debug(f"Retry check PASSED for Connection/Timeout Error: {type(exception).__name__}")
        return True
    if isinstance(exception, requests.exceptions.HTTPError):
        status_code = getattr(getattr(exception, 'response', None), 'status_code', 0) or 0
        if status_code == 429: log.warning("Retry check PASSED for HTTP 429 (Rate Limit)."); return True
        if 500 <= status_code <= 599: log.warning(f"Retry check PASSED for HTTP {status_code} (Server Error)."); return True
        log.debug(f"Retry check FAILED for HTTP Status Code: {status_code}")
    return False


class HttpDocumentFetcher:
    """Fetches XML documents over HTTP. Transient failures are retried before surfacing as TransportError."""

    def __init__(self, timeout: float = 20.0, retry_attempts: int = 3, retry_wait_seconds: float = 2.0,
                 rate_limit_delay: float = 0.0, session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.retry_attempts = max(1, retry_attempts)
        self.retry_wait_seconds = retry_wait_seconds
        self.rate_limiter = RateLimiter(rate_limit_delay)
        self.session = session or requests.Session()
        self.session.headers.setdefault('User-Agent', USER_AGENT)

    @classmethod
    def from_config(cls, cfg_helper) -> 'HttpDocumentFetcher':
        return cls(
            timeout=float(cfg_helper('http_timeout_seconds', 20.0)),
            retry_attempts=int(cfg_helper('api_retry_attempts', 3)),
            retry_wait_seconds=float(cfg_helper('api_retry_wait_seconds', 2.0)),
            rate_limit_delay=float(cfg_helper('api_rate_limit_delay', 0.5)),
        )

    def _get(self, url: str) -> bytes:
        self.rate_limiter.wait()
        response = self.session.get(url, timeout=self.timeout)
        response.raise_for_status()
        return response.content

    def fetch(self, url: str) -> ET.Element:
        log.debug(f"Fetching document: {url}")
        retryer = Retrying(
            stop=stop_after_attempt(self.retry_attempts),
            wait=wait_fixed(self.retry_wait_seconds),
            retry=retry_if_exception(should_retry_request),
            reraise=True,
        )
        try:
            content = retryer(self._get, url)
        except requests.exceptions.RequestException as e:
            log.error(f"Failed to fetch '{url}': {type(e).__name__}: {e}")
            raise TransportError(f"Failed to fetch {url}: {e}") from e

        try:
            return ET.fromstring(content)
        except ET.ParseError as e:
            log.error(f"Malformed XML document from '{url}': {e}")
            raise FormatError(f"Malformed XML document from {url}: {e}") from e
