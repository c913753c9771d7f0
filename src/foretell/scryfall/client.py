"""Scryfall API client with polite rate limiting and retry logic.

Features:
- Minimum spacing between requests (Scryfall asks for 50-100ms)
- Respects Retry-After headers on 429
- Exponential backoff with jitter for 5xx and network errors
- Pagination over list objects (``has_more`` / ``next_page``)
- Scryfall error objects surfaced as :class:`ScryfallError`
"""

import random
import threading
import time
from dataclasses import dataclass
from typing import IO, Any, Iterator, Optional

import requests

from foretell.core.logging import get_logger
from foretell.errors import CardsNotFound, NetworkError, ResponseFormatError, ScryfallError
from foretell.scryfall.models import CardEntry, SetRecord

logger = get_logger(__name__)

# Raised by the payload parsers on data of the wrong shape
PARSE_ERRORS = (AttributeError, KeyError, TypeError, ValueError)


@dataclass
class RetryConfig:
    """Configuration for retry behavior."""

    max_retries: int = 3
    base_delay: float = 0.5  # seconds
    max_delay: float = 30.0  # seconds
    exponential_base: float = 2.0
    jitter: bool = True
    timeout: int = 30  # seconds

    def get_delay(self, attempt: int) -> float:
        """Calculate delay for given attempt with exponential backoff and jitter."""
        delay = min(self.base_delay * (self.exponential_base**attempt), self.max_delay)

        if self.jitter:
            delay += random.uniform(0, delay * 0.5)

        return delay


class ScryfallClient:
    """Thin client for the parts of the Scryfall API foretell needs.

    Safe to share between the sync worker threads: request spacing is
    guarded by a lock.
    """

    def __init__(
        self,
        api_base: str = "https://api.scryfall.com",
        user_agent: str = "foretell/1.0",
        retry: Optional[RetryConfig] = None,
        request_interval: float = 0.1,
        session: Optional[requests.Session] = None,
    ):
        self.api_base = api_base.rstrip("/")
        self.retry = retry or RetryConfig()
        self.request_interval = request_interval
        self.session = session or requests.Session()
        self.session.headers.update(
            {"User-Agent": user_agent, "Accept": "application/json;q=0.9,*/*;q=0.8"}
        )
        self._rate_lock = threading.Lock()
        self._last_request = 0.0

    @classmethod
    def from_settings(cls, config) -> "ScryfallClient":
        return cls(
            api_base=config.api_base,
            user_agent=config.user_agent,
            retry=RetryConfig(
                max_retries=config.max_retry_attempts,
                base_delay=config.retry_base_delay,
                timeout=config.http_timeout,
            ),
            request_interval=config.request_interval,
        )

    def _wait_for_rate_limit(self) -> None:
        with self._rate_lock:
            elapsed = time.monotonic() - self._last_request
            if elapsed < self.request_interval:
                time.sleep(self.request_interval - elapsed)
            self._last_request = time.monotonic()

    def _url(self, path: str) -> str:
        if path.startswith("http"):
            return path
        return f"{self.api_base}{path}"

    def _request(
        self, url: str, params: Optional[dict[str, Any]] = None, stream: bool = False
    ) -> requests.Response:
        """GET ``url``, retrying transient failures.

        Raises:
            ScryfallError: The API answered with an error status
            NetworkError: All attempts failed at the transport level
        """
        last_error: Optional[Exception] = None

        for attempt in range(self.retry.max_retries):
            self._wait_for_rate_limit()
            final = attempt == self.retry.max_retries - 1
            try:
                response = self.session.get(
                    url, params=params, timeout=self.retry.timeout, stream=stream
                )
            except requests.RequestException as exc:
                last_error = exc
                if final:
                    break
                delay = self.retry.get_delay(attempt)
                logger.warning(
                    "Request to {} failed ({}), retrying in {:.1f}s", url, exc, delay
                )
                time.sleep(delay)
                continue

            if response.status_code == 429 and not final:
                delay = self._retry_after(response, attempt)
                logger.info("Scryfall is busy, waiting {:.1f}s before retry", delay)
                response.close()
                time.sleep(delay)
                continue

            if 500 <= response.status_code < 600 and not final:
                delay = self.retry.get_delay(attempt)
                logger.warning(
                    "Scryfall returned {}, retrying in {:.1f}s",
                    response.status_code,
                    delay,
                )
                response.close()
                time.sleep(delay)
                continue

            if response.status_code >= 400:
                raise self._error_from(response)

            return response

        raise NetworkError(
            f"Failed to fetch {url} after {self.retry.max_retries} attempts: {last_error}"
        ) from last_error

    def _retry_after(self, response: requests.Response, attempt: int) -> float:
        """Seconds to wait before retrying a 429.

        Only the delta-seconds form of Retry-After is honoured; anything else
        falls back to the backoff delay.
        """
        retry_after = response.headers.get("Retry-After")
        try:
            return max(0.0, float(retry_after))
        except (TypeError, ValueError):
            return self.retry.get_delay(attempt)

    @staticmethod
    def _error_from(response: requests.Response) -> ScryfallError:
        code, details = "", ""
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and body.get("object") == "error":
            code = body.get("code", "")
            details = body.get("details", "")
        return ScryfallError(response.status_code, code, details, url=response.url)

    def get(self, path: str, params: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """Make a GET request and decode the JSON body."""
        response = self._request(self._url(path), params=params)
        try:
            return response.json()
        except ValueError as exc:
            raise NetworkError(f"Invalid JSON from {response.url}: {exc}") from exc

    def iter_list(
        self, path: str, params: Optional[dict[str, Any]] = None
    ) -> Iterator[dict[str, Any]]:
        """Yield the items of a paginated list object, one page at a time."""
        page = self.get(path, params)
        while True:
            yield from page.get("data", [])
            next_page = page.get("next_page")
            if not page.get("has_more") or not next_page:
                return
            page = self.get(next_page)

    def iter_sets(self) -> Iterator[SetRecord]:
        """Stream every set Scryfall knows about.

        Raises:
            ResponseFormatError: A page or set object could not be parsed
        """
        try:
            for payload in self.iter_list("/sets"):
                yield SetRecord.from_api(payload)
        except PARSE_ERRORS as exc:
            raise ResponseFormatError(f"unexpected set listing from Scryfall: {exc!r}") from exc

    def search_cards(self, query: str, **params: Any) -> Iterator[CardEntry]:
        """Stream the cards matching a Scryfall search query.

        Raises:
            CardsNotFound: The query matched no cards
        """
        params["q"] = query
        try:
            for payload in self.iter_list("/cards/search", params):
                yield CardEntry.from_api(payload)
        except CardsNotFound:
            raise
        except PARSE_ERRORS as exc:
            raise ResponseFormatError(f"unexpected search result from Scryfall: {exc!r}") from exc
        except ScryfallError as exc:
            if exc.status == 404:
                raise CardsNotFound(exc.status, exc.code, exc.details, url=exc.url) from exc
            raise

    def iter_set_cards(self, set_code: str) -> Iterator[CardEntry]:
        """Stream the paper printings of one set.

        Raises:
            CardsNotFound: The set has no cards yet
        """
        return self.search_cards(f"set:{set_code} game:paper")

    def download(self, url: str, sink: IO[bytes], chunk_size: int = 64 * 1024) -> int:
        """Stream ``url`` into ``sink`` and return the number of bytes written."""
        written = 0
        with self._request(url, stream=True) as response:
            try:
                for chunk in response.iter_content(chunk_size):
                    if chunk:
                        sink.write(chunk)
                        written += len(chunk)
            except requests.RequestException as exc:
                raise NetworkError(f"Download of {url} interrupted: {exc}") from exc
        return written
