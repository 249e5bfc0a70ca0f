"""HTTP client with retries for fetching listing pages."""

import ipaddress
import time
from dataclasses import dataclass, field
from urllib.parse import urlparse

import httpx

from ..logger import get_logger

logger = get_logger(__name__)


class SSRFError(ValueError):
    """Raised when a URL targets a private/reserved network address."""


def validate_url(url: str) -> str:
    """Validate a URL is safe to fetch.

    Rejects non-HTTP(S) schemes, localhost hostnames and IP literals in
    private, reserved, loopback or link-local ranges.

    Raises:
        SSRFError: If the URL targets a disallowed destination.
    """
    if not url or not isinstance(url, str):
        raise SSRFError("Empty or invalid URL")

    parsed = urlparse(url)

    if parsed.scheme not in ("http", "https"):
        raise SSRFError(f"Blocked non-HTTP scheme: {parsed.scheme!r}")

    hostname = parsed.hostname
    if not hostname:
        raise SSRFError(f"No hostname in URL: {url}")

    lower = hostname.lower()
    if lower in ("localhost", "localhost.localdomain") or lower.endswith(".localhost"):
        raise SSRFError(f"Blocked localhost URL: {url}")

    try:
        addr = ipaddress.ip_address(hostname)
    except ValueError:
        addr = None

    if addr is not None:
        if addr.is_private or addr.is_reserved or addr.is_loopback:
            raise SSRFError(f"Blocked private/reserved IP: {hostname}")
        if addr.is_link_local:
            raise SSRFError(f"Blocked link-local IP: {hostname}")

    return url


@dataclass
class FetchResult:
    """
    Structured result from a fetch operation.

    Contains all relevant information about the request/response,
    including any errors that occurred.
    """

    url: str
    status_code: int
    html: str | None
    headers: dict[str, str] = field(default_factory=dict)
    elapsed_ms: float = 0.0
    error: str | None = None

    @property
    def success(self) -> bool:
        """Check if the fetch was successful."""
        return 200 <= self.status_code < 400 and self.error is None


class HTTPClient:
    """
    HTTP client with automatic retries.

    Features:
    - Configurable timeout
    - Retry with exponential backoff on 5xx, 429 and transport errors
    - Custom User-Agent
    - Proxy support

    The underlying httpx.Client is thread-safe, so one instance serves
    every worker of a crawl.
    """

    def __init__(
        self,
        timeout: int = 30,
        retry_count: int = 3,
        retry_delay: float = 1.0,
        user_agent: str = "Mozilla/5.0 (compatible; EventbriteCrawler/1.0)",
        proxy: str | None = None,
        verify_ssl: bool = True,
    ):
        """
        Initialize HTTP client.

        Args:
            timeout: Request timeout in seconds
            retry_count: Number of retries on failure
            retry_delay: Base delay between retries (exponential backoff)
            user_agent: User-Agent header value
            proxy: Proxy URL (e.g., "http://proxy:8080")
            verify_ssl: Whether to verify SSL certificates
        """
        self.timeout = timeout
        self.retry_count = retry_count
        self.retry_delay = retry_delay
        self.user_agent = user_agent

        client_kwargs = {
            "timeout": timeout,
            "headers": {"User-Agent": user_agent},
            "follow_redirects": True,
            "verify": verify_ssl,
        }
        if proxy:
            client_kwargs["proxy"] = proxy

        self._client = httpx.Client(**client_kwargs)

    def fetch(self, url: str) -> FetchResult:
        """
        Fetch a URL with retries.

        Never raises; failures are reported through ``FetchResult.error``.
        """
        try:
            validate_url(url)
        except SSRFError as e:
            logger.warning(f"URL validation failed: {e}")
            return FetchResult(url=url, status_code=0, html=None, error=str(e))

        last_error: str | None = None
        last_status = 0

        for attempt in range(self.retry_count + 1):
            start_time = time.time()

            try:
                logger.debug(f"GET {url} (attempt {attempt + 1})")
                response = self._client.get(url)
                elapsed_ms = (time.time() - start_time) * 1000
                last_status = response.status_code

                if response.status_code >= 500 or response.status_code == 429:
                    last_error = f"HTTP {response.status_code}"
                    logger.warning(f"HTTP {response.status_code} for {url}, retrying...")
                else:
                    if not response.is_success:
                        logger.warning(f"HTTP {response.status_code} for {url}")
                    return FetchResult(
                        url=url,
                        status_code=response.status_code,
                        html=response.text if response.is_success else None,
                        headers=dict(response.headers),
                        elapsed_ms=elapsed_ms,
                        error=None if response.is_success else f"HTTP {response.status_code}",
                    )

            except httpx.RequestError as e:
                # httpx reports certificate failures as ConnectError
                if "CERTIFICATE_VERIFY_FAILED" in str(e):
                    logger.error(f"SSL error for {url}: {e}")
                    return FetchResult(
                        url=url,
                        status_code=0,
                        html=None,
                        elapsed_ms=(time.time() - start_time) * 1000,
                        error=f"SSL error: {e}",
                    )
                last_error = f"Request error: {e}"
                logger.warning(f"Request error for {url}: {e}, retrying...")

            if attempt < self.retry_count:
                delay = self.retry_delay * (2**attempt)
                logger.debug(f"Waiting {delay:.2f}s before retry")
                time.sleep(delay)

        logger.error(f"All retries failed for {url}")
        return FetchResult(url=url, status_code=last_status, html=None, error=last_error)

    def close(self):
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()
