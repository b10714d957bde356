"""Web link verification using HEAD requests with GET fallback."""

from typing import Iterable, Optional
from urllib.parse import urlsplit

import httpx

from ..core.cache import Cache, WritableCache
from ..core.exceptions import InvalidLink
from ..core.logging import get_logger
from ..core.models import Link, ValidationResult

logger = get_logger(__name__)

DEFAULT_TIMEOUT = 10.0
DEFAULT_USER_AGENT = "linkverify/0.1"


class WebVerifier:
    """Verify that http(s) links are reachable.

    Some servers reject HEAD but answer GET, so any HEAD failure is
    retried once as a GET. Confirmed links are recorded in the cache
    when it is writable.

    Args:
        client: Shared httpx.Client; one is created when omitted
        timeout: Seconds allowed per request
        ignored_domains: Hosts (and their subdomains) never checked
        user_agent: User-Agent header for created clients
    """

    name = "web"
    description = "Check that web links are reachable"

    SCHEMES = ("http", "https")

    def __init__(
        self,
        client: Optional[httpx.Client] = None,
        timeout: float = DEFAULT_TIMEOUT,
        ignored_domains: Optional[Iterable[str]] = None,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self.timeout = timeout
        self.ignored_domains = tuple(d.lower().lstrip(".") for d in ignored_domains or ())
        self._owns_client = client is None
        self.client = client or httpx.Client(
            headers={"User-Agent": user_agent},
            timeout=timeout,
        )

    def close(self) -> None:
        """Close the HTTP client if this verifier created it."""
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "WebVerifier":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def is_ignored(self, host: str) -> bool:
        host = host.lower()
        return any(host == d or host.endswith(f".{d}") for d in self.ignored_domains)

    def verify(self, link: Link, cache: Cache) -> ValidationResult:
        if link.scheme not in self.SCHEMES:
            return ValidationResult.UNSUPPORTED

        host = urlsplit(link.href).hostname or ""
        if not host:
            raise InvalidLink("missing host", href=link.href)
        if self.is_ignored(host):
            return ValidationResult.IGNORED

        url = link.href.split("#")[0]
        status, error = self._request("HEAD", url)
        if status is None or status >= 400:
            status, error = self._request("GET", url)

        valid = status is not None and status < 400
        if isinstance(cache, WritableCache):
            cache.record(link.href, valid)

        if valid:
            return ValidationResult.VALID
        if status is None:
            raise InvalidLink(error or "request failed", href=link.href)
        raise InvalidLink(f"HTTP {status}", href=link.href)

    def _request(self, method: str, url: str) -> tuple[Optional[int], Optional[str]]:
        """Send one request; return (status_code, None) or (None, error)."""
        try:
            response = self.client.request(
                method,
                url,
                timeout=self.timeout,
                follow_redirects=True,
            )
        except httpx.TimeoutException:
            logger.debug(f"{method} {url} timed out after {self.timeout}s")
            return None, f"timed out after {self.timeout}s"
        except httpx.HTTPError as e:
            logger.debug(f"{method} {url} failed: {e}")
            return None, f"{type(e).__name__}: {e}"

        logger.trace(f"{method} {url} -> {response.status_code}")
        return response.status_code, None
