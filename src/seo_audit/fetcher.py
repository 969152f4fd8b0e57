"""Relay-based document retrieval.

Target sites are fetched through third-party passthrough relays. Every
candidate URL variant of a domain is tried through every relay, in order,
until one attempt returns something that looks like an HTML document.
"""

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple
from urllib.parse import quote

import httpx

from seo_audit.constants import (
    DEFAULT_ATTEMPT_TIMEOUT_SECONDS,
    MIN_PAYLOAD_LENGTH,
    NO_PRESENCE_STATUS_CODES,
)
from seo_audit.models import FailureKind, FetchAttempt, FetchResult

logger = logging.getLogger(__name__)

_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)
_WWW_RE = re.compile(r"^www\.", re.IGNORECASE)


@dataclass(frozen=True)
class Relay:
    """A fetch relay. ``{url}`` in the template receives the encoded target URL."""
    name: str
    url_template: str

    def build_url(self, target_url: str) -> str:
        return self.url_template.format(url=quote(target_url, safe=""))


DEFAULT_RELAYS = (
    Relay("corsproxy.io", "https://corsproxy.io/?{url}"),
    Relay("allorigins", "https://api.allorigins.win/raw?url={url}"),
    Relay("corsproxy.org", "https://corsproxy.org/?{url}"),
    Relay("codetabs", "https://api.codetabs.com/v1/proxy?quest={url}"),
)


def normalize_domain(domain: str) -> str:
    """Reduce user input to a bare lower-case hostname.

    >>> normalize_domain("https://www.Example.com/")
    'example.com'
    """
    cleaned = domain.strip()
    cleaned = _SCHEME_RE.sub("", cleaned)
    cleaned = _WWW_RE.sub("", cleaned)
    return cleaned.rstrip("/").strip().lower()


def candidate_urls(domain: str) -> List[str]:
    """Ordered, de-duplicated URL variants (scheme x www prefix) for a domain."""
    bare = normalize_domain(domain)
    variants = [
        f"https://{bare}",
        f"https://www.{bare}",
        f"http://{bare}",
        f"http://www.{bare}",
    ]
    return list(dict.fromkeys(variants))


def is_valid_payload(html: Optional[str], min_length: int = MIN_PAYLOAD_LENGTH) -> bool:
    """Sanity check that a relay returned markup rather than an error stub."""
    return bool(html) and len(html) > min_length and "<" in html


class RelayFetcher:
    """Fetches a domain's homepage through a fallback chain of relays.

    Attempts are strictly sequential; each one is bounded by ``timeout``
    seconds, and a timeout only abandons that attempt. The worst case is
    therefore ``len(candidate_urls) * len(relays) * timeout``.
    """

    def __init__(
        self,
        relays: Optional[Iterable[Relay]] = None,
        timeout: float = DEFAULT_ATTEMPT_TIMEOUT_SECONDS,
        min_payload_length: int = MIN_PAYLOAD_LENGTH,
        accept_header: str = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        user_agent: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the fetcher.

        Args:
            relays: Ordered relays to try for every URL variant
            timeout: Per-attempt timeout in seconds
            min_payload_length: Payloads must be longer than this
            accept_header: Accept header sent to relays
            user_agent: Optional User-Agent header
            transport: Optional httpx transport (used by tests)
        """
        self.relays = list(relays) if relays is not None else list(DEFAULT_RELAYS)
        self.timeout = timeout
        self.min_payload_length = min_payload_length
        self.headers = {"Accept": accept_header}
        if user_agent:
            self.headers["User-Agent"] = user_agent
        self.transport = transport

    @classmethod
    def from_config(cls, config, transport: Optional[httpx.AsyncBaseTransport] = None) -> "RelayFetcher":
        """Build a fetcher from an AuditConfig."""
        return cls(
            relays=config.relays,
            timeout=config.timeout,
            min_payload_length=config.min_payload_length,
            accept_header=config.accept_header,
            user_agent=config.user_agent,
            transport=transport,
        )

    async def fetch_document(self, domain: str) -> FetchResult:
        """Retrieve the first valid HTML document for a domain.

        Args:
            domain: Domain in any common form (scheme, www and slash are stripped)

        Returns:
            FetchResult; on failure ``failure`` classifies the outcome and
            ``error`` carries the last relay error.
        """
        bare = normalize_domain(domain)
        if not bare:
            return FetchResult(
                domain=bare,
                success=False,
                error="Please enter a website domain",
                failure=FailureKind.INVALID_DOMAIN,
            )

        attempts: List[FetchAttempt] = []
        last_error = "All relays failed"

        async with httpx.AsyncClient(
            headers=self.headers,
            follow_redirects=True,
            timeout=self.timeout,
            transport=self.transport,
        ) as client:
            for url in candidate_urls(bare):
                logger.debug(f"Trying: {url}")
                for relay in self.relays:
                    attempt, html = await self._attempt(client, relay, url)
                    attempts.append(attempt)

                    if attempt.success:
                        logger.info(f"Fetched {url} via {relay.name}")
                        return FetchResult(
                            domain=bare,
                            success=True,
                            html=html,
                            url=url,
                            relay=relay.name,
                            attempts=attempts,
                        )
                    last_error = attempt.error or last_error

        failure = self._classify_failure(attempts)
        logger.warning(
            f"All {len(attempts)} relay attempts failed for {bare} "
            f"({failure.value}): {last_error}"
        )

        if failure == FailureKind.NO_PRESENCE:
            message = (
                f"{bare} responded through every relay but returned no real website content."
            )
        else:
            message = (
                f"Could not reach {bare} after trying all URL variations and relays. "
                "The site may have bot protection or be temporarily unavailable."
            )

        return FetchResult(
            domain=bare,
            success=False,
            error=f"{message} (last error: {last_error})",
            failure=failure,
            attempts=attempts,
        )

    async def _attempt(
        self, client: httpx.AsyncClient, relay: Relay, url: str
    ) -> Tuple[FetchAttempt, str]:
        """Run one relay attempt and classify its outcome.

        Returns:
            The recorded attempt and the payload (empty unless successful)
        """
        try:
            response = await asyncio.wait_for(
                client.get(relay.build_url(url)), timeout=self.timeout
            )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            return FetchAttempt(
                url=url, relay=relay.name, success=False,
                error=f"{relay.name}: Timeout", timed_out=True,
            ), ""
        except httpx.HTTPError as e:
            return FetchAttempt(
                url=url, relay=relay.name, success=False,
                error=f"{relay.name}: {e}",
            ), ""

        if not response.is_success:
            return FetchAttempt(
                url=url, relay=relay.name, success=False,
                error=f"{relay.name}: HTTP {response.status_code}",
                status_code=response.status_code,
            ), ""

        html = response.text
        if not is_valid_payload(html, self.min_payload_length):
            return FetchAttempt(
                url=url, relay=relay.name, success=False,
                error=f"{relay.name}: Invalid or empty response",
                status_code=response.status_code, invalid_payload=True,
            ), ""

        return FetchAttempt(
            url=url, relay=relay.name, success=True,
            status_code=response.status_code,
        ), html

    @staticmethod
    def _classify_failure(attempts: List[FetchAttempt]) -> FailureKind:
        """Exhaustion is "no presence" only when every attempt got an answer
        saying the target has nothing to serve; anything else is unreachable."""
        if attempts and all(
            a.invalid_payload or a.status_code in NO_PRESENCE_STATUS_CODES
            for a in attempts
        ):
            return FailureKind.NO_PRESENCE
        return FailureKind.UNREACHABLE
