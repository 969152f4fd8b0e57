"""SEO auditor that combines relay retrieval, platform detection and checks."""

import logging
from datetime import datetime
from typing import Optional

from seo_audit.checks import run_checks
from seo_audit.fetcher import RelayFetcher, normalize_domain
from seo_audit.models import AuditOutcome, AuditResult, FailureKind
from seo_audit.platform_detector import detect_platform
from seo_audit.readiness import evaluate_readiness

logger = logging.getLogger(__name__)

UNREACHABLE_MESSAGE = (
    "We couldn't reach {domain}. The site may be blocking automated requests "
    "or be temporarily down. Please try again in a few minutes."
)
NO_PRESENCE_MESSAGE = (
    "{domain} doesn't appear to have a working website. "
    "Consider sending a no-presence assessment letter instead."
)


class SiteAuditor:
    """Audits a business homepage for SEO basics and directory readiness."""

    def __init__(self, fetcher: Optional[RelayFetcher] = None):
        """Initialize the auditor.

        Args:
            fetcher: Relay fetcher to retrieve pages with (default relays if omitted)
        """
        self.fetcher = fetcher or RelayFetcher()

    def audit_html(
        self,
        domain: str,
        html: str,
        resolved_url: str,
        relay: Optional[str] = None,
    ) -> AuditResult:
        """Audit an already retrieved document.

        Args:
            domain: Domain the page belongs to
            html: Raw HTML
            resolved_url: URL the HTML was served from
            relay: Name of the relay that served it, if any

        Returns:
            AuditResult
        """
        platform = detect_platform(html)
        scores = run_checks(html, resolved_url)
        readiness = evaluate_readiness(scores.checks, resolved_url, scores.total_score)

        logger.info(
            f"Audited {domain}: score {scores.total_score}/{scores.max_score}, "
            f"platform {platform.name}, readiness {readiness.tier.value}"
        )

        return AuditResult(
            domain=normalize_domain(domain),
            resolved_url=resolved_url,
            platform=platform,
            checks=scores.checks,
            categories=scores.categories,
            total_score=scores.total_score,
            directory_readiness=readiness,
            audit_date=datetime.now(),
            relay=relay,
            max_score=scores.max_score,
        )

    async def run_full_audit(self, domain: str) -> AuditOutcome:
        """Fetch a domain through the relay chain and audit it.

        Retrieval failures are reported on the outcome, never raised.

        Args:
            domain: Domain in any common form

        Returns:
            AuditOutcome
        """
        fetched = await self.fetcher.fetch_document(domain)

        if not fetched.success:
            if fetched.failure == FailureKind.INVALID_DOMAIN:
                error = fetched.error
            elif fetched.failure == FailureKind.NO_PRESENCE:
                error = NO_PRESENCE_MESSAGE.format(domain=fetched.domain)
            else:
                error = UNREACHABLE_MESSAGE.format(domain=fetched.domain)
            logger.debug(f"Retrieval detail for {fetched.domain}: {fetched.error}")
            return AuditOutcome(
                domain=fetched.domain,
                success=False,
                error=error,
                failure=fetched.failure,
            )

        audit = self.audit_html(fetched.domain, fetched.html, fetched.url, fetched.relay)
        return AuditOutcome(domain=fetched.domain, success=True, audit=audit)
