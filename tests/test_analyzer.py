"""Tests for SiteAuditor."""

import json

import httpx
import pytest

from conftest import html_transport, make_page
from seo_audit.analyzer import SiteAuditor
from seo_audit.fetcher import RelayFetcher
from seo_audit.models import FailureKind, ReadinessTier

pytest_plugins = ('pytest_asyncio',)


@pytest.fixture
def auditor_for(relays):
    def build(transport):
        return SiteAuditor(RelayFetcher(relays=relays, transport=transport))
    return build


class TestAuditHtml:
    def test_audit_result_fields(self, acme_html):
        audit = SiteAuditor().audit_html("www.AcmePlumbing.com", acme_html, "https://acmeplumbing.com")

        assert audit.domain == "acmeplumbing.com"
        assert audit.resolved_url == "https://acmeplumbing.com"
        assert audit.platform.name == "WordPress"
        assert audit.total_score == 77
        assert audit.max_score == 100
        assert audit.relay is None

    def test_to_dict_is_json_serializable(self, acme_html):
        audit = SiteAuditor().audit_html("acmeplumbing.com", acme_html, "https://acmeplumbing.com", "relay-a")
        data = json.loads(json.dumps(audit.to_dict()))

        assert data["url"] == "https://acmeplumbing.com"
        assert data["relay"] == "relay-a"
        assert data["platform"]["fixability"] == "full"
        assert data["directory_readiness"]["tier"] == "basic"
        first = data["categories"]["technical"]["checks"][0]
        assert first["key"] == "https_enabled"
        assert first["name"] == "Secure Connection (HTTPS)"
        assert "what_it_means" in first


@pytest.mark.integration
class TestRunFullAudit:
    """End-to-end audits over mocked relays."""

    @pytest.mark.asyncio
    async def test_acme_plumbing(self, auditor_for, acme_html):
        outcome = await auditor_for(html_transport(acme_html)).run_full_audit("acmeplumbing.com")

        assert outcome.success
        audit = outcome.audit
        assert audit.platform.name == "WordPress"
        assert {k: c.score for k, c in audit.categories.items()} == {
            "technical": 25, "onpage": 25, "local": 20, "trust": 7, "social": 0,
        }
        assert audit.total_score == 77
        # Testimonials is a featured requirement: score alone is not enough
        assert audit.directory_readiness.tier == ReadinessTier.BASIC
        assert audit.directory_readiness.blockers == ["Testimonials shown"]
        assert audit.directory_readiness.percentage == 88
        assert audit.relay == "relay-a"

    @pytest.mark.asyncio
    async def test_featured_when_all_requirements_pass(self, auditor_for, acme_html):
        html = acme_html.replace(
            '<a href="/terms">Terms</a>',
            '<a href="/terms">Terms</a><a href="/testimonials">Reviews</a>',
        )
        outcome = await auditor_for(html_transport(html)).run_full_audit("acmeplumbing.com")

        assert outcome.audit.total_score == 82
        assert outcome.audit.directory_readiness.tier == ReadinessTier.FEATURED

    @pytest.mark.asyncio
    async def test_unreachable(self, auditor_for):
        outcome = await auditor_for(html_transport("error", status_code=503)).run_full_audit("acme.com")

        assert not outcome.success
        assert outcome.unreachable
        assert outcome.audit is None
        assert "try again" in outcome.error

    @pytest.mark.asyncio
    async def test_no_presence(self, auditor_for):
        outcome = await auditor_for(html_transport("", status_code=404)).run_full_audit("acme.com")

        assert outcome.no_presence
        assert outcome.failure == FailureKind.NO_PRESENCE
        assert "acme.com" in outcome.error

    @pytest.mark.asyncio
    async def test_invalid_domain(self, auditor_for):
        outcome = await auditor_for(html_transport(make_page())).run_full_audit("  ")

        assert outcome.failure == FailureKind.INVALID_DOMAIN
        assert outcome.error == "Please enter a website domain"

    @pytest.mark.asyncio
    async def test_http_only_site(self, auditor_for, acme_html):
        def handler(request: httpx.Request) -> httpx.Response:
            if "https%3A" in str(request.url):
                return httpx.Response(525, text="SSL handshake failed")
            return httpx.Response(200, text=acme_html)

        outcome = await auditor_for(httpx.MockTransport(handler)).run_full_audit("acmeplumbing.com")

        assert outcome.audit.resolved_url == "http://acmeplumbing.com"
        assert not outcome.audit.checks["https_enabled"].passed
        assert outcome.audit.directory_readiness.tier == ReadinessTier.NOT_READY
