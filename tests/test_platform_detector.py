"""Tests for hosting platform detection."""

import pytest

from conftest import make_page
from seo_audit.models import FixabilityTier
from seo_audit.platform_detector import (
    PLATFORM_SIGNATURES,
    UNKNOWN_PLATFORM,
    detect_platform,
)


class TestDetectPlatform:
    """Test cases for detect_platform."""

    def test_wordpress(self, acme_html):
        result = detect_platform(acme_html)
        assert result.name == "WordPress"
        assert result.confidence == 95
        assert result.fixability == FixabilityTier.FULL

    def test_elementor_beats_plain_wordpress(self):
        html = make_page(
            '<link rel="stylesheet" href="/wp-content/plugins/elementor/assets/frontend.css">'
        )
        assert detect_platform(html).name == "WordPress + Elementor"

    def test_divi_beats_plain_wordpress(self):
        html = make_page(
            '<link rel="stylesheet" href="/wp-content/themes/Divi/style.css">',
            '<div class="et_pb_section"></div>',
        )
        assert detect_platform(html).name == "WordPress + Divi"

    @pytest.mark.parametrize("snippet,expected", [
        ('<script src="https://static.wixstatic.com/app.js"></script>', "Wix"),
        ('<link href="https://static1.squarespace.com/site.css">', "Squarespace"),
        ('<script src="https://cdn.shopify.com/s/app.js"></script>', "Shopify"),
        ('<div class="w-nav"></div><script src="https://assets.website-files.com/x.js"></script>', "Webflow"),
        ('<img src="https://img1.wsimg.com/isteam/godaddysites.png">', "GoDaddy"),
        ('<script src="//js.hs-scripts.com/123.js"></script>', "HubSpot"),
        ('<script src="/misc/drupal.js"></script>', "Drupal"),
        ('<script src="/_next/static/chunks/main.js"></script>', "Next.js (React)"),
        ('<div id="___gatsby"></div>', "Gatsby"),
    ])
    def test_known_platforms(self, snippet, expected):
        assert detect_platform(make_page(snippet)).name == expected

    def test_earliest_rule_wins(self):
        # Both Wix and Shopify markers: Wix is listed first
        html = make_page(
            '<script src="https://static.wixstatic.com/a.js"></script>'
            '<script src="https://cdn.shopify.com/b.js"></script>'
        )
        assert detect_platform(html).name == "Wix"

    def test_case_insensitive(self):
        assert detect_platform(make_page("<!-- Powered by SQUARESPACE -->")).name == "Squarespace"

    def test_bootstrap_without_wordpress(self):
        html = make_page('<link href="/css/bootstrap.min.css">')
        assert detect_platform(html).name == "Custom (Bootstrap)"

    def test_fallback_static_host(self):
        html = make_page('<meta name="generator" content="deployed on netlify">')
        result = detect_platform(html)
        assert result.name == "Custom/Static"
        assert result.confidence == 70

    def test_unknown(self):
        result = detect_platform(make_page("<p>Plain hand-written page</p>"))
        assert result == UNKNOWN_PLATFORM
        assert result.fixability == FixabilityTier.UNKNOWN

    def test_deterministic(self, acme_html):
        assert detect_platform(acme_html) == detect_platform(acme_html)

    def test_empty_html(self):
        assert detect_platform("") == UNKNOWN_PLATFORM

    def test_signatures_have_valid_confidence(self):
        for signature in PLATFORM_SIGNATURES:
            assert 0 < signature.confidence <= 100
