"""Tests for directory readiness evaluation."""

import pytest

from seo_audit.models import CheckResult, ReadinessTier
from seo_audit.readiness import BASIC_TIER, FEATURED_TIER, evaluate_readiness

FEATURED_CHECKS = (
    "phone_visible", "contact_page", "json_ld_present", "title_present",
    "meta_description", "testimonials", "privacy_policy",
)


def make_checks(failing=()):
    return {
        key: CheckResult(key=key, passed=key not in failing, category="x", points=0, max_points=0)
        for key in FEATURED_CHECKS
    }


class TestEvaluateReadiness:
    """Test cases for evaluate_readiness."""

    def test_featured(self):
        readiness = evaluate_readiness(make_checks(), "https://example.com", 80)
        assert readiness.tier == ReadinessTier.FEATURED
        assert readiness.percentage == 100
        assert readiness.passed_count == readiness.total_count == 8
        assert readiness.blockers == []

    def test_featured_needs_score(self):
        readiness = evaluate_readiness(make_checks(), "https://example.com", 74)
        assert readiness.tier == ReadinessTier.BASIC
        assert readiness.percentage == 100

    def test_missing_featured_requirement_falls_to_basic(self):
        readiness = evaluate_readiness(make_checks(["testimonials"]), "https://example.com", 95)
        assert readiness.tier == ReadinessTier.BASIC
        assert readiness.percentage == 88  # 7/8 rounds half up
        assert readiness.blockers == ["Testimonials shown"]

    def test_basic_needs_score(self):
        readiness = evaluate_readiness(make_checks(), "https://example.com", 49)
        assert readiness.tier == ReadinessTier.NOT_READY

    def test_http_blocks_every_tier(self):
        readiness = evaluate_readiness(make_checks(), "http://example.com", 100)
        assert readiness.tier == ReadinessTier.NOT_READY
        assert readiness.blockers == ["HTTPS enabled"]

    def test_basic_requirement_failure(self):
        readiness = evaluate_readiness(make_checks(["phone_visible"]), "https://example.com", 90)
        assert readiness.tier == ReadinessTier.NOT_READY

    def test_percentage_always_against_featured_set(self):
        failing = ["json_ld_present", "meta_description", "testimonials"]
        readiness = evaluate_readiness(make_checks(failing), "https://example.com", 60)
        assert readiness.tier == ReadinessTier.BASIC
        assert readiness.passed_count == 5
        assert readiness.total_count == 8
        assert readiness.percentage == 63  # 62.5 rounds half up

    def test_missing_checks_fail(self):
        readiness = evaluate_readiness({}, "https://example.com", 100)
        assert readiness.tier == ReadinessTier.NOT_READY
        assert readiness.passed_count == 1

    def test_itemized_requirements_in_order(self):
        readiness = evaluate_readiness(make_checks(), "https://example.com", 80)
        assert [r.key for r in readiness.requirements] == [
            "https", "phone", "contact", "schema", "title", "description", "testimonials", "privacy",
        ]

    def test_to_dict(self):
        data = evaluate_readiness(make_checks(["privacy_policy"]), "https://example.com", 80).to_dict()
        assert data["tier"] == "basic"
        assert data["requirements"][-1] == {"key": "privacy", "label": "Privacy policy", "passed": False}


@pytest.mark.parametrize("tier,count,minimum", [
    (FEATURED_TIER, 8, 75),
    (BASIC_TIER, 4, 50),
])
def test_tier_definitions(tier, count, minimum):
    assert len(tier.requirements) == count
    assert tier.min_score == minimum
