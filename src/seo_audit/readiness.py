"""Directory readiness evaluation.

A tier is achieved only when the total score reaches its minimum AND every
one of its requirements passes. Tiers are tried best first. The reported
percentage always measures progress against the featured requirement set,
even when the achieved tier is basic or not_ready.
"""

import math
from dataclasses import dataclass
from typing import Callable, Dict, Tuple

from seo_audit.constants import BASIC_MIN_SCORE, FEATURED_MIN_SCORE
from seo_audit.models import CheckResult, DirectoryReadiness, ReadinessTier, RequirementResult

Checks = Dict[str, CheckResult]


@dataclass(frozen=True)
class DirectoryRequirement:
    key: str
    label: str
    predicate: Callable[[Checks, str], bool]

    def evaluate(self, checks: Checks, resolved_url: str) -> bool:
        return bool(self.predicate(checks, resolved_url or ""))


@dataclass(frozen=True)
class DirectoryTier:
    key: ReadinessTier
    label: str
    min_score: int
    requirements: Tuple[DirectoryRequirement, ...]

    def passed_requirements(self, checks: Checks, resolved_url: str) -> int:
        return sum(1 for r in self.requirements if r.evaluate(checks, resolved_url))

    def achieved(self, checks: Checks, resolved_url: str, total_score: int) -> bool:
        return (
            total_score >= self.min_score
            and self.passed_requirements(checks, resolved_url) == len(self.requirements)
        )


def _check_passed(key: str) -> Callable[[Checks, str], bool]:
    def predicate(checks: Checks, resolved_url: str) -> bool:
        check = checks.get(key)
        return bool(check and check.passed)
    return predicate


def _https(checks: Checks, resolved_url: str) -> bool:
    return resolved_url.lower().startswith("https")


HTTPS = DirectoryRequirement("https", "HTTPS enabled", _https)
PHONE = DirectoryRequirement("phone", "Phone visible on site", _check_passed("phone_visible"))
CONTACT = DirectoryRequirement("contact", "Contact page exists", _check_passed("contact_page"))
SCHEMA = DirectoryRequirement("schema", "Structured data (Schema)", _check_passed("json_ld_present"))
TITLE = DirectoryRequirement("title", "Proper title tags", _check_passed("title_present"))
DESCRIPTION = DirectoryRequirement("description", "Meta description", _check_passed("meta_description"))
TESTIMONIALS = DirectoryRequirement("testimonials", "Testimonials shown", _check_passed("testimonials"))
PRIVACY = DirectoryRequirement("privacy", "Privacy policy", _check_passed("privacy_policy"))

FEATURED_TIER = DirectoryTier(
    key=ReadinessTier.FEATURED,
    label="Featured Ready",
    min_score=FEATURED_MIN_SCORE,
    requirements=(HTTPS, PHONE, CONTACT, SCHEMA, TITLE, DESCRIPTION, TESTIMONIALS, PRIVACY),
)

BASIC_TIER = DirectoryTier(
    key=ReadinessTier.BASIC,
    label="Basic Ready",
    min_score=BASIC_MIN_SCORE,
    requirements=(HTTPS, PHONE, CONTACT, TITLE),
)

DIRECTORY_TIERS = (FEATURED_TIER, BASIC_TIER)

TIER_LABELS = {
    ReadinessTier.FEATURED.value: FEATURED_TIER.label,
    ReadinessTier.BASIC.value: BASIC_TIER.label,
    ReadinessTier.NOT_READY.value: "Not Ready",
}


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def evaluate_readiness(checks: Checks, resolved_url: str, total_score: int) -> DirectoryReadiness:
    """Assign a directory tier and itemize the featured requirements.

    Args:
        checks: Check results keyed by check key
        resolved_url: URL the audited page was served from
        total_score: Audit total score

    Returns:
        DirectoryReadiness
    """
    tier = ReadinessTier.NOT_READY
    for candidate in DIRECTORY_TIERS:
        if candidate.achieved(checks, resolved_url, total_score):
            tier = candidate.key
            break

    requirements = tuple(
        RequirementResult(key=r.key, label=r.label, passed=r.evaluate(checks, resolved_url))
        for r in FEATURED_TIER.requirements
    )
    passed = sum(1 for r in requirements if r.passed)
    total = len(requirements)

    return DirectoryReadiness(
        tier=tier,
        percentage=_round_half_up(passed / total * 100) if total else 0,
        passed_count=passed,
        total_count=total,
        requirements=requirements,
    )
