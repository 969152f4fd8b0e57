"""Data models for SEO audits and tracked sites."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class FixabilityTier(str, Enum):
    """How much control a business has over SEO fixes on its platform."""
    FULL = "full"
    PARTIAL = "partial"
    LIMITED = "limited"
    UNKNOWN = "unknown"


class ReadinessTier(str, Enum):
    """Directory readiness tiers, best first."""
    FEATURED = "featured"
    BASIC = "basic"
    NOT_READY = "not_ready"


class FailureKind(str, Enum):
    """Why a retrieval produced no document."""
    UNREACHABLE = "unreachable"  # every variant/relay failed, likely protected or down
    NO_PRESENCE = "no_presence"  # the target answered but has no real site
    INVALID_DOMAIN = "invalid_domain"


@dataclass(frozen=True)
class PlatformResult:
    """Detected hosting platform."""

    name: str
    confidence: int  # 0-100
    fixability: FixabilityTier
    note: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "confidence": self.confidence,
            "fixability": self.fixability.value,
            "note": self.note,
        }


@dataclass(frozen=True)
class CheckResult:
    """Outcome of a single check."""

    key: str
    passed: bool
    category: str
    points: int
    max_points: int
    value: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "passed": self.passed,
            "category": self.category,
            "points": self.points,
            "max_points": self.max_points,
            "value": self.value,
        }


@dataclass(frozen=True)
class CategoryResult:
    """Checks of one category and their point sub-total."""

    key: str
    name: str
    score: int
    max_score: int
    checks: tuple[CheckResult, ...] = ()


@dataclass(frozen=True)
class AuditScores:
    """Scoring half of an audit: checks, categories and total."""

    checks: dict[str, CheckResult]
    categories: dict[str, CategoryResult]
    total_score: int
    max_score: int = 100


@dataclass(frozen=True)
class RequirementResult:
    """A directory requirement evaluated against an audit."""

    key: str
    label: str
    passed: bool


@dataclass(frozen=True)
class DirectoryReadiness:
    """Directory readiness tier with itemized featured requirements."""

    tier: ReadinessTier
    percentage: int
    passed_count: int
    total_count: int
    requirements: tuple[RequirementResult, ...] = ()

    @property
    def blockers(self) -> list[str]:
        """Labels of requirements that did not pass."""
        return [r.label for r in self.requirements if not r.passed]

    def to_dict(self) -> dict[str, Any]:
        return {
            "tier": self.tier.value,
            "percentage": self.percentage,
            "passed_count": self.passed_count,
            "total_count": self.total_count,
            "requirements": [
                {"key": r.key, "label": r.label, "passed": r.passed}
                for r in self.requirements
            ],
        }


@dataclass(frozen=True)
class AuditResult:
    """Immutable snapshot produced by one audit run."""

    domain: str
    resolved_url: str
    platform: PlatformResult
    checks: dict[str, CheckResult]
    categories: dict[str, CategoryResult]
    total_score: int
    directory_readiness: DirectoryReadiness
    audit_date: datetime = field(default_factory=datetime.now)
    relay: Optional[str] = None
    max_score: int = 100

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary.

        Category check entries carry the plain-language explanation fields
        used by reports.
        """
        from seo_audit.checks import explain_check

        return {
            "domain": self.domain,
            "url": self.resolved_url,
            "audit_date": self.audit_date.isoformat(),
            "relay": self.relay,
            "platform": self.platform.to_dict(),
            "checks": {key: check.to_dict() for key, check in self.checks.items()},
            "categories": {
                key: {
                    "name": cat.name,
                    "score": cat.score,
                    "max_score": cat.max_score,
                    "checks": [
                        {**check.to_dict(), **explain_check(check.key)}
                        for check in cat.checks
                    ],
                }
                for key, cat in self.categories.items()
            },
            "total_score": self.total_score,
            "max_score": self.max_score,
            "directory_readiness": self.directory_readiness.to_dict(),
        }


@dataclass
class FetchAttempt:
    """A single candidate URL x relay attempt."""

    url: str
    relay: str
    success: bool
    error: Optional[str] = None
    status_code: Optional[int] = None
    timed_out: bool = False
    invalid_payload: bool = False


@dataclass
class FetchResult:
    """Result of retrieving a domain's HTML through the relay chain."""

    domain: str
    success: bool
    html: str = ""
    url: Optional[str] = None
    relay: Optional[str] = None
    error: Optional[str] = None
    failure: Optional[FailureKind] = None
    attempts: list[FetchAttempt] = field(default_factory=list)


@dataclass
class AuditOutcome:
    """Result of a full audit: either an AuditResult or a classified failure."""

    domain: str
    success: bool
    audit: Optional[AuditResult] = None
    error: Optional[str] = None
    failure: Optional[FailureKind] = None

    @property
    def unreachable(self) -> bool:
        return self.failure == FailureKind.UNREACHABLE

    @property
    def no_presence(self) -> bool:
        return self.failure == FailureKind.NO_PRESENCE


@dataclass
class SiteRecord:
    """A tracked business website."""

    domain: str
    id: Optional[int] = None
    organization_id: str = "default"
    url: Optional[str] = None
    business_name: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    zip: str = ""
    phone: str = ""
    industry: str = "other"
    stage: str = "lead"
    notes: str = ""
    follow_up_date: Optional[str] = None
    data_confidence_source: str = "detected"
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    # Cached summary of the latest audit
    latest_score: Optional[int] = None
    latest_audit_id: Optional[int] = None
    latest_audit_at: Optional[str] = None
    platform_detected: Optional[str] = None
    platform_confidence: Optional[float] = None  # 0-1 fraction
    directory_readiness: Optional[str] = None

    # False when the store rejected the insert and the record lives in memory only
    persisted: bool = True

    @property
    def audited(self) -> bool:
        return self.latest_score is not None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "SiteRecord":
        """Build a record from a storage row, ignoring unknown columns."""
        known = cls.__dataclass_fields__
        values = {k: v for k, v in row.items() if k in known and v is not None}
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in self.__dataclass_fields__}


@dataclass
class SprintRequest:
    """Lead capture for a remediation sprint."""

    site_id: Optional[int]
    organization_id: str
    email: str
    phone: str
    readiness_tier: str
    blockers: list[str] = field(default_factory=list)
    id: Optional[int] = None
    created_at: Optional[str] = None
