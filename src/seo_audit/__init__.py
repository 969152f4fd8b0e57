"""SEO audits and directory readiness for small-business websites."""

__version__ = "0.1.0"

from seo_audit.fetcher import RelayFetcher, Relay, DEFAULT_RELAYS, normalize_domain
from seo_audit.platform_detector import detect_platform
from seo_audit.checks import run_checks, explain_check
from seo_audit.readiness import evaluate_readiness
from seo_audit.analyzer import SiteAuditor
from seo_audit.models import (
    AuditOutcome,
    AuditResult,
    CheckResult,
    DirectoryReadiness,
    FailureKind,
    FixabilityTier,
    PlatformResult,
    ReadinessTier,
    SiteRecord,
    SprintRequest,
)
from seo_audit.config import AuditConfig, settings
from seo_audit.database import get_db_client
from seo_audit.sites import SiteService, DuplicateSiteError, SiteNotFoundError, SiteStorageError
from seo_audit.report_generator import ReportGenerator, Branding
from seo_audit.notifier import MailtoNotifier, LoggingNotifier, compose_sprint_notification

__all__ = [
    # Core
    "RelayFetcher",
    "Relay",
    "DEFAULT_RELAYS",
    "normalize_domain",
    "detect_platform",
    "run_checks",
    "explain_check",
    "evaluate_readiness",
    "SiteAuditor",
    # Models
    "AuditOutcome",
    "AuditResult",
    "CheckResult",
    "DirectoryReadiness",
    "FailureKind",
    "FixabilityTier",
    "PlatformResult",
    "ReadinessTier",
    "SiteRecord",
    "SprintRequest",
    "AuditConfig",
    "settings",
    # Tracking
    "get_db_client",
    "SiteService",
    "DuplicateSiteError",
    "SiteNotFoundError",
    "SiteStorageError",
    # Output
    "ReportGenerator",
    "Branding",
    "MailtoNotifier",
    "LoggingNotifier",
    "compose_sprint_notification",
]
