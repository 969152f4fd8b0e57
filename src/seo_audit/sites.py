"""Tracked business sites: add, update, delete, audit and follow up.

Storage failures never lose the user's input. A site that cannot be
inserted is kept as a local-only record (``persisted=False``) for the
life of the service, and an audit that cannot be saved is still returned.
"""

import itertools
import logging
import re
import sqlite3
from dataclasses import replace
from typing import Any, Dict, List, Optional, Tuple

from seo_audit.analyzer import SiteAuditor
from seo_audit.config import settings
from seo_audit.constants import (
    DATA_CONFIDENCE_DETECTED,
    DEFAULT_INDUSTRY,
    DEFAULT_STAGE,
    INDUSTRY_PRESETS,
    PIPELINE_STAGES,
)
from seo_audit.database import AbstractDatabase, MUTABLE_SITE_FIELDS
from seo_audit.fetcher import normalize_domain
from seo_audit.models import AuditOutcome, ReadinessTier, SiteRecord, SprintRequest
from seo_audit.notifier import LoggingNotifier, Notifier, compose_sprint_notification

logger = logging.getLogger(__name__)

_STATE_ZIP_RE = re.compile(r"([A-Z]{2})\s*(\d{5})?", re.IGNORECASE)


class DuplicateSiteError(ValueError):
    """Raised when a domain is already tracked."""


class SiteNotFoundError(ValueError):
    """Raised when a site id is unknown."""


class SiteStorageError(ValueError):
    """Raised when a site record cannot be read from storage."""


def parse_address(address: str) -> Tuple[str, str, str]:
    """Split "street, city, ST 12345" into (city, state, zip).

    Missing parts come back as empty strings.
    """
    parts = [p.strip() for p in (address or "").split(",")]
    city = parts[1] if len(parts) > 1 else ""
    state_zip = parts[2] if len(parts) > 2 else ""
    match = _STATE_ZIP_RE.search(state_zip)
    if not match:
        return city, "", ""
    return city, match.group(1).upper(), match.group(2) or ""


class SiteService:
    """Manages an organization's tracked sites."""

    def __init__(
        self,
        db: AbstractDatabase,
        auditor: Optional[SiteAuditor] = None,
        notifier: Optional[Notifier] = None,
        organization_id: Optional[str] = None,
    ):
        self.db = db
        self.auditor = auditor or SiteAuditor()
        self.notifier = notifier or LoggingNotifier()
        self.organization_id = organization_id or settings.ORGANIZATION_ID
        self._local_sites: List[SiteRecord] = []
        self._local_ids = itertools.count(-1, -1)

    # ------------------------------------------------------------------
    # Site records
    # ------------------------------------------------------------------

    def list_sites(self) -> List[SiteRecord]:
        """All sites, newest first; local-only records come first."""
        try:
            rows = self.db.list_sites(self.organization_id)
        except sqlite3.Error as e:
            logger.error(f"Failed to load sites: {e}")
            rows = []
        return list(reversed(self._local_sites)) + [SiteRecord.from_row(r) for r in rows]

    def get_site(self, site_id: int) -> SiteRecord:
        for site in self._local_sites:
            if site.id == site_id:
                return site
        try:
            row = self.db.get_site(site_id)
        except sqlite3.Error as e:
            logger.error(f"Failed to load site {site_id}: {e}")
            raise SiteStorageError(f"Site {site_id} could not be loaded, please try again") from e
        if row is None or row.get("organization_id") != self.organization_id:
            raise SiteNotFoundError(f"Site {site_id} not found")
        return SiteRecord.from_row(row)

    def add_site(
        self,
        domain: str,
        business_name: str = "",
        address: str = "",
        phone: str = "",
        industry: str = DEFAULT_INDUSTRY,
    ) -> SiteRecord:
        """Start tracking a site.

        Raises:
            ValueError: If the domain is empty or the industry is unknown
            DuplicateSiteError: If the domain is already tracked
        """
        bare = normalize_domain(domain or "")
        if not bare:
            raise ValueError("Please enter a website domain")
        if industry not in INDUSTRY_PRESETS:
            raise ValueError(f"Unknown industry: {industry}")
        if any(site.domain == bare for site in self.list_sites()):
            raise DuplicateSiteError("Site already added")

        city, state, zip_code = parse_address(address)
        site = SiteRecord(
            domain=bare,
            organization_id=self.organization_id,
            business_name=business_name,
            address=address,
            city=city,
            state=state,
            zip=zip_code,
            phone=phone,
            industry=industry,
            stage=DEFAULT_STAGE,
            data_confidence_source=DATA_CONFIDENCE_DETECTED,
        )

        try:
            row = self.db.insert_site(site.to_dict())
        except sqlite3.Error as e:
            logger.error(f"Failed to save {bare}, keeping it locally: {e}")
            site = replace(site, id=next(self._local_ids), persisted=False)
            self._local_sites.append(site)
            return site

        logger.info(f"Added site {bare} (id {row['id']})")
        return SiteRecord.from_row(row)

    def update_site(self, site_id: int, **updates: Any) -> SiteRecord:
        """Change a site's industry, stage, notes or follow-up date.

        Raises:
            ValueError: For unknown fields, stages or industries
            SiteNotFoundError: If the site does not exist
        """
        unknown = set(updates) - set(MUTABLE_SITE_FIELDS)
        if unknown:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")
        if "stage" in updates and updates["stage"] not in PIPELINE_STAGES:
            raise ValueError(f"Unknown pipeline stage: {updates['stage']}")
        if "industry" in updates and updates["industry"] not in INDUSTRY_PRESETS:
            raise ValueError(f"Unknown industry: {updates['industry']}")

        site = self.get_site(site_id)
        updated = replace(site, **updates)
        if not site.persisted:
            self._replace_local(updated)
            return updated

        try:
            row = self.db.update_site(site_id, updates)
        except sqlite3.Error as e:
            logger.error(f"Failed to update site {site_id}: {e}")
            return updated
        if row is None:
            raise SiteNotFoundError(f"Site {site_id} not found")
        return SiteRecord.from_row(row)

    def delete_site(self, site_id: int) -> bool:
        site = self.get_site(site_id)
        if not site.persisted:
            self._local_sites = [s for s in self._local_sites if s.id != site_id]
            return True
        try:
            deleted = self.db.delete_site(site_id)
        except sqlite3.Error as e:
            logger.error(f"Failed to delete site {site_id}: {e}")
            return False
        if deleted:
            logger.info(f"Deleted site {site.domain}")
        return deleted

    def _replace_local(self, site: SiteRecord) -> None:
        self._local_sites = [site if s.id == site.id else s for s in self._local_sites]

    # ------------------------------------------------------------------
    # Audits
    # ------------------------------------------------------------------

    async def audit_site(self, site_id: int) -> AuditOutcome:
        """Audit a tracked site and cache the result on its record."""
        try:
            site = self.get_site(site_id)
        except SiteStorageError as e:
            return AuditOutcome(domain="", success=False, error=str(e))
        outcome = await self.auditor.run_full_audit(site.domain)
        if not outcome.success:
            return outcome

        audit = outcome.audit
        if not site.persisted:
            self._replace_local(replace(
                site,
                url=audit.resolved_url,
                latest_score=audit.total_score,
                latest_audit_at=audit.audit_date.isoformat(),
                platform_detected=audit.platform.name,
                platform_confidence=audit.platform.confidence / 100,
                directory_readiness=audit.directory_readiness.tier.value,
            ))
            return outcome

        try:
            audit_id = self.db.insert_audit(site_id, audit.to_dict())
            logger.info(f"Saved audit {audit_id} for {site.domain}")
        except sqlite3.Error as e:
            logger.error(f"Audit of {site.domain} completed but could not be saved: {e}")
        return outcome

    def load_latest_audit(self, site_id: int) -> Optional[Dict[str, Any]]:
        """Latest stored audit payload for a site, or None."""
        site = self.get_site(site_id)
        if not site.persisted:
            return None
        try:
            return self.db.get_latest_audit(site_id)
        except sqlite3.Error as e:
            logger.error(f"Failed to load audit for site {site_id}: {e}")
            return None

    def dashboard_stats(self) -> Dict[str, int]:
        """Pipeline totals: sites, audited sites, average score, featured-ready."""
        sites = self.list_sites()
        audited = [s for s in sites if s.audited]
        average = round(sum(s.latest_score for s in audited) / len(audited)) if audited else 0
        return {
            "total": len(sites),
            "audited": len(audited),
            "average_score": average,
            "featured_ready": sum(
                1 for s in sites if s.directory_readiness == ReadinessTier.FEATURED.value
            ),
        }

    # ------------------------------------------------------------------
    # Sprint requests
    # ------------------------------------------------------------------

    def submit_sprint_request(self, site_id: int, email: str, phone: str = "") -> SprintRequest:
        """Record a remediation sprint request and notify about it.

        The notification goes out even when the request cannot be stored.
        """
        if not email:
            raise ValueError("An email address is required")

        site = self.get_site(site_id)
        audit = self.load_latest_audit(site_id) or {}
        readiness = audit.get("directory_readiness") or {}
        tier = readiness.get("tier") or site.directory_readiness or ReadinessTier.NOT_READY.value
        blockers = [r["label"] for r in readiness.get("requirements", []) if not r.get("passed")]

        request = SprintRequest(
            site_id=site.id if site.persisted else None,
            organization_id=self.organization_id,
            email=email,
            phone=phone,
            readiness_tier=tier,
            blockers=blockers,
        )

        try:
            request.id = self.db.insert_sprint_request({
                "site_id": request.site_id,
                "organization_id": request.organization_id,
                "email": email,
                "phone": phone,
                "readiness_tier": tier,
                "blockers": blockers,
            })
        except sqlite3.Error as e:
            logger.error(f"Failed to save sprint request for {site.domain}: {e}")

        notification = compose_sprint_notification(site.domain, email, phone, tier, blockers)
        self.notifier.notify(notification)
        return request
