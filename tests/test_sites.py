"""Tests for SiteService."""

import sqlite3
from unittest.mock import MagicMock

import pytest

from conftest import html_transport
from seo_audit.analyzer import SiteAuditor
from seo_audit.database import AbstractDatabase
from seo_audit.fetcher import RelayFetcher
from seo_audit.notifier import LoggingNotifier
from seo_audit.sites import DuplicateSiteError, SiteNotFoundError, SiteService, SiteStorageError, parse_address

pytest_plugins = ('pytest_asyncio',)


@pytest.fixture
def notifier():
    return LoggingNotifier()


@pytest.fixture
def service(db, relays, acme_html, notifier):
    auditor = SiteAuditor(RelayFetcher(relays=relays, transport=html_transport(acme_html)))
    return SiteService(db=db, auditor=auditor, notifier=notifier, organization_id="org-1")


@pytest.fixture
def broken_db():
    db = MagicMock(spec=AbstractDatabase)
    db.list_sites.return_value = []
    db.insert_site.side_effect = sqlite3.OperationalError("database is locked")
    db.insert_sprint_request.side_effect = sqlite3.OperationalError("database is locked")
    return db


class TestParseAddress:
    def test_full_address(self):
        assert parse_address("123 Main St, Springfield, il 62704") == ("Springfield", "IL", "62704")

    def test_state_without_zip(self):
        assert parse_address("123 Main St, Springfield, IL") == ("Springfield", "IL", "")

    def test_street_only(self):
        assert parse_address("123 Main St") == ("", "", "")

    def test_empty(self):
        assert parse_address("") == ("", "", "")


class TestSiteRecords:
    def test_add_site(self, service):
        site = service.add_site(
            "https://www.AcmePlumbing.com/",
            business_name="Acme Plumbing",
            address="123 Main St, Springfield, IL 62704",
            phone="555-123-4567",
            industry="home_services",
        )

        assert site.persisted
        assert site.id is not None
        assert site.domain == "acmeplumbing.com"
        assert (site.city, site.state, site.zip) == ("Springfield", "IL", "62704")
        assert site.stage == "lead"
        assert site.industry == "home_services"
        assert site.organization_id == "org-1"

    def test_duplicate_rejected(self, service):
        service.add_site("acme.com")
        with pytest.raises(DuplicateSiteError, match="Site already added"):
            service.add_site("www.acme.com")

    def test_empty_domain_rejected(self, service):
        with pytest.raises(ValueError, match="Please enter a website domain"):
            service.add_site("  ")

    def test_unknown_industry_rejected(self, service):
        with pytest.raises(ValueError):
            service.add_site("acme.com", industry="space_travel")

    def test_failed_insert_keeps_local_record(self, broken_db):
        service = SiteService(db=broken_db, organization_id="org-1")
        site = service.add_site("acme.com", business_name="Acme")

        assert not site.persisted
        assert site.id < 0
        assert [s.domain for s in service.list_sites()] == ["acme.com"]
        with pytest.raises(DuplicateSiteError):
            service.add_site("acme.com")

    def test_list_sites_newest_first(self, service):
        service.add_site("one.com")
        service.add_site("two.com")
        assert [s.domain for s in service.list_sites()] == ["two.com", "one.com"]

    def test_update_site(self, service):
        site = service.add_site("acme.com")
        updated = service.update_site(site.id, stage="proposal", notes="Sent quote", follow_up_date="2026-11-02")

        assert updated.stage == "proposal"
        assert updated.notes == "Sent quote"
        assert updated.follow_up_date == "2026-11-02"

    def test_update_rejects_unknown_stage(self, service):
        site = service.add_site("acme.com")
        with pytest.raises(ValueError, match="pipeline stage"):
            service.update_site(site.id, stage="archived")

    def test_update_rejects_immutable_fields(self, service):
        site = service.add_site("acme.com")
        with pytest.raises(ValueError, match="Cannot update"):
            service.update_site(site.id, domain="other.com")

    def test_update_local_record(self, broken_db):
        service = SiteService(db=broken_db, organization_id="org-1")
        site = service.add_site("acme.com")
        updated = service.update_site(site.id, stage="contacted")

        assert updated.stage == "contacted"
        assert service.get_site(site.id).stage == "contacted"
        broken_db.update_site.assert_not_called()

    def test_delete_site(self, service):
        site = service.add_site("acme.com")
        assert service.delete_site(site.id)
        with pytest.raises(SiteNotFoundError):
            service.get_site(site.id)

    def test_other_organization_not_visible(self, db, service):
        other = SiteService(db=db, organization_id="org-2")
        site = other.add_site("acme.com")
        with pytest.raises(SiteNotFoundError):
            service.get_site(site.id)


class TestAudits:
    @pytest.mark.asyncio
    async def test_audit_site_caches_latest(self, service):
        site = service.add_site("acmeplumbing.com")
        outcome = await service.audit_site(site.id)

        assert outcome.success
        refreshed = service.get_site(site.id)
        assert refreshed.latest_score == 77
        assert refreshed.platform_detected == "WordPress"
        assert refreshed.directory_readiness == "basic"
        assert refreshed.audited

    @pytest.mark.asyncio
    async def test_audit_survives_failed_save(self, service, db, monkeypatch):
        site = service.add_site("acmeplumbing.com")

        def fail(*args, **kwargs):
            raise sqlite3.OperationalError("disk I/O error")
        monkeypatch.setattr(db, "insert_audit", fail)

        outcome = await service.audit_site(site.id)
        assert outcome.success
        assert outcome.audit.total_score == 77
        assert service.load_latest_audit(site.id) is None

    @pytest.mark.asyncio
    async def test_failed_audit_not_saved(self, db, relays):
        auditor = SiteAuditor(RelayFetcher(relays=relays, transport=html_transport("down", 503)))
        service = SiteService(db=db, auditor=auditor, organization_id="org-1")
        site = service.add_site("acme.com")

        outcome = await service.audit_site(site.id)
        assert outcome.unreachable
        assert service.load_latest_audit(site.id) is None

    @pytest.mark.asyncio
    async def test_dashboard_stats(self, service):
        first = service.add_site("acmeplumbing.com")
        service.add_site("unaudited.com")
        await service.audit_site(first.id)

        assert service.dashboard_stats() == {
            "total": 2,
            "audited": 1,
            "average_score": 77,
            "featured_ready": 0,
        }

    def test_dashboard_stats_empty(self, service):
        assert service.dashboard_stats() == {
            "total": 0, "audited": 0, "average_score": 0, "featured_ready": 0,
        }


class TestSprintRequests:
    @pytest.mark.asyncio
    async def test_submit_uses_latest_audit(self, service, notifier):
        site = service.add_site("acmeplumbing.com")
        await service.audit_site(site.id)

        request = service.submit_sprint_request(site.id, "owner@acme.com", "555-123-4567")

        assert request.id is not None
        assert request.readiness_tier == "basic"
        assert request.blockers == ["Testimonials shown"]
        sent = notifier.sent[-1]
        assert sent.subject == "New Sprint Request: acmeplumbing.com"
        assert "Blockers: Testimonials shown" in sent.body

    def test_submit_without_audit(self, service, notifier):
        site = service.add_site("acme.com")
        request = service.submit_sprint_request(site.id, "owner@acme.com")

        assert request.readiness_tier == "not_ready"
        assert "Blockers: None" in notifier.sent[-1].body

    def test_notifies_even_when_save_fails(self, broken_db, notifier):
        service = SiteService(db=broken_db, notifier=notifier, organization_id="org-1")
        site = service.add_site("acme.com")

        request = service.submit_sprint_request(site.id, "owner@acme.com")

        assert request.id is None
        assert len(notifier.sent) == 1

    def test_email_required(self, service):
        site = service.add_site("acme.com")
        with pytest.raises(ValueError):
            service.submit_sprint_request(site.id, "")


class TestUnreadableStorage:
    @pytest.fixture
    def locked_read(self, db, monkeypatch):
        def fail(*args, **kwargs):
            raise sqlite3.OperationalError("database is locked")
        monkeypatch.setattr(db, "get_site", fail)

    @pytest.mark.asyncio
    async def test_audit_site_reports_failure(self, service, locked_read):
        outcome = await service.audit_site(1)

        assert not outcome.success
        assert "could not be loaded" in outcome.error

    def test_lookups_raise_storage_error(self, service, locked_read):
        with pytest.raises(SiteStorageError):
            service.get_site(1)
        with pytest.raises(SiteStorageError):
            service.update_site(1, stage="client")
        with pytest.raises(SiteStorageError):
            service.submit_sprint_request(1, "owner@acme.com")

    def test_local_records_still_readable(self, broken_db):
        broken_db.get_site.side_effect = sqlite3.OperationalError("database is locked")
        service = SiteService(db=broken_db, organization_id="org-1")
        site = service.add_site("acme.com")

        assert service.get_site(site.id).domain == "acme.com"
