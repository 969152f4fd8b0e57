# tests/test_notifier.py
from unittest.mock import Mock
from urllib.parse import parse_qs, urlparse

from seo_audit.notifier import (
    LoggingNotifier,
    MailtoNotifier,
    compose_sprint_notification,
)


def make_notification(**overrides):
    fields = dict(
        domain="acme.com",
        email="owner@acme.com",
        phone="555-123-4567",
        readiness_tier="basic",
        blockers=["Testimonials shown", "Structured data (Schema)"],
        recipient="sales@agency.test",
        sender_name="Blue Fin",
    )
    fields.update(overrides)
    return compose_sprint_notification(**fields)


def test_compose_body():
    notification = make_notification()

    assert notification.subject == "New Sprint Request: acme.com"
    assert notification.recipient == "sales@agency.test"
    assert notification.body.splitlines() == [
        "New Sprint Request Received!",
        "",
        "Website: acme.com",
        "Client Email: owner@acme.com",
        "Client Phone: 555-123-4567",
        "Readiness Tier: basic",
        "Blockers: Testimonials shown, Structured data (Schema)",
        "",
        "---",
        "Sent from Blue Fin SEO Tool",
    ]


def test_no_blockers():
    assert "Blockers: None" in make_notification(blockers=[]).body


def test_mailto_url_round_trips():
    notification = make_notification()
    parsed = urlparse(notification.mailto_url())
    query = parse_qs(parsed.query)

    assert parsed.scheme == "mailto"
    assert parsed.path == "sales@agency.test"
    assert query["subject"] == ["New Sprint Request: acme.com"]
    assert query["body"] == [notification.body]


def test_mailto_notifier_opens_mail_client():
    opener = Mock(return_value=True)
    notification = make_notification()

    assert MailtoNotifier(opener=opener).notify(notification)
    opener.assert_called_once_with(notification.mailto_url())


def test_mailto_notifier_without_mail_client():
    assert not MailtoNotifier(opener=Mock(return_value=False)).notify(make_notification())


def test_logging_notifier(caplog):
    notifier = LoggingNotifier()
    with caplog.at_level("INFO", logger="seo_audit.notifier"):
        assert notifier.notify(make_notification())

    assert len(notifier.sent) == 1
    assert "New Sprint Request: acme.com" in caplog.text


def test_logging_notifier_keeps_recent_only():
    notifier = LoggingNotifier(keep=2)
    for domain in ("one.com", "two.com", "three.com"):
        notifier.notify(make_notification(domain=domain))

    assert [n.subject for n in notifier.sent] == [
        "New Sprint Request: two.com",
        "New Sprint Request: three.com",
    ]
