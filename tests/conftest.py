# tests/conftest.py
import httpx
import pytest

from seo_audit.database import LocalSqliteDatabase
from seo_audit.fetcher import Relay

FILLER = (
    "<p>We have served homeowners across the county for over twenty years. "
    "Every job is backed by a written guarantee and licensed technicians.</p>"
) * 4


def make_page(head: str = "", body: str = "") -> str:
    """Wrap head/body fragments into a document long enough to pass payload checks."""
    return (
        "<!DOCTYPE html><html lang=\"en\"><head><meta charset=\"utf-8\">"
        f"{head}</head><body>{body}{FILLER}</body></html>"
    )


ACME_HEAD = (
    '<title>Acme Plumbing | Licensed Local Plumbers</title>'
    '<meta name="description" content="Acme Plumbing offers 24/7 emergency plumbing, '
    'drain cleaning and water heater repair.">'
    '<link rel="canonical" href="https://acmeplumbing.com/">'
    "<link rel='stylesheet' href='https://acmeplumbing.com/wp-content/themes/acme/style.css'>"
    '<script type="application/ld+json">'
    '{"@context": "https://schema.org", "@type": "Plumber", "name": "Acme Plumbing"}'
    '</script>'
)

ACME_BODY = (
    '<header><a href="/">Home</a> <a href="/about">About Us</a> '
    '<a href="/contact">Contact</a></header>'
    '<h1>Fast, Friendly Plumbing</h1>'
    '<img src="/van.jpg" alt="Our van"><img src="/team.jpg" alt="The team">'
    '<p>Call us today: (555) 123-4567</p>'
    '<footer><a href="/privacy-policy">Privacy Policy</a> '
    '<a href="/terms">Terms</a></footer>'
)


@pytest.fixture
def acme_html():
    """WordPress homepage scoring 77: no services, testimonials, portfolio or social links."""
    return make_page(ACME_HEAD, ACME_BODY)


@pytest.fixture
def relays():
    return [
        Relay("relay-a", "https://relay-a.test/?{url}"),
        Relay("relay-b", "https://relay-b.test/raw?url={url}"),
    ]


@pytest.fixture
def db(tmp_path):
    database = LocalSqliteDatabase(db_url=f"sqlite:///{tmp_path / 'test.db'}")
    yield database
    database.close()


def html_transport(html: str, status_code: int = 200) -> httpx.MockTransport:
    """Transport that answers every request with the same document."""
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, text=html)
    return httpx.MockTransport(handler)
