# tests/test_social.py
import pytest

from seo_audit.social import classify_social_link, find_social_profiles


@pytest.mark.parametrize("href,platform", [
    ("https://facebook.com/AcmeCorp", "facebook"),
    ("https://www.facebook.com/acme.plumbing/", "facebook"),
    ("https://instagram.com/acme_plumbing", "instagram"),
    ("https://www.linkedin.com/company/acme-plumbing", "linkedin"),
    ("https://linkedin.com/in/jane-doe", "linkedin"),
    ("https://www.youtube.com/@AcmePlumbing", "youtube"),
    ("https://youtube.com/channel/UC123", "youtube"),
    ("https://twitter.com/acme", "twitter"),
    ("https://x.com/acme_co", "twitter"),
])
def test_profile_links(href, platform):
    assert classify_social_link(href) == platform


@pytest.mark.parametrize("href", [
    "https://facebook.com/sharer.php?u=https://example.com",
    "https://www.facebook.com/sharer/sharer.php?u=x",
    "https://facebook.com/plugins/page.php?href=x",
    "https://www.facebook.com/dialog/share",
    "https://facebook.com/",
    "https://instagram.com/p/ABC123",
    "https://www.linkedin.com/shareArticle?url=x",
    "https://linkedin.com/company/",
    "https://youtube.com/watch?v=abc",
    "https://twitter.com/intent/tweet?text=x",
    "https://twitter.com/share?url=x",
    "https://x.com/",
    "https://dropbox.com/acme",
    "/facebook",
    "",
])
def test_rejected_links(href):
    assert classify_social_link(href) is None


def test_first_profile_wins():
    profiles = find_social_profiles([
        "https://facebook.com/sharer.php?u=x",
        "https://facebook.com/AcmeCorp",
        "https://facebook.com/OtherPage",
    ])
    assert profiles["facebook"] == "https://facebook.com/AcmeCorp"


def test_missing_platforms_are_none():
    profiles = find_social_profiles(["https://x.com/acme"])
    assert profiles == {
        "facebook": None,
        "instagram": None,
        "linkedin": None,
        "youtube": None,
        "twitter": "https://x.com/acme",
    }
