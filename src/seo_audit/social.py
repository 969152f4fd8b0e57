# src/seo_audit/social.py
# Social profile link detection for the social presence checks.

import re
from typing import Dict, Iterable, Optional
from urllib.parse import urlparse

SOCIAL_PLATFORMS = ("facebook", "instagram", "linkedin", "youtube", "twitter")

_FACEBOOK_NAME = re.compile(r"^[a-z0-9._-]+$")
_INSTAGRAM_NAME = re.compile(r"^[a-z0-9._-]+$")
_TWITTER_NAME = re.compile(r"^[a-z0-9_]+$")

# First path segments that point at a widget or feature rather than a profile
FACEBOOK_EXCLUDED = {"sharer", "sharer.php", "share", "share.php", "dialog", "plugins"}
INSTAGRAM_EXCLUDED = {"p", "explore", "accounts", "about"}
TWITTER_EXCLUDED = {"intent", "share", "home", "search"}


def _host_matches(host: str, *domains: str) -> bool:
    return any(host == d or host.endswith("." + d) for d in domains)


def _segments(path: str) -> list:
    return [s for s in path.split("/") if s]


def _is_facebook_profile(host: str, path: str) -> bool:
    if not _host_matches(host, "facebook.com"):
        return False
    segments = _segments(path)
    if not segments:
        return False
    return bool(_FACEBOOK_NAME.match(segments[0])) and segments[0] not in FACEBOOK_EXCLUDED


def _is_instagram_profile(host: str, path: str) -> bool:
    if not _host_matches(host, "instagram.com"):
        return False
    segments = _segments(path)
    if not segments:
        return False
    return bool(_INSTAGRAM_NAME.match(segments[0])) and segments[0] not in INSTAGRAM_EXCLUDED


def _is_linkedin_profile(host: str, path: str) -> bool:
    if not _host_matches(host, "linkedin.com"):
        return False
    segments = _segments(path)
    return len(segments) >= 2 and segments[0] in ("company", "in")


def _is_youtube_channel(host: str, path: str) -> bool:
    if not _host_matches(host, "youtube.com"):
        return False
    segments = _segments(path)
    if not segments or segments[0] == "watch":
        return False
    if segments[0].startswith("@") and len(segments[0]) > 1:
        return True
    return len(segments) >= 2 and segments[0] in ("channel", "c", "user")


def _is_twitter_profile(host: str, path: str) -> bool:
    if not _host_matches(host, "twitter.com", "x.com"):
        return False
    segments = _segments(path)
    if not segments or "/intent/" in path or "/share" in path:
        return False
    return bool(_TWITTER_NAME.match(segments[0])) and segments[0] not in TWITTER_EXCLUDED


_RULES = {
    "facebook": _is_facebook_profile,
    "instagram": _is_instagram_profile,
    "linkedin": _is_linkedin_profile,
    "youtube": _is_youtube_channel,
    "twitter": _is_twitter_profile,
}


def classify_social_link(href: str) -> Optional[str]:
    """Return the social platform a link is a genuine profile of, if any.

    Share buttons, intents, dialogs, plugins and bare home pages are
    rejected.
    """
    if not href:
        return None
    parsed = urlparse(href.strip().lower())
    host = parsed.hostname or ""
    if not host:
        return None
    for platform, rule in _RULES.items():
        if rule(host, parsed.path):
            return platform
    return None


def find_social_profiles(hrefs: Iterable[str]) -> Dict[str, Optional[str]]:
    """
    Map each social platform to the first profile link found among hrefs.
    Platforms without a qualifying link map to None.
    """
    profiles: Dict[str, Optional[str]] = {platform: None for platform in SOCIAL_PLATFORMS}
    for href in hrefs:
        platform = classify_social_link(href)
        if platform and profiles[platform] is None:
            profiles[platform] = href.strip()
    return profiles
