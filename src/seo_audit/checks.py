"""Deterministic SEO checks over a single homepage.

The check table is static configuration: every audit evaluates the same
closed set of checks, each owned by one category with a fixed point
budget. Category scores are plain sums of earned points, and the total is
the sum of the categories.
"""

import json
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from bs4 import BeautifulSoup, Comment

from seo_audit.constants import (
    IMAGE_ALT_PARTIAL_MAX_MISSING,
    IMAGE_ALT_PARTIAL_POINTS,
    LINK_KEYWORDS,
    META_DESCRIPTION_EXCERPT_LENGTH,
    NOT_FOUND,
    PHONE_PATTERN,
    TITLE_LENGTH_PARTIAL_POINTS,
    TITLE_MAX_LENGTH,
    TITLE_MIN_LENGTH,
)
from seo_audit.models import AuditScores, CategoryResult, CheckResult
from seo_audit.social import find_social_profiles

logger = logging.getLogger(__name__)

_NON_RENDERED_TAGS = ("script", "style", "noscript", "template")


@dataclass(frozen=True)
class CategoryDefinition:
    key: str
    name: str
    max_score: int


@dataclass(frozen=True)
class CheckDefinition:
    """Static definition of one check and its client-facing explanation."""
    key: str
    category: str
    max_points: int
    name: str
    what_it_means: str
    why_it_matters: str
    fix_time: str
    fix_difficulty: str
    google_timeline: str

    def explanation(self) -> Dict[str, str]:
        return {
            "name": self.name,
            "what_it_means": self.what_it_means,
            "why_it_matters": self.why_it_matters,
            "fix_time": self.fix_time,
            "fix_difficulty": self.fix_difficulty,
            "google_timeline": self.google_timeline,
        }


CATEGORY_DEFINITIONS: Tuple[CategoryDefinition, ...] = (
    CategoryDefinition("technical", "Technical SEO", 25),
    CategoryDefinition("onpage", "On-Page SEO", 25),
    CategoryDefinition("local", "Local Presence", 25),
    CategoryDefinition("trust", "Trust Signals", 15),
    CategoryDefinition("social", "Social Presence", 10),
)

CHECK_DEFINITIONS: Tuple[CheckDefinition, ...] = (
    # Technical SEO
    CheckDefinition(
        "https_enabled", "technical", 8, "Secure Connection (HTTPS)",
        "Your website has a security certificate. Visitors see a padlock icon and browsers trust your site.",
        "Without HTTPS, browsers show 'Not Secure' warnings. Visitors leave immediately, and Google ranks you lower.",
        "1-2 hours", "Easy", "1-2 weeks to see ranking impact",
    ),
    CheckDefinition(
        "canonical_tags", "technical", 5, "Canonical Tags",
        "Your site tells Google which version of a page is the 'official' one.",
        "Without this, Google might see duplicate pages and split your ranking power between them.",
        "1 hour", "Easy", "2-4 weeks",
    ),
    CheckDefinition(
        "indexable", "technical", 6, "Page is Indexable",
        "Google is ALLOWED to add this page to search results.",
        "If blocked, your page literally cannot appear in Google searches. Invisible to customers.",
        "30 minutes", "Easy", "1-2 weeks",
    ),
    CheckDefinition(
        "json_ld_present", "technical", 6, "Structured Data (Schema)",
        "Your site speaks Google's language. It tells Google your business name, address, phone, hours, etc.",
        "With schema, Google can show rich results: star ratings, business hours, click-to-call. "
        "Without it, you're just plain text.",
        "2-3 hours", "Medium", "2-4 weeks for rich results to appear",
    ),
    # On-Page SEO
    CheckDefinition(
        "title_present", "onpage", 7, "Title Tag",
        "Your page has a headline that appears in Google search results and browser tabs.",
        "This is the #1 thing people see in Google. No title = Google makes one up (usually badly).",
        "30 minutes", "Easy", "1-2 weeks",
    ),
    CheckDefinition(
        "title_length", "onpage", 3, "Title Length",
        "Your title is the right length (30-60 characters) to display fully in Google.",
        "Too long gets cut off with '...' and too short wastes valuable keyword space.",
        "15 minutes", "Easy", "1-2 weeks",
    ),
    CheckDefinition(
        "meta_description", "onpage", 5, "Meta Description",
        "The 2-line summary that appears under your title in Google search results.",
        "This is your sales pitch in Google. No description = Google picks random text from your page.",
        "30 minutes", "Easy", "1-2 weeks",
    ),
    CheckDefinition(
        "h1_present", "onpage", 6, "H1 Headline",
        "Your page has a main headline that tells visitors (and Google) what the page is about.",
        "Google uses the H1 to understand your page topic. No H1 = confused Google = worse rankings.",
        "15 minutes", "Easy", "1-2 weeks",
    ),
    CheckDefinition(
        "image_alt", "onpage", 4, "Image Alt Text",
        "Your images have descriptions that Google can read (since Google can't 'see' images).",
        "Helps with Google Image search, accessibility for blind users, and overall SEO.",
        "1-2 hours", "Easy", "2-4 weeks",
    ),
    # Local Presence
    CheckDefinition(
        "phone_visible", "local", 8, "Phone Number Visible",
        "Visitors can easily find your phone number on the website.",
        "If they can't find your number in 3 seconds, they call your competitor instead.",
        "30 minutes", "Easy", "Immediate for visitors",
    ),
    CheckDefinition(
        "contact_page", "local", 7, "Contact Page",
        "You have a dedicated page where customers can reach you.",
        "Standard expectation. Missing = looks unprofessional or abandoned.",
        "1-2 hours", "Easy", "1-2 weeks for indexing",
    ),
    CheckDefinition(
        "about_page", "local", 5, "About Page",
        "A page that tells your story, shows your team, builds trust.",
        "People buy from people. No About page = faceless business = less trust.",
        "2-3 hours", "Easy", "1-2 weeks for indexing",
    ),
    CheckDefinition(
        "services_page", "local", 5, "Services Page",
        "A clear page listing what you offer.",
        "Customers need to know what you do. Also helps rank for service-related searches.",
        "2-4 hours", "Medium", "2-4 weeks",
    ),
    # Trust Signals
    CheckDefinition(
        "privacy_policy", "trust", 4, "Privacy Policy",
        "A legal page explaining how you handle customer data.",
        "Required by law in most places. Missing = legal risk + looks unprofessional.",
        "1 hour", "Easy (use template)", "Not ranking-related",
    ),
    CheckDefinition(
        "terms", "trust", 3, "Terms of Service",
        "Legal terms for using your website/services.",
        "Protects your business legally. Expected by savvy customers.",
        "1 hour", "Easy (use template)", "Not ranking-related",
    ),
    CheckDefinition(
        "testimonials", "trust", 5, "Testimonials / Reviews",
        "Real customer feedback displayed on your site.",
        "THE #1 trust factor for local businesses. No reviews = 'Are they any good?'",
        "2-4 hours", "Medium", "Immediate for conversions",
    ),
    CheckDefinition(
        "portfolio", "trust", 3, "Portfolio / Work Examples",
        "Photos or case studies of your actual work.",
        "Proof you do what you say. Especially important for contractors, designers, etc.",
        "3-5 hours", "Medium", "2-4 weeks for image indexing",
    ),
    # Social Presence
    CheckDefinition(
        "facebook", "social", 2, "Facebook Link",
        "Your website links to your Facebook business page.",
        "Social proof + another way for customers to find and contact you.",
        "15 minutes", "Easy", "Not ranking-related",
    ),
    CheckDefinition(
        "instagram", "social", 2, "Instagram Link",
        "Your website links to your Instagram profile.",
        "Important for visual businesses (restaurants, salons, contractors).",
        "15 minutes", "Easy", "Not ranking-related",
    ),
    CheckDefinition(
        "linkedin", "social", 2, "LinkedIn Link",
        "Your website links to your LinkedIn profile.",
        "Professional credibility, especially for B2B services.",
        "15 minutes", "Easy", "Not ranking-related",
    ),
    CheckDefinition(
        "youtube", "social", 2, "YouTube Link",
        "Your website links to your YouTube channel.",
        "Video builds trust. If you have videos, show them off.",
        "15 minutes", "Easy", "Not ranking-related",
    ),
    CheckDefinition(
        "twitter", "social", 2, "Twitter/X Link",
        "Your website links to your Twitter profile.",
        "Less important for local businesses, but adds legitimacy.",
        "15 minutes", "Easy", "Not ranking-related",
    ),
)

CHECKS_BY_KEY: Dict[str, CheckDefinition] = {d.key: d for d in CHECK_DEFINITIONS}

CHECK_KEYS = tuple(CHECKS_BY_KEY)


def explain_check(key: str) -> Dict[str, str]:
    """Plain-language explanation fields for a check key (empty if unknown)."""
    definition = CHECKS_BY_KEY.get(key)
    return definition.explanation() if definition else {}


@dataclass
class PageSignals:
    """Raw facts pulled from the document, before scoring."""
    title: str
    meta_description: str
    h1s: List[str]
    has_canonical: bool
    robots: str
    total_images: int
    images_without_alt: int
    json_ld_blocks: int
    schema_types: List[str]
    phones: List[str]
    links: List[Tuple[str, str]]  # (lower-cased text, lower-cased href)
    hrefs: List[str]


def _rendered_text(soup: BeautifulSoup) -> str:
    """Concatenated text of the body, skipping script, style and comments.

    Without a <body> tag the whole document is scanned, minus the <head>.
    """
    root = soup.body or soup
    parts = []
    for text in root.find_all(string=True):
        if isinstance(text, Comment):
            continue
        if text.parent is not None and text.parent.name in _NON_RENDERED_TAGS:
            continue
        if soup.body is None and text.find_parent("head") is not None:
            continue
        parts.append(str(text))
    return "".join(parts)


def _schema_types(data) -> List[str]:
    """Collect @type values from a JSON-LD payload, including @graph members."""
    types: List[str] = []
    items = data if isinstance(data, list) else [data]
    for item in items:
        if not isinstance(item, dict):
            continue
        value = item.get("@type")
        if isinstance(value, str):
            types.append(value)
        elif isinstance(value, list):
            types.extend(v for v in value if isinstance(v, str))
        if "@graph" in item:
            types.extend(_schema_types(item["@graph"]))
    return types


def extract_signals(html: str) -> PageSignals:
    """Parse HTML and pull out everything the checks look at."""
    soup = BeautifulSoup(html or "", "html.parser")

    title_tag = soup.find("title")
    title = title_tag.get_text().strip() if title_tag else ""

    description_tag = soup.find("meta", attrs={"name": "description"})
    description = (description_tag.get("content") or "").strip() if description_tag else ""

    h1s = [h1.get_text(strip=True) for h1 in soup.find_all("h1")]
    h1s = [text for text in h1s if text]

    has_canonical = soup.find("link", rel="canonical") is not None

    robots_tag = soup.find("meta", attrs={"name": "robots"})
    robots = (robots_tag.get("content") or "").lower() if robots_tag else ""

    images = soup.find_all("img")
    images_without_alt = sum(1 for img in images if not img.get("alt"))

    json_ld_scripts = soup.find_all("script", type="application/ld+json")
    schema_types: List[str] = []
    for script in json_ld_scripts:
        try:
            schema_types.extend(_schema_types(json.loads(script.string or "")))
        except (json.JSONDecodeError, ValueError):
            logger.debug("Skipping malformed JSON-LD block")

    phones = list(dict.fromkeys(
        match.strip() for match in PHONE_PATTERN.findall(_rendered_text(soup))
    ))

    links = []
    hrefs = []
    for anchor in soup.find_all("a"):
        href = anchor.get("href") or ""
        links.append((anchor.get_text().lower(), href.lower()))
        if href:
            hrefs.append(href)

    return PageSignals(
        title=title,
        meta_description=description,
        h1s=h1s,
        has_canonical=has_canonical,
        robots=robots,
        total_images=len(images),
        images_without_alt=images_without_alt,
        json_ld_blocks=len(json_ld_scripts),
        schema_types=schema_types,
        phones=phones,
        links=links,
        hrefs=hrefs,
    )


def _has_link(links: List[Tuple[str, str]], keywords: Tuple[str, ...]) -> bool:
    return any(k in text or k in href for text, href in links for k in keywords)


def _check(key: str, passed: bool, value: Optional[str] = None, points: Optional[int] = None) -> CheckResult:
    definition = CHECKS_BY_KEY[key]
    if points is None:
        points = definition.max_points if passed else 0
    return CheckResult(
        key=key,
        passed=passed,
        category=definition.category,
        points=min(points, definition.max_points),
        max_points=definition.max_points,
        value=value,
    )


def evaluate_checks(signals: PageSignals, resolved_url: str) -> Dict[str, CheckResult]:
    """Score extracted page signals. Keys follow CHECK_DEFINITIONS order."""
    results: Dict[str, CheckResult] = {}

    # Technical
    results["https_enabled"] = _check("https_enabled", resolved_url.lower().startswith("https://"))
    results["canonical_tags"] = _check("canonical_tags", signals.has_canonical)
    results["indexable"] = _check("indexable", "noindex" not in signals.robots)
    results["json_ld_present"] = _check(
        "json_ld_present",
        signals.json_ld_blocks > 0,
        value=", ".join(dict.fromkeys(signals.schema_types)) or None,
    )

    # On-Page
    title_length = len(signals.title)
    title_ok = TITLE_MIN_LENGTH <= title_length <= TITLE_MAX_LENGTH
    results["title_present"] = _check("title_present", bool(signals.title), value=signals.title or None)
    results["title_length"] = _check(
        "title_length",
        title_ok,
        value=f"{title_length} chars",
        points=None if title_ok else TITLE_LENGTH_PARTIAL_POINTS,
    )

    description = signals.meta_description
    if len(description) > META_DESCRIPTION_EXCERPT_LENGTH:
        excerpt = description[:META_DESCRIPTION_EXCERPT_LENGTH] + "..."
    else:
        excerpt = description or None
    results["meta_description"] = _check("meta_description", bool(description), value=excerpt)

    results["h1_present"] = _check(
        "h1_present", bool(signals.h1s), value=signals.h1s[0] if signals.h1s else None
    )

    missing_alt = signals.images_without_alt
    if missing_alt == 0:
        alt_points = None
    elif missing_alt <= IMAGE_ALT_PARTIAL_MAX_MISSING:
        alt_points = IMAGE_ALT_PARTIAL_POINTS
    else:
        alt_points = 0
    results["image_alt"] = _check(
        "image_alt",
        missing_alt == 0,
        value=f"{signals.total_images - missing_alt}/{signals.total_images}",
        points=alt_points,
    )

    # Local
    results["phone_visible"] = _check(
        "phone_visible", bool(signals.phones), value=signals.phones[0] if signals.phones else None
    )
    for key in ("contact_page", "about_page", "services_page"):
        results[key] = _check(key, _has_link(signals.links, LINK_KEYWORDS[key]))

    # Trust
    for key in ("privacy_policy", "terms", "testimonials", "portfolio"):
        results[key] = _check(key, _has_link(signals.links, LINK_KEYWORDS[key]))

    # Social
    profiles = find_social_profiles(signals.hrefs)
    for platform, href in profiles.items():
        results[platform] = _check(platform, href is not None, value=href or NOT_FOUND)

    return results


def aggregate(checks: Dict[str, CheckResult]) -> AuditScores:
    """Sum check points into category scores and the total."""
    categories: Dict[str, CategoryResult] = {}
    for category in CATEGORY_DEFINITIONS:
        members = tuple(c for c in checks.values() if c.category == category.key)
        categories[category.key] = CategoryResult(
            key=category.key,
            name=category.name,
            score=sum(c.points for c in members),
            max_score=category.max_score,
            checks=members,
        )

    total = sum(cat.score for cat in categories.values())
    return AuditScores(
        checks=checks,
        categories=categories,
        total_score=total,
        max_score=sum(c.max_score for c in CATEGORY_DEFINITIONS),
    )


def run_checks(html: str, resolved_url: str) -> AuditScores:
    """Run every check against a page.

    Args:
        html: Raw HTML of the page
        resolved_url: URL the HTML was retrieved from (decides https_enabled)

    Returns:
        AuditScores with checks, category sub-totals and total score
    """
    signals = extract_signals(html)
    return aggregate(evaluate_checks(signals, resolved_url))
