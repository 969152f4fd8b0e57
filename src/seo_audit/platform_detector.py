"""Hosting platform detection for audited sites.

Classification is a single pass over an ordered signature table: the
first signature whose tokens appear in the lower-cased HTML wins. Order
encodes priority, so more specific signatures sit above generic ones
(WordPress page builders above plain WordPress). Multiple matches are
never resolved by confidence.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from seo_audit.models import FixabilityTier, PlatformResult

logger = logging.getLogger(__name__)

FULL = FixabilityTier.FULL
PARTIAL = FixabilityTier.PARTIAL
LIMITED = FixabilityTier.LIMITED
UNKNOWN = FixabilityTier.UNKNOWN

# Markers any WordPress install leaves in its markup
WORDPRESS_TOKENS = (
    'wp-content', 'wp-includes', 'wp-json', 'wordpress', '/wp-', 'woocommerce',
)


@dataclass(frozen=True)
class PlatformSignature:
    """One row of the signature table.

    A signature matches when any ``tokens`` entry is present, every
    ``requires`` group has at least one token present, and no ``excludes``
    token is present. ``predicate`` replaces token matching entirely for
    rules that need counts or boolean combinations.
    """
    name: str
    confidence: int
    fixability: FixabilityTier
    note: str
    tokens: Tuple[str, ...] = ()
    requires: Tuple[Tuple[str, ...], ...] = ()
    excludes: Tuple[str, ...] = ()
    predicate: Optional[Callable[[str], bool]] = None

    def matches(self, html: str) -> bool:
        """Test the signature against already lower-cased HTML."""
        if self.predicate is not None:
            return self.predicate(html)
        if self.tokens and not any(t in html for t in self.tokens):
            return False
        if any(not any(t in html for t in group) for group in self.requires):
            return False
        return not any(t in html for t in self.excludes)

    def result(self) -> PlatformResult:
        return PlatformResult(
            name=self.name,
            confidence=self.confidence,
            fixability=self.fixability,
            note=self.note,
        )


def _custom_jquery(html: str) -> bool:
    return ('jquery' in html and 'custom' in html) or len(re.findall('jquery', html)) > 2


PLATFORM_SIGNATURES: Tuple[PlatformSignature, ...] = (
    PlatformSignature(
        'WordPress + Elementor', 95, FULL, 'WordPress page builder - full control',
        tokens=('elementor',), requires=(WORDPRESS_TOKENS,),
    ),
    PlatformSignature(
        'WordPress + Divi', 95, FULL, 'WordPress page builder - full control',
        tokens=('et-builder', 'et_pb_', 'elegantthemes', '/themes/divi'),
        requires=(WORDPRESS_TOKENS,),
    ),
    PlatformSignature(
        'WordPress', 95, FULL, 'Full control - we can fix everything',
        tokens=WORDPRESS_TOKENS,
    ),
    PlatformSignature(
        'Wix', 95, PARTIAL, 'Some limitations - can optimize within constraints',
        tokens=('wix.com', '_wix_', 'wixsite.com', 'static.wixstatic.com', 'wix-code'),
    ),
    PlatformSignature(
        'Squarespace', 95, PARTIAL, 'Most fixes possible with some workarounds',
        tokens=('squarespace', 'sqsp.net', 'static1.squarespace', 'squarespace-cdn'),
    ),
    PlatformSignature(
        'Shopify', 95, PARTIAL, 'E-commerce focused - good SEO tools available',
        tokens=('shopify', 'cdn.shopify', 'myshopify.com', 'shopifycdn'),
    ),
    PlatformSignature(
        'Webflow', 95, FULL, 'Good control - clean implementation possible',
        tokens=('webflow', 'website-files.com', 'webflow.io', 'w-nav', 'w-slider'),
    ),
    PlatformSignature(
        'GoDaddy', 85, PARTIAL, 'Basic builder - some limitations',
        tokens=('godaddy', 'secureserver.net', 'godaddysites', 'mywebsite.godaddy',
                'ondigitalocean.app'),
    ),
    PlatformSignature(
        'Weebly', 95, PARTIAL, 'Simple builder - basic SEO available',
        tokens=('weebly', 'weeblycloud', 'editmysite'),
    ),
    PlatformSignature(
        'Duda', 95, FULL, 'Agency-friendly - good capabilities',
        tokens=('duda', 'dudaone.com', 'duda.co'),
    ),
    PlatformSignature(
        'HubSpot', 88, FULL, 'Marketing platform - excellent tools',
        tokens=('hubspot', 'hs-scripts.com', 'hs-analytics', 'hubspotusercontent',
                'hscollectedforms'),
    ),
    PlatformSignature(
        'ClickFunnels', 95, LIMITED, 'Funnel builder - not built for SEO',
        tokens=('clickfunnels', 'cfimg.com', 'cffastcdn'),
    ),
    PlatformSignature(
        'Drupal', 90, FULL, 'Powerful CMS - full control available',
        tokens=('drupal', '/sites/default/files', 'drupal.js', '/sites/all/'),
    ),
    PlatformSignature(
        'Joomla', 90, FULL, 'Established CMS - full control available',
        tokens=('joomla', '/media/jui/', '/components/com_'),
    ),
    PlatformSignature(
        'Ghost', 90, FULL, 'Modern blogging platform - clean code',
        tokens=('ghost.io', 'ghost-url', '"ghost"'),
    ),
    PlatformSignature(
        'Kajabi', 95, LIMITED, 'Course platform - limited SEO options',
        tokens=('kajabi', 'kajabi-cdn'),
    ),
    PlatformSignature(
        'BigCommerce', 95, PARTIAL, 'E-commerce platform - solid SEO basics',
        tokens=('bigcommerce',),
    ),
    PlatformSignature(
        'Framer', 95, PARTIAL, 'Design-focused - some SEO limitations',
        tokens=('framer', 'framerusercontent', 'framer.com'),
    ),
    PlatformSignature(
        'Bubble', 95, LIMITED, 'No-code app builder - SEO limitations',
        tokens=('bubble.io', 'bblcdn.com'),
    ),
    PlatformSignature(
        'Carrd', 95, LIMITED, 'Simple one-page builder - very basic SEO',
        tokens=('carrd.co', 'crd.co'),
    ),
    PlatformSignature(
        'Jimdo', 95, PARTIAL, 'Simple builder - basic SEO available',
        tokens=('jimdo', 'jimdocdn'),
    ),
    PlatformSignature(
        'Leadpages', 95, LIMITED, 'Landing page builder - limited SEO',
        tokens=('leadpages', 'lpages.co'),
    ),
    PlatformSignature(
        'Adobe Portfolio', 90, LIMITED, 'Portfolio builder - basic SEO only',
        tokens=('format.com', 'myportfolio.com', 'adobe portfolio'),
    ),
    PlatformSignature(
        'Blogger', 95, PARTIAL, 'Google blog platform - basic SEO',
        tokens=('blogger.com', 'blogspot.com', 'blogblog.com'),
    ),
    PlatformSignature(
        'Cargo', 95, LIMITED, 'Portfolio platform - limited SEO',
        tokens=('cargo.site', 'cargocollective'),
    ),
    PlatformSignature(
        '10Web', 90, FULL, 'WordPress-based AI builder - full control',
        tokens=('10web.io',),
    ),
    # Builder markup served without the usual WordPress paths
    PlatformSignature(
        'WordPress + Elementor', 95, FULL, 'WordPress page builder - full control',
        tokens=('elementor', 'elementor-kit'),
    ),
    PlatformSignature(
        'WordPress + Divi', 95, FULL, 'WordPress page builder - full control',
        tokens=('et-builder', 'et_pb_', 'elegantthemes'),
    ),
    PlatformSignature(
        'Next.js (React)', 85, FULL, 'Modern framework - full control with developer',
        tokens=('_next/static', '__next', 'next/head'),
    ),
    PlatformSignature(
        'Gatsby', 90, FULL, 'Static site generator - fast & SEO-friendly',
        tokens=('gatsby', '___gatsby'),
    ),
    PlatformSignature(
        'Hugo', 85, FULL, 'Static site generator - fast & lightweight',
        tokens=('hugo-', 'powered by hugo'),
    ),
    PlatformSignature(
        'Custom (Bootstrap)', 70, FULL, 'Custom built - likely full control',
        tokens=('bootstrap', 'btn btn-'), excludes=('wp-',),
    ),
    PlatformSignature(
        'Custom Built', 60, FULL, 'Custom built - needs developer for changes',
        predicate=_custom_jquery,
    ),
)

# Generic heuristics consulted only when no signature matched
FALLBACK_HEURISTICS: Tuple[PlatformSignature, ...] = (
    PlatformSignature(
        'Custom/Static', 70, FULL, 'Likely custom or static site - full control',
        tokens=('netlify', 'vercel', 'cloudflare pages', 'github.io', 'gitlab.io'),
    ),
    PlatformSignature(
        'Unknown CMS', 40, UNKNOWN, 'Uses a CMS but cannot identify which one',
        tokens=('cms', 'content-management'),
    ),
)

UNKNOWN_PLATFORM = PlatformResult(
    name='Custom/Unknown',
    confidence=30,
    fixability=UNKNOWN,
    note='Could not detect platform - may be custom built or behind protection',
)


def detect_platform(html: str) -> PlatformResult:
    """Classify the hosting platform of a page.

    Args:
        html: Raw HTML of the page

    Returns:
        PlatformResult of the first matching signature, or the unknown default
    """
    h = (html or '').lower()

    for signature in PLATFORM_SIGNATURES + FALLBACK_HEURISTICS:
        if signature.matches(h):
            logger.debug(f"Platform signature matched: {signature.name}")
            return signature.result()

    return UNKNOWN_PLATFORM
