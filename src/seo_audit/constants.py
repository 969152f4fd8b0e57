# src/seo_audit/constants.py
"""Centralized constants for the SEO audit tool.

Scoring budgets, retrieval limits and keyword tables that are shared by
several modules. Per-run configuration lives in config.py.
"""

import re

# =============================================================================
# Retrieval Constants
# =============================================================================

# Each relay attempt is cancelled after this many seconds
DEFAULT_ATTEMPT_TIMEOUT_SECONDS = 12.0

# A relay payload must be longer than this to count as a document
MIN_PAYLOAD_LENGTH = 500

# Status codes a relay passes through when the target has nothing to serve
NO_PRESENCE_STATUS_CODES = frozenset({404, 410})


# =============================================================================
# Scoring Constants
# =============================================================================

MAX_TOTAL_SCORE = 100

# Title length window for full title_length credit
TITLE_MIN_LENGTH = 30
TITLE_MAX_LENGTH = 60

# Graduated credit
TITLE_LENGTH_PARTIAL_POINTS = 1
IMAGE_ALT_PARTIAL_POINTS = 2
IMAGE_ALT_PARTIAL_MAX_MISSING = 2  # fewer than 3 images without alt

# Characters of the meta description kept as the observed value
META_DESCRIPTION_EXCERPT_LENGTH = 50

NOT_FOUND = "Not found"

# North-American phone numbers: 555-123-4567, (555) 123-4567, +1 555.123.4567
PHONE_PATTERN = re.compile(
    r"(?:\+?1[-.\s]?)?\(?[0-9]{3}\)?[-.\s]?[0-9]{3}[-.\s]?[0-9]{4}"
)

# Keywords searched in link text and href, per check
LINK_KEYWORDS = {
    "contact_page": ("contact",),
    "about_page": ("about",),
    "services_page": ("service",),
    "privacy_policy": ("privacy",),
    "terms": ("terms",),
    "testimonials": ("testimonial", "review"),
    "portfolio": ("portfolio", "gallery", "work"),
}


# =============================================================================
# Directory Readiness Constants
# =============================================================================

FEATURED_MIN_SCORE = 75
BASIC_MIN_SCORE = 50


# =============================================================================
# Report Constants
# =============================================================================

# (minimum score, background, text colour, label)
SCORE_BANDS = (
    (80, "#059669", "#ffffff", "Excellent"),
    (60, "#84cc16", "#1a1a1a", "Good"),
    (40, "#eab308", "#1a1a1a", "Needs Work"),
    (20, "#f97316", "#ffffff", "Poor"),
    (0, "#dc2626", "#ffffff", "Critical"),
)


# =============================================================================
# Site Tracking Constants
# =============================================================================

INDUSTRY_PRESETS = {
    "home_services": {"label": "Home Services", "avg_value": 650, "close_rate": 0.30},
    "general_contractor": {"label": "Contractor", "avg_value": 3500, "close_rate": 0.20},
    "dental": {"label": "Dental", "avg_value": 900, "close_rate": 0.25},
    "restaurant": {"label": "Restaurant", "avg_value": 35, "close_rate": 0.60},
    "attorney": {"label": "Attorney", "avg_value": 2500, "close_rate": 0.15},
    "med_spa": {"label": "Med Spa", "avg_value": 600, "close_rate": 0.20},
    "real_estate": {"label": "Real Estate", "avg_value": 4000, "close_rate": 0.10},
    "salon": {"label": "Salon", "avg_value": 120, "close_rate": 0.35},
    "auto_repair": {"label": "Auto Repair", "avg_value": 450, "close_rate": 0.25},
    "funeral_services": {"label": "Funeral Services", "avg_value": 8000, "close_rate": 0.40},
    "other": {"label": "Other", "avg_value": 500, "close_rate": 0.20},
}

DEFAULT_INDUSTRY = "other"

PIPELINE_STAGES = ("lead", "contacted", "proposal", "client", "lost")

DEFAULT_STAGE = "lead"

DATA_CONFIDENCE_DETECTED = "detected"
