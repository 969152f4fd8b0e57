"""HTML report and assessment letter generation."""

import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Optional, Union

from jinja2 import Environment, FileSystemLoader, select_autoescape

from seo_audit.checks import explain_check
from seo_audit.config import settings
from seo_audit.constants import SCORE_BANDS
from seo_audit.models import AuditResult, SiteRecord
from seo_audit.readiness import FEATURED_TIER, TIER_LABELS

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"


@dataclass
class Branding:
    """Report branding; defaults come from settings."""
    company_name: str = field(default_factory=lambda: settings.COMPANY_NAME)
    primary_color: str = field(default_factory=lambda: settings.PRIMARY_COLOR)
    logo_url: str = field(default_factory=lambda: settings.LOGO_URL)

    @property
    def slug(self) -> str:
        return re.sub(r"[^a-z0-9]+", "-", self.company_name.lower()).strip("-") or "seo"


@dataclass(frozen=True)
class ScoreBand:
    background: str
    text: str
    label: str


def score_band(score: float) -> ScoreBand:
    """Colour and label for a 0-100 score."""
    for minimum, background, text, label in SCORE_BANDS:
        if score >= minimum:
            return ScoreBand(background, text, label)
    _, background, text, label = SCORE_BANDS[-1]
    return ScoreBand(background, text, label)


def format_long_date(value: Union[str, datetime, date, None]) -> str:
    """Format as e.g. "March 5, 2026". Unparseable strings are returned as-is."""
    if value is None:
        value = datetime.now()
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return value
    return f"{value:%B} {value.day}, {value.year}"


def _site_fields(site: Union[SiteRecord, Dict[str, Any], str]) -> Dict[str, Any]:
    if isinstance(site, SiteRecord):
        return site.to_dict()
    if isinstance(site, str):
        return {"domain": site}
    return dict(site)


def safe_audit(audit: Union[AuditResult, Dict[str, Any], None]) -> Dict[str, Any]:
    """Audit payload with safe defaults for anything missing.

    ``categories`` stays None when absent so the report can say the
    breakdown is unavailable.
    """
    if isinstance(audit, AuditResult):
        audit = audit.to_dict()
    audit = audit or {}

    platform = {"name": "Unknown", "note": "", "confidence": 0}
    platform.update({k: v for k, v in (audit.get("platform") or {}).items() if v is not None})

    readiness = {
        "tier": "not_ready",
        "percentage": 0,
        "passed_count": 0,
        "total_count": len(FEATURED_TIER.requirements),
        "requirements": [],
    }
    readiness.update({
        k: v for k, v in (audit.get("directory_readiness") or {}).items() if v is not None
    })

    categories = audit.get("categories") or None
    if categories:
        categories = {
            key: {
                **cat,
                "checks": [{**explain_check(c.get("key", "")), **c} for c in cat.get("checks", [])],
            }
            for key, cat in categories.items()
        }

    return {
        "total_score": audit.get("total_score") or 0,
        "platform": platform,
        "directory_readiness": readiness,
        "categories": categories,
        "audit_date": audit.get("audit_date") or datetime.now().isoformat(),
    }


class ReportGenerator:
    """Renders standalone, print-ready audit reports."""

    def __init__(self, template_dir: Optional[Union[str, Path]] = None):
        """Initialize report generator.

        Args:
            template_dir: Directory containing Jinja2 templates (package templates by default)
        """
        template_path = Path(template_dir) if template_dir else TEMPLATE_DIR
        self.env = Environment(
            loader=FileSystemLoader(str(template_path)),
            autoescape=select_autoescape(["html"]),
        )
        self.env.filters["score_band"] = score_band
        self.env.filters["long_date"] = format_long_date

    def render(
        self,
        site: Union[SiteRecord, Dict[str, Any], str],
        audit: Union[AuditResult, Dict[str, Any], None],
        branding: Optional[Branding] = None,
    ) -> str:
        """Render the HTML report for a site's audit.

        Args:
            site: Site record, row dict, or bare domain
            audit: AuditResult or stored audit payload (missing fields are defaulted)
            branding: Report branding

        Returns:
            HTML document
        """
        branding = branding or Branding()
        site_fields = _site_fields(site)
        data = safe_audit(audit)
        readiness = data["directory_readiness"]

        template = self.env.get_template("report.html")
        return template.render(
            site=site_fields,
            audit=data,
            branding=branding,
            band=score_band(data["total_score"]),
            readiness=readiness,
            tier_label=TIER_LABELS.get(readiness["tier"], "Not Ready"),
            audit_date=format_long_date(data["audit_date"]),
        )

    def report_filename(self, domain: str, branding: Optional[Branding] = None, on: Optional[date] = None) -> str:
        branding = branding or Branding()
        on = on or date.today()
        return f"{branding.slug}-report-{domain}-{on.isoformat()}.html"

    def write_report(
        self,
        site: Union[SiteRecord, Dict[str, Any], str],
        audit: Union[AuditResult, Dict[str, Any], None],
        output_dir: Union[str, Path] = ".",
        branding: Optional[Branding] = None,
    ) -> Path:
        """Render the report and save it as a standalone HTML file.

        Returns:
            Path of the written file
        """
        branding = branding or Branding()
        html = self.render(site, audit, branding)
        domain = _site_fields(site).get("domain", "site")

        output_path = Path(output_dir) / self.report_filename(domain, branding)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(html, encoding="utf-8")
        logger.info(f"Report saved to {output_path}")
        return output_path

    def render_no_presence_letter(
        self, domain: str, branding: Optional[Branding] = None, on: Optional[date] = None
    ) -> str:
        """Plain-text assessment letter for a domain with no working website."""
        branding = branding or Branding()
        template = self.env.get_template("no_presence_letter.txt")
        return template.render(
            domain=domain,
            branding=branding,
            letter_date=format_long_date(on or datetime.now()),
        ).strip() + "\n"

    def write_no_presence_letter(
        self,
        domain: str,
        output_dir: Union[str, Path] = ".",
        branding: Optional[Branding] = None,
    ) -> Path:
        output_path = Path(output_dir) / f"no-presence-assessment-{domain}.txt"
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(self.render_no_presence_letter(domain, branding), encoding="utf-8")
        logger.info(f"Assessment letter saved to {output_path}")
        return output_path
