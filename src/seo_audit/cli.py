"""Command-line interface for the SEO audit tool."""

import asyncio
import json
import logging
import sqlite3
import sys
from typing import Optional

from seo_audit.analyzer import SiteAuditor
from seo_audit.config import AuditConfig, settings
from seo_audit.constants import INDUSTRY_PRESETS, PIPELINE_STAGES
from seo_audit.database import get_db_client
from seo_audit.fetcher import RelayFetcher
from seo_audit.logging_config import setup_logging
from seo_audit.notifier import LoggingNotifier, MailtoNotifier
from seo_audit.report_generator import ReportGenerator
from seo_audit.sites import SiteService

logger = logging.getLogger(__name__)


def _load_config(args) -> AuditConfig:
    if getattr(args, "config", None):
        return AuditConfig.from_file(args.config)
    return AuditConfig.from_env()


def _build_auditor(args) -> SiteAuditor:
    return SiteAuditor(RelayFetcher.from_config(_load_config(args)))


def _open_db(args):
    db_url = args.db or settings.DATABASE_URL
    try:
        return get_db_client(db_url=db_url)
    except sqlite3.Error as e:
        logger.error(f"Could not open database {db_url}: {e}")
        raise ValueError(f"Could not open database {db_url}: {e}") from e


def _build_service(args) -> SiteService:
    notifier = LoggingNotifier() if getattr(args, "no_mail_client", False) else MailtoNotifier()
    return SiteService(
        db=_open_db(args),
        auditor=_build_auditor(args),
        notifier=notifier,
    )


def _emit(args, payload) -> None:
    """Write JSON output to stdout or --output-file."""
    output = json.dumps(payload, indent=2, default=str)
    if getattr(args, "output_file", None):
        with open(args.output_file, "w") as f:
            f.write(output)
        print(f"Results written to {args.output_file}")
    else:
        print(output)


def print_audit(audit) -> None:
    """Print an AuditResult in a formatted way."""
    readiness = audit.directory_readiness

    print(f"\n{'=' * 60}")
    print(f"SEO Audit for: {audit.domain}")
    print(f"{'=' * 60}")
    print(f"\nURL: {audit.resolved_url}" + (f" (via {audit.relay})" if audit.relay else ""))
    print(f"Platform: {audit.platform.name} ({audit.platform.confidence}% confidence, "
          f"{audit.platform.fixability.value} fixability)")
    print(f"  {audit.platform.note}")
    print(f"\nTotal Score: {audit.total_score}/{audit.max_score}")

    for category in audit.categories.values():
        print(f"\n{category.name}: {category.score}/{category.max_score}")
        for check in category.checks:
            mark = "PASS" if check.passed else "FAIL"
            value = f" - {check.value}" if check.value else ""
            print(f"  [{mark}] {check.key} {check.points}/{check.max_points}{value}")

    print(f"\nDirectory Readiness: {readiness.tier.value} ({readiness.percentage}%, "
          f"{readiness.passed_count}/{readiness.total_count} requirements)")
    for label in readiness.blockers:
        print(f"  Missing: {label}")

    print(f"\n{'=' * 60}\n")


def print_site(site) -> None:
    score = site.latest_score if site.audited else "-"
    tier = site.directory_readiness or "-"
    local = "" if site.persisted else " (local only)"
    print(f"{site.id:>5}  {site.domain:<35} {site.stage:<10} {site.industry:<18} "
          f"score {score:<4} {tier}{local}")


def audit_command(args):
    """Audit a single domain without tracking it."""
    auditor = _build_auditor(args)
    outcome = asyncio.run(auditor.run_full_audit(args.domain))

    if not outcome.success:
        print(f"Error: {outcome.error}")
        if outcome.no_presence and args.letter_dir:
            path = ReportGenerator().write_no_presence_letter(outcome.domain, args.letter_dir)
            print(f"Assessment letter written to {path}")
        sys.exit(1)

    if args.output == "json":
        _emit(args, outcome.audit.to_dict())
    else:
        print_audit(outcome.audit)

    if args.report_dir:
        path = ReportGenerator().write_report(outcome.domain, outcome.audit, args.report_dir)
        print(f"Report written to {path}")


def sites_list_command(args):
    service = _build_service(args)
    sites = service.list_sites()
    if args.output == "json":
        _emit(args, [site.to_dict() for site in sites])
        return
    if not sites:
        print("No sites tracked yet.")
        return
    for site in sites:
        print_site(site)


def sites_stats_command(args):
    stats = _build_service(args).dashboard_stats()
    if args.output == "json":
        _emit(args, stats)
        return
    print(f"Total sites:     {stats['total']}")
    print(f"Audited:         {stats['audited']}")
    print(f"Average score:   {stats['average_score']}")
    print(f"Featured ready:  {stats['featured_ready']}")


def sites_add_command(args):
    service = _build_service(args)
    site = service.add_site(
        args.domain,
        business_name=args.name or "",
        address=args.address or "",
        phone=args.phone or "",
        industry=args.industry,
    )
    print(f"Added {site.domain} (id {site.id})" + ("" if site.persisted else " - not saved to the database"))


def sites_update_command(args):
    updates = {
        field: value for field, value in (
            ("industry", args.industry),
            ("stage", args.stage),
            ("notes", args.notes),
            ("follow_up_date", args.follow_up),
        ) if value is not None
    }
    if not updates:
        print("Nothing to update.")
        return
    site = _build_service(args).update_site(args.site_id, **updates)
    print_site(site)


def sites_delete_command(args):
    if _build_service(args).delete_site(args.site_id):
        print(f"Deleted site {args.site_id}")
    else:
        print(f"Error: could not delete site {args.site_id}")
        sys.exit(1)


def sites_audit_command(args):
    service = _build_service(args)
    outcome = asyncio.run(service.audit_site(args.site_id))
    if not outcome.success:
        print(f"Error: {outcome.error}")
        sys.exit(1)
    if args.output == "json":
        _emit(args, outcome.audit.to_dict())
    else:
        print_audit(outcome.audit)


def report_command(args):
    """Write the HTML report for a site's latest stored audit."""
    service = _build_service(args)
    site = service.get_site(args.site_id)
    audit = service.load_latest_audit(args.site_id)
    if audit is None:
        print(f"No audit found for {site.domain}. Run: seo-audit sites audit {site.id}")
        sys.exit(1)
    path = ReportGenerator().write_report(site, audit, args.output_dir)
    print(f"Report written to {path}")


def sprint_command(args):
    """Record a sprint request and notify about it."""
    request = _build_service(args).submit_sprint_request(args.site_id, args.email, args.phone or "")
    saved = f"saved as #{request.id}" if request.id else "not saved"
    print(f"Sprint request {saved}; readiness {request.readiness_tier}, "
          f"{len(request.blockers)} blocker(s)")


def _add_output_args(parser) -> None:
    parser.add_argument(
        "--output",
        "-o",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )
    parser.add_argument(
        "--output-file",
        "-f",
        help="Write output to file (only for json format)",
    )


def build_parser():
    import argparse

    parser = argparse.ArgumentParser(
        description="SEO Audit - Score small-business homepages and track directory readiness"
    )

    # Global flags (before subcommands)
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=settings.LOG_LEVEL,
        help="Set logging verbosity (default: INFO)",
    )
    parser.add_argument(
        "--log-file",
        help="Write logs to file in addition to console",
    )
    parser.add_argument(
        "--config",
        help="JSON file with relay/timeout configuration (default: environment)",
    )
    parser.add_argument(
        "--db",
        help="Database URL (default: DATABASE_URL setting)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # audit
    audit_parser = subparsers.add_parser("audit", help="Audit a domain without tracking it.")
    audit_parser.add_argument("domain", help="Domain to audit (e.g., example.com)")
    _add_output_args(audit_parser)
    audit_parser.add_argument("--report-dir", help="Also write the HTML report to this directory")
    audit_parser.add_argument(
        "--letter-dir",
        help="Write a no-presence assessment letter here when the site has no real website",
    )
    audit_parser.set_defaults(func=audit_command)

    # sites
    sites_parser = subparsers.add_parser("sites", help="Manage tracked sites.")
    sites_sub = sites_parser.add_subparsers(dest="sites_command")

    list_parser = sites_sub.add_parser("list", help="List tracked sites, newest first.")
    _add_output_args(list_parser)
    list_parser.set_defaults(func=sites_list_command)

    stats_parser = sites_sub.add_parser("stats", help="Show dashboard totals.")
    _add_output_args(stats_parser)
    stats_parser.set_defaults(func=sites_stats_command)

    add_parser = sites_sub.add_parser("add", help="Start tracking a site.")
    add_parser.add_argument("domain")
    add_parser.add_argument("--name", help="Business name")
    add_parser.add_argument("--address", help='Address as "street, city, ST 12345"')
    add_parser.add_argument("--phone")
    add_parser.add_argument("--industry", choices=sorted(INDUSTRY_PRESETS), default="other")
    add_parser.set_defaults(func=sites_add_command)

    update_parser = sites_sub.add_parser("update", help="Update a tracked site.")
    update_parser.add_argument("site_id", type=int)
    update_parser.add_argument("--industry", choices=sorted(INDUSTRY_PRESETS))
    update_parser.add_argument("--stage", choices=PIPELINE_STAGES)
    update_parser.add_argument("--notes")
    update_parser.add_argument("--follow-up", help="Follow-up date (YYYY-MM-DD)")
    update_parser.set_defaults(func=sites_update_command)

    delete_parser = sites_sub.add_parser("delete", help="Stop tracking a site.")
    delete_parser.add_argument("site_id", type=int)
    delete_parser.set_defaults(func=sites_delete_command)

    site_audit_parser = sites_sub.add_parser("audit", help="Audit a tracked site and save the result.")
    site_audit_parser.add_argument("site_id", type=int)
    _add_output_args(site_audit_parser)
    site_audit_parser.set_defaults(func=sites_audit_command)

    # report
    report_parser = subparsers.add_parser("report", help="Write the HTML report for a tracked site.")
    report_parser.add_argument("site_id", type=int)
    report_parser.add_argument("--output-dir", default=".", help="Directory for the report (default: .)")
    report_parser.set_defaults(func=report_command)

    # sprint
    sprint_parser = subparsers.add_parser("sprint", help="Submit a remediation sprint request.")
    sprint_parser.add_argument("site_id", type=int)
    sprint_parser.add_argument("--email", required=True, help="Client email")
    sprint_parser.add_argument("--phone", help="Client phone")
    sprint_parser.add_argument(
        "--no-mail-client",
        action="store_true",
        help="Log the notification instead of opening the mail client",
    )
    sprint_parser.set_defaults(func=sprint_command)

    return parser


def main(argv: Optional[list] = None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Configure logging based on flags
    setup_logging(
        level=args.log_level,
        log_file=getattr(args, 'log_file', None),
    )

    if not hasattr(args, "func"):
        parser.print_help()
        return

    try:
        args.func(args)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
