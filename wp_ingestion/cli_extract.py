from __future__ import annotations

import argparse
import time
from pathlib import Path

from pydantic import ValidationError

from common.config import load_yaml_config
from common.logger import get_logger
from wp_ingestion.errors import WordPressError
from wp_ingestion.ingest_pipeline import extract_all, write_documents

log = get_logger(__name__)

TROUBLESHOOTING = (
    "Verify your WordPress SiteID or SiteDomain is correct",
    "Check that your auth token is valid and has proper permissions",
    "Ensure the site is accessible",
)


def _report_fatal(error: Exception) -> None:
    log.error("Error: %s", error)
    log.error("Troubleshooting tips:")
    for tip in TROUBLESHOOTING:
        log.error("   - %s", tip)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Extract WordPress posts, pages and tribe events as chunked documents."
    )
    parser.add_argument(
        "--config", type=str, default="config/config.yaml", help="YAML configuration file"
    )
    parser.add_argument(
        "--out", type=str, default="", help="Output JSON file (default: stdout)"
    )
    parser.add_argument("--site-id", type=int, default=None)
    parser.add_argument("--site-domain", type=str, default=None)
    parser.add_argument(
        "--posts", dest="include_posts", action=argparse.BooleanOptionalAction, default=None
    )
    parser.add_argument(
        "--pages", dest="include_pages", action=argparse.BooleanOptionalAction, default=None
    )
    parser.add_argument(
        "--events", dest="include_events", action=argparse.BooleanOptionalAction, default=None
    )
    parser.add_argument(
        "--modified-after-days",
        type=int,
        default=None,
        help="Only content modified (events: starting) within the last N days",
    )
    parser.add_argument(
        "--filter-path", type=str, default=None, help="Keep posts/pages whose URL contains this"
    )
    parser.add_argument(
        "--get-protected",
        action="store_true",
        default=None,
        help="Request protected content (context=edit)",
    )
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    overrides = {
        "site_id": args.site_id,
        "site_domain": args.site_domain,
        "include_posts": args.include_posts,
        "include_pages": args.include_pages,
        "include_events": args.include_events,
        "modified_after_days": args.modified_after_days,
        "filter_path": args.filter_path,
        "get_protected": args.get_protected,
    }

    log.info("Validating configuration...")
    try:
        config = load_yaml_config(Path(args.config), overrides=overrides)
    except ValidationError as e:
        log.error("%s", e)
        raise SystemExit(2)

    kinds = ", ".join(config.extraction.content_kinds()) or "content"
    log.info("Starting WordPress %s extraction...", kinds)

    started = time.monotonic()
    try:
        documents = extract_all(config)
    except WordPressError as e:
        _report_fatal(e)
        raise SystemExit(1)
    except Exception as e:
        log.debug("Unexpected failure", exc_info=True)
        _report_fatal(e)
        raise SystemExit(1)
    log.info("Completed processing in %.2fs", time.monotonic() - started)

    write_documents(documents, Path(args.out) if args.out else None)


if __name__ == "__main__":
    main()
