"""
Command-line entry point.

Usage::

    # Validate a content tree
    sitecorpus check content/

    # Same, publishing future-dated posts, as JSON records for a renderer
    sitecorpus check content/ --include-future --json

    # Pin the clock
    sitecorpus check content/ --now 2024-01-01T00:00:00Z

    # Corpus published over HTTP
    sitecorpus check https://example.org/content --token "$TOKEN"
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime, timezone
from typing import List, Optional

import requests

from .build import build
from .client import Credentials, RemoteSource
from .config import BuildConfig
from .frontmatter import parse_date
from .exceptions import InvalidDateError, SourceError
from .entities.documents import as_utc


def _parse_now(value: str) -> datetime:
    try:
        return as_utc(parse_date(value))
    except InvalidDateError as exc:
        raise argparse.ArgumentTypeError(f"invalid timestamp {value!r}") from exc


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point.

    Returns:
        Exit code (0 = success, 1 = build reported errors, 2 = usage error).
    """
    parser = argparse.ArgumentParser(
        prog="sitecorpus",
        description="Validate and resolve a front-matter content corpus.",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable verbose logging.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    check = sub.add_parser("check", help="Build the content model and report problems.")
    check.add_argument(
        "source", nargs="?", default=None,
        help="Content directory or http(s) URL (default: $SITECORPUS_CONTENT_DIR or content/).",
    )
    check.add_argument(
        "--include-future", action="store_true", default=None,
        help="Publish documents dated after --now.",
    )
    check.add_argument(
        "--now", type=_parse_now, default=None,
        help="Current time as ISO-8601 (default: the system clock).",
    )
    check.add_argument("--token", default=None, help="Bearer token for a remote source.")
    check.add_argument(
        "--json", action="store_true",
        help="Print the resolved records as JSON.",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    config = BuildConfig.from_env(include_future=args.include_future)
    now = args.now or datetime.now(timezone.utc)

    source = args.source
    if source and source.startswith(("http://", "https://")):
        creds = Credentials(token=args.token) if args.token else None
        source = RemoteSource(source, creds)

    try:
        report = build(source, now=now, config=config)
    except (FileNotFoundError, SourceError, requests.RequestException, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if args.json:
        json.dump(report.to_records(), sys.stdout, indent=2, ensure_ascii=False)
        sys.stdout.write("\n")
    else:
        site = report.site
        print(
            f"{len(site.documents)} published, {len(report.excluded)} excluded, "
            f"{len(site.authors)} authors, {len(site.collections)} collections"
        )
        for warning in report.warnings:
            print(f"warning: {warning}", file=sys.stderr)
        for error in report.errors:
            print(f"error: {error}", file=sys.stderr)

    return 0 if report.ok else 1


if __name__ == "__main__":
    sys.exit(main())
