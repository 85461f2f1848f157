"""
Example: Validating and resolving a content tree with sitecorpus

This example builds the content model of a static site, prints the
author and series indices, and lists every integrity problem found.

Usage:
    export SITECORPUS_CONTENT_DIR="path/to/site/content"
    python examples/check_corpus.py
"""

import os
from datetime import datetime, timezone

from sitecorpus import BuildConfig, build


def main():
    # -------------------------------------------------------------------------
    # 1. Configure and build
    # -------------------------------------------------------------------------

    config = BuildConfig.from_env()
    print(f"Reading {os.path.abspath(config.content_dir)}\n")

    report = build(now=datetime.now(timezone.utc), config=config)
    site = report.site

    # -------------------------------------------------------------------------
    # 2. Authors and their articles (newest first)
    # -------------------------------------------------------------------------

    print("=== Authors ===\n")
    for author in site.authors:
        docs = site.by_author[author.id]
        print(f"{author.name} ({len(docs)} articles)")
        for platform, url in author.social:
            print(f"  {platform}: {url}")
        for doc in docs:
            print(f"  - {doc.date}  {doc.title}")

    # -------------------------------------------------------------------------
    # 3. Series / tutorials in reading order
    # -------------------------------------------------------------------------

    print("\n=== Series ===\n")
    for coll in site.collections:
        print(coll.title)
        for i, doc in enumerate(site.by_series[coll.id], start=1):
            print(f"  {i}. {doc.title}")

    # -------------------------------------------------------------------------
    # 4. Problems
    # -------------------------------------------------------------------------

    print(f"\nExcluded: {', '.join(f'{k} ({v})' for k, v in report.reasons.items()) or 'none'}")
    for warning in report.warnings:
        print(f"review: {warning}")
    for error in report.errors:
        print(f"error:  {error}")

    print("\nBuild OK" if report.ok else f"\nBuild failed with {len(report.errors)} errors")


if __name__ == "__main__":
    main()
