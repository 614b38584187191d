"""CLI entry point.

This script mirrors the remote region tree into a local directory, then
harvests the per-unit results and contest definitions referenced by the
deepest tier.

Examples:
    python run_crawl.py --out output
    python run_crawl.py --out output --workers 8 --delay 0.25
    python run_crawl.py --out output --harvest-only --leaf-label Barangay

Re-running is cheap: files already on disk are never downloaded again.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import httpx

from tree_crawler.config import Settings, load_settings
from tree_crawler.errors import CrawlError, SetupError
from tree_crawler.fetcher import Fetcher
from tree_crawler.harvest import LeafExtractor
from tree_crawler.log import setup_logging
from tree_crawler.pool import WorkerPool
from tree_crawler.remote import ROOT_PATH
from tree_crawler.utils import ensure_dir
from tree_crawler.walker import TreeWalker

logger = logging.getLogger("tree_crawler")


def positive_int(value: str) -> int:
    n = int(value)
    if n < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {n}")
    return n


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Mirror a remote tree of JSON documents to disk.")
    p.add_argument("--out", type=str, default=None, help="Output directory (default: CRAWL_OUTPUT_DIR or 'output').")
    p.add_argument("--base-url", type=str, default=None, help="Origin of the remote service.")
    p.add_argument("--workers", type=positive_int, default=None, help="Number of concurrent downloads.")
    p.add_argument("--delay", type=float, default=None, help="Seconds to sleep after each successful download.")
    p.add_argument("--leaf-label", type=str, default=None, help="Tier whose documents are harvested.")
    phase = p.add_mutually_exclusive_group()
    phase.add_argument("--skip-harvest", action="store_true", help="Only mirror the structural tree.")
    phase.add_argument("--harvest-only", action="store_true", help="Only harvest an already mirrored tree.")
    p.add_argument("--log-file", type=str, default=None, help="Also append log lines to this file.")
    p.add_argument("-v", "--verbose", action="store_true", help="Log skipped downloads and other details.")
    return p.parse_args(argv)


def crawl_tree(settings: Settings, fetcher: Fetcher) -> int:
    """Fetch the root document and expand the structural tree below it."""
    try:
        ensure_dir(settings.output_dir)
        fetcher.ensure(settings.root_path, ROOT_PATH)
    except (CrawlError, httpx.HTTPError, OSError) as exc:
        raise SetupError(f"Cannot fetch root document: {exc}") from exc

    with WorkerPool(fetcher, size=settings.workers, queue_size=settings.effective_queue_size, name="tree") as pool:
        return TreeWalker(pool, settings.output_dir).expand(settings.root_path)


def harvest_leaves(settings: Settings, fetcher: Fetcher) -> None:
    """Queue result and contest downloads for every leaf-tier document."""
    with WorkerPool(fetcher, size=settings.workers, queue_size=settings.effective_queue_size, name="harvest") as pool:
        LeafExtractor(pool, settings.output_dir, batch_size=settings.listing_batch).harvest(settings.leaf_dir)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(verbose=args.verbose, log_file=Path(args.log_file) if args.log_file else None)

    try:
        settings = load_settings(
            output_dir=args.out,
            base_url=args.base_url,
            workers=args.workers,
            request_delay=args.delay,
            leaf_label=args.leaf_label,
        )
        with Fetcher.from_settings(settings) as fetcher:
            if not args.harvest_only:
                nodes = crawl_tree(settings, fetcher)
                logger.info("Expanded %d nodes under %s", nodes, settings.output_dir)
            if not args.skip_harvest:
                harvest_leaves(settings, fetcher)
    except SetupError as exc:
        logger.critical("%s", exc)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
