#!/usr/bin/env python3
"""
Command-line front end for the content archive.

Usage:
    python -m content_archive.scripts.archive ingest https://example.com/blog/post
    python -m content_archive.scripts.archive ingest "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
    python -m content_archive.scripts.archive list
    python -m content_archive.scripts.archive show 1700000000000_examplecom_post.md
    python -m content_archive.scripts.archive delete 1700000000000_examplecom_post.md
    python -m content_archive.scripts.archive prune
"""
import argparse
import asyncio
import logging
import sys
from datetime import datetime
from typing import List, Optional

from dotenv import load_dotenv

from ..config import settings
from ..exceptions import ArchiveError
from ..orchestration.ingestion_graph import IngestionGraph
from ..persistence.retention_store import RetentionStore
from ..utils.logging import AuditLogger

logger = logging.getLogger(__name__)


def _format_timestamp(ms: int) -> str:
    if not ms:
        return "(legacy)"
    return datetime.fromtimestamp(ms / 1000).strftime("%Y-%m-%d %H:%M")


def cmd_ingest(args: argparse.Namespace, store: RetentionStore, audit: AuditLogger) -> int:
    graph = IngestionGraph(store=store, audit=audit)
    doc = asyncio.run(graph.ingest(args.url))
    print(f"{store.key_for(doc)}\t{doc.title}")
    return 0


def cmd_list(args: argparse.Namespace, store: RetentionStore, audit: AuditLogger) -> int:
    items, unreadable = store.summaries()
    for item in items:
        print(f"{item.key}\t{_format_timestamp(item.created_at)}\t{item.kind.value}\t{item.title}")
    if unreadable:
        print(f"⚠️ {len(unreadable)} unreadable: {', '.join(unreadable)}", file=sys.stderr)
    return 0


def cmd_show(args: argparse.Namespace, store: RetentionStore, audit: AuditLogger) -> int:
    doc = store.get(args.key)
    print(f"# {doc.title}")
    print(f"type: {doc.kind.value}  created: {_format_timestamp(doc.created_at)}")
    if doc.source_url:
        print(f"url: {doc.source_url}")
    print()
    print(doc.body)
    return 0


def cmd_delete(args: argparse.Namespace, store: RetentionStore, audit: AuditLogger) -> int:
    store.delete(args.key)
    print(f"Deleted {args.key}")
    return 0


def cmd_prune(args: argparse.Namespace, store: RetentionStore, audit: AuditLogger) -> int:
    evicted = store.prune()
    print(f"Evicted {len(evicted)} item(s)")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Archive web pages and video transcripts as Markdown")
    parser.add_argument("--data-dir", default=None, help=f"Archive directory (default: {settings.data_dir})")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    sub = parser.add_subparsers(dest="command", required=True)

    p_ingest = sub.add_parser("ingest", help="Fetch and archive a URL")
    p_ingest.add_argument("url")
    p_ingest.set_defaults(handler=cmd_ingest)

    p_list = sub.add_parser("list", help="List archived items, newest first")
    p_list.set_defaults(handler=cmd_list)

    p_show = sub.add_parser("show", help="Print an archived item")
    p_show.add_argument("key")
    p_show.set_defaults(handler=cmd_show)

    p_delete = sub.add_parser("delete", help="Delete an archived item")
    p_delete.add_argument("key")
    p_delete.set_defaults(handler=cmd_delete)

    p_prune = sub.add_parser("prune", help=f"Evict items beyond the newest {settings.max_history_items}")
    p_prune.set_defaults(handler=cmd_prune)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, settings.log_level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    audit = AuditLogger("content_archive", log_dir=str(settings.log_dir))
    store = RetentionStore(data_dir=args.data_dir, audit=audit)

    try:
        return args.handler(args, store, audit)
    except ArchiveError as e:
        logger.error(f"{type(e).__name__}: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
