"""
Script to run one contact ingestion and optionally export the result
"""

import argparse
import asyncio
import sys
import os
import logging

# Add current directory to path to allow imports from core, ingestion, etc.
sys.path.append(os.getcwd())

from core.config import settings
from core.logging import setup_logging
from ingestion.exporters.csv_exporter import ContactExporter, DirectoryShareService
from ingestion.runner import ContactIngestionRunner
from ingestion.transformers.contact_filter import FILTER_OPTIONS, filter_contacts

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Fetch and normalize the contacts CSV feed")
    parser.add_argument("--force", action="store_true", help="Ignore cached results")
    parser.add_argument("--search", default=None, help="Only keep contacts matching this text")
    parser.add_argument(
        "--export",
        choices=FILTER_OPTIONS,
        default=None,
        help="Export the (filtered) contacts to CSV using this category filter"
    )
    parser.add_argument("--outbox", default=settings.EXPORT_DIR, help="Directory exports are shared to")
    return parser


async def run(args: argparse.Namespace) -> int:
    runner = ContactIngestionRunner()
    contacts = await runner.get_contacts(force_refresh=args.force)

    logger.info(
        f"Loaded {len(contacts)} contacts "
        f"(stage={runner.last_stage.value if runner.last_stage else 'none'}, "
        f"status={runner.connection_status.value})"
    )

    if args.export is None:
        return 0

    filtered = filter_contacts(contacts, search=args.search, filter_by=args.export)
    exporter = ContactExporter(share_service=DirectoryShareService(args.outbox))
    result = exporter.export_filtered_contacts(filtered, filter_by=args.export)

    if result.success:
        logger.info(f"{result.message} ({result.path})")
        return 0

    logger.error(result.message)
    return 1


def main(argv=None) -> int:
    setup_logging()
    args = build_parser().parse_args(argv)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
