"""
Import a WordPress site through its REST API.

Usage:
    python -m scripts.import_wordpress --url https://blog.example.com \\
        --username admin --password "abcd efgh ijkl mnop" --status publish,future

Exits with status 1 when the connection test fails or any item failed.
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from core.database import engine, async_session_maker
from core.logging import setup_logging
from core.exceptions import ImporterException, ConnectionTestError
from ingestion.extractors.wordpress_client import WordPressClient, WordPressConfig, normalize_wordpress_url
from ingestion.runner import WordPressImportRunner, DEFAULT_IMPORT_STATUSES
from schemas.api import ImportReport

logger = logging.getLogger(__name__)


def parse_statuses(value: str) -> List[str]:
    """Comma-separated post statuses for argparse"""
    statuses = [s.strip() for s in value.split(",") if s.strip()]
    if not statuses:
        raise argparse.ArgumentTypeError("status must list at least one post status")
    return statuses


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Import users, categories and posts from a WordPress site"
    )
    parser.add_argument("--url", "-u", required=True, help="WordPress site or REST API URL")
    parser.add_argument("--username", "-U", help="WordPress username")
    parser.add_argument("--password", "-P", help="WordPress application password")
    parser.add_argument(
        "--status",
        type=parse_statuses,
        default=list(DEFAULT_IMPORT_STATUSES),
        help="Comma-separated post statuses (default: publish,future; needs credentials)"
    )
    parser.add_argument(
        "--skip-existing",
        action="store_true",
        help="Leave records that already exist untouched"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser


def log_outcomes(report: ImportReport):
    for outcome in report.outcomes:
        if outcome.success:
            logger.info(f"{outcome.type} {outcome.external_id} {outcome.action}: {outcome.title} ({outcome.slug})")
        else:
            logger.error(
                f"{outcome.type} {outcome.external_id} failed: {outcome.title} - "
                f"{'; '.join(outcome.errors or [])}"
            )


def print_summary(report: ImportReport):
    summary = report.summary
    print()
    print(f"{'Phase':<12}{'Total':>8}{'OK':>8}{'Failed':>8}{'Created':>9}{'Updated':>9}")
    for phase, counts in (
        ("users", summary.users),
        ("categories", summary.categories),
        ("articles", summary.articles),
    ):
        print(
            f"{phase:<12}{counts.total:>8}{counts.successful:>8}{counts.failed:>8}"
            f"{counts.created:>9}{counts.updated:>9}"
        )
    print()


async def run_import(args: argparse.Namespace, session_maker=async_session_maker, transport=None) -> int:
    """Run one import; returns the process exit code"""
    config = WordPressConfig(
        base_url=normalize_wordpress_url(args.url),
        username=args.username,
        password=args.password
    )
    logger.info(f"Importing from {config.base_url}")
    if args.status and not config.has_credentials:
        logger.warning("No credentials: the status filter is ignored and only published posts are visible")

    async with WordPressClient(config, transport=transport) as client:
        async with session_maker() as session:
            runner = WordPressImportRunner(
                db_session=session,
                client=client,
                skip_existing=args.skip_existing,
                import_statuses=args.status
            )
            try:
                report = await runner.run()
            except ConnectionTestError as e:
                logger.error(str(e))
                return 1
            except ImporterException as e:
                logger.error(f"Import aborted: {e.describe()}")
                return 1
            except Exception as e:
                logger.error(f"Import aborted: {type(e).__name__}: {e}")
                return 1

    log_outcomes(report)
    print_summary(report)

    if report.failed_count:
        logger.error(f"{report.failed_count} item(s) failed")
        return 1
    logger.info("Import completed successfully")
    return 0


async def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging("DEBUG" if args.verbose else None)
    try:
        return await run_import(args)
    finally:
        await engine.dispose()


def cli():
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
