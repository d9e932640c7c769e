"""
Content import pipeline for WordPress sites and CSV exports.

This package contains every component between a remote WordPress site (or an
uploaded CSV file) and the CMS tables:

Modules:
    base: ImportRun audit tracking shared by both importers
    runner: WordPress REST import orchestrator (users, categories, posts)
    csv_importer: CSV import driver with per-row error reporting
    publishing: Publishes scheduled articles once their time has passed
    scheduler: APScheduler integration for the periodic publish job

Subpackages:
    extractors: WordPress REST API client and CSV parser
    transformers: Text helpers, record mapping and validation
    loaders: Natural-key create-or-update persistence

Architecture:
    A WordPress import runs strictly in order:

    1. Connection test - fail fast before anything is written
    2. Users -> editors, building an external id -> editor id map
    3. Categories, building an external id -> category id map
    4. Posts -> articles, resolving author and category through the maps

    Every record is validated, mapped and upserted on its own; a failure
    becomes a failed outcome in the report and the loop continues.

Usage:
    from ingestion.extractors.wordpress_client import WordPressClient, WordPressConfig
    from ingestion.runner import WordPressImportRunner
    from ingestion.csv_importer import CSVImporter

Example:
    async with WordPressClient(WordPressConfig(base_url=api_root)) as client:
        report = await WordPressImportRunner(session, client).run()

    print(f"Created {report.summary.articles.created} articles")

Error Handling:
    Components raise the exceptions from core.exceptions. Item-level errors
    are caught by the runners; connection and fetch errors abort the run.
"""

__all__ = [
    "ImportRunTracker",
    "WordPressImportRunner",
    "CSVImporter",
    "WordPressClient",
    "ContentLoader",
    "ArticlePublishScheduler",
    "publish_due_articles",
]
