#!/usr/bin/env python3
"""Seed category hierarchy script.

Loads a category taxonomy (the built-in sample or a file) and creates
any categories that do not exist yet. Running it twice is safe.

Usage:
    python scripts/seed_categories.py
    python scripts/seed_categories.py --file taxonomy.txt
    python scripts/seed_categories.py --create-tables
"""

import argparse
import asyncio

import structlog

from product_catalog.catalog.service import CategoryService, SeedResult
from product_catalog.catalog.taxonomy import TaxonomyParser
from product_catalog.infrastructure.database import async_session_factory, create_tables
from product_catalog.infrastructure.logging import configure_logging

logger = structlog.get_logger(__name__)


async def seed(taxonomy_file: str | None) -> SeedResult:
    """Seed categories from a taxonomy.

    Args:
        taxonomy_file: Taxonomy file path, or None for the built-in sample.

    Returns:
        Seeding result.
    """
    parser = TaxonomyParser()
    if taxonomy_file:
        entries = parser.parse_file(taxonomy_file)
    else:
        entries = parser.parse_embedded()

    async with async_session_factory() as session:
        service = CategoryService(session)
        result = await service.seed_from_taxonomy(entries)
        if result.success:
            await session.commit()
        else:
            await session.rollback()
        return result


async def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Seed the category hierarchy",
    )
    parser.add_argument(
        "--file",
        default=None,
        help="Taxonomy file, one 'Parent > Child' path per line (default: built-in sample)",
    )
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create database tables before seeding",
    )

    args = parser.parse_args()
    configure_logging()

    if args.create_tables:
        await create_tables()
        logger.info("Tables ready")

    result = await seed(args.file)
    if not result.success:
        logger.error("Seeding failed", error=result.error, error_code=result.error_code)
        raise SystemExit(1)

    print("=" * 60)
    print("Category seeding complete")
    print(f"  Created:  {result.created}")
    print(f"  Existing: {result.existing}")
    print(f"  Total:    {result.total}")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
