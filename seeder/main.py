"""Seed MongoDB collections from a configuration file.

Replaces all existing documents in the configured collections. Run with
--dry-run first to see how many documents would be deleted and inserted.

Usage:
    mongo-seed                       # prompt, then seed
    mongo-seed --dry-run             # only count documents
    mongo-seed --config seeds.yaml   # use another configuration file
    python -m seeder.main --yes      # skip the confirmation prompt
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from pymongo.errors import PyMongoError

from seeder.config import resolve_mongo_uri, settings
from seeder.database import connect_db, disconnect_db
from seeder.exceptions import SeederError
from seeder.logger import configure_logging, parse_log_level, step
from seeder.seeds import service
from seeder.seeds.models import ResolvedCollection, SeedConfig
from seeder.seeds.resolver import resolve_collections
from seeder.sources.loader import load_seed_config

logger = logging.getLogger("seeder.main")

PROMPT = (
    "Running this script will delete all existing documents in the collections "
    "specified in the configuration file. Are you sure you want to continue? (y/N) "
)


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Replace the documents of MongoDB collections")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only count the documents that would be deleted and inserted",
    )
    parser.add_argument(
        "--config",
        default=None,
        help=f"Path to the seed configuration file (default: $SEED_CONFIG or {settings.SEED_CONFIG})",
    )
    parser.add_argument(
        "-y",
        "--yes",
        action="store_true",
        help="Don't ask for confirmation before deleting",
    )
    return parser.parse_args(argv)


def confirm() -> bool:
    try:
        answer = input(PROMPT)
    except (EOFError, KeyboardInterrupt):
        print()
        return False
    return answer.strip().lower() == "y"


def log_debug_data(config: SeedConfig, collections: list[ResolvedCollection]) -> None:
    if not logger.isEnabledFor(logging.DEBUG):
        return
    logger.debug("[log_debug_data] Log Level: %s", config.log_level)
    logger.debug("[log_debug_data] Config: %s", json.dumps(config.printable()))
    logger.debug(
        "[log_debug_data] Standard Collections: %s",
        json.dumps(
            [
                {"name": c.name, "model": c.model, "documents": len(c.documents)}
                for c in collections
            ]
        ),
    )


async def seed(config: SeedConfig, collections: list[ResolvedCollection], dry_run: bool) -> None:
    uri = resolve_mongo_uri(config.mongo_uri)
    database_name = config.database_name or settings.DATABASE_NAME

    try:
        with step("Connecting to MongoDB", "Connected to MongoDB", "Failed to connect to MongoDB"):
            await connect_db(uri, database_name)
        if dry_run:
            with step("Performing a dry run", "Dry run complete", "Failed to perform a dry run"):
                await service.dry_run(collections)
        else:
            with step("Performing a run", "Run complete", "Failed to perform a run"):
                await service.run(collections)
    finally:
        await disconnect_db()


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(logging.INFO)

    config_path = Path(args.config or settings.SEED_CONFIG)
    try:
        config = load_seed_config(config_path)
        configure_logging(parse_log_level(config.log_level))

        # Fail on URI problems before asking the user anything
        resolve_mongo_uri(config.mongo_uri)
        with step("Evaluating collections", "Evaluated collections", "Failed to evaluate collections"):
            collections = resolve_collections(config, base_dir=config_path.resolve().parent)
        log_debug_data(config, collections)
    except SeederError as exc:
        logger.error(str(exc))
        return 1

    if not (args.dry_run or args.yes or config.no_prompt) and not confirm():
        logger.info("Exiting")
        return 0

    try:
        asyncio.run(seed(config, collections, args.dry_run))
    except (SeederError, PyMongoError) as exc:
        logger.error(str(exc))
        return 1
    return 0


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
