import asyncio
import logging

from seeder.database import get_database
from seeder.logger import step
from seeder.seeds.models import ResolvedCollection

logger = logging.getLogger(__name__)


async def count_existing(collections: list[ResolvedCollection]) -> dict[str, int]:
    """Count the documents currently stored in each collection, concurrently."""
    db = get_database()
    counts = await asyncio.gather(
        *(db[collection.name].count_documents({}) for collection in collections)
    )
    return {collection.name: count for collection, count in zip(collections, counts)}


def count_pending(collections: list[ResolvedCollection]) -> dict[str, int]:
    return {collection.name: len(collection.documents) for collection in collections}


async def drop_documents(collections: list[ResolvedCollection]) -> dict[str, int]:
    """Delete every document in each collection, concurrently across collections.

    Only documents are deleted: the collections themselves and their
    indexes stay in place.
    """
    db = get_database()
    results = await asyncio.gather(
        *(db[collection.name].delete_many({}) for collection in collections)
    )
    deleted = {collection.name: result.deleted_count for collection, result in zip(collections, results)}
    for name, count in deleted.items():
        logger.debug("Deleted %d documents from '%s'", count, name)
    return deleted


async def insert_documents(collections: list[ResolvedCollection]) -> dict[str, int]:
    """Insert each collection's documents, concurrently across collections."""
    db = get_database()
    pending = [collection for collection in collections if collection.documents]
    for collection in collections:
        if not collection.documents:
            logger.debug("No documents to insert into '%s'", collection.name)

    # insert_many receives copies: the driver adds _id to the dicts it's given
    results = await asyncio.gather(
        *(
            db[collection.name].insert_many([dict(document) for document in collection.documents])
            for collection in pending
        )
    )
    inserted = {collection.name: 0 for collection in collections}
    for collection, result in zip(pending, results):
        inserted[collection.name] = len(result.inserted_ids)
        logger.debug(
            "Inserted %d %s documents into '%s'",
            inserted[collection.name],
            collection.model,
            collection.name,
        )
    return inserted


def format_counts(counts: dict[str, int]) -> str:
    return "\n".join(f"  {name} - {count}" for name, count in counts.items())


async def dry_run(collections: list[ResolvedCollection]) -> tuple[dict[str, int], dict[str, int]]:
    """Report how many documents a run would delete and insert, without writing."""
    with step("Counting documents", "Counted documents", "Failed to count documents"):
        existing = await count_existing(collections)
        pending = count_pending(collections)

    logger.info(
        "Documents that would be deleted\n%s\n\nDocuments that would be inserted\n%s",
        format_counts(existing),
        format_counts(pending),
    )
    return existing, pending


async def run(collections: list[ResolvedCollection]) -> dict[str, int]:
    """Replace the contents of every collection with its configured documents.

    All deletes finish before any insert starts. There is no rollback: a
    failed insert leaves the collections emptied.
    """
    with step("Dropping collections", "Dropped collections", "Failed to drop collections"):
        await drop_documents(collections)

    with step("Inserting documents", "Inserted documents", "Failed to insert documents"):
        inserted = await insert_documents(collections)

    logger.info("Inserted documents\n%s", format_counts(inserted))
    return inserted
