"""MongoDB connection lifecycle management.

Uses a module-level singleton client. Call connect_db() before using
get_database(), and disconnect_db() once the run is over.
"""

from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import ConfigurationError as PyMongoConfigurationError

from seeder.exceptions import ConfigurationError

client: Optional[AsyncIOMotorClient] = None
database: Optional[AsyncIOMotorDatabase] = None

SERVER_SELECTION_TIMEOUT_MS = 10_000


def get_database() -> AsyncIOMotorDatabase:
    if database is None:
        raise RuntimeError("Database client is not initialized. Call connect_db() first.")
    return database


async def connect_db(uri: str, database_name: Optional[str] = None) -> AsyncIOMotorDatabase:
    """Connect, ping the server and select the database.

    Motor connects lazily, so the ping is what surfaces a bad URI or an
    unreachable server. The database is ``database_name`` if given,
    otherwise the one named in the URI path.
    """
    global client, database
    client = AsyncIOMotorClient(uri, serverSelectionTimeoutMS=SERVER_SELECTION_TIMEOUT_MS)
    await client.admin.command("ping")

    if database_name:
        database = client[database_name]
    else:
        try:
            database = client.get_default_database()
        except PyMongoConfigurationError as exc:
            await disconnect_db()
            raise ConfigurationError(
                "No database name given: add one to the MongoDB URI, "
                "set 'database_name' in the configuration file or DATABASE_NAME"
            ) from exc
    return database


async def disconnect_db() -> None:
    global client, database
    if client:
        client.close()
        client = None
    database = None
