"""MongoDB database connection using Motor (async driver)."""
from contextlib import contextmanager
from typing import Iterator

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import DuplicateKeyError, PyMongoError

from app.errors import ConflictError, ConflictKind, InternalError
from app.logging_config import get_logger


logger = get_logger(__name__)


class Database:
    """MongoDB database connection manager."""

    client: AsyncIOMotorClient | None = None
    db: AsyncIOMotorDatabase | None = None

    async def connect(self, mongodb_url: str, db_name: str) -> None:
        """Connect to MongoDB and make sure the indexes exist."""
        self.client = AsyncIOMotorClient(mongodb_url, tz_aware=True)
        self.db = self.client[db_name]
        await ensure_indexes(self.db)
        logger.info("Connected to MongoDB: %s", db_name)

    async def disconnect(self) -> None:
        """Disconnect from MongoDB."""
        if self.client is not None:
            self.client.close()
            self.client = None
            self.db = None
            logger.info("Disconnected from MongoDB")

    def get_collection(self, name: str):
        """Get a MongoDB collection."""
        if self.db is None:
            raise RuntimeError("Database not connected")
        return self.db[name]


# Global database instance
database = Database()


async def get_database() -> AsyncIOMotorDatabase:
    """Dependency to get database instance."""
    if database.db is None:
        raise RuntimeError("Database not connected")
    return database.db


async def ensure_indexes(db) -> None:
    """
    Create the indexes the service relies on.

    The unique indexes on ``users`` are what actually enforce handle and
    email uniqueness; the service-level lookups only give a nicer error
    in the common case.
    """
    await db["users"].create_index([("username", ASCENDING)], unique=True)
    await db["users"].create_index([("email", ASCENDING)], unique=True)
    await db["kicks"].create_index([("owner_id", ASCENDING), ("created_at", DESCENDING)])


def conflict_kind(error: DuplicateKeyError) -> ConflictKind:
    """Work out which unique index a duplicate key error came from."""
    details = error.details or {}
    key_pattern = details.get("keyPattern") or details.get("keyValue") or {}
    if "email" in key_pattern or (not key_pattern and "email" in str(error)):
        return ConflictKind.EMAIL_TAKEN
    return ConflictKind.HANDLE_TAKEN


@contextmanager
def store_errors(operation: str) -> Iterator[None]:
    """
    Translate driver failures raised inside the block into service errors.

    Duplicate keys become ``ConflictError``; anything else the driver
    raises is logged with its traceback and surfaces as ``InternalError``.
    """
    try:
        yield
    except DuplicateKeyError as e:
        logger.info("Duplicate key during %s: %s", operation, e.details)
        raise ConflictError(conflict_kind(e)) from e
    except PyMongoError as e:
        logger.exception("Database failure during %s", operation)
        raise InternalError() from e
