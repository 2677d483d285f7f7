"""Drop all data for a specific user: the account, its kicks and its comments."""
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from motor.motor_asyncio import AsyncIOMotorClient

from app.logging_config import get_logger, setup_logging


logger = get_logger("drop_user_data")


async def drop_user_data(mongodb_url: str, username: str, db_name: str = "kickit"):
    """Delete an account, the kicks it owns and the comments it wrote elsewhere."""
    client = AsyncIOMotorClient(mongodb_url)
    db = client[db_name]

    try:
        user = await db["users"].find_one({"username": username})
        if not user:
            logger.error("No user named %s", username)
            return

        user_id = str(user["_id"])

        result = await db["kicks"].delete_many({"owner_id": user_id})
        logger.info("Deleted %d kicks", result.deleted_count)

        result = await db["kicks"].update_many(
            {"comments.author_id": user_id},
            {"$pull": {"comments": {"author_id": user_id}}},
        )
        logger.info("Removed comments from %d kicks", result.modified_count)

        await db["users"].delete_one({"_id": user["_id"]})
        logger.info("Deleted user %s", username)
    finally:
        client.close()


if __name__ == "__main__":
    if len(sys.argv) not in (3, 4):
        print("Usage: python drop_user_data.py <mongodb_url> <username> [db_name]")
        sys.exit(1)

    setup_logging()
    asyncio.run(drop_user_data(*sys.argv[1:]))
