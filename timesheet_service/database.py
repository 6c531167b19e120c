"""MongoDB database connection using Motor (async driver)."""
import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING

from timesheet_service.config import settings

logger = logging.getLogger(__name__)


class Database:
    """MongoDB database connection manager."""

    client: AsyncIOMotorClient | None = None
    db: AsyncIOMotorDatabase | None = None

    async def connect(self) -> None:
        """Connect to MongoDB and make sure indexes exist."""
        self.client = AsyncIOMotorClient(settings.mongodb_url)
        self.db = self.client[settings.mongodb_db_name]
        await self.ensure_indexes()
        logger.info("Connected to MongoDB: %s", settings.mongodb_db_name)

    async def ensure_indexes(self) -> None:
        """Create the unique keys the services rely on."""
        await self.db["users"].create_index("email", unique=True)
        await self.db["timesheets"].create_index(
            [("user_id", ASCENDING), ("week_start", ASCENDING)],
            unique=True,
        )
        await self.db["invoice_settings"].create_index("user_id", unique=True)
        await self.db["invoice_templates"].create_index("user_id")

    async def disconnect(self) -> None:
        """Disconnect from MongoDB."""
        if self.client:
            self.client.close()
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
