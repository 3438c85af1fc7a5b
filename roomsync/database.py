"""MongoDB connection handle for the reconciliation job."""

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo.errors import ConfigurationError, ConnectionFailure
import logging
import certifi

from roomsync.config import Settings, get_settings

logger = logging.getLogger(__name__)


class DatabaseConnectionError(RuntimeError):
    """Raised when the data store cannot be reached at startup."""


class Database:
    """MongoDB connection owned by a single job run.

    Use as an async context manager so the client is released on every exit
    path::

        async with Database(settings) as db:
            ...
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.client: AsyncIOMotorClient | None = None
        self.db: AsyncIOMotorDatabase | None = None

    def _client_options(self) -> dict:
        settings = self.settings
        client_options: dict = {
            "serverSelectionTimeoutMS": settings.mongodb_server_selection_timeout_ms,
            "connectTimeoutMS": settings.mongodb_connect_timeout_ms,
            "socketTimeoutMS": settings.mongodb_socket_timeout_ms,
        }

        # Force CA bundle usage for hosted clusters to avoid TLS trust issues.
        if settings.mongodb_uri.startswith("mongodb+srv://"):
            client_options["tls"] = True
            client_options["tlsCAFile"] = certifi.where()

        return client_options

    async def connect(self) -> AsyncIOMotorDatabase:
        """Connect to MongoDB and verify the server answers."""
        settings = self.settings

        try:
            self.client = AsyncIOMotorClient(settings.mongodb_uri, **self._client_options())
            if settings.mongodb_database:
                self.db = self.client[settings.mongodb_database]
            else:
                self.db = self.client.get_default_database(settings.default_database)

            await self.client.admin.command("ping")
        except (ConnectionFailure, ConfigurationError) as e:
            await self.disconnect()
            raise DatabaseConnectionError(f"Could not connect to MongoDB: {e}") from e

        logger.info(f"Connected to MongoDB database: {self.db.name}")
        return self.db

    async def disconnect(self) -> None:
        """Disconnect from MongoDB."""
        if self.client:
            self.client.close()
            self.client = None
            self.db = None
            logger.info("Disconnected from MongoDB")

    def get_db(self) -> AsyncIOMotorDatabase:
        """Get the database instance."""
        if self.db is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self.db

    async def __aenter__(self) -> AsyncIOMotorDatabase:
        return await self.connect()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.disconnect()
