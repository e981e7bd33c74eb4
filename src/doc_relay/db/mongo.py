from __future__ import annotations

import logging
from typing import Optional

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase

from .settings import MongoSettings

logger = logging.getLogger(__name__)


class MongoConnection:
    """Owns the motor client for one application instance."""

    def __init__(self, settings: MongoSettings):
        self.settings = settings
        self._client: Optional[AsyncIOMotorClient] = None

    def connect(self) -> AsyncIOMotorClient:
        if self._client is None:
            self._client = AsyncIOMotorClient(
                self.settings.resolved_url,
                tz_aware=True,
                serverSelectionTimeoutMS=self.settings.server_selection_timeout_ms,
            )
            logger.info("Mongo client created for database '%s'", self.settings.db)
        return self._client

    @property
    def database(self) -> AsyncIOMotorDatabase:
        return self.connect()[self.settings.db]

    @property
    def collection(self) -> AsyncIOMotorCollection:
        return self.database[self.settings.collection]

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
            logger.info("Mongo client closed")
