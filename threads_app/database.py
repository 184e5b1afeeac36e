"""
Database connection and Beanie ODM initialization.

Beanie is an async ODM for MongoDB built on Motor and Pydantic.
We initialize it once at startup and close the client at shutdown.
"""

import logging
from typing import List, Optional, Type

from beanie import init_beanie
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from threads_app.config import get_settings
from threads_app.models.community import Community
from threads_app.models.thread import Thread
from threads_app.models.user import User

logger = logging.getLogger(__name__)

# Document models that Beanie manages (collections + indexes)
DOCUMENT_MODELS: List[Type] = [User, Thread, Community]

_client: Optional[AsyncIOMotorClient] = None


async def init_models(database: AsyncIOMotorDatabase) -> None:
    """Bind the document models to a database. Tests pass an in-memory one."""
    await init_beanie(database=database, document_models=DOCUMENT_MODELS)


async def connect_to_mongo() -> None:
    """
    Create Motor client and initialize Beanie with document models.
    Called once at application startup.
    """
    global _client
    settings = get_settings()
    _client = AsyncIOMotorClient(settings.mongodb_url)
    await init_models(_client[settings.mongodb_database])
    logger.info("MongoDB connection established; Beanie initialized (db=%s).", settings.mongodb_database)


async def close_mongo_connection() -> None:
    """Close the Motor client created at startup."""
    global _client
    if _client is not None:
        _client.close()
        _client = None
    logger.info("Closed MongoDB connection.")
