"""
Database lifecycle helper for hosting applications and scripts.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from pymongo.asynchronous.database import AsyncDatabase

from devevent.core.config import Settings
from devevent.db.connection import MongoConnection
from devevent.db.indexes import ensure_indexes


@asynccontextmanager
async def open_database(settings: Optional[Settings] = None, **kwargs) -> AsyncGenerator[AsyncDatabase, None]:
    """
    Connect, make sure every index exists, yield the database and close
    the connection on exit. Extra keyword arguments go to MongoConnection.
    """
    connection = MongoConnection.from_settings(settings, **kwargs)
    db = await connection.connect()
    try:
        await ensure_indexes(db)
        yield db
    finally:
        await connection.close()
