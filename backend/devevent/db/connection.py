"""
MongoDB connection manager.

One MongoConnection owns one client. Callers share it by reference and
await `connect()` before every unit of work:

  - a live handle is returned immediately;
  - while an attempt is in flight, every caller awaits that same attempt,
    so N concurrent callers produce exactly one client and one ping;
  - a failed attempt is forgotten, so the next call starts a fresh one.

The in-flight attempt is an asyncio.Task shielded from caller
cancellation: one caller giving up never aborts the attempt the others
are waiting on. Everything runs on one event loop, so the
check-then-create on `_pending` needs no lock.
"""

import asyncio
from typing import Any, Callable, Optional

from pymongo import AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import ConfigurationError as MongoConfigurationError, PyMongoError

from devevent.core.config import Settings, get_settings
from devevent.core.exceptions import ConfigurationError, DatabaseConnectionError
from devevent.core.logging import get_logger
from devevent.core.metrics import record_connection_attempt

logger = get_logger(__name__)


class MongoConnection:
    """Lazily connected, memoized MongoDB client."""

    def __init__(
        self,
        uri: str,
        db_name: str = "devevent",
        server_selection_timeout_ms: int = 5000,
        socket_timeout_ms: int = 45000,
        client_factory: Callable[..., Any] = AsyncMongoClient,
    ):
        if not uri:
            raise ConfigurationError(
                "MONGODB_URI is not set",
                detail="Define MONGODB_URI in the environment or the .env file.",
            )
        self._uri = uri
        self._db_name = db_name
        self._server_selection_timeout_ms = server_selection_timeout_ms
        self._socket_timeout_ms = socket_timeout_ms
        self._client_factory = client_factory

        self._client: Optional[Any] = None
        self._db: Optional[AsyncDatabase] = None
        self._pending: Optional[asyncio.Task] = None
        self._closing = False
        self.attempts = 0

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, **kwargs) -> "MongoConnection":
        settings = settings or get_settings()
        return cls(
            settings.MONGODB_URI,
            db_name=settings.MONGODB_DB_NAME,
            server_selection_timeout_ms=settings.MONGODB_SERVER_SELECTION_TIMEOUT_MS,
            socket_timeout_ms=settings.MONGODB_SOCKET_TIMEOUT_MS,
            **kwargs,
        )

    @property
    def is_connected(self) -> bool:
        return self._db is not None

    async def connect(self) -> AsyncDatabase:
        """Return the database handle, connecting at most once at a time."""
        if self._closing:
            raise DatabaseConnectionError("MongoDB connection is closing")
        if self._db is not None:
            return self._db

        if self._pending is None:
            self._pending = asyncio.create_task(self._open())

        return await asyncio.shield(self._pending)

    async def _open(self) -> AsyncDatabase:
        self.attempts += 1
        client = None
        try:
            client = self._client_factory(
                self._uri,
                serverSelectionTimeoutMS=self._server_selection_timeout_ms,
                socketTimeoutMS=self._socket_timeout_ms,
                tz_aware=True,
            )
            # Client construction is lazy; the ping forces server selection
            await client.admin.command("ping")
        except PyMongoError as e:
            record_connection_attempt(success=False)
            if client is not None:
                await client.close()
            # SRV lookups are deferred to the first operation, so a bad
            # mongodb+srv:// host surfaces here as a ConfigurationError
            if isinstance(e, MongoConfigurationError):
                logger.error("mongo_configuration_invalid", error=str(e))
                raise ConfigurationError("Invalid MongoDB configuration", detail=str(e)) from e
            logger.error("mongo_connection_failed", attempt=self.attempts, error=str(e))
            raise DatabaseConnectionError("Could not connect to MongoDB", detail=str(e)) from e
        else:
            self._client = client
            self._db = client.get_default_database(default=self._db_name)
            record_connection_attempt(success=True)
            logger.info("mongo_connected", database=self._db.name, attempt=self.attempts)
            return self._db
        finally:
            self._pending = None

    async def ping(self) -> bool:
        """Health check against the live client."""
        if self._client is None:
            return False
        try:
            await self._client.admin.command("ping")
        except PyMongoError as e:
            logger.warning("mongo_ping_failed", error=str(e))
            return False
        return True

    async def close(self) -> None:
        """
        Close the client and reset all cached state. connect() calls made
        while closing fail instead of receiving a handle about to be closed;
        once close() returns, the next connect() starts a fresh attempt.
        """
        self._closing = True
        try:
            if self._pending is not None:
                # Let an in-flight attempt settle so its client can be closed below
                await asyncio.wait([self._pending])

            if self._client is not None:
                await self._client.close()
                logger.info("mongo_connection_closed")
        finally:
            self._client = None
            self._db = None
            self._pending = None
            self._closing = False
