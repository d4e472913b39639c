from enum import Enum
from typing import Optional

from pymongo import AsyncMongoClient
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.monitoring import (
    ServerHeartbeatFailedEvent,
    ServerHeartbeatListener,
    ServerHeartbeatStartedEvent,
    ServerHeartbeatSucceededEvent,
)

from logger import logger

DEFAULT_DATABASE = "grades"


class ConnectionState(Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTING = "disconnecting"


class HeartbeatLogger(ServerHeartbeatListener):
    """Tracks an established server connection through the driver's heartbeats.

    A failed heartbeat marks the database as disconnected and a later success
    marks it connected again, so ``Database.status`` follows the server. Only
    the first failure and the recovery are logged.
    """

    def __init__(self, database: "Database"):
        self.database = database
        self.failing = set()

    def started(self, event: ServerHeartbeatStartedEvent) -> None:
        pass

    def succeeded(self, event: ServerHeartbeatSucceededEvent) -> None:
        if (
            self.database.client is not None
            and self.database.state is ConnectionState.DISCONNECTED
        ):
            self.database.state = ConnectionState.CONNECTED
        if event.connection_id in self.failing:
            self.failing.discard(event.connection_id)
            logger.info(f"MongoDB server {event.connection_id} is reachable again")

    def failed(self, event: ServerHeartbeatFailedEvent) -> None:
        if self.database.state is ConnectionState.CONNECTED:
            self.database.state = ConnectionState.DISCONNECTED
        if event.connection_id not in self.failing:
            self.failing.add(event.connection_id)
            logger.error(
                f"Lost connection to MongoDB server {event.connection_id}: {event.reply}"
            )


class Database:
    def __init__(self):
        self.client: Optional[AsyncMongoClient] = None
        self.database: Optional[AsyncDatabase] = None
        self.state = ConnectionState.DISCONNECTED

    async def connect(
        self, uri: str, database_name: Optional[str] = None, timeout_ms: int = 5000
    ) -> None:
        if self.client is not None:
            logger.info("A MongoDB connection is already open")
            return

        self.state = ConnectionState.CONNECTING
        client = AsyncMongoClient(
            uri,
            tz_aware=True,
            serverSelectionTimeoutMS=timeout_ms,
            event_listeners=[HeartbeatLogger(self)],
        )
        try:
            await client.admin.command("ping")
        except Exception as e:
            self.state = ConnectionState.DISCONNECTED
            await client.close()
            logger.error(f"Error connecting to MongoDB: {e}")
            raise

        self.client = client
        if database_name:
            self.database = client[database_name]
        else:
            self.database = client.get_default_database(default=DEFAULT_DATABASE)
        self.state = ConnectionState.CONNECTED
        logger.info(f"Connected to MongoDB database '{self.database.name}'")

    async def disconnect(self) -> None:
        if self.client is None:
            return
        self.state = ConnectionState.DISCONNECTING
        try:
            await self.client.close()
        finally:
            self.client = None
            self.database = None
            self.state = ConnectionState.DISCONNECTED
        logger.info("MongoDB connection closed")

    def get_collection(self, name: str) -> AsyncCollection:
        if self.database is None:
            raise RuntimeError("Database is not connected")
        return self.database[name]

    @property
    def status(self) -> str:
        return self.state.value

    @property
    def is_connected(self) -> bool:
        return self.state is ConnectionState.CONNECTED
