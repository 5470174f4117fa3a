"""
MongoDB connection management.

One DatabaseManager is constructed per process in the FastAPI lifespan and
stored on app.state; request handlers reach it through get_database_manager()
and get_db(). It owns the Motor client and its state machine:

    disconnected -> connecting -> connected -> disconnecting -> disconnected

Unexpected drops are reported by pymongo's topology monitor (on a monitor
thread) and trigger a single delayed reconnection attempt.
"""

import asyncio
import enum
import logging
import threading
from typing import Any, Callable, Dict, Optional

from fastapi import Request
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING, monitoring
from pymongo.errors import PyMongoError

from app.core.config import settings
from app.core.exceptions import DatabaseUnavailableError
from app.core.logging_config import logger
from app.models.user import USERS_COLLECTION
from app.models.task import TASKS_COLLECTION
from app.models.student_record import STUDENT_RECORDS_COLLECTION


class ConnectionState(str, enum.Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTING = "disconnecting"


ClientFactory = Callable[..., AsyncIOMotorClient]


class _TopologyListener(monitoring.TopologyListener):
    """Forwards writable-server availability changes to the manager"""

    def __init__(self, manager: "DatabaseManager"):
        self._manager = manager

    def opened(self, event):
        pass

    def closed(self, event):
        pass

    def description_changed(self, event):
        was_available = event.previous_description.has_writable_server()
        is_available = event.new_description.has_writable_server()
        if was_available and not is_available:
            self._manager.on_connection_lost()
        elif is_available and not was_available:
            self._manager.on_connection_restored()


class DatabaseManager:
    """Owns the process-wide MongoDB client"""

    def __init__(
        self,
        url: Optional[str] = None,
        db_name: Optional[str] = None,
        *,
        max_retries: Optional[int] = None,
        retry_base_delay: Optional[float] = None,
        retry_max_delay: Optional[float] = None,
        reconnect_delay: Optional[float] = None,
        client_factory: ClientFactory = AsyncIOMotorClient,
    ):
        self.url = url or settings.MONGODB_URL
        self.db_name = db_name or settings.MONGODB_DB_NAME
        self.max_retries = settings.MONGODB_MAX_RETRIES if max_retries is None else max_retries
        self.retry_base_delay = (
            settings.MONGODB_RETRY_BASE_DELAY if retry_base_delay is None else retry_base_delay
        )
        self.retry_max_delay = (
            settings.MONGODB_RETRY_MAX_DELAY if retry_max_delay is None else retry_max_delay
        )
        self.reconnect_delay = (
            settings.MONGODB_RECONNECT_DELAY if reconnect_delay is None else reconnect_delay
        )
        self._client_factory = client_factory

        self._client: Optional[AsyncIOMotorClient] = None
        self._state = ConnectionState.DISCONNECTED
        # Guards _state, _closing and _reconnect_pending: topology events
        # arrive on pymongo monitor threads.
        self._lock = threading.Lock()
        self._closing = False
        self._reconnect_pending = False
        self._reconnect_task: Optional[asyncio.Task] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._listener = _TopologyListener(self)

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def client(self) -> Optional[AsyncIOMotorClient]:
        return self._client

    def _set_state(self, state: ConnectionState) -> None:
        with self._lock:
            self._state = state

    def backoff_delay(self, attempt: int) -> float:
        """Delay before retry number `attempt` (0-based)"""
        return min(self.retry_base_delay * (2 ** attempt), self.retry_max_delay)

    def client_options(self) -> Dict[str, Any]:
        """Fixed Motor option set. Certificate validation is never disabled."""
        return {
            "tls": settings.MONGODB_TLS,
            "minPoolSize": settings.MONGODB_MIN_POOL_SIZE,
            "maxPoolSize": settings.MONGODB_MAX_POOL_SIZE,
            "serverSelectionTimeoutMS": settings.MONGODB_SERVER_SELECTION_TIMEOUT_MS,
            "connectTimeoutMS": settings.MONGODB_CONNECT_TIMEOUT_MS,
            "socketTimeoutMS": settings.MONGODB_SOCKET_TIMEOUT_MS,
            "retryWrites": True,
            "event_listeners": [self._listener],
        }

    async def _open_client(self) -> AsyncIOMotorClient:
        client = self._client_factory(self.url, **self.client_options())
        try:
            await client.admin.command("ping")
        except BaseException:
            client.close()
            raise
        return client

    async def connect(self) -> None:
        """
        Connect and verify with a ping, retrying with exponential backoff.

        After max_retries failed retries the last driver error is re-raised
        and no further attempts are made.
        """
        self._loop = asyncio.get_running_loop()
        with self._lock:
            self._closing = False
            self._state = ConnectionState.CONNECTING

        logger.log_db_event("connecting", self._state.value, db_name=self.db_name)
        last_exception: Optional[BaseException] = None

        for attempt in range(self.max_retries + 1):
            try:
                self._client = await self._open_client()
                self._set_state(ConnectionState.CONNECTED)
                logger.log_db_event("connected", self._state.value, attempt=attempt + 1)
                return

            except (PyMongoError, OSError) as e:
                last_exception = e
                if attempt < self.max_retries:
                    delay = self.backoff_delay(attempt)
                    logger.warning(
                        f"[Database] Connection failed (attempt {attempt + 1}/{self.max_retries + 1}), "
                        f"retrying in {delay:.1f}s: {type(e).__name__}: {e}"
                    )
                    await asyncio.sleep(delay)
                else:
                    logger.error(
                        f"[Database] Connection failed after {self.max_retries + 1} attempts: "
                        f"{type(e).__name__}: {e}"
                    )

        self._set_state(ConnectionState.DISCONNECTED)
        raise last_exception

    async def disconnect(self) -> None:
        """Deliberate teardown. No reconnection is attempted afterwards."""
        with self._lock:
            self._closing = True
            self._reconnect_pending = False
            self._state = ConnectionState.DISCONNECTING

        if self._reconnect_task is not None and not self._reconnect_task.done():
            self._reconnect_task.cancel()
        self._reconnect_task = None

        if self._client is not None:
            self._client.close()
            self._client = None

        self._set_state(ConnectionState.DISCONNECTED)
        logger.log_db_event("disconnected", self._state.value, deliberate=True)

    # ------------------------------------------------------------------
    # Topology events (may run on a pymongo monitor thread)
    # ------------------------------------------------------------------

    def on_connection_lost(self) -> None:
        with self._lock:
            if self._closing or self._state != ConnectionState.CONNECTED:
                return
            self._state = ConnectionState.DISCONNECTED
        logger.log_db_event("connection lost", ConnectionState.DISCONNECTED.value, level=logging.WARNING)
        self.schedule_reconnect()

    def on_connection_restored(self) -> None:
        with self._lock:
            if self._closing or self._state != ConnectionState.DISCONNECTED or self._client is None:
                return
            self._state = ConnectionState.CONNECTED
        logger.log_db_event("connection restored", ConnectionState.CONNECTED.value)

    def schedule_reconnect(self) -> bool:
        """
        Schedule one reconnection attempt after reconnect_delay.

        Only schedules from the disconnected state, outside a deliberate
        teardown, and when no attempt is already pending. Returns whether an
        attempt was scheduled.
        """
        with self._lock:
            if self._closing or self._state != ConnectionState.DISCONNECTED or self._reconnect_pending:
                return False
            loop = self._loop
            if loop is None or loop.is_closed():
                return False
            self._reconnect_pending = True

        loop.call_soon_threadsafe(self._start_reconnect_task)
        logger.info(f"[Database] Reconnection scheduled in {self.reconnect_delay:.1f}s")
        return True

    def _start_reconnect_task(self) -> None:
        if not self._reconnect_pending:
            return
        self._reconnect_task = asyncio.ensure_future(self._reconnect_after_delay())

    async def _reconnect_after_delay(self) -> None:
        try:
            await asyncio.sleep(self.reconnect_delay)

            with self._lock:
                self._reconnect_pending = False
                if self._closing or self._state != ConnectionState.DISCONNECTED:
                    return
                self._state = ConnectionState.CONNECTING

            try:
                if self._client is None:
                    self._client = await self._open_client()
                else:
                    await self._client.admin.command("ping")
            except (PyMongoError, OSError) as e:
                with self._lock:
                    if self._state == ConnectionState.CONNECTING:
                        self._state = ConnectionState.DISCONNECTED
                logger.log_db_event(
                    "reconnection failed", self._state.value, level=logging.ERROR, error=str(e)
                )
                return

            with self._lock:
                if self._state == ConnectionState.CONNECTING:
                    self._state = ConnectionState.CONNECTED
            logger.log_db_event("reconnected", self._state.value)

        except asyncio.CancelledError:
            with self._lock:
                self._reconnect_pending = False
            raise

    # ------------------------------------------------------------------
    # Status & access
    # ------------------------------------------------------------------

    async def health_check(self) -> Dict[str, Any]:
        """Status snapshot. Never raises."""
        try:
            state = self._state
            if state != ConnectionState.CONNECTED or self._client is None:
                return {"status": "unhealthy", "db_status": state.value}

            await self._client.admin.command("ping")
            return {"status": "healthy", "db_status": state.value}

        except Exception as e:
            return {"status": "unhealthy", "db_status": self._state.value, "error": str(e)}

    @property
    def database(self) -> AsyncIOMotorDatabase:
        """Handle on MONGODB_DB_NAME. Raises DatabaseUnavailableError unless connected."""
        if self._client is None or self._state != ConnectionState.CONNECTED:
            raise DatabaseUnavailableError()
        return self._client[self.db_name]

    def get_database(self) -> AsyncIOMotorDatabase:
        return self.database

    async def ensure_indexes(self) -> None:
        """Create unique and query indexes"""
        db = self.database

        await db[USERS_COLLECTION].create_index([("email", ASCENDING)], unique=True)
        await db[USERS_COLLECTION].create_index([("username", ASCENDING)], unique=True)

        await db[TASKS_COLLECTION].create_index([("user_id", ASCENDING)])
        await db[TASKS_COLLECTION].create_index([("status", ASCENDING)])
        await db[TASKS_COLLECTION].create_index([("created_at", DESCENDING)])

        await db[STUDENT_RECORDS_COLLECTION].create_index([("teacher_id", ASCENDING)])
        await db[STUDENT_RECORDS_COLLECTION].create_index([("created_at", DESCENDING)])

        logger.info("[Database] Indexes ensured")


# Dependencies

def get_database_manager(request: Request) -> DatabaseManager:
    """The DatabaseManager created by the application lifespan"""
    manager = getattr(request.app.state, "db_manager", None)
    if manager is None:
        raise DatabaseUnavailableError()
    return manager


def get_db(request: Request) -> AsyncIOMotorDatabase:
    """Database handle for request handlers"""
    return get_database_manager(request).database
