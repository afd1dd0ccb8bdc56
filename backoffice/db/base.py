# =============================================================================
# BACKOFFICE SERVICE - DATABASE BASE MODULE
# =============================================================================
# File: backoffice/db/base.py
# Description: Driver interface shared by every database backend
#              SQLDriver implements the common SQLAlchemy connect path
# =============================================================================

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Any, Dict, Optional, Union

from sqlalchemy import MetaData, event, text
from sqlalchemy.engine import URL
from sqlalchemy.exc import DisconnectionError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from backoffice.core.exceptions import (
    DatabaseConnectionError,
    DatabaseNotConnectedError,
)
from backoffice.logger import fields


logger = logging.getLogger(__name__)


# =============================================================================
# SQLALCHEMY BASE CONFIGURATION
# =============================================================================

# Naming convention for constraints (important for migrations)
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s"
}

metadata = MetaData(naming_convention=NAMING_CONVENTION)


class Base(DeclarativeBase):
    """
    SQLAlchemy declarative base with custom metadata.
    All ORM models inherit from this base class.
    """
    metadata = metadata


# =============================================================================
# DRIVER TAGS
# =============================================================================

class DriverType(str, Enum):
    """Database backends known to the factory."""
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    MONGODB = "mongodb"
    SQLITE = "sqlite"


class AccessMode(str, Enum):
    """How repositories talk to a driver: ORM sessions or raw SQL."""
    ORM = "orm"
    RAW_SQL = "raw_sql"


# =============================================================================
# SHARED POOL CONFIGURATION
# =============================================================================

DEFAULT_MAX_OPEN_CONNS = 25
DEFAULT_MAX_IDLE_CONNS = 5
DEFAULT_CONN_MAX_LIFETIME = timedelta(minutes=5)
DEFAULT_CONN_MAX_IDLE_TIME = timedelta(minutes=10)
DEFAULT_CONNECT_TIMEOUT = 10.0


@dataclass
class SQLConfig:
    """
    Connection and pool settings common to the relational drivers.

    Zero or negative pool values are replaced with the defaults
    (25 open, 5 idle, 5 minute lifetime, 10 minute idle time).
    """

    host: str = "localhost"
    port: int = 0
    user: str = ""
    password: str = ""
    dbname: str = ""
    max_open_conns: int = 0
    max_idle_conns: int = 0
    conn_max_lifetime: timedelta = timedelta(0)
    conn_max_idle_time: timedelta = timedelta(0)
    use_orm: bool = False
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT

    def __post_init__(self) -> None:
        if self.max_open_conns <= 0:
            self.max_open_conns = DEFAULT_MAX_OPEN_CONNS
        if self.max_idle_conns <= 0:
            self.max_idle_conns = DEFAULT_MAX_IDLE_CONNS
        if self.conn_max_lifetime <= timedelta(0):
            self.conn_max_lifetime = DEFAULT_CONN_MAX_LIFETIME
        if self.conn_max_idle_time <= timedelta(0):
            self.conn_max_idle_time = DEFAULT_CONN_MAX_IDLE_TIME
        if self.connect_timeout <= 0:
            self.connect_timeout = DEFAULT_CONNECT_TIMEOUT
        # Idle connections can never outnumber open ones
        if self.max_idle_conns > self.max_open_conns:
            self.max_idle_conns = self.max_open_conns


# =============================================================================
# ABSTRACT DRIVER INTERFACE
# =============================================================================

SessionFactory = async_sessionmaker[AsyncSession]


class Driver(ABC):
    """
    ┌─────────────────────────────────────────────────────────────────────────┐
    │                    ABSTRACT DATABASE DRIVER INTERFACE                    │
    │  Defines the contract that all database backends must follow           │
    │  Enables switching between PostgreSQL and MySQL through configuration   │
    └─────────────────────────────────────────────────────────────────────────┘

    A driver is created unconnected by the factory. connect() opens the pool
    and verifies it with a ping; close() releases it. A driver is never left
    half connected: either every handle is usable or none is.

    Methods:
        connect()       - Open the pool and verify connectivity
        close()         - Release the pool (safe to call repeatedly)
        ping()          - Round-trip to the server
        health()        - Same check as ping(), for readiness probes
        get_db()        - Session factory in ORM mode, engine otherwise
        get_sql_db()    - Raw engine handle
        get_orm_db()    - Session factory, ORM mode only
        create_tables() - Create missing tables from ORM metadata
    """

    @abstractmethod
    async def connect(self) -> None:
        """
        Establish connection to the database.

        Raises:
            DatabaseConnectionError: If the pool cannot be opened or pinged
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release every connection held by the driver."""
        pass

    @abstractmethod
    async def ping(self) -> None:
        """
        Verify the server is reachable.

        Raises:
            DatabaseNotConnectedError: If connect() has not succeeded
            DatabaseConnectionError: If the round-trip fails
        """
        pass

    async def health(self) -> None:
        """Health check used by readiness probes."""
        await self.ping()

    @abstractmethod
    def get_db(self) -> Union[AsyncEngine, SessionFactory, None]:
        """Handle matching the driver's access mode."""
        pass

    @abstractmethod
    def get_sql_db(self) -> Optional[AsyncEngine]:
        """Raw engine, None before connect()."""
        pass

    @abstractmethod
    def get_orm_db(self) -> Optional[SessionFactory]:
        """Session factory, None unless connected in ORM mode."""
        pass

    @abstractmethod
    async def create_tables(self) -> None:
        """Create all tables defined in the ORM metadata."""
        pass

    @property
    @abstractmethod
    def type(self) -> DriverType:
        """Backend tag."""
        pass

    @property
    @abstractmethod
    def access_mode(self) -> AccessMode:
        """Access strategy fixed at construction."""
        pass

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        """True once connect() succeeded and until close()."""
        pass


# =============================================================================
# SQLALCHEMY DRIVER IMPLEMENTATION
# =============================================================================

class SQLDriver(Driver):
    """
    Shared implementation for SQLAlchemy backed drivers.

    Subclasses provide the connection URL and any client-specific
    connect arguments. The engine is the connection pool; in ORM mode a
    session factory is bound to that same engine.
    """

    def __init__(self, config: SQLConfig):
        self._config = config
        self._access_mode = AccessMode.ORM if config.use_orm else AccessMode.RAW_SQL
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[SessionFactory] = None
        self._is_connected = False

    # -------------------------------------------------------------------------
    # SUBCLASS HOOKS
    # -------------------------------------------------------------------------

    @abstractmethod
    def build_url(self) -> URL:
        """Connection URL for create_async_engine."""
        pass

    def connect_args(self) -> Dict[str, Any]:
        """Keyword arguments forwarded to the client library's connect()."""
        return {}

    def engine_options(self) -> Dict[str, Any]:
        """
        Pool options derived from the config.

        Returns:
            Dict of keyword arguments for create_async_engine
        """
        config = self._config
        return {
            "pool_size": config.max_idle_conns,
            "max_overflow": config.max_open_conns - config.max_idle_conns,
            "pool_recycle": int(config.conn_max_lifetime.total_seconds()),
            "pool_pre_ping": True,
            "connect_args": self.connect_args(),
        }

    def install_pool_events(self, engine: AsyncEngine) -> None:
        """
        Drop pooled connections that sat idle longer than conn_max_idle_time.

        A connection is stamped when returned to the pool; on checkout an
        expired stamp raises DisconnectionError, which makes the pool discard
        that connection and hand out a fresh one.
        """
        max_idle = self._config.conn_max_idle_time.total_seconds()

        @event.listens_for(engine.sync_engine, "checkin")
        def _stamp(dbapi_connection: Any, connection_record: Any) -> None:
            connection_record.info["last_checkin"] = time.monotonic()

        @event.listens_for(engine.sync_engine, "checkout")
        def _expire_idle(
            dbapi_connection: Any,
            connection_record: Any,
            connection_proxy: Any,
        ) -> None:
            last_checkin = connection_record.info.get("last_checkin")
            if last_checkin is not None and time.monotonic() - last_checkin > max_idle:
                connection_record.info.pop("last_checkin", None)
                raise DisconnectionError("connection exceeded max idle time")

    # -------------------------------------------------------------------------
    # LIFECYCLE
    # -------------------------------------------------------------------------

    async def connect(self) -> None:
        """
        Open the pool, ping it, then build the ORM session factory.

        Raises:
            DatabaseConnectionError: Chained to the underlying failure
        """
        if self._is_connected:
            return

        engine: Optional[AsyncEngine] = None
        try:
            engine = create_async_engine(self.build_url(), **self.engine_options())
            self.install_pool_events(engine)

            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as exc:
            if engine is not None:
                await engine.dispose()
            self._reset()
            raise DatabaseConnectionError(
                message=f"failed to connect to {self.type.value}: {exc}",
                details={"driver": self.type.value},
            ) from exc

        self._engine = engine
        if self._access_mode == AccessMode.ORM:
            self._session_factory = async_sessionmaker(
                bind=engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )
        self._is_connected = True

        logger.info(
            "Database connected",
            extra=fields(
                driver=self.type.value,
                mode=self._access_mode.value,
                host=self._config.host,
                database=self._config.dbname,
            ),
        )

    async def close(self) -> None:
        """Dispose of the engine; a no-op when already closed."""
        if self._engine is None:
            self._reset()
            return

        engine = self._engine
        self._reset()
        await engine.dispose()
        logger.info(
            "Database connection closed",
            extra=fields(driver=self.type.value),
        )

    def _reset(self) -> None:
        self._engine = None
        self._session_factory = None
        self._is_connected = False

    async def ping(self) -> None:
        if not self._is_connected or self._engine is None:
            raise DatabaseNotConnectedError(self.type.value)

        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as exc:
            raise DatabaseConnectionError(
                message=f"{self.type.value} ping failed: {exc}",
                details={"driver": self.type.value},
            ) from exc

    async def create_tables(self) -> None:
        """
        Create all tables defined in SQLAlchemy metadata.

        Raises:
            DatabaseNotConnectedError: If connect() has not succeeded
        """
        # Registers the models on Base.metadata
        from backoffice.db import models  # noqa: F401

        if self._engine is None:
            raise DatabaseNotConnectedError(self.type.value)

        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    # -------------------------------------------------------------------------
    # HANDLES
    # -------------------------------------------------------------------------

    def get_db(self) -> Union[AsyncEngine, SessionFactory, None]:
        if self._access_mode == AccessMode.ORM:
            return self._session_factory
        return self._engine

    def get_sql_db(self) -> Optional[AsyncEngine]:
        return self._engine

    def get_orm_db(self) -> Optional[SessionFactory]:
        return self._session_factory

    @property
    def config(self) -> SQLConfig:
        """Config the driver was built with."""
        return self._config

    @property
    def access_mode(self) -> AccessMode:
        return self._access_mode

    @property
    def is_connected(self) -> bool:
        return self._is_connected
