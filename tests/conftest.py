# =============================================================================
# BACKOFFICE SERVICE - TEST CONFIGURATION
# =============================================================================
# File: tests/conftest.py
# Description: Pytest fixtures backed by an in-memory SQLite driver
#              Service and API fixtures run once per access mode (orm, raw_sql)
# =============================================================================

from typing import Any, AsyncGenerator, Dict, Generator, Optional, Union

import pytest
import pytest_asyncio
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.engine import URL
from sqlalchemy.ext.asyncio import AsyncEngine
from sqlalchemy.pool import StaticPool

from backoffice.core.config import Settings
from backoffice.core.exceptions import DatabaseConnectionError, DatabaseNotConnectedError
from backoffice.core.security import JWTManager, PasswordManager
from backoffice.db.base import (
    AccessMode,
    Driver,
    DriverType,
    SessionFactory,
    SQLConfig,
    SQLDriver,
)
from backoffice.db.factory import DriverFactory
from backoffice.db.manager import PRIMARY_DRIVER, DatabaseManager
from backoffice.main import create_application
from backoffice.services.auth_service import AuthService
from backoffice.services.user_service import UserService


TEST_JWT_SECRET = "test-secret-key-that-is-at-least-32-chars"

# Host name the test factory treats as unreachable
UNREACHABLE_HOST = "db.unreachable"


def make_settings(**overrides: Any) -> Settings:
    """Settings for tests: cheap hashing, quiet logging, no .env file."""
    values: Dict[str, Any] = {
        "app_env": "test",
        "server_mode": "test",
        "jwt_secret": TEST_JWT_SECRET,
        "log_channel": "stdout",
        "log_level": "error",
        "argon2_time_cost": 1,
        "argon2_memory_cost": 1024,
        "argon2_parallelism": 1,
        "bcrypt_rounds": 4,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


# =============================================================================
# TEST DRIVERS
# =============================================================================

class SqliteTestDriver(SQLDriver):
    """
    SQLDriver on aiosqlite.

    Without a database path it uses one shared in-memory connection, so
    every session sees the same tables.
    """

    def __init__(self, config: SQLConfig, database: Optional[str] = None):
        super().__init__(config)
        self._database = database

    @property
    def type(self) -> DriverType:
        return DriverType.SQLITE

    def build_url(self) -> URL:
        return URL.create("sqlite+aiosqlite", database=self._database)

    def engine_options(self) -> Dict[str, Any]:
        if self._database:
            return super().engine_options()
        return {
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        }


class StubDriver(Driver):
    """In-memory driver whose lifecycle calls fail on demand."""

    def __init__(
        self,
        connect_error: Optional[Exception] = None,
        close_error: Optional[Exception] = None,
        ping_error: Optional[Exception] = None,
        use_orm: bool = False,
    ):
        self.connect_error = connect_error
        self.close_error = close_error
        self.ping_error = ping_error
        self.connect_calls = 0
        self.close_calls = 0
        self._access_mode = AccessMode.ORM if use_orm else AccessMode.RAW_SQL
        self._connected = False

    async def connect(self) -> None:
        self.connect_calls += 1
        if self.connect_error is not None:
            raise self.connect_error
        self._connected = True

    async def close(self) -> None:
        self.close_calls += 1
        self._connected = False
        if self.close_error is not None:
            raise self.close_error

    async def ping(self) -> None:
        if not self._connected:
            raise DatabaseNotConnectedError("stub")
        if self.ping_error is not None:
            raise self.ping_error

    def get_db(self) -> Union[AsyncEngine, SessionFactory, None]:
        return None

    def get_sql_db(self) -> Optional[AsyncEngine]:
        return None

    def get_orm_db(self) -> Optional[SessionFactory]:
        return None

    async def create_tables(self) -> None:
        pass

    @property
    def type(self) -> DriverType:
        return DriverType.SQLITE

    @property
    def access_mode(self) -> AccessMode:
        return self._access_mode

    @property
    def is_connected(self) -> bool:
        return self._connected


class SqliteDriverFactory(DriverFactory):
    """
    Builds SQLite test drivers for postgresql/mysql configs.

    Configs pointing at UNREACHABLE_HOST yield a driver that fails to
    connect; mongodb/sqlite tags keep the real factory behaviour.
    """

    def __init__(self) -> None:
        self.created: Dict[str, int] = {}

    def create_driver(self, driver_type, config) -> Driver:
        driver_type = self.resolve_type(driver_type)
        if driver_type not in (DriverType.POSTGRESQL, DriverType.MYSQL):
            return super().create_driver(driver_type, config)

        self.created[driver_type.value] = self.created.get(driver_type.value, 0) + 1
        if config.host == UNREACHABLE_HOST:
            return StubDriver(
                connect_error=DatabaseConnectionError(
                    f"failed to connect to {driver_type.value}: connection refused"
                )
            )
        return SqliteTestDriver(config)


# =============================================================================
# SETTINGS FIXTURES
# =============================================================================

@pytest.fixture(params=[AccessMode.ORM, AccessMode.RAW_SQL], ids=["orm", "raw_sql"])
def access_mode(request) -> AccessMode:
    """Every test using this fixture runs against both repositories."""
    return request.param


@pytest.fixture
def settings(access_mode: AccessMode) -> Settings:
    return make_settings(db_use_orm=access_mode == AccessMode.ORM)


@pytest.fixture
def password_manager(settings: Settings) -> PasswordManager:
    return PasswordManager(settings)


@pytest.fixture
def jwt_manager(settings: Settings) -> JWTManager:
    return JWTManager(settings)


# =============================================================================
# DATABASE FIXTURES
# =============================================================================

@pytest_asyncio.fixture
async def sqlite_driver(access_mode: AccessMode) -> AsyncGenerator[SqliteTestDriver, None]:
    """
    Connected in-memory driver with tables created.

    Yields a fresh database for each test.
    """
    driver = SqliteTestDriver(SQLConfig(use_orm=access_mode == AccessMode.ORM))
    await driver.connect()
    await driver.create_tables()

    yield driver

    await driver.close()


@pytest_asyncio.fixture
async def db_manager(sqlite_driver: SqliteTestDriver) -> DatabaseManager:
    manager = DatabaseManager()
    manager.add_driver(PRIMARY_DRIVER, sqlite_driver)
    return manager


# =============================================================================
# SERVICE FIXTURES
# =============================================================================

@pytest.fixture
def auth_service(
    db_manager: DatabaseManager,
    password_manager: PasswordManager,
    jwt_manager: JWTManager,
) -> AuthService:
    return AuthService(db_manager, password_manager, jwt_manager)


@pytest.fixture
def user_service(
    db_manager: DatabaseManager,
    password_manager: PasswordManager,
) -> UserService:
    return UserService(db_manager, password_manager)


# =============================================================================
# APPLICATION FIXTURES
# =============================================================================

@pytest.fixture
def driver_factory() -> SqliteDriverFactory:
    return SqliteDriverFactory()


@pytest.fixture
def app(settings: Settings, driver_factory: SqliteDriverFactory) -> FastAPI:
    return create_application(settings, driver_factory)


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    """
    Test client with the application lifespan running.

    Startup connects the SQLite primary and creates the tables.
    """
    with TestClient(app) as test_client:
        yield test_client


# =============================================================================
# DATA FIXTURES
# =============================================================================

@pytest.fixture
def register_payload() -> Dict[str, str]:
    """Registration body for a valid user."""
    return {
        "email": "a@x.com",
        "password": "secret1",
        "first_name": "A",
        "last_name": "B",
        "username": "a",
    }
