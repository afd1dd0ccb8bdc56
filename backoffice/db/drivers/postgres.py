# =============================================================================
# BACKOFFICE SERVICE - POSTGRESQL DRIVER
# =============================================================================
# File: backoffice/db/drivers/postgres.py
# Description: PostgreSQL driver built on SQLAlchemy async + asyncpg
# =============================================================================

from dataclasses import dataclass
from typing import Any, Dict

from sqlalchemy.engine import URL

from backoffice.db.base import DriverType, SQLConfig, SQLDriver


@dataclass
class PostgresConfig(SQLConfig):
    """
    PostgreSQL connection settings.

    Attributes:
        sslmode: libpq style mode (disable, allow, prefer, require,
                 verify-ca, verify-full), handed to asyncpg as-is
    """

    port: int = 5432
    user: str = "postgres"
    dbname: str = "postgres"
    sslmode: str = "disable"


class PostgresDriver(SQLDriver):
    """
    ┌─────────────────────────────────────────────────────────────────────────┐
    │                    POSTGRESQL DATABASE DRIVER                            │
    │  Async PostgreSQL access through the asyncpg client                     │
    │  Serves both ORM sessions and raw SQL on one connection pool            │
    └─────────────────────────────────────────────────────────────────────────┘

    Connection Pool Configuration:
        - pool_size:     max_idle_conns (default: 5)
        - max_overflow:  max_open_conns - max_idle_conns (default: 20)
        - pool_recycle:  conn_max_lifetime (default: 300s)
        - idle timeout:  conn_max_idle_time (default: 600s)

    Usage:
        driver = PostgresDriver(PostgresConfig(host="db", password="secret"))
        await driver.connect()
        engine = driver.get_sql_db()
        await driver.close()
    """

    def __init__(self, config: PostgresConfig):
        super().__init__(config)
        self._config: PostgresConfig = config

    @property
    def type(self) -> DriverType:
        return DriverType.POSTGRESQL

    def build_url(self) -> URL:
        config = self._config
        return URL.create(
            "postgresql+asyncpg",
            username=config.user,
            password=config.password or None,
            host=config.host,
            port=config.port,
            database=config.dbname,
        )

    def connect_args(self) -> Dict[str, Any]:
        return {
            "timeout": self._config.connect_timeout,
            "ssl": self._config.sslmode,
        }
