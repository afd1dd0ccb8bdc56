# =============================================================================
# BACKOFFICE SERVICE - CORE CONFIGURATION MODULE
# =============================================================================
# File: backoffice/core/config.py
# Description: Centralized configuration management using Pydantic Settings
#              Every value can be overridden through environment variables
# =============================================================================

from typing import Any, Dict, List, Literal, Optional, Tuple, Union
from datetime import timedelta
from functools import lru_cache

from pydantic import BaseModel, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from backoffice.db.base import DriverType
from backoffice.db.drivers.mysql import MySQLConfig
from backoffice.db.drivers.postgres import PostgresConfig
from backoffice.core.exceptions import UnsupportedDriverError
from backoffice.logger.handlers import FileLoggerConfig
from backoffice.utils.helpers import parse_duration


def _duration(value: Any) -> Any:
    if isinstance(value, (str, int, float)):
        return parse_duration(value)
    return value


class DatabaseConnectionConfig(BaseModel):
    """
    Configuration for a single named database connection.

    The same shape is used for the primary database (built from the DB_*
    variables) and for every entry of the DATABASES JSON object.
    """

    driver: str = "postgresql"
    host: str = "localhost"
    port: int = 5432
    user: str = "postgres"
    password: str = ""
    dbname: str = "backoffice"
    sslmode: str = "disable"
    charset: str = "utf8mb4"
    max_open_conns: int = 25
    max_idle_conns: int = 5
    conn_max_lifetime: timedelta = timedelta(minutes=5)
    conn_max_idle_time: timedelta = timedelta(minutes=10)
    use_orm: bool = True
    connect_timeout: float = 10.0

    @field_validator("conn_max_lifetime", "conn_max_idle_time", mode="before")
    @classmethod
    def parse_go_duration(cls, v: Any) -> Any:
        """Accept "5m" / "90s" style durations as well as seconds."""
        return _duration(v)

    def to_driver_config(
        self,
    ) -> Tuple[DriverType, Optional[Union[PostgresConfig, MySQLConfig]]]:
        """
        Convert to the typed config expected by the driver factory.

        Returns:
            Tuple of (driver type, typed config). Recognized drivers without
            an adapter (mongodb, sqlite) come back with a None config so the
            factory can report them as not implemented.

        Raises:
            UnsupportedDriverError: If the driver tag is unknown
        """
        try:
            driver_type = DriverType(self.driver)
        except ValueError:
            raise UnsupportedDriverError(self.driver) from None

        if driver_type == DriverType.POSTGRESQL:
            return driver_type, PostgresConfig(
                host=self.host,
                port=self.port,
                user=self.user,
                password=self.password,
                dbname=self.dbname,
                sslmode=self.sslmode,
                max_open_conns=self.max_open_conns,
                max_idle_conns=self.max_idle_conns,
                conn_max_lifetime=self.conn_max_lifetime,
                conn_max_idle_time=self.conn_max_idle_time,
                use_orm=self.use_orm,
                connect_timeout=self.connect_timeout,
            )

        if driver_type == DriverType.MYSQL:
            return driver_type, MySQLConfig(
                host=self.host,
                port=self.port,
                user=self.user,
                password=self.password,
                dbname=self.dbname,
                charset=self.charset,
                parse_time=True,
                loc="Local",
                max_open_conns=self.max_open_conns,
                max_idle_conns=self.max_idle_conns,
                conn_max_lifetime=self.conn_max_lifetime,
                conn_max_idle_time=self.conn_max_idle_time,
                use_orm=self.use_orm,
                connect_timeout=self.connect_timeout,
            )

        return driver_type, None


class Settings(BaseSettings):
    """
    ┌─────────────────────────────────────────────────────────────────────────┐
    │                    APPLICATION SETTINGS                                  │
    │  Type-safe configuration with automatic environment variable loading    │
    │  Covers: server, databases, JWT, password hashing and logging           │
    └─────────────────────────────────────────────────────────────────────────┘
    """

    # -------------------------------------------------------------------------
    # APPLICATION CORE
    # -------------------------------------------------------------------------
    app_name: str = "Backoffice Service"
    app_version: str = "1.0.0"
    app_env: Literal["development", "staging", "production", "test"] = "development"
    app_debug: bool = True

    # -------------------------------------------------------------------------
    # HTTP SERVER
    # -------------------------------------------------------------------------
    server_host: str = "0.0.0.0"
    server_port: int = 8080
    server_mode: Literal["debug", "release", "test"] = "debug"
    server_idle_timeout: timedelta = timedelta(seconds=60)
    server_shutdown_timeout: timedelta = timedelta(seconds=30)

    # -------------------------------------------------------------------------
    # PRIMARY DATABASE
    # -------------------------------------------------------------------------
    db_driver: str = "postgresql"
    db_host: str = "localhost"
    db_port: int = 5432
    db_user: str = "postgres"
    db_password: str = ""
    db_name: str = "backoffice"
    db_sslmode: str = "disable"
    db_charset: str = "utf8mb4"

    # Connection Pool
    db_max_open_conns: int = 25
    db_max_idle_conns: int = 5
    db_conn_max_lifetime: timedelta = timedelta(minutes=5)
    db_conn_max_idle_time: timedelta = timedelta(minutes=10)
    db_connect_timeout: float = 10.0

    db_use_orm: bool = True
    # Create missing tables at startup
    db_auto_migrate: bool = True

    # Additional named databases, as a JSON object:
    # DATABASES='{"reporting": {"driver": "mysql", "host": "db2", "port": 3306}}'
    databases: Dict[str, DatabaseConnectionConfig] = {}

    # -------------------------------------------------------------------------
    # JWT CONFIGURATION
    # -------------------------------------------------------------------------
    jwt_secret: str = "your-secret-key-change-in-production"
    jwt_algorithm: Literal["HS256", "HS384", "HS512"] = "HS256"
    jwt_expiration: timedelta = timedelta(hours=24)
    jwt_refresh_expiration: timedelta = timedelta(days=7)
    jwt_issuer: str = "backoffice-service"

    # -------------------------------------------------------------------------
    # PASSWORD HASHING
    # -------------------------------------------------------------------------
    password_hash_algorithm: Literal["argon2", "bcrypt"] = "argon2"
    bcrypt_rounds: int = 12

    # Argon2 Parameters (OWASP recommended)
    argon2_memory_cost: int = 65536  # 64 MB
    argon2_time_cost: int = 3
    argon2_parallelism: int = 4

    # -------------------------------------------------------------------------
    # ACCESS CONTROL
    # -------------------------------------------------------------------------
    # Require a bearer access token on /api/v1/users
    auth_protect_users: bool = False

    # -------------------------------------------------------------------------
    # CORS CONFIGURATION
    # -------------------------------------------------------------------------
    cors_origins: str = "*"

    # -------------------------------------------------------------------------
    # LOGGING
    # -------------------------------------------------------------------------
    log_channel: Literal["stdout", "file", "stack"] = "stdout"
    log_level: Literal["debug", "info", "warn", "error", "fatal"] = "debug"
    log_file_path: str = "./storage/logs"
    log_file_name: str = "app"
    log_max_size: int = 10  # megabytes
    log_max_backups: int = 5
    log_max_age: int = 28  # days
    log_compress: bool = True
    log_daily_rotate: bool = True

    # -------------------------------------------------------------------------
    # VALIDATORS
    # -------------------------------------------------------------------------

    @field_validator(
        "server_idle_timeout",
        "server_shutdown_timeout",
        "db_conn_max_lifetime",
        "db_conn_max_idle_time",
        "jwt_expiration",
        "jwt_refresh_expiration",
        mode="before",
    )
    @classmethod
    def parse_go_duration(cls, v: Any) -> Any:
        """Accept "15s" / "24h" style durations as well as seconds."""
        return _duration(v)

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> Any:
        """Lower-case the level and accept "warning" for "warn"."""
        if isinstance(v, str):
            v = v.lower()
            if v == "warning":
                return "warn"
        return v

    @field_validator("jwt_secret")
    @classmethod
    def validate_jwt_secret(cls, v: str) -> str:
        """Ensure JWT secret key has minimum length for HMAC signing."""
        if len(v) < 32:
            raise ValueError("JWT_SECRET must be at least 32 characters long")
        return v

    # -------------------------------------------------------------------------
    # COMPUTED PROPERTIES
    # -------------------------------------------------------------------------

    @computed_field
    @property
    def primary_database(self) -> DatabaseConnectionConfig:
        """
        Primary database connection built from the DB_* variables.
        """
        return DatabaseConnectionConfig(
            driver=self.db_driver,
            host=self.db_host,
            port=self.db_port,
            user=self.db_user,
            password=self.db_password,
            dbname=self.db_name,
            sslmode=self.db_sslmode,
            charset=self.db_charset,
            max_open_conns=self.db_max_open_conns,
            max_idle_conns=self.db_max_idle_conns,
            conn_max_lifetime=self.db_conn_max_lifetime,
            conn_max_idle_time=self.db_conn_max_idle_time,
            use_orm=self.db_use_orm,
            connect_timeout=self.db_connect_timeout,
        )

    @property
    def file_logger_config(self) -> FileLoggerConfig:
        """File logger settings for the file and stack channels."""
        return FileLoggerConfig(
            log_path=self.log_file_path,
            log_file_name=self.log_file_name,
            max_size=self.log_max_size,
            max_backups=self.log_max_backups,
            max_age=self.log_max_age,
            compress=self.log_compress,
            daily_rotate=self.log_daily_rotate,
        )

    @computed_field
    @property
    def cors_origins_list(self) -> List[str]:
        """
        Parse CORS origins from comma-separated string to list.
        """
        return [origin.strip() for origin in self.cors_origins.split(",")]

    @computed_field
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"

    @computed_field
    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.app_env == "development"

    # -------------------------------------------------------------------------
    # PYDANTIC SETTINGS CONFIG
    # -------------------------------------------------------------------------
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Retrieve the settings loaded from the environment.

    Cached so that repeated calls during startup read the environment once.
    Components receive the instance through their constructors.

    Returns:
        Settings: Validated configuration instance
    """
    return Settings()
