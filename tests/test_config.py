# =============================================================================
# BACKOFFICE SERVICE - CONFIGURATION TESTS
# =============================================================================
# File: tests/test_config.py
# Description: Unit tests for Settings, durations and database configs
# =============================================================================

from datetime import timedelta

import pytest
from pydantic import ValidationError

from backoffice.core.config import DatabaseConnectionConfig, Settings
from backoffice.core.exceptions import UnsupportedDriverError
from backoffice.db.base import DriverType
from backoffice.db.drivers import MySQLConfig, PostgresConfig
from backoffice.utils.helpers import (
    MAX_PAGE,
    clamp_pagination,
    format_uptime,
    parse_duration,
    parse_int,
)

from tests.conftest import TEST_JWT_SECRET, make_settings


class TestDurationParsing:
    """Go-style duration strings used by the timeout and JWT settings."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("90s", timedelta(seconds=90)),
            ("5m", timedelta(minutes=5)),
            ("24h", timedelta(hours=24)),
            ("1h30m", timedelta(minutes=90)),
            ("250ms", timedelta(milliseconds=250)),
            ("7d", timedelta(days=7)),
            ("30", timedelta(seconds=30)),
            (45, timedelta(seconds=45)),
        ],
    )
    def test_parse_duration(self, value, expected):
        assert parse_duration(value) == expected

    def test_unknown_format_is_left_for_pydantic(self):
        """ISO-8601 strings pass through untouched."""
        assert parse_duration("PT5M") == "PT5M"

    def test_settings_accept_go_and_iso_durations(self):
        settings = make_settings(jwt_expiration="2h", server_shutdown_timeout="PT45S")

        assert settings.jwt_expiration == timedelta(hours=2)
        assert settings.server_shutdown_timeout == timedelta(seconds=45)


class TestSettings:
    """Test suite for Settings defaults, validators and derived values."""

    def test_defaults(self):
        settings = make_settings()

        assert settings.server_port == 8080
        assert settings.db_driver == "postgresql"
        assert settings.db_use_orm is True
        assert settings.jwt_expiration == timedelta(hours=24)
        assert settings.jwt_issuer == "backoffice-service"
        assert settings.log_file_name == "app"
        assert settings.auth_protect_users is False

    def test_short_jwt_secret_rejected(self):
        with pytest.raises(ValidationError):
            make_settings(jwt_secret="too-short")

    def test_log_level_normalized(self):
        assert make_settings(log_level="WARNING").log_level == "warn"
        assert make_settings(log_level="Info").log_level == "info"

    def test_unknown_log_channel_rejected(self):
        with pytest.raises(ValidationError):
            make_settings(log_channel="syslog")

    def test_environment_variables(self, monkeypatch):
        """Values are read from the environment, case-insensitively."""
        monkeypatch.setenv("JWT_SECRET", TEST_JWT_SECRET)
        monkeypatch.setenv("DB_DRIVER", "mysql")
        monkeypatch.setenv("DB_PORT", "3307")
        monkeypatch.setenv("DB_CONN_MAX_LIFETIME", "15m")
        monkeypatch.setenv("LOG_CHANNEL", "stack")
        monkeypatch.setenv(
            "DATABASES",
            '{"reporting": {"driver": "postgresql", "host": "reports", "port": 5433}}',
        )

        settings = Settings(_env_file=None)

        assert settings.db_driver == "mysql"
        assert settings.db_port == 3307
        assert settings.db_conn_max_lifetime == timedelta(minutes=15)
        assert settings.log_channel == "stack"
        assert settings.databases["reporting"].host == "reports"
        assert settings.databases["reporting"].port == 5433

    def test_primary_database_from_db_variables(self):
        settings = make_settings(
            db_driver="mysql",
            db_host="mysql.internal",
            db_port=3306,
            db_charset="latin1",
            db_use_orm=False,
        )

        primary = settings.primary_database

        assert primary.driver == "mysql"
        assert primary.host == "mysql.internal"
        assert primary.charset == "latin1"
        assert primary.use_orm is False

    def test_file_logger_config(self):
        settings = make_settings(
            log_file_path="/var/log/backoffice",
            log_max_size=50,
            log_compress=False,
        )

        config = settings.file_logger_config

        assert config.log_path == "/var/log/backoffice"
        assert config.log_file_name == "app"
        assert config.max_size == 50
        assert config.compress is False
        assert config.daily_rotate is True

    def test_cors_origins_list(self):
        settings = make_settings(cors_origins="https://a.example, https://b.example")
        assert settings.cors_origins_list == ["https://a.example", "https://b.example"]


class TestDatabaseConnectionConfig:
    """Conversion of connection settings into typed driver configs."""

    def test_postgres_config(self):
        connection = DatabaseConnectionConfig(
            driver="postgresql",
            host="pg",
            port=5433,
            password="secret",
            sslmode="require",
            conn_max_idle_time="2m",
        )

        driver_type, config = connection.to_driver_config()

        assert driver_type == DriverType.POSTGRESQL
        assert isinstance(config, PostgresConfig)
        assert config.host == "pg"
        assert config.port == 5433
        assert config.sslmode == "require"
        assert config.conn_max_idle_time == timedelta(minutes=2)
        assert config.use_orm is True

    def test_mysql_config(self):
        connection = DatabaseConnectionConfig(driver="mysql", port=3306, charset="utf8")

        driver_type, config = connection.to_driver_config()

        assert driver_type == DriverType.MYSQL
        assert isinstance(config, MySQLConfig)
        assert config.charset == "utf8"
        assert config.parse_time is True
        assert config.loc == "Local"

    @pytest.mark.parametrize("tag", ["mongodb", "sqlite"])
    def test_known_driver_without_adapter(self, tag):
        driver_type, config = DatabaseConnectionConfig(driver=tag).to_driver_config()

        assert driver_type == DriverType(tag)
        assert config is None

    def test_unknown_driver(self):
        with pytest.raises(UnsupportedDriverError) as exc_info:
            DatabaseConnectionConfig(driver="oracle").to_driver_config()

        assert exc_info.value.message == "unsupported driver type: oracle"

    def test_zero_pool_values_use_defaults(self):
        _, config = DatabaseConnectionConfig(
            max_open_conns=0,
            max_idle_conns=0,
            conn_max_lifetime=0,
            conn_max_idle_time=0,
        ).to_driver_config()

        assert config.max_open_conns == 25
        assert config.max_idle_conns == 5
        assert config.conn_max_lifetime == timedelta(minutes=5)
        assert config.conn_max_idle_time == timedelta(minutes=10)

    def test_idle_connections_capped_at_open(self):
        _, config = DatabaseConnectionConfig(
            max_open_conns=3, max_idle_conns=10
        ).to_driver_config()

        assert config.max_idle_conns == 3


class TestHelpers:
    """Pagination clamping and uptime rendering."""

    @pytest.mark.parametrize(
        "page, limit, expected",
        [
            (1, 10, (1, 10, 0)),
            (3, 20, (3, 20, 40)),
            (0, 10, (1, 10, 0)),
            (-5, 10, (1, 10, 0)),
            (2, 0, (2, 10, 10)),
            (1, -1, (1, 10, 0)),
            (2, 500, (2, 100, 100)),
            ("2", "5", (2, 5, 5)),
            (None, None, (1, 10, 0)),
            ("abc", "x10", (1, 10, 0)),
            ("1.5", "", (1, 10, 0)),
            ("-2", "+20", (1, 20, 0)),
            (str(10 ** 19), "10", (1, 10, 0)),
        ],
    )
    def test_clamp_pagination(self, page, limit, expected):
        assert clamp_pagination(page, limit) == expected

    @pytest.mark.parametrize("page", [MAX_PAGE, MAX_PAGE + 1, 2 ** 63 - 1, "9000000000000000000"])
    @pytest.mark.parametrize("limit", [1, 10, 100, 1000])
    def test_offset_fits_64_bits(self, page, limit):
        page, limit, offset = clamp_pagination(page, limit)

        assert page == MAX_PAGE
        assert 0 <= offset <= 2 ** 63 - 1

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("42", 42),
            ("-7", -7),
            (" 3", 0),
            ("1_000", 0),
            ("", 0),
            (None, 0),
            (12, 12),
            (2 ** 63, 0),
        ],
    )
    def test_parse_int(self, value, expected):
        assert parse_int(value) == expected

    def test_format_uptime(self):
        assert format_uptime(timedelta(seconds=5)) == "5s"
        assert format_uptime(timedelta(minutes=2, seconds=3)) == "2m3s"
        assert format_uptime(timedelta(hours=26, seconds=1)) == "26h0m1s"
