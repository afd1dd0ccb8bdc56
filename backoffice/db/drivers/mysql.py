# =============================================================================
# BACKOFFICE SERVICE - MYSQL DRIVER
# =============================================================================
# File: backoffice/db/drivers/mysql.py
# Description: MySQL driver built on SQLAlchemy async + aiomysql
# =============================================================================

from dataclasses import dataclass
from typing import Any, Dict

from pymysql.constants import FIELD_TYPE
from pymysql.converters import conversions
from sqlalchemy.engine import URL

from backoffice.db.base import DriverType, SQLConfig, SQLDriver


TEMPORAL_FIELD_TYPES = (
    FIELD_TYPE.DATETIME,
    FIELD_TYPE.TIMESTAMP,
    FIELD_TYPE.DATE,
    FIELD_TYPE.TIME,
)


@dataclass
class MySQLConfig(SQLConfig):
    """
    MySQL connection settings.

    Attributes:
        charset: Connection character set
        parse_time: Convert DATETIME/DATE/TIME columns to Python objects
        loc: Session time zone; "Local" keeps the server default
    """

    port: int = 3306
    user: str = "root"
    dbname: str = "mysql"
    charset: str = "utf8mb4"
    parse_time: bool = True
    loc: str = "Local"

    def __post_init__(self) -> None:
        super().__post_init__()
        if not self.charset:
            self.charset = "utf8mb4"
        if self.parse_time and not self.loc:
            self.loc = "Local"


class MySQLDriver(SQLDriver):
    """
    ┌─────────────────────────────────────────────────────────────────────────┐
    │                    MYSQL DATABASE DRIVER                                 │
    │  Async MySQL access through the aiomysql client                         │
    │  Serves both ORM sessions and raw SQL on one connection pool            │
    └─────────────────────────────────────────────────────────────────────────┘

    Pool settings follow PostgresDriver. The charset travels in the URL
    query; the time zone is applied per connection with init_command.
    """

    def __init__(self, config: MySQLConfig):
        super().__init__(config)
        self._config: MySQLConfig = config

    @property
    def type(self) -> DriverType:
        return DriverType.MYSQL

    def build_url(self) -> URL:
        config = self._config
        return URL.create(
            "mysql+aiomysql",
            username=config.user,
            password=config.password or None,
            host=config.host,
            port=config.port,
            database=config.dbname,
            query={"charset": config.charset},
        )

    def connect_args(self) -> Dict[str, Any]:
        config = self._config
        args: Dict[str, Any] = {"connect_timeout": config.connect_timeout}

        if not config.parse_time:
            conv = dict(conversions)
            for field_type in TEMPORAL_FIELD_TYPES:
                conv.pop(field_type, None)
            args["conv"] = conv

        if config.loc and config.loc != "Local":
            time_zone = "+00:00" if config.loc.upper() == "UTC" else config.loc
            args["init_command"] = f"SET time_zone = '{time_zone}'"

        return args
