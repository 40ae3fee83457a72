"""Configuration for the PostgreSQL MCP server.

Values come from environment variables (optionally seeded from a local .env
file). Timeouts keep the millisecond units of the POSTGRES_*_TIMEOUT variables.
"""
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv
from psycopg.conninfo import make_conninfo

SERVER_NAME = "postgres-mcp-server"
SERVER_VERSION = "1.0.0"

load_dotenv()


def _env_bool(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes")


@dataclass
class BridgeConfig:
    """Server configuration loaded from environment variables."""

    # Connection
    host: str = field(
        default_factory=lambda: os.environ.get("POSTGRES_HOST", "localhost")
    )
    port: int = field(
        default_factory=lambda: int(os.environ.get("POSTGRES_PORT", "5432"))
    )
    database: str = field(
        default_factory=lambda: os.environ.get(
            "POSTGRES_DATABASE", os.environ.get("POSTGRES_DB", "postgres")
        )
    )
    user: str = field(
        default_factory=lambda: os.environ.get("POSTGRES_USER", "postgres")
    )
    password: str = field(
        default_factory=lambda: os.environ.get("POSTGRES_PASSWORD", ""),
        repr=False,
    )
    sslmode: str = field(
        default_factory=lambda: os.environ.get("POSTGRES_SSLMODE", "prefer")
    )

    # Pool settings
    pool_min_size: int = field(
        default_factory=lambda: int(os.environ.get("POSTGRES_MIN_CONNECTIONS", "1"))
    )
    pool_max_size: int = field(
        default_factory=lambda: int(os.environ.get("POSTGRES_MAX_CONNECTIONS", "10"))
    )
    idle_timeout_ms: int = field(
        default_factory=lambda: int(os.environ.get("POSTGRES_IDLE_TIMEOUT", "30000"))
    )
    connect_timeout_ms: int = field(
        default_factory=lambda: int(
            os.environ.get("POSTGRES_CONNECTION_TIMEOUT", "10000")
        )
    )

    # Safety
    max_rows: int = field(
        default_factory=lambda: int(os.environ.get("POSTGRES_MAX_ROWS", "1000"))
    )
    guard_mode: str = field(
        default_factory=lambda: os.environ.get("POSTGRES_GUARD_MODE", "keyword")
        .strip()
        .lower()
    )
    allow_multi_statement: bool = field(
        default_factory=lambda: _env_bool("POSTGRES_ALLOW_MULTI_STATEMENT")
    )

    log_level: str = field(
        default_factory=lambda: os.environ.get("POSTGRES_MCP_LOG_LEVEL", "INFO").upper()
    )

    @property
    def idle_timeout_seconds(self) -> float:
        return self.idle_timeout_ms / 1000

    @property
    def connect_timeout_seconds(self) -> float:
        return self.connect_timeout_ms / 1000

    def conninfo(self) -> str:
        """Build the libpq connection string for the pool.

        libpq only accepts whole seconds for connect_timeout, so the value is
        rounded up to at least one second.
        """
        params = {
            "host": self.host,
            "port": self.port,
            "dbname": self.database,
            "user": self.user,
            "sslmode": self.sslmode,
            "connect_timeout": max(1, round(self.connect_timeout_seconds)),
            "application_name": SERVER_NAME,
        }
        if self.password:
            params["password"] = self.password
        return make_conninfo("", **params)


config = BridgeConfig()
