"""
config.py
---------
Central configuration module. Loads all environment variables
from the .env file and exposes them as typed constants, plus the
validated DatabaseSettings used to open the connection pool.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from db.errors import ConfigurationError

load_dotenv()


# ── Backends ──────────────────────────────────────────────
HAFSQL = "hafsql"    # PostgreSQL (HAF SQL)
HIVESQL = "hivesql"  # Microsoft SQL Server (HiveSQL)
BACKENDS = (HAFSQL, HIVESQL)

# Per-backend fallbacks for settings that are not set in the environment.
BACKEND_DEFAULTS = {
    HAFSQL: {
        "DB_HOST": "hafsql-sql.mahdiyari.info",
        "DB_PORT": "5432",
        "DB_NAME": "haf_block_log",
        "DB_USER": "hafsql_public",
        "DB_PASS": "hafsql_public",
        "DB_ENCRYPT": "false",
    },
    HIVESQL: {
        "DB_HOST": "vip.hivesql.io",
        "DB_PORT": "1433",
        "DB_NAME": "DBHive",
        "DB_USER": "",
        "DB_PASS": "",
        "DB_ENCRYPT": "true",
    },
}


def _getenv_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# ── Database ──────────────────────────────────────────────
HBD_DB_BACKEND: str = os.getenv("HBD_DB_BACKEND", HAFSQL).strip().lower()

# ── Pool ──────────────────────────────────────────────────
DB_POOL_MIN: int = int(os.getenv("DB_POOL_MIN", "1"))
DB_POOL_MAX: int = int(os.getenv("DB_POOL_MAX", "10"))
DB_CONNECT_TIMEOUT: int = int(os.getenv("DB_CONNECT_TIMEOUT", "10"))
DB_IDLE_TIMEOUT: int = int(os.getenv("DB_IDLE_TIMEOUT", "30"))

# ── Transport security ────────────────────────────────────
DB_TRUST_SERVER_CERTIFICATE: bool = _getenv_bool("DB_TRUST_SERVER_CERTIFICATE", "true")
ODBC_DRIVER: str = os.getenv("ODBC_DRIVER", "ODBC Driver 18 for SQL Server")


@dataclass(frozen=True)
class DatabaseSettings:
    """
    Connection settings for one backing database.

    Attributes:
        backend: Either 'hafsql' or 'hivesql'.
        host: Server host name.
        port: Server port.
        database: Database (catalog) name.
        user: Login name.
        password: Login password.
        pool_min: Connections opened when the pool is created.
        pool_max: Upper bound on simultaneously open connections.
        connect_timeout: Seconds to wait for a connection handshake.
        idle_timeout: Seconds before a pooled connection is recycled (ODBC only).
        encrypt: Require an encrypted transport.
        trust_server_certificate: Skip server certificate validation.
        odbc_driver: ODBC driver name (hivesql only).
    """
    backend: str
    host: str
    port: int
    database: str
    user: str
    password: str = ""
    pool_min: int = 1
    pool_max: int = 10
    connect_timeout: int = 10
    idle_timeout: int = 30
    encrypt: bool = False
    trust_server_certificate: bool = True
    odbc_driver: str = "ODBC Driver 18 for SQL Server"

    def validate(self) -> "DatabaseSettings":
        """
        Check the required connection fields.

        Returns:
            The same settings, so calls can be chained.

        Raises:
            ConfigurationError: If a field is missing, of the wrong type or out of range.
        """
        if self.backend not in BACKENDS:
            raise ConfigurationError(
                f"Unknown database backend '{self.backend}'; expected one of {', '.join(BACKENDS)}."
            )
        for name in ("host", "database", "user", "password", "odbc_driver"):
            if not isinstance(getattr(self, name), str):
                raise ConfigurationError(f"Database setting '{name}' must be a string.")
        for name in ("host", "database", "user"):
            if not getattr(self, name).strip():
                raise ConfigurationError(f"Database setting '{name}' is required.")
        for name in ("port", "pool_min", "pool_max", "connect_timeout", "idle_timeout"):
            value = getattr(self, name)
            # bool is an int subclass
            if not isinstance(value, int) or isinstance(value, bool):
                raise ConfigurationError(
                    f"Database setting '{name}' must be an integer, got {type(value).__name__}."
                )
        for name in ("encrypt", "trust_server_certificate"):
            if not isinstance(getattr(self, name), bool):
                raise ConfigurationError(f"Database setting '{name}' must be true or false.")
        if self.port <= 0:
            raise ConfigurationError(f"Database port must be positive, got {self.port}.")
        if not 1 <= self.pool_min <= self.pool_max:
            raise ConfigurationError(
                f"Invalid pool size: min={self.pool_min}, max={self.pool_max}."
            )
        if self.connect_timeout < 0 or self.idle_timeout < 0:
            raise ConfigurationError("Database timeouts cannot be negative.")
        return self


def get_database_settings(backend: str | None = None) -> DatabaseSettings:
    """
    Build DatabaseSettings from the environment.

    Args:
        backend: Overrides HBD_DB_BACKEND. Host, port, database, credentials
            and encryption fall back to that backend's defaults unless they
            are set explicitly in the environment.
    """
    backend = (backend or HBD_DB_BACKEND).strip().lower()
    defaults = BACKEND_DEFAULTS.get(backend, BACKEND_DEFAULTS[HAFSQL])
    try:
        port = int(os.getenv("DB_PORT", defaults["DB_PORT"]))
    except ValueError:
        raise ConfigurationError(f"DB_PORT must be an integer, got '{os.getenv('DB_PORT')}'.") from None
    return DatabaseSettings(
        backend=backend,
        host=os.getenv("DB_HOST", defaults["DB_HOST"]),
        port=port,
        database=os.getenv("DB_NAME", defaults["DB_NAME"]),
        user=os.getenv("DB_USER", defaults["DB_USER"]),
        password=os.getenv("DB_PASS", defaults["DB_PASS"]),
        pool_min=DB_POOL_MIN,
        pool_max=DB_POOL_MAX,
        connect_timeout=DB_CONNECT_TIMEOUT,
        idle_timeout=DB_IDLE_TIMEOUT,
        encrypt=_getenv_bool("DB_ENCRYPT", defaults["DB_ENCRYPT"]),
        trust_server_certificate=DB_TRUST_SERVER_CERTIFICATE,
        odbc_driver=ODBC_DRIVER,
    )
