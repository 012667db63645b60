"""
db/connection.py
----------------
Manages the database connection pool.
Uses psycopg2's ThreadedConnectionPool for HAF SQL (PostgreSQL) and
OdbcConnectionPool (SQLAlchemy's QueuePool over pyodbc) for HiveSQL
(SQL Server). The pool is created lazily
on first use and at most once per ConnectionManager.
"""

import threading
from contextlib import contextmanager
from typing import Any, Callable, Generator

import psycopg2
from psycopg2 import pool

from config import HAFSQL, HIVESQL, DatabaseSettings
from db.errors import ConfigurationError, DatabaseConnectionError
from utils.logger import get_logger

logger = get_logger(__name__)

PoolFactory = Callable[[DatabaseSettings], Any]


def _create_hafsql_pool(settings: DatabaseSettings) -> pool.ThreadedConnectionPool:
    """
    Open a psycopg2 pool against HAF SQL.

    Raises:
        DatabaseConnectionError: If the database is unreachable.
    """
    if not settings.encrypt:
        sslmode = "prefer"
    elif settings.trust_server_certificate:
        sslmode = "require"
    else:
        sslmode = "verify-full"
    try:
        return pool.ThreadedConnectionPool(
            settings.pool_min,
            settings.pool_max,
            host=settings.host,
            port=settings.port,
            dbname=settings.database,
            user=settings.user,
            password=settings.password,
            connect_timeout=settings.connect_timeout,
            sslmode=sslmode,
            application_name="hbd-savings",
        )
    except psycopg2.Error as e:
        raise DatabaseConnectionError(
            f"Could not connect to {settings.host}:{settings.port}/{settings.database}."
        ) from e


def _create_hivesql_pool(settings: DatabaseSettings):
    """
    Open an ODBC pool against HiveSQL.

    Raises:
        DatabaseConnectionError: If the database is unreachable.
    """
    # pyodbc needs the system ODBC driver manager; only load it for HiveSQL.
    import pyodbc

    from db.odbc_pool import OdbcConnectionPool

    try:
        return OdbcConnectionPool(settings, pyodbc.connect)
    except pyodbc.Error as e:
        raise DatabaseConnectionError(
            f"Could not connect to {settings.host}:{settings.port}/{settings.database}."
        ) from e


POOL_FACTORIES: dict[str, PoolFactory] = {
    HAFSQL: _create_hafsql_pool,
    HIVESQL: _create_hivesql_pool,
}


class ConnectionManager:
    """
    Holds the single shared pool for one set of DatabaseSettings.

    States:
        disconnected: no pool yet (initial, or after close()).
        connected: a pool exists and is reused by every query.
    """

    def __init__(self, settings: DatabaseSettings, pool_factory: PoolFactory | None = None):
        if settings is None:
            raise ConfigurationError("Database configuration is required to initialize the repository.")
        if not isinstance(settings, DatabaseSettings):
            raise ConfigurationError(
                f"Database configuration must be DatabaseSettings, got {type(settings).__name__}."
            )
        self.settings = settings.validate()
        self._pool_factory = pool_factory or POOL_FACTORIES[settings.backend]
        self._pool = None
        self._lock = threading.Lock()

    @property
    def is_connected(self) -> bool:
        return self._pool is not None

    def ensure_connected(self):
        """
        Return the pool, creating it on first use.

        Pool creation is serialized so concurrent first callers share one pool.
        A failed attempt leaves the manager disconnected; the next call retries.

        Raises:
            DatabaseConnectionError: If the pool could not be created.
        """
        current = self._pool
        if current is not None:
            return current
        with self._lock:
            if self._pool is None:
                try:
                    self._pool = self._pool_factory(self.settings)
                except DatabaseConnectionError as e:
                    logger.error(f"Failed to initialize database pool: {e} ({e.__cause__})")
                    raise
                logger.info(
                    f"Database connection pool initialized ({self.settings.backend} "
                    f"at {self.settings.host}:{self.settings.port})."
                )
            return self._pool

    @contextmanager
    def connection(self) -> Generator[Any, None, None]:
        """
        Borrow a pooled connection and always give it back.

        A connection whose block raised is closed rather than reused.
        """
        active_pool = self.ensure_connected()
        conn = active_pool.getconn()
        try:
            yield conn
        except BaseException:
            active_pool.putconn(conn, close=True)
            raise
        else:
            active_pool.putconn(conn)

    def close(self) -> None:
        """Close all connections in the pool."""
        with self._lock:
            if self._pool is not None:
                self._pool.closeall()
                self._pool = None
                logger.info("Database connection pool closed.")
