"""
db/odbc_pool.py
---------------
Connection pooling for the HiveSQL (SQL Server) backend.
Wraps SQLAlchemy's QueuePool behind the getconn / putconn / closeall
interface of psycopg2's pools, so the ConnectionManager can treat both
backends alike.
"""

from typing import Any, Callable

from sqlalchemy import event, exc
from sqlalchemy.pool import QueuePool

from config import DatabaseSettings
from utils.logger import get_logger

logger = get_logger(__name__)


def build_connection_string(settings: DatabaseSettings) -> str:
    """Build an ODBC connection string for SQL Server from the settings."""
    parts = [
        f"DRIVER={{{settings.odbc_driver}}}",
        f"SERVER={settings.host},{settings.port}",
        f"DATABASE={settings.database}",
        f"UID={settings.user}",
        f"PWD={settings.password}",
        f"Encrypt={'yes' if settings.encrypt else 'no'}",
        f"TrustServerCertificate={'yes' if settings.trust_server_certificate else 'no'}",
    ]
    return ";".join(parts) + ";"


def _ping(dbapi_connection, connection_record, connection_proxy) -> None:
    """Checkout hook: a connection that cannot run SELECT 1 is replaced."""
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("SELECT 1")
    except Exception as e:
        logger.warning(f"Discarding broken ODBC connection: {e}")
        raise exc.DisconnectionError() from e
    finally:
        cursor.close()


class OdbcConnectionPool:
    """
    Pool of read-only ODBC connections.

    Connections are checked with SELECT 1 on every checkout and recycled
    after ``idle_timeout`` seconds. At most ``pool_max`` connections are out
    at once; a further borrower waits up to ``connect_timeout`` seconds and
    then gets ``sqlalchemy.exc.TimeoutError``.
    """

    def __init__(self, settings: DatabaseSettings, connect: Callable[..., Any]):
        dsn = build_connection_string(settings)
        self._pool = QueuePool(
            lambda: connect(dsn, timeout=settings.connect_timeout, readonly=True),
            pool_size=settings.pool_max,
            max_overflow=0,
            timeout=settings.connect_timeout,
            recycle=settings.idle_timeout,
        )
        event.listen(self._pool, "checkout", _ping)
        self.closed = False

        # Open pool_min connections up front so a bad DSN fails here.
        opened = [self._pool.connect() for _ in range(settings.pool_min)]
        for conn in opened:
            conn.close()

    def getconn(self):
        """Borrow a connection."""
        if self.closed:
            raise RuntimeError("Connection pool is closed.")
        return self._pool.connect()

    def putconn(self, conn, close: bool = False) -> None:
        """
        Return a borrowed connection.

        With ``close=True`` (or after closeall) the underlying connection is
        closed instead of being kept for reuse.
        """
        if close or self.closed:
            conn.invalidate()
        else:
            conn.close()

    def closeall(self) -> None:
        """Close every idle connection and refuse further borrowing."""
        self.closed = True
        self._pool.dispose()
