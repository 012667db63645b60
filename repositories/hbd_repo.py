"""
repositories/hbd_repo.py
------------------------
Data access layer for HBD savings.
All read queries against the indexed Hive database go through
HBDRepository, which shares one lazily created connection pool.
"""

import threading
from typing import Any

from config import HAFSQL, HIVESQL, DatabaseSettings
from db.connection import ConnectionManager, PoolFactory
from db.errors import QueryExecutionError
from repositories.hafsql_queries import HAFSQL_DIALECT
from repositories.hivesql_queries import HIVESQL_DIALECT
from repositories.query_template import QueryTemplate, SqlDialect
from utils.logger import get_logger

logger = get_logger(__name__)

Row = dict[str, Any]

DIALECTS: dict[str, SqlDialect] = {
    HAFSQL: HAFSQL_DIALECT,
    HIVESQL: HIVESQL_DIALECT,
}


def normalize_account(account: str) -> str:
    """Hive account names are lower-case; reject blanks before any I/O."""
    if not isinstance(account, str) or not account.strip():
        raise ValueError(f"Account name must be a non-empty string, got {account!r}.")
    return account.strip().lower()


def _scalar(rows: list[Row]) -> float:
    """First column of the first row, or 0 when there is no row or it is NULL."""
    if not rows:
        return 0
    value = next(iter(rows[0].values()), None)
    return float(value) if value is not None else 0


def _first_row(rows: list[Row]) -> Row:
    return dict(rows[0]) if rows else {}


class HBDRepository:
    """
    Read-only queries over HBD savings activity for a Hive account.

    Every operation may raise DatabaseConnectionError (pool could not be
    created) or QueryExecutionError (the statement failed). An account with
    no data is not an error: lists come back empty, totals as 0 and the
    savings projection as an empty dict.
    """

    def __init__(self, settings: DatabaseSettings, pool_factory: PoolFactory | None = None):
        self.db = ConnectionManager(settings, pool_factory)
        self.dialect = DIALECTS[self.db.settings.backend]

    # ── CONNECTION ────────────────────────────────────────

    def get_connection(self):
        """Return the shared pool, connecting first if needed."""
        return self.db.ensure_connected()

    def close(self) -> None:
        self.db.close()

    # ── QUERY EXECUTION ───────────────────────────────────

    def execute(self, sql: str, params: tuple = ()) -> list[Row]:
        """
        Run a statement and return its rows as dicts, unchanged.

        Args:
            sql: A fixed query template.
            params: Values bound positionally to the template's placeholders.

        Returns:
            List of {column: value} dicts, possibly empty.

        Raises:
            DatabaseConnectionError: If the pool could not be created.
            QueryExecutionError: If the statement failed to bind or execute.
        """
        self.db.ensure_connected()
        try:
            with self.db.connection() as conn:
                with conn.cursor() as cur:
                    if params:
                        cur.execute(sql, params)
                    else:
                        cur.execute(sql)
                    columns = [d[0] for d in (cur.description or [])]
                    rows = [dict(zip(columns, r)) for r in cur.fetchall()]
        except Exception as e:
            logger.error(f"Query execution failed: {e}")
            raise QueryExecutionError() from None
        logger.debug(f"Query returned {len(rows)} row(s).")
        return rows

    def run(self, template: QueryTemplate, **arguments: Any) -> list[Row]:
        """Bind named arguments in the template's placeholder order and execute."""
        return self.execute(template.sql, template.bind(**arguments))

    # ── TRANSACTIONS ──────────────────────────────────────

    def deposits(self, account: str) -> list[Row]:
        """
        All HBD transfers to savings involving the account, oldest first.

        Returns:
            Rows with id, from_account, to_account, amount, symbol, memo, timestamp.
        """
        return self.run(self.dialect.deposits, account=normalize_account(account))

    def withdrawals(self, account: str) -> list[Row]:
        """
        All completed HBD withdrawals from savings for the account, oldest first.

        Returns:
            Rows with id, from_account, to_account, request_id, amount, symbol,
            memo, timestamp.
        """
        return self.run(self.dialect.withdrawals, account=normalize_account(account))

    def interest_payments(self, account: str) -> list[Row]:
        """
        Interest paid on the account's HBD savings, oldest first.

        Returns:
            Rows with id, owner, interest, interest_symbol,
            is_saved_into_hbd_balance, timestamp.
        """
        return self.run(self.dialect.interest_payments, account=normalize_account(account))

    # ── TOTALS ────────────────────────────────────────────

    def total_deposit(self, account: str) -> float:
        """Sum of HBD moved into savings, 0 if none."""
        return _scalar(self.run(self.dialect.total_deposit, account=normalize_account(account)))

    def total_withdrawal(self, account: str) -> float:
        """Sum of HBD withdrawn from savings, 0 if none."""
        return _scalar(self.run(self.dialect.total_withdrawal, account=normalize_account(account)))

    def total_interest(self, account: str) -> float:
        """Sum of interest paid to the account, 0 if none."""
        return _scalar(self.run(self.dialect.total_interest, account=normalize_account(account)))

    def interest_rate(self) -> float:
        """Current HBD savings interest rate in percent, 0 if unknown."""
        return _scalar(self.run(self.dialect.interest_rate))

    # ── ACCOUNT ───────────────────────────────────────────

    def savings_details(self, account: str) -> Row:
        """
        Balances and interest projection for the account.

        Returns:
            Dict with hbd, hbd_savings, last_payment_date, last_payment_days
            and estimated_interest; empty dict if the account is unknown.
        """
        return _first_row(self.run(self.dialect.savings_details, account=normalize_account(account)))


# -- process-wide instance -----------------------------------------------------

_repository: HBDRepository | None = None
_repository_lock = threading.Lock()


def get_hbd_repository(
    settings: DatabaseSettings | None = None,
    pool_factory: PoolFactory | None = None,
) -> HBDRepository:
    """
    Return the process-wide HBDRepository, creating it on the first call.

    The arguments are only used on that first call; later calls return the
    existing instance unchanged. Use config.get_database_settings() to build
    settings from the environment.

    Raises:
        ConfigurationError: If the first call has no settings or invalid ones.
    """
    global _repository
    with _repository_lock:
        if _repository is None:
            _repository = HBDRepository(settings, pool_factory)
        return _repository


def reset_hbd_repository() -> None:
    """Close and discard the process-wide instance (useful in tests)."""
    global _repository
    with _repository_lock:
        if _repository is not None:
            _repository.close()
            _repository = None
