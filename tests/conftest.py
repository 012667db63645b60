"""Pytest configuration and shared fixtures."""
from __future__ import annotations

import sys
import threading
import time
from datetime import datetime
from pathlib import Path
from typing import Any

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from config import DatabaseSettings
from db.errors import DatabaseConnectionError
from repositories.hbd_repo import HBDRepository, reset_hbd_repository


def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "live_db: mark test as requiring the public HAF SQL server")


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--live-db",
        action="store_true",
        default=False,
        help="Run tests that query the public HAF SQL server",
    )


def pytest_collection_modifyitems(config, items):
    """Skip live_db tests unless --live-db flag is provided."""
    if config.getoption("--live-db"):
        return

    skip_live = pytest.mark.skip(reason="Need --live-db option to run")
    for item in items:
        if "live_db" in item.keywords:
            item.add_marker(skip_live)


# -- in-memory stand-in for the indexed database ---------------------------------


class FakeDatabase:
    """
    Serves canned savings data to FakeCursor.

    Dispatches on the table a statement reads and filters rows by the bound
    account. The HBD filter is only applied when the statement itself
    contains one, so tests observe what the SQL asks for.
    """

    def __init__(self):
        self.deposits: list[dict[str, Any]] = []
        self.withdrawals: list[dict[str, Any]] = []
        self.interests: list[dict[str, Any]] = []
        self.balances: dict[str, dict[str, Any]] = {}
        self.interest_rate: float | None = None

        self.executed: list[tuple[str, tuple]] = []
        self.pools_created = 0
        self.pools: list[FakePool] = []
        self.connect_error: Exception | None = None
        self.execute_error: Exception | None = None
        self.connect_delay = 0.0
        self._lock = threading.Lock()

    # -- fixture data helpers --

    def add_deposit(self, account: str, amount: float, symbol: str = "HBD", **extra) -> None:
        self.deposits.append({
            "id": len(self.deposits) + 1,
            "from_account": extra.pop("from_account", account),
            "to_account": extra.pop("to_account", account),
            "amount": amount,
            "symbol": symbol,
            "memo": extra.pop("memo", ""),
            "timestamp": extra.pop("timestamp", datetime(2024, 1, 1 + len(self.deposits))),
            **extra,
        })

    def add_withdrawal(self, account: str, amount: float, symbol: str = "HBD", **extra) -> None:
        self.withdrawals.append({
            "id": len(self.withdrawals) + 1,
            "from_account": account,
            "to_account": extra.pop("to_account", account),
            "request_id": len(self.withdrawals) + 100,
            "amount": amount,
            "symbol": symbol,
            "memo": "",
            "timestamp": extra.pop("timestamp", datetime(2024, 2, 1 + len(self.withdrawals))),
            **extra,
        })

    def add_interest(self, owner: str, interest: float, **extra) -> None:
        self.interests.append({
            "id": len(self.interests) + 1,
            "owner": owner,
            "interest": interest,
            "interest_symbol": "HBD",
            "is_saved_into_hbd_balance": True,
            "timestamp": extra.pop("timestamp", datetime(2024, 3, 1 + len(self.interests))),
            **extra,
        })

    # -- driver side --

    def pool_factory(self, settings: DatabaseSettings) -> "FakePool":
        if self.connect_delay:
            time.sleep(self.connect_delay)
        with self._lock:
            self.pools_created += 1
        if self.connect_error is not None:
            raise DatabaseConnectionError("Could not connect to fake database.") from self.connect_error
        fake_pool = FakePool(self)
        self.pools.append(fake_pool)
        return fake_pool

    def answer(self, sql: str, params: tuple) -> tuple[list[str], list[tuple]]:
        account = params[0] if params else None
        hbd_only = "'HBD'" in sql

        if "hafsql.balances" in sql or "FROM Accounts" in sql:
            row = self.balances.get(account)
            columns = ["hbd", "hbd_savings", "last_payment_date", "last_payment_days", "estimated_interest"]
            return columns, ([tuple(row.get(c) for c in columns)] if row else [])

        if "dynamic_global_properties" in sql or "DynamicGlobalProperties" in sql:
            if self.interest_rate is None:
                return ["hbd_interest"], []
            return ["hbd_interest"], [(self.interest_rate,)]

        if "transfer_to_savings" in sql:
            source = [r for r in self.deposits if account in (r["from_account"], r["to_account"])]
            field = "amount"
        elif "fill_transfer_from_savings" in sql or "VOFillTransferFromSavings" in sql:
            source = [r for r in self.withdrawals if r["from_account"] == account
                      or (" OR " in sql and r["to_account"] == account)]
            field = "amount"
        elif "operation_interest_table" in sql or "VOInterests" in sql:
            source = [r for r in self.interests if r["owner"] == account]
            field = "interest"
        else:
            raise AssertionError(f"FakeDatabase cannot answer: {sql}")

        if hbd_only:
            source = [r for r in source if r.get("symbol", "HBD") == "HBD"]

        if "SUM(" in sql:
            total = sum(r[field] for r in source) if source else None
            return ["total"], [(total,)]

        source = sorted(source, key=lambda r: r["timestamp"])
        columns = list(source[0].keys()) if source else ["id"]
        return columns, [tuple(r.get(c) for c in columns) for r in source]


class FakeCursor:
    def __init__(self, db: FakeDatabase):
        self.db = db
        self.description = None
        self._rows: list[tuple] = []

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def execute(self, sql: str, params: tuple = ()) -> None:
        self.db.executed.append((sql, tuple(params)))
        if self.db.execute_error is not None:
            raise self.db.execute_error
        columns, self._rows = self.db.answer(sql, tuple(params))
        self.description = [(c, None, None, None, None, None, None) for c in columns]

    def fetchall(self) -> list[tuple]:
        return list(self._rows)


class FakeConnection:
    def __init__(self, db: FakeDatabase):
        self.db = db

    def cursor(self) -> FakeCursor:
        return FakeCursor(self.db)


class FakePool:
    def __init__(self, db: FakeDatabase):
        self.db = db
        self.borrowed = 0
        self.returned = 0
        self.discarded = 0
        self.closed = False

    def getconn(self) -> FakeConnection:
        self.borrowed += 1
        return FakeConnection(self.db)

    def putconn(self, conn: FakeConnection, close: bool = False) -> None:
        self.returned += 1
        if close:
            self.discarded += 1

    def closeall(self) -> None:
        self.closed = True


# -- fixtures --------------------------------------------------------------------


@pytest.fixture
def settings() -> DatabaseSettings:
    return DatabaseSettings(
        backend="hafsql",
        host="localhost",
        port=5432,
        database="haf_block_log",
        user="tester",
        password="secret",
    )


@pytest.fixture
def hivesql_settings() -> DatabaseSettings:
    return DatabaseSettings(
        backend="hivesql",
        host="localhost",
        port=1433,
        database="DBHive",
        user="tester",
        password="secret",
        encrypt=True,
    )


@pytest.fixture
def fake_db() -> FakeDatabase:
    return FakeDatabase()


@pytest.fixture
def repo(settings, fake_db) -> HBDRepository:
    repository = HBDRepository(settings, pool_factory=fake_db.pool_factory)
    yield repository
    repository.close()


@pytest.fixture(autouse=True)
def _reset_singleton():
    yield
    reset_hbd_repository()


@pytest.fixture
def clean_env(monkeypatch):
    """Environment without database overrides, on the hafsql backend."""
    for name in ("DB_HOST", "DB_PORT", "DB_NAME", "DB_USER", "DB_PASS", "DB_ENCRYPT"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("config.HBD_DB_BACKEND", "hafsql")
    return monkeypatch
