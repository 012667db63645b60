"""Tests for savings models, the summary report and ledger exports."""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import pandas as pd
import pytest

from models.savings import InterestPayment, SavingsDetails, SavingsTransfer
from services.export_service import LEDGER_COLUMNS, ExportService
from services.savings_service import SavingsService


@pytest.fixture
def populated_db(fake_db):
    fake_db.interest_rate = 15.0
    fake_db.add_deposit("bob", 10, memo="first", timestamp=datetime(2024, 1, 5))
    fake_db.add_deposit("bob", 2, "HIVE", timestamp=datetime(2024, 1, 6))
    fake_db.add_withdrawal("bob", 4, timestamp=datetime(2024, 2, 1))
    fake_db.add_interest("bob", 0.25, timestamp=datetime(2024, 1, 20))
    fake_db.balances["bob"] = {
        "hbd": Decimal("1.000"),
        "hbd_savings": Decimal("6.000"),
        "last_payment_date": datetime(2024, 1, 20),
        "last_payment_days": Decimal("3"),
        "estimated_interest": Decimal("0.01"),
    }
    return fake_db


class TestModels:
    def test_transfer_from_row(self):
        row = {
            "id": 7, "from_account": "bob", "to_account": "bob", "amount": Decimal("10.000"),
            "symbol": "HBD", "memo": "", "timestamp": datetime(2024, 1, 1),
        }
        transfer = SavingsTransfer.from_row(row, "deposit")
        assert transfer.amount == 10.0
        assert transfer.memo is None
        assert transfer.request_id is None
        assert str(transfer).startswith("2024-01-01 +10.000 HBD")

    def test_transfer_missing_field(self):
        with pytest.raises(ValueError, match="symbol"):
            SavingsTransfer.from_row(
                {"id": 1, "from_account": "a", "to_account": "a", "amount": 1, "timestamp": datetime.now()},
                "withdrawal",
            )

    def test_interest_payment_from_row(self):
        payment = InterestPayment.from_row({
            "id": 1, "owner": "bob", "interest": "0.123", "timestamp": datetime(2024, 1, 1),
        })
        assert payment.interest == pytest.approx(0.123)
        assert payment.interest_symbol == "HBD"
        assert payment.is_saved_into_hbd_balance is False

    def test_empty_details_become_none(self):
        assert SavingsDetails.from_row({}) is None

    def test_details_from_row(self):
        details = SavingsDetails.from_row({"hbd": 1, "hbd_savings": 2, "last_payment_days": Decimal("4")})
        assert details.last_payment_days == 4
        assert details.last_payment_date is None
        assert details.estimated_interest == 0.0


class TestSavingsService:
    def test_summary(self, repo, populated_db):
        summary = SavingsService(repo).get_summary(" Bob ")

        assert summary.account == "bob"
        assert summary.interest_rate == 15.0
        assert summary.total_deposit == 10
        assert summary.total_withdrawal == 4
        assert summary.net_deposited == 6
        assert summary.total_interest == 0.25
        assert [d.amount for d in summary.deposits] == [10.0]
        assert [w.kind for w in summary.withdrawals] == ["withdrawal"]
        assert summary.interest_payments[0].owner == "bob"
        assert summary.details.hbd_savings == 6.0

    def test_summary_for_unknown_account(self, repo, fake_db):
        summary = SavingsService(repo).get_summary("ghost")
        assert summary.total_deposit == summary.total_withdrawal == summary.total_interest == 0
        assert summary.details is None
        assert summary.deposits == summary.withdrawals == summary.interest_payments == []

    def test_format_summary(self, repo, populated_db):
        text = SavingsService(repo).format_summary("bob")
        assert "HBD savings for @bob" in text
        assert "15.00%" in text
        assert "Net deposited:     6.000 HBD" in text
        assert "2024-01-20 (3 days ago)" in text

    def test_render_summary_does_not_query(self, repo, populated_db):
        service = SavingsService(repo)
        summary = service.get_summary("bob")
        executed = len(populated_db.executed)
        assert service.render_summary(summary) == service.format_summary("bob")
        assert len(populated_db.executed) == executed + 8

    def test_format_summary_unknown_account(self, repo, fake_db):
        text = SavingsService(repo).format_summary("ghost")
        assert "Account not found" in text


class TestExportService:
    def test_csv_ledger(self, repo, populated_db):
        buffer = ExportService().export_ledger_csv(SavingsService(repo).get_summary("bob"))
        df = pd.read_csv(buffer)
        assert list(df.columns) == LEDGER_COLUMNS
        assert list(df["kind"]) == ["deposit", "interest", "withdrawal"]
        assert list(df["amount"]) == [10.0, 0.25, 4.0]

    def test_csv_ledger_empty_account(self, repo, fake_db):
        df = pd.read_csv(ExportService().export_ledger_csv(SavingsService(repo).get_summary("ghost")))
        assert list(df.columns) == LEDGER_COLUMNS
        assert df.empty

    def test_excel_ledger(self, repo, populated_db):
        pytest.importorskip("openpyxl")
        buffer = ExportService().export_ledger_excel(SavingsService(repo).get_summary("bob"))
        sheets = pd.read_excel(buffer, sheet_name=None)
        assert set(sheets) == {"Ledger", "Totals"}
        totals = dict(zip(sheets["Totals"]["kind"], sheets["Totals"]["total"]))
        assert totals == {"deposit": 10.0, "interest": 0.25, "withdrawal": 4.0}
