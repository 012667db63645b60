"""
services/export_service.py
---------------------------
Generates CSV and Excel exports of an account's HBD savings ledger.
"""

import io

import pandas as pd

from models.savings import SavingsSummary
from utils.logger import get_logger

logger = get_logger(__name__)

LEDGER_COLUMNS = ["timestamp", "kind", "amount", "symbol", "from_account", "to_account", "memo"]


class ExportService:
    """Generates downloadable savings ledgers in CSV and Excel formats from a SavingsSummary."""

    @staticmethod
    def _ledger(summary: SavingsSummary) -> pd.DataFrame:
        """Deposits, withdrawals and interest payments merged in time order."""
        data = [
            {
                "timestamp": t.timestamp,
                "kind": t.kind,
                "amount": t.amount,
                "symbol": t.symbol,
                "from_account": t.from_account,
                "to_account": t.to_account,
                "memo": t.memo or "",
            }
            for t in summary.deposits + summary.withdrawals
        ]
        data += [
            {
                "timestamp": p.timestamp,
                "kind": "interest",
                "amount": p.interest,
                "symbol": p.interest_symbol,
                "from_account": "",
                "to_account": p.owner,
                "memo": "",
            }
            for p in summary.interest_payments
        ]
        df = pd.DataFrame(data, columns=LEDGER_COLUMNS)
        if not df.empty:
            df = df.sort_values("timestamp", kind="stable").reset_index(drop=True)
        return df

    def export_ledger_csv(self, summary: SavingsSummary) -> io.BytesIO:
        """
        Export the account's savings ledger as a CSV file.

        Args:
            summary: The account summary built by SavingsService.

        Returns:
            A BytesIO buffer containing the CSV data.
        """
        df = self._ledger(summary)
        buffer = io.BytesIO()
        df.to_csv(buffer, index=False, encoding="utf-8")
        buffer.seek(0)
        logger.info(f"Exported {len(df)} ledger rows as CSV for @{summary.account}")
        return buffer

    def export_ledger_excel(self, summary: SavingsSummary) -> io.BytesIO:
        """
        Export the account's savings ledger as an Excel (.xlsx) file,
        with a second sheet of totals per kind.

        Args:
            summary: The account summary built by SavingsService.

        Returns:
            A BytesIO buffer containing the Excel data.
        """
        df = self._ledger(summary)
        # Excel cannot store timezone-aware datetimes.
        if isinstance(df["timestamp"].dtype, pd.DatetimeTZDtype):
            df["timestamp"] = df["timestamp"].dt.tz_localize(None)

        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
            df.to_excel(writer, sheet_name="Ledger", index=False)

            if not df.empty:
                totals = df.groupby("kind")["amount"].sum().reset_index()
                totals.columns = ["kind", "total"]
                totals.to_excel(writer, sheet_name="Totals", index=False)

        buffer.seek(0)
        logger.info(f"Exported {len(df)} ledger rows as Excel for @{summary.account}")
        return buffer
