"""
models/savings.py
-----------------
Domain models for HBD savings activity, built from repository rows.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


def _require(row: dict[str, Any], *names: str) -> None:
    missing = [name for name in names if name not in row]
    if missing:
        raise ValueError(f"Row is missing required field(s): {', '.join(missing)}")


def _float(value: Any) -> float:
    return float(value) if value is not None else 0.0


@dataclass
class SavingsTransfer:
    """
    A single movement of HBD into or out of savings.

    Attributes:
        id: Operation id in the indexed database.
        kind: 'deposit' or 'withdrawal'.
        from_account: Account the funds came from.
        to_account: Account whose savings received (or released) the funds.
        amount: HBD amount.
        symbol: Asset symbol, always 'HBD' for these queries.
        timestamp: Block time of the operation.
        memo: Optional memo attached to the transfer.
        request_id: Withdrawal request id (withdrawals only).
    """
    id: Any
    kind: str  # 'deposit' | 'withdrawal'
    from_account: str
    to_account: str
    amount: float
    symbol: str
    timestamp: datetime
    memo: str | None = None
    request_id: int | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any], kind: str) -> "SavingsTransfer":
        _require(row, "id", "from_account", "to_account", "amount", "symbol", "timestamp")
        return cls(
            id=row["id"],
            kind=kind,
            from_account=row["from_account"],
            to_account=row["to_account"],
            amount=_float(row["amount"]),
            symbol=row["symbol"],
            timestamp=row["timestamp"],
            memo=row.get("memo") or None,
            request_id=row.get("request_id"),
        )

    def __str__(self) -> str:
        sign = "+" if self.kind == "deposit" else "-"
        return f"{self.timestamp:%Y-%m-%d} {sign}{self.amount:.3f} {self.symbol} ({self.from_account} -> {self.to_account})"


@dataclass
class InterestPayment:
    """Interest credited on an account's HBD savings."""
    id: Any
    owner: str
    interest: float
    interest_symbol: str
    timestamp: datetime
    is_saved_into_hbd_balance: bool = False

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "InterestPayment":
        _require(row, "id", "owner", "interest", "timestamp")
        return cls(
            id=row["id"],
            owner=row["owner"],
            interest=_float(row["interest"]),
            interest_symbol=row.get("interest_symbol") or "HBD",
            timestamp=row["timestamp"],
            is_saved_into_hbd_balance=bool(row.get("is_saved_into_hbd_balance")),
        )

    def __str__(self) -> str:
        return f"{self.timestamp:%Y-%m-%d} +{self.interest:.3f} {self.interest_symbol} interest"


@dataclass
class SavingsDetails:
    """
    Current balances and the interest projected since the last payment.

    Attributes:
        hbd: Liquid HBD balance.
        hbd_savings: HBD held in savings.
        last_payment_date: When interest was last paid, if ever.
        last_payment_days: Days elapsed since that payment.
        estimated_interest: Interest accrued since then, not yet paid.
    """
    hbd: float
    hbd_savings: float
    last_payment_date: datetime | None = None
    last_payment_days: int | None = None
    estimated_interest: float = 0.0

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "SavingsDetails | None":
        """Build from a savings_details projection; None for an empty one."""
        if not row:
            return None
        _require(row, "hbd", "hbd_savings")
        days = row.get("last_payment_days")
        return cls(
            hbd=_float(row["hbd"]),
            hbd_savings=_float(row["hbd_savings"]),
            last_payment_date=row.get("last_payment_date"),
            last_payment_days=int(days) if days is not None else None,
            estimated_interest=_float(row.get("estimated_interest")),
        )


@dataclass
class SavingsSummary:
    """Everything known about one account's HBD savings."""
    account: str
    interest_rate: float
    total_deposit: float
    total_withdrawal: float
    total_interest: float
    details: SavingsDetails | None = None
    deposits: list[SavingsTransfer] = field(default_factory=list)
    withdrawals: list[SavingsTransfer] = field(default_factory=list)
    interest_payments: list[InterestPayment] = field(default_factory=list)

    @property
    def net_deposited(self) -> float:
        return self.total_deposit - self.total_withdrawal
