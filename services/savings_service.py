"""
services/savings_service.py
---------------------------
Business logic for HBD savings reports.
Turns repository rows into domain models and readable summaries.
"""

from models.savings import InterestPayment, SavingsDetails, SavingsSummary, SavingsTransfer
from repositories.hbd_repo import HBDRepository, normalize_account
from utils.logger import get_logger

logger = get_logger(__name__)


class SavingsService:
    """Builds savings summaries for Hive accounts."""

    def __init__(self, repo: HBDRepository):
        self.repo = repo

    def get_summary(self, account: str) -> SavingsSummary:
        """
        Collect every savings figure for one account.

        Args:
            account: Hive account name.

        Returns:
            A SavingsSummary; an unknown account yields zero totals,
            empty histories and no details.
        """
        summary = SavingsSummary(
            account=normalize_account(account),
            interest_rate=self.repo.interest_rate(),
            total_deposit=self.repo.total_deposit(account),
            total_withdrawal=self.repo.total_withdrawal(account),
            total_interest=self.repo.total_interest(account),
            details=SavingsDetails.from_row(self.repo.savings_details(account)),
            deposits=[SavingsTransfer.from_row(r, "deposit") for r in self.repo.deposits(account)],
            withdrawals=[SavingsTransfer.from_row(r, "withdrawal") for r in self.repo.withdrawals(account)],
            interest_payments=[InterestPayment.from_row(r) for r in self.repo.interest_payments(account)],
        )
        logger.info(
            f"Built savings summary for @{summary.account}: "
            f"{len(summary.deposits)} deposits, {len(summary.withdrawals)} withdrawals, "
            f"{len(summary.interest_payments)} interest payments"
        )
        return summary

    def format_summary(self, account: str) -> str:
        """Plain-text savings report for one account."""
        return self.render_summary(self.get_summary(account))

    @staticmethod
    def render_summary(s: SavingsSummary) -> str:
        """Plain-text report for an already built summary."""
        lines = [
            f"HBD savings for @{s.account}",
            f"  Interest rate:     {s.interest_rate:.2f}%",
            f"  Total deposited:   {s.total_deposit:.3f} HBD ({len(s.deposits)} transfers)",
            f"  Total withdrawn:   {s.total_withdrawal:.3f} HBD ({len(s.withdrawals)} transfers)",
            f"  Net deposited:     {s.net_deposited:.3f} HBD",
            f"  Interest earned:   {s.total_interest:.3f} HBD ({len(s.interest_payments)} payments)",
        ]
        if s.details is None:
            lines.append("  Account not found in the balances table.")
            return "\n".join(lines)

        d = s.details
        lines += [
            f"  Liquid balance:    {d.hbd:.3f} HBD",
            f"  Savings balance:   {d.hbd_savings:.3f} HBD",
        ]
        if d.last_payment_date is not None:
            lines.append(f"  Last interest:     {d.last_payment_date:%Y-%m-%d} ({d.last_payment_days} days ago)")
        else:
            lines.append("  Last interest:     never")
        lines.append(f"  Estimated accrued: {d.estimated_interest:.3f} HBD")
        return "\n".join(lines)
