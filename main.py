"""
main.py
-------
Command-line entry point for the HBD savings reader.

Responsibilities:
    - Load database settings from the environment (optionally overriding the backend).
    - Print the savings report for one Hive account.
    - Optionally write the account's savings ledger as CSV and/or Excel.

Usage:
    python main.py ACCOUNT [--backend hafsql|hivesql] [--csv PATH] [--excel PATH]
"""

import argparse
import sys
from pathlib import Path

from config import BACKENDS, get_database_settings
from db.errors import HBDError
from repositories.hbd_repo import get_hbd_repository, reset_hbd_repository
from services.export_service import ExportService
from services.savings_service import SavingsService
from utils.logger import get_logger

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Report HBD savings activity for a Hive account.")
    parser.add_argument("account", help="Hive account name, without the @")
    parser.add_argument("--backend", choices=BACKENDS, help="Override HBD_DB_BACKEND")
    parser.add_argument("--csv", type=Path, metavar="PATH", help="Write the savings ledger as CSV")
    parser.add_argument("--excel", type=Path, metavar="PATH", help="Write the savings ledger as .xlsx")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the report and return the process exit code."""
    args = build_parser().parse_args(argv)

    # ── 1. Database setup ─────────────────────────────────
    try:
        settings = get_database_settings(args.backend)
        repo = get_hbd_repository(settings)

        # ── 2. Report ─────────────────────────────────────
        summary = SavingsService(repo).get_summary(args.account)
        print(SavingsService.render_summary(summary))

        # ── 3. Exports ────────────────────────────────────
        exporter = ExportService()
        if args.csv:
            args.csv.write_bytes(exporter.export_ledger_csv(summary).getvalue())
            logger.info(f"Ledger written to {args.csv}")
        if args.excel:
            args.excel.write_bytes(exporter.export_ledger_excel(summary).getvalue())
            logger.info(f"Ledger written to {args.excel}")
    except (HBDError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    finally:
        # ── 4. Cleanup ────────────────────────────────────
        reset_hbd_repository()
    return 0


if __name__ == "__main__":
    sys.exit(main())
