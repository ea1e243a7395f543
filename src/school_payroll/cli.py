"""School payroll command line interface.

Provides operational tools for:
- Creating the database schema
- Generating a school's monthly payroll
- Marking a payroll row paid
- Printing a month's payroll summary

Usage:
    school-payroll init-db
    school-payroll generate --school-id X --year 2024 --month 11
    school-payroll mark-paid --school-id X --payroll-id Y [--paid-date 2024-12-01]
    school-payroll summary --school-id X --year 2024 --month 11 [--json]
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict
from datetime import date
from typing import Any, Callable
from uuid import UUID

from school_payroll.calculators.periods import month_name
from school_payroll.config import get_settings
from school_payroll.database import create_tables, dispose_db, get_session
from school_payroll.services.locking_service import PayrollLockedError
from school_payroll.services.payroll_service import (
    NoActiveSalariesError,
    PayrollService,
    PayrollSummary,
)
from school_payroll.services.state_machine import InvalidTransitionError

logger = logging.getLogger(__name__)


def parse_uuid(s: str) -> UUID:
    """Parse UUID string."""
    return UUID(s)


def parse_date(s: str) -> date:
    """Parse ISO date string."""
    return date.fromisoformat(s)


def _print_summary(summary: PayrollSummary) -> None:
    print(f"Payroll {month_name(summary.month)} {summary.year}")
    print(f"  Teachers:         {summary.teacher_count}")
    print(f"  Gross:            {summary.total_gross}")
    print(f"  Total deductions: {summary.total_deductions}")
    print(f"  Net payable:      {summary.total_net}")
    print(f"  Paid:             {summary.total_paid}")
    print(f"  Pending:          {summary.total_pending}")


class PayrollCli:
    """School payroll command line interface."""

    def __init__(self) -> None:
        self.parser = self._build_parser()

    def _build_parser(self) -> argparse.ArgumentParser:
        """Build argument parser."""
        parser = argparse.ArgumentParser(
            prog="school-payroll",
            description="Teacher payroll operations",
        )
        subparsers = parser.add_subparsers(dest="command", help="Commands")

        subparsers.add_parser("init-db", help="Create database tables")

        generate = subparsers.add_parser(
            "generate",
            help="Generate and lock payroll for a school month",
        )
        generate.add_argument("--school-id", type=parse_uuid, required=True)
        generate.add_argument("--year", type=int, required=True)
        generate.add_argument("--month", type=int, required=True, choices=range(1, 13))
        generate.add_argument(
            "--generated-by",
            type=parse_uuid,
            help="User recorded on the period lock",
        )

        mark_paid = subparsers.add_parser("mark-paid", help="Mark a payroll row paid")
        mark_paid.add_argument("--school-id", type=parse_uuid, required=True)
        mark_paid.add_argument("--payroll-id", type=parse_uuid, required=True)
        mark_paid.add_argument(
            "--paid-date",
            type=parse_date,
            help="Payment date (ISO format, default: today)",
        )

        summary = subparsers.add_parser("summary", help="Show a payroll month's totals")
        summary.add_argument("--school-id", type=parse_uuid, required=True)
        summary.add_argument("--year", type=int, required=True)
        summary.add_argument("--month", type=int, required=True, choices=range(1, 13))
        summary.add_argument("--json", action="store_true", help="Output as JSON")

        return parser

    def run(self, args: list[str] | None = None) -> int:
        """Run the CLI with given arguments."""
        parsed = self.parser.parse_args(args)

        if not parsed.command:
            self.parser.print_help()
            return 1

        # Dispatch to command handler
        handlers: dict[str, Callable[..., int]] = {
            "init-db": self._cmd_init_db,
            "generate": self._cmd_generate,
            "mark-paid": self._cmd_mark_paid,
            "summary": self._cmd_summary,
        }

        handler = handlers.get(parsed.command)
        if handler:
            return handler(parsed)

        print(f"Unknown command: {parsed.command}", file=sys.stderr)
        return 1

    def _run_async(self, coro: Any) -> int:
        """Run a command coroutine, reporting domain errors on stderr."""

        async def _wrapped() -> int:
            try:
                return await coro
            finally:
                await dispose_db()

        try:
            return asyncio.run(_wrapped())
        except (PayrollLockedError, NoActiveSalariesError, InvalidTransitionError, ValueError) as e:
            print(f"ERROR: {e}", file=sys.stderr)
            return 1

    def _cmd_init_db(self, args: argparse.Namespace) -> int:
        """Create all tables."""

        async def _init() -> int:
            await create_tables()
            print("Database tables created.")
            return 0

        return self._run_async(_init())

    def _cmd_generate(self, args: argparse.Namespace) -> int:
        """Generate payroll for a school month."""

        async def _generate() -> int:
            async with get_session() as session:
                result = await PayrollService(session).generate_payroll(
                    args.school_id,
                    args.year,
                    args.month,
                    generated_by=args.generated_by,
                )
            print(f"Generated payroll for {len(result.records)} teacher(s).")
            _print_summary(result.summary)
            return 0

        return self._run_async(_generate())

    def _cmd_mark_paid(self, args: argparse.Namespace) -> int:
        """Mark one payroll row paid."""

        async def _mark_paid() -> int:
            async with get_session() as session:
                record = await PayrollService(session).mark_paid(
                    args.school_id, args.payroll_id, args.paid_date
                )
            print(f"Payroll {record.id} marked paid on {record.paid_date.isoformat()}")
            return 0

        return self._run_async(_mark_paid())

    def _cmd_summary(self, args: argparse.Namespace) -> int:
        """Print a month's payroll totals."""

        async def _summary() -> int:
            async with get_session() as session:
                summary = await PayrollService(session).summarize(
                    args.school_id, args.year, args.month
                )
            if args.json:
                print(json.dumps(asdict(summary), default=str, indent=2))
            else:
                _print_summary(summary)
            return 0

        return self._run_async(_summary())


def main() -> int:
    """CLI entry point."""
    logging.basicConfig(
        level=get_settings().log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    cli = PayrollCli()
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())
