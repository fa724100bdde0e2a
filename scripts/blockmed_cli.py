#!/usr/bin/env python3
"""
Drive the BlockMed record ledger from a terminal.

Usage:
    python scripts/blockmed_cli.py whoami
    python scripts/blockmed_cli.py fetch 42
    python scripts/blockmed_cli.py add 42 --name "Jane Roe" --diagnosis Flu --treatment Rest
    python scripts/blockmed_cli.py authorize 0xProviderAddress
"""
from __future__ import annotations

import argparse
import dataclasses
import sys

from blockmed.app.config import settings
from blockmed.app.domain.models import OutcomeKind, Record
from blockmed.app.logging_config import setup_logging
from blockmed.app.main import build_controller
from blockmed.app.services.outcomes import OutcomeSink

RESET = "\033[0m"
GREEN = "\033[32m"
RED = "\033[31m"


class ConsoleSink(OutcomeSink):
    def notify(self, kind, message, *, command="", account=None) -> None:
        if kind is OutcomeKind.SUCCESS:
            print(f"{GREEN}✓ {message}{RESET}")
        else:
            print(f"{RED}✗ {message}{RESET}", file=sys.stderr)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="BlockMed patient record ledger client.")
    parser.add_argument("--rpc-url", default=settings.rpc_url, help="ledger node JSON-RPC URL")
    parser.add_argument("--contract", default=settings.contract_address, help="contract address")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("whoami", help="show the connected account and its role")

    fetch = sub.add_parser("fetch", help="list records for a patient")
    fetch.add_argument("patient_id")

    add = sub.add_parser("add", help="add a record for a patient")
    add.add_argument("patient_id")
    add.add_argument("--name", default="")
    add.add_argument("--diagnosis", default="")
    add.add_argument("--treatment", default="")

    authorize = sub.add_parser("authorize", help="grant a provider write access (owner only)")
    authorize.add_argument("address")
    return parser.parse_args(argv)


def print_records(records: list[Record]) -> None:
    if not records:
        print("No records found.")
        return
    for record in records:
        print(f"#{record.record_id}  {record.patient_name}  ({record.recorded_at:%Y-%m-%d %H:%M:%S} UTC)")
        print(f"    diagnosis: {record.diagnosis}")
        print(f"    treatment: {record.treatment}")


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging(settings.log_level, settings.log_format)
    cfg = dataclasses.replace(settings, rpc_url=args.rpc_url, contract_address=args.contract)
    controller = build_controller(cfg, ConsoleSink())

    if not controller.connect().ok:
        return 1

    if args.command == "whoami":
        session = controller.session
        print(f"account: {session.account}")
        print(f"owner:   {'yes' if session.is_owner else 'no'}")
        return 0
    if args.command == "fetch":
        outcome = controller.fetch_records(args.patient_id)
        if outcome.ok:
            print_records(outcome.records)
    elif args.command == "add":
        outcome = controller.add_record(
            args.patient_id,
            name=args.name,
            diagnosis=args.diagnosis,
            treatment=args.treatment,
        )
        if outcome.ok:
            print_records(outcome.records)
    else:
        outcome = controller.authorize_provider(args.address)
    return 0 if outcome.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
