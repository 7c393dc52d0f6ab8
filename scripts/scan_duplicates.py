"""Scan an organization's users for duplicates grouped by email (read-only).

Usage:
    uv run python -m scripts.scan_duplicates --org-id=<ORG_ID>
"""

from __future__ import annotations

import sys
from collections.abc import Sequence

from reorg.application.interfaces.document_store import IDocumentStore
from reorg.application.services.duplicate_scanner import DuplicateScanner
from reorg.core.config import Settings
from scripts._cli import EXIT_OK, CommandParser, identifier, run_command


def build_parser() -> CommandParser:
    parser = CommandParser(
        prog="python -m scripts.scan_duplicates",
        description="Scan an organization's users for duplicate emails",
    )
    parser.add_argument("--org-id", required=True, type=identifier, help="Organization ID")
    return parser


def parse(argv: Sequence[str]) -> str:
    return build_parser().parse_args(argv).org_id


async def execute(store: IDocumentStore, settings: Settings, tenant_id: str) -> int:
    result = await DuplicateScanner(store).scan(tenant_id)
    if result.users_scanned == 0:
        print(f"No users found in organizations/{tenant_id}/users")
        return EXIT_OK
    for group in result.groups:
        print(f"\nDuplicate email '{group.email}':")
        for member in group.members:
            print(f" - {member.id} ({member.name})")
    if not result.groups:
        print("No duplicates by email found.")
    else:
        print(f"\nFound {len(result.groups)} duplicate email group(s).")
    return EXIT_OK


def main(argv: Sequence[str] | None = None, store: IDocumentStore | None = None) -> int:
    return run_command(argv, parse, execute, store=store)


if __name__ == "__main__":
    sys.exit(main())
