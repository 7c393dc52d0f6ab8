"""Copy location_settings/{orgId} to organizations/{orgId}/location_settings/{orgId}.

Use when the organization's settings document has no organizationId field
and was therefore skipped by migrate_to_hierarchy. The copy is a merge
that also stamps organizationId and migratedAt (server time).

Usage:
    uv run python -m scripts.migrate_location_settings --org-id=<ORG_ID> [--dry-run]
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence

from reorg.application.interfaces.document_store import IDocumentStore
from reorg.application.use_cases.reorg_planner import ReorgPlanner
from reorg.core.config import Settings
from scripts._cli import EXIT_OK, CommandParser, identifier, print_plan, run_command


def build_parser() -> CommandParser:
    parser = CommandParser(
        prog="python -m scripts.migrate_location_settings",
        description="Copy location_settings/{orgId} under the organization",
    )
    parser.add_argument("--org-id", required=True, type=identifier, help="Organization ID")
    parser.add_argument("--dry-run", action="store_true", help="Report the plan without writing")
    return parser


def parse(argv: Sequence[str]) -> argparse.Namespace:
    return build_parser().parse_args(argv)


async def execute(store: IDocumentStore, settings: Settings, args: argparse.Namespace) -> int:
    planner = ReorgPlanner(store, batch_size=settings.batch_size)
    plan = await planner.migrate_location_settings(
        args.org_id, dry_run=args.dry_run
    )
    print_plan(plan)
    return EXIT_OK


def main(argv: Sequence[str] | None = None, store: IDocumentStore | None = None) -> int:
    return run_command(argv, parse, execute, store=store)


if __name__ == "__main__":
    sys.exit(main())
