"""Migrate an organization's flat collections to the hierarchical structure.

    organizations/{orgId}/
        users/{userId}/schedules/{scheduleId}
        users/{userId}/leaves/{leaveId}
        projects/{projectId}
        location_settings/{settingId}
        work_locations/{locationId}
        user_groups/{groupId}

Flat documents are selected by organizationId == orgId. The flat
users/{userId} document is kept as a lookup entry
{ organizationId, userId, email }. Safe to re-run.

Usage:
    uv run python -m scripts.migrate_to_hierarchy --org-id=<ORG_ID> [--dry-run]
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence

from reorg.application.interfaces.document_store import IDocumentStore
from reorg.application.use_cases.reorg_planner import ReorgPlanner
from reorg.core.config import Settings
from scripts._cli import EXIT_OK, CommandParser, identifier, print_plan, run_command

NEXT_STEPS = (
    "Verify data (python -m scripts.verify_hierarchy --org-id=...)",
    "Deploy the new Firestore security rules",
    "Update and deploy the client app",
    "Test thoroughly",
    "Delete old top-level collections after verification",
)


def build_parser() -> CommandParser:
    parser = CommandParser(
        prog="python -m scripts.migrate_to_hierarchy",
        description="Migrate an organization's flat collections to the hierarchical structure",
    )
    parser.add_argument("--org-id", required=True, type=identifier, help="Organization ID")
    parser.add_argument("--dry-run", action="store_true", help="Report the plan without writing")
    return parser


def parse(argv: Sequence[str]) -> argparse.Namespace:
    return build_parser().parse_args(argv)


async def execute(store: IDocumentStore, settings: Settings, args: argparse.Namespace) -> int:
    dry_run = args.dry_run
    planner = ReorgPlanner(store, batch_size=settings.batch_size)
    plan = await planner.migrate_to_hierarchy(args.org_id, dry_run=dry_run)

    total = sum(plan.counts.values())
    print("=" * 60)
    for collection, count in plan.counts.items():
        print(f"{collection}: {count}")
    if dry_run:
        print(f"DRY RUN COMPLETE - Would migrate {total} total documents")
        print_plan(plan)
        print("Run without --dry-run to perform the migration.")
    else:
        print(f"MIGRATION COMPLETE - Migrated {total} total documents")
        print("Next steps:")
        for number, step in enumerate(NEXT_STEPS, start=1):
            print(f"{number}. {step}")
    print("=" * 60)
    return EXIT_OK


def main(argv: Sequence[str] | None = None, store: IDocumentStore | None = None) -> int:
    return run_command(argv, parse, execute, store=store)


if __name__ == "__main__":
    sys.exit(main())
