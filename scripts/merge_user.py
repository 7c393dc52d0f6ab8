"""Merge a flat users/{source} document into users/{target}.

Top-level fields are merged (source wins, target-only fields kept) and
every nested collection is copied doc-by-doc. Unless --no-delete is
given, the source's nested documents and the source document are then
deleted.

Usage:
    uv run python -m scripts.merge_user <SOURCE_USER_ID> <TARGET_USER_ID> [--dry-run] [--no-delete]
"""

from __future__ import annotations

import sys
from collections.abc import Sequence

from reorg.application.dtos.plan import MergeOperation
from reorg.application.interfaces.document_store import IDocumentStore
from reorg.application.use_cases.reorg_planner import ReorgPlanner
from reorg.core.config import Settings
from scripts._cli import EXIT_OK, CommandParser, identifier, print_plan, run_command


def build_parser() -> CommandParser:
    parser = CommandParser(
        prog="python -m scripts.merge_user",
        description="Merge flat users/{source} into users/{target}",
    )
    parser.add_argument("source", type=identifier, help="User ID to merge from")
    parser.add_argument("target", type=identifier, help="User ID to merge into")
    parser.add_argument("--dry-run", action="store_true", help="Report the plan without writing")
    parser.add_argument(
        "--no-delete", action="store_true", help="Keep the source user after copying"
    )
    return parser


def parse(argv: Sequence[str]) -> MergeOperation:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        return MergeOperation(
            source_user_id=args.source,
            target_user_id=args.target,
            dry_run=args.dry_run,
            delete_source=not args.no_delete,
        )
    except ValueError as e:
        parser.error(str(e))


async def execute(store: IDocumentStore, settings: Settings, op: MergeOperation) -> int:
    planner = ReorgPlanner(store, batch_size=settings.batch_size)
    print_plan(await planner.merge_user(op))
    print("Done.")
    return EXIT_OK


def main(argv: Sequence[str] | None = None, store: IDocumentStore | None = None) -> int:
    return run_command(argv, parse, execute, store=store)


if __name__ == "__main__":
    sys.exit(main())
