"""Verify hierarchical Firestore data for an organization (read-only).

Exits 2 when the organization document is missing. Shape warnings are
printed but do not change the exit code.

Usage:
    uv run python -m scripts.verify_hierarchy --org-id=<ORG_ID>
"""

from __future__ import annotations

import sys
from collections.abc import Sequence

from reorg.application.dtos.reports import VerificationReport
from reorg.application.interfaces.document_store import IDocumentStore
from reorg.application.services.integrity_verifier import IntegrityVerifier
from reorg.core.config import Settings
from scripts._cli import EXIT_OK, EXIT_TENANT_MISSING, CommandParser, identifier, run_command


def build_parser() -> CommandParser:
    parser = CommandParser(
        prog="python -m scripts.verify_hierarchy",
        description="Verify an organization's hierarchical data (read-only)",
    )
    parser.add_argument("--org-id", required=True, type=identifier, help="Organization ID")
    return parser


def parse(argv: Sequence[str]) -> str:
    return build_parser().parse_args(argv).org_id


def _mark(present: bool) -> str:
    return "yes" if present else "0"


def print_report(report: VerificationReport, key_preview: int) -> None:
    print(f"\nVerifying hierarchical data for org: {report.tenant_id} ({report.tenant_name})")
    print(f"- Org users: {report.counts.get('users', 0)}")
    for sample in report.user_samples:
        print(
            f"  * {sample.name} ({sample.id}) | schedules: {_mark(sample.has_schedules)} "
            f"| leaves: {_mark(sample.has_leaves)}"
        )
    for name in ("projects", "user_groups", "work_locations"):
        print(f"- Org {name}: {report.counts.get(name, 0)}")
    if report.location_settings_count == 0:
        print("- Org location_settings: MISSING (0 docs)")
    else:
        print(
            f"- Org location_settings: {report.location_settings_count} doc(s) | "
            f"has '{report.tenant_id}' doc: {'YES' if report.has_canonical_settings else 'NO'}"
        )
        keys = report.effective_settings_keys
        more = " ..." if len(keys) > key_preview else ""
        print(
            f"  * Settings doc '{report.effective_settings_id}' keys: "
            f"{', '.join(keys[:key_preview])}{more}"
        )
    print(f"- Top-level users lookup shape OK: {'YES' if report.lookup_shape_ok else 'NO'}")
    for warning in report.warnings:
        print(f"WARNING {warning}")
    print("\nIntegrity check complete.")


async def execute(store: IDocumentStore, settings: Settings, tenant_id: str) -> int:
    verifier = IntegrityVerifier(
        store,
        user_sample_size=settings.verify_user_sample_size,
        lookup_sample_size=settings.verify_lookup_sample_size,
    )
    report = await verifier.verify(tenant_id)
    print_report(report, settings.verify_settings_key_preview)
    return EXIT_OK


def main(argv: Sequence[str] | None = None, store: IDocumentStore | None = None) -> int:
    return run_command(
        argv,
        parse,
        execute,
        store=store,
        tenant_missing_exit=EXIT_TENANT_MISSING,
    )


if __name__ == "__main__":
    sys.exit(main())
