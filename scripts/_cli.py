"""Shared bootstrap for the reorganization scripts.

Argument parsing (argparse), .env loading, logging/telemetry setup,
store lifecycle, and the mapping from exceptions to exit codes:

    0  success
    1  usage error or any failure (nothing is rolled back; re-run to converge)
    2  verify-hierarchy found the organization missing
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import AsyncIterator, Awaitable, Callable, Sequence
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, NoReturn, TypeVar

from dotenv import load_dotenv

from reorg.application.dtos.plan import ReorgPlan
from reorg.application.interfaces.document_store import IDocumentStore
from reorg.core.config import Settings, get_settings
from reorg.domain.exceptions import (
    ReorgException,
    StoreNotConfiguredException,
    TenantNotFoundException,
    UsageException,
)
from reorg.infrastructure.firebase import (
    FirestoreDocumentStore,
    close_firebase,
    get_firestore_client,
    init_firebase,
)
from reorg.shared.telemetry import TelemetryConfig, get_telemetry, set_telemetry, setup_logging

logger = logging.getLogger(__name__)

A = TypeVar("A")

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_TENANT_MISSING = 2


class CommandParser(argparse.ArgumentParser):
    """ArgumentParser that raises UsageException instead of exiting.

    run_command reports it as exit code 1 before any store access.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        kwargs.setdefault("allow_abbrev", False)
        super().__init__(*args, **kwargs)

    def error(self, message: str) -> NoReturn:
        raise UsageException(message, usage=self.format_usage().strip())


def identifier(value: str) -> str:
    """argparse type for document IDs: non-empty after stripping."""
    value = value.strip()
    if not value:
        raise argparse.ArgumentTypeError("must not be empty")
    return value


def _project_root() -> Path:
    return Path(__file__).resolve().parent.parent


def bootstrap() -> Settings:
    """Load .env, configure logging and (once per process) telemetry."""
    load_dotenv(_project_root() / ".env")
    settings = get_settings()
    setup_logging()
    if get_telemetry() is None:
        telemetry = TelemetryConfig(
            service_name=settings.app_name,
            service_version=settings.app_version,
            enabled=settings.telemetry_enabled,
            environment=settings.telemetry_environment,
        )
        telemetry.setup_telemetry(
            exporter_type=settings.telemetry_exporter,
            otlp_endpoint=settings.telemetry_otlp_endpoint,
            sample_rate=settings.telemetry_sample_rate,
        )
        telemetry.instrument_logging()
        set_telemetry(telemetry)
    return settings


@asynccontextmanager
async def open_store(
    settings: Settings, store: IDocumentStore | None = None
) -> AsyncIterator[IDocumentStore]:
    """Yield the given store, or a Firestore store closed on exit."""
    if store is not None:
        yield store
        return
    if not init_firebase(settings):
        raise StoreNotConfiguredException(
            "Firestore is not configured: set FIREBASE_SERVICE_ACCOUNT_KEY, "
            "FIREBASE_SERVICE_ACCOUNT_PATH, or Application Default Credentials"
        )
    client = get_firestore_client()
    if client is None:
        raise StoreNotConfiguredException("Firestore client was not initialized")
    try:
        yield FirestoreDocumentStore(client)
    finally:
        await close_firebase()


async def _execute(
    execute: Callable[[IDocumentStore, Settings, A], Awaitable[int]],
    args: A,
    settings: Settings,
    store: IDocumentStore | None,
    tenant_missing_exit: int,
) -> int:
    try:
        async with open_store(settings, store) as opened:
            return await execute(opened, settings, args)
    except TenantNotFoundException as e:
        print(f"Organization {e.tenant_id} does not exist.", file=sys.stderr)
        return tenant_missing_exit
    except ReorgException as e:
        print(f"{e.error_code}: {e.message}", file=sys.stderr)
        return EXIT_FAILURE
    except Exception as e:
        logger.exception("Command failed")
        print(f"Failed: {e}", file=sys.stderr)
        return EXIT_FAILURE


def run_command(
    argv: Sequence[str] | None,
    parse: Callable[[Sequence[str]], A],
    execute: Callable[[IDocumentStore, Settings, A], Awaitable[int]],
    *,
    store: IDocumentStore | None = None,
    tenant_missing_exit: int = EXIT_FAILURE,
) -> int:
    """Parse arguments (before any I/O), then run execute against the store.

    Returns the process exit code.
    """
    try:
        args = parse(sys.argv[1:] if argv is None else argv)
    except UsageException as e:
        if e.usage:
            print(e.usage, file=sys.stderr)
        print(f"error: {e.message}", file=sys.stderr)
        return EXIT_FAILURE
    try:
        settings = bootstrap()
    except Exception as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return EXIT_FAILURE
    try:
        return asyncio.run(_execute(execute, args, settings, store, tenant_missing_exit))
    finally:
        telemetry = get_telemetry()
        if telemetry is not None and store is None:
            telemetry.shutdown()


def print_plan(plan: ReorgPlan, *, show_actions: bool = True) -> None:
    """Print a plan summary to stdout (one line per action)."""
    header = "DRY RUN PLAN" if plan.dry_run else "COMPLETED"
    print(f"{header}: {plan.operation}" + (f" (org {plan.tenant_id})" if plan.tenant_id else ""))
    if show_actions:
        for action in plan.actions:
            print(f"  - {action.describe()}")
    print(
        f"Documents {'to write' if plan.dry_run else 'written'}: {plan.documents_written} | "
        f"{'to delete' if plan.dry_run else 'deleted'}: {plan.documents_deleted}"
    )
