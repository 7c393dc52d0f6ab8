"""Pytest configuration and fixtures for the reorganization toolkit.

Every test runs against tests.fakes.InMemoryDocumentStore; nothing here
needs Firestore credentials.
"""

import pytest

from reorg.application.services.batch_writer import BatchWriter
from reorg.application.use_cases.reorg_planner import ReorgPlanner
from reorg.core.config import get_settings
from tests.fakes import InMemoryDocumentStore

ORG_ID = "org1"


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    """Fresh settings per test, unaffected by a developer's .env credentials."""
    for name in (
        "FIREBASE_SERVICE_ACCOUNT_KEY",
        "FIREBASE_SERVICE_ACCOUNT_PATH",
        "BATCH_SIZE",
        "TELEMETRY_EXPORTER",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def store() -> InMemoryDocumentStore:
    """Empty store containing only the organization document."""
    return InMemoryDocumentStore({f"organizations/{ORG_ID}": {"name": "Acme"}})


@pytest.fixture
def batch_writer(store) -> BatchWriter:
    return BatchWriter(store, max_batch_size=400)


@pytest.fixture
def planner(store) -> ReorgPlanner:
    return ReorgPlanner(store, batch_size=400)
