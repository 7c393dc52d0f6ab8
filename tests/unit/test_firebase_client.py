"""Credential resolution for the Firestore client."""

import json

import pytest

from reorg.core.config import Settings
from reorg.domain.exceptions import StoreNotConfiguredException
from reorg.infrastructure.firebase import client as firebase_client


def test_key_json_takes_precedence(tmp_path) -> None:
    """FIREBASE_SERVICE_ACCOUNT_KEY wins over the key file path."""
    key_file = tmp_path / "sa.json"
    key_file.write_text(json.dumps({"project_id": "from-file"}))
    settings = Settings(
        _env_file=None,
        firebase_service_account_key=json.dumps({"project_id": "from-env"}),
        firebase_service_account_path=str(key_file),
    )
    assert firebase_client._load_key_dict(settings) == {"project_id": "from-env"}


def test_key_file_is_read(tmp_path) -> None:
    """The service account file is loaded when no key JSON is set."""
    key_file = tmp_path / "sa.json"
    key_file.write_text(json.dumps({"project_id": "from-file"}))
    settings = Settings(_env_file=None, firebase_service_account_path=str(key_file))
    assert firebase_client._load_key_dict(settings) == {"project_id": "from-file"}


def test_invalid_key_json_raises() -> None:
    """Malformed key JSON is reported as a ValueError."""
    settings = Settings(_env_file=None, firebase_service_account_key="{not json")
    with pytest.raises(ValueError):
        firebase_client._load_key_dict(settings)


def test_missing_key_file_disables_store(tmp_path) -> None:
    """A key path pointing nowhere leaves Firestore uninitialized."""
    settings = Settings(
        _env_file=None, firebase_service_account_path=str(tmp_path / "missing.json")
    )
    assert firebase_client._load_key_dict(settings) is None
    assert firebase_client.init_firebase(settings) is False
    assert firebase_client.get_firestore_client() is None


def test_invalid_key_json_fails_initialization_with_cause() -> None:
    """Unusable configured credentials raise instead of reporting 'not configured'."""
    settings = Settings(_env_file=None, firebase_service_account_key="{not json")
    with pytest.raises(StoreNotConfiguredException) as exc_info:
        firebase_client.init_firebase(settings)
    assert "not valid JSON" in exc_info.value.message
    assert isinstance(exc_info.value.__cause__, ValueError)
    assert firebase_client.get_firestore_client() is None
