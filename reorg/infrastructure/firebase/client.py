"""Firestore client (REST-based, no firebase-admin).

Initialized once per script run using FIREBASE_SERVICE_ACCOUNT_KEY (JSON
string), FIREBASE_SERVICE_ACCOUNT_PATH (file path), or, when neither is
set, Application Default Credentials (gcloud / GOOGLE_APPLICATION_CREDENTIALS).
"""

import json
import logging
from pathlib import Path

from reorg.core.config import Settings, get_settings
from reorg.domain.exceptions import StoreNotConfiguredException
from reorg.infrastructure.firebase._rest_client import (
    FirestoreRESTClient,
    _get_credentials,
    _get_default_credentials,
)

logger = logging.getLogger(__name__)

_firestore_client: FirestoreRESTClient | None = None


def _load_key_dict(settings: Settings) -> dict | None:
    """Return service account dict from env key or file path."""
    key_json = (
        settings.firebase_service_account_key.get_secret_value()
        if settings.firebase_service_account_key
        else None
    )
    if key_json:
        try:
            return json.loads(key_json)
        except json.JSONDecodeError as e:
            raise ValueError("FIREBASE_SERVICE_ACCOUNT_KEY is not valid JSON") from e
    path = settings.firebase_service_account_path
    if path:
        resolved = Path(path).expanduser().resolve()
        if not resolved.is_file():
            logger.warning(
                "FIREBASE_SERVICE_ACCOUNT_PATH set but file not found: %s (resolved: %s)",
                path,
                resolved,
            )
            return None
        with open(resolved, encoding="utf-8") as f:
            return json.load(f)
    return None


def _resolve_credentials(settings: Settings):
    """Return (credentials, project_id) or (None, None) when nothing is configured."""
    key_dict = _load_key_dict(settings)
    if key_dict:
        project_id = key_dict.get("project_id") or settings.firebase_project_id
        return _get_credentials(key_dict), project_id
    if settings.firebase_service_account_key or settings.firebase_service_account_path:
        return None, None
    credentials, adc_project = _get_default_credentials()
    return credentials, settings.firebase_project_id or adc_project


def init_firebase(settings: Settings | None = None) -> bool:
    """Initialize the Firestore client (REST API + google-auth).

    Idempotent if already initialized. Returns False when the configured
    key file is missing or no project id can be resolved. Any other
    credential failure (bad key JSON, no Application Default Credentials)
    raises instead.

    Returns:
        True if Firestore was initialized, False otherwise.

    Raises:
        StoreNotConfiguredException: credential loading failed; the cause is chained.
    """
    global _firestore_client
    if _firestore_client is not None:
        return True
    settings = settings or get_settings()
    try:
        credentials, project_id = _resolve_credentials(settings)
        if credentials is None:
            return False
        if not project_id:
            logger.error(
                "No Firestore project id: set FIREBASE_PROJECT_ID or use a service account JSON"
            )
            return False
        _firestore_client = FirestoreRESTClient(
            project_id,
            credentials,
            database_id=settings.firestore_database_id,
            timeout=settings.firestore_timeout_seconds,
        )
        logger.debug("Firestore client initialized for project %s", project_id)
        return True
    except Exception as e:
        raise StoreNotConfiguredException(f"Firebase initialization failed: {e}") from e


def get_firestore_client() -> FirestoreRESTClient | None:
    """Return the Firestore client, or None if not initialized."""
    return _firestore_client


async def close_firebase() -> None:
    """Close the Firestore client's HTTP connection pool. Call before exit."""
    global _firestore_client
    if _firestore_client is not None:
        await _firestore_client.aclose()
        _firestore_client = None
        logger.debug("Firestore HTTP client closed")
