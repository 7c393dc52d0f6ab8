"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Firestore credentials are resolved lazily by
reorg.infrastructure.firebase.client, so commands that fail on usage
errors never need them.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from reorg.core.constants import DEFAULT_BATCH_SIZE, FIRESTORE_MAX_BATCH_WRITES


class Settings(BaseSettings):
    """Settings loaded from environment and .env.

    All settings are optional with defaults. Credentials are taken from
    FIREBASE_SERVICE_ACCOUNT_KEY (JSON string), FIREBASE_SERVICE_ACCOUNT_PATH
    (file path), or Application Default Credentials with FIREBASE_PROJECT_ID.
    """

    # App
    app_name: str = "org-hierarchy-reorg"
    app_version: str = "1.0.0"
    debug: bool = False

    # Firebase / Firestore: use key (env) or path (file); ADC when neither is set.
    firebase_service_account_key: SecretStr | None = None
    firebase_service_account_path: str | None = None
    firebase_project_id: str | None = None
    firestore_database_id: str = "(default)"
    firestore_timeout_seconds: float = 30.0

    # Writes per batch commit (provider ceiling is 500)
    batch_size: int = DEFAULT_BATCH_SIZE

    # Verification sampling
    verify_user_sample_size: int = 10
    verify_lookup_sample_size: int = 5
    verify_settings_key_preview: int = 8

    # OpenTelemetry
    telemetry_enabled: bool = True
    telemetry_exporter: str = "none"
    telemetry_otlp_endpoint: str | None = None
    telemetry_sample_rate: float = 1.0
    telemetry_environment: str = "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_limits(self) -> "Settings":
        """Validate batch size and sample sizes.

        - BATCH_SIZE must be between 1 and the Firestore per-commit ceiling.
        - Sample sizes must be positive.
        """
        if not 1 <= self.batch_size <= FIRESTORE_MAX_BATCH_WRITES:
            raise ValueError(
                f"BATCH_SIZE must be between 1 and {FIRESTORE_MAX_BATCH_WRITES}, "
                f"got: {self.batch_size}"
            )
        if self.verify_user_sample_size < 1 or self.verify_lookup_sample_size < 1:
            raise ValueError("Verification sample sizes must be >= 1")
        if self.telemetry_exporter not in ("console", "otlp", "none"):
            raise ValueError(
                "telemetry_exporter must be 'console', 'otlp' or 'none', "
                f"got: {self.telemetry_exporter!r}"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
