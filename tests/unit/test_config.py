"""Settings validation."""

import pytest
from pydantic import ValidationError

from reorg.core.config import Settings, get_settings
from reorg.core.constants import DEFAULT_BATCH_SIZE


def test_defaults() -> None:
    """Defaults match the documented batch size and sample sizes."""
    settings = Settings(_env_file=None)
    assert settings.batch_size == DEFAULT_BATCH_SIZE
    assert settings.verify_user_sample_size == 10
    assert settings.verify_lookup_sample_size == 5
    assert settings.telemetry_exporter == "none"


@pytest.mark.parametrize("value", ["0", "501"])
def test_batch_size_outside_store_limit_is_rejected(monkeypatch, value: str) -> None:
    """BATCH_SIZE outside 1..500 fails validation."""
    monkeypatch.setenv("BATCH_SIZE", value)
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_unknown_exporter_is_rejected(monkeypatch) -> None:
    """Only console, otlp and none are accepted exporters."""
    monkeypatch.setenv("TELEMETRY_EXPORTER", "jaeger")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_get_settings_is_cached_until_cleared(monkeypatch) -> None:
    """get_settings() caches until cache_clear()."""
    first = get_settings()
    assert get_settings() is first
    monkeypatch.setenv("BATCH_SIZE", "100")
    get_settings.cache_clear()
    assert get_settings().batch_size == 100
