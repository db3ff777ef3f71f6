"""Unit tests for application settings configuration."""

from pathlib import Path

from onboard.config import Settings


def test_settings_uses_backend_env_file_independent_of_cwd():
    """Settings should always include backend/.env as an env source."""
    env_files = Settings.model_config.get("env_file")
    assert env_files is not None

    normalized = {str(Path(item)) for item in env_files}
    expected_backend_env = str(Path(__file__).resolve().parents[2] / ".env")

    assert expected_backend_env in normalized
    assert str(Path(".env")) in normalized


def test_pipeline_defaults():
    settings = Settings(_env_file=None)

    assert (settings.chunk_size, settings.chunk_overlap, settings.url_chunk_overlap) == (1000, 150, 200)
    assert settings.retrieval_k_per_variant == 10
    assert settings.retrieval_candidate_multiplier == 20
    assert settings.retrieval_top_n == 15
    assert settings.cache_ttl_seconds == 3600
    assert settings.reingest_replaces_chunks is False


def test_overlap_larger_than_chunk_is_clamped():
    settings = Settings(_env_file=None, chunk_size=100, chunk_overlap=200, url_chunk_overlap=300)

    assert settings.chunk_overlap == 50
    assert settings.url_chunk_overlap == 50


def test_env_overrides(monkeypatch):
    monkeypatch.setenv("CACHE_TTL_SECONDS", "60")
    monkeypatch.setenv("REINGEST_REPLACES_CHUNKS", "true")

    settings = Settings(_env_file=None)

    assert settings.cache_ttl_seconds == 60
    assert settings.reingest_replaces_chunks is True
