"""Configuration settings behaviour tests."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from app.config import Settings


def test_defaults_match_provider_pacing() -> None:
    """Out of the box the pipeline uses batches of five with a short pause."""

    settings = Settings(_env_file=None)

    assert settings.enrich_batch_size == 5
    assert settings.enrich_batch_delay_seconds == 0.5
    assert settings.fetch_max_attempts == 3
    assert settings.merge_cap == 20
    assert settings.tmdb_base_url == "https://api.themoviedb.org/3"


def test_environment_aliases_are_applied() -> None:
    settings = Settings(
        _env_file=None,
        TMDB_API_KEY="secret",
        ENRICH_BATCH_SIZE="10",
        FETCH_TIMEOUT="2.5",
    )

    assert settings.tmdb_api_key == "secret"
    assert settings.enrich_batch_size == 10
    assert settings.fetch_timeout_seconds == 2.5


def test_blank_api_key_is_treated_as_missing() -> None:
    settings = Settings(_env_file=None, TMDB_API_KEY="   ")

    assert settings.tmdb_api_key is None


@pytest.mark.parametrize(
    ("alias", "value"),
    [("ENRICH_BATCH_SIZE", 0), ("FETCH_MAX_ATTEMPTS", 0), ("MERGE_CAP", 500)],
)
def test_out_of_range_values_are_rejected(alias: str, value: int) -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, **{alias: value})
