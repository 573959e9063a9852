from __future__ import annotations

import logging

import pytest

from settings import DEFAULT_BASE_URL, CatalogSettings, configure_logging

ENV_VARS = ("TMDB_ACCESS_TOKEN", "TMDB_BASE_URL", "FLIXFINDER_DATA_FILE")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_from_env_reads_dotenv_file(tmp_path) -> None:
    env_file = tmp_path / "flix.env"
    env_file.write_text(
        "TMDB_ACCESS_TOKEN=token-123\nFLIXFINDER_DATA_FILE=/tmp/watch.json\n",
        encoding="utf-8",
    )

    settings = CatalogSettings.from_env(env_file)

    assert settings.access_token == "token-123"
    assert settings.data_file == "/tmp/watch.json"
    assert settings.base_url == DEFAULT_BASE_URL
    assert settings.timeout == (4, 10)


def test_process_environment_wins_over_file(tmp_path, monkeypatch) -> None:
    env_file = tmp_path / "flix.env"
    env_file.write_text("TMDB_ACCESS_TOKEN=from-file\n", encoding="utf-8")
    monkeypatch.setenv("TMDB_ACCESS_TOKEN", "from-env")

    assert CatalogSettings.from_env(env_file).access_token == "from-env"


def test_missing_token_raises(tmp_path) -> None:
    env_file = tmp_path / "empty.env"
    env_file.write_text("", encoding="utf-8")

    with pytest.raises(EnvironmentError):
        CatalogSettings.from_env(env_file)


def test_configure_logging_accepts_level_names(monkeypatch) -> None:
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))

    configure_logging("debug")

    assert calls[0]["level"] == "DEBUG"
