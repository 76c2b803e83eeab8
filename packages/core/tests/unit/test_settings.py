from datetime import date

import pytest

from dbsampler.common.settings import SamplerSettings


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    # No .env from the working tree, no variables from the shell.
    monkeypatch.chdir(tmp_path)
    for name in (
        "DATABASE_URL",
        "DATABASE_ADAPTER",
        "DBSAMPLER_ENV",
        "DBSAMPLER_LIMIT",
        "DBSAMPLER_TIMEOUT_MS",
        "DBSAMPLER_QUERY_TIMEOUT_MS",
        "DBSAMPLER_MAX_CHUNK_ROWS",
        "LOG_LEVEL",
        "LOG_JSON",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    settings = SamplerSettings()

    assert settings.database_adapter == "postgres"
    assert settings.environment == "dev"
    assert settings.default_limit == 100
    assert settings.timeout_ms == 60_000
    assert settings.query_timeout_ms == 15_000
    assert settings.max_chunk_rows == 500


def test_reads_environment(monkeypatch):
    # Arrange
    monkeypatch.setenv("DATABASE_URL", "postgresql://app@db/shop")
    monkeypatch.setenv("DATABASE_ADAPTER", "mock")
    monkeypatch.setenv("DBSAMPLER_TIMEOUT_MS", "1000")
    monkeypatch.setenv("LOG_JSON", "true")

    # Act
    settings = SamplerSettings()

    # Assert
    assert settings.database_url == "postgresql://app@db/shop"
    assert settings.database_adapter == "mock"
    assert settings.timeout_ms == 1000
    assert settings.log_json is True


def test_rejects_non_positive_limits(monkeypatch):
    monkeypatch.setenv("DBSAMPLER_MAX_CHUNK_ROWS", "0")

    with pytest.raises(ValueError):
        SamplerSettings()


def test_for_env_layers_env_specific_file(tmp_path):
    # Arrange
    (tmp_path / ".env").write_text("DATABASE_URL=postgresql://base/db\nDBSAMPLER_LIMIT=5\n")
    (tmp_path / ".env.prod").write_text("DATABASE_URL=postgresql://prod/db\n")

    # Act
    settings = SamplerSettings.for_env("prod")

    # Assert
    assert settings.environment == "prod"
    assert settings.database_url == "postgresql://prod/db"
    assert settings.default_limit == 5


def test_connection_options_require_url_for_real_adapters():
    with pytest.raises(ValueError, match="DATABASE_URL"):
        SamplerSettings().connection_options()


def test_connection_options_allow_mock_without_url():
    options = SamplerSettings(DATABASE_ADAPTER="mock").connection_options()

    assert options.url is None
    assert options.name == "default"


def test_template_assigns_reflect_environment():
    settings = SamplerSettings(DBSAMPLER_ENV="test")

    assigns = settings.template_assigns(today=date(2024, 1, 31))

    assert assigns == {"dev": False, "test": True, "prod": False, "date": date(2024, 1, 31)}
