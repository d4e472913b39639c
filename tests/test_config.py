import pytest

from config import ConfigurationError, load_settings

ENV_VARS = [
    "MONGODB_URI",
    "MONGODB_DATABASE",
    "MONGODB_COLLECTION",
    "MONGODB_TIMEOUT_MS",
    "HOST",
    "PORT",
    "APP_ENV",
    "API_PREFIX",
    "CORS_ORIGINS",
    "LOG_LEVEL",
    "OTEL_EXPORTER_OTLP_ENDPOINT",
]


@pytest.fixture
def env(monkeypatch, tmp_path):
    # setenv first so values loaded from .env are undone after the test
    for name in ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    env_file = tmp_path / ".env"

    def _load(**values):
        for name, value in values.items():
            monkeypatch.setenv(name, value)
        return load_settings(str(env_file))

    return _load


def test_missing_uri(env):
    with pytest.raises(ConfigurationError, match="MONGODB_URI"):
        env()


def test_defaults(env):
    settings = env(MONGODB_URI="mongodb://localhost:27017")
    assert settings.port == 3000
    assert settings.mongodb_database is None
    assert settings.mongodb_collection == "students"
    assert settings.api_prefix == "/api"
    assert settings.cors_origins == ["*"]
    assert settings.otlp_endpoint is None
    assert settings.expose_error_details


def test_values_from_environment(env):
    settings = env(
        MONGODB_URI="mongodb://db:27017/school",
        MONGODB_DATABASE="grades_prod",
        PORT="8080",
        APP_ENV="production",
        API_PREFIX="v1/",
        CORS_ORIGINS="http://localhost:4000, http://example.com ,",
        LOG_LEVEL="debug",
    )
    assert settings.port == 8080
    assert settings.mongodb_database == "grades_prod"
    assert settings.api_prefix == "/v1"
    assert settings.cors_origins == ["http://localhost:4000", "http://example.com"]
    assert settings.log_level == "DEBUG"
    assert settings.is_production
    assert not settings.expose_error_details


def test_values_from_env_file(env, tmp_path):
    (tmp_path / ".env").write_text("MONGODB_URI=mongodb://from-file:27017\nPORT=3100\n")
    settings = env()
    assert settings.mongodb_uri == "mongodb://from-file:27017"
    assert settings.port == 3100


def test_empty_prefix(env):
    assert env(MONGODB_URI="mongodb://localhost", API_PREFIX="/").api_prefix == ""


@pytest.mark.parametrize("port", ["abc", "0", "70000"])
def test_invalid_port(env, port):
    with pytest.raises(ConfigurationError):
        env(MONGODB_URI="mongodb://localhost:27017", PORT=port)
