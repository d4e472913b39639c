import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field


class ConfigurationError(Exception):
    pass


class Settings(BaseModel):
    mongodb_uri: str
    # None means the database named in the connection string, or "grades"
    mongodb_database: Optional[str] = None
    mongodb_collection: str = "students"
    mongodb_timeout_ms: int = Field(default=5000, gt=0)
    host: str = "0.0.0.0"
    port: int = Field(default=3000, gt=0, lt=65536)
    app_env: str = "development"
    api_prefix: str = "/api"
    cors_origins: List[str] = ["*"]
    log_level: str = "INFO"
    otlp_endpoint: Optional[str] = None

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() == "production"

    @property
    def expose_error_details(self) -> bool:
        return not self.is_production


def _split_origins(value: str) -> List[str]:
    return [origin.strip() for origin in value.split(",") if origin.strip()]


def _normalize_prefix(value: str) -> str:
    value = value.strip().strip("/")
    return f"/{value}" if value else ""


def load_settings(env_file: Optional[str] = None) -> Settings:
    """Read settings from the environment, after loading ``.env`` if present.

    Raises ``ConfigurationError`` when ``MONGODB_URI`` is missing or any value
    can not be parsed.
    """
    load_dotenv(env_file)

    mongodb_uri = os.getenv("MONGODB_URI")
    if not mongodb_uri:
        raise ConfigurationError("MONGODB_URI is not defined in the environment")

    values = {
        "mongodb_uri": mongodb_uri,
        "mongodb_database": os.getenv("MONGODB_DATABASE") or None,
        "mongodb_collection": os.getenv("MONGODB_COLLECTION", "students"),
        "mongodb_timeout_ms": os.getenv("MONGODB_TIMEOUT_MS", "5000"),
        "host": os.getenv("HOST", "0.0.0.0"),
        "port": os.getenv("PORT", "3000"),
        "app_env": os.getenv("APP_ENV", "development"),
        "api_prefix": _normalize_prefix(os.getenv("API_PREFIX", "/api")),
        "cors_origins": _split_origins(os.getenv("CORS_ORIGINS", "*")),
        "log_level": os.getenv("LOG_LEVEL", "INFO").upper(),
        "otlp_endpoint": os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT") or None,
    }
    try:
        return Settings(**values)
    except ValueError as e:
        raise ConfigurationError(f"Invalid configuration: {e}")
