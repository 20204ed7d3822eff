import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


class DatabaseConfig(BaseModel):
    url: str = Field(min_length=1)
    echo: bool = Field(default=False)


class ServerConfig(BaseModel):
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080, ge=1, le=65535)


class ApiConfig(BaseModel):
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    # When False, storage failures surface to clients as a generic message.
    expose_error_details: bool = Field(default=False)

    @field_validator("cors_origins", mode="before")
    def _split_origins(cls, v: str | list[str]) -> list[str]:
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v


class Settings(BaseModel):
    database: DatabaseConfig
    server: ServerConfig
    api: ApiConfig

    model_config = ConfigDict(arbitrary_types_allowed=True)


DEFAULT_CONFIG_PATH = Path(os.environ.get("CONFIG_PATH", "config/config.json"))

_TRUTHY = {"1", "true", "yes", "on"}


def _as_bool(value: str) -> bool:
    return value.strip().lower() in _TRUTHY


def _load_file_config(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open("r", encoding="utf-8") as fh:
            return json.load(fh)
    except json.JSONDecodeError as exc:
        raise RuntimeError(f"Invalid JSON configuration at {path}") from exc


def _load_env() -> dict[str, Any]:
    env_config: dict[str, Any] = {}

    database_url = os.environ.get("DATABASE_URL")
    if database_url:
        env_config.setdefault("database", {})["url"] = database_url

    echo = os.environ.get("DATABASE_ECHO")
    if echo:
        env_config.setdefault("database", {})["echo"] = _as_bool(echo)

    host = os.environ.get("HOST")
    if host:
        env_config.setdefault("server", {})["host"] = host

    port = os.environ.get("PORT")
    if port:
        env_config.setdefault("server", {})["port"] = int(port)

    cors_origins = os.environ.get("CORS_ORIGINS")
    if cors_origins:
        env_config.setdefault("api", {})["cors_origins"] = cors_origins

    expose = os.environ.get("EXPOSE_ERROR_DETAILS")
    if expose:
        env_config.setdefault("api", {})["expose_error_details"] = _as_bool(expose)

    return env_config


def merge_settings(env_config: dict[str, Any], file_config: dict[str, Any]) -> dict[str, Any]:
    merged: dict[str, Any] = {}
    for section in ("database", "server", "api"):
        merged[section] = {**file_config.get(section, {}), **env_config.get(section, {})}
    return merged


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    load_dotenv()
    env_config = _load_env()
    file_config = _load_file_config(DEFAULT_CONFIG_PATH)
    merged = merge_settings(env_config=env_config, file_config=file_config)
    try:
        return Settings.model_validate(merged)
    except ValidationError as exc:
        raise RuntimeError(f"Configuration error: {exc}") from exc


__all__ = ["Settings", "get_settings"]
