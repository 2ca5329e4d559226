"""Data layer configuration loaded from config.yaml + environment variables."""

from __future__ import annotations

import yaml
from pathlib import Path
from pydantic import Field
from pydantic_settings import BaseSettings

_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config.yaml"


def _load_yaml(path: Path = _CONFIG_PATH) -> dict:
    if path.exists():
        with open(path) as f:
            return yaml.safe_load(f) or {}
    return {}


class StoreConfig(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///data/propvisit.db"
    key_prefix: str = "@property_app:"

    model_config = {"env_prefix": "PROPVISIT_STORE_"}


class SecurityConfig(BaseSettings):
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)

    model_config = {"env_prefix": "PROPVISIT_SECURITY_"}


class Settings(BaseSettings):
    log_level: str = "INFO"
    store: StoreConfig = Field(default_factory=StoreConfig)
    security: SecurityConfig = Field(default_factory=SecurityConfig)

    model_config = {"env_prefix": "PROPVISIT_", "env_file": ".env", "env_file_encoding": "utf-8"}


def get_settings(config_path: Path | None = None) -> Settings:
    """Build Settings from YAML; environment fills in whatever YAML leaves unset."""
    y = _load_yaml(config_path or _CONFIG_PATH)
    store = StoreConfig(**y.get("store", {}))
    security = SecurityConfig(**y.get("security", {}))
    extra = {"log_level": y["log_level"]} if "log_level" in y else {}
    return Settings(store=store, security=security, **extra)
