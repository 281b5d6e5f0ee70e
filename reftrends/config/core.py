from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_API_FOOTBALL_URL = "https://v3.football.api-sports.io"
DEFAULT_IP_HASH_SALT = "referee-rating-salt-2024"

_SECRET_MARKERS = ("key", "secret", "salt", "password", "token")
_LAST_YAML_PATH: Optional[str] = None
_SETTINGS: Optional["Settings"] = None


def _project_root() -> Path:
    return Path(__file__).resolve().parents[2]


def _data_dir() -> Path:
    override = os.getenv("REFTRENDS_DATA_DIR")
    if override:
        return Path(override).expanduser().resolve()
    return _project_root() / "data"


class DatabaseSettings(BaseModel):
    path: Optional[str] = None
    echo: bool = False

    def database_path(self) -> str:
        """Return the absolute path of the sqlite database file."""
        if self.path:
            return os.path.abspath(os.path.expanduser(self.path))
        return str(_data_dir() / "reftrends.db")


class ApiFootballSettings(BaseModel):
    key: Optional[str] = None
    base_url: str = DEFAULT_API_FOOTBALL_URL
    timeout_seconds: float = 15.0
    max_retries: int = 2
    requests_per_window: int = 30
    window_seconds: float = 60.0

    @model_validator(mode="after")
    def _key_from_env(self) -> "ApiFootballSettings":
        if not self.key:
            self.key = os.getenv("API_FOOTBALL_KEY") or None
        return self


class SyncSettings(BaseModel):
    lookback_days: int = 7
    penalty_lookback_days: int = 30
    card_event_batch: int = 200
    photo_batch: int = 10
    photo_delay_seconds: float = 0.5
    league_delay_seconds: float = 1.0
    fetch_photos: bool = True
    fetch_fouls: bool = True


class WebSettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8080
    cron_secret: Optional[str] = None
    ip_hash_salt: Optional[str] = None

    @model_validator(mode="after")
    def _secrets_from_env(self) -> "WebSettings":
        if not self.cron_secret:
            self.cron_secret = os.getenv("CRON_SECRET") or None
        if not self.ip_hash_salt:
            self.ip_hash_salt = os.getenv("IP_HASH_SALT") or DEFAULT_IP_HASH_SALT
        return self


class LoggingSettings(BaseModel):
    json_logs: bool = False
    level: str = "INFO"
    file: Optional[str] = None
    max_bytes: int = 10 * 1024 * 1024

    @model_validator(mode="before")
    @classmethod
    def _alias_json(cls, data: dict[str, object]) -> dict[str, object]:
        if isinstance(data, dict) and "json" in data and "json_logs" not in data:
            data = dict(data)
            data["json_logs"] = data.pop("json")
        return data


class BetTrackerSettings(BaseModel):
    path: Optional[str] = None

    def ledger_path(self) -> str:
        if self.path:
            return os.path.abspath(os.path.expanduser(self.path))
        return str(_data_dir() / "bets.json")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="REFTRENDS_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    api_football: ApiFootballSettings = Field(default_factory=ApiFootballSettings)
    sync: SyncSettings = Field(default_factory=SyncSettings)
    web: WebSettings = Field(default_factory=WebSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    bets: BetTrackerSettings = Field(default_factory=BetTrackerSettings)

    @model_validator(mode="before")
    @classmethod
    def _apply_yaml_overrides(cls, data: Any) -> Any:
        overrides = _load_yaml_overrides()
        if not overrides:
            return data
        if isinstance(data, dict):
            return _deep_merge(overrides, data)
        return overrides


def last_yaml_path() -> Optional[str]:
    return _LAST_YAML_PATH


def _yaml_candidates() -> list[Path]:
    candidates: list[Path] = []
    explicit = os.getenv("REFTRENDS_CONFIG")
    if explicit:
        candidates.append(Path(explicit).expanduser().resolve())
    candidates.append(_project_root() / "config" / "reftrends.yaml")
    return candidates


def _load_yaml_overrides() -> Dict[str, Any]:
    global _LAST_YAML_PATH
    for path in _yaml_candidates():
        if not path.exists():
            continue
        try:
            with path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError):
            continue
        if isinstance(data, dict):
            _LAST_YAML_PATH = str(path)
            return data
    return {}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged: Dict[str, Any] = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def sanitize_dict(data: Any) -> Any:
    """Mask secret-looking values so settings can be logged."""
    if isinstance(data, dict):
        out: Dict[str, Any] = {}
        for key, value in data.items():
            if any(marker in str(key).lower() for marker in _SECRET_MARKERS) and value:
                out[key] = "***"
            else:
                out[key] = sanitize_dict(value)
        return out
    if isinstance(data, list):
        return [sanitize_dict(v) for v in data]
    return data


def load_settings(**overrides: Any) -> Settings:
    """Return the process-wide settings, building them on first use.

    Passing overrides always builds a fresh instance without caching it.
    """
    global _SETTINGS
    if overrides:
        return Settings(**overrides)
    if _SETTINGS is None:
        _SETTINGS = Settings()
    return _SETTINGS


def reset_settings() -> None:
    """Drop the cached settings (for testing)."""
    global _SETTINGS, _LAST_YAML_PATH
    _SETTINGS = None
    _LAST_YAML_PATH = None


__all__ = [
    "ApiFootballSettings",
    "BetTrackerSettings",
    "DatabaseSettings",
    "LoggingSettings",
    "Settings",
    "SyncSettings",
    "WebSettings",
    "DEFAULT_API_FOOTBALL_URL",
    "DEFAULT_IP_HASH_SALT",
    "last_yaml_path",
    "load_settings",
    "reset_settings",
    "sanitize_dict",
]
