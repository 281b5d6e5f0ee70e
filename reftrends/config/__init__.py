from .core import (
    ApiFootballSettings,
    BetTrackerSettings,
    DatabaseSettings,
    LoggingSettings,
    Settings,
    SyncSettings,
    WebSettings,
    last_yaml_path,
    load_settings,
    reset_settings,
    sanitize_dict,
)

__all__ = [
    "ApiFootballSettings",
    "BetTrackerSettings",
    "DatabaseSettings",
    "LoggingSettings",
    "Settings",
    "SyncSettings",
    "WebSettings",
    "last_yaml_path",
    "load_settings",
    "reset_settings",
    "sanitize_dict",
]
