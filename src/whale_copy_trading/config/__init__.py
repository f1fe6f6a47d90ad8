"""Configuration subpackage."""

from whale_copy_trading.config.config import (
    AggregatorSettings,
    ApiSettings,
    AppSettings,
    ChainSettings,
    ConsoleNotificationSettings,
    LoggingSettings,
    PersistenceSettings,
    PriceSettings,
    Settings,
    StrategySettings,
    TelegramNotificationSettings,
    TrackingSettings,
    WalletSettings,
    get_settings,
)

__all__ = [
    "AggregatorSettings",
    "ApiSettings",
    "AppSettings",
    "ChainSettings",
    "ConsoleNotificationSettings",
    "LoggingSettings",
    "PersistenceSettings",
    "PriceSettings",
    "Settings",
    "StrategySettings",
    "TelegramNotificationSettings",
    "TrackingSettings",
    "WalletSettings",
    "get_settings",
]
