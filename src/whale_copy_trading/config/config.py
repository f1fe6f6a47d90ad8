# -*- coding: utf-8 -*-
"""Configuration loaded from environment via Pydantic Settings.

Nested env vars use <section>__<key>, e.g. LOGGING__CONSOLE_LEVEL, CHAIN__WS_URL.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Literal, Optional

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """General application configuration."""

    model_config = SettingsConfigDict(extra="ignore")

    app_name: str = "whale-copy-trading"
    service_name: Optional[str] = None
    service_version: Optional[str] = None
    environment: Literal["development", "test", "production"] = "development"


class LoggingSettings(BaseSettings):
    """Structured logging configuration for structlog/stdlib/Logfire."""

    model_config = SettingsConfigDict(extra="ignore")

    console_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    file_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    logfire_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    log_to_console: bool = True
    log_to_file: bool = False
    log_file_path: str = "logs/copy_trading.log"
    # TimedRotatingFileHandler: when to rotate (S/M/H/D/W0–W6/midnight), interval, backups to keep
    log_file_when: Literal[
        "S", "M", "H", "D", "W0", "W1", "W2", "W3", "W4", "W5", "W6", "midnight"
    ] = "midnight"
    log_file_interval: int = 1
    log_file_backup_count: int = 30
    log_file_utc: bool = True

    # Main output format: JSONRenderer if True, ConsoleRenderer if False
    json_format: bool = False

    logfire_enabled: bool = False
    logfire_token: Optional[str] = None


class ApiSettings(BaseSettings):
    """Shared HTTP client behaviour (timeouts and retries)."""

    model_config = SettingsConfigDict(extra="ignore")

    timeout_seconds: float = Field(
        default=10.0,
        ge=1.0,
        le=120.0,
        description="HTTP request timeout in seconds.",
    )
    max_retries: int = Field(
        default=3,
        ge=1,
        le=20,
        description="Maximum number of attempts for failed HTTP requests.",
    )


class ChainSettings(BaseSettings):
    """Blockchain node endpoints and chain constants (env CHAIN__*)."""

    model_config = SettingsConfigDict(extra="ignore")

    ws_url: str = Field(default="", description="WebSocket RPC URL for newHeads subscription.")
    http_url: str = Field(default="", description="HTTP JSON-RPC URL.")
    chain_id: int = Field(default=8453, description="Chain ID (8453 for Base).")
    wrapped_native_address: str = Field(
        default="0x4200000000000000000000000000000000000006",
        description="Wrapped native token contract (WETH on Base).",
    )
    reconnect_delay_seconds: float = Field(default=3.0, ge=0.0, le=300.0)
    heartbeat_seconds: float = Field(
        default=30.0,
        ge=1.0,
        le=300.0,
        description="WebSocket ping interval used to keep the subscription alive.",
    )
    confirmation_timeout_seconds: float = Field(default=120.0, ge=1.0, le=3600.0)
    confirmation_poll_seconds: float = Field(default=1.0, ge=0.05, le=60.0)


class WalletSettings(BaseSettings):
    """Managed account credentials (env WALLET__*)."""

    model_config = SettingsConfigDict(extra="ignore")

    address: str = Field(default="", description="Managed wallet address (0x...).")
    private_key: Optional[str] = Field(default=None, description="Managed wallet private key.")


class AggregatorSettings(BaseSettings):
    """0x Swap API v2 (allowance-holder) configuration (env AGGREGATOR__*)."""

    model_config = SettingsConfigDict(extra="ignore")

    price_url: str = "https://api.0x.org/swap/allowance-holder/price"
    quote_url: str = "https://api.0x.org/swap/allowance-holder/quote"
    api_key: Optional[str] = Field(default=None, description="0x API key.")
    api_version: str = "v2"
    allowance_holder: str = Field(
        default="0x0000000000001fF3684f28c67538d4D072C22734",
        description="Spender that must be approved before selling ERC-20 tokens.",
    )
    buy_slippage_pct: float = Field(default=1.0, ge=0.0, le=50.0)
    sell_slippage_pct: float = Field(default=3.0, ge=0.0, le=50.0)
    approval_settle_seconds: float = Field(
        default=2.0,
        ge=0.0,
        le=60.0,
        description="Pause after an approval confirms before requesting the sell quote.",
    )


class PriceSettings(BaseSettings):
    """Native currency USD price source (env PRICE__*)."""

    model_config = SettingsConfigDict(extra="ignore")

    url: str = "https://api.coingecko.com/api/v3/simple/price"
    coin_id: str = "ethereum"
    cache_ttl_seconds: float = Field(default=30.0, ge=0.0, le=3600.0)
    fallback_usd: float = Field(default=2000.0, gt=0.0)


class TelegramNotificationSettings(BaseSettings):
    """Telegram notifications (from env TELEGRAM__*)."""

    model_config = SettingsConfigDict(extra="ignore")

    enabled: bool = False
    api_key: Optional[str] = Field(default=None, description="Telegram bot API key.")
    chat_id: Optional[str] = Field(default=None, description="Telegram chat ID.")
    messages_per_minute: int = Field(default=30, ge=1, le=120)
    max_retries: int = Field(default=5, ge=0, le=20)
    backoff_base_seconds: float = Field(default=1.0, ge=0.1, le=60.0)
    connect_timeout: float = Field(default=10.0, ge=0.1, le=60.0)
    read_timeout: float = Field(default=20.0, ge=0.1, le=120.0)
    write_timeout: float = Field(default=20.0, ge=0.1, le=120.0)
    pool_timeout: float = Field(default=10.0, ge=0.1, le=60.0)


class ConsoleNotificationSettings(BaseSettings):
    """Console notification settings."""

    model_config = SettingsConfigDict(extra="ignore")

    enabled: bool = True


class TrackingSettings(BaseSettings):
    """Which wallets to observe and how ambiguous swaps are resolved."""

    model_config = SettingsConfigDict(extra="ignore")

    # Raw string from env so pydantic-settings does not try to JSON-decode it (list[str] would trigger json.loads).
    target_wallets_raw: str = Field(
        default="",
        description="Wallet addresses to track, comma-separated. Env: TRACKING__TARGET_WALLETS.",
        validation_alias="target_wallets",
    )
    resolve_delay_seconds: float = Field(
        default=3.0,
        ge=0.0,
        le=60.0,
        description="Delay before the first receipt lookup for swaps with unknown tokenOut.",
    )
    receipt_poll_attempts: int = Field(default=10, ge=1, le=100)
    receipt_poll_interval_seconds: float = Field(default=2.0, ge=0.0, le=60.0)
    max_concurrent_handlers: int = Field(default=32, ge=1, le=1000)
    shutdown_timeout_seconds: float = Field(default=30.0, ge=0.0, le=600.0)

    @computed_field
    @property
    def target_wallets(self) -> list[str]:
        """Parse comma-separated target_wallets_raw into lowercase addresses."""
        if not self.target_wallets_raw or not self.target_wallets_raw.strip():
            return []
        return [s.strip().lower() for s in self.target_wallets_raw.split(",") if s.strip()]


class StrategySettings(BaseSettings):
    """Copy-trading strategy (env STRATEGY__*)."""

    model_config = SettingsConfigDict(extra="ignore")

    trade_amount_usd: float = Field(
        default=0.0,
        ge=0.0,
        description="USD value spent on every copied buy.",
    )
    cooldown_seconds: float = Field(
        default=10.0,
        ge=0.0,
        le=3600.0,
        description="Minimum time between copied buys for the same tracked wallet.",
    )
    balance_buffer_pct: float = Field(
        default=5.0,
        ge=5.0,
        le=100.0,
        description="Safety margin over the converted trade size required in native balance.",
    )
    sell_retries: int = Field(default=3, ge=1, le=20)
    sell_retry_delay_seconds: float = Field(default=5.0, ge=0.0, le=300.0)
    gas_limit_multiplier: float = Field(default=1.3, ge=1.0, le=5.0)
    default_gas_limit: int = Field(default=500_000, ge=21_000)
    repeat_balance_notifications: bool = Field(
        default=False,
        description="Notify on every insufficient-balance check instead of once per pause.",
    )
    low_balance_warning_native: float = Field(default=0.005, ge=0.0)


class PersistenceSettings(BaseSettings):
    """Local files: position ledger and trade journal (env PERSISTENCE__*)."""

    model_config = SettingsConfigDict(extra="ignore")

    positions_file: str = "data/positions.json"
    journal_enabled: bool = True
    journal_path: str = "data/trades.db"


class Settings(BaseSettings):
    """Root application configuration.

    Groups all sub-configurations so the rest of the code does not
    read environment variables directly. Nested overrides use
    <section>__<key>, e.g. LOGGING__CONSOLE_LEVEL, CHAIN__HTTP_URL.
    """

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    app: AppSettings = Field(default_factory=AppSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    api: ApiSettings = Field(default_factory=ApiSettings)
    chain: ChainSettings = Field(default_factory=ChainSettings)
    wallet: WalletSettings = Field(default_factory=WalletSettings)
    aggregator: AggregatorSettings = Field(default_factory=AggregatorSettings)
    price: PriceSettings = Field(default_factory=PriceSettings)
    tracking: TrackingSettings = Field(default_factory=TrackingSettings)
    strategy: StrategySettings = Field(default_factory=StrategySettings)
    persistence: PersistenceSettings = Field(default_factory=PersistenceSettings)
    telegram: TelegramNotificationSettings = Field(default_factory=TelegramNotificationSettings)
    console: ConsoleNotificationSettings = Field(default_factory=ConsoleNotificationSettings)

    @classmethod
    def from_env(cls, **overrides: Any) -> Settings:
        """Build settings from environment (and .env), with optional overrides.

        Nested overrides can be passed as nested dicts, e.g.
        from_env(strategy={"trade_amount_usd": 25}).
        """
        return cls(**overrides)

    def missing_required(self) -> list[str]:
        """Return env names of required values that are not set."""
        missing: list[str] = []
        if not self.chain.ws_url.strip():
            missing.append("CHAIN__WS_URL")
        if not self.chain.http_url.strip():
            missing.append("CHAIN__HTTP_URL")
        if not self.aggregator.api_key:
            missing.append("AGGREGATOR__API_KEY")
        if not self.wallet.address.strip():
            missing.append("WALLET__ADDRESS")
        if not self.wallet.private_key:
            missing.append("WALLET__PRIVATE_KEY")
        if not self.tracking.target_wallets:
            missing.append("TRACKING__TARGET_WALLETS")
        if self.strategy.trade_amount_usd <= 0:
            missing.append("STRATEGY__TRADE_AMOUNT_USD")
        return missing


@lru_cache
def get_settings() -> Settings:
    """Return a single cached instance of Settings.

    Typical usage:

        from whale_copy_trading.config import get_settings

        settings = get_settings()
        cooldown = settings.strategy.cooldown_seconds
    """
    return Settings()
