"""Core configuration management using Pydantic settings."""
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import model_validator, field_validator
from typing import Optional, List


# Valid log levels
VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']

VALID_STORE_BACKENDS = ['sql', 'memory']

DEFAULT_POPULAR_SYMBOLS = "PETR4,VALE3,ITUB4,BBDC4,ABEV3,WEGE3,RENT3,LREN3,MGLU3,JBSS3"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Database
    database_url: str = "sqlite+aiosqlite:///./data/pricealert.db"

    # Redis (redis_url should contain full connection string including port)
    redis_url: str = "redis://localhost:6379/0"

    # Bounds for every persistence call (seconds)
    db_timeout_seconds: float = 10.0
    redis_socket_timeout_seconds: float = 5.0

    # Alert store backend: "sql" (database + redis) or "memory"
    store_backend: str = "sql"

    # Single fixed user context
    user_id: str = "default_user"

    # Telegram notifications
    telegram_bot_token: Optional[str] = None
    telegram_chat_id: Optional[str] = None
    notifications_enabled: bool = True
    quiet_hours_enabled: bool = False
    quiet_hours_start: str = "22:00"
    quiet_hours_end: str = "08:00"
    timezone: str = "America/Sao_Paulo"

    # Quote sources
    quote_base_url: str = "https://query1.finance.yahoo.com"
    market_suffix: str = ".SA"
    quote_timeout_seconds: float = 10.0
    quote_cache_ttl_ms: int = 30_000
    quote_max_concurrency: int = 20
    popular_symbols: str = DEFAULT_POPULAR_SYMBOLS  # Comma-separated list
    popular_refresh_minutes: int = 5

    # Monitor loop cadence (seconds)
    monitor_startup_delay_seconds: float = 3.0
    monitor_interval_seconds: float = 300.0
    monitor_error_backoff_seconds: float = 60.0
    monitor_live_feed: bool = True
    stored_quote_max_age_seconds: Optional[float] = None  # None: any stored quote is used
    alert_feed_resync_seconds: float = 30.0

    # Logging
    log_level: str = "INFO"

    # API Configuration
    backend_port: int = 8000

    # CORS Configuration
    cors_origins: str = "http://localhost:3000"  # Comma-separated list of allowed origins

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid Python logging level."""
        upper_v = v.upper()
        if upper_v not in VALID_LOG_LEVELS:
            raise ValueError(f"log_level must be one of {VALID_LOG_LEVELS}")
        return upper_v

    @field_validator('store_backend')
    @classmethod
    def validate_store_backend(cls, v: str) -> str:
        lower_v = v.lower()
        if lower_v not in VALID_STORE_BACKENDS:
            raise ValueError(f"store_backend must be one of {VALID_STORE_BACKENDS}")
        return lower_v

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string to list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def popular_symbols_list(self) -> List[str]:
        """Parse popular symbols from comma-separated string to uppercase list."""
        return [s.strip().upper() for s in self.popular_symbols.split(",") if s.strip()]

    @property
    def quiet_hours(self) -> dict:
        """Quiet hours in the shape expected by is_in_quiet_hours()."""
        return {
            "enabled": self.quiet_hours_enabled,
            "start": self.quiet_hours_start,
            "end": self.quiet_hours_end,
        }

    @model_validator(mode='after')
    def validate_config(self) -> 'Settings':
        """Validate configuration after all fields are set."""
        if self.monitor_interval_seconds <= 0:
            raise ValueError("monitor_interval_seconds must be positive")
        if self.monitor_error_backoff_seconds <= 0:
            raise ValueError("monitor_error_backoff_seconds must be positive")
        if self.monitor_startup_delay_seconds < 0:
            raise ValueError("monitor_startup_delay_seconds must be non-negative")
        if self.quote_cache_ttl_ms <= 0:
            raise ValueError("quote_cache_ttl_ms must be positive")
        if self.quote_max_concurrency < 1:
            raise ValueError("quote_max_concurrency must be at least 1")
        if self.db_timeout_seconds <= 0 or self.redis_socket_timeout_seconds <= 0:
            raise ValueError("persistence timeouts must be positive")
        return self


# Global settings instance
settings = Settings()
