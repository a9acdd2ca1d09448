"""
Application settings.

Loads configuration from environment variables using pydantic-settings.
"""

from loguru import logger
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.config.operational_constants import (
    DEPOSIT_DETECTION_INTERVAL_SECONDS,
    EXPLORER_TIMEOUT_SECONDS,
    SESSION_SWEEP_INTERVAL_SECONDS,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str
    database_echo: bool = False

    # Redis (Dramatiq broker)
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: str | None = None
    redis_db: int = 0

    # Telegram notifications (disabled when token is not set)
    telegram_bot_token: str | None = None

    # Application
    environment: str = "production"
    debug: bool = False
    log_level: str = "INFO"
    log_file: str = "logs/platform.log"

    # Company wallet receiving deposits
    company_wallet_address: str | None = None
    company_tron_wallet_address: str | None = None

    # Blockchain explorers / RPC endpoints
    bsc_rpc_url: str = "https://bsc-dataseed.binance.org/"
    eth_rpc_url: str = "https://ethereum-rpc.publicnode.com"
    polygon_rpc_url: str = "https://polygon-rpc.com"
    tronscan_api_url: str = "https://apilist.tronscanapi.com/api/transaction-info"
    explorer_timeout_seconds: float = Field(
        default=EXPLORER_TIMEOUT_SECONDS,
        gt=0,
        description="HTTP timeout for explorer lookups in seconds",
    )

    # Deposits
    min_deposit_amount: float = Field(
        default=10.0,
        gt=0,
        description="Minimum deposit amount (USDT)",
    )
    deposit_detection_interval_seconds: int = Field(
        default=DEPOSIT_DETECTION_INTERVAL_SECONDS,
        ge=1,
        description="Interval between automatic deposit detection passes",
    )

    # Withdrawals
    withdrawals_enabled: bool = True
    min_withdrawal_amount: float = Field(
        default=2.0,
        gt=0,
        description="Minimum withdrawal amount (USDT)",
    )
    withdrawal_fee_percent: float = Field(
        default=0.0,
        ge=0,
        le=1.0,
        description="Withdrawal fee as a fraction of the amount (0.02 = 2%)",
    )
    withdrawal_fee_fixed: float = Field(
        default=0.0,
        ge=0,
        description="Fixed withdrawal fee (USDT)",
    )

    # Earning sessions
    session_sweep_interval_seconds: int = Field(
        default=SESSION_SWEEP_INTERVAL_SECONDS,
        ge=1,
        description="Interval between expired session sweeps",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode='after')
    def validate_production(self) -> 'Settings':
        """Validate production-specific requirements."""
        if self.environment == 'production':
            if self.debug:
                raise ValueError(
                    'DEBUG must be False in production environment. '
                    'Set DEBUG=false in your .env file.'
                )

            if not self.company_wallet_address:
                logger.warning(
                    'COMPANY_WALLET_ADDRESS is not set. '
                    'Automatic deposit detection cannot match recipients.'
                )

            if not self.telegram_bot_token:
                logger.warning(
                    'TELEGRAM_BOT_TOKEN is not set. '
                    'User notifications are disabled.'
                )

        return self

    @field_validator('database_url')
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """Validate database URL."""
        if not v.startswith(
            ('postgresql://', 'postgresql+asyncpg://', 'sqlite+aiosqlite://')
        ):
            raise ValueError(
                'DATABASE_URL must start with postgresql://, '
                'postgresql+asyncpg:// or sqlite+aiosqlite://'
            )
        return v

    @field_validator('company_wallet_address')
    @classmethod
    def normalize_wallet_address(cls, v: str | None) -> str | None:
        """Store wallet address lowercased for comparisons."""
        if v is None:
            return None
        v = v.strip()
        return v.lower() if v.startswith('0x') else v

    @property
    def async_database_url(self) -> str:
        """Database URL with the async driver applied."""
        if self.database_url.startswith('postgresql://'):
            return self.database_url.replace(
                'postgresql://', 'postgresql+asyncpg://', 1
            )
        return self.database_url


# Global settings instance
settings = Settings()
