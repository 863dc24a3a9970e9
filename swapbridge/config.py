"""Application Configuration — environment-driven settings via pydantic-settings.

Invariants:
    - All secrets come from environment variables (never hardcoded)
    - get_settings() is cached (lru_cache) — single instance per process
    - Fee and denomination are fixed configuration values, never estimated

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support
    - Defaults provided for all non-secret settings: works out-of-the-box with docker-compose
"""

from decimal import Decimal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Database
    database_url: str = (
        "postgresql+asyncpg://bridge:bridge@db:5432/bridge"
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_postgres_url(cls, v: str) -> str:
        """Hosting platforms provide postgresql:// but asyncpg needs postgresql+asyncpg://."""
        if isinstance(v, str) and v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    database_pool_size: int = 20
    database_max_overflow: int = 10

    # Loki wallet RPC
    loki_wallet_rpc_url: str = "http://loki-wallet:22026/json_rpc"
    loki_wallet_rpc_user: str | None = None
    loki_wallet_rpc_password: str | None = None
    loki_account_index: int = 0
    loki_transfer_priority: int = 0
    loki_withdrawal_fee: Decimal = Decimal("0.1")

    # Binance Chain
    bnb_api_url: str = "https://testnet-dex.binance.org"
    bnb_signer_url: str = "http://bnb-signer:8090"
    bnb_signer_token: str = "signer-token-placeholder"
    bnb_denom: str = "BLOKI-000"
    bnb_decimals: int = 8
    bnb_transaction_lookback_days: int = 90

    # Network clients
    network_timeout_seconds: float = 30.0
    network_max_retries: int = 3
    network_base_delay_ms: int = 500
    network_max_delay_ms: int = 10_000

    # Settlement
    dispatch_timeout_seconds: float = 120.0
    settlement_enabled: bool = False
    settlement_interval_seconds: int = 600

    # API
    cors_origins: list[str] = ["http://localhost:3000"]

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"


@lru_cache
def get_settings() -> Settings:
    return Settings()
