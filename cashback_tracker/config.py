"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Storage
    data_dir: str = "data"
    static_dir: str = ""  # empty: frontend bundled with the package

    # External Services
    price_api_base: str = "https://api.coingecko.com/api/v3"
    price_coin_id: str = "solana"
    asset_symbol: str = "SOL"

    # Service
    service_name: str = "cashback-tracker"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 5.0
    live_price_ttl_seconds: int = 900  # 15 minutes

    # Reward defaults, used when settings.json is missing or invalid
    default_cashback_rate: float = 0.03
    default_staking_apr: float = 0.0473


settings = Settings()
