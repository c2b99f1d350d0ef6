"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class WalletConfig(BaseSettings):
    """Wallet ledger configuration"""

    model_config = SettingsConfigDict(
        env_prefix="WALLET_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Database configuration
    database_url: str = "sqlite:///wallet.db"  # memory://, sqlite:///path, postgresql://...
    database_pool_min: int = 1
    database_pool_max: int = 10
    lock_timeout_seconds: float = 5.0  # Max wait for an account write lock

    # API configuration
    api_host: str = "localhost"
    api_port: int = 8888
    request_timeout_seconds: float = 30.0  # Deadline for a single transfer request

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text


# Global configuration instance
config = WalletConfig()


def get_config() -> WalletConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> WalletConfig:
    """Reload configuration from environment"""
    global config
    config = WalletConfig()
    return config
