"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

import logging

from pydantic import field_validator
from pydantic_settings import BaseSettings
from typing import Optional

from .money import Currency


class BankConfig(BaseSettings):
    """Open banking core configuration"""

    # Identifier allocation
    account_number_prefix: str = "ACC"
    account_number_start: int = 1001
    card_number_prefix: str = "CARD"
    card_number_start: int = 5001

    # Display currency (single currency per bank)
    currency: str = "USD"

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text
    log_file: Optional[str] = None  # If None, logs to stderr

    # Business defaults
    default_payment_description: str = "Payment"

    # Feature flags
    enable_audit_logging: bool = True

    class Config:
        env_prefix = "OPENBANKING_"
        env_file = ".env"
        case_sensitive = False

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v: str) -> str:
        code = v.strip().upper()
        if code not in Currency.__members__:
            raise ValueError(f"Unsupported currency: {v}")
        return code

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        if v not in ("json", "text"):
            raise ValueError("log_format must be 'json' or 'text'")
        return v


# Global configuration instance
config = BankConfig()


def get_config() -> BankConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> BankConfig:
    """Reload configuration from environment"""
    global config
    config = BankConfig()
    return config
