#!/usr/bin/env python3
"""Configuration system for the score ledger services

Configuration hierarchy:
- ledger_config: deployer account, service ports, debug flag
- logging_config: Logging configuration
"""
import os
from dotenv import load_dotenv
from .logging_config import LoggingConfig
from .ledger_config import LedgerConfig, DEFAULT_DEPLOYER_ADDRESS

# Load environment file based on ENV
env = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
env_files = {
    "development": "deployment/environments/dev.env",
    "dev": "deployment/environments/dev.env",
    "testing": "deployment/environments/test.env",
    "test": "deployment/environments/test.env",
    "staging": "deployment/environments/staging.env",
    "production": "deployment/environments/production.env",
}
env_file = env_files.get(env, "deployment/environments/dev.env")
load_dotenv(env_file, override=False)

# Create global settings instance
settings = LedgerConfig.from_env()

def get_settings() -> LedgerConfig:
    """Get global settings instance"""
    return settings

def reload_settings() -> LedgerConfig:
    """Reload settings from environment"""
    global settings
    settings = LedgerConfig.from_env()
    return settings

__all__ = [
    'LedgerConfig',
    'LoggingConfig',
    'DEFAULT_DEPLOYER_ADDRESS',
    'get_settings',
    'reload_settings',
    'settings',
]
