#!/usr/bin/env python3
"""Ledger platform configuration

Settings shared by user_service (registry) and order_service (ledger):
the deployer account, HTTP ports and logging.
"""
import os
from dataclasses import dataclass, field

from .logging_config import LoggingConfig

# Hardhat's first development account
DEFAULT_DEPLOYER_ADDRESS = "0xf39fd6e51aad88f6f4ce6ab8827279cfffb92266"


def _bool(val: str) -> bool:
    return val.lower() == "true"

def _int(val: str, default: int) -> int:
    try:
        return int(val) if val else default
    except ValueError:
        return default


@dataclass
class LedgerConfig:
    """Top-level configuration for the ledger services"""

    environment: str = "development"
    debug: bool = False

    # Account that deploys both components and receives admin + manager
    deployer_address: str = DEFAULT_DEPLOYER_ADDRESS

    # HTTP ports
    user_service_port: int = 8240
    order_service_port: int = 8241

    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls) -> 'LedgerConfig':
        """Load ledger configuration from environment variables"""
        env = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
        return cls(
            environment=env,
            debug=_bool(os.getenv("DEBUG", "true" if env == "development" else "false")),
            deployer_address=os.getenv("LEDGER_DEPLOYER_ADDRESS", DEFAULT_DEPLOYER_ADDRESS),
            user_service_port=_int(os.getenv("USER_SERVICE_PORT", "8240"), 8240),
            order_service_port=_int(os.getenv("ORDER_SERVICE_PORT", "8241"), 8241),
            logging=LoggingConfig.from_env(),
        )
