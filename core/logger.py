"""
Service logger setup

Configures the stdlib logging tree for a service process from LoggingConfig.
Modules keep using ``logging.getLogger(__name__)``; this only wires handlers.
"""

import logging
import sys
from typing import Optional

from core.config import LoggingConfig

_configured = set()
_root_handlers_installed = False


def setup_service_logger(
    service_name: str,
    level: Optional[str] = None,
    config: Optional[LoggingConfig] = None,
) -> logging.Logger:
    """
    Configure root handlers once per process and return the service logger.

    Args:
        service_name: Logger name for the service (e.g. "order_service")
        level: Log level override, falls back to config.log_level
        config: Logging configuration (loaded from env if omitted)

    Returns:
        Logger named after the service
    """
    global _root_handlers_installed

    config = config or LoggingConfig.from_env()
    log_level = getattr(logging, (level or config.log_level).upper(), logging.INFO)

    logger = logging.getLogger(service_name)
    logger.setLevel(log_level)

    if service_name in _configured:
        return logger
    _configured.add(service_name)

    # Several services may share one process; handlers go on the root once
    if _root_handlers_installed:
        return logger

    formatter = logging.Formatter(config.log_format)
    root = logging.getLogger()
    root.setLevel(log_level)

    if config.enable_console:
        console = logging.StreamHandler(sys.stdout)
        console.setFormatter(formatter)
        root.addHandler(console)

    if config.log_file:
        file_handler = logging.FileHandler(config.log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    _root_handlers_installed = True
    logger.debug(f"Logger configured for {service_name} at {logging.getLevelName(log_level)}")
    return logger
