# Structured logging with multi-channel support
from typing import Optional, Dict, Any

import structlog

from core.config.settings import Settings
from .channels import LogChannel
from .correlation import CorrelationIdManager, create_correlation_context
from .enhanced_logging import (
    configure_enhanced_logging,
    get_enhanced_logger,
    get_channel_logger,
    get_logging_statistics,
    get_api_logger,
    get_audit_logger,
    get_monitoring_logger,
    get_error_logger,
    reset_logging,
)


def configure_logging(settings: Settings) -> None:
    """Configure the logging system once per process."""
    configure_enhanced_logging(settings)


def get_logger(name: str, component: Optional[str] = None) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return get_enhanced_logger(name, component)


def get_statistics() -> Dict[str, Any]:
    """Get logging system statistics."""
    return get_logging_statistics()


__all__ = [
    "configure_logging",
    "get_logger",
    "get_statistics",
    "reset_logging",
    "LogChannel",
    "CorrelationIdManager",
    "create_correlation_context",
    "get_channel_logger",
    "get_api_logger",
    "get_audit_logger",
    "get_monitoring_logger",
    "get_error_logger",
]
