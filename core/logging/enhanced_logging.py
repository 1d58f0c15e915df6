# Structured logging with per-channel files
import sys
import logging
import logging.handlers
from pathlib import Path
from typing import Dict, Optional, Any
import structlog

from core.config.settings import Settings
from .channels import (
    LogChannel,
    get_channel_for_component,
    get_channel_config,
    create_log_directory_structure,
    get_channel_statistics
)

# Global logger manager instance
_logger_manager: Optional['EnhancedLoggerManager'] = None

# Global flag to prevent duplicate configuration
_enhanced_logging_configured = False

DEFAULT_REDACT_KEYS = [
    'authorization', 'access_token', 'password', 'secret', 'token', 'id', 'set-cookie'
]


class ChannelFilter(logging.Filter):
    """Route records to a handler only if they carry the expected channel."""

    def __init__(self, expected_channel: str):
        super().__init__()
        self.expected_channel = expected_channel

    def filter(self, record: logging.LogRecord) -> bool:
        # structlog's ProcessorFormatter keeps the event dict on record.msg
        event = record.msg if isinstance(record.msg, dict) else {}
        ch = event.get("channel", getattr(record, "channel", None))
        return ch is not None and str(ch) == self.expected_channel


def redact_event(event_dict: Dict[str, Any], keys_to_redact) -> Dict[str, Any]:
    """Redact sensitive fields from an event dict recursively."""
    keys = {k.lower() for k in keys_to_redact}

    def _redact(obj):
        if isinstance(obj, dict):
            out = {}
            for k, v in obj.items():
                if isinstance(k, str) and k.lower() in keys:
                    out[k] = '[REDACTED]'
                else:
                    out[k] = _redact(v)
            return out
        if isinstance(obj, list):
            return [_redact(v) for v in obj]
        return obj

    return _redact(event_dict)


class EnhancedLoggerManager:
    """Logging manager with console output and optional per-channel files."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.channel_handlers: Dict[LogChannel, logging.Handler] = {}
        self.configured_loggers: Dict[str, structlog.BoundLogger] = {}

        self._setup_logging()

    def _setup_logging(self) -> None:
        if self.settings.logging.file_enabled:
            create_log_directory_structure(self.settings.logs_dir)

        logging.getLogger().setLevel(self._level())
        self._setup_console_logging()

        if self.settings.logging.file_enabled:
            self._setup_file_logging()
            self._setup_channel_logging()

        self._configure_structlog()

        # httpx logs full request URLs at INFO, and login URLs carry the password
        for name in ("httpx", "httpcore"):
            logging.getLogger(name).setLevel(logging.WARNING)

    def _level(self) -> int:
        return getattr(logging, self.settings.logging.level.upper(), logging.INFO)

    def _foreign_chain(self):
        return [
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
        ]

    def _setup_console_logging(self) -> None:
        """Setup console logging with configurable format."""
        if not self.settings.logging.console_enabled:
            return

        root_logger = logging.getLogger()
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(self._level())

        console_processor = (
            structlog.processors.JSONRenderer()
            if self.settings.logging.console_json_format
            else structlog.dev.ConsoleRenderer(colors=False)
        )
        console_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=console_processor,
                foreign_pre_chain=self._foreign_chain(),
            )
        )

        root_logger.addHandler(console_handler)

    def _file_formatter(self) -> logging.Formatter:
        file_processor = (
            structlog.processors.JSONRenderer()
            if self.settings.logging.json_format
            else structlog.processors.KeyValueRenderer(key_order=["event", "level", "timestamp"])
        )
        return structlog.stdlib.ProcessorFormatter(
            processor=file_processor,
            foreign_pre_chain=self._foreign_chain(),
        )

    def _setup_file_logging(self) -> None:
        """Setup the main rotating log file."""
        log_file = Path(self.settings.logs_dir) / "account_monitor.log"
        root_logger = logging.getLogger()

        for handler in root_logger.handlers:
            if (isinstance(handler, logging.handlers.RotatingFileHandler) and
                    Path(handler.baseFilename) == log_file.resolve()):
                return  # File handler already configured

        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_file,
            maxBytes=self._parse_size(self.settings.logging.file_max_size),
            backupCount=self.settings.logging.file_backup_count,
            encoding="utf-8"
        )
        file_handler.setLevel(self._level())
        file_handler.setFormatter(self._file_formatter())
        root_logger.addHandler(file_handler)

    def _setup_channel_logging(self) -> None:
        """Attach one file handler per channel to the root logger."""
        root_logger = logging.getLogger()
        for channel in LogChannel:
            config = get_channel_config(channel)
            handler = logging.handlers.RotatingFileHandler(
                filename=config.get_file_path(self.settings.logs_dir),
                maxBytes=self._parse_size(config.max_bytes),
                backupCount=config.backup_count,
                encoding="utf-8"
            )
            handler.setLevel(getattr(logging, config.level))
            handler.setFormatter(self._file_formatter())
            # The error channel collects every ERROR+ record regardless of channel
            if channel != LogChannel.ERROR:
                handler.addFilter(ChannelFilter(expected_channel=channel.value))
            root_logger.addHandler(handler)
            self.channel_handlers[channel] = handler

    def _parse_size(self, size_str: str) -> int:
        """Parse size string (e.g., '100MB') to bytes."""
        size_str = size_str.upper()

        if size_str.endswith("B"):
            size_str = size_str[:-1]

        multipliers = {
            "K": 1024,
            "M": 1024 * 1024,
            "G": 1024 * 1024 * 1024,
        }

        for suffix, multiplier in multipliers.items():
            if size_str.endswith(suffix):
                return int(float(size_str[:-1]) * multiplier)

        return int(size_str)

    def _configure_structlog(self) -> None:
        """Configure structlog with appropriate processors."""

        def add_correlation_id(logger, name, event_dict):
            from core.logging.correlation import CorrelationIdManager
            correlation_id = CorrelationIdManager.get_correlation_id()
            if correlation_id:
                event_dict.setdefault('correlation_id', correlation_id)
                context = CorrelationIdManager.get_correlation_context()
                if context:
                    event_dict.setdefault('correlation_context', context)
            return event_dict

        def add_standard_context(logger, name, event_dict):
            """Bind standard context fields once from settings."""
            event_dict.setdefault('env', self.settings.environment.value)
            event_dict.setdefault('service', self.settings.app_name)
            event_dict.setdefault('version', self.settings.version)
            return event_dict

        def redact_sensitive(logger, name, event_dict):
            return redact_event(event_dict, self.settings.logging.redact_keys or DEFAULT_REDACT_KEYS)

        processors = [
            add_correlation_id,
            add_standard_context,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            redact_sensitive,
            # Defer final rendering to handlers via ProcessorFormatter
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ]

        structlog.configure(
            processors=processors,
            logger_factory=structlog.stdlib.LoggerFactory(),
            wrapper_class=structlog.stdlib.BoundLogger,
            cache_logger_on_first_use=True,
        )

    def get_logger(self, name: str, component: Optional[str] = None) -> structlog.BoundLogger:
        """Get a structured logger for a component."""
        key = f"{name}:{component}" if component else name
        if key in self.configured_loggers:
            return self.configured_loggers[key]

        logger = structlog.get_logger(name)
        if component:
            channel = get_channel_for_component(component)
            logger = logger.bind(component=component, channel=channel.value)

        self.configured_loggers[key] = logger
        return logger

    def get_channel_logger(self, name: str, channel: LogChannel) -> structlog.BoundLogger:
        """Get a logger for a specific channel."""
        return self.get_logger(name).bind(channel=channel.value)

    def get_statistics(self) -> Dict[str, Any]:
        """Get logging statistics."""
        stats = {
            "total_loggers": len(self.configured_loggers),
            "file_logging_enabled": self.settings.logging.file_enabled,
            "console_logging_enabled": self.settings.logging.console_enabled,
            "json_format": self.settings.logging.json_format,
            "console_json_format": self.settings.logging.console_json_format,
            "logs_directory": self.settings.logs_dir,
        }
        if self.settings.logging.file_enabled:
            stats.update(get_channel_statistics(self.settings.logs_dir))
        stats["channel_handlers"] = {
            ch.value: {"attached": ch in self.channel_handlers} for ch in LogChannel
        }
        return stats


def configure_enhanced_logging(settings: Settings) -> None:
    """Configure enhanced logging system."""
    global _logger_manager, _enhanced_logging_configured

    if _enhanced_logging_configured:
        return

    _logger_manager = EnhancedLoggerManager(settings)
    _enhanced_logging_configured = True


def get_enhanced_logger(name: str, component: Optional[str] = None) -> structlog.BoundLogger:
    """Get a structured logger instance.

    Before ``configure_enhanced_logging`` runs, this hands out lazy proxies with
    the component context as initial values. Module-level loggers therefore pick
    up the configuration in force when they first log, not when they are created.
    """
    if _logger_manager is None:
        if component:
            channel = get_channel_for_component(component)
            return structlog.get_logger(name, component=component, channel=channel.value)
        return structlog.get_logger(name)

    return _logger_manager.get_logger(name, component)


def get_channel_logger(name: str, channel: LogChannel) -> structlog.BoundLogger:
    """Get a logger for a specific channel."""
    if _logger_manager is None:
        return structlog.get_logger(name, channel=channel.value)

    return _logger_manager.get_channel_logger(name, channel)


def get_logging_statistics() -> Dict[str, Any]:
    """Get logging system statistics."""
    if _logger_manager is None:
        return {"error": "Logger manager not initialized"}

    return _logger_manager.get_statistics()


def get_api_logger(name: str) -> structlog.BoundLogger:
    """Get an API logger."""
    return get_channel_logger(name, LogChannel.API)


def get_audit_logger(name: str) -> structlog.BoundLogger:
    """Get an audit logger."""
    return get_channel_logger(name, LogChannel.AUDIT)


def get_monitoring_logger(name: str) -> structlog.BoundLogger:
    """Get a monitoring logger."""
    return get_channel_logger(name, LogChannel.MONITORING)


def get_error_logger(name: str) -> structlog.BoundLogger:
    """Get an error logger."""
    return get_channel_logger(name, LogChannel.ERROR)


def reset_logging() -> None:
    """Forget the configured manager and detach its handlers (used by tests)."""
    global _logger_manager, _enhanced_logging_configured

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        if isinstance(handler.formatter, structlog.stdlib.ProcessorFormatter):
            root_logger.removeHandler(handler)
            handler.close()
    structlog.reset_defaults()
    _logger_manager = None
    _enhanced_logging_configured = False
