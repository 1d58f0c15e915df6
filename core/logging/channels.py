"""
Logging channel definitions and configuration for the account monitor.
Each channel can be routed to its own file when file logging is enabled.
"""

from enum import Enum
from typing import Dict, Any, Optional
from pathlib import Path
from dataclasses import dataclass


class LogChannel(str, Enum):
    """Logging channels for different components."""

    APPLICATION = "application"  # General application logs
    API = "api"                  # Upstream MT5 API requests/responses
    AUDIT = "audit"              # Login/logout trail
    MONITORING = "monitoring"    # Polling scheduler activity
    ERROR = "error"              # Error logs


@dataclass
class ChannelConfig:
    """Configuration for a logging channel."""

    name: str
    filename: str
    level: str = "INFO"
    max_bytes: str = "20MB"
    backup_count: int = 5

    def get_file_path(self, logs_dir: str) -> Path:
        """Get the full file path for this channel."""
        return Path(logs_dir) / self.filename


CHANNEL_CONFIGS: Dict[LogChannel, ChannelConfig] = {
    LogChannel.APPLICATION: ChannelConfig(
        name="application",
        filename="application.log",
        backup_count=10,
    ),
    LogChannel.API: ChannelConfig(
        name="api",
        filename="api.log",
    ),
    LogChannel.AUDIT: ChannelConfig(
        name="audit",
        filename="audit.log",
        backup_count=20,
    ),
    LogChannel.MONITORING: ChannelConfig(
        name="monitoring",
        filename="monitoring.log",
        max_bytes="50MB",  # One line per tick adds up
    ),
    LogChannel.ERROR: ChannelConfig(
        name="error",
        filename="error.log",
        level="ERROR",
        backup_count=10,
    ),
}


def get_channel_for_component(component: str) -> LogChannel:
    """Get the appropriate logging channel for a component."""
    component_mapping = {
        "session_client": LogChannel.API,
        "snapshot_fetcher": LogChannel.API,
        "auth": LogChannel.AUDIT,
        "scheduler": LogChannel.MONITORING,
    }

    return component_mapping.get(component, LogChannel.APPLICATION)


def get_channel_config(channel: LogChannel) -> ChannelConfig:
    """Get configuration for a specific channel."""
    return CHANNEL_CONFIGS[channel]


def create_log_directory_structure(logs_dir: str) -> None:
    """Create the logs directory."""
    Path(logs_dir).mkdir(parents=True, exist_ok=True)


def get_channel_statistics(logs_dir: Optional[str] = None) -> Dict[str, Any]:
    """Get statistics about all logging channels."""
    stats: Dict[str, Any] = {
        "total_channels": len(LogChannel),
        "channels": {}
    }

    for channel in LogChannel:
        config = get_channel_config(channel)
        entry = {
            "filename": config.filename,
            "level": config.level,
            "max_bytes": config.max_bytes,
            "backup_count": config.backup_count,
        }
        if logs_dir:
            path = config.get_file_path(logs_dir)
            entry["size_bytes"] = path.stat().st_size if path.exists() else 0
        stats["channels"][channel.value] = entry

    return stats
