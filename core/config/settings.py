# Complete settings for the MT5 account monitor
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field, field_validator
from enum import Enum
from typing import List


class Environment(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


class MT5ApiSettings(BaseModel):
    """Upstream MT5 web API endpoints"""
    base_url: str = "https://mt5.mtapi.io"
    login_path: str = "/ConnectEx"
    summary_path: str = "/AccountSummary"
    details_path: str = "/AccountDetails"
    request_timeout_seconds: float = 10.0

    @field_validator('base_url')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator('request_timeout_seconds')
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("request_timeout_seconds must be positive")
        return v


class PollingSettings(BaseModel):
    """Account snapshot polling configuration"""
    interval_seconds: float = 1.0  # One tick per second
    start_active: bool = True

    @field_validator('interval_seconds')
    @classmethod
    def validate_interval(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("interval_seconds must be positive")
        return v


class LoggingSettings(BaseModel):
    # Core logging settings
    level: str = "INFO"
    json_format: bool = True

    # Console logging
    console_enabled: bool = True
    console_json_format: bool = False  # Plain text for console by default

    # File logging
    file_enabled: bool = False
    logs_dir: str = "logs"
    file_max_size: str = "20MB"
    file_backup_count: int = 5

    # Redaction
    redact_keys: List[str] = [
        "authorization", "access_token", "password", "secret", "token", "id",
        "set-cookie"
    ]


class Settings(BaseSettings):
    """Main application settings, loaded from environment variables"""
    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore"
    )

    app_name: str = "MT5 Account Monitor"
    version: str = "1.0.0"
    environment: Environment = Environment.DEVELOPMENT

    mt5_api: MT5ApiSettings = MT5ApiSettings()
    polling: PollingSettings = PollingSettings()
    logging: LoggingSettings = LoggingSettings()

    # Optional pre-filled login values for the CLI; the password is never read from env
    default_server: str = Field(default="", description="MT5 server name offered by the CLI")

    @property
    def logs_dir(self) -> str:
        """Get path to logs directory"""
        return self.logging.logs_dir


# No global settings instance - use dependency injection instead
