"""Account snapshot and polling state models."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator

from core.logging import get_api_logger

logger = get_api_logger(__name__)


class _SourceModel(BaseModel):
    """Upstream body where each field is read on its own.

    A field that fails validation is dropped to None, so a single oddly typed
    value (such as leverage sent as "1:100") leaves its siblings intact.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("*", mode="wrap")
    @classmethod
    def drop_unreadable(cls, value: Any, handler, info: ValidationInfo) -> Any:
        try:
            return handler(value)
        except ValidationError:
            logger.warning("Dropped unreadable account field", model=cls.__name__, field=info.field_name)
            return None


class AccountSummary(_SourceModel):
    """Body of the AccountSummary endpoint. Every field may be missing."""

    balance: Optional[float] = None
    equity: Optional[float] = None
    margin: Optional[float] = None
    free_margin: Optional[float] = Field(default=None, alias="freeMargin")
    margin_level: Optional[float] = Field(default=None, alias="marginLevel")
    currency: Optional[str] = None
    profit: Optional[float] = None


class AccountDetails(_SourceModel):
    """Body of the AccountDetails endpoint. Every field may be missing."""

    account_number: Optional[str] = Field(default=None, alias="accountNumber")
    account_name: Optional[str] = Field(default=None, alias="accountName")
    server_name: Optional[str] = Field(default=None, alias="serverName")
    leverage: Optional[float] = None

    @field_validator("account_number", mode="before")
    @classmethod
    def coerce_account_number(cls, v: Any) -> Any:
        # Some servers send the login as a JSON number
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v


class AccountSnapshot(BaseModel):
    """One fully populated reading of the account. Never mutated."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    balance: float = 0
    equity: float = 0
    margin: float = 0
    free_margin: float = Field(default=0, alias="freeMargin")
    margin_level: float = Field(default=0, alias="marginLevel")
    currency: str = "USD"
    profit: float = 0
    account_number: str = Field(default="N/A", alias="accountNumber")
    account_name: str = Field(default="N/A", alias="accountName")
    server_name: str = Field(default="N/A", alias="serverName")
    leverage: float = 0

    @classmethod
    def defaults(cls) -> "AccountSnapshot":
        return cls()

    @classmethod
    def merge(cls, summary: Optional[AccountSummary], details: Optional[AccountDetails]) -> "AccountSnapshot":
        """Field-by-field merge; each field only ever comes from its own source."""
        values: Dict[str, Any] = {}
        for source in (summary, details):
            if source is None:
                continue
            values.update(source.model_dump(exclude_none=True))
        return cls(**values)

    def to_wire(self) -> Dict[str, Any]:
        """Dump with the API's camelCase field names."""
        return self.model_dump(by_alias=True)


class SchedulerStatus(str, Enum):
    STOPPED = "stopped"
    RUNNING = "running"
    PAUSED = "paused"   # running but hidden; the timer is disarmed
    CLOSED = "closed"   # torn down; nothing is published any more


@dataclass(frozen=True)
class PollingState:
    """Read-only view of the scheduler, replaced after every change."""
    active: bool = False
    last_updated: Optional[datetime] = None
    update_count: int = 0
    connected: bool = True
    loading: bool = False
    status: SchedulerStatus = SchedulerStatus.STOPPED
