from enum import Enum
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, computed_field


class RedirectStatus(str, Enum):
    """Outcome of a redirect attempt"""
    OK = "ok"
    NOT_FOUND = "not_found"
    INACTIVE = "inactive"
    EXPIRED = "expired"
    LIMIT_REACHED = "limit_reached"


class DeactivationReason(str, Enum):
    """Why the sweeper switched a link off"""
    EXPIRED = "expired"
    LIMIT_REACHED = "limit_reached"


class RedirectResult(BaseModel):
    """Either the target URL to follow, or the reason the redirect was refused"""
    status: RedirectStatus
    target_url: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is RedirectStatus.OK

    @classmethod
    def granted(cls, target_url: str) -> "RedirectResult":
        return cls(status=RedirectStatus.OK, target_url=target_url)

    @classmethod
    def refused(cls, status: RedirectStatus) -> "RedirectResult":
        return cls(status=status)


class LinkInfo(BaseModel):
    """Owner-facing view of a single link

    Built from a ShortLink dump plus the rendered short URL.
    """
    code: str
    short_url: str
    target_url: str
    created_at: datetime
    expires_at: datetime
    current_clicks: int
    max_clicks: int
    active: bool

    @computed_field
    @property
    def remaining_clicks(self) -> int:
        return max(self.max_clicks - self.current_clicks, 0)

    # Pydantic V2 style configuration
    model_config = ConfigDict(extra="ignore")


class LinkStatus(BaseModel):
    """Point-in-time lifecycle status of a link (read only, nothing is changed)"""
    code: str
    active: bool
    expired: bool
    limit_reached: bool
    remaining_clicks: int
    expires_at: datetime

    @property
    def usable(self) -> bool:
        return self.active and not self.expired and not self.limit_reached


class SweepReport(BaseModel):
    """Counters for one sweep over the store"""
    checked: int = 0
    expired: int = 0
    limit_reached: int = 0

    @property
    def deactivated(self) -> int:
        return self.expired + self.limit_reached
