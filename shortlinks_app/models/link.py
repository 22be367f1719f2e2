from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class ShortLink(BaseModel):
    """
    A short code mapped to its target URL, plus its lifecycle state.

    Identity fields (code, target URL, owner, creation instant) are frozen.
    Only the store mutates the rest: edits change the TTL and click budget,
    redirects bump the counter and the sweeper flips ``active`` off.
    """

    code: str = Field(..., frozen=True, description="Unique short code")
    target_url: str = Field(..., frozen=True, description="URL the code redirects to")
    owner_id: UUID = Field(..., frozen=True, description="Owner allowed to edit/delete")
    created_at: datetime = Field(..., frozen=True)

    expires_at: datetime
    max_clicks: int = Field(..., gt=0)
    current_clicks: int = Field(0, ge=0)
    active: bool = True

    @property
    def remaining_clicks(self) -> int:
        """Click budget left (never negative)"""
        return max(self.max_clicks - self.current_clicks, 0)

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at < now

    def is_exhausted(self) -> bool:
        return self.current_clicks >= self.max_clicks
