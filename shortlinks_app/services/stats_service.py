from typing import List, Optional
from uuid import UUID

from shortlinks_app.config import Settings
from shortlinks_app.models.link import ShortLink
from shortlinks_app.schemas.link import LinkInfo
from shortlinks_app.services.link_store import LinkStore


class StatsService:
    """
    Read-only statistics over the link store.

    Works on snapshots only, so it never races with the sweeper.
    """

    def __init__(self, store: LinkStore, settings: Settings):
        self.store = store
        self.settings = settings

    def short_url(self, code: str) -> str:
        return f"{self.settings.short_link_domain}/{code}"

    def get_user_links(self, owner_id: UUID) -> List[ShortLink]:
        """All links owned by ``owner_id``, oldest first"""
        links = [
            link for link in self.store.snapshot().values()
            if link.owner_id == owner_id
        ]
        return sorted(links, key=lambda link: link.created_at)

    def get_link_info(self, code: str, owner_id: UUID) -> Optional[LinkInfo]:
        """Details of one link, or None if it is missing or owned by someone else"""
        link = self.store.get(code)
        if link is None or link.owner_id != owner_id:
            return None

        return LinkInfo.model_validate({
            **link.model_dump(),
            "short_url": self.short_url(link.code),
        })

    def list_owners(self) -> List[UUID]:
        """Distinct owners that currently have at least one link"""
        owners = {link.owner_id for link in self.store.snapshot().values()}
        return sorted(owners, key=str)
