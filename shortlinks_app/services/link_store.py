import logging
import threading
from datetime import datetime, timedelta
from typing import Callable, Dict, Iterable, Optional
from uuid import UUID

from shortlinks_app.config import Settings
from shortlinks_app.exceptions import CodeGenerationError, ValidationError
from shortlinks_app.models.link import ShortLink
from shortlinks_app.schemas.link import DeactivationReason, RedirectResult, RedirectStatus
from shortlinks_app.services.short_code_factory import ShortCodeFactory
from shortlinks_app.services.short_code_strategies import ShortCodeStrategy
from shortlinks_app.storage.strategies import FIELD_SEPARATOR, LinkStorageStrategy

logger = logging.getLogger(__name__)


class LinkStore:
    """
    In-memory link store with write-through persistence.

    The store is the only writer of the durable snapshot. Every successful
    mutation (create, update, delete, redirect increment, deactivation)
    rewrites the whole link set through the injected storage strategy
    before returning.

    Thread safety: one re-entrant lock covers the mapping, every
    check-and-increment and the save call, so concurrent redirects on the
    same code can never overspend its click budget and saved snapshots
    always appear in mutation order.

    Owner mismatch is reported exactly like a missing code.
    """

    def __init__(
        self,
        settings: Settings,
        storage: LinkStorageStrategy,
        code_strategy: Optional[ShortCodeStrategy] = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        """
        Initialize the store and load whatever the storage already holds.

        Args:
            settings: Defaults for TTL, click budget and URL length
            storage: Persistence strategy (file, memory)
            code_strategy: Short code strategy, built from settings if omitted
            clock: Source of "now", injectable for tests
        """
        self.settings = settings
        self._storage = storage
        self._code_strategy = code_strategy or ShortCodeFactory.create_strategy(settings)
        self._clock = clock
        self._lock = threading.RLock()
        self._links: Dict[str, ShortLink] = dict(storage.load_all())
        logger.info("Link store initialized. Loaded %d link(s)", len(self._links))

    def __len__(self) -> int:
        with self._lock:
            return len(self._links)

    def __contains__(self, code: str) -> bool:
        with self._lock:
            return code in self._links

    def create(self, target_url: str, owner_id: UUID) -> str:
        """Create a short link with the default TTL and click budget

        Process:
        1. Validate the URL (length, storable characters)
        2. Ask the code strategy for candidates until one is free
        3. Insert and persist

        Raises:
            ValidationError: URL is empty, too long or not storable
            CodeGenerationError: every candidate collided
        """
        self._validate_url(target_url)

        with self._lock:
            now = self._clock()
            code = self._next_free_code(target_url, owner_id, now)
            self._links[code] = ShortLink(
                code=code,
                target_url=target_url,
                owner_id=owner_id,
                created_at=now,
                expires_at=now + timedelta(hours=self.settings.default_ttl_hours),
                max_clicks=self.settings.default_max_clicks,
                current_clicks=0,
                active=True,
            )
            self._persist()

        logger.info("Created %s -> %s for owner %s", code, target_url, owner_id)
        return code

    def get(self, code: str) -> Optional[ShortLink]:
        """Look up a link by code (returns a copy, or None)"""
        with self._lock:
            link = self._links.get(code)
            return link.model_copy() if link is not None else None

    def redirect(self, code: str) -> RedirectResult:
        """
        Decide whether ``code`` may be followed, and count the click.

        Expiry and click budget are re-checked on every call rather than
        trusting the ``active`` flag, since the sweeper runs at coarse
        intervals. An expired or exhausted link is switched off here too.
        The click that spends the last unit of budget is still granted and
        leaves the link inactive.
        """
        with self._lock:
            link = self._links.get(code)
            if link is None:
                return self._refuse(code, RedirectStatus.NOT_FOUND)

            if link.is_expired(self._clock()):
                self._deactivate(link)
                return self._refuse(code, RedirectStatus.EXPIRED)

            if link.is_exhausted():
                self._deactivate(link)
                return self._refuse(code, RedirectStatus.LIMIT_REACHED)

            if not link.active:
                return self._refuse(code, RedirectStatus.INACTIVE)

            link.current_clicks += 1
            if link.is_exhausted():
                link.active = False
                logger.info("Link %s used its last click", code)
            self._persist()
            return RedirectResult.granted(link.target_url)

    def update(
        self,
        code: str,
        owner_id: UUID,
        new_max_clicks: Optional[int] = None,
        new_ttl_hours: Optional[int] = None
    ) -> bool:
        """
        Edit the click budget and/or TTL of an owned link.

        All supplied fields are validated before any is applied; one bad
        field rejects the whole edit. A new TTL replaces the expiry
        (now + ttl), it does not extend it. If the edit leaves clicks
        below the limit, an inactive link comes back to life.

        Only an edit that actually changes a value is persisted.

        Returns:
            True if the edit was accepted, False otherwise (missing code,
            foreign owner, invalid value or no field supplied)
        """
        with self._lock:
            link = self._owned_link(code, owner_id)
            if link is None:
                return False

            if new_max_clicks is not None:
                if new_max_clicks <= 0 or new_max_clicks < link.current_clicks:
                    logger.info("Rejected click limit %d for %s (clicks so far: %d)",
                                new_max_clicks, code, link.current_clicks)
                    return False

            if new_ttl_hours is not None and new_ttl_hours <= 0:
                logger.info("Rejected TTL %d hours for %s", new_ttl_hours, code)
                return False

            if new_max_clicks is None and new_ttl_hours is None:
                return False

            changed = False
            if new_max_clicks is not None and new_max_clicks != link.max_clicks:
                link.max_clicks = new_max_clicks
                changed = True
            if new_ttl_hours is not None:
                expires_at = self._clock() + timedelta(hours=new_ttl_hours)
                if expires_at != link.expires_at:
                    link.expires_at = expires_at
                    changed = True

            if not link.active and link.current_clicks < link.max_clicks:
                link.active = True
                changed = True
                logger.info("Link %s reactivated by its owner", code)

            if not changed:
                logger.debug("Update of %s left it unchanged", code)
                return True

            self._persist()

        logger.info("Updated %s (max_clicks=%s, ttl_hours=%s)", code, new_max_clicks, new_ttl_hours)
        return True

    def delete(self, code: str, owner_id: UUID) -> bool:
        """Remove an owned link. Returns False if missing or not owned."""
        with self._lock:
            if self._owned_link(code, owner_id) is None:
                return False
            del self._links[code]
            self._persist()

        logger.info("Deleted %s", code)
        return True

    def snapshot(self) -> Dict[str, ShortLink]:
        """Copy of every link, safe to iterate while the store keeps changing"""
        with self._lock:
            return {code: link.model_copy() for code, link in self._links.items()}

    def deactivate_stale(self, codes: Iterable[str]) -> Dict[str, DeactivationReason]:
        """
        Switch off the given links if they are still active and expired
        or out of clicks. Conditions are re-checked under the lock, so a
        link revived by its owner since the caller looked is left alone.

        Returns:
            Mapping of deactivated code to the reason
        """
        deactivated: Dict[str, DeactivationReason] = {}

        with self._lock:
            now = self._clock()
            for code in codes:
                link = self._links.get(code)
                if link is None or not link.active:
                    continue
                if link.is_expired(now):
                    reason = DeactivationReason.EXPIRED
                elif link.is_exhausted():
                    reason = DeactivationReason.LIMIT_REACHED
                else:
                    continue
                link.active = False
                deactivated[code] = reason

            if deactivated:
                self._persist()

        return deactivated

    def flush(self) -> bool:
        """Force a full write of the current state"""
        with self._lock:
            return self._persist()

    def _next_free_code(self, target_url: str, owner_id: UUID, now: datetime) -> str:
        for attempt in range(self.settings.max_retries):
            code = self._code_strategy.generate(target_url, owner_id, now, attempt)
            if code not in self._links:
                return code
            logger.debug("Short code collision on %s (attempt %d)", code, attempt + 1)

        raise CodeGenerationError(
            f"Could not generate unique short code after {self.settings.max_retries} attempts"
        )

    def _validate_url(self, target_url: str) -> None:
        if not target_url or not target_url.strip():
            raise ValidationError("URL must not be empty")
        if len(target_url) > self.settings.url_max_length:
            raise ValidationError(
                f"URL is too long ({len(target_url)} > {self.settings.url_max_length} characters)"
            )
        if FIELD_SEPARATOR in target_url or "\n" in target_url or "\r" in target_url:
            raise ValidationError(
                f"URL must not contain line breaks or {FIELD_SEPARATOR!r}"
            )

    def _owned_link(self, code: str, owner_id: UUID) -> Optional[ShortLink]:
        link = self._links.get(code)
        if link is None:
            logger.debug("No link %s", code)
            return None
        if link.owner_id != owner_id:
            logger.debug("Link %s is not owned by %s", code, owner_id)
            return None
        return link

    def _deactivate(self, link: ShortLink) -> None:
        if link.active:
            link.active = False
            self._persist()

    def _refuse(self, code: str, status: RedirectStatus) -> RedirectResult:
        logger.info("Redirect refused for %s: %s", code, status.value)
        return RedirectResult.refused(status)

    def _persist(self) -> bool:
        # Caller holds self._lock
        return self._storage.save_all(list(self._links.values()))
