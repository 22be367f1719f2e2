"""
Link Lifecycle Monitor

Background sweeper that switches off links whose TTL has passed or whose
click budget is spent.

Architecture:
- One daemon thread, first sweep right away, then every cleanup interval
- Reads a snapshot of the store, never the live mapping
- Routes every deactivation back through LinkStore, which persists it
- Never deletes links, only flips ``active`` off
"""

import logging
import threading
from datetime import datetime
from typing import Callable, Optional

from shortlinks_app.config import Settings
from shortlinks_app.schemas.link import DeactivationReason, LinkStatus, SweepReport
from shortlinks_app.services.link_store import LinkStore

logger = logging.getLogger(__name__)


class LifecycleMonitor:
    """
    Periodic sweeper over a LinkStore.

    Features:
    - A failing sweep is logged and the schedule keeps going
    - stop() waits for an in-flight sweep (and its write) to finish
    - No sweep starts once stop() has been requested
    """

    def __init__(
        self,
        store: LinkStore,
        settings: Settings,
        clock: Callable[[], datetime] = datetime.now,
        interval_seconds: Optional[float] = None
    ):
        """
        Initialize monitor with dependencies.

        Args:
            store: Link store to sweep
            settings: Application settings (cleanup interval)
            clock: Source of "now", injectable for tests
            interval_seconds: Override for the configured interval
        """
        self.store = store
        self.settings = settings
        self._clock = clock
        if interval_seconds is None:
            interval_seconds = settings.cleanup_interval_minutes * 60
        self.interval_seconds = interval_seconds

        self.running = False
        self.sweep_count = 0
        self.failed_sweeps = 0
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._state_lock = threading.Lock()

    def start(self) -> bool:
        """
        Start sweeping in the background.

        Returns:
            True if a sweeper thread is running afterwards, False if a
            previous thread (stopped with a timeout) is still finishing
        """
        with self._state_lock:
            if self.running:
                return True
            if self._thread is not None and self._thread.is_alive():
                logger.warning("⚠️  Previous sweep still in progress, not starting a second one")
                return False
            self._stop_event.clear()
            self._thread = threading.Thread(
                target=self._run,
                name="link-lifecycle-monitor",
                daemon=True
            )
            self.running = True
            self._thread.start()

        logger.info("🚀 Lifecycle monitor started. Sweeping every %ss", self.interval_seconds)
        return True

    def stop(self, timeout: Optional[float] = None):
        """Stop the monitor and wait for the current sweep to finish"""
        with self._state_lock:
            if not self.running:
                return
            self._stop_event.set()
            thread = self._thread
            self.running = False

        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        logger.info("🛑 Lifecycle monitor stopped after %d sweep(s)", self.sweep_count)

    def sweep(self) -> SweepReport:
        """
        Run one sweep over a snapshot of the store.

        A link is a candidate when it is active and either expired or out of
        clicks. Candidates go to the store, which re-checks and persists.
        """
        now = self._clock()
        links = self.store.snapshot()

        candidates = [
            code for code, link in links.items()
            if link.active and (link.is_expired(now) or link.is_exhausted())
        ]
        deactivated = self.store.deactivate_stale(candidates) if candidates else {}

        report = SweepReport(checked=len(links))
        for code, reason in deactivated.items():
            if reason is DeactivationReason.EXPIRED:
                report.expired += 1
            else:
                report.limit_reached += 1
            logger.info("Link %s deactivated: %s", code, reason.value)

        if report.deactivated:
            logger.info(
                "📊 Sweep finished: %d by click limit, %d by expiry",
                report.limit_reached, report.expired
            )

        self.sweep_count += 1
        return report

    def check_link_status(self, code: str) -> Optional[LinkStatus]:
        """Lifecycle status of one link, without changing anything"""
        link = self.store.get(code)
        if link is None:
            return None

        return LinkStatus(
            code=link.code,
            active=link.active,
            expired=link.is_expired(self._clock()),
            limit_reached=link.is_exhausted(),
            remaining_clicks=link.remaining_clicks,
            expires_at=link.expires_at,
        )

    def _run(self):
        while not self._stop_event.is_set():
            self._tick()
            if self._stop_event.wait(self.interval_seconds):
                break

    def _tick(self):
        try:
            self.sweep()
        except Exception:
            self.failed_sweeps += 1
            logger.exception("❌ Link sweep failed, next one still scheduled")
