"""
Link store process.

Loads settings, restores the link file, and keeps the lifecycle monitor
sweeping until SIGINT/SIGTERM. On shutdown the monitor is stopped (the
in-flight sweep finishes) and the store is flushed one last time.

Usage:
    python main.py
"""

import logging
import signal
import sys
import threading

from shortlinks_app.config import Settings
from shortlinks_app.lifecycle.monitor import LifecycleMonitor
from shortlinks_app.logging_config import setup_logging
from shortlinks_app.services.link_store import LinkStore
from shortlinks_app.storage.factory import LinkStorageBackend, LinkStorageFactory

logger = logging.getLogger("shortlinks_app.main")


def build_components(settings: Settings):
    """Wire storage, store and monitor from one Settings object"""
    storage = LinkStorageFactory.create(LinkStorageBackend(settings.storage_backend), settings)
    store = LinkStore(settings=settings, storage=storage)
    monitor = LifecycleMonitor(store=store, settings=settings)
    return store, monitor


def main() -> int:
    settings = Settings()
    setup_logging(settings.log_level, settings.log_file)

    logger.info("=" * 60)
    logger.info("🔧 %s - link store", settings.app_name)
    logger.info("Storage backend: %s (%s)", settings.storage_backend, settings.storage_file)
    logger.info("Defaults: ttl=%dh, max_clicks=%d, code length=%d",
                settings.default_ttl_hours, settings.default_max_clicks,
                settings.short_code_length)
    logger.info("=" * 60)

    store, monitor = build_components(settings)
    shutdown = threading.Event()

    def _signal_handler(signum, frame):
        """Handle signals for graceful shutdown"""
        logger.info("Received signal %s. Shutting down gracefully...", signum)
        shutdown.set()

    signal.signal(signal.SIGINT, _signal_handler)
    signal.signal(signal.SIGTERM, _signal_handler)

    monitor.start()
    try:
        while not shutdown.wait(1.0):
            pass
    finally:
        monitor.stop()
        if not store.flush():
            logger.error("❌ Final flush failed, last changes may be lost")
            return 1

    logger.info("Stopped with %d link(s) stored", len(store))
    return 0


if __name__ == "__main__":
    sys.exit(main())
