"""
Link storage strategies using Strategy Pattern.

Allows switching where the link set is persisted:
- File: durable line-oriented file, one link per line (default)
- InMemory: keeps the last snapshot in process (tests, throwaway runs)

Every save is a whole-snapshot replace, never an append.

Line format (exactly 8 fields, no header):
    code|target_url|owner_id|created_at|expires_at|max_clicks|current_clicks|active
"""

import logging
import os
import threading
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Union
from uuid import UUID

from shortlinks_app.exceptions import ParseError, PersistenceError
from shortlinks_app.models.link import ShortLink

logger = logging.getLogger(__name__)

FIELD_SEPARATOR = "|"
FIELD_COUNT = 8


def encode_link(link: ShortLink) -> str:
    """Render a link as one storage line (without the newline)"""
    return FIELD_SEPARATOR.join([
        link.code,
        link.target_url,
        str(link.owner_id),
        link.created_at.isoformat(),
        link.expires_at.isoformat(),
        str(link.max_clicks),
        str(link.current_clicks),
        "true" if link.active else "false",
    ])


def decode_link(line: str) -> ShortLink:
    """
    Parse one storage line.

    Raises:
        ParseError: wrong field count or any field that does not parse
    """
    parts = line.split(FIELD_SEPARATOR)
    if len(parts) != FIELD_COUNT:
        raise ParseError(f"expected {FIELD_COUNT} fields, got {len(parts)}", line)

    code, target_url, owner, created, expires, max_clicks, clicks, active = parts

    if not code:
        raise ParseError("empty short code", line)
    if active.lower() not in ("true", "false"):
        raise ParseError(f"invalid active flag {active!r}", line)

    try:
        return ShortLink(
            code=code,
            target_url=target_url,
            owner_id=UUID(owner),
            created_at=datetime.fromisoformat(created),
            expires_at=datetime.fromisoformat(expires),
            max_clicks=int(max_clicks),
            current_clicks=int(clicks),
            active=active.lower() == "true",
        )
    except ValueError as e:
        # Covers UUID, ISO timestamps, ints and pydantic's range checks
        raise ParseError(str(e).splitlines()[0], line) from e


def _as_text(raw: Union[str, bytes]) -> str:
    if isinstance(raw, str):
        return raw
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ParseError(f"invalid UTF-8 at byte {e.start}", repr(raw)) from e


def decode_lines(lines: Iterable[Union[str, bytes]], source: str = "storage") -> Dict[str, ShortLink]:
    """
    Decode many lines, skipping (and logging) malformed ones.

    Lines may be raw bytes; each is decoded as UTF-8 on its own so one bad
    byte only costs its own line. Blank lines are ignored. A later
    duplicate code replaces an earlier one.
    """
    links: Dict[str, ShortLink] = {}
    skipped = 0

    for line_no, raw in enumerate(lines, start=1):
        try:
            line = _as_text(raw).rstrip("\r\n")
            if not line.strip():
                continue
            link = decode_link(line)
        except ParseError as e:
            skipped += 1
            logger.warning("⚠️  Skipping %s line %d: %s", source, line_no, e)
            continue
        if link.code in links:
            logger.warning("⚠️  Duplicate code %r at %s line %d, keeping the later one",
                           link.code, source, line_no)
        links[link.code] = link

    if skipped:
        logger.warning("Skipped %d malformed line(s) in %s", skipped, source)
    return links


class LinkStorageStrategy(ABC):
    """
    Abstract base class for link storage strategies.

    Implementations must serialize their own writes: the store may call
    ``save_all`` from the foreground and from the sweeper thread.

    Pattern: Strategy Pattern
    """

    @abstractmethod
    def load_all(self) -> Dict[str, ShortLink]:
        """
        Load every well-formed link.

        Returns:
            Mapping of code to link (empty when nothing is stored yet)
        """
        pass

    @abstractmethod
    def save_all(self, links: Iterable[ShortLink]) -> bool:
        """
        Replace the stored set with ``links``.

        Returns:
            True if the snapshot is durable, False if the write failed
            (the failure is logged, never raised)
        """
        pass


class FileLinkStorage(LinkStorageStrategy):
    """
    Flat file implementation.

    Writes go to ``<file>.tmp``, get fsync'ed, then replace the real file,
    so a crash mid-write leaves the previous snapshot in place.

    Use case:
    - Single-process deployments
    - Anything that must survive a restart
    """

    def __init__(self, path: str = "url_shortener_links.txt"):
        """
        Initialize file storage.

        Args:
            path: Location of the link file (created on first save)
        """
        self.path = Path(path)
        self._lock = threading.Lock()

    @property
    def temp_path(self) -> Path:
        return self.path.with_name(self.path.name + ".tmp")

    def load_all(self) -> Dict[str, ShortLink]:
        """Load links from the file; a missing file means an empty store"""
        with self._lock:
            if not self.path.exists():
                logger.info("No link file at %s, starting empty", self.path)
                return {}
            try:
                lines = self._read_lines()
            except PersistenceError as e:
                logger.error("❌ %s", e)
                return {}

        return decode_lines(lines, source=str(self.path))

    def save_all(self, links: Iterable[ShortLink]) -> bool:
        """Rewrite the whole file with the given links"""
        lines = [encode_link(link) for link in links]
        with self._lock:
            try:
                self._write_lines(lines)
            except PersistenceError as e:
                logger.error("❌ %s", e)
                return False
        return True

    def _read_lines(self) -> List[bytes]:
        try:
            with open(self.path, "rb") as fh:
                return fh.readlines()
        except OSError as e:
            raise PersistenceError(f"Could not read link file {self.path}: {e}") from e

    def _write_lines(self, lines: List[str]) -> None:
        tmp = self.temp_path
        try:
            if self.path.parent and not self.path.parent.exists():
                self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp, "w", encoding="utf-8", newline="\n") as fh:
                for line in lines:
                    fh.write(line + "\n")
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp, self.path)
        except OSError as e:
            raise PersistenceError(f"Could not write link file {self.path}: {e}") from e


class InMemoryLinkStorage(LinkStorageStrategy):
    """
    In-memory implementation that still goes through the line codec.

    Pros:
    - No filesystem access
    - Good for development and testing

    Cons:
    - Lost on restart
    """

    def __init__(self):
        """Initialize in-memory storage"""
        self._lines: List[str] = []
        self._lock = threading.Lock()
        self.save_count = 0

    @property
    def lines(self) -> List[str]:
        """Copy of the last saved snapshot, one encoded line per link"""
        with self._lock:
            return list(self._lines)

    def load_all(self) -> Dict[str, ShortLink]:
        with self._lock:
            lines = list(self._lines)
        return decode_lines(lines, source="memory")

    def save_all(self, links: Iterable[ShortLink]) -> bool:
        lines = [encode_link(link) for link in links]
        with self._lock:
            self._lines = lines
            self.save_count += 1
        return True
