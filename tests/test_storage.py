"""
Tests for link storage strategies and the line format.
"""
import logging
import uuid
from datetime import datetime

import pytest

from shortlinks_app.config import Settings
from shortlinks_app.exceptions import ParseError
from shortlinks_app.models.link import ShortLink
from shortlinks_app.services.link_store import LinkStore
from shortlinks_app.storage.factory import LinkStorageBackend, LinkStorageFactory
from shortlinks_app.storage.strategies import (
    FileLinkStorage,
    InMemoryLinkStorage,
    decode_link,
    encode_link
)

OWNER = uuid.UUID("6f1c2a3e-0d4b-4a8e-9c57-3b2f1e0a9d11")


def make_link(code="abc12345", **overrides) -> ShortLink:
    fields = dict(
        code=code,
        target_url="https://example.com/page?q=1",
        owner_id=OWNER,
        created_at=datetime(2026, 1, 1, 10, 0, 0),
        expires_at=datetime(2026, 1, 2, 10, 0, 0, 250000),
        max_clicks=10,
        current_clicks=3,
        active=True,
    )
    fields.update(overrides)
    return ShortLink(**fields)


GOOD_LINE = (
    f"abc12345|https://example.com/page?q=1|{OWNER}|"
    "2026-01-01T10:00:00|2026-01-02T10:00:00.250000|10|3|true"
)


class TestLineFormat:
    """Test encoding and decoding of single records"""

    def test_encode_field_order(self):
        assert encode_link(make_link()) == GOOD_LINE

    def test_encode_inactive_flag(self):
        assert encode_link(make_link(active=False)).endswith("|false")

    def test_decode_good_line(self):
        assert decode_link(GOOD_LINE) == make_link()

    def test_decode_accepts_uppercase_flag(self):
        """Test flags written as TRUE/FALSE are still understood"""
        link = decode_link(GOOD_LINE[:-len("true")] + "FALSE")
        assert link.active is False

    @pytest.mark.parametrize("line, reason", [
        ("abc|https://e.com|x", "fields"),
        (GOOD_LINE + "|extra", "fields"),
        (GOOD_LINE.replace(str(OWNER), "not-a-uuid"), "uuid"),
        (GOOD_LINE.replace("2026-01-01T10:00:00", "yesterday"), "timestamp"),
        (GOOD_LINE.replace("|10|3|", "|ten|3|"), "int"),
        (GOOD_LINE.replace("|10|3|", "|0|0|"), "max_clicks > 0"),
        (GOOD_LINE.replace("|10|3|", "|10|-1|"), "clicks >= 0"),
        (GOOD_LINE.replace("|true", "|yes"), "flag"),
        ("|" + GOOD_LINE.split("|", 1)[1], "empty code"),
    ])
    def test_decode_rejects_malformed(self, line, reason):
        with pytest.raises(ParseError):
            decode_link(line)


class TestFileLinkStorage:
    """Test flat file persistence"""

    def test_missing_file_is_empty(self, file_storage):
        assert file_storage.load_all() == {}

    def test_round_trip(self, file_storage):
        """Test that saving and reloading reproduces every field"""
        links = [
            make_link("aaaa1111"),
            make_link("bbbb2222", current_clicks=10, active=False),
            make_link("cccc3333", owner_id=uuid.uuid4(), target_url="https://python.org"),
        ]

        assert file_storage.save_all(links) is True
        loaded = file_storage.load_all()

        assert loaded == {link.code: link for link in links}

    def test_file_content(self, file_storage):
        """Test one line per link, no header, newline terminated"""
        file_storage.save_all([make_link()])

        content = file_storage.path.read_text(encoding="utf-8")

        assert content == GOOD_LINE + "\n"

    def test_save_replaces_whole_file(self, file_storage):
        file_storage.save_all([make_link("aaaa1111"), make_link("bbbb2222")])
        file_storage.save_all([make_link("cccc3333")])

        assert list(file_storage.load_all()) == ["cccc3333"]

    def test_no_temp_file_left_behind(self, file_storage):
        file_storage.save_all([make_link()])

        assert file_storage.path.exists()
        assert not file_storage.temp_path.exists()

    def test_malformed_lines_skipped(self, file_storage, caplog):
        """Test that bad lines are logged and skipped, the rest still loads"""
        file_storage.path.write_text(
            "\n".join([
                GOOD_LINE,
                "garbage",
                GOOD_LINE.replace("abc12345", "zzz99999").replace(str(OWNER), "nope"),
                "",
                GOOD_LINE.replace("abc12345", "def67890"),
            ]) + "\n",
            encoding="utf-8",
        )

        with caplog.at_level(logging.WARNING):
            loaded = file_storage.load_all()

        assert set(loaded) == {"abc12345", "def67890"}
        assert "line 2" in caplog.text
        assert "line 3" in caplog.text

    def test_invalid_utf8_line_skipped(self, file_storage, caplog):
        """Test that undecodable bytes cost only their own line"""
        file_storage.path.write_bytes(
            GOOD_LINE.encode("utf-8") + b"\n"
            + b"bad\xff\xfe|x\n"
            + GOOD_LINE.replace("abc12345", "def67890").encode("utf-8") + b"\n"
        )

        with caplog.at_level(logging.WARNING):
            loaded = file_storage.load_all()

        assert set(loaded) == {"abc12345", "def67890"}
        assert "line 2" in caplog.text
        assert "UTF-8" in caplog.text

    def test_store_starts_over_undecodable_file(self, file_storage, settings, clock):
        """Test the store still comes up and serves the good links"""
        file_storage.path.write_bytes(GOOD_LINE.encode("utf-8") + b"\nbad\xff\xfe|x\n")

        store = LinkStore(settings=settings, storage=file_storage, clock=clock)

        assert len(store) == 1
        assert store.get("abc12345") == make_link()

    def test_write_failure_returns_false(self, tmp_path, caplog):
        """Test that an unwritable location is logged, not raised"""
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("x")
        storage = FileLinkStorage(path=str(blocker / "links.txt"))

        with caplog.at_level(logging.ERROR):
            assert storage.save_all([make_link()]) is False

        assert "Could not write" in caplog.text


class TestInMemoryLinkStorage:
    """Test in-memory persistence"""

    def test_round_trip_through_codec(self):
        storage = InMemoryLinkStorage()

        storage.save_all([make_link()])

        assert storage.lines == [GOOD_LINE]
        assert storage.load_all() == {"abc12345": make_link()}
        assert storage.save_count == 1


class TestLinkStorageFactory:
    """Test storage factory"""

    def test_creates_file_storage(self, tmp_path):
        settings = Settings(_env_file=None, storage_file=str(tmp_path / "x.txt"))

        storage = LinkStorageFactory.create(LinkStorageBackend.FILE, settings)

        assert isinstance(storage, FileLinkStorage)
        assert storage.path == tmp_path / "x.txt"

    def test_creates_memory_storage(self):
        storage = LinkStorageFactory.create(LinkStorageBackend.MEMORY, Settings(_env_file=None))

        assert isinstance(storage, InMemoryLinkStorage)

    def test_backend_from_settings_value(self):
        assert LinkStorageBackend("memory") is LinkStorageBackend.MEMORY
        with pytest.raises(ValueError):
            LinkStorageBackend("redis")
