"""Unit tests for workspace manager."""

import json
from pathlib import Path

import pytest

from workspace import (
    get_deposit_folder,
    safe_filename,
    slugify,
    write_manifest,
    write_stream,
)


class TestSlugify:
    """Tests for the slugify function."""

    def test_basic_slug(self) -> None:
        assert slugify("Quarterly Report 2026") == "quarterly-report-2026"

    def test_removes_special_chars(self) -> None:
        assert slugify("Q4 Planning (Draft)!!!") == "q4-planning-draft"

    def test_handles_unicode(self) -> None:
        assert slugify("Über Cool Präsentation") == "uber-cool-prasentation"

    def test_truncates_long_titles(self) -> None:
        long_title = "This is a very long presentation title that exceeds the maximum"
        assert len(slugify(long_title, max_length=30)) <= 30

    def test_empty_string(self) -> None:
        assert slugify("") == "untitled"
        assert slugify("!!!") == "untitled"


class TestSafeFilename:

    def test_plain_name_unchanged(self) -> None:
        assert safe_filename("Budget 2026.xlsx") == "Budget 2026.xlsx"

    def test_path_separators_replaced(self) -> None:
        assert safe_filename("../../etc/passwd") == "_.._etc_passwd"
        assert safe_filename("a\\b.txt") == "a_b.txt"

    def test_control_characters_replaced(self) -> None:
        assert safe_filename("bad\nname\x00.pdf") == "bad_name_.pdf"

    def test_hidden_and_empty(self) -> None:
        assert safe_filename(".bashrc") == "bashrc"
        assert safe_filename("") == "file"
        assert safe_filename("...") == "file"


class TestGetDepositFolder:

    def test_creates_folder(self, tmp_path: Path) -> None:
        folder = get_deposit_folder("Test Report.pdf", "1ABC123XYZ", base_path=tmp_path)
        assert folder.exists()
        assert folder == tmp_path / "drivegrab-fetch" / "test-report-pdf--1ABC123XYZ"

    def test_truncates_long_id(self, tmp_path: Path) -> None:
        folder = get_deposit_folder("Doc", "1ABCDEFGHIJKLMNOPQRSTUVWXYZ", base_path=tmp_path)
        assert folder.name == "doc--1ABCDEFGHIJK"

    def test_idempotent(self, tmp_path: Path) -> None:
        first = get_deposit_folder("Doc", "1ABC", base_path=tmp_path)
        second = get_deposit_folder("Doc", "1ABC", base_path=tmp_path)
        assert first == second


class TestWriteStream:

    def test_writes_chunks(self, tmp_path: Path) -> None:
        path, written = write_stream(tmp_path, "data.bin", iter([b"ab", b"", b"cde"]))
        assert path == tmp_path / "data.bin"
        assert written == 5
        assert path.read_bytes() == b"abcde"
        assert not (tmp_path / "data.bin.part").exists()

    def test_overwrites_previous_download(self, tmp_path: Path) -> None:
        (tmp_path / "data.bin").write_bytes(b"old contents")
        path, _ = write_stream(tmp_path, "data.bin", [b"new"])
        assert path.read_bytes() == b"new"

    def test_sanitises_filename(self, tmp_path: Path) -> None:
        path, _ = write_stream(tmp_path, "../escape.txt", [b"x"])
        assert path.parent == tmp_path

    def test_failure_removes_partial(self, tmp_path: Path) -> None:
        def chunks():
            yield b"partial"
            raise ConnectionError("reset")

        with pytest.raises(ConnectionError):
            write_stream(tmp_path, "data.bin", chunks())

        assert list(tmp_path.iterdir()) == []


class TestWriteManifest:

    def test_manifest_contents(self, tmp_path: Path) -> None:
        path = write_manifest(tmp_path, "1ABC", "Report.pdf", extra={"strategy": "direct-download"})
        manifest = json.loads(path.read_text())
        assert manifest["id"] == "1ABC"
        assert manifest["filename"] == "Report.pdf"
        assert manifest["strategy"] == "direct-download"
        assert "fetched_at" in manifest
