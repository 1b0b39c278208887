"""
Tests for Drive link → file ID extraction.
"""

import pytest

from models import ErrorKind, GrabError
from validation import extract_file_id, find_file_id, is_drive_link


class TestFindFileId:
    """Tests for the link shapes we recognise."""

    def test_extracts_from_drive_file_url(self):
        url = "https://drive.google.com/file/d/0BwGZ5_abc123/view"
        assert find_file_id(url) == "0BwGZ5_abc123"

    def test_extracts_from_file_url_with_query(self):
        url = "https://drive.google.com/file/d/1AbC-dEf_123/view?usp=sharing"
        assert find_file_id(url) == "1AbC-dEf_123"

    def test_extracts_from_open_url(self):
        url = "https://drive.google.com/open?id=1XYZ789abc"
        assert find_file_id(url) == "1XYZ789abc"

    def test_extracts_from_open_url_with_other_params_first(self):
        url = "https://drive.google.com/open?authuser=0&id=1XYZ789abc"
        assert find_file_id(url) == "1XYZ789abc"

    def test_extracts_from_docs_url(self):
        url = "https://docs.google.com/document/d/1ABC123_test/edit"
        assert find_file_id(url) == "1ABC123_test"

    def test_extracts_from_sheets_url_with_fragment(self):
        url = "https://docs.google.com/spreadsheets/d/1XYZ789/edit#gid=0"
        assert find_file_id(url) == "1XYZ789"

    def test_extracts_from_slides_url_with_account_segment(self):
        url = "https://docs.google.com/presentation/u/1/d/1Slides_ID-9/edit"
        assert find_file_id(url) == "1Slides_ID-9"

    def test_extracts_from_uc_download_url(self):
        url = "https://drive.google.com/uc?id=1Download99&export=download"
        assert find_file_id(url) == "1Download99"

    def test_path_shape_wins_over_query(self):
        """file/d/{id} is preferred to a stray id= parameter."""
        url = "https://drive.google.com/file/d/1PathId_123/view?id=1QueryId_456"
        assert find_file_id(url) == "1PathId_123"

    def test_bare_id_passes_through(self):
        assert find_file_id("1AbCdEfGhIjKlMnOp") == "1AbCdEfGhIjKlMnOp"

    def test_strips_whitespace(self):
        assert find_file_id("  1AbCdEfGhIjKlMnOp \n") == "1AbCdEfGhIjKlMnOp"

    def test_short_bare_string_is_not_an_id(self):
        assert find_file_id("abc") is None

    def test_foreign_url_with_id_param_is_rejected(self):
        assert find_file_id("https://example.com/page?id=1AbCdEfGhIjKlMnOp") is None

    def test_drive_host_in_foreign_query_is_rejected(self):
        assert find_file_id("https://evil.example/?u=drive.google.com&id=XXXXXXXXXX") is None

    @pytest.mark.parametrize("link", [None, "", "   "])
    def test_empty_input(self, link):
        assert find_file_id(link) is None


class TestExtractFileId:
    """extract_file_id raises instead of returning None."""

    def test_returns_id(self):
        assert extract_file_id("https://drive.google.com/file/d/1AbC-dEf_123/view") == "1AbC-dEf_123"

    def test_missing_identifier(self):
        with pytest.raises(GrabError) as exc_info:
            extract_file_id("")
        assert exc_info.value.kind == ErrorKind.INVALID_INPUT
        assert exc_info.value.status_classification == 400

    def test_unrecognised_link(self):
        with pytest.raises(GrabError) as exc_info:
            extract_file_id("https://drive.google.com/drive/my-drive")
        assert exc_info.value.kind == ErrorKind.INVALID_INPUT
        assert "Expected format" in exc_info.value.message


class TestIsDriveLink:

    def test_drive_and_docs_hosts(self):
        assert is_drive_link("https://drive.google.com/file/d/x/view")
        assert is_drive_link("https://docs.google.com/document/d/x/edit")

    def test_other_hosts(self):
        assert not is_drive_link("https://example.com/file/d/x/view")

    def test_host_named_only_in_query(self):
        assert not is_drive_link("https://evil.example/?u=drive.google.com&id=XXXXXXXXXX")

    def test_lookalike_host(self):
        assert not is_drive_link("https://drive.google.com.evil.example/file/d/x/view")
