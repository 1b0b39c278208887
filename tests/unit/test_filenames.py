"""
Tests for the filename extractor (content type → extension resolution).
"""

import pytest

from extractors.filenames import (
    FORMAT_CONTENT_TYPES,
    MIME_EXTENSIONS,
    bare_mime,
    content_type_for_format,
    default_export_format,
    editor_path,
    export_options,
    extension_for,
    filename_from_disposition,
    resolve_filename,
)


class TestResolveFilename:
    """Priority: requested format, then correction, then append."""

    def test_requested_format_replaces_extension(self):
        assert resolve_filename("Report.pdf", "application/pdf", "xlsx") == "Report.xlsx"

    def test_requested_format_appends_when_no_extension(self):
        assert resolve_filename("Budget", "text/csv", "csv") == "Budget.csv"

    def test_appends_extension_for_content_type(self):
        assert resolve_filename("data", "text/csv") == "data.csv"

    def test_content_type_parameters_ignored(self):
        assert resolve_filename("data", "text/csv; charset=utf-8") == "data.csv"

    def test_corrects_mismatched_extension(self):
        assert resolve_filename("photo.jpeg", "image/jpeg") == "photo.jpg"
        assert resolve_filename("notes.txt", "application/pdf") == "notes.pdf"

    def test_keeps_matching_extension(self):
        assert resolve_filename("Report.pdf", "application/pdf") == "Report.pdf"

    def test_extension_comparison_is_case_insensitive(self):
        assert resolve_filename("Report.PDF", "application/pdf") == "Report.PDF"

    def test_keeps_extension_for_unknown_type(self):
        assert resolve_filename("archive.xyz", "application/x-unknown") == "archive.xyz"

    def test_fallback_extension(self):
        assert resolve_filename("blob", "application/x-unknown") == "blob.bin"
        assert resolve_filename("blob", None) == "blob.bin"

    def test_dotted_name_with_spaces_is_not_an_extension(self):
        assert resolve_filename("v1. final draft", "application/pdf") == "v1. final draft.pdf"

    @pytest.mark.parametrize("base,content_type,fmt", [
        ("Report.pdf", "application/pdf", None),
        ("data", "text/csv", None),
        ("Report.pdf", "application/pdf", "xlsx"),
        ("photo.jpeg", "image/jpeg", None),
        ("blob", None, None),
    ])
    def test_idempotent(self, base, content_type, fmt):
        once = resolve_filename(base, content_type, fmt)
        assert resolve_filename(once, content_type, fmt) == once


class TestTables:

    def test_native_types_map_to_interchange_formats(self):
        assert extension_for("application/vnd.google-apps.document") == "docx"
        assert extension_for("application/vnd.google-apps.spreadsheet") == "xlsx"
        assert extension_for("application/vnd.google-apps.presentation") == "pptx"

    def test_format_content_types(self):
        assert content_type_for_format("xlsx") == (
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        )
        assert content_type_for_format("CSV") == "text/csv"
        assert content_type_for_format("nope") == "application/octet-stream"

    def test_tables_are_read_only(self):
        with pytest.raises(TypeError):
            MIME_EXTENSIONS["application/x-new"] = "new"  # type: ignore[index]
        with pytest.raises(TypeError):
            FORMAT_CONTENT_TYPES["new"] = "application/x-new"  # type: ignore[index]

    def test_bare_mime(self):
        assert bare_mime("Text/CSV; charset=utf-8") == "text/csv"
        assert bare_mime(None) == ""


class TestNativeExport:

    def test_spreadsheet(self):
        mime = "application/vnd.google-apps.spreadsheet"
        assert editor_path(mime) == "spreadsheets"
        assert default_export_format(mime) == "xlsx"
        assert export_options(mime) == ("xlsx", "csv", "pdf")

    def test_document(self):
        mime = "application/vnd.google-apps.document"
        assert editor_path(mime) == "document"
        assert default_export_format(mime) == "pdf"
        assert export_options(mime) == ("pdf", "docx", "txt", "rtf")

    def test_presentation(self):
        mime = "application/vnd.google-apps.presentation"
        assert default_export_format(mime) == "pptx"
        assert export_options(mime) == ("pptx", "pdf")

    def test_other_native_type_defaults_to_pdf(self):
        mime = "application/vnd.google-apps.form"
        assert editor_path(mime) is None
        assert default_export_format(mime) == "pdf"
        assert export_options(mime) == ("pdf",)


class TestFilenameFromDisposition:

    def test_quoted(self):
        assert filename_from_disposition('attachment; filename="Annual Report.pdf"') == "Annual Report.pdf"

    def test_quoted_with_escapes(self):
        assert filename_from_disposition(r'attachment; filename="say \"hi\".txt"') == 'say "hi".txt'

    def test_bare(self):
        assert filename_from_disposition("attachment; filename=data.csv") == "data.csv"

    def test_extended_form_preferred(self):
        header = "attachment; filename=\"Resume.pdf\"; filename*=UTF-8''R%C3%A9sum%C3%A9.pdf"
        assert filename_from_disposition(header) == "Résumé.pdf"

    @pytest.mark.parametrize("header", [None, "", "inline"])
    def test_absent(self, header):
        assert filename_from_disposition(header) is None
