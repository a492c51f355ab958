"""
Tests for input validation, date ranges and table exports
"""

from datetime import date

import pytest

from app.utils.date_helpers import resolve_date_range
from app.utils.error_handlers import ValidationError
from app.utils.exporters import export_filename, resolve_columns, to_csv, to_pdf
from app.utils.formatters import format_cell, truncate_string
from app.utils.validators import require_website


class TestRequireWebsite:

    @pytest.mark.parametrize("website", ["", "   ", None])
    def test_blank_rejected(self, website):
        with pytest.raises(ValidationError, match="Website URL is required"):
            require_website(website)

    @pytest.mark.parametrize("website", [
        "acme.com",
        "https://www.acme.com/blog",
        "sc-domain:acme.com",
        "http://localhost.dev:8080",
    ])
    def test_accepted_forms(self, website):
        assert require_website(f"  {website} ") == website

    def test_invalid_host(self):
        with pytest.raises(ValidationError):
            require_website("not a website")


class TestResolveDateRange:

    def test_defaults_to_last_28_days(self):
        date_range = resolve_date_range(today=date(2024, 3, 29))

        assert date_range.end_date == date(2024, 3, 29)
        assert date_range.start_date == date(2024, 3, 1)

    def test_keeps_given_dates(self):
        date_range = resolve_date_range(date(2024, 1, 1), date(2024, 1, 31))
        assert (date_range.start_date, date_range.end_date) == (date(2024, 1, 1), date(2024, 1, 31))

    def test_start_after_end(self):
        with pytest.raises(ValidationError):
            resolve_date_range(date(2024, 2, 1), date(2024, 1, 1))


class TestFormatters:

    @pytest.mark.parametrize("value,expected", [
        (None, ""),
        (True, "Yes"),
        (3.0, "3"),
        (2.456, "2.46"),
        (7, "7"),
        (date(2024, 5, 1), "2024-05-01"),
        ({"a": 1}, '{"a": 1}'),
        ("text", "text"),
    ])
    def test_format_cell(self, value, expected):
        assert format_cell(value) == expected

    def test_truncate_string(self):
        assert truncate_string("short", 10) == "short"
        assert truncate_string("a" * 20, 10) == "aaaaaaa..."


class TestExporters:

    def test_filename_slug(self):
        assert export_filename("SEO Keywords: acme.com", "csv") == "seo-keywords-acme-com.csv"
        assert export_filename("!!!", "pdf") == "export.pdf"

    def test_columns_in_first_seen_order(self):
        rows = [{"b": 1, "a": 2}, {"c": 3, "a": 4}]
        assert resolve_columns([], rows) == ["b", "a", "c"]
        assert resolve_columns(["a"], rows) == ["a"]

    def test_empty_rows_rejected(self):
        with pytest.raises(ValidationError, match="no data"):
            resolve_columns(["a"], [])

    def test_csv_selected_columns(self):
        content = to_csv(["name", "status"], [{"name": "Ann", "status": "New", "email": "a@x.io"}])
        assert content.splitlines() == ["name,status", "Ann,New"]

    def test_pdf_with_long_cells(self):
        rows = [{"url": "https://acme.com/" + "x" * 200, "title": "Home"}] * 40

        content = to_pdf("Page Meta Data", [], rows)

        assert content.startswith(b"%PDF")
        assert content.rstrip().endswith(b"%%EOF")
