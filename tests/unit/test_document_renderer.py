"""Unit tests for receipt document rendering."""

from datetime import datetime
from pathlib import Path

import pytest

from core.extraction.rules import Rule
from core.output.document_renderer import (
    DocumentPathError,
    DocumentRenderer,
    format_field_name,
    generate_filename,
    sanitize_filename_value,
)


class TestGenerateFilename:
    """Tests for output template substitution."""

    def test_substitutes_and_sanitizes(self):
        name = generate_filename("uber_{trip_date}_{amount}.pdf", {"trip_date": "March 3, 2024", "amount": "$23.45"})
        assert name == "uber_March_3__2024__23.45.pdf"

    def test_unknown_values_are_substituted(self):
        assert generate_filename("x_{a}.pdf", {"a": "Unknown"}) == "x_Unknown.pdf"

    def test_list_values_are_stringified(self):
        name = generate_filename("x_{items}", {"items": [("a", "b")]})
        assert name.startswith("x_")
        assert name.endswith(".pdf")
        assert "(" not in name and " " not in name

    def test_unmatched_placeholder_left_in_place(self):
        assert generate_filename("{a}_{b}.pdf", {"a": "1"}) == "1_{b}.pdf"

    def test_fallback_when_nothing_substituted(self):
        now = datetime(2024, 3, 3, 10, 15, 30, 123000)
        name = generate_filename("static.pdf", {"a": "1"}, now=now)
        assert name == "receipt_2024-03-03T10-15-30-123000.pdf"

    def test_fallback_for_empty_template(self):
        assert generate_filename("", {}).startswith("receipt_")

    def test_custom_extension(self):
        assert generate_filename("r_{a}.pdf", {"a": "1"}, extension=".txt") == "r_1.txt"

    def test_template_without_extension(self):
        assert generate_filename("r_{a}", {"a": "1"}) == "r_1.pdf"

    @pytest.mark.parametrize("value,expected", [
        ("a/b", "a_b"),
        ("Café", "Caf_"),
        ("1.50", "1.50"),
        ("a-b", "a-b"),
        (12, "12"),
    ])
    def test_sanitize(self, value, expected):
        assert sanitize_filename_value(value) == expected


class TestFormatFieldName:

    def test_title_cases_words(self):
        assert format_field_name("trip_date") == "Trip Date"

    def test_single_word(self):
        assert format_field_name("amount") == "Amount"


class TestDocumentRenderer:
    """Tests for writing receipt documents."""

    @pytest.fixture
    def renderer(self, tmp_path):
        return DocumentRenderer(output_dir=tmp_path / "docs")

    def test_render_writes_document(self, renderer, make_message, uber_rule_data):
        record = {"trip_date": "2024-03-03", "amount": "$23.45"}
        path = Path(renderer.render(record, Rule.from_dict(uber_rule_data), make_message(html="<p></p>")))

        assert path.exists()
        assert path.name == "uber_2024-03-03__23.45.pdf"
        assert path.read_bytes().startswith(b"%PDF")

    def test_render_text_lists_headers_and_fields(self, renderer, make_message):
        text = renderer.render_text({"trip_date": "2024-03-03", "amount": "$23.45"}, make_message(html="<p></p>"))
        assert "**Subject:** Your Uber receipt" in text
        assert "**Trip Date:** 2024-03-03" in text
        assert "**Amount:** $23.45" in text

    def test_render_html(self, renderer, make_message):
        page = renderer.render_html({"amount": "$23.45"}, make_message(html="<p></p>"))
        assert page.startswith("<!DOCTYPE html>")
        assert "<h1>Email receipt</h1>" in page
        assert "<strong>Amount:</strong> $23.45" in page

    def test_values_are_escaped(self, renderer, make_message):
        page = renderer.render_html({"note": "<img src='x'>"}, make_message(html="<p></p>"))
        assert "<img" not in page
        assert "&lt;img" in page

    def test_list_fields_numbered(self, renderer, make_message):
        text = renderer.render_text(
            {"items": [("2", "Margherita", "$24.00"), ("1", "Bread", "$6.50")]},
            make_message(html="<p></p>"),
        )
        assert "**Items:**" in text
        assert "1. 2 | Margherita | $24.00" in text
        assert "2. 1 | Bread | $6.50" in text

    def test_missing_headers_render_unknown(self, renderer):
        text = renderer.render_text({"a": "1"}, {"id": "x", "payload": {}})
        assert "**From:** Unknown" in text
        assert "**Date:** Unknown" in text

    def test_list_items_render_as_ordered_list(self, renderer, make_message):
        page = renderer.render_html({"items": [("1", "Bread")]}, make_message(html="<p></p>"))
        assert "<ol>" in page
        assert "<li>1 | Bread</li>" in page


class TestDocumentLocation:
    """Documents always land directly inside the output directory."""

    @pytest.fixture
    def out_dir(self, tmp_path):
        return tmp_path / "downloads"

    @pytest.mark.parametrize("template", [
        "../../escaped_{amount}.pdf",
        "sub/dir/escaped_{amount}.pdf",
        "..\\escaped_{amount}.pdf",
    ])
    def test_directory_parts_are_dropped(self, out_dir, make_message, uber_rule_data, template):
        uber_rule_data["output_template"] = template
        path = Path(DocumentRenderer(output_dir=out_dir).render(
            {"amount": "5"}, Rule.from_dict(uber_rule_data), make_message(html="<p></p>"),
        ))

        assert path.parent == out_dir.resolve()
        assert path.name == "escaped_5.pdf"

    def test_absolute_template_stays_in_output_dir(self, tmp_path, out_dir, make_message, uber_rule_data):
        elsewhere = tmp_path / "elsewhere"
        elsewhere.mkdir()
        uber_rule_data["output_template"] = str(elsewhere) + "/evil_{amount}.pdf"

        path = Path(DocumentRenderer(output_dir=out_dir).render(
            {"amount": "5"}, Rule.from_dict(uber_rule_data), make_message(html="<p></p>"),
        ))

        assert path.parent == out_dir.resolve()
        assert list(elsewhere.iterdir()) == []

    @pytest.mark.parametrize("template", ["..", "/", "dir/"])
    def test_template_without_filename_falls_back(self, template):
        assert generate_filename(template, {"a": "1"}).startswith("receipt_")

    def test_symlinked_document_name_is_rejected(self, tmp_path, out_dir, make_message, uber_rule_data):
        out_dir.mkdir()
        target = tmp_path / "target.pdf"
        (out_dir / "link_5.pdf").symlink_to(target)
        uber_rule_data["output_template"] = "link_{amount}.pdf"

        with pytest.raises(DocumentPathError):
            DocumentRenderer(output_dir=out_dir).render(
                {"amount": "5"}, Rule.from_dict(uber_rule_data), make_message(html="<p></p>"),
            )
        assert not target.exists()
