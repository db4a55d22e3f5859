"""Receipt document rendering for extracted records.

Each successful (email, rule) pair is written out as a PDF receipt. The
receipt is laid out as markdown, converted to HTML and printed with
weasyprint. Its filename comes from the rule's output template.

Usage:
    from core.output.document_renderer import DocumentRenderer

    renderer = DocumentRenderer()
    path = renderer.render(record, rule, email)
"""

import html
import re
from datetime import datetime
from pathlib import Path
from string import Template
from typing import Any, Dict, Optional

import markdown
from weasyprint import HTML

import config
from core.extraction.message import extract_headers
from core.extraction.rules import Rule

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9.-]")

# Extensions stripped from templates before the document extension is added
_KNOWN_EXTENSIONS = (".pdf", ".md", ".txt")


RECEIPT_TEMPLATE = Template("""# Email receipt

**Subject:** $subject

**From:** $sender

**Date:** $date

---

## Extracted information

$fields

---

*Generated on $generated_at*
""")

HTML_DOCUMENT = Template("""<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<style>
  @page { size: A4; margin: 2cm; }
  body {
    font-family: "DejaVu Sans", "Noto Sans", "Liberation Sans", sans-serif;
    font-size: 11pt;
    line-height: 1.5;
    color: #1a1a1a;
  }
  h1 { font-size: 20pt; border-bottom: 2px solid #333; padding-bottom: 8px; margin-top: 0; }
  h2 { font-size: 14pt; border-bottom: 1px solid #999; padding-bottom: 4px; margin-top: 20pt; }
  p { margin: 4px 0; }
  hr { border: none; border-top: 1px solid #ccc; margin: 16px 0; }
  ol { margin: 4px 0 8px 0; }
  em { color: #666; font-size: 9pt; }
</style>
</head>
<body>
$body
</body>
</html>""")


class DocumentPathError(ValueError):
    """A rendered filename would land outside the output directory."""


def sanitize_filename_value(value: Any) -> str:
    """Stringify a value and replace characters outside [a-zA-Z0-9.-] with '_'."""
    return _UNSAFE_CHARS.sub("_", str(value))


def generate_filename(
    template: str,
    record: Dict[str, Any],
    extension: str = config.DOCUMENT_EXTENSION,
    now: Optional[datetime] = None,
) -> str:
    """
    Build a document filename from an output template.

    Only the last path component of the template is used, so directory
    parts (absolute or ``..``) are dropped. Every ``{name}`` placeholder
    whose name is a record key is replaced by the sanitized value. If
    nothing was substituted the name falls back to ``receipt_<timestamp>``.

    Args:
        template: Rule output template, e.g. ``uber_{trip_date}_{amount}.pdf``
        record: Extracted record
        extension: Document extension to enforce
        now: Timestamp for the fallback name (defaults to the current time)

    Returns:
        Filename (no directory)
    """
    filename = Path((template or "").replace("\\", "/")).name
    substituted = False

    for key, value in record.items():
        placeholder = "{" + str(key) + "}"
        if placeholder in filename:
            filename = filename.replace(placeholder, sanitize_filename_value(value))
            substituted = True

    if not substituted:
        timestamp = (now or datetime.now()).isoformat().replace(":", "-").replace(".", "-")
        return f"receipt_{timestamp}{extension}"

    for known in _KNOWN_EXTENSIONS + (extension,):
        if filename.endswith(known):
            filename = filename[: -len(known)]
            break

    return filename + extension


def format_field_name(field_name: str) -> str:
    """Turn ``trip_date`` into ``Trip Date``."""
    return re.sub(r"\b\w", lambda m: m.group(0).upper(), field_name.replace("_", " "))


def _escape(value: Any) -> str:
    # Record values come from email bodies; keep raw markup out of the PDF
    return html.escape(str(value), quote=False)


class DocumentRenderer:
    """Writes extracted records to PDF receipt documents."""

    def __init__(self, output_dir: Optional[Path] = None):
        self.output_dir = Path(output_dir or config.DOWNLOADS_DIR)

    def _ensure_output_dir(self) -> Path:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        return self.output_dir

    def render_text(self, record: Dict[str, Any], email: Dict[str, Any]) -> str:
        """Render the receipt body as markdown."""
        headers = extract_headers(email)
        return RECEIPT_TEMPLATE.substitute(
            subject=_escape(headers.get("Subject", "Unknown")),
            sender=_escape(headers.get("From", "Unknown")),
            date=_escape(headers.get("Date", "Unknown")),
            fields=self._render_fields(record),
            generated_at=datetime.now().isoformat(timespec="seconds"),
        )

    def _render_fields(self, record: Dict[str, Any]) -> str:
        lines = []
        for key, value in record.items():
            label = format_field_name(key)
            if isinstance(value, (list, tuple)):
                lines.append(f"**{label}:**")
                lines.append("")
                for index, item in enumerate(value, start=1):
                    if isinstance(item, (list, tuple)):
                        item = " | ".join(str(v) for v in item)
                    lines.append(f"{index}. {_escape(item)}")
            else:
                lines.append(f"**{label}:** {_escape(value)}")
            lines.append("")
        return "\n".join(lines).rstrip()

    def render_html(self, record: Dict[str, Any], email: Dict[str, Any]) -> str:
        """Render the receipt as a standalone HTML page."""
        body = markdown.markdown(self.render_text(record, email))
        return HTML_DOCUMENT.substitute(body=body)

    def render(self, record: Dict[str, Any], rule: Rule, email: Dict[str, Any]) -> str:
        """
        Write a receipt document for a record.

        Args:
            record: Extracted record
            rule: Rule that produced it (supplies the output template)
            email: Source message (supplies subject/from/date)

        Returns:
            Path of the written document

        Raises:
            DocumentPathError: If the filename resolves outside the output directory
        """
        output_dir = self._ensure_output_dir().resolve()
        filepath = (output_dir / generate_filename(rule.output_template, record)).resolve()
        if filepath.parent != output_dir:
            raise DocumentPathError(f"Document path escapes {output_dir}: {filepath}")

        HTML(string=self.render_html(record, email)).write_pdf(str(filepath))
        return str(filepath)
