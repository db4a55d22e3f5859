"""Output and export module.

Renders extracted records to receipt documents and exports results.

    from core.output import DocumentRenderer, CsvExporter

    path = DocumentRenderer().render(record, rule, email)
    csv_text = CsvExporter().to_csv(results)
"""

from core.output.csv_exporter import (
    CsvExporter,
    parse_amount,
    pick_amount,
    service_from_subject,
)
from core.output.document_renderer import (
    DocumentPathError,
    DocumentRenderer,
    format_field_name,
    generate_filename,
)

__all__ = [
    "CsvExporter",
    "DocumentPathError",
    "DocumentRenderer",
    "format_field_name",
    "generate_filename",
    "parse_amount",
    "pick_amount",
    "service_from_subject",
]
