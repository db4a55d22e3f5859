"""CSV export of processing results."""

import csv
import re
from io import StringIO
from typing import Any, Dict, Iterable, List, Optional

import config

CSV_HEADERS = ["Date", "Subject", "Sender", "Service", "Amount", "Status"]

AMOUNT_KEYS = ("amount", "total_amount", "total")


def pick_amount(data: Dict[str, Any], keys=AMOUNT_KEYS) -> Optional[Any]:
    """First truthy amount-like value in a record."""
    for key in keys:
        value = data.get(key)
        if value:
            return value
    return None


def parse_amount(value: Any) -> Optional[float]:
    """Parse ``"$12.34"`` style strings to a float; None if not numeric."""
    if value is None:
        return None
    cleaned = re.sub(r"[^0-9.]", "", str(value))
    try:
        return float(cleaned)
    except ValueError:
        return None


def service_from_subject(subject: str) -> str:
    """Label the service an email came from using subject keywords."""
    lowered = (subject or "").lower()
    for keyword, label in config.SERVICE_KEYWORDS:
        if keyword in lowered:
            return label
    return "Unknown"


class CsvExporter:
    """Export stored results as a flat CSV summary."""

    def build_rows(self, results: Iterable[Any]) -> List[List[str]]:
        """
        Build CSV rows (header first) from result objects.

        Results need ``processed_at``, ``subject``, ``sender``,
        ``extracted_data`` and ``status`` attributes.
        """
        rows = [list(CSV_HEADERS)]
        for result in results:
            data = result.extracted_data or {}
            amount = pick_amount(data)
            rows.append([
                result.processed_at.date().isoformat() if result.processed_at else "",
                result.subject or "Unknown",
                result.sender or "Unknown",
                service_from_subject(result.subject or ""),
                str(amount) if amount else "N/A",
                result.status,
            ])
        return rows

    def to_csv(self, results: Iterable[Any]) -> str:
        """Render results to a CSV string with every cell quoted."""
        output = StringIO()
        writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerows(self.build_rows(results))
        return output.getvalue()
