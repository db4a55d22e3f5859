"""Rule-driven extraction engine for HTML email bodies.

The engine holds no state between calls: every ``assemble`` call parses
the message, walks the rule's fields in order and returns a fresh record.
It is safe to share one instance across threads.
"""

import logging
from typing import Any, Dict, Iterable, Optional, Union

from core.extraction.field_extractor import UNKNOWN, FieldExtractor, is_resolved
from core.extraction.message import extract_headers, extract_html_body
from core.extraction.rules import HtmlListField, Rule
from core.extraction.selectors import parse_document

logger = logging.getLogger(__name__)

Record = Dict[str, Any]


class ExtractionEngine:
    """Apply extraction rules to email messages."""

    def __init__(self, field_extractor: Optional[FieldExtractor] = None):
        self.field_extractor = field_extractor or FieldExtractor()

    def assemble(self, rule: Union[Rule, Dict[str, Any]], email: Dict[str, Any]) -> Record:
        """
        Build a record for one (email, rule) pair.

        Args:
            rule: Decoded Rule or rule JSON (decoded on the fly)
            email: Gmail-API-shaped message

        Returns:
            Field name -> value mapping in field declaration order. A field
            that fails to resolve is set to "Unknown"; it never aborts the
            record.

        Raises:
            RuleFormatError: If ``rule`` is JSON that is not a valid rule
        """
        if not isinstance(rule, Rule):
            rule = Rule.from_dict(rule)

        headers = extract_headers(email)
        document = parse_document(extract_html_body(email))

        record: Record = {}
        for descriptor in rule.fields:
            try:
                value = self.field_extractor.extract(descriptor, document, headers)
            except Exception as e:
                logger.warning(
                    f"Failed to extract field '{descriptor.name}' for rule '{rule.name}': {e}"
                )
                record[descriptor.name] = UNKNOWN
                continue

            if isinstance(descriptor, HtmlListField):
                rows, special_values = value
                record[descriptor.name] = rows
                record.update(special_values)
            else:
                record[descriptor.name] = value

        return record

    def process(self, rule: Union[Rule, Dict[str, Any]], email: Dict[str, Any]) -> Dict[str, Any]:
        """
        Assemble and validate in one step.

        Returns:
            Dict with ``record`` and ``valid`` keys
        """
        if not isinstance(rule, Rule):
            rule = Rule.from_dict(rule)
        record = self.assemble(rule, email)
        return {
            "record": record,
            "valid": validate_required_fields(record, rule.required_fields),
        }


def validate_required_fields(record: Record, required_fields: Iterable[str]) -> bool:
    """
    Check that every required field is present, non-empty and not "Unknown".

    List-valued fields pass once present, even when empty.
    """
    for name in required_fields or ():
        value = record.get(name)
        if isinstance(value, list):
            continue
        if not is_resolved(value):
            return False
    return True


def find_matching_rule(rules: Iterable[Rule], subject: str, sender: str) -> Optional[Rule]:
    """First active rule whose pattern appears in the subject or sender."""
    for rule in rules:
        if rule.is_active and rule.matches(subject, sender):
            return rule
    return None

