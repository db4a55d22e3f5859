"""Rule-driven extraction of structured records from HTML emails."""

from core.extraction.engine import ExtractionEngine, find_matching_rule, validate_required_fields
from core.extraction.errors import ExtractionError, RuleFormatError, SelectorSyntaxError
from core.extraction.field_extractor import UNKNOWN, FieldExtractor
from core.extraction.post_process import parse_directive, post_process
from core.extraction.rules import HeaderField, HtmlListField, HtmlScalarField, Rule

__all__ = [
    "ExtractionEngine",
    "FieldExtractor",
    "Rule",
    "HeaderField",
    "HtmlScalarField",
    "HtmlListField",
    "UNKNOWN",
    "ExtractionError",
    "RuleFormatError",
    "SelectorSyntaxError",
    "find_matching_rule",
    "validate_required_fields",
    "parse_directive",
    "post_process",
]
