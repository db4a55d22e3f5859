"""Exceptions raised by the extraction engine.

Resolution misses are never errors; they become the "Unknown" sentinel.
These classes cover rules the engine cannot interpret.
"""

from typing import Any, Dict, Optional


class ExtractionError(Exception):
    """Base class for extraction engine errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class RuleFormatError(ExtractionError):
    """Rule JSON cannot be decoded into a Rule."""


class SelectorSyntaxError(ExtractionError):
    """A field selector could not be parsed or compiled."""

    def __init__(self, selector: str, reason: str):
        super().__init__(
            f"Invalid selector {selector!r}: {reason}",
            details={"selector": selector, "reason": reason},
        )
        self.selector = selector
        self.reason = reason
