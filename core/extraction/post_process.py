"""Post-processing directives applied to extracted values.

Directives are authored as strings (``upper()``, ``lower()``, ``strip()``,
``replace('A','B')``) and parsed once when a rule is loaded. Anything that
does not parse becomes a no-op, so a bad directive never fails a field.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Pattern, Union


class DirectiveKind(Enum):
    """Closed set of supported post-processing operations."""

    NOOP = "noop"
    UPPER = "upper"
    LOWER = "lower"
    STRIP = "strip"
    REPLACE = "replace"


_SIMPLE_DIRECTIVES = {
    "upper()": DirectiveKind.UPPER,
    "lower()": DirectiveKind.LOWER,
    "strip()": DirectiveKind.STRIP,
}

_REPLACE_PATTERN = re.compile(r"replace\('([^']+)',\s*'([^']*)'\)")


@dataclass(frozen=True)
class Directive:
    """A parsed post-processing directive."""

    kind: DirectiveKind
    source: str = ""
    pattern: Optional[Pattern] = None
    replacement: str = ""

    @property
    def is_noop(self) -> bool:
        return self.kind == DirectiveKind.NOOP

    def apply(self, value: Any) -> Any:
        """Apply the directive; non-string values pass through untouched."""
        if not isinstance(value, str):
            return value

        if self.kind == DirectiveKind.UPPER:
            return value.upper()
        if self.kind == DirectiveKind.LOWER:
            return value.lower()
        if self.kind == DirectiveKind.STRIP:
            return value.strip()
        if self.kind == DirectiveKind.REPLACE:
            # Replacement text is literal, no group references
            return self.pattern.sub(lambda _match: self.replacement, value)
        return value


NOOP = Directive(kind=DirectiveKind.NOOP)


def parse_directive(text: Optional[str]) -> Directive:
    """
    Parse a directive string.

    Args:
        text: Directive as authored in the rule (may be None)

    Returns:
        Parsed Directive, NOOP when missing or unrecognized
    """
    if not text or not isinstance(text, str):
        return NOOP

    kind = _SIMPLE_DIRECTIVES.get(text)
    if kind:
        return Directive(kind=kind, source=text)

    if text.startswith("replace("):
        match = _REPLACE_PATTERN.match(text)
        if not match:
            return NOOP
        try:
            pattern = re.compile(match.group(1))
        except re.error:
            return NOOP
        return Directive(
            kind=DirectiveKind.REPLACE,
            source=text,
            pattern=pattern,
            replacement=match.group(2),
        )

    return NOOP


def post_process(value: Any, directive: Union[str, Directive, None]) -> Any:
    """
    Apply a post-processing directive to a value.

    Accepts either the authored string form or an already parsed Directive.
    Never raises.
    """
    if directive is None:
        return value
    if not isinstance(directive, Directive):
        directive = parse_directive(directive)
    return directive.apply(value)
