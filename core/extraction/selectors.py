"""CSS selector parsing and querying.

Field selectors are plain CSS, optionally carrying a ``:contains('text')``
clause followed by a trailing selector::

    tr:contains('Total') td.amount  -> base="tr", contains="Total",
                                       within="td.amount"
    .row:contains('Date')           -> base=".row", contains="Date"

The trailing selector is evaluated inside the element that matched the
clause, so it must be a descendant selector.
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Optional

from cssselect import HTMLTranslator, SelectorError
from lxml import etree, html

from core.extraction.errors import SelectorSyntaxError

CONTAINS_MARKER = ":contains("
EMPTY_DOCUMENT = "<html><body></body></html>"

_CONTAINS_CLAUSE = re.compile(r":contains\(\s*(['\"])(.*?)\1\s*\)", re.DOTALL)

_translator = HTMLTranslator()

# Prefixes used when translating CSS to XPath
DOCUMENT_SCOPE = "descendant-or-self::"
DESCENDANT_SCOPE = "descendant::"


@lru_cache(maxsize=512)
def css_to_xpath(css: str, prefix: str = DOCUMENT_SCOPE) -> str:
    """
    Translate a CSS selector to an XPath expression.

    Raises:
        SelectorSyntaxError: If the selector cannot be parsed
    """
    try:
        return _translator.css_to_xpath(css, prefix=prefix)
    except SelectorError as e:
        raise SelectorSyntaxError(css, str(e)) from e


@dataclass(frozen=True)
class FieldSelector:
    """A selector split into its base query and optional contains clause."""

    raw: str
    base: str
    contains: Optional[str] = None
    within: Optional[str] = None

    @property
    def has_contains(self) -> bool:
        return self.contains is not None

    @classmethod
    def parse(cls, raw: str) -> "FieldSelector":
        """
        Parse and validate a field selector.

        Raises:
            SelectorSyntaxError: On a malformed contains clause or invalid CSS
        """
        if not raw or not raw.strip():
            raise SelectorSyntaxError(raw or "", "selector is empty")

        if CONTAINS_MARKER not in raw:
            css_to_xpath(raw.strip())
            return cls(raw=raw, base=raw.strip())

        match = _CONTAINS_CLAUSE.search(raw)
        if not match:
            raise SelectorSyntaxError(raw, "malformed :contains() clause")

        base = raw[:match.start()].strip()
        if not base:
            raise SelectorSyntaxError(raw, "no selector before :contains()")
        within = raw[match.end():].strip() or None

        css_to_xpath(base)
        if within:
            css_to_xpath(within, DESCENDANT_SCOPE)

        return cls(raw=raw, base=base, contains=match.group(2), within=within)


def parse_document(html_content: str):
    """Parse an HTML string into a document tree (empty input is allowed)."""
    if not html_content or not html_content.strip():
        return html.document_fromstring(EMPTY_DOCUMENT)
    try:
        return html.document_fromstring(html_content)
    except ValueError:
        # str input carrying an XML encoding declaration
        return html.document_fromstring(html_content.encode("utf-8"))
    except etree.ParserError:
        return html.document_fromstring(EMPTY_DOCUMENT)


def select_all(root, css: str) -> List:
    """All elements matching ``css`` under ``root``, in document order."""
    return root.xpath(css_to_xpath(css))


def select_within(element, css: str) -> List:
    """Descendants of ``element`` matching ``css`` (the element itself excluded)."""
    return element.xpath(css_to_xpath(css, DESCENDANT_SCOPE))


def element_text(element) -> str:
    """Trimmed text content of an element."""
    return (element.text_content() or "").strip()
