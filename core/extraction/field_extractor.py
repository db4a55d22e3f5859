"""Resolve field descriptors against a parsed HTML document and headers."""

from typing import Any, Dict, List, Mapping, Optional, Tuple

from core.extraction.rules import (
    FieldDescriptor,
    HeaderField,
    HtmlListField,
    HtmlScalarField,
)
from core.extraction.selectors import (
    element_text,
    select_all,
    select_within,
)

UNKNOWN = "Unknown"

Row = Tuple[str, ...]
ListResult = Tuple[List[Row], Dict[str, Any]]


def is_resolved(value: Any) -> bool:
    """True if a value is neither empty nor the Unknown sentinel."""
    return bool(value) and value != UNKNOWN


class FieldExtractor:
    """
    Extract one field at a time.

    Misses (no header, no matching element) come back as ``UNKNOWN``.
    Malformed selectors raise ``SelectorSyntaxError``; the caller decides
    how to isolate them.
    """

    def extract(
        self,
        descriptor: FieldDescriptor,
        document,
        headers: Mapping[str, str],
    ):
        """
        Resolve a field descriptor.

        Args:
            descriptor: Decoded field descriptor
            document: lxml document root
            headers: Header name -> value mapping

        Returns:
            A string for header and extract_text fields, or a
            ``(rows, special_values)`` pair for extract_items fields
        """
        if isinstance(descriptor, HeaderField):
            return self.extract_header(descriptor, headers)
        if isinstance(descriptor, HtmlScalarField):
            return self.extract_text(descriptor, document)
        if isinstance(descriptor, HtmlListField):
            return self.extract_items(descriptor, document)
        raise TypeError(f"Unsupported field descriptor: {type(descriptor).__name__}")

    def extract_header(self, descriptor: HeaderField, headers: Mapping[str, str]) -> str:
        value = headers.get(descriptor.key)
        if not value:
            return UNKNOWN
        return descriptor.post_process.apply(value)

    def extract_text(self, descriptor: HtmlScalarField, document) -> str:
        selector = descriptor.parsed_selector

        if selector.has_contains:
            value = self._resolve_contains(document, selector)
        else:
            elements = select_all(document, selector.base)
            value = element_text(elements[0]) if elements else None

        if value is None:
            return UNKNOWN
        return descriptor.post_process.apply(value)

    def _resolve_contains(self, document, selector) -> Optional[str]:
        target = None
        for element in select_all(document, selector.base):
            if selector.contains in element.text_content():
                target = element
                break

        if target is None:
            return None

        if not selector.within:
            return element_text(target)

        matches = select_within(target, selector.within)
        if not matches:
            return None
        return "".join(m.text_content() for m in matches).strip()

    def extract_items(self, descriptor: HtmlListField, document) -> ListResult:
        rows: List[Row] = []
        special_values: Dict[str, Any] = {}
        order = descriptor.subfield_order

        for container in self._containers(descriptor, document):
            item = self._resolve_subfields(descriptor, container)

            # Lifting is independent of row admission
            for sv in descriptor.special_values:
                if item.get(sv.subfield) == sv.value:
                    lifted = item.get(sv.extract_subfield, UNKNOWN)
                    if lifted != UNKNOWN:
                        lifted = sv.post_process.apply(lifted)
                    special_values[sv.name] = lifted

            if order is not None:
                if not all(is_resolved(item.get(name)) for name in order):
                    continue
                rows.append(tuple(item[name] for name in order))
            else:
                rows.append(tuple(item.values()))

        return rows, special_values

    def _containers(self, descriptor: HtmlListField, document) -> List:
        selector = descriptor.parsed_selector
        elements = select_all(document, selector.base)
        if not selector.has_contains:
            return elements

        containers = []
        for element in elements:
            if selector.contains not in element.text_content():
                continue
            if selector.within:
                containers.extend(select_within(element, selector.within))
            else:
                containers.append(element)
        return containers

    def _resolve_subfields(self, descriptor: HtmlListField, container) -> Dict[str, str]:
        item: Dict[str, str] = {}
        for subfield in descriptor.subfields:
            matches = select_within(container, subfield.selector)
            item[subfield.name] = element_text(matches[0]) if matches else UNKNOWN
        return item
