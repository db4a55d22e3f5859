"""Rule and field descriptor models.

Rules arrive as untyped JSON (from the rule store or the API). They are
decoded once into immutable dataclasses; unknown ``source``/``process``
combinations are rejected here rather than at extraction time.

Selector syntax is checked lazily, the first time a field is extracted,
so a single bad selector degrades one field instead of the whole rule.
"""

from dataclasses import dataclass, field
from functools import cached_property
from typing import Any, Dict, List, Optional, Tuple, Union

from core.extraction.errors import RuleFormatError
from core.extraction.post_process import Directive, NOOP, parse_directive
from core.extraction.selectors import FieldSelector

SOURCE_HEADER = "header"
SOURCE_HTML = "html"

PROCESS_EXTRACT_TEXT = "extract_text"
PROCESS_EXTRACT_ITEMS = "extract_items"


@dataclass(frozen=True)
class Subfield:
    """A named selector evaluated inside each row of a list field."""

    name: str
    selector: str


@dataclass(frozen=True)
class SpecialValue:
    """Lifts one subfield of a matching row into the top-level record."""

    subfield: str
    value: str
    extract_subfield: str
    name: str
    post_process: Directive = NOOP


@dataclass(frozen=True)
class HeaderField:
    """Field resolved from a message header."""

    name: str
    key: str
    post_process: Directive = NOOP

    source = SOURCE_HEADER


@dataclass(frozen=True)
class HtmlScalarField:
    """Field resolved to the text of one element in the HTML body."""

    name: str
    selector: str
    post_process: Directive = NOOP

    source = SOURCE_HTML
    process = PROCESS_EXTRACT_TEXT

    @cached_property
    def parsed_selector(self) -> FieldSelector:
        return FieldSelector.parse(self.selector)


@dataclass(frozen=True)
class HtmlListField:
    """Field resolved to a list of row tuples, one per matched container."""

    name: str
    selector: str
    subfields: Tuple[Subfield, ...] = ()
    subfield_order: Optional[Tuple[str, ...]] = None
    special_values: Tuple[SpecialValue, ...] = ()

    source = SOURCE_HTML
    process = PROCESS_EXTRACT_ITEMS

    @cached_property
    def parsed_selector(self) -> FieldSelector:
        return FieldSelector.parse(self.selector)


FieldDescriptor = Union[HeaderField, HtmlScalarField, HtmlListField]


def _require(data: Dict[str, Any], key: str, context: str) -> Any:
    value = data.get(key)
    if value is None or (isinstance(value, str) and not value):
        raise RuleFormatError(
            f"{context} is missing '{key}'",
            details={"context": context, "key": key},
        )
    return value


def _decode_subfields(data: Dict[str, Any], context: str) -> Tuple[Subfield, ...]:
    raw = data.get("subfields") or []
    if not isinstance(raw, list):
        raise RuleFormatError(f"{context}: 'subfields' must be a list")

    subfields = []
    for i, item in enumerate(raw):
        if not isinstance(item, dict):
            raise RuleFormatError(f"{context}: subfield {i} must be an object")
        sub_context = f"{context} subfield {i}"
        subfields.append(Subfield(
            name=_require(item, "name", sub_context),
            selector=_require(item, "selector", sub_context),
        ))
    return tuple(subfields)


def _decode_special_values(data: Dict[str, Any], context: str) -> Tuple[SpecialValue, ...]:
    raw = data.get("special_values") or []
    if not isinstance(raw, list):
        raise RuleFormatError(f"{context}: 'special_values' must be a list")

    special_values = []
    for i, item in enumerate(raw):
        if not isinstance(item, dict):
            raise RuleFormatError(f"{context}: special value {i} must be an object")
        sv_context = f"{context} special value {i}"
        special_values.append(SpecialValue(
            subfield=_require(item, "subfield", sv_context),
            value=str(_require(item, "value", sv_context)),
            extract_subfield=_require(item, "extract_subfield", sv_context),
            name=_require(item, "name", sv_context),
            post_process=parse_directive(item.get("post_process")),
        ))
    return tuple(special_values)


def decode_field(data: Dict[str, Any], index: int = 0) -> FieldDescriptor:
    """
    Decode one field descriptor from rule JSON.

    Args:
        data: Field descriptor as authored
        index: Position in the rule's field list (for error messages)

    Returns:
        HeaderField, HtmlScalarField or HtmlListField

    Raises:
        RuleFormatError: If the descriptor kind is unknown or incomplete
    """
    if not isinstance(data, dict):
        raise RuleFormatError(f"Field {index} must be an object")

    name = _require(data, "name", f"Field {index}")
    context = f"Field '{name}'"
    source = data.get("source")

    if source == SOURCE_HEADER:
        return HeaderField(
            name=name,
            key=_require(data, "key", context),
            post_process=parse_directive(data.get("post_process")),
        )

    if source == SOURCE_HTML:
        selector = _require(data, "selector", context)
        process = data.get("process", PROCESS_EXTRACT_TEXT)

        if process == PROCESS_EXTRACT_TEXT:
            return HtmlScalarField(
                name=name,
                selector=selector,
                post_process=parse_directive(data.get("post_process")),
            )

        if process == PROCESS_EXTRACT_ITEMS:
            order = data.get("subfield_order")
            if order is not None and not isinstance(order, list):
                raise RuleFormatError(f"{context}: 'subfield_order' must be a list")
            return HtmlListField(
                name=name,
                selector=selector,
                subfields=_decode_subfields(data, context),
                subfield_order=tuple(order) if order is not None else None,
                special_values=_decode_special_values(data, context),
            )

        raise RuleFormatError(
            f"{context}: unknown process '{process}'",
            details={"field": name, "process": process},
        )

    raise RuleFormatError(
        f"{context}: unknown source '{source}'",
        details={"field": name, "source": source},
    )


def encode_field(descriptor: FieldDescriptor) -> Dict[str, Any]:
    """Convert a decoded field back to its JSON form."""
    if isinstance(descriptor, HeaderField):
        data = {"name": descriptor.name, "source": SOURCE_HEADER, "key": descriptor.key}
        if not descriptor.post_process.is_noop:
            data["post_process"] = descriptor.post_process.source
        return data

    data = {
        "name": descriptor.name,
        "source": SOURCE_HTML,
        "selector": descriptor.selector,
        "process": descriptor.process,
    }

    if isinstance(descriptor, HtmlScalarField):
        if not descriptor.post_process.is_noop:
            data["post_process"] = descriptor.post_process.source
        return data

    data["subfields"] = [{"name": s.name, "selector": s.selector} for s in descriptor.subfields]
    if descriptor.subfield_order is not None:
        data["subfield_order"] = list(descriptor.subfield_order)
    if descriptor.special_values:
        special_values = []
        for sv in descriptor.special_values:
            item = {
                "subfield": sv.subfield,
                "value": sv.value,
                "extract_subfield": sv.extract_subfield,
                "name": sv.name,
            }
            if not sv.post_process.is_noop:
                item["post_process"] = sv.post_process.source
            special_values.append(item)
        data["special_values"] = special_values
    return data


def _pick(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return default


@dataclass(frozen=True)
class Rule:
    """A named extraction recipe."""

    name: str
    pattern: str
    fields: Tuple[FieldDescriptor, ...]
    output_template: str = ""
    required_fields: Tuple[str, ...] = ()
    is_active: bool = True
    id: Optional[str] = field(default=None, compare=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Rule":
        """
        Decode a rule from JSON (camelCase or snake_case keys).

        Raises:
            RuleFormatError: If the structure cannot be interpreted as a rule
        """
        if not isinstance(data, dict):
            raise RuleFormatError("Rule must be an object")

        name = _require(data, "name", "Rule")
        pattern = data.get("pattern")
        if not isinstance(pattern, str):
            raise RuleFormatError(f"Rule '{name}' is missing 'pattern'")

        raw_fields = data.get("fields")
        if not isinstance(raw_fields, list):
            raise RuleFormatError(f"Rule '{name}': 'fields' must be a list")

        required = _pick(data, "required_fields", "requiredFields") or []
        if not isinstance(required, list):
            raise RuleFormatError(f"Rule '{name}': 'required_fields' must be a list")

        return cls(
            id=data.get("id"),
            name=name,
            pattern=pattern,
            fields=tuple(decode_field(f, i) for i, f in enumerate(raw_fields)),
            output_template=_pick(data, "output_template", "outputTemplate", default="") or "",
            required_fields=tuple(required),
            is_active=bool(_pick(data, "is_active", "isActive", default=True)),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "pattern": self.pattern,
            "fields": [encode_field(f) for f in self.fields],
            "output_template": self.output_template,
            "required_fields": list(self.required_fields),
            "is_active": self.is_active,
        }

    def matches(self, subject: str, sender: str) -> bool:
        """Check whether the rule's pattern appears in the subject or sender."""
        return self.pattern in (subject or "") or self.pattern in (sender or "")

    def special_value_collisions(self) -> List[str]:
        """
        Names written by more than one field or special value.

        Such names are resolved last-write-wins in field order; callers
        use this to warn rule authors.
        """
        seen = set()
        collisions = []
        for descriptor in self.fields:
            names = [descriptor.name]
            if isinstance(descriptor, HtmlListField):
                names.extend(sv.name for sv in descriptor.special_values)
            for name in names:
                if name in seen and name not in collisions:
                    collisions.append(name)
                seen.add(name)
        return collisions
