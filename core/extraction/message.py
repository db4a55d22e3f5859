"""Helpers for Gmail-API-shaped message dictionaries."""

import base64
import binascii
from typing import Any, Dict, Optional

HTML_MIME_TYPE = "text/html"


def extract_headers(message: Dict[str, Any]) -> Dict[str, str]:
    """
    Flatten ``payload.headers`` into a name -> value mapping.

    Later occurrences of a header name win. A message without headers
    yields an empty mapping. Entries that are not objects are skipped.
    """
    headers: Dict[str, str] = {}
    payload = (message or {}).get("payload")
    if not isinstance(payload, dict):
        return headers

    for header in payload.get("headers") or []:
        if not isinstance(header, dict):
            continue
        name = header.get("name")
        if name:
            headers[name] = header.get("value", "")

    return headers


def decode_body_data(data: str) -> str:
    """
    Decode base64 body data to text.

    Gmail uses the URL-safe alphabet and may drop padding; both alphabets
    are accepted. Undecodable input yields an empty string.
    """
    if not data:
        return ""

    normalized = data.strip().replace("-", "+").replace("_", "/")
    normalized += "=" * (-len(normalized) % 4)

    try:
        raw = base64.b64decode(normalized)
    except (binascii.Error, ValueError):
        return ""

    return raw.decode("utf-8", errors="replace")


def _part_html(part: Dict[str, Any]) -> Optional[str]:
    """Return the encoded HTML data of a part, if it is an HTML part with data."""
    if part.get("mimeType") != HTML_MIME_TYPE:
        return None
    return ((part.get("body") or {}).get("data")) or None


def _find_html(part: Dict[str, Any]) -> str:
    data = _part_html(part)
    if data:
        return decode_body_data(data)

    for sub_part in part.get("parts") or []:
        if not isinstance(sub_part, dict):
            continue
        html = _find_html(sub_part)
        if html:
            return html

    return ""


def extract_html_body(message: Dict[str, Any]) -> str:
    """
    Locate and decode the first HTML part of a message.

    Walks the payload part tree depth-first. Returns an empty string if
    the message has no HTML part.
    """
    payload = (message or {}).get("payload")
    if not isinstance(payload, dict):
        return ""

    return _find_html(payload)
