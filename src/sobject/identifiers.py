"""Salesforce record identifier helpers.

Record ids come in a case-sensitive 15-character form and a case-safe
18-character form (the 15-character id plus a 3-character checksum).
The mapping core canonicalizes every identifier field to its first 15
characters on construction; shape validation is offered here but never
applied implicitly.
"""

from __future__ import annotations

import re
from typing import Any

ID_LENGTH = 15
CASE_SAFE_ID_LENGTH = 18

_CHECKSUM_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ012345"
_ID_PATTERN = re.compile(r"^[a-zA-Z0-9]{15}(?:[A-Z0-5]{3})?$")


def truncate_identifier(value: Any) -> Any:
    """Cut an identifier down to 15 characters; None and non-strings pass through."""
    if value is None or not isinstance(value, str):
        return value
    return value[:ID_LENGTH]


def _checksum(identifier: str) -> str:
    suffix = []
    for start in range(0, ID_LENGTH, 5):
        chunk = identifier[start : start + 5]
        flags = 0
        for position, char in enumerate(chunk):
            if "A" <= char <= "Z":
                flags |= 1 << position
        suffix.append(_CHECKSUM_ALPHABET[flags])
    return "".join(suffix)


def to_case_safe_id(identifier: str) -> str:
    """Convert a 15-character id to its 18-character case-safe form.

    Raises:
        ValueError: If the identifier does not have a valid shape.
    """
    if not is_valid_identifier(identifier):
        raise ValueError(f"Not a valid record id: {identifier!r}")
    base = identifier[:ID_LENGTH]
    return base + _checksum(base)


def is_valid_identifier(value: Any) -> bool:
    """Return True if value looks like a 15 or 18 character record id.

    For 18-character ids the checksum suffix must match the first 15
    characters.
    """
    if not isinstance(value, str) or not _ID_PATTERN.match(value):
        return False
    if len(value) == CASE_SAFE_ID_LENGTH:
        return value[ID_LENGTH:] == _checksum(value[:ID_LENGTH])
    return True
