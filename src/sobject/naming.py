"""Name derivation helpers for remote object and field names."""

from __future__ import annotations

import re
from enum import Enum
from typing import Any

CUSTOM_SUFFIX = "__c"

_UNDERSCORE_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])|([a-z\d])([A-Z])")


def custom_api_name(name: str) -> str:
    """Append the custom object suffix unless it is already present."""
    if name.endswith(CUSTOM_SUFFIX):
        return name
    return f"{name}{CUSTOM_SUFFIX}"


def custom_field_name(name: str, namespace: str = "") -> str:
    """Qualify a custom field name with the namespace and custom suffix.

    >>> custom_field_name("MyField2", "Test")
    'Test__MyField2__c'
    >>> custom_field_name("MyField2")
    'MyField2__c'
    """
    if namespace:
        return f"{namespace}__{name}{CUSTOM_SUFFIX}"
    return f"{name}{CUSTOM_SUFFIX}"


def strip_custom_name(name: str) -> str:
    """Remove the custom suffix and namespace prefix from a remote name."""
    if name.endswith(CUSTOM_SUFFIX):
        name = name[: -len(CUSTOM_SUFFIX)]
    # A remaining double underscore separates the namespace prefix
    if "__" in name:
        name = name.split("__", 1)[1]
    return name


def camelize(name: str) -> str:
    """Convert a snake_case name to UpperCamelCase (``account_id`` -> ``AccountId``)."""
    return "".join(part[:1].upper() + part[1:] for part in name.split("_") if part)


def underscore(name: str) -> str:
    """Convert a CamelCase name to snake_case (``ParentAccount`` -> ``parent_account``)."""
    name = _UNDERSCORE_BOUNDARY.sub(
        lambda m: f"{m.group(1)}_{m.group(2)}" if m.group(1) else f"{m.group(3)}_{m.group(4)}",
        name,
    )
    return name.replace("-", "_").lower()


def singularize(name: str) -> str:
    """Naive English singular form, enough for relationship defaults."""
    if name.endswith("ies") and len(name) > 3:
        return f"{name[:-3]}y"
    if name.endswith(("ses", "xes", "ches", "shes")):
        return name[:-2]
    if name.endswith("s") and not name.endswith("ss"):
        return name[:-1]
    return name


def default_class_name(field: str, singular: bool = False) -> str:
    """Default mapped class name for a relationship field (``account`` -> ``AccountSObject``)."""
    base = singularize(field) if singular else field
    return f"{camelize(base)}SObject"


def field_key(key: Any) -> str:
    """Normalize a field name given as str or Enum member to its string form."""
    if isinstance(key, Enum):
        return str(key.value)
    return str(key)
