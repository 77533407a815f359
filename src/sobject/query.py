"""Query construction for mapped types.

Turns local-field equality constraints into a SOQL predicate and builds
the SELECT statements issued by the finders. Field names are validated
against the type's schema; values are quoted as string literals.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from src.sobject.naming import field_key
from src.sobject.schema import MappedTypeSchema


def quote_value(value: Any) -> str:
    """Render a value as a single-quoted SOQL string literal.

    None renders as an empty literal. Backslashes and single quotes are
    escaped so a value cannot terminate the literal early; plain
    interpolation without escaping is deliberately not reproduced.
    """
    text = "" if value is None else str(value).replace("\\", "\\\\").replace("'", "\\'")
    return f"'{text}'"


def build_where(schema: MappedTypeSchema, conditions: Mapping[str, Any]) -> str:
    """Build a SOQL predicate from local-field equality constraints.

    Args:
        schema: Schema of the queried type.
        conditions: Local field name -> required value.

    Returns:
        Clauses of the form ``Remote = 'value'`` joined with `` AND ``,
        in the order the conditions were given.

    Raises:
        SchemaError: If a key is not a local field of the type.
    """
    clauses = []
    for local_name, value in conditions.items():
        remote_name = schema.remote_field_for(field_key(local_name))
        clauses.append(f"{remote_name} = {quote_value(value)}")
    return " AND ".join(clauses)


def build_select(
    schema: MappedTypeSchema,
    conditions: Mapping[str, Any] | None = None,
    fields: Iterable[str] | None = None,
    limit: int | None = None,
) -> str:
    """Build a complete SELECT statement for a mapped type.

    Args:
        schema: Schema of the queried type.
        conditions: Optional equality constraints for the WHERE clause.
        fields: Remote fields to select. Defaults to every mapped field.
        limit: Optional row cap.
    """
    selected = ",".join(fields if fields is not None else schema.remote_fields)
    soql = f"SELECT {selected} FROM {schema.remote_api_name}"
    if conditions:
        soql += f" WHERE {build_where(schema, conditions)}"
    if limit is not None:
        soql += f" LIMIT {int(limit)}"
    return soql
