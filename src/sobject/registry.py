"""Process-wide registry of mapped types.

Every SObject subclass that declares a schema registers itself here when
the class is created. Relationship targets may be given as class names,
so the registry also resolves names back to classes at access time.

Written once during type declaration at startup and read-only afterwards.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import structlog

from src.sobject.exceptions import SchemaError

if TYPE_CHECKING:
    from src.sobject.record import SObject
    from src.sobject.schema import MappedTypeSchema

logger = structlog.get_logger(__name__)


def _type_key(sobject_type: type) -> str:
    return f"{sobject_type.__module__}.{sobject_type.__qualname__}"


class SchemaRegistry:
    """Registry of mapped classes keyed by ``module.qualname``."""

    def __init__(self) -> None:
        self._types: dict[str, type[SObject]] = {}

    def register(self, sobject_type: type[SObject]) -> None:
        """Register a mapped class.

        Re-registering the same path replaces the previous class, which
        happens when a module defining mapped types is reloaded.
        """
        key = _type_key(sobject_type)
        if key in self._types and self._types[key] is not sobject_type:
            logger.warning("sobject.type_replaced", type=key)
        self._types[key] = sobject_type
        logger.debug(
            "sobject.type_registered",
            type=key,
            api_name=sobject_type.schema.remote_api_name,
        )

    def schema_for(self, sobject_type: type[SObject]) -> MappedTypeSchema:
        """Return the schema of a registered class.

        Raises:
            SchemaError: If the class is not registered.
        """
        registered = self._types.get(_type_key(sobject_type))
        if registered is None:
            raise SchemaError(f"{sobject_type.__qualname__} is not a mapped type")
        return registered.schema

    def resolve(self, target: Any) -> type[SObject]:
        """Resolve a relationship target to a mapped class.

        Args:
            target: A mapped class, or a name matching a registered class by
                full path, qualified name, or bare class name.

        Raises:
            SchemaError: If the name is unknown or matches several classes.
        """
        if isinstance(target, type):
            return target

        name = str(target)
        if name in self._types:
            return self._types[name]

        matches = [
            sobject_type
            for sobject_type in self._types.values()
            if name in (sobject_type.__qualname__, sobject_type.__name__)
        ]
        if not matches:
            raise SchemaError(f"Unknown mapped type: {name}")
        if len(matches) > 1:
            raise SchemaError(
                f"Ambiguous mapped type '{name}': "
                + ", ".join(sorted(_type_key(m) for m in matches))
            )
        return matches[0]

    def clear(self) -> None:
        """Remove every registration. Intended for test scaffolding."""
        self._types.clear()

    def __len__(self) -> int:
        return len(self._types)

    def __contains__(self, target: Any) -> bool:
        if isinstance(target, type):
            return _type_key(target) in self._types
        return target in self._types


# ── Module-level singleton ───────────────────────────────────────────────────

_registry: SchemaRegistry | None = None


def get_schema_registry() -> SchemaRegistry:
    """Get the global SchemaRegistry singleton.

    Creates the registry on first call. Subsequent calls return the same
    instance.
    """
    global _registry
    if _registry is None:
        _registry = SchemaRegistry()
    return _registry
