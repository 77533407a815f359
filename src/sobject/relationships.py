"""Lazy resolution of declared parent and child relationships.

resolve_relationship() is the single entry point: a PARENT descriptor is
resolved by looking the parent up by its foreign key on every access, a
CHILDREN descriptor yields a fresh CollectionProxy that only queries when
asked. Nothing is cached between accesses.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING, Any

import structlog

from src.sobject.config import Configuration
from src.sobject.registry import get_schema_registry
from src.sobject.schema import EXTERNAL_ID, RelationshipDescriptor, RelationshipKind

if TYPE_CHECKING:
    from src.sobject.record import SObject

logger = structlog.get_logger(__name__)


def resolve_relationship(
    record: SObject,
    descriptor: RelationshipDescriptor,
    config: Configuration | None = None,
) -> SObject | CollectionProxy | None:
    """Resolve a relationship of a record.

    Args:
        record: The record owning the relationship.
        descriptor: The declared relationship.
        config: Optional configuration for the remote lookup.

    Returns:
        For PARENT: the parent record, or None when the foreign key is
        empty (no remote call is made). For CHILDREN: a CollectionProxy.
    """
    if descriptor.kind is RelationshipKind.PARENT:
        foreign_id = record.to_attributes(include_parent_foreign_keys=True).get(
            descriptor.foreign_key
        )
        if not foreign_id:
            return None
        target = get_schema_registry().resolve(descriptor.target)
        logger.debug(
            "sobject.parent_lookup",
            relationship=descriptor.name,
            target=target.__name__,
            external_id=foreign_id,
        )
        return target.find(foreign_id, config=config)

    target = get_schema_registry().resolve(descriptor.target)
    return CollectionProxy(target, record, descriptor.foreign_key, config=config)


class CollectionProxy:
    """Queryable view of the children of one parent record.

    Every query is scoped by ``{foreign_key: parent.external_id}``; a value
    the caller supplies for the foreign key is overridden.

    Args:
        sobject_type: Mapped class of the children.
        parent: The owning record.
        foreign_key: Local foreign key field on the child type.
        config: Optional configuration for remote calls.
    """

    def __init__(
        self,
        sobject_type: type[SObject],
        parent: SObject,
        foreign_key: str,
        config: Configuration | None = None,
    ) -> None:
        self.sobject_type = sobject_type
        self.parent = parent
        self.foreign_key = foreign_key
        self._config = config

    def find(self, external_id: str) -> SObject | None:
        """Find a child of this parent by its record id."""
        return self.sobject_type.find_by(
            self._scope({EXTERNAL_ID: external_id}), config=self._config
        )

    def find_by(self, conditions: Mapping[str, Any] | None = None) -> SObject | None:
        return self.sobject_type.find_by(self._scope(conditions), config=self._config)

    def where(self, conditions: Mapping[str, Any] | None = None) -> list[SObject]:
        return self.sobject_type.where(self._scope(conditions), config=self._config)

    def all(self) -> list[SObject]:
        return self.where()

    def exists(self, conditions: Mapping[str, Any] | None = None) -> bool:
        return self.sobject_type.exists(self._scope(conditions), config=self._config)

    def build(self, values: Mapping[str, Any] | None = None) -> SObject:
        """Build an unsaved child already pointing at this parent."""
        return self.sobject_type(self._scope(values))

    def __iter__(self) -> Iterator[SObject]:
        return iter(self.all())

    def __repr__(self) -> str:
        return (
            f"<CollectionProxy {self.sobject_type.__name__} "
            f"{self.foreign_key}={self.parent.external_id!r}>"
        )

    def _scope(self, conditions: Mapping[str, Any] | None) -> dict[str, Any]:
        scoped = dict(conditions or {})
        scoped[self.foreign_key] = self.parent.external_id
        return scoped
