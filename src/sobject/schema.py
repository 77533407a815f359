"""Field registry and schema builder for mapped Salesforce objects.

A MappedTypeSchema is the per-type description of a remote object: its
name, the bidirectional remote/local field-name tables, which fields carry
identifiers, and the declared parent/child relationships. Schemas are built
once with SchemaBuilder at class-definition time and are immutable after
build(); every record of the type shares the same schema.

Example:
    schema = (
        SchemaBuilder("Contact")
        .field("first_name", "FirstName")
        .custom_field("nickname", "Nickname")
        .parent("account", target="Account")
        .children("cases", target="Case")
        .build()
    )
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

import structlog

from src.sobject.config import Configuration, get_configuration
from src.sobject.exceptions import DuplicateFieldError, SchemaError
from src.sobject.naming import (
    camelize,
    custom_api_name,
    custom_field_name,
    default_class_name,
    strip_custom_name,
    underscore,
)

logger = structlog.get_logger(__name__)

PRIMARY_ID_FIELD = "Id"
EXTERNAL_ID = "external_id"


class RelationshipKind(str, Enum):
    """Direction of a declared relationship."""

    PARENT = "parent"
    CHILDREN = "children"


@dataclass(frozen=True)
class RelationshipDescriptor:
    """A declared parent or children relationship.

    Attributes:
        name: Local attribute name the relationship is reached through.
        kind: PARENT (lookup by foreign key) or CHILDREN (collection proxy).
        target: Related mapped class, or its registered name.
        foreign_key: Local foreign key field. For PARENT it lives on this
            type; for CHILDREN it lives on the target type.
    """

    name: str
    kind: RelationshipKind
    target: Any
    foreign_key: str


def _invert(mapping: Mapping[str, str]) -> dict[str, str]:
    return {value: key for key, value in mapping.items()}


@dataclass(frozen=True)
class MappedTypeSchema:
    """Immutable description of one mapped remote object type."""

    remote_type_name: str
    remote_api_name: str
    remote_fields: Mapping[str, str]
    remote_id_fields: Mapping[str, str]
    remote_parent_id_fields: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType({})
    )
    relationships: Mapping[str, RelationshipDescriptor] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @property
    def local_fields(self) -> dict[str, str]:
        """Local field name -> remote field name, the inverse of remote_fields."""
        return _invert(self.remote_fields)

    @property
    def local_id_fields(self) -> dict[str, str]:
        return _invert(self.remote_id_fields)

    @property
    def local_parent_id_fields(self) -> dict[str, str]:
        return _invert(self.remote_parent_id_fields)

    def has_field(self, local_name: str) -> bool:
        return local_name in self.remote_fields.values()

    def remote_field_for(self, local_name: str) -> str:
        """Return the remote name of a local field.

        Raises:
            SchemaError: If the local field is not declared on this type.
        """
        try:
            return self.local_fields[local_name]
        except KeyError:
            raise SchemaError(
                f"'{local_name}' is not an attribute of {self.remote_api_name}",
                api_name=self.remote_api_name,
                field_name=local_name,
            ) from None

    def local_field_for(self, remote_name: str) -> str | None:
        return self.remote_fields.get(remote_name)

    def is_id_field(self, local_name: str) -> bool:
        return local_name in self.remote_id_fields.values()

    def is_parent_id_field(self, local_name: str) -> bool:
        return local_name in self.remote_parent_id_fields.values()


class SchemaBuilder:
    """Collects declarations for one mapped type and builds its schema.

    Every declaration method returns the builder so calls can be chained.
    Once build() has been called the builder is sealed and any further
    declaration raises SchemaError.

    Args:
        name: Remote object name, e.g. "Account".
        api_name: Remote api name, defaults to name.
        custom: Append the custom object suffix to the api name.
        config: Configuration supplying the namespace for custom fields.
            Defaults to the process-wide configuration.
    """

    def __init__(
        self,
        name: str,
        api_name: str | None = None,
        custom: bool = False,
        config: Configuration | None = None,
    ) -> None:
        if not name:
            raise SchemaError("SObject does not define an object name")

        self._config = config or get_configuration()
        self._remote_type_name = name
        self._remote_api_name = api_name or name
        if custom:
            self._remote_api_name = custom_api_name(self._remote_api_name)

        self._remote_fields: dict[str, str] = {PRIMARY_ID_FIELD: EXTERNAL_ID}
        self._remote_id_fields: dict[str, str] = {PRIMARY_ID_FIELD: EXTERNAL_ID}
        self._remote_parent_id_fields: dict[str, str] = {}
        self._relationships: dict[str, RelationshipDescriptor] = {}
        self._built = False

    @classmethod
    def custom_object(
        cls,
        name: str,
        api_name: str | None = None,
        config: Configuration | None = None,
    ) -> SchemaBuilder:
        """Start a schema for a custom object (api name gets the ``__c`` suffix)."""
        return cls(name, api_name=api_name, custom=True, config=config)

    @property
    def namespace(self) -> str:
        return self._config.namespace

    # ── Fields ─────────────────────────────────────────────────────────────

    def field(
        self,
        local: str,
        remote: str,
        custom: bool = False,
        is_id: bool = False,
    ) -> SchemaBuilder:
        """Map a local attribute to a remote field.

        Args:
            local: Local attribute name.
            remote: Remote field name (unqualified when custom).
            custom: Qualify the remote name with namespace and ``__c``.
            is_id: The field carries a record identifier.

        Raises:
            DuplicateFieldError: If either name is already mapped to a
                different counterpart.
        """
        self._ensure_open()
        self._check_local_name(local)
        if custom:
            remote = custom_field_name(remote, self.namespace)

        existing_local = self._remote_fields.get(remote)
        if existing_local is not None and existing_local != local:
            raise DuplicateFieldError(
                f"Remote field '{remote}' on {self._remote_api_name} is already "
                f"mapped to '{existing_local}'",
                api_name=self._remote_api_name,
                field_name=remote,
            )
        for other_remote, other_local in self._remote_fields.items():
            if other_local == local and other_remote != remote:
                raise DuplicateFieldError(
                    f"Local field '{local}' on {self._remote_api_name} is already "
                    f"mapped to '{other_remote}'",
                    api_name=self._remote_api_name,
                    field_name=local,
                )
        if local in self._relationships:
            raise SchemaError(
                f"'{local}' on {self._remote_api_name} is already a relationship",
                api_name=self._remote_api_name,
                field_name=local,
            )

        self._remote_fields[remote] = local
        if is_id:
            self._remote_id_fields[remote] = local
        return self

    def custom_field(self, local: str, remote: str, is_id: bool = False) -> SchemaBuilder:
        """Map a local attribute to a custom remote field."""
        return self.field(local, remote, custom=True, is_id=is_id)

    # ── Relationships ──────────────────────────────────────────────────────

    def parent(
        self,
        field: str,
        target: Any = None,
        foreign_key: str | None = None,
        remote_foreign_key: str | None = None,
        custom: bool = False,
    ) -> SchemaBuilder:
        """Declare a lazily resolved parent relationship.

        Registers the foreign key as an identifier field and binds the
        relationship name to a lookup of the parent by that key.

        Args:
            field: Local relationship name, e.g. "account".
            target: Parent mapped class or its registered name.
                Defaults to "{Field}SObject".
            foreign_key: Local foreign key field. Defaults to "{field}_id".
            remote_foreign_key: Remote foreign key field. Defaults to the
                camel-cased local foreign key, e.g. "AccountId".
            custom: Qualify the remote foreign key as a custom field.
        """
        self._ensure_open()
        target = target or default_class_name(field)
        foreign_key = foreign_key or f"{field}_id"
        remote_id = remote_foreign_key or camelize(foreign_key)
        if custom:
            remote_id = custom_field_name(remote_id, self.namespace)

        self.field(foreign_key, remote_id, is_id=True)
        self._remote_parent_id_fields[remote_id] = foreign_key

        self._add_relationship(
            RelationshipDescriptor(
                name=field,
                kind=RelationshipKind.PARENT,
                target=target,
                foreign_key=foreign_key,
            )
        )
        return self

    def custom_parent(self, field: str, **options: Any) -> SchemaBuilder:
        """Declare a parent relationship whose foreign key is a custom field."""
        return self.parent(field, custom=True, **options)

    def children(
        self,
        field: str,
        target: Any = None,
        foreign_key: str | None = None,
    ) -> SchemaBuilder:
        """Declare a lazily queried collection of child records.

        Args:
            field: Local relationship name, e.g. "contacts".
            target: Child mapped class or its registered name.
                Defaults to "{Singular}SObject".
            foreign_key: Local foreign key field on the child type.
                Defaults to this type's api name, without custom
                suffix or namespace, in snake_case plus "_id".
        """
        self._ensure_open()
        target = target or default_class_name(field, singular=True)
        foreign_key = foreign_key or (
            f"{underscore(strip_custom_name(self._remote_api_name))}_id"
        )
        self._add_relationship(
            RelationshipDescriptor(
                name=field,
                kind=RelationshipKind.CHILDREN,
                target=target,
                foreign_key=foreign_key,
            )
        )
        return self

    # ── Build ──────────────────────────────────────────────────────────────

    def build(self) -> MappedTypeSchema:
        """Seal the builder and return the immutable schema."""
        self._ensure_open()
        self._built = True
        schema = MappedTypeSchema(
            remote_type_name=self._remote_type_name,
            remote_api_name=self._remote_api_name,
            remote_fields=MappingProxyType(dict(self._remote_fields)),
            remote_id_fields=MappingProxyType(dict(self._remote_id_fields)),
            remote_parent_id_fields=MappingProxyType(dict(self._remote_parent_id_fields)),
            relationships=MappingProxyType(dict(self._relationships)),
        )
        logger.debug(
            "sobject.schema_built",
            api_name=schema.remote_api_name,
            fields=list(schema.remote_fields),
            relationships=list(schema.relationships),
        )
        return schema

    def _ensure_open(self) -> None:
        if self._built:
            raise SchemaError(
                f"Schema for {self._remote_api_name} is already built",
                api_name=self._remote_api_name,
            )

    def _check_local_name(self, local: str) -> None:
        if not local.isidentifier() or local.startswith("_"):
            raise SchemaError(
                f"'{local}' is not a valid local field name",
                api_name=self._remote_api_name,
                field_name=local,
            )

    def _add_relationship(self, descriptor: RelationshipDescriptor) -> None:
        self._check_local_name(descriptor.name)
        if descriptor.name in self._relationships or descriptor.name in self._remote_fields.values():
            raise SchemaError(
                f"'{descriptor.name}' is already declared on {self._remote_api_name}",
                api_name=self._remote_api_name,
                field_name=descriptor.name,
            )
        self._relationships[descriptor.name] = descriptor
