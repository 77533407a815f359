"""SObject -- base class for records of mapped Salesforce objects.

A mapped type is a subclass with a ``schema`` class attribute. The schema
decides which attributes a record has; values live in a plain mapping
keyed by local field name and are reached as ordinary attributes.
Relationship names resolve lazily through resolve_relationship().

Example:
    class Account(SObject):
        schema = (
            SchemaBuilder("Account")
            .field("name", "Name")
            .children("contacts", target="Contact")
            .build()
        )

    account = Account.find("001000000000001")
    for contact in account.contacts:
        ...

Remote-facing operations take an optional ``config``; without one the
process-wide Configuration supplies the client.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, ClassVar

import structlog

from src.sobject.client import RemoteClient
from src.sobject.config import Configuration, get_configuration
from src.sobject.exceptions import SaveFailedError, SchemaError
from src.sobject.identifiers import truncate_identifier
from src.sobject.naming import field_key
from src.sobject.query import build_select
from src.sobject.registry import get_schema_registry
from src.sobject.relationships import CollectionProxy, resolve_relationship
from src.sobject.schema import (
    EXTERNAL_ID,
    PRIMARY_ID_FIELD,
    MappedTypeSchema,
    SchemaBuilder,
)

logger = structlog.get_logger(__name__)


class SObject:
    """A record of a mapped remote object.

    Args:
        values: Initial field values. Missing fields default to None.
        translate: When True, keys are remote field names and are translated
            to local names; already-local keys are accepted as well. When
            False, keys are local field names and unknown keys are dropped.
    """

    schema: ClassVar[MappedTypeSchema | None] = None

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        schema = cls.__dict__.get("schema")
        if schema is None:
            return
        if isinstance(schema, SchemaBuilder):
            schema = schema.build()
            cls.schema = schema

        reserved = sorted(
            name
            for name in (*schema.remote_fields.values(), *schema.relationships)
            if hasattr(SObject, name)
        )
        if reserved:
            raise SchemaError(
                f"{cls.__name__} declares reserved attribute names: {reserved}",
                api_name=schema.remote_api_name,
            )
        get_schema_registry().register(cls)

    def __init__(
        self,
        values: Mapping[str, Any] | None = None,
        translate: bool = False,
    ) -> None:
        schema = self._schema()
        incoming = {field_key(k): v for k, v in (values or {}).items()}

        field_values: dict[str, Any] = {}
        for remote, local in schema.remote_fields.items():
            if translate and remote in incoming:
                value = incoming[remote]
            else:
                value = incoming.get(local)
            if value is not None and schema.is_id_field(local):
                value = truncate_identifier(value)
            field_values[local] = value

        object.__setattr__(self, "_values", field_values)

    # ── Attribute access ───────────────────────────────────────────────────

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        values = self.__dict__.get("_values", {})
        if name in values:
            return values[name]
        schema = type(self).schema
        if schema is not None and name in schema.relationships:
            return resolve_relationship(self, schema.relationships[name])
        raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")

    def __setattr__(self, name: str, value: Any) -> None:
        values = self.__dict__.get("_values", {})
        if name in values:
            values[name] = value
            return
        if name.startswith("_"):
            object.__setattr__(self, name, value)
            return
        raise AttributeError(
            f"'{name}' is not a field of {self._schema().remote_api_name}"
        )

    def relationship(
        self, name: str, config: Configuration | None = None
    ) -> SObject | CollectionProxy | None:
        """Resolve a declared relationship with an explicit configuration."""
        descriptor = self._schema().relationships.get(name)
        if descriptor is None:
            raise SchemaError(
                f"'{name}' is not a relationship of {self._schema().remote_api_name}",
                api_name=self._schema().remote_api_name,
                field_name=name,
            )
        return resolve_relationship(self, descriptor, config=config)

    # ── State and serialization ────────────────────────────────────────────

    def is_new(self) -> bool:
        """True until the record has a remote identifier."""
        return not self._values.get(EXTERNAL_ID)

    def to_attributes(self, include_parent_foreign_keys: bool = False) -> dict[str, Any]:
        """Return local field -> value.

        Parent foreign key fields are left out unless
        include_parent_foreign_keys is set.
        """
        schema = self._schema()
        return {
            local: value
            for local, value in self._values.items()
            if include_parent_foreign_keys or not schema.is_parent_id_field(local)
        }

    @property
    def attributes(self) -> dict[str, Any]:
        return self.to_attributes()

    def to_remote_attributes(self) -> dict[str, Any]:
        """Return remote field -> value, the payload sent on create and update."""
        local_fields = self._schema().local_fields
        return {local_fields[local]: value for local, value in self.to_attributes().items()}

    def assign_attributes(self, values: Mapping[Any, Any] | None = None) -> None:
        """Assign values keyed by local field name; unknown keys are ignored."""
        for key, value in (values or {}).items():
            local = field_key(key)
            if local in self._values:
                self._values[local] = value

    # ── Persistence ────────────────────────────────────────────────────────

    def save(self, config: Configuration | None = None) -> bool:
        """Create or update the record remotely.

        Client errors are logged and reported as False. A failed create
        leaves the record new.

        Raises:
            ClientUnavailableError: If no client can be obtained.
        """
        client = self.client(config)
        try:
            return self._persist(client)
        except Exception:
            logger.warning(
                "sobject.save_failed",
                api_name=self._schema().remote_api_name,
                external_id=self._values.get(EXTERNAL_ID),
                exc_info=True,
            )
            return False

    def save_or_raise(self, config: Configuration | None = None) -> bool:
        """Create or update the record remotely, raising on failure.

        Client errors propagate unchanged.

        Raises:
            SaveFailedError: If the client reports a falsy outcome.
        """
        if not self._persist(self.client(config)):
            raise SaveFailedError(
                self._schema().remote_api_name, self._values.get(EXTERNAL_ID)
            )
        return True

    def update(
        self,
        values: Mapping[Any, Any] | None = None,
        config: Configuration | None = None,
    ) -> bool:
        """Assign values then save(). Assigned values stay even if saving fails."""
        self.assign_attributes(values)
        return self.save(config=config)

    def update_or_raise(
        self,
        values: Mapping[Any, Any] | None = None,
        config: Configuration | None = None,
    ) -> bool:
        """Assign values then save_or_raise()."""
        self.assign_attributes(values)
        return self.save_or_raise(config=config)

    def _persist(self, client: RemoteClient) -> bool:
        api_name = self._schema().remote_api_name
        if self.is_new():
            new_id = client.create(api_name, self.to_remote_attributes())
            self._values[EXTERNAL_ID] = truncate_identifier(new_id) or None
            logger.info("sobject.created", api_name=api_name, external_id=self._values[EXTERNAL_ID])
            return not self.is_new()

        updated = bool(client.update(api_name, self.to_remote_attributes()))
        logger.info(
            "sobject.updated",
            api_name=api_name,
            external_id=self._values[EXTERNAL_ID],
            success=updated,
        )
        return updated

    # ── Class-level construction ───────────────────────────────────────────

    @classmethod
    def build(cls, values: Mapping[str, Any] | None = None, translate: bool = False) -> SObject:
        return cls(values, translate=translate)

    @classmethod
    def create(
        cls,
        values: Mapping[str, Any] | None = None,
        config: Configuration | None = None,
    ) -> SObject:
        """Build and save() a record. Check is_new() on the result for failure."""
        record = cls.build(values)
        record.save(config=config)
        return record

    @classmethod
    def create_or_raise(
        cls,
        values: Mapping[str, Any] | None = None,
        config: Configuration | None = None,
    ) -> SObject:
        """Build and save_or_raise() a record."""
        record = cls.build(values)
        record.save_or_raise(config=config)
        return record

    # ── Finders ────────────────────────────────────────────────────────────

    @classmethod
    def client(cls, config: Configuration | None = None) -> RemoteClient:
        """Obtain the remote client.

        Raises:
            ClientUnavailableError: If the client factory yields no client.
        """
        return (config or get_configuration()).client()

    @classmethod
    def find(cls, external_id: str, config: Configuration | None = None) -> SObject:
        """Fetch one record by id. Lookup failures propagate from the client."""
        schema = cls._schema()
        remote = cls.client(config).find(schema.remote_api_name, external_id)
        return cls(dict(remote), translate=True)

    @classmethod
    def find_by(
        cls,
        conditions: Mapping[str, Any] | None = None,
        config: Configuration | None = None,
    ) -> SObject | None:
        """Return the first record matching the conditions, or None."""
        records = cls.where(conditions, config=config)
        return records[0] if records else None

    @classmethod
    def where(
        cls,
        conditions: Mapping[str, Any] | None = None,
        config: Configuration | None = None,
    ) -> list[SObject]:
        """Return records whose local fields equal the given values.

        Raises:
            SchemaError: If a condition names an unknown field.
        """
        soql = build_select(cls._schema(), conditions)
        logger.debug("sobject.query", type=cls.__name__, soql=soql)
        rows = cls.client(config).query(soql)
        return [cls(dict(row), translate=True) for row in rows]

    @classmethod
    def exists(
        cls,
        conditions: Mapping[str, Any] | None = None,
        config: Configuration | None = None,
    ) -> bool:
        """True if at least one record matches the conditions."""
        soql = build_select(cls._schema(), conditions, fields=[PRIMARY_ID_FIELD], limit=1)
        logger.debug("sobject.query", type=cls.__name__, soql=soql)
        for _ in cls.client(config).query(soql):
            return True
        return False

    @classmethod
    def all(cls, config: Configuration | None = None) -> list[SObject]:
        return cls.where(config=config)

    @classmethod
    def _schema(cls) -> MappedTypeSchema:
        if cls.schema is None:
            raise SchemaError(f"{cls.__name__} does not define an object name")
        return cls.schema

    # ── Dunder helpers ─────────────────────────────────────────────────────

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._values == other._values  # type: ignore[attr-defined]

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        fields = " ".join(f"{k}={v!r}" for k, v in self._values.items())
        return f"<{type(self).__name__} {fields}>"
