"""Declarative mapping between Python records and Salesforce objects.

Describe a remote object once with SchemaBuilder, attach the schema to an
SObject subclass, and records translate between local attribute names and
remote field names for create, read, update and query.

Exports:
    SObject: Base class for mapped records.
    SchemaBuilder: Declares object name, fields and relationships.
    MappedTypeSchema, RelationshipDescriptor, RelationshipKind: Schema types.
    CollectionProxy: Lazily queried children of a record.
    SchemaRegistry, get_schema_registry: Mapped type registry.
    Configuration, configure, get_configuration, reset_configuration: Runtime config.
    RemoteClient, SalesforceRestClient: Remote client contract and REST client.
    build_where, build_select: Query builders.
    SObjectError, SchemaError, DuplicateFieldError, ClientUnavailableError,
    RemoteOperationError, SaveFailedError: Error taxonomy.
"""

from src.sobject.client import RemoteClient, SalesforceRestClient
from src.sobject.config import (
    Configuration,
    configure,
    get_configuration,
    reset_configuration,
)
from src.sobject.exceptions import (
    ClientUnavailableError,
    DuplicateFieldError,
    RemoteOperationError,
    SaveFailedError,
    SchemaError,
    SObjectError,
)
from src.sobject.identifiers import (
    is_valid_identifier,
    to_case_safe_id,
    truncate_identifier,
)
from src.sobject.query import build_select, build_where
from src.sobject.record import SObject
from src.sobject.registry import SchemaRegistry, get_schema_registry
from src.sobject.relationships import CollectionProxy, resolve_relationship
from src.sobject.schema import (
    EXTERNAL_ID,
    PRIMARY_ID_FIELD,
    MappedTypeSchema,
    RelationshipDescriptor,
    RelationshipKind,
    SchemaBuilder,
)

__all__ = [
    "EXTERNAL_ID",
    "PRIMARY_ID_FIELD",
    "ClientUnavailableError",
    "CollectionProxy",
    "Configuration",
    "DuplicateFieldError",
    "MappedTypeSchema",
    "RelationshipDescriptor",
    "RelationshipKind",
    "RemoteClient",
    "RemoteOperationError",
    "SObject",
    "SObjectError",
    "SalesforceRestClient",
    "SaveFailedError",
    "SchemaBuilder",
    "SchemaError",
    "SchemaRegistry",
    "build_select",
    "build_where",
    "configure",
    "get_configuration",
    "get_schema_registry",
    "is_valid_identifier",
    "reset_configuration",
    "resolve_relationship",
    "to_case_safe_id",
    "truncate_identifier",
]
