"""Error taxonomy for the Salesforce object mapping layer.

Defines:
- SObjectError: Base class for every error raised by the mapping core.
- SchemaError: Invalid declarations or query conditions naming unknown fields.
- DuplicateFieldError: A remote or local field name registered twice.
- ClientUnavailableError: The configured client factory produced no client.
- RemoteOperationError: A remote create/update/find/query failed.
- SaveFailedError: A throwing save reported a falsy outcome without raising.

Errors raised by an injected client are never wrapped by the core. The
bundled REST client raises RemoteOperationError; other clients may raise
whatever they like and it reaches the caller unchanged.
"""

from __future__ import annotations

from typing import Any


class SObjectError(Exception):
    """Base class for mapping layer errors."""


class SchemaError(SObjectError):
    """Raised when a schema declaration or query condition is invalid.

    Attributes:
        api_name: The remote api name of the type involved, if known.
        field_name: The offending field name, if any.
    """

    def __init__(
        self,
        message: str,
        api_name: str | None = None,
        field_name: str | None = None,
    ) -> None:
        self.api_name = api_name
        self.field_name = field_name
        super().__init__(message)


class DuplicateFieldError(SchemaError):
    """Raised when a field would break the remote/local bijection."""


class ClientUnavailableError(SObjectError):
    """Raised when no usable remote client can be obtained."""


class RemoteOperationError(SObjectError):
    """Raised when a remote operation fails.

    Attributes:
        operation: The client operation (create, update, find, query).
        status_code: HTTP status code, when the failure came from HTTP.
        errors: Error payload returned by the remote service.
    """

    def __init__(
        self,
        operation: str,
        message: str,
        status_code: int | None = None,
        errors: Any = None,
    ) -> None:
        self.operation = operation
        self.status_code = status_code
        self.errors = errors
        super().__init__(f"{operation} failed: {message}")


class SaveFailedError(SObjectError):
    """Raised by throwing save variants when the outcome is falsy.

    Attributes:
        api_name: The remote api name of the record's type.
        external_id: The record identifier at the time of failure.
    """

    def __init__(self, api_name: str, external_id: str | None) -> None:
        self.api_name = api_name
        self.external_id = external_id
        target = external_id or "new record"
        super().__init__(f"Failed to save {api_name} ({target})")
