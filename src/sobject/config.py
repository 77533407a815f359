"""Configuration for the mapping layer.

Two layers:
- Settings: environment-driven values (pydantic BaseSettings, ``SOBJECT_``
  prefix, optional ``.env`` file) cached by get_settings().
- Configuration: the runtime object handed to schema declarations and
  remote-facing operations. It carries the custom field namespace and the
  remote client factory. Set once at process start via configure(); only
  test scaffolding should call reset_configuration().
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from functools import lru_cache
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.sobject.exceptions import ClientUnavailableError

if TYPE_CHECKING:
    from src.sobject.client import RemoteClient


class Environment(str, Enum):
    development = "development"
    staging = "staging"
    production = "production"


class Settings(BaseSettings):
    """Settings loaded from ``SOBJECT_*`` environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_prefix="SOBJECT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Managed package namespace used to qualify custom fields
    NAMESPACE: str = ""

    # Environment
    ENVIRONMENT: Environment = Environment.development

    # Logging
    LOG_LEVEL: str = "INFO"

    # Salesforce REST API
    INSTANCE_URL: str = ""
    ACCESS_TOKEN: str = ""
    API_VERSION: str = "v59.0"
    REQUEST_TIMEOUT: float = 30.0


@lru_cache
def get_settings() -> Settings:
    """Singleton settings instance."""
    return Settings()


@lru_cache
def _default_client_factory() -> RemoteClient | None:
    from src.sobject.client import build_rest_client

    return build_rest_client(get_settings())


class Configuration(BaseModel):
    """Runtime configuration for schema declaration and remote access.

    Args:
        namespace: Prefix for custom field names. Read when a field is
            declared, never re-evaluated afterwards.
        client_factory: Zero-argument callable producing the remote client.
            Invoked lazily on every remote-facing call; returning None
            means no client is available.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    namespace: str = ""
    client_factory: Callable[[], Any] = Field(default=_default_client_factory)

    def client(self) -> RemoteClient:
        """Build a remote client from the factory.

        Raises:
            ClientUnavailableError: If the factory returns None.
        """
        client = self.client_factory()
        if client is None:
            raise ClientUnavailableError("Unable to establish a Salesforce client")
        return client


# ── Module-level singleton ───────────────────────────────────────────────────

_configuration: Configuration | None = None


def get_configuration() -> Configuration:
    """Get the process-wide Configuration.

    Created from Settings on first call. Subsequent calls return the same
    instance until configure() or reset_configuration() replaces it.
    """
    global _configuration
    if _configuration is None:
        _configuration = Configuration(namespace=get_settings().NAMESPACE)
    return _configuration


def configure(**changes: Any) -> Configuration:
    """Replace the process-wide Configuration with updated values.

    Example:
        configure(namespace="Acme", client_factory=lambda: my_client)

    Returns:
        The new Configuration instance.
    """
    global _configuration
    unknown = set(changes) - set(Configuration.model_fields)
    if unknown:
        raise TypeError(f"Unknown configuration options: {sorted(unknown)}")
    current = get_configuration()
    _configuration = current.model_copy(update=changes)
    return _configuration


def reset_configuration() -> None:
    """Drop the process-wide Configuration so the next access rebuilds it."""
    global _configuration
    _configuration = None
