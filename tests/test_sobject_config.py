"""Tests for settings, runtime configuration and logging setup."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import structlog
from pydantic import ValidationError

from src.sobject.config import (
    Configuration,
    Environment,
    Settings,
    configure,
    get_configuration,
    get_settings,
    reset_configuration,
)
from src.sobject.exceptions import ClientUnavailableError
from src.sobject.observability import configure_structlog


class TestSettings:
    """Test environment-driven settings."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("SOBJECT_NAMESPACE", raising=False)
        settings = Settings(_env_file=None)
        assert settings.NAMESPACE == ""
        assert settings.ENVIRONMENT == Environment.development
        assert settings.API_VERSION == "v59.0"

    def test_reads_prefixed_environment(self, monkeypatch):
        monkeypatch.setenv("SOBJECT_NAMESPACE", "Acme")
        monkeypatch.setenv("SOBJECT_ENVIRONMENT", "production")
        settings = Settings(_env_file=None)
        assert settings.NAMESPACE == "Acme"
        assert settings.ENVIRONMENT == Environment.production


class TestConfiguration:
    """Test the process-wide runtime configuration."""

    def test_singleton(self):
        assert get_configuration() is get_configuration()

    def test_configure_replaces_values(self):
        client = MagicMock()
        config = configure(namespace="Acme", client_factory=lambda: client)

        assert get_configuration() is config
        assert config.namespace == "Acme"
        assert config.client() is client

    def test_configure_keeps_unchanged_values(self):
        configure(namespace="Acme")
        configure(client_factory=lambda: None)
        assert get_configuration().namespace == "Acme"

    def test_configure_rejects_unknown_options(self):
        with pytest.raises(TypeError, match="salesforce_client"):
            configure(salesforce_client=lambda: None)

    def test_reset_restores_defaults(self):
        configure(namespace="Acme")
        reset_configuration()
        assert get_configuration().namespace == get_settings().NAMESPACE

    def test_configuration_is_frozen(self):
        config = Configuration(namespace="Acme")
        with pytest.raises(ValidationError):
            config.namespace = "Other"  # type: ignore[misc]

    def test_missing_client_raises(self):
        config = Configuration(client_factory=lambda: None)
        with pytest.raises(ClientUnavailableError, match="Unable to establish"):
            config.client()

    def test_factory_invoked_lazily(self):
        factory = MagicMock(return_value=MagicMock())
        config = Configuration(client_factory=factory)
        factory.assert_not_called()
        config.client()
        config.client()
        assert factory.call_count == 2


@pytest.mark.parametrize("environment", [Environment.development, Environment.production])
def test_configure_structlog(environment):
    configure_structlog(Settings(_env_file=None, ENVIRONMENT=environment))
    assert structlog.is_configured()
    structlog.reset_defaults()


def test_configure_structlog_filters_below_log_level(capsys):
    configure_structlog(Settings(_env_file=None, LOG_LEVEL="warning"))
    try:
        logger = structlog.get_logger("tests")
        logger.info("sobject.hidden")
        logger.warning("sobject.shown")
    finally:
        structlog.reset_defaults()

    output = capsys.readouterr().out
    assert "sobject.shown" in output
    assert "sobject.hidden" not in output
