"""Remote client contract and a Salesforce REST implementation.

The mapping core talks to Salesforce through one injected capability, the
RemoteClient protocol. Any object with these four methods works; tests
usually pass a MagicMock. SalesforceRestClient is a thin synchronous
implementation over httpx for an already-authenticated session (instance
URL plus access token). Authentication flows, retries and pagination
beyond the first result page are left to the caller.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Protocol

import httpx
import structlog

from src.sobject.config import Settings
from src.sobject.exceptions import RemoteOperationError
from src.sobject.schema import PRIMARY_ID_FIELD

logger = structlog.get_logger(__name__)


class RemoteClient(Protocol):
    """Operations the mapping core needs from a Salesforce client."""

    def create(self, api_name: str, attributes: Mapping[str, Any]) -> str:
        """Create a record and return its id. Raises on failure."""
        ...

    def update(self, api_name: str, attributes: Mapping[str, Any]) -> bool:
        """Update the record identified by attributes["Id"]."""
        ...

    def find(self, api_name: str, external_id: str) -> Mapping[str, Any]:
        """Fetch one record by id as remote field -> value. Raises if missing."""
        ...

    def query(self, soql: str) -> Iterable[Mapping[str, Any]]:
        """Run a SOQL query and return its rows."""
        ...


class SalesforceRestClient:
    """RemoteClient backed by the Salesforce REST API.

    Args:
        instance_url: Org base URL, e.g. "https://acme.my.salesforce.com".
        access_token: OAuth access token for the session.
        api_version: REST API version segment, e.g. "v59.0".
        timeout: Request timeout in seconds.
        http_client: Optional preconfigured httpx.Client (used in tests).
    """

    def __init__(
        self,
        instance_url: str,
        access_token: str,
        api_version: str = "v59.0",
        timeout: float = 30.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._base_path = f"/services/data/{api_version}"
        self._http = http_client or httpx.Client(
            base_url=instance_url.rstrip("/"),
            headers={
                "Authorization": f"Bearer {access_token}",
                "Accept": "application/json",
            },
            timeout=timeout,
        )

    def create(self, api_name: str, attributes: Mapping[str, Any]) -> str:
        payload = {k: v for k, v in attributes.items() if k != PRIMARY_ID_FIELD}
        response = self._request(
            "create", "POST", f"{self._base_path}/sobjects/{api_name}/", json=payload
        )
        body = response.json()
        if not body.get("success", True):
            raise RemoteOperationError(
                "create", f"{api_name} was not created", response.status_code, body.get("errors")
            )
        logger.info("salesforce.record_created", api_name=api_name, record_id=body.get("id"))
        return body.get("id") or ""

    def update(self, api_name: str, attributes: Mapping[str, Any]) -> bool:
        record_id = attributes.get(PRIMARY_ID_FIELD)
        if not record_id:
            raise RemoteOperationError("update", f"{api_name} update requires an Id")
        payload = {k: v for k, v in attributes.items() if k != PRIMARY_ID_FIELD}
        self._request(
            "update", "PATCH", f"{self._base_path}/sobjects/{api_name}/{record_id}", json=payload
        )
        logger.info("salesforce.record_updated", api_name=api_name, record_id=record_id)
        return True

    def find(self, api_name: str, external_id: str) -> Mapping[str, Any]:
        response = self._request(
            "find", "GET", f"{self._base_path}/sobjects/{api_name}/{external_id}"
        )
        return response.json()

    def query(self, soql: str) -> list[Mapping[str, Any]]:
        response = self._request(
            "query", "GET", f"{self._base_path}/query/", params={"q": soql}
        )
        return response.json().get("records", [])

    def close(self) -> None:
        self._http.close()

    def _request(self, operation: str, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = self._http.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise RemoteOperationError(operation, str(exc)) from exc

        if response.is_error:
            try:
                errors = response.json()
            except ValueError:
                errors = response.text
            logger.warning(
                "salesforce.request_failed",
                operation=operation,
                path=path,
                status_code=response.status_code,
            )
            raise RemoteOperationError(
                operation,
                f"HTTP {response.status_code}",
                status_code=response.status_code,
                errors=errors,
            )
        return response


def build_rest_client(settings: Settings) -> SalesforceRestClient | None:
    """Build a SalesforceRestClient from settings.

    Returns None when no instance URL or access token is configured, which
    makes every remote-facing call fail with ClientUnavailableError.
    """
    if not settings.INSTANCE_URL or not settings.ACCESS_TOKEN:
        return None
    return SalesforceRestClient(
        instance_url=settings.INSTANCE_URL,
        access_token=settings.ACCESS_TOKEN,
        api_version=settings.API_VERSION,
        timeout=settings.REQUEST_TIMEOUT,
    )
