"""REST resource store adapter.

Talks to a JSON-server style API: ``GET /<resource>?field=value``,
``GET/PUT/PATCH/DELETE /<resource>/<id>`` and ``POST /<resource>``.

The API has no conditional writes, so ``replace`` with an expected version
re-reads the record first and refuses to write over a newer version. That
check narrows the race window; callers that need a true critical section
(the loyalty ledger) also serialize writes in process.
"""

from typing import Any

import httpx
import structlog

from storefront.shared.exceptions import ConcurrencyHazard, NetworkError, NotFound, ValidationError
from storefront.store.port import Record, ResourceStore

logger = structlog.get_logger(__name__)


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class HttpResourceStore(ResourceStore):
    """Resource store backed by a REST API over httpx."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(base_url=base_url, timeout=timeout, transport=transport)

    def close(self) -> None:
        self._client.close()

    def _request(
        self,
        operation: str,
        method: str,
        resource: str,
        identifier: str | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        url = f"/{resource}/{identifier}" if identifier is not None else f"/{resource}"
        try:
            response = self._client.request(method, url, **kwargs)
        except httpx.TransportError as exc:
            logger.warning(
                "Resource store unreachable",
                operation=operation,
                resource=resource,
                id=identifier,
                error=str(exc),
            )
            raise NetworkError(operation, resource, identifier, str(exc)) from exc

        if response.status_code == 404:
            raise NotFound(resource, identifier or "")
        if response.status_code >= 500:
            raise NetworkError(operation, resource, identifier, f"HTTP {response.status_code}")
        if response.status_code >= 400:
            raise ValidationError({resource: [response.text or f"HTTP {response.status_code}"]})
        return response

    @staticmethod
    def _with_version(record: Record) -> Record:
        record.setdefault("version", 0)
        return record

    def list(self, resource: str, **filters: Any) -> list[Record]:
        params = {key: _query_value(value) for key, value in filters.items()}
        response = self._request("list", "GET", resource, params=params)
        return [self._with_version(record) for record in response.json()]

    def get(self, resource: str, identifier: str) -> Record:
        return self._with_version(self._request("get", "GET", resource, identifier).json())

    def create(self, resource: str, body: Record) -> Record:
        payload = {**body, "version": 1}
        if payload.get("id") is None:
            payload.pop("id", None)
        return self._with_version(self._request("create", "POST", resource, json=payload).json())

    def replace(
        self,
        resource: str,
        identifier: str,
        body: Record,
        expected_version: int | None = None,
    ) -> Record:
        current = self.get(resource, identifier)
        if expected_version is not None and current["version"] != expected_version:
            raise ConcurrencyHazard(
                resource,
                identifier,
                f"expected version {expected_version}, found {current['version']}",
            )
        payload = {**body, "id": identifier, "version": current["version"] + 1}
        return self._with_version(self._request("replace", "PUT", resource, identifier, json=payload).json())

    def patch(self, resource: str, identifier: str, partial: Record) -> Record:
        current = self.get(resource, identifier)
        payload = {**partial, "version": current["version"] + 1}
        return self._with_version(self._request("patch", "PATCH", resource, identifier, json=payload).json())

    def delete(self, resource: str, identifier: str) -> None:
        self._request("delete", "DELETE", resource, identifier)
