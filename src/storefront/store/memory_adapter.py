"""In-process resource store for development and testing.

Holds records in dictionaries guarded by a lock. It can be told to fail at
runtime to simulate an unreachable backend, and it records every call in
``calls`` so tests can assert on store traffic.
"""

import copy
import threading
from typing import Any
from uuid import uuid4

from storefront.shared.exceptions import ConcurrencyHazard, NetworkError, NotFound, ValidationError
from storefront.store.port import Record, ResourceStore


class InMemoryResourceStore(ResourceStore):
    """Configurable in-memory resource store."""

    def __init__(self) -> None:
        self._records: dict[str, dict[str, Record]] = {}
        self._lock = threading.RLock()
        self.reachable: bool = True
        self.failing_operations: set[tuple[str, str]] = set()
        self.calls: list[dict] = []

    def configure(self, reachable: bool = True, failing_operations: set[tuple[str, str]] | None = None) -> None:
        """Configure store behavior at runtime.

        ``failing_operations`` holds ``(operation, resource)`` pairs that raise
        ``NetworkError`` while everything else keeps working.
        """
        self.reachable = reachable
        self.failing_operations = set(failing_operations or ())

    def _enter(self, operation: str, resource: str, identifier: str | None = None) -> dict[str, Record]:
        self.calls.append({"method": operation, "resource": resource, "id": identifier})
        if not self.reachable or (operation, resource) in self.failing_operations:
            raise NetworkError(operation, resource, identifier, "store unreachable")
        return self._records.setdefault(resource, {})

    def list(self, resource: str, **filters: Any) -> list[Record]:
        with self._lock:
            bucket = self._enter("list", resource)
            return [
                copy.deepcopy(record)
                for record in bucket.values()
                if all(record.get(key) == value for key, value in filters.items())
            ]

    def get(self, resource: str, identifier: str) -> Record:
        with self._lock:
            bucket = self._enter("get", resource, identifier)
            if identifier not in bucket:
                raise NotFound(resource, identifier)
            return copy.deepcopy(bucket[identifier])

    def create(self, resource: str, body: Record) -> Record:
        with self._lock:
            identifier = str(body.get("id") or uuid4())
            bucket = self._enter("create", resource, identifier)
            if identifier in bucket:
                raise ValidationError({"id": [f"{resource} '{identifier}' already exists"]})
            record = {**copy.deepcopy(body), "id": identifier, "version": 1}
            bucket[identifier] = record
            return copy.deepcopy(record)

    def replace(
        self,
        resource: str,
        identifier: str,
        body: Record,
        expected_version: int | None = None,
    ) -> Record:
        with self._lock:
            bucket = self._enter("replace", resource, identifier)
            current = bucket.get(identifier)
            if current is None:
                raise NotFound(resource, identifier)
            if expected_version is not None and current["version"] != expected_version:
                raise ConcurrencyHazard(
                    resource,
                    identifier,
                    f"expected version {expected_version}, found {current['version']}",
                )
            record = {**copy.deepcopy(body), "id": identifier, "version": current["version"] + 1}
            bucket[identifier] = record
            return copy.deepcopy(record)

    def patch(self, resource: str, identifier: str, partial: Record) -> Record:
        with self._lock:
            bucket = self._enter("patch", resource, identifier)
            current = bucket.get(identifier)
            if current is None:
                raise NotFound(resource, identifier)
            record = {**current, **copy.deepcopy(partial), "id": identifier, "version": current["version"] + 1}
            bucket[identifier] = record
            return copy.deepcopy(record)

    def delete(self, resource: str, identifier: str) -> None:
        with self._lock:
            bucket = self._enter("delete", resource, identifier)
            if bucket.pop(identifier, None) is None:
                raise NotFound(resource, identifier)
