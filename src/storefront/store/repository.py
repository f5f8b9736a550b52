"""Repositories that persist aggregates as resource-store records.

Each aggregate's repository is registered with the domain, so handlers reach
it through ``current_domain.repository_for(Aggregate)``. Records live in the
active ``ResourceStore`` rather than a Protean provider: new aggregates are
created, loaded ones are written back with a full ``replace`` conditional on
the version they were read at.
"""

from typing import Any

import structlog
from protean.core.repository import BaseRepository
from protean.utils.reflection import declared_fields

from storefront.store import get_store
from storefront.store.port import Record, ResourceStore

logger = structlog.get_logger(__name__)


class ResourceRepository(BaseRepository):
    """Base for repositories that map one aggregate onto one resource collection."""

    resource: str = ""

    @property
    def store(self) -> ResourceStore:
        return get_store()

    def _load(self, record: Record) -> Any:
        aggregate_cls = self.meta_.part_of
        known = declared_fields(aggregate_cls)
        data = {key: value for key, value in record.items() if key in known}
        aggregate = aggregate_cls(**data, _version=record.get("version", 0))
        aggregate.state_.mark_retrieved()
        return aggregate

    def get(self, identifier: str) -> Any:
        return self._load(self.store.get(self.resource, identifier))

    def list(self, **filters: Any) -> list[Any]:
        return [self._load(record) for record in self.store.list(self.resource, **filters)]

    def add(self, aggregate: Any) -> Any:
        body = aggregate.to_dict()
        body.pop("_version", None)
        if aggregate.state_.is_persisted:
            record = self.store.replace(self.resource, aggregate.id, body, expected_version=aggregate._version)
        else:
            record = self.store.create(self.resource, body)
        aggregate._version = record["version"]
        aggregate.state_.mark_saved()

        for event in aggregate._events:
            logger.info(
                "Domain event recorded",
                event_type=type(event).__name__,
                resource=self.resource,
                aggregate_id=aggregate.id,
                version=aggregate._version,
            )
        aggregate._events.clear()
        return aggregate

    def patch(self, identifier: str, partial: Record) -> Any:
        return self._load(self.store.patch(self.resource, identifier, partial))

    def delete(self, identifier: str) -> None:
        self.store.delete(self.resource, identifier)
