"""Resource store factory.

Provides get_store() / set_store() to swap implementations:
- InMemoryResourceStore for development and testing
- HttpResourceStore for a running REST backend
"""

from storefront.config import get_settings
from storefront.store.http_adapter import HttpResourceStore
from storefront.store.memory_adapter import InMemoryResourceStore
from storefront.store.port import ResourceStore

_current_store: ResourceStore | None = None


def build_store(settings=None) -> ResourceStore:
    """Build the adapter selected by ``[store] adapter``."""
    settings = settings or get_settings()
    if settings.store.adapter == "http":
        return HttpResourceStore(settings.store.base_url, timeout=settings.store.timeout)
    return InMemoryResourceStore()


def get_store() -> ResourceStore:
    """Return the current resource store, building it from settings on first use."""
    global _current_store
    if _current_store is None:
        _current_store = build_store()
    return _current_store


def set_store(store: ResourceStore) -> None:
    """Override the active resource store (useful for tests)."""
    global _current_store
    _current_store = store


def reset_store() -> None:
    """Reset to the configured store."""
    global _current_store
    _current_store = None
