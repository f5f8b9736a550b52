"""Domain initialization and configuration."""

import structlog
from protean.domain import Domain

logger = structlog.get_logger(__name__)

# Domain Composition Root
storefront = Domain(name="storefront")

_initialized = False


def init_domain() -> Domain:
    """Register every storefront element with the domain, once per process.

    ``Domain.init`` walks the package and imports each module so the
    decorated aggregates, commands and handlers are discovered.
    """
    global _initialized
    if not _initialized:
        storefront.init()
        _initialized = True
        logger.debug("Storefront domain initialized", name=storefront.name)
    return storefront
