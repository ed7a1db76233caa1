"""
Factory for creating URL store instances.

Unlike a process-wide singleton, every call returns a fresh store: the
application owns the instance it creates and passes it to whoever needs it.
"""

import logging
from enum import Enum

from shortlink_app.config import Settings
from .strategies import URLStoreStrategy, SQLURLStore, InMemoryURLStore


logger = logging.getLogger(__name__)


class StoreBackend(Enum):
    """Available URL store backends"""
    SQL = "sql"
    MEMORY = "memory"


class URLStoreFactory:
    """Simple factory for creating URL stores from settings"""

    @classmethod
    def create(cls, backend: StoreBackend, settings: Settings) -> URLStoreStrategy:
        """
        Create a URL store.

        Args:
            backend: Type of store backend (from enum)
            settings: Application settings (database URL, lock timeout)

        Returns:
            A new, not yet initialized, URL store
        """
        if backend == StoreBackend.SQL:
            store = SQLURLStore(settings.database_url, timeout=settings.database_timeout)
        elif backend == StoreBackend.MEMORY:
            store = InMemoryURLStore()
        else:
            raise ValueError(f"Unknown store backend: {backend}")

        logger.info("url store created", extra={"backend": store.name})
        return store
