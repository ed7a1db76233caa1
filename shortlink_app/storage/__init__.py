"""
URL store module.

Implements the Strategy Pattern for pluggable alias -> URL storage.
"""

from .strategies import (
    URLStoreStrategy,
    SQLURLStore,
    InMemoryURLStore,
    URLRecord,
    URLSaver,
    URLGetter,
    URLDeleter,
)
from .factory import URLStoreFactory, StoreBackend

__all__ = [
    "URLStoreStrategy",
    "SQLURLStore",
    "InMemoryURLStore",
    "URLRecord",
    "URLSaver",
    "URLGetter",
    "URLDeleter",
    "URLStoreFactory",
    "StoreBackend",
]
