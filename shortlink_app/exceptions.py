"""
Domain exceptions for the URL shortener.

Hierarchy:
    ShortenerError
    ├── StoreError
    │   ├── AliasExistsError      - alias is already taken (unique constraint)
    │   ├── URLNotFoundError      - no record for the alias
    │   └── StorageError          - any other backend failure (opaque)
    └── RandomSourceUnavailableError

Every error carries the identifier of the operation that raised it. The
underlying exception is attached with ``raise ... from exc`` so it stays
available on ``__cause__`` for logging; it is never folded into the message
returned to API callers.
"""

from typing import Optional


class ShortenerError(Exception):
    """Base exception for URL shortener errors."""

    default_message = "url shortener error"

    def __init__(self, message: Optional[str] = None, op: Optional[str] = None):
        self.op = op
        self.message = message or self.default_message
        super().__init__(f"{op}: {self.message}" if op else self.message)


class StoreError(ShortenerError):
    """Base exception for URL store operations."""

    default_message = "url store error"


class AliasExistsError(StoreError):
    """Raised when saving an alias that another record already uses."""

    default_message = "url already exists"

    def __init__(self, alias: str, op: Optional[str] = None):
        self.alias = alias
        super().__init__(f"alias '{alias}' already exists", op=op)


class URLNotFoundError(StoreError):
    """Raised when no record matches the alias."""

    default_message = "url not found"

    def __init__(self, alias: str, op: Optional[str] = None):
        self.alias = alias
        super().__init__(f"alias '{alias}' not found", op=op)


class StorageError(StoreError):
    """
    Raised when the backing store fails (connection, SQL, I/O, ...).

    The original exception is available on ``__cause__``.
    """

    default_message = "storage failure"


class RandomSourceUnavailableError(ShortenerError):
    """Raised when the random source used for alias generation fails."""

    default_message = "random source unavailable"
