"""
URL store strategies using Strategy Pattern.

Allows switching the backing store without touching the request handlers:
- SQL: SQLAlchemy engine (SQLite by default, any dialect with unique indexes works)
- Memory: process-local dict, for tests and throwaway runs

Handlers do not depend on a concrete store. They ask for the capability they
use (``URLSaver``, ``URLGetter`` or ``URLDeleter``), which every strategy
below satisfies.
"""

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Optional, Protocol

from sqlalchemy import delete, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from shortlink_app.database.connection import Base, build_engine
from shortlink_app.exceptions import AliasExistsError, StorageError, URLNotFoundError
from shortlink_app.models.url import URL, UPDATED_AT_TRIGGER


logger = logging.getLogger(__name__)


class URLSaver(Protocol):
    def save_url(self, target_url: str, alias: str) -> None: ...


class URLGetter(Protocol):
    def get_url(self, alias: str) -> str: ...


class URLDeleter(Protocol):
    def delete_url(self, alias: str) -> str: ...


@dataclass(frozen=True)
class URLRecord:
    """Snapshot of a stored mapping"""
    id: int
    alias: str
    target_url: str
    created_at: datetime
    updated_at: datetime


def _require_non_empty(op: str, **values: str) -> None:
    for name, value in values.items():
        if not value:
            raise ValueError(f"{op}: {name} must be a non-empty string")


def _utcnow() -> datetime:
    # Naive UTC, same as SQLite's CURRENT_TIMESTAMP
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _is_unique_violation(exc: IntegrityError) -> bool:
    """
    Tell a unique-constraint violation apart from other integrity errors
    (NOT NULL, CHECK, ...).
    """
    orig = exc.orig
    if getattr(orig, "sqlite_errorname", None) == "SQLITE_CONSTRAINT_UNIQUE":
        return True
    # psycopg2 exposes pgcode, psycopg 3 sqlstate
    if "23505" in (getattr(orig, "pgcode", None), getattr(orig, "sqlstate", None)):
        return True
    # sqlite3 before Python 3.11 carries no error names
    return "unique constraint" in str(orig).lower()


class URLStoreStrategy(ABC):
    """
    Abstract base class for URL stores.

    Error contract shared by all implementations:
    - save_url raises AliasExistsError when the alias is taken
    - get_url / delete_url / get_record raise URLNotFoundError for unknown aliases
    - any other backend failure is raised as StorageError with the
      original exception chained as __cause__
    - empty arguments raise ValueError
    """

    name = "base"

    @abstractmethod
    def init_schema(self) -> None:
        """Create the backing schema if missing. Safe to call repeatedly."""
        pass

    @abstractmethod
    def save_url(self, target_url: str, alias: str) -> None:
        """
        Store a new mapping.

        The insert itself detects conflicts, so of two callers racing on the
        same alias exactly one succeeds and the other gets AliasExistsError.
        """
        pass

    @abstractmethod
    def get_url(self, alias: str) -> str:
        """Return the target URL stored for alias"""
        pass

    @abstractmethod
    def delete_url(self, alias: str) -> str:
        """Remove the mapping for alias and return the URL it pointed to"""
        pass

    @abstractmethod
    def get_record(self, alias: str) -> URLRecord:
        """Return the full record stored for alias"""
        pass

    @abstractmethod
    def ping(self) -> bool:
        """Check that the store is reachable"""
        pass

    @abstractmethod
    def close(self) -> None:
        """Release connections"""
        pass


class SQLURLStore(URLStoreStrategy):
    """
    SQLAlchemy implementation of the URL store.

    The store owns its engine and session factory; nothing is shared through
    module globals. Every operation runs in its own short transaction.

    Alias uniqueness comes from the unique index on urls.alias. save_url never
    looks the alias up first: a SELECT followed by an INSERT would let two
    requests both see "free" and then race.
    """

    name = "sql"

    def __init__(
        self,
        database_url: str,
        timeout: float = 5.0,
        engine: Optional[Engine] = None
    ):
        """
        Args:
            database_url: SQLAlchemy URL, e.g. sqlite:///./storage/url_shortener.db
            timeout: Seconds an SQLite writer waits for a lock
            engine: Pre-built engine (overrides database_url)
        """
        self.database_url = database_url
        self.engine = engine or build_engine(database_url, timeout=timeout)
        self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)

    def init_schema(self) -> None:
        op = "storage.sql.init_schema"

        try:
            Base.metadata.create_all(bind=self.engine)
            if self.engine.dialect.name == "sqlite":
                with self.engine.begin() as conn:
                    conn.execute(UPDATED_AT_TRIGGER)
        except SQLAlchemyError as exc:
            raise StorageError("failed to initialize schema", op=op) from exc

        logger.info("url store schema ready", extra={"op": op, "backend": self.name})

    def save_url(self, target_url: str, alias: str) -> None:
        op = "storage.sql.save_url"
        _require_non_empty(op, target_url=target_url, alias=alias)

        try:
            with self._session_factory.begin() as session:
                session.add(URL(alias=alias, target_url=target_url))
        except IntegrityError as exc:
            if _is_unique_violation(exc):
                raise AliasExistsError(alias, op=op) from exc
            raise StorageError("failed to save url", op=op) from exc
        except SQLAlchemyError as exc:
            raise StorageError("failed to save url", op=op) from exc

    def get_url(self, alias: str) -> str:
        op = "storage.sql.get_url"
        _require_non_empty(op, alias=alias)

        try:
            with self._session_factory() as session:
                target_url = session.scalar(select(URL.target_url).where(URL.alias == alias))
        except SQLAlchemyError as exc:
            raise StorageError("failed to get url", op=op) from exc

        if target_url is None:
            raise URLNotFoundError(alias, op=op)
        return target_url

    def delete_url(self, alias: str) -> str:
        """
        Delete and return the URL in one transaction.

        Dialects with DELETE ... RETURNING (SQLite >= 3.35, PostgreSQL) do it in
        a single statement. Elsewhere the row is read and then deleted; if a
        concurrent delete removes it in between, the DELETE matches no row and
        this call reports URLNotFoundError instead of returning a stale URL.
        """
        op = "storage.sql.delete_url"
        _require_non_empty(op, alias=alias)
        statement = delete(URL).where(URL.alias == alias).execution_options(
            synchronize_session=False
        )

        try:
            with self._session_factory.begin() as session:
                if self.engine.dialect.delete_returning:
                    target_url = session.execute(
                        statement.returning(URL.target_url)
                    ).scalar_one_or_none()
                else:
                    target_url = session.scalar(select(URL.target_url).where(URL.alias == alias))
                    if target_url is not None and session.execute(statement).rowcount == 0:
                        target_url = None

                if target_url is None:
                    raise URLNotFoundError(alias, op=op)
        except SQLAlchemyError as exc:
            raise StorageError("failed to delete url", op=op) from exc

        return target_url

    def get_record(self, alias: str) -> URLRecord:
        op = "storage.sql.get_record"
        _require_non_empty(op, alias=alias)

        try:
            with self._session_factory() as session:
                url = session.scalar(select(URL).where(URL.alias == alias))
        except SQLAlchemyError as exc:
            raise StorageError("failed to get url record", op=op) from exc

        if url is None:
            raise URLNotFoundError(alias, op=op)
        return URLRecord(
            id=url.id,
            alias=url.alias,
            target_url=url.target_url,
            created_at=url.created_at,
            updated_at=url.updated_at
        )

    def ping(self) -> bool:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError:
            logger.warning(
                "url store is unreachable",
                exc_info=True,
                extra={"op": "storage.sql.ping", "backend": self.name}
            )
            return False
        return True

    def close(self) -> None:
        self.engine.dispose()


class InMemoryURLStore(URLStoreStrategy):
    """
    Process-local URL store.

    Pros:
    - Zero configuration
    - Fast, isolated tests

    Cons:
    - Lost on restart
    - Not shared between worker processes

    The lock makes "check alias + insert" one atomic step, which plays the
    role of the SQL unique index.
    """

    name = "memory"

    def __init__(self):
        self._records: Dict[str, URLRecord] = {}
        self._lock = threading.Lock()
        self._next_id = 1

    def init_schema(self) -> None:
        logger.info(
            "url store schema ready",
            extra={"op": "storage.memory.init_schema", "backend": self.name}
        )

    def save_url(self, target_url: str, alias: str) -> None:
        op = "storage.memory.save_url"
        _require_non_empty(op, target_url=target_url, alias=alias)

        with self._lock:
            if alias in self._records:
                raise AliasExistsError(alias, op=op)

            now = _utcnow()
            self._records[alias] = URLRecord(
                id=self._next_id,
                alias=alias,
                target_url=target_url,
                created_at=now,
                updated_at=now
            )
            self._next_id += 1

    def get_url(self, alias: str) -> str:
        return self._lookup(alias, op="storage.memory.get_url").target_url

    def delete_url(self, alias: str) -> str:
        op = "storage.memory.delete_url"
        _require_non_empty(op, alias=alias)

        with self._lock:
            record = self._records.pop(alias, None)

        if record is None:
            raise URLNotFoundError(alias, op=op)
        return record.target_url

    def get_record(self, alias: str) -> URLRecord:
        return self._lookup(alias, op="storage.memory.get_record")

    def _lookup(self, alias: str, op: str) -> URLRecord:
        _require_non_empty(op, alias=alias)

        with self._lock:
            record = self._records.get(alias)

        if record is None:
            raise URLNotFoundError(alias, op=op)
        return record

    def ping(self) -> bool:
        return True

    def close(self) -> None:
        with self._lock:
            self._records.clear()
