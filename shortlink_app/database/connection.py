"""
Database engine construction.

There is no module-level engine or session factory here: every URL store
builds and owns its engine, so two stores (e.g. in tests) never share state.
"""

from pathlib import Path
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool


class Base(DeclarativeBase):
    pass


def _is_memory_database(database: Optional[str]) -> bool:
    return database in (None, "", ":memory:")


def build_engine(database_url: str, timeout: float = 5.0) -> Engine:
    """
    Create an engine for ``database_url``.

    SQLite gets the extra setup the request threads need:
    - connections may be used from any thread (FastAPI runs sync routes in a threadpool)
    - writers wait ``timeout`` seconds on a locked database instead of failing at once
    - the parent directory of a file database is created if missing
    - ``:memory:`` databases share one connection, otherwise every connection
      would see its own empty database
    """
    url = make_url(database_url)

    if url.get_backend_name() != "sqlite":
        return create_engine(url, pool_pre_ping=True)

    connect_args = {"check_same_thread": False, "timeout": timeout}

    if _is_memory_database(url.database):
        return create_engine(url, connect_args=connect_args, poolclass=StaticPool)

    Path(url.database).parent.mkdir(parents=True, exist_ok=True)
    return create_engine(url, connect_args=connect_args)
