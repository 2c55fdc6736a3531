"""
Database connection factory utilities for the parameter binding benchmark.

The benchmark uses exactly one connection for its whole life. It is handed out
by `open_connection`, which closes it on every exit path. There is no pooling
and no retry: an unreachable server fails fast, before any trial runs.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Generator, Optional

import psycopg
from psycopg import Connection
from psycopg.conninfo import conninfo_to_dict, make_conninfo

from binding_bench.config import Settings, get_settings
from binding_bench.utils.logging import get_logger

log = get_logger(__name__)


def build_dsn(settings: Optional[Settings] = None) -> str:
    """
    Compose a DSN string from settings.

    `DB_DSN` wins when set; otherwise a key/value conninfo string is built
    from the individual `DB_*` fields, quoting any special characters.
    """
    settings = settings or get_settings()
    if settings.db_dsn:
        return settings.db_dsn
    return make_conninfo(
        host=settings.db_host,
        port=settings.db_port,
        user=settings.db_user,
        password=settings.db_password,
        dbname=settings.db_name,
    )


def mask_dsn(dsn: str) -> str:
    """Return `dsn` with any password replaced, for display."""
    params = conninfo_to_dict(dsn)
    if params.get("password"):
        params["password"] = "***"
    return make_conninfo(**params)


@contextmanager
def open_connection(dsn: Optional[str] = None) -> Generator[Connection, None, None]:
    """
    Open the benchmark's single autocommit connection.

    Example
    -------
        with open_connection() as conn:
            create_table(conn)
            ...

    Raises
    ------
    psycopg.OperationalError
        If the server cannot be reached or rejects the credentials.
    """
    conninfo = dsn or build_dsn()
    conn = psycopg.connect(conninfo, autocommit=True)
    log.info("[DB] Connection opened", extra={"dsn": mask_dsn(conninfo)})
    try:
        yield conn
    finally:
        conn.close()
        log.info("[DB] Connection closed")


__all__ = [
    "build_dsn",
    "mask_dsn",
    "open_connection",
]
