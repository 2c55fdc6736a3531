"""
DDL for the `employees` table.

Every operation checks whether the table exists before acting, so all three
are safe to call repeatedly.
"""

from __future__ import annotations

import psycopg
from psycopg import sql

from binding_bench.domain.models import NAME_MAX_LENGTH
from binding_bench.utils.logging import get_logger

log = get_logger(__name__)

SCHEMA_NAME = "public"
TABLE_NAME = "employees"

TABLE = sql.Identifier(SCHEMA_NAME, TABLE_NAME)

_CREATE_TABLE = sql.SQL(
    """
    CREATE TABLE {table} (
        id integer GENERATED BY DEFAULT AS IDENTITY PRIMARY KEY,
        col_first_name varchar({size}) NOT NULL,
        col_last_name varchar({size}) NOT NULL,
        date_of_birth timestamp(0) NOT NULL,
        date_vested timestamp(6) NOT NULL
    )
    """
).format(table=TABLE, size=sql.SQL(str(NAME_MAX_LENGTH)))

_TRUNCATE_TABLE = sql.SQL("TRUNCATE TABLE {table} RESTART IDENTITY").format(table=TABLE)

_DROP_TABLE = sql.SQL("DROP TABLE {table}").format(table=TABLE)


def _commit(conn: psycopg.Connection) -> None:
    if not conn.autocommit:
        conn.commit()


def table_exists(conn: psycopg.Connection) -> bool:
    with conn.cursor() as cur:
        cur.execute("SELECT to_regclass(%s) IS NOT NULL", (f"{SCHEMA_NAME}.{TABLE_NAME}",))
        row = cur.fetchone()
    return bool(row and row[0])


def create_table(conn: psycopg.Connection) -> None:
    """Create the employees table unless it already exists."""
    if table_exists(conn):
        log.info("[SCHEMA] Table already exists", extra={"table": TABLE_NAME})
        return
    with conn.cursor() as cur:
        cur.execute(_CREATE_TABLE)
    _commit(conn)
    log.info("[SCHEMA] Table created", extra={"table": TABLE_NAME})


def truncate_table(conn: psycopg.Connection) -> None:
    """Remove every row and restart the identity sequence."""
    if not table_exists(conn):
        return
    with conn.cursor() as cur:
        cur.execute(_TRUNCATE_TABLE)
    _commit(conn)
    log.debug("[SCHEMA] Table truncated", extra={"table": TABLE_NAME})


def drop_table(conn: psycopg.Connection) -> None:
    if not table_exists(conn):
        return
    with conn.cursor() as cur:
        cur.execute(_DROP_TABLE)
    _commit(conn)
    log.info("[SCHEMA] Table dropped", extra={"table": TABLE_NAME})


__all__ = [
    "SCHEMA_NAME",
    "TABLE_NAME",
    "create_table",
    "drop_table",
    "table_exists",
    "truncate_table",
]
