"""
PostgreSQL employee repository.

Simple and typed statements write the same columns in the same order; the only
difference is how parameters reach the server. Simple statements use bare
placeholders and let psycopg adapt Python values (text travels as `unknown`,
the server infers the rest). Typed statements cast every placeholder to its
declared type and check declared sizes client-side through `TypedParameters`.
"""

from __future__ import annotations

from typing import Iterator, NamedTuple, Optional

import psycopg
from psycopg import sql
from psycopg.rows import class_row

from binding_bench.domain.models import NAME_MAX_LENGTH, Employee
from binding_bench.repository.abstract import AbstractEmployeeRepository
from binding_bench.repository.parameters import (
    ASCII_VARCHAR,
    INTEGER,
    TIMESTAMP_MICROS,
    TIMESTAMP_SECONDS,
    VARCHAR,
    ParameterType,
    TypedParameters,
    placeholder,
)
from binding_bench.repository.schema import TABLE


class ColumnBinding(NamedTuple):
    field: str
    column: str
    param_type: ParameterType
    size: Optional[int] = None


EMPLOYEE_BINDINGS = (
    ColumnBinding("first_name", "col_first_name", VARCHAR, NAME_MAX_LENGTH),
    ColumnBinding("last_name", "col_last_name", ASCII_VARCHAR, NAME_MAX_LENGTH),
    ColumnBinding("date_of_birth", "date_of_birth", TIMESTAMP_SECONDS),
    ColumnBinding("date_vested", "date_vested", TIMESTAMP_MICROS),
)

ID_BINDING = ColumnBinding("id", "id", INTEGER)


def _value(binding: ColumnBinding, typed: bool) -> sql.Composable:
    return placeholder(binding.field, binding.param_type if typed else None)


def insert_statement(typed: bool) -> sql.Composed:
    return sql.SQL("INSERT INTO {table} ({columns}) VALUES ({values}) RETURNING id").format(
        table=TABLE,
        columns=sql.SQL(", ").join(sql.Identifier(b.column) for b in EMPLOYEE_BINDINGS),
        values=sql.SQL(", ").join(_value(b, typed) for b in EMPLOYEE_BINDINGS),
    )


def update_statement(typed: bool) -> sql.Composed:
    assignments = sql.SQL(", ").join(
        sql.SQL("{} = {}").format(sql.Identifier(b.column), _value(b, typed))
        for b in EMPLOYEE_BINDINGS
    )
    return sql.SQL("UPDATE {table} SET {assignments} WHERE id = {id}").format(
        table=TABLE,
        assignments=assignments,
        id=_value(ID_BINDING, typed),
    )


SELECT_ALL = sql.SQL(
    "SELECT id, {first} AS first_name, {last} AS last_name, date_of_birth, date_vested "
    "FROM {table} ORDER BY id"
).format(
    first=sql.Identifier("col_first_name"),
    last=sql.Identifier("col_last_name"),
    table=TABLE,
)


def typed_parameters(employee: Employee, include_id: bool = False) -> TypedParameters:
    """Declare every bound value of `employee` with its column type and size."""
    params = TypedParameters()
    for binding in EMPLOYEE_BINDINGS:
        params.add(
            binding.field,
            getattr(employee, binding.field),
            binding.param_type,
            size=binding.size,
        )
    if include_id:
        params.add(ID_BINDING.field, employee.id, ID_BINDING.param_type)
    return params


class PostgresEmployeeRepository(AbstractEmployeeRepository):
    """
    Employee repository over a single psycopg connection.

    The connection is owned by the caller (see
    `binding_bench.infrastructure.db_factory.open_connection`) and is expected to
    run in autocommit mode so each write is acknowledged on its own.
    """

    def __init__(self, conn: psycopg.Connection) -> None:
        self._conn = conn
        # Rendered once so both strategies hit psycopg's query cache equally.
        self._insert_simple = insert_statement(typed=False).as_string(conn)
        self._insert_typed = insert_statement(typed=True).as_string(conn)
        self._update_simple = update_statement(typed=False).as_string(conn)
        self._update_typed = update_statement(typed=True).as_string(conn)
        self._select_all = SELECT_ALL.as_string(conn)

    def _insert(self, query: str, params: object) -> int:
        with self._conn.cursor() as cur:
            cur.execute(query, params)
            row = cur.fetchone()
        return row[0] if row else 0

    def _update(self, query: str, params: object) -> int:
        with self._conn.cursor() as cur:
            cur.execute(query, params)
            return cur.rowcount

    def add_simple(self, employee: Employee) -> int:
        return self._insert(self._insert_simple, employee.model_dump())

    def add_typed(self, employee: Employee) -> int:
        return self._insert(self._insert_typed, typed_parameters(employee).values())

    def update_simple(self, employee: Employee) -> int:
        return self._update(self._update_simple, employee.model_dump())

    def update_typed(self, employee: Employee) -> int:
        return self._update(
            self._update_typed, typed_parameters(employee, include_id=True).values()
        )

    def get_all(self) -> Iterator[Employee]:
        with self._conn.cursor(row_factory=class_row(Employee)) as cur:
            cur.execute(self._select_all)
            yield from cur


__all__ = [
    "EMPLOYEE_BINDINGS",
    "PostgresEmployeeRepository",
    "insert_statement",
    "typed_parameters",
    "update_statement",
]
