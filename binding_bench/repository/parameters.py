"""
Explicitly typed query parameters.

psycopg sends Python `str` values as `unknown` and lets the server work out the
real type from context. `TypedParameters` is the opposite approach: every
parameter carries a declared PostgreSQL type (rendered as a cast on its
placeholder) and an optional size that is checked before the statement is
sent.

    params = TypedParameters()
    params.add("first_name", "Alice", VARCHAR, size=30)
    params.add("date_vested", vested, TIMESTAMP_MICROS)
    cur.execute(query, params.values())
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional

import psycopg
from psycopg import sql


@dataclass(frozen=True)
class ParameterType:
    """A PostgreSQL type a parameter is declared as."""

    sql_name: str
    ascii_only: bool = False


VARCHAR = ParameterType("varchar")
ASCII_VARCHAR = ParameterType("varchar", ascii_only=True)
INTEGER = ParameterType("integer")
TIMESTAMP_SECONDS = ParameterType("timestamp(0)")
TIMESTAMP_MICROS = ParameterType("timestamp(6)")


@dataclass(frozen=True)
class ParameterDeclaration:
    name: str
    param_type: Optional[ParameterType]
    size: Optional[int]


def placeholder(name: str, param_type: Optional[ParameterType] = None) -> sql.Composable:
    """
    Named placeholder, cast to `param_type` when one is given.

    Sizes are never part of the cast: casting to `varchar(n)` truncates
    silently, so length limits are enforced in `TypedParameters.add` instead.
    """
    if param_type is None:
        return sql.Placeholder(name)
    return sql.SQL("{}::{}").format(sql.Placeholder(name), sql.SQL(param_type.sql_name))


class TypedParameters:
    """
    Ordered collection of declared parameters for one statement execution.
    """

    def __init__(self) -> None:
        self._values: Dict[str, Any] = {}
        self._declarations: Dict[str, ParameterDeclaration] = {}

    def add(
        self,
        name: str,
        value: Any,
        param_type: Optional[ParameterType] = None,
        size: Optional[int] = None,
    ) -> "TypedParameters":
        """
        Declare a parameter.

        Raises
        ------
        psycopg.DataError
            If a text value is longer than `size`, or a non-ASCII value is bound
            to an ASCII-only type.
        """
        if isinstance(value, (str, bytes)):
            if size is not None and len(value) > size:
                raise psycopg.DataError(
                    f"value for parameter '{name}' is {len(value)} long, declared size is {size}"
                )
            if param_type is not None and param_type.ascii_only and not value.isascii():
                raise psycopg.DataError(f"value for parameter '{name}' is not ASCII")
        self._values[name] = value
        self._declarations[name] = ParameterDeclaration(name, param_type, size)
        return self

    def values(self) -> Dict[str, Any]:
        """Mapping handed to `cursor.execute`."""
        return self._values

    def declaration(self, name: str) -> ParameterDeclaration:
        return self._declarations[name]

    def __contains__(self, name: object) -> bool:
        return name in self._declarations

    def __iter__(self) -> Iterator[ParameterDeclaration]:
        return iter(self._declarations.values())

    def __len__(self) -> int:
        return len(self._declarations)


__all__ = [
    "ASCII_VARCHAR",
    "INTEGER",
    "ParameterDeclaration",
    "ParameterType",
    "TIMESTAMP_MICROS",
    "TIMESTAMP_SECONDS",
    "TypedParameters",
    "VARCHAR",
    "placeholder",
]
