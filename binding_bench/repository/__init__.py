"""
Repository package for the parameter binding benchmark.

Re-exports the repository interfaces, the PostgreSQL implementation and the
table DDL helpers so downstream code can import from `binding_bench.repository`.
"""

from binding_bench.repository.abstract import AbstractEmployeeRepository, EmployeeRepository
from binding_bench.repository.parameters import ParameterType, TypedParameters
from binding_bench.repository.postgres import PostgresEmployeeRepository
from binding_bench.repository.schema import create_table, drop_table, truncate_table

__all__ = [
    # Abstracts
    "AbstractEmployeeRepository",
    "EmployeeRepository",
    # Parameters
    "ParameterType",
    "TypedParameters",
    # Concrete
    "PostgresEmployeeRepository",
    # Schema
    "create_table",
    "drop_table",
    "truncate_table",
]
