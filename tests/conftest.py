"""
Pytest configuration for the parameter binding benchmark.

Provides fixtures for:
- An in-memory employee repository for runner tests
- Database connection management for integration tests
- Table setup/cleanup around each integration test
"""

from __future__ import annotations

import os
from typing import Dict, Generator, Iterator, List, Optional, Tuple

import psycopg
import pytest

from binding_bench.config import Settings
from binding_bench.domain.models import Employee
from binding_bench.infrastructure.db_factory import build_dsn
from binding_bench.repository.abstract import AbstractEmployeeRepository
from binding_bench.repository.schema import create_table, drop_table, truncate_table


class InMemoryEmployeeRepository(AbstractEmployeeRepository):
    """
    Dict-backed repository. Both binding strategies store the same thing; the
    call log records which one was used.
    """

    def __init__(self) -> None:
        self.rows: Dict[int, Employee] = {}
        self.calls: List[Tuple[str, Optional[int]]] = []
        self.truncate_calls = 0
        self._next_id = 1

    def _add(self, employee: Employee, strategy: str) -> int:
        new_id = self._next_id
        self._next_id += 1
        self.rows[new_id] = employee.model_copy(update={"id": new_id})
        self.calls.append((strategy, new_id))
        return new_id

    def _update(self, employee: Employee, strategy: str) -> int:
        self.calls.append((strategy, employee.id))
        if employee.id not in self.rows:
            return 0
        self.rows[employee.id] = employee.model_copy()
        return 1

    def add_simple(self, employee: Employee) -> int:
        return self._add(employee, "add_simple")

    def add_typed(self, employee: Employee) -> int:
        return self._add(employee, "add_typed")

    def update_simple(self, employee: Employee) -> int:
        return self._update(employee, "update_simple")

    def update_typed(self, employee: Employee) -> int:
        return self._update(employee, "update_typed")

    def get_all(self) -> Iterator[Employee]:
        for key in sorted(self.rows):
            yield self.rows[key].model_copy()

    def truncate(self) -> None:
        self.rows.clear()
        self._next_id = 1
        self.truncate_calls += 1

    def strategies_called(self) -> List[str]:
        seen: List[str] = []
        for strategy, _ in self.calls:
            if strategy not in seen:
                seen.append(strategy)
        return seen


@pytest.fixture
def memory_repository() -> InMemoryEmployeeRepository:
    return InMemoryEmployeeRepository()


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        db_dsn=os.getenv("DB_DSN"),
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "binding_benchmark"),
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    """
    Database connection string for tests.
    """
    return build_dsn(test_settings)


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True
    except psycopg.Error:
        return False


@pytest.fixture(scope="session")
def db_connection(
    test_dsn: str, db_connection_available: bool
) -> Generator[psycopg.Connection, None, None]:
    """
    Provide a session-scoped autocommit connection for integration tests.

    Skips tests if database is not available.
    """
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")

    conn = psycopg.connect(test_dsn, autocommit=True)
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="session")
def employees_table(db_connection: psycopg.Connection) -> Generator[bool, None, None]:
    """
    Create the employees table for the session and drop it afterwards.
    """
    create_table(db_connection)
    yield True
    drop_table(db_connection)


@pytest.fixture(scope="function")
def clean_employees_table(db_connection: psycopg.Connection, employees_table: bool):
    """
    Empty the employees table before and after each test function.
    """
    truncate_table(db_connection)
    yield
    truncate_table(db_connection)
