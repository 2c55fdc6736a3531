"""
Repository interfaces for the parameter binding benchmark.

Concrete repositories implement two binding strategies for the same writes:
"simple" lets the driver infer wire types from Python values, "typed"
declares each parameter's type and size up front. Both must store identical
rows so binding overhead is the only variable a trial measures.
"""

from __future__ import annotations

import abc
from typing import Iterator, Protocol, runtime_checkable

from binding_bench.domain.models import Employee


@runtime_checkable
class EmployeeRepository(Protocol):
    """
    Write and read operations the benchmark runner relies on.

    Errors raised by the data layer propagate unchanged; callers never retry.
    """

    def add_simple(self, employee: Employee) -> int:
        """Insert using inferred parameter types; return the new identity."""
        ...

    def add_typed(self, employee: Employee) -> int:
        """Insert using declared parameter types and sizes; return the new identity."""
        ...

    def update_simple(self, employee: Employee) -> int:
        """Update the row matching `employee.id`; return the affected row count."""
        ...

    def update_typed(self, employee: Employee) -> int:
        """Typed counterpart of `update_simple`."""
        ...

    def get_all(self) -> Iterator[Employee]:
        """Yield every stored employee ordered by id."""
        ...


class AbstractEmployeeRepository(abc.ABC):
    """
    Optional ABC helper for class-based implementations.
    """

    @abc.abstractmethod
    def add_simple(self, employee: Employee) -> int:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def add_typed(self, employee: Employee) -> int:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def update_simple(self, employee: Employee) -> int:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def update_typed(self, employee: Employee) -> int:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def get_all(self) -> Iterator[Employee]:  # pragma: no cover - interface only
        raise NotImplementedError


__all__ = [
    "AbstractEmployeeRepository",
    "EmployeeRepository",
]
