"""
Synthetic employee generation for the parameter binding benchmark.

Every generated dataset starts with the same literal anchor record so runs can
be compared and inspected by hand. The remaining employees get Faker names and
dates derived from the anchor, spread over a fixed 1000-day window, so every
run writes values of the same shape even when names differ.
"""

from __future__ import annotations

import unicodedata
from datetime import datetime, timedelta
from typing import Iterable, Iterator, Optional

from faker import Faker

from binding_bench.domain.models import NAME_MAX_LENGTH, Employee

DATE_WINDOW_DAYS = 1000
VESTING_OFFSET_YEARS = 1
MODIFY_SHIFT = timedelta(days=7)
ASCII_LOCALE = "en_US"


def anchor_employee() -> Employee:
    """Return a fresh copy of the reference record every dataset starts with."""
    return Employee(
        first_name="Alice",
        last_name="Smith",
        date_of_birth=datetime(1990, 1, 1),
        date_vested=datetime(2015, 1, 1),
    )


def _add_years(value: datetime, years: int) -> datetime:
    try:
        return value.replace(year=value.year + years)
    except ValueError:
        # Feb 29 in a non-leap target year
        return value.replace(year=value.year + years, day=28)


def _bounded(name: str) -> str:
    return name[:NAME_MAX_LENGTH]


def _ascii_bounded(name: str) -> str:
    folded = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode("ascii")
    return _bounded(folded)


class _NameSource:
    """
    Name cursor owned by a single `generate`/`modify` call.

    Last names that fold to nothing in ASCII (kanji, hangul, ...) are replaced
    with a name drawn from the `fallback` locale.
    """

    def __init__(self, primary: Faker, fallback: Faker) -> None:
        self._primary = primary
        self._fallback = fallback

    def first_name(self) -> str:
        return _bounded(self._primary.first_name())

    def last_name(self) -> str:
        return _ascii_bounded(self._primary.last_name()) or _ascii_bounded(
            self._fallback.last_name()
        )


class EmployeeGenerator:
    """
    Produces benchmark workloads.

    Parameters
    ----------
    seed : int, optional
        When set, every `generate`/`modify` call gets its own name source
        seeded with it, so repeated or interleaved calls yield identical names.
    locale : str
        Faker locale used for first and last names. Last names that have no
        ASCII rendering fall back to `ASCII_LOCALE`.
    """

    def __init__(self, seed: Optional[int] = None, locale: str = ASCII_LOCALE) -> None:
        self.seed = seed
        self.locale = locale

    def _name_source(self) -> _NameSource:
        primary = Faker(self.locale)
        fallback = primary if self.locale == ASCII_LOCALE else Faker(ASCII_LOCALE)
        if self.seed is not None:
            primary.seed_instance(self.seed)
            fallback.seed_instance(self.seed)
        return _NameSource(primary, fallback)

    def generate(self, count: int) -> Iterator[Employee]:
        """
        Lazily yield exactly `count` employees, anchor first.

        Employee `i` (1-based after the anchor) is born `i % 1000` days after
        the anchor and vests one year plus `i % 1000` days after the anchor's
        vesting date.
        """
        if count < 1:
            raise ValueError(f"count must be >= 1, got {count}")
        return self._generate(count)

    def _generate(self, count: int) -> Iterator[Employee]:
        names = self._name_source()
        anchor = anchor_employee()
        vesting_base = _add_years(anchor.date_vested, VESTING_OFFSET_YEARS)
        yield anchor

        for i in range(1, count):
            offset = timedelta(days=i % DATE_WINDOW_DAYS)
            yield Employee(
                first_name=names.first_name(),
                last_name=names.last_name(),
                date_of_birth=anchor.date_of_birth + offset,
                date_vested=vesting_base + offset,
            )

    def modify(self, rows: Iterable[Employee]) -> Iterator[Employee]:
        """
        Lazily yield an updated copy of every row: new names, both dates moved
        seven days earlier, `id` kept. The input rows are left untouched.
        """
        names = self._name_source()
        for row in rows:
            yield row.model_copy(
                update={
                    "first_name": names.first_name(),
                    "last_name": names.last_name(),
                    "date_of_birth": row.date_of_birth - MODIFY_SHIFT,
                    "date_vested": row.date_vested - MODIFY_SHIFT,
                }
            )


def generate_employees(count: int, seed: Optional[int] = None) -> Iterator[Employee]:
    """Shortcut for `EmployeeGenerator(seed).generate(count)`."""
    return EmployeeGenerator(seed=seed).generate(count)


def modify_employees(rows: Iterable[Employee], seed: Optional[int] = None) -> Iterator[Employee]:
    """Shortcut for `EmployeeGenerator(seed).modify(rows)`."""
    return EmployeeGenerator(seed=seed).modify(rows)


__all__ = [
    "ASCII_LOCALE",
    "DATE_WINDOW_DAYS",
    "EmployeeGenerator",
    "MODIFY_SHIFT",
    "anchor_employee",
    "generate_employees",
    "modify_employees",
]
