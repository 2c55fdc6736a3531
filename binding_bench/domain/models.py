"""
Domain models for the parameter binding benchmark.

`Employee` mirrors a row of the `employees` table (see
`binding_bench.repository.schema`). `TrialResult` is the immutable outcome of
one timed trial.
"""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from pydantic import BaseModel, Field, field_validator

NAME_MAX_LENGTH = 30


class Employee(BaseModel):
    """
    Representation of a single row in the `employees` table.

    `date_of_birth` is stored with whole-second precision while `date_vested`
    keeps microseconds.
    """

    id: Optional[int] = Field(None, description="Identity assigned by the store on insert.")
    first_name: str = Field(..., max_length=NAME_MAX_LENGTH)
    last_name: str = Field(..., max_length=NAME_MAX_LENGTH, description="ASCII only.")
    date_of_birth: datetime = Field(..., description="Whole-second precision.")
    date_vested: datetime = Field(..., description="Microsecond precision.")

    model_config = {"validate_assignment": True}

    @field_validator("last_name")
    @classmethod
    def _last_name_is_ascii(cls, value: str) -> str:
        if not value.isascii():
            raise ValueError("last_name must contain ASCII characters only")
        return value

    def __str__(self) -> str:
        return (
            f"Id:{self.id or 0:06d}| FirstName:{self.first_name:<15}|"
            f"LastName:{self.last_name:<15}|"
            f"DateOfBirth:{self.date_of_birth:%Y-%m-%d}|"
            f"DateVested:{self.date_vested:%Y-%m-%d}"
        )


class TrialResult(BaseModel):
    """
    Outcome of one timed trial.

    `iteration_count` and `elapsed_seconds` cover the timed phase only;
    warm-up work is never included.
    """

    name: str
    iteration_count: int = Field(..., ge=0)
    elapsed_seconds: float = Field(..., ge=0.0)
    cpu_percent: Optional[float] = None
    rss_bytes: Optional[int] = None

    model_config = {"frozen": True}

    @property
    def elapsed(self) -> timedelta:
        return timedelta(seconds=self.elapsed_seconds)

    @property
    def average_seconds(self) -> float:
        if not self.iteration_count:
            return 0.0
        return self.elapsed_seconds / self.iteration_count

    @property
    def throughput_rows_per_sec(self) -> float:
        if self.elapsed_seconds <= 0:
            return 0.0
        return self.iteration_count / self.elapsed_seconds


__all__ = ["Employee", "TrialResult", "NAME_MAX_LENGTH"]
