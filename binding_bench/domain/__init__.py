"""
Domain package for the parameter binding benchmark.

Exports the entity written by the benchmark and the per-trial result record.
Keep this package focused on data definitions and validation concerns.
"""

from binding_bench.domain.models import NAME_MAX_LENGTH, Employee, TrialResult

__all__ = [
    "Employee",
    "NAME_MAX_LENGTH",
    "TrialResult",
]
