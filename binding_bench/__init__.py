"""
Parameter Binding Benchmark - compares two ways of binding SQL parameters.

Every trial writes the same generated employees through one of two binding
strategies against PostgreSQL:

- Simple: plain placeholders, psycopg infers the wire types
- Typed: every parameter declared with an explicit type and size

The harness warms each trial up, resets the table, settles the garbage
collector and times only the steady-state pass, so the strategies are compared
on binding overhead alone.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from binding_bench.config import Settings, get_settings
from binding_bench.domain.models import Employee, TrialResult
from binding_bench.generator import EmployeeGenerator, generate_employees, modify_employees
from binding_bench.orchestrator import (
    Benchmark,
    TrialPhase,
    available_trials,
    run_suite,
    run_trial,
)
from binding_bench.reporter import format_results, print_results
from binding_bench.repository.abstract import AbstractEmployeeRepository, EmployeeRepository
from binding_bench.utils.logging import configure_logging, get_logger
from binding_bench.utils.profiler import ProfileStats, profile_block

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Domain
    "Employee",
    "TrialResult",
    # Generation
    "EmployeeGenerator",
    "generate_employees",
    "modify_employees",
    # Orchestration
    "Benchmark",
    "TrialPhase",
    "available_trials",
    "run_suite",
    "run_trial",
    # Repository abstractions
    "AbstractEmployeeRepository",
    "EmployeeRepository",
    # Reporting
    "format_results",
    "print_results",
    # Logging
    "configure_logging",
    "get_logger",
    # Profiling
    "ProfileStats",
    "profile_block",
]
