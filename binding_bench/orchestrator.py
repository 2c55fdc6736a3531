"""
Orchestrator for running binding-strategy trials and timing them.

A trial applies one repository write (`add_simple`, `update_typed`, ...) to a
generated workload and times only its steady-state pass:

    IDLE -> WARMING_UP -> RESETTING -> SETTLING -> TIMING -> DONE

The suite runs four trials in a fixed order. Each update trial rewrites the
rows left behind by the insert trial right before it, so the order cannot be
changed.

Usage (example from CLI):
    from binding_bench.orchestrator import run_suite

    for result in run_suite(iterations=10_000):
        print(result.name, result.elapsed_seconds)
"""

from __future__ import annotations

import functools
import gc
import itertools
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Iterator, List, Optional

from binding_bench.config import get_settings
from binding_bench.domain.models import Employee, TrialResult
from binding_bench.generator import EmployeeGenerator
from binding_bench.infrastructure.db_factory import open_connection
from binding_bench.repository.abstract import EmployeeRepository
from binding_bench.repository.postgres import PostgresEmployeeRepository
from binding_bench.repository.schema import create_table, drop_table, truncate_table
from binding_bench.utils.logging import get_logger
from binding_bench.utils.profiler import profile_block

log = get_logger(__name__)

DEFAULT_WARMUP = 1_000

TRIAL_NAMES = ("add_simple", "update_simple", "add_typed", "update_typed")

Action = Callable[[Employee], object]
Workload = Callable[[], Iterable[Employee]]
Reset = Callable[[], None]


class TrialPhase(str, Enum):
    IDLE = "idle"
    WARMING_UP = "warming_up"
    RESETTING = "resetting"
    SETTLING = "settling"
    TIMING = "timing"
    DONE = "done"


PhaseObserver = Callable[[str, TrialPhase], None]


def noop_reset() -> None:
    """Reset used by update trials: they must keep the rows they rewrite."""


@dataclass(frozen=True)
class Trial:
    name: str
    action: Action
    workload: Workload
    reset: Reset = noop_reset


def available_trials() -> List[str]:
    """List trial names in suite order."""
    return list(TRIAL_NAMES)


def run_trial(
    name: str,
    action: Action,
    workload: Workload,
    reset: Reset = noop_reset,
    warmup: int = DEFAULT_WARMUP,
    settle: bool = True,
    observer: Optional[PhaseObserver] = None,
    track_resources: bool = True,
) -> TrialResult:
    """
    Run one trial and return its timed-phase result.

    Parameters
    ----------
    name : str
        Trial identifier copied into the result.
    action : callable
        Repository write applied to each employee.
    workload : callable
        Returns a fresh iterable of employees on every call. It is called once
        for the warm-up and once for the timed pass.
    reset : callable
        Invoked between warm-up and timing (truncate for insert trials).
    warmup : int
        Number of leading employees pushed through `action` before timing.
    settle : bool
        Whether to run a full garbage collection right before the clock starts.
    observer : callable, optional
        Receives `(name, phase)` on every phase transition.
    track_resources : bool
        Whether the profiler captures CPU percent and RSS.

    Returns
    -------
    TrialResult
        Entities processed and elapsed wall time of the timed pass only.

    Raises
    ------
    Exception
        Whatever the action, workload or reset raises; nothing is retried.
    """
    if warmup < 0:
        raise ValueError(f"warmup must be >= 0, got {warmup}")

    def enter(phase: TrialPhase) -> None:
        if observer is not None:
            observer(name, phase)

    enter(TrialPhase.IDLE)
    log.info(f"[TRIAL START] {name}", extra={"trial": name})
    try:
        enter(TrialPhase.WARMING_UP)
        warmed = 0
        for employee in itertools.islice(workload(), warmup):
            action(employee)
            warmed += 1
        log.info(f"[WARMUP] {name}", extra={"trial": name, "warmed": warmed})

        enter(TrialPhase.RESETTING)
        reset()
        log.info(f"[RESET] {name}", extra={"trial": name, "noop": reset is noop_reset})

        enter(TrialPhase.SETTLING)
        # Generation stays outside the timed window.
        employees = list(workload())
        if settle:
            collected = gc.collect()
            log.debug(f"[SETTLE] {name}", extra={"trial": name, "collected": collected})

        enter(TrialPhase.TIMING)
        log.info(f"[TIMING] {name}", extra={"trial": name, "iterations": len(employees)})
        processed = 0
        with profile_block(name, track_resources=track_resources) as stats:
            for employee in employees:
                action(employee)
                processed += 1
    except Exception:
        log.exception(f"[TRIAL FAILED] {name}", extra={"trial": name})
        raise

    enter(TrialPhase.DONE)
    result = TrialResult(
        name=name,
        iteration_count=processed,
        elapsed_seconds=stats.duration_seconds,
        cpu_percent=stats.cpu_percent,
        rss_bytes=stats.rss_bytes,
    )
    log.info(
        f"[TRIAL COMPLETE] {name}",
        extra={
            "trial": name,
            "iterations": result.iteration_count,
            "duration": round(result.elapsed_seconds, 3),
            "throughput_rps": round(result.throughput_rows_per_sec, 2),
        },
    )
    return result


class Benchmark:
    """
    The four-trial suite over one repository.

    Parameters
    ----------
    repository : EmployeeRepository
        Store the trials write to.
    reset : callable
        Empties the store; run by the insert trials after their warm-up.
    iterations : int
        Employees generated per insert trial.
    """

    def __init__(
        self,
        repository: EmployeeRepository,
        reset: Reset,
        iterations: int,
        warmup: int = DEFAULT_WARMUP,
        settle: bool = True,
        generator: Optional[EmployeeGenerator] = None,
        observer: Optional[PhaseObserver] = None,
        track_resources: bool = True,
    ) -> None:
        if iterations < 1:
            raise ValueError(f"iterations must be >= 1, got {iterations}")
        self.repository = repository
        self.reset = reset
        self.iterations = iterations
        self.warmup = warmup
        self.settle = settle
        self.generator = generator or EmployeeGenerator()
        self.observer = observer
        self.track_resources = track_resources

    def _insert_workload(self) -> Workload:
        return lambda: self.generator.generate(self.iterations)

    def _update_workload(self) -> Workload:
        # Rows are read once, on first use, so the warm-up and the timed pass
        # rewrite the same post-insert rows to the same dates.
        snapshot: List[Employee] = []
        loaded = False

        def workload() -> Iterable[Employee]:
            nonlocal loaded
            if not loaded:
                snapshot.extend(self.repository.get_all())
                loaded = True
            return self.generator.modify(snapshot)

        return workload

    def trials(self) -> List[Trial]:
        """Trial definitions in suite order."""
        repo = self.repository
        return [
            Trial("add_simple", repo.add_simple, self._insert_workload(), self.reset),
            Trial("update_simple", repo.update_simple, self._update_workload()),
            Trial("add_typed", repo.add_typed, self._insert_workload(), self.reset),
            Trial("update_typed", repo.update_typed, self._update_workload()),
        ]

    def run(self) -> Iterator[TrialResult]:
        """
        Lazily run the suite, yielding one result per trial.

        A trial starts only when the previous result has been consumed.
        """
        for trial in self.trials():
            yield run_trial(
                trial.name,
                trial.action,
                trial.workload,
                reset=trial.reset,
                warmup=self.warmup,
                settle=self.settle,
                observer=self.observer,
                track_resources=self.track_resources,
            )


def run_suite(
    iterations: Optional[int] = None,
    dsn: Optional[str] = None,
    warmup: Optional[int] = None,
    seed: Optional[int] = None,
    settle: Optional[bool] = None,
    keep_table: bool = False,
) -> Iterator[TrialResult]:
    """
    Run the full suite against PostgreSQL.

    Opens the single connection, creates the table, yields each trial result as
    it completes and drops the table afterwards unless `keep_table` is set.
    The connection is closed however the iteration ends, including when the
    caller closes the generator early.

    Parameters default to `Settings` values when omitted.
    """
    settings = get_settings()
    effective_iterations = settings.benchmark_iterations if iterations is None else iterations
    effective_warmup = settings.benchmark_warmup if warmup is None else warmup
    effective_seed = settings.benchmark_seed if seed is None else seed
    effective_settle = settings.benchmark_settle_gc if settle is None else settle

    with open_connection(dsn) as conn:
        create_table(conn)
        benchmark = Benchmark(
            PostgresEmployeeRepository(conn),
            reset=functools.partial(truncate_table, conn),
            iterations=effective_iterations,
            warmup=effective_warmup,
            settle=effective_settle,
            generator=EmployeeGenerator(seed=effective_seed),
        )
        log.info(
            "[SUITE START]",
            extra={
                "iterations": effective_iterations,
                "warmup": effective_warmup,
                "trials": list(TRIAL_NAMES),
            },
        )
        yield from benchmark.run()
        if not keep_table:
            drop_table(conn)
        log.info("[SUITE COMPLETE]", extra={"trials": len(TRIAL_NAMES)})


__all__ = [
    "Benchmark",
    "DEFAULT_WARMUP",
    "TRIAL_NAMES",
    "Trial",
    "TrialPhase",
    "available_trials",
    "noop_reset",
    "run_suite",
    "run_trial",
]
