from __future__ import annotations

import contextlib
from datetime import timedelta
from typing import List, Optional, Tuple

import pytest

from binding_bench import orchestrator

from binding_bench.domain.models import Employee
from binding_bench.generator import EmployeeGenerator, generate_employees
from binding_bench.orchestrator import (
    TRIAL_NAMES,
    Benchmark,
    TrialPhase,
    available_trials,
    noop_reset,
    run_suite,
    run_trial,
)

SMALL_COUNT = 5
WARMUP_SUBSET = 2
SUITE_ITERATIONS = 100
SEED = 99


def _workload(count: int = SMALL_COUNT):
    return lambda: generate_employees(count, seed=SEED)


def _benchmark(repository, iterations: int = SUITE_ITERATIONS, **kwargs) -> Benchmark:
    return Benchmark(
        repository,
        reset=repository.truncate,
        iterations=iterations,
        generator=EmployeeGenerator(seed=SEED),
        track_resources=False,
        **kwargs,
    )


def test_available_trials_are_in_suite_order() -> None:
    assert available_trials() == [
        "add_simple",
        "update_simple",
        "add_typed",
        "update_typed",
    ]


def test_warmup_is_excluded_from_the_count() -> None:
    calls: List[Employee] = []

    result = run_trial("sample", calls.append, _workload(), track_resources=False)

    # count <= warmup: whole sequence warmed up, then whole sequence timed
    assert len(calls) == 2 * SMALL_COUNT
    assert result.iteration_count == SMALL_COUNT
    assert result.name == "sample"
    assert result.elapsed_seconds >= 0.0


def test_warmup_takes_a_leading_subset() -> None:
    calls: List[Employee] = []

    result = run_trial(
        "sample", calls.append, _workload(), warmup=WARMUP_SUBSET, track_resources=False
    )

    assert len(calls) == WARMUP_SUBSET + SMALL_COUNT
    assert calls[0].first_name == "Alice"
    assert calls[WARMUP_SUBSET].first_name == "Alice"
    assert result.iteration_count == SMALL_COUNT


def test_phases_are_entered_in_order() -> None:
    phases: List[Tuple[str, TrialPhase]] = []

    run_trial(
        "sample",
        lambda e: None,
        _workload(),
        observer=lambda name, phase: phases.append((name, phase)),
        track_resources=False,
    )

    assert [phase for _, phase in phases] == [
        TrialPhase.IDLE,
        TrialPhase.WARMING_UP,
        TrialPhase.RESETTING,
        TrialPhase.SETTLING,
        TrialPhase.TIMING,
        TrialPhase.DONE,
    ]
    assert {name for name, _ in phases} == {"sample"}


def test_reset_runs_between_warmup_and_timed_pass() -> None:
    events: List[str] = []

    run_trial(
        "sample",
        lambda e: events.append("write"),
        _workload(),
        reset=lambda: events.append("reset"),
        warmup=WARMUP_SUBSET,
        track_resources=False,
    )

    assert events == ["write"] * WARMUP_SUBSET + ["reset"] + ["write"] * SMALL_COUNT


def test_insert_trial_leaves_exactly_the_timed_rows(memory_repository) -> None:
    result = run_trial(
        "add_simple",
        memory_repository.add_simple,
        _workload(),
        reset=memory_repository.truncate,
        track_resources=False,
    )

    assert result.iteration_count == SMALL_COUNT
    assert sorted(memory_repository.rows) == [1, 2, 3, 4, 5]
    assert memory_repository.truncate_calls == 1


def test_negative_warmup_is_rejected() -> None:
    with pytest.raises(ValueError):
        run_trial("sample", lambda e: None, _workload(), warmup=-1)


def test_action_errors_propagate_unchanged() -> None:
    def failing(employee: Employee) -> None:
        raise RuntimeError("bind failed")

    with pytest.raises(RuntimeError, match="bind failed"):
        run_trial("sample", failing, _workload(), track_resources=False)


def test_reset_errors_abort_before_timing() -> None:
    phases: List[TrialPhase] = []

    def failing_reset() -> None:
        raise RuntimeError("truncate failed")

    with pytest.raises(RuntimeError, match="truncate failed"):
        run_trial(
            "sample",
            lambda e: None,
            _workload(),
            reset=failing_reset,
            observer=lambda name, phase: phases.append(phase),
            track_resources=False,
        )

    assert TrialPhase.TIMING not in phases


def test_benchmark_requires_positive_iterations(memory_repository) -> None:
    with pytest.raises(ValueError):
        _benchmark(memory_repository, iterations=0)


def test_suite_yields_four_results_in_fixed_order(memory_repository) -> None:
    results = list(_benchmark(memory_repository).run())

    assert [r.name for r in results] == list(TRIAL_NAMES)
    assert all(r.iteration_count == SUITE_ITERATIONS for r in results)
    assert memory_repository.strategies_called() == list(TRIAL_NAMES)


def test_only_insert_trials_reset_the_store(memory_repository) -> None:
    benchmark = _benchmark(memory_repository)

    trials = benchmark.trials()
    list(benchmark.run())

    assert memory_repository.truncate_calls == 2
    assert [t.reset is noop_reset for t in trials] == [False, True, False, True]


def test_suite_is_lazy(memory_repository) -> None:
    results = _benchmark(memory_repository, iterations=SMALL_COUNT).run()

    first = next(results)

    assert first.name == "add_simple"
    assert memory_repository.strategies_called() == ["add_simple"]


def test_update_trial_moves_every_row_back_a_week(memory_repository) -> None:
    results = _benchmark(memory_repository, iterations=SMALL_COUNT).run()

    next(results)
    inserted = {e.id: e for e in memory_repository.get_all()}
    update = next(results)
    updated = {e.id: e for e in memory_repository.get_all()}

    assert update.name == "update_simple"
    assert update.iteration_count == SMALL_COUNT
    assert updated.keys() == inserted.keys()
    for row_id, row in updated.items():
        assert row.date_of_birth == inserted[row_id].date_of_birth - timedelta(days=7)
        assert row.date_vested == inserted[row_id].date_vested - timedelta(days=7)


def test_failure_aborts_the_rest_of_the_suite(memory_repository, monkeypatch) -> None:
    def broken_update(employee: Employee) -> int:
        raise RuntimeError("connection lost")

    monkeypatch.setattr(memory_repository, "update_simple", broken_update)
    collected = []

    with pytest.raises(RuntimeError, match="connection lost"):
        for result in _benchmark(memory_repository, iterations=SMALL_COUNT).run():
            collected.append(result)

    assert [r.name for r in collected] == ["add_simple"]
    assert "add_typed" not in memory_repository.strategies_called()


class _FakeDatabase:
    """Stands in for the connection and DDL helpers `run_suite` drives."""

    def __init__(self, repository) -> None:
        self.repository = repository
        self.events: List[str] = []
        self.dsn: Optional[str] = None
        self.conn = object()

    @contextlib.contextmanager
    def open_connection(self, dsn: Optional[str] = None):
        self.dsn = dsn
        self.events.append("open")
        try:
            yield self.conn
        finally:
            self.events.append("close")

    def create_table(self, conn) -> None:
        assert conn is self.conn
        self.events.append("create")

    def drop_table(self, conn) -> None:
        assert conn is self.conn
        self.events.append("drop")

    def truncate_table(self, conn) -> None:
        self.repository.truncate()

    def repository_for(self, conn):
        return self.repository


@pytest.fixture
def fake_database(monkeypatch, memory_repository) -> _FakeDatabase:
    database = _FakeDatabase(memory_repository)
    monkeypatch.setattr(orchestrator, "open_connection", database.open_connection)
    monkeypatch.setattr(orchestrator, "create_table", database.create_table)
    monkeypatch.setattr(orchestrator, "drop_table", database.drop_table)
    monkeypatch.setattr(orchestrator, "truncate_table", database.truncate_table)
    monkeypatch.setattr(orchestrator, "PostgresEmployeeRepository", database.repository_for)
    return database


def _suite(**kwargs):
    options = {"iterations": SMALL_COUNT, "warmup": WARMUP_SUBSET, "seed": SEED, "settle": False}
    options.update(kwargs)
    return run_suite(**options)


def test_run_suite_creates_then_drops_the_table(fake_database) -> None:
    results = list(_suite(dsn="host=bench"))

    assert [r.name for r in results] == list(TRIAL_NAMES)
    assert all(r.iteration_count == SMALL_COUNT for r in results)
    assert fake_database.events == ["open", "create", "drop", "close"]
    assert fake_database.dsn == "host=bench"
    assert fake_database.repository.truncate_calls == 2


def test_run_suite_keeps_the_table_when_asked(fake_database) -> None:
    list(_suite(keep_table=True))

    assert fake_database.events == ["open", "create", "close"]


def test_run_suite_closes_the_connection_on_failure(fake_database, monkeypatch) -> None:
    def broken_update(employee: Employee) -> int:
        raise RuntimeError("connection lost")

    monkeypatch.setattr(fake_database.repository, "update_typed", broken_update)

    with pytest.raises(RuntimeError, match="connection lost"):
        list(_suite())

    assert fake_database.events == ["open", "create", "close"]


def test_run_suite_closes_the_connection_when_abandoned(fake_database) -> None:
    results = _suite()

    assert next(results).name == "add_simple"
    assert fake_database.events == ["open", "create"]

    results.close()

    assert fake_database.events == ["open", "create", "close"]


@pytest.mark.parametrize("iterations", [0, -3])
def test_run_suite_rejects_non_positive_iterations(fake_database, iterations: int) -> None:
    with pytest.raises(ValueError):
        list(_suite(iterations=iterations))

    assert fake_database.events == ["open", "create", "close"]


def test_run_suite_reads_iterations_from_settings_when_omitted(fake_database, monkeypatch) -> None:
    monkeypatch.setenv("BENCHMARK_ITERATIONS", "3")
    orchestrator.get_settings.cache_clear()
    try:
        results = list(_suite(iterations=None))
    finally:
        orchestrator.get_settings.cache_clear()

    assert [r.iteration_count for r in results] == [3, 3, 3, 3]
