from __future__ import annotations

import io
from typing import Iterable, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from binding_bench.domain.models import Employee, TrialResult

REPORT_TITLE = "Parameter Binding Benchmark Results"


def _legacy_average(result: TrialResult) -> int:
    if not result.iteration_count:
        return 0
    return int(result.elapsed_seconds) // result.iteration_count


def build_table(results: Iterable[TrialResult], legacy_seconds: bool = False) -> Table:
    """
    Build the results table, one row per trial in the order given.

    With `legacy_seconds` the elapsed time is shown in whole seconds and the
    average is whole seconds divided by iterations, matching the historical
    report. Otherwise full timer resolution is shown.
    """
    table = Table(title=REPORT_TITLE, box=box.ROUNDED)

    table.add_column("Trial", justify="left", min_width=15, no_wrap=True, style="cyan")
    table.add_column("Elapsed (s)", justify="left", min_width=12, style="green")
    table.add_column("Iterations", justify="left", min_width=10, style="magenta")
    if legacy_seconds:
        table.add_column("Avg / iteration (s)", justify="left", min_width=19, style="yellow")
    else:
        table.add_column("Avg / iteration (ms)", justify="left", min_width=20, style="yellow")
        table.add_column("Throughput (rows/s)", justify="left", min_width=19, style="bold green")

    for res in results:
        iterations = f"{res.iteration_count:,}"
        if legacy_seconds:
            table.add_row(
                res.name,
                str(int(res.elapsed_seconds)),
                iterations,
                str(_legacy_average(res)),
            )
        else:
            table.add_row(
                res.name,
                f"{res.elapsed_seconds:.3f}",
                iterations,
                f"{res.average_seconds * 1000:.4f}",
                f"{res.throughput_rows_per_sec:,.2f}",
            )

    return table


def format_results(
    results: Iterable[TrialResult], legacy_seconds: bool = False, width: int = 120
) -> str:
    """Render the results table to plain text."""
    buffer = io.StringIO()
    console = Console(file=buffer, width=width, no_color=True, highlight=False)
    console.print(build_table(results, legacy_seconds=legacy_seconds))
    return buffer.getvalue()


def print_results(
    results: Iterable[TrialResult],
    console: Optional[Console] = None,
    legacy_seconds: bool = False,
) -> None:
    """
    Render benchmark results as a rich table on the terminal.
    """
    console = console or Console()
    results = list(results)

    if not results:
        console.print("[yellow]No results to display.[/yellow]")
        return

    console.print(build_table(results, legacy_seconds=legacy_seconds))


def format_employee_rows(employees: Iterable[Employee]) -> str:
    """One fixed-width inspection line per employee."""
    return "\n".join(str(employee) for employee in employees)


__all__ = [
    "build_table",
    "format_employee_rows",
    "format_results",
    "print_results",
]
