from __future__ import annotations

import contextlib
import sys
from typing import List, Optional

import psycopg
import typer

from binding_bench.config import get_settings
from binding_bench.domain.models import TrialResult
from binding_bench.generator import EmployeeGenerator
from binding_bench.infrastructure.db_factory import build_dsn, mask_dsn
from binding_bench.orchestrator import available_trials, run_suite
from binding_bench.reporter import format_employee_rows, print_results
from binding_bench.utils.logging import configure_logging

BANNER = "Start benchmark simple and typed way to pass arguments to the database."

app = typer.Typer(help="Parameter binding benchmark CLI.")


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"DSN={mask_dsn(build_dsn(settings))} | "
        f"iterations={settings.benchmark_iterations} warmup={settings.benchmark_warmup} "
        f"seed={settings.benchmark_seed} settle_gc={settings.benchmark_settle_gc}"
    )


@app.command()
def trials() -> None:
    """
    List trials in the order the suite runs them.
    """
    for name in available_trials():
        typer.echo(name)


@app.command()
def preview(
    count: int = typer.Option(5, "--count", "-c", min=1, help="Number of employees to show."),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for generated names."),
) -> None:
    """
    Print generated employees without touching the database.
    """
    generator = EmployeeGenerator(seed=seed)
    typer.echo(format_employee_rows(generator.generate(count)))


@app.command()
def run(
    iterations: Optional[int] = typer.Option(
        None,
        "--iterations",
        "-n",
        min=1,
        help="Employees per trial (default from settings).",
    ),
    warmup: Optional[int] = typer.Option(
        None,
        "--warmup",
        "-w",
        min=0,
        help="Employees pushed through each trial before timing (default from settings).",
    ),
    dsn: Optional[str] = typer.Option(
        None,
        "--dsn",
        help="Connection string; overrides DB_DSN and the DB_* settings.",
    ),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for generated names."),
    legacy_seconds: bool = typer.Option(
        False,
        "--legacy-seconds",
        help="Report whole seconds and integer averages, like the historical report.",
    ),
    keep_table: bool = typer.Option(
        False,
        "--keep-table",
        help="Leave the employees table in place after the suite.",
    ),
    wait: bool = typer.Option(
        True,
        "--wait/--no-wait",
        help="Wait for a key press before exiting.",
    ),
) -> None:
    """
    Run the four binding trials and print the report.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)

    typer.echo(BANNER)
    results: List[TrialResult] = []
    with contextlib.closing(
        run_suite(
            iterations=iterations,
            dsn=dsn,
            warmup=warmup,
            seed=seed,
            keep_table=keep_table,
        )
    ) as suite:
        for result in suite:
            results.append(result)

    print_results(results, legacy_seconds=legacy_seconds)
    if wait:
        typer.pause("Press any key to exit...")


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
    except psycopg.Error as exc:
        typer.echo(f"Benchmark aborted: {type(exc).__name__}: {exc}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
