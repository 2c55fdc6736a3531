"""
Profiling utilities for the parameter binding benchmark.

This module provides a context manager to measure:
- Wall-clock time (perf_counter, monotonic)
- CPU utilisation of this process over the block (psutil)
- Resident set size at the end of the block (psutil)

Only snapshots are taken at the block boundaries; nothing runs alongside the
measured code, so the timed window stays single-threaded.

Usage examples:
    from binding_bench.utils.profiler import profile_block

    with profile_block("add_simple") as stats:
        run_trial()

    print(stats.duration_seconds, stats.cpu_percent, stats.rss_bytes)
"""

from __future__ import annotations

import contextlib
import time
from dataclasses import dataclass, field
from typing import Generator, Optional

import psutil


@dataclass
class ProfileStats:
    """
    Container for profiling measurements.
    """

    label: str
    start_ts: float = field(default=0.0)
    end_ts: float = field(default=0.0)
    duration_seconds: float = field(default=0.0)
    rss_bytes: Optional[int] = field(default=None)
    cpu_percent: Optional[float] = field(default=None)


@contextlib.contextmanager
def profile_block(label: str, track_resources: bool = True) -> Generator[ProfileStats, None, None]:
    """
    Context manager to profile a block of code.

    Parameters
    ----------
    label : str
        Human-friendly label for the profiled block.
    track_resources : bool
        Whether to capture CPU percent and RSS via psutil. Wall-clock duration
        is always recorded.

    Notes
    -----
    The clock is started after the psutil priming call and stopped before the
    closing snapshots, so resource capture never lands inside the measured
    duration.
    """
    stats = ProfileStats(label=label)
    process = psutil.Process() if track_resources else None

    # CPU percent needs a priming call
    if process:
        process.cpu_percent(interval=None)

    stats.start_ts = time.perf_counter()
    try:
        yield stats
    finally:
        stats.end_ts = time.perf_counter()
        stats.duration_seconds = stats.end_ts - stats.start_ts

        if process:
            stats.cpu_percent = process.cpu_percent(interval=None)
            stats.rss_bytes = process.memory_info().rss


__all__ = ["ProfileStats", "profile_block"]
