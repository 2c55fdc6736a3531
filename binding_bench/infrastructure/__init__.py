"""
Infrastructure package for the parameter binding benchmark.

Centralizes database connectivity concerns. Keep this layer focused on I/O and
resource management, decoupled from runner logic.
"""

from binding_bench.infrastructure.db_factory import build_dsn, mask_dsn, open_connection

__all__ = [
    "build_dsn",
    "mask_dsn",
    "open_connection",
]
