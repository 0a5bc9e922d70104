"""Monitoring module for gridpack.

Provides metrics tracking and export for packing benchmarks.
"""

from .metrics import (
    BenchmarkMetrics,
    RunMetrics,
    export_to_csv,
    export_to_json,
    print_summary,
)

__all__ = [
    "BenchmarkMetrics",
    "RunMetrics",
    "export_to_csv",
    "export_to_json",
    "print_summary",
]
