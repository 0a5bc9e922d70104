"""Metrics tracking and export for packing benchmarks.

Provides dataclasses for per-run and per-benchmark metrics and utilities for
exporting results to JSON and CSV formats.
"""

from __future__ import annotations

import csv
import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

CSV_FIELDS = [
    "algorithm", "box_count", "boxes_placed", "utilization_pct",
    "weight_utilization_pct", "runtime_seconds", "can_place_calls",
    "candidates_evaluated", "dataset_id",
]


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class RunMetrics:
    """Metrics for packing one dataset with one algorithm.

    Attributes:
        algorithm: "pruned", "brute_force" or "baseline".
        box_count: Number of boxes offered.
        boxes_placed: Number of boxes placed.
        utilization_pct: Volume utilization percentage (0-100).
        weight_utilization_pct: Weight utilization percentage (0-100).
        runtime_seconds: Wall-clock time spent placing boxes.
        can_place_calls: Collision queries issued (0 where not instrumented).
        candidates_evaluated: Anchors examined by the pruned search.
        dataset_id: Dataset identifier.
    """

    algorithm: str
    box_count: int
    boxes_placed: int
    utilization_pct: float
    weight_utilization_pct: float = 0.0
    runtime_seconds: float = 0.0
    can_place_calls: int = 0
    candidates_evaluated: int = 0
    dataset_id: str = ""

    @property
    def ms_per_box(self) -> float:
        if self.box_count == 0:
            return 0.0
        return self.runtime_seconds * 1000.0 / self.box_count

    def to_dict(self) -> dict[str, Any]:
        """
        Example:
            >>> rm = RunMetrics("pruned", 10, 10, 12.5)
            >>> rm.to_dict()["boxes_placed"]
            10
        """
        return asdict(self)


@dataclass
class BenchmarkMetrics:
    """Aggregate metrics for a whole benchmark.

    Attributes:
        benchmark_id: Unique identifier for the benchmark.
        runs: Per-run metrics, in execution order.
        runtime_seconds: Total runtime in seconds.
        started_at: Benchmark start timestamp.
        completed_at: Completion timestamp (None while running).
    """

    benchmark_id: str
    runs: list[RunMetrics] = field(default_factory=list)
    runtime_seconds: float = 0.0
    started_at: datetime = field(default_factory=_now)
    completed_at: datetime | None = None

    def add_run(self, run: RunMetrics) -> None:
        """
        Example:
            >>> bm = BenchmarkMetrics("bench_001")
            >>> bm.add_run(RunMetrics("pruned", 10, 9, 40.0))
            >>> bm.total_boxes_placed
            9
        """
        self.runs.append(run)

    def mark_complete(self) -> None:
        self.completed_at = _now()
        self.runtime_seconds = (self.completed_at - self.started_at).total_seconds()

    @property
    def total_boxes_placed(self) -> int:
        return sum(r.boxes_placed for r in self.runs)

    def runs_for(self, algorithm: str) -> list[RunMetrics]:
        return [r for r in self.runs if r.algorithm == algorithm]

    def avg_utilization_pct(self, algorithm: str) -> float:
        runs = self.runs_for(algorithm)
        if not runs:
            return 0.0
        return sum(r.utilization_pct for r in runs) / len(runs)

    def speedup(self, box_count: int) -> float | None:
        """Brute-force runtime / pruned runtime for one box count, if both ran."""
        pruned = [r for r in self.runs_for("pruned") if r.box_count == box_count]
        brute = [r for r in self.runs_for("brute_force") if r.box_count == box_count]
        if not pruned or not brute or pruned[0].runtime_seconds <= 0:
            return None
        return brute[0].runtime_seconds / pruned[0].runtime_seconds

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["started_at"] = self.started_at.isoformat()
        d["completed_at"] = self.completed_at.isoformat() if self.completed_at else None
        d["runs"] = [r.to_dict() for r in self.runs]
        return d

    def to_summary_dict(self) -> dict[str, Any]:
        """Same as to_dict() without the per-run list."""
        d = self.to_dict()
        del d["runs"]
        d["total_runs"] = len(self.runs)
        d["total_boxes_placed"] = self.total_boxes_placed
        return d


def export_to_json(metrics: BenchmarkMetrics, output_path: Path | str, include_runs: bool = True) -> None:
    """Export benchmark metrics to a JSON file.

    Args:
        metrics: BenchmarkMetrics instance to export.
        output_path: Path to output JSON file.
        include_runs: If False, write the summary only.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    data = metrics.to_dict() if include_runs else metrics.to_summary_dict()

    with output_path.open("w") as f:
        json.dump(data, f, indent=2)


def export_to_csv(metrics: BenchmarkMetrics, output_path: Path | str) -> None:
    """Export per-run metrics to a CSV file (header only when there are no runs)."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with output_path.open("w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for run in metrics.runs:
            writer.writerow(run.to_dict())


def print_summary(metrics: BenchmarkMetrics) -> str:
    """Generate a human-readable summary of benchmark metrics.

    Returns:
        Formatted multi-line summary string.
    """
    lines = [
        "=" * 72,
        f"Benchmark: {metrics.benchmark_id}",
        "=" * 72,
        f"{'algorithm':<12} {'boxes':>6} {'placed':>7} {'util %':>8} {'ms/box':>9} {'can_place':>10}",
        "-" * 72,
    ]
    for run in metrics.runs:
        lines.append(
            f"{run.algorithm:<12} {run.box_count:>6} {run.boxes_placed:>7} "
            f"{run.utilization_pct:>8.2f} {run.ms_per_box:>9.2f} {run.can_place_calls:>10}"
        )

    counts = sorted({r.box_count for r in metrics.runs})
    speedups = [(n, metrics.speedup(n)) for n in counts]
    speedups = [(n, s) for n, s in speedups if s is not None]
    if speedups:
        lines.append("")
        lines.append("Speedup (brute force / pruned):")
        for n, s in speedups:
            lines.append(f"  {n:>5} boxes: {s:.1f}x")

    lines += [
        "",
        f"Runtime: {metrics.runtime_seconds:.2f} seconds",
        f"Started:   {metrics.started_at.isoformat()}",
        f"Completed: {metrics.completed_at.isoformat() if metrics.completed_at else 'In Progress'}",
        "=" * 72,
    ]
    return "\n".join(lines)
