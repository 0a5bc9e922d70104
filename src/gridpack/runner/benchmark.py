"""Benchmark runner: pruned search vs brute-force reference vs unindexed baseline."""

from __future__ import annotations

import argparse
import logging
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Sequence

from gridpack.algorithms.baseline import BaselineContainer, pack_baseline
from gridpack.config import BenchmarkConfig, load_benchmark_config
from gridpack.core.container import OptimizedContainer
from gridpack.core.models import Box
from gridpack.core.validator import validate_container, validate_no_overlap
from gridpack.monitoring.metrics import (
    BenchmarkMetrics,
    RunMetrics,
    export_to_csv,
    export_to_json,
    print_summary,
)
from gridpack.runner.dataset import (
    fresh_copies,
    generate_realistic_packages,
    generate_test_boxes,
    get_ordering_strategy,
)

logger = logging.getLogger(__name__)


class BenchmarkRunner:
    """
    Packs one dataset per box count with every algorithm and collects metrics.

    The brute-force reference only runs while the box count is at most
    ``config.brute_force_limit``.  Every packed state is validated before
    its metrics are recorded.
    """

    def __init__(self, config: Optional[BenchmarkConfig] = None, write_results: bool = True):
        self.config = config or BenchmarkConfig()
        self.results_dir = Path(self.config.results_dir)
        self.write_results = write_results

    def run(self) -> BenchmarkMetrics:
        """
        Flow:
            1. For each box count, generate a seeded dataset and order it
            2. Pack with the pruned engine, the brute-force reference
               (small counts only) and the baseline container
            3. Validate each result and record RunMetrics
            4. Save JSON + CSV and return the aggregate
        """
        benchmark_id = f"bench_{datetime.now(timezone.utc).strftime('%Y%m%d_%H%M%S')}"
        metrics = BenchmarkMetrics(benchmark_id=benchmark_id)
        order = get_ordering_strategy(self.config.ordering)

        for count in self.config.box_counts:
            boxes = order(self._generate(count))
            dataset_id = f"{self.config.dataset}_{count:04d}_seed{self.config.seed}"
            logger.info("Dataset %s: %d boxes", dataset_id, count)

            metrics.add_run(self.run_pruned(boxes, dataset_id))
            if count <= self.config.brute_force_limit:
                metrics.add_run(self.run_brute_force(boxes, dataset_id))
            else:
                logger.info("Skipping brute force for %d boxes (limit %d)",
                            count, self.config.brute_force_limit)
            metrics.add_run(self.run_baseline(boxes, dataset_id))

        metrics.mark_complete()
        if self.write_results:
            self._save_results(metrics)
        return metrics

    def _generate(self, count: int) -> List[Box]:
        if self.config.dataset == "realistic":
            return generate_realistic_packages(count, seed=self.config.seed)
        return generate_test_boxes(
            count, min_dim=self.config.min_dim, max_dim=self.config.max_dim,
            seed=self.config.seed,
        )

    # ── Individual algorithms ────────────────────────────────────────────

    def run_pruned(self, boxes: List[Box], dataset_id: str = "") -> RunMetrics:
        container = self.config.container.build()
        return self._run_engine("pruned", container, container.place_box, boxes, dataset_id)

    def run_brute_force(self, boxes: List[Box], dataset_id: str = "") -> RunMetrics:
        container = self.config.container.build()
        return self._run_engine(
            "brute_force", container, container.place_box_brute_force, boxes, dataset_id)

    def _run_engine(self, name, container: OptimizedContainer, place, boxes, dataset_id) -> RunMetrics:
        work = fresh_copies(boxes)
        start = time.perf_counter()
        placed = sum(1 for box in work if place(box))
        elapsed = time.perf_counter() - start

        validate_container(container)
        return RunMetrics(
            algorithm=name,
            box_count=len(work),
            boxes_placed=placed,
            utilization_pct=container.utilization * 100,
            weight_utilization_pct=container.weight_utilization * 100,
            runtime_seconds=elapsed,
            can_place_calls=container.counters.can_place_calls,
            candidates_evaluated=container.counters.candidates_evaluated,
            dataset_id=dataset_id,
        )

    def run_baseline(self, boxes: List[Box], dataset_id: str = "") -> RunMetrics:
        spec = self.config.container
        container = BaselineContainer(spec.width, spec.height, spec.depth)
        work = fresh_copies(boxes)

        start = time.perf_counter()
        placed = sum(1 for box in work if pack_baseline(container, box))
        elapsed = time.perf_counter() - start

        validate_no_overlap(container.placed_boxes)
        return RunMetrics(
            algorithm="baseline",
            box_count=len(work),
            boxes_placed=placed,
            utilization_pct=container.utilization * 100,
            runtime_seconds=elapsed,
            dataset_id=dataset_id,
        )

    def _save_results(self, metrics: BenchmarkMetrics) -> None:
        json_path = self.results_dir / f"{metrics.benchmark_id}.json"
        csv_path = self.results_dir / f"{metrics.benchmark_id}_runs.csv"
        export_to_json(metrics, json_path)
        export_to_csv(metrics, csv_path)
        logger.info("Saved results to %s and %s", json_path, csv_path)


# ─────────────────────────────────────────────────────────────────────────────
# CLI
# ─────────────────────────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gridpack-bench",
        description="Compare grid-indexed pruned packing against brute force and an unindexed baseline",
    )
    parser.add_argument("--config", type=Path, default=None,
                        help="YAML benchmark configuration")
    parser.add_argument("--boxes", type=int, nargs="+", default=None,
                        help="Box counts to benchmark (overrides the config)")
    parser.add_argument("--seed", type=int, default=None,
                        help="Dataset seed (overrides the config)")
    parser.add_argument("--results-dir", type=str, default=None,
                        help="Directory for JSON/CSV output")
    parser.add_argument("--no-save", action="store_true",
                        help="Do not write result files")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Debug logging")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    config = load_benchmark_config(args.config) if args.config else BenchmarkConfig()
    overrides = {}
    if args.boxes:
        overrides["box_counts"] = args.boxes
    if args.seed is not None:
        overrides["seed"] = args.seed
    if args.results_dir:
        overrides["results_dir"] = args.results_dir
    if overrides:
        config = BenchmarkConfig.model_validate({**config.model_dump(), **overrides})

    metrics = BenchmarkRunner(config, write_results=not args.no_save).run()
    print(print_summary(metrics))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
