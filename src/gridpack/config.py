"""
Central configuration for gridpack.

Module-level constants tune the placement search; the pydantic models
describe containers and benchmark runs as they appear in YAML files.

Classes:
    ContainerSpec   — container extents, weight limit and grid sizing hint
    BenchmarkConfig — everything a benchmark run needs
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, List, Literal, Optional

import yaml
from pydantic import BaseModel, Field, PositiveInt

if TYPE_CHECKING:
    from gridpack.core.container import OptimizedContainer


# ─────────────────────────────────────────────────────────────────────────────
# Search tuning
# ─────────────────────────────────────────────────────────────────────────────

# Candidates evaluated per orientation before the search gives up.
MAX_CANDIDATES: int = 1000

# Subtracted from a box's max corner before mapping it to cells, so an upper
# face lying exactly on a cell boundary does not claim the next cell.
CELL_EPSILON: float = 1e-3

# Smallest allowed cell edge.
MIN_CELL_SIZE: float = 1.0

# Default expected minimum box size = smallest container extent / divisor.
MIN_BOX_SIZE_DIVISOR: float = 50.0

# Position score (lower is better): low, near, left, dense.
WEIGHT_Z: float = 1.0
WEIGHT_Y: float = 0.8
WEIGHT_X: float = 0.6
WEIGHT_UTILIZATION: float = 10.0


def cell_size_for(min_box_size: float) -> float:
    """Adaptive cell edge for an expected minimum box dimension."""
    return max(MIN_CELL_SIZE, min_box_size / 2.0)


# ─────────────────────────────────────────────────────────────────────────────
# Container settings
# ─────────────────────────────────────────────────────────────────────────────

class ContainerSpec(BaseModel):
    """Container extents and limits."""

    width: float = Field(gt=0, description="X extent of the container")
    height: float = Field(gt=0, description="Y extent of the container")
    depth: float = Field(gt=0, description="Z extent of the container")
    max_weight: Optional[float] = Field(
        default=None, gt=0, description="Weight budget; unbounded when omitted")
    min_box_size: Optional[float] = Field(
        default=None, gt=0, description="Expected smallest box dimension")

    def build(self) -> "OptimizedContainer":
        from gridpack.core.container import OptimizedContainer

        kwargs = {}
        if self.max_weight is not None:
            kwargs["max_weight"] = self.max_weight
        return OptimizedContainer(
            self.width, self.height, self.depth,
            min_box_size=self.min_box_size, **kwargs,
        )


# ─────────────────────────────────────────────────────────────────────────────
# Benchmark settings
# ─────────────────────────────────────────────────────────────────────────────

class BenchmarkConfig(BaseModel):
    """All tuneable parameters for a benchmark run."""

    container: ContainerSpec = Field(
        default_factory=lambda: ContainerSpec(
            width=100.0, height=80.0, depth=60.0, min_box_size=5.0))
    box_counts: List[PositiveInt] = Field(
        default_factory=lambda: [10, 20, 50, 100], min_length=1)
    dataset: Literal["uniform", "realistic"] = "uniform"
    ordering: str = "volume_desc"
    seed: int = 42
    min_dim: float = Field(default=5.0, gt=0)
    max_dim: float = Field(default=20.0, gt=0)
    brute_force_limit: int = Field(default=20, ge=0)
    results_dir: str = "results"


def load_benchmark_config(path: Path | str) -> BenchmarkConfig:
    """
    Read a YAML benchmark file.

    Raises:
        pydantic.ValidationError: if any value is out of range.
    """
    with Path(path).open() as f:
        data = yaml.safe_load(f) or {}
    return BenchmarkConfig.model_validate(data)
