"""gridpack — grid-indexed 3D box packing.

Packs axis-aligned boxes into a fixed container one at a time, using a
uniform 3D grid index and a pruned, score-ordered candidate search.
"""

from .core.container import OptimizedContainer, SearchCounters
from .core.errors import (
    GridContractError,
    GridpackError,
    InvalidDimensionsError,
    OutOfBoundsError,
    OverlapError,
    PlacementError,
    WeightLimitError,
)
from .core.geometry import ORIENTATIONS, BoundingBox, Point
from .core.grid_index import GridIndex, GridStatistics
from .core.models import Box

__version__ = "0.1.0"

__all__ = [
    # Core
    "Box",
    "Point",
    "BoundingBox",
    "ORIENTATIONS",
    "GridIndex",
    "GridStatistics",
    "OptimizedContainer",
    "SearchCounters",
    # Errors
    "GridpackError",
    "InvalidDimensionsError",
    "GridContractError",
    "PlacementError",
    "OutOfBoundsError",
    "OverlapError",
    "WeightLimitError",
]
