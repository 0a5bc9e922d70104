"""
Grid index — uniform 3D cell partition of a container for collision queries.

The container volume is split into cells of edge ``max(1, min_box_size / 2)``.
Every cell keeps the ids of the boxes whose bounding box overlaps it, and a
numpy boolean array mirrors "this cell has at least one box" so that empty
regions can be rejected with a single ``any()``.

Queries:
    .can_place(x, y, z, w, h, d)       — coarse cell test, then exact AABB test
    .get_possible_placements(w, h, d)  — face anchors around occupied cells
    .get_statistics()                  — occupancy diagnostics

Bookkeeping:
    .place_box(box) / .remove_box(box) — register / deregister a placed box
    .clear()                           — full reset

Ownership is index-based: cells hold integer ids and the index keeps one
arena (id -> BoundingBox snapshot taken at registration).  Removal works
from the snapshot, so a caller mutating a Box afterwards cannot leave stale
ids behind.
"""

from __future__ import annotations

import itertools
import logging
import math
from dataclasses import dataclass
from typing import Dict, Iterator, List, Tuple

import numpy as np

from gridpack.config import CELL_EPSILON, cell_size_for
from gridpack.core.errors import GridContractError, InvalidDimensionsError
from gridpack.core.geometry import ORIGIN, BoundingBox, Point, boxes_overlap
from gridpack.core.models import Box

logger = logging.getLogger(__name__)

CellCoord = Tuple[int, int, int]


@dataclass(frozen=True)
class GridStatistics:
    """Diagnostic snapshot of grid occupancy.  No stability guarantees."""

    grid_shape: Tuple[int, int, int]
    occupied_cells: int
    total_cells: int
    total_box_refs: int

    @property
    def occupancy_ratio(self) -> float:
        if self.total_cells == 0:
            return 0.0
        return self.occupied_cells / self.total_cells

    def __str__(self) -> str:
        gx, gy, gz = self.grid_shape
        return (
            f"Grid[{gx}x{gy}x{gz}], Occupied: {self.occupied_cells}/{self.total_cells} "
            f"({self.occupancy_ratio * 100:.1f}%), Boxes: {self.total_box_refs}"
        )


class GridIndex:
    """
    Spatial hash of placed boxes over a fixed container.

    Args:
        width, height, depth: Container extents (x, y, z).
        min_box_size:         Expected smallest box dimension; sets cell size.

    Raises:
        InvalidDimensionsError: any argument is not strictly positive.
    """

    __slots__ = (
        "width", "height", "depth", "cell_size", "grid_shape",
        "occupied", "_cell_array", "_cells", "_boxes",
    )

    def __init__(self, width: float, height: float, depth: float, min_box_size: float) -> None:
        if width <= 0 or height <= 0 or depth <= 0:
            raise InvalidDimensionsError(
                f"Container extents must be positive, got ({width}, {height}, {depth})"
            )
        if min_box_size <= 0:
            raise InvalidDimensionsError(f"min_box_size must be positive, got {min_box_size}")

        self.width = float(width)
        self.height = float(height)
        self.depth = float(depth)

        cs = cell_size_for(min_box_size)
        self.cell_size: Tuple[float, float, float] = (cs, cs, cs)
        self.grid_shape: Tuple[int, int, int] = (
            math.ceil(self.width / cs),
            math.ceil(self.height / cs),
            math.ceil(self.depth / cs),
        )

        self.occupied: np.ndarray = np.zeros(self.grid_shape, dtype=bool)
        self._cell_array: np.ndarray = np.array(self.cell_size, dtype=np.float64)
        self._cells: List[List[int]] = [[] for _ in range(self.occupied.size)]
        self._boxes: Dict[int, BoundingBox] = {}

    # ── Coordinate conversion ────────────────────────────────────────────

    def _to_grid(self, x: float, y: float, z: float) -> CellCoord:
        """World coordinate -> cell coordinate, clamped to the grid."""
        gx, gy, gz = self.grid_shape
        cx, cy, cz = self.cell_size
        return (
            min(max(int(x / cx), 0), gx - 1),
            min(max(int(y / cy), 0), gy - 1),
            min(max(int(z / cz), 0), gz - 1),
        )

    def _cell_range(
        self, x: float, y: float, z: float, w: float, h: float, d: float,
    ) -> Tuple[CellCoord, CellCoord]:
        """Inclusive (lo, hi) cell coordinates covered by a box."""
        lo = self._to_grid(x, y, z)
        hi = self._to_grid(x + w - CELL_EPSILON, y + h - CELL_EPSILON, z + d - CELL_EPSILON)
        hi = (max(hi[0], lo[0]), max(hi[1], lo[1]), max(hi[2], lo[2]))
        return lo, hi

    def _flat(self, ix: int, iy: int, iz: int) -> int:
        _, gy, gz = self.grid_shape
        return (ix * gy + iy) * gz + iz

    @staticmethod
    def _iter_range(lo: CellCoord, hi: CellCoord) -> Iterator[CellCoord]:
        return itertools.product(
            range(lo[0], hi[0] + 1),
            range(lo[1], hi[1] + 1),
            range(lo[2], hi[2] + 1),
        )

    def _bounds_range(self, bb: BoundingBox) -> Tuple[CellCoord, CellCoord]:
        w, h, d = bb.dims
        return self._cell_range(bb.min.x, bb.min.y, bb.min.z, w, h, d)

    # ── Queries ──────────────────────────────────────────────────────────

    def can_place(self, x: float, y: float, z: float, w: float, h: float, d: float) -> bool:
        """
        True if a w x h x d box at (x, y, z) stays inside the container and
        overlaps no registered box.

        Only occupied cells in the box's footprint are inspected; every box
        recorded there is tested once with the exact separating-axis check.
        """
        if (x < 0 or y < 0 or z < 0 or
                x + w > self.width or y + h > self.height or z + d > self.depth):
            return False

        (x0, y0, z0), (x1, y1, z1) = self._cell_range(x, y, z, w, h, d)
        region = self.occupied[x0:x1 + 1, y0:y1 + 1, z0:z1 + 1]
        if not region.any():
            return True

        checked = set()
        for dx, dy, dz in np.argwhere(region).tolist():
            for box_id in self._cells[self._flat(x0 + dx, y0 + dy, z0 + dz)]:
                if box_id in checked:
                    continue
                checked.add(box_id)
                if boxes_overlap(x, y, z, w, h, d, self._boxes[box_id]):
                    return False
        return True

    def in_bounds_mask(self, points: np.ndarray, box_w: float, box_h: float, box_d: float) -> np.ndarray:
        """Row mask of (N, 3) anchors at which the box stays inside the container."""
        extent = np.array([box_w, box_h, box_d])
        limit = np.array([self.width, self.height, self.depth])
        return np.all((points >= 0) & (points + extent <= limit), axis=1)

    def candidate_array(self, box_w: float, box_h: float, box_d: float) -> np.ndarray:
        """
        Face anchors around occupied cells as an (N, 3) array.

        Every occupied cell contributes the points one cell step past its
        minimum corner on +x, +y, +z, and the points one box extent before
        it on -x, -y, -z.  Out-of-bounds anchors are dropped; rows may repeat
        and the origin is not added.
        """
        occupied = np.argwhere(self.occupied)
        if not occupied.size:
            return np.empty((0, 3))

        base = occupied * self._cell_array
        cx, cy, cz = self.cell_size
        offsets = np.array([
            [cx, 0.0, 0.0],
            [0.0, cy, 0.0],
            [0.0, 0.0, cz],
            [-box_w, 0.0, 0.0],
            [0.0, -box_h, 0.0],
            [0.0, 0.0, -box_d],
        ])
        candidates = (base[:, None, :] + offsets[None, :, :]).reshape(-1, 3)
        return candidates[self.in_bounds_mask(candidates, box_w, box_h, box_d)]

    def get_possible_placements(self, box_w: float, box_h: float, box_d: float) -> List[Point]:
        """
        Anchor candidates for a box of the given extents.

        The origin is always included, followed by the face anchors of
        candidate_array().

        Returns:
            Distinct points sorted by (z, y, x).
        """
        points = {ORIGIN}
        anchors = self.candidate_array(box_w, box_h, box_d)
        if anchors.size:
            unique = np.unique(anchors, axis=0)
            points.update(Point(x, y, z) for x, y, z in unique.tolist())
        return sorted(points)

    def get_statistics(self) -> GridStatistics:
        return GridStatistics(
            grid_shape=self.grid_shape,
            occupied_cells=int(np.count_nonzero(self.occupied)),
            total_cells=int(self.occupied.size),
            total_box_refs=sum(len(cell) for cell in self._cells),
        )

    def box_ids_at(self, ix: int, iy: int, iz: int) -> Tuple[int, ...]:
        return tuple(self._cells[self._flat(ix, iy, iz)])

    def cells_for(self, box_id: int) -> List[CellCoord]:
        """Cell coordinates a registered box occupies."""
        if box_id not in self._boxes:
            raise GridContractError(f"Box {box_id} is not registered in this grid")
        lo, hi = self._bounds_range(self._boxes[box_id])
        return list(self._iter_range(lo, hi))

    def __contains__(self, box_id: object) -> bool:
        return box_id in self._boxes

    def __len__(self) -> int:
        return len(self._boxes)

    # ── Mutation ─────────────────────────────────────────────────────────

    def place_box(self, box: Box) -> None:
        """
        Register an already positioned and oriented box.

        Raises:
            GridContractError: the box id is already registered.
        """
        if box.id in self._boxes:
            raise GridContractError(f"Box {box.id} is already registered in this grid")

        bb = box.bounding_box()
        self._boxes[box.id] = bb

        (x0, y0, z0), (x1, y1, z1) = self._bounds_range(bb)
        for ix, iy, iz in self._iter_range((x0, y0, z0), (x1, y1, z1)):
            self._cells[self._flat(ix, iy, iz)].append(box.id)
        self.occupied[x0:x1 + 1, y0:y1 + 1, z0:z1 + 1] = True

    def remove_box(self, box: Box) -> None:
        """
        Deregister a box from every cell it was registered in.

        Raises:
            GridContractError: the box id was never registered (or already removed).
        """
        bb = self._boxes.pop(box.id, None)
        if bb is None:
            raise GridContractError(f"Box {box.id} is not registered in this grid")

        lo, hi = self._bounds_range(bb)
        for ix, iy, iz in self._iter_range(lo, hi):
            cell = self._cells[self._flat(ix, iy, iz)]
            cell.remove(box.id)
            if not cell:
                self.occupied[ix, iy, iz] = False

    def clear(self) -> None:
        """Reset every cell.  Meant for full container resets, not per-box undo."""
        self.occupied.fill(False)
        for cell in self._cells:
            cell.clear()
        self._boxes.clear()
        logger.debug("Grid %s cleared", self.grid_shape)

    def __repr__(self) -> str:
        return f"GridIndex({self.get_statistics()})"
