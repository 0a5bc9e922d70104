"""
Optimized container — grid-indexed, pruned placement search.

Algorithm overview:
    A naive packer scans every lattice point of the container for every
    orientation, which is cubic in the container resolution.  This engine
    instead evaluates a small, score-ordered set of anchor candidates:

      - face anchors around every occupied grid cell (GridIndex)
      - face anchors around every placed box (right/top/front flush against
        its max faces, left/bottom/back flush against its min faces)
      - the origin

    Candidates are deduplicated, stripped of anchors that sit inside a
    placed box, sorted by a composite score and tried in order (capped at
    MAX_CANDIDATES).  Each one gets a cheap bounds check
    and then the grid's two-level collision test.  The first orientation
    that yields a valid anchor wins.

Scoring (lower is better):
    score = WEIGHT_Z*z + WEIGHT_Y*y + WEIGHT_X*x - WEIGHT_UTILIZATION*u

    where u = (placed volume + candidate volume) / container volume.
    Ties resolve by (z, y, x).

A brute-force reference mode (place_box_brute_force) scans the full lattice
with the same collision test.  It exists to cross-check the pruned search
and to measure its speed advantage.
"""

from __future__ import annotations

import heapq
import logging
import math
from dataclasses import asdict, dataclass
from typing import Dict, Iterator, List, Optional, Tuple

import numpy as np

from gridpack.config import (
    MAX_CANDIDATES,
    MIN_BOX_SIZE_DIVISOR,
    WEIGHT_UTILIZATION,
    WEIGHT_X,
    WEIGHT_Y,
    WEIGHT_Z,
)
from gridpack.core.errors import InvalidDimensionsError
from gridpack.core.geometry import NUM_ORIENTATIONS, ORIGIN, Dims, Point
from gridpack.core.grid_index import GridIndex
from gridpack.core.models import Box

logger = logging.getLogger(__name__)


@dataclass
class SearchCounters:
    """Operation counts accumulated across placement attempts."""

    attempts: int = 0
    candidates_generated: int = 0
    candidates_evaluated: int = 0
    can_place_calls: int = 0

    def reset(self) -> None:
        self.attempts = 0
        self.candidates_generated = 0
        self.candidates_evaluated = 0
        self.can_place_calls = 0

    def to_dict(self) -> dict:
        return asdict(self)


class OptimizedContainer:
    """
    Fixed-size container packed one box at a time.

    Args:
        width, height, depth: Container extents (x, y, z).
        max_weight:           Weight budget (unbounded by default).
        min_box_size:         Expected smallest box dimension; defaults to the
                              smallest extent / MIN_BOX_SIZE_DIVISOR.
        max_candidates:       Candidates evaluated per orientation.

    Raises:
        InvalidDimensionsError: non-positive extents, weight limit or sizes.
    """

    def __init__(
        self,
        width: float,
        height: float,
        depth: float,
        max_weight: float = math.inf,
        min_box_size: Optional[float] = None,
        max_candidates: int = MAX_CANDIDATES,
    ) -> None:
        if width <= 0 or height <= 0 or depth <= 0:
            raise InvalidDimensionsError(
                f"Container extents must be positive, got ({width}, {height}, {depth})"
            )
        if max_weight <= 0:
            raise InvalidDimensionsError(f"max_weight must be positive, got {max_weight}")
        if max_candidates <= 0:
            raise InvalidDimensionsError(f"max_candidates must be positive, got {max_candidates}")

        self.width = float(width)
        self.height = float(height)
        self.depth = float(depth)
        self.max_weight = float(max_weight)
        self.max_candidates = max_candidates
        self.min_box_size = (
            min_box_size if min_box_size is not None
            else min(self.width, self.height, self.depth) / MIN_BOX_SIZE_DIVISOR
        )

        self.grid = GridIndex(self.width, self.height, self.depth, self.min_box_size)
        self.counters = SearchCounters()

        self._placed: Dict[int, Box] = {}
        self._current_weight: float = 0.0
        self._placed_volume: float = 0.0
        # Hint cache only; each attempt rebuilds its own candidates.
        self._candidate_pool: List[Tuple[float, float, float, Point]] = []
        self._push_candidate(ORIGIN)

    # ── Read-only state ──────────────────────────────────────────────────

    @property
    def volume(self) -> float:
        return self.width * self.height * self.depth

    @property
    def current_weight(self) -> float:
        return self._current_weight

    @property
    def placed_volume(self) -> float:
        return self._placed_volume

    @property
    def placed_boxes(self) -> List[Box]:
        """Placed boxes in placement order (a copy of the internal list)."""
        return list(self._placed.values())

    @property
    def placed_box_count(self) -> int:
        return len(self._placed)

    @property
    def utilization(self) -> float:
        """Placed volume / container volume."""
        return self._placed_volume / self.volume

    @property
    def weight_utilization(self) -> float:
        """Placed weight / weight budget; 0.0 when the budget is unbounded."""
        if math.isinf(self.max_weight):
            return 0.0
        return self._current_weight / self.max_weight

    @property
    def candidate_pool_size(self) -> int:
        return len(self._candidate_pool)

    def is_placed(self, box: Box) -> bool:
        return box.id in self._placed

    # ── Placement (pruned search) ────────────────────────────────────────

    def place_box(self, box: Box) -> bool:
        """
        Place *box* at the best-ranked valid anchor of the first orientation
        that admits one.

        On success the box's position, orientation and placed flag are set
        together and the box is tracked by this container.  On failure
        nothing changes.

        Returns:
            True if the box was placed.
        """
        if not self._admissible(box):
            return False

        self.counters.attempts += 1
        for orientation in range(NUM_ORIENTATIONS):
            dims = box.dims_for(orientation)
            position = self._search_pruned(box.volume, dims)
            if position is not None:
                self._commit(box, position, orientation)
                return True

        logger.debug("Box %d rejected: no valid anchor in any orientation", box.id)
        return False

    def _search_pruned(self, box_volume: float, dims: Dims) -> Optional[Point]:
        candidates = self.sorted_candidates(box_volume, dims)
        self.counters.candidates_generated += len(candidates)

        w, h, d = dims
        for x, y, z in candidates[:self.max_candidates].tolist():
            self.counters.candidates_evaluated += 1
            pos = Point(x, y, z)
            if not self._in_bounds(pos, dims):
                continue
            self.counters.can_place_calls += 1
            if self.grid.can_place(x, y, z, w, h, d):
                return pos
        return None

    def sorted_candidates(self, box_volume: float, dims: Dims) -> np.ndarray:
        """
        Deduplicated (N, 3) candidate anchors ordered by score, then (z, y, x).

        Sources: grid face anchors, face anchors of every placed box, origin.
        Anchors lying inside a placed box are dropped before ranking, so
        they never count against the candidate cap.
        """
        candidates = np.unique(np.vstack([
            self.grid.candidate_array(*dims),
            self._face_candidates(dims),
            np.zeros((1, 3)),
        ]), axis=0)
        candidates = candidates[~self._inside_placed(candidates)]

        # u is the same for every candidate of one attempt.
        utilization = (self._placed_volume + box_volume) / self.volume
        x, y, z = candidates[:, 0], candidates[:, 1], candidates[:, 2]
        score = WEIGHT_Z * z + WEIGHT_Y * y + WEIGHT_X * x - WEIGHT_UTILIZATION * utilization

        # np.lexsort sorts by the last key first.
        return candidates[np.lexsort((x, y, z, score))]

    def _face_candidates(self, dims: Dims) -> np.ndarray:
        """
        Anchors flush against the six faces of every placed box: right, top,
        front at its max faces; left, bottom, back one new-box extent before
        its min faces.
        """
        if not self._placed:
            return np.empty((0, 3))

        positions, extents = self._placed_arrays()

        faces = []
        for axis in range(3):
            after = positions.copy()
            after[:, axis] += extents[:, axis]
            faces.append(after)
        for axis in range(3):
            before = positions.copy()
            before[:, axis] -= dims[axis]
            faces.append(before)

        candidates = np.vstack(faces)
        return candidates[self.grid.in_bounds_mask(candidates, *dims)]

    def _inside_placed(self, points: np.ndarray) -> np.ndarray:
        """
        Row mask of anchors with min <= p < max on every axis of some placed
        box.  A box of positive extent anchored there always collides.
        """
        if not self._placed or not len(points):
            return np.zeros(len(points), dtype=bool)

        lo, extents = self._placed_arrays()
        hi = lo + extents
        p = points[:, None, :]
        inside = (p >= lo[None, :, :]) & (p < hi[None, :, :])
        return inside.all(axis=2).any(axis=1)

    def _placed_arrays(self) -> Tuple[np.ndarray, np.ndarray]:
        """(B, 3) positions and oriented extents of the placed boxes."""
        boxes = self._placed.values()
        positions = np.array([b.position.as_tuple() for b in boxes], dtype=np.float64)
        extents = np.array([b.dims for b in boxes], dtype=np.float64)
        return positions, extents

    def _in_bounds(self, pos: Point, dims: Dims) -> bool:
        w, h, d = dims
        return (
            pos.x >= 0 and pos.y >= 0 and pos.z >= 0 and
            pos.x + w <= self.width and
            pos.y + h <= self.height and
            pos.z + d <= self.depth
        )

    # ── Placement (brute-force reference) ────────────────────────────────

    def place_box_brute_force(self, box: Box) -> bool:
        """
        Reference placement: scan the lattice k * step in ascending (z, y, x)
        order for each orientation and take the first collision-free point.

        The step is the grid cell size.  Slow by construction; use it to
        validate the pruned search, not to pack.
        """
        if not self._admissible(box):
            return False

        self.counters.attempts += 1
        step = self.grid.cell_size[0]
        for orientation in range(NUM_ORIENTATIONS):
            w, h, d = box.dims_for(orientation)
            for z in self._lattice(self.depth - d, step):
                for y in self._lattice(self.height - h, step):
                    for x in self._lattice(self.width - w, step):
                        self.counters.can_place_calls += 1
                        if self.grid.can_place(x, y, z, w, h, d):
                            self._commit(box, Point(x, y, z), orientation)
                            return True

        logger.debug("Box %d rejected by brute-force scan", box.id)
        return False

    @staticmethod
    def _lattice(limit: float, step: float) -> Iterator[float]:
        """0, step, 2*step, ... up to and including *limit*."""
        k = 0
        value = 0.0
        while value <= limit:
            yield value
            k += 1
            value = k * step

    # ── Shared commit / admission ────────────────────────────────────────

    def _admissible(self, box: Box) -> bool:
        if box.id in self._placed:
            logger.warning("Box %d is already placed in this container", box.id)
            return False
        if box.placed:
            logger.warning("Box %d is already placed in another container", box.id)
            return False
        if self._current_weight + box.weight > self.max_weight:
            logger.debug(
                "Box %d rejected: weight %.2f + %.2f exceeds %.2f",
                box.id, self._current_weight, box.weight, self.max_weight,
            )
            return False
        return True

    def _commit(self, box: Box, position: Point, orientation: int) -> None:
        box.position = position
        box.orientation = orientation
        box.placed = True

        self._placed[box.id] = box
        self._current_weight += box.weight
        self._placed_volume += box.volume
        self.grid.place_box(box)

        w, h, d = box.dims
        self._push_candidate(position.offset(dx=w))
        self._push_candidate(position.offset(dy=h))
        self._push_candidate(position.offset(dz=d))

        logger.debug("Placed box %d at %r, orientation %d", box.id, position, orientation)

    def _push_candidate(self, point: Point) -> None:
        heapq.heappush(self._candidate_pool, (*point.sort_key, point))

    # ── Removal / reset ──────────────────────────────────────────────────

    def remove_box(self, box: Box) -> bool:
        """
        Undo a placement.

        Returns:
            False (and changes nothing) if the box is not placed here.
        """
        tracked = self._placed.pop(box.id, None)
        if tracked is None:
            logger.warning("Box %d is not placed in this container; nothing to remove", box.id)
            return False

        self.grid.remove_box(tracked)
        self._current_weight -= tracked.weight
        self._placed_volume -= tracked.volume
        tracked.placed = False
        if box is not tracked:
            box.placed = False

        logger.debug("Removed box %d", box.id)
        return True

    def reset(self) -> None:
        """Empty the container.  Boxes it held are marked unplaced."""
        for box in self._placed.values():
            box.placed = False
        self._placed.clear()
        self._current_weight = 0.0
        self._placed_volume = 0.0
        self.grid.clear()
        self._candidate_pool.clear()
        self._push_candidate(ORIGIN)
        self.counters.reset()

    # ── Diagnostics ──────────────────────────────────────────────────────

    def get_performance_stats(self) -> str:
        return (
            f"Container: {self}\n"
            f"Grid: {self.grid.get_statistics()}\n"
            f"Candidates: {self.candidate_pool_size}"
        )

    def __repr__(self) -> str:
        return (
            f"OptimizedContainer(dims=({self.width:.1f},{self.height:.1f},{self.depth:.1f}), "
            f"boxes={self.placed_box_count}, util={self.utilization:.2%}, "
            f"weight={self._current_weight:.1f}/{self.max_weight:.1f})"
        )
