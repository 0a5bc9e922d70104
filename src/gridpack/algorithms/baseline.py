"""Unindexed baseline container — exhaustive overlap checks, first fit."""

from __future__ import annotations

from typing import Dict, List

from gridpack.core.errors import InvalidDimensionsError
from gridpack.core.geometry import NUM_ORIENTATIONS, ORIGIN, Point
from gridpack.core.models import Box


class BaselineContainer:
    """
    Reference container with no spatial index.

    Every placement test compares the candidate against every placed box,
    so cost grows linearly with the number of boxes per test.  Used only to
    compare results and timings against OptimizedContainer.
    """

    def __init__(self, width: float, height: float, depth: float):
        if width <= 0 or height <= 0 or depth <= 0:
            raise InvalidDimensionsError(
                f"Container extents must be positive, got ({width}, {height}, {depth})"
            )
        self.width = float(width)
        self.height = float(height)
        self.depth = float(depth)
        self._boxes: Dict[int, Box] = {}

    @property
    def volume(self) -> float:
        return self.width * self.height * self.depth

    @property
    def placed_boxes(self) -> List[Box]:
        return list(self._boxes.values())

    @property
    def placed_box_count(self) -> int:
        return len(self._boxes)

    @property
    def current_weight(self) -> float:
        return sum(box.weight for box in self._boxes.values())

    @property
    def utilization(self) -> float:
        return sum(box.volume for box in self._boxes.values()) / self.volume

    def can_place_box(self, box: Box, position: Point, orientation: int) -> bool:
        """Bounds check, then an exact overlap test against every placed box."""
        probe = box.copy()
        probe.position = position
        probe.orientation = orientation
        probe.placed = True

        if not probe.bounding_box().within(self.width, self.height, self.depth):
            return False

        for existing in self._boxes.values():
            if existing.id != box.id and probe.overlaps(existing):
                return False
        return True

    def place_box(self, box: Box, position: Point, orientation: int) -> bool:
        if box.id in self._boxes:
            return False
        if not self.can_place_box(box, position, orientation):
            return False
        box.position = position
        box.orientation = orientation
        box.placed = True
        self._boxes[box.id] = box
        return True

    def remove_box(self, box: Box) -> bool:
        tracked = self._boxes.pop(box.id, None)
        if tracked is None:
            return False
        tracked.placed = False
        box.placed = False
        return True

    def get_possible_placements(self) -> List[Point]:
        """Origin plus the right, top and front corner of every placed box."""
        placements = {ORIGIN}
        for box in self._boxes.values():
            bb = box.bounding_box()
            placements.add(Point(bb.max.x, bb.min.y, bb.min.z))
            placements.add(Point(bb.min.x, bb.max.y, bb.min.z))
            placements.add(Point(bb.min.x, bb.min.y, bb.max.z))
        return sorted(placements)

    def __repr__(self) -> str:
        return (
            f"BaselineContainer(dims=({self.width:.1f},{self.height:.1f},{self.depth:.1f}), "
            f"boxes={self.placed_box_count}, util={self.utilization:.2%})"
        )


def pack_baseline(container: BaselineContainer, box: Box) -> bool:
    """
    First fit over orientations, then candidate points.

    Returns:
        True if the box was placed.
    """
    candidates = container.get_possible_placements()
    for orientation in range(NUM_ORIENTATIONS):
        for position in candidates:
            if container.place_box(box, position, orientation):
                return True
    return False
