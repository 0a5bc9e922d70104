"""
Geometric primitives — points, axis-aligned bounding boxes, orientations.

Point ordering is (z, y, x): bottom first, then back, then left.  Every
candidate list in the placement search is sorted with this key so that
ties always resolve towards the floor and the back-left corner.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import total_ordering
from typing import Tuple


Dims = Tuple[float, float, float]


# ─────────────────────────────────────────────────────────────────────────────
# Orientation table
# ─────────────────────────────────────────────────────────────────────────────

# Index i maps the original (width, height, depth) to the oriented extents:
# oriented[k] = original[ORIENTATIONS[i][k]].
ORIENTATIONS: Tuple[Tuple[int, int, int], ...] = (
    (0, 1, 2),  # w, h, d
    (0, 2, 1),  # w, d, h
    (1, 0, 2),  # h, w, d
    (1, 2, 0),  # h, d, w
    (2, 0, 1),  # d, w, h
    (2, 1, 0),  # d, h, w
)

NUM_ORIENTATIONS: int = len(ORIENTATIONS)


def oriented_dims(width: float, height: float, depth: float, orientation: int) -> Dims:
    """Return the (w, h, d) extents of a box under *orientation*."""
    original = (width, height, depth)
    a, b, c = ORIENTATIONS[orientation]
    return original[a], original[b], original[c]


# ─────────────────────────────────────────────────────────────────────────────
# Point
# ─────────────────────────────────────────────────────────────────────────────

@total_ordering
@dataclass(frozen=True)
class Point:
    """Immutable 3D coordinate, ordered by (z, y, x)."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @property
    def sort_key(self) -> Tuple[float, float, float]:
        return (self.z, self.y, self.x)

    def __lt__(self, other: "Point") -> bool:
        if not isinstance(other, Point):
            return NotImplemented
        return self.sort_key < other.sort_key

    def offset(self, dx: float = 0.0, dy: float = 0.0, dz: float = 0.0) -> "Point":
        return Point(self.x + dx, self.y + dy, self.z + dz)

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def __repr__(self) -> str:
        return f"({self.x:.1f}, {self.y:.1f}, {self.z:.1f})"


ORIGIN = Point(0.0, 0.0, 0.0)


# ─────────────────────────────────────────────────────────────────────────────
# Bounding box
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class BoundingBox:
    """
    Axis-aligned box spanning [min, max] on every axis.

    Attributes:
        min: Lower corner (smallest x, y, z).
        max: Upper corner.
    """

    min: Point
    max: Point

    @classmethod
    def from_origin(cls, origin: Point, dims: Dims) -> "BoundingBox":
        w, h, d = dims
        return cls(origin, origin.offset(w, h, d))

    def intersects(self, other: "BoundingBox") -> bool:
        """
        True only for positive-volume intersection.

        Intervals are half-open, so boxes that share a face, edge or corner
        do not intersect.
        """
        return not (
            self.max.x <= other.min.x or other.max.x <= self.min.x or
            self.max.y <= other.min.y or other.max.y <= self.min.y or
            self.max.z <= other.min.z or other.max.z <= self.min.z
        )

    def contains(self, point: Point) -> bool:
        """Inclusive point containment."""
        return (
            self.min.x <= point.x <= self.max.x and
            self.min.y <= point.y <= self.max.y and
            self.min.z <= point.z <= self.max.z
        )

    def within(self, width: float, height: float, depth: float) -> bool:
        """True if the box lies inside [0, width] x [0, height] x [0, depth]."""
        return (
            self.min.x >= 0 and self.min.y >= 0 and self.min.z >= 0 and
            self.max.x <= width and self.max.y <= height and self.max.z <= depth
        )

    @property
    def dims(self) -> Dims:
        return (
            self.max.x - self.min.x,
            self.max.y - self.min.y,
            self.max.z - self.min.z,
        )

    @property
    def volume(self) -> float:
        w, h, d = self.dims
        return w * h * d


def boxes_overlap(
    x1: float, y1: float, z1: float, w1: float, h1: float, d1: float,
    other: BoundingBox,
) -> bool:
    """Separating-axis test between a raw (position, extent) box and *other*."""
    return not (
        x1 + w1 <= other.min.x or other.max.x <= x1 or
        y1 + h1 <= other.min.y or other.max.y <= y1 or
        z1 + d1 <= other.min.z or other.max.z <= z1
    )
