"""Core data model: the packable Box."""

from __future__ import annotations

from dataclasses import dataclass, field

from gridpack.core.errors import InvalidDimensionsError
from gridpack.core.geometry import (
    NUM_ORIENTATIONS,
    ORIGIN,
    BoundingBox,
    Dims,
    Point,
    oriented_dims,
)


@dataclass(eq=False)
class Box:
    """
    A packable item.

    Width, height and depth are the original dimensions; the oriented
    extents follow from ``orientation`` through the orientation table.
    Two boxes are equal when their ids are equal.

    Attributes:
        id:          Unique identifier.
        width:       Original x extent.
        height:      Original y extent.
        depth:       Original z extent.
        weight:      Weight counted against the container budget.
        orientation: Index into ORIENTATIONS (0-5).
        position:    Minimum corner once placed.
        placed:      True while the box sits in a container.
    """

    id: int
    width: float
    height: float
    depth: float
    weight: float = 1.0
    orientation: int = 0
    position: Point = field(default=ORIGIN)
    placed: bool = False

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0 or self.depth <= 0:
            raise InvalidDimensionsError(
                f"Box {self.id}: dimensions must be positive, got "
                f"({self.width}, {self.height}, {self.depth})"
            )
        if self.weight < 0:
            raise InvalidDimensionsError(
                f"Box {self.id}: weight must be non-negative, got {self.weight}"
            )
        if not 0 <= self.orientation < NUM_ORIENTATIONS:
            raise InvalidDimensionsError(
                f"Box {self.id}: orientation must be in [0, {NUM_ORIENTATIONS - 1}], "
                f"got {self.orientation}"
            )

    # ── Identity ─────────────────────────────────────────────────────────

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Box):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    # ── Extents ──────────────────────────────────────────────────────────

    @property
    def volume(self) -> float:
        """Orientation-invariant volume."""
        return self.width * self.height * self.depth

    @property
    def dims(self) -> Dims:
        """Extents under the current orientation."""
        return oriented_dims(self.width, self.height, self.depth, self.orientation)

    def dims_for(self, orientation: int) -> Dims:
        return oriented_dims(self.width, self.height, self.depth, orientation)

    @property
    def current_width(self) -> float:
        return self.dims[0]

    @property
    def current_height(self) -> float:
        return self.dims[1]

    @property
    def current_depth(self) -> float:
        return self.dims[2]

    def bounding_box(self) -> BoundingBox:
        return BoundingBox.from_origin(self.position, self.dims)

    def overlaps(self, other: "Box") -> bool:
        """Exact overlap test; unplaced boxes never overlap anything."""
        if not (self.placed and other.placed):
            return False
        return self.bounding_box().intersects(other.bounding_box())

    # ── Copy / serialisation ─────────────────────────────────────────────

    def copy(self) -> "Box":
        return Box(
            id=self.id, width=self.width, height=self.height, depth=self.depth,
            weight=self.weight, orientation=self.orientation,
            position=self.position, placed=self.placed,
        )

    def to_dict(self) -> dict:
        return {"id": self.id, "width": self.width, "height": self.height,
                "depth": self.depth, "weight": self.weight}

    @classmethod
    def from_dict(cls, d: dict) -> "Box":
        return cls(id=d["id"], width=d["width"], height=d["height"],
                   depth=d["depth"], weight=d.get("weight", 1.0))

    def __repr__(self) -> str:
        return (
            f"Box(id={self.id}, dims=({self.width:.1f},{self.height:.1f},{self.depth:.1f}), "
            f"pos={self.position!r}, orient={self.orientation}, placed={self.placed})"
        )
