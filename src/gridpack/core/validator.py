"""
Packing validator — pure-function invariant checks over placed boxes.

Checks:
  1. Bounds  — every box lies inside [0, W] x [0, H] x [0, D]
  2. Overlap — no two boxes share positive volume
  3. Weight  — total weight does not exceed the budget

Each validate_* function returns True or raises a PlacementError subclass.
They are independent of the grid index, so they can cross-check it.
"""

from __future__ import annotations

import itertools
from typing import TYPE_CHECKING, Iterable, List, Sequence, Tuple

from gridpack.core.errors import OutOfBoundsError, OverlapError, WeightLimitError
from gridpack.core.models import Box

if TYPE_CHECKING:
    from gridpack.core.container import OptimizedContainer


def validate_within_bounds(box: Box, width: float, height: float, depth: float) -> bool:
    """
    Raises:
        OutOfBoundsError: the box pokes out of the container.
    """
    if not box.bounding_box().within(width, height, depth):
        bb = box.bounding_box()
        raise OutOfBoundsError(
            f"Box {box.id} spans {bb.min!r}..{bb.max!r}, outside container "
            f"({width:.1f}, {height:.1f}, {depth:.1f})"
        )
    return True


def find_overlaps(boxes: Sequence[Box]) -> List[Tuple[int, int]]:
    """Id pairs of boxes whose bounding boxes intersect."""
    overlaps = []
    for a, b in itertools.combinations(boxes, 2):
        if a.bounding_box().intersects(b.bounding_box()):
            overlaps.append((a.id, b.id))
    return overlaps


def validate_no_overlap(boxes: Sequence[Box]) -> bool:
    """
    Raises:
        OverlapError: naming the first intersecting pair.
    """
    pairs = find_overlaps(boxes)
    if pairs:
        a, b = pairs[0]
        raise OverlapError(f"Boxes {a} and {b} overlap ({len(pairs)} overlapping pair(s))")
    return True


def validate_weight(boxes: Iterable[Box], max_weight: float) -> bool:
    """
    Raises:
        WeightLimitError: total weight exceeds *max_weight*.
    """
    total = sum(box.weight for box in boxes)
    if total > max_weight:
        raise WeightLimitError(f"Total weight {total:.2f} exceeds limit {max_weight:.2f}")
    return True


def validate_container(container: "OptimizedContainer") -> bool:
    """Run every check over a container's placed boxes."""
    boxes = container.placed_boxes
    for box in boxes:
        validate_within_bounds(box, container.width, container.height, container.depth)
    validate_no_overlap(boxes)
    validate_weight(boxes, container.max_weight)
    return True
