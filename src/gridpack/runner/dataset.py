"""
Dataset generation for packing benchmarks.

Generators:
    generate_test_boxes         — each dimension drawn from U[min_dim, max_dim]
    generate_realistic_packages — parcel archetypes with +/-20% jitter

Both return boxes largest-volume first, which is the order the packer
works best with.  Other orderings are available by name.
"""

from __future__ import annotations

import json
import random
from pathlib import Path
from typing import Callable, Dict, List

from gridpack.core.models import Box

# (width, height, depth) of common parcel types
PACKAGE_TYPES = [
    (30.0, 20.0, 10.0),    # small
    (40.0, 30.0, 20.0),    # medium
    (60.0, 40.0, 30.0),    # large
    (80.0, 60.0, 40.0),    # extra large
    (100.0, 20.0, 15.0),   # long
    (25.0, 25.0, 25.0),    # cube
]


def generate_test_boxes(
    count: int,
    min_dim: float = 5.0,
    max_dim: float = 20.0,
    seed: int = 42,
) -> List[Box]:
    """
    Generate *count* boxes with uniformly random dimensions.

    Args:
        count:   Number of boxes.
        min_dim: Minimum dimension (same for every axis).
        max_dim: Maximum dimension.
        seed:    Random seed; the same seed always yields the same boxes.

    Returns:
        Boxes sorted by volume, descending.
    """
    if min_dim <= 0 or max_dim < min_dim:
        raise ValueError(f"Invalid dimension range [{min_dim}, {max_dim}]")

    rng = random.Random(seed)
    boxes = [
        Box(id=i,
            width=rng.uniform(min_dim, max_dim),
            height=rng.uniform(min_dim, max_dim),
            depth=rng.uniform(min_dim, max_dim))
        for i in range(count)
    ]
    return volume_desc_order(boxes)


def generate_realistic_packages(count: int, seed: int = 42) -> List[Box]:
    """
    Generate *count* parcels drawn from PACKAGE_TYPES, each axis scaled by
    U[0.8, 1.2].

    Returns:
        Boxes sorted by volume, descending.
    """
    rng = random.Random(seed)
    boxes = []
    for i in range(count):
        w, h, d = rng.choice(PACKAGE_TYPES)
        boxes.append(Box(
            id=i,
            width=w * rng.uniform(0.8, 1.2),
            height=h * rng.uniform(0.8, 1.2),
            depth=d * rng.uniform(0.8, 1.2),
        ))
    return volume_desc_order(boxes)


# ─────────────────────────────────────────────────────────────────────────────
# Orderings
# ─────────────────────────────────────────────────────────────────────────────

def volume_desc_order(boxes: List[Box]) -> List[Box]:
    return sorted(boxes, key=lambda b: b.volume, reverse=True)


def weight_desc_order(boxes: List[Box]) -> List[Box]:
    return sorted(boxes, key=lambda b: b.weight, reverse=True)


def as_is_order(boxes: List[Box]) -> List[Box]:
    return list(boxes)


ORDERING_STRATEGIES: Dict[str, Callable[[List[Box]], List[Box]]] = {
    "volume_desc": volume_desc_order,
    "weight_desc": weight_desc_order,
    "as_is": as_is_order,
}


def get_ordering_strategy(name: str) -> Callable[[List[Box]], List[Box]]:
    """
    Raises:
        ValueError: If the strategy name is not recognised.
    """
    if name not in ORDERING_STRATEGIES:
        raise ValueError(
            f"Unknown ordering strategy: {name}. "
            f"Available: {list(ORDERING_STRATEGIES.keys())}"
        )
    return ORDERING_STRATEGIES[name]


# ─────────────────────────────────────────────────────────────────────────────
# Persistence
# ─────────────────────────────────────────────────────────────────────────────

def save_boxes(boxes: List[Box], path: Path | str) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w") as f:
        json.dump({"boxes": [b.to_dict() for b in boxes]}, f, indent=2)


def load_boxes(path: Path | str) -> List[Box]:
    with Path(path).open() as f:
        data = json.load(f)
    return [Box.from_dict(d) for d in data["boxes"]]


def fresh_copies(boxes: List[Box]) -> List[Box]:
    """Unplaced copies, so one dataset can be packed by several algorithms."""
    return [Box.from_dict(b.to_dict()) for b in boxes]
