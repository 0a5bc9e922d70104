"""Shared fixtures for the gridpack test suite."""

import os
import sys

import pytest

# Allow running the suite from a plain checkout (src/ layout)
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from gridpack.core.container import OptimizedContainer
from gridpack.core.geometry import Point
from gridpack.core.grid_index import GridIndex
from gridpack.core.models import Box


# ---------------------------------------------------------------------------
# Containers
# ---------------------------------------------------------------------------

@pytest.fixture
def container():
    """50 x 40 x 30 container with the default (1-unit) grid cells."""
    return OptimizedContainer(50, 40, 30)


@pytest.fixture
def coarse_container():
    """50 x 40 x 30 container sized for boxes no smaller than 5 units."""
    return OptimizedContainer(50, 40, 30, min_box_size=5.0)


@pytest.fixture
def grid():
    """10 x 10 x 10 grid with unit cells."""
    return GridIndex(10, 10, 10, min_box_size=2.0)


# ---------------------------------------------------------------------------
# Boxes
# ---------------------------------------------------------------------------

@pytest.fixture
def reference_boxes():
    """The five-box set used to cross-check pruned and brute-force search."""
    dims = [(10, 8, 6), (15, 12, 10), (20, 15, 12), (8, 8, 8), (25, 5, 8)]
    return [Box(id=i, width=w, height=h, depth=d) for i, (w, h, d) in enumerate(dims)]


@pytest.fixture
def giant_box():
    """Longer than every container axis in every orientation."""
    return Box(id=99, width=200, height=5, depth=5)


@pytest.fixture
def make_placed():
    """Factory for boxes already positioned, as a container would leave them."""
    def _make(box_id, x, y, z, w, h, d, weight=1.0):
        box = Box(id=box_id, width=w, height=h, depth=d, weight=weight)
        box.position = Point(x, y, z)
        box.placed = True
        return box
    return _make
