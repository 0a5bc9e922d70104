"""
Exception hierarchy for gridpack.

"Box does not fit" is never an exception: placement calls return False.
The classes here cover caller contract violations (bad construction
arguments, grid bookkeeping misuse) and validator findings on a packed state.
"""


class GridpackError(Exception):
    """Base class for all gridpack errors."""


class InvalidDimensionsError(GridpackError, ValueError):
    """Non-positive extent, weight limit or cell size at construction time."""


class GridContractError(GridpackError):
    """A GridIndex was asked to register a known id or drop an unknown one."""


# ─────────────────────────────────────────────────────────────────────────────
# Validation errors
# ─────────────────────────────────────────────────────────────────────────────

class PlacementError(GridpackError):
    """Base class for invariant violations found in a packed container."""


class OutOfBoundsError(PlacementError):
    """Box extends outside the container boundary."""


class OverlapError(PlacementError):
    """Two placed boxes share positive volume."""


class WeightLimitError(PlacementError):
    """Total placed weight exceeds the container limit."""
