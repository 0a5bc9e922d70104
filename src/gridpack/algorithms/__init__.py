"""Reference packing algorithms used for comparison."""

from .baseline import BaselineContainer, pack_baseline

__all__ = ["BaselineContainer", "pack_baseline"]
