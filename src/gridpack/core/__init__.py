"""Core packing primitives: geometry, grid index, placement engine."""
