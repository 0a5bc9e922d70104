"""
Unit and integration tests for the optimized container.

Run with:
    python -m pytest tests/test_container.py -v

Tests cover:
- First placements land at the origin, later ones flush against neighbours
- Packing invariants (bounds, no overlap, weight) after every placement
- Oversized and overweight boxes are rejected without side effects
- Pruned search agrees with the brute-force reference
- Determinism
- Removal, reset and diagnostics
- Operation counters: pruned search is capped, brute force is not
"""

import math

import pytest

from gridpack.core.container import OptimizedContainer, SearchCounters
from gridpack.core.errors import InvalidDimensionsError
from gridpack.core.geometry import ORIGIN, Point
from gridpack.core.models import Box
from gridpack.core.validator import validate_container
from gridpack.runner.dataset import fresh_copies, generate_test_boxes


def snapshot(container):
    """Observable state that a rejected placement must leave untouched."""
    return (
        container.placed_box_count,
        container.current_weight,
        container.utilization,
        container.grid.get_statistics(),
        container.candidate_pool_size,
    )


# ---------------------------------------------------------------------------
# 1. Construction
# ---------------------------------------------------------------------------

class TestConstruction:
    @pytest.mark.parametrize("kwargs", [
        {"width": 0, "height": 10, "depth": 10},
        {"width": 10, "height": -5, "depth": 10},
        {"width": 10, "height": 10, "depth": 10, "max_weight": 0},
        {"width": 10, "height": 10, "depth": 10, "max_candidates": 0},
    ])
    def test_invalid_arguments(self, kwargs):
        with pytest.raises(InvalidDimensionsError):
            OptimizedContainer(**kwargs)

    def test_default_min_box_size(self):
        c = OptimizedContainer(100, 80, 60)
        assert c.min_box_size == pytest.approx(60 / 50)
        assert c.grid.cell_size == (1.0, 1.0, 1.0)

    def test_explicit_min_box_size_sets_cells(self, coarse_container):
        assert coarse_container.grid.cell_size == (2.5, 2.5, 2.5)

    def test_starts_empty(self, container):
        assert container.placed_box_count == 0
        assert container.placed_boxes == []
        assert container.utilization == 0.0
        assert container.current_weight == 0.0
        assert math.isinf(container.max_weight)
        assert container.candidate_pool_size == 1
        assert container.volume == 50 * 40 * 30


# ---------------------------------------------------------------------------
# 2. Basic placement
# ---------------------------------------------------------------------------

class TestPlacement:
    def test_first_box_at_origin(self, container):
        box = Box(1, 10, 8, 6, weight=2.0)
        assert container.place_box(box)
        assert box.placed
        assert box.position == ORIGIN
        assert box.orientation == 0
        assert container.placed_box_count == 1
        assert container.current_weight == 2.0
        assert container.utilization == pytest.approx(480 / 60000)

    def test_second_box_flush_against_first(self, container):
        container.place_box(Box(1, 10, 8, 6))
        second = Box(2, 10, 8, 6)
        assert container.place_box(second)
        assert second.position == Point(10, 0, 0), (
            f"Expected the second box beside the first on the floor, got {second.position!r}"
        )

    def test_falls_back_to_later_orientation(self):
        c = OptimizedContainer(10, 10, 30)
        box = Box(1, 30, 5, 5)
        assert c.place_box(box)
        assert box.orientation == 3
        assert box.dims == (5, 5, 30)

    def test_exact_fit(self):
        c = OptimizedContainer(10, 10, 10)
        box = Box(1, 10, 10, 10)
        assert c.place_box(box)
        assert c.utilization == pytest.approx(1.0)
        assert not c.place_box(Box(2, 1, 1, 1)), "A full container must reject further boxes"

    def test_candidate_pool_grows_by_three(self, container):
        container.place_box(Box(1, 10, 8, 6))
        assert container.candidate_pool_size == 4

    def test_placed_boxes_is_a_copy(self, container):
        container.place_box(Box(1, 10, 8, 6))
        container.placed_boxes.clear()
        assert container.placed_box_count == 1

    def test_is_placed(self, container):
        box = Box(1, 10, 8, 6)
        assert not container.is_placed(box)
        container.place_box(box)
        assert container.is_placed(box)


# ---------------------------------------------------------------------------
# 3. Rejections leave no trace
# ---------------------------------------------------------------------------

class TestRejection:
    def test_oversized_box_rejected(self, container, giant_box):
        before = snapshot(container)
        assert not container.place_box(giant_box)
        assert snapshot(container) == before
        assert not giant_box.placed
        assert giant_box.position == ORIGIN

    def test_oversized_box_rejected_after_packing(self, container, reference_boxes, giant_box):
        for box in reference_boxes:
            container.place_box(box)
        before = snapshot(container)
        assert not container.place_box(giant_box)
        assert snapshot(container) == before

    def test_weight_limit(self):
        c = OptimizedContainer(50, 40, 30, max_weight=10.0)
        assert c.place_box(Box(1, 5, 5, 5, weight=6.0))
        before = snapshot(c)
        heavy = Box(2, 5, 5, 5, weight=5.0)
        assert not c.place_box(heavy)
        assert snapshot(c) == before
        assert not heavy.placed
        assert c.place_box(Box(3, 5, 5, 5, weight=4.0)), "Exactly reaching the limit is allowed"
        assert c.current_weight == pytest.approx(10.0)

    def test_already_placed_box_rejected(self, container, caplog):
        box = Box(1, 10, 8, 6)
        container.place_box(box)
        before = snapshot(container)
        with caplog.at_level("WARNING", logger="gridpack.core.container"):
            assert not container.place_box(box)
        assert snapshot(container) == before
        assert "already placed" in caplog.text

    @pytest.mark.parametrize("method", ["place_box", "place_box_brute_force"])
    def test_box_placed_elsewhere_rejected(self, method, caplog):
        first = OptimizedContainer(50, 40, 30)
        first.place_box(Box(0, 10, 10, 10))
        box = Box(1, 10, 10, 10)
        assert first.place_box(box)
        assert box.position == Point(10, 0, 0)
        first_before = snapshot(first)

        second = OptimizedContainer(50, 40, 30)
        second_before = snapshot(second)
        with caplog.at_level("WARNING", logger="gridpack.core.container"):
            assert not getattr(second, method)(box), (
                "A box placed in one container must not be accepted by another"
            )
        assert "another container" in caplog.text
        assert snapshot(second) == second_before
        assert snapshot(first) == first_before
        assert box.placed
        assert box.position == Point(10, 0, 0), "Rejected placement moved the box"
        assert validate_container(first)

    def test_box_removed_elsewhere_can_move(self):
        first = OptimizedContainer(50, 40, 30)
        second = OptimizedContainer(50, 40, 30)
        box = Box(1, 10, 10, 10)
        first.place_box(box)
        first.remove_box(box)
        assert second.place_box(box)
        assert second.is_placed(box)
        assert not first.is_placed(box)

    def test_brute_force_rejects_oversized(self, container, giant_box):
        before = snapshot(container)
        assert not container.place_box_brute_force(giant_box)
        assert snapshot(container) == before


# ---------------------------------------------------------------------------
# 4. Invariants over a real sequence
# ---------------------------------------------------------------------------

class TestInvariants:
    def test_invariants_after_every_placement(self):
        c = OptimizedContainer(100, 80, 60, max_weight=150.0, min_box_size=5.0)
        boxes = generate_test_boxes(60, seed=7)
        for i, box in enumerate(boxes):
            box.weight = 1.0 + (i % 5)
            c.place_box(box)
            assert validate_container(c)
            assert c.current_weight <= c.max_weight

    def test_cached_volume_matches_sum(self, coarse_container):
        for box in generate_test_boxes(30, seed=3):
            coarse_container.place_box(box)
        total = sum(b.volume for b in coarse_container.placed_boxes)
        assert coarse_container.placed_volume == pytest.approx(total)
        assert coarse_container.utilization == pytest.approx(total / coarse_container.volume)

    def test_weight_utilization(self):
        unbounded = OptimizedContainer(10, 10, 10)
        unbounded.place_box(Box(1, 2, 2, 2, weight=5.0))
        assert unbounded.weight_utilization == 0.0

        bounded = OptimizedContainer(10, 10, 10, max_weight=10.0)
        bounded.place_box(Box(1, 2, 2, 2, weight=5.0))
        assert bounded.weight_utilization == pytest.approx(0.5)


# ---------------------------------------------------------------------------
# 5. Pruned search vs brute-force reference
# ---------------------------------------------------------------------------

class TestBruteForceAgreement:
    @pytest.mark.parametrize("kwargs", [{}, {"min_box_size": 5.0}], ids=["default", "coarse"])
    def test_reference_set_same_count(self, reference_boxes, kwargs):
        pruned = OptimizedContainer(50, 40, 30, **kwargs)
        brute = OptimizedContainer(50, 40, 30, **kwargs)

        pruned_count = sum(1 for b in fresh_copies(reference_boxes) if pruned.place_box(b))
        brute_count = sum(
            1 for b in fresh_copies(reference_boxes) if brute.place_box_brute_force(b))

        assert pruned_count == brute_count == 5, (
            f"pruned placed {pruned_count}, brute force placed {brute_count}"
        )
        assert validate_container(pruned)
        assert validate_container(brute)

    def test_brute_force_scans_lattice_in_zyx_order(self, container):
        container.place_box_brute_force(Box(1, 10, 8, 6))
        second = Box(2, 10, 8, 6)
        assert container.place_box_brute_force(second)
        assert second.position == Point(10, 0, 0)

    def test_brute_force_positions_on_cell_lattice(self, coarse_container, reference_boxes):
        step = coarse_container.grid.cell_size[0]
        for box in reference_boxes:
            coarse_container.place_box_brute_force(box)
        for box in coarse_container.placed_boxes:
            for coord in box.position.as_tuple():
                assert (coord / step) == pytest.approx(round(coord / step))


# ---------------------------------------------------------------------------
# 6. Determinism
# ---------------------------------------------------------------------------

class TestDeterminism:
    def test_same_input_same_layout(self):
        layouts = []
        for _ in range(2):
            c = OptimizedContainer(100, 80, 60, min_box_size=5.0)
            for box in generate_test_boxes(40, seed=11):
                c.place_box(box)
            layouts.append([(b.id, b.position, b.orientation) for b in c.placed_boxes])
        assert layouts[0] == layouts[1], "Identical input produced different layouts"


# ---------------------------------------------------------------------------
# 7. Removal and reset
# ---------------------------------------------------------------------------

class TestRemoval:
    def test_remove_unplaced_returns_false(self, container, caplog):
        before = snapshot(container)
        with caplog.at_level("WARNING", logger="gridpack.core.container"):
            assert not container.remove_box(Box(1, 1, 1, 1))
        assert snapshot(container) == before
        assert "not placed in this container" in caplog.text

    def test_remove_from_wrong_container_warns(self, caplog):
        first = OptimizedContainer(10, 10, 10)
        second = OptimizedContainer(10, 10, 10)
        box = Box(1, 2, 2, 2)
        first.place_box(box)
        with caplog.at_level("WARNING", logger="gridpack.core.container"):
            assert not second.remove_box(box)
        assert "Box 1 is not placed" in caplog.text
        assert box.placed
        assert first.is_placed(box)

    def test_place_then_remove_restores_grid(self, container):
        container.place_box(Box(1, 10, 8, 6))
        stats_before = container.grid.get_statistics()

        box = Box(2, 15, 12, 10, weight=3.0)
        container.place_box(box)
        assert container.remove_box(box)

        assert container.grid.get_statistics() == stats_before
        assert container.placed_box_count == 1
        assert container.current_weight == pytest.approx(1.0)
        assert container.utilization == pytest.approx(480 / 60000)
        assert not box.placed

    def test_position_kept_after_removal(self, container):
        container.place_box(Box(1, 10, 8, 6))
        box = Box(2, 10, 8, 6)
        container.place_box(box)
        container.remove_box(box)
        assert box.position == Point(10, 0, 0)

    def test_removed_box_can_be_placed_again(self, container):
        box = Box(1, 10, 8, 6)
        container.place_box(box)
        container.remove_box(box)
        assert not container.remove_box(box), "Second removal must be a no-op"
        assert container.place_box(box)
        assert box.position == ORIGIN

    def test_remove_via_equal_box(self, container):
        box = Box(1, 10, 8, 6)
        container.place_box(box)
        assert container.remove_box(Box(1, 10, 8, 6))
        assert not box.placed

    def test_reset(self, container, reference_boxes):
        for box in reference_boxes:
            container.place_box(box)
        container.reset()
        assert container.placed_box_count == 0
        assert container.current_weight == 0.0
        assert container.placed_volume == 0.0
        assert container.candidate_pool_size == 1
        assert container.counters == SearchCounters()
        assert container.grid.get_statistics().occupied_cells == 0
        assert all(not b.placed for b in reference_boxes)


# ---------------------------------------------------------------------------
# 8. Operation counters
# ---------------------------------------------------------------------------

class TestCounters:
    def test_pruned_evaluation_is_capped(self):
        c = OptimizedContainer(100, 80, 60, min_box_size=5.0, max_candidates=5)
        for box in generate_test_boxes(40, seed=5):
            before = c.counters.candidates_evaluated
            c.place_box(box)
            per_call = c.counters.candidates_evaluated - before
            assert per_call <= 6 * 5, f"Evaluated {per_call} candidates in one call"

    def test_pruned_never_exceeds_default_cap(self, coarse_container):
        for box in generate_test_boxes(30, seed=9):
            before = coarse_container.counters.can_place_calls
            coarse_container.place_box(box)
            assert coarse_container.counters.can_place_calls - before <= 6 * 1000

    def test_brute_force_cost_grows_with_occupancy(self):
        c = OptimizedContainer(50, 40, 30, min_box_size=5.0)
        costs = []
        for box in generate_test_boxes(8, seed=1):
            before = c.counters.can_place_calls
            c.place_box_brute_force(box)
            costs.append(c.counters.can_place_calls - before)
        assert costs[0] == 1, "First box in an empty container should fit at the first lattice point"
        assert max(costs[1:]) > costs[0]

    def test_attempts_counted(self, container, giant_box):
        container.place_box(Box(1, 1, 1, 1))
        container.place_box(giant_box)
        assert container.counters.attempts == 2
        assert container.counters.to_dict()["attempts"] == 2


# ---------------------------------------------------------------------------
# 9. Diagnostics
# ---------------------------------------------------------------------------

class TestDiagnostics:
    def test_performance_stats(self, container):
        container.place_box(Box(1, 10, 8, 6))
        stats = container.get_performance_stats()
        lines = stats.splitlines()
        assert len(lines) == 3
        assert lines[0].startswith("Container: OptimizedContainer(")
        assert lines[1].startswith("Grid: Grid[50x40x30]")
        assert lines[2] == "Candidates: 4"

    def test_repr(self, container):
        assert "boxes=0" in repr(container)

    def test_sorted_candidates_order(self, container):
        container.place_box(Box(1, 10, 8, 6))
        cands = container.sorted_candidates(480.0, (10, 8, 6))
        scores = [z + 0.8 * y + 0.6 * x for x, y, z in cands.tolist()]
        assert all(a <= b + 1e-9 for a, b in zip(scores, scores[1:])), (
            "Candidates must be ordered by ascending score"
        )
        assert len({tuple(row) for row in cands.tolist()}) == len(cands)

    def test_no_anchor_inside_placed_box(self, container, reference_boxes):
        for box in reference_boxes:
            container.place_box(box)
        cands = container.sorted_candidates(480.0, (10, 8, 6))
        assert len(cands)
        for box in container.placed_boxes:
            bb = box.bounding_box()
            for x, y, z in cands.tolist():
                assert not (bb.min.x <= x < bb.max.x and
                            bb.min.y <= y < bb.max.y and
                            bb.min.z <= z < bb.max.z), (
                    f"Anchor ({x}, {y}, {z}) lies inside box {box.id}"
                )

    def test_origin_dropped_once_covered(self, container):
        container.place_box(Box(1, 10, 8, 6))
        cands = container.sorted_candidates(1.0, (1, 1, 1)).tolist()
        assert [0.0, 0.0, 0.0] not in cands
        assert [10.0, 0.0, 0.0] in cands
