import logging

from skill_layout.regions import CompositeRegion, RectRegion, RegionPart, TriangleRegion
from skill_layout.sampler import allocate_shares, sample_composite, sample_point, sample_points, sample_region_budget


class CountingRegion(RectRegion):
    """Rectangle that records how many proposals were drawn."""

    def __init__(self, *args):
        super().__init__(*args)
        self.proposals = 0

    def propose(self, rng):
        self.proposals += 1
        return super().propose(rng)


def test_allocate_shares_gives_remainder_to_flagged_part():
    assert allocate_shares(10, [0.22, 0.25, 0.18, 0.15, 0.0], 4) == [2, 3, 2, 2, 1]


def test_allocate_shares_trims_overshoot():
    assert allocate_shares(3, [0.5, 0.5, 0.0], 2) == [2, 1, 0]


def test_allocate_shares_always_sums_to_count():
    shares = [0.22, 0.25, 0.18, 0.15, 0.0]
    for count in range(0, 120):
        budgets = allocate_shares(count, shares, 4)
        assert sum(budgets) == count
        assert min(budgets) >= 0


def test_allocate_shares_handles_empty_and_zero():
    assert allocate_shares(0, [0.5, 0.5]) == [0, 0]
    assert allocate_shares(5, []) == []


def test_sample_points_stay_inside(rng):
    region = RectRegion(10, 10, 20, 30)

    points = sample_points(region, 50, rng)

    assert len(points) == 50
    assert all(region.contains(x, y) for x, y in points)


def test_zero_share_part_makes_no_draws(rng):
    idle = CountingRegion(100, 100, 110, 110)
    composite = CompositeRegion([
        RegionPart("busy", RectRegion(0, 0, 10, 10), share=0.0, remainder=True),
        RegionPart("idle", idle, share=0.0),
    ])

    result = sample_composite(composite, 12, rng)

    assert len(result) == 12
    assert {name for name, _, _ in result} == {"busy"}
    assert idle.proposals == 0


def test_composite_sampling_is_in_part_order(rng):
    composite = CompositeRegion([
        RegionPart("a", RectRegion(0, 0, 10, 10), share=0.5),
        RegionPart("b", RectRegion(20, 0, 30, 10), remainder=True),
    ])

    result = sample_composite(composite, 10, rng)

    names = [name for name, _, _ in result]
    assert names == ["a"] * 5 + ["b"] * 5
    assert all(composite.part(name).region.contains(x, y) for name, x, y in result)


def test_degenerate_region_exhausts_with_warning(rng, caplog):
    flat = TriangleRegion((0, 0), (5, 5), (10, 10))

    with caplog.at_level(logging.WARNING):
        points = sample_points(flat, 4, rng, max_attempts=20)

    assert points == []
    assert "Sampling exhausted" in caplog.text


def test_region_budget_caps_total_proposals(rng, caplog):
    region = CountingRegion(0, 0, 10, 10)
    # contains() never accepts, so every proposal is wasted
    region.contains = lambda x, y: False

    with caplog.at_level(logging.WARNING):
        points = sample_region_budget(region, 30, rng, total_attempts=250)

    assert points == []
    assert region.proposals == 250
    assert "budget" in caplog.text


def test_region_budget_stops_once_count_reached(rng):
    region = CountingRegion(0, 0, 10, 10)

    points = sample_region_budget(region, 7, rng, total_attempts=1000)

    assert len(points) == 7
    assert region.proposals == 7


def test_sample_point_respects_attempt_ceiling(rng):
    flat = TriangleRegion((0, 0), (1, 1), (2, 2))

    assert sample_point(flat, rng, max_attempts=5) is None
    x, y = sample_point(RectRegion(0, 0, 1, 1), rng)
    assert 0 <= x <= 1 and 0 <= y <= 1
