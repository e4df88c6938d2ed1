import pytest

from cpmodel.candidates import (
    candidate_range,
    five_parameter_candidates,
    policy_bounds,
    single_breakpoint_candidates,
    three_parameter_cooling_bounds,
    three_parameter_heating_bounds,
)
from cpmodel.config import BoundPolicy, SearchParams


def test_candidate_range_includes_exact_endpoint():
    assert candidate_range(1, 2, 0.5) == [1.0, 1.5, 2.0]


def test_candidate_range_stops_before_overshoot():
    assert candidate_range(1, 1.4, 0.5) == [1.0]


def test_candidate_range_exclusive_drops_endpoint():
    assert candidate_range(1, 2, 0.5, inclusive=False) == [1.0, 1.5]
    assert candidate_range(1, 1.2, 0.5, inclusive=False) == [1.0]


def test_candidate_range_inverted_or_degenerate():
    assert candidate_range(3, 2, 0.125) == []
    assert candidate_range(2, 2, 0.125) == [2.0]
    assert candidate_range(2, 2, 0.125, inclusive=False) == []


def test_candidate_range_has_no_drift_on_long_ranges():
    # Repeated addition of 0.1 misses the end point; index scaling does not
    values = candidate_range(0, 100, 0.1)
    assert len(values) == 1001
    assert values[-1] == pytest.approx(100.0)
    assert values[500] == pytest.approx(50.0)


def test_candidate_range_rejects_non_positive_step():
    with pytest.raises(ValueError):
        candidate_range(0, 1, 0)
    with pytest.raises(ValueError):
        candidate_range(0, 1, -0.5)


def test_default_step_grid_is_exact():
    values = candidate_range(10, 12, 0.125)
    assert len(values) == 17
    assert values == [10 + i * 0.125 for i in range(17)]


def test_three_parameter_bounds_use_sorted_ranks():
    xs = [3.2, 1.5, 7.9, 5.0, 6.4]
    # sorted: 1.5, 3.2, 5.0, 6.4, 7.9
    assert three_parameter_heating_bounds(xs) == (4.0, 7.0)
    assert three_parameter_cooling_bounds(xs, SearchParams()) == (4.0, 6.0)
    assert three_parameter_cooling_bounds(
        xs, SearchParams(cooling_upper_rank=3)
    ) == (4.0, 5.0)


def test_nudge_policy_moves_integer_bounds_inward():
    params = SearchParams()
    assert policy_bounds([0.0, 4.0, 10.0], BoundPolicy.NUDGE, params) == (
        0.125,
        9.875,
    )
    assert policy_bounds([0.5, 9.5], BoundPolicy.NUDGE, params) == (1.0, 9.0)


def test_margin_policy_offsets_before_rounding():
    params = SearchParams()
    assert policy_bounds([0.0, 10.0], BoundPolicy.MARGIN, params) == (1.0, 9.0)
    assert policy_bounds([0.5, 9.5], BoundPolicy.MARGIN, params) == (1.0, 9.0)


def test_single_breakpoint_candidates_wraps_values():
    params = SearchParams(step=0.5)
    assert single_breakpoint_candidates(1.0, 2.0, params) == [(1.0,), (1.5,), (2.0,)]


def test_five_parameter_candidates_nested_order():
    params = SearchParams(step=0.25)
    pairs = five_parameter_candidates(1.0, 2.0, params)

    assert pairs == [
        (1.0, 1.25),
        (1.0, 1.5),
        (1.0, 1.75),
        (1.25, 1.5),
        (1.25, 1.75),
        (1.5, 1.75),
    ]
    for low, high in pairs:
        assert low < 2.0 - 0.25
        assert low + 0.25 <= high < 2.0


def test_five_parameter_candidates_empty_when_range_too_short():
    params = SearchParams(step=0.5)
    assert five_parameter_candidates(1.0, 1.5, params) == []
