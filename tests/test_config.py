import pytest

from cpmodel.config import BoundPolicy, SearchParams, get_default_params
from cpmodel.grid_search import fit_four_parameter, search_bounds
from cpmodel.models import ModelShape


def test_defaults_match_dataclass_defaults(monkeypatch):
    monkeypatch.delenv("CPMODEL_MAX_WORKERS", raising=False)
    assert get_default_params() == SearchParams()


def test_default_values():
    params = SearchParams()
    assert params.step == 0.125
    assert params.boundary_epsilon == 1e-10
    assert params.margin == 1e-4
    assert params.four_param_bounds is BoundPolicy.NUDGE
    assert params.five_param_bounds is BoundPolicy.MARGIN
    assert params.cooling_upper_rank == 2
    assert params.heating_min_sloped_points == 2
    assert params.cooling_min_sloped_points == 3


def test_max_workers_from_environment(monkeypatch):
    monkeypatch.setenv("CPMODEL_MAX_WORKERS", "3")
    params = get_default_params()
    assert params.max_workers == 3
    assert params.resolve_max_workers() == 3


def test_invalid_max_workers_environment(monkeypatch):
    monkeypatch.setenv("CPMODEL_MAX_WORKERS", "many")
    with pytest.raises(ValueError, match="CPMODEL_MAX_WORKERS"):
        get_default_params()


def test_resolved_workers_are_bounded():
    assert 1 <= SearchParams().resolve_max_workers() <= 8
    assert SearchParams(max_workers=1).resolve_max_workers() == 1


@pytest.mark.parametrize(
    "kwargs",
    [
        {"step": 0.0},
        {"step": -0.125},
        {"boundary_epsilon": -1.0},
        {"margin": -1e-4},
        {"cooling_upper_rank": 0},
        {"heating_min_sloped_points": 1},
        {"cooling_min_sloped_points": 1},
        {"degenerate_tolerance": -1.0},
        {"max_workers": 0},
    ],
)
def test_invalid_values_are_rejected(kwargs):
    with pytest.raises(ValueError):
        SearchParams(**kwargs)


def test_bound_policy_must_be_enum():
    with pytest.raises(TypeError):
        SearchParams(four_param_bounds="NUDGE")


def test_four_parameter_bound_policy_is_configurable():
    xs = [float(x) for x in range(11)]
    nudge = SearchParams(max_workers=1)
    margin = SearchParams(max_workers=1, four_param_bounds=BoundPolicy.MARGIN)

    assert search_bounds(ModelShape.FOUR_PARAMETER, xs, nudge) == (0.125, 9.875)
    assert search_bounds(ModelShape.FOUR_PARAMETER, xs, margin) == (1.0, 9.0)

    points = [(x, 20.0 + 1.5 * max(4.5 - x, 0.0) + 2.0 * max(x - 4.5, 0.0)) for x in xs]
    assert fit_four_parameter(points, margin).n_candidates == 65
    assert fit_four_parameter(points, nudge).n_candidates == 79


def test_five_parameter_bound_policy_is_configurable():
    xs = [float(x) for x in range(11)]
    margin = SearchParams()
    nudge = SearchParams(five_param_bounds=BoundPolicy.NUDGE)

    assert search_bounds(ModelShape.FIVE_PARAMETER, xs, margin) == (1.0, 9.0)
    assert search_bounds(ModelShape.FIVE_PARAMETER, xs, nudge) == (0.125, 9.875)


def test_cooling_upper_rank_is_configurable():
    xs = [0.0, 2.0, 4.0, 6.0, 8.0, 10.0]
    assert search_bounds(ModelShape.THREE_PARAMETER_COOLING, xs, SearchParams()) == (
        2.0,
        8.0,
    )
    assert search_bounds(
        ModelShape.THREE_PARAMETER_COOLING, xs, SearchParams(cooling_upper_rank=3)
    ) == (2.0, 6.0)
