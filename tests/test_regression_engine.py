import numpy as np
import pytest

from cpmodel.errors import RegressionEngineError
from cpmodel.regression import RegressionOutputs, multiple_linear_regression


def _make_noisy_line(n=30, seed=3):
    rng = np.random.default_rng(seed)
    x = np.linspace(0.0, 10.0, n)
    y = 5.0 + 0.8 * x + rng.normal(0.0, 0.3, size=n)
    return x, y


def test_exact_line_recovers_intercept_and_slope():
    x = np.arange(10.0)
    y = 2.0 + 3.0 * x

    out = multiple_linear_regression(y, x.reshape(-1, 1))

    assert isinstance(out, RegressionOutputs)
    assert len(out.coeffs) == 2
    assert out.coeffs[0] == pytest.approx(2.0)
    assert out.coeffs[1] == pytest.approx(3.0)
    assert out.rmse == pytest.approx(0.0, abs=1e-9)
    assert out.cv == pytest.approx(0.0, abs=1e-9)
    assert out.n_obs == 10


def test_without_constant_returns_one_coefficient_per_column():
    x = np.arange(1.0, 8.0)
    y = 3.0 * x

    out = multiple_linear_regression(y, x, add_constant=False)

    assert len(out.coeffs) == 1
    assert out.coeffs[0] == pytest.approx(3.0)


def test_cv_is_rmse_over_mean_response():
    x, y = _make_noisy_line()

    out = multiple_linear_regression(y, x.reshape(-1, 1))

    # Recompute independently with numpy least squares
    design = np.column_stack([np.ones_like(x), x])
    beta, *_ = np.linalg.lstsq(design, y, rcond=None)
    resid = y - design @ beta
    rmse = np.sqrt(np.sum(resid**2) / (len(y) - 2))

    np.testing.assert_allclose(out.coeffs, beta, rtol=1e-8)
    assert out.rmse == pytest.approx(rmse)
    assert out.cv == pytest.approx(rmse / np.mean(y))
    assert 0.0 < out.r_squared <= 1.0


def test_identical_inputs_give_identical_outputs():
    x, y = _make_noisy_line(seed=11)
    first = multiple_linear_regression(y, x.reshape(-1, 1))
    second = multiple_linear_regression(y.copy(), x.reshape(-1, 1).copy())
    assert first == second


def test_singular_design_is_rejected():
    y = np.array([1.0, 2.0, 3.0, 4.0])
    X = np.zeros((4, 1))
    with pytest.raises(RegressionEngineError, match="Singular"):
        multiple_linear_regression(y, X)


def test_zero_mean_response_scores_by_rmse():
    y = np.array([-3.0, -1.5, 1.0, 3.5])
    X = np.array([[0.0], [1.0], [2.0], [3.0]])

    out = multiple_linear_regression(y, X)

    assert np.mean(y) == 0.0
    assert out.rmse > 0.0
    assert out.cv == out.rmse


def test_no_residual_degrees_of_freedom_is_rejected():
    y = np.array([1.0, 2.0])
    X = np.array([[0.0], [1.0]])
    with pytest.raises(RegressionEngineError, match="degrees of freedom"):
        multiple_linear_regression(y, X)


def test_shape_mismatch_is_rejected():
    with pytest.raises(RegressionEngineError, match="Shape mismatch"):
        multiple_linear_regression(np.ones(5), np.ones((4, 1)))


def test_non_finite_inputs_are_rejected():
    y = np.array([1.0, np.nan, 3.0, 4.0])
    X = np.arange(4.0).reshape(-1, 1)
    with pytest.raises(RegressionEngineError, match="Non-finite"):
        multiple_linear_regression(y, X)
