"""
OLS regression engine backed by statsmodels.

The changepoint searches only depend on the contract of
multiple_linear_regression(): given a response vector and a design matrix it
returns the fitted coefficients and a CV score where lower is strictly better.
"""

import logging
from dataclasses import dataclass
from typing import Tuple

import numpy as np
import statsmodels.api as sm

from .errors import RegressionEngineError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegressionOutputs:
    """
    Result of one OLS fit.

    coeffs are ordered [intercept, slope_1, ..., slope_k] when the engine added
    the constant. cv is the coefficient of variation of the RMSE
    (sqrt(SSR / df_resid) / abs(mean(y))) and is only used to rank candidates.
    For a response with mean exactly zero it is the RMSE.
    """

    coeffs: Tuple[float, ...]
    cv: float
    r_squared: float
    adj_r_squared: float
    rmse: float
    n_obs: int


def multiple_linear_regression(y, X, add_constant: bool = True) -> RegressionOutputs:
    """
    Fit y ~ X by ordinary least squares.

    Args:
        y: Response vector of length n
        X: Design matrix of shape (n, k), without a constant column
        add_constant: Prepend a constant column (statsmodels has_constant="add")

    Returns:
        RegressionOutputs with k + 1 coefficients (k when add_constant=False)

    Raises:
        RegressionEngineError: On mismatched shapes, a rank-deficient design,
            no residual degrees of freedom or a non-finite score
    """
    y = np.asarray(y, dtype=float)
    X = np.asarray(X, dtype=float)
    if X.ndim == 1:
        X = X.reshape(-1, 1)

    if y.ndim != 1 or X.ndim != 2 or X.shape[0] != y.shape[0]:
        raise RegressionEngineError(
            f"Shape mismatch: y {y.shape} vs design {X.shape}"
        )
    if not (np.isfinite(y).all() and np.isfinite(X).all()):
        raise RegressionEngineError("Non-finite values in regression inputs")

    exog = sm.add_constant(X, has_constant="add") if add_constant else X

    n_obs, n_params = exog.shape
    rank = int(np.linalg.matrix_rank(exog))
    if rank < n_params:
        raise RegressionEngineError(
            f"Singular design matrix (rank {rank} < {n_params} columns)"
        )
    if n_obs <= n_params:
        raise RegressionEngineError(
            f"No residual degrees of freedom ({n_obs} observations, {n_params} parameters)"
        )

    res = sm.OLS(y, exog).fit()

    rmse = float(np.sqrt(res.mse_resid))
    mean_y = float(np.mean(y))
    # Candidates share y, so the RMSE ranks them the same way
    cv = rmse / abs(mean_y) if mean_y != 0.0 else rmse
    if not np.isfinite(cv):
        raise RegressionEngineError(f"Non-finite CV score ({cv})")

    return RegressionOutputs(
        coeffs=tuple(float(c) for c in res.params),
        cv=float(cv),
        r_squared=float(res.rsquared),
        adj_r_squared=float(res.rsquared_adj),
        rmse=rmse,
        n_obs=int(n_obs),
    )
