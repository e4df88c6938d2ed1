"""
Grid search over candidate breakpoints.

Every grid shape runs the same reduction: build the design matrix for each
candidate with the shape's basis transform, fit it with the OLS engine, and
keep the candidate with the lowest CV. Candidates are evaluated on a bounded
thread pool; results come back in enumeration order and are reduced in one
pass afterwards, so exact ties always go to the first candidate enumerated.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from functools import partial
from typing import Callable, List, Optional, Sequence, Tuple, TypeVar

import numpy as np

from .candidates import (
    five_parameter_candidates,
    policy_bounds,
    single_breakpoint_candidates,
    three_parameter_cooling_bounds,
    three_parameter_heating_bounds,
)
from .config import SearchParams, get_default_params
from .errors import (
    FitCandidateError,
    InsufficientDataError,
    NoViableCandidateError,
    RegressionEngineError,
)
from .models import (
    FiveParameterFit,
    FourParameterFit,
    ModelShape,
    ThreeParameterFit,
    points_to_arrays,
)
from .regression import RegressionOutputs, multiple_linear_regression
from .transforms import design_matrix

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass(frozen=True)
class CandidateEvaluation:
    candidate: Tuple[float, ...]
    outputs: Optional[RegressionOutputs] = None
    error: Optional[FitCandidateError] = None


@dataclass(frozen=True)
class GridSearchResult:
    candidate: Tuple[float, ...]
    outputs: RegressionOutputs
    n_candidates: int
    failures: Tuple[FitCandidateError, ...] = ()


def map_in_order(
    fn: Callable[[T], R], items: Sequence[T], max_workers: int
) -> List[R]:
    """Apply fn to every item, concurrently when max_workers > 1, preserving order."""
    if max_workers <= 1 or len(items) <= 1:
        return [fn(item) for item in items]
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        return list(executor.map(fn, items))


def evaluate_candidate(
    shape: ModelShape, xs: np.ndarray, ys: np.ndarray, candidate: Tuple[float, ...]
) -> CandidateEvaluation:
    X = design_matrix(shape.basis, candidate, xs)
    try:
        outputs = multiple_linear_regression(ys, X)
    except RegressionEngineError as e:
        label = candidate[0] if len(candidate) == 1 else candidate
        error = FitCandidateError(shape.value, label, e)
        logger.debug("Skipping candidate: %s", error)
        return CandidateEvaluation(candidate=candidate, error=error)
    return CandidateEvaluation(candidate=candidate, outputs=outputs)


def grid_search(
    shape: ModelShape,
    xs: np.ndarray,
    ys: np.ndarray,
    candidates: Sequence[Tuple[float, ...]],
    params: SearchParams,
) -> GridSearchResult:
    """
    Evaluate every candidate and return the one with the minimum CV.

    Raises:
        InsufficientDataError: If the candidate domain is empty
        NoViableCandidateError: If every candidate failed in the engine
    """
    if not candidates:
        raise InsufficientDataError(
            shape.value, reason="the breakpoint search domain is empty"
        )

    evaluations = map_in_order(
        partial(evaluate_candidate, shape, xs, ys),
        candidates,
        params.resolve_max_workers(),
    )

    best: Optional[CandidateEvaluation] = None
    failures: List[FitCandidateError] = []
    for evaluation in evaluations:
        if evaluation.error is not None:
            failures.append(evaluation.error)
            continue
        # Strict comparison keeps the first-enumerated candidate on ties
        if best is None or evaluation.outputs.cv < best.outputs.cv:
            best = evaluation

    if best is None:
        raise NoViableCandidateError(shape.value, failures)

    if failures:
        logger.info(
            "%s: %d of %d candidates skipped after engine failures",
            shape.value,
            len(failures),
            len(candidates),
        )

    return GridSearchResult(
        candidate=best.candidate,
        outputs=best.outputs,
        n_candidates=len(candidates),
        failures=tuple(failures),
    )


def search_bounds(
    shape: ModelShape, xs: Sequence[float], params: SearchParams
) -> Tuple[float, float]:
    """Lower and upper breakpoint bounds for a grid shape."""
    if shape is ModelShape.THREE_PARAMETER_HEATING:
        return three_parameter_heating_bounds(xs)
    if shape is ModelShape.THREE_PARAMETER_COOLING:
        return three_parameter_cooling_bounds(xs, params)
    if shape is ModelShape.FOUR_PARAMETER:
        return policy_bounds(xs, params.four_param_bounds, params)
    if shape is ModelShape.FIVE_PARAMETER:
        return policy_bounds(xs, params.five_param_bounds, params)
    raise ValueError(f"{shape.value} is not a grid-search shape")


def _fit_three_parameter(
    shape: ModelShape, points, params: Optional[SearchParams]
) -> ThreeParameterFit:
    params = params or get_default_params()
    xs, ys = points_to_arrays(points, shape)
    lo, hi = search_bounds(shape, xs, params)
    candidates = single_breakpoint_candidates(lo, hi, params)

    result = grid_search(shape, xs, ys, candidates, params)
    intercept, slope = result.outputs.coeffs
    fit = ThreeParameterFit(
        shape=shape,
        intercept=intercept,
        slope=slope,
        breakpoint=result.candidate[0],
        outputs=result.outputs,
        n_candidates=result.n_candidates,
        n_failed=len(result.failures),
    )
    logger.debug(
        "%s: breakpoint=%g cv=%.6g over [%g, %g]",
        shape.value,
        fit.breakpoint,
        fit.cv,
        lo,
        hi,
    )
    return fit


def fit_three_parameter_heating(
    points, params: Optional[SearchParams] = None
) -> ThreeParameterFit:
    """y = intercept + slope * max(0, breakpoint - x)"""
    return _fit_three_parameter(ModelShape.THREE_PARAMETER_HEATING, points, params)


def fit_three_parameter_cooling(
    points, params: Optional[SearchParams] = None
) -> ThreeParameterFit:
    """y = intercept + slope * max(0, x - breakpoint)"""
    return _fit_three_parameter(ModelShape.THREE_PARAMETER_COOLING, points, params)


def fit_four_parameter(
    points, params: Optional[SearchParams] = None
) -> FourParameterFit:
    """y = intercept + heating_slope * max(0, cp - x) + cooling_slope * max(0, x - cp)"""
    params = params or get_default_params()
    shape = ModelShape.FOUR_PARAMETER
    xs, ys = points_to_arrays(points, shape)
    lo, hi = search_bounds(shape, xs, params)
    candidates = single_breakpoint_candidates(lo, hi, params)

    result = grid_search(shape, xs, ys, candidates, params)
    intercept, heating_slope, cooling_slope = result.outputs.coeffs
    fit = FourParameterFit(
        intercept=intercept,
        heating_slope=heating_slope,
        cooling_slope=cooling_slope,
        breakpoint=result.candidate[0],
        outputs=result.outputs,
        n_candidates=result.n_candidates,
        n_failed=len(result.failures),
    )
    logger.debug(
        "%s: breakpoint=%g cv=%.6g over [%g, %g]",
        shape.value,
        fit.breakpoint,
        fit.cv,
        lo,
        hi,
    )
    return fit


def fit_five_parameter(
    points, params: Optional[SearchParams] = None
) -> FiveParameterFit:
    """
    y = intercept + heating_slope * max(0, low - x) + cooling_slope * max(0, x - high)

    The (low, high) pairs come from a nested sweep, so the number of
    regressions grows quadratically with the x range divided by the step.
    """
    params = params or get_default_params()
    shape = ModelShape.FIVE_PARAMETER
    xs, ys = points_to_arrays(points, shape)
    lo, hi = search_bounds(shape, xs, params)
    candidates = five_parameter_candidates(lo, hi, params)

    result = grid_search(shape, xs, ys, candidates, params)
    intercept, heating_slope, cooling_slope = result.outputs.coeffs
    low_cp, high_cp = result.candidate
    fit = FiveParameterFit(
        intercept=intercept,
        heating_slope=heating_slope,
        cooling_slope=cooling_slope,
        low_breakpoint=low_cp,
        high_breakpoint=high_cp,
        outputs=result.outputs,
        n_candidates=result.n_candidates,
        n_failed=len(result.failures),
    )
    logger.debug(
        "%s: breakpoints=(%g, %g) cv=%.6g over %d pairs",
        shape.value,
        low_cp,
        high_cp,
        fit.cv,
        result.n_candidates,
    )
    return fit
