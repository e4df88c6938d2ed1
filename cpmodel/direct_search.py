"""
Closed-form 3-parameter search over split indices.

Points are sorted by x and, for every split index m, one side is treated as
flat (its mean is the intercept) and the other as a single ramp whose slope
and breakpoint follow from the two-segment least-squares identities over the
ramp side's sums. No regression engine is involved; splits are ranked by SSE.

Heating: the first m points form the ramp, the remaining points are flat.
Cooling: the first m points are flat, the remaining points form the ramp.
"""

import logging
from dataclasses import dataclass
from functools import partial
from typing import List, Optional, Tuple

import numpy as np

from .config import SearchParams, get_default_params
from .errors import DegenerateFitError, InsufficientDataError, NoViableCandidateError
from .grid_search import map_in_order
from .models import ClosedFormFit, ModelShape, points_to_arrays

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SplitEvaluation:
    split_index: int
    intercept: float
    slope: float
    breakpoint: float
    sse: float


def _is_heating(shape: ModelShape) -> bool:
    if shape is ModelShape.THREE_PARAMETER_HEATING_DIRECT:
        return True
    if shape is ModelShape.THREE_PARAMETER_COOLING_DIRECT:
        return False
    raise ValueError(f"{shape.value} is not a closed-form shape")


def split_indices(shape: ModelShape, n: int, params: SearchParams) -> range:
    """Split indices m evaluated for n sorted points."""
    if _is_heating(shape):
        return range(params.heating_min_sloped_points, n)
    return range(1, n - params.cooling_min_sloped_points + 1)


def _check_denominator(
    value: float, scale: float, tolerance: float, shape: ModelShape, m: int, what: str
) -> None:
    if not np.isfinite(value) or abs(value) <= tolerance * abs(scale):
        raise DegenerateFitError(shape.value, m, f"{what} denominator is {value!r}")


def evaluate_split(
    xs: np.ndarray,
    ys: np.ndarray,
    m: int,
    shape: ModelShape,
    tolerance: float = 1e-12,
) -> SplitEvaluation:
    """
    Closed-form (b0, b1, b2) and SSE for split index m.

    xs must be sorted ascending and ys ordered with it.

    Raises:
        DegenerateFitError: If the ramp side has a single distinct x value or
            no x/y covariance, or the coefficients come out non-finite
    """
    n = len(xs)
    sum_y = float(np.sum(ys))
    heating = _is_heating(shape)

    if heating:
        ramp_xs, ramp_ys, flat_ys = xs[:m], ys[:m], ys[m:]
    else:
        ramp_xs, ramp_ys, flat_ys = xs[m:], ys[m:], ys[:m]
    k = len(ramp_xs)

    b0 = float(np.mean(flat_ys))

    sx = float(np.sum(ramp_xs))
    sy = float(np.sum(ramp_ys))
    sxy = float(np.dot(ramp_xs, ramp_ys))
    sx2 = float(np.dot(ramp_xs, ramp_xs))

    slope_den = k * sx2 - sx * sx
    _check_denominator(slope_den, k * sx2, tolerance, shape, m, "slope")

    cross = k * sxy - sx * sy
    cp_den = (n - k) * cross
    _check_denominator(
        cp_den, (n - k) * (abs(k * sxy) + abs(sx * sy)), tolerance, shape, m, "breakpoint"
    )

    if heating:
        # The ramp feature is (b2 - x), so b1 carries the opposite sign of the
        # fitted x-slope.
        b1 = (sx * sy - k * sxy) / slope_den
        numerator = (
            n * sx * sxy
            - k * sx * sxy
            + k * sx2 * sum_y
            - sum_y * sx * sx
            - n * sx2 * sy
            + sy * sx * sx
        )
    else:
        b1 = cross / slope_den
        numerator = (
            (n - k) * sxy * sx + sx2 * (k * sum_y - n * sy) + sx * sx * (sy - sum_y)
        )
    b2 = numerator / cp_den

    if not (np.isfinite(b0) and np.isfinite(b1) and np.isfinite(b2)):
        raise DegenerateFitError(
            shape.value, m, f"non-finite coefficients ({b0}, {b1}, {b2})"
        )

    ramp = np.maximum(b2 - xs, 0.0) if heating else np.maximum(xs - b2, 0.0)
    residuals = ys - (b0 + b1 * ramp)
    sse = float(np.sum(residuals * residuals))

    return SplitEvaluation(
        split_index=m, intercept=b0, slope=float(b1), breakpoint=float(b2), sse=sse
    )


def _evaluate_or_skip(
    xs: np.ndarray, ys: np.ndarray, shape: ModelShape, tolerance: float, m: int
) -> Tuple[Optional[SplitEvaluation], Optional[DegenerateFitError]]:
    try:
        return evaluate_split(xs, ys, m, shape, tolerance), None
    except DegenerateFitError as e:
        logger.debug("Skipping split: %s", e)
        return None, e


def _fit_closed_form(
    shape: ModelShape, points, params: Optional[SearchParams]
) -> ClosedFormFit:
    params = params or get_default_params()
    xs, ys = points_to_arrays(points, shape)
    order = np.argsort(xs, kind="stable")
    xs, ys = xs[order], ys[order]

    splits = list(split_indices(shape, len(xs), params))
    if not splits:
        raise InsufficientDataError(
            shape.value, reason=f"no valid split index for {len(xs)} points"
        )

    results = map_in_order(
        partial(_evaluate_or_skip, xs, ys, shape, params.degenerate_tolerance),
        splits,
        params.resolve_max_workers(),
    )

    best: Optional[SplitEvaluation] = None
    degenerate: List[DegenerateFitError] = []
    for evaluation, error in results:
        if error is not None:
            degenerate.append(error)
            continue
        # Strict comparison keeps the lowest split index on ties
        if best is None or evaluation.sse < best.sse:
            best = evaluation

    if best is None:
        raise NoViableCandidateError(shape.value, degenerate)

    if degenerate:
        logger.info(
            "%s: %d of %d splits skipped as degenerate",
            shape.value,
            len(degenerate),
            len(splits),
        )

    return ClosedFormFit(
        shape=shape,
        intercept=best.intercept,
        slope=best.slope,
        breakpoint=best.breakpoint,
        sse=best.sse,
        split_index=best.split_index,
        n_splits=len(splits),
        n_degenerate=len(degenerate),
    )


def fit_three_parameter_heating_direct(
    points, params: Optional[SearchParams] = None
) -> ClosedFormFit:
    return _fit_closed_form(ModelShape.THREE_PARAMETER_HEATING_DIRECT, points, params)


def fit_three_parameter_cooling_direct(
    points, params: Optional[SearchParams] = None
) -> ClosedFormFit:
    return _fit_closed_form(ModelShape.THREE_PARAMETER_COOLING_DIRECT, points, params)
