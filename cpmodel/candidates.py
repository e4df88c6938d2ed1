"""
Candidate breakpoint enumeration and per-shape search domains.

Candidates are computed as start + i * step rather than by repeated addition,
so long ranges carry no accumulated drift and an exactly reached end point is
always treated the same way.
"""

import math
from typing import List, Sequence, Tuple

import numpy as np

from .config import BoundPolicy, SearchParams

# Endpoint tolerance, measured in steps
RANGE_EPSILON: float = 1e-9


def candidate_range(
    start: float, stop: float, step: float, inclusive: bool = True
) -> List[float]:
    """
    Return [start, start + step, start + 2*step, ...] up to stop.

    With inclusive=True values <= stop are kept, otherwise values < stop.
    An inverted range yields an empty list.

    >>> candidate_range(1, 2, 0.5)
    [1.0, 1.5, 2.0]
    >>> candidate_range(1, 1.4, 0.5)
    [1.0]
    """
    if not step > 0:
        raise ValueError(f"step must be positive, got {step}")

    span = (stop - start) / step
    if inclusive:
        count = math.floor(span + RANGE_EPSILON) + 1
    else:
        count = math.ceil(span - RANGE_EPSILON)
    return [float(start + i * step) for i in range(max(count, 0))]


def _sorted_xs(xs: Sequence[float]) -> np.ndarray:
    return np.sort(np.asarray(xs, dtype=float))


def three_parameter_heating_bounds(xs: Sequence[float]) -> Tuple[float, float]:
    """[ceil(2nd-smallest x), floor(max x)]"""
    sorted_xs = _sorted_xs(xs)
    return float(math.ceil(sorted_xs[1])), float(math.floor(sorted_xs[-1]))


def three_parameter_cooling_bounds(
    xs: Sequence[float], params: SearchParams
) -> Tuple[float, float]:
    """[ceil(2nd-smallest x), floor(x ranked cooling_upper_rank from the top)]"""
    sorted_xs = _sorted_xs(xs)
    if params.cooling_upper_rank > len(sorted_xs):
        raise ValueError(
            f"cooling_upper_rank={params.cooling_upper_rank} exceeds the "
            f"{len(sorted_xs)} data points given"
        )
    upper = sorted_xs[-params.cooling_upper_rank]
    return float(math.ceil(sorted_xs[1])), float(math.floor(upper))


def policy_bounds(
    xs: Sequence[float], policy: BoundPolicy, params: SearchParams
) -> Tuple[float, float]:
    min_x = float(np.min(xs))
    max_x = float(np.max(xs))

    if policy is BoundPolicy.NUDGE:
        lo = float(math.ceil(min_x))
        if abs(min_x - lo) < params.boundary_epsilon:
            lo += params.step
        hi = float(math.floor(max_x))
        if abs(max_x - hi) < params.boundary_epsilon:
            hi -= params.step
        return lo, hi

    if policy is BoundPolicy.MARGIN:
        lo = float(math.ceil(min_x + params.margin))
        hi = float(math.floor(max_x - params.margin))
        return lo, hi

    raise ValueError(f"Unsupported bound policy: {policy!r}")


def single_breakpoint_candidates(
    lo: float, hi: float, params: SearchParams
) -> List[Tuple[float]]:
    return [(cp,) for cp in candidate_range(lo, hi, params.step, inclusive=True)]


def five_parameter_candidates(
    lo: float, hi: float, params: SearchParams
) -> List[Tuple[float, float]]:
    """
    Nested (low, high) sweep.

    low runs over [lo, hi - step), and for each low, high runs over
    [low + step, hi). Both loops index into the same grid so that every
    high value is bit-identical to the corresponding low value.
    """
    grid = candidate_range(lo, hi, params.step, inclusive=False)
    pairs: List[Tuple[float, float]] = []
    for i, low in enumerate(grid[:-1]):
        for high in grid[i + 1 :]:
            pairs.append((low, high))
    return pairs
