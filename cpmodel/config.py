import os
from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

DEFAULT_STEP: float = 0.125
MAX_DEFAULT_WORKERS: int = 8


class BoundPolicy(Enum):
    """
    How the 4- and 5-parameter searches turn the raw x range into search bounds.

    - NUDGE:  lo = ceil(min x), hi = floor(max x); a bound that lands within
              boundary_epsilon of the raw value is moved one step inward so no
              candidate sits on an end point.
    - MARGIN: lo = ceil(min x + margin), hi = floor(max x - margin).

    The 4-parameter search has always used NUDGE and the 5-parameter search
    MARGIN; both are configurable so either convention can be reproduced.
    """

    NUDGE = auto()
    MARGIN = auto()


@dataclass(frozen=True)
class SearchParams:
    step: float = DEFAULT_STEP
    # NUDGE tolerance against the raw min/max x
    boundary_epsilon: float = 1e-10
    # MARGIN offset applied before ceil/floor
    margin: float = 1e-4
    four_param_bounds: BoundPolicy = BoundPolicy.NUDGE
    five_param_bounds: BoundPolicy = BoundPolicy.MARGIN
    # 3-parameter cooling upper bound is floor(x sorted descending [rank - 1])
    cooling_upper_rank: int = 2
    # Closed-form split domains: minimum number of points on the sloped side.
    # Heating: m in [heating_min_sloped_points, n)
    # Cooling: m in [1, n - cooling_min_sloped_points + 1), i.e. 3 -> m < n - 2, 2 -> m < n - 1
    heating_min_sloped_points: int = 2
    cooling_min_sloped_points: int = 3
    # Relative tolerance for closed-form denominators
    degenerate_tolerance: float = 1e-12
    # 1 = sequential; None = resolved by resolve_max_workers()
    max_workers: Optional[int] = None

    def __post_init__(self) -> None:
        if not self.step > 0:
            raise ValueError(f"step must be positive, got {self.step}")
        if self.boundary_epsilon < 0:
            raise ValueError(
                f"boundary_epsilon must be non-negative, got {self.boundary_epsilon}"
            )
        if self.margin < 0:
            raise ValueError(f"margin must be non-negative, got {self.margin}")
        for name in ("four_param_bounds", "five_param_bounds"):
            if not isinstance(getattr(self, name), BoundPolicy):
                raise TypeError(f"{name} must be a BoundPolicy")
        if self.cooling_upper_rank < 1:
            raise ValueError(
                f"cooling_upper_rank must be >= 1, got {self.cooling_upper_rank}"
            )
        if self.heating_min_sloped_points < 2:
            raise ValueError(
                "heating_min_sloped_points must be >= 2, "
                f"got {self.heating_min_sloped_points}"
            )
        if self.cooling_min_sloped_points < 2:
            raise ValueError(
                "cooling_min_sloped_points must be >= 2, "
                f"got {self.cooling_min_sloped_points}"
            )
        if self.degenerate_tolerance < 0:
            raise ValueError(
                "degenerate_tolerance must be non-negative, "
                f"got {self.degenerate_tolerance}"
            )
        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")

    def resolve_max_workers(self) -> int:
        if self.max_workers is not None:
            return self.max_workers
        return max(1, min(MAX_DEFAULT_WORKERS, os.cpu_count() or 1))


def get_default_params() -> SearchParams:
    """
    Single point of authority for search defaults (library and CLI).

    CPMODEL_MAX_WORKERS, when set, overrides the worker count.
    """
    max_workers: Optional[int] = None
    env_workers = os.getenv("CPMODEL_MAX_WORKERS", "").strip()
    if env_workers:
        try:
            max_workers = int(env_workers)
        except ValueError:
            raise ValueError(
                f"CPMODEL_MAX_WORKERS must be an integer, got {env_workers!r}"
            ) from None

    return SearchParams(
        step=DEFAULT_STEP,
        boundary_epsilon=1e-10,
        margin=1e-4,
        four_param_bounds=BoundPolicy.NUDGE,
        five_param_bounds=BoundPolicy.MARGIN,
        cooling_upper_rank=2,
        heating_min_sloped_points=2,
        cooling_min_sloped_points=3,
        degenerate_tolerance=1e-12,
        max_workers=max_workers,
    )
