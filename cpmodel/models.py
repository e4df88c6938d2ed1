"""
Model shapes, input points and the named fit records returned by the searches.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, NamedTuple, Tuple

import numpy as np

from .errors import InsufficientDataError
from .regression import RegressionOutputs
from .transforms import (
    BasisTransform,
    cooling_features,
    five_parameter_features,
    four_parameter_features,
    heating_features,
)


class Point(NamedTuple):
    x: float
    y: float


class ModelShape(Enum):
    THREE_PARAMETER_HEATING = "3-parameter-heating"
    THREE_PARAMETER_COOLING = "3-parameter-cooling"
    THREE_PARAMETER_HEATING_DIRECT = "3-parameter-heating-direct"
    THREE_PARAMETER_COOLING_DIRECT = "3-parameter-cooling-direct"
    FOUR_PARAMETER = "4-parameter"
    FIVE_PARAMETER = "5-parameter"

    @property
    def min_distinct_x(self) -> int:
        """Distinct x values needed before a search can run."""
        if self in (ModelShape.FOUR_PARAMETER, ModelShape.FIVE_PARAMETER):
            return 4
        return 3

    @property
    def is_direct(self) -> bool:
        return self in (
            ModelShape.THREE_PARAMETER_HEATING_DIRECT,
            ModelShape.THREE_PARAMETER_COOLING_DIRECT,
        )

    @property
    def basis(self) -> BasisTransform:
        return _SHAPE_BASIS[self]

    @classmethod
    def from_token(cls, token: "str | ModelShape") -> "ModelShape":
        """
        Resolve a selector: the canonical value ("4-parameter"), the enum name
        ("FOUR_PARAMETER") or a short CLI alias ("4", "3h", "3c_new", ...).
        """
        if isinstance(token, ModelShape):
            return token
        key = str(token).strip()
        if key in MODEL_SHAPE_ALIASES:
            return MODEL_SHAPE_ALIASES[key]
        for shape in cls:
            if key.lower() == shape.value or key.upper() == shape.name:
                return shape
        choices = ", ".join([s.value for s in cls] + list(MODEL_SHAPE_ALIASES))
        raise ValueError(f"Unknown model type {token!r}; expected one of: {choices}")


_SHAPE_BASIS: Dict[ModelShape, BasisTransform] = {
    ModelShape.THREE_PARAMETER_HEATING: heating_features,
    ModelShape.THREE_PARAMETER_COOLING: cooling_features,
    ModelShape.THREE_PARAMETER_HEATING_DIRECT: heating_features,
    ModelShape.THREE_PARAMETER_COOLING_DIRECT: cooling_features,
    ModelShape.FOUR_PARAMETER: four_parameter_features,
    ModelShape.FIVE_PARAMETER: five_parameter_features,
}

MODEL_SHAPE_ALIASES: Dict[str, ModelShape] = {
    "3h": ModelShape.THREE_PARAMETER_HEATING,
    "3c": ModelShape.THREE_PARAMETER_COOLING,
    "3h_new": ModelShape.THREE_PARAMETER_HEATING_DIRECT,
    "3c_new": ModelShape.THREE_PARAMETER_COOLING_DIRECT,
    "4": ModelShape.FOUR_PARAMETER,
    "5": ModelShape.FIVE_PARAMETER,
}


class _PiecewiseModel:
    """Prediction helpers shared by every fit record."""

    shape: ModelShape
    intercept: float

    @property
    def breakpoints(self) -> Tuple[float, ...]:
        raise NotImplementedError

    @property
    def slopes(self) -> Tuple[float, ...]:
        raise NotImplementedError

    def predict(self, x):
        """Model value at x (float for a scalar, ndarray for an array)."""
        features = self.shape.basis(*self.breakpoints, x)
        y = self.intercept + features @ np.asarray(self.slopes, dtype=float)
        if np.ndim(y) == 0:
            return float(y)
        return y

    def model_coordinates(self, x_min: float, x_max: float) -> List[Tuple[float, float]]:
        """Polyline vertices: floored x_min, each breakpoint, ceiled x_max."""
        xs = [float(math.floor(x_min)), *self.breakpoints, float(math.ceil(x_max))]
        return [(x, self.predict(x)) for x in xs]


@dataclass(frozen=True)
class ThreeParameterFit(_PiecewiseModel):
    shape: ModelShape
    intercept: float
    slope: float
    breakpoint: float
    outputs: RegressionOutputs
    n_candidates: int
    n_failed: int = 0

    @property
    def breakpoints(self) -> Tuple[float, ...]:
        return (self.breakpoint,)

    @property
    def slopes(self) -> Tuple[float, ...]:
        return (self.slope,)

    @property
    def cv(self) -> float:
        return self.outputs.cv

    @property
    def coefficients(self) -> Tuple[float, float, float]:
        return (self.intercept, self.slope, self.breakpoint)


@dataclass(frozen=True)
class FourParameterFit(_PiecewiseModel):
    intercept: float
    heating_slope: float
    cooling_slope: float
    breakpoint: float
    outputs: RegressionOutputs
    n_candidates: int
    n_failed: int = 0
    shape: ModelShape = ModelShape.FOUR_PARAMETER

    @property
    def breakpoints(self) -> Tuple[float, ...]:
        return (self.breakpoint,)

    @property
    def slopes(self) -> Tuple[float, ...]:
        return (self.heating_slope, self.cooling_slope)

    @property
    def cv(self) -> float:
        return self.outputs.cv

    @property
    def coefficients(self) -> Tuple[float, float, float, float]:
        return (self.intercept, self.heating_slope, self.cooling_slope, self.breakpoint)


@dataclass(frozen=True)
class FiveParameterFit(_PiecewiseModel):
    intercept: float
    heating_slope: float
    cooling_slope: float
    low_breakpoint: float
    high_breakpoint: float
    outputs: RegressionOutputs
    n_candidates: int
    n_failed: int = 0
    shape: ModelShape = ModelShape.FIVE_PARAMETER

    @property
    def breakpoints(self) -> Tuple[float, ...]:
        return (self.low_breakpoint, self.high_breakpoint)

    @property
    def slopes(self) -> Tuple[float, ...]:
        return (self.heating_slope, self.cooling_slope)

    @property
    def cv(self) -> float:
        return self.outputs.cv

    @property
    def coefficients(self) -> Tuple[float, float, float, float, float]:
        return (
            self.intercept,
            self.heating_slope,
            self.cooling_slope,
            self.low_breakpoint,
            self.high_breakpoint,
        )


@dataclass(frozen=True)
class ClosedFormFit(_PiecewiseModel):
    """
    Closed-form 3-parameter fit, ranked by SSE.

    The breakpoint is reported as the third coefficient (b0, b1, b2).
    """

    shape: ModelShape
    intercept: float
    slope: float
    breakpoint: float
    sse: float
    split_index: int
    n_splits: int
    n_degenerate: int = 0

    @property
    def breakpoints(self) -> Tuple[float, ...]:
        return (self.breakpoint,)

    @property
    def slopes(self) -> Tuple[float, ...]:
        return (self.slope,)

    @property
    def coefficients(self) -> Tuple[float, float, float]:
        return (self.intercept, self.slope, self.breakpoint)


def points_to_arrays(points, shape: ModelShape) -> Tuple[np.ndarray, np.ndarray]:
    """
    Convert (x, y) pairs to float arrays and check the shape can be fit.

    Raises:
        InsufficientDataError: If there are no points or fewer distinct x
            values than the shape requires
    """
    data = np.asarray(list(points), dtype=float)
    if data.size == 0:
        raise InsufficientDataError(shape.value, reason="no data points given")
    if data.ndim != 2 or data.shape[1] != 2:
        raise ValueError(f"Expected a sequence of (x, y) pairs, got shape {data.shape}")

    xs = data[:, 0]
    ys = data[:, 1]
    n_distinct = int(np.unique(xs).size)
    if n_distinct < shape.min_distinct_x:
        raise InsufficientDataError(
            shape.value, required=shape.min_distinct_x, given=n_distinct
        )
    return xs, ys
