"""Changepoint (piecewise-linear) regression models for x/y data."""

from .config import BoundPolicy, SearchParams, get_default_params
from .direct_search import (
    fit_three_parameter_cooling_direct,
    fit_three_parameter_heating_direct,
)
from .errors import (
    ChangepointError,
    DegenerateFitError,
    FitCandidateError,
    InsufficientDataError,
    NoViableCandidateError,
    RegressionEngineError,
)
from .grid_search import (
    fit_five_parameter,
    fit_four_parameter,
    fit_three_parameter_cooling,
    fit_three_parameter_heating,
)
from .models import (
    ClosedFormFit,
    FiveParameterFit,
    FourParameterFit,
    ModelShape,
    Point,
    ThreeParameterFit,
)
from .runner import fit

__version__ = "0.1.0"

__all__ = [
    "BoundPolicy",
    "ChangepointError",
    "ClosedFormFit",
    "DegenerateFitError",
    "FitCandidateError",
    "FiveParameterFit",
    "FourParameterFit",
    "InsufficientDataError",
    "ModelShape",
    "NoViableCandidateError",
    "Point",
    "RegressionEngineError",
    "SearchParams",
    "ThreeParameterFit",
    "fit",
    "fit_five_parameter",
    "fit_four_parameter",
    "fit_three_parameter_cooling",
    "fit_three_parameter_cooling_direct",
    "fit_three_parameter_heating",
    "fit_three_parameter_heating_direct",
    "get_default_params",
]
