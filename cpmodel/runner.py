"""
Dispatch a model-type selector to its fitting operation.
"""

import logging
from typing import Callable, Dict, Optional, Union

from .config import SearchParams
from .direct_search import (
    fit_three_parameter_cooling_direct,
    fit_three_parameter_heating_direct,
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
    ThreeParameterFit,
)

logger = logging.getLogger(__name__)

FitResult = Union[ThreeParameterFit, FourParameterFit, FiveParameterFit, ClosedFormFit]

FIT_FUNCTIONS: Dict[ModelShape, Callable[..., FitResult]] = {
    ModelShape.THREE_PARAMETER_HEATING: fit_three_parameter_heating,
    ModelShape.THREE_PARAMETER_COOLING: fit_three_parameter_cooling,
    ModelShape.THREE_PARAMETER_HEATING_DIRECT: fit_three_parameter_heating_direct,
    ModelShape.THREE_PARAMETER_COOLING_DIRECT: fit_three_parameter_cooling_direct,
    ModelShape.FOUR_PARAMETER: fit_four_parameter,
    ModelShape.FIVE_PARAMETER: fit_five_parameter,
}


def fit(
    points,
    model_type: Union[str, ModelShape] = ModelShape.FOUR_PARAMETER,
    params: Optional[SearchParams] = None,
) -> FitResult:
    """
    Fit the requested changepoint model to (x, y) pairs.

    model_type accepts a ModelShape, its value ("4-parameter"), its name or a
    short alias ("3h", "3c", "3h_new", "3c_new", "4", "5").
    """
    shape = ModelShape.from_token(model_type)
    points = list(points)
    logger.debug("Fitting %s to %d points", shape.value, len(points))
    return FIT_FUNCTIONS[shape](points, params)
