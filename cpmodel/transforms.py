"""
Piecewise basis transforms.

Each transform maps breakpoint(s) and x to the feature vector fed to the
regression engine. A scalar x yields a 1-D vector; an array of x yields an
(n, k) matrix whose rows are the observations for one candidate.
"""

from typing import Callable

import numpy as np

BasisTransform = Callable[..., np.ndarray]


def _stack(*columns: np.ndarray) -> np.ndarray:
    return np.stack(columns, axis=-1)


def heating_features(cp: float, x) -> np.ndarray:
    """3-parameter heating: [max(0, cp - x)]."""
    x = np.asarray(x, dtype=float)
    return _stack(np.maximum(0.0, cp - x))


def cooling_features(cp: float, x) -> np.ndarray:
    """3-parameter cooling: [max(0, x - cp)]."""
    x = np.asarray(x, dtype=float)
    return _stack(np.maximum(0.0, x - cp))


def four_parameter_features(cp: float, x) -> np.ndarray:
    """4-parameter: [max(0, cp - x), max(0, x - cp)]."""
    x = np.asarray(x, dtype=float)
    return _stack(np.maximum(0.0, cp - x), np.maximum(0.0, x - cp))


def five_parameter_features(low_cp: float, high_cp: float, x) -> np.ndarray:
    """5-parameter: [max(0, low_cp - x), max(0, x - high_cp)]."""
    x = np.asarray(x, dtype=float)
    return _stack(np.maximum(0.0, low_cp - x), np.maximum(0.0, x - high_cp))


def design_matrix(transform: BasisTransform, breakpoints: tuple, xs) -> np.ndarray:
    """
    Build the (n, k) design matrix for one candidate.

    `breakpoints` is the tuple of positional breakpoint arguments the
    transform expects: (cp,) for single-breakpoint shapes, (low, high) for
    the 5-parameter shape.
    """
    xs = np.asarray(xs, dtype=float)
    if xs.ndim != 1:
        raise ValueError(f"xs must be one-dimensional, got shape {xs.shape}")
    return transform(*breakpoints, xs)
