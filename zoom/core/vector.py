"""
Vector Module

Fixed-dimension vector geometry on numpy arrays.

Vectors are float64 arrays of shape (D,) with D in {1, 2, 3}. Addition,
subtraction, scaling and negation are plain numpy arithmetic; this module
adds the remaining operations used by the tree and the force laws.
"""

import math
import sys
from typing import Optional

import numpy as np

from .errors import DimensionError

SUPPORTED_DIMENSIONS = (1, 2, 3)


def as_vector(values, dimension: Optional[int] = None) -> np.ndarray:
    """
    Coerce values to a float64 vector.

    Args:
        values: Sequence or array of coordinates
        dimension: Expected dimension (optional)

    Returns:
        1-D float64 array
    """
    vec = np.asarray(values, dtype=np.float64)
    if vec.ndim != 1 or len(vec) not in SUPPORTED_DIMENSIONS:
        raise DimensionError(f"Expected a 1D, 2D or 3D vector, got shape {vec.shape}")
    if dimension is not None and len(vec) != dimension:
        raise DimensionError(f"Expected dimension {dimension}, got {len(vec)}")
    return vec


def zero(dimension: int) -> np.ndarray:
    """Return the zero vector of the given dimension."""
    if dimension not in SUPPORTED_DIMENSIONS:
        raise DimensionError("Dimension must be 1, 2 or 3")
    return np.zeros(dimension, dtype=np.float64)


def is_normal(x: float) -> bool:
    """
    Check that a scalar is finite, non-zero and not subnormal.

    This is the divide-by-zero guard used by the tree and every force law.
    """
    return math.isfinite(x) and abs(x) >= sys.float_info.min


def dot(a: np.ndarray, b: np.ndarray) -> float:
    """Dot product of two vectors."""
    return float(np.dot(a, b))


def displacement_squared(v: np.ndarray) -> float:
    """Squared length of a vector."""
    return float(np.dot(v, v))


def displacement(v: np.ndarray) -> float:
    """Euclidean length of a vector."""
    return math.sqrt(displacement_squared(v))


def normalized(v: np.ndarray) -> np.ndarray:
    """Unit vector in the direction of v, or zero if v has no direction."""
    length = displacement(v)
    if not is_normal(length):
        return np.zeros_like(v, dtype=np.float64)
    return v / length


def cross(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Cross product (3D only)."""
    if len(a) != 3 or len(b) != 3:
        raise DimensionError("Cross product is only defined for 3D vectors")
    return np.array([
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    ])


def space_box(offset: np.ndarray) -> float:
    """Space enclosed by the box spanned from the origin to offset."""
    return float(np.prod(offset))


def space_ball(radius: float, dimension: int) -> float:
    """
    Space enclosed by an n-ball of the given radius.

    1D: 2r, 2D: pi r^2, 3D: 4/3 pi r^3
    """
    if dimension == 1:
        return 2.0 * radius
    elif dimension == 2:
        return math.pi * radius ** 2
    elif dimension == 3:
        return 4.0 / 3.0 * math.pi * radius ** 3
    raise DimensionError("Dimension must be 1, 2 or 3")
