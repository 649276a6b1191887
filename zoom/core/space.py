"""
Space Module

Bounding volumes used by the spatial tree: an axis-aligned box given by
its center and half-extents, and a ball. A box also defines a toroidal
space, so positions and deltas can be wrapped for periodic boundary
conditions.
"""

from typing import Optional, Tuple
import math
import numpy as np
from dataclasses import dataclass

from .vector import as_vector, displacement, is_normal, space_ball
from .errors import DimensionError


def wrap_scalar(value: float, bound: float) -> float:
    """
    Fold a scalar into [-bound, bound] on a ring of length 2 * bound.

    Args:
        value: Coordinate or delta component
        bound: Half-length of the ring (sign is ignored)

    Returns:
        Wrapped value
    """
    bound = abs(bound)
    twobound = 2.0 * bound
    # Within one stride of the space after this, but maybe not inside it
    shrunk = math.fmod(value, twobound)

    if shrunk < -bound:
        return shrunk + twobound
    elif shrunk > bound:
        return shrunk - twobound
    return shrunk


@dataclass
class Box:
    """
    Axis-aligned box with its center at origin and half-extents offset.

    The face normals point along each axis. The corners of the box are
    origin - offset and origin + offset.

    Attributes:
        origin: Center of the box
        offset: Half-extent along each axis (all positive)
    """
    origin: np.ndarray
    offset: np.ndarray

    def __post_init__(self):
        self.origin = as_vector(self.origin)
        if np.isscalar(self.offset):
            self.offset = np.full(len(self.origin), float(self.offset))
        self.offset = as_vector(self.offset, len(self.origin))
        if np.any(self.offset <= 0.0) or not np.all(np.isfinite(self.offset)):
            raise ValueError(f"Box half-extents must be positive and finite, got {self.offset}")

    @property
    def dimension(self) -> int:
        return len(self.origin)

    @property
    def bounds(self) -> Tuple[np.ndarray, np.ndarray]:
        """Return the minimum and maximum corners of the box."""
        return self.origin - self.offset, self.origin + self.offset

    @property
    def size(self) -> float:
        """Longest side of the box."""
        return 2.0 * float(np.max(self.offset))

    def space(self) -> float:
        """Volume (area in 2D, length in 1D) contained in the box."""
        return float(np.prod(2.0 * self.offset))

    def contains(self, point: np.ndarray) -> bool:
        """Check if a point is inside the box (boundary included)."""
        return bool(np.all(np.abs(point - self.origin) <= self.offset))

    def octant(self, point: np.ndarray) -> int:
        """
        Child index of a point: bit i is set when point[i] >= origin[i].

        Returns an index in [0, 2^D).
        """
        index = 0
        for axis in range(len(self.origin)):
            if point[axis] >= self.origin[axis]:
                index |= 1 << axis
        return index

    def child(self, index: int) -> 'Box':
        """Half-sized box covering the octant (quadrant in 2D) with this index."""
        half = self.offset / 2.0
        signs = np.array([1.0 if index & (1 << axis) else -1.0
                          for axis in range(len(self.origin))])
        return Box(self.origin + signs * half, half)

    def gap(self, point: np.ndarray, wrap: Optional['Box'] = None) -> np.ndarray:
        """
        Per-axis distance from a point to the box (zero on overlapping axes).

        With a wrap box, the nearest periodic image of the point is used.
        """
        delta = point - self.origin
        if wrap is not None:
            delta = wrap.wrap_delta(delta)
        return np.maximum(np.abs(delta) - self.offset, 0.0)

    def intersects_ball(self, center: np.ndarray, radius: float,
                        wrap: Optional['Box'] = None) -> bool:
        """Check if a ball overlaps this box."""
        return displacement(self.gap(center, wrap)) <= radius

    def intersects_box(self, center: np.ndarray, extent: np.ndarray,
                       wrap: Optional['Box'] = None) -> bool:
        """Check if the box with the given center and half-extents overlaps this box."""
        return bool(np.all(self.gap(center, wrap) <= extent))

    def wrap_delta(self, delta: np.ndarray) -> np.ndarray:
        """Wrap a delta between two positions inside the toroidal space."""
        return np.array([wrap_scalar(d, b) for d, b in zip(delta, self.offset)])

    def wrap_position(self, position: np.ndarray) -> np.ndarray:
        """Wrap a position to keep it inside the space."""
        return self.wrap_delta(position - self.origin) + self.origin

    def __repr__(self) -> str:
        return f"Box(origin={self.origin}, offset={self.offset})"


@dataclass
class Ball:
    """
    Ball (interval, disc or sphere) with a center and radius.

    Attributes:
        center: Center of the ball
        radius: Radius of the ball (non-negative)
    """
    center: np.ndarray
    radius: float

    def __post_init__(self):
        self.center = as_vector(self.center)
        if self.radius < 0:
            raise ValueError("Radius must be non-negative")

    @property
    def dimension(self) -> int:
        return len(self.center)

    def space(self) -> float:
        """Space contained by the ball in its dimension."""
        return space_ball(self.radius, self.dimension)

    def contains(self, point: np.ndarray, wrap: Optional[Box] = None) -> bool:
        """Check if a point is inside the ball (boundary included)."""
        delta = point - self.center
        if wrap is not None:
            delta = wrap.wrap_delta(delta)
        return displacement(delta) <= self.radius


def bounding_box(positions, padding: float = 0.0) -> Box:
    """
    Compute a cubic box enclosing all positions.

    Args:
        positions: Array-like of shape (n, D)
        padding: Extra half-extent added on every axis

    Returns:
        Box centered on the positions with equal half-extents
    """
    positions = np.asarray(positions, dtype=np.float64)
    if positions.ndim != 2 or len(positions) == 0:
        raise DimensionError(f"Expected a non-empty (n, D) array, got shape {positions.shape}")

    min_coords = np.min(positions, axis=0)
    max_coords = np.max(positions, axis=0)
    center = (min_coords + max_coords) / 2.0

    # Use maximum extent to ensure square/cubic regions, small margin
    # so that no position sits exactly on the boundary
    half_size = float(np.max(max_coords - min_coords)) / 2.0 * 1.01 + padding
    if not is_normal(half_size):
        half_size = 1.0

    return Box(center, np.full(positions.shape[1], half_size))
