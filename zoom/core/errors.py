"""
Errors Module

Exceptions raised by the spatial tree and vector helpers.
"""

import numpy as np


class ZoomError(Exception):
    """Base class for all zoom errors."""
    pass


class DimensionError(ZoomError, ValueError):
    """Vector dimension is unsupported or does not match the expected one."""
    pass


class OutOfBoundsError(ZoomError, ValueError):
    """
    Raised when an object is inserted outside the root region of a tree.

    Recoverable: the caller can grow the root region and rebuild the tree,
    or reject the object.

    Attributes:
        position: Position of the rejected object
        region: Root region of the tree
    """

    def __init__(self, position: np.ndarray, region):
        self.position = position
        self.region = region
        super().__init__(f"Position {position} outside of root region {region}")
