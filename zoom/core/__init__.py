"""
Zoom Core Module

This module contains the vector helpers, bounding volumes, bodies, the
spatial tree and the Barnes-Hut interaction pass.
"""

from .errors import ZoomError, DimensionError, OutOfBoundsError
from .vector import (
    as_vector,
    zero,
    is_normal,
    dot,
    displacement,
    displacement_squared,
    normalized,
    cross,
    space_box,
    space_ball,
)
from .space import Box, Ball, wrap_scalar, bounding_box
from .particle import Body, Particle, body_radius
from .node import Aggregate, ChildKind, Leaf, Node
from .tree import Tree, TreeConfig, new_tree
from .barnes_hut import (
    BarnesHut,
    InteractionFn,
    apply_interaction,
    direct_interaction,
    get_error_estimate,
)

__all__ = [
    'ZoomError',
    'DimensionError',
    'OutOfBoundsError',
    'as_vector',
    'zero',
    'is_normal',
    'dot',
    'displacement',
    'displacement_squared',
    'normalized',
    'cross',
    'space_box',
    'space_ball',
    'Box',
    'Ball',
    'wrap_scalar',
    'bounding_box',
    'Body',
    'Particle',
    'body_radius',
    'Aggregate',
    'ChildKind',
    'Leaf',
    'Node',
    'Tree',
    'TreeConfig',
    'new_tree',
    'BarnesHut',
    'InteractionFn',
    'apply_interaction',
    'direct_interaction',
    'get_error_estimate',
]
