"""
Zoom: Spatial Trees for N-Body Particle Simulation

Vector geometry, pairwise force laws and a spatial tree that brings
force computation from O(N^2) down to O(N log N) with the Barnes-Hut
approximation.

This package includes:
- Vector helpers on numpy arrays (1D, 2D and 3D)
- Boxes and balls, with toroidal wrapping for periodic boundaries
- A quadtree/octree with exact radius and box queries
- Barnes-Hut force application with a pluggable pairwise interaction
- Force laws: gravitation, springs, drag and Lorentz forces
"""

from zoom.core import (
    Box,
    Ball,
    Body,
    Particle,
    Tree,
    TreeConfig,
    new_tree,
    BarnesHut,
    apply_interaction,
    direct_interaction,
    ZoomError,
    OutOfBoundsError,
)
from zoom.kernels import (
    Interaction,
    Gravitation,
    SoftenedGravitation,
    Hooke,
    HookeEquilibrium,
    create_interaction,
)
from zoom.log import setup_logging

__version__ = '0.1.0'

__all__ = [
    # Core classes
    'Box',
    'Ball',
    'Body',
    'Particle',
    'Tree',
    'TreeConfig',
    'new_tree',
    'BarnesHut',
    'apply_interaction',
    'direct_interaction',
    'ZoomError',
    'OutOfBoundsError',
    # Force laws
    'Interaction',
    'Gravitation',
    'SoftenedGravitation',
    'Hooke',
    'HookeEquilibrium',
    'create_interaction',
    'setup_logging',
]
