"""
Zoom Kernels Module

Force laws between bodies.

Pairwise laws are callables interaction(delta, quanta_a, quanta_b) that
return the force on body a, where delta points from a to its partner.
They can be handed directly to the Barnes-Hut pass. Velocity dependent
laws (drag, Lorentz) need more than positions and are provided as
functions on particles.
"""

import math
import numpy as np
from typing import Callable, Optional
from abc import ABC, abstractmethod

from zoom.core.particle import body_radius
from zoom.core.vector import cross, displacement, displacement_squared, is_normal


class Interaction(ABC):
    """Abstract base class for pairwise force laws."""

    def __init__(self, magnitude: float = 1.0):
        """
        Initialize the force law.

        Args:
            magnitude: Coupling constant (e.g. G for gravitation)
        """
        self.magnitude = magnitude

    @abstractmethod
    def __call__(self, delta: np.ndarray, quanta_a: float, quanta_b: float) -> np.ndarray:
        """
        Evaluate the force on body a.

        Args:
            delta: Vector from body a to body b
            quanta_a: Quanta of body a
            quanta_b: Quanta of body b

        Returns:
            Force vector acting on body a
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(magnitude={self.magnitude})"


class Gravitation(Interaction):
    """
    Inverse square attraction.

    F = m * qa * qb * delta / |delta|^3

    Dividing by the cubed distance both applies the inverse square law
    and normalizes delta.
    """

    def __call__(self, delta: np.ndarray, quanta_a: float, quanta_b: float) -> np.ndarray:
        distance = displacement(delta)
        if not is_normal(distance):
            return np.zeros_like(delta, dtype=np.float64)
        return delta * (self.magnitude * quanta_a * quanta_b / distance ** 3)


class SoftenedGravitation(Interaction):
    """
    Gravitation between bodies with a radius.

    Beyond the radius the bodies attract as point bodies. Within it, the
    quanta is treated as spread out, so the force falls linearly to zero
    as the distance goes to zero:

    F = m * qa * qb * delta / |delta|^3     if |delta| > radius
    F = m * qa * qb * delta / radius^2      otherwise

    The force jumps at the radius (by a factor of the radius).
    """

    def __init__(self, radius: float, magnitude: float = 1.0):
        """
        Initialize softened gravitation.

        Args:
            radius: Net radius of the two bodies
            magnitude: Gravitational constant
        """
        super().__init__(magnitude)
        if radius < 0:
            raise ValueError("Radius must be non-negative")
        self.radius = radius
        self.radius_squared = radius ** 2

    def __call__(self, delta: np.ndarray, quanta_a: float, quanta_b: float) -> np.ndarray:
        distance_squared = displacement_squared(delta)
        if not is_normal(distance_squared):
            return np.zeros_like(delta, dtype=np.float64)
        if distance_squared > self.radius_squared:
            denominator = distance_squared ** 1.5
        else:
            denominator = self.radius_squared
        return delta * (self.magnitude * quanta_a * quanta_b / denominator)

    def __repr__(self) -> str:
        return f"SoftenedGravitation(radius={self.radius}, magnitude={self.magnitude})"


class Hooke(Interaction):
    """
    Spring force with zero rest length.

    F = m * qa * qb * delta
    """

    def __call__(self, delta: np.ndarray, quanta_a: float, quanta_b: float) -> np.ndarray:
        return delta * (self.magnitude * quanta_a * quanta_b)


class HookeEquilibrium(Interaction):
    """
    Spring force with a rest length.

    Bodies further apart than the equilibrium attract, closer bodies repel:

    F = m * qa * qb * (|delta| - equilibrium) * delta / |delta|
    """

    def __init__(self, equilibrium: float, magnitude: float = 1.0):
        super().__init__(magnitude)
        self.equilibrium = equilibrium

    def __call__(self, delta: np.ndarray, quanta_a: float, quanta_b: float) -> np.ndarray:
        distance = displacement(delta)
        if not is_normal(distance):
            return np.zeros_like(delta, dtype=np.float64)
        return delta / distance * ((distance - self.equilibrium) *
                                   self.magnitude * quanta_a * quanta_b)

    def __repr__(self) -> str:
        return f"HookeEquilibrium(equilibrium={self.equilibrium}, magnitude={self.magnitude})"


def create_interaction(name: str, **kwargs) -> Interaction:
    """
    Factory function to create force laws.

    Args:
        name: Law name ('gravitation', 'softened_gravitation', 'hooke', 'hooke_equilibrium')
        **kwargs: Law-specific parameters

    Returns:
        Interaction instance
    """
    name = name.lower()
    magnitude = kwargs.get('magnitude', 1.0)

    if name == 'gravitation':
        return Gravitation(magnitude)
    elif name == 'softened_gravitation':
        radius = kwargs.get('radius', 0.0)
        return SoftenedGravitation(radius, magnitude)
    elif name == 'hooke':
        return Hooke(magnitude)
    elif name == 'hooke_equilibrium':
        equilibrium = kwargs.get('equilibrium', 1.0)
        return HookeEquilibrium(equilibrium, magnitude)
    else:
        raise ValueError(f"Unknown interaction type: {name}")


def _delta(lhs, rhs, delta: Optional[Callable]) -> np.ndarray:
    if delta is None:
        return rhs.position - lhs.position
    return delta(lhs.position, rhs.position)


def interact(lhs, rhs, interaction: Interaction, delta: Optional[Callable] = None):
    """
    Apply a pairwise law to two bodies with equal and opposite forces.

    Args:
        lhs, rhs: Bodies accepting receive_force
        interaction: Pairwise force law
        delta: Delta between two positions (e.g. Tree.delta for periodic space)
    """
    force = interaction(_delta(lhs, rhs, delta), lhs.quanta, rhs.quanta)
    lhs.receive_force(force)
    rhs.receive_force(-force)


def interact_to(body, center, interaction: Interaction, delta: Optional[Callable] = None):
    """
    Apply a pairwise law to one body only.

    The partner is a virtual body that is not affected, such as a subtree
    aggregate or the basic_form of another particle.

    Args:
        body: Body accepting receive_force
        center: Partner with position and quanta
        interaction: Pairwise force law
        delta: Delta between two positions
    """
    body.receive_force(interaction(_delta(body, center, delta), body.quanta, center.quanta))


def gravitate(lhs, rhs, magnitude: float = 1.0, delta: Optional[Callable] = None):
    """Apply gravitational attraction between two bodies."""
    interact(lhs, rhs, Gravitation(magnitude), delta)


def gravitate_radius(lhs, rhs, magnitude: float = 1.0, delta: Optional[Callable] = None):
    """Apply gravitation softened by the sum of the two bodies' radii."""
    radius = body_radius(lhs) + body_radius(rhs)
    interact(lhs, rhs, SoftenedGravitation(radius, magnitude), delta)


def gravitate_radius_squared(lhs, rhs, radius_squared: float, magnitude: float = 1.0,
                             delta: Optional[Callable] = None):
    """Same as gravitate_radius with a precomputed squared net radius."""
    interact(lhs, rhs, SoftenedGravitation(math.sqrt(radius_squared), magnitude), delta)


def hooke(lhs, rhs, magnitude: float = 1.0, delta: Optional[Callable] = None):
    """Apply spring forces between two bodies."""
    interact(lhs, rhs, Hooke(magnitude), delta)


def hooke_equilibrium(lhs, rhs, equilibrium: float, magnitude: float = 1.0,
                      delta: Optional[Callable] = None):
    """Apply spring forces with a rest length between two bodies."""
    interact(lhs, rhs, HookeEquilibrium(equilibrium, magnitude), delta)


def gravitate_to(body, center, magnitude: float = 1.0, delta: Optional[Callable] = None):
    """Attract one body towards an unaffected center."""
    interact_to(body, center, Gravitation(magnitude), delta)


def gravitate_radius_to(body, center, magnitude: float = 1.0,
                        delta: Optional[Callable] = None):
    """Attract one body towards an unaffected center, softened by the center's radius."""
    interact_to(body, center, SoftenedGravitation(body_radius(center), magnitude), delta)


def hooke_to(body, center, magnitude: float = 1.0, delta: Optional[Callable] = None):
    """Pull one body towards an unaffected center with a spring."""
    interact_to(body, center, Hooke(magnitude), delta)


def hooke_equilibrium_to(body, center, equilibrium: float, magnitude: float = 1.0,
                         delta: Optional[Callable] = None):
    """Spring with a rest length between one body and an unaffected center."""
    interact_to(body, center, HookeEquilibrium(equilibrium, magnitude), delta)


def drag(particle, magnitude: float):
    """Apply drag against the velocity of a particle."""
    particle.receive_force(-particle.velocity * magnitude)


def lorentz_field(particle, field: np.ndarray):
    """
    Apply the Lorentz force of a uniform field to a particle (3D).

    F = (v x B) * q / inertia
    """
    force = cross(particle.velocity, field) * particle.quanta / particle.inertia
    particle.receive_force(force)


def _lorentz_force(lhs, rhs, radius_squared: float, magnitude: float,
                   delta: Optional[Callable]) -> Optional[np.ndarray]:
    """Lorentz force on lhs from rhs, or None when the distance is not normal."""
    d = _delta(lhs, rhs, delta)
    distance_squared = displacement_squared(d)
    if not is_normal(distance_squared):
        return None
    if distance_squared > radius_squared:
        denominator = distance_squared ** 1.5
    else:
        denominator = radius_squared
    return cross(cross(lhs.velocity, d), rhs.velocity) * (
        magnitude * lhs.quanta * rhs.quanta / denominator)


def lorentz(lhs, rhs, magnitude: float = 1.0, delta: Optional[Callable] = None):
    """
    Apply Lorentz forces between two moving charged particles (3D).

    F = m * qa * qb * (v_b x (v_a x delta)) / |delta|^3

    lhs receives -F and rhs receives F.
    """
    lorentz_radius_squared(lhs, rhs, 0.0, magnitude, delta)


def lorentz_radius(lhs, rhs, magnitude: float = 1.0, delta: Optional[Callable] = None):
    """Lorentz forces softened by the sum of the two particles' radii."""
    radius_squared = (body_radius(lhs) + body_radius(rhs)) ** 2
    lorentz_radius_squared(lhs, rhs, radius_squared, magnitude, delta)


def lorentz_radius_squared(lhs, rhs, radius_squared: float, magnitude: float = 1.0,
                           delta: Optional[Callable] = None):
    """
    Lorentz forces with a precomputed squared net radius.

    Within the radius, |delta|^3 is replaced by radius^2 as in
    SoftenedGravitation.
    """
    force = _lorentz_force(lhs, rhs, radius_squared, magnitude, delta)
    if force is None:
        return
    lhs.receive_force(force)
    rhs.receive_force(-force)


def lorentz_to(body, center, magnitude: float = 1.0, delta: Optional[Callable] = None):
    """Lorentz force on one particle from an unaffected moving center."""
    force = _lorentz_force(body, center, 0.0, magnitude, delta)
    if force is not None:
        body.receive_force(force)


def lorentz_radius_to(body, center, magnitude: float = 1.0,
                      delta: Optional[Callable] = None):
    """Same as lorentz_to, softened by the center's radius."""
    force = _lorentz_force(body, center, body_radius(center) ** 2, magnitude, delta)
    if force is not None:
        body.receive_force(force)


__all__ = [
    'Interaction',
    'Gravitation',
    'SoftenedGravitation',
    'Hooke',
    'HookeEquilibrium',
    'create_interaction',
    'interact',
    'interact_to',
    'gravitate',
    'gravitate_radius',
    'gravitate_radius_squared',
    'hooke',
    'hooke_equilibrium',
    'gravitate_to',
    'gravitate_radius_to',
    'hooke_to',
    'hooke_equilibrium_to',
    'drag',
    'lorentz_field',
    'lorentz',
    'lorentz_radius',
    'lorentz_radius_squared',
    'lorentz_to',
    'lorentz_radius_to',
]
