"""
Particle Module

The object contract consumed by the spatial tree, and a basic particle
with position, velocity, quanta and an accumulated force.
"""

from typing import Optional, Protocol, runtime_checkable
import numpy as np
from dataclasses import dataclass

from .vector import as_vector, displacement


@runtime_checkable
class Body(Protocol):
    """
    Anything that can be stored in a tree.

    A body has a position and a scalar quanta (mass, charge, ...) and
    accepts forces. receive_force accumulates; it never moves the body.
    """

    position: np.ndarray
    quanta: float

    def receive_force(self, force: np.ndarray) -> None:
        ...


def body_radius(body) -> float:
    """Radius of a body, or 0 for point bodies."""
    return float(getattr(body, 'radius', 0.0) or 0.0)


@dataclass(eq=False)
class Particle:
    """
    Represents a particle in the N-body simulation.

    Forces applied with receive_force are accumulated until advance is
    called, which integrates velocity and position with explicit Euler.

    Attributes:
        position: Particle coordinates (1D, 2D or 3D)
        quanta: Interaction strength (mass for gravity, charge for Lorentz)
        velocity: Particle velocity (defaults to zero)
        inertia: Resistance to acceleration
        radius: Extent of the particle, 0 for point particles
        index: Unique identifier for the particle
    """
    position: np.ndarray
    quanta: float = 1.0
    velocity: Optional[np.ndarray] = None
    inertia: float = 1.0
    radius: float = 0.0
    index: int = 0

    def __post_init__(self):
        """Validate particle properties after initialization."""
        self.position = as_vector(self.position)
        if self.velocity is None:
            self.velocity = np.zeros_like(self.position)
        self.velocity = as_vector(self.velocity, len(self.position))
        if self.inertia <= 0:
            raise ValueError("Inertia must be positive")
        self.force = np.zeros_like(self.position)

    @property
    def dim(self) -> int:
        """Return the spatial dimension of the particle."""
        return len(self.position)

    @property
    def acceleration(self) -> np.ndarray:
        """Acceleration caused by the accumulated force."""
        return self.force / self.inertia

    def distance_to(self, other) -> float:
        """Compute Euclidean distance to another body."""
        return displacement(self.position - other.position)

    def receive_force(self, force: np.ndarray):
        """Accumulate a force; the particle is not moved until advance."""
        self.force = self.force + force

    def reset_force(self):
        """Reset the accumulated force to zero."""
        self.force = np.zeros_like(self.position)

    def advance(self, time: float):
        """Advance the particle in time from the net force and clear it."""
        self.velocity = self.velocity + self.acceleration * time
        self.position = self.position + self.velocity * time
        self.reset_force()

    def basic_form(self) -> 'Particle':
        """Copy of this particle without any accumulated force."""
        return Particle(
            position=self.position.copy(),
            quanta=self.quanta,
            velocity=self.velocity.copy(),
            inertia=self.inertia,
            radius=self.radius,
            index=self.index
        )

    def __repr__(self) -> str:
        return f"Particle(id={self.index}, pos={self.position}, q={self.quanta:.3f})"
