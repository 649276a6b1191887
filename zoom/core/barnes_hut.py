"""
Barnes-Hut Module

Applies a pairwise interaction between all bodies of a tree, replacing
distant subtrees with their aggregate (total quanta at the centroid).

The interaction is any callable

    interaction(delta, quanta_a, quanta_b) -> force_on_a

where delta points from body a to its partner. The force laws in
zoom.kernels follow this convention.
"""

from typing import Callable, Dict, Iterable, List, Optional
import logging
import numpy as np

from .tree import Tree
from .node import Node
from .vector import displacement, is_normal

logger = logging.getLogger(__name__)

InteractionFn = Callable[[np.ndarray, float, float], np.ndarray]


class BarnesHut:
    """
    Barnes-Hut force computation over a tree.

    For each body the tree is walked from the root. A node is replaced by
    its aggregate when region size / distance to centroid < theta; nodes
    containing the body itself are always opened, so every pair is
    accounted for exactly once, either directly or through one aggregate.

    Forces are first written into a side buffer (compute) and only then
    handed to the bodies (apply).

    The theta parameter controls the accuracy/speed tradeoff:
    - theta = 0: Exact calculation (no approximation)
    - theta = 0.5: Good balance (recommended)
    - theta = 1.0+: Fast but less accurate
    """

    def __init__(self, tree: Tree, interaction: InteractionFn,
                 theta: Optional[float] = None):
        """
        Initialize Barnes-Hut.

        Args:
            tree: Tree holding the bodies
            interaction: Pairwise interaction (delta, quanta_a, quanta_b) -> force on a
            theta: Opening angle threshold (defaults to the tree configuration)
        """
        if theta is None:
            theta = tree.config.theta
        if theta < 0:
            raise ValueError("Theta must be non-negative")

        self.tree = tree
        self.interaction = interaction
        self.theta = theta
        self.objects: List = []
        self.interaction_count = 0
        self.skipped_count = 0

    def _contribute(self, force: np.ndarray, delta: np.ndarray,
                    quanta: float, other_quanta: float):
        """Add one interaction to force unless the distance is degenerate."""
        if not is_normal(displacement(delta)):
            self.skipped_count += 1
            return
        force += self.interaction(delta, quanta, other_quanta)
        self.interaction_count += 1

    def force_at(self, position: np.ndarray, quanta: float, exclude=None) -> np.ndarray:
        """
        Compute the force on a (possibly virtual) body.

        Args:
            position: Position of the body (as stored in the tree)
            quanta: Quanta of the body
            exclude: Stored body to skip (the body itself)

        Returns:
            Total force vector
        """
        tree = self.tree
        force = np.zeros(tree.config.dimension)

        # Nodes still to be accepted as an aggregate or opened, root first
        stack = [tree.root]
        while stack:
            node = stack.pop()
            if node.is_empty:
                continue

            if not node.region.contains(position):
                aggregate = node.aggregate
                delta = tree.delta(position, aggregate.centroid)
                distance = displacement(delta)
                if is_normal(distance) and node.region.size / distance < self.theta:
                    self._contribute(force, delta, quanta, aggregate.quanta)
                    continue

            for slot in node.children:
                if slot is None:
                    continue
                if isinstance(slot, Node):
                    stack.append(slot)
                    continue
                for other in slot.objects:
                    if other is exclude:
                        continue
                    delta = tree.delta(position, tree.position_of(other))
                    self._contribute(force, delta, quanta, float(other.quanta))

        return force

    def force_on(self, obj) -> np.ndarray:
        """Compute the force on a body stored in the tree."""
        return self.force_at(self.tree.position_of(obj), float(obj.quanta), exclude=obj)

    def compute(self, objects: Optional[Iterable] = None) -> np.ndarray:
        """
        Compute forces without touching any body.

        Args:
            objects: Stored bodies to compute forces for (default: all, in
                the order of Tree.iter_all)

        Returns:
            Array of shape (n, D); row i is the force on self.objects[i]
        """
        self.objects = list(self.tree.iter_all() if objects is None else objects)
        self.interaction_count = 0
        self.skipped_count = 0

        forces = np.zeros((len(self.objects), self.tree.config.dimension))
        for i, obj in enumerate(self.objects):
            forces[i] = self.force_on(obj)

        logger.debug("Barnes-Hut pass: %d bodies, %d interactions, %d skipped, theta=%s",
                     len(self.objects), self.interaction_count, self.skipped_count, self.theta)
        if self.skipped_count:
            logger.debug("%d interactions skipped at zero distance", self.skipped_count)
        return forces

    def apply(self) -> np.ndarray:
        """
        Compute all forces, then hand them to the bodies via receive_force.

        Returns:
            The forces that were applied, in the order of self.objects
        """
        forces = self.compute()
        for obj, force in zip(self.objects, forces):
            obj.receive_force(force)
        return forces

    def get_error_estimate(self, reference: Optional[np.ndarray] = None) -> Dict[str, float]:
        """
        Estimate the approximation error compared to direct computation.

        Args:
            reference: Reference forces from direct computation (optional)

        Returns:
            Dictionary with error metrics
        """
        approx = self.compute()
        if reference is None:
            reference = direct_interaction(self.objects, self.interaction,
                                           self.tree.delta, self.tree.position_of)
        return get_error_estimate(approx, reference)


def apply_interaction(tree: Tree, interaction: InteractionFn,
                      theta: Optional[float] = None) -> np.ndarray:
    """
    Apply a pairwise interaction between all bodies of a tree.

    Args:
        tree: Tree holding the bodies
        interaction: (delta, quanta_a, quanta_b) -> force on a
        theta: Opening angle threshold (defaults to the tree configuration)

    Returns:
        Applied forces in the order of tree.iter_all()
    """
    return BarnesHut(tree, interaction, theta).apply()


def direct_interaction(objects: Iterable, interaction: InteractionFn,
                       delta: Optional[Callable] = None,
                       position: Optional[Callable] = None) -> np.ndarray:
    """
    Compute forces directly (O(N^2)) for validation.

    Args:
        objects: Bodies
        interaction: (delta, quanta_a, quanta_b) -> force on a
        delta: Delta between two positions (default: plain difference)
        position: Position of a body (default: its position attribute)

    Returns:
        Array of shape (n, D) with the force on each body
    """
    objects = list(objects)
    if delta is None:
        delta = lambda a, b: b - a
    if position is None:
        position = lambda obj: np.asarray(obj.position, dtype=np.float64)

    positions = [position(obj) for obj in objects]
    if not objects:
        return np.zeros((0, 0))
    forces = np.zeros((len(objects), len(positions[0])))

    for i, target in enumerate(objects):
        for j, source in enumerate(objects):
            if i == j:
                continue
            d = delta(positions[i], positions[j])
            if is_normal(displacement(d)):
                forces[i] += interaction(d, float(target.quanta), float(source.quanta))

    return forces


def get_error_estimate(approx: np.ndarray, reference: np.ndarray) -> Dict[str, float]:
    """
    Compare approximated forces with reference forces.

    Args:
        approx: Forces of shape (n, D)
        reference: Reference forces of shape (n, D)

    Returns:
        Dictionary with error metrics
    """
    abs_error = np.linalg.norm(approx - reference, axis=1)
    rel_error = abs_error / (np.linalg.norm(reference, axis=1) + 1e-14)

    return {
        'max_absolute_error': float(np.max(abs_error)),
        'mean_absolute_error': float(np.mean(abs_error)),
        'max_relative_error': float(np.max(rel_error)),
        'mean_relative_error': float(np.mean(rel_error)),
        'l2_error': float(np.linalg.norm(approx - reference) /
                          (np.linalg.norm(reference) + 1e-14)),
    }
