"""
Node Module

Represents a node in the spatial tree (quadtree in 2D, octree in 3D).
"""

from typing import Iterator, List, Optional, Tuple, Union
import numpy as np
from dataclasses import dataclass, field
from enum import Enum

from .space import Box
from .vector import is_normal


class ChildKind(Enum):
    """Content of a child slot."""
    EMPTY = "empty"
    LEAF = "leaf"
    NODE = "node"


@dataclass
class Aggregate:
    """
    Summary of all objects in a subtree.

    Attributes:
        quanta: Total quanta of the subtree
        count: Number of objects in the subtree
        weighted_sum: Sum of quanta * position
        position_sum: Sum of positions, used for the centroid of a
            subtree whose total quanta is zero
    """
    quanta: float
    count: int
    weighted_sum: np.ndarray
    position_sum: np.ndarray

    @classmethod
    def empty(cls, dimension: int) -> 'Aggregate':
        return cls(0.0, 0, np.zeros(dimension), np.zeros(dimension))

    @property
    def centroid(self) -> np.ndarray:
        """Quanta-weighted mean position of the subtree."""
        if self.count == 0:
            return np.zeros_like(self.position_sum)
        if is_normal(self.quanta):
            return self.weighted_sum / self.quanta
        return self.position_sum / self.count

    def add(self, position: np.ndarray, quanta: float):
        """Account for one more object."""
        self.quanta += quanta
        self.count += 1
        self.weighted_sum = self.weighted_sum + quanta * position
        self.position_sum = self.position_sum + position


@dataclass
class Leaf:
    """
    A slot holding stored objects.

    Normally a leaf holds exactly one object. At the maximum tree depth
    it holds every object that falls into the slot.
    """
    objects: List[object] = field(default_factory=list)

    @property
    def is_degenerate(self) -> bool:
        """True if the leaf holds more than one object."""
        return len(self.objects) > 1

    def __len__(self) -> int:
        return len(self.objects)


Slot = Optional[Union[Leaf, 'Node']]


class Node:
    """
    A box-shaped region of the tree.

    The region is split in 2^D child slots by bisecting every axis at the
    region center. A slot is empty, a Leaf or a child Node.

    Attributes:
        region: Box covering this node
        level: Depth of the node (0 = root)
        children: 2^D child slots, indexed by Box.octant
        aggregate: Total quanta and centroid of the subtree
    """

    __slots__ = ('region', 'level', 'children', 'aggregate')

    def __init__(self, region: Box, level: int = 0):
        self.region = region
        self.level = level
        self.children: List[Slot] = [None] * (1 << region.dimension)
        self.aggregate = Aggregate.empty(region.dimension)

    @property
    def is_empty(self) -> bool:
        """True if no object is stored in this subtree."""
        return self.aggregate.count == 0

    @property
    def num_objects(self) -> int:
        return self.aggregate.count

    def kind(self, index: int) -> ChildKind:
        """Kind of content in the slot with the given index."""
        slot = self.children[index]
        if slot is None:
            return ChildKind.EMPTY
        if isinstance(slot, Leaf):
            return ChildKind.LEAF
        return ChildKind.NODE

    def occupied(self) -> Iterator[Tuple[int, Union[Leaf, 'Node']]]:
        """Iterate over (index, slot) pairs of non-empty slots."""
        for index, slot in enumerate(self.children):
            if slot is not None:
                yield index, slot

    def __repr__(self) -> str:
        return (f"Node(level={self.level}, center={self.region.origin}, "
                f"size={self.region.size:.3f}, n={self.num_objects})")
