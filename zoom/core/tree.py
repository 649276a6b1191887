"""
Tree Module

Implements the hierarchical spatial tree (quadtree/octree) that stores
bodies, keeps per-subtree aggregates and answers neighbourhood queries.
"""

from typing import Callable, Iterable, Iterator, List, Optional
import logging
import numpy as np
from dataclasses import dataclass

from .errors import DimensionError, OutOfBoundsError
from .node import Leaf, Node
from .space import Box, bounding_box
from .vector import as_vector, displacement_squared, is_normal

logger = logging.getLogger(__name__)

# Halving a box more often than this underflows its half-extents
MAX_TREE_DEPTH = 512


@dataclass
class TreeConfig:
    """Configuration for tree construction."""
    dimension: int = 3           # Spatial dimension (1, 2 or 3)
    max_depth: int = 32          # Depth at which leaves start holding lists of objects
    theta: float = 0.5           # Barnes-Hut opening angle parameter
    periodic: bool = False       # Wrap deltas over the root region (toroidal space)

    def __post_init__(self):
        """Validate configuration."""
        if self.dimension not in [1, 2, 3]:
            raise ValueError("Dimension must be 1, 2 or 3")
        if self.max_depth <= 0:
            raise ValueError("Max depth must be positive")
        if self.max_depth > MAX_TREE_DEPTH:
            raise ValueError(f"Max depth must be at most {MAX_TREE_DEPTH}")
        if self.theta < 0:
            raise ValueError("Theta must be non-negative")


class Tree:
    """
    Spatial tree over bodies.

    Every body is stored in exactly one leaf, found by descending from the
    root and picking the child slot by comparing the position with the
    node center on each axis. A leaf that receives a second body is
    promoted to a node and both bodies move one level deeper. Aggregates
    (total quanta and centroid) are updated along the insertion path.

    Usage:
        tree = Tree(Box(origin=[0, 0, 0], offset=10.0))
        for particle in particles:
            tree.insert(particle)
        near = list(tree.iter_radius(center, 1.5))

    The tree is meant to be rebuilt once per simulation step after the
    bodies have moved.
    """

    def __init__(self, region: Box, config: Optional[TreeConfig] = None):
        """
        Initialize an empty tree.

        Args:
            region: Root region; every inserted body must lie inside it
            config: Tree configuration parameters
        """
        if config is None:
            config = TreeConfig(dimension=region.dimension)
        if region.dimension != config.dimension:
            raise DimensionError(
                f"Region dimension {region.dimension} does not match "
                f"configured dimension {config.dimension}")

        self.region = region
        self.config = config
        self.wrap: Optional[Box] = region if config.periodic else None
        self.root = Node(region, level=0)
        self.degenerate_count = 0

    @classmethod
    def from_objects(cls, objects: Iterable, config: Optional[TreeConfig] = None,
                     padding: float = 0.0) -> 'Tree':
        """
        Build a tree whose root region encloses all objects.

        Args:
            objects: Bodies to insert
            config: Tree configuration (dimension is taken from the bodies if omitted)
            padding: Extra half-extent around the bounding box

        Returns:
            Tree with all objects inserted
        """
        objects = list(objects)
        if not objects:
            dimension = config.dimension if config is not None else 3
            return cls(Box(np.zeros(dimension), 1.0 + padding), config)

        positions = np.array([as_vector(obj.position) for obj in objects])
        region = bounding_box(positions, padding)
        if config is None:
            config = TreeConfig(dimension=region.dimension)

        tree = cls(region, config)
        tree.extend(objects)
        logger.debug("Built %r", tree)
        return tree

    @property
    def aggregate(self):
        """Aggregate of the whole tree."""
        return self.root.aggregate

    @property
    def is_empty(self) -> bool:
        return self.root.is_empty

    def __len__(self) -> int:
        return self.root.num_objects

    def __iter__(self) -> Iterator:
        return self.iter_all()

    def clear(self):
        """Remove all objects, keeping the root region."""
        self.root = Node(self.region, level=0)
        self.degenerate_count = 0

    def position_of(self, obj) -> np.ndarray:
        """Position of a body as stored in the tree (wrapped when periodic)."""
        position = as_vector(obj.position, self.config.dimension)
        if self.wrap is not None:
            position = self.wrap.wrap_position(position)
        return position

    def delta(self, from_position: np.ndarray, to_position: np.ndarray) -> np.ndarray:
        """Delta between two positions, using the nearest image when periodic."""
        delta = to_position - from_position
        if self.wrap is not None:
            delta = self.wrap.wrap_delta(delta)
        return delta

    # ------------------------------------------------------------------
    # Insertion
    # ------------------------------------------------------------------

    def _can_split(self, node: Node) -> bool:
        """True if a leaf below node may be promoted one level deeper."""
        if node.level + 1 >= self.config.max_depth:
            return False
        # Half-extents of the promoted child must stay normal floats
        return is_normal(float(np.min(node.region.offset)) / 2.0)

    def insert(self, obj):
        """
        Insert a body into the tree.

        Raises:
            OutOfBoundsError: if the body lies outside the root region
        """
        position = self.position_of(obj)
        if not self.region.contains(position):
            raise OutOfBoundsError(position, self.region)

        quanta = float(obj.quanta)
        node = self.root

        while True:
            node.aggregate.add(position, quanta)
            index = node.region.octant(position)
            slot = node.children[index]

            if slot is None:
                node.children[index] = Leaf([obj])
                return

            if isinstance(slot, Node):
                node = slot
                continue

            if not self._can_split(node):
                # Coincident (or nearly) bodies: keep them together
                slot.objects.append(obj)
                if len(slot.objects) == 2:
                    self.degenerate_count += 1
                    logger.warning(
                        "Degenerate geometry at depth %d near %s, storing bodies in a list leaf",
                        node.level, position)
                return

            # Promote the leaf to a node one level deeper
            child = Node(node.region.child(index), node.level + 1)
            for existing in slot.objects:
                existing_position = self.position_of(existing)
                child.aggregate.add(existing_position, float(existing.quanta))
                child.children[child.region.octant(existing_position)] = Leaf([existing])
            node.children[index] = child
            node = child

    def extend(self, objects: Iterable, skip_out_of_bounds: bool = False) -> List:
        """
        Insert several bodies.

        Args:
            objects: Bodies to insert
            skip_out_of_bounds: Collect bodies outside the root region
                instead of raising

        Returns:
            Bodies that were rejected as out of bounds
        """
        rejected = []
        for obj in objects:
            try:
                self.insert(obj)
            except OutOfBoundsError:
                if not skip_out_of_bounds:
                    raise
                rejected.append(obj)
        if rejected:
            logger.info("%d bodies outside of root region %s", len(rejected), self.region)
        return rejected

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def _walk(self, visit_node: Optional[Callable[[Node], bool]] = None,
              accept: Optional[Callable[[object], bool]] = None) -> Iterator:
        """
        Depth-first iteration over stored bodies with an explicit stack.

        Args:
            visit_node: Returns False for nodes whose subtree can be skipped
            accept: Returns False for bodies that must not be yielded
        """
        if visit_node is not None and not visit_node(self.root):
            return

        # Frames of (node, index of the next child slot to visit)
        stack = [(self.root, 0)]
        while stack:
            node, index = stack.pop()
            if index >= len(node.children):
                continue
            stack.append((node, index + 1))

            slot = node.children[index]
            if slot is None:
                continue
            if isinstance(slot, Leaf):
                for obj in slot.objects:
                    if accept is None or accept(obj):
                        yield obj
            elif visit_node is None or visit_node(slot):
                stack.append((slot, 0))

    def iter_all(self) -> Iterator:
        """Iterate over every stored body in a deterministic depth-first order."""
        return self._walk()

    def iter_radius(self, center, radius: float) -> Iterator:
        """
        Iterate over bodies within radius of center.

        Subtrees whose region does not overlap the query ball are skipped.
        """
        center = as_vector(center, self.config.dimension)
        if radius < 0:
            raise ValueError("Radius must be non-negative")
        radius_squared = radius * radius

        def visit_node(node: Node) -> bool:
            return node.region.intersects_ball(center, radius, self.wrap)

        def accept(obj) -> bool:
            return displacement_squared(self.delta(center, self.position_of(obj))) <= radius_squared

        return self._walk(visit_node, accept)

    def iter_box(self, center, extent) -> Iterator:
        """
        Iterate over bodies inside the box with the given center and half-extents.

        Args:
            center: Center of the query box
            extent: Half-extent of the query box (scalar or per axis)
        """
        center = as_vector(center, self.config.dimension)
        extent = np.broadcast_to(np.asarray(extent, dtype=np.float64), center.shape)
        if np.any(extent < 0):
            raise ValueError("Extent must be non-negative")

        def visit_node(node: Node) -> bool:
            return node.region.intersects_box(center, extent, self.wrap)

        def accept(obj) -> bool:
            return bool(np.all(np.abs(self.delta(center, self.position_of(obj))) <= extent))

        return self._walk(visit_node, accept)

    def iter_corner(self, corner, extent) -> Iterator:
        """
        Iterate over bodies inside the box spanning corner to corner + extent.

        Args:
            corner: Minimum corner of the query box
            extent: Full side lengths of the query box (scalar or per axis)
        """
        corner = as_vector(corner, self.config.dimension)
        extent = np.broadcast_to(np.asarray(extent, dtype=np.float64), corner.shape)
        return self.iter_box(corner + extent / 2.0, extent / 2.0)

    def iter_nodes(self) -> Iterator[Node]:
        """Iterate over all nodes in pre-order."""
        stack = [self.root]
        while stack:
            node = stack.pop()
            yield node
            # Reversed so that child 0 is visited first
            for slot in reversed(node.children):
                if isinstance(slot, Node):
                    stack.append(slot)

    def iter_leaves(self) -> Iterator[Leaf]:
        """Iterate over all leaves."""
        for node in self.iter_nodes():
            for _, slot in node.occupied():
                if isinstance(slot, Leaf):
                    yield slot

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def get_statistics(self) -> dict:
        """
        Compute and return tree statistics.

        Returns:
            Dictionary with tree statistics
        """
        num_nodes = 0
        max_depth = 0
        for node in self.iter_nodes():
            num_nodes += 1
            max_depth = max(max_depth, node.level)

        leaves = list(self.iter_leaves())
        leaf_sizes = [len(leaf) for leaf in leaves]

        return {
            'num_objects': len(self),
            'num_nodes': num_nodes,
            'num_leaves': len(leaf_sizes),
            'max_depth': max_depth,
            'degenerate_leaves': sum(1 for leaf in leaves if leaf.is_degenerate),
            'max_objects_per_leaf': max(leaf_sizes) if leaf_sizes else 0,
        }

    def __repr__(self) -> str:
        stats = self.get_statistics()
        return (f"Tree(dim={self.config.dimension}, "
                f"N={stats['num_objects']}, "
                f"nodes={stats['num_nodes']}, "
                f"leaves={stats['num_leaves']}, "
                f"depth={stats['max_depth']})")


def new_tree(region: Box, config: Optional[TreeConfig] = None) -> Tree:
    """Create an empty tree over the given root region."""
    return Tree(region, config)
