"""
Tests for Tree Traversal

Tests full iteration, radius queries and box queries against brute force
and against scipy's KD-tree, with and without periodic boundaries.
"""

import types
import pytest
import numpy as np
from scipy.spatial import cKDTree

from zoom.core.particle import Particle
from zoom.core.space import Box
from zoom.core.tree import Tree, TreeConfig


def make_particles(n, dimension=3, seed=0, low=-1.0, high=1.0):
    rng = np.random.default_rng(seed)
    positions = rng.uniform(low, high, size=(n, dimension))
    return [Particle(position=positions[i], index=i) for i in range(n)]


def indices(objects):
    return sorted(obj.index for obj in objects)


class TestIterAll:
    """Test suite for full iteration."""

    @pytest.fixture
    def particles(self):
        return make_particles(300)

    def test_completeness(self, particles):
        tree = Tree(Box(origin=[0.0, 0.0, 0.0], offset=1.0))
        tree.extend(particles)
        objects = list(tree.iter_all())
        assert len(objects) == len(particles)
        assert len({id(obj) for obj in objects}) == len(particles)
        assert indices(objects) == list(range(len(particles)))

    @pytest.mark.parametrize("seed", [1, 2, 3])
    def test_insertion_order_does_not_matter(self, particles, seed):
        shuffled = list(particles)
        np.random.default_rng(seed).shuffle(shuffled)
        tree = Tree(Box(origin=[0.0, 0.0, 0.0], offset=1.0))
        tree.extend(shuffled)
        assert indices(tree.iter_all()) == list(range(len(particles)))

    def test_deterministic_order(self, particles):
        tree = Tree(Box(origin=[0.0, 0.0, 0.0], offset=1.0))
        tree.extend(particles)
        first = [obj.index for obj in tree.iter_all()]
        second = [obj.index for obj in tree]
        assert first == second

    def test_child_order(self):
        tree = Tree(Box(origin=[0.0, 0.0], offset=1.0))
        positions = [[0.5, 0.5], [-0.5, 0.5], [0.5, -0.5], [-0.5, -0.5]]
        for i, position in enumerate(positions):
            tree.insert(Particle(position=position, index=i))
        assert [obj.index for obj in tree.iter_all()] == [3, 2, 1, 0]

    def test_lazy(self, particles):
        tree = Tree(Box(origin=[0.0, 0.0, 0.0], offset=1.0))
        tree.extend(particles)
        iterator = tree.iter_all()
        assert isinstance(iterator, types.GeneratorType)
        first = next(iterator)
        assert first in particles

    def test_empty_tree(self):
        tree = Tree(Box(origin=[0.0, 0.0], offset=1.0))
        assert list(tree.iter_all()) == []
        assert list(tree.iter_radius([0.0, 0.0], 10.0)) == []

    def test_deep_tree_does_not_recurse(self):
        # Two very close bodies produce a very deep tree
        tree = Tree(Box(origin=[0.0, 0.0], offset=1.0), TreeConfig(dimension=2, max_depth=500))
        tree.insert(Particle(position=[1e-140, 1e-140], index=0))
        tree.insert(Particle(position=[2e-140, 2e-140], index=1))
        assert tree.get_statistics()['max_depth'] > 400
        assert indices(tree.iter_all()) == [0, 1]


class TestIterRadius:
    """Test suite for radius queries."""

    @pytest.fixture
    def particles(self):
        return make_particles(400, seed=11)

    @pytest.fixture
    def tree(self, particles):
        tree = Tree(Box(origin=[0.0, 0.0, 0.0], offset=1.0))
        tree.extend(particles)
        return tree

    @pytest.mark.parametrize("center, radius", [
        ([0.0, 0.0, 0.0], 0.3),
        ([0.5, -0.5, 0.2], 0.5),
        ([-1.0, 1.0, -1.0], 0.8),
        ([3.0, 3.0, 3.0], 1.0),
        ([0.1, 0.2, 0.3], 5.0),
    ])
    def test_matches_brute_force(self, tree, particles, center, radius):
        center = np.array(center)
        expected = [p.index for p in particles
                    if np.linalg.norm(p.position - center) <= radius]
        assert indices(tree.iter_radius(center, radius)) == sorted(expected)

    def test_matches_kdtree(self, tree, particles):
        positions = np.array([p.position for p in particles])
        kdtree = cKDTree(positions)
        rng = np.random.default_rng(5)
        for _ in range(20):
            center = rng.uniform(-1.2, 1.2, size=3)
            radius = rng.uniform(0.05, 0.7)
            expected = sorted(kdtree.query_ball_point(center, radius))
            assert indices(tree.iter_radius(center, radius)) == expected

    def test_zero_radius_finds_exact_position(self, tree, particles):
        target = particles[17]
        found = list(tree.iter_radius(target.position, 0.0))
        assert found == [target]

    def test_negative_radius(self, tree):
        with pytest.raises(ValueError):
            tree.iter_radius([0.0, 0.0, 0.0], -1.0)

    def test_2d(self):
        particles = make_particles(200, dimension=2, seed=3)
        tree = Tree(Box(origin=[0.0, 0.0], offset=1.0))
        tree.extend(particles)
        center = np.array([0.2, -0.1])
        expected = [p.index for p in particles if np.linalg.norm(p.position - center) <= 0.4]
        assert indices(tree.iter_radius(center, 0.4)) == sorted(expected)

    def test_periodic_matches_kdtree(self):
        size = 10.0
        rng = np.random.default_rng(21)
        positions = rng.uniform(0.0, size, size=(300, 3))
        particles = [Particle(position=positions[i], index=i) for i in range(300)]

        config = TreeConfig(dimension=3, periodic=True)
        tree = Tree(Box(origin=[5.0, 5.0, 5.0], offset=5.0), config)
        tree.extend(particles)
        kdtree = cKDTree(positions, boxsize=size)

        for center in ([0.5, 0.5, 0.5], [9.8, 0.1, 5.0], [5.0, 5.0, 5.0], [0.0, 10.0, 2.0]):
            for radius in (0.8, 1.5, 3.0):
                expected = sorted(kdtree.query_ball_point(np.array(center) % size, radius))
                assert indices(tree.iter_radius(center, radius)) == expected

    def test_periodic_finds_neighbor_across_edge(self):
        config = TreeConfig(dimension=2, periodic=True)
        tree = Tree(Box(origin=[0.0, 0.0], offset=5.0), config)
        near = Particle(position=[4.9, 0.0], index=0)
        far = Particle(position=[0.0, 0.0], index=1)
        tree.extend([near, far])
        assert list(tree.iter_radius([-4.9, 0.0], 0.5)) == [near]


class TestIterBox:
    """Test suite for box queries."""

    @pytest.fixture
    def particles(self):
        return make_particles(400, seed=13)

    @pytest.fixture
    def tree(self, particles):
        tree = Tree(Box(origin=[0.0, 0.0, 0.0], offset=1.0))
        tree.extend(particles)
        return tree

    @pytest.mark.parametrize("center, extent", [
        ([0.0, 0.0, 0.0], 0.25),
        ([0.5, 0.5, -0.5], [0.1, 0.6, 0.3]),
        ([2.0, 0.0, 0.0], 0.5),
        ([0.0, 0.0, 0.0], 2.0),
    ])
    def test_matches_brute_force(self, tree, particles, center, extent):
        center = np.array(center)
        extent = np.broadcast_to(np.asarray(extent, dtype=float), (3,))
        expected = [p.index for p in particles
                    if np.all(np.abs(p.position - center) <= extent)]
        assert indices(tree.iter_box(center, extent)) == sorted(expected)

    @pytest.mark.parametrize("corner, extent", [
        ([-0.5, -0.5, -0.5], 1.0),
        ([0.0, -1.0, 0.2], [0.5, 2.0, 0.3]),
    ])
    def test_corner_matches_brute_force(self, tree, particles, corner, extent):
        corner = np.array(corner)
        extent = np.broadcast_to(np.asarray(extent, dtype=float), (3,))
        expected = [p.index for p in particles
                    if np.all(p.position >= corner) and np.all(p.position <= corner + extent)]
        assert indices(tree.iter_corner(corner, extent)) == sorted(expected)

    def test_corner_negative_extent(self, tree):
        with pytest.raises(ValueError):
            tree.iter_corner([0.0, 0.0, 0.0], -1.0)

    def test_negative_extent(self, tree):
        with pytest.raises(ValueError):
            tree.iter_box([0.0, 0.0, 0.0], [-1.0, 1.0, 1.0])

    def test_periodic(self):
        config = TreeConfig(dimension=2, periodic=True)
        tree = Tree(Box(origin=[0.0, 0.0], offset=5.0), config)
        corner = Particle(position=[4.8, 4.8], index=0)
        middle = Particle(position=[0.0, 0.0], index=1)
        tree.extend([corner, middle])
        assert list(tree.iter_box([-4.8, -4.8], 0.5)) == [corner]
