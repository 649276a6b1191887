"""
Tests for Bounding Volumes

Tests boxes, balls, overlap tests and toroidal wrapping.
"""

import math
import pytest
import numpy as np

from zoom.core.space import Box, Ball, wrap_scalar, bounding_box


class TestWrapScalar:
    """Test suite for scalar wrapping."""

    @pytest.mark.parametrize("value, bound, expected", [
        (1.5, 2.0, 1.5),
        (3.0, 2.0, -1.0),
        (-3.0, 2.0, 1.0),
        (5.0, 2.0, 1.0),
        (-5.0, 2.0, -1.0),
        (9.0, 2.0, 1.0),
        (3.0, -2.0, -1.0),
    ])
    def test_wrap(self, value, bound, expected):
        assert wrap_scalar(value, bound) == pytest.approx(expected)

    def test_boundary_is_kept(self):
        assert wrap_scalar(2.0, 2.0) == pytest.approx(2.0)
        assert wrap_scalar(-2.0, 2.0) == pytest.approx(-2.0)


class TestBox:
    """Test suite for axis-aligned boxes."""

    @pytest.fixture
    def cube(self):
        return Box(origin=[0.0, 0.0, 0.0], offset=2.0)

    def test_scalar_offset(self, cube):
        np.testing.assert_allclose(cube.offset, [2.0, 2.0, 2.0])
        assert cube.dimension == 3

    @pytest.mark.parametrize("offset", [0.0, -1.0, [1.0, 0.0]])
    def test_invalid_offset(self, offset):
        with pytest.raises(ValueError):
            Box(origin=[0.0, 0.0], offset=offset)

    def test_bounds_and_size(self):
        box = Box(origin=[1.0, 1.0], offset=[1.0, 2.0])
        low, high = box.bounds
        np.testing.assert_allclose(low, [0.0, -1.0])
        np.testing.assert_allclose(high, [2.0, 3.0])
        assert box.size == pytest.approx(4.0)
        assert box.space() == pytest.approx(8.0)

    def test_contains(self, cube):
        assert cube.contains(np.array([0.0, 0.0, 0.0]))
        assert cube.contains(np.array([2.0, -2.0, 2.0]))
        assert not cube.contains(np.array([2.1, 0.0, 0.0]))

    def test_octant(self, cube):
        cases = [
            ((-1.0, -1.0, -1.0), 0),
            ((1.0, -1.0, -1.0), 1),
            ((-1.0, 1.0, -1.0), 2),
            ((1.0, 1.0, -1.0), 3),
            ((-1.0, -1.0, 1.0), 4),
            ((1.0, -1.0, 1.0), 5),
            ((-1.0, 1.0, 1.0), 6),
            ((1.0, 1.0, 1.0), 7),
            ((0.0, 0.0, 0.0), 7),
        ]
        for point, expected in cases:
            assert cube.octant(np.array(point)) == expected, f"Failed for {point}"

    def test_child_covers_octant(self, cube):
        child = cube.child(5)
        np.testing.assert_allclose(child.origin, [1.0, -1.0, 1.0])
        np.testing.assert_allclose(child.offset, [1.0, 1.0, 1.0])

    def test_children_tile_parent(self):
        box = Box(origin=[0.0, 0.0], offset=1.0)
        children = [box.child(i) for i in range(4)]
        assert sum(child.space() for child in children) == pytest.approx(box.space())
        for i, child in enumerate(children):
            assert box.octant(child.origin) == i

    def test_intersects_ball(self):
        box = Box(origin=[0.0, 0.0], offset=1.0)
        assert box.intersects_ball(np.array([3.0, 0.0]), 2.0)
        assert not box.intersects_ball(np.array([3.0, 0.0]), 1.9)
        # Corner distance is sqrt(2)
        assert not box.intersects_ball(np.array([2.0, 2.0]), 1.4)
        assert box.intersects_ball(np.array([2.0, 2.0]), 1.5)

    def test_intersects_box(self):
        box = Box(origin=[0.0, 0.0], offset=1.0)
        assert box.intersects_box(np.array([2.5, 0.0]), np.array([1.5, 0.1]))
        assert not box.intersects_box(np.array([2.5, 0.0]), np.array([1.4, 5.0]))

    def test_gap_uses_nearest_image(self):
        world = Box(origin=[0.0, 0.0], offset=10.0)
        node = Box(origin=[8.0, 0.0], offset=1.0)
        point = np.array([-9.0, 0.0])
        np.testing.assert_allclose(node.gap(point), [16.0, 0.0])
        np.testing.assert_allclose(node.gap(point, world), [2.0, 0.0])
        assert node.intersects_ball(point, 2.0, world)
        assert not node.intersects_ball(point, 2.0)

    def test_wrap_position(self):
        world = Box(origin=[0.0, 0.0], offset=5.0)
        np.testing.assert_allclose(world.wrap_position(np.array([7.0, -6.0])), [-3.0, 4.0])

    def test_wrap_position_shifted_origin(self):
        world = Box(origin=[5.0, 5.0], offset=5.0)
        np.testing.assert_allclose(world.wrap_position(np.array([11.0, -1.0])), [1.0, 9.0])

    def test_wrap_delta(self):
        world = Box(origin=[0.0, 0.0, 0.0], offset=[5.0, 5.0, 5.0])
        np.testing.assert_allclose(world.wrap_delta(np.array([9.0, -9.0, 1.0])),
                                   [-1.0, 1.0, 1.0])


class TestBall:
    """Test suite for balls."""

    def test_space(self):
        assert Ball(center=[0.0, 0.0], radius=2.0).space() == pytest.approx(4.0 * math.pi)
        assert Ball(center=[0.0, 0.0, 0.0], radius=1.0).space() == pytest.approx(4.0 / 3.0 * math.pi)

    def test_negative_radius(self):
        with pytest.raises(ValueError):
            Ball(center=[0.0], radius=-1.0)

    def test_contains(self):
        ball = Ball(center=[4.5, 0.0], radius=1.0)
        world = Box(origin=[0.0, 0.0], offset=5.0)
        point = np.array([-4.8, 0.0])
        assert not ball.contains(point)
        assert ball.contains(point, world)


class TestBoundingBox:
    """Test suite for bounding box computation."""

    def test_encloses_positions(self):
        positions = np.array([[0.0, 0.0], [2.0, 1.0]])
        box = bounding_box(positions)
        np.testing.assert_allclose(box.origin, [1.0, 0.5])
        np.testing.assert_allclose(box.offset, [1.01, 1.01])
        assert all(box.contains(p) for p in positions)

    def test_padding(self):
        box = bounding_box(np.array([[0.0, 0.0], [2.0, 0.0]]), padding=1.0)
        np.testing.assert_allclose(box.offset, [2.01, 2.01])

    def test_single_position(self):
        box = bounding_box(np.array([[3.0, 3.0, 3.0]]))
        np.testing.assert_allclose(box.offset, [1.0, 1.0, 1.0])
        assert box.contains(np.array([3.0, 3.0, 3.0]))

    def test_empty(self):
        with pytest.raises(ValueError):
            bounding_box(np.zeros((0, 3)))
