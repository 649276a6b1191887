"""
Zoom Test Suite

Tests for vectors, bounding volumes, the spatial tree, traversal,
Barnes-Hut interaction and force laws.
"""
