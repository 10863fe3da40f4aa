"""Tests for the triangle builder and TriangleMesh."""

from __future__ import annotations

import unittest

import numpy as np

from lithophane.exceptions import DegenerateGeometryError
from lithophane.geometry.vector import Vector3, cross_rows
from lithophane.mesh.triangles import (
    Triangle,
    TriangleMesh,
    build_triangle,
    build_triangles,
)

TETRAHEDRON = np.array(
    [
        [[0, 0, 0], [0, 1, 0], [1, 0, 0]],
        [[0, 0, 0], [1, 0, 0], [0, 0, 1]],
        [[0, 0, 0], [0, 0, 1], [0, 1, 0]],
        [[1, 0, 0], [0, 1, 0], [0, 0, 1]],
    ],
    dtype=np.float32,
)


class TestBuildTriangle(unittest.TestCase):
    def test_counter_clockwise_normal(self) -> None:
        t = build_triangle(Vector3(0, 0, 0), Vector3(1, 0, 0), Vector3(0, 1, 0))
        self.assertEqual(t.normal, Vector3(0, 0, 1))
        self.assertEqual(t.vertices[1], Vector3(1, 0, 0))

    def test_reversed_winding_flips_normal(self) -> None:
        t = build_triangle(Vector3(0, 0, 0), Vector3(0, 1, 0), Vector3(1, 0, 0))
        self.assertEqual(t.normal, Vector3(0, 0, -1))

    def test_collinear_points_raise(self) -> None:
        with self.assertRaises(DegenerateGeometryError) as ctx:
            build_triangle(Vector3(0, 0, 0), Vector3(1, 0, 0), Vector3(2, 0, 0))
        self.assertIn("same line", str(ctx.exception))

    def test_coincident_points_raise(self) -> None:
        p = Vector3(1, 2, 3)
        with self.assertRaises(DegenerateGeometryError):
            build_triangle(p, p, Vector3(0, 0, 0))

    def test_triangle_needs_three_vertices(self) -> None:
        with self.assertRaises(ValueError):
            Triangle(Vector3(0, 0, 1), (Vector3(0, 0, 0), Vector3(1, 0, 0)))


class TestBuildTriangles(unittest.TestCase):
    def test_normals_agree_with_winding(self) -> None:
        rng = np.random.default_rng(42)
        points = rng.uniform(-10, 10, size=(200, 3, 3)).astype(np.float32)
        mesh = build_triangles(points)

        cross = cross_rows(points[:, 1] - points[:, 0], points[:, 2] - points[:, 0])
        self.assertTrue(np.all(np.sum(mesh.normals * cross, axis=1) > 0))
        np.testing.assert_allclose(np.linalg.norm(mesh.normals, axis=1), 1.0, atol=1e-6)

    def test_matches_scalar_builder(self) -> None:
        mesh = build_triangles(TETRAHEDRON)
        for i, corners in enumerate(TETRAHEDRON):
            expected = build_triangle(*(Vector3.from_array(c) for c in corners))
            np.testing.assert_allclose(
                mesh[i].normal.to_array(), expected.normal.to_array(), atol=1e-7
            )
            self.assertEqual(mesh[i].vertices, expected.vertices)

    def test_degenerate_triangle_is_named(self) -> None:
        points = np.array(
            [
                [[0, 0, 0], [1, 0, 0], [0, 1, 0]],
                [[0, 0, 0], [1, 1, 1], [2, 2, 2]],
            ],
            dtype=np.float32,
        )
        with self.assertRaises(DegenerateGeometryError) as ctx:
            build_triangles(points)
        self.assertIn("triangle 1 of 2", str(ctx.exception))

    def test_empty_input(self) -> None:
        mesh = build_triangles(np.empty((0, 3, 3)))
        self.assertEqual(len(mesh), 0)

    def test_rejects_bad_shape(self) -> None:
        with self.assertRaises(ValueError):
            build_triangles(np.zeros((2, 4, 3)))


class TestTriangleMesh(unittest.TestCase):
    def test_tetrahedron_is_watertight(self) -> None:
        mesh = build_triangles(TETRAHEDRON)
        self.assertTrue(mesh.is_watertight())
        self.assertEqual(len(mesh.edge_use_counts()), 6)

    def test_open_surface_is_not_watertight(self) -> None:
        mesh = build_triangles(TETRAHEDRON[:3])
        self.assertFalse(mesh.is_watertight())
        self.assertFalse(TriangleMesh.empty().is_watertight())

    def test_concatenate_keeps_order(self) -> None:
        first = build_triangles(TETRAHEDRON[:2], header="first")
        second = build_triangles(TETRAHEDRON[2:])
        joined = TriangleMesh.concatenate([first, second])
        self.assertEqual(joined.header, "first")
        np.testing.assert_array_equal(joined.vertices, TETRAHEDRON)

    def test_iteration_and_from_triangles(self) -> None:
        mesh = build_triangles(TETRAHEDRON)
        triangles = list(mesh)
        self.assertEqual(len(triangles), 4)
        rebuilt = TriangleMesh.from_triangles(triangles)
        np.testing.assert_array_equal(rebuilt.vertices, mesh.vertices)
        np.testing.assert_array_equal(rebuilt.normals, mesh.normals)

    def test_bounds(self) -> None:
        low, high = build_triangles(TETRAHEDRON).bounds
        np.testing.assert_array_equal(low, [0, 0, 0])
        np.testing.assert_array_equal(high, [1, 1, 1])
        self.assertIsNone(TriangleMesh.empty().bounds)

    def test_mismatched_lengths_raise(self) -> None:
        with self.assertRaises(ValueError):
            TriangleMesh(np.zeros((2, 3)), np.zeros((1, 3, 3)))


if __name__ == "__main__":
    unittest.main()
