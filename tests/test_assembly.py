"""Tests for lithophane and preview mesh assembly."""

from __future__ import annotations

import math
import unittest

import numpy as np

from lithophane.exceptions import DegenerateGeometryError
from lithophane.expressions import compile_expressions
from lithophane.mesh.assembly import (
    assemble_lithophane,
    assemble_preview,
    expected_triangle_count,
    extrude,
    generate_lithophane,
)
from lithophane.mesh.extrusion import DepthRange
from lithophane.mesh.grid import step_indices
from lithophane.mesh.normals import generate_point_cloud


def identity_x(x, y, w, h):
    return x


def identity_y(x, y, w, h):
    return y


def zero(x, y, w, h):
    return 0.0


def uniform_image(width: int, height: int, value: int = 128) -> np.ndarray:
    return np.full((height, width), value, dtype=np.uint8)


class TestFlatLithophane(unittest.TestCase):
    def setUp(self) -> None:
        self.depths = DepthRange(white_depth=0.5, black_depth=3.0)

    def test_two_by_two_is_closed(self) -> None:
        mesh = generate_lithophane(
            identity_x, identity_y, zero, uniform_image(2, 2), self.depths
        )
        self.assertEqual(len(mesh), 12)
        self.assertEqual(len(mesh), expected_triangle_count(2, 2))
        self.assertTrue(mesh.is_watertight())

    def test_triangle_count_formula(self) -> None:
        for width, height in [(2, 2), (3, 4), (5, 2), (7, 6)]:
            with self.subTest(width=width, height=height):
                rng = np.random.default_rng(width * 10 + height)
                image = rng.integers(0, 256, size=(height, width), dtype=np.uint8)
                mesh = generate_lithophane(identity_x, identity_y, zero, image, self.depths)
                expected = (
                    4 * (width - 1) * (height - 1) + 4 * (width - 1) + 4 * (height - 1)
                )
                self.assertEqual(len(mesh), expected)
                self.assertTrue(mesh.is_watertight())

    def test_backing_and_front_normals(self) -> None:
        width, height = 4, 3
        mesh = generate_lithophane(
            identity_x, identity_y, zero, uniform_image(width, height), self.depths
        )
        n_surface = 2 * (width - 1) * (height - 1)
        backing = mesh.normals[:n_surface]
        front = mesh.normals[n_surface:2 * n_surface]
        np.testing.assert_array_equal(backing, np.broadcast_to([0, 0, 1], backing.shape))
        np.testing.assert_array_equal(front, np.broadcast_to([0, 0, -1], front.shape))

    def test_front_is_offset_by_pixel_depth(self) -> None:
        width, height = 3, 3
        image = np.array([[0, 128, 255], [255, 0, 128], [64, 64, 64]], dtype=np.uint8)
        mesh = generate_lithophane(identity_x, identity_y, zero, image, self.depths)

        n_surface = 2 * (width - 1) * (height - 1)
        backing = mesh.vertices[:n_surface]
        front = mesh.vertices[n_surface:2 * n_surface]
        np.testing.assert_array_equal(backing[..., 2], 0)

        depth = self.depths.depths_for(image)
        for corner in front.reshape(-1, 3):
            col, row = int(corner[0]), int(corner[1])
            self.assertEqual(corner[2], -depth[row, col])

    def test_normals_face_outward(self) -> None:
        width, height = 5, 4
        mesh = generate_lithophane(
            identity_x, identity_y, zero, uniform_image(width, height, 0), self.depths
        )
        # Slab between z = -3 and z = 0
        centre = np.array([(width - 1) / 2, (height - 1) / 2, -1.5], dtype=np.float32)
        centroids = mesh.vertices.mean(axis=1)
        outward = np.sum((centroids - centre) * mesh.normals, axis=1)
        self.assertTrue(np.all(outward > 0))

    def test_white_and_black_depth_boundaries(self) -> None:
        cloud = generate_point_cloud(identity_x, identity_y, zero, 2, 1)
        image = np.array([[255, 0]], dtype=np.uint8)
        px = extrude(cloud, image, self.depths)
        self.assertEqual(px[0, 0, 2], -0.5)
        self.assertEqual(px[0, 1, 2], -3.0)

    def test_too_small_images_give_empty_mesh(self) -> None:
        for width, height in [(1, 5), (5, 1), (1, 1), (0, 0)]:
            with self.subTest(width=width, height=height):
                mesh = generate_lithophane(
                    identity_x, identity_y, zero, uniform_image(width, height), self.depths
                )
                self.assertEqual(len(mesh), 0)

    def test_image_size_must_match_point_cloud(self) -> None:
        cloud = generate_point_cloud(identity_x, identity_y, zero, 3, 3)
        with self.assertRaises(ValueError):
            assemble_lithophane(cloud, uniform_image(4, 3), self.depths)

    def test_degenerate_surface_raises(self) -> None:
        with self.assertRaises(DegenerateGeometryError):
            generate_lithophane(zero, zero, zero, uniform_image(3, 3), self.depths)

    def test_zero_depth_walls_are_degenerate(self) -> None:
        with self.assertRaises(DegenerateGeometryError) as ctx:
            generate_lithophane(
                identity_x, identity_y, zero, uniform_image(3, 3), DepthRange(0.0, 0.0)
            )
        self.assertTrue(str(ctx.exception).startswith("top wall"))

    def test_header_is_kept(self) -> None:
        mesh = generate_lithophane(
            identity_x, identity_y, zero, uniform_image(2, 2), self.depths, header="hello"
        )
        self.assertEqual(mesh.header, "hello")


class TestCurvedLithophane(unittest.TestCase):
    def test_half_cylinder_is_closed(self) -> None:
        def x_fn(x, y, w, h):
            return 20 * math.cos(x / (w - 1) * math.pi)

        def y_fn(x, y, w, h):
            return 20 * math.sin(x / (w - 1) * math.pi)

        def z_fn(x, y, w, h):
            return h - y

        rng = np.random.default_rng(3)
        image = rng.integers(0, 256, size=(5, 8), dtype=np.uint8)
        mesh = generate_lithophane(x_fn, y_fn, z_fn, image, DepthRange.default())
        self.assertEqual(len(mesh), expected_triangle_count(8, 5))
        self.assertTrue(mesh.is_watertight())

    def test_expressions_match_python_functions(self) -> None:
        x_fn, y_fn, z_fn = compile_expressions(
            "20 * cos(x / (w - 1) * pi)", "20 * sin(x / (w - 1) * pi)", "h - y"
        )
        image = np.full((4, 6), 200, dtype=np.uint8)
        from_expressions = generate_lithophane(x_fn, y_fn, z_fn, image, vectorized=True)
        from_functions = generate_lithophane(
            lambda x, y, w, h: 20 * math.cos(x / (w - 1) * math.pi),
            lambda x, y, w, h: 20 * math.sin(x / (w - 1) * math.pi),
            lambda x, y, w, h: h - y,
            image,
        )
        np.testing.assert_allclose(
            from_expressions.vertices, from_functions.vertices, atol=1e-4
        )


class TestPreview(unittest.TestCase):
    def test_step_one_count(self) -> None:
        mesh = assemble_preview(identity_x, identity_y, zero, 6, 4, step=1)
        self.assertEqual(len(mesh), 2 * 5 * 3)

    def test_stepped_count_and_edges(self) -> None:
        width, height, step = 15, 10, 4
        mesh = assemble_preview(identity_x, identity_y, zero, width, height, step=step)
        sampled_w = len(step_indices(width, step)) - 2
        sampled_h = len(step_indices(height, step)) - 2
        self.assertEqual((sampled_w, sampled_h), (5, 4))
        self.assertEqual(len(mesh), 2 * (sampled_w - 1) * (sampled_h - 1))

        low, high = mesh.bounds
        np.testing.assert_array_equal(low, [0, 0, 0])
        np.testing.assert_array_equal(high, [width - 1, height - 1, 0])

    def test_preview_normals(self) -> None:
        mesh = assemble_preview(identity_x, identity_y, zero, 9, 9, step=3)
        np.testing.assert_array_equal(
            mesh.normals, np.broadcast_to([0, 0, -1], mesh.normals.shape)
        )

    def test_preview_skips_normal_estimation(self) -> None:
        # Clamping collapses the border, which only normal estimation looks at
        def clamp_x(x, y, w, h):
            return max(x, 0.0)

        def clamp_y(x, y, w, h):
            return max(y, 0.0)

        with self.assertRaises(DegenerateGeometryError):
            generate_point_cloud(clamp_x, clamp_y, zero, 4, 4)
        mesh = assemble_preview(clamp_x, clamp_y, zero, 4, 4, step=1)
        self.assertEqual(len(mesh), 18)

    def test_tiny_preview_is_empty(self) -> None:
        self.assertEqual(len(assemble_preview(identity_x, identity_y, zero, 1, 8, step=2)), 0)

    def test_degenerate_preview_raises(self) -> None:
        with self.assertRaises(DegenerateGeometryError) as ctx:
            assemble_preview(identity_x, zero, zero, 4, 4, step=1)
        self.assertIn("preview", str(ctx.exception))


if __name__ == "__main__":
    unittest.main()
