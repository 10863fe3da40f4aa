"""Per-vertex normal estimation from a bordered vertex grid."""

from __future__ import annotations

import logging

import numpy as np

from lithophane.exceptions import DegenerateGeometryError
from lithophane.geometry.vector import Vector3, cross_rows, normalize_rows
from lithophane.mesh.grid import CoordinateFunction, VertexGrid, evaluate_grid

logger = logging.getLogger(__name__)


class PointCloud:
    """Interior surface vertices with one normal per vertex.

    Args:
        vertices: Vertex positions, shape (height, width, 3).
        normals: Unit normals in the same order, shape (height, width, 3).
    """

    def __init__(self, vertices: np.ndarray, normals: np.ndarray):
        self._vertices = np.asarray(vertices, dtype=np.float32)
        self._normals = np.asarray(normals, dtype=np.float32)

        if self._vertices.ndim != 3 or self._vertices.shape[2] != 3:
            raise ValueError("vertices must have shape (height, width, 3)")
        if self._vertices.shape != self._normals.shape:
            raise ValueError(
                f"vertices and normals must have same shape, "
                f"got {self._vertices.shape} and {self._normals.shape}"
            )

    @property
    def vertices(self) -> np.ndarray:
        return self._vertices

    @property
    def normals(self) -> np.ndarray:
        return self._normals

    @property
    def width(self) -> int:
        return self._vertices.shape[1]

    @property
    def height(self) -> int:
        return self._vertices.shape[0]

    def vertex(self, col: int, row: int) -> Vector3:
        return Vector3.from_array(self._vertices[row, col])

    def normal(self, col: int, row: int) -> Vector3:
        return Vector3.from_array(self._normals[row, col])

    def __repr__(self) -> str:
        return f"PointCloud(width={self.width}, height={self.height})"


def _normalize_at(v: np.ndarray, what: str) -> np.ndarray:
    """normalize_rows, reporting failures by interior column and row."""
    lengths = np.sqrt(np.sum(v * v, axis=-1))
    zero = np.argwhere(lengths == 0.0)
    if len(zero):
        row, col = (int(i) for i in zero[0])
        raise DegenerateGeometryError(
            f"cannot estimate surface normal at column {col}, row {row}: {what} has no length"
        )
    return normalize_rows(v)


def estimate_normals(grid: VertexGrid) -> PointCloud:
    """Estimate a normal for every interior vertex of a bordered grid.

    For a vertex ``v``, the cross products of (below, right) and (above,
    left) neighbour offsets are normalized separately, then their sum is
    normalized.

    Args:
        grid: Grid including the one-vertex border.

    Returns:
        PointCloud of the border-stripped vertices and their normals.

    Raises:
        DegenerateGeometryError: If the neighbours of a vertex are collinear
            or the two estimates cancel out.
    """
    g = grid.array
    if grid.width < 3 or grid.height < 3:
        empty = np.empty((max(grid.height - 2, 0), max(grid.width - 2, 0), 3))
        return PointCloud(empty, empty.copy())

    v = g[1:-1, 1:-1]
    below = g[2:, 1:-1] - v
    right = g[1:-1, 2:] - v
    above = g[:-2, 1:-1] - v
    left = g[1:-1, :-2] - v

    lower_right = _normalize_at(cross_rows(below, right), "cross product of lower and right neighbours")
    upper_left = _normalize_at(cross_rows(above, left), "cross product of upper and left neighbours")
    normals = _normalize_at(lower_right + upper_left, "sum of neighbour normals")

    logger.debug("Estimated %d vertex normals", normals.shape[0] * normals.shape[1])
    return PointCloud(v.copy(), normals)


def generate_point_cloud(
    x_fn: CoordinateFunction,
    y_fn: CoordinateFunction,
    z_fn: CoordinateFunction,
    width: int,
    height: int,
    step: int = 1,
    vectorized: bool = False,
) -> PointCloud:
    """Evaluate the coordinate functions and estimate vertex normals.

    See :func:`~lithophane.mesh.grid.evaluate_grid` for the arguments.
    """
    grid = evaluate_grid(x_fn, y_fn, z_fn, width, height, step=step, vectorized=vectorized)
    return estimate_normals(grid)
