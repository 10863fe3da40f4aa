"""Sampling the coordinate functions over a bordered index grid."""

from __future__ import annotations

import logging
from typing import Callable, Sequence

import numpy as np

from lithophane.geometry.vector import Vector3

logger = logging.getLogger(__name__)

CoordinateFunction = Callable[[float, float, float, float], float]


def step_indices(length: int, step: int) -> list[int]:
    """Return the sample indices along one image axis, border included.

    Indices run from ``-step`` while below ``length``, stepping by ``step``.
    ``length - 1`` is appended if the stepping misses it, so the true image
    edge is always sampled, and one more index mirrors the second-to-last
    around ``length - 1`` to give the border the same spacing as the final
    step.

    Example:
        >>> step_indices(15, 4)
        [-4, 0, 4, 8, 12, 14, 16]
        >>> step_indices(3, 1)
        [-1, 0, 1, 2, 3]
    """
    if step < 1:
        raise ValueError("Step must be at least 1")
    if length < 1:
        return []

    indices = list(range(-step, length, step))

    if (length - 1) % step != 0:
        indices.append(length - 1)
    indices.append(2 * (length - 1) - indices[-2])

    return indices


class VertexGrid:
    """2D grid of vertices backed by a flat float32 buffer.

    Rows follow image rows (top first) and columns follow image columns.

    Args:
        vertices: Array of shape (rows * cols, 3) or (rows, cols, 3).
        width: Number of columns.
        height: Number of rows.
        x_indices: Image column index each grid column was sampled at.
        y_indices: Image row index each grid row was sampled at.
    """

    def __init__(
        self,
        vertices: np.ndarray,
        width: int,
        height: int,
        x_indices: Sequence[int] | None = None,
        y_indices: Sequence[int] | None = None,
    ):
        self._buffer = np.asarray(vertices, dtype=np.float32).reshape(width * height, 3)
        self._width = width
        self._height = height
        self._x_indices = list(x_indices) if x_indices is not None else list(range(width))
        self._y_indices = list(y_indices) if y_indices is not None else list(range(height))

        if len(self._x_indices) != width or len(self._y_indices) != height:
            raise ValueError("index sequences must match grid dimensions")

    @property
    def width(self) -> int:
        """Number of columns."""
        return self._width

    @property
    def height(self) -> int:
        """Number of rows."""
        return self._height

    @property
    def x_indices(self) -> list[int]:
        return list(self._x_indices)

    @property
    def y_indices(self) -> list[int]:
        return list(self._y_indices)

    @property
    def array(self) -> np.ndarray:
        """Vertices as a (height, width, 3) view of the buffer."""
        return self._buffer.reshape(self._height, self._width, 3)

    @property
    def flat(self) -> np.ndarray:
        """Vertices as the (height * width, 3) buffer in row-major order."""
        return self._buffer

    def _check(self, col: int, row: int) -> None:
        if not (0 <= col < self._width and 0 <= row < self._height):
            raise IndexError(
                f"vertex ({col}, {row}) outside grid of {self._width} x {self._height}"
            )

    def vertex(self, col: int, row: int) -> Vector3:
        """Return the vertex at a column and row."""
        self._check(col, row)
        return Vector3.from_array(self._buffer[row * self._width + col])

    def interior(self) -> VertexGrid:
        """Return a copy with the outer ring of vertices removed."""
        if self._width < 2 or self._height < 2:
            return VertexGrid(np.empty((0, 3)), 0, 0)
        return VertexGrid(
            self.array[1:-1, 1:-1].copy(),
            self._width - 2,
            self._height - 2,
            self._x_indices[1:-1],
            self._y_indices[1:-1],
        )

    def __len__(self) -> int:
        return self._width * self._height

    def __repr__(self) -> str:
        return f"VertexGrid(width={self._width}, height={self._height})"


def evaluate_grid(
    x_fn: CoordinateFunction,
    y_fn: CoordinateFunction,
    z_fn: CoordinateFunction,
    width: int,
    height: int,
    step: int = 1,
    vectorized: bool = False,
) -> VertexGrid:
    """Sample the coordinate functions over the image with a one-step border.

    Each function receives ``(x_i, y_i, width, height)``, where ``x_i``/``y_i``
    come from :func:`step_indices` and may be negative or past the image edge.
    ``width``/``height`` are always the full image size, whatever the step.

    Args:
        x_fn: Function giving the X world coordinate.
        y_fn: Function giving the Y world coordinate.
        z_fn: Function giving the Z world coordinate.
        width: Image width in pixels.
        height: Image height in pixels.
        step: Sampling step; 1 samples every pixel.
        vectorized: If True, each function is called once with 2D index
            arrays and must return values broadcastable to that shape.

    Returns:
        VertexGrid of shape len(step_indices(height)) x len(step_indices(width)).
    """
    x_range = step_indices(width, step)
    y_range = step_indices(height, step)
    ewc = len(x_range)  # extended width count
    ehc = len(y_range)  # extended height count

    w = float(width)
    h = float(height)
    vertices = np.empty((ehc, ewc, 3), dtype=np.float32)

    if vectorized:
        xs, ys = np.meshgrid(
            np.asarray(x_range, dtype=float), np.asarray(y_range, dtype=float)
        )
        for axis, fn in enumerate((x_fn, y_fn, z_fn)):
            vertices[:, :, axis] = np.broadcast_to(fn(xs, ys, w, h), xs.shape)
    else:
        for row, y_i in enumerate(y_range):
            for col, x_i in enumerate(x_range):
                x_f = float(x_i)
                y_f = float(y_i)
                vertices[row, col] = (
                    x_fn(x_f, y_f, w, h),
                    y_fn(x_f, y_f, w, h),
                    z_fn(x_f, y_f, w, h),
                )

    logger.debug(
        "Evaluated %d x %d grid for %d x %d image (step %d)",
        ewc, ehc, width, height, step,
    )
    return VertexGrid(vertices, ewc, ehc, x_range, y_range)
