"""Triangulation of the backing surface, the extruded pixel surface and the side walls."""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

from lithophane.exceptions import DegenerateGeometryError
from lithophane.mesh.extrusion import DepthRange
from lithophane.mesh.grid import CoordinateFunction, evaluate_grid
from lithophane.mesh.normals import PointCloud, generate_point_cloud
from lithophane.mesh.triangles import TriangleMesh, build_triangles

logger = logging.getLogger(__name__)


def expected_triangle_count(width: int, height: int) -> int:
    """Number of triangles in a full lithophane of a width x height image."""
    if width < 2 or height < 2:
        return 0
    return 4 * (width - 1) * (height - 1) + 4 * (width - 1) + 4 * (height - 1)


def _interleave(*triangles: Sequence[np.ndarray]) -> np.ndarray:
    """Stack corner arrays into triangles, alternating between the given patterns.

    Each pattern is three (..., 3) corner arrays of equal shape. The result
    has shape (n, 3, 3) with the patterns' triangles for each position
    adjacent, positions in row-major order.
    """
    stacked = [np.stack(corners, axis=-2) for corners in triangles]
    return np.stack(stacked, axis=-3).reshape(-1, 3, 3)


def _build(name: str, points: np.ndarray, header: str) -> TriangleMesh:
    try:
        return build_triangles(points, header=header)
    except DegenerateGeometryError as e:
        raise DegenerateGeometryError(f"{name}: {e}") from e


def extrude(point_cloud: PointCloud, image: np.ndarray, depths: DepthRange) -> np.ndarray:
    """Move every vertex along its normal by its pixel's depth.

    Args:
        point_cloud: Backing vertices and normals.
        image: uint8 gray values, shape (height, width) of the point cloud.
        depths: Depth range for white and black pixels.

    Returns:
        Extruded vertices, shape (height, width, 3).
    """
    image = np.asarray(image)
    if image.shape != (point_cloud.height, point_cloud.width):
        raise ValueError(
            f"image shape {image.shape} does not match point cloud of "
            f"{point_cloud.height} rows x {point_cloud.width} columns"
        )
    pixel_depths = depths.depths_for(image)
    return point_cloud.vertices + point_cloud.normals * pixel_depths[..., np.newaxis]


def assemble_lithophane(
    point_cloud: PointCloud,
    image: np.ndarray,
    depths: DepthRange,
    header: str = "",
) -> TriangleMesh:
    """Build the closed lithophane solid.

    Triangles come in this order: backing surface, extruded pixel surface,
    then the walls along the top, bottom, left and right image edges. The
    image origin is top left, so row 0 is the top edge.

    Args:
        point_cloud: Backing vertices and normals.
        image: uint8 gray values, shape (height, width) of the point cloud.
        depths: Depth range for white and black pixels.
        header: Header text for the mesh.

    Returns:
        TriangleMesh with expected_triangle_count(width, height) triangles.

    Raises:
        ValueError: If the image size does not match the point cloud.
        DegenerateGeometryError: If any triangle would be degenerate.
    """
    px = extrude(point_cloud, image, depths)
    width = point_cloud.width
    height = point_cloud.height

    if width < 2 or height < 2:
        logger.debug("Image of %d x %d pixels has no area to triangulate", width, height)
        return TriangleMesh.empty(header)

    v = point_cloud.vertices

    # Corners of each grid block
    v_tl, v_tr, v_bl, v_br = v[:-1, :-1], v[:-1, 1:], v[1:, :-1], v[1:, 1:]
    p_tl, p_tr, p_bl, p_br = px[:-1, :-1], px[:-1, 1:], px[1:, :-1], px[1:, 1:]

    sections = [
        ("backing", _interleave((v_tl, v_br, v_bl), (v_tl, v_tr, v_br))),
        ("front", _interleave((p_tl, p_bl, p_br), (p_tl, p_br, p_tr))),
    ]

    # Along each edge, "cur" is a vertex and "nxt" the next one along the edge
    top_cur, top_nxt = v[0, :-1], v[0, 1:]
    ptop_cur, ptop_nxt = px[0, :-1], px[0, 1:]
    sections.append(
        ("top wall", _interleave((top_cur, ptop_cur, ptop_nxt), (top_cur, ptop_nxt, top_nxt)))
    )

    bot_cur, bot_nxt = v[-1, :-1], v[-1, 1:]
    pbot_cur, pbot_nxt = px[-1, :-1], px[-1, 1:]
    sections.append(
        ("bottom wall", _interleave((bot_cur, pbot_nxt, pbot_cur), (bot_cur, bot_nxt, pbot_nxt)))
    )

    left_cur, left_nxt = v[:-1, 0], v[1:, 0]
    pleft_cur, pleft_nxt = px[:-1, 0], px[1:, 0]
    sections.append(
        ("left wall", _interleave((left_cur, left_nxt, pleft_nxt), (left_cur, pleft_nxt, pleft_cur)))
    )

    right_cur, right_nxt = v[:-1, -1], v[1:, -1]
    pright_cur, pright_nxt = px[:-1, -1], px[1:, -1]
    sections.append(
        ("right wall", _interleave((right_cur, pright_nxt, right_nxt), (right_cur, pright_cur, pright_nxt)))
    )

    mesh = TriangleMesh.concatenate(
        [_build(name, points, header) for name, points in sections], header=header
    )
    logger.debug("Assembled lithophane with %d triangles", len(mesh))
    return mesh


def generate_lithophane(
    x_fn: CoordinateFunction,
    y_fn: CoordinateFunction,
    z_fn: CoordinateFunction,
    image: np.ndarray,
    depths: DepthRange | None = None,
    vectorized: bool = False,
    header: str = "",
) -> TriangleMesh:
    """Create a lithophane whose backing is shaped by three coordinate functions.

    Args:
        x_fn: Function (x, y, w, h) -> X world coordinate.
        y_fn: Function (x, y, w, h) -> Y world coordinate.
        z_fn: Function (x, y, w, h) -> Z world coordinate.
        image: uint8 gray values, shape (height, width).
        depths: Depth range. Defaults to DepthRange.default().
        vectorized: Call the functions with whole index arrays.
        header: Header text for the mesh.

    Returns:
        Closed TriangleMesh.

    Raises:
        DegenerateGeometryError: If the surface has collinear or coincident samples.
    """
    image = np.asarray(image)
    if image.ndim != 2:
        raise ValueError(f"image must be a 2D grayscale array, got shape {image.shape}")
    if depths is None:
        depths = DepthRange.default()

    height, width = image.shape
    point_cloud = generate_point_cloud(
        x_fn, y_fn, z_fn, width, height, step=1, vectorized=vectorized
    )
    return assemble_lithophane(point_cloud, image, depths, header=header)


def assemble_preview(
    x_fn: CoordinateFunction,
    y_fn: CoordinateFunction,
    z_fn: CoordinateFunction,
    width: int,
    height: int,
    step: int = 1,
    vectorized: bool = False,
    header: str = "",
) -> TriangleMesh:
    """Triangulate only the backing surface, sampling every ``step`` pixels.

    The image edges are always sampled exactly. No normals, depths or walls
    are computed.

    Args:
        x_fn: Function (x, y, w, h) -> X world coordinate.
        y_fn: Function (x, y, w, h) -> Y world coordinate.
        z_fn: Function (x, y, w, h) -> Z world coordinate.
        width: Image width in pixels.
        height: Image height in pixels.
        step: Sampling step; larger steps give fewer, larger triangles.
        vectorized: Call the functions with whole index arrays.
        header: Header text for the mesh.

    Returns:
        TriangleMesh with 2 * (W' - 1) * (H' - 1) triangles, where W' x H'
        is the number of sampled columns and rows.
    """
    grid = evaluate_grid(x_fn, y_fn, z_fn, width, height, step=step, vectorized=vectorized)
    surface = grid.interior()

    if surface.width < 2 or surface.height < 2:
        return TriangleMesh.empty(header)

    v = surface.array
    v_tl, v_tr, v_bl, v_br = v[:-1, :-1], v[:-1, 1:], v[1:, :-1], v[1:, 1:]
    mesh = _build(
        "preview", _interleave((v_tl, v_bl, v_br), (v_tl, v_br, v_tr)), header
    )
    logger.debug(
        "Assembled preview of %d x %d samples with %d triangles",
        surface.width, surface.height, len(mesh),
    )
    return mesh
