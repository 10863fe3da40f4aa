"""Bytes-in, bytes-out entry points for embedding in other applications.

These mirror what a web front end needs: expressions arrive as text,
images as encoded file contents, and the result is binary STL.
"""

from __future__ import annotations

from lithophane.io.readers import image_dimensions
from lithophane.io.writers import to_stl_bytes
from lithophane.mesh.builder import LithophaneBuilder


def generate_lithophane(
    x_expression: str,
    y_expression: str,
    z_expression: str,
    image: bytes,
    white_depth: float,
    black_depth: float,
) -> bytes:
    """Generate a lithophane and return it as binary STL.

    Args:
        x_expression: Expression for the X coordinate over x, y, w, h.
        y_expression: Expression for the Y coordinate.
        z_expression: Expression for the Z coordinate.
        image: Encoded image file contents (PNG, JPEG, ...).
        white_depth: Extrusion depth of white pixels.
        black_depth: Extrusion depth of black pixels.

    Raises:
        ImageLoadError: If the image cannot be decoded.
        ExpressionError: If an expression is invalid.
        DegenerateGeometryError: If the surface yields degenerate triangles.
    """
    builder = (
        LithophaneBuilder()
        .load_image(image)
        .set_expressions(x_expression, y_expression, z_expression)
        .set_depths(white_depth, black_depth)
    )
    return to_stl_bytes(builder.build())


def generate_preview(
    x_expression: str,
    y_expression: str,
    z_expression: str,
    width: int,
    height: int,
    step: int,
) -> bytes:
    """Generate a preview of the backing surface and return it as binary STL.

    Args:
        x_expression: Expression for the X coordinate over x, y, w, h.
        y_expression: Expression for the Y coordinate.
        z_expression: Expression for the Z coordinate.
        width: Image width in pixels.
        height: Image height in pixels.
        step: Sampling step.
    """
    builder = LithophaneBuilder().set_expressions(x_expression, y_expression, z_expression)
    return to_stl_bytes(builder.build_preview(width, height, step))


def get_image_dimensions(image: bytes) -> tuple[int, int]:
    """Return (width, height) of an encoded image."""
    return image_dimensions(image)
