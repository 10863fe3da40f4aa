"""lithophane - parametric lithophane mesh generation.

Turns a grayscale image into a closed STL solid whose thickness encodes
brightness. The backing surface is shaped by three expressions over the
pixel column x, row y, and the image width w and height h, so flat panels,
cylinders and waves all come from the same generator.

Example:
    >>> from lithophane import LithophaneBuilder
    >>> mesh = (
    ...     LithophaneBuilder()
    ...     .set_expressions("x", "y", "0")
    ...     .set_depths(white_depth=0.5, black_depth=3.0)
    ...     .load_image("photo.png")
    ...     .build()
    ... )
    >>> from lithophane.io import save_stl
    >>> save_stl(mesh, "photo.stl")
"""

from lithophane.exceptions import (
    DegenerateGeometryError,
    ExpressionError,
    ImageLoadError,
    LithophaneError,
    MeshGenerationError,
)
from lithophane.geometry import Vector3
from lithophane.mesh import DepthRange, LithophaneBuilder, Triangle, TriangleMesh

__version__ = "0.1.0"

__all__ = [
    # Main API
    "LithophaneBuilder",
    "DepthRange",
    "Vector3",
    "Triangle",
    "TriangleMesh",
    # Exceptions
    "LithophaneError",
    "DegenerateGeometryError",
    "ExpressionError",
    "ImageLoadError",
    "MeshGenerationError",
]
