"""High-level LithophaneBuilder API."""

from __future__ import annotations

import logging

import numpy as np

from lithophane.exceptions import MeshGenerationError
from lithophane.expressions import compile_expressions
from lithophane.io.readers import ImageSource, load_grayscale_image
from lithophane.mesh.assembly import assemble_preview, generate_lithophane
from lithophane.mesh.extrusion import DepthRange
from lithophane.mesh.grid import CoordinateFunction
from lithophane.mesh.triangles import TriangleMesh

logger = logging.getLogger(__name__)


class LithophaneBuilder:
    """High-level API for building lithophane meshes.

    Collects the configuration, then runs the stateless generation functions:
    1. Define the backing surface from three coordinate functions or expressions
    2. Configure the white and black extrusion depths
    3. Load the grayscale image
    4. Build the closed mesh, or a cheap preview of the backing surface

    Args:
        header: Text written into the STL header of built meshes.

    Example:
        >>> from lithophane import LithophaneBuilder
        >>> mesh = (
        ...     LithophaneBuilder()
        ...     .set_expressions("50 * cos(x / w * pi)", "50 * sin(x / w * pi)", "-y")
        ...     .set_depths(white_depth=0.5, black_depth=3.0)
        ...     .load_image("photo.png")
        ...     .build()
        ... )
    """

    def __init__(self, header: str = ""):
        self._header = header

        # Configuration (set via builder methods)
        self._functions: tuple[CoordinateFunction, CoordinateFunction, CoordinateFunction] | None = None
        self._vectorized = False
        self._depths = DepthRange.default()

        # Data (loaded via builder methods)
        self._image: np.ndarray | None = None

        # Generated objects (created during build)
        self._mesh: TriangleMesh | None = None

    @property
    def depths(self) -> DepthRange:
        """Return the configured depth range."""
        return self._depths

    @property
    def image(self) -> np.ndarray | None:
        """Return the grayscale image, or None if not loaded."""
        return self._image

    @property
    def image_size(self) -> tuple[int, int] | None:
        """Return (width, height) of the loaded image."""
        if self._image is None:
            return None
        return self._image.shape[1], self._image.shape[0]

    @property
    def is_configured(self) -> bool:
        """Return True if everything needed by build() is set."""
        return self._functions is not None and self._image is not None

    def set_coordinate_functions(
        self,
        x_fn: CoordinateFunction,
        y_fn: CoordinateFunction,
        z_fn: CoordinateFunction,
        vectorized: bool | None = None,
    ) -> LithophaneBuilder:
        """Set the functions mapping (x, y, w, h) to world coordinates.

        Args:
            x_fn: Function giving the X coordinate.
            y_fn: Function giving the Y coordinate.
            z_fn: Function giving the Z coordinate.
            vectorized: Whether the functions accept index arrays. If None,
                taken from their ``vectorized`` attribute (all three must have it).

        Returns:
            Self for method chaining.
        """
        if vectorized is None:
            vectorized = all(getattr(fn, "vectorized", False) for fn in (x_fn, y_fn, z_fn))
        self._functions = (x_fn, y_fn, z_fn)
        self._vectorized = vectorized
        return self

    def set_expressions(self, x_expression: str, y_expression: str, z_expression: str) -> LithophaneBuilder:
        """Set the backing surface from expressions over x, y, w and h.

        Returns:
            Self for method chaining.

        Raises:
            ExpressionError: If an expression is invalid.
        """
        x_fn, y_fn, z_fn = compile_expressions(x_expression, y_expression, z_expression)
        return self.set_coordinate_functions(x_fn, y_fn, z_fn, vectorized=True)

    def set_depths(self, white_depth: float, black_depth: float) -> LithophaneBuilder:
        """Set the extrusion depths of white and black pixels.

        Returns:
            Self for method chaining.
        """
        self._depths = DepthRange(white_depth=white_depth, black_depth=black_depth)
        return self

    def set_depth_range(self, depths: DepthRange) -> LithophaneBuilder:
        """Set the depth range directly.

        Returns:
            Self for method chaining.
        """
        self._depths = depths
        return self

    def load_image(self, source: ImageSource) -> LithophaneBuilder:
        """Load and convert an image to grayscale.

        Args:
            source: Path to an image file, or the encoded file contents.

        Returns:
            Self for method chaining.
        """
        self._image = load_grayscale_image(source)
        return self

    def set_image(self, image: np.ndarray) -> LithophaneBuilder:
        """Set an already decoded grayscale image.

        Args:
            image: uint8 array of shape (height, width).

        Returns:
            Self for method chaining.
        """
        image = np.asarray(image)
        if image.ndim != 2 or image.dtype != np.uint8:
            raise ValueError("image must be a 2D uint8 array")
        self._image = image
        return self

    def _validate_configuration(self, need_image: bool = True) -> None:
        """Validate that all required parameters are set."""
        if self._functions is None:
            raise MeshGenerationError(
                "Coordinate functions not set. "
                "Call set_expressions() or set_coordinate_functions() first."
            )
        if need_image and self._image is None:
            raise MeshGenerationError(
                "Image not loaded. Call load_image() or set_image() first."
            )

    def build(self) -> TriangleMesh:
        """Build the closed lithophane mesh.

        Returns:
            TriangleMesh ready to be saved as STL.

        Raises:
            MeshGenerationError: If required parameters are not set.
            DegenerateGeometryError: If the surface yields degenerate triangles.
        """
        self._validate_configuration()
        x_fn, y_fn, z_fn = self._functions
        height, width = self._image.shape

        logger.info(
            "Generating lithophane for %d x %d image (%s)", width, height, self._depths
        )
        self._mesh = generate_lithophane(
            x_fn,
            y_fn,
            z_fn,
            self._image,
            self._depths,
            vectorized=self._vectorized,
            header=self._header,
        )
        logger.info("Generated %d triangles", len(self._mesh))
        return self._mesh

    def build_preview(
        self,
        width: int | None = None,
        height: int | None = None,
        step: int = 1,
    ) -> TriangleMesh:
        """Build a preview of the backing surface only.

        Args:
            width: Image width. Defaults to the loaded image's width.
            height: Image height. Defaults to the loaded image's height.
            step: Sampling step; larger is coarser and faster.

        Returns:
            TriangleMesh of the backing surface.

        Raises:
            MeshGenerationError: If functions or dimensions are missing.
        """
        self._validate_configuration(need_image=False)
        if width is None or height is None:
            if self._image is None:
                raise MeshGenerationError(
                    "Preview size unknown. Pass width and height or load an image first."
                )
            image_width, image_height = self.image_size
            width = image_width if width is None else width
            height = image_height if height is None else height

        x_fn, y_fn, z_fn = self._functions
        logger.info("Generating preview for %d x %d image with step %d", width, height, step)
        return assemble_preview(
            x_fn,
            y_fn,
            z_fn,
            width,
            height,
            step=step,
            vectorized=self._vectorized,
            header=self._header,
        )

    def get_mesh(self) -> TriangleMesh | None:
        """Return the last mesh built by build()."""
        return self._mesh

    def get_mesh_info(self) -> dict:
        """Return information about the configuration and built mesh.

        Returns:
            Dictionary with configuration and mesh statistics.
        """
        info = {
            "image_size": self.image_size,
            "white_depth": self._depths.white_depth,
            "black_depth": self._depths.black_depth,
            "vectorized": self._vectorized,
        }

        if self._mesh is not None:
            info["n_triangles"] = len(self._mesh)
            bounds = self._mesh.bounds
            if bounds is not None:
                info["bounds"] = (bounds[0].tolist(), bounds[1].tolist())

        return info
