"""Depth configuration for extruding pixels off the backing surface."""

from __future__ import annotations

import math

import numpy as np

DEFAULT_WHITE_DEPTH = 0.5
DEFAULT_BLACK_DEPTH = 3.0


class DepthRange:
    """Extrusion depths for the brightest and darkest pixel values.

    A pixel with gray value ``g`` is extruded by

        depth = white_depth + (255 - g) / 255 * (black_depth - white_depth)

    so white (255) pixels sit ``white_depth`` off the backing and black (0)
    pixels ``black_depth`` off it. Darker pixels are thicker and let less
    light through.

    Args:
        white_depth: Depth for gray value 255.
        black_depth: Depth for gray value 0.

    Example:
        >>> depths = DepthRange(white_depth=0.5, black_depth=3.0)
        >>> depths.depth_for(0)
        3.0
    """

    def __init__(
        self,
        white_depth: float = DEFAULT_WHITE_DEPTH,
        black_depth: float = DEFAULT_BLACK_DEPTH,
    ):
        if not (math.isfinite(white_depth) and math.isfinite(black_depth)):
            raise ValueError("Depths must be finite numbers")
        self._white_depth = float(white_depth)
        self._black_depth = float(black_depth)

    @classmethod
    def default(cls) -> DepthRange:
        """Create the range used by the command-line tool (0.5 to 3.0)."""
        return cls(DEFAULT_WHITE_DEPTH, DEFAULT_BLACK_DEPTH)

    @classmethod
    def from_thickness(cls, min_thickness: float, max_thickness: float) -> DepthRange:
        """Create a range from the thinnest (white) and thickest (black) points.

        Args:
            min_thickness: Thickness behind white pixels.
            max_thickness: Thickness behind black pixels.

        Returns:
            DepthRange with white_depth=min_thickness, black_depth=max_thickness.
        """
        return cls(white_depth=min_thickness, black_depth=max_thickness)

    @property
    def white_depth(self) -> float:
        return self._white_depth

    @property
    def black_depth(self) -> float:
        return self._black_depth

    @property
    def thickness_span(self) -> float:
        """Difference between black and white depth."""
        return self._black_depth - self._white_depth

    def depth_for(self, gray: int) -> float:
        """Return the extrusion depth of a single gray value."""
        return float(self.depths_for(np.array([gray], dtype=np.uint8))[0])

    def depths_for(self, image: np.ndarray) -> np.ndarray:
        """Return per-pixel extrusion depths.

        Args:
            image: uint8 gray values of any shape.

        Returns:
            float32 array of the same shape.
        """
        gray = np.asarray(image)
        if gray.dtype != np.uint8:
            raise ValueError(f"image must be uint8, got {gray.dtype}")

        white = np.float32(self._white_depth)
        black = np.float32(self._black_depth)
        inverted = (np.float32(255) - gray.astype(np.float32)) / np.float32(255)
        return white + inverted * (black - white)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DepthRange):
            return NotImplemented
        return (self._white_depth, self._black_depth) == (other._white_depth, other._black_depth)

    def __repr__(self) -> str:
        return (
            f"DepthRange(white_depth={self._white_depth}, "
            f"black_depth={self._black_depth})"
        )
