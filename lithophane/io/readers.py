"""Readers for source images and binary STL files."""

from __future__ import annotations

import io
import struct
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image, UnidentifiedImageError

from lithophane.exceptions import ImageLoadError, MeshGenerationError
from lithophane.mesh.triangles import TriangleMesh

ImageSource = Union[str, Path, bytes]

STL_HEADER_SIZE = 80
STL_RECORD_DTYPE = np.dtype([
    ("normal", "<f4", (3,)),
    ("vertices", "<f4", (3, 3)),
    ("attr", "<u2"),
])


def _open(source: ImageSource) -> Image.Image:
    """Open an image from a path or from encoded bytes."""
    if isinstance(source, (bytes, bytearray)):
        return Image.open(io.BytesIO(source))

    path = Path(source)
    if not path.exists():
        raise ImageLoadError(f"file not found: {path}")
    return Image.open(path)


class ImageReader:
    """Reader for raster images in any format Pillow can decode.

    Images are converted to 8-bit luma, so color and alpha are dropped.
    The result is a uint8 array of shape (height, width), origin top left.
    """

    mode = "L"

    def read(self, source: ImageSource) -> np.ndarray:
        """Decode an image to a grayscale array.

        Args:
            source: Path to an image file, or the encoded file contents.

        Returns:
            uint8 array of shape (height, width).

        Raises:
            ImageLoadError: If the image cannot be read or decoded.
        """
        try:
            with _open(source) as img:
                gray = img.convert(self.mode)
                return np.asarray(gray, dtype=np.uint8).copy()
        except ImageLoadError:
            raise
        except (UnidentifiedImageError, OSError, ValueError) as e:
            raise ImageLoadError(str(e)) from e

    def dimensions(self, source: ImageSource) -> tuple[int, int]:
        """Return (width, height) of an image without decoding pixel data.

        Raises:
            ImageLoadError: If the image cannot be identified.
        """
        try:
            with _open(source) as img:
                return img.size
        except ImageLoadError:
            raise
        except (UnidentifiedImageError, OSError, ValueError) as e:
            raise ImageLoadError(str(e)) from e


def load_grayscale_image(source: ImageSource) -> np.ndarray:
    """Convenience function to decode an image to a grayscale array.

    Args:
        source: Path to an image file, or the encoded file contents.

    Returns:
        uint8 array of shape (height, width).
    """
    return ImageReader().read(source)


def image_dimensions(source: ImageSource) -> tuple[int, int]:
    """Convenience function to get (width, height) of an image."""
    return ImageReader().dimensions(source)


def read_stl(source: str | Path | bytes) -> TriangleMesh:
    """Read a binary STL file back into a TriangleMesh.

    Args:
        source: Path to an STL file, or its contents.

    Returns:
        TriangleMesh with the stored normals, vertices and header text.

    Raises:
        MeshGenerationError: If the data is not a well-formed binary STL.
    """
    if isinstance(source, (bytes, bytearray)):
        data = bytes(source)
    else:
        data = Path(source).read_bytes()

    if len(data) < STL_HEADER_SIZE + 4:
        raise MeshGenerationError("STL data is shorter than its header")

    (n_triangles,) = struct.unpack_from("<I", data, STL_HEADER_SIZE)
    expected = STL_HEADER_SIZE + 4 + n_triangles * STL_RECORD_DTYPE.itemsize
    if len(data) != expected:
        raise MeshGenerationError(
            f"STL size mismatch: {n_triangles} triangles need {expected} bytes, "
            f"got {len(data)}"
        )

    records = np.frombuffer(data, dtype=STL_RECORD_DTYPE, offset=STL_HEADER_SIZE + 4)
    header = data[:STL_HEADER_SIZE].rstrip(b"\0").decode("ascii", errors="replace")
    return TriangleMesh(records["normal"], records["vertices"], header=header)
