"""I/O utilities for reading images and writing meshes."""

from lithophane.io.readers import (
    ImageReader,
    image_dimensions,
    load_grayscale_image,
    read_stl,
)
from lithophane.io.writers import save_stl, to_stl_bytes

__all__ = [
    "ImageReader",
    "image_dimensions",
    "load_grayscale_image",
    "read_stl",
    "save_stl",
    "to_stl_bytes",
]
