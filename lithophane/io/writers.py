"""Binary STL export."""

from __future__ import annotations

import logging
import struct
from pathlib import Path

import numpy as np

from lithophane.exceptions import MeshGenerationError
from lithophane.io.readers import STL_HEADER_SIZE, STL_RECORD_DTYPE
from lithophane.mesh.triangles import TriangleMesh

logger = logging.getLogger(__name__)


def to_stl_bytes(mesh: TriangleMesh) -> bytes:
    """Serialize a mesh as binary STL.

    Layout: 80-byte header (the mesh header as ASCII, truncated and NUL
    padded), little-endian uint32 triangle count, then per triangle the
    normal and three vertices as little-endian float32 and a zero uint16
    attribute.

    Args:
        mesh: Mesh to serialize.

    Returns:
        The STL file contents.
    """
    header = mesh.header.encode("ascii", errors="ignore")[:STL_HEADER_SIZE]
    header = header.ljust(STL_HEADER_SIZE, b"\0")

    records = np.zeros(len(mesh), dtype=STL_RECORD_DTYPE)
    records["normal"] = mesh.normals
    records["vertices"] = mesh.vertices

    return header + struct.pack("<I", len(mesh)) + records.tobytes()


def save_stl(mesh: TriangleMesh, path: str | Path, overwrite: bool = False) -> None:
    """Write a mesh to a binary STL file.

    Args:
        mesh: Mesh to write.
        path: Output path. Parent directories are created as needed.
        overwrite: Replace an existing file. By default an existing file is
            left alone and an error is raised.

    Raises:
        MeshGenerationError: If the file exists or cannot be written.

    Example:
        >>> from lithophane.io import save_stl
        >>> save_stl(mesh, "output/lithophane.stl")
    """
    path = Path(path)
    data = to_stl_bytes(mesh)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "wb" if overwrite else "xb") as f:
            f.write(data)
    except FileExistsError as e:
        raise MeshGenerationError(f"Output file already exists: {path}") from e
    except OSError as e:
        raise MeshGenerationError(f"Failed to write STL file {path}: {e}") from e

    logger.info("Saved %d triangles to %s", len(mesh), path)
