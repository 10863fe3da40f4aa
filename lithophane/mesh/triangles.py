"""Oriented triangles and triangle meshes."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Iterable, Iterator, Sequence

import numpy as np

from lithophane.exceptions import DegenerateGeometryError
from lithophane.geometry.vector import Vector3, cross_rows, normalize_rows

logger = logging.getLogger(__name__)

COLLINEAR_MESSAGE = "all three points for this triangle are in the same line"


class Triangle:
    """Triangle with its face normal.

    Vertices are in counter-clockwise order when viewed from the side the
    normal points to. Use :func:`build_triangle` to create one from points.

    Args:
        normal: Unit face normal.
        vertices: The three corners in winding order.
    """

    __slots__ = ("_normal", "_vertices")

    def __init__(self, normal: Vector3, vertices: Sequence[Vector3]):
        if len(vertices) != 3:
            raise ValueError(f"a triangle needs 3 vertices, got {len(vertices)}")
        self._normal = normal
        self._vertices = tuple(vertices)

    @property
    def normal(self) -> Vector3:
        return self._normal

    @property
    def vertices(self) -> tuple[Vector3, Vector3, Vector3]:
        return self._vertices

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Triangle):
            return NotImplemented
        return self._normal == other._normal and self._vertices == other._vertices

    def __hash__(self) -> int:
        return hash((self._normal, self._vertices))

    def __repr__(self) -> str:
        return f"Triangle(normal={self._normal!r}, vertices={self._vertices!r})"


def build_triangle(p0: Vector3, p1: Vector3, p2: Vector3) -> Triangle:
    """Turn three points into a triangle, with the normal given by counter-clockwise order.

    Raises:
        DegenerateGeometryError: If the points are collinear or coincident.
    """
    cross = (p1 - p0).cross(p2 - p0)
    if cross.length == 0.0:
        raise DegenerateGeometryError(COLLINEAR_MESSAGE)
    return Triangle(cross.normalized(), (p0, p1, p2))


def build_triangles(points: np.ndarray, header: str = "") -> TriangleMesh:
    """Vectorized :func:`build_triangle` over an array of point triples.

    Args:
        points: Array of shape (n, 3, 3): n triangles, 3 corners, xyz.
        header: Header text for the resulting mesh.

    Returns:
        TriangleMesh with one triangle per point triple, in input order.

    Raises:
        DegenerateGeometryError: If any triple is collinear. The message
            names the index of the first bad triangle.
    """
    points = np.asarray(points, dtype=np.float32)
    if points.ndim != 3 or points.shape[1:] != (3, 3):
        raise ValueError(f"points must have shape (n, 3, 3), got {points.shape}")

    if len(points) == 0:
        return TriangleMesh.empty(header)

    cross = cross_rows(points[:, 1] - points[:, 0], points[:, 2] - points[:, 0])
    lengths = np.sqrt(np.sum(cross * cross, axis=-1))
    degenerate = np.flatnonzero(lengths == 0.0)
    if len(degenerate):
        raise DegenerateGeometryError(
            f"{COLLINEAR_MESSAGE} (triangle {int(degenerate[0])} of {len(points)})"
        )

    return TriangleMesh(normalize_rows(cross), points, header=header)


class TriangleMesh:
    """Ordered collection of triangles stored as parallel float32 arrays.

    Order is insertion order and is kept stable so output is reproducible.

    Args:
        normals: Face normals, shape (n, 3).
        vertices: Triangle corners, shape (n, 3, 3).
        header: Free-form text written into the STL header.
    """

    def __init__(self, normals: np.ndarray, vertices: np.ndarray, header: str = ""):
        self._normals = np.asarray(normals, dtype=np.float32).reshape(-1, 3)
        self._vertices = np.asarray(vertices, dtype=np.float32).reshape(-1, 3, 3)
        self.header = header

        if len(self._normals) != len(self._vertices):
            raise ValueError(
                f"normals and vertices must have same length, "
                f"got {len(self._normals)} and {len(self._vertices)}"
            )

    @classmethod
    def empty(cls, header: str = "") -> TriangleMesh:
        """Create a mesh with no triangles."""
        return cls(np.empty((0, 3)), np.empty((0, 3, 3)), header=header)

    @classmethod
    def from_triangles(cls, triangles: Iterable[Triangle], header: str = "") -> TriangleMesh:
        """Create a mesh from Triangle objects."""
        triangles = list(triangles)
        if not triangles:
            return cls.empty(header)
        normals = np.array([t.normal.to_array() for t in triangles])
        vertices = np.array([[v.to_array() for v in t.vertices] for t in triangles])
        return cls(normals, vertices, header=header)

    @classmethod
    def concatenate(cls, meshes: Sequence[TriangleMesh], header: str | None = None) -> TriangleMesh:
        """Join meshes end to end, keeping triangle order.

        Args:
            meshes: Meshes to join.
            header: Header of the result. Defaults to the first mesh's header.
        """
        if header is None:
            header = meshes[0].header if meshes else ""
        if not meshes:
            return cls.empty(header)
        return cls(
            np.concatenate([m.normals for m in meshes]),
            np.concatenate([m.vertices for m in meshes]),
            header=header,
        )

    @property
    def normals(self) -> np.ndarray:
        """Face normals, shape (n, 3)."""
        return self._normals

    @property
    def vertices(self) -> np.ndarray:
        """Triangle corners, shape (n, 3, 3)."""
        return self._vertices

    @property
    def n_triangles(self) -> int:
        return len(self._normals)

    @property
    def bounds(self) -> tuple[np.ndarray, np.ndarray] | None:
        """Return (min_xyz, max_xyz) over all vertices, or None if empty."""
        if self.n_triangles == 0:
            return None
        corners = self._vertices.reshape(-1, 3)
        return corners.min(axis=0), corners.max(axis=0)

    def __len__(self) -> int:
        return self.n_triangles

    def __getitem__(self, index: int) -> Triangle:
        corners = self._vertices[index]
        return Triangle(
            Vector3.from_array(self._normals[index]),
            tuple(Vector3.from_array(c) for c in corners),
        )

    def __iter__(self) -> Iterator[Triangle]:
        for i in range(self.n_triangles):
            yield self[i]

    def edge_use_counts(self) -> Counter:
        """Count how many triangles use each undirected edge.

        Edges are keyed by the coordinates of their end points, so triangles
        that share positions share edges even though they store separate copies.
        """
        counts: Counter = Counter()
        for corners in self._vertices:
            keys = [tuple(float(c) for c in corner) for corner in corners]
            for a, b in ((0, 1), (1, 2), (2, 0)):
                counts[tuple(sorted((keys[a], keys[b])))] += 1
        return counts

    def is_watertight(self) -> bool:
        """Return True if every edge is shared by exactly two triangles."""
        counts = self.edge_use_counts()
        return bool(counts) and all(n == 2 for n in counts.values())

    def __repr__(self) -> str:
        return f"TriangleMesh(n_triangles={self.n_triangles}, header={self.header!r})"
