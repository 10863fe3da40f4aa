"""Single-precision 3D vector math."""

from __future__ import annotations

from typing import Iterator

import numpy as np

from lithophane.exceptions import DegenerateGeometryError


class Vector3:
    """Immutable 3-component vector stored in single precision.

    Used for positions, displacements and normals. Arithmetic follows
    IEEE-754 float32 semantics, matching the precision of binary STL output.

    Args:
        x: X component.
        y: Y component.
        z: Z component.

    Example:
        >>> a = Vector3(1, 0, 0)
        >>> b = Vector3(0, 1, 0)
        >>> a.cross(b)
        Vector3(0.0, 0.0, 1.0)
    """

    __slots__ = ("_coords",)

    def __init__(self, x: float, y: float, z: float):
        coords = np.array([x, y, z], dtype=np.float32)
        coords.flags.writeable = False
        self._coords = coords

    @classmethod
    def from_array(cls, values: np.ndarray | tuple[float, float, float]) -> Vector3:
        """Create a vector from any length-3 sequence or array."""
        values = np.asarray(values, dtype=np.float32)
        if values.shape != (3,):
            raise ValueError(f"expected 3 components, got shape {values.shape}")
        return cls(values[0], values[1], values[2])

    @property
    def x(self) -> float:
        return float(self._coords[0])

    @property
    def y(self) -> float:
        return float(self._coords[1])

    @property
    def z(self) -> float:
        return float(self._coords[2])

    def to_array(self) -> np.ndarray:
        """Return a writable float32 copy of the components."""
        return self._coords.copy()

    def __iter__(self) -> Iterator[float]:
        return iter((self.x, self.y, self.z))

    def __add__(self, other: Vector3) -> Vector3:
        if not isinstance(other, Vector3):
            return NotImplemented
        return Vector3.from_array(self._coords + other._coords)

    def __sub__(self, other: Vector3) -> Vector3:
        if not isinstance(other, Vector3):
            return NotImplemented
        return Vector3.from_array(self._coords - other._coords)

    def __mul__(self, scalar: float) -> Vector3:
        if isinstance(scalar, Vector3):
            return NotImplemented
        return Vector3.from_array(self._coords * np.float32(scalar))

    __rmul__ = __mul__

    def __neg__(self) -> Vector3:
        return Vector3.from_array(-self._coords)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vector3):
            return NotImplemented
        return bool(np.array_equal(self._coords, other._coords))

    def __hash__(self) -> int:
        return hash(self._coords.tobytes())

    def dot(self, other: Vector3) -> float:
        return float(np.dot(self._coords, other._coords))

    def cross(self, other: Vector3) -> Vector3:
        """Right-handed cross product."""
        return Vector3.from_array(cross_rows(self._coords, other._coords))

    @property
    def length(self) -> float:
        return float(np.sqrt(np.dot(self._coords, self._coords)))

    def normalized(self) -> Vector3:
        """Return the unit vector pointing the same way.

        Raises:
            DegenerateGeometryError: If the vector has zero length.
        """
        return Vector3.from_array(normalize_rows(self._coords))

    def __repr__(self) -> str:
        return f"Vector3({self.x!r}, {self.y!r}, {self.z!r})"


def cross_rows(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Cross product over the last axis of two (..., 3) arrays.

    Written out component-wise so the result keeps the float32 dtype and
    matches the scalar formula exactly.
    """
    a = np.asarray(a, dtype=np.float32)
    b = np.asarray(b, dtype=np.float32)
    return np.stack(
        [
            a[..., 1] * b[..., 2] - b[..., 1] * a[..., 2],
            a[..., 2] * b[..., 0] - b[..., 2] * a[..., 0],
            a[..., 0] * b[..., 1] - b[..., 0] * a[..., 1],
        ],
        axis=-1,
    )


def normalize_rows(v: np.ndarray, what: str = "vector") -> np.ndarray:
    """Scale every vector along the last axis of a (..., 3) array to unit length.

    Args:
        v: Array of vectors.
        what: Description used in the error message.

    Returns:
        float32 array with the same shape as ``v``.

    Raises:
        DegenerateGeometryError: If any vector has zero length. The message
            names the index of the first such vector.
    """
    v = np.asarray(v, dtype=np.float32)
    lengths = np.sqrt(np.sum(v * v, axis=-1, keepdims=True))

    zero = lengths[..., 0] == 0.0
    if np.any(zero):
        if v.ndim == 1:
            raise DegenerateGeometryError(f"{what} has no length")
        index = tuple(int(i) for i in np.argwhere(zero)[0])
        location = index[0] if len(index) == 1 else index
        raise DegenerateGeometryError(f"{what} has no length at index {location}")

    return v / lengths
