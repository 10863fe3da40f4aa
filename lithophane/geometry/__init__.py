"""Vector math primitives."""

from lithophane.geometry.vector import Vector3, cross_rows, normalize_rows

__all__ = ["Vector3", "cross_rows", "normalize_rows"]
