"""Mesh generation utilities."""

from lithophane.mesh.triangles import Triangle, TriangleMesh, build_triangle, build_triangles
from lithophane.mesh.grid import VertexGrid, evaluate_grid, step_indices
from lithophane.mesh.normals import PointCloud, estimate_normals, generate_point_cloud
from lithophane.mesh.extrusion import DepthRange
from lithophane.mesh.assembly import (
    assemble_lithophane,
    assemble_preview,
    expected_triangle_count,
    extrude,
    generate_lithophane,
)
from lithophane.mesh.builder import LithophaneBuilder

__all__ = [
    "LithophaneBuilder",
    "DepthRange",
    "Triangle",
    "TriangleMesh",
    "build_triangle",
    "build_triangles",
    "VertexGrid",
    "evaluate_grid",
    "step_indices",
    "PointCloud",
    "estimate_normals",
    "generate_point_cloud",
    "assemble_lithophane",
    "assemble_preview",
    "expected_triangle_count",
    "extrude",
    "generate_lithophane",
]
