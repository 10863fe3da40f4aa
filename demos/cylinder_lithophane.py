"""
Cylindrical Lithophane Demo

This script demonstrates using lithophane to wrap an image halfway around
a cylinder, the shape of a lamp shade panel.

Usage:
    python cylinder_lithophane.py [image]

The script will:
1. Load the image, or draw a radial gradient if none is given
2. Write a coarse preview of the curved backing surface
3. Generate the full lithophane with depth encoded brightness
4. Save the mesh as binary STL next to this script
"""

import sys
from pathlib import Path

import numpy as np

from lithophane import LithophaneBuilder
from lithophane.io import save_stl


def gradient_image(width: int = 160, height: int = 120) -> np.ndarray:
    """Bright centre fading to black at the corners."""
    ys, xs = np.mgrid[0:height, 0:width]
    r = np.hypot(xs - width / 2, ys - height / 2)
    return (255 * (1 - r / r.max())).astype(np.uint8)


def main():
    # Half a cylinder of radius 60, one pixel per unit of height
    x_expression = "60 * cos(x / (w - 1) * pi)"
    y_expression = "60 * sin(x / (w - 1) * pi)"
    z_expression = "h - y"

    builder = LithophaneBuilder(header="cylinder lithophane demo")
    builder.set_expressions(x_expression, y_expression, z_expression)
    builder.set_depths(white_depth=0.8, black_depth=3.0)

    if len(sys.argv) > 1:
        builder.load_image(sys.argv[1])
    else:
        builder.set_image(gradient_image())

    width, height = builder.image_size
    print(f"Building lithophane for {width} x {height} image...")
    print(f"  X = {x_expression}")
    print(f"  Y = {y_expression}")
    print(f"  Z = {z_expression}")

    out_dir = Path(__file__).parent

    preview = builder.build_preview(step=8)
    save_stl(preview, out_dir / "cylinder_preview.stl", overwrite=True)
    print(f"\nPreview: {len(preview)} triangles")

    mesh = builder.build()
    info = builder.get_mesh_info()
    print(f"Lithophane: {info['n_triangles']} triangles")
    print(f"  Bounds: {info['bounds']}")

    output_path = out_dir / "cylinder_lithophane.stl"
    save_stl(mesh, output_path, overwrite=True)
    print(f"\nMesh saved to: {output_path}")

    return mesh


if __name__ == "__main__":
    main()
