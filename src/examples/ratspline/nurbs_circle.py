"""Build a unit circle as a rational quadratic B-spline and print its polyline approximation."""

import math

import numpy as np

from ratspline.approximation import SplineApproximator
from ratspline.bspline import NurbsCurve

CORNER_WEIGHT = math.sqrt(2.0) / 2.0

CIRCLE_CONTROL_POINTS = [
    ((1.0, 0.0), 1.0),
    ((1.0, 1.0), CORNER_WEIGHT),
    ((0.0, 1.0), 1.0),
    ((-1.0, 1.0), CORNER_WEIGHT),
    ((-1.0, 0.0), 1.0),
    ((-1.0, -1.0), CORNER_WEIGHT),
    ((0.0, -1.0), 1.0),
    ((1.0, -1.0), CORNER_WEIGHT),
    ((1.0, 0.0), 1.0),
]
CIRCLE_KNOTS = [0.0, 0.0, 1.0, 1.0, 2.0, 2.0, 3.0, 3.0, 4.0, 4.0]


def unit_circle() -> NurbsCurve:
    """Four quarter arcs joined at double knots."""
    return NurbsCurve(CIRCLE_KNOTS, CIRCLE_CONTROL_POINTS)


def main(max_error: float = 1e-3):
    """Approximate the circle and report radius deviation."""
    circle = unit_circle()
    polyline = circle.approximate(max_error)
    radii = np.linalg.norm(polyline, axis=1)
    print(f"segments:        {len(circle.segments)}")
    print(f"polyline points: {len(polyline)}")
    print(f"polyline length: {SplineApproximator.polyline_length(polyline):.6f} (2*pi = {2.0 * math.pi:.6f})")
    print(f"radius range:    [{radii.min():.12f}, {radii.max():.12f}]")
    print(f"bounding box:    {circle.bounding_box()}")


if __name__ == "__main__":
    main()
