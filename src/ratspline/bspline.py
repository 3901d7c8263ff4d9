"""Rational quadratic B-splines (NURBS of degree 2) decomposed into Bezier segments.

Knot vectors follow the convention without repeated end knots: a curve with n
control points uses n + 1 knots, and every window of four consecutive knots
together with three consecutive control points defines one rational Bezier
segment over the interval between the two middle knots.
"""

from __future__ import annotations

import bisect
import logging
from functools import cached_property
from typing import Iterable, List, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

from ratspline.approximation import SplineApproximator
from ratspline.consts import DEFAULT_MAX_ERROR
from ratspline.control_point import WeightedControlPoint
from ratspline.geom import BoundingBox, GeomMath
from ratspline.spline import ControlPointLike, RationalQuadraticSpline

logger = logging.getLogger(__name__)


def _blossom(
    u: float, first: WeightedControlPoint, second: WeightedControlPoint
) -> Tuple[NDArray[np.float64], float]:
    """Weighted point at fraction u between two control points, with its weight."""
    weight = GeomMath.lerp(first.weight, second.weight, u)
    return GeomMath.weighted_interp(u, weight, first.point, first.weight, second.point, second.weight), weight


def b_spline_segments(
    knots: Iterable[float], control_points: Sequence[ControlPointLike]
) -> List[RationalQuadraticSpline]:
    """
    Split a rational quadratic B-spline into rational Bezier segments.

    Knots are sorted before use. Windows whose two middle knots coincide span
    a zero-length interval and produce no segment. Knots or control points in
    excess of len(knots) == len(control_points) + 1 are ignored.

    Args:
        knots: knot values, any order
        control_points: (point, weight) pairs or WeightedControlPoint instances

    Returns:
        List[RationalQuadraticSpline]: one segment per non-degenerate knot interval
    """
    sorted_knots = sorted(float(k) for k in knots)
    controls = [WeightedControlPoint.coerce(cp) for cp in control_points]

    if len(sorted_knots) != len(controls) + 1:
        logger.debug(
            "knot count %d does not match %d control points, surplus entries are dropped",
            len(sorted_knots),
            len(controls),
        )

    segments: List[RationalQuadraticSpline] = []
    i = 0
    while i + 3 < len(sorted_knots) and i + 2 < len(controls):
        u0, u1, u2, u3 = sorted_knots[i : i + 4]
        c01, c12, c23 = controls[i : i + 3]
        i += 1
        if u1 == u2:
            logger.debug("skipping degenerate knot interval [%s, %s]", u1, u2)
            continue
        b11, w11 = _blossom((u1 - u0) / (u2 - u0), c01, c12)
        b22, w22 = _blossom((u2 - u1) / (u3 - u1), c12, c23)
        segments.append(RationalQuadraticSpline((b11, w11), c12, (b22, w22)))
    return segments


def b_spline_intervals(knots: Iterable[float]) -> List[Tuple[float, float]]:
    """
    Parameter intervals matching the segments of b_spline_segments.

    Returns the non-degenerate intervals between consecutive knots, leaving
    out the first and last knot.
    """
    sorted_knots = sorted(float(k) for k in knots)
    inner = sorted_knots[1:-1]
    return [(lo, hi) for lo, hi in zip(inner, inner[1:]) if lo != hi]


###############################################################################
# NurbsCurve
###############################################################################
class NurbsCurve:
    """Rational quadratic B-spline evaluated through its Bezier segments.

    The global parameter runs over the knot range covered by the segments.
    Callers are expected to pass len(control_points) + 1 knots; surplus
    entries are ignored in the same way as b_spline_segments does.
    """

    def __init__(self, knots: Iterable[float], control_points: Sequence[ControlPointLike]):
        self._knots: Tuple[float, ...] = tuple(sorted(float(k) for k in knots))
        self._control_points: Tuple[WeightedControlPoint, ...] = tuple(
            WeightedControlPoint.coerce(cp) for cp in control_points
        )

    @property
    def knots(self) -> Tuple[float, ...]:
        """Sorted knot values."""
        return self._knots

    @property
    def control_points(self) -> Tuple[WeightedControlPoint, ...]:
        return self._control_points

    @cached_property
    def segments(self) -> List[RationalQuadraticSpline]:
        """Rational Bezier segments, one per non-degenerate knot interval."""
        return b_spline_segments(self._knots, self._control_points)

    @cached_property
    def intervals(self) -> List[Tuple[float, float]]:
        """Knot intervals matching segments."""
        return b_spline_intervals(self._knots)[: len(self.segments)]

    @property
    def domain(self) -> Tuple[float, float]:
        """First and last parameter value covered by the segments.

        Raises:
            ValueError: If the curve has no segments.
        """
        if not self.intervals:
            raise ValueError("NURBS curve has no non-degenerate segments")
        return self.intervals[0][0], self.intervals[-1][1]

    def _locate(self, u: float) -> Tuple[int, float]:
        """Segment index and local parameter for global parameter u."""
        starts = [lo for lo, _ in self.intervals]
        index = min(max(bisect.bisect_right(starts, u) - 1, 0), len(self.intervals) - 1)
        lo, hi = self.intervals[index]
        return index, (u - lo) / (hi - lo)

    def point_on(self, u: float) -> NDArray[np.float64]:
        """Evaluate the curve at global knot parameter u."""
        index, t = self._locate(float(u))
        return self.segments[index].point_on(t)

    def first_derivative(self, u: float) -> NDArray[np.float64]:
        """Derivative with respect to the global knot parameter u."""
        index, t = self._locate(float(u))
        lo, hi = self.intervals[index]
        return self.segments[index].first_derivative(t) / (hi - lo)

    def bounding_box(self) -> BoundingBox:
        """Union of the control point boxes of all segments.

        Raises:
            ValueError: If the curve has no segments.
        """
        if not self.segments:
            raise ValueError("NURBS curve has no non-degenerate segments")
        box = self.segments[0].bounding_box()
        for segment in self.segments[1:]:
            box = box.union(segment.bounding_box())
        return box

    def approximate(self, max_error: float = DEFAULT_MAX_ERROR) -> NDArray[np.float64]:
        """Polyline through all segments, shared segment end points included once."""
        if not self.segments:
            dimension = self._control_points[0].dimension if self._control_points else 2
            return np.empty((0, dimension), dtype=np.float64)
        parts = [SplineApproximator.approximate(self.segments[0], max_error)]
        parts.extend(SplineApproximator.approximate(segment, max_error)[1:] for segment in self.segments[1:])
        return np.concatenate(parts)

    def to_dict(self) -> dict:
        """Convert the NurbsCurve instance to a dictionary."""
        return {
            "knots": list(self._knots),
            "control_points": [[cp.point.tolist(), cp.weight] for cp in self._control_points],
        }

    @classmethod
    def from_dict(cls, data: dict) -> NurbsCurve:
        """Create a NurbsCurve instance from a dictionary."""
        return cls(data.get("knots", []), [(point, weight) for point, weight in data.get("control_points", [])])

    def __repr__(self) -> str:
        return f"NurbsCurve(knots={list(self._knots)}, control_points={len(self._control_points)})"
