"""Rational quadratic Bezier curves: evaluation, subdivision and transformation.

A rational quadratic Bezier curve is defined by three control points p0, p1, p2
with positive weights w0, w1, w2:

    B(t) = ((1-t)^2*w0*p0 + 2*t*(1-t)*w1*p1 + t^2*w2*p2) / ((1-t)^2*w0 + 2*t*(1-t)*w1 + t^2*w2)

All evaluation runs through the weighted de Casteljau scheme, which keeps the
intermediate points and weights needed for derivatives and subdivision.
"""

from __future__ import annotations

import json
import math
from typing import Generic, Iterable, Optional, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from ratspline.common import (
    CoordinatesT,
    CoordinatesT2,
    GeometryDimensionError,
    PointLike,
    UnitsT,
    UnitsT2,
    VectorLike,
    frozen,
)
from ratspline.consts import DEFAULT_ATOL, DEFAULT_RTOL, ZERO_LENGTH_EPS
from ratspline.control_point import WeightedControlPoint
from ratspline.geom import Axis, BoundingBox, Frame, GeomMath, Plane

ControlPointLike = Union[WeightedControlPoint, Tuple[PointLike, float]]

# Intermediate values of one weighted de Casteljau step: p01, w01, p12, w12, p012, w012
_DeCasteljau = Tuple[NDArray[np.float64], float, NDArray[np.float64], float, NDArray[np.float64], float]


def _as_parameter_array(ts: Iterable[float]) -> NDArray[np.float64]:
    if isinstance(ts, np.ndarray):
        return ts.astype(np.float64, copy=False).ravel()
    return np.fromiter(ts, dtype=np.float64)


###############################################################################
# RationalQuadraticSpline
###############################################################################
class RationalQuadraticSpline(Generic[UnitsT, CoordinatesT]):
    """Rational quadratic Bezier curve in 2D or 3D.

    Instances are immutable; every operation returns a new curve. The type
    parameters tag the length unit and the coordinate system and only matter
    to static type checkers.

    Attributes:
        _points: read-only array of the three control points, shape (3, d)
        _weights: read-only array of the three weights, shape (3,)
    """

    _points: NDArray[np.float64]
    _weights: NDArray[np.float64]

    def __init__(self, first: ControlPointLike, second: ControlPointLike, third: ControlPointLike):
        """
        Initialize from three (point, weight) pairs.

        Weights are stored as absolute values. Points must all be 2D or all be 3D.

        Raises:
            GeometryDimensionError: If points are not 2D/3D or differ in dimension.
        """
        controls = [WeightedControlPoint.coerce(cp) for cp in (first, second, third)]
        dims = {cp.dimension for cp in controls}
        if len(dims) != 1:
            raise GeometryDimensionError(f"control points must share one dimension, got {sorted(dims)}")
        self._points = frozen(np.stack([cp.point for cp in controls]))
        self._weights = frozen(np.array([cp.weight for cp in controls], dtype=np.float64))

    @classmethod
    def from_control_points(
        cls, first: ControlPointLike, second: ControlPointLike, third: ControlPointLike
    ) -> RationalQuadraticSpline[UnitsT, CoordinatesT]:
        """Construct a curve from three (point, weight) pairs; negative weights are made positive."""
        return cls(first, second, third)

    @classmethod
    def _create(cls, points: NDArray[np.float64], weights: NDArray[np.float64]) -> RationalQuadraticSpline:
        """Construct directly from already normalized arrays, shapes (3, d) and (3,)."""
        spline = cls.__new__(cls)
        spline._points = frozen(np.array(points, dtype=np.float64))
        spline._weights = frozen(np.array(weights, dtype=np.float64))
        return spline

    ###########################################################################
    # Accessors
    ###########################################################################

    @property
    def control_points(self) -> NDArray[np.float64]:
        """Read-only array of the control points, shape (3, d)."""
        return self._points

    @property
    def weights(self) -> NDArray[np.float64]:
        """Read-only array of the weights, shape (3,)."""
        return self._weights

    @property
    def weighted_control_points(self) -> Tuple[WeightedControlPoint, WeightedControlPoint, WeightedControlPoint]:
        """The control points paired with their weights."""
        first, second, third = (WeightedControlPoint(p, w) for p, w in zip(self._points, self._weights))
        return first, second, third

    @property
    def dimension(self) -> int:
        """int: 2 or 3"""
        return int(self._points.shape[1])

    @property
    def start_point(self) -> NDArray[np.float64]:
        """The start point of the curve (same as first_control_point)."""
        return self._points[0]

    @property
    def end_point(self) -> NDArray[np.float64]:
        """The end point of the curve (same as third_control_point)."""
        return self._points[2]

    @property
    def first_control_point(self) -> NDArray[np.float64]:
        return self._points[0]

    @property
    def second_control_point(self) -> NDArray[np.float64]:
        return self._points[1]

    @property
    def third_control_point(self) -> NDArray[np.float64]:
        return self._points[2]

    @property
    def first_weight(self) -> float:
        return float(self._weights[0])

    @property
    def second_weight(self) -> float:
        return float(self._weights[1])

    @property
    def third_weight(self) -> float:
        return float(self._weights[2])

    def bounding_box(self) -> BoundingBox:
        """
        Axis-aligned box around the three control points.

        Not the tightest box around the curve, but it always contains the curve
        since a rational curve with positive weights stays within the convex
        hull of its control points.
        """
        return BoundingBox.from_points(self._points)

    @property
    def is_degenerate(self) -> bool:
        """True if all control points coincide, i.e. the curve is a single point."""
        return bool(np.all(self._points == self._points[0]))

    ###########################################################################
    # Evaluation
    ###########################################################################

    def _de_casteljau(self, t: float) -> _DeCasteljau:
        """Run one weighted de Casteljau pass and return all intermediates."""
        p0, p1, p2 = self._points
        w0, w1, w2 = (float(w) for w in self._weights)
        w01 = GeomMath.lerp(w0, w1, t)
        w12 = GeomMath.lerp(w1, w2, t)
        p01 = GeomMath.weighted_interp(t, w01, p0, w0, p1, w1)
        p12 = GeomMath.weighted_interp(t, w12, p1, w1, p2, w2)
        w012 = GeomMath.lerp(w01, w12, t)
        p012 = GeomMath.weighted_interp(t, w012, p01, w01, p12, w12)
        return p01, w01, p12, w12, p012, w012

    def point_on(self, t: float) -> NDArray[np.float64]:
        """
        Evaluate the curve at parameter t.

        Values outside [0, 1] extrapolate the same rational polynomial.
        At t == 0 and t == 1 the start and end points are returned exactly.

        Args:
            t (float): curve parameter

        Returns:
            NDArray[np.float64]: point of shape (d,)
        """
        t = float(t)
        if t == 0.0:
            return self._points[0].copy()
        if t == 1.0:
            return self._points[2].copy()
        return self._de_casteljau(t)[4]

    def first_derivative(self, t: float) -> NDArray[np.float64]:
        """First derivative dB/dt at parameter t, shape (d,)."""
        p01, w01, p12, w12, _, w012 = self._de_casteljau(float(t))
        return (p12 - p01) * (2.0 * w01 * w12 / (w012 * w012))

    def start_derivative(self) -> NDArray[np.float64]:
        """First derivative at t=0: 2*w1/w0*(p1-p0)."""
        p0, p1, _ = self._points
        return 2.0 * float(self._weights[1]) / float(self._weights[0]) * (p1 - p0)

    def end_derivative(self) -> NDArray[np.float64]:
        """First derivative at t=1: 2*w1/w2*(p2-p1)."""
        _, p1, p2 = self._points
        return 2.0 * float(self._weights[1]) / float(self._weights[2]) * (p2 - p1)

    def tangent_direction(self, t: float) -> Optional[NDArray[np.float64]]:
        """Unit tangent at parameter t, or None where the derivative vanishes."""
        derivative = self.first_derivative(t)
        length_sq = float(np.dot(derivative, derivative))
        if not length_sq > ZERO_LENGTH_EPS:
            return None
        return derivative / math.sqrt(length_sq)

    def sample(self, t: float) -> Tuple[NDArray[np.float64], Optional[NDArray[np.float64]]]:
        """Point and unit tangent at parameter t."""
        return self.point_on(t), self.tangent_direction(t)

    def _de_casteljau_array(self, ts: NDArray[np.float64]) -> Tuple[NDArray[np.float64], ...]:
        p0, p1, p2 = self._points
        w0, w1, w2 = self._weights
        w01 = GeomMath.lerp_array(w0, w1, ts)
        w12 = GeomMath.lerp_array(w1, w2, ts)
        p01 = GeomMath.weighted_interp_array(ts, w01, p0, w0, p1, w1)
        p12 = GeomMath.weighted_interp_array(ts, w12, p1, w1, p2, w2)
        w012 = GeomMath.lerp_array(w01, w12, ts)
        return p01, w01, p12, w12, w012

    def points_on(self, ts: Iterable[float]) -> NDArray[np.float64]:
        """
        Vectorized point_on over many parameter values.

        Args:
            ts: parameter values

        Returns:
            NDArray[np.float64]: points of shape (len(ts), d)
        """
        ts_arr = _as_parameter_array(ts)
        if ts_arr.size == 0:
            return np.empty((0, self.dimension), dtype=np.float64)
        p01, w01, p12, w12, w012 = self._de_casteljau_array(ts_arr)
        result = GeomMath.weighted_interp_array(ts_arr, w012, p01, w01, p12, w12)
        result[ts_arr == 0.0] = self._points[0]
        result[ts_arr == 1.0] = self._points[2]
        return result

    def first_derivatives(self, ts: Iterable[float]) -> NDArray[np.float64]:
        """Vectorized first_derivative, shape (len(ts), d)."""
        ts_arr = _as_parameter_array(ts)
        if ts_arr.size == 0:
            return np.empty((0, self.dimension), dtype=np.float64)
        p01, w01, p12, w12, w012 = self._de_casteljau_array(ts_arr)
        return (p12 - p01) * (2.0 * w01 * w12 / (w012 * w012))[:, np.newaxis]

    ###########################################################################
    # Subdivision
    ###########################################################################

    def split_at(self, t: float) -> Tuple[RationalQuadraticSpline, RationalQuadraticSpline]:
        """
        Split the curve at parameter t into two curves covering [0, t] and [t, 1].

        Returns:
            Tuple of (left, right) curves sharing the point at t.
        """
        p01, w01, p12, w12, p012, w012 = self._de_casteljau(float(t))
        p0, _, p2 = self._points
        w0, _, w2 = self._weights
        left = self._create(np.stack([p0, p01, p012]), np.array([w0, w01, w012]))
        right = self._create(np.stack([p012, p12, p2]), np.array([w012, w12, w2]))
        return left, right

    def bisect(self) -> Tuple[RationalQuadraticSpline, RationalQuadraticSpline]:
        """Split the curve at t=0.5."""
        return self.split_at(0.5)

    def reverse(self) -> RationalQuadraticSpline[UnitsT, CoordinatesT]:
        """Same curve traversed from end to start."""
        return self._create(self._points[::-1], self._weights[::-1])

    ###########################################################################
    # Transformations (pointwise on control points, weights unchanged)
    ###########################################################################

    def _map_points(self, points: NDArray[np.float64]) -> RationalQuadraticSpline:
        return self._create(points, self._weights)

    def _require_dimension(self, dimension: int, operation: str) -> None:
        if self.dimension != dimension:
            raise GeometryDimensionError(f"{operation} requires a {dimension}D curve, got {self.dimension}D")

    def scale_about(self, center: PointLike, factor: float) -> RationalQuadraticSpline[UnitsT, CoordinatesT]:
        """Scale the curve about a center point."""
        return self._map_points(GeomMath.scale_about(self._points, center, factor))

    def rotate_around(
        self, center: Union[PointLike, Axis], angle: float
    ) -> RationalQuadraticSpline[UnitsT, CoordinatesT]:
        """
        Rotate the curve by angle (radians).

        Args:
            center: a 2D center point for 2D curves, an Axis for 3D curves
            angle: rotation angle in radians, counterclockwise / right-handed

        Raises:
            TypeError: If a 3D curve is not given an Axis.
        """
        if self.dimension == 2:
            if isinstance(center, Axis):
                raise TypeError("2D curves rotate around a point, not an Axis")
            matrix = GeomMath.rotation_matrix_2d(angle)
            return self._map_points(GeomMath.rotate_around(self._points, center, matrix))
        if not isinstance(center, Axis) or center.dimension != 3:
            raise TypeError("3D curves rotate around a 3D Axis")
        matrix = GeomMath.rotation_matrix_3d(center.direction, angle)
        return self._map_points(GeomMath.rotate_around(self._points, center.origin, matrix))

    def translate_by(self, displacement: VectorLike) -> RationalQuadraticSpline[UnitsT, CoordinatesT]:
        """Translate the curve by a displacement vector."""
        return self._map_points(self._points + np.asarray(displacement, dtype=np.float64))

    def translate_in(self, direction: VectorLike, distance: float) -> RationalQuadraticSpline[UnitsT, CoordinatesT]:
        """Translate the curve by a distance along a direction (normalized internally)."""
        return self.translate_by(distance * GeomMath.normalize(direction))

    def mirror_across(self, mirror: Union[Axis, Plane]) -> RationalQuadraticSpline[UnitsT, CoordinatesT]:
        """
        Mirror the curve across an Axis (2D curves) or a Plane (3D curves).

        Raises:
            TypeError: If the mirror does not match the curve dimension.
        """
        if self.dimension == 2 and isinstance(mirror, Axis) and mirror.dimension == 2:
            return self._map_points(mirror.mirror(self._points))
        if self.dimension == 3 and isinstance(mirror, Plane):
            return self._map_points(mirror.mirror(self._points))
        raise TypeError(f"cannot mirror a {self.dimension}D curve across {type(mirror).__name__}")

    def relative_to(self, frame: Frame) -> RationalQuadraticSpline[UnitsT, CoordinatesT2]:
        """Express the curve in the local coordinates of *frame*."""
        self._require_dimension(frame.dimension, "relative_to")
        return self._map_points(frame.to_local(self._points))

    def place_in(self, frame: Frame) -> RationalQuadraticSpline[UnitsT, CoordinatesT2]:
        """Take a curve given in *frame*'s local coordinates into global coordinates."""
        self._require_dimension(frame.dimension, "place_in")
        return self._map_points(frame.to_global(self._points))

    def project_into(self, frame: Frame) -> RationalQuadraticSpline[UnitsT, CoordinatesT2]:
        """Project a 3D curve into the 2D coordinates spanned by the first two axes of a 3D frame."""
        self._require_dimension(3, "project_into")
        self._require_frame_dimension(frame, 3, "project_into")
        return self._map_points(frame.to_local(self._points)[:, :2])

    def on(self, frame: Frame) -> RationalQuadraticSpline[UnitsT, CoordinatesT2]:
        """Embed a 2D curve in 3D on the plane spanned by the first two axes of a 3D frame."""
        self._require_dimension(2, "on")
        self._require_frame_dimension(frame, 3, "on")
        return self._map_points(frame.origin + self._points @ frame.basis[:2])

    def project_onto(self, plane: Plane) -> RationalQuadraticSpline[UnitsT, CoordinatesT]:
        """Orthogonally project a 3D curve onto a plane."""
        self._require_dimension(3, "project_onto")
        return self._map_points(plane.project(self._points))

    @staticmethod
    def _require_frame_dimension(frame: Frame, dimension: int, operation: str) -> None:
        if frame.dimension != dimension:
            raise GeometryDimensionError(f"{operation} requires a {dimension}D frame, got {frame.dimension}D")

    def at(self, rate: float) -> RationalQuadraticSpline[UnitsT2, CoordinatesT]:
        """Convert units by multiplying every coordinate by *rate* (new units per old unit)."""
        return self._map_points(self._points * rate)

    def at_(self, rate: float) -> RationalQuadraticSpline[UnitsT2, CoordinatesT]:
        """Convert units by dividing every coordinate by *rate* (old units per new unit)."""
        return self._map_points(self._points / rate)

    ###########################################################################
    # Comparison
    ###########################################################################

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RationalQuadraticSpline):
            return NotImplemented
        return bool(np.array_equal(self._points, other._points) and np.array_equal(self._weights, other._weights))

    def __hash__(self) -> int:
        return hash((tuple(self._points.ravel().tolist()), tuple(self._weights.tolist())))

    def approx_equal(
        self, other: RationalQuadraticSpline, rtol: float = DEFAULT_RTOL, atol: float = DEFAULT_ATOL
    ) -> bool:
        """Check if two curves have approximately equal control points and weights.

        Args:
            other: Another RationalQuadraticSpline to compare with
            rtol: Relative tolerance for floating point comparison
            atol: Absolute tolerance for floating point comparison

        Returns:
            True if curves are approximately equal, False otherwise
        """
        if not isinstance(other, RationalQuadraticSpline):
            return False
        if self._points.shape != other._points.shape:
            return False
        return bool(
            np.allclose(self._points, other._points, rtol=rtol, atol=atol)
            and np.allclose(self._weights, other._weights, rtol=rtol, atol=atol)
        )

    ###########################################################################
    # Serialization
    ###########################################################################

    def to_dict(self) -> dict:
        """Convert to a dictionary: control points as [point, weight] pairs."""
        return {"control_points": [[p.tolist(), float(w)] for p, w in zip(self._points, self._weights)]}

    @classmethod
    def from_dict(cls, data: dict) -> RationalQuadraticSpline:
        """Create a curve from a dictionary produced by to_dict.

        Raises:
            ValueError: If there are not exactly three control points.
        """
        pairs = data.get("control_points", [])
        if len(pairs) != 3:
            raise ValueError(f"rational quadratic curve needs 3 control points, got {len(pairs)}")
        return cls(*[(point, weight) for point, weight in pairs])

    def to_json(self) -> str:
        """Serialize to a JSON string."""
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, text: str) -> RationalQuadraticSpline:
        """Deserialize from a JSON string produced by to_json."""
        return cls.from_dict(json.loads(text))

    def __repr__(self) -> str:
        pairs = ", ".join(f"({p.tolist()}, {float(w)})" for p, w in zip(self._points, self._weights))
        return f"RationalQuadraticSpline({pairs})"
