"""Polyline approximation of rational quadratic curves within a chord tolerance."""

from __future__ import annotations

import logging
import math

import numpy as np
from numpy.typing import NDArray

from ratspline.consts import DEFAULT_MAX_ERROR, MAX_APPROXIMATION_SEGMENTS, NUMPY_SAMPLING_THRESHOLD
from ratspline.parameter import ParameterValues
from ratspline.spline import RationalQuadraticSpline

logger = logging.getLogger(__name__)


class SplineApproximator:
    """Class to turn rational quadratic curves into polylines.

    The number of line segments is derived from a bound on the second
    derivative: a curve whose second derivative has magnitude at most M,
    sampled at n equal parameter steps, deviates from the resulting chords by
    at most M / (8 * n^2).
    """

    @staticmethod
    def second_derivative_bound(spline: RationalQuadraticSpline) -> float:
        """
        Magnitude of the constant second derivative of the lifted curve.

        Each control point p_i is lifted to the homogeneous point (p_i*s_i, s_i)
        with s_i = w_i / min(w), giving a non-rational quadratic Bezier curve one
        dimension higher. Its second derivative 2*(L2 - 2*L1 + L0) bounds the
        curvature of the rational curve.
        """
        weights = spline.weights
        with np.errstate(divide="ignore", invalid="ignore"):
            scales = weights / weights.min()
            lifted = np.column_stack([spline.control_points * scales[:, np.newaxis], scales])
            second_derivative = 2.0 * (lifted[2] - 2.0 * lifted[1] + lifted[0])
            return float(np.linalg.norm(second_derivative))

    @classmethod
    def num_approximation_segments(cls, spline: RationalQuadraticSpline, max_error: float) -> int:
        """
        Number of equal parameter steps needed to stay within max_error of the curve.

        Args:
            spline: the curve to approximate
            max_error: maximum allowed distance between curve and polyline

        Returns:
            int: ceil(sqrt(M / (8 * max_error))), clamped to [1, MAX_APPROXIMATION_SEGMENTS].
            A non-positive or NaN max_error, or a non-finite bound, gives 1.
        """
        if not max_error > 0.0:
            logger.debug("non-positive tolerance %r, using a single segment", max_error)
            return 1
        bound = cls.second_derivative_bound(spline)
        if not math.isfinite(bound):
            logger.debug("non-finite curvature bound for %r, using a single segment", spline)
            return 1
        count = math.sqrt(bound / (8.0 * max_error))
        if not count < MAX_APPROXIMATION_SEGMENTS:
            logger.debug("segment count %r for %r clamped to %d", count, spline, MAX_APPROXIMATION_SEGMENTS)
            return MAX_APPROXIMATION_SEGMENTS
        return max(1, math.ceil(count))

    @classmethod
    def segments_python(cls, spline: RationalQuadraticSpline, n: int) -> NDArray[np.float64]:
        """Sample n + 1 evenly spaced points with one point_on call per point."""
        result = np.empty((n + 1, spline.dimension), dtype=np.float64)
        for i in range(n + 1):
            result[i] = spline.point_on(i / n)
        return result

    @classmethod
    def segments_numpy(cls, spline: RationalQuadraticSpline, n: int) -> NDArray[np.float64]:
        """Sample n + 1 evenly spaced points with vectorized evaluation."""
        return spline.points_on(ParameterValues.steps(n))

    @classmethod
    def segments(cls, spline: RationalQuadraticSpline, n: int) -> NDArray[np.float64]:
        """
        Polyline through the curve at parameters 0, 1/n, ..., 1.
        Uses pure Python for small step counts, NumPy for larger ones.

        Args:
            spline: the curve to sample
            n: number of line segments

        Returns:
            NDArray[np.float64] of shape (n+1, d); shape (0, d) if n < 1
        """
        if n < 1:
            return np.empty((0, spline.dimension), dtype=np.float64)
        if n < NUMPY_SAMPLING_THRESHOLD:
            return cls.segments_python(spline, n)
        return cls.segments_numpy(spline, n)

    @classmethod
    def approximate(cls, spline: RationalQuadraticSpline, max_error: float = DEFAULT_MAX_ERROR) -> NDArray[np.float64]:
        """Polyline approximating the curve to within max_error."""
        return cls.segments(spline, cls.num_approximation_segments(spline, max_error))

    @staticmethod
    def polyline_length(points: NDArray[np.float64]) -> float:
        """Total length of a polyline given as points of shape (n, d)."""
        if len(points) < 2:
            return 0.0
        return float(np.sum(np.linalg.norm(np.diff(points, axis=0), axis=1)))

    @classmethod
    def max_chord_deviation(cls, spline: RationalQuadraticSpline, n: int, samples_per_segment: int = 32) -> float:
        """
        Largest distance between the curve and the polyline segments(spline, n).

        Each parameter step is sampled densely and measured against its own chord.
        """
        polyline = cls.segments(spline, n)
        if len(polyline) < 2:
            return 0.0
        local = ParameterValues.steps(samples_per_segment)
        deviation = 0.0
        for i in range(n):
            starts, ends = polyline[i], polyline[i + 1]
            curve_points = spline.points_on((i + local) / n)
            chord = ends - starts
            chord_len_sq = float(np.dot(chord, chord))
            offsets = curve_points - starts
            if chord_len_sq > 0.0:
                along = np.clip(offsets @ chord / chord_len_sq, 0.0, 1.0)
                offsets = offsets - np.outer(along, chord)
            deviation = max(deviation, float(np.max(np.linalg.norm(offsets, axis=1))))
        return deviation
