"""Test module for ratspline.bspline

The tests are run using pytest.
These tests ensure that rational quadratic B-splines decompose into
continuous rational Bezier segments and that degenerate input is handled
without errors.
"""

import logging
import math

import numpy as np
import pytest

from ratspline.bspline import NurbsCurve, b_spline_intervals, b_spline_segments
from ratspline.control_point import WeightedControlPoint
from ratspline.spline import RationalQuadraticSpline

CONTROL_POINTS = [
    ((0.0, 0.0), 1.0),
    ((1.0, 2.0), 2.0),
    ((3.0, 3.0), 0.5),
    ((4.0, 0.0), 1.5),
    ((6.0, 1.0), 1.0),
    ((7.0, 4.0), 3.0),
]
KNOTS = [0.0, 1.0, 2.0, 3.5, 4.0, 6.0, 7.0]

W = math.sqrt(2.0) / 2.0
CIRCLE_CONTROL_POINTS = [
    ((1.0, 0.0), 1.0),
    ((1.0, 1.0), W),
    ((0.0, 1.0), 1.0),
    ((-1.0, 1.0), W),
    ((-1.0, 0.0), 1.0),
    ((-1.0, -1.0), W),
    ((0.0, -1.0), 1.0),
    ((1.0, -1.0), W),
    ((1.0, 0.0), 1.0),
]
CIRCLE_KNOTS = [0.0, 0.0, 1.0, 1.0, 2.0, 2.0, 3.0, 3.0, 4.0, 4.0]


###############################################################################
# b_spline_segments / b_spline_intervals
###############################################################################


class TestBSplineSegments:
    """Tests for the B-spline to Bezier decomposition."""

    def test_segment_count(self):
        """n control points and n + 1 distinct knots give n - 2 segments."""
        segments = b_spline_segments(KNOTS, CONTROL_POINTS)
        assert len(segments) == len(CONTROL_POINTS) - 2
        assert len(b_spline_intervals(KNOTS)) == len(segments)

    def test_intervals(self):
        """Intervals run between the inner knots."""
        assert b_spline_intervals(KNOTS) == [(1.0, 2.0), (2.0, 3.5), (3.5, 4.0), (4.0, 6.0)]

    def test_middle_control_points_are_kept(self):
        """Each segment's middle control point is an original control point."""
        for i, segment in enumerate(b_spline_segments(KNOTS, CONTROL_POINTS)):
            point, weight = CONTROL_POINTS[i + 1]
            assert np.array_equal(segment.second_control_point, point)
            assert segment.second_weight == weight

    def test_positional_continuity(self):
        """Consecutive segments meet."""
        segments = b_spline_segments(KNOTS, CONTROL_POINTS)
        for left, right in zip(segments, segments[1:]):
            assert np.allclose(left.end_point, right.start_point)
            assert left.third_weight == pytest.approx(right.first_weight)

    def test_tangent_continuity(self):
        """Derivatives rescaled by interval width agree at the joints."""
        segments = b_spline_segments(KNOTS, CONTROL_POINTS)
        intervals = b_spline_intervals(KNOTS)
        pieces = list(zip(segments, intervals))
        for (left, (lo0, hi0)), (right, (lo1, hi1)) in zip(pieces, pieces[1:]):
            left_derivative = left.end_derivative() / (hi0 - lo0)
            right_derivative = right.start_derivative() / (hi1 - lo1)
            assert np.allclose(left_derivative, right_derivative)

    def test_unsorted_knots_are_sorted(self):
        """Knot order given by the caller does not matter."""
        shuffled = [4.0, 0.0, 7.0, 2.0, 6.0, 1.0, 3.5]
        assert b_spline_segments(shuffled, CONTROL_POINTS) == b_spline_segments(KNOTS, CONTROL_POINTS)
        assert b_spline_intervals(shuffled) == b_spline_intervals(KNOTS)

    def test_single_segment_with_clamped_knots(self):
        """Three control points with knots [0, 0, 1, 1] reproduce the Bezier curve itself."""
        controls = CONTROL_POINTS[:3]
        segments = b_spline_segments([0.0, 0.0, 1.0, 1.0], controls)
        assert segments == [RationalQuadraticSpline(*controls)]

    def test_degenerate_knots_are_skipped(self, caplog):
        """Repeated inner knots give no segment for the zero-length interval."""
        with caplog.at_level(logging.DEBUG, logger="ratspline.bspline"):
            segments = b_spline_segments(CIRCLE_KNOTS, CIRCLE_CONTROL_POINTS)
        assert len(segments) == 4
        assert b_spline_intervals(CIRCLE_KNOTS) == [(0.0, 1.0), (1.0, 2.0), (2.0, 3.0), (3.0, 4.0)]
        assert "degenerate knot interval" in caplog.text

    def test_circle_segments_are_quarter_arcs(self):
        """Double knots split the circle into its four quarter arcs."""
        for segment in b_spline_segments(CIRCLE_KNOTS, CIRCLE_CONTROL_POINTS):
            radii = np.linalg.norm(segment.points_on(np.linspace(0.0, 1.0, 17)), axis=1)
            assert np.allclose(radii, 1.0)

    def test_surplus_knots_are_dropped(self):
        """Extra knots beyond len(control_points) + 1 are ignored."""
        assert b_spline_segments(KNOTS + [8.0, 9.0], CONTROL_POINTS) == b_spline_segments(KNOTS, CONTROL_POINTS)

    def test_surplus_control_points_are_dropped(self):
        """Extra control points beyond len(knots) - 1 are ignored."""
        extended = CONTROL_POINTS + [((9.0, 9.0), 1.0)]
        assert b_spline_segments(KNOTS, extended) == b_spline_segments(KNOTS, CONTROL_POINTS)

    @pytest.mark.parametrize(
        "knots, control_points",
        [([], []), ([0.0, 1.0, 2.0], CONTROL_POINTS), (KNOTS, CONTROL_POINTS[:2])],
    )
    def test_too_little_input_gives_no_segments(self, knots, control_points):
        """Fewer than four knots or three control points give nothing."""
        assert b_spline_segments(knots, control_points) == []

    def test_weighted_control_point_input(self):
        """WeightedControlPoint instances are accepted and negative weights folded."""
        controls = [WeightedControlPoint(p, -w) for p, w in CONTROL_POINTS]
        assert b_spline_segments(KNOTS, controls) == b_spline_segments(KNOTS, CONTROL_POINTS)

    def test_3d_control_points(self):
        """3D control points give 3D segments."""
        controls = [((float(i), float(i * i), 1.0), 1.0 + i) for i in range(4)]
        segments = b_spline_segments([0.0, 1.0, 2.0, 3.0, 4.0], controls)
        assert [s.dimension for s in segments] == [3, 3]
        assert np.allclose(segments[0].end_point, segments[1].start_point)


###############################################################################
# NurbsCurve
###############################################################################


class TestNurbsCurve:
    """Tests for the NurbsCurve convenience wrapper."""

    def test_domain_and_evaluation(self):
        """Global parameters map onto the right segment."""
        curve = NurbsCurve(KNOTS, CONTROL_POINTS)
        assert curve.domain == (1.0, 6.0)
        segments = curve.segments
        assert np.allclose(curve.point_on(1.0), segments[0].start_point)
        assert np.allclose(curve.point_on(2.75), segments[1].point_on(0.5))
        assert np.allclose(curve.point_on(6.0), segments[-1].end_point)

    def test_first_derivative_uses_global_parameter(self):
        """The derivative matches a finite difference in the knot parameter."""
        curve = NurbsCurve(KNOTS, CONTROL_POINTS)
        h = 1e-6
        for u in (1.3, 2.9, 3.7, 5.2):
            numeric = (curve.point_on(u + h) - curve.point_on(u - h)) / (2 * h)
            assert np.allclose(curve.first_derivative(u), numeric, rtol=1e-5, atol=1e-5)

    def test_circle_approximation(self):
        """The polyline of the circle stays close to the unit circle and is closed."""
        circle = NurbsCurve(CIRCLE_KNOTS, CIRCLE_CONTROL_POINTS)
        polyline = circle.approximate(1e-4)
        assert np.array_equal(polyline[0], polyline[-1])
        assert np.all(np.linalg.norm(polyline, axis=1) <= 1.0 + 1e-12)
        assert len(polyline) == len(np.unique(polyline[:-1], axis=0)) + 1

    def test_bounding_box(self):
        """The union of segment boxes covers the circle's control polygon."""
        box = NurbsCurve(CIRCLE_KNOTS, CIRCLE_CONTROL_POINTS).bounding_box()
        assert box.extent == (-1.0, -1.0, 1.0, 1.0)

    def test_empty_curve(self):
        """A curve without segments has no domain but approximates to nothing."""
        curve = NurbsCurve([0.0, 0.0, 0.0, 0.0], CONTROL_POINTS[:3])
        assert curve.segments == []
        assert curve.approximate().shape == (0, 2)
        with pytest.raises(ValueError):
            _ = curve.domain
        with pytest.raises(ValueError):
            curve.bounding_box()

    def test_dict_roundtrip(self):
        """to_dict/from_dict preserve knots and control points."""
        curve = NurbsCurve(KNOTS, CONTROL_POINTS)
        restored = NurbsCurve.from_dict(curve.to_dict())
        assert restored.knots == curve.knots
        assert restored.control_points == curve.control_points
        assert restored.segments == curve.segments
