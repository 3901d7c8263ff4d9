"""Test module for ratspline.parameter

The tests are run using pytest.
"""

import numpy as np
import pytest

from ratspline.parameter import ParameterValues


class TestParameterValues:
    """Tests for evenly spaced parameter values."""

    def test_steps(self):
        """n + 1 values from 0 to 1 inclusive."""
        assert np.array_equal(ParameterValues.steps(4), [0.0, 0.25, 0.5, 0.75, 1.0])

    def test_steps_endpoints_exact(self):
        """First and last values are exactly 0 and 1."""
        values = ParameterValues.steps(7)
        assert values[0] == 0.0
        assert values[-1] == 1.0

    def test_leading_trailing_in_between(self):
        """Variants leave out one or both ends."""
        assert np.array_equal(ParameterValues.leading(4), [0.0, 0.25, 0.5, 0.75])
        assert np.array_equal(ParameterValues.trailing(4), [0.25, 0.5, 0.75, 1.0])
        assert np.array_equal(ParameterValues.in_between(4), [0.25, 0.5, 0.75])

    def test_midpoints(self):
        """Centers of equal sub-intervals."""
        assert np.array_equal(ParameterValues.midpoints(4), [0.125, 0.375, 0.625, 0.875])

    @pytest.mark.parametrize(
        "method",
        [
            ParameterValues.steps,
            ParameterValues.leading,
            ParameterValues.trailing,
            ParameterValues.in_between,
            ParameterValues.midpoints,
        ],
    )
    @pytest.mark.parametrize("n", [0, -3])
    def test_non_positive_count_is_empty(self, method, n):
        """Non-positive counts give no values."""
        assert method(n).size == 0

    def test_in_between_single_step_is_empty(self):
        """One step has no interior values."""
        assert ParameterValues.in_between(1).size == 0
