"""Test module for ratspline.control_point

The tests are run using pytest.
"""

import numpy as np
import pytest

from ratspline.common import GeometryDimensionError
from ratspline.control_point import WeightedControlPoint


class TestWeightedControlPoint:
    """Tests for WeightedControlPoint construction and conversion."""

    def test_negative_weight_is_folded(self):
        """Negative weights are stored as their absolute value."""
        assert WeightedControlPoint((1.0, 2.0), -3.0).weight == 3.0

    def test_zero_weight_is_kept(self):
        """Zero weights are not rejected."""
        assert WeightedControlPoint((1.0, 2.0), 0.0).weight == 0.0

    def test_point_is_read_only(self):
        """Stored coordinates cannot be modified."""
        cp = WeightedControlPoint([1.0, 2.0, 3.0], 1.0)
        with pytest.raises(ValueError):
            cp.point[0] = 5.0

    def test_point_is_copied(self):
        """Later changes to the input array do not leak in."""
        source = np.array([1.0, 2.0])
        cp = WeightedControlPoint(source, 1.0)
        source[0] = 10.0
        assert cp.point[0] == 1.0

    def test_invalid_dimension_raises(self):
        """Only 2D and 3D points are supported."""
        with pytest.raises(GeometryDimensionError):
            WeightedControlPoint((1.0,), 1.0)
        with pytest.raises(GeometryDimensionError):
            WeightedControlPoint((1.0, 2.0, 3.0, 4.0), 1.0)

    def test_coerce_and_unpack(self):
        """Pairs are coerced and instances unpack back into pairs."""
        cp = WeightedControlPoint.coerce(((1.0, 2.0), 0.5))
        point, weight = cp
        assert np.array_equal(point, [1.0, 2.0])
        assert weight == 0.5
        assert WeightedControlPoint.coerce(cp) is cp

    def test_equality_and_hash(self):
        """Equal points and weights compare and hash equal."""
        a = WeightedControlPoint((1.0, 2.0), 2.0)
        b = WeightedControlPoint((1.0, 2.0), -2.0)
        assert a == b
        assert hash(a) == hash(b)
        assert a != WeightedControlPoint((1.0, 2.5), 2.0)

    def test_dict_roundtrip(self):
        """to_dict and from_dict are inverse."""
        cp = WeightedControlPoint((1.0, 2.0, 3.0), 0.25)
        assert cp.to_dict() == {"point": [1.0, 2.0, 3.0], "weight": 0.25}
        assert WeightedControlPoint.from_dict(cp.to_dict()) == cp
