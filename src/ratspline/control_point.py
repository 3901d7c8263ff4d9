"""Weighted control points for rational curves"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from ratspline.common import PointLike, as_point


@dataclass(frozen=True)
class WeightedControlPoint:
    """
    A control point together with its weight.

    Attributes:
        point (NDArray): read-only coordinates, shape (2,) or (3,)
        weight (float): absolute value of the weight given at construction
    """

    point: NDArray[np.float64]
    weight: float

    def __init__(self, point: PointLike, weight: float):
        object.__setattr__(self, "point", as_point(point))
        # Negative weights are folded to positive; no other normalization happens.
        object.__setattr__(self, "weight", abs(float(weight)))

    @classmethod
    def coerce(cls, value: Union[WeightedControlPoint, Tuple[PointLike, float], Sequence]) -> WeightedControlPoint:
        """Accept a WeightedControlPoint or a (point, weight) pair."""
        if isinstance(value, WeightedControlPoint):
            return value
        point, weight = value
        return cls(point, weight)

    @property
    def dimension(self) -> int:
        """int: number of coordinates"""
        return int(self.point.shape[0])

    def __iter__(self):
        yield self.point
        yield self.weight

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WeightedControlPoint):
            return NotImplemented
        return self.weight == other.weight and bool(np.array_equal(self.point, other.point))

    def __hash__(self) -> int:
        return hash((tuple(self.point.tolist()), self.weight))

    def to_dict(self) -> dict:
        """Convert to a dictionary for serialization."""
        return {"point": self.point.tolist(), "weight": self.weight}

    @classmethod
    def from_dict(cls, data: dict) -> WeightedControlPoint:
        """Create a WeightedControlPoint from a dictionary."""
        return cls(data["point"], data.get("weight", 1.0))

    def __repr__(self) -> str:
        return f"WeightedControlPoint(point={self.point.tolist()}, weight={self.weight})"
