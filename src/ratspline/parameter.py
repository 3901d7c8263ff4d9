"""Uniformly spaced curve parameter values in [0, 1]."""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray


class ParameterValues:
    """Static helpers producing evenly spaced parameter values.

    Values are computed as i / n so that 0 and 1 are hit exactly. A
    non-positive count yields an empty array.
    """

    @staticmethod
    def _fractions(start: int, stop: int, n: int, offset: float = 0.0) -> NDArray[np.float64]:
        if n < 1 or stop <= start:
            return np.empty(0, dtype=np.float64)
        return (np.arange(start, stop, dtype=np.float64) + offset) / n

    @classmethod
    def steps(cls, n: int) -> NDArray[np.float64]:
        """n + 1 values 0, 1/n, ..., 1."""
        return cls._fractions(0, n + 1, n)

    @classmethod
    def leading(cls, n: int) -> NDArray[np.float64]:
        """n values 0, 1/n, ..., (n-1)/n."""
        return cls._fractions(0, n, n)

    @classmethod
    def trailing(cls, n: int) -> NDArray[np.float64]:
        """n values 1/n, ..., 1."""
        return cls._fractions(1, n + 1, n)

    @classmethod
    def in_between(cls, n: int) -> NDArray[np.float64]:
        """n - 1 values 1/n, ..., (n-1)/n."""
        return cls._fractions(1, n, n)

    @classmethod
    def midpoints(cls, n: int) -> NDArray[np.float64]:
        """n values at the centers of n equal sub-intervals."""
        return cls._fractions(0, n, n, offset=0.5)
