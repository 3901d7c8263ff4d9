"""Central module containing shared types and definitions for rational spline geometry."""

from __future__ import annotations

from typing import Sequence, TypeVar, Union

import numpy as np
from numpy.typing import NDArray

###############################################################################
# Types
###############################################################################

# Phantom tags for the length unit (e.g. meters, pixels) and the coordinate
# system (e.g. world, sketch-local) of a geometric value. They exist only for
# static type checking and have no runtime representation.
UnitsT = TypeVar("UnitsT")
UnitsT2 = TypeVar("UnitsT2")
CoordinatesT = TypeVar("CoordinatesT")
CoordinatesT2 = TypeVar("CoordinatesT2")

PointLike = Union[Sequence[float], NDArray[np.float64]]  # (x, y) or (x, y, z)
VectorLike = PointLike

SUPPORTED_DIMENSIONS = (2, 3)


###############################################################################
# Exceptions
###############################################################################


class GeometryDimensionError(ValueError):
    """Raised when points of unsupported or mismatched dimension are combined."""


###############################################################################
# Functions
###############################################################################


def as_point(point: PointLike) -> NDArray[np.float64]:
    """Convert a point-like value into a read-only float64 array of shape (d,).

    Raises:
        GeometryDimensionError: If the value is not a 2D or 3D coordinate tuple.
    """
    arr = np.array(point, dtype=np.float64)
    if arr.ndim != 1 or arr.shape[0] not in SUPPORTED_DIMENSIONS:
        raise GeometryDimensionError(f"points must have shape (2,) or (3,), got {arr.shape}")
    arr.flags.writeable = False
    return arr


def frozen(arr: NDArray[np.float64]) -> NDArray[np.float64]:
    """Mark a freshly computed array as read-only and return it."""
    arr.flags.writeable = False
    return arr
