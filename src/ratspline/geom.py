"""Handling geometries: interpolation helpers, boxes, axes, planes and frames"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from ratspline.common import GeometryDimensionError, PointLike, VectorLike, as_point, frozen


###############################################################################
# GeomMath
###############################################################################
class GeomMath:
    """Class to provide various static methods related to geometry handling."""

    @staticmethod
    def lerp(a: float, b: float, t: float) -> float:
        """Linear interpolation from a (t=0) to b (t=1).

        Blends from the nearer end so that t=0 and t=1 reproduce a and b exactly.
        """
        if t <= 0.5:
            return a + t * (b - a)
        return b + (1.0 - t) * (a - b)

    @staticmethod
    def weighted_interp(
        # pylint: disable=too-many-arguments,too-many-positional-arguments
        t: float,
        weight: float,
        point_a: NDArray[np.float64],
        weight_a: float,
        point_b: NDArray[np.float64],
        weight_b: float,
    ) -> NDArray[np.float64]:
        """
        Interpolate between two weighted points and project back by *weight*.

        Computes ((1-t)*wa*pa + t*wb*pb) / weight per axis, starting from the
        endpoint nearer to t to reduce cancellation.

        Args:
            t (float): interpolation parameter, usually in [0, 1]
            weight (float): weight of the interpolated point (normally lerp(wa, wb, t))
            point_a (NDArray): first point
            weight_a (float): weight of first point
            point_b (NDArray): second point
            weight_b (float): weight of second point

        Returns:
            NDArray[np.float64]: the interpolated point
        """
        weighted_a = weight_a * point_a
        weighted_b = weight_b * point_b
        if t <= 0.5:
            return (weighted_a + t * (weighted_b - weighted_a)) / weight
        return (weighted_b + (1.0 - t) * (weighted_a - weighted_b)) / weight

    @staticmethod
    def lerp_array(a: NDArray[np.float64], b: NDArray[np.float64], t: NDArray[np.float64]) -> NDArray[np.float64]:
        """Vectorized form of lerp over an array of parameter values."""
        return np.where(t <= 0.5, a + t * (b - a), b + (1.0 - t) * (a - b))

    @staticmethod
    def weighted_interp_array(
        # pylint: disable=too-many-arguments,too-many-positional-arguments
        t: NDArray[np.float64],
        weight: NDArray[np.float64],
        point_a: NDArray[np.float64],
        weight_a: NDArray[np.float64],
        point_b: NDArray[np.float64],
        weight_b: NDArray[np.float64],
    ) -> NDArray[np.float64]:
        """
        Vectorized form of weighted_interp.

        Args:
            t: parameter values, shape (n,)
            weight: interpolated weights, shape (n,)
            point_a: points of shape (d,) or (n, d)
            weight_a: scalar or shape (n,)
            point_b: points of shape (d,) or (n, d)
            weight_b: scalar or shape (n,)

        Returns:
            NDArray[np.float64]: interpolated points of shape (n, d)
        """
        t_col = t[:, np.newaxis]
        weighted_a = np.atleast_1d(weight_a)[:, np.newaxis] * point_a
        weighted_b = np.atleast_1d(weight_b)[:, np.newaxis] * point_b
        blended = np.where(
            t_col <= 0.5,
            weighted_a + t_col * (weighted_b - weighted_a),
            weighted_b + (1.0 - t_col) * (weighted_a - weighted_b),
        )
        return blended / weight[:, np.newaxis]

    @staticmethod
    def scale_about(points: NDArray[np.float64], center: PointLike, factor: float) -> NDArray[np.float64]:
        """Scale points (shape (n, d)) about a center point."""
        center_arr = np.asarray(center, dtype=np.float64)
        return center_arr + factor * (points - center_arr)

    @staticmethod
    def rotation_matrix_2d(angle: float) -> NDArray[np.float64]:
        """Counterclockwise rotation by *angle* radians."""
        cos_a, sin_a = math.cos(angle), math.sin(angle)
        return np.array([[cos_a, -sin_a], [sin_a, cos_a]], dtype=np.float64)

    @staticmethod
    def rotation_matrix_3d(direction: NDArray[np.float64], angle: float) -> NDArray[np.float64]:
        """Right-handed rotation by *angle* radians around a unit direction (Rodrigues)."""
        x, y, z = direction
        cos_a, sin_a = math.cos(angle), math.sin(angle)
        cross = np.array([[0.0, -z, y], [z, 0.0, -x], [-y, x, 0.0]], dtype=np.float64)
        return cos_a * np.eye(3) + sin_a * cross + (1.0 - cos_a) * np.outer(direction, direction)

    @staticmethod
    def rotate_around(points: NDArray[np.float64], center: PointLike, matrix: NDArray[np.float64]) -> NDArray[np.float64]:
        """Rotate points (shape (n, d)) by *matrix* about a center point."""
        center_arr = np.asarray(center, dtype=np.float64)
        return center_arr + (points - center_arr) @ matrix.T

    @staticmethod
    def normalize(vector: VectorLike) -> NDArray[np.float64]:
        """Return the unit vector in the direction of *vector*.

        Raises:
            ValueError: If the vector has zero length.
        """
        arr = np.asarray(vector, dtype=np.float64)
        length = float(np.linalg.norm(arr))
        if length == 0.0:
            raise ValueError("Cannot normalize a zero-length vector")
        return arr / length


###############################################################################
# BoundingBox
###############################################################################
@dataclass(frozen=True)
class BoundingBox:
    """
    Axis-aligned box given by per-axis minimum and maximum coordinates.

    Attributes:
        mins (NDArray): minimum coordinate per axis, shape (d,)
        maxs (NDArray): maximum coordinate per axis, shape (d,)
    """

    mins: NDArray[np.float64]
    maxs: NDArray[np.float64]

    def __init__(self, mins: PointLike, maxs: PointLike):
        """Initialize BoundingBox from min and max corners.

        Corners are normalized per axis so that mins <= maxs.
        """
        lo = np.asarray(mins, dtype=np.float64)
        hi = np.asarray(maxs, dtype=np.float64)
        if lo.shape != hi.shape:
            raise GeometryDimensionError(f"min/max corners differ in shape: {lo.shape} vs {hi.shape}")
        object.__setattr__(self, "mins", frozen(np.minimum(lo, hi)))
        object.__setattr__(self, "maxs", frozen(np.maximum(lo, hi)))

    @classmethod
    def from_points(cls, points: Union[Sequence[PointLike], NDArray[np.float64]]) -> BoundingBox:
        """Smallest box containing all given points (shape (n, d), n >= 1)."""
        arr = np.asarray(points, dtype=np.float64)
        return cls(arr.min(axis=0), arr.max(axis=0))

    @property
    def dimension(self) -> int:
        """int: number of axes"""
        return int(self.mins.shape[0])

    @property
    def xmin(self) -> float:
        """float: The minimum x-coordinate."""
        return float(self.mins[0])

    @property
    def xmax(self) -> float:
        """float: The maximum x-coordinate."""
        return float(self.maxs[0])

    @property
    def ymin(self) -> float:
        """float: The minimum y-coordinate."""
        return float(self.mins[1])

    @property
    def ymax(self) -> float:
        """float: The maximum y-coordinate."""
        return float(self.maxs[1])

    @property
    def zmin(self) -> float:
        """float: The minimum z-coordinate (3D boxes only)."""
        self._require_3d()
        return float(self.mins[2])

    @property
    def zmax(self) -> float:
        """float: The maximum z-coordinate (3D boxes only)."""
        self._require_3d()
        return float(self.maxs[2])

    def _require_3d(self) -> None:
        if self.dimension != 3:
            raise GeometryDimensionError(f"z-coordinate requested from a {self.dimension}D box")

    @property
    def extent(self) -> Tuple[float, ...]:
        """The extent of the box as Tuple (xmin, ymin[, zmin], xmax, ymax[, zmax])."""
        return tuple(float(v) for v in self.mins) + tuple(float(v) for v in self.maxs)

    def union(self, other: BoundingBox) -> BoundingBox:
        """Smallest box containing both boxes."""
        return BoundingBox(np.minimum(self.mins, other.mins), np.maximum(self.maxs, other.maxs))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BoundingBox):
            return NotImplemented
        return bool(np.array_equal(self.mins, other.mins) and np.array_equal(self.maxs, other.maxs))

    def __hash__(self) -> int:
        return hash(self.extent)

    @classmethod
    def from_dict(cls, data: dict) -> BoundingBox:
        """Create a BoundingBox instance from a dictionary."""
        return cls(mins=data["min"], maxs=data["max"])

    def to_dict(self) -> dict:
        """Convert the BoundingBox instance to a dictionary."""
        return {"min": self.mins.tolist(), "max": self.maxs.tolist()}

    def __str__(self):
        """Returns a string representation of the BoundingBox instance."""
        return f"BoundingBox(min={self.mins.tolist()}, max={self.maxs.tolist()})"


###############################################################################
# Axis / Plane
###############################################################################
@dataclass(frozen=True, eq=False)
class Axis:
    """Directed line through an origin point; direction is stored normalized."""

    origin: NDArray[np.float64]
    direction: NDArray[np.float64]

    def __init__(self, origin: PointLike, direction: VectorLike):
        origin_arr = as_point(origin)
        direction_arr = frozen(GeomMath.normalize(direction))
        if direction_arr.shape != origin_arr.shape:
            raise GeometryDimensionError(
                f"axis origin and direction differ in shape: {origin_arr.shape} vs {direction_arr.shape}"
            )
        object.__setattr__(self, "origin", origin_arr)
        object.__setattr__(self, "direction", direction_arr)

    @property
    def dimension(self) -> int:
        """int: number of coordinates of origin and direction"""
        return int(self.origin.shape[0])

    def mirror(self, points: NDArray[np.float64]) -> NDArray[np.float64]:
        """Mirror 2D points (shape (n, 2)) across this axis."""
        offsets = points - self.origin
        along = offsets @ self.direction
        return self.origin + 2.0 * np.outer(along, self.direction) - offsets


@dataclass(frozen=True, eq=False)
class Plane:
    """Plane in 3D through an origin point with a unit normal."""

    origin: NDArray[np.float64]
    normal: NDArray[np.float64]

    def __init__(self, origin: PointLike, normal: VectorLike):
        origin_arr = as_point(origin)
        normal_arr = frozen(GeomMath.normalize(normal))
        if origin_arr.shape != (3,) or normal_arr.shape != (3,):
            raise GeometryDimensionError("planes are defined in 3D only")
        object.__setattr__(self, "origin", origin_arr)
        object.__setattr__(self, "normal", normal_arr)

    def signed_distances(self, points: NDArray[np.float64]) -> NDArray[np.float64]:
        """Signed distance of each point (shape (n, 3)) along the normal."""
        return (points - self.origin) @ self.normal

    def mirror(self, points: NDArray[np.float64]) -> NDArray[np.float64]:
        """Mirror 3D points across this plane."""
        return points - 2.0 * np.outer(self.signed_distances(points), self.normal)

    def project(self, points: NDArray[np.float64]) -> NDArray[np.float64]:
        """Orthogonally project 3D points onto this plane."""
        return points - np.outer(self.signed_distances(points), self.normal)


###############################################################################
# Frame
###############################################################################
@dataclass(frozen=True, eq=False)
class Frame:
    """
    Local coordinate system: an origin plus an orthonormal basis.

    Attributes:
        origin (NDArray): origin point, shape (d,)
        basis (NDArray): unit axis directions as rows, shape (d, d)
    """

    origin: NDArray[np.float64]
    basis: NDArray[np.float64]

    def __init__(self, origin: PointLike, basis: Union[Sequence[VectorLike], NDArray[np.float64]]):
        origin_arr = as_point(origin)
        basis_arr = np.array(basis, dtype=np.float64)
        dim = origin_arr.shape[0]
        if basis_arr.shape != (dim, dim):
            raise GeometryDimensionError(f"basis must have shape ({dim}, {dim}), got {basis_arr.shape}")
        if not np.allclose(basis_arr @ basis_arr.T, np.eye(dim), atol=1e-9):
            raise ValueError("frame basis must be orthonormal")
        object.__setattr__(self, "origin", origin_arr)
        object.__setattr__(self, "basis", frozen(basis_arr))

    @classmethod
    def at_origin(cls, dimension: int = 2) -> Frame:
        """Global frame of the given dimension."""
        return cls(np.zeros(dimension), np.eye(dimension))

    @classmethod
    def at_point(cls, origin: PointLike) -> Frame:
        """Frame with global orientation located at *origin*."""
        origin_arr = as_point(origin)
        return cls(origin_arr, np.eye(origin_arr.shape[0]))

    @classmethod
    def rotated_2d(cls, origin: PointLike, angle: float) -> Frame:
        """2D frame at *origin* whose x axis is rotated counterclockwise by *angle*."""
        return cls(origin, GeomMath.rotation_matrix_2d(angle).T)

    @property
    def dimension(self) -> int:
        """int: number of axes"""
        return int(self.origin.shape[0])

    def to_local(self, points: NDArray[np.float64]) -> NDArray[np.float64]:
        """Express global points (shape (n, d)) in this frame's coordinates."""
        return (points - self.origin) @ self.basis.T

    def to_global(self, points: NDArray[np.float64]) -> NDArray[np.float64]:
        """Map points given in this frame's coordinates to global coordinates."""
        return self.origin + points @ self.basis
