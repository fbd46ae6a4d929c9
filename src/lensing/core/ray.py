"""Ray data structures and vector utilities.

This module provides the Taichi-side Ray dataclass used inside kernels and
the host-side ray value types used by the seeders and the debug emitter.

Two worlds share the same meaning:
    - ``Ray`` (``ti.dataclass``): origin + direction inside Taichi kernels.
    - ``RaySeed`` (frozen ``dataclass``): origin + unit direction as NumPy
      arrays, produced by the ray seeders on the Python side.

Directions are always normalized before use. A zero-length direction has no
meaningful normalization, so ``make_ray_seed`` rejects it instead of letting
NaNs flow into the pipeline.

Example:
    >>> import numpy as np
    >>> from src.lensing.core.ray import make_ray_seed
    >>> seed = make_ray_seed((0.0, 0.0, 0.0), (0.0, 0.0, 2.0))
    >>> seed.direction
    array([0., 0., 1.])
"""

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Below this length a direction is considered degenerate
DIRECTION_EPSILON = 1e-12

Vector3Like = Sequence[float] | npt.NDArray[np.floating]


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3), unit length.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t."""
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction inside a Taichi kernel."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Host-side (NumPy) ray values
# =============================================================================


@dataclass(frozen=True)
class RaySeed:
    """A world-space ray produced on the Python side.

    Attributes:
        origin: Ray origin, shape (3,), float64.
        direction: Unit direction, shape (3,), float64.
    """

    origin: npt.NDArray[np.float64]
    direction: npt.NDArray[np.float64]

    def point_at(self, distance: float) -> npt.NDArray[np.float64]:
        """Return ``origin + distance * direction``."""
        return self.origin + distance * self.direction


def as_vector(value: Vector3Like) -> npt.NDArray[np.float64]:
    """Convert a 3-sequence to a float64 NumPy vector.

    Raises:
        ValueError: If the value does not have exactly three components.
    """
    vector = np.asarray(value, dtype=np.float64).reshape(-1)
    if vector.shape != (3,):
        raise ValueError(f"Expected a 3D vector, got shape {vector.shape}")
    return vector


def normalize_host(value: Vector3Like) -> npt.NDArray[np.float64]:
    """Normalize a vector on the Python side.

    Raises:
        ValueError: If the vector has (near) zero length.
    """
    vector = as_vector(value)
    norm = float(np.linalg.norm(vector))
    if norm < DIRECTION_EPSILON:
        raise ValueError(f"Cannot normalize zero-length direction {vector.tolist()}")
    return vector / norm


def make_ray_seed(origin: Vector3Like, direction: Vector3Like) -> RaySeed:
    """Create a ray seed, normalizing the direction.

    Args:
        origin: The starting point of the ray.
        direction: Any non-zero direction vector.

    Returns:
        A RaySeed with a unit-length direction.

    Raises:
        ValueError: If the direction has zero length.
    """
    return RaySeed(origin=as_vector(origin), direction=normalize_host(direction))
