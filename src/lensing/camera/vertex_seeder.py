"""Vertex ray seeder: outward rays from sampled mesh vertices.

A seeded object is described by its local-space vertex list and a 4x4
object-to-world transform. ``sample_vertex_indices`` draws
``min(requested, vertex_count)`` distinct indices by rejection sampling:
uniform draws from ``[0, vertex_count)`` repeat until an unseen index comes
up. Each chosen vertex becomes a ray starting at its world position and
pointing away from the object's world origin.

Randomness comes from an explicitly passed ``numpy.random.Generator``, so a
fixed seed reproduces the same rays.

Example:
    >>> import numpy as np
    >>> from src.lensing.camera.vertex_seeder import seed_vertex_rays
    >>> vertices = np.array([[1, 0, 0], [0, 1, 0], [0, 0, 1]], dtype=float)
    >>> rays = seed_vertex_rays(vertices, np.eye(4), 2, np.random.default_rng(7))
    >>> len(rays)
    2
"""

from __future__ import annotations

import logging

import numpy as np
import numpy.typing as npt

from src.lensing.core.ray import DIRECTION_EPSILON, RaySeed, make_ray_seed

logger = logging.getLogger(__name__)


def sample_vertex_indices(
    vertex_count: int,
    requested_count: int,
    rng: np.random.Generator,
) -> list[int]:
    """Draw distinct vertex indices by rejection sampling.

    Args:
        vertex_count: Number of vertices available.
        requested_count: Number of indices wanted; clamped to vertex_count.
        rng: Random generator supplying the draws.

    Returns:
        ``min(requested_count, vertex_count)`` distinct indices in draw order.
    """
    count = max(0, min(requested_count, vertex_count))
    chosen: list[int] = []
    seen: set[int] = set()
    while len(chosen) < count:
        index = int(rng.integers(0, vertex_count))
        if index not in seen:
            seen.add(index)
            chosen.append(index)
    return chosen


def transform_points(
    transform: npt.NDArray[np.float64],
    points: npt.NDArray[np.float64],
) -> npt.NDArray[np.float64]:
    """Apply a 4x4 affine transform to an (N, 3) array of points."""
    matrix = np.asarray(transform, dtype=np.float64)
    if matrix.shape != (4, 4):
        raise ValueError(f"Object transform must be 4x4, got shape {matrix.shape}")
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    homogeneous = np.hstack([pts, np.ones((len(pts), 1))])
    return (homogeneous @ matrix.T)[:, :3]


def seed_vertex_rays(
    vertices: npt.NDArray[np.float64],
    object_to_world: npt.NDArray[np.float64],
    requested_count: int,
    rng: np.random.Generator,
) -> list[RaySeed]:
    """Create outward rays from a random subset of an object's vertices.

    Args:
        vertices: Local-space vertex positions, shape (N, 3).
        object_to_world: 4x4 object-to-world transform.
        requested_count: Number of rays wanted; clamped to N.
        rng: Random generator for the vertex sample.

    Returns:
        One RaySeed per sampled vertex, in sample order. A vertex located at
        the object's origin has no outward direction and is skipped.
    """
    local = np.asarray(vertices, dtype=np.float64).reshape(-1, 3)
    indices = sample_vertex_indices(len(local), requested_count, rng)
    if not indices:
        return []

    world_origin = transform_points(object_to_world, np.zeros((1, 3)))[0]
    world_vertices = transform_points(object_to_world, local[indices])

    rays: list[RaySeed] = []
    for index, world_position in zip(indices, world_vertices):
        outward = world_position - world_origin
        if np.linalg.norm(outward) < DIRECTION_EPSILON:
            logger.warning("Skipping vertex %d: it coincides with the object origin", index)
            continue
        rays.append(make_ray_seed(world_position, outward))
    return rays
