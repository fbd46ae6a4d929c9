"""Scene-level ray intersection: the collaborator the tracing pipeline queries.

The scene stores spheres and quads in Taichi fields (structure-of-arrays
layout). ``intersect_scene`` answers the bounded query
``intersect(origin, direction, max_distance) -> hit | no hit`` with the
nearest hit inside the bound, including the struck surface's base color.
``intersect_scene_any`` is the early-exit variant used for shadow tests.

``query_scene`` exposes the same query to Python for the debug emitter and
tests; it runs a one-off kernel and returns a ``SurfaceHit`` or ``None``.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.lensing.scene.intersection import add_sphere, query_scene
    >>> add_sphere((0.0, 0.0, 5.0), 1.0)
    0
    >>> hit = query_scene((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), 100.0)
    >>> round(hit.distance, 3)
    4.0
"""

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.lensing.core.ray import as_vector, normalize_host
from src.lensing.geometry.quad import Quad, hit_quad
from src.lensing.geometry.sphere import PrimitiveHit, Sphere, hit_sphere
from src.lensing.materials.surface import NO_MATERIAL, get_base_color

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Smallest accepted hit distance for primary and path queries
T_MIN = 1e-4


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection.

    Attributes:
        hit: 1 if any primitive was hit inside the query bound, else 0.
        t: Distance along the query direction to the hit.
        point: World-space contact point.
        normal: Unit surface normal facing the incoming ray.
        base_color: Base color of the struck surface (mid-gray fallback).
        material_id: Material ID of the struck primitive (-1 if none).
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    base_color: vec3
    material_id: ti.i32


@dataclass(frozen=True)
class SurfaceHit:
    """Python-side view of a scene hit.

    Attributes:
        point: Contact point, shape (3,).
        normal: Unit surface normal, shape (3,).
        base_color: Surface base color (R, G, B).
        distance: Distance from the query origin along the query direction.
    """

    point: npt.NDArray[np.float64]
    normal: npt.NDArray[np.float64]
    base_color: tuple[float, float, float]
    distance: float


# Maximum number of primitives supported in the scene
MAX_SPHERES = 1024
MAX_QUADS = 1024

sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

quad_corners = ti.Vector.field(3, dtype=ti.f32, shape=MAX_QUADS)
quad_edge_u = ti.Vector.field(3, dtype=ti.f32, shape=MAX_QUADS)
quad_edge_v = ti.Vector.field(3, dtype=ti.f32, shape=MAX_QUADS)
quad_material_ids = ti.field(dtype=ti.i32, shape=MAX_QUADS)
num_quads = ti.field(dtype=ti.i32, shape=())

# Host query inputs and outputs
_query_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_direction = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_result = SceneHitRecord.field(shape=())


def clear_scene() -> None:
    """Remove all primitives from the scene."""
    num_spheres[None] = 0
    num_quads[None] = 0


def add_sphere(
    center: Sequence[float],
    radius: float,
    material_id: int = NO_MATERIAL,
) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere.
        material_id: Surface color ID, or -1 for the mid-gray fallback.

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
        ValueError: If the radius is not positive.
    """
    if radius <= 0.0:
        raise ValueError(f"Sphere radius must be positive, got {radius}")
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = as_vector(center).tolist()
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def add_quad(
    q: Sequence[float],
    u: Sequence[float],
    v: Sequence[float],
    material_id: int = NO_MATERIAL,
) -> int:
    """Add a quad with vertices Q, Q+u, Q+v, Q+u+v to the scene.

    Returns:
        The index of the added quad.

    Raises:
        RuntimeError: If the maximum number of quads is exceeded.
    """
    idx = num_quads[None]
    if idx >= MAX_QUADS:
        raise RuntimeError(f"Maximum number of quads ({MAX_QUADS}) exceeded")
    quad_corners[idx] = as_vector(q).tolist()
    quad_edge_u[idx] = as_vector(u).tolist()
    quad_edge_v[idx] = as_vector(v).tolist()
    quad_material_ids[idx] = material_id
    num_quads[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


def get_quad_count() -> int:
    """Get the number of quads in the scene."""
    return int(num_quads[None])


@ti.func
def make_miss_record() -> SceneHitRecord:
    """Create a SceneHitRecord indicating no intersection."""
    return SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        base_color=vec3(0.0, 0.0, 0.0),
        material_id=NO_MATERIAL,
    )


@ti.func
def _to_scene_record(rec: PrimitiveHit, material_id: ti.i32) -> SceneHitRecord:
    return SceneHitRecord(
        hit=rec.hit,
        t=rec.t,
        point=rec.point,
        normal=rec.normal,
        base_color=get_base_color(material_id),
        material_id=material_id,
    )


@ti.func
def intersect_scene(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> SceneHitRecord:
    """Find the nearest hit among all primitives within (t_min, t_max).

    Args:
        ray_origin: The starting point of the query.
        ray_direction: Unit direction of the query.
        t_min: Lower exclusive bound on hit distance.
        t_max: Upper exclusive bound on hit distance.

    Returns:
        The closest SceneHitRecord, or a miss record.
    """
    closest_t = t_max
    result = make_miss_record()

    for i in range(num_spheres[None]):
        sphere = Sphere(center=sphere_centers[i], radius=sphere_radii[i])
        rec = hit_sphere(ray_origin, ray_direction, sphere, t_min, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = _to_scene_record(rec, sphere_material_ids[i])

    for i in range(num_quads[None]):
        quad = Quad(Q=quad_corners[i], u=quad_edge_u[i], v=quad_edge_v[i])
        rec = hit_quad(ray_origin, ray_direction, quad, t_min, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = _to_scene_record(rec, quad_material_ids[i])

    return result


@ti.func
def intersect_scene_any(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> ti.i32:
    """Return 1 if anything lies within (t_min, t_max) along the ray.

    Stops testing primitives after the first hit; used for shadow queries
    where only occlusion matters.
    """
    hit_any = 0

    for i in range(num_spheres[None]):
        if hit_any == 0:
            sphere = Sphere(center=sphere_centers[i], radius=sphere_radii[i])
            if hit_sphere(ray_origin, ray_direction, sphere, t_min, t_max).hit == 1:
                hit_any = 1

    for i in range(num_quads[None]):
        if hit_any == 0:
            quad = Quad(Q=quad_corners[i], u=quad_edge_u[i], v=quad_edge_v[i])
            if hit_quad(ray_origin, ray_direction, quad, t_min, t_max).hit == 1:
                hit_any = 1

    return hit_any


# =============================================================================
# Host-side access
# =============================================================================


@ti.kernel
def _query_scene_kernel(max_distance: ti.f32):
    # One task, so the primitive loops inside stay serial
    for _ in range(1):
        _query_result[None] = intersect_scene(
            _query_origin[None], _query_direction[None], T_MIN, max_distance
        )


def read_hit_record(record_field) -> SurfaceHit | None:
    """Convert a 0-D SceneHitRecord field into a SurfaceHit (or None on miss)."""
    record = record_field[None]
    if int(record.hit) == 0:
        return None
    point = np.array([float(record.point[k]) for k in range(3)])
    normal = np.array([float(record.normal[k]) for k in range(3)])
    base_color = (
        float(record.base_color[0]),
        float(record.base_color[1]),
        float(record.base_color[2]),
    )
    return SurfaceHit(point=point, normal=normal, base_color=base_color, distance=float(record.t))


def query_scene(
    origin: Sequence[float],
    direction: Sequence[float],
    max_distance: float,
) -> SurfaceHit | None:
    """Query the nearest hit along a ray from Python.

    Args:
        origin: Query origin.
        direction: Query direction (normalized here).
        max_distance: Upper bound on the hit distance.

    Returns:
        The nearest SurfaceHit, or None if nothing lies within the bound.

    Raises:
        ValueError: If the direction has zero length.
    """
    _query_origin[None] = as_vector(origin).tolist()
    _query_direction[None] = normalize_host(direction).tolist()
    _query_scene_kernel(max_distance)
    return read_hit_record(_query_result)
