"""Sphere primitive with bounded ray-sphere intersection.

The intersection uses the half-b quadratic with the sign-aware root
formulation (Ray Tracing Gems, chapter 7), so rays that graze a sphere do
not lose precision to cancellation.

Every query is bounded to ``(t_min, t_max)``: the segment intersector relies
on this to test one short piece of a curved path at a time.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.lensing.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, 5), radius=1.0)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius."""

    center: vec3
    radius: ti.f32


@ti.dataclass
class PrimitiveHit:
    """Record of a ray-primitive intersection.

    Attributes:
        hit: 1 if the ray intersected the primitive inside the bounds, else 0.
        t: Distance along the (unit) ray direction to the hit.
        point: World-space contact point.
        normal: Unit surface normal, flipped to face the incoming ray.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3


@ti.func
def make_primitive_miss() -> PrimitiveHit:
    """Create a PrimitiveHit that reports no intersection."""
    return PrimitiveHit(hit=0, t=0.0, point=vec3(0.0, 0.0, 0.0), normal=vec3(0.0, 0.0, 0.0))


@ti.func
def _sphere_roots(h: ti.f32, a: ti.f32, c: ti.f32, sqrt_d: ti.f32):
    """Solve a*t^2 + 2*h*t + c = 0 for the ordered pair (t0, t1)."""
    sign_h = ti.select(h < 0.0, -1.0, 1.0)
    q = -(h + sign_h * sqrt_d)

    t0 = 0.0
    t1 = 0.0
    if ti.abs(q) < 1e-10:
        # Tangent ray through the center plane: plain formula is stable here
        t0 = (-h - sqrt_d) / a
        t1 = (-h + sqrt_d) / a
    else:
        t0 = q / a
        t1 = c / q

    if t0 > t1:
        temp = t0
        t0 = t1
        t1 = temp
    return t0, t1


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f32,
    t_max: ti.f32,
) -> PrimitiveHit:
    """Test for ray-sphere intersection within (t_min, t_max).

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        sphere: The sphere to test.
        t_min: Lower exclusive bound on t.
        t_max: Upper exclusive bound on t (segment length for path queries).

    Returns:
        The nearest intersection inside the bounds, or a miss record.
    """
    oc = ray_origin - sphere.center
    a = tm.dot(ray_direction, ray_direction)
    h = tm.dot(ray_direction, oc)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = h * h - a * c

    result = make_primitive_miss()

    if discriminant >= 0.0:
        t0, t1 = _sphere_roots(h, a, c, ti.sqrt(discriminant))

        t = t0
        valid = (t > t_min) and (t < t_max)
        if not valid:
            t = t1
            valid = (t > t_min) and (t < t_max)

        if valid:
            point = ray_origin + t * ray_direction
            outward = (point - sphere.center) / sphere.radius
            # Face the normal toward the incoming ray
            normal = outward
            if tm.dot(ray_direction, outward) > 0.0:
                normal = -outward
            result = PrimitiveHit(hit=1, t=t, point=point, normal=normal)

    return result
