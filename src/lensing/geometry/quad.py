"""Quad (parallelogram) primitive with bounded ray-quad intersection.

A quad is a corner point ``Q`` plus two edge vectors ``u`` and ``v``; it
covers ``Q + alpha*u + beta*v`` for alpha, beta in [0, 1]. Quads serve as
floors, walls and thin occluders in lensing scenes.

The test intersects the supporting plane, then expresses the plane point in
the quad's (alpha, beta) frame using ``w = n / dot(n, n)`` with ``n = u x v``.
"""

import taichi as ti
import taichi.math as tm

from .sphere import PrimitiveHit, make_primitive_miss

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Quad:
    """A parallelogram with vertices Q, Q+u, Q+v, Q+u+v."""

    Q: vec3
    u: vec3
    v: vec3


@ti.func
def hit_quad(
    ray_origin: vec3,
    ray_direction: vec3,
    quad: Quad,
    t_min: ti.f32,
    t_max: ti.f32,
) -> PrimitiveHit:
    """Test for ray-quad intersection within (t_min, t_max).

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        quad: The quad to test.
        t_min: Lower exclusive bound on t.
        t_max: Upper exclusive bound on t.

    Returns:
        The intersection record, or a miss record. Degenerate quads
        (parallel edges) never report a hit.
    """
    n = tm.cross(quad.u, quad.v)
    n_dot_n = tm.dot(n, n)

    result = make_primitive_miss()

    if n_dot_n > 1e-10:
        normal = n / ti.sqrt(n_dot_n)
        denom = tm.dot(normal, ray_direction)

        # Ray parallel to the plane never hits
        if ti.abs(denom) > 1e-8:
            t = (tm.dot(normal, quad.Q) - tm.dot(normal, ray_origin)) / denom
            if t > t_min and t < t_max:
                point = ray_origin + t * ray_direction
                offset = point - quad.Q
                alpha = tm.dot(tm.cross(quad.v, n) / n_dot_n, offset)
                beta = tm.dot(tm.cross(n, quad.u) / n_dot_n, offset)

                if 0.0 <= alpha <= 1.0 and 0.0 <= beta <= 1.0:
                    facing = normal
                    if denom > 0.0:
                        facing = -normal
                    result = PrimitiveHit(hit=1, t=t, point=point, normal=facing)

    return result

