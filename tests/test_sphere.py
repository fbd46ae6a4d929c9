"""Unit tests for sphere intersection.

Tests cover:
- Ray hitting sphere from outside
- Ray missing sphere
- Ray starting inside sphere (normal faces the ray)
- Bounded queries (t_max shorter than the hit distance)
"""

import taichi as ti


def _run_hit(origin, direction, center, radius, t_min=1e-4, t_max=1000.0):
    from src.lensing.geometry.sphere import Sphere, hit_sphere, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    point = ti.Vector.field(3, dtype=ti.f32, shape=())
    normal = ti.Vector.field(3, dtype=ti.f32, shape=())

    @ti.kernel
    def test_kernel():
        sphere = Sphere(center=vec3(center[0], center[1], center[2]), radius=radius)
        record = hit_sphere(
            vec3(origin[0], origin[1], origin[2]),
            vec3(direction[0], direction[1], direction[2]),
            sphere,
            t_min,
            t_max,
        )
        hit[None] = record.hit
        t_val[None] = record.t
        point[None] = record.point
        normal[None] = record.normal

    test_kernel()
    return hit[None], t_val[None], point[None], normal[None]


class TestSphereIntersection:
    """Tests for ray-sphere intersection."""

    def test_direct_hit(self):
        """Ray from z=5 toward the origin hits the front at z=1."""
        hit, t, p, n = _run_hit((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0)
        assert hit == 1
        assert abs(t - 4.0) < 1e-5
        assert abs(p[2] - 1.0) < 1e-5
        # Outward normal faces the ray
        assert abs(n[2] - 1.0) < 1e-5

    def test_miss(self):
        hit, _, _, _ = _run_hit((0.0, 5.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0)
        assert hit == 0

    def test_from_inside_normal_faces_ray(self):
        """A ray leaving the sphere gets the inward-flipped normal."""
        hit, t, _, n = _run_hit((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), (0.0, 0.0, 0.0), 2.0)
        assert hit == 1
        assert abs(t - 2.0) < 1e-5
        assert abs(n[2] + 1.0) < 1e-5

    def test_bounded_query_stops_short(self):
        """A hit beyond t_max is not reported."""
        hit, _, _, _ = _run_hit(
            (0.0, 0.0, 0.0), (0.0, 0.0, 1.0), (0.0, 0.0, 5.0), 1.0, t_max=3.5
        )
        assert hit == 0

    def test_sphere_behind_ray(self):
        hit, _, _, _ = _run_hit((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), (0.0, 0.0, -5.0), 1.0)
        assert hit == 0
