"""Unit tests for ray value types.

Tests cover:
- Ray dataclass and ray_at inside kernels
- Host-side RaySeed construction and normalization
- Rejection of zero-length directions
- Vector conversion helpers
"""

import numpy as np
import pytest
import taichi as ti


class TestTaichiRay:
    """Tests for the kernel-side Ray dataclass."""

    def test_ray_at(self):
        """Test that ray_at walks along the direction."""
        from src.lensing.core.ray import make_ray, ray_at, vec3

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(1.0, 2.0, 3.0), vec3(0.0, 0.0, 1.0))
            result[None] = ray_at(ray, 2.5)

        test_kernel()
        p = result[None]
        assert abs(p[0] - 1.0) < 1e-6
        assert abs(p[1] - 2.0) < 1e-6
        assert abs(p[2] - 5.5) < 1e-6

    def test_struct_fields_use_vector_members(self):
        """Struct members resolve to 3-vectors, not string annotations."""
        from src.lensing.core.ray import Ray
        from src.lensing.scene.intersection import SceneHitRecord

        rays = Ray.field(shape=())
        rays.origin[None] = [1.0, 2.0, 3.0]
        assert list(rays.origin[None]) == [1.0, 2.0, 3.0]

        records = SceneHitRecord.field(shape=())
        records.normal[None] = [0.0, 1.0, 0.0]
        assert list(records.normal[None]) == [0.0, 1.0, 0.0]


class TestRaySeed:
    """Tests for host-side ray seeds."""

    def test_make_ray_seed_normalizes_direction(self):
        from src.lensing.core.ray import make_ray_seed

        seed = make_ray_seed((1.0, 0.0, 0.0), (0.0, 3.0, 4.0))
        assert np.allclose(seed.direction, [0.0, 0.6, 0.8])
        assert np.allclose(seed.origin, [1.0, 0.0, 0.0])
        assert np.linalg.norm(seed.direction) == pytest.approx(1.0)

    def test_point_at(self):
        from src.lensing.core.ray import make_ray_seed

        seed = make_ray_seed((0.0, 0.0, 0.0), (0.0, 0.0, 2.0))
        assert np.allclose(seed.point_at(5.0), [0.0, 0.0, 5.0])

    def test_zero_direction_rejected(self):
        """A zero-length direction must fail fast instead of producing NaNs."""
        from src.lensing.core.ray import make_ray_seed

        with pytest.raises(ValueError, match="zero-length"):
            make_ray_seed((0.0, 0.0, 0.0), (0.0, 0.0, 0.0))

    def test_as_vector_rejects_wrong_length(self):
        from src.lensing.core.ray import as_vector

        with pytest.raises(ValueError):
            as_vector((1.0, 2.0))

    def test_normalize_host(self):
        from src.lensing.core.ray import normalize_host

        assert np.allclose(normalize_host([2.0, 0.0, 0.0]), [1.0, 0.0, 0.0])
