"""Tests for the per-pixel tracing integrator.

This module tests:
- Render target setup and validation
- Empty scenes render the background everywhere
- The single red sphere baseline scene
- Straight versus curved pixel paths
- Consistency between the kernel trace and the host-side queries

Note: Imports are done inside test methods so Taichi is initialized by the
conftest.py fixture before any module declares fields.
"""

import numpy as np
import pytest


class TestRenderTargetSetup:
    """Test render target initialization and management."""

    def test_setup_render_target(self):
        from src.lensing.core.integrator import get_image_dimensions, setup_render_target

        setup_render_target(64, 48)
        assert get_image_dimensions() == (64, 48)

    @pytest.mark.parametrize("width,height", [(0, 10), (10, -1), (4096, 10)])
    def test_invalid_dimensions(self, width, height):
        from src.lensing.core.integrator import setup_render_target

        with pytest.raises(ValueError):
            setup_render_target(width, height)

    def test_render_marks_complete(self):
        from src.lensing.camera.pinhole import PinholeCamera, setup_camera
        from src.lensing.core.integrator import (
            clear_render_target,
            is_render_complete,
            render_image,
            setup_render_target,
        )

        setup_camera(PinholeCamera())
        setup_render_target(4, 4)
        assert not is_render_complete()
        render_image()
        assert is_render_complete()
        clear_render_target()
        assert not is_render_complete()

    def test_non_positive_curve_steps(self):
        from src.lensing.core.integrator import render_image, setup_render_target

        setup_render_target(4, 4)
        with pytest.raises(ValueError, match="Curve steps"):
            render_image(curve_steps=0)

    def test_image_shape(self):
        from src.lensing.camera.pinhole import PinholeCamera, setup_camera
        from src.lensing.core.integrator import (
            get_normalized_image_numpy,
            get_raw_image_numpy,
            render_image,
            setup_render_target,
        )

        setup_camera(PinholeCamera())
        setup_render_target(7, 5)
        render_image()
        assert get_raw_image_numpy().shape == (7, 5, 3)
        assert get_normalized_image_numpy().shape == (5, 7, 3)


class TestEmptyScene:
    @pytest.mark.parametrize("width,height,vfov", [(2, 2, 90.0), (16, 9, 60.0), (5, 11, 120.0)])
    def test_every_pixel_is_background(self, width, height, vfov):
        from src.lensing.camera.pinhole import PinholeCamera, setup_camera
        from src.lensing.core.integrator import (
            get_raw_image_numpy,
            render_image,
            setup_render_target,
        )
        from src.lensing.scene.lights import PointLight, set_lights

        set_lights([PointLight(position=(0.0, 5.0, 0.0))])
        setup_camera(PinholeCamera(lookfrom=(1.0, 2.0, 3.0), lookat=(0.0, 0.0, 10.0), vfov=vfov))
        setup_render_target(width, height)
        render_image()
        assert np.all(get_raw_image_numpy() == 0.0)


class TestSingleSphereScene:
    """The red unit sphere at (0, 0, 5) with a light at (0, 5, 5)."""

    def _setup(self, width, height):
        from src.lensing.camera.pinhole import setup_camera
        from src.lensing.core.integrator import setup_render_target
        from src.lensing.scene.demo_scenes import create_single_sphere_scene

        scene, camera = create_single_sphere_scene()
        setup_camera(camera)
        setup_render_target(width, height)
        return scene

    def test_two_by_two_corners_are_black(self):
        """Every pixel of a 2x2 image is a corner that misses the sphere."""
        from src.lensing.core.integrator import get_raw_image_numpy, render_image

        self._setup(2, 2)
        render_image()
        assert np.all(get_raw_image_numpy() == 0.0)

    def test_lit_pixel_is_red(self):
        from src.lensing.core.integrator import get_normalized_image_numpy, render_image

        self._setup(21, 21)
        render_image()
        image = get_normalized_image_numpy()

        # Pixel (10, 12) sees the upper, lit part of the sphere; row 0 is the top
        r, g, b = image[21 - 1 - 12, 10]
        assert r > 0.5
        assert g == 0.0
        assert b == 0.0

        # Corners miss
        for row, col in [(0, 0), (0, 20), (20, 0), (20, 20)]:
            assert np.all(image[row, col] == 0.0)

    def test_pixel_matches_host_shading(self):
        """A pixel's color is the shading of the hit found along its camera ray."""
        from src.lensing.camera.pinhole import camera_ray
        from src.lensing.core.integrator import render_pixel
        from src.lensing.core.shading import shade_point
        from src.lensing.scene.intersection import query_scene

        self._setup(21, 21)
        seed = camera_ray(10, 12, 21, 21)
        hit = query_scene(seed.origin, seed.direction, 1000.0)
        assert hit is not None

        expected = shade_point(hit.point, hit.normal, hit.base_color)
        assert render_pixel(10, 12) == pytest.approx(expected, abs=1e-4)
        # Lambertian on a red surface leaves green and blue at zero
        assert expected[0] > 0.0
        assert expected[1] == 0.0


class TestCurvedPixels:
    """A 1x1 image whose only ray points straight at the massive body."""

    def _setup(self):
        from src.lensing.camera.pinhole import PinholeCamera, setup_camera
        from src.lensing.core.integrator import setup_render_target
        from src.lensing.scene.lights import PointLight, set_lights

        setup_camera(PinholeCamera(lookfrom=(0.0, 0.0, 0.0), lookat=(0.0, 0.0, 1.0)))
        setup_render_target(1, 1)
        set_lights([PointLight(position=(0.0, 2.0, 0.0))])

    def test_curved_path_hits_object_below_the_axis(self):
        from src.lensing.core.integrator import render_pixel
        from src.lensing.core.lensing import MassiveBody, setup_massive_body
        from src.lensing.scene.intersection import add_sphere

        self._setup()
        add_sphere((0.0, -0.5, 5.0), 0.3)

        # Straight: the ray along +Z passes above the sphere
        assert render_pixel(0, 0) == (0.0, 0.0, 0.0)

        setup_massive_body(MassiveBody(position=(0.0, 0.0, 10.0)))
        color = render_pixel(0, 0)
        assert color[0] > 0.0

    def test_curved_path_ends_at_body(self):
        """Geometry beyond the body is not reached by a curved path."""
        from src.lensing.core.integrator import render_pixel
        from src.lensing.core.lensing import MassiveBody, setup_massive_body
        from src.lensing.scene.intersection import add_sphere

        self._setup()
        add_sphere((0.0, 0.0, 20.0), 1.0)
        assert render_pixel(0, 0)[0] > 0.0

        setup_massive_body(MassiveBody(position=(0.0, 0.0, 10.0)))
        assert render_pixel(0, 0) == (0.0, 0.0, 0.0)

    def test_curved_path_stops_at_first_hit(self):
        """A nearer object along the curve hides a farther one."""
        from src.lensing.core.integrator import render_pixel
        from src.lensing.core.lensing import MassiveBody, setup_massive_body
        from src.lensing.materials.surface import add_surface_color
        from src.lensing.scene.intersection import add_sphere

        self._setup()
        green = add_surface_color((0.0, 1.0, 0.0))
        blue = add_surface_color((0.0, 0.0, 1.0))
        # Both spheres sit on the curve; the green one comes first
        add_sphere((0.0, -0.18, 1.0), 0.1, material_id=green)
        add_sphere((0.0, -0.5, 5.0), 0.3, material_id=blue)

        setup_massive_body(MassiveBody(position=(0.0, 0.0, 10.0)))
        color = render_pixel(0, 0)
        assert color[1] > 0.0
        assert color[2] == 0.0
