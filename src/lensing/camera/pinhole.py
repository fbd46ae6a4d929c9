"""Pinhole camera model and the camera ray seeder.

The camera is resolved once into a world-space position and an orthonormal
basis (right, up, forward). Camera-local directions use +X right, +Y up and
+Z forward, so a local direction ``d`` maps to world space as

    world = d.x * right + d.y * up + d.z * forward

A pixel ``(x, y)`` of a ``width x height`` image (y = 0 is the bottom row)
maps to the ray through its center:

    u = (x + 0.5) / width,  v = (y + 0.5) / height
    ndc = (2u - 1, 2v - 1)
    local = normalize(ndc.x * aspect * tan(fov/2), ndc.y * tan(fov/2), 1)

with ``aspect = width / height`` and ``fov`` the vertical field of view.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.lensing.camera.pinhole import PinholeCamera, setup_camera, camera_ray
    >>> setup_camera(PinholeCamera(lookfrom=(0, 0, 0), lookat=(0, 0, 1)))
    >>> seed = camera_ray(1, 1, 2, 2)
"""

import math
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.lensing.core.ray import Ray, RaySeed, as_vector, make_ray, make_ray_seed

# Type alias for 3D vectors
vec3 = tm.vec3


@dataclass
class PinholeCamera:
    """Resolved camera parameters.

    Attributes:
        lookfrom: Camera position in world space.
        lookat: Point the camera looks at.
        vup: Approximate up direction used to build the basis.
        vfov: Vertical field of view in degrees.
    """

    lookfrom: tuple[float, float, float] = (0.0, 0.0, 0.0)
    lookat: tuple[float, float, float] = (0.0, 0.0, 1.0)
    vup: tuple[float, float, float] = (0.0, 1.0, 0.0)
    vfov: float = 60.0

    def basis(self) -> tuple[npt.NDArray[np.float64], ...]:
        """Compute the (right, up, forward) world-space basis.

        Raises:
            ValueError: If lookfrom equals lookat or vup is parallel to the
                view direction.
        """
        forward = as_vector(self.lookat) - as_vector(self.lookfrom)
        norm = np.linalg.norm(forward)
        if norm < 1e-12:
            raise ValueError("Camera lookfrom and lookat must differ")
        forward = forward / norm

        right = np.cross(as_vector(self.vup), forward)
        right_norm = np.linalg.norm(right)
        if right_norm < 1e-12:
            raise ValueError("Camera vup must not be parallel to the view direction")
        right = right / right_norm

        up = np.cross(forward, right)
        return right, up, forward

    def orientation(self) -> npt.NDArray[np.float64]:
        """3x3 rotation whose columns are the right, up and forward axes."""
        right, up, forward = self.basis()
        return np.column_stack([right, up, forward])


# Camera state read by the render kernels
_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_right = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_up = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_forward = ti.Vector.field(3, dtype=ti.f32, shape=())
_tan_half_fov = ti.field(dtype=ti.f32, shape=())

_probe_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_probe_direction = ti.Vector.field(3, dtype=ti.f32, shape=())


def setup_camera(camera: PinholeCamera) -> None:
    """Upload the camera's position, basis and field of view.

    Raises:
        ValueError: If the field of view is outside (0, 180) degrees or the
            basis is degenerate.
    """
    if not 0.0 < camera.vfov < 180.0:
        raise ValueError(f"Vertical field of view must be within (0, 180), got {camera.vfov}")
    right, up, forward = camera.basis()
    _camera_origin[None] = as_vector(camera.lookfrom).tolist()
    _camera_right[None] = right.tolist()
    _camera_up[None] = up.tolist()
    _camera_forward[None] = forward.tolist()
    _tan_half_fov[None] = math.tan(math.radians(camera.vfov) * 0.5)


@ti.func
def generate_camera_ray(px: ti.i32, py: ti.i32, width: ti.i32, height: ti.i32) -> Ray:
    """Map pixel (px, py) to the world-space ray through its center."""
    w = ti.cast(width, ti.f32)
    h = ti.cast(height, ti.f32)
    u = (ti.cast(px, ti.f32) + 0.5) / w
    v = (ti.cast(py, ti.f32) + 0.5) / h
    ndc_x = 2.0 * u - 1.0
    ndc_y = 2.0 * v - 1.0

    aspect = w / h
    tan_half = _tan_half_fov[None]
    local = tm.normalize(vec3(ndc_x * aspect * tan_half, ndc_y * tan_half, 1.0))

    world = local.x * _camera_right[None] + local.y * _camera_up[None] + local.z * _camera_forward[None]
    return make_ray(_camera_origin[None], world)


@ti.kernel
def _camera_ray_kernel(px: ti.i32, py: ti.i32, width: ti.i32, height: ti.i32):
    ray = generate_camera_ray(px, py, width, height)
    _probe_origin[None] = ray.origin
    _probe_direction[None] = ray.direction


def camera_ray(px: int, py: int, width: int, height: int) -> RaySeed:
    """Generate the camera ray for one pixel from Python.

    Args:
        px: Pixel column (0 = left).
        py: Pixel row (0 = bottom).
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        A RaySeed starting at the camera position.
    """
    _camera_ray_kernel(px, py, width, height)
    origin = _probe_origin[None]
    direction = _probe_direction[None]
    return make_ray_seed(
        [float(origin[k]) for k in range(3)],
        [float(direction[k]) for k in range(3)],
    )


def camera_rays(width: int, height: int, stride: int = 1) -> list[RaySeed]:
    """Camera rays for every ``stride``-th pixel, row by row from the bottom.

    Useful for feeding the debug emitter with pixel-scale rays.
    """
    if stride <= 0:
        raise ValueError(f"Stride must be positive, got {stride}")
    return [
        camera_ray(x, y, width, height)
        for y in range(0, height, stride)
        for x in range(0, width, stride)
    ]
