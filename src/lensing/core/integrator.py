"""Per-pixel tracing: ray generation, path decision, intersection, shading.

Every pixel runs the same pipeline:

    camera ray -> classify_path -> straight segment | quadratic path
              -> first hit along the path -> shade_direct | background

Straight rays are a single segment of length ``max_distance``. Curved rays
follow the quadratic path from the camera to the massive body and stop at the
first segment with a hit; a curved ray that reaches the body unobstructed
returns the background color.

The render target is preallocated at MAX_IMAGE_WIDTH x MAX_IMAGE_HEIGHT so
changing the resolution never recompiles kernels. A render writes each pixel
of the active region exactly once; colors are stored unclamped and clamped to
[0, 1] only when read back as an image.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.lensing.camera.pinhole import PinholeCamera, setup_camera
    >>> from src.lensing.core.integrator import setup_render_target, render_image
    >>> setup_camera(PinholeCamera())
    >>> setup_render_target(64, 48)
    >>> render_image()
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.lensing.camera.pinhole import generate_camera_ray
from src.lensing.core.lensing import (
    PathKind,
    classify_path,
    get_body_position,
    get_body_sag,
)
from src.lensing.core.path import (
    RENDER_CURVE_STEPS,
    intersect_quadratic_path,
    intersect_segment,
)
from src.lensing.core.shading import shade_direct
from src.lensing.scene.intersection import SceneHitRecord, make_miss_record

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Length of the single segment a straight ray is tested along
STRAIGHT_RAY_DISTANCE = 1000.0

# Color of pixels whose path hits nothing
BACKGROUND_COLOR = (0.0, 0.0, 0.0)

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# =============================================================================
# Render Target (Image Buffer)
# =============================================================================

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))
_render_target_initialized = ti.field(dtype=ti.i32, shape=())
_render_complete = ti.field(dtype=ti.i32, shape=())
_pixel_probe = ti.Vector.field(3, dtype=ti.f32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Set the active image size and clear the buffer.

    Raises:
        ValueError: If a dimension is not positive or exceeds the maximum.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )
    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1
    clear_render_target()


def clear_render_target() -> None:
    """Clear the color buffer and mark the image incomplete."""
    _color_buffer.fill(0.0)
    _render_complete[None] = 0


def get_image_dimensions() -> tuple[int, int]:
    """Get the active (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def is_render_complete() -> bool:
    """True once every pixel of the active region has been written."""
    return bool(_render_complete[None])


def _check_render_target_initialized() -> None:
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Tracing
# =============================================================================


@ti.func
def find_path_hit(
    origin: vec3,
    direction: vec3,
    curve_steps: ti.i32,
    max_distance: ti.f32,
) -> SceneHitRecord:
    """Decide the path shape for a ray and return its first hit."""
    rec = make_miss_record()
    if classify_path(origin, direction) == int(PathKind.CURVED):
        rec = intersect_quadratic_path(origin, get_body_position(), get_body_sag(), curve_steps)
    else:
        rec = intersect_segment(origin, origin + direction * max_distance)
    return rec


@ti.func
def trace_ray(origin: vec3, direction: vec3, curve_steps: ti.i32, max_distance: ti.f32) -> vec3:
    """Resolve the color seen along a ray."""
    color = vec3(BACKGROUND_COLOR[0], BACKGROUND_COLOR[1], BACKGROUND_COLOR[2])
    rec = find_path_hit(origin, direction, curve_steps, max_distance)
    if rec.hit == 1:
        color = shade_direct(rec.point, rec.normal, rec.base_color)
    return color


@ti.kernel
def _render_kernel(width: ti.i32, height: ti.i32, curve_steps: ti.i32, max_distance: ti.f32):
    for i, j in ti.ndrange(width, height):
        ray = generate_camera_ray(i, j, width, height)
        _color_buffer[i, j] = trace_ray(ray.origin, ray.direction, curve_steps, max_distance)


@ti.kernel
def _render_single_pixel(
    pixel_i: ti.i32,
    pixel_j: ti.i32,
    width: ti.i32,
    height: ti.i32,
    curve_steps: ti.i32,
    max_distance: ti.f32,
):
    # One task, so the path walk inside stays serial
    for _ in range(1):
        ray = generate_camera_ray(pixel_i, pixel_j, width, height)
        _pixel_probe[None] = trace_ray(ray.origin, ray.direction, curve_steps, max_distance)


def render_image(
    curve_steps: int = RENDER_CURVE_STEPS,
    max_distance: float = STRAIGHT_RAY_DISTANCE,
) -> None:
    """Trace every pixel of the active render target once.

    Args:
        curve_steps: Segments per curved path.
        max_distance: Length of straight-ray queries.

    Raises:
        RuntimeError: If the render target has not been set up.
        ValueError: If curve_steps is not positive.
    """
    _check_render_target_initialized()
    if curve_steps <= 0:
        raise ValueError(f"Curve steps must be positive, got {curve_steps}")

    width, height = get_image_dimensions()
    _render_complete[None] = 0
    _render_kernel(width, height, curve_steps, max_distance)
    _render_complete[None] = 1


def render_pixel(
    pixel_i: int,
    pixel_j: int,
    curve_steps: int = RENDER_CURVE_STEPS,
    max_distance: float = STRAIGHT_RAY_DISTANCE,
) -> tuple[float, float, float]:
    """Trace one pixel of the active render target without storing it.

    Returns:
        The unclamped (R, G, B) color for the pixel.
    """
    _check_render_target_initialized()
    width, height = get_image_dimensions()
    _render_single_pixel(pixel_i, pixel_j, width, height, curve_steps, max_distance)
    color = _pixel_probe[None]
    return (float(color[0]), float(color[1]), float(color[2]))


def get_raw_image_numpy() -> npt.NDArray[np.float32]:
    """The unclamped color buffer as a (width, height, 3) array, y up.

    Raises:
        RuntimeError: If the render target has not been set up.
    """
    _check_render_target_initialized()
    width, height = get_image_dimensions()
    return _color_buffer.to_numpy()[:width, :height, :]


def get_normalized_image_numpy() -> npt.NDArray[np.float32]:
    """The rendered image as a (height, width, 3) array in [0, 1], top row first.

    Raises:
        RuntimeError: If the render target has not been set up.
    """
    image = get_raw_image_numpy()

    # (width, height, 3) -> (height, width, 3), then put the top row first
    image = np.flipud(np.transpose(image, (1, 0, 2)))

    return np.clip(image, 0.0, 1.0).astype(np.float32)
