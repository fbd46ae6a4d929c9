"""Direct-lighting shading with hard shadows.

For each active light the shader:
    1. Computes the unit direction and distance from the hit point to the light.
    2. Casts a shadow query from ``point + normal * SHADOW_EPSILON`` toward the
       light, bounded by the light distance. Any hit occludes the light fully.
    3. Otherwise adds ``base_color * light_color * intensity * max(0, N.L)``.

The result is the plain sum over unoccluded lights, starting from black and
never clamped here; clamping happens when the image is written out.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.lensing.scene.lights import PointLight, set_lights
    >>> from src.lensing.core.shading import shade_point
    >>> set_lights([PointLight(position=(0.0, 1.0, 0.0))])
    1
    >>> shade_point((0, 0, 0), (0, 1, 0), (1, 1, 1))
    (1.0, 1.0, 1.0)
"""

from collections.abc import Sequence

import taichi as ti
import taichi.math as tm

from src.lensing.core.ray import as_vector, normalize_host
from src.lensing.scene.intersection import intersect_scene_any
from src.lensing.scene.lights import (
    light_active,
    light_colors,
    light_intensities,
    light_positions,
    num_lights,
)

# Type alias for 3D vectors
vec3 = tm.vec3

# Shadow query origin offset along the surface normal
SHADOW_EPSILON = 0.001

# Lights closer than this to the shaded point have no direction
LIGHT_EPSILON = 1e-8

_probe_point = ti.Vector.field(3, dtype=ti.f32, shape=())
_probe_normal = ti.Vector.field(3, dtype=ti.f32, shape=())
_probe_base_color = ti.Vector.field(3, dtype=ti.f32, shape=())
_probe_color = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.func
def light_visible(point: vec3, normal: vec3, to_light: vec3, distance: ti.f32) -> ti.i32:
    """Return 1 if nothing blocks the segment from the surface to the light."""
    shadow_origin = point + normal * SHADOW_EPSILON
    return 1 - intersect_scene_any(shadow_origin, to_light, 0.0, distance)


@ti.func
def shade_direct(point: vec3, normal: vec3, base_color: vec3) -> vec3:
    """Accumulate Lambertian contributions from all unoccluded lights.

    Args:
        point: World-space hit point.
        normal: Unit surface normal at the hit.
        base_color: Base color of the struck surface.

    Returns:
        The unclamped RGB sum.
    """
    color = vec3(0.0, 0.0, 0.0)
    for i in range(num_lights[None]):
        if light_active[i] == 1:
            offset = light_positions[i] - point
            distance = tm.length(offset)
            if distance > LIGHT_EPSILON:
                to_light = offset / distance
                if light_visible(point, normal, to_light, distance) == 1:
                    n_dot_l = tm.max(0.0, tm.dot(normal, to_light))
                    color += base_color * light_colors[i] * light_intensities[i] * n_dot_l
    return color


@ti.kernel
def _shade_kernel():
    # One task, so the light loop inside stays serial
    for _ in range(1):
        _probe_color[None] = shade_direct(
            _probe_point[None], _probe_normal[None], _probe_base_color[None]
        )


def shade_point(
    point: Sequence[float],
    normal: Sequence[float],
    base_color: Sequence[float],
) -> tuple[float, float, float]:
    """Shade a surface point from Python against the current scene and lights.

    Args:
        point: World-space surface point.
        normal: Surface normal (normalized here).
        base_color: Surface base color (R, G, B).

    Returns:
        The accumulated (R, G, B) color.
    """
    _probe_point[None] = as_vector(point).tolist()
    _probe_normal[None] = normalize_host(normal).tolist()
    _probe_base_color[None] = as_vector(base_color).tolist()
    _shade_kernel()
    color = _probe_color[None]
    return (float(color[0]), float(color[1]), float(color[2]))
