"""Surface base-color registry.

Direct-lighting shading needs exactly one property from a surface: its base
(diffuse) color. This module stores those colors in a Taichi field indexed by
material ID so the scene intersection can attach a base color to every hit.

Primitives registered without a material (material ID -1), or with an ID that
is not registered, shade with ``DEFAULT_BASE_COLOR`` (mid-gray).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.lensing.materials.surface import add_surface_color
    >>> red = add_surface_color((1.0, 0.0, 0.0))
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors
vec3 = tm.vec3

# Fallback base color for surfaces that expose none
DEFAULT_BASE_COLOR = (0.5, 0.5, 0.5)

# Material ID marking "no explicit color"
NO_MATERIAL = -1

# Maximum number of surface colors in the scene
MAX_SURFACE_COLORS = 256

surface_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SURFACE_COLORS)
num_surface_colors = ti.field(dtype=ti.i32, shape=())


def clear_surface_colors() -> None:
    """Forget all registered surface colors."""
    num_surface_colors[None] = 0


def add_surface_color(base_color: tuple[float, float, float]) -> int:
    """Register a base color and return its material ID.

    Args:
        base_color: The diffuse color as (R, G, B). Components must be
            non-negative; values above 1 are allowed and act as a gain.

    Returns:
        The material ID of the new color.

    Raises:
        RuntimeError: If the maximum number of surface colors is exceeded.
        ValueError: If any component is negative or the color is not RGB.
    """
    if len(base_color) != 3:
        raise ValueError(f"Base color must have 3 components, got {len(base_color)}")
    for i, component in enumerate(base_color):
        if component < 0.0:
            raise ValueError(f"Base color component {i} = {component} is negative")

    idx = num_surface_colors[None]
    if idx >= MAX_SURFACE_COLORS:
        raise RuntimeError(f"Maximum number of surface colors ({MAX_SURFACE_COLORS}) exceeded")

    surface_colors[idx] = vec3(base_color[0], base_color[1], base_color[2])
    num_surface_colors[None] = idx + 1
    return idx


def get_surface_color_count() -> int:
    """Get the number of registered surface colors."""
    return int(num_surface_colors[None])


@ti.func
def get_base_color(material_id: ti.i32) -> vec3:
    """Look up the base color for a material ID, falling back to mid-gray."""
    color = vec3(DEFAULT_BASE_COLOR[0], DEFAULT_BASE_COLOR[1], DEFAULT_BASE_COLOR[2])
    if 0 <= material_id < num_surface_colors[None]:
        color = surface_colors[material_id]
    return color
