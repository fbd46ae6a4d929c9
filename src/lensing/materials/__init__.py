"""Materials module.

Components:
    surface: Base-color registry consumed by the direct-lighting shader

Only diffuse base colors exist here; reflection and refraction are outside
what the lensing renderer shades.
"""

from .surface import (
    DEFAULT_BASE_COLOR,
    MAX_SURFACE_COLORS,
    NO_MATERIAL,
    add_surface_color,
    clear_surface_colors,
    get_base_color,
    get_surface_color_count,
)

__all__ = [
    "DEFAULT_BASE_COLOR",
    "MAX_SURFACE_COLORS",
    "NO_MATERIAL",
    "add_surface_color",
    "clear_surface_colors",
    "get_base_color",
    "get_surface_color_count",
]
