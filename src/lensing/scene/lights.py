"""Point light storage for direct lighting.

Lights are an ordered sequence of ``PointLight`` entries. ``None`` entries
are legal: they keep their slot but are marked inactive, and the shader skips
them. This mirrors a light list whose entries may have been removed by the
host application.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.lensing.scene.lights import PointLight, set_lights
    >>> set_lights([PointLight(position=(0.0, 5.0, 5.0)), None])
    2
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

import taichi as ti

# Maximum number of light slots (active or absent)
MAX_LIGHTS = 64

light_positions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_intensities = ti.field(dtype=ti.f32, shape=MAX_LIGHTS)
light_active = ti.field(dtype=ti.i32, shape=MAX_LIGHTS)
num_lights = ti.field(dtype=ti.i32, shape=())


@dataclass(frozen=True)
class PointLight:
    """A point light.

    Attributes:
        position: World-space position (x, y, z).
        color: Light color (R, G, B).
        intensity: Non-negative scalar multiplier.
    """

    position: tuple[float, float, float]
    color: tuple[float, float, float] = (1.0, 1.0, 1.0)
    intensity: float = 1.0

    def __post_init__(self) -> None:
        if self.intensity < 0.0:
            raise ValueError(f"Light intensity must be non-negative, got {self.intensity}")


def clear_lights() -> None:
    """Remove all light slots."""
    num_lights[None] = 0


def add_light(light: PointLight | None) -> int:
    """Append a light slot; ``None`` appends an absent (skipped) entry.

    Returns:
        The slot index.

    Raises:
        RuntimeError: If the maximum number of light slots is exceeded.
    """
    idx = num_lights[None]
    if idx >= MAX_LIGHTS:
        raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")

    if light is None:
        light_active[idx] = 0
        light_intensities[idx] = 0.0
    else:
        light_positions[idx] = list(light.position)
        light_colors[idx] = list(light.color)
        light_intensities[idx] = light.intensity
        light_active[idx] = 1
    num_lights[None] = idx + 1
    return idx


def set_lights(lights: Iterable[PointLight | None]) -> int:
    """Replace the light set with the given ordered sequence.

    Returns:
        The number of light slots now stored (absent entries included).
    """
    clear_lights()
    for light in lights:
        add_light(light)
    return get_light_count()


def get_light_count() -> int:
    """Get the number of light slots, including absent entries."""
    return int(num_lights[None])
