"""Scene manager coordinating primitives, surface colors, lights and the body.

This module provides a high-level scene API on top of the Taichi-side
storage modules. It keeps a Python-side record of everything it uploads so
the scene can be inspected and serialized.

The SceneManager maintains:
- Surface colors (material IDs) shared by spheres and quads
- Spheres and quads with their material IDs
- The ordered light set, including absent entries
- The optional massive body that curves rays
- Scene serialization to dictionaries and JSON files

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.lensing.scene.manager import SceneManager
    >>> from src.lensing.scene.lights import PointLight
    >>> scene = SceneManager()
    >>> red = scene.add_surface_color((1.0, 0.0, 0.0))
    >>> scene.add_sphere((0.0, 0.0, 5.0), 1.0, red)
    0
    >>> scene.add_light(PointLight(position=(0.0, 5.0, 5.0)))
    0
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from src.lensing.core.lensing import MassiveBody, setup_massive_body
from src.lensing.materials.surface import (
    MAX_SURFACE_COLORS,
    NO_MATERIAL,
    add_surface_color,
    clear_surface_colors,
    get_surface_color_count,
)
from src.lensing.scene.intersection import (
    MAX_QUADS,
    MAX_SPHERES,
    add_quad,
    add_sphere,
    clear_scene,
    get_quad_count,
    get_sphere_count,
)
from src.lensing.scene.lights import MAX_LIGHTS, PointLight, add_light, clear_lights

logger = logging.getLogger(__name__)


def _vec3(values: Any, name: str) -> tuple[float, float, float]:
    """Read a 3-component vector from configuration data."""
    items = list(values)
    if len(items) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(items)}")
    return (float(items[0]), float(items[1]), float(items[2]))


def _required(entry: dict[str, Any], key: str, name: str) -> Any:
    """Look up a key that a scene entry cannot omit."""
    if key not in entry:
        raise ValueError(f"{name} is missing required key '{key}'")
    return entry[key]


@dataclass
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        sphere_index: The index in the sphere storage arrays.
        center: The center of the sphere.
        radius: The radius of the sphere.
        material_id: Surface color ID, or -1 for the mid-gray fallback.
    """

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material_id: int


@dataclass
class QuadInfo:
    """Information about a quad in the scene.

    Attributes:
        quad_index: The index in the quad storage arrays.
        corner: The corner point (Q) of the quad.
        edge_u: The first edge vector.
        edge_v: The second edge vector.
        material_id: Surface color ID, or -1 for the mid-gray fallback.
    """

    quad_index: int
    corner: tuple[float, float, float]
    edge_u: tuple[float, float, float]
    edge_v: tuple[float, float, float]
    material_id: int


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        surface_colors: Base colors, indexed by material ID.
        spheres: List of sphere configurations.
        quads: List of quad configurations.
        lights: Light configurations in order; None marks an absent light.
        massive_body: Massive body configuration, or None.
    """

    surface_colors: list[list[float]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)
    quads: list[dict[str, Any]] = field(default_factory=list)
    lights: list[dict[str, Any] | None] = field(default_factory=list)
    massive_body: dict[str, Any] | None = None


class SceneManager:
    """High-level scene builder for the lensing renderer.

    Attributes:
        surface_colors: Registered base colors, indexed by material ID.
        spheres: List of SphereInfo for all spheres in the scene.
        quads: List of QuadInfo for all quads in the scene.
        lights: Ordered light set; None entries are absent lights.
        massive_body: The configured massive body, or None.

    Example:
        >>> scene = SceneManager()
        >>> white = scene.add_surface_color((1.0, 1.0, 1.0))
        >>> scene.add_quad((-5, -1, 0), (10, 0, 0), (0, 0, 20), white)
        0
        >>> scene.set_massive_body(MassiveBody(position=(0.0, 0.0, 10.0)))
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.surface_colors: list[tuple[float, float, float]] = []
        self.spheres: list[SphereInfo] = []
        self.quads: list[QuadInfo] = []
        self.lights: list[PointLight | None] = []
        self.massive_body: MassiveBody | None = None
        self._clear_all()

    def _clear_all(self) -> None:
        """Clear all scene data including Taichi fields."""
        clear_scene()
        clear_surface_colors()
        clear_lights()
        setup_massive_body(None)

        self.surface_colors.clear()
        self.spheres.clear()
        self.quads.clear()
        self.lights.clear()
        self.massive_body = None

    def clear(self) -> None:
        """Clear the entire scene: primitives, colors, lights and body."""
        self._clear_all()

    # =========================================================================
    # Surface Colors
    # =========================================================================

    def add_surface_color(self, base_color: tuple[float, float, float]) -> int:
        """Register a base color and return its material ID.

        Raises:
            RuntimeError: If the maximum number of surface colors is exceeded.
            ValueError: If the color is malformed or has negative components.
        """
        material_id = add_surface_color(base_color)
        self.surface_colors.append(_vec3(base_color, "base_color"))
        return material_id

    def get_surface_color_count(self) -> int:
        return get_surface_color_count()

    def _check_material_id(self, material_id: int) -> None:
        if material_id != NO_MATERIAL and not 0 <= material_id < len(self.surface_colors):
            raise ValueError(f"Invalid material_id: {material_id}")

    # =========================================================================
    # Primitive Management
    # =========================================================================

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int = NO_MATERIAL,
    ) -> int:
        """Add a sphere to the scene.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius of the sphere (must be positive).
            material_id: Surface color ID, or -1 for the mid-gray fallback.

        Returns:
            The index of the added sphere.

        Raises:
            RuntimeError: If the maximum number of spheres is exceeded.
            ValueError: If material_id or the radius is invalid.
        """
        self._check_material_id(material_id)
        center = _vec3(center, "center")
        sphere_index = add_sphere(center, radius, material_id)
        self.spheres.append(SphereInfo(sphere_index, center, float(radius), material_id))
        return sphere_index

    def add_quad(
        self,
        corner: tuple[float, float, float],
        edge_u: tuple[float, float, float],
        edge_v: tuple[float, float, float],
        material_id: int = NO_MATERIAL,
    ) -> int:
        """Add a quad (parallelogram) to the scene.

        The quad has vertices at corner, corner+edge_u, corner+edge_v and
        corner+edge_u+edge_v.

        Returns:
            The index of the added quad.

        Raises:
            RuntimeError: If the maximum number of quads is exceeded.
            ValueError: If material_id is invalid.
        """
        self._check_material_id(material_id)
        corner = _vec3(corner, "corner")
        edge_u = _vec3(edge_u, "edge_u")
        edge_v = _vec3(edge_v, "edge_v")
        quad_index = add_quad(corner, edge_u, edge_v, material_id)
        self.quads.append(QuadInfo(quad_index, corner, edge_u, edge_v, material_id))
        return quad_index

    def add_colored_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        base_color: tuple[float, float, float],
    ) -> tuple[int, int]:
        """Add a sphere with a new surface color.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_surface_color(base_color)
        return self.add_sphere(center, radius, material_id), material_id

    def add_colored_quad(
        self,
        corner: tuple[float, float, float],
        edge_u: tuple[float, float, float],
        edge_v: tuple[float, float, float],
        base_color: tuple[float, float, float],
    ) -> tuple[int, int]:
        """Add a quad with a new surface color.

        Returns:
            Tuple of (quad_index, material_id).
        """
        material_id = self.add_surface_color(base_color)
        return self.add_quad(corner, edge_u, edge_v, material_id), material_id

    # =========================================================================
    # Lights and Massive Body
    # =========================================================================

    def add_light(self, light: PointLight | None) -> int:
        """Append a light slot; None appends an absent light.

        Returns:
            The slot index.
        """
        index = add_light(light)
        self.lights.append(light)
        return index

    def set_massive_body(self, body: MassiveBody | None) -> None:
        """Configure the massive body, or disable curving with None."""
        setup_massive_body(body)
        self.massive_body = body

    # =========================================================================
    # Scene Queries
    # =========================================================================

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        return get_sphere_count()

    def get_quad_count(self) -> int:
        """Get the number of quads in the scene."""
        return get_quad_count()

    def get_primitive_count(self) -> int:
        """Get the total number of primitives in the scene."""
        return self.get_sphere_count() + self.get_quad_count()

    def get_light_count(self) -> int:
        """Get the number of light slots, absent entries included."""
        return len(self.lights)

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object."""
        config = SceneConfig()
        config.surface_colors = [list(color) for color in self.surface_colors]

        for sphere in self.spheres:
            config.spheres.append(
                {
                    "center": list(sphere.center),
                    "radius": sphere.radius,
                    "material_id": sphere.material_id,
                }
            )

        for quad in self.quads:
            config.quads.append(
                {
                    "corner": list(quad.corner),
                    "edge_u": list(quad.edge_u),
                    "edge_v": list(quad.edge_v),
                    "material_id": quad.material_id,
                }
            )

        for light in self.lights:
            if light is None:
                config.lights.append(None)
            else:
                config.lights.append(
                    {
                        "position": list(light.position),
                        "color": list(light.color),
                        "intensity": light.intensity,
                    }
                )

        if self.massive_body is not None:
            config.massive_body = {
                "position": list(self.massive_body.position),
                "pull_strength": self.massive_body.pull_strength,
                "angle_threshold": self.massive_body.angle_threshold,
            }

        return config

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        Clears the current scene and loads the configuration.

        Raises:
            ValueError: If the configuration contains invalid data.
        """
        self.clear()

        # Colors first, primitives refer to them by index
        for color in config.surface_colors:
            self.add_surface_color(_vec3(color, "surface color"))

        for sphere_config in config.spheres:
            self.add_sphere(
                _vec3(sphere_config.get("center", [0, 0, 0]), "center"),
                float(sphere_config.get("radius", 1.0)),
                int(sphere_config.get("material_id", NO_MATERIAL)),
            )

        for quad_config in config.quads:
            self.add_quad(
                _vec3(quad_config.get("corner", [0, 0, 0]), "corner"),
                _vec3(quad_config.get("edge_u", [1, 0, 0]), "edge_u"),
                _vec3(quad_config.get("edge_v", [0, 1, 0]), "edge_v"),
                int(quad_config.get("material_id", NO_MATERIAL)),
            )

        for light_config in config.lights:
            if light_config is None:
                self.add_light(None)
                continue
            self.add_light(
                PointLight(
                    position=_vec3(
                        _required(light_config, "position", "Light"), "light position"
                    ),
                    color=_vec3(light_config.get("color", [1, 1, 1]), "light color"),
                    intensity=float(light_config.get("intensity", 1.0)),
                )
            )

        if config.massive_body is not None:
            body = config.massive_body
            self.set_massive_body(
                MassiveBody(
                    position=_vec3(
                        _required(body, "position", "Massive body"), "massive body position"
                    ),
                    pull_strength=float(body.get("pull_strength", 1.0)),
                    angle_threshold=float(body.get("angle_threshold", 10.0)),
                )
            )

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        config = self.to_config()
        return {
            "surface_colors": config.surface_colors,
            "spheres": config.spheres,
            "quads": config.quads,
            "lights": config.lights,
            "massive_body": config.massive_body,
        }

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary.

        Raises:
            ValueError: If the dictionary has keys this scene does not know.
        """
        known = {"surface_colors", "spheres", "quads", "lights", "massive_body"}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown scene keys: {sorted(unknown)}")
        config = SceneConfig(
            surface_colors=data.get("surface_colors", []),
            spheres=data.get("spheres", []),
            quads=data.get("quads", []),
            lights=data.get("lights", []),
            massive_body=data.get("massive_body"),
        )
        self.from_config(config)

    def save_json(self, filepath: str | Path) -> Path:
        """Write the scene description to a JSON file."""
        path = Path(filepath)
        path.write_text(json.dumps(self.to_dict(), indent=2))
        logger.info("Saved scene description to %s", path)
        return path

    def load_json(self, filepath: str | Path) -> None:
        """Replace the scene with the description stored in a JSON file."""
        path = Path(filepath)
        self.from_dict(json.loads(path.read_text()))
        logger.info(
            "Loaded scene from %s: %d spheres, %d quads, %d lights",
            path,
            len(self.spheres),
            len(self.quads),
            len(self.lights),
        )

    # =========================================================================
    # Capacity Information
    # =========================================================================

    @staticmethod
    def get_max_spheres() -> int:
        """Get the maximum number of spheres supported."""
        return MAX_SPHERES

    @staticmethod
    def get_max_quads() -> int:
        """Get the maximum number of quads supported."""
        return MAX_QUADS

    @staticmethod
    def get_max_surface_colors() -> int:
        return MAX_SURFACE_COLORS

    @staticmethod
    def get_max_lights() -> int:
        return MAX_LIGHTS
