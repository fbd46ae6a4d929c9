"""Scene module: the intersection collaborator and scene building.

Components:
    intersection: Sphere/quad storage and bounded nearest-hit queries
    lights: Ordered point light set (absent entries allowed)
    manager: SceneManager coordinating colors, primitives, lights and body
    demo_scenes: Ready-made scenes

Scene data is kept in Taichi fields with a Structure-of-Arrays layout so the
render kernel reads it directly.
"""

from .demo_scenes import (
    LensingSceneParams,
    create_lensing_scene,
    create_single_sphere_scene,
)
from .intersection import (
    MAX_QUADS,
    MAX_SPHERES,
    T_MIN,
    SceneHitRecord,
    SurfaceHit,
    add_quad,
    add_sphere,
    clear_scene,
    get_quad_count,
    get_sphere_count,
    intersect_scene,
    intersect_scene_any,
    query_scene,
)
from .lights import (
    MAX_LIGHTS,
    PointLight,
    add_light,
    clear_lights,
    get_light_count,
    set_lights,
)
from .manager import (
    QuadInfo,
    SceneConfig,
    SceneManager,
    SphereInfo,
)

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "SurfaceHit",
    "add_sphere",
    "add_quad",
    "clear_scene",
    "get_sphere_count",
    "get_quad_count",
    "intersect_scene",
    "intersect_scene_any",
    "query_scene",
    "MAX_SPHERES",
    "MAX_QUADS",
    "T_MIN",
    # Lights module
    "PointLight",
    "add_light",
    "clear_lights",
    "get_light_count",
    "set_lights",
    "MAX_LIGHTS",
    # Manager module
    "SceneManager",
    "SphereInfo",
    "QuadInfo",
    "SceneConfig",
    # Demo scenes
    "LensingSceneParams",
    "create_lensing_scene",
    "create_single_sphere_scene",
]
