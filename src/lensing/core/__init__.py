"""Core rendering module.

Components:
    ray: Ray data structures and host-side ray seeds
    lensing: Path curvature policy and the massive body
    path: Quadratic path integrator and segment intersector
    shading: Lambertian direct lighting with hard shadows
    integrator: Per-pixel trace kernel and render target
    renderer: Image renderer facade
    debug_rays: Debug line emitter

Per-pixel tracing runs in Taichi kernels; the Python-side wrappers
(classify_ray, intersect_path, shade_point) call the same Taichi functions.
"""

from .ray import (
    Ray,
    RaySeed,
    as_vector,
    make_ray,
    make_ray_seed,
    normalize_host,
    ray_at,
    vec3,
)

# Note: lensing, path, shading, integrator, renderer and debug_rays are NOT
# imported here; they import the scene package, which imports this module.
# Import them directly, e.g.:
#   from src.lensing.core.renderer import LensingRenderer

__all__ = [
    "Ray",
    "RaySeed",
    "ray_at",
    "make_ray",
    "make_ray_seed",
    "as_vector",
    "normalize_host",
    "vec3",
]
