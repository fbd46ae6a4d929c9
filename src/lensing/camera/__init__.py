"""Camera module: ray seeders.

Components:
    pinhole: Pinhole camera and the per-pixel Camera Ray Seeder
    vertex_seeder: Outward rays from sampled mesh vertices

Ray generation uses pixel-center coordinates:
    u in (0, 1): left to right across the image
    v in (0, 1): bottom to top across the image
"""

from .pinhole import (
    PinholeCamera,
    camera_ray,
    camera_rays,
    generate_camera_ray,
    setup_camera,
)
from .vertex_seeder import (
    sample_vertex_indices,
    seed_vertex_rays,
    transform_points,
)

__all__ = [
    "PinholeCamera",
    "setup_camera",
    "generate_camera_ray",
    "camera_ray",
    "camera_rays",
    "sample_vertex_indices",
    "seed_vertex_rays",
    "transform_points",
]
