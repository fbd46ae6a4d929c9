"""Geometry module for shape primitives.

Components:
    sphere: Sphere primitive with bounded ray-sphere intersection
    quad: Parallelogram primitive with bounded ray-quad intersection

All intersection routines are Taichi functions (@ti.func) and take an
explicit (t_min, t_max) interval, which is how the scene collaborator bounds
each segment of a curved path.
"""

from .quad import Quad, hit_quad
from .sphere import PrimitiveHit, Sphere, hit_sphere, make_primitive_miss

__all__ = [
    "Sphere",
    "PrimitiveHit",
    "hit_sphere",
    "make_primitive_miss",
    "Quad",
    "hit_quad",
]
