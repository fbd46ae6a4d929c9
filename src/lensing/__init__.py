"""Taichi-based ray-cast renderer with non-physical gravitational lensing.

Rays aimed within an angular threshold of a massive body bend along a
quadratic curve toward it; all other rays travel straight. Hits are shaded
with Lambertian direct lighting and hard shadows.

Subpackages:
    core: Ray types, curvature policy, path integration, shading, rendering
        and the debug line emitter
    geometry: Shape primitives and intersection algorithms
    materials: Surface base colors
    scene: Scene storage, lights, scene manager and demo scenes
    camera: Camera ray seeder and vertex ray seeder
    preview: PNG export, Matplotlib previews and debug line sinks
"""

__version__ = "0.1.0"
