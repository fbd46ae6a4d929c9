"""Debug line emitter: draw ray paths as colored line segments.

Each seeded ray is resolved to exactly one polyline:

    1. Straight query of ``straight_ray_length``; on a hit, a line from the
       origin to the hit point (``hit_color``).
    2. Otherwise, with no massive body or a STRAIGHT classification, a line of
       ``straight_ray_length`` along the ray (``straight_color``).
    3. Otherwise the full quadratic path from the origin to the body
       (``curved_color``), drawn one segment per sample pair.

Curved debug paths are never tested against the scene: the whole curve is
drawn even when it passes through geometry. The image renderer stops curved
paths at the first hit, so the two views can differ for occluded curves.

Example:
    >>> import numpy as np
    >>> from src.lensing.camera.vertex_seeder import seed_vertex_rays
    >>> from src.lensing.core.debug_rays import emit_debug_rays
    >>> from src.lensing.preview.sinks import LineRecorder
    >>> vertices = np.array([[1, 0, 0], [0, 1, 0], [0, 0, 1], [-1, 0, 0]], dtype=float)
    >>> seeds = seed_vertex_rays(vertices, np.eye(4), 5, np.random.default_rng(0))
    >>> recorder = LineRecorder()
    >>> polylines = emit_debug_rays(seeds, recorder)
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

from src.lensing.core.lensing import PathKind, classify_ray, get_massive_body
from src.lensing.core.path import DEBUG_CURVE_STEPS, QuadraticPath, intersect_path
from src.lensing.core.ray import RaySeed
from src.lensing.preview.sinks import DebugLineSink

logger = logging.getLogger(__name__)

WHITE = (1.0, 1.0, 1.0)
RED = (1.0, 0.0, 0.0)


@dataclass
class DebugRaySettings:
    """Settings for the debug line emitter.

    Attributes:
        ray_count: Number of rays to seed per object.
        straight_ray_length: Length of the straight query and fallback line.
        curve_steps: Segments per curved polyline.
        hit_color: Color of origin-to-hit lines.
        straight_color: Color of unobstructed straight lines.
        curved_color: Color of curved polylines.
    """

    ray_count: int = 5
    straight_ray_length: float = 5.0
    curve_steps: int = DEBUG_CURVE_STEPS
    hit_color: tuple[float, float, float] = WHITE
    straight_color: tuple[float, float, float] = WHITE
    curved_color: tuple[float, float, float] = RED

    def __post_init__(self) -> None:
        if self.curve_steps <= 0:
            raise ValueError(f"Curve steps must be positive, got {self.curve_steps}")
        if self.straight_ray_length <= 0.0:
            raise ValueError(
                f"Straight ray length must be positive, got {self.straight_ray_length}"
            )


@dataclass(frozen=True)
class DebugPolyline:
    """The polyline drawn for one ray.

    Attributes:
        points: Polyline vertices in draw order, shape (N, 3).
        color: Line color (R, G, B).
        kind: "hit", "straight" or "curved".
    """

    points: npt.NDArray[np.float64]
    color: tuple[float, float, float]
    kind: str

    @property
    def segment_count(self) -> int:
        return max(0, len(self.points) - 1)


def resolve_debug_ray(seed: RaySeed, settings: DebugRaySettings | None = None) -> DebugPolyline:
    """Decide which polyline a ray is drawn as, without drawing it."""
    settings = settings if settings is not None else DebugRaySettings()
    length = settings.straight_ray_length
    far_point = seed.point_at(length)

    hit = intersect_path([seed.origin, far_point])
    if hit is not None:
        logger.debug("Debug ray from %s hit at %s", seed.origin.tolist(), hit.point.tolist())
        return DebugPolyline(np.stack([seed.origin, hit.point]), tuple(settings.hit_color), "hit")

    body = get_massive_body()
    if body is None or classify_ray(seed.origin, seed.direction) is PathKind.STRAIGHT:
        logger.debug("Debug ray from %s drawn straight", seed.origin.tolist())
        return DebugPolyline(
            np.stack([seed.origin, far_point]), tuple(settings.straight_color), "straight"
        )

    path = QuadraticPath(seed.origin, body.position, body.sag, steps=settings.curve_steps)
    logger.debug("Debug ray from %s curved toward %s", seed.origin.tolist(), body.position)
    return DebugPolyline(np.stack(path.polyline()), tuple(settings.curved_color), "curved")


def emit_debug_ray(
    seed: RaySeed,
    sink: DebugLineSink,
    settings: DebugRaySettings | None = None,
) -> DebugPolyline:
    """Resolve one ray and draw its polyline into ``sink`` segment by segment.

    Returns:
        The polyline that was drawn.
    """
    polyline = resolve_debug_ray(seed, settings)
    for start, end in zip(polyline.points[:-1], polyline.points[1:]):
        sink.draw_line(start, end, polyline.color)
    return polyline


def emit_debug_rays(
    seeds: Iterable[RaySeed],
    sink: DebugLineSink,
    settings: DebugRaySettings | None = None,
) -> list[DebugPolyline]:
    """Draw every ray in ``seeds``, one fully before the next."""
    settings = settings if settings is not None else DebugRaySettings()
    return [emit_debug_ray(seed, sink, settings) for seed in seeds]
