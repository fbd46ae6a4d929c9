"""Quadratic path integration and piecewise path intersection.

A curved path is a single quadratic Bezier curve with control points
``start``, ``midpoint`` and ``end`` where

    midpoint = (start + end) / 2 + sag
    point(t) = (1 - t)^2 * start + 2 (1 - t) t * midpoint + t^2 * end

sampled at ``t = i / steps`` for ``i = 1..steps``. It is a smooth visual
stand-in for gravitational bending, not a geodesic.

Paths are tested against the scene one segment at a time. The walk runs from
the start of the path toward its end and stops at the first segment whose
query reports a hit. Within a segment the nearest hit wins; across segments
the earliest segment wins, even if a later segment would contain a point
closer to the start. This is the intended behavior for curved paths.

Host side:
    QuadraticPath: lazy, restartable iterable of the sampled points.
    intersect_path: walk an arbitrary polyline against the scene.

Taichi side:
    quadratic_point, intersect_segment, intersect_quadratic_path.

Example:
    >>> from src.lensing.core.path import QuadraticPath
    >>> path = QuadraticPath((0, 0, 0), (0, 0, 10), sag=(0, -1, 0), steps=50)
    >>> points = list(path)
    >>> len(points)
    50
    >>> points[-1].tolist()
    [0.0, 0.0, 10.0]
"""

from collections.abc import Iterable, Iterator, Sequence

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.lensing.core.ray import as_vector
from src.lensing.scene.intersection import (
    T_MIN,
    SceneHitRecord,
    SurfaceHit,
    intersect_scene,
    make_miss_record,
    read_hit_record,
)

# Type alias for 3D vectors
vec3 = tm.vec3

# Default curve resolutions for the two consumers
RENDER_CURVE_STEPS = 50
DEBUG_CURVE_STEPS = 30

# Segments shorter than this are skipped
SEGMENT_EPSILON = 1e-7

# Capacity of the host polyline buffer
MAX_PATH_POINTS = 4096


def quadratic_control_point(
    start: npt.NDArray[np.float64],
    end: npt.NDArray[np.float64],
    sag: npt.NDArray[np.float64],
) -> npt.NDArray[np.float64]:
    """The middle Bezier control point: the chord midpoint offset by ``sag``."""
    return (start + end) * 0.5 + sag


def quadratic_bezier(
    start: npt.NDArray[np.float64],
    control: npt.NDArray[np.float64],
    end: npt.NDArray[np.float64],
    t: float,
) -> npt.NDArray[np.float64]:
    """Evaluate a quadratic Bezier curve at parameter ``t``."""
    s = 1.0 - t
    return s * s * start + 2.0 * s * t * control + t * t * end


class QuadraticPath:
    """Sample points of a quadratic path from ``start`` toward ``end``.

    Iterating yields exactly ``steps`` points for ``t = 1/steps .. 1``; the
    start point itself is not yielded. Each iteration recomputes the points,
    so the path can be iterated any number of times.

    Attributes:
        start: First control point, shape (3,).
        end: Last control point (the massive body position), shape (3,).
        control: Middle control point, shape (3,).
        steps: Number of samples per iteration.
    """

    def __init__(
        self,
        start: Sequence[float],
        end: Sequence[float],
        sag: Sequence[float] = (0.0, 0.0, 0.0),
        steps: int = RENDER_CURVE_STEPS,
    ) -> None:
        if steps <= 0:
            raise ValueError(f"Curve steps must be positive, got {steps}")
        self.start = as_vector(start)
        self.end = as_vector(end)
        self.control = quadratic_control_point(self.start, self.end, as_vector(sag))
        self.steps = int(steps)

    def point_at(self, t: float) -> npt.NDArray[np.float64]:
        """Evaluate the curve at ``t`` in [0, 1]."""
        return quadratic_bezier(self.start, self.control, self.end, t)

    def __iter__(self) -> Iterator[npt.NDArray[np.float64]]:
        for i in range(1, self.steps + 1):
            yield self.point_at(i / self.steps)

    def __len__(self) -> int:
        return self.steps

    def polyline(self) -> list[npt.NDArray[np.float64]]:
        """The full path including the start point (``steps + 1`` points)."""
        return [self.start.copy(), *self]

    def __repr__(self) -> str:
        return (
            f"QuadraticPath(start={self.start.tolist()}, end={self.end.tolist()}, "
            f"steps={self.steps})"
        )


# =============================================================================
# Taichi-side integration and intersection
# =============================================================================


@ti.func
def quadratic_point(start: vec3, control: vec3, end: vec3, t: ti.f32) -> vec3:
    """Evaluate a quadratic Bezier curve at ``t`` inside a kernel."""
    s = 1.0 - t
    return s * s * start + 2.0 * s * t * control + t * t * end


@ti.func
def intersect_segment(seg_start: vec3, seg_end: vec3) -> SceneHitRecord:
    """Query the scene along one segment, bounded by the segment length."""
    result = make_miss_record()
    delta = seg_end - seg_start
    seg_length = tm.length(delta)
    if seg_length > SEGMENT_EPSILON:
        result = intersect_scene(seg_start, delta / seg_length, T_MIN, seg_length)
    return result


@ti.func
def intersect_quadratic_path(start: vec3, end: vec3, sag: vec3, steps: ti.i32) -> SceneHitRecord:
    """Walk a quadratic path segment by segment and return the first hit.

    Args:
        start: Path origin.
        end: Path end (massive body position).
        sag: Midpoint offset.
        steps: Number of segments.

    Returns:
        The hit from the first segment that reports one, or a miss record.
    """
    control = (start + end) * 0.5 + sag
    result = make_miss_record()
    prev_point = start
    found = 0
    for i in range(1, steps + 1):
        if found == 0:
            t = ti.cast(i, ti.f32) / ti.cast(steps, ti.f32)
            curr_point = quadratic_point(start, control, end, t)
            rec = intersect_segment(prev_point, curr_point)
            if rec.hit == 1:
                result = rec
                found = 1
            prev_point = curr_point
    return result


# Host polyline buffer
_path_points = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PATH_POINTS)
_path_result = SceneHitRecord.field(shape=())


@ti.func
def _walk_polyline(num_points: ti.i32) -> SceneHitRecord:
    result = make_miss_record()
    found = 0
    for i in range(num_points - 1):
        if found == 0:
            rec = intersect_segment(_path_points[i], _path_points[i + 1])
            if rec.hit == 1:
                result = rec
                found = 1
    return result


@ti.kernel
def _intersect_polyline_kernel(num_points: ti.i32):
    # One task, so the segment walk inside stays serial and ordered
    for _ in range(1):
        _path_result[None] = _walk_polyline(num_points)


def intersect_path(points: Iterable[Sequence[float]]) -> SurfaceHit | None:
    """Walk a polyline against the scene and return the first hit.

    Each consecutive pair ``(p[i], p[i+1])`` becomes one bounded query with
    direction ``normalize(p[i+1] - p[i])`` and distance ``|p[i+1] - p[i]|``.

    Args:
        points: At least two points, in path order.

    Returns:
        The hit from the first segment that reports one, or None.

    Raises:
        ValueError: If fewer than 2 or more than MAX_PATH_POINTS points are
            given.
    """
    array = np.asarray([as_vector(p) for p in points], dtype=np.float32)
    count = len(array)
    if count < 2:
        raise ValueError(f"A path needs at least 2 points, got {count}")
    if count > MAX_PATH_POINTS:
        raise ValueError(f"A path may hold at most {MAX_PATH_POINTS} points, got {count}")

    buffer = np.zeros((MAX_PATH_POINTS, 3), dtype=np.float32)
    buffer[:count] = array
    _path_points.from_numpy(buffer)
    _intersect_polyline_kernel(count)
    return read_hit_record(_path_result)
