"""Path curvature policy: decide whether a ray bends toward the massive body.

The lensing rule is deliberately non-physical. A ray bends only when its
direction points within ``angle_threshold`` degrees of the massive body, as
seen from the ray origin:

    angle = angle_between(direction, body_position - origin)
    CURVED  if angle < angle_threshold   (strictly less)
    STRAIGHT otherwise, and always when no body is configured

When the origin coincides with the body (|body_position - origin| < 1e-6) the
angle is undefined; it is treated as 0 degrees, so the path is CURVED for any
positive threshold. An angle exactly equal to the threshold is STRAIGHT.

Curved paths follow a quadratic curve from the origin to the body position,
sagged by ``SAG_DIRECTION * pull_strength`` at the midpoint (see
``src.lensing.core.path``).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.lensing.core.lensing import MassiveBody, PathKind, classify_ray, setup_massive_body
    >>> setup_massive_body(MassiveBody(position=(0.0, 0.0, 10.0)))
    >>> classify_ray((0.0, 0.0, 0.0), (0.0, 0.0, 1.0)) is PathKind.CURVED
    True
"""

from collections.abc import Sequence
from dataclasses import dataclass
from enum import IntEnum

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.lensing.core.ray import as_vector, normalize_host

# Type alias for 3D vectors
vec3 = tm.vec3

# The midpoint of a curved path is pulled along world down
SAG_DIRECTION = (0.0, -1.0, 0.0)

# Default angular threshold in degrees
DEFAULT_ANGLE_THRESHOLD = 10.0

# Origin-to-body distances below this count as coincident
COINCIDENT_EPSILON = 1e-6


class PathKind(IntEnum):
    """Shape of the path a ray travels."""

    STRAIGHT = 0
    CURVED = 1


@dataclass(frozen=True)
class MassiveBody:
    """The body rays bend toward.

    Attributes:
        position: World-space position of the body.
        pull_strength: Scale of the midpoint sag of curved paths.
        angle_threshold: Degrees; rays pointing closer than this curve.
    """

    position: tuple[float, float, float]
    pull_strength: float = 1.0
    angle_threshold: float = DEFAULT_ANGLE_THRESHOLD

    def __post_init__(self) -> None:
        if not 0.0 <= self.angle_threshold <= 180.0:
            raise ValueError(
                f"Angle threshold must be within [0, 180] degrees, got {self.angle_threshold}"
            )

    @property
    def sag(self) -> npt.NDArray[np.float64]:
        """Midpoint offset applied to curved paths."""
        return np.asarray(SAG_DIRECTION, dtype=np.float64) * self.pull_strength


# Body state read by the render kernels
_body_enabled = ti.field(dtype=ti.i32, shape=())
_body_position = ti.Vector.field(3, dtype=ti.f32, shape=())
_body_sag = ti.Vector.field(3, dtype=ti.f32, shape=())
_body_angle_threshold = ti.field(dtype=ti.f32, shape=())

_probe_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_probe_direction = ti.Vector.field(3, dtype=ti.f32, shape=())

# Host-side mirror of the configured body
_active_body: MassiveBody | None = None


def setup_massive_body(body: MassiveBody | None) -> None:
    """Configure the massive body, or disable curving with ``None``."""
    global _active_body
    _active_body = body
    if body is None:
        _body_enabled[None] = 0
        return
    _body_position[None] = as_vector(body.position).tolist()
    _body_sag[None] = body.sag.tolist()
    _body_angle_threshold[None] = body.angle_threshold
    _body_enabled[None] = 1


def clear_massive_body() -> None:
    """Disable curving."""
    setup_massive_body(None)


def get_massive_body() -> MassiveBody | None:
    """Return the configured massive body, if any."""
    return _active_body


def is_body_enabled() -> bool:
    """True if the kernels currently see a massive body."""
    return bool(_body_enabled[None])


@ti.func
def get_body_position() -> vec3:
    return _body_position[None]


@ti.func
def get_body_sag() -> vec3:
    return _body_sag[None]


@ti.func
def angle_between_degrees(a: vec3, b: vec3) -> ti.f32:
    """Angle between two vectors in degrees, in [0, 180].

    Returns 0 when either vector is (near) zero length.
    """
    angle = 0.0
    denom = tm.length(a) * tm.length(b)
    if denom > COINCIDENT_EPSILON * COINCIDENT_EPSILON:
        cos_angle = tm.clamp(tm.dot(a, b) / denom, -1.0, 1.0)
        angle = ti.acos(cos_angle) * 180.0 / tm.pi
    return angle


@ti.func
def classify_path(origin: vec3, direction: vec3) -> ti.i32:
    """Return PathKind.CURVED or PathKind.STRAIGHT (as int) for a ray."""
    kind = int(PathKind.STRAIGHT)
    if _body_enabled[None] == 1:
        to_body = _body_position[None] - origin
        # Coincident origin: no direction to the body, the angle counts as 0
        angle = 0.0
        if tm.length(to_body) >= COINCIDENT_EPSILON:
            angle = angle_between_degrees(direction, to_body)
        if angle < _body_angle_threshold[None]:
            kind = int(PathKind.CURVED)
    return kind


@ti.kernel
def _classify_kernel() -> ti.i32:
    return classify_path(_probe_origin[None], _probe_direction[None])


def classify_ray(origin: Sequence[float], direction: Sequence[float]) -> PathKind:
    """Classify a ray from Python using the same policy as the render kernel.

    Args:
        origin: Ray origin.
        direction: Ray direction (normalized here).

    Returns:
        The PathKind for the ray.

    Raises:
        ValueError: If the direction has zero length.
    """
    _probe_origin[None] = as_vector(origin).tolist()
    _probe_direction[None] = normalize_host(direction).tolist()
    return PathKind(_classify_kernel())
