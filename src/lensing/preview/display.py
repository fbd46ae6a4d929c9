"""Matplotlib-based previews for rendered images and debug rays.

This module provides display-side image processing and two viewers:

Features:
    - Tone mapping (Reinhard, exposure-based)
    - Gamma correction
    - Static preview window for a rendered image
    - 3D line plot of recorded debug rays

The renderer stores colors unclamped; everything here is applied on the way
out and never feeds back into the render.

Example:
    >>> from src.lensing.preview.display import show_preview
    >>> from src.lensing.core.renderer import LensingRenderer
    >>>
    >>> renderer = LensingRenderer()
    >>> renderer.render()
    >>> show_preview(renderer)
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Literal

import numpy as np
import numpy.typing as npt

if TYPE_CHECKING:
    from src.lensing.core.renderer import LensingRenderer
    from src.lensing.preview.sinks import LineSegment


# Type alias for tone mapping options
ToneMapMethod = Literal["none", "reinhard", "exposure"]


def tone_map_reinhard(
    image: npt.NDArray[np.float32],
) -> npt.NDArray[np.float32]:
    """Apply Reinhard tone mapping: L / (1 + L).

    Args:
        image: Linear image array of shape (H, W, 3).

    Returns:
        Tone mapped image in [0, 1) range.
    """
    image = np.maximum(image, 0.0)
    return (image / (1.0 + image)).astype(np.float32)


def tone_map_exposure(
    image: npt.NDArray[np.float32],
    exposure: float = 1.0,
) -> npt.NDArray[np.float32]:
    """Apply exposure-based tone mapping: 1 - exp(-c * exposure)."""
    image = np.maximum(image, 0.0)
    return (1.0 - np.exp(-image * exposure)).astype(np.float32)


def apply_gamma(
    image: npt.NDArray[np.float32],
    gamma: float = 2.2,
) -> npt.NDArray[np.float32]:
    """Encode linear values with ``out = in^(1/gamma)``.

    Args:
        image: Linear image array of shape (H, W, 3).
        gamma: Gamma value; 1.0 returns the image unchanged.

    Returns:
        Gamma corrected image.
    """
    if gamma == 1.0:
        return image
    if gamma <= 0.0:
        raise ValueError(f"Gamma must be positive, got {gamma}")

    # Clamp first, negative values have no real power
    image = np.clip(image, 0.0, 1.0)
    return np.power(image, 1.0 / gamma).astype(np.float32)


def process_image_for_display(
    image: npt.NDArray[np.float32],
    tone_map: ToneMapMethod = "none",
    gamma: float = 1.0,
    exposure: float = 1.0,
) -> npt.NDArray[np.float32]:
    """Run the output pipeline: tone mapping, gamma, then a final clamp.

    Args:
        image: Linear image array of shape (H, W, 3).
        tone_map: Tone mapping method ("none", "reinhard", or "exposure").
        gamma: Gamma correction value (default 1.0).
        exposure: Exposure value for exposure tone mapping (default 1.0).

    Returns:
        Processed image in [0, 1] range.

    Raises:
        ValueError: If the tone mapping method is unknown.
    """
    result = np.asarray(image, dtype=np.float32).copy()

    if tone_map == "reinhard":
        result = tone_map_reinhard(result)
    elif tone_map == "exposure":
        result = tone_map_exposure(result, exposure)
    elif tone_map != "none":
        raise ValueError(f"Unknown tone mapping method: {tone_map}")

    result = apply_gamma(result, gamma)
    return np.clip(result, 0.0, 1.0).astype(np.float32)


def show_preview(
    renderer: LensingRenderer,
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = 1.0,
    exposure: float = 1.0,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 6),
    block: bool = True,
) -> None:
    """Display the renderer's completed image in a Matplotlib figure.

    Args:
        renderer: The LensingRenderer holding a completed render.
        tone_map: Tone mapping method ("none", "reinhard", or "exposure").
        gamma: Gamma correction value (default 1.0).
        exposure: Exposure value for exposure tone mapping (default 1.0).
        title: Custom title (default shows the resolution).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until the figure is closed.
    """
    import matplotlib.pyplot as plt

    display_image = process_image_for_display(
        renderer.get_image_numpy(gamma=1.0),
        tone_map=tone_map,
        gamma=gamma,
        exposure=exposure,
    )

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(display_image)
    ax.axis("off")
    ax.set_title(title or f"Lensing render {renderer.width}x{renderer.height}")

    plt.tight_layout()
    plt.show(block=block)


def show_debug_lines(
    segments: Iterable[LineSegment],
    *,
    body_position: tuple[float, float, float] | None = None,
    title: str = "Debug rays",
    figsize: tuple[float, float] = (8, 8),
    background: str = "black",
    block: bool = True,
) -> None:
    """Plot recorded debug line segments in a 3D Matplotlib axes.

    Args:
        segments: Segments recorded by a LineRecorder.
        body_position: If given, marks the massive body.
        title: Figure title.
        figsize: Figure size in inches.
        background: Axes face color; white rays need a dark background.
        block: Whether to block execution until the figure is closed.
    """
    import matplotlib.pyplot as plt

    fig = plt.figure(figsize=figsize)
    ax = fig.add_subplot(projection="3d")
    ax.set_facecolor(background)

    for segment in segments:
        xs, ys, zs = np.stack([segment.start, segment.end]).T
        # Scene +Y is up; Matplotlib's 3D up axis is Z
        ax.plot(xs, zs, ys, color=segment.color, linewidth=1.0)

    if body_position is not None:
        bx, by, bz = body_position
        ax.scatter([bx], [bz], [by], color="orange", s=40, label="massive body")
        ax.legend(loc="upper right")

    ax.set_xlabel("x")
    ax.set_ylabel("z")
    ax.set_zlabel("y")
    ax.set_title(title)

    plt.tight_layout()
    plt.show(block=block)
