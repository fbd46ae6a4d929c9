"""Image renderer facade: one static image per render call.

This module wraps the integrator's render target and kernels behind a small
object that owns the image settings:
- A single render pass that writes every pixel exactly once
- Readback as a clamped, optionally gamma corrected NumPy array
- PNG hand-off through Pillow

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.lensing.core.renderer import LensingRenderer, RenderSettings
    >>> from src.lensing.scene.demo_scenes import create_lensing_scene
    >>> from src.lensing.camera.pinhole import setup_camera
    >>>
    >>> scene, camera = create_lensing_scene()
    >>> setup_camera(camera)
    >>>
    >>> renderer = LensingRenderer(RenderSettings(width=320, height=240))
    >>> renderer.render()
    >>> renderer.save_image("lensing_render.png")
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path

import numpy as np
import numpy.typing as npt

from src.lensing.core.integrator import (
    STRAIGHT_RAY_DISTANCE,
    clear_render_target,
    get_normalized_image_numpy,
    is_render_complete,
    render_image,
    setup_render_target,
)
from src.lensing.core.path import RENDER_CURVE_STEPS
from src.lensing.preview.export import save_png_from_array

logger = logging.getLogger(__name__)

# Output file name used when none is given
DEFAULT_OUTPUT_PATH = "lensing_render.png"


@dataclass
class RenderSettings:
    """Settings for the per-pixel image renderer.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        curve_steps: Segments per curved path.
        max_distance: Length of straight-ray queries.
    """

    width: int = 640
    height: int = 480
    curve_steps: int = RENDER_CURVE_STEPS
    max_distance: float = STRAIGHT_RAY_DISTANCE

    def __post_init__(self) -> None:
        if self.curve_steps <= 0:
            raise ValueError(f"Curve steps must be positive, got {self.curve_steps}")
        if self.max_distance <= 0.0:
            raise ValueError(f"Max distance must be positive, got {self.max_distance}")


class LensingRenderer:
    """Renders the current scene, camera, lights and massive body to an image.

    The renderer delegates to the global integrator buffers (Taichi fields),
    so only one image is resident at a time.

    Attributes:
        settings: The active RenderSettings.
    """

    def __init__(self, settings: RenderSettings | None = None) -> None:
        """Initialize the renderer and allocate its render target.

        Args:
            settings: Render settings; defaults to RenderSettings().

        Raises:
            ValueError: If the dimensions are invalid or exceed the maximum.
        """
        self.settings = settings if settings is not None else RenderSettings()
        setup_render_target(self.settings.width, self.settings.height)

    @property
    def width(self) -> int:
        """Get the image width."""
        return self.settings.width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self.settings.height

    @property
    def is_complete(self) -> bool:
        """True once the last render populated every pixel."""
        return is_render_complete()

    def reset(self) -> None:
        """Clear the image without changing its dimensions."""
        clear_render_target()

    def resize(self, width: int, height: int) -> None:
        """Change the image dimensions and clear the image.

        Raises:
            ValueError: If dimensions are invalid or exceed the maximum.
        """
        setup_render_target(width, height)
        self.settings.width = width
        self.settings.height = height

    def render(self) -> None:
        """Trace every pixel once, replacing any previous image."""
        logger.info(
            "Rendering %dx%d image (%d curve steps)",
            self.width,
            self.height,
            self.settings.curve_steps,
        )
        start_time = time.perf_counter()
        render_image(
            curve_steps=self.settings.curve_steps,
            max_distance=self.settings.max_distance,
        )
        logger.info("Render finished in %.3fs", time.perf_counter() - start_time)

    def get_image_numpy(self, gamma: float = 1.0) -> npt.NDArray[np.float32]:
        """Get the rendered image as a NumPy array.

        Values are clamped to [0, 1] and optionally gamma corrected. The array
        shape is (height, width, 3) with the top row first.

        Args:
            gamma: Gamma correction value. Default 1.0 (linear).

        Raises:
            RuntimeError: If no render has completed yet.
        """
        if not self.is_complete:
            raise RuntimeError("No completed render. Call render() first.")

        image = get_normalized_image_numpy()
        if gamma != 1.0:
            image = np.power(image, 1.0 / gamma).astype(np.float32)
        return image

    def get_image_uint8(self, gamma: float = 1.0) -> npt.NDArray[np.uint8]:
        """Get the rendered image as an 8-bit array of shape (height, width, 3)."""
        image = self.get_image_numpy(gamma=gamma)
        return (image * 255.0 + 0.5).astype(np.uint8)

    def save_image(self, filepath: str | Path = DEFAULT_OUTPUT_PATH, gamma: float = 1.0) -> Path:
        """Save the rendered image as a PNG file.

        Args:
            filepath: Output path. Default "lensing_render.png".
            gamma: Gamma correction value. Default 1.0 (colors written as
                computed, clamped to [0, 1]).

        Returns:
            The path the image was written to.
        """
        output = Path(filepath)
        save_png_from_array(self.get_image_numpy(), output, gamma=gamma)
        logger.info("Saved lensing render to %s", output)
        return output

    def __repr__(self) -> str:
        return (
            f"LensingRenderer(width={self.width}, height={self.height}, "
            f"curve_steps={self.settings.curve_steps}, complete={self.is_complete})"
        )
