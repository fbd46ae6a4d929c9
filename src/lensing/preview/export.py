"""PNG export for rendered images.

The renderer produces linear colors clamped to [0, 1]. Export optionally tone
maps and gamma encodes them, then writes an 8-bit RGB PNG through Pillow.
The defaults (no tone mapping, gamma 1.0) write the computed colors as-is.

Example:
    >>> from src.lensing.preview.export import save_png
    >>> from src.lensing.core.renderer import LensingRenderer
    >>>
    >>> renderer = LensingRenderer()
    >>> renderer.render()
    >>> save_png(renderer, "lensing_render.png")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

from src.lensing.preview.display import ToneMapMethod, process_image_for_display

if TYPE_CHECKING:
    from src.lensing.core.renderer import LensingRenderer

logger = logging.getLogger(__name__)


def image_to_uint8(
    image: npt.NDArray[np.float32],
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = 1.0,
    exposure: float = 1.0,
) -> npt.NDArray[np.uint8]:
    """Convert a linear float image to uint8 for display or export.

    Args:
        image: Linear image array of shape (H, W, 3).
        tone_map: Tone mapping method ("none", "reinhard", or "exposure").
        gamma: Gamma correction value (default 1.0, no encoding).
        exposure: Exposure value for exposure tone mapping (default 1.0).

    Returns:
        8-bit image array of shape (H, W, 3) with dtype uint8.
    """
    processed = process_image_for_display(
        image,
        tone_map=tone_map,
        gamma=gamma,
        exposure=exposure,
    )
    # Round to nearest so 1.0 maps to 255 and 0.5 to 128
    return (processed * 255.0 + 0.5).astype(np.uint8)


def save_png_from_array(
    image: npt.NDArray[np.float32],
    filepath: str | Path,
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = 1.0,
    exposure: float = 1.0,
) -> Path:
    """Save a NumPy array as an 8-bit RGB PNG file.

    Args:
        image: Linear image array of shape (H, W, 3), top row first.
        filepath: Output file path (should end in .png).
        tone_map: Tone mapping method ("none", "reinhard", or "exposure").
        gamma: Gamma correction value (default 1.0).
        exposure: Exposure value for exposure tone mapping (default 1.0).

    Returns:
        The path written.

    Raises:
        ValueError: If the image is not an (H, W, 3) array.
    """
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image.shape}")

    path = Path(filepath)
    image_uint8 = image_to_uint8(image, tone_map=tone_map, gamma=gamma, exposure=exposure)
    PILImage.fromarray(image_uint8).save(path)
    logger.debug("Wrote %dx%d PNG to %s", image.shape[1], image.shape[0], path)
    return path


def save_png(
    renderer: LensingRenderer,
    filepath: str | Path,
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = 1.0,
    exposure: float = 1.0,
) -> Path:
    """Save a renderer's completed image as a PNG file.

    Args:
        renderer: The LensingRenderer holding a completed render.
        filepath: Output file path (should end in .png).
        tone_map: Tone mapping method ("none", "reinhard", or "exposure").
        gamma: Gamma correction value (default 1.0).
        exposure: Exposure value for exposure tone mapping (default 1.0).

    Returns:
        The path written.
    """
    return save_png_from_array(
        renderer.get_image_numpy(gamma=1.0),
        filepath,
        tone_map=tone_map,
        gamma=gamma,
        exposure=exposure,
    )
