"""Preview module for output and visualization.

Components:
    display: Tone mapping, gamma and Matplotlib viewers
    export: PNG export via Pillow
    sinks: Receivers for debug line primitives

Example:
    >>> from src.lensing.preview import save_png, show_preview
    >>> from src.lensing.core.renderer import LensingRenderer
    >>>
    >>> renderer = LensingRenderer()
    >>> renderer.render()
    >>> save_png(renderer, "lensing_render.png")
"""

from src.lensing.preview.display import (
    ToneMapMethod,
    apply_gamma,
    process_image_for_display,
    show_debug_lines,
    show_preview,
    tone_map_exposure,
    tone_map_reinhard,
)
from src.lensing.preview.export import (
    image_to_uint8,
    save_png,
    save_png_from_array,
)
from src.lensing.preview.sinks import DebugLineSink, LineRecorder, LineSegment

__all__ = [
    # Display functions
    "show_preview",
    "show_debug_lines",
    # Tone mapping
    "tone_map_reinhard",
    "tone_map_exposure",
    "apply_gamma",
    "process_image_for_display",
    "ToneMapMethod",
    # Export functions
    "save_png",
    "save_png_from_array",
    "image_to_uint8",
    # Debug line sinks
    "DebugLineSink",
    "LineRecorder",
    "LineSegment",
]
