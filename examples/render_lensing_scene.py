#!/usr/bin/env python3
"""Render the lensing demo scene.

This script renders the demo scene with its massive body to a PNG and can
optionally trace debug rays from a sphere's vertices and from a grid of
camera pixels, drawing them in a 3D Matplotlib window.

Usage:
    python -m examples.render_lensing_scene [options]

Options:
    --width WIDTH           Image width in pixels (default: 640)
    --height HEIGHT         Image height in pixels (default: 480)
    --output OUTPUT         Output file path (default: lensing_render.png)
    --curve-steps STEPS     Segments per curved pixel path (default: 50)
    --pull-strength VALUE   Midpoint sag of curved paths (default: 1.0)
    --threshold DEGREES     Curving angle threshold (default: 10.0)
    --scene-json PATH       Load the scene from a JSON description instead
    --debug-rays            Show debug rays after rendering
    --ray-count COUNT       Vertex rays per debug object (default: 5)
    --seed SEED             Random seed for vertex sampling (default: 0)
    --verbose               Enable log output
    --quiet                 Suppress progress output

Example:
    python -m examples.render_lensing_scene --width 320 --height 240 --threshold 15
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import numpy as np
import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the lensing demo scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=640,
        help="Image width in pixels (default: 640)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=480,
        help="Image height in pixels (default: 480)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="lensing_render.png",
        help="Output file path (default: lensing_render.png)",
    )
    parser.add_argument(
        "--curve-steps",
        type=int,
        default=50,
        help="Segments per curved pixel path (default: 50)",
    )
    parser.add_argument(
        "--pull-strength",
        type=float,
        default=1.0,
        help="Midpoint sag of curved paths (default: 1.0)",
    )
    parser.add_argument(
        "--threshold",
        type=float,
        default=10.0,
        help="Curving angle threshold in degrees (default: 10.0)",
    )
    parser.add_argument(
        "--scene-json",
        type=str,
        default=None,
        help="Load the scene from a JSON description instead of the demo scene",
    )
    parser.add_argument(
        "--debug-rays",
        action="store_true",
        help="Show debug rays after rendering",
    )
    parser.add_argument(
        "--ray-count",
        type=int,
        default=5,
        help="Vertex rays per debug object (default: 5)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Random seed for vertex sampling (default: 0)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable log output",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args()


def sphere_vertices(radius: float, rings: int = 8, segments: int = 12) -> np.ndarray:
    """Local-space vertices of a UV sphere, poles included."""
    vertices = [(0.0, radius, 0.0), (0.0, -radius, 0.0)]
    for i in range(1, rings):
        phi = np.pi * i / rings
        for j in range(segments):
            theta = 2.0 * np.pi * j / segments
            vertices.append(
                (
                    radius * np.sin(phi) * np.cos(theta),
                    radius * np.cos(phi),
                    radius * np.sin(phi) * np.sin(theta),
                )
            )
    return np.asarray(vertices, dtype=np.float64)


def translation(offset: tuple[float, float, float]) -> np.ndarray:
    """4x4 object-to-world transform for a pure translation."""
    matrix = np.eye(4)
    matrix[:3, 3] = offset
    return matrix


def render_lensing_scene(
    width: int = 640,
    height: int = 480,
    output_path: str = "lensing_render.png",
    curve_steps: int = 50,
    pull_strength: float = 1.0,
    threshold: float = 10.0,
    scene_json: str | None = None,
    debug_rays: bool = False,
    ray_count: int = 5,
    seed: int = 0,
    quiet: bool = False,
) -> Path:
    """Render the lensing scene and save it to a file.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        output_path: Output file path (PNG).
        curve_steps: Segments per curved pixel path.
        pull_strength: Midpoint sag of curved paths.
        threshold: Curving angle threshold in degrees.
        scene_json: Optional JSON scene description to load.
        debug_rays: If True, show debug rays after rendering.
        ray_count: Vertex rays per debug object.
        seed: Random seed for vertex sampling.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports so Taichi is initialized first
    from src.lensing.camera.pinhole import camera_rays, setup_camera
    from src.lensing.camera.vertex_seeder import seed_vertex_rays
    from src.lensing.core.debug_rays import DebugRaySettings, emit_debug_rays
    from src.lensing.core.renderer import LensingRenderer, RenderSettings
    from src.lensing.preview.display import show_debug_lines
    from src.lensing.preview.sinks import LineRecorder
    from src.lensing.scene.demo_scenes import LensingSceneParams, create_lensing_scene

    if not quiet:
        print(f"Creating lensing scene ({width}x{height})...")

    params = LensingSceneParams(pull_strength=pull_strength, angle_threshold=threshold)
    scene, camera = create_lensing_scene(params)
    if scene_json is not None:
        scene.load_json(scene_json)
        if not quiet:
            print(f"Loaded scene from {scene_json}")

    setup_camera(camera)

    renderer = LensingRenderer(
        RenderSettings(width=width, height=height, curve_steps=curve_steps)
    )

    if not quiet:
        print("Rendering...")
    start_time = time.time()
    renderer.render()

    output_file = renderer.save_image(output_path)
    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    if debug_rays:
        settings = DebugRaySettings(ray_count=ray_count)
        rng = np.random.default_rng(seed)
        seeds = []
        for sphere in scene.spheres:
            seeds.extend(
                seed_vertex_rays(
                    sphere_vertices(sphere.radius),
                    translation(sphere.center),
                    settings.ray_count,
                    rng,
                )
            )
        # A coarse grid of camera rays shows which pixels curve
        seeds.extend(camera_rays(8, 6))

        recorder = LineRecorder()
        polylines = emit_debug_rays(seeds, recorder, settings)
        if not quiet:
            curved = sum(1 for p in polylines if p.kind == "curved")
            print(f"Debug rays: {len(polylines)} traced, {curved} curved")

        body = scene.massive_body
        show_debug_lines(
            recorder,
            body_position=body.position if body is not None else None,
        )

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    ti.init(arch=ti.cpu)
    if not args.quiet:
        print("Using CPU backend")

    try:
        render_lensing_scene(
            width=args.width,
            height=args.height,
            output_path=args.output,
            curve_steps=args.curve_steps,
            pull_strength=args.pull_strength,
            threshold=args.threshold,
            scene_json=args.scene_json,
            debug_rays=args.debug_rays,
            ray_count=args.ray_count,
            seed=args.seed,
            quiet=args.quiet,
        )
        return 0
    except (ValueError, RuntimeError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
