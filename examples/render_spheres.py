#!/usr/bin/env python3
"""Render a preset sphere scene to a PNG file.

Usage:
    python examples/render_spheres.py [--scene NAME] [--width W] [--height H]
        [--samples N] [--max-depth D] [--seed S] [--batch-size B]
        [--output FILE] [--cpu] [--quiet]

The image is rendered with a fixed seed, so the same options always give the
same PNG. Press Ctrl+C to stop early; the samples gathered so far are saved.

Example:
    python examples/render_spheres.py --scene glass --width 200 --height 100 --samples 50
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

import taichi as ti

SCENES = ("four_spheres", "two_spheres", "glass")


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Path trace a preset sphere scene to PNG.")
    parser.add_argument("--scene", default="four_spheres", choices=SCENES, help="Preset scene")
    parser.add_argument("--width", type=int, default=400, help="Image width in pixels")
    parser.add_argument("--height", type=int, default=200, help="Image height in pixels")
    parser.add_argument("--samples", type=int, default=100, help="Samples per pixel")
    parser.add_argument("--max-depth", type=int, default=50, help="Surface interactions per path")
    parser.add_argument("--seed", type=int, default=0, help="Seed of the per-pixel random streams")
    parser.add_argument(
        "--batch-size", type=int, default=10, help="Samples per pixel between progress lines"
    )
    parser.add_argument("--output", default="spheres.png", help="Output PNG path")
    parser.add_argument("--cpu", action="store_true", help="Force the CPU backend")
    parser.add_argument("--quiet", action="store_true", help="Only report errors")
    return parser.parse_args()


def render_spheres(
    scene_name: str = "four_spheres",
    width: int = 400,
    height: int = 200,
    num_samples: int = 100,
    max_depth: int = 50,
    seed: int = 0,
    output_path: str = "spheres.png",
    batch_size: int = 10,
    quiet: bool = False,
) -> Path:
    """Render a preset scene and write it as a PNG.

    Returns:
        Path to the written image.
    """
    # Taichi must be initialised before these modules declare their fields
    from pathtracer.camera.pinhole import setup_camera
    from pathtracer.core.renderer import RenderConfig, Renderer
    from pathtracer.scene.presets import create_preset_scene

    scene, camera = create_preset_scene(scene_name)
    setup_camera(camera)

    renderer = Renderer(
        RenderConfig(
            width=width,
            height=height,
            samples_per_pixel=num_samples,
            max_depth=max_depth,
            seed=seed,
            batch_size=batch_size,
        )
    )
    if not quiet:
        print(f"{scene_name}: {scene.get_sphere_count()} spheres, {renderer}")

    start_time = time.time()

    def report(current: int, target: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            print(f"\r  {current}/{target} spp in {elapsed:.1f}s", end="", flush=True)

    try:
        renderer.render(callback=report)
    except KeyboardInterrupt:
        if not quiet:
            print(f"\n  Stopped at {renderer.sample_count} spp", end="")

    if not quiet:
        print()

    output_file = Path(output_path)
    renderer.save_png(str(output_file))
    if not quiet:
        print(f"Wrote {output_file.absolute()} ({time.time() - start_time:.2f}s)")
    return output_file


def main() -> int:
    args = parse_args()

    if args.cpu:
        ti.init(arch=ti.cpu)
    else:
        try:
            ti.init(arch=ti.gpu)
        except Exception:
            ti.init(arch=ti.cpu)

    try:
        render_spheres(
            scene_name=args.scene,
            width=args.width,
            height=args.height,
            num_samples=args.samples,
            max_depth=args.max_depth,
            seed=args.seed,
            output_path=args.output,
            batch_size=args.batch_size,
            quiet=args.quiet,
        )
    except (ValueError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
