#!/usr/bin/env python3
"""Render one of the sphere scenes.

This script creates a scene, renders it with progressive refinement and
writes the result as PNG or plain-text PPM (chosen by the output suffix).

Usage:
    python examples/render_spheres.py [options]

Options:
    --scene {showcase,two-spheres}  Scene to render (default: showcase)
    --width WIDTH       Image width in pixels (default: 480)
    --samples SAMPLES   Number of samples per pixel (default: 100)
    --max-depth DEPTH   Maximum ray bounces (default: 50)
    --seed SEED         Random seed (default: fresh entropy)
    --normals           Shade by surface normal instead of path tracing
    --gpu               Render with the Taichi kernel instead of the CPU loop
    --output OUTPUT     Output file path, .png or .ppm (default: spheres.png)
    --batch-size SIZE   Samples per progress update (default: 10)
    --quiet             Suppress progress output

Example:
    python examples/render_spheres.py --width 200 --samples 20 --output out.ppm
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

from pathtracer.config import RenderConfig
from pathtracer.core.progressive import ProgressiveRenderer
from pathtracer.preview.export import save_png_from_array, write_ppm
from pathtracer.scene.presets import create_material_showcase_scene, create_two_sphere_scene

SCENES = {
    "showcase": create_material_showcase_scene,
    "two-spheres": create_two_sphere_scene,
}


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a sphere scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--scene",
        choices=sorted(SCENES),
        default="showcase",
        help="Scene to render (default: showcase)",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=480,
        help="Image width in pixels (default: 480)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=100,
        help="Number of samples per pixel (default: 100)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=50,
        help="Maximum ray bounces (default: 50)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed (default: fresh entropy)",
    )
    parser.add_argument(
        "--normals",
        action="store_true",
        help="Shade by surface normal instead of path tracing",
    )
    parser.add_argument(
        "--gpu",
        action="store_true",
        help="Render with the Taichi kernel instead of the CPU loop",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="spheres.png",
        help="Output file path, .png or .ppm (default: spheres.png)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=10,
        help="Samples per progress update (default: 10)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args()


def make_renderer(args: argparse.Namespace):
    """Build the scene and the CPU or Taichi renderer for it."""
    world, camera = SCENES[args.scene]()
    config = RenderConfig(
        width=args.width,
        aspect_ratio=camera.aspect_ratio,
        max_depth=args.max_depth,
        max_samples=args.samples,
        seed=args.seed,
        mode="normals" if args.normals else "path",
    )

    if not args.gpu:
        return ProgressiveRenderer(world, camera, config)

    import taichi as ti

    from pathtracer.gpu.renderer import TaichiRenderer

    # Use GPU if available, fall back to CPU
    seed = args.seed if args.seed is not None else 0
    try:
        ti.init(arch=ti.gpu, random_seed=seed)
        if not args.quiet:
            print("Using GPU backend")
    except RuntimeError:
        ti.init(arch=ti.cpu, random_seed=seed)
        if not args.quiet:
            print("Using CPU backend")

    renderer = TaichiRenderer(config)
    renderer.upload_world(world)
    renderer.upload_camera(camera)
    return renderer


def render_spheres(args: argparse.Namespace) -> Path:
    """Render the selected scene and save it.

    Returns:
        Path to the saved image file.
    """
    renderer = make_renderer(args)

    if not args.quiet:
        print(f"Rendering {args.scene} ({renderer.width}x{renderer.height}), "
              f"{args.samples} samples per pixel...")

    start_time = time.time()

    def progress_callback(current: int, target: int) -> None:
        if not args.quiet:
            elapsed = time.time() - start_time
            progress_pct = (current / target) * 100 if target > 0 else 0
            samples_per_sec = current / elapsed if elapsed > 0 else 0
            print(
                f"\r  Progress: {current}/{target} samples "
                f"({progress_pct:.1f}%) - {samples_per_sec:.2f} spp/s",
                end="",
                flush=True,
            )

    renderer.render(
        num_samples=args.samples,
        batch_size=args.batch_size,
        callback=progress_callback,
    )

    if not args.quiet:
        print()  # Newline after progress

    output_file = Path(args.output)
    image = renderer.get_image_uint8()
    if output_file.suffix.lower() == ".ppm":
        with open(output_file, "w", encoding="ascii") as stream:
            write_ppm(stream, image)
    else:
        save_png_from_array(image, output_file)

    total_time = time.time() - start_time
    if not args.quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    try:
        render_spheres(args)
        return 0
    except (ValueError, TypeError, RuntimeError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
