#!/usr/bin/env python3
"""Render the SDF room scene.

This script renders the room with its patterned ceiling and sky light using
the sphere-marching path tracer, then tone maps the result and writes it as
an image file.

Usage:
    python -m examples.render_room [options]

Options:
    --width WIDTH       Image width in pixels (default: 240)
    --height HEIGHT     Image height in pixels (default: 135)
    --samples SAMPLES   Number of samples per pixel, at least 1 (default: 24)
    --output OUTPUT     Output file path (default: room.bmp)
    --seed SEED         Seed for the random streams (default: 0)
    --batch-size SIZE   Samples per progress update (default: 4)
    --letters           Add the mirrored logo letters to the scene
    --arch {cpu,gpu}    Taichi backend (default: cpu)
    --quiet             Suppress progress output

Exit status is 0 on success, 1 when the image cannot be written and 2 for
invalid arguments.

Example:
    python -m examples.render_room --width 960 --height 540 --samples 16
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from dataclasses import dataclass
from pathlib import Path

import taichi as ti


@dataclass
class RenderSettings:
    """Settings of one command-line render."""

    width: int = 240
    height: int = 135
    samples: int = 24
    output: str = "room.bmp"
    seed: int = 0
    batch_size: int = 4
    letters: bool = False
    quiet: bool = False


def _positive_int(value: str) -> int:
    """argparse type accepting integers >= 1."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"{value!r} is not an integer") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"{value!r} must be at least 1")
    return number


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the SDF room scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=_positive_int,
        default=240,
        help="Image width in pixels (default: 240)",
    )
    parser.add_argument(
        "--height",
        type=_positive_int,
        default=135,
        help="Image height in pixels (default: 135)",
    )
    parser.add_argument(
        "--samples",
        type=_positive_int,
        default=24,
        help="Number of samples per pixel (default: 24)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="room.bmp",
        help="Output file path (default: room.bmp)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Seed for the random streams (default: 0)",
    )
    parser.add_argument(
        "--batch-size",
        type=_positive_int,
        default=4,
        help="Samples per progress update (default: 4)",
    )
    parser.add_argument(
        "--letters",
        action="store_true",
        help="Add the mirrored logo letters to the scene",
    )
    parser.add_argument(
        "--arch",
        choices=("cpu", "gpu"),
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args(argv)


def render_room(settings: RenderSettings) -> Path:
    """Render the room scene and save it to a file.

    Args:
        settings: Image size, sample count, seed and output path.

    Returns:
        Path to the saved image file.

    Raises:
        ImageWriteError: If the output file cannot be written.
    """
    # Lazy imports to allow Taichi initialization first
    from src.sdftrace.core.progressive import ProgressiveRenderer
    from src.sdftrace.geometry.letters import disable_letters, enable_letters
    from src.sdftrace.preview.export import save_image

    if settings.letters:
        enable_letters()
    else:
        disable_letters()

    renderer = ProgressiveRenderer(settings.width, settings.height, seed=settings.seed)

    start_time = time.time()

    def progress_callback(current: int, target: int) -> None:
        if not settings.quiet:
            elapsed = time.time() - start_time
            progress_pct = (current / target) * 100 if target > 0 else 0
            samples_per_sec = current / elapsed if elapsed > 0 else 0
            print(
                f"\r  Progress: {current}/{target} samples "
                f"({progress_pct:.1f}%) - {samples_per_sec:.1f} spp/s",
                end="",
                flush=True,
            )

    renderer.render(
        num_samples=settings.samples,
        batch_size=settings.batch_size,
        callback=progress_callback,
    )

    if not settings.quiet:
        print()  # Newline after progress

    output_file = save_image(renderer.get_image_uint8(), settings.output)

    if not settings.quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {time.time() - start_time:.2f}s")

    return output_file


def main(argv: list[str] | None = None, *, init_backend: bool = True) -> int:
    """Main entry point.

    Args:
        argv: Command-line arguments; sys.argv[1:] when omitted.
        init_backend: Initialize Taichi. Pass False when the caller has
            already initialized it.
    """
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if init_backend:
        ti.init(arch=ti.gpu if args.arch == "gpu" else ti.cpu)

    from src.sdftrace.preview.export import ImageWriteError

    settings = RenderSettings(
        width=args.width,
        height=args.height,
        samples=args.samples,
        output=args.output,
        seed=args.seed,
        batch_size=args.batch_size,
        letters=args.letters,
        quiet=args.quiet,
    )

    try:
        render_room(settings)
        return 0
    except ImageWriteError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
