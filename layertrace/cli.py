"""Command-line interface for layertrace."""
import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from layertrace.pipeline import Pipeline
from layertrace.types import PipelineConfig, VectorizationError


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog="layertrace",
        description="Trace raster images into layered color SVG shapes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  layertrace bird.png
  layertrace bird.png -o bird.svg --colors 8 --scale 1
  layertrace logo.png --bounded-passes 2 --seed 7 --verbose
        """,
    )

    parser.add_argument("input", help="Input image file path")

    parser.add_argument(
        "-o",
        "--output",
        default=None,
        help="Output SVG file path (default: input name with .svg extension)",
    )

    parser.add_argument(
        "--scale",
        type=float,
        default=2.0,
        help="Upscale factor applied before tracing (default: 2.0)",
    )

    parser.add_argument(
        "--colors",
        "-c",
        type=int,
        default=16,
        help="Number of colors for quantization (default: 16)",
    )

    parser.add_argument(
        "--min-area",
        type=float,
        default=10.0,
        help="Minimum shape area in pixels (default: 10)",
    )

    parser.add_argument(
        "--smooth",
        type=int,
        default=1,
        help="Smoothing iterations per contour (default: 1)",
    )

    parser.add_argument(
        "--epsilon",
        "-e",
        type=float,
        default=1.0,
        help="Simplification tolerance in pixels (default: 1.0)",
    )

    parser.add_argument(
        "--unconditional-passes",
        type=int,
        default=1,
        help="Dilation passes that ignore transparency (default: 1)",
    )

    parser.add_argument(
        "--bounded-passes",
        type=int,
        default=1,
        help="Dilation passes limited to visible pixels (default: 1)",
    )

    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for color clustering (default: random)",
    )

    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Worker processes for per-layer tracing (default: 1)",
    )

    parser.add_argument(
        "--precision",
        type=int,
        default=2,
        help="Decimal places for SVG coordinates (default: 2)",
    )

    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Log per-layer diagnostics"
    )

    return parser


def main(args: Optional[list] = None) -> int:
    """Main entry point for CLI.

    Args:
        args: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, 1 for error)
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    logging.basicConfig(
        level=logging.DEBUG if parsed.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    input_path = Path(parsed.input)
    if parsed.output:
        output_path = Path(parsed.output)
    else:
        output_path = input_path.with_suffix(".svg")

    output_path.parent.mkdir(parents=True, exist_ok=True)

    try:
        config = PipelineConfig(
            scale=parsed.scale,
            n_colors=parsed.colors,
            min_area=parsed.min_area,
            smoothing_iterations=parsed.smooth,
            simplify_tolerance=parsed.epsilon,
            unconditional_passes=parsed.unconditional_passes,
            bounded_passes=parsed.bounded_passes,
            random_state=parsed.seed,
            workers=parsed.workers,
            precision=parsed.precision,
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Processing: {input_path}")
    print(f"  Colors: {config.n_colors}")
    print(f"  Scale: {config.scale}")
    print(f"  Dilation: {config.unconditional_passes} unconditional + {config.bounded_passes} bounded")

    try:
        Pipeline(config).process(input_path, output_path)
    except (FileNotFoundError, VectorizationError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"  Output saved: {output_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
