"""SVG export for vectorized shape lists."""
from pathlib import Path
from typing import List, Union

from layertrace.types import Color, Shape, SVGError


def format_color(color: Color) -> str:
    """
    Format an RGB color as an SVG rgb() value.

    Args:
        color: (r, g, b) tuple with values in [0, 255]

    Returns:
        Color string such as "rgb(255,128,0)"
    """
    r, g, b = (int(min(255, max(0, c))) for c in color)
    return f"rgb({r},{g},{b})"


def format_number(x: float, precision: int) -> str:
    """
    Format number with given precision.

    Args:
        x: Number to format
        precision: Decimal places

    Returns:
        Formatted string
    """
    formatted = f"{x:.{precision}f}"
    # Remove trailing zeros and decimal point if not needed
    if '.' in formatted:
        formatted = formatted.rstrip('0').rstrip('.')
    if formatted == '-0':
        formatted = '0'
    return formatted


def shape_to_path_data(shape: Shape, precision: int = 2) -> str:
    """
    Build the path data for one shape.

    Moves to the first curve's start, emits one absolute cubic command per
    curve (control points p1, p2, then end point p3) and closes the path.

    Returns:
        Path data string, empty if the shape has no curves
    """
    if not shape.curves:
        return ""

    fmt = lambda v: format_number(v, precision)

    start = shape.curves[0].p0
    commands = [f"M {fmt(start.x)} {fmt(start.y)}"]
    for curve in shape.curves:
        commands.append(
            f"C {fmt(curve.p1.x)} {fmt(curve.p1.y)} "
            f"{fmt(curve.p2.x)} {fmt(curve.p2.y)} "
            f"{fmt(curve.p3.x)} {fmt(curve.p3.y)}"
        )
    commands.append("Z")
    return ' '.join(commands)


def shapes_to_svg(
    shapes: List[Shape],
    width: int,
    height: int,
    precision: int = 2
) -> str:
    """
    Render shapes into an SVG document, in list order.

    Shapes without curves contribute nothing and are skipped. An empty list
    yields a valid empty document.

    Args:
        shapes: Ordered shapes (largest first)
        width: Image width
        height: Image height
        precision: Decimal places for coordinates

    Returns:
        Complete SVG string

    Raises:
        SVGError: If width or height is not positive
    """
    if width <= 0 or height <= 0:
        raise SVGError(f"SVG dimensions must be positive, got {width}x{height}")

    path_elements = []
    for shape in shapes:
        path_data = shape_to_path_data(shape, precision)
        if not path_data:
            continue
        path_elements.append(
            f'  <path d="{path_data}" fill="{format_color(shape.fill_color)}" stroke="none"/>'
        )

    lines = [
        f'<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 {width} {height}" '
        f'width="{width}" height="{height}">'
    ]
    lines.extend(path_elements)
    lines.append('</svg>')
    return '\n'.join(lines) + '\n'


def save_svg(svg_string: str, output_path: Union[str, Path]) -> None:
    """
    Save SVG string to file.

    Args:
        svg_string: SVG content
        output_path: Output file path
    """
    with open(output_path, 'w', encoding='utf-8') as f:
        f.write(svg_string)
