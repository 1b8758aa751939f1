"""
Drawing surfaces for the map renderer.

The renderer only needs an immediate-mode 2D API: filled/stroked circles,
lines, polygons, rectangles and aligned text. ``Surface`` is that interface.

Two implementations:
- SvgSurface: collects SVG elements; the result is pushed into the
  ``content`` layer of a NiceGUI ``ui.interactive_image``.
- RecordingSurface: keeps the sequence of draw calls. Used by tests.
"""

from html import escape
from typing import Any, Dict, List, Literal, Protocol, Sequence, Tuple, runtime_checkable

Point = Tuple[float, float]
TextAlign = Literal['left', 'center']


@runtime_checkable
class Surface(Protocol):
    """Immediate-mode drawing target. Coordinates are screen pixels."""

    def clear(self) -> None:
        """Erase everything drawn so far."""
        ...

    def fill_circle(self, center: Point, radius: float, color: str) -> None:
        ...

    def stroke_circle(self, center: Point, radius: float, color: str, width: float) -> None:
        ...

    def line(self, start: Point, end: Point, color: str, width: float) -> None:
        ...

    def fill_polygon(self, points: Sequence[Point], color: str) -> None:
        ...

    def fill_rect(self, top_left: Point, width: float, height: float, color: str) -> None:
        ...

    def stroke_rect(self, top_left: Point, width: float, height: float, color: str, line_width: float) -> None:
        ...

    def text(self, position: Point, content: str, color: str, font_size: float,
             align: TextAlign = 'center') -> None:
        """Draw text vertically centered on ``position``."""
        ...


def _num(value: float) -> str:
    return f"{value:.2f}".rstrip('0').rstrip('.')


def _attr(value: str) -> str:
    """Attribute values (colors, fonts) come from user input."""
    return escape(str(value), quote=True)


class SvgSurface:
    """
    Builds SVG markup for a canvas of fixed size.

    ``to_svg()`` returns the inner elements only (no ``<svg>`` wrapper) since
    NiceGUI wraps interactive_image content in its own viewport-sized svg.
    """

    def __init__(self, width: int, height: int, background: str = '#0f172a', font_family: str = 'Arial'):
        self.width = width
        self.height = height
        self.background = background
        self.font_family = font_family
        self._elements: List[str] = []

    def clear(self) -> None:
        self._elements = [
            f'<rect x="0" y="0" width="{self.width}" height="{self.height}" fill="{_attr(self.background)}" />'
        ]

    def fill_circle(self, center: Point, radius: float, color: str) -> None:
        self._elements.append(
            f'<circle cx="{_num(center[0])}" cy="{_num(center[1])}" r="{_num(radius)}" fill="{_attr(color)}" />'
        )

    def stroke_circle(self, center: Point, radius: float, color: str, width: float) -> None:
        self._elements.append(
            f'<circle cx="{_num(center[0])}" cy="{_num(center[1])}" r="{_num(radius)}" '
            f'fill="none" stroke="{_attr(color)}" stroke-width="{_num(width)}" />'
        )

    def line(self, start: Point, end: Point, color: str, width: float) -> None:
        self._elements.append(
            f'<line x1="{_num(start[0])}" y1="{_num(start[1])}" x2="{_num(end[0])}" y2="{_num(end[1])}" '
            f'stroke="{_attr(color)}" stroke-width="{_num(width)}" />'
        )

    def fill_polygon(self, points: Sequence[Point], color: str) -> None:
        pts = ' '.join(f"{_num(x)},{_num(y)}" for x, y in points)
        self._elements.append(f'<polygon points="{pts}" fill="{_attr(color)}" />')

    def fill_rect(self, top_left: Point, width: float, height: float, color: str) -> None:
        self._elements.append(
            f'<rect x="{_num(top_left[0])}" y="{_num(top_left[1])}" width="{_num(width)}" '
            f'height="{_num(height)}" fill="{_attr(color)}" />'
        )

    def stroke_rect(self, top_left: Point, width: float, height: float, color: str, line_width: float) -> None:
        self._elements.append(
            f'<rect x="{_num(top_left[0])}" y="{_num(top_left[1])}" width="{_num(width)}" '
            f'height="{_num(height)}" fill="none" stroke="{_attr(color)}" stroke-width="{_num(line_width)}" />'
        )

    def text(self, position: Point, content: str, color: str, font_size: float,
             align: TextAlign = 'center') -> None:
        anchor = 'middle' if align == 'center' else 'start'
        self._elements.append(
            f'<text x="{_num(position[0])}" y="{_num(position[1])}" fill="{_attr(color)}" '
            f'font-size="{_num(font_size)}" font-family="{_attr(self.font_family)}" '
            f'text-anchor="{anchor}" dominant-baseline="middle">{escape(content)}</text>'
        )

    def to_svg(self) -> str:
        return '\n'.join(self._elements)


class RecordingSurface:
    """Records draw calls as ``(operation, arguments)`` pairs."""

    def __init__(self):
        self.calls: List[Tuple[str, Dict[str, Any]]] = []

    def _record(self, op: str, **kwargs):
        self.calls.append((op, kwargs))

    def clear(self) -> None:
        self.calls = []
        self._record('clear')

    def fill_circle(self, center, radius, color):
        self._record('fill_circle', center=center, radius=radius, color=color)

    def stroke_circle(self, center, radius, color, width):
        self._record('stroke_circle', center=center, radius=radius, color=color, width=width)

    def line(self, start, end, color, width):
        self._record('line', start=start, end=end, color=color, width=width)

    def fill_polygon(self, points, color):
        self._record('fill_polygon', points=list(points), color=color)

    def fill_rect(self, top_left, width, height, color):
        self._record('fill_rect', top_left=top_left, width=width, height=height, color=color)

    def stroke_rect(self, top_left, width, height, color, line_width):
        self._record('stroke_rect', top_left=top_left, width=width, height=height,
                     color=color, line_width=line_width)

    def text(self, position, content, color, font_size, align='center'):
        self._record('text', position=position, content=content, color=color,
                     font_size=font_size, align=align)

    def ops(self) -> List[str]:
        return [op for op, _ in self.calls]

    def calls_of(self, op: str) -> List[Dict[str, Any]]:
        return [args for name, args in self.calls if name == op]
