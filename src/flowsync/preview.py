"""
Shape preview images for shape pickers.

Renders a small thumbnail of each entry in the shape table with Pillow, so a
picker can show what ``node((text))`` or ``node[/text/]`` will look like
before the shape is dropped into a diagram.
"""

import math
import os
from pathlib import Path
from typing import List, Optional, Tuple, Union

from PIL import Image, ImageDraw, ImageFont

from .shapes import Shape, ShapeSymbol, shape_catalogue, symbol_for

Color = Tuple[int, int, int]


class ShapePreviewRenderer:
    """Draws shape thumbnails as PNG-ready Pillow images."""

    def __init__(
        self,
        size: int = 64,
        scale: int = 2,
        padding: int = 6,
        font_size: int = 10,
        font_path: Optional[str] = None,
        label: str = "Node",
        fill: Color = (237, 233, 254),
        outline: Color = (107, 114, 128),
    ):
        """
        Initialize the preview renderer.

        Args:
            size: Thumbnail edge length in points.
            scale: Resolution multiplier for crisp output.
            padding: Space between the shape and the image border.
            font_size: Label font size in points.
            font_path: Optional TrueType font for the label.
            label: Text drawn inside each shape.
            fill: Shape fill color.
            outline: Shape outline color.
        """
        self.size = size
        self.scale = scale
        self.padding = padding
        self.font_size = font_size
        self.font_path = font_path
        self.label = label

        # Colors
        self.bg_color: Color = (255, 255, 255)
        self.fill = fill
        self.outline = outline
        self.text_color: Color = (31, 41, 55)

        self.font = None

    def _get_font(self) -> ImageFont.ImageFont:
        """Get a font for the label."""
        if self.font is not None:
            return self.font

        font_size = self.font_size * self.scale
        font_options = [
            "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
            "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
            "/System/Library/Fonts/Helvetica.ttc",
            "C:/Windows/Fonts/arial.ttf",
        ]
        if self.font_path:
            font_options.insert(0, self.font_path)

        for path in font_options:
            if os.path.exists(path):
                try:
                    self.font = ImageFont.truetype(path, font_size)
                    return self.font
                except OSError:
                    continue

        self.font = ImageFont.load_default()
        return self.font

    def render(self, shape: Union[Shape, str]) -> Image.Image:
        """
        Render one shape thumbnail.

        Raises:
            UnknownShapeError: If the shape is not registered.
        """
        entry = symbol_for(shape)
        edge = self.size * self.scale
        img = Image.new("RGB", (edge, edge), self.bg_color)
        draw = ImageDraw.Draw(img)

        pad = self.padding * self.scale
        box = (pad, pad + edge // 6, edge - pad, edge - pad - edge // 6)
        if entry.shape in (Shape.CIRCLE, Shape.DOUBLE_CIRCLE):
            box = (pad, pad, edge - pad, edge - pad)
        self._draw_shape(draw, entry, box)

        font = self._get_font()
        bbox = draw.textbbox((0, 0), self.label, font=font)
        text_w, text_h = bbox[2] - bbox[0], bbox[3] - bbox[1]
        draw.text(
            ((edge - text_w) / 2 - bbox[0], (edge - text_h) / 2 - bbox[1]),
            self.label,
            font=font,
            fill=self.text_color,
        )
        return img

    def render_palette(self, columns: int = 7) -> Image.Image:
        """All shapes in picker order, laid out on a grid."""
        entries = shape_catalogue()
        edge = self.size * self.scale
        rows = math.ceil(len(entries) / columns)
        sheet = Image.new("RGB", (edge * columns, edge * rows), self.bg_color)
        for index, entry in enumerate(entries):
            row, col = divmod(index, columns)
            sheet.paste(self.render(entry.shape), (col * edge, row * edge))
        return sheet

    def save_palette(self, filename: str, columns: int = 7) -> str:
        """Save the palette sheet as PNG and return the path."""
        output_path = Path(filename)
        self.render_palette(columns).save(output_path, "PNG")
        return str(output_path)

    def _draw_shape(
        self, draw: ImageDraw.ImageDraw, entry: ShapeSymbol, box: Tuple[int, int, int, int]
    ) -> None:
        x0, y0, x1, y1 = box
        w, h = x1 - x0, y1 - y0
        width = max(1, self.scale)
        style = {"fill": self.fill, "outline": self.outline, "width": width}
        slant = w // 5
        shape = entry.shape

        if shape is Shape.RECTANGLE:
            draw.rectangle(box, **style)
        elif shape is Shape.ROUNDED:
            draw.rounded_rectangle(box, radius=h // 4, **style)
        elif shape is Shape.STADIUM:
            draw.rounded_rectangle(box, radius=h // 2, **style)
        elif shape is Shape.SUBROUTINE:
            draw.rectangle(box, **style)
            inset = w // 10
            draw.line([(x0 + inset, y0), (x0 + inset, y1)], fill=self.outline, width=width)
            draw.line([(x1 - inset, y0), (x1 - inset, y1)], fill=self.outline, width=width)
        elif shape is Shape.CYLINDER:
            cap = h // 4
            draw.rectangle((x0, y0 + cap // 2, x1, y1 - cap // 2), fill=self.fill)
            draw.line([(x0, y0 + cap // 2), (x0, y1 - cap // 2)], fill=self.outline, width=width)
            draw.line([(x1, y0 + cap // 2), (x1, y1 - cap // 2)], fill=self.outline, width=width)
            draw.ellipse((x0, y1 - cap, x1, y1), **style)
            draw.ellipse((x0, y0, x1, y0 + cap), **style)
        elif shape is Shape.CIRCLE:
            draw.ellipse(box, **style)
        elif shape is Shape.DOUBLE_CIRCLE:
            gap = 3 * self.scale
            draw.ellipse(box, **style)
            draw.ellipse((x0 + gap, y0 + gap, x1 - gap, y1 - gap), **style)
        else:
            draw.polygon(self._polygon(shape, box, slant), **style)

    def _polygon(
        self, shape: Shape, box: Tuple[int, int, int, int], slant: int
    ) -> List[Tuple[int, int]]:
        x0, y0, x1, y1 = box
        mid_x, mid_y = (x0 + x1) // 2, (y0 + y1) // 2
        if shape is Shape.ASYMMETRIC:
            return [(x0, y0), (x1, y0), (x1, y1), (x0, y1), (x0 + slant, mid_y)]
        if shape is Shape.RHOMBUS:
            return [(mid_x, y0), (x1, mid_y), (mid_x, y1), (x0, mid_y)]
        if shape is Shape.HEXAGON:
            return [
                (x0 + slant, y0),
                (x1 - slant, y0),
                (x1, mid_y),
                (x1 - slant, y1),
                (x0 + slant, y1),
                (x0, mid_y),
            ]
        if shape is Shape.PARALLELOGRAM:
            return [(x0 + slant, y0), (x1, y0), (x1 - slant, y1), (x0, y1)]
        if shape is Shape.PARALLELOGRAM_ALT:
            return [(x0, y0), (x1 - slant, y0), (x1, y1), (x0 + slant, y1)]
        if shape is Shape.TRAPEZOID:
            return [(x0 + slant, y0), (x1 - slant, y0), (x1, y1), (x0, y1)]
        if shape is Shape.TRAPEZOID_ALT:
            return [(x0, y0), (x1, y0), (x1 - slant, y1), (x0 + slant, y1)]
        raise ValueError(f"{shape} is not drawn as a polygon")


def render_shape_preview(shape: Union[Shape, str], size: int = 64) -> Image.Image:
    """Convenience function to render a single shape thumbnail."""
    return ShapePreviewRenderer(size=size).render(shape)
