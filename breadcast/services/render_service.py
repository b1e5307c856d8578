"""
Frame image rendering for Breadcast recipe cards.

Uses ReportLab graphics to draw a 764x400 card and serialize it as SVG.
"""
import base64
import logging
from typing import List, Tuple

from reportlab.graphics import renderSVG
from reportlab.graphics.shapes import Circle, Drawing, Rect, String
from reportlab.lib import colors
from reportlab.pdfbase.pdfmetrics import stringWidth

from breadcast.engine.page_builder import (
    IngredientChip,
    PageDescription,
    PageKind,
    TextFragment,
)
from breadcast.errors import RenderError

logger = logging.getLogger(__name__)


def to_data_uri(data: bytes, media_type: str) -> str:
    """Encode image bytes as a data URI usable as a frame image."""
    return f"data:{media_type};base64,{base64.b64encode(data).decode('ascii')}"


class SvgFrameRenderer:
    """
    Renders page descriptions into SVG frame images.

    Body fragments are laid out left to right and wrapped at word
    boundaries; ingredient chips are drawn as an emphasised name with the
    scaled quantity underneath.
    """

    media_type = "image/svg+xml"
    extension = "svg"

    WIDTH = 764
    HEIGHT = 400
    MARGIN = 36

    # Color palette - warm, kitchen-friendly
    BACKGROUND_COLOR = colors.HexColor("#FBF6EE")  # Cream
    TEXT_COLOR = colors.HexColor("#2B2118")  # Dark brown
    ACCENT_COLOR = colors.HexColor("#7851A9")  # Royal purple
    MUTED_COLOR = colors.HexColor("#8A8178")  # Grey

    HEADING_FONT = "Times-Bold"
    TEXT_FONT = "Helvetica"
    EMPHASIS_FONT = "Helvetica-Bold"

    def render(self, page: PageDescription) -> bytes:
        """
        Render a page description.

        Args:
            page: The page to draw.

        Returns:
            UTF-8 encoded SVG document.

        Raises:
            RenderError: If drawing or serialization fails.
        """
        try:
            drawing = self._draw(page)
            return renderSVG.drawToString(drawing).encode("utf-8")
        except Exception as e:
            logger.exception(f"Failed to render {page.kind.value} page")
            raise RenderError(page.kind.value, str(e)) from e

    def _draw(self, page: PageDescription) -> Drawing:
        drawing = Drawing(self.WIDTH, self.HEIGHT)
        drawing.add(Rect(0, 0, self.WIDTH, self.HEIGHT, fillColor=self.BACKGROUND_COLOR, strokeColor=None))

        centered = page.kind in (PageKind.COMPLETED, PageKind.MESSAGE)
        top = self.HEIGHT - self.MARGIN - 20

        if page.title:
            drawing.add(String(
                self.WIDTH / 2 if centered else self.MARGIN,
                top,
                page.title,
                fontName=self.HEADING_FONT,
                fontSize=26,
                fillColor=self.TEXT_COLOR,
                textAnchor="middle" if centered else "start",
            ))
        if page.scale_label:
            drawing.add(String(
                self.WIDTH - self.MARGIN, top, page.scale_label,
                fontName=self.EMPHASIS_FONT, fontSize=18,
                fillColor=self.ACCENT_COLOR, textAnchor="end",
            ))

        y = top - 30
        for line in (page.subtitle, page.yields):
            if line:
                drawing.add(String(
                    self.MARGIN, y, line,
                    fontName=self.TEXT_FONT, fontSize=14, fillColor=self.MUTED_COLOR,
                ))
                y -= 20

        if page.kind == PageKind.INGREDIENTS:
            self._draw_ingredient_rows(drawing, page, y - 16)
        else:
            self._draw_flow(drawing, page, y - 24, centered)

        if page.total_pages > 1:
            self._draw_page_indicator(drawing, page.current_page, page.total_pages)
        return drawing

    def _draw_ingredient_rows(self, drawing: Drawing, page: PageDescription, y: float) -> None:
        split_x = self.WIDTH * 0.38
        for fragment in page.body:
            if not isinstance(fragment, IngredientChip):
                continue
            drawing.add(String(
                split_x, y, f"{fragment.quantity_text} {fragment.unit}".strip(),
                fontName=self.EMPHASIS_FONT, fontSize=18,
                fillColor=self.ACCENT_COLOR, textAnchor="end",
            ))
            drawing.add(String(
                split_x + 20, y, fragment.name,
                fontName=self.TEXT_FONT, fontSize=18, fillColor=self.TEXT_COLOR,
            ))
            y -= 40

    def _fragment_size(self, fragment) -> Tuple[float, List[Tuple[str, str, float, colors.Color, float]]]:
        """Width of a fragment and the text runs (text, font, size, color, dy) drawing it."""
        if isinstance(fragment, TextFragment):
            width = stringWidth(fragment.text, self.TEXT_FONT, 20)
            return width, [(fragment.text, self.TEXT_FONT, 20, self.TEXT_COLOR, 0)]
        quantity = f"{fragment.quantity_text} {fragment.unit}".strip()
        width = max(
            stringWidth(fragment.name, self.EMPHASIS_FONT, 20),
            stringWidth(quantity, self.TEXT_FONT, 13),
        )
        return width, [
            (fragment.name, self.EMPHASIS_FONT, 20, self.ACCENT_COLOR, 0),
            (quantity, self.TEXT_FONT, 13, self.MUTED_COLOR, -16),
        ]

    def _draw_flow(self, drawing: Drawing, page: PageDescription, y: float, centered: bool) -> None:
        space = stringWidth(" ", self.TEXT_FONT, 20)
        max_width = self.WIDTH - 2 * self.MARGIN
        lines: List[List] = [[]]
        line_width = 0.0

        for fragment in page.body:
            width, runs = self._fragment_size(fragment)
            if lines[-1] and line_width + space + width > max_width:
                lines.append([])
                line_width = 0.0
            if lines[-1]:
                line_width += space
            lines[-1].append((line_width, width, runs))
            line_width += width

        line_height = 44 if any(isinstance(f, IngredientChip) for f in page.body) else 28
        for line in lines:
            if not line:
                continue
            total = line[-1][0] + line[-1][1]
            offset = (self.WIDTH - total) / 2 if centered else self.MARGIN
            for x, width, runs in line:
                for text, font, size, color, dy in runs:
                    drawing.add(String(
                        offset + x + width / 2, y + dy, text,
                        fontName=font, fontSize=size, fillColor=color, textAnchor="middle",
                    ))
            y -= line_height

    def _draw_page_indicator(self, drawing: Drawing, current_page: int, total_pages: int) -> None:
        spacing = 20
        start = self.WIDTH / 2 - spacing * (total_pages - 1) / 2
        for index in range(total_pages):
            color = self.ACCENT_COLOR if index == current_page - 1 else self.MUTED_COLOR
            drawing.add(Circle(start + index * spacing, 24, 5, fillColor=color, strokeColor=None))
