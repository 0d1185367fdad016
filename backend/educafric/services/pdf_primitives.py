"""
Coordinate-safe drawing primitives on top of the ReportLab canvas.

Official documents are laid out with absolute coordinates (ReportLab's
pdfgen canvas, origin at the bottom-left corner) rather than Platypus
flowables: the ministry header and the grade grids have fixed positions.

Everything drawn here comes from user-entered data (names, grades,
comments), so the primitives never raise. Empty text is skipped, long text
is cut, coordinates are clamped into the page, and a drawing failure is
logged and skipped so one bad value cannot sink the whole document.
"""

import math
from io import BytesIO
from typing import Any, Optional

from reportlab.lib.colors import Color
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas as rl_canvas

from educafric.logging import DocumentLogger, get_logger
from educafric.services.grading import BLACK


# Standard PDF base fonts (no embedding needed)
TIMES = "Times-Roman"
TIMES_BOLD = "Times-Bold"
HELVETICA = "Helvetica"
HELVETICA_BOLD = "Helvetica-Bold"

MAX_TEXT_LENGTH = 200
CLIP_SUFFIX = ".."
# Keep text at least this far from the top/right page edge
EDGE_GUARD = 10

# Uncompressed page streams and no object streams: larger files, but they
# open in every PDF reader schools use.
PDF_SAVE_OPTIONS = {"pageCompression": 0}


def _coordinate(value: Any) -> float:
    """Non-numeric or NaN coordinates become 0."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return 0.0 if math.isnan(number) else number


class PdfCanvas:
    """One PDF document being drawn page by page.

    Usage:
        pdf = PdfCanvas(A4, title="Bulletin")
        pdf.draw_text("BULLETIN DE NOTES", 0, 700, font=TIMES_BOLD, size=16,
                      align="center", max_width=pdf.width)
        pdf_bytes = pdf.save()
    """

    def __init__(
        self,
        pagesize: tuple[float, float],
        title: Optional[str] = None,
        author: str = "EDUCAFRIC",
        default_font: str = TIMES,
        logger: Optional[DocumentLogger] = None,
    ):
        self._buffer = BytesIO()
        self.canvas = rl_canvas.Canvas(
            self._buffer,
            pagesize=pagesize,
            **PDF_SAVE_OPTIONS,
        )
        if title:
            self.canvas.setTitle(title)
        self.canvas.setAuthor(author)
        self.canvas.setCreator(author)

        self.width, self.height = pagesize
        self.default_font = default_font
        self.page_count = 1
        self.logger = logger or get_logger(__name__)

    # ------------------------------------------------------------------
    # TEXT
    # ------------------------------------------------------------------

    def text_width(self, text: str, font: str, size: float) -> float:
        return stringWidth(text, font, size)

    def draw_text(
        self,
        value: Any,
        x: Any,
        y: Any,
        font: Optional[str] = None,
        size: float = 10,
        color: Color = BLACK,
        align: str = "left",
        max_width: Optional[float] = None,
    ) -> None:
        """Draw ``value`` at (x, y). Never raises.

        Alignment:
        - center + max_width: centred inside [x, x + max_width]
        - center alone: centred on x
        - right + max_width: right edge at x + max_width
        - right alone: right edge at x
        """
        try:
            text = "" if value is None else str(value)
            text = text[:MAX_TEXT_LENGTH]
            if not text:
                return

            font = font or self.default_font
            if max_width is not None and max_width > 0:
                text = self._clip(text, font, size, max_width)
                if not text:
                    return

            final_x = _coordinate(x)
            if align in ("center", "right"):
                text_w = self.text_width(text, font, size)
                if align == "center":
                    final_x = final_x + (max_width - text_w) / 2 if max_width else final_x - text_w / 2
                else:
                    final_x = final_x + max_width - text_w if max_width else final_x - text_w

            safe_x = max(0.0, min(self.width - EDGE_GUARD, final_x))
            safe_y = max(0.0, min(self.height - EDGE_GUARD, _coordinate(y)))

            self.canvas.setFont(font, size)
            self.canvas.setFillColor(color)
            self.canvas.drawString(safe_x, safe_y, text)
        except Exception as e:
            self.logger.warning("pdf.draw_text_failed", error=str(e))

    def _clip(self, text: str, font: str, size: float, max_width: float) -> str:
        """Shorten ``text`` with a ``..`` suffix until it fits ``max_width``."""
        if self.text_width(text, font, size) <= max_width:
            return text
        while text and self.text_width(text + CLIP_SUFFIX, font, size) > max_width:
            text = text[:-1]
        return text + CLIP_SUFFIX if text else ""

    # ------------------------------------------------------------------
    # SHAPES
    # ------------------------------------------------------------------

    def draw_rect(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        fill: Optional[Color] = None,
        border: Optional[Color] = None,
        border_width: float = 0,
    ) -> None:
        """Filled and/or bordered rectangle, (x, y) is the bottom-left corner."""
        try:
            stroke = bool(border is not None and border_width > 0)
            c = self.canvas
            c.saveState()
            if fill is not None:
                c.setFillColor(fill)
            if stroke:
                c.setStrokeColor(border)
                c.setLineWidth(border_width)
            c.rect(
                _coordinate(x), _coordinate(y), _coordinate(width), _coordinate(height),
                stroke=int(stroke), fill=int(fill is not None),
            )
            c.restoreState()
        except Exception as e:
            self.logger.warning("pdf.draw_rect_failed", error=str(e))

    def draw_line(
        self,
        x1: float,
        y1: float,
        x2: float,
        y2: float,
        thickness: float = 1,
        color: Color = BLACK,
    ) -> None:
        try:
            c = self.canvas
            c.saveState()
            c.setStrokeColor(color)
            c.setLineWidth(thickness)
            c.line(_coordinate(x1), _coordinate(y1), _coordinate(x2), _coordinate(y2))
            c.restoreState()
        except Exception as e:
            self.logger.warning("pdf.draw_line_failed", error=str(e))

    # ------------------------------------------------------------------
    # DOCUMENT
    # ------------------------------------------------------------------

    def new_page(self) -> None:
        """Close the current page and start another of the same size."""
        self.canvas.showPage()
        self.page_count += 1

    def save(self) -> bytes:
        """Finish the document and return the PDF bytes.

        Errors here are unrecoverable and propagate to the caller.
        """
        self.canvas.save()
        return self._buffer.getvalue()
