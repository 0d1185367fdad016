"""
Standardized Cameroonian official header.

Every official document (bulletin, master sheet) opens with the same three
column block:

    RÉPUBLIQUE DU CAMEROUN        [LOGO]          DOCUMENT OFFICIEL
    Paix - Travail - Patrie    SCHOOL NAME        Généré le: 12/10/2025
    MINISTÈRE ...              Tél: ...           Version: 2025.1
    DÉLÉGATION RÉGIONALE ...   B.P. ...           educafric.com
    DÉLÉGATION DÉPARTEMENTALE  email
    ───────────────────────────────────────────────────────────────

Missing school data is replaced by defaults, and a failure while drawing
falls back to a safe cursor position instead of aborting the document.
"""

from datetime import datetime
from typing import Any, Callable, Mapping, Optional, Union

from reportlab.lib.colors import Color

from educafric.config import settings
from educafric.logging import DocumentLogger, get_logger
from educafric.schemas.documents import HeaderData
from educafric.services.grading import BLACK
from educafric.services.pdf_primitives import PdfCanvas

HEADER_DEFAULTS = {
    "school_name": "ÉTABLISSEMENT SCOLAIRE",
    "region": "CENTRE",
    "department": "MFOUNDI",
    "education_level": "secondary",
    "phone": "+237 222 345 678",
    "email": "contact@educafric.com",
    "postal_box": "B.P. 8524 Yaoundé",
}

MINISTRY_BASE = "MINISTÈRE DE L'ÉDUCATION DE BASE"
MINISTRY_SECONDARY = "MINISTÈRE DES ENSEIGNEMENTS SECONDAIRES"

HEADER_MARGIN = 30
LOGO_SIZE = 25
# Returned when drawing fails, measured from the top of the page
FALLBACK_OFFSET = 100

MUTED = Color(0.4, 0.4, 0.4)
LOGO_GRAY = Color(0.6, 0.6, 0.6)


def ministry_for(education_level: Optional[str]) -> str:
    return MINISTRY_BASE if education_level == "base" else MINISTRY_SECONDARY


def resolve_header_data(
    header_data: Union[HeaderData, Mapping[str, Any], None],
) -> HeaderData:
    """Fill every missing or empty header field with its default."""
    if header_data is None:
        header_data = HeaderData()
    elif not isinstance(header_data, HeaderData):
        header_data = HeaderData.model_validate(header_data)

    values = header_data.model_dump()
    for key, default in HEADER_DEFAULTS.items():
        if not values.get(key):
            values[key] = default
    return HeaderData(**values)


def render_header(
    page: PdfCanvas,
    draw_text: Callable[..., None],
    bold_font: str,
    normal_font: str,
    page_width: float,
    page_height: float,
    header_data: Union[HeaderData, Mapping[str, Any], None] = None,
    logger: Optional[DocumentLogger] = None,
) -> float:
    """Draw the official header and return the Y where content may continue.

    The returned Y is below the separator line. If anything goes wrong the
    error is logged and ``page_height - 100`` is returned.
    """
    log = logger or get_logger(__name__)
    try:
        header = resolve_header_data(header_data)

        margin = HEADER_MARGIN
        y_position = page_height - 40

        left_x = margin
        center_x = page_width / 2
        right_x = page_width - margin - 150

        regional = f"DÉLÉGATION RÉGIONALE DU {header.region.upper()}"
        departmental = f"DÉLÉGATION DÉPARTEMENTALE DU {header.department.upper()}"

        # --- Left column: country and ministry boilerplate ---
        draw_text("RÉPUBLIQUE DU CAMEROUN", left_x, y_position, font=bold_font, size=10)
        draw_text("Paix - Travail - Patrie", left_x, y_position - 18, font=normal_font, size=8)
        draw_text(ministry_for(header.education_level), left_x, y_position - 32,
                  font=bold_font, size=8)
        draw_text(regional, left_x, y_position - 46, font=normal_font, size=7)
        draw_text(departmental, left_x, y_position - 58, font=normal_font, size=7)

        # --- Right column: document metadata ---
        generated_on = datetime.now().strftime("%d/%m/%Y")
        draw_text("DOCUMENT OFFICIEL", right_x, y_position, font=bold_font, size=8)
        draw_text(f"Généré le: {generated_on}", right_x, y_position - 18,
                  font=normal_font, size=7)
        draw_text(f"Version: {settings.DOCUMENT_VERSION}", right_x, y_position - 32,
                  font=normal_font, size=7)
        draw_text(settings.SITE_URL, right_x, y_position - 46,
                  font=normal_font, size=6, color=MUTED)

        # --- Center column: logo placeholder, school name, contacts ---
        logo_x = center_x - LOGO_SIZE / 2
        logo_y = y_position - 5
        page.draw_rect(logo_x, logo_y, LOGO_SIZE, LOGO_SIZE, border=LOGO_GRAY, border_width=1)
        draw_text("LOGO", center_x, logo_y + 15, font=normal_font, size=6,
                  color=LOGO_GRAY, align="center")
        draw_text("ÉCOLE", center_x, logo_y + 8, font=normal_font, size=6,
                  color=LOGO_GRAY, align="center")

        draw_text(header.school_name.upper(), center_x, logo_y - 15,
                  font=bold_font, size=9, align="center")

        contact_y = logo_y - 26
        draw_text(f"Tél: {header.phone}", center_x, contact_y,
                  font=normal_font, size=6, align="center")
        contact_y -= 8
        draw_text(header.postal_box, center_x, contact_y,
                  font=normal_font, size=6, align="center")
        contact_y -= 7
        draw_text(header.email, center_x, contact_y,
                  font=normal_font, size=5, align="center")
        contact_y -= 6

        separator_y = min(y_position - 70, contact_y - 10)
        page.draw_line(margin, separator_y, page_width - margin, separator_y,
                       thickness=1, color=BLACK)

        return separator_y - 10

    except Exception as e:
        log.error("pdf.header_failed", error=str(e))
        return page_height - FALLBACK_OFFSET
