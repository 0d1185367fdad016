"""
Bulletin (report card) download API.

1. POST /bulletins/pdf — Render a bulletin from the posted template data
2. GET /bulletins/sample/pdf — Render the demonstration bulletin

The body of POST /bulletins/pdf is deliberately loose (any JSON value):
validation happens in the generator so the configured policy decides
whether bad data yields a 422 or the demonstration document.
"""

from typing import Any

from fastapi import APIRouter, Body, HTTPException

from educafric.config import settings
from educafric.routers.responses import pdf_attachment, safe_filename
from educafric.services.bulletin_pdf import BulletinGenerator
from educafric.services.validation import TemplateValidationError

router = APIRouter(prefix="/api/v1/bulletins", tags=["bulletins"])


def _generator() -> BulletinGenerator:
    return BulletinGenerator(
        use_supplied_grades=settings.BULLETIN_USE_SUPPLIED_GRADES,
        on_validation_error=settings.BULLETIN_ON_VALIDATION_ERROR,
    )


def _filename(bulletin_data: Any) -> str:
    if not isinstance(bulletin_data, dict):
        return "bulletin.pdf"
    student = bulletin_data.get("student") or {}
    if not isinstance(student, dict):
        return "bulletin.pdf"
    last_name = safe_filename(str(student.get("lastName") or student.get("last_name") or ""))
    if not last_name:
        return "bulletin.pdf"
    return f"bulletin_{last_name}.pdf"


@router.post("/pdf")
async def generate_bulletin_pdf(
    bulletin_data: Any = Body(default=None),
):
    """Render a bulletin PDF.

    Invalid data renders the demonstration bulletin, unless
    BULLETIN_ON_VALIDATION_ERROR is "reject" (then 422).
    """
    try:
        pdf_bytes = _generator().generate_bulletin(bulletin_data)
    except TemplateValidationError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return pdf_attachment(pdf_bytes, _filename(bulletin_data))


@router.get("/sample/pdf")
async def download_sample_bulletin():
    """Demonstration bulletin with the built-in student and grades."""
    pdf_bytes = _generator().generate_bulletin(None)
    return pdf_attachment(pdf_bytes, "bulletin_sample.pdf")
