"""
Master sheet API.

1. POST /master-sheets/generate — Render a class master sheet
2. POST /master-sheets/demo — Render the demonstration class
3. GET /master-sheets/templates — Available rendering options

A request may reference a stored school (schoolId); its directory entry
then replaces the inline school block in the header.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from educafric.config import settings
from educafric.database import get_db
from educafric.routers.responses import pdf_attachment, safe_filename
from educafric.schemas.documents import MasterSheetOptions
from educafric.schemas.master_sheets import (
    MasterSheetDemoRequest,
    MasterSheetGenerateRequest,
)
from educafric.services.grading import COLOR_SCHEMES, GRADING_SCALES
from educafric.services.master_sheet_pdf import (
    MasterSheetGenerator,
    MasterSheetOverflowError,
)
from educafric.services.schools import get_school, school_to_info
from educafric.services.validation import TemplateValidationError

router = APIRouter(prefix="/api/v1/master-sheets", tags=["master-sheets"])


@router.post("/generate")
async def generate_master_sheet(
    request: MasterSheetGenerateRequest,
    db: AsyncSession = Depends(get_db),
):
    """Render the master sheet for one class.

    Returns 404 if schoolId is unknown, 422 if the rows don't fit and the
    overflow policy is "error".
    """
    data = request.data
    if request.school_id is not None:
        school = await get_school(db, request.school_id)
        if not school:
            raise HTTPException(status_code=404, detail="School not found")
        data = data.model_copy(update={"school_info": school_to_info(school)})

    options = request.options
    if "overflow" not in options.model_fields_set:
        options = options.model_copy(update={"overflow": settings.MASTER_SHEET_OVERFLOW})

    try:
        pdf_bytes = MasterSheetGenerator().generate_master_sheet(data, options)
    except (MasterSheetOverflowError, TemplateValidationError) as e:
        raise HTTPException(status_code=422, detail=str(e))

    return pdf_attachment(pdf_bytes, f"master_sheet_{safe_filename(data.class_name)}.pdf")


@router.post("/demo")
async def generate_demo_master_sheet(request: MasterSheetDemoRequest):
    """Master sheet of the built-in demonstration class."""
    options = MasterSheetOptions(
        language=request.language,
        color_scheme=request.color_scheme,
    )
    pdf_bytes = MasterSheetGenerator().generate_master_sheet(
        MasterSheetGenerator.generate_demo_data(), options,
    )
    return pdf_attachment(pdf_bytes, f"master_sheet_demo_{request.language}.pdf")


@router.get("/templates")
async def list_templates():
    """Rendering options accepted by /generate."""
    return {
        "color_schemes": list(COLOR_SCHEMES),
        "formats": ["A4", "Letter"],
        "orientations": ["landscape", "portrait"],
        "languages": ["fr", "en"],
        "overflow_policies": ["truncate", "paginate", "error"],
        "grading_scales": [
            {
                "name": scale.name,
                "max_score": scale.max_score,
                "pass_mark": scale.pass_mark,
            }
            for scale in GRADING_SCALES.values()
        ],
        "default_overflow": settings.MASTER_SHEET_OVERFLOW,
    }
